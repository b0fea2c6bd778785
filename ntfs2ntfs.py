#!/usr/bin/python3

# Copyright (C) 2007 Google Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Reads one or more NTFS feeds, checks them and writes them as one feed.

usage: ntfs2ntfs.py -i <NTFS> [-i <NTFS> ...] -o <NTFS>

Identifiers must be unique across the inputs; use --prefix to tell feeds from
the same producer apart.
"""

import sys

import transitmodel
from transitmodel import util


def main():
    usage = """%prog -i <NTFS> [-i <NTFS> ...] -o <NTFS> [options]

Reads every NTFS feed given with --input, merges them and writes the result
to <NTFS>. The feeds are merged in the order of the command line; feed infos
of the first feed win. Object rules, when given, are applied to the merged
feed.
"""
    parser = util.OptionParserLongError(
        usage=usage, version="%prog " + transitmodel.__version__
    )
    parser.add_option(
        "-i",
        "--input",
        dest="inputs",
        action="append",
        default=[],
        metavar="PATH",
        help="NTFS feed to read, may be repeated",
    )
    parser.add_option(
        "-o", "--output", dest="output", metavar="PATH", help="NTFS feed to write"
    )
    parser.add_option(
        "-p",
        "--prefix",
        dest="prefix",
        help="Prefix added to every identifier of the inputs",
    )
    parser.add_option(
        "--object-rules",
        dest="object_rules",
        metavar="FILE",
        help="JSON file of networks, commercial modes and physical modes to "
        "regroup after the merge",
    )
    parser.add_option(
        "-x",
        "--current-datetime",
        dest="current_datetime",
        metavar="YYYY-MM-DDTHH:MM:SS",
        help="Date and time of the feed creation written in feed_infos.txt, "
        "now when omitted",
    )
    parser.add_option(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        default=False,
        help="Log every progress message",
    )
    (options, args) = parser.parse_args()
    if args or not options.inputs or not options.output:
        parser.error("You must provide at least one input and an output feed.")
    current_datetime = util.ParseCurrentDatetime(
        parser, options.current_datetime
    )
    util.ConfigureLogging(options.verbose)

    problems = transitmodel.ProblemReporter(
        transitmodel.CountingProblemAccumulator()
    )
    try:
        model = None
        for path in options.inputs:
            loaded = transitmodel.NtfsLoader(
                path, problems=problems, prefix=options.prefix
            ).Load()
            if model is None:
                model = loaded
            else:
                model = model.Merge(loaded)
        if options.object_rules:
            model = transitmodel.ApplyObjectRules(
                model, options.object_rules, problems=problems
            )
        writer = transitmodel.NtfsWriter(
            problems=problems, current_datetime=current_datetime
        )
        writer.Write(model, options.output)
    except transitmodel.Error as e:
        print("%s: %s" % (parser.get_prog_name(), e), file=sys.stderr)
        return 1
    print(
        "%s: %s"
        % (parser.get_prog_name(), problems.GetAccumulator().FormatCount())
    )
    return 0


if __name__ == "__main__":
    util.RunWithCrashHandler(main)
