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

"""Converts an NTFS feed into a GTFS feed.

usage: ntfs2gtfs.py -i <NTFS> -o <GTFS>
"""

import sys

import transitmodel
from transitmodel import util


def main():
    usage = """%prog -i <NTFS> -o <GTFS> [options]

Reads the NTFS feed <NTFS>, a directory or a zip archive, and writes it as the
GTFS feed <GTFS>. Objects GTFS can not represent, such as comments, are
dropped with a notice.
"""
    parser = util.OptionParserLongError(
        usage=usage, version="%prog " + transitmodel.__version__
    )
    parser.add_option(
        "-i", "--input", dest="input", metavar="PATH", help="NTFS feed to read"
    )
    parser.add_option(
        "-o", "--output", dest="output", metavar="PATH", help="GTFS feed to write"
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
    if args or not options.input or not options.output:
        parser.error("You must provide an input and an output feed.")
    util.ConfigureLogging(options.verbose)

    problems = transitmodel.ProblemReporter(
        transitmodel.CountingProblemAccumulator()
    )
    try:
        model = transitmodel.NtfsLoader(options.input, problems=problems).Load()
        transitmodel.GtfsWriter(problems=problems).Write(model, options.output)
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
