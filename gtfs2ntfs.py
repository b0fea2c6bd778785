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

"""Converts a GTFS feed into an NTFS feed.

usage: gtfs2ntfs.py -i <GTFS> -o <NTFS> [options]

The contributor and dataset of the NTFS feed are taken from the configuration
file given with --config, or get default values.
"""

import sys

import transitmodel
from transitmodel import util


def main():
    usage = """%prog -i <GTFS> -o <NTFS> [options]

Reads the GTFS feed <GTFS>, a directory or a zip archive, and writes it as the
NTFS feed <NTFS>. <NTFS> is written as a zip archive when it ends with .zip
and as a directory otherwise.
"""
    parser = util.OptionParserLongError(
        usage=usage, version="%prog " + transitmodel.__version__
    )
    parser.add_option(
        "-i", "--input", dest="input", metavar="PATH", help="GTFS feed to read"
    )
    parser.add_option(
        "-o", "--output", dest="output", metavar="PATH", help="NTFS feed to write"
    )
    parser.add_option(
        "-c",
        "--config",
        dest="config",
        metavar="FILE",
        help="JSON file describing the contributor, the dataset and extra "
        "feed infos",
    )
    parser.add_option(
        "-p",
        "--prefix",
        dest="prefix",
        help="Prefix added to every identifier, followed by a colon",
    )
    parser.add_option(
        "--odt-comment",
        dest="odt_comment",
        metavar="TEMPLATE",
        help="Comment attached to the trips that must be booked by phone; "
        "{agency_name} and {agency_phone} are replaced by the ones of the "
        "agency",
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
    if args or not options.input or not options.output:
        parser.error("You must provide an input and an output feed.")
    current_datetime = util.ParseCurrentDatetime(
        parser, options.current_datetime
    )
    util.ConfigureLogging(options.verbose)

    problems = transitmodel.ProblemReporter(
        transitmodel.CountingProblemAccumulator()
    )
    try:
        config = transitmodel.ReadConfig(options.config)
        loader = transitmodel.GtfsLoader(
            options.input,
            problems=problems,
            config=config,
            prefix=options.prefix,
            odt_comment_template=options.odt_comment,
        )
        model = loader.Load()
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
