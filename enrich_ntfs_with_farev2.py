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

"""Replaces the fares of an NTFS feed by the ones of a fares archive.

usage: enrich_ntfs_with_farev2.py -i <NTFS> --fares <FARES> -o <NTFS>
"""

import sys

import transitmodel
from transitmodel import util


def main():
    usage = """%prog -i <NTFS> --fares <FARES> -o <NTFS> [options]

Reads the NTFS feed <NTFS> and the fare files of <FARES>, a directory or a zip
archive holding tickets.txt, ticket_uses.txt, ticket_prices.txt,
ticket_use_perimeters.txt and optionally ticket_use_restrictions.txt, and
writes the feed with these fares. Perimeters and restrictions naming objects
the feed does not have are reported and left out.
"""
    parser = util.OptionParserLongError(
        usage=usage, version="%prog " + transitmodel.__version__
    )
    parser.add_option(
        "-i", "--input", dest="input", metavar="PATH", help="NTFS feed to read"
    )
    parser.add_option(
        "-f",
        "--fares",
        dest="fares",
        metavar="PATH",
        help="Directory or zip archive of the fare files",
    )
    parser.add_option(
        "-o", "--output", dest="output", metavar="PATH", help="NTFS feed to write"
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
    if args or not options.input or not options.fares or not options.output:
        parser.error("You must provide an input feed, fares and an output feed.")
    current_datetime = util.ParseCurrentDatetime(
        parser, options.current_datetime
    )
    util.ConfigureLogging(options.verbose)

    problems = transitmodel.ProblemReporter(
        transitmodel.CountingProblemAccumulator()
    )
    try:
        model = transitmodel.NtfsLoader(options.input, problems=problems).Load()
        model = transitmodel.EnrichWithFares(
            model, options.fares, problems=problems
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
