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

"""Restricts an NTFS feed to a validity period.

usage: restrict_validity_period.py -i <NTFS> -o <NTFS> -s <START> -e <END>
         --orphans=remove|keep
"""

import datetime
import sys

import transitmodel
from transitmodel import util


def ParseDate(parser, option_name, value):
    if value is None:
        parser.error("You must provide the %s date of the period." % option_name)
    try:
        return datetime.datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        parser.error('"%s" is not a YYYY-MM-DD date' % value)


def main():
    usage = """%prog -i <NTFS> -o <NTFS> -s <START> -e <END> --orphans=POLICY

Keeps the service of the NTFS feed between <START> and <END>, both included
and written YYYY-MM-DD. Vehicle journeys without service in the period are
removed. With --orphans=remove, the routes, lines, stop points and stop
areas left without vehicle journey are removed too; with --orphans=keep they
are kept.
"""
    parser = util.OptionParserLongError(
        usage=usage, version="%prog " + transitmodel.__version__
    )
    parser.add_option(
        "-i", "--input", dest="input", metavar="PATH", help="NTFS feed to read"
    )
    parser.add_option(
        "-o", "--output", dest="output", metavar="PATH", help="NTFS feed to write"
    )
    parser.add_option(
        "-s", "--start", dest="start", metavar="YYYY-MM-DD", help="First day"
    )
    parser.add_option(
        "-e", "--end", dest="end", metavar="YYYY-MM-DD", help="Last day"
    )
    parser.add_option(
        "--orphans",
        dest="orphans",
        type="choice",
        choices=transitmodel.restrict.ORPHAN_POLICIES,
        help="What to do with objects left without vehicle journey: "
        "remove or keep",
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
    if options.orphans is None:
        parser.error("You must choose an orphan policy with --orphans.")
    start_date = ParseDate(parser, "start", options.start)
    end_date = ParseDate(parser, "end", options.end)
    current_datetime = util.ParseCurrentDatetime(
        parser, options.current_datetime
    )
    util.ConfigureLogging(options.verbose)

    problems = transitmodel.ProblemReporter(
        transitmodel.CountingProblemAccumulator()
    )
    try:
        model = transitmodel.NtfsLoader(options.input, problems=problems).Load()
        model = transitmodel.RestrictValidityPeriod(
            model, start_date, end_date, options.orphans, problems=problems
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
