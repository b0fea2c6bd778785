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

"""Converts a NTFS feed into a NeTEx France export.

usage: ntfs2netexfr.py -i <NTFS> -o <NETEX> -p <PARTICIPANT>
"""

import sys

import transitmodel
from transitmodel import projection
from transitmodel import util


def main():
    usage = """%prog -i <NTFS> -o <NETEX> -p <PARTICIPANT> [options]

Reads the NTFS feed <NTFS>, a directory or a zip archive, and writes the
NeTEx France documents arrets.xml, lignes.xml, calendriers.xml and offre.xml
to <NETEX>. <PARTICIPANT> identifies the producer of the documents.
"""
    parser = util.OptionParserLongError(
        usage=usage, version="%prog " + transitmodel.__version__
    )
    parser.add_option(
        "-i", "--input", dest="input", metavar="PATH", help="NTFS feed to read"
    )
    parser.add_option(
        "-o",
        "--output",
        dest="output",
        metavar="PATH",
        help="Directory or zip archive to write",
    )
    parser.add_option(
        "-p",
        "--participant",
        dest="participant",
        help="Participant reference written in every document",
    )
    parser.add_option(
        "-f",
        "--frame",
        dest="frame",
        default=projection.LAMBERT_93,
        help="Coordinate reference system of the written positions, "
        "%default by default",
    )
    parser.add_option(
        "-x",
        "--current-datetime",
        dest="current_datetime",
        metavar="YYYY-MM-DDTHH:MM:SS",
        help="UTC date and time written as the PublicationTimestamp of every "
        "document, now when omitted",
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
        parser.error("You must provide an input and an output.")
    if not options.participant:
        parser.error("You must provide a participant reference.")
    publication_timestamp = util.ParseCurrentDatetime(
        parser, options.current_datetime
    )
    util.ConfigureLogging(options.verbose)

    problems = transitmodel.ProblemReporter(
        transitmodel.CountingProblemAccumulator()
    )
    try:
        model = transitmodel.NtfsLoader(options.input, problems=problems).Load()
        writer = transitmodel.NetexWriter(
            options.participant,
            problems=problems,
            publication_timestamp=publication_timestamp,
            frame=options.frame,
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
