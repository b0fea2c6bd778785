#!/usr/bin/python3

# Copyright (C) 2009 Google Inc.
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

import csv
import datetime
import inspect
import logging
import optparse
import re
import sys
import traceback

import pytz

from .errors import TYPE_WARNING


class OptionParserLongError(optparse.OptionParser):
    """OptionParser subclass that includes list of options above error message."""

    def error(self, msg):
        print(self.format_help(), file=sys.stderr)
        print(
            "\n\n%s: error: %s\n\n" % (self.get_prog_name(), msg),
            file=sys.stderr,
        )
        sys.exit(2)


def ParseCurrentDatetime(parser, value):
    """Return the datetime of a --current-datetime option, now when unset."""
    if value is None:
        return datetime.datetime.now()
    try:
        return datetime.datetime.strptime(value, "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        parser.error('"%s" is not a YYYY-MM-DDTHH:MM:SS date and time' % value)


def ConfigureLogging(verbose=False):
    """Send log records of the command line tools to stderr."""
    logging.basicConfig(
        level=verbose and logging.DEBUG or logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def RunWithCrashHandler(f):
    try:
        exit_code = f()
        sys.exit(exit_code)
    except (SystemExit, KeyboardInterrupt):
        raise
    except Exception:
        # Save trace and exception now. These calls look at the most recently
        # raised exception. The code that makes the report might trigger other
        # exceptions.
        original_trace = inspect.trace(3)[1:]
        formatted_exception = traceback.format_exception_only(
            *(sys.exc_info()[:2])
        )

        apology = """Yikes, the program threw an unexpected exception!

Hopefully a complete report has been saved to transitmodelcrash.txt,
though if you are seeing this message we've already disappointed you once
today. Please include the report in a new issue. Sorry!

"""
        dashes = "%s\n" % ("-" * 60)
        dump = []
        dump.append(apology)
        dump.append(dashes)
        from transitmodel.version import __version__

        dump.append("transitmodel version %s\n\n" % __version__)

        for (
            frame_obj,
            filename,
            line_num,
            fun_name,
            context_lines,
            context_index,
        ) in original_trace:
            dump.append(
                'File "%s", line %d, in %s\n' % (filename, line_num, fun_name)
            )
            if context_lines:
                for (i, line) in enumerate(context_lines):
                    if i == context_index:
                        dump.append(" --> %s" % line)
                    else:
                        dump.append("     %s" % line)
            for local_name, local_val in frame_obj.f_locals.items():
                try:
                    truncated_val = str(local_val)[0:500]
                except Exception as e:
                    dump.append("    Exception in str(%s): %s" % (local_name, e))
                else:
                    if len(truncated_val) >= 500:
                        truncated_val = "%s..." % truncated_val[0:499]
                    dump.append("    %s = %s\n" % (local_name, truncated_val))
            dump.append("\n")

        dump.append("".join(formatted_exception))

        with open("transitmodelcrash.txt", "w") as crash_file:
            crash_file.write("".join(dump))

        print("".join(dump))
        print()
        print(dashes)
        print(apology)
        sys.exit(127)


def IsEmpty(value):
    return value is None or (isinstance(value, str) and not value.strip())


def IsValidColor(color):
    """Checks the validity of a hex color value:
    - the color string must consist of 6 hexadecimal digits
    """
    return not re.match("^[0-9a-fA-F]{6}$", color) is None


def TimeToSecondsSinceMidnight(time_string):
    """Convert HHH:MM:SS into seconds since midnight.

  For example "01:02:03" returns 3723. The leading zero of the hours may be
  omitted. HH may be more than 23 if the time is on the following day."""
    m = re.match(r"(\d{1,3}):([0-5]\d):([0-5]\d)$", time_string)
    # ignored: matching for leap seconds
    if not m:
        raise ValueError('Bad HH:MM:SS "%s"' % time_string)
    return int(m.group(1)) * 3600 + int(m.group(2)) * 60 + int(m.group(3))


def FormatSecondsSinceMidnight(s):
    """Formats an int number of seconds past midnight into a string
  as "HH:MM:SS"."""
    return "%02d:%02d:%02d" % (s // 3600, (s // 60) % 60, s % 60)


def DateStringToDateObject(date_string):
    """Return a date object for a string "YYYYMMDD"."""
    if not re.match(r"^\d{8}$", date_string):
        raise ValueError('Bad YYYYMMDD "%s"' % date_string)
    # datetime.date raises ValueError for a day that does not exist
    return datetime.date(
        int(date_string[0:4]), int(date_string[4:6]), int(date_string[6:8])
    )


def FormatDate(date):
    return date.strftime("%Y%m%d")


def FloatStringToFloat(float_string):
    """Convert a float as a string to a float or raise an exception"""
    if not re.match(r"^[+-]?\d+(\.\d+)?$", float_string):
        raise ValueError('Bad decimal number "%s"' % float_string)
    return float(float_string)


def NonNegIntStringToInt(int_string):
    """Convert an non-negative integer string to an int or raise an exception"""
    if not re.match(r"^\d+$", int_string):
        raise ValueError('Bad non-negative integer "%s"' % int_string)
    return int(int_string)


def FormatCoordinate(value):
    """Coordinates are always written with six decimals, about 10cm."""
    return "%.6f" % value


def FormatValue(value):
    """Return the csv representation of an attribute value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return value and "1" or "0"
    if isinstance(value, datetime.date):
        return FormatDate(value)
    return "%s" % value


def IsValidTimezone(timezone):
    return timezone in pytz.all_timezones_set


# Alpha codes of the currencies of ISO 4217, current and recently withdrawn
ISO4217_CODES = frozenset(
    """
    AED AFN ALL AMD ANG AOA ARS AUD AWG AZN BAM BBD BDT BGN BHD BIF BMD BND
    BOB BOV BRL BSD BTN BWP BYN BYR BZD CAD CDF CHE CHF CHW CLF CLP CNY COP
    COU CRC CUC CUP CVE CZK DJF DKK DOP DZD EGP ERN ETB EUR FJD FKP GBP GEL
    GHS GIP GMD GNF GTQ GYD HKD HNL HRK HTG HUF IDR ILS INR IQD IRR ISK JMD
    JOD JPY KES KGS KHR KMF KPW KRW KWD KYD KZT LAK LBP LKR LRD LSL LTL LVL
    LYD MAD MDL MGA MKD MMK MNT MOP MRO MRU MUR MVR MWK MXN MXV MYR MZN NAD
    NGN NIO NOK NPR NZD OMR PAB PEN PGK PHP PKR PLN PYG QAR RON RSD RUB RWF
    SAR SBD SCR SDG SEK SGD SHP SLE SLL SOS SRD SSP STD STN SVC SYP SZL THB
    TJS TMT TND TOP TRY TTD TWD TZS UAH UGX USD USN UYI UYU UYW UZS VED VES
    VND VUV WST XAF XAG XAU XBA XBB XBC XBD XCD XDR XOF XPD XPF XPT XSU XTS
    XUA XXX YER ZAR ZMW ZWL
    """.split()
)


def IsValidCurrency(code):
    return code in ISO4217_CODES


def ValidateTimezone(timezone, column_name=None, problems=None):
    """Report an invalid time zone name and return True when it is invalid."""
    if IsEmpty(timezone) or IsValidTimezone(timezone):
        return False
    if problems:
        problems.InvalidValue(
            column_name,
            timezone,
            '"%s" is not a time zone name from the IANA database; it is ignored'
            % timezone,
            type=TYPE_WARNING,
        )
    return True


def UtcTimestamp(moment):
    """Format a datetime as an ISO 8601 UTC timestamp.

  Naive datetimes are taken to be in UTC already."""
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    return moment.astimezone(pytz.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class CsvUnicodeWriter:
    """
  Create a wrapper around a csv writer object which writes attribute values
  the way readers expect them. Passes all arguments to csv.writer.
  """

    def __init__(self, *args, **kwargs):
        self.writer = csv.writer(*args, **kwargs)

    def writerow(self, row):
        self.writer.writerow([FormatValue(s) for s in row])

    def writerows(self, rows):
        for row in rows:
            self.writerow(row)

    def __getattr__(self, name):
        return getattr(self.writer, name)


# Map from literal string that should never be found in the csv data to a human
# readable description
INVALID_LINE_SEPARATOR = {
    "\x0c": "ASCII Form Feed 0x0C",
    # May be part of end of line, but not found elsewhere
    "\x0d": "ASCII Carriage Return 0x0D, \\r",
    "\u2028": "Unicode LINE SEPARATOR U+2028",
    "\u2029": "Unicode PARAGRAPH SEPARATOR U+2029",
    "\x85": "Unicode NEXT LINE SEPARATOR U+0085",
}


class EndOfLineChecker:
    """Wrapper for a file-like object that checks for consistent line ends.

  The check for consistent end of lines (all CR LF or all LF) only happens if
  next() is called until it raises StopIteration. The wrapped object must
  split lines on LF only, like io.StringIO(text, newline="\\n").
  """

    def __init__(self, f, name, problems):
        """Create new object.

    Args:
      f: file-like object to wrap
      name: name to use for f. StringIO objects don't have a name attribute.
      problems: a ProblemReporter object
    """
        self._f = f
        self._name = name
        self._crlf = 0
        self._crlf_examples = []
        self._lf = 0
        self._lf_examples = []
        self._line_number = 0  # first line will be number 1
        self._problems = problems

    def __iter__(self):
        return self

    def __next__(self):
        """Return next line without end of line marker or raise StopIteration."""
        try:
            next_line = next(self._f)
        except StopIteration:
            self._FinalCheck()
            raise

        self._line_number += 1
        m_eol = re.search(r"[\x0a\x0d]*$", next_line)
        if m_eol.group() == "\x0d\x0a":
            self._crlf += 1
            if self._crlf <= 5:
                self._crlf_examples.append(self._line_number)
        elif m_eol.group() == "\x0a":
            self._lf += 1
            if self._lf <= 5:
                self._lf_examples.append(self._line_number)
        elif m_eol.group() == "":
            # Only happens at the end of the file
            pass
        else:
            self._problems.InvalidLineEnd(
                m_eol.group().encode("unicode_escape").decode("ascii"),
                (self._name, self._line_number),
            )
        next_line_contents = next_line[0 : m_eol.start()]
        for seq, name in sorted(INVALID_LINE_SEPARATOR.items()):
            if next_line_contents.find(seq) != -1:
                self._problems.OtherProblem(
                    "Line contains %s" % name,
                    context=(self._name, self._line_number),
                )
        return next_line_contents

    def _FinalCheck(self):
        if self._crlf > 0 and self._lf > 0:
            crlf_plural = self._crlf > 1 and "s" or ""
            crlf_lines = ", ".join(["%s" % e for e in self._crlf_examples])
            if self._crlf > len(self._crlf_examples):
                crlf_lines += ", ..."
            lf_plural = self._lf > 1 and "s" or ""
            lf_lines = ", ".join(["%s" % e for e in self._lf_examples])
            if self._lf > len(self._lf_examples):
                lf_lines += ", ..."

            self._problems.OtherProblem(
                'Found %d CR LF "\\r\\n" line end%s (line%s %s) and '
                '%d LF "\\n" line end%s (line%s %s). A file must use a '
                "consistent line end."
                % (
                    self._crlf,
                    crlf_plural,
                    crlf_plural,
                    crlf_lines,
                    self._lf,
                    lf_plural,
                    lf_plural,
                    lf_lines,
                ),
                (self._name,),
                type=TYPE_WARNING,
            )
            # Prevent _FinalCheck() from reporting the problem twice, in the unlikely
            # case that it is run twice
            self._crlf = 0
            self._lf = 0


