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

"""Machinery shared by the writers of every schema.

A FeedWriter first checks that a Model can be represented in its schema,
then writes it to a directory or, when the path ends with ".zip", to a zip
archive. Output only depends on the Model: collections are written in
insertion order, values are formatted the same way every time and zip
entries carry a fixed date, so writing the same Model twice gives the same
bytes.
"""

import io
import logging
import os
import zipfile

from . import calendar
from . import loader
from . import problems as problems_module
from . import util
from .errors import WriteError

log = logging.getLogger(__name__)

# Date of every zip entry, the earliest one the zip format can store
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)

# Formatting of the values parsed by the loader field parsers
_FORMATTERS = {
    loader.ParseTime: util.FormatSecondsSinceMidnight,
    loader.ParseDate: util.FormatDate,
    loader.ParseLatitude: util.FormatCoordinate,
    loader.ParseLongitude: util.FormatCoordinate,
}


def GetValue(obj, attribute):
    """Return an attribute of a Model object or a value of a dict, or None."""
    if isinstance(obj, dict):
        return obj.get(attribute)
    return getattr(obj, attribute, None)


def FormatField(field, value):
    """Return the CSV text of value for a loader.Field."""
    if value is None:
        return ""
    return _FORMATTERS.get(field.parse, util.FormatValue)(value)


class OutputContainer(object):
    """A directory or zip archive being written.

  Files of file_names left in a directory by an earlier write are removed,
  so that a later read does not mistake them for part of the new feed.

  Args:
    path: directory name, zip file name ending with ".zip", or a file-like
      object receiving a zip archive
    file_names: names of every file the schema knows about

  Raises:
    WriteError: the container can not be created
  """

    def __init__(self, path, file_names=()):
        self._path = path
        self._zip = None
        try:
            if not isinstance(path, str):
                self._zip = zipfile.ZipFile(path, "w")
            elif path.lower().endswith(".zip"):
                self._zip = zipfile.ZipFile(path, "w")
            else:
                os.makedirs(path, exist_ok=True)
                self._RemoveStaleFiles(file_names)
        except (IOError, OSError) as e:
            raise WriteError("can not create %s: %s" % (path, e))

    def _RemoveStaleFiles(self, file_names):
        for file_name in sorted(file_names):
            file_path = os.path.join(self._path, file_name)
            if os.path.isfile(file_path):
                log.debug("Removing %s of an earlier write", file_path)
                os.remove(file_path)


    def WriteString(self, file_name, text):
        data = text.encode("utf-8")
        if self._zip:
            zi = zipfile.ZipInfo(file_name, date_time=ZIP_DATE_TIME)
            zi.external_attr = 0o666 << 16  # Set unix permissions to -rw-rw-rw
            zi.compress_type = zipfile.ZIP_DEFLATED
            self._zip.writestr(zi, data)
            return
        file_path = os.path.join(self._path, file_name)
        try:
            with open(file_path, "wb") as output_file:
                output_file.write(data)
        except (IOError, OSError) as e:
            raise WriteError("can not write %s: %s" % (file_path, e))

    def Close(self):
        if self._zip:
            self._zip.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.Close()


class FeedWriter(object):
    """Base class of the writers.

  Subclasses set SCHEMA and FILE_NAMES, the files of the schema, and
  implement _WriteFiles; they override CheckConstraints when the schema can
  not represent every Model.

  Args:
    problems: a ProblemReporter receiving the constraint relaxations, the
      default reporter logs them
  """

    SCHEMA = None
    FILE_NAMES = ()

    def __init__(self, problems=None):
        if problems is None:
            problems = problems_module.default_problem_reporter
        self._problems = problems

    def CheckConstraints(self, model):
        """Raise ConstraintViolationError when model can not be written."""
        pass

    def Write(self, model, path):
        """Write model to path.

    Raises:
      ConstraintViolationError: model can not be represented in the schema
      WriteError: the output can not be written
    """
        self._problems.SetSchema(self.SCHEMA)
        self._problems.ClearContext()
        self.CheckConstraints(model)
        log.info("Writing %s feed %s", self.SCHEMA, path)
        with OutputContainer(path, self.FILE_NAMES) as output:
            self._WriteFiles(model, output)

    def _WriteFiles(self, model, output):
        raise NotImplementedError()

    def _WriteCsv(self, output, file_name, columns, rows):
        csv_string = io.StringIO()
        writer = util.CsvUnicodeWriter(csv_string)
        writer.writerow(columns)
        writer.writerows(rows)
        output.WriteString(file_name, csv_string.getvalue())
        log.debug("Wrote %s", file_name)

    def _WriteRecords(self, output, file_name, fields, objects):
        """Write one row per object or dict, one column per loader.Field."""
        rows = [
            [FormatField(f, GetValue(obj, f.attribute)) for f in fields]
            for obj in objects
        ]
        self._WriteCsv(output, file_name, [f.column for f in fields], rows)

    def _WriteCalendars(self, calendars, output):
        """Write calendar.txt, and calendar_dates.txt when it has rows.

    Each calendar with service is compressed into a weekly pattern and its
    exceptions by calendar.ComputeWeeklyPattern.
    """
        calendar_rows = []
        calendar_date_rows = []
        for service in calendars:
            if not service.dates:
                continue
            day_of_week, start_date, end_date, exceptions = (
                calendar.ComputeWeeklyPattern(service.dates)
            )
            row = {
                "service_id": service.id,
                "start_date": start_date,
                "end_date": end_date,
            }
            row.update(zip(calendar.DAYS_OF_WEEK, day_of_week))
            calendar_rows.append(row)
            for date, exception_type in exceptions:
                calendar_date_rows.append(
                    {
                        "service_id": service.id,
                        "date": date,
                        "exception_type": exception_type,
                    }
                )
        self._WriteRecords(
            output, "calendar.txt", loader.CALENDAR_FIELDS, calendar_rows
        )
        if calendar_date_rows:
            self._WriteRecords(
                output,
                "calendar_dates.txt",
                loader.CALENDAR_DATE_FIELDS,
                calendar_date_rows,
            )
