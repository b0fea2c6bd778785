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

"""Machinery shared by the readers of every schema.

A reader opens a container (a directory or a zip archive), parses each file
row by row into objects, resolves the references between them and hands the
result to Model(). Rows that can not be used are skipped and reported to the
ProblemReporter; only a missing required file, an unreadable container or a
duplicate identifier stop the read.
"""

import codecs
from collections import defaultdict
import csv
import decimal
import io
import logging
import os
import re
import zipfile

from . import problems as problems_module
from . import util
from .calendar import (
    Calendar,
    DAYS_OF_WEEK,
    EXCEPTION_TYPE_ADD,
    EXCEPTION_TYPE_REMOVE,
)
from .errors import ContainerError, DuplicateIdError, MissingRequiredFileError
from .model import ALL_COLLECTION_NAMES, Collections, Model

log = logging.getLogger(__name__)


class Skip(object):
    """Why a record was not turned into an object.

  Row parsers return a Skip instead of raising, so that every bad record of a
  file is reported and reading goes on with the next one.
  """

    MISSING = "missing"
    INVALID = "invalid"
    OTHER = "other"

    def __init__(self, kind, column_name=None, value=None, reason=None):
        self.kind = kind
        self.column_name = column_name
        self.value = value
        self.reason = reason

    def Report(self, problems):
        if self.kind == Skip.MISSING:
            problems.MissingValue(self.column_name, self.reason)
        elif self.kind == Skip.INVALID:
            problems.InvalidValue(self.column_name, self.value, self.reason)
        else:
            problems.OtherProblem(self.reason)

    def __repr__(self):
        return "<Skip %s %s %r>" % (self.kind, self.column_name, self.value)


def IsSkip(result):
    return isinstance(result, Skip)


def ParseString(value):
    return value


def ParseTime(value):
    return util.TimeToSecondsSinceMidnight(value)


def ParseDate(value):
    return util.DateStringToDateObject(value)


def ParseInt(value):
    return util.NonNegIntStringToInt(value)


def ParseSignedInt(value):
    if not re.match(r"^[+-]?\d+$", value):
        raise ValueError('Bad integer "%s"' % value)
    return int(value)


def ParseFloat(value):
    return util.FloatStringToFloat(value)


def ParseLatitude(value):
    lat = util.FloatStringToFloat(value)
    if not -90.0 <= lat <= 90.0:
        raise ValueError("latitude %s is out of range" % value)
    return lat


def ParseLongitude(value):
    lon = util.FloatStringToFloat(value)
    if not -180.0 <= lon <= 180.0:
        raise ValueError("longitude %s is out of range" % value)
    return lon


def ParseColor(value):
    if not util.IsValidColor(value):
        raise ValueError("%s is not a color of 6 hexadecimal digits" % value)
    return value.upper()


def MakeEnumParser(*allowed):
    """Return a parser accepting the int values listed in allowed."""

    def ParseEnum(value):
        result = util.NonNegIntStringToInt(value)
        if result not in allowed:
            raise ValueError(
                "%s is not one of %s" % (value, ", ".join(map(str, allowed)))
            )
        return result

    return ParseEnum


def MakeChoiceParser(*allowed):
    """Return a parser accepting the strings listed in allowed."""

    def ParseChoice(value):
        if value not in allowed:
            raise ValueError("%s is not one of %s" % (value, ", ".join(allowed)))
        return value

    return ParseChoice


def ParseDecimal(value):
    util.FloatStringToFloat(value)
    return decimal.Decimal(value)


def ParseCurrency(value):
    if not util.IsValidCurrency(value):
        raise ValueError("%s is not an ISO 4217 currency code" % value)
    return value


class Field(object):
    """Describes how one column becomes one attribute.

  Args:
    column: column name in the file
    attribute: attribute name of the object, the column name by default
    parse: function converting a non empty string, raising ValueError
    required: a record without a value for the column is skipped
    default: attribute value when the column is empty
  """

    def __init__(
        self, column, attribute=None, parse=ParseString, required=False,
        default=None
    ):
        self.column = column
        self.attribute = attribute or column
        self.parse = parse
        self.required = required
        self.default = default


def ParseRecord(d, fields):
    """Convert a row dict into a dict of attributes, or a Skip."""
    values = {}
    for field in fields:
        raw = d.get(field.column) or ""
        if raw == "":
            if field.required:
                return Skip(Skip.MISSING, field.column)
            values[field.attribute] = field.default
            continue
        try:
            values[field.attribute] = field.parse(raw)
        except ValueError as e:
            return Skip(Skip.INVALID, field.column, raw, str(e))
    return values


CALENDAR_FIELDS = (
    [Field("service_id", required=True)]
    + [
        Field(day, parse=MakeEnumParser(0, 1), required=True)
        for day in DAYS_OF_WEEK
    ]
    + [
        Field("start_date", parse=ParseDate, required=True),
        Field("end_date", parse=ParseDate, required=True),
    ]
)

CALENDAR_DATE_FIELDS = [
    Field("service_id", required=True),
    Field("date", parse=ParseDate, required=True),
    Field(
        "exception_type",
        parse=MakeEnumParser(EXCEPTION_TYPE_ADD, EXCEPTION_TYPE_REMOVE),
        required=True,
    ),
]


def _IsHidden(name):
    return any(
        part.startswith(".") or part == "__MACOSX"
        for part in name.split("/")
        if part
    )


class Container(object):
    """A directory or a zip archive holding the files of a feed.

  Zip archives whose files are all inside one directory are read as if the
  files were at the root. Hidden files are ignored.

  Args:
    path: directory or zip file name, or a file-like object holding a zip
    zip: an open zipfile.ZipFile, used instead of path
  """

    def __init__(self, path=None, zip=None):
        self._path = path
        self._zip = zip
        self._prefix = ""
        self._Open()

    def _Open(self):
        if self._zip:
            # If zip was passed to __init__ then path isn't used
            assert not self._path
        elif not isinstance(self._path, str) and hasattr(self._path, "read"):
            # A file-like object, used for testing with a BytesIO file
            self._zip = self._OpenZip(self._path, "<file object>")
        elif not os.path.exists(self._path):
            raise ContainerError(self._path, "no such file or directory")
        elif os.path.isdir(self._path):
            return
        else:
            self._zip = self._OpenZip(self._path, self._path)

        names = [n for n in self._zip.namelist() if not n.endswith("/")]
        names = [n for n in names if not _IsHidden(n)]
        top_levels = set(n.split("/", 1)[0] for n in names)
        if names and all("/" in n for n in names) and len(top_levels) == 1:
            self._prefix = top_levels.pop() + "/"

    @staticmethod
    def _OpenZip(path, name):
        try:
            return zipfile.ZipFile(path, mode="r")
        except (zipfile.BadZipfile, IOError) as e:
            raise ContainerError(name, "not a directory or a zip file (%s)" % e)

    def GetName(self):
        if isinstance(self._path, str):
            return self._path
        return "<zip>"

    def GetFileNames(self):
        """Returns a list of file names in the feed."""
        if self._zip:
            names = []
            for name in self._zip.namelist():
                if not name.startswith(self._prefix) or name.endswith("/"):
                    continue
                name = name[len(self._prefix) :]
                if not _IsHidden(name) and "/" not in name:
                    names.append(name)
            return names
        return [
            n
            for n in os.listdir(self._path)
            if not _IsHidden(n) and os.path.isfile(os.path.join(self._path, n))
        ]

    def HasFile(self, file_name):
        """Returns True if there's a file in the current feed with the
           given file_name in the current feed."""
        if self._zip:
            return self._prefix + file_name in self._zip.namelist()
        else:
            file_path = os.path.join(self._path, file_name)
            return os.path.exists(file_path) and os.path.isfile(file_path)

    def Read(self, file_name):
        """Return the contents of file_name as bytes, or None if missing."""
        if self._zip:
            try:
                return self._zip.read(self._prefix + file_name)
            except KeyError:  # file not found in archive
                return None
        try:
            with open(os.path.join(self._path, file_name), "rb") as data_file:
                return data_file.read()
        except IOError:  # file not found
            return None


class Loader(object):
    """Base class of the readers.

  Subclasses set SCHEMA, describe their files in _FILE_MAPPING as
  {file name: {"required": bool}} and implement _LoadCollections.

  Args:
    feed_path: string path to a zip file or directory
    problems: a ProblemReporter object, the default reporter logs each problem
    zip: a zipfile.ZipFile object, optionally used instead of path
    prefix: when set, every identifier is prefixed with "prefix:"
  """

    SCHEMA = None
    _FILE_MAPPING = {}
    # Groups of optional files of which at least one must be present
    _REQUIRED_ONE_OF = []

    def __init__(self, feed_path=None, problems=None, zip=None, prefix=None):
        if problems is None:
            problems = problems_module.default_problem_reporter
        self._path = feed_path
        self._zip = zip
        self._problems = problems
        self._prefix = prefix
        self._container = None

    def Load(self):
        """Read the container and return a Model.

    Raises:
      ContainerError: the container can not be opened or a required file is
        missing
      DuplicateIdError: an identifier is used twice in a file
      ReferentialIntegrityError: the read objects are not consistent
    """
        self._Open()
        collections = Collections()
        self._LoadCollections(collections)
        self._problems.ClearContext()
        self._DropCalendarsWithoutService(collections)
        self._ResolveReferences(collections)
        self._Finalize(collections)
        if self._prefix:
            collections.AddPrefix(self._prefix)
        model = Model(collections)
        for name, count in model.GetStats().items():
            log.debug("%s: %d", name, count)
        return model

    def _Open(self):
        """Open the container and check its file names."""
        self._problems.SetSchema(self.SCHEMA)
        self._container = Container(self._path, self._zip)
        log.info("Reading %s feed %s", self.SCHEMA, self._container.GetName())
        self._CheckRequiredFiles()
        self._CheckFileNames()

    def _LoadCollections(self, collections):
        raise NotImplementedError()

    def _Finalize(self, collections):
        """Hook run after reference resolution, before the Model is built."""
        pass

    def _IsFileRequired(self, file_name):
        return self._FILE_MAPPING.get(file_name, {}).get("required", False)

    def _CheckRequiredFiles(self):
        for file_name in sorted(self._FILE_MAPPING):
            if self._IsFileRequired(file_name) and not self._HasFile(
                file_name
            ):
                raise MissingRequiredFileError(self.SCHEMA, file_name)
        for file_names in self._REQUIRED_ONE_OF:
            if not any(self._HasFile(f) for f in file_names):
                raise MissingRequiredFileError(
                    self.SCHEMA, " or ".join(file_names)
                )

    def _CheckFileNames(self):
        for feed_file in sorted(self._container.GetFileNames()):
            if feed_file not in self._FILE_MAPPING:
                self._problems.UnknownFile(feed_file)

    def _HasFile(self, file_name):
        return self._container.HasFile(file_name)

    def _FileContents(self, file_name):
        results = self._container.Read(file_name)
        if results is None:
            # Optional files may be absent
            if self._IsFileRequired(file_name):
                self._problems.MissingFile(file_name)
            return None
        if not results:
            self._problems.EmptyFile(file_name)
        return results

    def _GetUtf8Contents(self, file_name):
        """Check for errors in file_name and return a string for csv reader."""
        contents = self._FileContents(file_name)
        if not contents:  # Missing file
            return

        # Check for errors that will prevent csv.reader from working
        if len(contents) >= 2 and contents[0:2] in (
            codecs.BOM_UTF16_BE,
            codecs.BOM_UTF16_LE,
        ):
            self._problems.FileFormat(
                "appears to be encoded in utf-16", (file_name,)
            )
            # Convert and continue, so we can find more errors
            contents = codecs.getdecoder("utf-16")(contents)[0].encode("utf-8")

        null_index = contents.find(b"\0")
        if null_index != -1:
            # It is easier to get some surrounding text than calculate the exact
            # row_num
            m = re.search(b".{,20}\0.{,20}", contents, re.DOTALL)
            self._problems.FileFormat(
                'contains a null in text "%s" at byte %d'
                % (m.group(), null_index + 1),
                (file_name,),
            )
            return

        # strip out any UTF-8 Byte Order Marker (otherwise it'll be
        # treated as part of the first column name, causing a mis-parse)
        if contents.startswith(codecs.BOM_UTF8):
            contents = contents[len(codecs.BOM_UTF8) :]
        return contents.decode("utf-8", "replace")

    def _ReadCsvDict(self, file_name, cols, required):
        """Reads lines from file_name, yielding a dict of unicode values.

    Rows whose number of cells differs from the header are reported and
    skipped.
    """
        assert file_name.endswith(".txt")
        contents = self._GetUtf8Contents(file_name)
        if not contents:
            return
        log.info("Reading %s", file_name)

        eol_checker = util.EndOfLineChecker(
            io.StringIO(contents, newline="\n"), file_name, self._problems
        )
        reader = csv.reader(eol_checker, skipinitialspace=True)

        raw_header = next(reader, None)
        if raw_header is None:
            return
        header_occurrences = defaultdict(lambda: 0)
        header = []
        valid_columns = []  # Index into raw_header and raw_row
        for i, h in enumerate(raw_header):
            h_stripped = h.strip()
            if not h_stripped:
                self._problems.CsvSyntax(
                    description="The header row should not contain any blank values. "
                    "The corresponding column will be skipped for the "
                    "entire file.",
                    context=(file_name, 1, [""] * len(raw_header), raw_header),
                    type=problems_module.TYPE_ERROR,
                )
                continue
            elif h != h_stripped:
                self._problems.CsvSyntax(
                    description="The header row should not contain any "
                    "space characters.",
                    context=(file_name, 1, [""] * len(raw_header), raw_header),
                    type=problems_module.TYPE_WARNING,
                )
            header.append(h_stripped)
            valid_columns.append(i)
            header_occurrences[h_stripped] += 1

        for name, count in list(header_occurrences.items()):
            if count > 1:
                self._problems.DuplicateColumn(
                    header=name, file_name=file_name, count=count
                )

        # check for unrecognized columns, which are often misspellings
        header_context = (file_name, 1, [""] * len(header), header)
        unknown_cols = set(header) - set(cols)
        if header and len(unknown_cols) == len(header):
            self._problems.CsvSyntax(
                description="The header row did not contain any known column "
                "names. The file is most likely missing the header row "
                "or not in the expected CSV format.",
                context=(file_name, 1, [""] * len(raw_header), raw_header),
                type=problems_module.TYPE_ERROR,
            )
        else:
            for col in sorted(unknown_cols):
                self._problems.UnrecognizedColumn(
                    file_name, col, header_context
                )

        # check for missing required columns
        missing_cols = set(required) - set(header)
        for col in sorted(missing_cols):
            self._problems.MissingColumn(file_name, col, header_context)

        line_num = 1  # First line read by next(reader) above
        for raw_row in reader:
            line_num += 1
            if len(raw_row) == 0:  # skip extra empty lines in file
                continue

            if len(raw_row) != len(raw_header):
                self._problems.OtherProblem(
                    "Found %d cells (commas) in line %d of file %s instead "
                    "of %d. Every row in the file should have the same number "
                    "of cells as the header (first line) does; the row is "
                    "skipped."
                    % (len(raw_row), line_num, file_name, len(raw_header)),
                    (file_name, line_num, raw_row, raw_header),
                )
                continue

            valid_values = [raw_row[i] for i in valid_columns]
            unicode_error = False
            for i, value in enumerate(valid_values):
                if "�" in value:
                    self._problems.InvalidValue(
                        header[i],
                        value,
                        "Unicode error",
                        (file_name, line_num, valid_values, header),
                    )
                    unicode_error = True
            if unicode_error:
                continue

            # We strip ALL whitespace from around values.
            valid_values = [value.strip() for value in valid_values]

            d = dict(list(zip(header, valid_values)))
            yield (d, line_num, header, valid_values)

    def _ReadRecords(self, file_name, fields, ignored_columns=()):
        """Yield (attribute dict, context) for each usable row of file_name.

    The problem context is set to the row while the caller handles it.
    ignored_columns are known to the schema but not used.
    """
        cols = [f.column for f in fields] + list(ignored_columns)
        required = [f.column for f in fields if f.required]
        for (d, row_num, header, row) in self._ReadCsvDict(
            file_name, cols, required
        ):
            context = (file_name, row_num, row, header)
            self._problems.SetFileContext(*context)
            values = ParseRecord(d, fields)
            if IsSkip(values):
                values.Report(self._problems)
                continue
            yield values, context
        self._problems.ClearContext()

    def _ReadObjects(self, file_name, fields, object_class):
        """Yield an object_class instance for each usable row of file_name."""
        for values, context in self._ReadRecords(file_name, fields):
            obj = object_class(field_dict=values)
            obj.SetContext(context)
            yield obj

    def _Push(self, collection, obj):
        """Add obj to collection.

    Raises:
      DuplicateIdError: carrying the file and row of obj
    """
        try:
            return collection.Push(obj)
        except DuplicateIdError:
            context = obj.GetContext() or (None, None)
            raise DuplicateIdError(
                collection.name, obj.id, context[0], context[1]
            )

    def _LoadCalendarFiles(self, collections):
        """Read calendar.txt and calendar_dates.txt, shared by the CSV schemas.

    A calendar_dates.txt row for an unknown service_id creates the calendar.
    """
        for values, context in self._ReadRecords("calendar.txt", CALENDAR_FIELDS):
            if values["start_date"] > values["end_date"]:
                self._problems.InvalidValue(
                    "end_date",
                    util.FormatDate(values["end_date"]),
                    "end_date of service %s is before its start_date"
                    % values["service_id"],
                )
                continue
            calendar = Calendar(id=values["service_id"])
            calendar.SetContext(context)
            calendar.AddWeeklyPattern(
                [values[day] for day in DAYS_OF_WEEK],
                values["start_date"],
                values["end_date"],
            )
            self._Push(collections.calendars, calendar)

        for values, context in self._ReadRecords(
            "calendar_dates.txt", CALENDAR_DATE_FIELDS
        ):
            calendar = collections.calendars.GetById(values["service_id"])
            if calendar is None:
                calendar = Calendar(id=values["service_id"])
                calendar.SetContext(context)
                collections.calendars.Push(calendar)
            calendar.SetDateHasService(
                values["date"],
                values["exception_type"] == EXCEPTION_TYPE_ADD,
            )

    def _DropCalendarsWithoutService(self, collections):
        """Remove calendars without any date and the vehicle journeys using
    them; such vehicle journeys never run."""
        empty = set()
        for calendar in collections.calendars:
            if not calendar.dates:
                self._problems.OtherProblem(
                    'Calendar "%s" has no date with service; it is removed '
                    "with its vehicle journeys" % calendar.id,
                    context=calendar.GetContext(),
                    type=problems_module.TYPE_WARNING,
                )
                empty.add(calendar.id)
        if not empty:
            return
        collections.calendars = collections.calendars.Filtered(
            lambda c: c.id not in empty
        )
        collections.vehicle_journeys = collections.vehicle_journeys.Filtered(
            lambda vj: vj.service_id not in empty
        )

    def _ResolveReferences(self, collections, names=ALL_COLLECTION_NAMES):
        """Drop the objects whose required references do not resolve, and clear
    the optional references that do not resolve.

    Collections are resolved in dependency order, so dropping a stop area
    also drops its stop points, which in turn drops the transfers between
    them.
    """
        for name in names:
            collection = collections.GetCollection(name)
            resolved = collection.Filtered(
                lambda obj: self._ResolveObject(collections, obj)
            )
            collections.SetCollection(name, resolved)

    def _ResolveObject(self, collections, obj):
        context = obj.GetContext()
        for field, value, target, required in obj.GetReferences():
            if value is None:
                if required:
                    self._problems.MissingValue(field, context=context)
                    return False
                continue
            if collections.GetCollection(target).Contains(value):
                continue
            if required:
                self._problems.UnresolvedReference(
                    field,
                    value,
                    obj.GetObjectType(),
                    obj.id,
                    target,
                    context=context,
                )
                return False
            self._ReportIgnoredReference(obj, field, value, target, context)
            setattr(obj, field, None)

        for field, values, target in obj.GetMultiReferences():
            kept = []
            for value in values:
                if collections.GetCollection(target).Contains(value):
                    kept.append(value)
                else:
                    self._ReportIgnoredReference(
                        obj, field, value, target, context
                    )
            setattr(obj, field, kept)

        stop_times = getattr(obj, "stop_times", None)
        if stop_times:
            kept = []
            for stop_time in stop_times:
                if collections.stop_points.Contains(stop_time.stop_point_id):
                    kept.append(stop_time)
                else:
                    self._problems.UnresolvedReference(
                        "stop_id",
                        stop_time.stop_point_id,
                        obj.GetObjectType(),
                        obj.id,
                        "stop_points",
                        context=stop_time.GetContext(),
                    )
            obj.stop_times = kept
        return True

    def _ReportIgnoredReference(self, obj, field, value, target, context):
        self._problems.ConstraintRelaxed(
            '%s "%s" references %s "%s" in field %s, which does not exist; '
            "the reference is ignored"
            % (obj.GetObjectType(), obj.id, target, value, field),
            context=context,
        )

    def _SetDatasetPeriods(self, collections):
        """Set the validity period of datasets without one to the dates of
    their vehicle journeys."""
        periods = {}
        for vj in collections.vehicle_journeys:
            calendar = collections.calendars.GetById(vj.service_id)
            if calendar is None or not calendar.dates:
                continue
            start, end = calendar.GetDateRange()
            if vj.dataset_id in periods:
                start = min(start, periods[vj.dataset_id][0])
                end = max(end, periods[vj.dataset_id][1])
            periods[vj.dataset_id] = (start, end)
        for dataset in collections.datasets:
            if dataset.start_date is None and dataset.id in periods:
                dataset.start_date, dataset.end_date = periods[dataset.id]
