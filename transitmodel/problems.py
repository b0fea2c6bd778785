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


import logging
from functools import reduce

from .errors import TYPE_ERROR, TYPE_WARNING, TYPE_NOTICE, ALL_TYPES

log = logging.getLogger("transitmodel")


class ProblemReporter(object):
    """Base class for problem reporters. Tracks the current context and creates
     an exception object for each problem. Exception objects are sent to a
     Problem Accumulator, which is responsible for handling them.

     Every problem also records the schema being read or written, so that a
     problem reported while converting GTFS can be told apart from one reported
     while writing NeTEx."""

    def __init__(self, accumulator=None, schema=None):
        self.ClearContext()
        self._schema = schema
        if accumulator is None:
            self.accumulator = LoggingProblemAccumulator()
        else:
            self.accumulator = accumulator

    def GetAccumulator(self):
        return self.accumulator

    def SetSchema(self, schema):
        self._schema = schema

    def ClearContext(self):
        """Clear any previous context."""
        self._context = None

    def SetFileContext(self, file_name, row_num, row, headers):
        """Save the current context to be output with any errors.

    Args:
      file_name: string
      row_num: int
      row: list of strings
      headers: list of column headers, its order corresponding to row's
    """
        self._context = (file_name, row_num, row, headers)

    def AddToAccumulator(self, e):
        """Report an exception to the Problem Accumulator"""
        if getattr(e, "schema", None) is None:
            e.schema = self._schema
        self.accumulator._Report(e)

    def FileFormat(self, problem, context=None, type=TYPE_ERROR):
        e = FileFormat(
            problem=problem, context=context, context2=self._context, type=type
        )
        self.AddToAccumulator(e)

    def MissingFile(self, file_name, context=None, type=TYPE_NOTICE):
        e = MissingFile(
            file_name=file_name,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def UnknownFile(self, file_name, context=None, type=TYPE_NOTICE):
        e = UnknownFile(
            file_name=file_name,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def EmptyFile(self, file_name, context=None, type=TYPE_WARNING):
        e = EmptyFile(
            file_name=file_name,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def MissingColumn(
        self, file_name, column_name, context=None, type=TYPE_ERROR
    ):
        e = MissingColumn(
            file_name=file_name,
            column_name=column_name,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def UnrecognizedColumn(
        self, file_name, column_name, context=None, type=TYPE_NOTICE
    ):
        e = UnrecognizedColumn(
            file_name=file_name,
            column_name=column_name,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def CsvSyntax(self, description=None, context=None, type=TYPE_ERROR):
        e = CsvSyntax(
            description=description,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def DuplicateColumn(
        self, file_name, header, count, type=TYPE_ERROR, context=None
    ):
        e = DuplicateColumn(
            file_name=file_name,
            header=header,
            count=count,
            type=type,
            context=context,
            context2=self._context,
        )
        self.AddToAccumulator(e)

    def InvalidLineEnd(self, bad_line_end, context=None, type=TYPE_WARNING):
        e = InvalidLineEnd(
            bad_line_end=bad_line_end,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def MissingValue(
        self, column_name, reason=None, context=None, type=TYPE_ERROR
    ):
        e = MissingValue(
            column_name=column_name,
            reason=reason,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def InvalidValue(
        self, column_name, value, reason=None, context=None, type=TYPE_ERROR
    ):
        e = InvalidValue(
            column_name=column_name,
            value=value,
            reason=reason,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def UnresolvedReference(
        self,
        column_name,
        value,
        object_type,
        object_id,
        target,
        context=None,
        type=TYPE_ERROR,
    ):
        e = UnresolvedReference(
            column_name=column_name,
            value=value,
            object_type=object_type,
            object_id=object_id,
            target=target,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def ConstraintRelaxed(self, description, context=None, type=TYPE_WARNING):
        e = ConstraintRelaxed(
            description=description,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)

    def OtherProblem(self, description, context=None, type=TYPE_ERROR):
        e = OtherProblem(
            description=description,
            context=context,
            context2=self._context,
            type=type,
        )
        self.AddToAccumulator(e)


class ProblemAccumulatorInterface(object):
    """The base class for Problem Accumulators, which defines their interface."""

    def _Report(self, e):
        raise NotImplementedError(
            "Please use a concrete Problem Accumulator that "
            "implements error and warning handling."
        )


class SimpleProblemAccumulator(ProblemAccumulatorInterface):
    """This is a basic problem accumulator that just prints to console."""

    def _Report(self, e):
        context = e.FormatContext()
        if context:
            print(context)
        print(self._LineWrap(e.FormatProblem(), 78))

    @staticmethod
    def _LineWrap(text, width):
        """
    A word-wrap function that preserves existing line breaks
    and most spaces in the text. Expects that existing line
    breaks are posix newlines (\n).

    Taken from:
    http://aspn.activestate.com/ASPN/Cookbook/Python/Recipe/148061
    """
        return reduce(
            lambda line, word, width=width: "%s%s%s"
            % (
                line,
                " \n"[
                    (
                        len(line)
                        - line.rfind("\n")
                        - 1
                        + len(word.split("\n", 1)[0])
                        >= width
                    )
                ],
                word,
            ),
            text.split(" "),
        )


class LoggingProblemAccumulator(ProblemAccumulatorInterface):
    """Sends every problem to a logger as one structured record.

  The schema, file, row and reason of the problem are attached to the log
  record through `extra` so that handlers may format or filter on them.
  """

    _LEVELS = {
        TYPE_ERROR: logging.ERROR,
        TYPE_WARNING: logging.WARNING,
        TYPE_NOTICE: logging.INFO,
    }

    def __init__(self, logger=None):
        self.logger = logger or log

    def _Report(self, e):
        message = e.FormatProblem()
        context = e.FormatContext()
        if context:
            message = "%s: %s" % (context, message)
        self.logger.log(
            self._LEVELS[e.GetType()],
            message,
            extra={
                "problem": e.__class__.__name__,
                "schema": getattr(e, "schema", None),
                "file_name": getattr(e, "file_name", None),
                "row_num": getattr(e, "row_num", None),
                "reason": getattr(e, "reason", None),
            },
        )


class CountingProblemAccumulator(ProblemAccumulatorInterface):
    """Counts problems by type and forwards them to another accumulator."""

    def __init__(self, accumulator=None):
        self.accumulator = accumulator or LoggingProblemAccumulator()
        self.counts = dict((t, 0) for t in ALL_TYPES)

    def _Report(self, e):
        self.counts[e.GetType()] += 1
        self.accumulator._Report(e)

    def ErrorCount(self):
        return self.counts[TYPE_ERROR]

    def WarningCount(self):
        return self.counts[TYPE_WARNING]

    def FormatCount(self):
        return "%d error%s, %d warning%s" % (
            self.ErrorCount(),
            self.ErrorCount() != 1 and "s" or "",
            self.WarningCount(),
            self.WarningCount() != 1 and "s" or "",
        )


class ExceptionWithContext(Exception):
    def __init__(self, context=None, context2=None, **kwargs):
        """Initialize an exception object, saving all keyword arguments in self.
    context and context2, if present, must be a tuple of (file_name, row_num,
    row, headers). context2 comes from ProblemReporter.SetFileContext. context
    was passed in with the keyword arguments. context2 is ignored if context
    is present."""
        Exception.__init__(self)

        if context:
            self.__dict__.update(self.ContextTupleToDict(context))
        elif context2:
            self.__dict__.update(self.ContextTupleToDict(context2))
        self.__dict__.update(kwargs)

        if ("type" in kwargs) and (kwargs["type"] in ALL_TYPES):
            self._type = kwargs["type"]
        else:
            self._type = TYPE_ERROR

    def GetType(self):
        return self._type

    def IsError(self):
        return self._type == TYPE_ERROR

    def IsWarning(self):
        return self._type == TYPE_WARNING

    def IsNotice(self):
        return self._type == TYPE_NOTICE

    CONTEXT_PARTS = ["file_name", "row_num", "row", "headers"]

    @staticmethod
    def ContextTupleToDict(context):
        """Convert a tuple representing a context into a dict of (key, value) pairs
    """
        d = {}
        if not context:
            return d
        for k, v in zip(ExceptionWithContext.CONTEXT_PARTS, context):
            if v != "" and v is not None:  # Don't ignore int(0), a valid row_num
                d[k] = v
        return d

    def __str__(self):
        return self.FormatProblem()

    def GetDictToFormat(self):
        """Return a copy of self as a dict, suitable for passing to FormatProblem"""
        return dict(self.__dict__)

    def FormatProblem(self, d=None):
        """Return a text string describing the problem.

    Args:
      d: map returned by GetDictToFormat with  with formatting added
    """
        if not d:
            d = self.GetDictToFormat()

        output_error_text = self.__class__.ERROR_TEXT % d
        if ("reason" in d) and d["reason"]:
            return "%s\n%s" % (output_error_text, d["reason"])
        else:
            return output_error_text

    def FormatContext(self):
        """Return a text string describing the context"""
        text = ""
        if getattr(self, "schema", None):
            text += "[%s] " % self.schema
        if hasattr(self, "file_name"):
            text += self.file_name
        if hasattr(self, "row_num"):
            text += ":%i" % self.row_num
        if hasattr(self, "column_name"):
            text += " column %s" % self.column_name
        return text.strip()

    def __eq__(self, y):
        return self.GetOrderKey() == y.GetOrderKey()

    def __lt__(self, y):
        return self.GetOrderKey() < y.GetOrderKey()

    __hash__ = Exception.__hash__

    def GetOrderKey(self):
        """Return a tuple that can be used to sort problems into a consistent order.

    Returns:
      A list of values.
    """
        context_attributes = ["_type", "file_name", "row_num"]
        context_attributes.extend(self._GetExtraOrderAttributes())

        tokens = []
        for context_attribute in context_attributes:
            value = getattr(self, context_attribute, None)
            # None sorts before any value of the same attribute
            tokens.append((value is not None, value))
        return tokens

    def _GetExtraOrderAttributes(self):
        """Return a list of extra attributes that should be used by GetOrderKey().

    Returns:
      A list of class attribute names.
    """
        return []


class MissingFile(ExceptionWithContext):
    ERROR_TEXT = "File %(file_name)s is not found"


class EmptyFile(ExceptionWithContext):
    ERROR_TEXT = "File %(file_name)s is empty"


class UnknownFile(ExceptionWithContext):
    ERROR_TEXT = (
        "The file named %(file_name)s was not expected and is ignored."
    )


class FileFormat(ExceptionWithContext):
    ERROR_TEXT = (
        "Files must be encoded in utf-8 and may not contain "
        "any null bytes (0x00). %(file_name)s %(problem)s."
    )


class MissingColumn(ExceptionWithContext):
    ERROR_TEXT = "Missing column %(column_name)s in file %(file_name)s"


class UnrecognizedColumn(ExceptionWithContext):
    ERROR_TEXT = (
        "Unrecognized column %(column_name)s in file %(file_name)s. "
        "This might be a misspelled column name (capitalization "
        "matters!). Its values are ignored."
    )


class CsvSyntax(ExceptionWithContext):
    ERROR_TEXT = "%(description)s"


class DuplicateColumn(ExceptionWithContext):
    ERROR_TEXT = (
        "Column %(header)s appears %(count)i times in file %(file_name)s"
    )

    def _GetExtraOrderAttributes(self):
        return ["header"]


class InvalidLineEnd(ExceptionWithContext):
    ERROR_TEXT = (
        "Each line must end with CR LF or LF except for the last line "
        "of the file. This line ends with \"%(bad_line_end)s\"."
    )


class MissingValue(ExceptionWithContext):
    ERROR_TEXT = "Missing value for column %(column_name)s"


class InvalidValue(ExceptionWithContext):
    ERROR_TEXT = "Invalid value %(value)s in field %(column_name)s"

    def _GetExtraOrderAttributes(self):
        return ["column_name"]


class UnresolvedReference(ExceptionWithContext):
    ERROR_TEXT = (
        '%(object_type)s "%(object_id)s" references %(target)s '
        '"%(value)s" in field %(column_name)s, which does not exist'
    )

    def _GetExtraOrderAttributes(self):
        return ["column_name"]


class ConstraintRelaxed(ExceptionWithContext):
    ERROR_TEXT = "%(description)s"


class OtherProblem(ExceptionWithContext):
    ERROR_TEXT = "%(description)s"


class ExceptionProblemAccumulator(ProblemAccumulatorInterface):
    """A problem accumulator that handles errors and optionally warnings by
     raising exceptions."""

    def __init__(self, raise_warnings=False):
        """Initialise.

    Args:
      raise_warnings: If this is True then warnings are also raised as
                      exceptions.
                      If it is false, warnings are sent to the log using
                      LoggingProblemAccumulator.
    """
        self.raise_warnings = raise_warnings
        self.accumulator = LoggingProblemAccumulator()

    def _Report(self, e):
        if e.IsError() or (self.raise_warnings and e.IsWarning()):
            raise e
        else:
            self.accumulator._Report(e)


default_accumulator = LoggingProblemAccumulator()
default_problem_reporter = ProblemReporter(default_accumulator)
