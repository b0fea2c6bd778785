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

import datetime

from .objectbase import ModelObjectBase

DAYS_OF_WEEK = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]

EXCEPTION_TYPE_ADD = 1
EXCEPTION_TYPE_REMOVE = 2


class Calendar(ModelObjectBase):
    """Represents a service, which identifies a set of dates when one or more
  vehicle journeys operate.

  Attributes:
    dates: set of datetime.date
  """

    _COLLECTION = "calendars"
    _FIELD_NAMES = ["id", "dates"]

    def __init__(self, field_dict=None, **kwargs):
        ModelObjectBase.__init__(self, field_dict, **kwargs)
        self.dates = set(self.dates or ())

    def IsActiveOn(self, date):
        return date in self.dates

    def ActiveDates(self):
        """Return the sorted list of dates with service."""
        return sorted(self.dates)

    def GetDateRange(self):
        """Return (first date, last date) or (None, None) without service."""
        if not self.dates:
            return (None, None)
        return (min(self.dates), max(self.dates))

    def SetDateHasService(self, date, has_service=True):
        if has_service:
            self.dates.add(date)
        else:
            self.dates.discard(date)

    def AddWeeklyPattern(self, day_of_week, start_date, end_date):
        """Add the dates between start_date and end_date, both included, whose
    weekday is set in day_of_week, a list of 7 bools starting on monday."""
        date = start_date
        while date <= end_date:
            if day_of_week[date.weekday()]:
                self.dates.add(date)
            date += datetime.timedelta(days=1)

    def Restrict(self, start_date, end_date):
        """Keep only the dates in [start_date, end_date]."""
        self.dates = set(d for d in self.dates if start_date <= d <= end_date)


def ComputeWeeklyPattern(dates):
    """Compress a set of dates into a weekly pattern plus exceptions.

  A day of the week is part of the pattern when the set holds at least half
  of its occurrences between the first and the last date. The result only
  depends on the set, so writing the same calendar twice gives the same rows.

  Args:
    dates: non empty iterable of datetime.date

  Returns:
    A tuple (day_of_week, start_date, end_date, exceptions) where day_of_week
    is a list of 7 bools starting on monday and exceptions is a list of
    (date, EXCEPTION_TYPE_ADD or EXCEPTION_TYPE_REMOVE) sorted by date.
  """
    dates = set(dates)
    start_date = min(dates)
    end_date = max(dates)
    total = [0] * 7
    active = [0] * 7
    date = start_date
    while date <= end_date:
        total[date.weekday()] += 1
        if date in dates:
            active[date.weekday()] += 1
        date += datetime.timedelta(days=1)
    day_of_week = [
        total[i] > 0 and 2 * active[i] >= total[i] for i in range(7)
    ]

    exceptions = []
    date = start_date
    while date <= end_date:
        in_pattern = day_of_week[date.weekday()]
        if date in dates and not in_pattern:
            exceptions.append((date, EXCEPTION_TYPE_ADD))
        elif in_pattern and date not in dates:
            exceptions.append((date, EXCEPTION_TYPE_REMOVE))
        date += datetime.timedelta(days=1)
    return day_of_week, start_date, end_date, exceptions
