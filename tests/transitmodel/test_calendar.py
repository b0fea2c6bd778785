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


# Unit tests for the calendar module.


import datetime

from transitmodel import Calendar
from transitmodel.calendar import ComputeWeeklyPattern
from transitmodel.calendar import EXCEPTION_TYPE_ADD, EXCEPTION_TYPE_REMOVE
from tests import util

WEEKDAYS = [True] * 5 + [False] * 2


def Date(day, month=1):
    return datetime.date(2020, month, day)


class CalendarTestCase(util.TestCase):
    def testWeeklyPattern(self):
        calendar = Calendar(id="S1")
        calendar.AddWeeklyPattern(WEEKDAYS, Date(1), Date(12))
        # 2020-01-01 is a wednesday
        self.assertEqual(
            [Date(d) for d in (1, 2, 3, 6, 7, 8, 9, 10)], calendar.ActiveDates()
        )
        self.assertTrue(calendar.IsActiveOn(Date(6)))
        self.assertFalse(calendar.IsActiveOn(Date(4)))
        self.assertEqual((Date(1), Date(10)), calendar.GetDateRange())

    def testSetDateHasService(self):
        calendar = Calendar(id="S1")
        calendar.SetDateHasService(Date(4))
        calendar.SetDateHasService(Date(5))
        calendar.SetDateHasService(Date(4), False)
        calendar.SetDateHasService(Date(9), False)
        self.assertEqual([Date(5)], calendar.ActiveDates())

    def testEmpty(self):
        calendar = Calendar(id="S1")
        self.assertEqual((None, None), calendar.GetDateRange())
        self.assertEqual([], calendar.ActiveDates())

    def testRestrict(self):
        calendar = Calendar(id="S1", dates=[Date(d) for d in range(1, 32)])
        calendar.Restrict(Date(10), Date(12))
        self.assertEqual([Date(10), Date(11), Date(12)], calendar.ActiveDates())
        calendar.Restrict(Date(20), Date(25))
        self.assertEqual([], calendar.ActiveDates())

    def testCopyHasOwnDates(self):
        calendar = Calendar(id="S1", dates=[Date(1)])
        copy = calendar.Copy()
        copy.SetDateHasService(Date(2))
        self.assertEqual([Date(1)], calendar.ActiveDates())
        self.assertEqual(calendar, Calendar(id="S1", dates=set([Date(1)])))


class ComputeWeeklyPatternTestCase(util.TestCase):
    def testRegularWeeks(self):
        calendar = Calendar(id="S1")
        calendar.AddWeeklyPattern(WEEKDAYS, Date(6), Date(31))
        day_of_week, start, end, exceptions = ComputeWeeklyPattern(
            calendar.dates
        )
        self.assertEqual(WEEKDAYS, day_of_week)
        self.assertEqual(Date(6), start)
        self.assertEqual(Date(31), end)
        self.assertEqual([], exceptions)

    def testExceptions(self):
        calendar = Calendar(id="S1")
        calendar.AddWeeklyPattern(WEEKDAYS, Date(6), Date(31))
        calendar.SetDateHasService(Date(15), False)
        calendar.SetDateHasService(Date(18))
        day_of_week, _, _, exceptions = ComputeWeeklyPattern(calendar.dates)
        self.assertEqual(WEEKDAYS, day_of_week)
        self.assertEqual(
            [(Date(15), EXCEPTION_TYPE_REMOVE), (Date(18), EXCEPTION_TYPE_ADD)],
            exceptions,
        )

    def testSingleDate(self):
        day_of_week, start, end, exceptions = ComputeWeeklyPattern([Date(8)])
        # 2020-01-08 is a wednesday
        self.assertEqual([False, False, True, False, False, False, False],
                         day_of_week)
        self.assertEqual(Date(8), start)
        self.assertEqual(Date(8), end)
        self.assertEqual([], exceptions)

    def testPatternCoversSameDates(self):
        dates = set([Date(2), Date(3), Date(9), Date(21), Date(28), Date(3, 2)])
        day_of_week, start, end, exceptions = ComputeWeeklyPattern(dates)
        calendar = Calendar(id="S1")
        calendar.AddWeeklyPattern(day_of_week, start, end)
        for date, exception_type in exceptions:
            calendar.SetDateHasService(date, exception_type == EXCEPTION_TYPE_ADD)
        self.assertEqual(dates, calendar.dates)
