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


# Unit tests for the restrict module.


import datetime

import transitmodel
from transitmodel import Model, RestrictValidityPeriod
from transitmodel import ORPHANS_KEEP, ORPHANS_REMOVE
from transitmodel import (
    Pathway,
    Ticket,
    TicketUse,
    TicketUsePerimeter,
    TicketUseRestriction,
)
from transitmodel.errors import ConfigurationError
from tests import util


def JAN(day):
    return datetime.date(2020, 1, day)


class RestrictTestCaseBase(util.TestCase):
    def setUp(self):
        self.accumulator = util.RecordingProblemAccumulator(self)
        self.problems = transitmodel.ProblemReporter(self.accumulator)
        self.collections = util.SimpleCollections()

    def tearDown(self):
        self.accumulator.TearDownAssertNoMoreExceptions()

    def Restrict(self, start_date, end_date, orphan_policy, model=None):
        if model is None:
            model = Model(self.collections)
        return RestrictValidityPeriod(
            model, start_date, end_date, orphan_policy, problems=self.problems
        )


class RemoveOrphansTestCase(RestrictTestCaseBase):
    def testRemovesJourneysOutsideThePeriod(self):
        model = self.Restrict(JAN(1), JAN(5), ORPHANS_REMOVE)
        self.assertEqual(["EARLY"], model.calendars.Ids())
        self.assertEqual(
            [JAN(d) for d in range(1, 6)],
            model.calendars.GetById("EARLY").ActiveDates(),
        )
        self.assertEqual(["VJ1"], model.vehicle_journeys.Ids())
        self.assertEqual(["R1"], model.routes.Ids())
        self.assertEqual(["L1"], model.lines.Ids())
        self.assertEqual(["SP1", "SP2"], model.stop_points.Ids())
        self.assertEqual(["SA1", "SA2"], model.stop_areas.Ids())
        self.assertEqual(["SP1-SP2"], [t.id for t in model.transfers])

    def testSharedObjectsAreKept(self):
        model = self.Restrict(JAN(1), JAN(5), ORPHANS_REMOVE)
        self.assertEqual(["N1"], model.networks.Ids())
        self.assertEqual(["CO1"], model.companies.Ids())
        self.assertEqual(["Bus"], model.physical_modes.Ids())

    def testRemovesPathwaysAndFaresOfRemovedObjects(self):
        self.collections.pathways.Push(
            Pathway(id="PW1", from_stop_id="SP1", to_stop_id="SP2", mode=1)
        )
        self.collections.pathways.Push(
            Pathway(id="PW2", from_stop_id="SP2", to_stop_id="SP3", mode=1)
        )
        self.collections.tickets.Push(Ticket(id="T1", name="Single"))
        self.collections.ticket_uses.Push(TicketUse(id="TU1", ticket_id="T1"))
        for line_id in ("L1", "L2"):
            self.collections.ticket_use_perimeters.Push(
                TicketUsePerimeter(
                    ticket_use_id="TU1",
                    object_type="line",
                    object_id=line_id,
                    perimeter_action=1,
                )
            )
        self.collections.ticket_use_restrictions.Push(
            TicketUseRestriction(
                ticket_use_id="TU1",
                restriction_type="OD",
                use_origin="SA1",
                use_destination="SA3",
            )
        )
        model = self.Restrict(JAN(1), JAN(5), ORPHANS_REMOVE)
        self.assertEqual(["PW1"], model.pathways.Ids())
        self.assertEqual(
            ["TU1-line-L1"], [p.id for p in model.ticket_use_perimeters]
        )
        self.assertTrue(model.ticket_use_restrictions.IsEmpty())
        self.assertEqual(["TU1"], model.ticket_uses.Ids())

    def testClearsOptionalReferences(self):
        self.collections.routes.GetById("R1").destination_id = "SA3"
        model = self.Restrict(JAN(1), JAN(5), ORPHANS_REMOVE)
        self.assertEqual(None, model.routes.GetById("R1").destination_id)

    def testEmptyPeriod(self):
        model = self.Restrict(JAN(12), JAN(15), ORPHANS_REMOVE)
        self.assertTrue(model.vehicle_journeys.IsEmpty())
        self.assertTrue(model.calendars.IsEmpty())
        self.assertTrue(model.lines.IsEmpty())
        self.assertTrue(model.stop_points.IsEmpty())
        self.assertEqual(0, len(model.transfers))

    def testIdempotent(self):
        once = self.Restrict(JAN(3), JAN(25), ORPHANS_REMOVE)
        twice = self.Restrict(JAN(3), JAN(25), ORPHANS_REMOVE, model=once)
        self.assertEqual(once.GetStats(), twice.GetStats())
        for name in ("calendars", "vehicle_journeys", "stop_points", "lines"):
            self.assertEqual(
                once.GetCollection(name).Ids(), twice.GetCollection(name).Ids()
            )
        self.assertEqual(
            once.calendars.GetById("LATE").ActiveDates(),
            twice.calendars.GetById("LATE").ActiveDates(),
        )

    def testInputModelUnchanged(self):
        model = Model(self.collections)
        self.Restrict(JAN(1), JAN(5), ORPHANS_REMOVE, model=model)
        self.assertEqual(2, len(model.vehicle_journeys))
        self.assertEqual(10, len(model.calendars.GetById("EARLY").dates))


class KeepOrphansTestCase(RestrictTestCaseBase):
    def testKeepsUnusedObjects(self):
        model = self.Restrict(JAN(1), JAN(5), ORPHANS_KEEP)
        self.assertEqual(["VJ1"], model.vehicle_journeys.Ids())
        self.assertEqual(["R1", "R2"], model.routes.Ids())
        self.assertEqual(["L1", "L2"], model.lines.Ids())
        self.assertEqual(["SP1", "SP2", "SP3"], model.stop_points.Ids())
        self.assertEqual(2, len(model.transfers))


class DatasetPeriodTestCase(RestrictTestCaseBase):
    def testDatasetIsClamped(self):
        model = self.Restrict(JAN(5), JAN(25), ORPHANS_KEEP)
        dataset = model.datasets.GetById("D1")
        self.assertEqual(JAN(5), dataset.start_date)
        self.assertEqual(JAN(25), dataset.end_date)

    def testDatasetInsideThePeriod(self):
        model = self.Restrict(
            datetime.date(2019, 12, 1), datetime.date(2020, 3, 1), ORPHANS_KEEP
        )
        dataset = model.datasets.GetById("D1")
        self.assertEqual(JAN(1), dataset.start_date)
        self.assertEqual(JAN(31), dataset.end_date)

    def testFeedInfos(self):
        self.collections.feed_infos["feed_start_date"] = "20191201"
        self.collections.feed_infos["feed_end_date"] = "20200131"
        model = self.Restrict(JAN(5), JAN(25), ORPHANS_KEEP)
        self.assertEqual("20200105", model.feed_infos["feed_start_date"])
        self.assertEqual("20200125", model.feed_infos["feed_end_date"])

    def testInvalidFeedInfo(self):
        self.collections.feed_infos["feed_start_date"] = "soon"
        model = self.Restrict(JAN(5), JAN(25), ORPHANS_KEEP)
        e = self.accumulator.PopInvalidValue("feed_start_date")
        self.assertTrue(e.IsWarning())
        self.assertEqual("soon", model.feed_infos["feed_start_date"])


class ArgumentsTestCase(RestrictTestCaseBase):
    def testUnknownPolicy(self):
        self.assertRaises(
            ConfigurationError, self.Restrict, JAN(1), JAN(5), "drop"
        )

    def testEndBeforeStart(self):
        self.assertRaises(
            ConfigurationError, self.Restrict, JAN(5), JAN(1), ORPHANS_REMOVE
        )

    def testSingleDay(self):
        model = self.Restrict(JAN(20), JAN(20), ORPHANS_REMOVE)
        self.assertEqual(["VJ2"], model.vehicle_journeys.Ids())
        self.assertEqual([JAN(20)], model.calendars.GetById("LATE").ActiveDates())
