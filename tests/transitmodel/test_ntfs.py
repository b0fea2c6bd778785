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


# Unit tests for the NTFS reader and writer.


import datetime
import decimal
from io import BytesIO
import os

from transitmodel import Model, NtfsLoader, NtfsWriter
from tests import util


def RichNtfsFeed():
    """Return the files of an NTFS feed using every optional file."""
    feed = dict(util.NTFS_FEED)
    feed.update(
        {
            "lines.txt": "line_id,line_code,line_name,network_id,"
            "commercial_mode_id,line_color,geometry_id\n"
            "L1,1,Line 1,N1,Bus,ff0000,G1\n",
            "stops.txt": "stop_id,stop_name,stop_lat,stop_lon,location_type,"
            "parent_station,equipment_id,level_id\n"
            "SA1,Gare,48.844700,2.373400,1,,,\n"
            "SA2,Bastille,48.853100,2.369100,1,,,\n"
            "SP1,Gare quai 1,48.844800,2.373500,0,SA1,E1,LV0\n"
            "SP2,Bastille quai 1,48.853200,2.369200,0,SA2,,\n"
            "SP3,Gare quai 2,48.844900,2.373600,0,SA1,,LV-1\n",
            "levels.txt": "level_id,level_index,level_name\n"
            "LV0,0,Street\n"
            "LV-1,-1,Platforms\n",
            "pathways.txt": "pathway_id,from_stop_id,to_stop_id,pathway_mode,"
            "is_bidirectional,length,traversal_time,stair_count\n"
            "PW1,SP1,SP3,2,1,12.5,45,-20\n",
            "tickets.txt": "ticket_id,ticket_name\nT1,Single ride\n",
            "ticket_uses.txt": "ticket_use_id,ticket_id,max_transfers,"
            "boarding_time_limit\n"
            "TU1,T1,1,3600\n",
            "ticket_prices.txt": "ticket_id,ticket_price,ticket_currency,"
            "ticket_validity_start,ticket_validity_end\n"
            "T1,1.50,EUR,20200101,20201231\n",
            "ticket_use_perimeters.txt": "ticket_use_id,object_type,object_id,"
            "perimeter_action\n"
            "TU1,network,N1,1\n"
            "TU1,line,L1,2\n",
            "ticket_use_restrictions.txt": "ticket_use_id,restriction_type,"
            "use_origin,use_destination\n"
            "TU1,OD,SA1,SA2\n"
            "TU1,zone,Z1,Z2\n",
            "calendar_dates.txt": "service_id,date,exception_type\n"
            "S1,20200101,2\n"
            "S1,20200104,1\n",
            "transfers.txt": "from_stop_id,to_stop_id,min_transfer_time\n"
            "SP1,SP2,60\n",
            "comments.txt": "comment_id,comment_name\n"
            "COM1,No service on sundays\n",
            "comment_links.txt": "object_id,object_type,comment_id\n"
            "L1,line,COM1\n"
            "VJ1,trip,COM1\n",
            "object_codes.txt": "object_type,object_id,object_system,"
            "object_code\n"
            "stop_area,SA1,source,1234\n",
            "equipments.txt": "equipment_id,wheelchair_boarding\nE1,1\n",
            "geometries.txt": "geometry_id,geometry_wkt\n"
            "G1,LINESTRING(2.373500 48.844800, 2.369200 48.853200)\n",
            "feed_infos.txt": "feed_info_param,feed_info_value\n"
            "ntfs_version,0.12\n",
        }
    )
    return feed


class NtfsLoaderTestCase(util.MemoryZipTestCase):
    _LOADER_CLASS = NtfsLoader
    _FEED_CONTENTS = util.NTFS_FEED

    def testObjects(self):
        model = self.MakeLoaderAndLoad()
        self.assertEqual("Europe/Paris", model.networks.GetById("N1").timezone)
        dataset = model.datasets.GetById("TG-1")
        self.assertEqual(datetime.date(2020, 1, 1), dataset.start_date)
        self.assertEqual(datetime.date(2020, 1, 31), dataset.end_date)
        self.assertEqual(["SA1", "SA2"], model.stop_areas.Ids())
        stop_point = model.stop_points.GetById("SP2")
        self.assertEqual("SA2", stop_point.stop_area_id)
        self.assertAlmostEqual(48.8532, stop_point.lat)
        self.assertAlmostEqual(2.3692, stop_point.lon)
        # weekdays of January 2020
        self.assertEqual(23, len(model.calendars.GetById("S1").dates))
        stop_times = model.vehicle_journeys.GetById("VJ1").stop_times
        self.assertEqual(
            [(8 * 3600, 8 * 3600 + 60), (8 * 3600 + 600, 8 * 3600 + 660)],
            [(st.arrival_time, st.departure_time) for st in stop_times],
        )
        self.assertEqual([0, 0], [st.pickup_type for st in stop_times])

    def testRichFeed(self):
        self.zip_contents = RichNtfsFeed()
        model = self.MakeLoaderAndLoad()
        self.assertEqual(["COM1"], model.lines.GetById("L1").comment_links)
        self.assertEqual(
            ["COM1"], model.vehicle_journeys.GetById("VJ1").comment_links
        )
        self.assertEqual(
            [("source", "1234")], model.stop_areas.GetById("SA1").codes
        )
        self.assertEqual("E1", model.stop_points.GetById("SP1").equipment_id)
        self.assertEqual(1, model.equipments.GetById("E1").wheelchair_boarding)
        self.assertEqual("FF0000", model.lines.GetById("L1").color)
        self.assertEqual(
            [(2.3735, 48.8448), (2.3692, 48.8532)],
            model.geometries.GetById("G1").GetPoints(),
        )
        calendar = model.calendars.GetById("S1")
        self.assertFalse(calendar.IsActiveOn(datetime.date(2020, 1, 1)))
        self.assertTrue(calendar.IsActiveOn(datetime.date(2020, 1, 4)))
        self.assertEqual(1, len(model.transfers))
        self.assertEqual("0.12", model.feed_infos["ntfs_version"])
        relation = model.GetRelation("lines", "comments")
        self.assertEqual(
            [model.lines.GetIdx("L1")],
            relation.GetTo(model.comments.GetIdx("COM1")),
        )

    def testLevelsAndPathways(self):
        self.zip_contents = RichNtfsFeed()
        model = self.MakeLoaderAndLoad()
        self.assertEqual(-1.0, model.levels.GetById("LV-1").index)
        self.assertEqual("LV-1", model.stop_points.GetById("SP3").level_id)
        pathway = model.pathways.GetById("PW1")
        self.assertEqual("SP1", pathway.from_stop_id)
        self.assertEqual("SP3", pathway.to_stop_id)
        self.assertEqual(2, pathway.mode)
        self.assertEqual(12.5, pathway.length)
        self.assertEqual(-20, pathway.stair_count)
        self.assertEqual(None, pathway.max_slope)
        relation = model.GetRelation("levels", "stop_points")
        self.assertEqual(
            [model.stop_points.GetIdx("SP1")],
            relation.GetFrom(model.levels.GetIdx("LV0")),
        )

    def testFares(self):
        self.zip_contents = RichNtfsFeed()
        model = self.MakeLoaderAndLoad()
        self.assertEqual("Single ride", model.tickets.GetById("T1").name)
        ticket_use = model.ticket_uses.GetById("TU1")
        self.assertEqual(1, ticket_use.max_transfers)
        self.assertEqual(3600, ticket_use.boarding_time_limit)
        self.assertEqual(None, ticket_use.alighting_time_limit)
        price = list(model.ticket_prices)[0]
        self.assertEqual(decimal.Decimal("1.50"), price.price)
        self.assertEqual("EUR", price.currency)
        self.assertEqual(datetime.date(2020, 12, 31), price.validity_end)
        self.assertEqual(
            [("network", "N1", 1), ("line", "L1", 2)],
            [
                (p.object_type, p.object_id, p.perimeter_action)
                for p in model.ticket_use_perimeters
            ],
        )
        self.assertEqual(
            ["TU1-SA1-SA2", "TU1-Z1-Z2"],
            [r.id for r in model.ticket_use_restrictions],
        )

    def testInvalidTicketPrice(self):
        self.zip_contents = RichNtfsFeed()
        self.SetArchiveContents(
            "ticket_prices.txt",
            "ticket_id,ticket_price,ticket_currency,ticket_validity_start,"
            "ticket_validity_end\n"
            "T1,1.50,EURO,20200101,20201231\n"
            "T1,free,EUR,20210101,20211231\n",
        )
        model = self.MakeLoaderAndLoad()
        self.accumulator.PopInvalidValue("ticket_currency", "ticket_prices.txt")
        self.accumulator.PopInvalidValue("ticket_price", "ticket_prices.txt")
        self.assertTrue(model.ticket_prices.IsEmpty())

    def testFareObjectsOfUnknownObjects(self):
        self.zip_contents = RichNtfsFeed()
        self.SetArchiveContents(
            "ticket_use_perimeters.txt",
            "ticket_use_id,object_type,object_id,perimeter_action\n"
            "TU1,line,L9,1\n"
            "TU1,stop_area,SA1,1\n",
        )
        self.SetArchiveContents(
            "ticket_use_restrictions.txt",
            "ticket_use_id,restriction_type,use_origin,use_destination\n"
            "TU1,OD,SA1,SA9\n",
        )
        model = self.MakeLoaderAndLoad()
        self.accumulator.PopInvalidValue(
            "object_type", "ticket_use_perimeters.txt"
        )
        self.accumulator.PopUnresolvedReference(
            "object_id", "ticket_use_perimeters.txt"
        )
        self.accumulator.PopUnresolvedReference(
            "use_destination", "ticket_use_restrictions.txt"
        )
        self.assertTrue(model.ticket_use_perimeters.IsEmpty())
        self.assertTrue(model.ticket_use_restrictions.IsEmpty())

    def testPathwayToUnknownStop(self):
        self.zip_contents = RichNtfsFeed()
        self.SetArchiveContents(
            "pathways.txt",
            "pathway_id,from_stop_id,to_stop_id,pathway_mode,is_bidirectional\n"
            "PW1,SP1,SP9,1,0\n"
            "PW2,SP1,SP2,8,0\n",
        )
        model = self.MakeLoaderAndLoad()
        self.accumulator.PopInvalidValue("pathway_mode", "pathways.txt")
        self.accumulator.PopUnresolvedReference("to_stop_id", "pathways.txt")
        self.assertTrue(model.pathways.IsEmpty())

    def testUnknownTrip(self):
        self.AppendToArchiveContents(
            "stop_times.txt", "VJ9,09:00:00,09:00:00,SP1,0\n"
        )
        self.MakeLoaderAndLoad()
        self.accumulator.PopUnresolvedReference("trip_id", "stop_times.txt")

    def testDuplicateSequence(self):
        self.AppendToArchiveContents(
            "stop_times.txt", "VJ1,09:00:00,09:00:00,SP1,1\n"
        )
        model = self.MakeLoaderAndLoad()
        self.accumulator.PopInvalidValue("stop_sequence", "stop_times.txt")
        self.assertEqual(
            ["SP1", "SP2"],
            model.vehicle_journeys.GetById("VJ1").GetStopPointIds(),
        )

    def testStopTimesAreSortedBySequence(self):
        self.SetArchiveContents(
            "stop_times.txt",
            "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
            "VJ1,08:10:00,08:11:00,SP2,5\n"
            "VJ1,08:00:00,08:01:00,SP1,2\n",
        )
        model = self.MakeLoaderAndLoad()
        vehicle_journey = model.vehicle_journeys.GetById("VJ1")
        self.assertEqual(["SP1", "SP2"], vehicle_journey.GetStopPointIds())
        self.assertEqual(8 * 3600, vehicle_journey.GetStartTime())

    def testUnsupportedLocationType(self):
        self.AppendToArchiveContents(
            "stops.txt", "E1,Entrance,48.844900,2.373600,2,SA1\n"
        )
        model = self.MakeLoaderAndLoad()
        e = self.accumulator.PopInvalidValue("location_type", "stops.txt")
        self.assertTrue(e.IsNotice())
        self.assertFalse("E1" in model.stop_points)

    def testInvalidTimezone(self):
        self.SetArchiveContents(
            "networks.txt",
            "network_id,network_name,network_timezone\nN1,Network 1,Mars/Base\n",
        )
        model = self.MakeLoaderAndLoad()
        e = self.accumulator.PopInvalidValue("network_timezone", "networks.txt")
        self.assertTrue(e.IsWarning())
        self.assertEqual(None, model.networks.GetById("N1").timezone)

    def testUnresolvedOptionalReference(self):
        self.SetArchiveContents(
            "lines.txt",
            "line_id,line_name,network_id,commercial_mode_id,geometry_id\n"
            "L1,Line 1,N1,Bus,G9\n",
        )
        model = self.MakeLoaderAndLoad()
        e = self.accumulator.PopException("ConstraintRelaxed")
        self.assertEqual("lines.txt", e.file_name)
        self.assertEqual(None, model.lines.GetById("L1").geometry_id)

    def testUnresolvedRequiredReferenceCascades(self):
        self.SetArchiveContents(
            "routes.txt",
            "route_id,route_name,direction_type,line_id\nR1,Route 1,forward,L9\n",
        )
        model = self.MakeLoaderAndLoad()
        self.accumulator.PopUnresolvedReference("line_id", "routes.txt")
        self.accumulator.PopUnresolvedReference("route_id", "trips.txt")
        self.assertTrue(model.routes.IsEmpty())
        self.assertTrue(model.vehicle_journeys.IsEmpty())

    def testCommentLinkToUnknownObject(self):
        self.SetArchiveContents(
            "comments.txt", "comment_id,comment_name\nCOM1,Closed\n"
        )
        self.SetArchiveContents(
            "comment_links.txt",
            "object_id,object_type,comment_id\nL9,line,COM1\nL1,bike,COM1\n",
        )
        self.MakeLoaderAndLoad()
        e = self.accumulator.PopUnresolvedReference("object_id")
        self.assertTrue(e.IsWarning())
        self.accumulator.PopInvalidValue("object_type", "comment_links.txt")


class NtfsWriterTestCase(util.TempDirTestCaseBase):
    def Load(self, feed):
        problems = util.GetTestFailureProblemReporter(self)
        return NtfsLoader(feed, problems=problems).Load()

    def testWriteIsStable(self):
        model = self.Load(self.WriteFeedDirectory("feed", RichNtfsFeed()))
        first = BytesIO()
        NtfsWriter().Write(model, first)
        first.seek(0)
        second = BytesIO()
        NtfsWriter().Write(self.Load(first), second)
        self.assertEqual(first.getvalue(), second.getvalue())

    def testWrittenFiles(self):
        model = self.Load(self.WriteFeedDirectory("feed", util.NTFS_FEED))
        output = os.path.join(self.tempdirpath, "output")
        NtfsWriter().Write(model, output)
        self.assertEqual(
            [
                "calendar.txt",
                "commercial_modes.txt",
                "companies.txt",
                "contributors.txt",
                "datasets.txt",
                "lines.txt",
                "networks.txt",
                "physical_modes.txt",
                "routes.txt",
                "stop_times.txt",
                "stops.txt",
                "trips.txt",
            ],
            sorted(os.listdir(output)),
        )
        with open(os.path.join(output, "stops.txt"), encoding="utf-8") as f:
            lines = f.read().splitlines()
        self.assertEqual(
            "stop_id,stop_name,stop_code,stop_lat,stop_lon,location_type,"
            "parent_station,stop_timezone,equipment_id,platform_code,level_id",
            lines[0],
        )
        self.assertEqual(
            "SP1,Gare quai 1,,48.844800,2.373500,0,SA1,,,,", lines[3]
        )

    def testFilesOfAnEarlierWriteAreRemoved(self):
        output = os.path.join(self.tempdirpath, "output")
        rich = self.Load(self.WriteFeedDirectory("rich", RichNtfsFeed()))
        NtfsWriter().Write(rich, output)
        self.assertTrue(os.path.exists(os.path.join(output, "transfers.txt")))
        with open(os.path.join(output, "README"), "w") as f:
            f.write("not a feed file")
        model = self.Load(self.WriteFeedDirectory("feed", util.NTFS_FEED))
        NtfsWriter().Write(model, output)
        for name in ("transfers.txt", "comments.txt", "comment_links.txt"):
            self.assertFalse(os.path.exists(os.path.join(output, name)), name)
        self.assertTrue(os.path.exists(os.path.join(output, "README")))
        problems = util.GetTestFailureProblemReporter(
            self, ignore_types=("UnknownFile",)
        )
        reloaded = NtfsLoader(output, problems=problems).Load()
        self.assertEqual(model.GetStats(), reloaded.GetStats())

    def testWriteZipFile(self):
        model = self.Load(self.WriteFeedDirectory("feed", util.NTFS_FEED))
        output = os.path.join(self.tempdirpath, "output.zip")
        NtfsWriter().Write(model, output)
        reloaded = self.Load(output)
        self.assertEqual(model.GetStats(), reloaded.GetStats())

    def testFeedCreationInfos(self):
        model = self.Load(self.WriteFeedDirectory("feed", util.NTFS_FEED))
        output = BytesIO()
        NtfsWriter(
            current_datetime=datetime.datetime(2021, 3, 4, 5, 6, 7)
        ).Write(model, output)
        files = util.ReadZip(output)
        self.assertEqual(
            "feed_info_param,feed_info_value\r\n"
            "feed_creation_date,20210304\r\n"
            "feed_creation_time,05:06:07\r\n",
            files["feed_infos.txt"],
        )
        self.assertFalse("feed_creation_date" in model.feed_infos)

    def testSimpleCollections(self):
        model = Model(util.SimpleCollections())
        output = BytesIO()
        NtfsWriter().Write(model, output)
        files = util.ReadZip(output)
        self.assertEqual(
            "from_stop_id,to_stop_id,min_transfer_time,real_min_transfer_time,"
            "equipment_id\r\n"
            "SP1,SP2,120,,\r\n"
            "SP2,SP3,60,,\r\n",
            files["transfers.txt"],
        )
        self.assertEqual(
            "trip_id,arrival_time,departure_time,stop_id,stop_sequence,"
            "pickup_type,drop_off_type,stop_headsign\r\n"
            "VJ1,09:00:00,09:00:00,SP1,0,0,0,\r\n"
            "VJ1,09:10:00,09:10:00,SP2,1,0,0,\r\n"
            "VJ2,10:00:00,10:00:00,SP2,0,0,0,\r\n"
            "VJ2,10:10:00,10:10:00,SP3,1,0,0,\r\n",
            files["stop_times.txt"],
        )
