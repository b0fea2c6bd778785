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


# Smoke tests of the command line tools. Make sure they run and return the
# right things for a valid feed and for bad arguments.


import os.path
import zipfile

import transitmodel
from tests import util


class ScriptTestCaseBase(util.TempDirTestCaseBase):
    def Run(self, script, *args, **kwargs):
        return self.CheckCallWithPath(
            [self.GetPath(script)] + list(args), **kwargs
        )

    def AssertNoCrash(self):
        self.assertFalse(os.path.exists("transitmodelcrash.txt"))

    def ReadDirectory(self, path):
        """Return a dict mapping the file names of a directory to bytes."""
        contents = {}
        for name in os.listdir(path):
            with open(os.path.join(path, name), "rb") as f:
                contents[name] = f.read()
        return contents

    def ReadNtfs(self, path):
        return transitmodel.NtfsLoader(
            path, problems=util.GetTestFailureProblemReporter(self)
        ).Load()


class Gtfs2NtfsTestCase(ScriptTestCaseBase):
    def testConvert(self):
        gtfs = self.WriteFeedDirectory("gtfs", util.GTFS_FEED)
        config = os.path.join(self.tempdirpath, "config.json")
        with open(config, "w") as config_file:
            config_file.write('{"contributor": {"contributor_id": "DEMO"}}')
        (out, err) = self.Run(
            "gtfs2ntfs.py",
            "-i",
            gtfs,
            "-o",
            "ntfs",
            "-c",
            config,
            "-x",
            "2020-01-01T12:00:00",
        )
        self.assertMatchesRegex(r"gtfs2ntfs.py: \d+ errors?, \d+ warnings?", out)
        self.AssertNoCrash()
        model = self.ReadNtfs("ntfs")
        self.assertEqual(["DEMO"], model.contributors.Ids())
        self.assertEqual(["AB1"], model.vehicle_journeys.Ids())
        self.assertEqual("20200101", model.feed_infos["feed_creation_date"])

    def testMissingOutput(self):
        (out, err) = self.Run(
            "gtfs2ntfs.py", "-i", "gtfs", expected_retcode=2
        )
        self.assertMatchesRegex("You must provide an input and an output", err)

    def testBadInput(self):
        (out, err) = self.Run(
            "gtfs2ntfs.py", "-i", "missing", "-o", "ntfs", expected_retcode=1
        )
        self.assertMatchesRegex("gtfs2ntfs.py: ", err)
        self.AssertNoCrash()
        self.assertFalse(os.path.exists("ntfs"))


class Ntfs2GtfsTestCase(ScriptTestCaseBase):
    def testConvert(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        self.Run("ntfs2gtfs.py", "-i", ntfs, "-o", "gtfs.zip")
        self.AssertNoCrash()
        with zipfile.ZipFile("gtfs.zip") as archive:
            names = archive.namelist()
        for name in ("agency.txt", "stops.txt", "routes.txt", "trips.txt"):
            self.assertTrue(name in names, name)


class Ntfs2NtfsTestCase(ScriptTestCaseBase):
    def testMerge(self):
        first = self.WriteFeedDirectory("first", util.NTFS_FEED)
        second = self.WriteFeedDirectory("second", util.NTFS_FEED)
        # The same identifiers in both feeds
        self.Run(
            "ntfs2ntfs.py", "-i", first, "-i", second, "-o", "merged",
            expected_retcode=1,
        )
        self.AssertNoCrash()

    def testSingleInput(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        self.Run("ntfs2ntfs.py", "-i", ntfs, "-o", "copy", "-p", "P")
        model = self.ReadNtfs("copy")
        self.assertEqual(["P:VJ1"], model.vehicle_journeys.Ids())
        self.assertEqual(["Bus"], model.physical_modes.Ids())

    def testObjectRules(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        rules = os.path.join(self.tempdirpath, "rules.json")
        with open(rules, "w") as rules_file:
            rules_file.write(
                '{"networks": [{"properties": {"network_id": "ALL", '
                '"network_name": "All"}, "grouped_from": ["N1"]}]}'
            )
        self.Run(
            "ntfs2ntfs.py", "-i", ntfs, "-o", "grouped", "--object-rules", rules
        )
        self.AssertNoCrash()
        model = self.ReadNtfs("grouped")
        self.assertEqual(["ALL"], model.networks.Ids())
        self.assertEqual("ALL", model.lines.GetById("L1").network_id)

    def testBadObjectRules(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        rules = os.path.join(self.tempdirpath, "rules.json")
        with open(rules, "w") as rules_file:
            rules_file.write('{"networks": [{"properties": {}}]}')
        (out, err) = self.Run(
            "ntfs2ntfs.py", "-i", ntfs, "-o", "grouped", "--object-rules",
            rules, expected_retcode=1,
        )
        self.assertMatchesRegex(r'key "network_id" is required', err)
        self.AssertNoCrash()


class EnrichNtfsWithFaresTestCase(ScriptTestCaseBase):
    FARES = {
        "tickets.txt": "ticket_id,ticket_name\nT1,Single ride\n",
        "ticket_uses.txt": "ticket_use_id,ticket_id\nTU1,T1\n",
        "ticket_prices.txt": "ticket_id,ticket_price,ticket_currency,"
        "ticket_validity_start,ticket_validity_end\n"
        "T1,1.90,EUR,20200101,20201231\n",
        "ticket_use_perimeters.txt": "ticket_use_id,object_type,object_id,"
        "perimeter_action\n"
        "TU1,network,N1,1\n",
    }

    def testEnrich(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        fares = self.WriteFeedDirectory("fares", self.FARES)
        (out, err) = self.Run(
            "enrich_ntfs_with_farev2.py", "-i", ntfs, "--fares", fares,
            "-o", "enriched", "-x", "2020-01-01T12:00:00",
        )
        self.assertMatchesRegex(
            r"enrich_ntfs_with_farev2.py: \d+ errors?, \d+ warnings?", out
        )
        self.AssertNoCrash()
        model = self.ReadNtfs("enriched")
        self.assertEqual(["T1"], model.tickets.Ids())
        self.assertEqual(1, len(model.ticket_prices))
        self.assertEqual(
            ["TU1-network-N1"], [p.id for p in model.ticket_use_perimeters]
        )

    def testMissingFares(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        (out, err) = self.Run(
            "enrich_ntfs_with_farev2.py", "-i", ntfs, "-o", "enriched",
            expected_retcode=2,
        )
        self.assertMatchesRegex("You must provide an input feed, fares", err)

    def testMissingFareFile(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        fares = dict(self.FARES)
        del fares["ticket_uses.txt"]
        fares = self.WriteFeedDirectory("fares", fares)
        (out, err) = self.Run(
            "enrich_ntfs_with_farev2.py", "-i", ntfs, "-f", fares,
            "-o", "enriched", expected_retcode=1,
        )
        self.assertMatchesRegex("ticket_uses.txt", err)
        self.AssertNoCrash()
        self.assertFalse(os.path.exists("enriched"))


class NetexTestCase(ScriptTestCaseBase):
    def testNtfs2Netex(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        self.Run("ntfs2netexfr.py", "-i", ntfs, "-o", "netex.zip", "-p", "Test")
        self.AssertNoCrash()
        model = transitmodel.NetexLoader(
            "netex.zip", problems=util.GetTestFailureProblemReporter(self)
        ).Load()
        self.assertEqual(["SP1", "SP2"], model.stop_points.Ids())
        self.assertEqual(["VJ1"], model.vehicle_journeys.Ids())

    def testGtfs2Netex(self):
        gtfs = self.WriteFeedDirectory("gtfs", util.GTFS_FEED)
        self.Run("gtfs2netexfr.py", "-i", gtfs, "-o", "netex", "-p", "Test")
        self.AssertNoCrash()
        for name in ("arrets.xml", "lignes.xml", "calendriers.xml", "offre.xml"):
            self.assertTrue(os.path.exists(os.path.join("netex", name)), name)

    def testMissingParticipant(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        (out, err) = self.Run(
            "ntfs2netexfr.py", "-i", ntfs, "-o", "netex", expected_retcode=2
        )
        self.assertMatchesRegex("participant", err)


class RestrictValidityPeriodTestCase(ScriptTestCaseBase):
    def testRestrict(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        self.Run(
            "restrict_validity_period.py",
            "-i",
            ntfs,
            "-o",
            "restricted",
            "-s",
            "2020-01-06",
            "-e",
            "2020-01-10",
            "--orphans=remove",
        )
        self.AssertNoCrash()
        model = self.ReadNtfs("restricted")
        dates = model.calendars.GetById("S1").ActiveDates()
        self.assertEqual(5, len(dates))
        dataset = model.datasets.GetById("TG-1")
        self.assertEqual("2020-01-06", dataset.start_date.isoformat())
        self.assertEqual("2020-01-10", dataset.end_date.isoformat())

    def testMissingPolicy(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        (out, err) = self.Run(
            "restrict_validity_period.py",
            "-i",
            ntfs,
            "-o",
            "restricted",
            "-s",
            "2020-01-06",
            "-e",
            "2020-01-10",
            expected_retcode=2,
        )
        self.assertMatchesRegex("orphan policy", err)

    def testBadDate(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        (out, err) = self.Run(
            "restrict_validity_period.py",
            "-i",
            ntfs,
            "-o",
            "restricted",
            "-s",
            "06/01/2020",
            "-e",
            "2020-01-10",
            "--orphans=keep",
            expected_retcode=2,
        )
        self.assertMatchesRegex("YYYY-MM-DD", err)

    def testEndBeforeStart(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        (out, err) = self.Run(
            "restrict_validity_period.py",
            "-i",
            ntfs,
            "-o",
            "restricted",
            "-s",
            "2020-01-10",
            "-e",
            "2020-01-06",
            "--orphans=keep",
            expected_retcode=1,
        )
        self.assertMatchesRegex("before its start", err)


class RerunTestCase(ScriptTestCaseBase):
    """Running a tool twice with the same --current-datetime writes the same
    bytes."""

    CURRENT_DATETIME = "2020-01-01T12:00:00"

    def RunTwice(self, script, input_name, input_feed, *args):
        feed = self.WriteFeedDirectory(input_name, input_feed)
        outputs = []
        for output in ("first", "second"):
            self.Run(
                script,
                "-i",
                feed,
                "-o",
                output,
                "-x",
                self.CURRENT_DATETIME,
                *args
            )
            self.AssertNoCrash()
            outputs.append(self.ReadDirectory(output))
        self.assertEqual(outputs[0], outputs[1])
        return outputs[0]

    def testNtfs2Ntfs(self):
        output = self.RunTwice("ntfs2ntfs.py", "ntfs", util.NTFS_FEED)
        feed_infos = output["feed_infos.txt"].decode("utf-8")
        self.assertTrue("feed_creation_date,20200101" in feed_infos)
        self.assertTrue("feed_creation_time,12:00:00" in feed_infos)

    def testGtfs2Ntfs(self):
        output = self.RunTwice("gtfs2ntfs.py", "gtfs", util.GTFS_FEED)
        feed_infos = output["feed_infos.txt"].decode("utf-8")
        self.assertTrue("feed_creation_time,12:00:00" in feed_infos)

    def testRestrictValidityPeriod(self):
        output = self.RunTwice(
            "restrict_validity_period.py",
            "ntfs",
            util.NTFS_FEED,
            "-s",
            "2020-01-06",
            "-e",
            "2020-01-10",
            "--orphans=remove",
        )
        feed_infos = output["feed_infos.txt"].decode("utf-8")
        self.assertTrue("feed_creation_time,12:00:00" in feed_infos)

    def testNtfs2Netex(self):
        output = self.RunTwice(
            "ntfs2netexfr.py", "ntfs", util.NTFS_FEED, "-p", "Test"
        )
        self.assertTrue(b"2020-01-01T12:00:00Z" in output["offre.xml"])

    def testGtfs2Netex(self):
        output = self.RunTwice(
            "gtfs2netexfr.py", "gtfs", util.GTFS_FEED, "-p", "Test"
        )
        self.assertTrue(b"2020-01-01T12:00:00Z" in output["arrets.xml"])

    def testBadCurrentDatetime(self):
        ntfs = self.WriteFeedDirectory("ntfs", util.NTFS_FEED)
        (out, err) = self.Run(
            "ntfs2ntfs.py",
            "-i",
            ntfs,
            "-o",
            "copy",
            "-x",
            "2020-01-01",
            expected_retcode=2,
        )
        self.assertMatchesRegex("YYYY-MM-DDTHH:MM:SS", err)
