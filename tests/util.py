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

# Code shared between tests.


import datetime
import os
import os.path
import re
import shutil
import subprocess
import sys
import tempfile
import traceback
import unittest
import zipfile
from io import BytesIO

import transitmodel
from transitmodel import (
    Calendar,
    Collections,
    CommercialMode,
    Company,
    Contributor,
    Dataset,
    Line,
    Network,
    PhysicalMode,
    Route,
    StopArea,
    StopPoint,
    StopTime,
    Transfer,
    VehicleJourney,
)


def check_call(cmd, expected_retcode=0, stdin_str="", **kwargs):
    """Convenience function that is in the docs for subprocess but not
    installed on my system. Raises an Exception if the return code is not
    expected_retcode. Returns a tuple of strings, (stdout, stderr)."""
    try:
        if "stdout" in kwargs or "stderr" in kwargs or "stdin" in kwargs:
            raise Exception("Don't pass stdout or stderr")

        # On Windows the environment of the child must keep SystemRoot, which
        # os.urandom() needs.
        if "SystemRoot" in os.environ:
            if "env" in kwargs:
                kwargs["env"].setdefault(
                    "SystemRoot", os.environ["SystemRoot"]
                )

        p = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.PIPE,
            **kwargs
        )
        (out, err) = p.communicate(stdin_str.encode("utf-8"))
        retcode = p.returncode
    except Exception as e:
        raise Exception("When running %s: %s" % (cmd, e))
    if retcode < 0:
        raise Exception(
            "Child '%s' was terminated by signal %d. Output:\n%s\n%s\n"
            % (cmd, -retcode, out, err)
        )
    elif retcode != expected_retcode:
        raise Exception(
            "Child '%s' returned %d. Output:\n%s\n%s\n"
            % (cmd, retcode, out, err)
        )
    return (out.decode("utf-8"), err.decode("utf-8"))


class TestCase(unittest.TestCase):
    """Base of every TestCase class in this project.

    This adds some methods that perhaps should be in unittest.TestCase.
    """

    def assertMatchesRegex(self, regex, string):
        """Assert that regex is found in string."""
        if not re.search(regex, string):
            self.fail("string %r did not match regex %r" % (string, regex))


class GetPathTestCase(TestCase):
    """TestCase with method to get paths to files in the distribution."""

    def setUp(self):
        super(GetPathTestCase, self).setUp()
        self._origcwd = os.getcwd()

    def GetPath(self, *path):
        """Return absolute path of path. path is relative main source directory."""
        here = os.path.dirname(__file__)  # Relative to _origcwd
        return os.path.join(self._origcwd, here, "..", *path)


class TempDirTestCaseBase(GetPathTestCase):
    """Make a temporary directory the current directory before running the test
    and remove it after the test.
    """

    def setUp(self):
        GetPathTestCase.setUp(self)
        self.tempdirpath = tempfile.mkdtemp()
        os.chdir(self.tempdirpath)

    def tearDown(self):
        os.chdir(self._origcwd)
        shutil.rmtree(self.tempdirpath)
        GetPathTestCase.tearDown(self)

    def CheckCallWithPath(self, cmd, expected_retcode=0, stdin_str=""):
        """Run python script cmd[0] with args cmd[1:], making sure 'import
        transitmodel' will use the package in this source tree. Raises an
        Exception if the return code is not expected_retcode. Returns a tuple of
        strings, (stdout, stderr)."""
        package_path = os.path.dirname(transitmodel.__file__)
        # Directory containing the transitmodel package
        package_parent = os.path.dirname(package_path).replace("\\", "/")
        script_path = cmd[0].replace("\\", "/")
        script_args = cmd[1:]

        # Propagate sys.path of this process to the subprocess, so that the
        # libraries found by the tests are found by the scripts too.
        env = {"PYTHONPATH": os.pathsep.join(sys.path)}

        # Instead of directly running the script make sure that the transitmodel
        # package in this source directory is at the front of sys.path. Then
        # adjust sys.argv so it looks like the script was run directly. This lets
        # OptionParser use the correct value for %prog.
        cmd = [
            sys.executable,
            "-c",
            "import sys; "
            "sys.path.insert(0,'%s'); "
            "sys.argv = ['%s'] + sys.argv[1:]; "
            "exec(open('%s').read())"
            % (package_parent, script_path, script_path),
        ] + script_args
        return check_call(
            cmd,
            expected_retcode=expected_retcode,
            shell=False,
            env=env,
            stdin_str=stdin_str,
        )

    def WriteFeedDirectory(self, name, contents):
        """Write a dict mapping file names to strings as a feed directory and
        return its path."""
        path = os.path.join(self.tempdirpath, name)
        os.mkdir(path)
        for file_name, text in contents.items():
            with open(os.path.join(path, file_name), "w", encoding="utf-8") as f:
                f.write(text)
        return path


GTFS_FEED = {
    "agency.txt": "agency_id,agency_name,agency_url,agency_timezone\n"
    "DTA,Demo Agency,http://google.com,America/Los_Angeles\n",
    "calendar.txt": "service_id,monday,tuesday,wednesday,thursday,friday,"
    "saturday,sunday,start_date,end_date\n"
    "FULLW,1,1,1,1,1,1,1,20070101,20071231\n"
    "WE,0,0,0,0,0,1,1,20070101,20071231\n",
    "calendar_dates.txt": "service_id,date,exception_type\n"
    "FULLW,20070101,2\n",
    "routes.txt": "route_id,agency_id,route_short_name,route_long_name,"
    "route_type\n"
    "AB,DTA,,Airport Bullfrog,3\n",
    "trips.txt": "route_id,service_id,trip_id\n" "AB,FULLW,AB1\n",
    "stops.txt": "stop_id,stop_name,stop_lat,stop_lon\n"
    "BEATTY_AIRPORT,Airport,36.868446,-116.784582\n"
    "BULLFROG,Bullfrog,36.88108,-116.81797\n"
    "STAGECOACH,Stagecoach Hotel,36.915682,-116.751677\n",
    "stop_times.txt": "trip_id,arrival_time,departure_time,stop_id,"
    "stop_sequence\n"
    "AB1,10:00:00,10:00:00,BEATTY_AIRPORT,1\n"
    "AB1,10:20:00,10:20:00,BULLFROG,2\n"
    "AB1,10:25:00,10:25:00,STAGECOACH,3\n",
}

NTFS_FEED = {
    "contributors.txt": "contributor_id,contributor_name\n" "TG,Test Group\n",
    "datasets.txt": "dataset_id,contributor_id,dataset_start_date,"
    "dataset_end_date\n"
    "TG-1,TG,20200101,20200131\n",
    "networks.txt": "network_id,network_name,network_timezone\n"
    "N1,Network 1,Europe/Paris\n",
    "commercial_modes.txt": "commercial_mode_id,commercial_mode_name\n"
    "Bus,Bus\n",
    "physical_modes.txt": "physical_mode_id,physical_mode_name\n" "Bus,Bus\n",
    "companies.txt": "company_id,company_name\n" "CO1,Company 1\n",
    "lines.txt": "line_id,line_code,line_name,network_id,commercial_mode_id\n"
    "L1,1,Line 1,N1,Bus\n",
    "routes.txt": "route_id,route_name,direction_type,line_id\n"
    "R1,Route 1,forward,L1\n",
    "calendar.txt": "service_id,monday,tuesday,wednesday,thursday,friday,"
    "saturday,sunday,start_date,end_date\n"
    "S1,1,1,1,1,1,0,0,20200101,20200131\n",
    "trips.txt": "route_id,service_id,trip_id,company_id,physical_mode_id,"
    "dataset_id\n"
    "R1,S1,VJ1,CO1,Bus,TG-1\n",
    "stops.txt": "stop_id,stop_name,stop_lat,stop_lon,location_type,"
    "parent_station\n"
    "SA1,Gare,48.844700,2.373400,1,\n"
    "SA2,Bastille,48.853100,2.369100,1,\n"
    "SP1,Gare quai 1,48.844800,2.373500,0,SA1\n"
    "SP2,Bastille quai 1,48.853200,2.369200,0,SA2\n",
    "stop_times.txt": "trip_id,arrival_time,departure_time,stop_id,"
    "stop_sequence\n"
    "VJ1,08:00:00,08:01:00,SP1,0\n"
    "VJ1,08:10:00,08:11:00,SP2,1\n",
}


class MemoryZipTestCase(TestCase):
    """Base for TestCase classes which read from an in-memory zip file.

    A test that loads data from this zip file exercises almost all the code used
    when a feed is converted, but does not touch disk. Subclasses set
    _LOADER_CLASS and _FEED_CONTENTS to the reader and the default files of
    the schema they test."""

    _IGNORE_TYPES = []
    _LOADER_CLASS = transitmodel.GtfsLoader
    _FEED_CONTENTS = GTFS_FEED

    def setUp(self):
        self.accumulator = RecordingProblemAccumulator(
            self, self._IGNORE_TYPES
        )
        self.problems = transitmodel.ProblemReporter(self.accumulator)
        self.zip_contents = dict(self._FEED_CONTENTS)

    def tearDown(self):
        self.accumulator.TearDownAssertNoMoreExceptions()

    def MakeLoaderAndLoad(self, problems=None, **kwargs):
        """Returns a Model loaded with the contents of the file dict."""
        if problems is None:
            problems = self.problems
        self.CreateZip()
        self.loader = self._LOADER_CLASS(
            problems=problems, zip=self.zip, **kwargs
        )
        return self.loader.Load()

    def AppendToArchiveContents(self, arcname, s):
        """Append string s to file arcname in the file dict.

        All calls to this function, if any, should be made before calling
        MakeLoaderAndLoad."""
        current_contents = self.zip_contents[arcname]
        self.zip_contents[arcname] = current_contents + s

    def SetArchiveContents(self, arcname, contents):
        """Set the contents of file arcname in the file dict.

        All calls to this function, if any, should be made before calling
        MakeLoaderAndLoad."""
        self.zip_contents[arcname] = contents

    def RemoveArchive(self, arcname):
        """Remove file arcname from the file dict.

        All calls to this function, if any, should be made before calling
        MakeLoaderAndLoad."""
        del self.zip_contents[arcname]

    def CreateZip(self):
        """Create an in-memory zipfile from the contents of the file dict."""
        self.zipfile = BytesIO()
        self.zip = zipfile.ZipFile(self.zipfile, "a")
        for (arcname, contents) in list(self.zip_contents.items()):
            self.zip.writestr(arcname, contents)


def ReadZip(data):
    """Return a dict mapping the file names of a zip archive, given as a
    BytesIO, to their text."""
    data.seek(0)
    with zipfile.ZipFile(data) as archive:
        return dict(
            (name, archive.read(name).decode("utf-8"))
            for name in archive.namelist()
        )


def SimpleCollections():
    """Return Collections that make a valid Model without problems.

    Two lines each run one vehicle journey in January 2020: VJ1 on line L1
    from SP1 to SP2 from the 1st to the 10th, VJ2 on line L2 from SP2 to SP3
    from the 20th to the 31st."""
    c = Collections()
    c.contributors.Push(Contributor(id="C1", name="Contributor"))
    c.datasets.Push(
        Dataset(
            id="D1",
            contributor_id="C1",
            start_date=datetime.date(2020, 1, 1),
            end_date=datetime.date(2020, 1, 31),
        )
    )
    c.networks.Push(
        Network(id="N1", name="Network", timezone="Europe/Paris")
    )
    c.commercial_modes.Push(CommercialMode(id="Bus", name="Bus"))
    c.physical_modes.Push(PhysicalMode(id="Bus", name="Bus"))
    c.companies.Push(Company(id="CO1", name="Company"))
    early = Calendar(id="EARLY")
    late = Calendar(id="LATE")
    for day in range(1, 32):
        date = datetime.date(2020, 1, day)
        if day <= 10:
            early.SetDateHasService(date)
        elif day >= 20:
            late.SetDateHasService(date)
    c.calendars.Push(early)
    c.calendars.Push(late)
    c.stop_areas.Push(StopArea(id="SA1", name="Gare", lat=48.8447, lon=2.3734))
    c.stop_areas.Push(
        StopArea(id="SA2", name="Bastille", lat=48.8531, lon=2.3691)
    )
    c.stop_areas.Push(
        StopArea(id="SA3", name="Nation", lat=48.8484, lon=2.3957)
    )
    for n in (1, 2, 3):
        c.stop_points.Push(
            StopPoint(
                id="SP%d" % n,
                name="Quay %d" % n,
                lat=48.84 + n / 100.0,
                lon=2.37 + n / 100.0,
                stop_area_id="SA%d" % n,
            )
        )
    for n in (1, 2):
        c.lines.Push(
            Line(
                id="L%d" % n,
                code="%d" % n,
                name="Line %d" % n,
                network_id="N1",
                commercial_mode_id="Bus",
            )
        )
        c.routes.Push(
            Route(
                id="R%d" % n,
                name="Route %d" % n,
                direction_type="forward",
                line_id="L%d" % n,
            )
        )
    for n, service_id, first_stop in ((1, "EARLY", 1), (2, "LATE", 2)):
        vehicle_journey = VehicleJourney(
            id="VJ%d" % n,
            route_id="R%d" % n,
            service_id=service_id,
            company_id="CO1",
            physical_mode_id="Bus",
            dataset_id="D1",
            headsign="To SA%d" % (first_stop + 1),
        )
        for sequence in (0, 1):
            time = 8 * 3600 + n * 3600 + sequence * 600
            vehicle_journey.AddStopTime(
                StopTime(
                    stop_point_id="SP%d" % (first_stop + sequence),
                    sequence=sequence,
                    arrival_time=time,
                    departure_time=time,
                    pickup_type=0,
                    drop_off_type=0,
                )
            )
        c.vehicle_journeys.Push(vehicle_journey)
    c.transfers.Push(
        Transfer(from_stop_id="SP1", to_stop_id="SP2", min_transfer_time=120)
    )
    c.transfers.Push(
        Transfer(from_stop_id="SP2", to_stop_id="SP3", min_transfer_time=60)
    )
    return c


class RecordingProblemAccumulator(transitmodel.ProblemAccumulatorInterface):
    """Save all problems for later inspection.

    Args:
      test_case: a unittest.TestCase object on which to report problems
      ignore_types: sequence of string type names that will be ignored by the
      ProblemAccumulator"""

    def __init__(self, test_case, ignore_types=None):
        self.exceptions = []
        self._test_case = test_case
        self._ignore_types = ignore_types or set()
        self._sorted = False

    def _Report(self, e):
        # Ensure that these don't crash
        e.FormatProblem()
        e.FormatContext()
        if e.__class__.__name__ in self._ignore_types:
            return
        # Keep the 7 nearest stack frames. This should be enough to identify
        # the code path that created the exception while trimming off most of the
        # large test framework's stack.
        traceback_list = traceback.format_list(
            traceback.extract_stack()[-7:-1]
        )
        self.exceptions.append((e, "".join(traceback_list)))

    def PopException(self, type_name):
        """Return the first exception, which must be a type_name."""
        if not self._sorted:
            self._SortExceptionGroups()
            self._sorted = True
        self._test_case.assertTrue(
            self.exceptions, "expected a %s, no problem left" % type_name
        )
        e = self.exceptions.pop(0)
        e_name = e[0].__class__.__name__
        self._test_case.assertEqual(
            e_name,
            type_name,
            "%s != %s\n%s" % (e_name, type_name, self.FormatException(*e)),
        )
        return e[0]

    def FormatException(self, exce, tb):
        return "%s\nwith file context %s\nand traceback\n%s" % (
            exce.FormatProblem(),
            exce.FormatContext(),
            tb,
        )

    def TearDownAssertNoMoreExceptions(self):
        """Assert that there are no unexpected problems left after a test has run.

           This function should be called on a test's tearDown. For more information
           please see AssertNoMoreExceptions"""
        assert (
            len(self.exceptions) == 0
        ), "see util.RecordingProblemAccumulator.AssertNoMoreExceptions"

    def AssertNoMoreExceptions(self):
        """Check that no unexpected problems were reported.

        Every test that uses a RecordingProblemAccumulator should end with a
        call to this method. If setUp creates a RecordingProblemAccumulator it
        is good for tearDown to double check that the exceptions list was
        emptied.
        """
        exceptions_as_text = []
        for e, tb in self.exceptions:
            exceptions_as_text.append(self.FormatException(e, tb))
        # If the assertFalse below fails the test will abort and tearDown is
        # called, which must not fail again on the same problems.
        self.exceptions = []
        self._test_case.assertFalse(
            exceptions_as_text, "\n".join(exceptions_as_text)
        )

    def PopColumnSpecificException(
        self, type_name, column_name, file_name=None
    ):
        """Pops and validates column-specific exceptions from the accumulator.

        Asserts that the exception is of the given type, and originated in the
        specified file and column.

        Arguments:
            type_name: the type of the exception as string, e.g. 'InvalidValue'
            column_name: the name of the field (column) which caused the exception
            file_name: optional, the name of the file containing the bad field

        Returns:
            the exception object
        """
        e = self.PopException(type_name)
        self._test_case.assertEqual(column_name, e.column_name)
        if file_name:
            self._test_case.assertEqual(file_name, e.file_name)
        return e

    def PopInvalidValue(self, column_name, file_name=None):
        return self.PopColumnSpecificException(
            "InvalidValue", column_name, file_name
        )

    def PopMissingValue(self, column_name, file_name=None):
        return self.PopColumnSpecificException(
            "MissingValue", column_name, file_name
        )

    def PopUnresolvedReference(self, column_name, file_name=None):
        return self.PopColumnSpecificException(
            "UnresolvedReference", column_name, file_name
        )

    def _SortExceptionGroups(self):
        """Applies a consistent order to exceptions for repeatable testing.

        Exceptions are only sorted when multiple exceptions of the same type appear
        consecutively within the full exception list.  For example, if the exception
        list is ['B2', 'B1', 'A2', 'A1', 'A3', 'B3'], where A B and C are distinct
        exception types, the resulting order is ['B1', 'B2', 'A1', 'A2', 'A3', 'B3']
        Notice the order of exception types does not change, but grouped exceptions
        of the same type are sorted within their group.

        The ExceptionWithContext.GetOrderKey method id used for generating the sort
        key for exceptions.
        """
        sorted_exceptions = []
        exception_group = []
        current_exception_type = None

        def ProcessExceptionGroup():
            exception_group.sort(key=lambda x: x[0].GetOrderKey())
            sorted_exceptions.extend(exception_group)

        for e_tuple in self.exceptions:
            e = e_tuple[0]
            if e.__class__ != current_exception_type:
                current_exception_type = e.__class__
                ProcessExceptionGroup()
                exception_group = []
            exception_group.append(e_tuple)
        ProcessExceptionGroup()
        self.exceptions = sorted_exceptions


class TestFailureProblemAccumulator(transitmodel.ProblemAccumulatorInterface):
    """Causes a test failure immediately on any problem."""

    def __init__(self, test_case, ignore_types=()):
        self.test_case = test_case
        self._ignore_types = ignore_types or set()

    def _Report(self, e):
        # These should never crash
        formatted_problem = e.FormatProblem()
        formatted_context = e.FormatContext()
        exception_class = e.__class__.__name__
        if exception_class in self._ignore_types:
            return
        self.test_case.fail(
            "%s: %s\n%s"
            % (exception_class, formatted_problem, formatted_context)
        )


def GetTestFailureProblemReporter(test_case, ignore_types=()):
    accumulator = TestFailureProblemAccumulator(test_case, ignore_types)
    problems = transitmodel.ProblemReporter(accumulator)
    return problems
