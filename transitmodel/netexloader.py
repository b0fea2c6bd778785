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

"""Reader of NeTEx France, the French profile of the NeTEx XML schema.

A NeTEx France export is a directory or zip archive of four documents:

  arrets.xml       StopPlace and Quay
  lignes.xml       Network, Operator and Line
  calendriers.xml  DayType, UicOperatingPeriod and DayTypeAssignment
  offre.xml        Route, ScheduledStopPoint, PassengerStopAssignment,
                   ServiceJourneyPattern and ServiceJourney

Identifiers look like "FR:Quay:1234:" or "FR:Quay:1234:LOC"; only the 1234
part is kept. Positions are read in the frame named by the srsName attribute
of gml:pos, Lambert 93 by default, and converted to WGS84.
"""

import datetime
import logging
import re
import xml.etree.ElementTree as ET

from . import config as config_module
from . import mode
from . import projection
from . import util
from .calendar import Calendar
from .errors import ContainerError, TYPE_WARNING
from .line import Line
from .loader import Loader
from .network import Company, Network
from .route import Route
from .stop import StopArea, StopPoint
from .trip import StopTime, VehicleJourney

log = logging.getLogger(__name__)

SCHEMA = "NeTEx France"

NETEX_NS = "http://www.netex.org.uk/netex"
GML_NS = "http://www.opengis.net/gml/3.2"

STOPS_DOCUMENT = "arrets.xml"
LINES_DOCUMENT = "lignes.xml"
CALENDARS_DOCUMENT = "calendriers.xml"
OFFER_DOCUMENT = "offre.xml"

DEFAULT_FRAME = projection.LAMBERT_93

# keyList keys keeping the modes of the Model
COMMERCIAL_MODE_KEY = "CommercialMode"
PHYSICAL_MODE_KEY = "PhysicalMode"

DIRECTION_TYPES = {
    Route.DIRECTION_FORWARD: "outbound",
    Route.DIRECTION_BACKWARD: "inbound",
}

SECONDS_PER_DAY = 24 * 3600

_ID_RE = re.compile(r"^FR:(?P<type>[^:]+):(?P<id>.*):(?P<codespace>[^:]*)$")


def Tag(name, namespace=NETEX_NS):
    """Return the ElementTree name of a NeTEx or gml element."""
    return "{%s}%s" % (namespace, name)


def MakeId(object_type, object_id):
    return "FR:%s:%s:" % (object_type, object_id)


def ParseId(netex_id):
    """Return the object identifier inside a NeTEx identifier.

  Identifiers that do not follow the French profile are kept whole.
  """
    m = _ID_RE.match(netex_id or "")
    if not m:
        return netex_id
    return m.group("id")


def ParseDateTime(text):
    """Parse the date of an xsd:dateTime such as "2019-05-01T00:00:00"."""
    return datetime.datetime.strptime(text.strip()[:10], "%Y-%m-%d").date()


def _Text(element, path):
    """Return the stripped text of the sub element at path, or None."""
    child = element.find(path)
    if child is None or child.text is None or not child.text.strip():
        return None
    return child.text.strip()


def _Ref(element, path):
    child = element.find(path)
    if child is None or not child.get("ref"):
        return None
    return ParseId(child.get("ref"))


def _Path(*names):
    return "/".join(Tag(name) for name in names)


def GetKeyValues(element):
    """Return the keyList of element as a dict."""
    result = {}
    for key_value in element.findall(_Path("keyList", "KeyValue")):
        key = _Text(key_value, Tag("Key"))
        if key is not None:
            result[key] = _Text(key_value, Tag("Value"))
    return result


class NetexLoader(Loader):
    """Reads a NeTEx France directory or zip archive into a Model.

  NeTEx France does not describe transfers, equipments, geometries,
  comments or trip properties; those collections stay empty.

  Args:
    feed_path: string path to a zip file or directory
    problems: a ProblemReporter object, the default reporter logs each problem
    zip: a zipfile.ZipFile object, optionally used instead of path
    config: a config.Config giving the contributor, the dataset and extra
      feed infos; defaults are used when None
    prefix: when set, every identifier is prefixed with "prefix:"
  """

    SCHEMA = SCHEMA
    _FILE_MAPPING = {
        STOPS_DOCUMENT: {"required": True},
        LINES_DOCUMENT: {"required": True},
        CALENDARS_DOCUMENT: {"required": True},
        OFFER_DOCUMENT: {"required": True},
    }

    def __init__(
        self, feed_path=None, problems=None, zip=None, config=None, prefix=None
    ):
        Loader.__init__(self, feed_path, problems, zip, prefix)
        self._config = config or config_module.Config()
        self._line_physical_modes = {}

    def _LoadCollections(self, collections):
        contributor = self._config.MakeContributor()
        collections.contributors.Push(contributor)
        dataset = self._config.MakeDataset(contributor.id)
        collections.datasets.Push(dataset)
        self._dataset_id = dataset.id
        collections.feed_infos.update(self._config.feed_infos)

        self._LoadStops(collections, self._ReadDocument(STOPS_DOCUMENT))
        self._LoadLines(collections, self._ReadDocument(LINES_DOCUMENT))
        self._LoadCalendars(
            collections, self._ReadDocument(CALENDARS_DOCUMENT)
        )
        self._LoadOffer(collections, self._ReadDocument(OFFER_DOCUMENT))

    def _Finalize(self, collections):
        self._SetDatasetPeriods(collections)

    def _ReadDocument(self, document):
        """Return the root element of document.

    Raises:
      ContainerError: the document is not well formed XML
    """
        contents = self._container.Read(document)
        log.info("Reading %s", document)
        try:
            return ET.fromstring(contents)
        except ET.ParseError as e:
            raise ContainerError(document, "not well formed XML (%s)" % e)

    def _Skip(self, document, element, reason):
        """Report an element that is not used."""
        self._problems.OtherProblem(
            "%s %s is ignored: %s"
            % (
                element.tag.replace("{%s}" % NETEX_NS, ""),
                element.get("id") or "without id",
                reason,
            ),
            context=(document,),
        )

    def _Elements(self, document, root, name):
        """Yield (object id, element) for the elements called name, skipping
    the ones without id."""
        for element in root.iter(Tag(name)):
            if not element.get("id"):
                self._Skip(document, element, "it has no id attribute")
                continue
            yield ParseId(element.get("id")), element

    def _SetContext(self, obj, document):
        obj.SetContext((document, None, None, None))

    def _ReadPosition(self, document, element):
        """Return the WGS84 (lon, lat) of the gml:pos of element, or None after
    reporting why there is none.

    Raises:
      ProjectionError: the frame of the position is unknown
    """
        pos = element.find(".//" + Tag("pos", GML_NS))
        if pos is None or not (pos.text or "").strip():
            self._Skip(document, element, "it has no gml:pos")
            return None
        try:
            x, y = [float(v) for v in pos.text.split()]
        except ValueError:
            self._Skip(
                document, element, 'position "%s" is not valid' % pos.text
            )
            return None
        frame = pos.get("srsName") or DEFAULT_FRAME
        return projection.Project((x, y), frame, projection.WGS84)

    def _LoadStops(self, collections, root):
        for stop_id, element in self._Elements(STOPS_DOCUMENT, root, "StopPlace"):
            position = self._ReadPosition(STOPS_DOCUMENT, element)
            if position is None:
                continue
            stop_area = StopArea(
                id=stop_id,
                name=_Text(element, Tag("Name")) or "",
                code=_Text(element, Tag("PrivateCode")),
                lon=position[0],
                lat=position[1],
            )
            self._SetContext(stop_area, STOPS_DOCUMENT)
            self._Push(collections.stop_areas, stop_area)

        for stop_id, element in self._Elements(STOPS_DOCUMENT, root, "Quay"):
            position = self._ReadPosition(STOPS_DOCUMENT, element)
            if position is None:
                continue
            stop_point = StopPoint(
                id=stop_id,
                name=_Text(element, Tag("Name")) or "",
                code=_Text(element, Tag("PrivateCode")),
                lon=position[0],
                lat=position[1],
                stop_area_id=_Ref(element, Tag("ParentZoneRef")),
                platform_code=_Text(element, Tag("PublicCode")),
            )
            self._SetContext(stop_point, STOPS_DOCUMENT)
            self._Push(collections.stop_points, stop_point)

    def _LoadLines(self, collections, root):
        timezone = _Text(
            root, ".//" + _Path("FrameDefaults", "DefaultLocale", "TimeZone")
        )
        if util.ValidateTimezone(timezone, "TimeZone", self._problems):
            timezone = None

        for network_id, element in self._Elements(
            LINES_DOCUMENT, root, "Network"
        ):
            network = Network(
                id=network_id,
                name=_Text(element, Tag("Name")) or network_id,
                timezone=timezone,
            )
            self._SetContext(network, LINES_DOCUMENT)
            self._Push(collections.networks, network)

        for company_id, element in self._Elements(
            LINES_DOCUMENT, root, "Operator"
        ):
            company = Company(
                id=company_id,
                name=_Text(element, Tag("Name")) or company_id,
                mail=_Text(element, _Path("ContactDetails", "Email")),
                phone=_Text(element, _Path("ContactDetails", "Phone")),
                url=_Text(element, _Path("ContactDetails", "Url")),
            )
            self._SetContext(company, LINES_DOCUMENT)
            self._Push(collections.companies, company)

        for line_id, element in self._Elements(LINES_DOCUMENT, root, "Line"):
            name = _Text(element, Tag("Name"))
            if name is None:
                self._Skip(LINES_DOCUMENT, element, "it has no Name")
                continue
            keys = GetKeyValues(element)
            physical_mode_id = keys.get(
                PHYSICAL_MODE_KEY
            ) or mode.PhysicalModeFromNetexMode(
                _Text(element, Tag("TransportMode"))
            )
            commercial_mode_id = keys.get(COMMERCIAL_MODE_KEY) or physical_mode_id
            if not collections.physical_modes.Contains(physical_mode_id):
                collections.physical_modes.Push(
                    mode.MakePhysicalMode(physical_mode_id)
                )
            if not collections.commercial_modes.Contains(commercial_mode_id):
                collections.commercial_modes.Push(
                    mode.MakeCommercialMode(commercial_mode_id)
                )
            line = Line(
                id=line_id,
                name=name,
                code=_Text(element, Tag("PublicCode")),
                network_id=_Ref(element, Tag("RepresentedByGroupRef")),
                commercial_mode_id=commercial_mode_id,
                color=self._ReadColor(element, "Colour"),
                text_color=self._ReadColor(element, "TextColour"),
            )
            self._SetContext(line, LINES_DOCUMENT)
            self._Push(collections.lines, line)
            self._line_physical_modes[line_id] = physical_mode_id

    def _ReadColor(self, element, name):
        color = _Text(element, _Path("Presentation", name))
        if color is None:
            return None
        if not util.IsValidColor(color):
            self._problems.InvalidValue(
                name,
                color,
                "Line %s: a color is 6 hexadecimal digits; it is ignored"
                % element.get("id"),
                context=(LINES_DOCUMENT,),
                type=TYPE_WARNING,
            )
            return None
        return color.upper()

    def _LoadCalendars(self, collections, root):
        periods = {}
        for period_id, element in self._Elements(
            CALENDARS_DOCUMENT, root, "UicOperatingPeriod"
        ):
            try:
                start_date = ParseDateTime(_Text(element, Tag("FromDate")) or "")
            except ValueError:
                self._Skip(CALENDARS_DOCUMENT, element, "FromDate is not valid")
                continue
            bits = _Text(element, Tag("ValidDayBits")) or ""
            if not re.match("^[01]*$", bits):
                self._Skip(
                    CALENDARS_DOCUMENT, element, "ValidDayBits is not valid"
                )
                continue
            periods[period_id] = set(
                start_date + datetime.timedelta(days=i)
                for i, bit in enumerate(bits)
                if bit == "1"
            )

        for calendar_id, element in self._Elements(
            CALENDARS_DOCUMENT, root, "DayType"
        ):
            calendar = Calendar(id=calendar_id)
            self._SetContext(calendar, CALENDARS_DOCUMENT)
            self._Push(collections.calendars, calendar)

        for _, element in self._Elements(
            CALENDARS_DOCUMENT, root, "DayTypeAssignment"
        ):
            calendar = collections.calendars.GetById(
                _Ref(element, Tag("DayTypeRef"))
            )
            dates = periods.get(_Ref(element, Tag("OperatingPeriodRef")))
            if calendar is None or dates is None:
                self._Skip(
                    CALENDARS_DOCUMENT,
                    element,
                    "its DayTypeRef or OperatingPeriodRef does not exist",
                )
                continue
            calendar.dates.update(dates)

    def _ReadTime(self, element, kind):
        """Return the seconds since midnight of the ArrivalTime or DepartureTime
    of a passing time, counting its day offset, or None.

    Raises:
      ValueError: the time or the offset is not valid
    """
        text = _Text(element, Tag("%sTime" % kind))
        if text is None:
            return None
        offset = _Text(element, Tag("%sDayOffset" % kind)) or "0"
        return util.TimeToSecondsSinceMidnight(
            text
        ) + SECONDS_PER_DAY * util.NonNegIntStringToInt(offset)

    def _LoadOffer(self, collections, root):
        directions = dict((v, k) for k, v in DIRECTION_TYPES.items())
        for route_id, element in self._Elements(OFFER_DOCUMENT, root, "Route"):
            route = Route(
                id=route_id,
                name=_Text(element, Tag("Name")) or route_id,
                direction_type=directions.get(
                    _Text(element, Tag("DirectionType"))
                ),
                line_id=_Ref(element, Tag("LineRef")),
            )
            self._SetContext(route, OFFER_DOCUMENT)
            self._Push(collections.routes, route)

        # ScheduledStopPoint id to Quay id
        quays = {}
        for _, element in self._Elements(
            OFFER_DOCUMENT, root, "PassengerStopAssignment"
        ):
            scheduled_stop_point = _Ref(element, Tag("ScheduledStopPointRef"))
            quay = _Ref(element, Tag("QuayRef"))
            if scheduled_stop_point is None or quay is None:
                self._Skip(
                    OFFER_DOCUMENT,
                    element,
                    "it needs a ScheduledStopPointRef and a QuayRef",
                )
                continue
            quays[scheduled_stop_point] = quay

        patterns = {}
        for pattern_id, element in self._Elements(
            OFFER_DOCUMENT, root, "ServiceJourneyPattern"
        ):
            points = {}
            for point_id, point in self._Elements(
                OFFER_DOCUMENT, element, "StopPointInJourneyPattern"
            ):
                try:
                    order = util.NonNegIntStringToInt(point.get("order") or "")
                except ValueError:
                    self._Skip(OFFER_DOCUMENT, point, "its order is not valid")
                    continue
                scheduled_stop_point = _Ref(point, Tag("ScheduledStopPointRef"))
                points[point_id] = StopTime(
                    stop_point_id=quays.get(
                        scheduled_stop_point, scheduled_stop_point
                    ),
                    sequence=order,
                    pickup_type=_Text(point, Tag("ForBoarding")) == "false"
                    and 1
                    or 0,
                    drop_off_type=_Text(point, Tag("ForAlighting")) == "false"
                    and 1
                    or 0,
                )
            patterns[pattern_id] = (_Ref(element, Tag("RouteRef")), points)

        only_company_id = None
        if len(collections.companies) == 1:
            only_company_id = collections.companies.Ids()[0]
        for vehicle_journey_id, element in self._Elements(
            OFFER_DOCUMENT, root, "ServiceJourney"
        ):
            pattern_ref = _Ref(element, Tag("ServiceJourneyPatternRef"))
            if pattern_ref not in patterns:
                self._Skip(
                    OFFER_DOCUMENT,
                    element,
                    'ServiceJourneyPattern "%s" does not exist' % pattern_ref,
                )
                continue
            route_id, points = patterns[pattern_ref]
            vehicle_journey = VehicleJourney(
                id=vehicle_journey_id,
                route_id=route_id,
                service_id=_Ref(element, _Path("dayTypes", "DayTypeRef")),
                headsign=_Text(element, Tag("Name")),
                short_name=_Text(element, Tag("PublicCode")),
                company_id=_Ref(element, Tag("OperatorRef")) or only_company_id,
                physical_mode_id=self._GetPhysicalModeId(
                    collections, element, route_id
                ),
                dataset_id=self._dataset_id,
            )
            self._SetContext(vehicle_journey, OFFER_DOCUMENT)
            if self._ReadPassingTimes(element, points, vehicle_journey):
                self._Push(collections.vehicle_journeys, vehicle_journey)

    def _GetPhysicalModeId(self, collections, element, route_id):
        """Return the physical mode of a ServiceJourney: the one of its keyList,
    else the one of its line."""
        physical_mode_id = GetKeyValues(element).get(PHYSICAL_MODE_KEY)
        if physical_mode_id is None:
            route = collections.routes.GetById(route_id)
            physical_mode_id = self._line_physical_modes.get(
                route and route.line_id, mode.DEFAULT_MODE
            )
        if not collections.physical_modes.Contains(physical_mode_id):
            collections.physical_modes.Push(
                mode.MakePhysicalMode(physical_mode_id)
            )
        return physical_mode_id

    def _ReadPassingTimes(self, element, points, vehicle_journey):
        """Add the stop times of a ServiceJourney to vehicle_journey.

    Returns False when a passing time can not be used, after reporting it;
    the vehicle journey is then skipped.
    """
        for passing_time in element.iter(Tag("TimetabledPassingTime")):
            point = points.get(
                _Ref(passing_time, Tag("StopPointInJourneyPatternRef"))
            )
            if point is None:
                self._Skip(
                    OFFER_DOCUMENT,
                    element,
                    "a passing time references an unknown "
                    "StopPointInJourneyPattern",
                )
                return False
            try:
                arrival_time = self._ReadTime(passing_time, "Arrival")
                departure_time = self._ReadTime(passing_time, "Departure")
            except ValueError as e:
                self._Skip(OFFER_DOCUMENT, element, str(e))
                return False
            if arrival_time is None:
                arrival_time = departure_time
            if departure_time is None:
                departure_time = arrival_time
            if arrival_time is None:
                self._Skip(OFFER_DOCUMENT, element, "a passing time has no time")
                return False
            stop_time = point.Copy()
            stop_time.arrival_time = arrival_time
            stop_time.departure_time = departure_time
            stop_time.SetContext(vehicle_journey.GetContext())
            vehicle_journey.AddStopTime(stop_time)
        vehicle_journey.SortStopTimes()
        return True
