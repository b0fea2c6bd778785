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

"""Writer of NeTEx France exports.

Writes the four documents read by netexloader. Positions are converted from
WGS84 to the output frame, Lambert 93 by default. The documents carry no
transfers, equipments, geometries, comments, trip properties, levels,
pathways or tickets; a notice is reported for each of them that is not empty.
"""

import datetime
import logging
import xml.etree.ElementTree as ET

import pytz

from . import mode
from . import netexloader
from . import projection
from . import util
from .errors import ConstraintViolationError, TYPE_NOTICE
from .netexloader import (
    COMMERCIAL_MODE_KEY,
    GML_NS,
    MakeId,
    PHYSICAL_MODE_KEY,
    SECONDS_PER_DAY,
    Tag,
)
from .writer import FeedWriter

log = logging.getLogger(__name__)

NETEX_VERSION = "1.09:FR-NETEX-2.1-1.0"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

ET.register_namespace("", netexloader.NETEX_NS)
ET.register_namespace("gml", GML_NS)

# Collections NeTEx France has no place for
_UNWRITTEN_COLLECTIONS = [
    "transfers",
    "equipments",
    "geometries",
    "comments",
    "trip_properties",
    "levels",
    "pathways",
    "tickets",
]


def _SubElement(parent, name, text=None, **attributes):
    element = ET.SubElement(parent, Tag(name), attributes)
    if text is not None:
        element.text = "%s" % text
    return element


def _RefElement(parent, name, object_type, object_id):
    return ET.SubElement(
        parent, Tag(name), {"ref": MakeId(object_type, object_id)}
    )


def _FormatTime(seconds):
    """Return (HH:MM:SS, day offset) for seconds since midnight."""
    return (
        util.FormatSecondsSinceMidnight(seconds % SECONDS_PER_DAY),
        seconds // SECONDS_PER_DAY,
    )


def _FormatDateTime(date):
    return date.strftime("%Y-%m-%dT00:00:00")


class NetexWriter(FeedWriter):
    """Writes a Model as a NeTEx France directory or zip archive.

  Args:
    participant: the ParticipantRef of the documents, naming the producer
    problems: a ProblemReporter, the default reporter logs problems
    publication_timestamp: a datetime.datetime written as the
      PublicationTimestamp; now when None
    frame: name of the frame of the written positions
  """

    SCHEMA = netexloader.SCHEMA
    FILE_NAMES = sorted(netexloader.NetexLoader._FILE_MAPPING)

    def __init__(
        self,
        participant,
        problems=None,
        publication_timestamp=None,
        frame=projection.LAMBERT_93,
    ):
        FeedWriter.__init__(self, problems)
        self._participant = participant
        if publication_timestamp is None:
            publication_timestamp = datetime.datetime.now(pytz.utc)
        self._publication_timestamp = publication_timestamp
        self._frame = frame

    def CheckConstraints(self, model):
        for line_idx, line in model.lines.Iter():
            if not model.GetCorrespondingFromIdx("lines", line_idx, "routes"):
                raise ConstraintViolationError(
                    self.SCHEMA, "line %s has no route" % line.id
                )
        for vehicle_journey in model.vehicle_journeys:
            if len(vehicle_journey.stop_times) < 2:
                raise ConstraintViolationError(
                    self.SCHEMA,
                    "vehicle journey %s has less than two stop times"
                    % vehicle_journey.id,
                )

    def _WriteFiles(self, model, output):
        for name in _UNWRITTEN_COLLECTIONS:
            collection = model.GetCollection(name)
            if not collection.IsEmpty():
                self._problems.ConstraintRelaxed(
                    "NeTEx France has no %s; %d are not written"
                    % (name.replace("_", " "), len(collection)),
                    type=TYPE_NOTICE,
                )
        self._WriteDocument(
            output, netexloader.STOPS_DOCUMENT, self._BuildStops(model)
        )
        self._WriteDocument(
            output, netexloader.LINES_DOCUMENT, self._BuildLines(model)
        )
        self._WriteDocument(
            output,
            netexloader.CALENDARS_DOCUMENT,
            self._BuildCalendars(model),
        )
        self._WriteDocument(
            output, netexloader.OFFER_DOCUMENT, self._BuildOffer(model)
        )

    def _SetIndentation(self, elem, level=0):
        """Indent the ElementTree DOM so that documents are readable and
    diffable.

    Args:
      elem: The element to start indenting from, usually the document root.
      level: Current indentation level for recursion.
    """
        i = "\n" + level * "  "
        if len(elem):
            if not elem.text or not elem.text.strip():
                elem.text = i + "  "
            for elem in elem:
                self._SetIndentation(elem, level + 1)
            if not elem.tail or not elem.tail.strip():
                elem.tail = i
        else:
            if level and (not elem.tail or not elem.tail.strip()):
                elem.tail = i

    def _WriteDocument(self, output, document, root):
        self._SetIndentation(root)
        output.WriteString(
            document, XML_DECLARATION + ET.tostring(root, encoding="unicode")
        )
        log.debug("Wrote %s", document)

    def _NewDocument(self, frame_type):
        """Return the root and the GeneralFrame of a new document."""
        root = ET.Element(
            Tag("PublicationDelivery"), {"version": NETEX_VERSION}
        )
        _SubElement(
            root,
            "PublicationTimestamp",
            util.UtcTimestamp(self._publication_timestamp),
        )
        _SubElement(root, "ParticipantRef", self._participant)
        data_objects = _SubElement(root, "dataObjects")
        frame = _SubElement(
            data_objects,
            "GeneralFrame",
            id=MakeId("GeneralFrame", frame_type),
            version="any",
        )
        return root, frame

    def _AddPosition(self, parent, stop):
        if stop.lon is None or stop.lat is None:
            return
        x, y = projection.Project(
            stop.GetCoord(), projection.WGS84, self._frame
        )
        location = _SubElement(_SubElement(parent, "Centroid"), "Location")
        pos = ET.SubElement(
            location, Tag("pos", GML_NS), {"srsName": self._frame}
        )
        pos.text = "%s %s" % (util.FormatCoordinate(x), util.FormatCoordinate(y))

    def _BuildStops(self, model):
        root, frame = self._NewDocument("NETEX_ARRET")
        members = _SubElement(frame, "members")
        for stop_area in model.stop_areas:
            element = _SubElement(
                members,
                "StopPlace",
                id=MakeId("StopPlace", stop_area.id),
                version="any",
            )
            _SubElement(element, "Name", stop_area.name or "")
            if stop_area.code:
                _SubElement(element, "PrivateCode", stop_area.code)
            self._AddPosition(element, stop_area)
        for stop_point in model.stop_points:
            element = _SubElement(
                members, "Quay", id=MakeId("Quay", stop_point.id), version="any"
            )
            _SubElement(element, "Name", stop_point.name or "")
            if stop_point.code:
                _SubElement(element, "PrivateCode", stop_point.code)
            self._AddPosition(element, stop_point)
            _RefElement(element, "ParentZoneRef", "StopPlace", stop_point.stop_area_id)
            if stop_point.platform_code:
                _SubElement(element, "PublicCode", stop_point.platform_code)
        return root

    def _GetPhysicalModeId(self, model, line_idx, line):
        vehicle_journey_idxs = model.GetCorrespondingFromIdx(
            "lines", line_idx, "vehicle_journeys"
        )
        if vehicle_journey_idxs:
            return model.vehicle_journeys.Get(
                min(vehicle_journey_idxs)
            ).physical_mode_id
        return line.commercial_mode_id

    def _BuildLines(self, model):
        root, frame = self._NewDocument("NETEX_LIGNE")
        timezones = set(n.timezone for n in model.networks if n.timezone)
        if len(timezones) == 1:
            locale = _SubElement(_SubElement(frame, "FrameDefaults"), "DefaultLocale")
            _SubElement(locale, "TimeZone", timezones.pop())
        members = _SubElement(frame, "members")

        for network_idx, network in model.networks.Iter():
            element = _SubElement(
                members,
                "Network",
                id=MakeId("Network", network.id),
                version="any",
            )
            _SubElement(element, "Name", network.name)
            line_refs = _SubElement(element, "members")
            for line in model.GetCorrespondingFromId(
                "networks", network.id, "lines"
            ):
                _RefElement(line_refs, "LineRef", "Line", line.id)

        for company in model.companies:
            element = _SubElement(
                members,
                "Operator",
                id=MakeId("Operator", company.id),
                version="any",
            )
            _SubElement(element, "Name", company.name)
            if company.mail or company.phone or company.url:
                contact = _SubElement(element, "ContactDetails")
                for name, value in (
                    ("Email", company.mail),
                    ("Phone", company.phone),
                    ("Url", company.url),
                ):
                    if value:
                        _SubElement(contact, name, value)

        for line_idx, line in model.lines.Iter():
            physical_mode_id = self._GetPhysicalModeId(model, line_idx, line)
            element = _SubElement(
                members, "Line", id=MakeId("Line", line.id), version="any"
            )
            key_list = _SubElement(element, "keyList")
            for key, value in (
                (COMMERCIAL_MODE_KEY, line.commercial_mode_id),
                (PHYSICAL_MODE_KEY, physical_mode_id),
            ):
                key_value = _SubElement(key_list, "KeyValue")
                _SubElement(key_value, "Key", key)
                _SubElement(key_value, "Value", value)
            _SubElement(element, "Name", line.name)
            _SubElement(
                element,
                "TransportMode",
                mode.NetexModeFromPhysicalMode(physical_mode_id),
            )
            if line.code:
                _SubElement(element, "PublicCode", line.code)
            _RefElement(
                element, "RepresentedByGroupRef", "Network", line.network_id
            )
            if line.color or line.text_color:
                presentation = _SubElement(element, "Presentation")
                if line.color:
                    _SubElement(presentation, "Colour", line.color)
                if line.text_color:
                    _SubElement(presentation, "TextColour", line.text_color)
        return root

    def _BuildCalendars(self, model):
        root, frame = self._NewDocument("NETEX_CALENDRIER")
        members = _SubElement(frame, "members")
        for calendar in model.calendars:
            if not calendar.dates:
                continue
            start_date, end_date = calendar.GetDateRange()
            bits = []
            date = start_date
            while date <= end_date:
                bits.append(calendar.IsActiveOn(date) and "1" or "0")
                date += datetime.timedelta(days=1)
            _SubElement(
                members,
                "DayType",
                id=MakeId("DayType", calendar.id),
                version="any",
            )
            period = _SubElement(
                members,
                "UicOperatingPeriod",
                id=MakeId("UicOperatingPeriod", calendar.id),
                version="any",
            )
            _SubElement(period, "FromDate", _FormatDateTime(start_date))
            _SubElement(period, "ToDate", _FormatDateTime(end_date))
            _SubElement(period, "ValidDayBits", "".join(bits))
            assignment = _SubElement(
                members,
                "DayTypeAssignment",
                id=MakeId("DayTypeAssignment", calendar.id),
                version="any",
                order="0",
            )
            _RefElement(
                assignment,
                "OperatingPeriodRef",
                "UicOperatingPeriod",
                calendar.id,
            )
            _RefElement(assignment, "DayTypeRef", "DayType", calendar.id)
        return root

    def _BuildOffer(self, model):
        root, frame = self._NewDocument("NETEX_OFFRE")
        members = _SubElement(frame, "members")
        for route in model.routes:
            element = _SubElement(
                members, "Route", id=MakeId("Route", route.id), version="any"
            )
            _SubElement(element, "Name", route.name)
            _RefElement(element, "LineRef", "Line", route.line_id)
            if route.direction_type in netexloader.DIRECTION_TYPES:
                _SubElement(
                    element,
                    "DirectionType",
                    netexloader.DIRECTION_TYPES[route.direction_type],
                )

        served = set()
        for vehicle_journey in model.vehicle_journeys:
            served.update(vehicle_journey.GetStopPointIds())
        for stop_point in model.stop_points:
            if stop_point.id not in served:
                continue
            _SubElement(
                members,
                "ScheduledStopPoint",
                id=MakeId("ScheduledStopPoint", stop_point.id),
                version="any",
            )
            assignment = _SubElement(
                members,
                "PassengerStopAssignment",
                id=MakeId("PassengerStopAssignment", stop_point.id),
                version="any",
                order="0",
            )
            _RefElement(
                assignment,
                "ScheduledStopPointRef",
                "ScheduledStopPoint",
                stop_point.id,
            )
            _RefElement(assignment, "QuayRef", "Quay", stop_point.id)

        for vehicle_journey in model.vehicle_journeys:
            self._AddServiceJourney(members, vehicle_journey)
        return root

    def _AddServiceJourney(self, members, vehicle_journey):
        pattern = _SubElement(
            members,
            "ServiceJourneyPattern",
            id=MakeId("ServiceJourneyPattern", vehicle_journey.id),
            version="any",
        )
        _RefElement(pattern, "RouteRef", "Route", vehicle_journey.route_id)
        points = _SubElement(pattern, "pointsInSequence")
        point_ids = []
        for stop_time in vehicle_journey.stop_times:
            point_id = "%s-%d" % (vehicle_journey.id, stop_time.sequence)
            point_ids.append(point_id)
            point = _SubElement(
                points,
                "StopPointInJourneyPattern",
                id=MakeId("StopPointInJourneyPattern", point_id),
                version="any",
                order="%d" % stop_time.sequence,
            )
            _RefElement(
                point,
                "ScheduledStopPointRef",
                "ScheduledStopPoint",
                stop_time.stop_point_id,
            )
            if stop_time.drop_off_type == 1:
                _SubElement(point, "ForAlighting", "false")
            if stop_time.pickup_type == 1:
                _SubElement(point, "ForBoarding", "false")

        element = _SubElement(
            members,
            "ServiceJourney",
            id=MakeId("ServiceJourney", vehicle_journey.id),
            version="any",
        )
        key_value = _SubElement(_SubElement(element, "keyList"), "KeyValue")
        _SubElement(key_value, "Key", PHYSICAL_MODE_KEY)
        _SubElement(key_value, "Value", vehicle_journey.physical_mode_id)
        if vehicle_journey.headsign:
            _SubElement(element, "Name", vehicle_journey.headsign)
        if vehicle_journey.short_name:
            _SubElement(element, "PublicCode", vehicle_journey.short_name)
        _RefElement(
            _SubElement(element, "dayTypes"),
            "DayTypeRef",
            "DayType",
            vehicle_journey.service_id,
        )
        _RefElement(
            element,
            "ServiceJourneyPatternRef",
            "ServiceJourneyPattern",
            vehicle_journey.id,
        )
        _RefElement(element, "OperatorRef", "Operator", vehicle_journey.company_id)
        passing_times = _SubElement(element, "passingTimes")
        for point_id, stop_time in zip(point_ids, vehicle_journey.stop_times):
            passing_time = _SubElement(passing_times, "TimetabledPassingTime")
            _RefElement(
                passing_time,
                "StopPointInJourneyPatternRef",
                "StopPointInJourneyPattern",
                point_id,
            )
            for kind, seconds in (
                ("Arrival", stop_time.arrival_time),
                ("Departure", stop_time.departure_time),
            ):
                time, day_offset = _FormatTime(seconds)
                _SubElement(passing_time, "%sTime" % kind, time)
                if day_offset:
                    _SubElement(passing_time, "%sDayOffset" % kind, day_offset)
