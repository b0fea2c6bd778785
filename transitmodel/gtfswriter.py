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

"""Writer of GTFS feeds.

GTFS has a single time zone per feed and no stop area without stops, line
direction or dataset; lines become routes, routes only give the direction of
trips, and every network becomes an agency.
"""

import logging

from . import gtfsloader
from . import mode
from . import ntfsloader
from .errors import ConstraintViolationError, TYPE_NOTICE
from .loader import Field, ParseInt, ParseLatitude, ParseLongitude
from .writer import FeedWriter

log = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/Paris"

TRANSFER_TYPE_MIN_TIME = 2

AGENCY_FIELDS = gtfsloader.AGENCY_FIELDS

STOP_FIELDS = [
    Field("stop_id", "id"),
    Field("stop_name", "name"),
    Field("stop_code", "code"),
    Field("stop_lat", "lat", ParseLatitude),
    Field("stop_lon", "lon", ParseLongitude),
    Field("location_type"),
    Field("parent_station", "stop_area_id"),
    Field("stop_timezone", "timezone"),
    Field("wheelchair_boarding"),
    Field("platform_code"),
    Field("level_id"),
]

ROUTE_FIELDS = [
    Field("route_id", "id"),
    Field("agency_id", "network_id"),
    Field("route_short_name", "code"),
    Field("route_long_name", "name"),
    Field("route_type"),
    Field("route_color", "color"),
    Field("route_text_color", "text_color"),
    Field("route_sort_order", "sort_order"),
]

TRIP_FIELDS = [
    Field("route_id"),
    Field("service_id"),
    Field("trip_id", "id"),
    Field("trip_headsign", "headsign"),
    Field("trip_short_name", "short_name"),
    Field("direction_id"),
    Field("block_id"),
    Field("shape_id"),
    Field("wheelchair_accessible"),
    Field("bikes_allowed"),
]

TRANSFER_FIELDS = [
    Field("from_stop_id"),
    Field("to_stop_id"),
    Field("transfer_type"),
    Field("min_transfer_time", parse=ParseInt),
]


class GtfsWriter(FeedWriter):
    """Writes a Model as a GTFS directory or zip archive.

  Args:
    problems: a ProblemReporter, the default reporter logs problems
    default_timezone: time zone of the agencies when no network has one
  """

    SCHEMA = gtfsloader.SCHEMA
    FILE_NAMES = sorted(gtfsloader.GtfsLoader._FILE_MAPPING)

    def __init__(self, problems=None, default_timezone=DEFAULT_TIMEZONE):
        FeedWriter.__init__(self, problems)
        self._default_timezone = default_timezone

    def _GetTimezones(self, model):
        timezones = []
        for network in model.networks:
            if network.timezone and network.timezone not in timezones:
                timezones.append(network.timezone)
        return timezones

    def CheckConstraints(self, model):
        timezones = self._GetTimezones(model)
        if len(timezones) > 1:
            raise ConstraintViolationError(
                self.SCHEMA,
                "networks use several time zones (%s) but a feed has only one"
                % ", ".join(timezones),
            )

    def _GetTimezone(self, model):
        timezones = self._GetTimezones(model)
        if timezones:
            return timezones[0]
        self._problems.ConstraintRelaxed(
            "No network has a time zone; agencies use %s"
            % self._default_timezone
        )
        return self._default_timezone

    def _WriteFiles(self, model, output):
        self._WriteAgencies(model, output)
        self._WriteStops(model, output)
        self._WriteRoutes(model, output)
        shape_ids = self._WriteShapes(model, output)
        self._WriteTrips(model, output, shape_ids)
        rows = []
        for vehicle_journey in model.vehicle_journeys:
            for stop_time in vehicle_journey.stop_times:
                row = dict(stop_time.iteritems())
                row["trip_id"] = vehicle_journey.id
                rows.append(row)
        self._WriteRecords(
            output, "stop_times.txt", gtfsloader.STOP_TIME_FIELDS, rows
        )
        self._WriteCalendars(model.calendars, output)
        self._WriteTransfers(model, output)
        for file_name, name, fields in [
            ("levels.txt", "levels", ntfsloader.LEVEL_FIELDS),
            ("pathways.txt", "pathways", ntfsloader.PATHWAY_FIELDS),
        ]:
            if not model.GetCollection(name).IsEmpty():
                self._WriteRecords(
                    output, file_name, fields, model.GetCollection(name)
                )
        self._WriteFeedInfo(model, output)
        if not model.comments.IsEmpty():
            self._problems.ConstraintRelaxed(
                "GTFS has no comments; %d comments are not written"
                % len(model.comments),
                type=TYPE_NOTICE,
            )
        if not model.tickets.IsEmpty():
            self._problems.ConstraintRelaxed(
                "Fares are not written; %d tickets are left out"
                % len(model.tickets),
                type=TYPE_NOTICE,
            )

    def _WriteAgencies(self, model, output):
        timezone = self._GetTimezone(model)
        log.debug("Agencies use time zone %s", timezone)
        rows = []
        for network in model.networks:
            company = model.companies.GetById(network.id)
            rows.append(
                {
                    "id": network.id,
                    "name": network.name,
                    "url": network.url,
                    "timezone": timezone,
                    "lang": network.lang,
                    "phone": network.phone,
                    "mail": company and company.mail,
                }
            )
        self._WriteRecords(output, "agency.txt", AGENCY_FIELDS, rows)

    def _GetWheelchairBoarding(self, model, stop):
        equipment = model.equipments.GetById(stop.equipment_id)
        return equipment and equipment.wheelchair_boarding or 0

    def _WriteStops(self, model, output):
        rows = []
        for stop_area in model.stop_areas:
            row = dict(stop_area.iteritems())
            row["location_type"] = 1
            row["wheelchair_boarding"] = self._GetWheelchairBoarding(
                model, stop_area
            )
            rows.append(row)
        for stop_point in model.stop_points:
            row = dict(stop_point.iteritems())
            row["location_type"] = 0
            row["wheelchair_boarding"] = self._GetWheelchairBoarding(
                model, stop_point
            )
            rows.append(row)
        self._WriteRecords(output, "stops.txt", STOP_FIELDS, rows)

    def _GetRouteType(self, model, line_idx, line):
        """Return the route_type of the physical mode of the first vehicle
    journey of line, else of its commercial mode."""
        vehicle_journey_idxs = model.GetCorrespondingFromIdx(
            "lines", line_idx, "vehicle_journeys"
        )
        if vehicle_journey_idxs:
            vehicle_journey = model.vehicle_journeys.Get(
                min(vehicle_journey_idxs)
            )
            return mode.GtfsRouteTypeFromPhysicalMode(
                vehicle_journey.physical_mode_id
            )
        return mode.GtfsRouteTypeFromCommercialMode(line.commercial_mode_id)

    def _WriteRoutes(self, model, output):
        rows = []
        for line_idx, line in model.lines.Iter():
            row = dict(line.iteritems())
            row["route_type"] = self._GetRouteType(model, line_idx, line)
            rows.append(row)
        self._WriteRecords(output, "routes.txt", ROUTE_FIELDS, rows)

    def _WriteShapes(self, model, output):
        """Write the LINESTRING geometries and return the ids written."""
        rows = []
        shape_ids = set()
        for geometry in model.geometries:
            try:
                points = geometry.GetPoints()
            except ValueError:
                points = None
            if not points:
                self._problems.ConstraintRelaxed(
                    "Geometry %s is not a LINESTRING and is not written"
                    % geometry.id,
                    type=TYPE_NOTICE,
                )
                continue
            shape_ids.add(geometry.id)
            for sequence, (lon, lat) in enumerate(points):
                rows.append(
                    {
                        "shape_id": geometry.id,
                        "lat": lat,
                        "lon": lon,
                        "sequence": sequence,
                    }
                )
        if rows:
            self._WriteRecords(
                output, "shapes.txt", gtfsloader.SHAPE_FIELDS, rows
            )
        return shape_ids

    def _WriteTrips(self, model, output, shape_ids):
        rows = []
        for vehicle_journey in model.vehicle_journeys:
            route = model.routes.GetById(vehicle_journey.route_id)
            row = dict(vehicle_journey.iteritems())
            row["route_id"] = route.line_id
            row["direction_id"] = route.IsBackward() and 1 or 0
            geometry_id = vehicle_journey.geometry_id or route.geometry_id
            if geometry_id in shape_ids:
                row["shape_id"] = geometry_id
            trip_property = model.trip_properties.GetById(
                vehicle_journey.trip_property_id
            )
            if trip_property is not None:
                row["wheelchair_accessible"] = (
                    trip_property.wheelchair_accessible or 0
                )
                row["bikes_allowed"] = trip_property.bike_accepted or 0
            rows.append(row)
        self._WriteRecords(output, "trips.txt", TRIP_FIELDS, rows)

    def _WriteTransfers(self, model, output):
        if model.transfers.IsEmpty():
            return
        rows = [
            {
                "from_stop_id": transfer.from_stop_id,
                "to_stop_id": transfer.to_stop_id,
                "transfer_type": TRANSFER_TYPE_MIN_TIME,
                "min_transfer_time": transfer.min_transfer_time,
            }
            for transfer in model.transfers
        ]
        self._WriteRecords(output, "transfers.txt", TRANSFER_FIELDS, rows)

    def _WriteFeedInfo(self, model, output):
        if "feed_publisher_name" not in model.feed_infos:
            return
        self._WriteRecords(
            output,
            "feed_info.txt",
            gtfsloader.FEED_INFO_FIELDS,
            [model.feed_infos],
        )
