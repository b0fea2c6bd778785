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

"""Reader of GTFS feeds.

GTFS describes less than the Model holds, so the reader synthesizes what is
missing: the contributor and dataset come from a Config, every agency is both
a Network and a Company, stop points without a parent station get a stop area
of their own, routes are made from the directions actually used by trips,
and accessibility columns become shared equipments and trip properties.
"""

from collections import Counter, OrderedDict
import logging

from . import config as config_module
from . import mode
from .comment import Comment
from .errors import TYPE_NOTICE, TYPE_WARNING
from .geometry import FormatLineString, Geometry
from .line import Line
from .loader import (
    Field,
    Loader,
    MakeEnumParser,
    ParseColor,
    ParseInt,
    ParseLatitude,
    ParseLongitude,
    ParseTime,
)
from .network import Company, Network
from .ntfsloader import LEVEL_FIELDS, PATHWAY_FIELDS
from .route import Route
from .stop import Equipment, Level, Pathway, StopArea, StopPoint
from .transfer import Transfer
from .trip import StopTime, TripProperty, VehicleJourney
from . import util

log = logging.getLogger(__name__)

SCHEMA = "GTFS"

DEFAULT_AGENCY_ID = "default_agency"
STOP_AREA_PREFIX = "Navitia:"
BACKWARD_ROUTE_SUFFIX = "_R"

TRANSFER_TYPE_NOT_POSSIBLE = 3

# pickup_type and drop_off_type of stops where a ride must be booked by phone
STOP_TIME_BY_PHONE = 2
ODT_COMMENT_PREFIX = "ODT:"

AGENCY_FIELDS = [
    Field("agency_id", "id"),
    Field("agency_name", "name", required=True),
    Field("agency_url", "url", required=True),
    Field("agency_timezone", "timezone", required=True),
    Field("agency_lang", "lang"),
    Field("agency_phone", "phone"),
    Field("agency_email", "mail"),
]

STOP_FIELDS = [
    Field("stop_id", "id", required=True),
    Field("stop_code", "code"),
    Field("stop_name", "name", required=True),
    Field("stop_lat", "lat", ParseLatitude, required=True),
    Field("stop_lon", "lon", ParseLongitude, required=True),
    Field("location_type", parse=ParseInt, default=0),
    Field("parent_station"),
    Field("stop_timezone", "timezone"),
    Field("wheelchair_boarding", parse=MakeEnumParser(0, 1, 2), default=0),
    Field("platform_code"),
    Field("level_id"),
]

ROUTE_FIELDS = [
    Field("route_id", "id", required=True),
    Field("agency_id"),
    Field("route_short_name", "code"),
    Field("route_long_name", "long_name"),
    Field("route_type", parse=ParseInt, required=True),
    Field("route_color", "color", ParseColor),
    Field("route_text_color", "text_color", ParseColor),
    Field("route_sort_order", "sort_order", ParseInt),
]

TRIP_FIELDS = [
    Field("route_id", required=True),
    Field("service_id", required=True),
    Field("trip_id", "id", required=True),
    Field("trip_headsign", "headsign"),
    Field("trip_short_name", "short_name"),
    Field("direction_id", parse=MakeEnumParser(0, 1), default=0),
    Field("block_id"),
    Field("shape_id", "geometry_id"),
    Field("wheelchair_accessible", parse=MakeEnumParser(0, 1, 2), default=0),
    Field("bikes_allowed", parse=MakeEnumParser(0, 1, 2), default=0),
]

STOP_TIME_FIELDS = [
    Field("trip_id", required=True),
    Field("arrival_time", parse=ParseTime),
    Field("departure_time", parse=ParseTime),
    Field("stop_id", "stop_point_id", required=True),
    Field("stop_sequence", "sequence", ParseInt, required=True),
    Field("stop_headsign", "headsign"),
    Field("pickup_type", parse=MakeEnumParser(0, 1, 2, 3), default=0),
    Field("drop_off_type", parse=MakeEnumParser(0, 1, 2, 3), default=0),
]

TRANSFER_FIELDS = [
    Field("from_stop_id", required=True),
    Field("to_stop_id", required=True),
    Field("transfer_type", parse=MakeEnumParser(0, 1, 2, 3), default=0),
    Field("min_transfer_time", parse=ParseInt),
]

SHAPE_FIELDS = [
    Field("shape_id", required=True),
    Field("shape_pt_lat", "lat", ParseLatitude, required=True),
    Field("shape_pt_lon", "lon", ParseLongitude, required=True),
    Field("shape_pt_sequence", "sequence", ParseInt, required=True),
]

FREQUENCY_FIELDS = [
    Field("trip_id", required=True),
    Field("start_time", parse=ParseTime, required=True),
    Field("end_time", parse=ParseTime, required=True),
    Field("headway_secs", parse=ParseInt, required=True),
    Field("exact_times", parse=MakeEnumParser(0, 1), default=0),
]

FEED_INFO_FIELDS = [
    Field("feed_publisher_name", required=True),
    Field("feed_publisher_url", required=True),
    Field("feed_lang", required=True),
    Field("feed_start_date"),
    Field("feed_end_date"),
    Field("feed_version"),
    Field("feed_contact_email"),
    Field("feed_contact_url"),
]


class GtfsLoader(Loader):
    """Reads a GTFS directory or zip archive into a Model.

  Args:
    feed_path: string path to a zip file or directory
    problems: a ProblemReporter object, the default reporter logs each problem
    zip: a zipfile.ZipFile object, optionally used instead of path
    config: a config.Config giving the contributor, the dataset and extra
      feed infos; defaults are used when None
    prefix: when set, every identifier is prefixed with "prefix:"
    odt_comment_template: when set, vehicle journeys with a stop time
      that must be booked by phone (pickup_type or drop_off_type 2) are
      linked to an on demand transport comment of their agency. The
      template is formatted with agency_name and agency_phone, as in
      "Call {agency_name} on {agency_phone}".
  """

    SCHEMA = SCHEMA
    _FILE_MAPPING = {
        "agency.txt": {"required": True},
        "stops.txt": {"required": True},
        "routes.txt": {"required": True},
        "trips.txt": {"required": True},
        "stop_times.txt": {"required": True},
        "calendar.txt": {"required": False},
        "calendar_dates.txt": {"required": False},
        "transfers.txt": {"required": False},
        "shapes.txt": {"required": False},
        "frequencies.txt": {"required": False},
        "levels.txt": {"required": False},
        "pathways.txt": {"required": False},
        "feed_info.txt": {"required": False},
    }
    _REQUIRED_ONE_OF = [("calendar.txt", "calendar_dates.txt")]

    def __init__(
        self,
        feed_path=None,
        problems=None,
        zip=None,
        config=None,
        prefix=None,
        odt_comment_template=None,
    ):
        Loader.__init__(self, feed_path, problems, zip, prefix)
        self._config = config or config_module.Config()
        self._odt_comment_template = odt_comment_template
        # physical mode id of each line, taken from its route_type
        self._line_physical_modes = {}
        self._equipment_ids = OrderedDict()
        self._trip_property_ids = OrderedDict()

    def _LoadCollections(self, collections):
        contributor = self._config.MakeContributor()
        collections.contributors.Push(contributor)
        dataset = self._config.MakeDataset(contributor.id)
        collections.datasets.Push(dataset)
        self._dataset_id = dataset.id

        self._LoadAgencies(collections)
        self._LoadStops(collections)
        self._LoadRoutes(collections)
        self._LoadCalendarFiles(collections)
        self._LoadShapes(collections)
        self._LoadTrips(collections)
        self._LoadStopTimes(collections)
        self._LoadFrequencies(collections)
        self._LoadTransfers(collections)
        self._LoadLevelsAndPathways(collections)
        self._LoadFeedInfo(collections)

    def _Finalize(self, collections):
        self._SetDatasetPeriods(collections)
        self._SetRouteDestinations(collections)

    def _LoadAgencies(self, collections):
        for values, context in self._ReadRecords("agency.txt", AGENCY_FIELDS):
            values["id"] = values["id"] or DEFAULT_AGENCY_ID
            if util.ValidateTimezone(
                values["timezone"], "agency_timezone", self._problems
            ):
                values["timezone"] = None
            network = Network(
                id=values["id"],
                name=values["name"],
                url=values["url"],
                timezone=values["timezone"],
                lang=values["lang"],
                phone=values["phone"],
            )
            network.SetContext(context)
            self._Push(collections.networks, network)
            company = Company(
                id=values["id"],
                name=values["name"],
                url=values["url"],
                mail=values["mail"],
                phone=values["phone"],
            )
            company.SetContext(context)
            self._Push(collections.companies, company)

    def _GetEquipmentId(self, collections, wheelchair_boarding):
        """Return the id of the shared equipment for a wheelchair_boarding
    value, None when the value is unknown."""
        if not wheelchair_boarding:
            return None
        if wheelchair_boarding not in self._equipment_ids:
            equipment_id = str(len(self._equipment_ids) + 1)
            properties = dict((name, 0) for name in Equipment._PROPERTY_NAMES)
            properties["wheelchair_boarding"] = wheelchair_boarding
            collections.equipments.Push(
                Equipment(id=equipment_id, **properties)
            )
            self._equipment_ids[wheelchair_boarding] = equipment_id
        return self._equipment_ids[wheelchair_boarding]

    def _GetTripPropertyId(self, collections, wheelchair, bikes):
        if not (wheelchair or bikes):
            return None
        key = (wheelchair, bikes)
        if key not in self._trip_property_ids:
            trip_property_id = str(len(self._trip_property_ids) + 1)
            properties = dict((name, 0) for name in TripProperty._PROPERTY_NAMES)
            properties["wheelchair_accessible"] = wheelchair
            properties["bike_accepted"] = bikes
            collections.trip_properties.Push(
                TripProperty(id=trip_property_id, **properties)
            )
            self._trip_property_ids[key] = trip_property_id
        return self._trip_property_ids[key]

    def _LoadStops(self, collections):
        orphans = []
        for values, context in self._ReadRecords(
            "stops.txt",
            STOP_FIELDS,
            ["stop_desc", "zone_id", "stop_url"],
        ):
            location_type = values.pop("location_type")
            if util.ValidateTimezone(
                values["timezone"], "stop_timezone", self._problems
            ):
                values["timezone"] = None
            values["equipment_id"] = self._GetEquipmentId(
                collections, values.pop("wheelchair_boarding")
            )
            parent_station = values.pop("parent_station")
            if location_type == 1:
                values.pop("platform_code")
                values.pop("level_id")
                stop = StopArea(field_dict=values)
                stop.SetContext(context)
                self._Push(collections.stop_areas, stop)
            elif location_type == 0:
                stop = StopPoint(field_dict=values)
                stop.stop_area_id = parent_station
                stop.SetContext(context)
                self._Push(collections.stop_points, stop)
                if parent_station is None:
                    orphans.append(stop)
            else:
                self._problems.InvalidValue(
                    "location_type",
                    location_type,
                    "only stops (0) and stations (1) are supported; the "
                    "stop is ignored",
                    type=TYPE_NOTICE,
                )

        for stop in orphans:
            stop_area = StopArea(
                id=STOP_AREA_PREFIX + stop.id,
                name=stop.name,
                lat=stop.lat,
                lon=stop.lon,
                timezone=stop.timezone,
                equipment_id=stop.equipment_id,
            )
            stop_area.SetContext(stop.GetContext())
            self._Push(collections.stop_areas, stop_area)
            stop.stop_area_id = stop_area.id

    def _LoadRoutes(self, collections):
        only_network_id = None
        if len(collections.networks) == 1:
            only_network_id = collections.networks.Ids()[0]
        for values, context in self._ReadRecords(
            "routes.txt", ROUTE_FIELDS, ["route_desc", "route_url"]
        ):
            name = values.pop("long_name") or values["code"]
            if not name:
                self._problems.MissingValue(
                    "route_long_name",
                    "route_short_name or route_long_name must be set",
                )
                continue
            commercial_mode_id, physical_mode_id = mode.ModesFromGtfsRouteType(
                values.pop("route_type")
            )
            if not collections.commercial_modes.Contains(commercial_mode_id):
                collections.commercial_modes.Push(
                    mode.MakeCommercialMode(commercial_mode_id)
                )
            if not collections.physical_modes.Contains(physical_mode_id):
                collections.physical_modes.Push(
                    mode.MakePhysicalMode(physical_mode_id)
                )
            line = Line(
                id=values["id"],
                code=values["code"],
                name=name,
                color=values["color"],
                text_color=values["text_color"],
                sort_order=values["sort_order"],
                network_id=values["agency_id"] or only_network_id,
                commercial_mode_id=commercial_mode_id,
            )
            line.SetContext(context)
            self._Push(collections.lines, line)
            self._line_physical_modes[line.id] = physical_mode_id

    def _GetRouteId(self, collections, line, direction_id):
        """Return the id of the route of line in a direction, creating it on
    first use."""
        if direction_id == 1:
            route_id = line.id + BACKWARD_ROUTE_SUFFIX
            direction_type = Route.DIRECTION_BACKWARD
        else:
            route_id = line.id
            direction_type = Route.DIRECTION_FORWARD
        if not collections.routes.Contains(route_id):
            route = Route(
                id=route_id,
                name=line.name,
                direction_type=direction_type,
                line_id=line.id,
            )
            route.SetContext(line.GetContext())
            self._Push(collections.routes, route)
        return route_id

    def _LoadTrips(self, collections):
        for values, context in self._ReadRecords("trips.txt", TRIP_FIELDS):
            line = collections.lines.GetById(values["route_id"])
            if line is None:
                self._problems.UnresolvedReference(
                    "route_id",
                    values["route_id"],
                    "VehicleJourney",
                    values["id"],
                    "lines",
                )
                continue
            vehicle_journey = VehicleJourney(
                id=values["id"],
                route_id=self._GetRouteId(
                    collections, line, values["direction_id"]
                ),
                service_id=values["service_id"],
                headsign=values["headsign"],
                short_name=values["short_name"],
                block_id=values["block_id"],
                company_id=line.network_id,
                physical_mode_id=self._line_physical_modes[line.id],
                trip_property_id=self._GetTripPropertyId(
                    collections,
                    values["wheelchair_accessible"],
                    values["bikes_allowed"],
                ),
                dataset_id=self._dataset_id,
                geometry_id=values["geometry_id"],
            )
            vehicle_journey.SetContext(context)
            self._Push(collections.vehicle_journeys, vehicle_journey)

    def _LoadStopTimes(self, collections):
        sequences = set()
        for values, context in self._ReadRecords(
            "stop_times.txt",
            STOP_TIME_FIELDS,
            ["shape_dist_traveled", "timepoint"],
        ):
            trip_id = values.pop("trip_id")
            vehicle_journey = collections.vehicle_journeys.GetById(trip_id)
            if vehicle_journey is None:
                self._problems.UnresolvedReference(
                    "trip_id",
                    trip_id,
                    "StopTime",
                    "%s:%s" % (trip_id, values["sequence"]),
                    "vehicle_journeys",
                )
                continue
            if values["arrival_time"] is None:
                values["arrival_time"] = values["departure_time"]
            if values["departure_time"] is None:
                values["departure_time"] = values["arrival_time"]
            if values["arrival_time"] is None:
                self._problems.MissingValue(
                    "arrival_time",
                    "stop times without any time are not supported",
                )
                continue
            if (trip_id, values["sequence"]) in sequences:
                self._problems.InvalidValue(
                    "stop_sequence",
                    values["sequence"],
                    "trip %s already has a stop time with this sequence"
                    % trip_id,
                )
                continue
            sequences.add((trip_id, values["sequence"]))
            stop_time = StopTime(field_dict=values)
            stop_time.SetContext(context)
            vehicle_journey.AddStopTime(stop_time)
            if self._odt_comment_template and STOP_TIME_BY_PHONE in (
                stop_time.pickup_type,
                stop_time.drop_off_type,
            ):
                self._LinkOdtComment(collections, vehicle_journey)
        for vehicle_journey in collections.vehicle_journeys:
            vehicle_journey.SortStopTimes()

    def _LinkOdtComment(self, collections, vehicle_journey):
        """Link vehicle_journey to the on demand transport comment of its
    agency, creating the comment on first use."""
        network = collections.networks.GetById(vehicle_journey.company_id)
        if network is None:
            return
        comment_id = ODT_COMMENT_PREFIX + network.id
        if not collections.comments.Contains(comment_id):
            collections.comments.Push(
                Comment(
                    id=comment_id,
                    type=Comment.TYPE_ON_DEMAND_TRANSPORT,
                    name=self._odt_comment_template.format(
                        agency_name=network.name,
                        agency_phone=network.phone or "",
                    ),
                )
            )
        if comment_id not in vehicle_journey.comment_links:
            vehicle_journey.comment_links.append(comment_id)

    def _LoadShapes(self, collections):
        shapes = OrderedDict()
        contexts = {}
        for values, context in self._ReadRecords(
            "shapes.txt", SHAPE_FIELDS, ["shape_dist_traveled"]
        ):
            shapes.setdefault(values["shape_id"], []).append(
                (values["sequence"], values["lon"], values["lat"])
            )
            contexts.setdefault(values["shape_id"], context)
        for shape_id, points in shapes.items():
            if len(points) < 2:
                self._problems.OtherProblem(
                    "Shape %s has less than two points and is ignored"
                    % shape_id,
                    context=contexts[shape_id],
                    type=TYPE_WARNING,
                )
                continue
            points.sort()
            geometry = Geometry(
                id=shape_id,
                wkt=FormatLineString([(lon, lat) for (_, lon, lat) in points]),
            )
            geometry.SetContext(contexts[shape_id])
            self._Push(collections.geometries, geometry)

    def _LoadFrequencies(self, collections):
        """Replace each trip of frequencies.txt by one trip per run.

    Runs are numbered from 0 in the order of frequencies.txt and start every
    headway_secs from start_time, end_time excluded. Generated trips keep the
    id of their template in a "source" code.
    """
        runs = OrderedDict()
        for values, context in self._ReadRecords(
            "frequencies.txt", FREQUENCY_FIELDS
        ):
            trip_id = values["trip_id"]
            template = collections.vehicle_journeys.GetById(trip_id)
            if template is None:
                self._problems.UnresolvedReference(
                    "trip_id", trip_id, "Frequency", trip_id, "vehicle_journeys"
                )
                continue
            if not template.stop_times:
                self._problems.OtherProblem(
                    "Trip %s has no stop time; its frequency is ignored"
                    % trip_id,
                    type=TYPE_WARNING,
                )
                continue
            if values["headway_secs"] == 0:
                self._problems.InvalidValue(
                    "headway_secs", 0, "headway_secs must be positive"
                )
                continue
            run_secs = values["start_time"]
            while run_secs < values["end_time"]:
                runs.setdefault(trip_id, []).append(run_secs)
                run_secs += values["headway_secs"]

        if not runs:
            return
        for trip_id, start_times in runs.items():
            template = collections.vehicle_journeys.GetById(trip_id)
            template_start = template.GetStartTime()
            for n, start_time in enumerate(start_times):
                vehicle_journey = template.Copy()
                vehicle_journey.id = "%s-%d" % (trip_id, n)
                vehicle_journey.codes.append(("source", trip_id))
                offset = start_time - template_start
                for stop_time in vehicle_journey.stop_times:
                    stop_time.arrival_time += offset
                    stop_time.departure_time += offset
                self._Push(collections.vehicle_journeys, vehicle_journey)
        log.info(
            "Replaced %d trips of frequencies.txt by %d trips",
            len(runs),
            sum(len(start_times) for start_times in runs.values()),
        )
        collections.vehicle_journeys = collections.vehicle_journeys.Filtered(
            lambda vj: vj.id not in runs
        )

    def _LoadTransfers(self, collections):
        for values, context in self._ReadRecords(
            "transfers.txt", TRANSFER_FIELDS
        ):
            if values["transfer_type"] == TRANSFER_TYPE_NOT_POSSIBLE:
                self._problems.OtherProblem(
                    "Transfers that are not possible are ignored",
                    type=TYPE_NOTICE,
                )
                continue
            transfer = Transfer(
                from_stop_id=values["from_stop_id"],
                to_stop_id=values["to_stop_id"],
                min_transfer_time=values["min_transfer_time"],
                real_min_transfer_time=values["min_transfer_time"],
            )
            transfer.SetContext(context)
            collections.transfers.Push(transfer)

    def _LoadLevelsAndPathways(self, collections):
        for obj in self._ReadObjects("levels.txt", LEVEL_FIELDS, Level):
            self._Push(collections.levels, obj)
        for obj in self._ReadObjects("pathways.txt", PATHWAY_FIELDS, Pathway):
            self._Push(collections.pathways, obj)

    def _LoadFeedInfo(self, collections):
        for values, _ in self._ReadRecords("feed_info.txt", FEED_INFO_FIELDS):
            for field in FEED_INFO_FIELDS:
                if values[field.attribute] is not None:
                    collections.feed_infos[field.attribute] = values[
                        field.attribute
                    ]
        collections.feed_infos.update(self._config.feed_infos)

    def _SetRouteDestinations(self, collections):
        """Set the destination of each route to the stop area where most of its
    vehicle journeys end."""
        terminals = {}
        for vehicle_journey in collections.vehicle_journeys:
            if not vehicle_journey.stop_times:
                continue
            stop_point = collections.stop_points.GetById(
                vehicle_journey.stop_times[-1].stop_point_id
            )
            terminals.setdefault(vehicle_journey.route_id, Counter())[
                stop_point.stop_area_id
            ] += 1
        for route in collections.routes:
            if route.destination_id is None and route.id in terminals:
                # most_common keeps insertion order between equal counts
                route.destination_id = terminals[route.id].most_common(1)[0][0]
