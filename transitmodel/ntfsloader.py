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

"""Reader of NTFS, the Navitia Transit Feed Specification.

NTFS is a directory or zip archive of CSV files close to the Model: every
collection has its own file, so objects are read as they are and references
are resolved by the shared Loader machinery.
"""

from .comment import Comment
from .contributor import Contributor, Dataset
from .errors import TYPE_NOTICE, TYPE_WARNING
from .fare import (
    Ticket,
    TicketPrice,
    TicketUse,
    TicketUsePerimeter,
    TicketUseRestriction,
)
from .geometry import Geometry
from .line import Line
from .loader import (
    Field,
    Loader,
    MakeChoiceParser,
    MakeEnumParser,
    ParseColor,
    ParseCurrency,
    ParseDate,
    ParseDecimal,
    ParseFloat,
    ParseInt,
    ParseLatitude,
    ParseLongitude,
    ParseSignedInt,
    ParseTime,
)
from .mode import CommercialMode, PhysicalMode
from .network import Company, Network
from .route import Route
from .stop import Equipment, Level, Pathway, StopArea, StopPoint
from .transfer import Transfer
from .trip import StopTime, TripProperty, VehicleJourney
from . import util

SCHEMA = "NTFS"

LOCATION_TYPE_STOP_POINT = 0
LOCATION_TYPE_STOP_AREA = 1

CONTRIBUTOR_FIELDS = [
    Field("contributor_id", "id", required=True),
    Field("contributor_name", "name", required=True),
    Field("contributor_license", "license"),
    Field("contributor_website", "website"),
]

DATASET_FIELDS = [
    Field("dataset_id", "id", required=True),
    Field("contributor_id", required=True),
    Field("dataset_start_date", "start_date", ParseDate, required=True),
    Field("dataset_end_date", "end_date", ParseDate, required=True),
    Field("dataset_type", "type"),
    Field("dataset_desc", "desc"),
    Field("dataset_system", "system"),
]

NETWORK_FIELDS = [
    Field("network_id", "id", required=True),
    Field("network_name", "name", required=True),
    Field("network_url", "url"),
    Field("network_timezone", "timezone"),
    Field("network_lang", "lang"),
    Field("network_phone", "phone"),
    Field("network_address", "address"),
    Field("network_sort_order", "sort_order", ParseInt),
]

COMMERCIAL_MODE_FIELDS = [
    Field("commercial_mode_id", "id", required=True),
    Field("commercial_mode_name", "name", required=True),
]

PHYSICAL_MODE_FIELDS = [
    Field("physical_mode_id", "id", required=True),
    Field("physical_mode_name", "name", required=True),
    Field("co2_emission", parse=ParseFloat),
]

COMPANY_FIELDS = [
    Field("company_id", "id", required=True),
    Field("company_name", "name", required=True),
    Field("company_address", "address"),
    Field("company_url", "url"),
    Field("company_mail", "mail"),
    Field("company_phone", "phone"),
]

LINE_FIELDS = [
    Field("line_id", "id", required=True),
    Field("line_code", "code"),
    Field("line_name", "name", required=True),
    Field("forward_line_name", "forward_name"),
    Field("backward_line_name", "backward_name"),
    Field("line_color", "color", ParseColor),
    Field("line_text_color", "text_color", ParseColor),
    Field("line_sort_order", "sort_order", ParseInt),
    Field("network_id", required=True),
    Field("commercial_mode_id", required=True),
    Field("geometry_id"),
    Field("line_opening_time", "opening_time", ParseTime),
    Field("line_closing_time", "closing_time", ParseTime),
]

ROUTE_FIELDS = [
    Field("route_id", "id", required=True),
    Field("route_name", "name", required=True),
    Field("direction_type"),
    Field("line_id", required=True),
    Field("geometry_id"),
    Field("destination_id"),
]

TRIP_FIELDS = [
    Field("route_id", required=True),
    Field("service_id", required=True),
    Field("trip_id", "id", required=True),
    Field("trip_headsign", "headsign"),
    Field("trip_short_name", "short_name"),
    Field("block_id"),
    Field("company_id", required=True),
    Field("physical_mode_id", required=True),
    Field("trip_property_id"),
    Field("dataset_id", required=True),
    Field("geometry_id"),
]

STOP_FIELDS = [
    Field("stop_id", "id", required=True),
    Field("stop_name", "name", required=True),
    Field("stop_code", "code"),
    Field("stop_lat", "lat", ParseLatitude, required=True),
    Field("stop_lon", "lon", ParseLongitude, required=True),
    Field("location_type", parse=ParseInt, default=LOCATION_TYPE_STOP_POINT),
    Field("parent_station", "stop_area_id"),
    Field("stop_timezone", "timezone"),
    Field("equipment_id"),
    Field("platform_code"),
    Field("level_id"),
]

STOP_TIME_FIELDS = [
    Field("trip_id", required=True),
    Field("arrival_time", parse=ParseTime, required=True),
    Field("departure_time", parse=ParseTime, required=True),
    Field("stop_id", "stop_point_id", required=True),
    Field("stop_sequence", "sequence", ParseInt, required=True),
    Field("pickup_type", parse=MakeEnumParser(0, 1, 2, 3), default=0),
    Field("drop_off_type", parse=MakeEnumParser(0, 1, 2, 3), default=0),
    Field("stop_headsign", "headsign"),
]

TRANSFER_FIELDS = [
    Field("from_stop_id", required=True),
    Field("to_stop_id", required=True),
    Field("min_transfer_time", parse=ParseInt),
    Field("real_min_transfer_time", parse=ParseInt),
    Field("equipment_id"),
]

COMMENT_FIELDS = [
    Field("comment_id", "id", required=True),
    Field("comment_type", "type", default=Comment.TYPE_INFORMATION),
    Field("comment_label", "label"),
    Field("comment_name", "name", required=True),
    Field("comment_url", "url"),
]

COMMENT_LINK_FIELDS = [
    Field("object_id", required=True),
    Field("object_type", required=True),
    Field("comment_id", required=True),
]

_AVAILABILITY = MakeEnumParser(0, 1, 2)

EQUIPMENT_FIELDS = [Field("equipment_id", "id", required=True)] + [
    Field(name, parse=_AVAILABILITY, default=0)
    for name in Equipment._PROPERTY_NAMES
]

TRIP_PROPERTY_FIELDS = [Field("trip_property_id", "id", required=True)] + [
    Field(name, parse=ParseInt, default=0)
    for name in TripProperty._PROPERTY_NAMES
]

GEOMETRY_FIELDS = [
    Field("geometry_id", "id", required=True),
    Field("geometry_wkt", "wkt", required=True),
]

LEVEL_FIELDS = [
    Field("level_id", "id", required=True),
    Field("level_index", "index", ParseFloat, required=True),
    Field("level_name", "name"),
]

PATHWAY_FIELDS = [
    Field("pathway_id", "id", required=True),
    Field("from_stop_id", required=True),
    Field("to_stop_id", required=True),
    Field("pathway_mode", "mode", MakeEnumParser(1, 2, 3, 4, 5, 6, 7),
          required=True),
    Field("is_bidirectional", parse=MakeEnumParser(0, 1), required=True),
    Field("length", parse=ParseFloat),
    Field("traversal_time", parse=ParseInt),
    Field("stair_count", parse=ParseSignedInt),
    Field("max_slope", parse=ParseFloat),
    Field("min_width", parse=ParseFloat),
    Field("signposted_as"),
    Field("reversed_signposted_as"),
]

TICKET_FIELDS = [
    Field("ticket_id", "id", required=True),
    Field("ticket_name", "name", required=True),
    Field("ticket_comment", "comment"),
]

TICKET_USE_FIELDS = [
    Field("ticket_use_id", "id", required=True),
    Field("ticket_id", required=True),
    Field("max_transfers", parse=ParseInt),
    Field("boarding_time_limit", parse=ParseInt),
    Field("alighting_time_limit", parse=ParseInt),
]

TICKET_PRICE_FIELDS = [
    Field("ticket_id", required=True),
    Field("ticket_price", "price", ParseDecimal, required=True),
    Field("ticket_currency", "currency", ParseCurrency, required=True),
    Field("ticket_validity_start", "validity_start", ParseDate, required=True),
    Field("ticket_validity_end", "validity_end", ParseDate, required=True),
]

TICKET_USE_PERIMETER_FIELDS = [
    Field("ticket_use_id", required=True),
    Field(
        "object_type",
        parse=MakeChoiceParser(*sorted(TicketUsePerimeter.OBJECT_TYPES)),
        required=True,
    ),
    Field("object_id", required=True),
    Field(
        "perimeter_action",
        parse=MakeEnumParser(
            TicketUsePerimeter.PERIMETER_INCLUDED,
            TicketUsePerimeter.PERIMETER_EXCLUDED,
        ),
        required=True,
    ),
]

TICKET_USE_RESTRICTION_FIELDS = [
    Field("ticket_use_id", required=True),
    Field(
        "restriction_type",
        parse=MakeChoiceParser(
            TicketUseRestriction.RESTRICTION_ZONE,
            TicketUseRestriction.RESTRICTION_ORIGIN_DESTINATION,
        ),
        required=True,
    ),
    Field("use_origin", required=True),
    Field("use_destination", required=True),
]

OBJECT_CODE_FIELDS = [
    Field("object_type", required=True),
    Field("object_id", required=True),
    Field("object_system", required=True),
    Field("object_code", required=True),
]

FEED_INFO_FIELDS = [
    Field("feed_info_param", required=True),
    Field("feed_info_value"),
]

# object_type values of comment_links.txt and object_codes.txt
COMMENT_LINK_OBJECT_TYPES = [
    ("stop_area", "stop_areas"),
    ("stop_point", "stop_points"),
    ("line", "lines"),
    ("route", "routes"),
    ("trip", "vehicle_journeys"),
]

CODE_OBJECT_TYPES = [
    ("network", "networks"),
    ("company", "companies"),
    ("stop_area", "stop_areas"),
    ("stop_point", "stop_points"),
    ("line", "lines"),
    ("route", "routes"),
    ("trip", "vehicle_journeys"),
]

# Files of collections read without any special handling:
# (file name, collection name, fields, object class)
SIMPLE_FILES = [
    ("contributors.txt", "contributors", CONTRIBUTOR_FIELDS, Contributor),
    ("datasets.txt", "datasets", DATASET_FIELDS, Dataset),
    ("networks.txt", "networks", NETWORK_FIELDS, Network),
    (
        "commercial_modes.txt",
        "commercial_modes",
        COMMERCIAL_MODE_FIELDS,
        CommercialMode,
    ),
    ("physical_modes.txt", "physical_modes", PHYSICAL_MODE_FIELDS, PhysicalMode),
    ("companies.txt", "companies", COMPANY_FIELDS, Company),
    ("comments.txt", "comments", COMMENT_FIELDS, Comment),
    ("equipments.txt", "equipments", EQUIPMENT_FIELDS, Equipment),
    (
        "trip_properties.txt",
        "trip_properties",
        TRIP_PROPERTY_FIELDS,
        TripProperty,
    ),
    ("geometries.txt", "geometries", GEOMETRY_FIELDS, Geometry),
    ("levels.txt", "levels", LEVEL_FIELDS, Level),
    ("pathways.txt", "pathways", PATHWAY_FIELDS, Pathway),
    ("tickets.txt", "tickets", TICKET_FIELDS, Ticket),
    ("ticket_uses.txt", "ticket_uses", TICKET_USE_FIELDS, TicketUse),
    ("lines.txt", "lines", LINE_FIELDS, Line),
    ("routes.txt", "routes", ROUTE_FIELDS, Route),
    ("trips.txt", "vehicle_journeys", TRIP_FIELDS, VehicleJourney),
]

# Files of collections without identifiers, all of them optional
PLAIN_FILES = [
    ("transfers.txt", "transfers", TRANSFER_FIELDS, Transfer),
    ("ticket_prices.txt", "ticket_prices", TICKET_PRICE_FIELDS, TicketPrice),
    (
        "ticket_use_perimeters.txt",
        "ticket_use_perimeters",
        TICKET_USE_PERIMETER_FIELDS,
        TicketUsePerimeter,
    ),
    (
        "ticket_use_restrictions.txt",
        "ticket_use_restrictions",
        TICKET_USE_RESTRICTION_FIELDS,
        TicketUseRestriction,
    ),
]


class NtfsLoader(Loader):
    """Reads an NTFS directory or zip archive into a Model.

  Args:
    feed_path: string path to a zip file or directory
    problems: a ProblemReporter object, the default reporter logs each problem
    zip: a zipfile.ZipFile object, optionally used instead of path
    prefix: when set, every identifier is prefixed with "prefix:"
  """

    SCHEMA = SCHEMA
    _FILE_MAPPING = {
        "contributors.txt": {"required": True},
        "datasets.txt": {"required": True},
        "networks.txt": {"required": True},
        "commercial_modes.txt": {"required": True},
        "physical_modes.txt": {"required": True},
        "companies.txt": {"required": True},
        "lines.txt": {"required": True},
        "routes.txt": {"required": True},
        "trips.txt": {"required": True},
        "stops.txt": {"required": True},
        "stop_times.txt": {"required": True},
        "calendar.txt": {"required": False},
        "calendar_dates.txt": {"required": False},
        "transfers.txt": {"required": False},
        "comments.txt": {"required": False},
        "comment_links.txt": {"required": False},
        "equipments.txt": {"required": False},
        "trip_properties.txt": {"required": False},
        "geometries.txt": {"required": False},
        "levels.txt": {"required": False},
        "pathways.txt": {"required": False},
        "tickets.txt": {"required": False},
        "ticket_uses.txt": {"required": False},
        "ticket_prices.txt": {"required": False},
        "ticket_use_perimeters.txt": {"required": False},
        "ticket_use_restrictions.txt": {"required": False},
        "object_codes.txt": {"required": False},
        "feed_infos.txt": {"required": False},
    }
    _REQUIRED_ONE_OF = [("calendar.txt", "calendar_dates.txt")]

    def _LoadCollections(self, collections):
        for file_name, name, fields, object_class in SIMPLE_FILES:
            collection = collections.GetCollection(name)
            for obj in self._ReadObjects(file_name, fields, object_class):
                self._Push(collection, obj)
        for network in collections.networks:
            self._problems.SetFileContext(*network.GetContext())
            if util.ValidateTimezone(
                network.timezone, "network_timezone", self._problems
            ):
                network.timezone = None
        self._problems.ClearContext()
        self._LoadStops(collections)
        self._LoadCalendarFiles(collections)
        self._LoadStopTimes(collections)
        for file_name, name, fields, object_class in PLAIN_FILES:
            collection = collections.GetCollection(name)
            for obj in self._ReadObjects(file_name, fields, object_class):
                collection.Push(obj)
        self._LoadCommentLinks(collections)
        self._LoadObjectCodes(collections)
        for values, _ in self._ReadRecords("feed_infos.txt", FEED_INFO_FIELDS):
            collections.feed_infos[values["feed_info_param"]] = (
                values["feed_info_value"] or ""
            )

    def _LoadStops(self, collections):
        for values, context in self._ReadRecords("stops.txt", STOP_FIELDS):
            location_type = values.pop("location_type")
            if util.ValidateTimezone(
                values["timezone"], "stop_timezone", self._problems
            ):
                values["timezone"] = None
            if location_type == LOCATION_TYPE_STOP_AREA:
                values.pop("stop_area_id")
                values.pop("platform_code")
                stop = StopArea(field_dict=values)
                collection = collections.stop_areas
            elif location_type == LOCATION_TYPE_STOP_POINT:
                stop = StopPoint(field_dict=values)
                collection = collections.stop_points
            else:
                self._problems.InvalidValue(
                    "location_type",
                    location_type,
                    "only stop points (0) and stop areas (1) are supported; "
                    "the stop is ignored",
                    type=TYPE_NOTICE,
                )
                continue
            stop.SetContext(context)
            self._Push(collection, stop)

    def _LoadStopTimes(self, collections):
        sequences = set()
        for values, context in self._ReadRecords(
            "stop_times.txt", STOP_TIME_FIELDS
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
        for vehicle_journey in collections.vehicle_journeys:
            vehicle_journey.SortStopTimes()

    def _FindObject(self, collections, object_types, object_type, object_id):
        """Return the object of an object_type/object_id pair, or None after
    reporting why it can not be found."""
        names = dict(object_types)
        if object_type not in names:
            self._problems.InvalidValue(
                "object_type",
                object_type,
                "expected one of %s" % ", ".join(t for t, _ in object_types),
            )
            return None
        obj = collections.GetCollection(names[object_type]).GetById(object_id)
        if obj is None:
            self._problems.UnresolvedReference(
                "object_id",
                object_id,
                object_type,
                object_id,
                names[object_type],
                type=TYPE_WARNING,
            )
        return obj

    def _LoadCommentLinks(self, collections):
        for values, _ in self._ReadRecords(
            "comment_links.txt", COMMENT_LINK_FIELDS
        ):
            obj = self._FindObject(
                collections,
                COMMENT_LINK_OBJECT_TYPES,
                values["object_type"],
                values["object_id"],
            )
            if obj is not None and values["comment_id"] not in obj.comment_links:
                obj.comment_links.append(values["comment_id"])

    def _LoadObjectCodes(self, collections):
        for values, _ in self._ReadRecords(
            "object_codes.txt", OBJECT_CODE_FIELDS
        ):
            obj = self._FindObject(
                collections,
                CODE_OBJECT_TYPES,
                values["object_type"],
                values["object_id"],
            )
            if obj is not None:
                obj.codes.append(
                    (values["object_system"], values["object_code"])
                )
