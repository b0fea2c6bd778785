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

"""Commercial and physical modes, and the mode tables of the schemas."""

from .objectbase import ModelObjectBase


class CommercialMode(ModelObjectBase):
    """The mode advertised to passengers, like "Bus" or "Express coach"."""

    _COLLECTION = "commercial_modes"
    _FIELD_NAMES = ["id", "name"]


class PhysicalMode(ModelObjectBase):
    """The kind of vehicle running a vehicle journey.

  Attributes:
    co2_emission: float, grams of CO2 per passenger and kilometer, or None
  """

    _COLLECTION = "physical_modes"
    _FIELD_NAMES = ["id", "name", "co2_emission"]


# Physical mode id: (name, default CO2 emission)
PHYSICAL_MODES = {
    "Air": ("Air", 144.6),
    "Boat": ("Boat", None),
    "Bus": ("Bus", 132.0),
    "BusRapidTransit": ("Bus rapid transit", 84.0),
    "Coach": ("Coach", 171.0),
    "Ferry": ("Ferry", 279.0),
    "Funicular": ("Funicular", 3.0),
    "LocalTrain": ("Local train", 30.7),
    "LongDistanceTrain": ("Long distance train", 3.4),
    "Metro": ("Metro", 3.0),
    "RailShuttle": ("Rail shuttle", 3.0),
    "RapidTransit": ("Rapid transit", 6.2),
    "Shuttle": ("Shuttle", 6.2),
    "SuspendedCableCar": ("Suspended cable car", 3.0),
    "Taxi": ("Taxi", 184.0),
    "Train": ("Train", 11.9),
    "Tramway": ("Tramway", 4.0),
}

# Commercial mode id: name
COMMERCIAL_MODES = {
    "Air": "Air",
    "Bus": "Bus",
    "CableCar": "Cable car",
    "Coach": "Coach",
    "Ferry": "Ferry",
    "Funicular": "Funicular",
    "Metro": "Metro",
    "SuspendedCableCar": "Suspended cable car",
    "Taxi": "Taxi",
    "Train": "Train",
    "Tramway": "Tramway",
}

# GTFS basic route_type: (commercial mode id, physical mode id)
_GTFS_BASIC_ROUTE_TYPES = {
    0: ("Tramway", "Tramway"),
    1: ("Metro", "Metro"),
    2: ("Train", "Train"),
    3: ("Bus", "Bus"),
    4: ("Ferry", "Ferry"),
    5: ("CableCar", "Tramway"),
    6: ("SuspendedCableCar", "SuspendedCableCar"),
    7: ("Funicular", "Funicular"),
    11: ("Bus", "Bus"),
    12: ("Metro", "Metro"),
}

# GTFS extended route_type ranges, by hundreds
_GTFS_EXTENDED_ROUTE_TYPES = {
    1: ("Train", "Train"),
    2: ("Coach", "Coach"),
    4: ("Metro", "Metro"),
    7: ("Bus", "Bus"),
    8: ("Bus", "Bus"),
    9: ("Tramway", "Tramway"),
    10: ("Ferry", "Ferry"),
    11: ("Air", "Air"),
    12: ("Ferry", "Ferry"),
    13: ("SuspendedCableCar", "SuspendedCableCar"),
    14: ("Funicular", "Funicular"),
    15: ("Taxi", "Taxi"),
}

_PHYSICAL_MODE_TO_GTFS_ROUTE_TYPE = {
    "Air": 1100,
    "Boat": 4,
    "Bus": 3,
    "BusRapidTransit": 3,
    "Coach": 200,
    "Ferry": 4,
    "Funicular": 7,
    "LocalTrain": 2,
    "LongDistanceTrain": 2,
    "Metro": 1,
    "RailShuttle": 2,
    "RapidTransit": 1,
    "Shuttle": 3,
    "SuspendedCableCar": 6,
    "Taxi": 1500,
    "Train": 2,
    "Tramway": 0,
}

# Lines without vehicle journey get the route_type of their commercial mode:
# the basic route_type reading back as that mode, an extended one otherwise.
_COMMERCIAL_MODE_TO_GTFS_ROUTE_TYPE = {
    "Air": 1100,
    "Bus": 3,
    "CableCar": 5,
    "Coach": 200,
    "Ferry": 4,
    "Funicular": 7,
    "Metro": 1,
    "SuspendedCableCar": 6,
    "Taxi": 1500,
    "Train": 2,
    "Tramway": 0,
}

_PHYSICAL_MODE_TO_NETEX = {
    "Air": "air",
    "Boat": "water",
    "Bus": "bus",
    "BusRapidTransit": "bus",
    "Coach": "coach",
    "Ferry": "water",
    "Funicular": "funicular",
    "LocalTrain": "rail",
    "LongDistanceTrain": "rail",
    "Metro": "metro",
    "RailShuttle": "rail",
    "RapidTransit": "rail",
    "Shuttle": "bus",
    "SuspendedCableCar": "cableway",
    "Taxi": "taxi",
    "Train": "rail",
    "Tramway": "tram",
}

_NETEX_TO_PHYSICAL_MODE = {
    "air": "Air",
    "bus": "Bus",
    "cableway": "SuspendedCableCar",
    "coach": "Coach",
    "ferry": "Ferry",
    "funicular": "Funicular",
    "metro": "Metro",
    "rail": "Train",
    "taxi": "Taxi",
    "tram": "Tramway",
    "trolleyBus": "Bus",
    "water": "Ferry",
}

DEFAULT_MODE = "Bus"


def ModesFromGtfsRouteType(route_type):
    """Return (commercial mode id, physical mode id) for a GTFS route_type.

  Unknown route types are mapped to buses."""
    if route_type in _GTFS_BASIC_ROUTE_TYPES:
        return _GTFS_BASIC_ROUTE_TYPES[route_type]
    return _GTFS_EXTENDED_ROUTE_TYPES.get(
        route_type // 100, (DEFAULT_MODE, DEFAULT_MODE)
    )


def GtfsRouteTypeFromPhysicalMode(physical_mode_id):
    return _PHYSICAL_MODE_TO_GTFS_ROUTE_TYPE.get(physical_mode_id, 3)


def GtfsRouteTypeFromCommercialMode(commercial_mode_id):
    return _COMMERCIAL_MODE_TO_GTFS_ROUTE_TYPE.get(commercial_mode_id, 3)


def NetexModeFromPhysicalMode(physical_mode_id):
    return _PHYSICAL_MODE_TO_NETEX.get(physical_mode_id, "bus")


def PhysicalModeFromNetexMode(netex_mode):
    return _NETEX_TO_PHYSICAL_MODE.get(netex_mode, DEFAULT_MODE)


def MakePhysicalMode(physical_mode_id):
    name, co2_emission = PHYSICAL_MODES.get(
        physical_mode_id, (physical_mode_id, None)
    )
    return PhysicalMode(
        id=physical_mode_id, name=name, co2_emission=co2_emission
    )


def MakeCommercialMode(commercial_mode_id):
    return CommercialMode(
        id=commercial_mode_id,
        name=COMMERCIAL_MODES.get(commercial_mode_id, commercial_mode_id),
    )
