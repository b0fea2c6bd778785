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

from .objectbase import ModelObjectBase


class StopArea(ModelObjectBase):
    """A group of stop points, such as a station.

  Attributes:
    lon, lat: float WGS84 coordinates
  """

    _COLLECTION = "stop_areas"
    _FIELD_NAMES = [
        "id",
        "name",
        "code",
        "lat",
        "lon",
        "timezone",
        "equipment_id",
        "codes",
        "comment_links",
    ]
    _REFERENCES = [("equipment_id", "equipments", False)]
    _MULTI_REFERENCES = [("comment_links", "comments")]
    _LIST_FIELDS = ["codes"]

    def GetCoord(self):
        return (self.lon, self.lat)


class StopPoint(StopArea):
    """A place where vehicles stop, always part of a StopArea."""

    _COLLECTION = "stop_points"
    _FIELD_NAMES = StopArea._FIELD_NAMES + [
        "stop_area_id",
        "platform_code",
        "level_id",
    ]
    _REFERENCES = [
        ("stop_area_id", "stop_areas", True),
        ("equipment_id", "equipments", False),
        ("level_id", "levels", False),
    ]


class Equipment(ModelObjectBase):
    """Accessibility equipments of stops and transfers.

  Every attribute but id is an int: 0 unknown, 1 available, 2 not available.
  """

    _COLLECTION = "equipments"
    _PROPERTY_NAMES = [
        "wheelchair_boarding",
        "sheltered",
        "elevator",
        "escalator",
        "bike_accepted",
        "bike_depot",
        "visual_announcement",
        "audible_announcement",
        "appropriate_escort",
        "appropriate_signage",
    ]
    _FIELD_NAMES = ["id"] + _PROPERTY_NAMES

    def GetPropertyTuple(self):
        return tuple(getattr(self, name) or 0 for name in self._PROPERTY_NAMES)


class Level(ModelObjectBase):
    """A floor of a station, ordered by index: 0 is the ground level,
  negative indexes are underground."""

    _COLLECTION = "levels"
    _FIELD_NAMES = ["id", "index", "name"]


class Pathway(ModelObjectBase):
    """A way a passenger walks from a stop point to another inside a station.

  Attributes:
    mode: int, 1 walkway, 2 stairs, 3 travelator, 4 escalator, 5 elevator,
      6 fare gate, 7 exit gate
    is_bidirectional: int, 1 when the pathway can be used both ways
    length: float meters or None
    traversal_time: int seconds or None
  """

    _COLLECTION = "pathways"
    _FIELD_NAMES = [
        "id",
        "from_stop_id",
        "to_stop_id",
        "mode",
        "is_bidirectional",
        "length",
        "traversal_time",
        "stair_count",
        "max_slope",
        "min_width",
        "signposted_as",
        "reversed_signposted_as",
    ]
    _REFERENCES = [
        ("from_stop_id", "stop_points", True),
        ("to_stop_id", "stop_points", True),
    ]
