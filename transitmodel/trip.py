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


class StopTime(ModelObjectBase):
    """A stop of a vehicle journey.

  Attributes:
    sequence: int, order of the stop in its vehicle journey
    arrival_time, departure_time: int seconds since midnight of the service
      day, which may exceed 24 hours
    pickup_type, drop_off_type: int, 0 regular, 1 none, 2 on demand
  """

    _FIELD_NAMES = [
        "stop_point_id",
        "sequence",
        "arrival_time",
        "departure_time",
        "pickup_type",
        "drop_off_type",
        "headsign",
    ]
    _REFERENCES = [("stop_point_id", "stop_points", True)]

    def GetTimeSecs(self):
        if self.arrival_time is not None:
            return self.arrival_time
        return self.departure_time


class VehicleJourney(ModelObjectBase):
    """A trip of one vehicle along a route, on the dates of a calendar.

  stop_times is a list of StopTime sorted by sequence.
  """

    _COLLECTION = "vehicle_journeys"
    _FIELD_NAMES = [
        "id",
        "route_id",
        "service_id",
        "headsign",
        "short_name",
        "block_id",
        "company_id",
        "physical_mode_id",
        "trip_property_id",
        "dataset_id",
        "geometry_id",
        "stop_times",
        "codes",
        "comment_links",
    ]
    _REFERENCES = [
        ("route_id", "routes", True),
        ("physical_mode_id", "physical_modes", True),
        ("dataset_id", "datasets", True),
        ("service_id", "calendars", True),
        ("company_id", "companies", True),
        ("trip_property_id", "trip_properties", False),
        ("geometry_id", "geometries", False),
    ]
    _MULTI_REFERENCES = [("comment_links", "comments")]
    _LIST_FIELDS = ["codes", "stop_times"]

    def AddStopTime(self, stop_time):
        self.stop_times.append(stop_time)

    def SortStopTimes(self):
        self.stop_times.sort(key=lambda st: st.sequence)

    def GetStopPointIds(self):
        return [st.stop_point_id for st in self.stop_times]

    def GetStartTime(self):
        if not self.stop_times:
            return None
        return self.stop_times[0].GetTimeSecs()

    def RemapReferences(self, function):
        ModelObjectBase.RemapReferences(self, function)
        for stop_time in self.stop_times:
            stop_time.RemapReferences(function)


class TripProperty(ModelObjectBase):
    """Accessibility and comfort properties of vehicle journeys.

  Every attribute but id is an int: 0 unknown, 1 available, 2 not available.
  """

    _COLLECTION = "trip_properties"
    _PROPERTY_NAMES = [
        "wheelchair_accessible",
        "bike_accepted",
        "air_conditioned",
        "visual_announcement",
        "audible_announcement",
        "appropriate_escort",
        "appropriate_signage",
        "school_vehicle_type",
    ]
    _FIELD_NAMES = ["id"] + _PROPERTY_NAMES

    def GetPropertyTuple(self):
        return tuple(getattr(self, name) or 0 for name in self._PROPERTY_NAMES)
