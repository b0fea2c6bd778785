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


class Route(ModelObjectBase):
    """One direction of a line.

  Attributes:
    direction_type: "forward", "backward" or None
    destination_id: id of the StopArea the route heads to, or None
  """

    _COLLECTION = "routes"
    _FIELD_NAMES = [
        "id",
        "name",
        "direction_type",
        "line_id",
        "geometry_id",
        "destination_id",
        "codes",
        "comment_links",
    ]
    _REFERENCES = [
        ("line_id", "lines", True),
        ("geometry_id", "geometries", False),
        ("destination_id", "stop_areas", False),
    ]
    _MULTI_REFERENCES = [("comment_links", "comments")]
    _LIST_FIELDS = ["codes"]

    DIRECTION_FORWARD = "forward"
    DIRECTION_BACKWARD = "backward"

    def IsBackward(self):
        return self.direction_type in (self.DIRECTION_BACKWARD, "return")
