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


class Line(ModelObjectBase):
    """A commercial line, grouping the routes sold under one name.

  Attributes:
    color, text_color: 6 hexadecimal digits or None
    sort_order: int or None
    opening_time, closing_time: int seconds since midnight or None
  """

    _COLLECTION = "lines"
    _FIELD_NAMES = [
        "id",
        "code",
        "name",
        "forward_name",
        "backward_name",
        "color",
        "text_color",
        "sort_order",
        "network_id",
        "commercial_mode_id",
        "geometry_id",
        "opening_time",
        "closing_time",
        "codes",
        "comment_links",
    ]
    _REFERENCES = [
        ("network_id", "networks", True),
        ("commercial_mode_id", "commercial_modes", True),
        ("geometry_id", "geometries", False),
    ]
    _MULTI_REFERENCES = [("comment_links", "comments")]
    _LIST_FIELDS = ["codes"]
