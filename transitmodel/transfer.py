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


class Transfer(ModelObjectBase):
    """A connection between two stop points.

  Transfers have no identifier of their own and are stored in a plain
  Collection.

  Attributes:
    min_transfer_time: int seconds or None
    real_min_transfer_time: int seconds or None
  """

    _COLLECTION = "transfers"
    _FIELD_NAMES = [
        "from_stop_id",
        "to_stop_id",
        "min_transfer_time",
        "real_min_transfer_time",
        "equipment_id",
    ]
    _REFERENCES = [
        ("from_stop_id", "stop_points", True),
        ("to_stop_id", "stop_points", True),
        ("equipment_id", "equipments", False),
    ]

    @property
    def id(self):
        return "%s-%s" % (self.from_stop_id, self.to_stop_id)
