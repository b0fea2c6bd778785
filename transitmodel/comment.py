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


class Comment(ModelObjectBase):
    """A text attached to lines, routes, vehicle journeys or stops through
  their comment_links attribute."""

    _COLLECTION = "comments"
    _FIELD_NAMES = ["id", "type", "label", "name", "url"]

    TYPE_INFORMATION = "information"
    TYPE_ON_DEMAND_TRANSPORT = "on_demand_transport"
