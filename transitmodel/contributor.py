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


class Contributor(ModelObjectBase):
    """The organisation providing one or more datasets."""

    _COLLECTION = "contributors"
    _FIELD_NAMES = ["id", "name", "license", "website"]


class Dataset(ModelObjectBase):
    """A set of vehicle journeys delivered together by a contributor.

  Attributes:
    start_date, end_date: datetime.date, the validity period
    desc, system: free text
    type: the kind of data, "0" theoretical, "1" revised, "2" production
  """

    _COLLECTION = "datasets"
    _FIELD_NAMES = [
        "id",
        "contributor_id",
        "start_date",
        "end_date",
        "type",
        "desc",
        "system",
    ]
    _REFERENCES = [("contributor_id", "contributors", True)]
