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


class Network(ModelObjectBase):
    """A group of lines sold under one brand.

  Attributes:
    timezone: name of a time zone from the IANA database, or None
    sort_order: int or None
  """

    _COLLECTION = "networks"
    _FIELD_NAMES = [
        "id",
        "name",
        "url",
        "timezone",
        "lang",
        "phone",
        "address",
        "sort_order",
        "codes",
    ]
    _LIST_FIELDS = ["codes"]


class Company(ModelObjectBase):
    """The operator running vehicle journeys."""

    _COLLECTION = "companies"
    _FIELD_NAMES = ["id", "name", "address", "url", "mail", "phone", "codes"]
    _LIST_FIELDS = ["codes"]
