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

import re

from . import util
from .objectbase import ModelObjectBase

_LINESTRING_RE = re.compile(r"^\s*LINESTRING\s*\((.*)\)\s*$", re.IGNORECASE)


class Geometry(ModelObjectBase):
    """A shape stored as Well Known Text with WGS84 longitude/latitude."""

    _COLLECTION = "geometries"
    _FIELD_NAMES = ["id", "wkt"]

    def GetPoints(self):
        """Return the (lon, lat) points of a LINESTRING, or None for any
    other kind of geometry."""
        return ParseLineString(self.wkt or "")


def ParseLineString(wkt):
    """Parse "LINESTRING(lon lat, lon lat, ...)" into a list of (lon, lat).

  Returns None when wkt is not a line string.

  Raises:
    ValueError: a coordinate is not a number
  """
    m = _LINESTRING_RE.match(wkt)
    if not m:
        return None
    points = []
    for pair in m.group(1).split(","):
        values = pair.split()
        if len(values) != 2:
            raise ValueError('Bad point "%s" in LINESTRING' % pair.strip())
        points.append((float(values[0]), float(values[1])))
    return points


def FormatLineString(points):
    return "LINESTRING(%s)" % ", ".join(
        "%s %s" % (util.FormatCoordinate(lon), util.FormatCoordinate(lat))
        for (lon, lat) in points
    )
