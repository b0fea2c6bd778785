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

"""Conversion of coordinates between reference frames.

Frames are named the way srsName attributes name them, like "EPSG:2154".
Coordinates are (x, y) tuples; for geographic frames x is the longitude.
"""

import math

import pyproj
from pyproj.exceptions import CRSError

from .errors import ProjectionError

WGS84 = "EPSG:4326"
LAMBERT_93 = "EPSG:2154"

_transformers = {}


def _GetTransformer(source_frame, target_frame):
    key = (source_frame, target_frame)
    if key not in _transformers:
        try:
            _transformers[key] = pyproj.Transformer.from_crs(
                pyproj.CRS.from_user_input(source_frame),
                pyproj.CRS.from_user_input(target_frame),
                always_xy=True,
            )
        except CRSError as e:
            raise ProjectionError(
                "can not convert coordinates from %s to %s: %s"
                % (source_frame, target_frame, e)
            )
    return _transformers[key]


def Project(coord, source_frame, target_frame):
    """Return coord converted from source_frame to target_frame.

  Args:
    coord: (x, y) tuple of floats
    source_frame, target_frame: frame names such as "EPSG:4326"

  Raises:
    ProjectionError: a frame is unknown or the coordinate can not be
      represented in the target frame.
  """
    if source_frame == target_frame:
        return coord
    x, y = _GetTransformer(source_frame, target_frame).transform(
        coord[0], coord[1]
    )
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ProjectionError(
            "coordinate %s %s of %s has no equivalent in %s"
            % (coord[0], coord[1], source_frame, target_frame)
        )
    return (x, y)
