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

"""Writer of NTFS feeds.

Every file known to the NTFS reader is written with the same columns; the
optional ones only when they have rows. Reading an NTFS feed written by this
module and writing it again gives the same bytes.
"""

import collections

from . import ntfsloader
from .writer import FeedWriter


class NtfsWriter(FeedWriter):
    """Writes a Model as an NTFS directory or zip archive.

  Args:
    problems: a ProblemReporter, the default reporter logs problems
    current_datetime: a datetime.datetime; when set, feed_creation_date and
      feed_creation_time are added to the feed infos
  """

    SCHEMA = ntfsloader.SCHEMA
    FILE_NAMES = sorted(ntfsloader.NtfsLoader._FILE_MAPPING)

    def __init__(self, problems=None, current_datetime=None):
        FeedWriter.__init__(self, problems)
        self._current_datetime = current_datetime

    def _IsRequired(self, file_name):
        return ntfsloader.NtfsLoader._FILE_MAPPING[file_name]["required"]

    def _WriteFiles(self, model, output):
        for file_name, name, fields, _ in ntfsloader.SIMPLE_FILES:
            collection = model.GetCollection(name)
            if collection.IsEmpty() and not self._IsRequired(file_name):
                continue
            self._WriteRecords(output, file_name, fields, collection)
        self._WriteStops(model, output)
        self._WriteStopTimes(model, output)
        self._WriteCalendars(model.calendars, output)
        for file_name, name, fields, _ in ntfsloader.PLAIN_FILES:
            collection = model.GetCollection(name)
            if not collection.IsEmpty():
                self._WriteRecords(output, file_name, fields, collection)
        self._WriteObjectLinks(
            model,
            output,
            "comment_links.txt",
            ntfsloader.COMMENT_LINK_FIELDS,
            ntfsloader.COMMENT_LINK_OBJECT_TYPES,
            lambda obj: [
                {"comment_id": comment_id} for comment_id in obj.comment_links
            ],
        )
        self._WriteObjectLinks(
            model,
            output,
            "object_codes.txt",
            ntfsloader.OBJECT_CODE_FIELDS,
            ntfsloader.CODE_OBJECT_TYPES,
            lambda obj: [
                {"object_system": system, "object_code": code}
                for (system, code) in obj.codes
            ],
        )
        self._WriteFeedInfos(model, output)

    def _WriteStops(self, model, output):
        rows = []
        for stop_area in model.stop_areas:
            row = dict(stop_area.iteritems())
            row["location_type"] = ntfsloader.LOCATION_TYPE_STOP_AREA
            rows.append(row)
        for stop_point in model.stop_points:
            row = dict(stop_point.iteritems())
            row["location_type"] = ntfsloader.LOCATION_TYPE_STOP_POINT
            rows.append(row)
        self._WriteRecords(output, "stops.txt", ntfsloader.STOP_FIELDS, rows)

    def _WriteStopTimes(self, model, output):
        rows = []
        for vehicle_journey in model.vehicle_journeys:
            for stop_time in vehicle_journey.stop_times:
                row = dict(stop_time.iteritems())
                row["trip_id"] = vehicle_journey.id
                rows.append(row)
        self._WriteRecords(
            output, "stop_times.txt", ntfsloader.STOP_TIME_FIELDS, rows
        )

    def _WriteObjectLinks(
        self, model, output, file_name, fields, object_types, get_links
    ):
        """Write a file of rows about objects of several collections, such as
    comment_links.txt; get_links returns the row values of an object."""
        rows = []
        for object_type, name in object_types:
            for obj in model.GetCollection(name):
                for link in get_links(obj):
                    link.update({"object_type": object_type, "object_id": obj.id})
                    rows.append(link)
        if rows:
            self._WriteRecords(output, file_name, fields, rows)

    def _WriteFeedInfos(self, model, output):
        feed_infos = collections.OrderedDict(model.feed_infos)
        if self._current_datetime is not None:
            feed_infos["feed_creation_date"] = self._current_datetime.strftime(
                "%Y%m%d"
            )
            feed_infos["feed_creation_time"] = self._current_datetime.strftime(
                "%H:%M:%S"
            )
        if not feed_infos:
            return
        self._WriteRecords(
            output,
            "feed_infos.txt",
            ntfsloader.FEED_INFO_FIELDS,
            [
                {"feed_info_param": param, "feed_info_value": value}
                for param, value in feed_infos.items()
            ],
        )

