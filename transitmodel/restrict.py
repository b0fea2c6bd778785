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

"""Restriction of a Model to a validity period.

Calendars are cut to a closed date interval. Vehicle journeys left without
service are removed, then the objects only reachable through them are removed
or kept depending on an orphan policy that callers must choose.
"""

import logging

from . import problems as problems_module
from . import util
from .collection import Collection, CollectionWithId
from .errors import ConfigurationError, TYPE_WARNING
from .model import ALL_COLLECTION_NAMES, PLAIN_COLLECTION_NAMES, Model

log = logging.getLogger(__name__)

# Routes, lines, stop points and stop areas without vehicle journeys are removed
ORPHANS_REMOVE = "remove"
# Routes, lines, stop points and stop areas without vehicle journeys are kept
ORPHANS_KEEP = "keep"

ORPHAN_POLICIES = [ORPHANS_REMOVE, ORPHANS_KEEP]

FEED_START_DATE = "feed_start_date"
FEED_END_DATE = "feed_end_date"


def _Keep(collections, name, predicate):
    """Replace a collection by the objects matching predicate.

  Returns the number of objects removed."""
    collection = collections.GetCollection(name)
    kept = [obj for obj in collection if predicate(obj)]
    if isinstance(collection, CollectionWithId):
        collections.SetCollection(name, CollectionWithId(name, kept))
    else:
        collections.SetCollection(name, Collection(name, kept))
    removed = len(collection) - len(kept)
    if removed:
        log.info("Removed %d %s", removed, name.replace("_", " "))
    return removed


def _ClampDate(date, start_date, end_date):
    return min(max(date, start_date), end_date)


def _HasRequiredReferences(collections, obj):
    for _, value, target, required in obj.GetReferences():
        if required and not collections.GetCollection(target).Contains(value):
            return False
    return True


def _ClearDanglingReferences(collections):
    """Unset the optional references to objects that were removed."""
    for name in ALL_COLLECTION_NAMES:
        for obj in collections.GetCollection(name):
            for field, value, target, required in list(obj.GetReferences()):
                if value is None or required:
                    continue
                if not collections.GetCollection(target).Contains(value):
                    log.debug(
                        "Cleared %s of %s %s", field, obj.GetObjectType(), obj.id
                    )
                    setattr(obj, field, None)


def _RestrictFeedInfos(feed_infos, start_date, end_date, problems):
    for key in (FEED_START_DATE, FEED_END_DATE):
        value = feed_infos.get(key)
        if util.IsEmpty(value):
            continue
        try:
            date = util.DateStringToDateObject(value)
        except ValueError:
            problems.InvalidValue(
                key,
                value,
                "the feed info is not a YYYYMMDD date and is left unchanged",
                type=TYPE_WARNING,
            )
            continue
        feed_infos[key] = util.FormatDate(
            _ClampDate(date, start_date, end_date)
        )


def RestrictValidityPeriod(
    model, start_date, end_date, orphan_policy, problems=None
):
    """Return a new Model only running between start_date and end_date.

  Args:
    model: the Model to restrict, it is not modified
    start_date, end_date: datetime.date bounds of the period, both included
    orphan_policy: ORPHANS_REMOVE or ORPHANS_KEEP
    problems: a ProblemReporter for feed infos that can not be restricted

  Returns:
    A Model whose calendars only hold dates inside the period.

  Raises:
    ConfigurationError: the period is empty or the policy is unknown.
  """
    if orphan_policy not in ORPHAN_POLICIES:
        raise ConfigurationError(
            'unknown orphan policy "%s", expected one of %s'
            % (orphan_policy, ", ".join(ORPHAN_POLICIES))
        )
    if start_date > end_date:
        raise ConfigurationError(
            "the period ends on %s, before its start on %s"
            % (end_date, start_date)
        )
    if problems is None:
        problems = problems_module.default_problem_reporter
    log.info(
        "Restricting to %s - %s, orphans are %s",
        start_date,
        end_date,
        orphan_policy == ORPHANS_REMOVE and "removed" or "kept",
    )

    collections = model.IntoCollections()
    for calendar in collections.calendars:
        calendar.Restrict(start_date, end_date)
    _Keep(collections, "calendars", lambda calendar: calendar.dates)
    _Keep(
        collections,
        "vehicle_journeys",
        lambda vj: collections.calendars.Contains(vj.service_id),
    )

    if orphan_policy == ORPHANS_REMOVE:
        route_ids = set(vj.route_id for vj in collections.vehicle_journeys)
        _Keep(collections, "routes", lambda route: route.id in route_ids)
        line_ids = set(route.line_id for route in collections.routes)
        _Keep(collections, "lines", lambda line: line.id in line_ids)
        stop_point_ids = set()
        for vj in collections.vehicle_journeys:
            stop_point_ids.update(vj.GetStopPointIds())
        _Keep(
            collections,
            "stop_points",
            lambda stop_point: stop_point.id in stop_point_ids,
        )
        stop_area_ids = set(sp.stop_area_id for sp in collections.stop_points)
        _Keep(
            collections,
            "stop_areas",
            lambda stop_area: stop_area.id in stop_area_ids,
        )

    # Objects between removed stops or about removed lines go with them
    for name in ["pathways"] + PLAIN_COLLECTION_NAMES:
        _Keep(
            collections,
            name,
            lambda obj: _HasRequiredReferences(collections, obj),
        )
    _ClearDanglingReferences(collections)

    for dataset in collections.datasets:
        if dataset.start_date is not None:
            dataset.start_date = _ClampDate(
                dataset.start_date, start_date, end_date
            )
        if dataset.end_date is not None:
            dataset.end_date = _ClampDate(dataset.end_date, start_date, end_date)
    _RestrictFeedInfos(collections.feed_infos, start_date, end_date, problems)

    return Model(collections)
