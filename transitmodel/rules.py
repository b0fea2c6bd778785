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

"""Object rules: regrouping of networks, commercial modes and physical modes.

A rules file is a JSON object like

  {
    "networks": [
      {
        "properties": {"network_id": "TAG", "network_name": "Tag"},
        "grouped_from": ["TAG-BUS", "TAG-TRAM"]
      }
    ],
    "commercial_modes": [...],
    "physical_modes": [...]
  }

Each rule moves the lines (or, for physical modes, the vehicle journeys) of
the grouped objects to the object named by the id of its properties, created
from the properties with the NTFS columns when the Model does not have it,
then removes the grouped objects. Every key is optional.
"""

import collections
import logging

import simplejson

from . import loader
from . import ntfsloader
from . import problems as problems_module
from .errors import ConfigurationError, TYPE_WARNING
from .mode import CommercialMode, PhysicalMode
from .model import Model
from .network import Network

log = logging.getLogger(__name__)

# (rules key, id column, NTFS fields, object class, name in messages)
RULE_TYPES = [
    ("networks", "network_id", ntfsloader.NETWORK_FIELDS, Network, "network"),
    (
        "commercial_modes",
        "commercial_mode_id",
        ntfsloader.COMMERCIAL_MODE_FIELDS,
        CommercialMode,
        "commercial mode",
    ),
    (
        "physical_modes",
        "physical_mode_id",
        ntfsloader.PHYSICAL_MODE_FIELDS,
        PhysicalMode,
        "physical mode",
    ),
]


def ReadObjectRules(path):
    """Return the rules of a JSON file as a dict of lists.

  Raises:
    ConfigurationError: the file can not be read or is not valid
  """
    log.info("Reading object rules %s", path)
    try:
        with open(path, encoding="utf-8") as rules_file:
            data = simplejson.load(
                rules_file, object_pairs_hook=collections.OrderedDict
            )
    except (IOError, ValueError) as e:
        raise ConfigurationError("%s: %s" % (path, e))
    if not isinstance(data, dict):
        raise ConfigurationError("%s: expected a JSON object" % path)
    rules = {}
    for key, id_column, _, _, _ in RULE_TYPES:
        rules[key] = data.get(key) or []
        if not isinstance(rules[key], list):
            raise ConfigurationError("%s: %s must be a JSON array" % (path, key))
        for rule in rules[key]:
            _CheckRule(path, key, id_column, rule)
    for key in sorted(set(data) - set(rules)):
        log.warning("%s: ignoring unknown object rules key %s", path, key)
    return rules


def _CheckRule(path, key, id_column, rule):
    if not isinstance(rule, dict) or not isinstance(
        rule.get("properties"), dict
    ):
        raise ConfigurationError(
            "%s: every rule of %s needs a properties object" % (path, key)
        )
    object_id = rule["properties"].get(id_column)
    if object_id is None:
        raise ConfigurationError('%s: key "%s" is required' % (path, id_column))
    if not isinstance(object_id, str) or not object_id:
        raise ConfigurationError(
            '%s: value for "%s" must be filled in' % (path, id_column)
        )
    if not isinstance(rule.get("grouped_from", []), list):
        raise ConfigurationError(
            "%s: grouped_from of %s must be a JSON array" % (path, object_id)
        )


def _MakeObject(properties, fields, object_class):
    """Build an object from rule properties keyed by NTFS column names."""
    row = dict(
        (column, value is not None and "%s" % value or "")
        for column, value in properties.items()
    )
    values = loader.ParseRecord(row, fields)
    if loader.IsSkip(values):
        raise ConfigurationError(
            "object rule properties %s: %s %s"
            % (
                row,
                values.column_name,
                values.reason or "is missing",
            )
        )
    return object_class(field_dict=values)


def ApplyObjectRules(model, rules_path, problems=None):
    """Return a new Model with the rules of rules_path applied.

  Args:
    model: the Model to change, it is not modified
    rules_path: path of the JSON rules file
    problems: a ProblemReporter for the rules that can not be applied

  Raises:
    ConfigurationError: the rules file is not valid
  """
    if problems is None:
        problems = problems_module.default_problem_reporter
    rules = ReadObjectRules(rules_path)

    # Which lines and vehicle journeys use each object, before any change
    lines_by_network = collections.defaultdict(list)
    lines_by_commercial_mode = collections.defaultdict(list)
    for line in model.lines:
        lines_by_network[line.network_id].append(line.id)
        lines_by_commercial_mode[line.commercial_mode_id].append(line.id)
    vehicle_journeys_by_physical_mode = collections.defaultdict(list)
    for vehicle_journey in model.vehicle_journeys:
        vehicle_journeys_by_physical_mode[
            vehicle_journey.physical_mode_id
        ].append(vehicle_journey.id)

    result = model.IntoCollections()

    def MoveNetwork(old_id, new_id):
        for line_id in lines_by_network.get(old_id, []):
            result.lines.GetById(line_id).network_id = new_id
        for perimeter in result.ticket_use_perimeters:
            if (perimeter.object_type, perimeter.object_id) == (
                "network",
                old_id,
            ):
                perimeter.object_id = new_id
        return old_id in lines_by_network

    def MoveCommercialMode(old_id, new_id):
        for line_id in lines_by_commercial_mode.get(old_id, []):
            result.lines.GetById(line_id).commercial_mode_id = new_id
        return old_id in lines_by_commercial_mode

    def MovePhysicalMode(old_id, new_id):
        for vj_id in vehicle_journeys_by_physical_mode.get(old_id, []):
            result.vehicle_journeys.GetById(vj_id).physical_mode_id = new_id
        return old_id in vehicle_journeys_by_physical_mode

    movers = {
        "networks": MoveNetwork,
        "commercial_modes": MoveCommercialMode,
        "physical_modes": MovePhysicalMode,
    }
    for key, id_column, fields, object_class, label in RULE_TYPES:
        if rules[key]:
            log.info("Applying %s rules", label)
        _ApplyRules(
            result,
            key,
            id_column,
            fields,
            object_class,
            label,
            rules[key],
            movers[key],
            problems,
        )
    return Model(result)


def _ApplyRules(
    result, key, id_column, fields, object_class, label, rules, move, problems
):
    new_objects = []
    for rule in rules:
        target_id = rule["properties"][id_column]
        grouped_from = rule.get("grouped_from") or []
        if not grouped_from:
            problems.OtherProblem(
                'The list to group by "%s" is empty for consolidation in "%s"'
                % (id_column, target_id),
                type=TYPE_WARNING,
            )
            continue
        collection = result.GetCollection(key)
        if not collection.Contains(target_id) and not any(
            obj.id == target_id for obj in new_objects
        ):
            new_objects.append(
                _MakeObject(rule["properties"], fields, object_class)
            )
        applied = False
        for grouped_id in grouped_from:
            if not collection.Contains(grouped_id):
                problems.OtherProblem(
                    'The identifier "%s" to regroup doesn\'t exist' % grouped_id,
                    type=TYPE_WARNING,
                )
                continue
            if grouped_id != target_id:
                applied = move(grouped_id, target_id) or applied
        if not applied:
            problems.OtherProblem(
                'The rule on the "%s" %s was not applied' % (target_id, label),
                type=TYPE_WARNING,
            )
        removed = set(grouped_from) - set([target_id])
        result.SetCollection(
            key, collection.Filtered(lambda obj: obj.id not in removed)
        )
    collection = result.GetCollection(key)
    for obj in new_objects:
        collection.Push(obj)
