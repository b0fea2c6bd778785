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

"""The Model, a validated set of collections with their relation indices.

Readers fill a Collections object and hand it to Model(), which checks that
every reference resolves before building the relation indices. A Model is not
modified afterwards: IntoCollections() returns an independent copy that can
be changed and turned into a new Model.
"""

import collections
import logging

from .collection import Collection, CollectionWithId
from .contributor import Contributor, Dataset
from .comment import Comment
from .errors import ReferentialIntegrityError
from .fare import (
    Ticket,
    TicketPrice,
    TicketUse,
    TicketUsePerimeter,
    TicketUseRestriction,
)
from .geometry import Geometry
from .line import Line
from .mode import CommercialMode, PhysicalMode
from .network import Company, Network
from .relations import ManyToMany, OneToMany
from .route import Route
from .stop import Equipment, Level, Pathway, StopArea, StopPoint
from .transfer import Transfer
from .trip import TripProperty, VehicleJourney
from .calendar import Calendar

log = logging.getLogger(__name__)

# Collections in an order where every collection comes after the ones it
# references.
OBJECT_CLASSES = [
    Contributor,
    Dataset,
    Network,
    CommercialMode,
    PhysicalMode,
    Company,
    Calendar,
    Comment,
    Ticket,
    TicketUse,
    Equipment,
    TripProperty,
    Geometry,
    Level,
    StopArea,
    StopPoint,
    Pathway,
    Line,
    Route,
    VehicleJourney,
]

COLLECTION_NAMES = [cls._COLLECTION for cls in OBJECT_CLASSES]

# Objects without an identifier of their own, held in plain Collections
PLAIN_OBJECT_CLASSES = [
    Transfer,
    TicketPrice,
    TicketUsePerimeter,
    TicketUseRestriction,
]

PLAIN_COLLECTION_NAMES = [cls._COLLECTION for cls in PLAIN_OBJECT_CLASSES]

ALL_COLLECTION_NAMES = COLLECTION_NAMES + PLAIN_COLLECTION_NAMES

# Modes are a fixed vocabulary shared by every dataset
UNPREFIXED_COLLECTIONS = ["physical_modes", "commercial_modes"]

# One to many relations used to navigate from a collection to another:
# (one, many, reference field of many)
NAVIGABLE_RELATIONS = [
    ("contributors", "datasets", "contributor_id"),
    ("datasets", "vehicle_journeys", "dataset_id"),
    ("networks", "lines", "network_id"),
    ("commercial_modes", "lines", "commercial_mode_id"),
    ("lines", "routes", "line_id"),
    ("routes", "vehicle_journeys", "route_id"),
    ("physical_modes", "vehicle_journeys", "physical_mode_id"),
    ("companies", "vehicle_journeys", "company_id"),
    ("calendars", "vehicle_journeys", "service_id"),
    ("trip_properties", "vehicle_journeys", "trip_property_id"),
    ("stop_areas", "stop_points", "stop_area_id"),
]

# Relations to shared objects. Navigating through them would relate objects
# that only share a geometry or an equipment, so GetCorresponding ignores them.
LOOKUP_RELATIONS = [
    ("equipments", "stop_areas", "equipment_id"),
    ("equipments", "stop_points", "equipment_id"),
    ("geometries", "lines", "geometry_id"),
    ("geometries", "routes", "geometry_id"),
    ("geometries", "vehicle_journeys", "geometry_id"),
    ("stop_areas", "routes", "destination_id"),
    ("levels", "stop_points", "level_id"),
    ("tickets", "ticket_uses", "ticket_id"),
]

COMMENTED_COLLECTIONS = [
    "stop_areas",
    "stop_points",
    "lines",
    "routes",
    "vehicle_journeys",
]


class Collections(object):
    """Mutable holder of every collection of a transit dataset.

  Attributes:
    one CollectionWithId per name of COLLECTION_NAMES
    one plain Collection per name of PLAIN_COLLECTION_NAMES, among them
      transfers and ticket_prices
    feed_infos: OrderedDict mapping parameter names to values
  """

    def __init__(self):
        for name in COLLECTION_NAMES:
            setattr(self, name, CollectionWithId(name))
        for name in PLAIN_COLLECTION_NAMES:
            setattr(self, name, Collection(name))
        self.feed_infos = collections.OrderedDict()

    def GetCollection(self, name):
        return getattr(self, name)

    def SetCollection(self, name, collection):
        setattr(self, name, collection)

    def Copy(self):
        """Return a deep copy, with new collection instances."""
        result = Collections()
        for name in ALL_COLLECTION_NAMES:
            target = result.GetCollection(name)
            for obj in self.GetCollection(name):
                target.Push(obj.Copy())
        result.feed_infos.update(self.feed_infos)
        return result

    def AddPrefix(self, prefix):
        """Prefix every identifier, and every reference to it, with "prefix:".

    Mode identifiers are left alone.
    """

        def Prefix(target, value):
            if target in UNPREFIXED_COLLECTIONS:
                return value
            return "%s:%s" % (prefix, value)

        for name in COLLECTION_NAMES:
            objects = list(self.GetCollection(name))
            for obj in objects:
                if name not in UNPREFIXED_COLLECTIONS:
                    obj.id = Prefix(name, obj.id)
                obj.RemapReferences(Prefix)
            self.SetCollection(name, CollectionWithId(name, objects))
        for name in PLAIN_COLLECTION_NAMES:
            for obj in self.GetCollection(name):
                obj.RemapReferences(Prefix)

    def Merge(self, other):
        """Append copies of the objects of other.

    Identical physical and commercial modes are shared between datasets;
    any other identifier present in both raises DuplicateIdError. Feed infos
    of self win over the ones of other.
    """
        for name in COLLECTION_NAMES:
            collection = self.GetCollection(name)
            for obj in other.GetCollection(name):
                existing = collection.GetById(obj.id)
                if existing is not None and name in (
                    "physical_modes",
                    "commercial_modes",
                ):
                    if existing == obj:
                        continue
                collection.Push(obj.Copy())
        for name in PLAIN_COLLECTION_NAMES:
            collection = self.GetCollection(name)
            for obj in other.GetCollection(name):
                collection.Push(obj.Copy())
        for key, value in other.feed_infos.items():
            self.feed_infos.setdefault(key, value)


class Model(object):
    """A validated transit dataset.

  Args:
    model_collections: a Collections object. The Model takes ownership of
      it; use IntoCollections() to get a copy that may be modified.

  Raises:
    ReferentialIntegrityError: a required reference is unset or does not
      resolve, or a comment link names an unknown comment.
  """

    def __init__(self, model_collections):
        self._collections = model_collections
        self._CheckReferences()
        self._BuildRelations()

    def __getattr__(self, name):
        if name in ALL_COLLECTION_NAMES or name == "feed_infos":
            return getattr(self._collections, name)
        raise AttributeError(name)

    def GetCollection(self, name):
        return self._collections.GetCollection(name)

    def _CheckReferences(self):
        for name in ALL_COLLECTION_NAMES:
            for obj in self._collections.GetCollection(name):
                self._CheckObjectReferences(obj, obj)
                for stop_time in getattr(obj, "stop_times", None) or []:
                    self._CheckObjectReferences(obj, stop_time, "stop_times.")

    def _CheckObjectReferences(self, owner, obj, prefix=""):
        for field, value, target, required in obj.GetReferences():
            if value is None:
                if required:
                    raise ReferentialIntegrityError(
                        owner.GetObjectType(), owner.id, prefix + field, None
                    )
                continue
            if not self._collections.GetCollection(target).Contains(value):
                if required:
                    raise ReferentialIntegrityError(
                        owner.GetObjectType(), owner.id, prefix + field, value
                    )
                log.debug(
                    "%s %s keeps unresolved optional %s %s",
                    owner.GetObjectType(),
                    owner.id,
                    field,
                    value,
                )

        for field, values, target in obj.GetMultiReferences():
            collection = self._collections.GetCollection(target)
            for value in values:
                if not collection.Contains(value):
                    raise ReferentialIntegrityError(
                        owner.GetObjectType(), owner.id, prefix + field, value
                    )

    def _BuildRelations(self):
        self._relations = {}
        self._navigation = collections.defaultdict(list)
        for one, many, field in NAVIGABLE_RELATIONS + LOOKUP_RELATIONS:
            relation = OneToMany(
                self.GetCollection(one), self.GetCollection(many), field
            )
            self._relations[(one, many)] = relation
            if (one, many, field) in NAVIGABLE_RELATIONS:
                self._navigation[one].append((many, relation, True))
                self._navigation[many].append((one, relation, False))

        vehicle_journeys = self.vehicle_journeys
        stop_points = self.stop_points
        pairs = []
        for vj_idx, vj in vehicle_journeys.Iter():
            for stop_time in vj.stop_times:
                pairs.append((vj_idx, stop_points.GetIdx(stop_time.stop_point_id)))
        relation = ManyToMany(vehicle_journeys, stop_points, pairs)
        self._relations[("vehicle_journeys", "stop_points")] = relation
        self._navigation["vehicle_journeys"].append(
            ("stop_points", relation, True)
        )
        self._navigation["stop_points"].append(
            ("vehicle_journeys", relation, False)
        )

        comments = self.comments
        for name in COMMENTED_COLLECTIONS:
            pairs = []
            for idx, obj in self.GetCollection(name).Iter():
                for comment_id in obj.comment_links:
                    pairs.append((idx, comments.GetIdx(comment_id)))
            self._relations[(name, "comments")] = ManyToMany(
                self.GetCollection(name), comments, pairs
            )

    def GetRelation(self, source, target):
        """Return the relation index between two collection names.

    Raises:
      KeyError: no relation is declared between them.
    """
        return self._relations[(source, target)]

    def _FindPath(self, source, target):
        """Breadth first search of the shortest chain of navigable relations."""
        previous = {source: None}
        queue = collections.deque([source])
        while queue:
            name = queue.popleft()
            if name == target:
                break
            for next_name, relation, forward in self._navigation[name]:
                if next_name not in previous:
                    previous[next_name] = (name, relation, forward)
                    queue.append(next_name)
        if target not in previous:
            return None
        path = []
        name = target
        while previous[name] is not None:
            name_before, relation, forward = previous[name]
            path.append((relation, forward))
            name = name_before
        path.reverse()
        return path

    def GetCorresponding(self, source, idxs, target):
        """Return the set of Idx of target related to the Idx of source.

    For example GetCorresponding("lines", {line_idx}, "stop_points") returns
    every stop point served by a vehicle journey of the line.

    Args:
      source: collection name of idxs
      idxs: iterable of Idx of the source collection
      target: collection name of the result
    """
        idxs = set(idxs)
        if source == target:
            return idxs
        path = self._FindPath(source, target)
        if path is None:
            raise KeyError("no relation from %s to %s" % (source, target))
        for relation, forward in path:
            if forward:
                idxs = relation.GetCorrespondingForward(idxs)
            else:
                idxs = relation.GetCorrespondingBackward(idxs)
        return idxs

    def GetCorrespondingFromIdx(self, source, idx, target):
        return self.GetCorresponding(source, [idx], target)

    def GetCorrespondingFromId(self, source, object_id, target):
        """Return the objects of target related to the object object_id."""
        idx = self.GetCollection(source).GetIdx(object_id)
        if idx is None:
            return []
        target_collection = self.GetCollection(target)
        return [
            target_collection.Get(i)
            for i in sorted(self.GetCorresponding(source, [idx], target))
        ]

    def IntoCollections(self):
        """Return a modifiable copy of the collections of this Model."""
        return self._collections.Copy()

    def Merge(self, other):
        """Return a new Model with the objects of self and other.

    Raises:
      DuplicateIdError: an identifier is used in both models.
    """
        merged = self.IntoCollections()
        merged.Merge(other._collections)
        return Model(merged)

    def GetStats(self):
        return collections.OrderedDict(
            (name, len(self.GetCollection(name)))
            for name in ALL_COLLECTION_NAMES
        )


__all__ = [
    "Collections",
    "Model",
    "ALL_COLLECTION_NAMES",
    "COLLECTION_NAMES",
    "PLAIN_COLLECTION_NAMES",
]
