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

"""Ordered, append-only object stores addressed by Idx handles.

An Idx is only meaningful for the collection instance that returned it. Every
collection gets a fresh token when it is created, so an Idx kept across a
rebuild (Filtered, Copy or a new Model) is detected as stale instead of
silently pointing at another object.
"""

import itertools

from .errors import DuplicateIdError, StaleReferenceError

_tokens = itertools.count(1)


class Idx(object):
    """Position of an object inside one collection instance."""

    __slots__ = ("_token", "_position")

    def __init__(self, token, position):
        object.__setattr__(self, "_token", token)
        object.__setattr__(self, "_position", position)

    def __setattr__(self, name, value):
        raise AttributeError("Idx is immutable")

    def GetPosition(self):
        return self._position

    def __eq__(self, other):
        if not isinstance(other, Idx):
            return NotImplemented
        return (
            self._token == other._token and self._position == other._position
        )

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other):
        return (self._token, self._position) < (other._token, other._position)

    def __hash__(self):
        return hash((self._token, self._position))

    def __repr__(self):
        return "<Idx %d of #%d>" % (self._position, self._token)


class Collection(object):
    """An ordered sequence of objects of one type.

  Objects can only be appended. Removing objects means building a new
  collection with Filtered(), which invalidates every Idx of the old one.
  """

    def __init__(self, name, objects=None):
        self.name = name
        self._token = next(_tokens)
        self._objects = []
        for obj in objects or []:
            self.Push(obj)

    def Push(self, obj):
        """Append obj and return its Idx."""
        self._objects.append(obj)
        return Idx(self._token, len(self._objects) - 1)

    def Owns(self, idx):
        return isinstance(idx, Idx) and idx._token == self._token

    def _CheckIdx(self, idx):
        if not self.Owns(idx) or idx._position >= len(self._objects):
            raise StaleReferenceError(self.name, idx)

    def Get(self, idx):
        """Return the object at idx.

    Raises:
      StaleReferenceError: idx was not created by this collection.
    """
        self._CheckIdx(idx)
        return self._objects[idx._position]

    # Objects are mutable; both accessors return the stored object.
    GetMut = Get

    def Iter(self):
        """Yield (Idx, object) pairs in insertion order."""
        for position, obj in enumerate(self._objects):
            yield Idx(self._token, position), obj

    def Indices(self):
        return [Idx(self._token, position) for position in range(len(self))]

    def Values(self):
        return iter(self._objects)

    def __iter__(self):
        return iter(self._objects)

    def __len__(self):
        return len(self._objects)

    def IsEmpty(self):
        return not self._objects

    def Filtered(self, predicate):
        """Return a new collection holding the objects for which predicate is
    true, in the same order."""
        return self.__class__(
            self.name, [obj for obj in self._objects if predicate(obj)]
        )

    def __repr__(self):
        return "<%s %s: %d objects>" % (
            self.__class__.__name__,
            self.name,
            len(self),
        )


class CollectionWithId(Collection):
    """A Collection whose objects have a unique `id` attribute.

  Insertion of an object whose id is already present fails with
  DuplicateIdError and leaves the collection unchanged.
  """

    def __init__(self, name, objects=None):
        self._id_to_idx = {}
        Collection.__init__(self, name, objects)

    def Push(self, obj):
        if obj.id in self._id_to_idx:
            raise DuplicateIdError(self.name, obj.id)
        idx = Collection.Push(self, obj)
        self._id_to_idx[obj.id] = idx
        return idx

    def PushWithId(self, object_id, obj):
        if object_id in self._id_to_idx:
            raise DuplicateIdError(self.name, object_id)
        obj.id = object_id
        return self.Push(obj)

    def GetIdx(self, object_id):
        """Return the Idx of the object with object_id, or None."""
        return self._id_to_idx.get(object_id)

    def GetById(self, object_id):
        idx = self._id_to_idx.get(object_id)
        if idx is None:
            return None
        return self._objects[idx._position]

    def Contains(self, object_id):
        return object_id in self._id_to_idx

    __contains__ = Contains

    def Ids(self):
        return [obj.id for obj in self._objects]
