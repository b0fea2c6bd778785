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

"""Relation indices computed from the references stored in objects.

They are built in one pass and never updated. A Model builds new ones every
time it is created from collections.
"""

from .errors import StaleReferenceError


class OneToMany(object):
    """Parent to children index, built from a reference field of the children.

  Args:
    one: CollectionWithId of the parents
    many: Collection of the children
    field: name of the child attribute holding the parent id
  """

    def __init__(self, one, many, field):
        self.one = one
        self.many = many
        self.field = field
        self._children = {}
        self._parent = {}
        for child_idx, child in many.Iter():
            parent_id = getattr(child, field)
            if parent_id is None:
                continue
            parent_idx = one.GetIdx(parent_id)
            if parent_idx is None:
                # Dangling optional references are accepted by the Model
                continue
            self._children.setdefault(parent_idx, []).append(child_idx)
            self._parent[child_idx] = parent_idx

    def GetFrom(self, parent_idx):
        """Return the Idx of the children of parent_idx, in collection order."""
        if not self.one.Owns(parent_idx):
            raise StaleReferenceError(self.one.name, parent_idx)
        return list(self._children.get(parent_idx, []))

    def GetCorresponding(self, child_idx):
        """Return the parent Idx of child_idx or None if the child has none.

    Raises:
      StaleReferenceError: child_idx does not belong to the indexed collection,
        or the stored parent id no longer resolves.
    """
        if not self.many.Owns(child_idx):
            raise StaleReferenceError(self.many.name, child_idx)
        parent_idx = self._parent.get(child_idx)
        if parent_idx is None:
            return None
        parent_id = getattr(self.many.Get(child_idx), self.field)
        if self.one.GetIdx(parent_id) != parent_idx:
            raise StaleReferenceError(self.one.name, parent_idx)
        return parent_idx

    def GetCorrespondingForward(self, parent_idxs):
        result = set()
        for parent_idx in parent_idxs:
            result.update(self.GetFrom(parent_idx))
        return result

    def GetCorrespondingBackward(self, child_idxs):
        result = set()
        for child_idx in child_idxs:
            parent_idx = self.GetCorresponding(child_idx)
            if parent_idx is not None:
                result.add(parent_idx)
        return result


class ManyToMany(object):
    """Arbitrary pairing between two collections.

  Args:
    source: the collection on the left side of the pairs
    target: the collection on the right side of the pairs
    pairs: iterable of (source Idx, target Idx)
  """

    def __init__(self, source, target, pairs):
        self.source = source
        self.target = target
        self._forward = {}
        self._backward = {}
        for source_idx, target_idx in pairs:
            self._forward.setdefault(source_idx, set()).add(target_idx)
            self._backward.setdefault(target_idx, set()).add(source_idx)

    def GetFrom(self, source_idx):
        if not self.source.Owns(source_idx):
            raise StaleReferenceError(self.source.name, source_idx)
        return sorted(self._forward.get(source_idx, ()))

    def GetTo(self, target_idx):
        if not self.target.Owns(target_idx):
            raise StaleReferenceError(self.target.name, target_idx)
        return sorted(self._backward.get(target_idx, ()))

    def GetCorrespondingForward(self, source_idxs):
        result = set()
        for source_idx in source_idxs:
            result.update(self.GetFrom(source_idx))
        return result

    def GetCorrespondingBackward(self, target_idxs):
        result = set()
        for target_idx in target_idxs:
            result.update(self.GetTo(target_idx))
        return result
