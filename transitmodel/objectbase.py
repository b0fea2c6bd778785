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

import copy


class ModelObjectBase(object):
    """Object with arbitrary attributes which may be stored in a Model.

  This class should be used as the base class for the objects stored in the
  collections of a Model. Readers set the attributes they know about; any other
  attribute may be added by callers.

  Subclasses must:
  * set the _COLLECTION class variable to the name of the collection holding
    objects of this type, such as 'stop_points'
  * override _FIELD_NAMES with every attribute the schemas know about
  * list their single valued references in _REFERENCES as tuples of
    (attribute name, target collection name, required)
  * list their multi valued references in _MULTI_REFERENCES as tuples of
    (attribute name, target collection name)

  Attributes listed in _LIST_FIELDS and _MULTI_REFERENCES default to a new
  empty list. Objects remember where they were read from in _context, a tuple
  (file_name, row_num, row, headers), to report problems found after parsing.
  """

    _COLLECTION = None
    _FIELD_NAMES = ["id"]
    _REFERENCES = []
    _MULTI_REFERENCES = []
    _LIST_FIELDS = []

    _context = None

    def __init__(self, field_dict=None, **kwargs):
        """Initialize a new object.

    Args:
      field_dict: A dictionary mapping attribute name to value
      kwargs: arbitrary keyword arguments may be used to add attributes to the
        new object, ignored when field_dict is present
    """
        if not field_dict:
            field_dict = kwargs
        self.__dict__.update(field_dict)
        for name in self._ListFieldNames():
            if self.__dict__.get(name) is None:
                self.__dict__[name] = []

    @classmethod
    def _ListFieldNames(cls):
        return list(cls._LIST_FIELDS) + [f for (f, _) in cls._MULTI_REFERENCES]

    def __getattr__(self, name):
        """Return None if name is a known attribute.

    This method is only called when name is not found in __dict__.
    """
        if name in self.__class__._FIELD_NAMES:
            return None
        else:
            raise AttributeError(name)

    def __getitem__(self, name):
        """Return a str representation of name or "" if not set."""
        if name in self.__dict__ and self.__dict__[name] is not None:
            return "%s" % self.__dict__[name]
        else:
            return ""

    def iteritems(self):
        """Return a iterable for (name, value) pairs of public attributes."""
        for name, value in self.__dict__.items():
            if (not name) or name[0] == "_":
                continue
            yield name, value

    def keys(self):
        """Return iterable of attributes used by this object."""
        columns = set()
        for name in vars(self):
            if (not name) or name[0] == "_":
                continue
            columns.add(name)
        return columns

    def __eq__(self, other):
        """Return true iff self and other are equivalent"""
        if other is None or other.__class__ != self.__class__:
            return False

        if id(self) == id(other):
            return True

        for k in self.keys().union(other.keys()):
            if getattr(self, k, None) != getattr(other, k, None):
                return False
        return True

    def __ne__(self, other):
        return not self.__eq__(other)

    __hash__ = None

    def __repr__(self):
        return "<%s %s>" % (
            self.__class__.__name__,
            sorted(self.iteritems(), key=lambda item: item[0]),
        )

    def GetObjectType(self):
        return self.__class__.__name__

    def SetContext(self, context):
        self._context = context

    def GetContext(self):
        return self._context

    def GetReferences(self):
        """Yield (field, referenced id, target collection, required) for each
    single valued reference, set or not."""
        for field, target, required in self._REFERENCES:
            yield field, getattr(self, field), target, required

    def GetMultiReferences(self):
        """Yield (field, list of referenced ids, target collection)."""
        for field, target in self._MULTI_REFERENCES:
            yield field, getattr(self, field), target

    def RemapReferences(self, function):
        """Replace every referenced id by function(target collection, id).

    Unset references are left alone. A multi valued reference keeps the ids
    for which function does not return None.
    """
        for field, value, target, _ in list(self.GetReferences()):
            if value is not None:
                setattr(self, field, function(target, value))
        for field, values, target in list(self.GetMultiReferences()):
            remapped = [function(target, value) for value in values]
            setattr(self, field, [v for v in remapped if v is not None])

    def Copy(self):
        return copy.deepcopy(self)
