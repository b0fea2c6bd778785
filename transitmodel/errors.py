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

# Problem types:
# Error: a record that could not be used and was skipped.
TYPE_ERROR = 0
# Warning: a record that was kept after relaxing one of its values.
TYPE_WARNING = 1
# Notice: an issue unrelated to data.
TYPE_NOTICE = 2

ALL_TYPES = [TYPE_ERROR, TYPE_WARNING, TYPE_NOTICE]


class Error(Exception):
    pass


class StaleReferenceError(Error):
    """An Idx was used with a collection other than the one that created it."""

    def __init__(self, collection_name, idx):
        Error.__init__(
            self,
            "%s is not a valid index of collection %s; the collection was "
            "rebuilt since it was created" % (idx, collection_name),
        )
        self.collection_name = collection_name
        self.idx = idx


class DuplicateIdError(Error):
    def __init__(self, collection_name, object_id, file_name=None, row_num=None):
        message = 'identifier "%s" already exists in %s' % (
            object_id,
            collection_name,
        )
        if file_name:
            message = "%s:%s: %s" % (file_name, row_num or "", message)
        Error.__init__(self, message)
        self.collection_name = collection_name
        self.object_id = object_id
        self.file_name = file_name
        self.row_num = row_num


class ReferentialIntegrityError(Error):
    """A required reference does not resolve inside a Model."""

    def __init__(self, object_type, object_id, field, missing_id):
        if missing_id is None:
            message = "%s %s has no value for required field %s" % (
                object_type,
                object_id,
                field,
            )
        else:
            message = '%s %s references unknown %s "%s"' % (
                object_type,
                object_id,
                field,
                missing_id,
            )
        Error.__init__(self, message)
        self.object_type = object_type
        self.object_id = object_id
        self.field = field
        self.missing_id = missing_id


class ContainerError(Error):
    """The input or output container can not be used."""

    def __init__(self, path, reason):
        Error.__init__(self, "%s: %s" % (path, reason))
        self.path = path
        self.reason = reason


class MissingRequiredFileError(ContainerError):
    def __init__(self, schema, file_name):
        ContainerError.__init__(
            self, file_name, "required %s file is missing" % schema
        )
        self.schema = schema
        self.file_name = file_name


class ConstraintViolationError(Error):
    """The data of a Model can not be represented in a target schema."""

    def __init__(self, schema, reason):
        Error.__init__(self, "can not write %s: %s" % (schema, reason))
        self.schema = schema
        self.reason = reason


class WriteError(Error):
    pass


class ProjectionError(Error):
    pass


class ConfigurationError(Error):
    pass
