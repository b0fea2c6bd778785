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

"""Enrichment of a Model with the fares of a separate archive.

The archive holds the NTFS fare files: tickets, ticket uses, prices,
perimeters and optional restrictions. They replace the fares of the Model;
perimeters and restrictions naming unknown lines, networks or stop areas are
reported and dropped, like any other unresolved reference.
"""

import logging

from . import ntfsloader
from .collection import Collection, CollectionWithId
from .errors import TYPE_NOTICE
from .loader import Loader
from .model import Model

log = logging.getLogger(__name__)

FARE_COLLECTION_NAMES = [
    "tickets",
    "ticket_uses",
    "ticket_prices",
    "ticket_use_perimeters",
    "ticket_use_restrictions",
]


class FaresLoader(Loader):
    """Reads the fare files of a directory or zip archive into a Model.

  Args:
    feed_path: string path to a zip file or directory
    problems: a ProblemReporter object, the default reporter logs each problem
    zip: a zipfile.ZipFile object, optionally used instead of path
  """

    SCHEMA = "NTFS fares"
    _FILE_MAPPING = {
        "tickets.txt": {"required": True},
        "ticket_uses.txt": {"required": True},
        "ticket_prices.txt": {"required": True},
        "ticket_use_perimeters.txt": {"required": True},
        "ticket_use_restrictions.txt": {"required": False},
    }

    def __init__(self, feed_path=None, problems=None, zip=None):
        Loader.__init__(self, feed_path, problems, zip)

    def LoadInto(self, model):
        """Return a new Model with the fares of the archive.

    Args:
      model: the Model whose fares are replaced, it is not modified

    Raises:
      ContainerError: the archive can not be opened or a fare file is missing
      DuplicateIdError: a ticket or ticket use id is used twice
    """
        self._Open()
        collections = model.IntoCollections()
        for name in FARE_COLLECTION_NAMES:
            collection = collections.GetCollection(name)
            if isinstance(collection, CollectionWithId):
                collections.SetCollection(name, CollectionWithId(name))
            else:
                collections.SetCollection(name, Collection(name))
        self._LoadCollections(collections)
        self._problems.ClearContext()
        self._ResolveReferences(collections, FARE_COLLECTION_NAMES)
        self._DropUnusedPrices(collections)
        result = Model(collections)
        log.info(
            "Read %d tickets and %d prices",
            len(result.tickets),
            len(result.ticket_prices),
        )
        return result

    def _LoadCollections(self, collections):
        for file_name, name, fields, object_class in ntfsloader.SIMPLE_FILES:
            if name not in FARE_COLLECTION_NAMES:
                continue
            collection = collections.GetCollection(name)
            for obj in self._ReadObjects(file_name, fields, object_class):
                self._Push(collection, obj)
        for file_name, name, fields, object_class in ntfsloader.PLAIN_FILES:
            if name not in FARE_COLLECTION_NAMES:
                continue
            collection = collections.GetCollection(name)
            for obj in self._ReadObjects(file_name, fields, object_class):
                collection.Push(obj)

    def _DropUnusedPrices(self, collections):
        """Drop the prices of tickets that no perimeter or restriction makes
    usable."""
        ticket_use_ids = set(
            p.ticket_use_id for p in collections.ticket_use_perimeters
        )
        ticket_use_ids.update(
            r.ticket_use_id for r in collections.ticket_use_restrictions
        )
        ticket_ids = set(
            ticket_use.ticket_id
            for ticket_use in collections.ticket_uses
            if ticket_use.id in ticket_use_ids
        )
        kept = []
        for price in collections.ticket_prices:
            if price.ticket_id in ticket_ids:
                kept.append(price)
            else:
                self._problems.OtherProblem(
                    "Ticket %s is used nowhere; its price from %s is dropped"
                    % (price.ticket_id, price.validity_start),
                    context=price.GetContext(),
                    type=TYPE_NOTICE,
                )
        collections.ticket_prices = Collection("ticket_prices", kept)


def EnrichWithFares(model, fares_path, problems=None):
    """Return a new Model with the fares read from fares_path."""
    return FaresLoader(fares_path, problems=problems).LoadInto(model)
