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

"""This module is a library to read, check, convert and write public transit
datasets. Datasets are read from NTFS, GTFS or NeTEx France into a Model, may
be merged or restricted to a validity period, and are written back to any of
the three formats.

  import transitmodel
  model = transitmodel.GtfsLoader("gtfs.zip").Load()
  transitmodel.NtfsWriter().Write(model, "ntfs.zip")

A Model holds one collection per kind of object, such as stop_points or
vehicle_journeys. Objects of a collection are addressed by identifier or by
Idx, a typed index that is only valid with the collection that returned it.
Relations between collections are computed once when the Model is built:

  Model: Central object, a validated set of collections
  Collections: The mutable collections a Model is built from
  Collection, CollectionWithId: Ordered containers of objects
  NtfsLoader, GtfsLoader, NetexLoader: Readers of each format
  NtfsWriter, GtfsWriter, NetexWriter: Writers of each format
  RestrictValidityPeriod(): Cut a Model to a date interval
  EnrichWithFares(): Replace the fares of a Model by the ones of an archive
  ApplyObjectRules(): Regroup networks and modes of a Model
  ProblemReporter: Receives the problems found while reading and writing
"""

from transitmodel.version import __version__
from .calendar import Calendar
from .collection import Collection, CollectionWithId, Idx
from .comment import Comment
from .config import Config, ReadConfig
from .contributor import Contributor, Dataset
from .errors import *
from .fare import (
    Ticket,
    TicketPrice,
    TicketUse,
    TicketUsePerimeter,
    TicketUseRestriction,
)
from .fares import EnrichWithFares, FaresLoader
from .geometry import Geometry
from .gtfsloader import GtfsLoader
from .gtfswriter import GtfsWriter
from .line import Line
from .mode import CommercialMode, PhysicalMode
from .model import (
    ALL_COLLECTION_NAMES,
    COLLECTION_NAMES,
    PLAIN_COLLECTION_NAMES,
    Collections,
    Model,
)
from .netexloader import NetexLoader
from .netexwriter import NetexWriter
from .network import Company, Network
from .ntfsloader import NtfsLoader
from .ntfswriter import NtfsWriter
from .problems import *
from .projection import Project
from .relations import ManyToMany, OneToMany
from .restrict import ORPHANS_KEEP, ORPHANS_REMOVE, RestrictValidityPeriod
from .route import Route
from .rules import ApplyObjectRules, ReadObjectRules
from .stop import Equipment, Level, Pathway, StopArea, StopPoint
from .transfer import Transfer
from .trip import StopTime, TripProperty, VehicleJourney
