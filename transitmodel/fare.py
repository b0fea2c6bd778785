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


"""Fares: tickets, where they may be used and what they cost."""

from .objectbase import ModelObjectBase


class Ticket(ModelObjectBase):
    _COLLECTION = "tickets"
    _FIELD_NAMES = ["id", "name", "comment"]


class TicketUse(ModelObjectBase):
    """The conditions of use of a ticket.

  Attributes:
    max_transfers: int or None, the number of transfers allowed
    boarding_time_limit: int seconds or None, the time after the first
      boarding during which the ticket may be used to board again
    alighting_time_limit: int seconds or None
  """

    _COLLECTION = "ticket_uses"
    _FIELD_NAMES = [
        "id",
        "ticket_id",
        "max_transfers",
        "boarding_time_limit",
        "alighting_time_limit",
    ]
    _REFERENCES = [("ticket_id", "tickets", True)]


class TicketPrice(ModelObjectBase):
    """The price of a ticket over a validity period.

  Attributes:
    price: decimal.Decimal
    currency: ISO 4217 code
    validity_start, validity_end: datetime.date, both included
  """

    _COLLECTION = "ticket_prices"
    _FIELD_NAMES = [
        "ticket_id",
        "price",
        "currency",
        "validity_start",
        "validity_end",
    ]
    _REFERENCES = [("ticket_id", "tickets", True)]

    @property
    def id(self):
        return "%s-%s" % (self.ticket_id, self.validity_start)


class TicketUsePerimeter(ModelObjectBase):
    """A network or a line where a ticket use is valid, or not.

  object_type tells which collection object_id references.
  """

    _COLLECTION = "ticket_use_perimeters"
    _FIELD_NAMES = [
        "ticket_use_id",
        "object_type",
        "object_id",
        "perimeter_action",
    ]

    PERIMETER_INCLUDED = 1
    PERIMETER_EXCLUDED = 2

    # object_type: collection name
    OBJECT_TYPES = {"network": "networks", "line": "lines"}

    def GetReferences(self):
        yield "ticket_use_id", self.ticket_use_id, "ticket_uses", True
        yield (
            "object_id",
            self.object_id,
            self.OBJECT_TYPES[self.object_type],
            True,
        )

    @property
    def id(self):
        return "%s-%s-%s" % (self.ticket_use_id, self.object_type, self.object_id)


class TicketUseRestriction(ModelObjectBase):
    """Limits a ticket use to trips between two zones, or between two stop
  areas.

  A "zone" restriction compares fare zone names that no other object
  references; an "OD" restriction references stop areas.
  """

    _COLLECTION = "ticket_use_restrictions"
    _FIELD_NAMES = [
        "ticket_use_id",
        "restriction_type",
        "use_origin",
        "use_destination",
    ]

    RESTRICTION_ZONE = "zone"
    RESTRICTION_ORIGIN_DESTINATION = "OD"

    def GetReferences(self):
        yield "ticket_use_id", self.ticket_use_id, "ticket_uses", True
        if self.restriction_type == self.RESTRICTION_ORIGIN_DESTINATION:
            yield "use_origin", self.use_origin, "stop_areas", True
            yield "use_destination", self.use_destination, "stop_areas", True

    @property
    def id(self):
        return "%s-%s-%s" % (
            self.ticket_use_id,
            self.use_origin,
            self.use_destination,
        )
