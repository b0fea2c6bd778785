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

"""JSON configuration of the readers of schemas that do not describe their
contributor and dataset, like GTFS and NeTEx.

A configuration file looks like

  {
    "contributor": {"contributor_id": "TAG", "contributor_name": "Tag"},
    "dataset": {"dataset_id": "TAG-1"},
    "feed_infos": {"feed_publisher_name": "Tag"}
  }

Every key is optional.
"""

import collections
import logging

import simplejson

from .contributor import Contributor, Dataset
from .errors import ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_CONTRIBUTOR_ID = "default_contributor"
DEFAULT_DATASET_ID = "default_dataset"


class Config(object):
    """Contributor, dataset and feed infos added to a Model by a reader.

  Attributes:
    contributor: dict of contributor fields, keys like "contributor_name"
    dataset: dict of dataset fields, keys like "dataset_id"
    feed_infos: OrderedDict of feed info parameters
  """

    def __init__(self, contributor=None, dataset=None, feed_infos=None):
        self.contributor = dict(contributor or {})
        self.dataset = dict(dataset or {})
        self.feed_infos = collections.OrderedDict(feed_infos or {})

    def MakeContributor(self):
        return Contributor(
            id=self.contributor.get(
                "contributor_id", DEFAULT_CONTRIBUTOR_ID
            ),
            name=self.contributor.get(
                "contributor_name", "Default contributor"
            ),
            license=self.contributor.get("contributor_license"),
            website=self.contributor.get("contributor_website"),
        )

    def MakeDataset(self, contributor_id):
        """Return the dataset; its validity period is set by the reader."""
        return Dataset(
            id=self.dataset.get("dataset_id", DEFAULT_DATASET_ID),
            contributor_id=contributor_id,
            desc=self.dataset.get("dataset_desc"),
            system=self.dataset.get("dataset_system"),
            type=self.dataset.get("dataset_type"),
        )


def ReadConfig(path):
    """Read a JSON configuration file.

  Args:
    path: file name, or None for the default configuration

  Raises:
    ConfigurationError: the file can not be read or is not valid
  """
    if path is None:
        return Config()
    log.info("Reading configuration %s", path)
    try:
        with open(path, encoding="utf-8") as config_file:
            data = simplejson.load(
                config_file, object_pairs_hook=collections.OrderedDict
            )
    except (IOError, ValueError) as e:
        raise ConfigurationError("%s: %s" % (path, e))
    if not isinstance(data, dict):
        raise ConfigurationError("%s: expected a JSON object" % path)
    for key in ("contributor", "dataset", "feed_infos"):
        if key in data and not isinstance(data[key], dict):
            raise ConfigurationError(
                "%s: %s must be a JSON object" % (path, key)
            )
    unknown = set(data) - set(["contributor", "dataset", "feed_infos"])
    for key in sorted(unknown):
        log.warning("%s: ignoring unknown configuration key %s", path, key)
    return Config(
        data.get("contributor"), data.get("dataset"), data.get("feed_infos")
    )
