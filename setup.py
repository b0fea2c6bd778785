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

"""
This script can be used to create a source distribution or a wheel of the
transitmodel library and its command line tools. The output is put in dist/
"""

from setuptools import setup

# Read the version without importing the package, whose dependencies may not
# be installed yet.
version = {}
with open("transitmodel/version.py") as version_file:
    exec(version_file.read(), version)

scripts = [
    "gtfs2ntfs.py",
    "ntfs2gtfs.py",
    "ntfs2ntfs.py",
    "gtfs2netexfr.py",
    "ntfs2netexfr.py",
    "restrict_validity_period.py",
    "enrich_ntfs_with_farev2.py",
]

setup(
    version=version["__version__"],
    name="transitmodel",
    description="Public transit data model with NTFS, GTFS and NeTEx France "
    "readers and writers",
    long_description="This module provides a library for reading, checking, "
    "merging and writing public transit datasets. It includes scripts that "
    "convert between NTFS, GTFS and NeTEx France, restrict a dataset to a "
    "validity period and add fares to an NTFS feed.",
    platforms="OS Independent",
    license="Apache License, Version 2.0",
    packages=["transitmodel"],
    scripts=scripts,
    python_requires=">=3.8",
    install_requires=["pytz", "pyproj", "simplejson"],
    extras_require={"test": ["pytest"]},
    zip_safe=False,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Information Technology",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: GIS",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
