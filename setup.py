#!/usr/bin/env python
# -*- coding: utf-8 -*-

# Copyright 2020-2024 Barcelona Supercomputing Center (BSC), Spain
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import re
import os
import sys
import setuptools

# In this way, we are sure we are getting
# the installer's version of the library
# not the system's one
setupDir = os.path.dirname(__file__)
sys.path.insert(0, setupDir)

from rocrate_io import __version__ as rocrate_io_version
from rocrate_io import __author__ as rocrate_io_author
from rocrate_io import __license__ as rocrate_io_license

# Populating the long description
with open(os.path.join(setupDir, "README.md"), "r") as fh:
    long_description = fh.read()

# Populating the install requirements
with open(os.path.join(setupDir, "requirements.txt")) as f:
    requirements = []
    egg = re.compile(r"#[^#]*egg=([^=&]+)")
    for line in f.read().splitlines():
        if len(line) == 0 or line.startswith("#"):
            continue
        m = egg.search(line)
        requirements.append(line if m is None else m.group(1))

package_data = {
    "rocrate_io": [
        "schemas/*.json",
    ],
}

setuptools.setup(
    name="rocrate_io",
    version=rocrate_io_version,
    package_data=package_data,
    author=rocrate_io_author,
    license=rocrate_io_license,
    description="RO-Crate reader and writer, keeping a typed entity graph",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "rocrate-io=rocrate_io.__main__:main",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
)
