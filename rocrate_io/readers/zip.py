#!/usr/bin/env python
# -*- coding: utf-8 -*-

# SPDX-License-Identifier: Apache-2.0
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

from __future__ import absolute_import

import atexit
import pathlib
import shutil
import sys
import tempfile
import zipfile

from typing import (
    cast,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from typing import (
        Any,
        Mapping,
        MutableSet,
        Optional,
    )

    from ..common import (
        PathLikePath,
        SymbolicName,
    )

# This code needs exception groups
if sys.version_info[:2] < (3, 11):
    from exceptiongroup import ExceptionGroup

from ..common import (
    LEGACY_ROCRATE_JSONLD_FILENAME,
    ROCRATE_JSONLD_FILENAME,
    CrateIOError,
    StructuralError,
    as_path,
)

from . import (
    AbstractReaderStrategy,
    parse_metadata_json,
)

# Extraction directories still in use, removed when the program finishes
_EXTRACTED_DIRS: "MutableSet[pathlib.Path]" = set()


def _remove_extracted_dirs() -> None:
    for extract_dir in list(_EXTRACTED_DIRS):
        shutil.rmtree(extract_dir, ignore_errors=True)
    _EXTRACTED_DIRS.clear()


atexit.register(_remove_extracted_dirs)


class ZipReaderStrategy(AbstractReaderStrategy):
    """
    Crates stored as a zip archive. The payload is extracted to a
    temporary directory, which is removed when the program finishes,
    or as soon as the crate turns out to be unreadable.
    """

    STRATEGY_NAME = cast("SymbolicName", "zip")

    def __init__(self, tempdir: "Optional[PathLikePath]" = None):
        super().__init__()
        self.tempdir = tempdir

    def read_metadata_json(self, location: "PathLikePath") -> "Mapping[str, Any]":
        zip_path = as_path(location)
        try:
            with zipfile.ZipFile(zip_path, mode="r") as zf:
                try:
                    jsonld_bin = zf.read(ROCRATE_JSONLD_FILENAME)
                except KeyError as e:
                    try:
                        jsonld_bin = zf.read(LEGACY_ROCRATE_JSONLD_FILENAME)
                    except KeyError as e2:
                        raise StructuralError(
                            f"Unable to locate RO-Crate metadata descriptor within {zip_path}"
                        ) from ExceptionGroup(  # pylint: disable=possibly-used-before-assignment
                            f"Both {ROCRATE_JSONLD_FILENAME} and {LEGACY_ROCRATE_JSONLD_FILENAME} tried",
                            [e, e2],
                        )
        except (OSError, zipfile.BadZipFile) as e:
            raise CrateIOError(f"Unable to read archive {zip_path}") from e

        return parse_metadata_json(jsonld_bin, zip_path.as_posix())

    def read_content(self, location: "PathLikePath") -> "pathlib.Path":
        zip_path = as_path(location)
        extract_dir = pathlib.Path(
            tempfile.mkdtemp(prefix="rocrate_io", suffix="zip", dir=self.tempdir)
        )
        # Assuring this temporal directory is removed at the end
        _EXTRACTED_DIRS.add(extract_dir)
        try:
            with zipfile.ZipFile(zip_path, mode="r") as zf:
                zf.extractall(path=extract_dir)
        except (OSError, zipfile.BadZipFile) as e:
            self.cleanup(extract_dir)
            raise CrateIOError(f"Unable to extract archive {zip_path}") from e

        self.logger.debug(f"{zip_path} extracted at {extract_dir}")
        return extract_dir

    def cleanup(self, content_root: "pathlib.Path") -> None:
        _EXTRACTED_DIRS.discard(content_root)
        shutil.rmtree(content_root, ignore_errors=True)
