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

from typing import (
    cast,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    import pathlib

    from typing import (
        Any,
        Mapping,
    )

    from ..common import (
        PathLikePath,
        SymbolicName,
    )

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


class FolderReaderStrategy(AbstractReaderStrategy):
    """
    Crates stored as a plain directory
    """

    STRATEGY_NAME = cast("SymbolicName", "folder")

    def _crate_dir(self, location: "PathLikePath") -> "pathlib.Path":
        crate_dir = as_path(location)
        if not crate_dir.is_dir():
            raise CrateIOError(f"Crate location {crate_dir} is not a directory")
        return crate_dir

    def read_metadata_json(self, location: "PathLikePath") -> "Mapping[str, Any]":
        crate_dir = self._crate_dir(location)
        jsonld_filename = crate_dir / ROCRATE_JSONLD_FILENAME
        if not jsonld_filename.exists():
            legacy_jsonld_filename = crate_dir / LEGACY_ROCRATE_JSONLD_FILENAME
            if not legacy_jsonld_filename.exists():
                raise StructuralError(
                    f"{crate_dir} does not contain a member {ROCRATE_JSONLD_FILENAME} or {LEGACY_ROCRATE_JSONLD_FILENAME}"
                )
            self.logger.debug(f"Using legacy {legacy_jsonld_filename}")
            jsonld_filename = legacy_jsonld_filename

        try:
            jsonld_bin = jsonld_filename.read_bytes()
        except OSError as ose:
            raise CrateIOError(f"Unable to read {jsonld_filename}") from ose

        return parse_metadata_json(jsonld_bin, jsonld_filename.as_posix())

    def read_content(self, location: "PathLikePath") -> "pathlib.Path":
        return self._crate_dir(location)
