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
    from ..common import (
        PathLikePath,
        SymbolicName,
    )

    from ..crate import ROCrate

from ..common import (
    ROCRATE_JSONLD_FILENAME,
    CrateIOError,
    as_path,
)

from ..utils.contents import copy_pathlib

from . import (
    AbstractWriterStrategy,
    metadata_json_bytes,
)


class FolderWriterStrategy(AbstractWriterStrategy):
    STRATEGY_NAME = cast("SymbolicName", "folder")

    def save(self, crate: "ROCrate", destination: "PathLikePath") -> None:
        dest_dir = as_path(destination)
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            for payload in self.payload(crate):
                self.logger.debug(f"Copying {payload.source} to {payload.rel_path}")
                copy_pathlib(payload.source, dest_dir / payload.rel_path)

            # The metadata goes last
            (dest_dir / ROCRATE_JSONLD_FILENAME).write_bytes(
                metadata_json_bytes(crate, indent=self.json_indent)
            )
        except OSError as ose:
            raise CrateIOError(f"Unable to save crate at {dest_dir}") from ose
