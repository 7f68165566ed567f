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

import zipfile

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

from ..utils.contents import add_to_zip

from . import (
    AbstractWriterStrategy,
    metadata_json_bytes,
)


class ZipWriterStrategy(AbstractWriterStrategy):
    STRATEGY_NAME = cast("SymbolicName", "zip")

    def save(self, crate: "ROCrate", destination: "PathLikePath") -> None:
        zip_path = as_path(destination)
        try:
            with zipfile.ZipFile(
                zip_path, mode="w", compression=zipfile.ZIP_DEFLATED
            ) as zf:
                # The metadata goes first, so it is easy to locate
                zf.writestr(
                    ROCRATE_JSONLD_FILENAME,
                    metadata_json_bytes(crate, indent=self.json_indent),
                )
                for payload in self.payload(crate):
                    self.logger.debug(f"Adding {payload.source} as {payload.rel_path}")
                    add_to_zip(zf, payload.source, payload.rel_path)
        except OSError as ose:
            # Removing leftovers
            if zip_path.exists():
                zip_path.unlink()
            raise CrateIOError(f"Unable to save crate at {zip_path}") from ose
