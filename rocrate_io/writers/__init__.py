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

import abc
import inspect
import json
import logging

from typing import (
    cast,
    NamedTuple,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    import pathlib

    from typing import (
        ClassVar,
        Iterator,
        MutableSequence,
    )

    from ..common import (
        PathLikePath,
        SymbolicName,
    )

    from ..crate import ROCrate

from ..utils.contents import id2relpath


class CratePayload(NamedTuple):
    """
    rel_path: where the content has to be placed, relative to the crate root
    source: where the content is now
    """

    rel_path: "str"
    source: "pathlib.Path"


def metadata_json_bytes(crate: "ROCrate", indent: "int" = 4) -> "bytes":
    return json.dumps(crate.to_jsonld(), indent=indent, ensure_ascii=False).encode(
        "utf-8"
    )


class AbstractWriterStrategy(abc.ABC):
    """
    Abstract class to model the different ways a crate can be persisted
    """

    STRATEGY_NAME: "ClassVar[SymbolicName]" = cast("SymbolicName", "")

    def __init__(self, include_untracked: "bool" = True, json_indent: "int" = 4):
        # Getting a logger focused on specific classes
        self.logger = logging.getLogger(
            dict(inspect.getmembers(self))["__module__"]
            + "::"
            + self.__class__.__name__
        )
        self.include_untracked = include_untracked
        self.json_indent = json_indent

    def payload(self, crate: "ROCrate") -> "Iterator[CratePayload]":
        """
        The contents to be persisted along with the metadata document.
        Contents already included by a directory being persisted
        are skipped.
        """
        payloads: "MutableSequence[CratePayload]" = []
        for entity in crate.data_entities.values():
            if entity.source is None:
                continue
            rel_path = id2relpath(entity.id)
            if rel_path is None:
                self.logger.warning(
                    f"Data entity {entity.id} has a source, but its identifier is not a relative path. Skipping it"
                )
                continue
            payloads.append(
                CratePayload(rel_path=rel_path.as_posix(), source=entity.source)
            )

        if self.include_untracked:
            for untracked in crate.untracked_files:
                payloads.append(CratePayload(rel_path=untracked.name, source=untracked))

        written_dirs: "MutableSequence[str]" = []
        for payload in sorted(payloads, key=lambda p: p.rel_path):
            if any(
                payload.rel_path == written_dir
                or payload.rel_path.startswith(written_dir + "/")
                for written_dir in written_dirs
            ):
                continue
            yield payload
            if payload.source.is_dir():
                written_dirs.append(payload.rel_path)

    @abc.abstractmethod
    def save(self, crate: "ROCrate", destination: "PathLikePath") -> None:
        """
        It raises a CrateIOError when the crate cannot be persisted
        """
        pass


class ROCrateWriter:
    """
    The writer used for exporting crates, through a persistence strategy
    """

    def __init__(self, writer: "AbstractWriterStrategy"):
        self.writer = writer

    def save(self, crate: "ROCrate", destination: "PathLikePath") -> None:
        self.writer.save(crate, destination)


def write_crate(
    crate: "ROCrate",
    destination: "PathLikePath",
    as_zip: "bool" = False,
    include_untracked: "bool" = True,
    json_indent: "int" = 4,
) -> None:
    """
    Convenience function, which chooses the persistence strategy
    """
    writer: "AbstractWriterStrategy"
    if as_zip:
        from .zip import ZipWriterStrategy

        writer = ZipWriterStrategy(
            include_untracked=include_untracked, json_indent=json_indent
        )
    else:
        from .folder import FolderWriterStrategy

        writer = FolderWriterStrategy(
            include_untracked=include_untracked, json_indent=json_indent
        )

    ROCrateWriter(writer).save(crate, destination)
