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
import zipfile

from typing import (
    cast,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    import pathlib

    from typing import (
        Any,
        ClassVar,
        Mapping,
        MutableSet,
        Optional,
        Sequence,
    )

    from ..common import (
        JSONLDNode,
        PathLikePath,
        SymbolicName,
    )

    from ..validation import AbstractValidator

from ..classifier import classify_graph

from ..common import (
    CONTEXT_KEY,
    GRAPH_KEY,
    ID_KEY,
    RESERVED_CRATE_FILENAMES,
    TYPE_KEY,
    CrateIOError,
    StructuralError,
    as_path,
)

from ..crate import ROCrate

from ..entities import (
    ContextualEntityBuilder,
    DataEntityBuilder,
    DataSetEntityBuilder,
    DescriptorEntityBuilder,
    FileEntityBuilder,
    RootDataEntityBuilder,
)

from ..utils.contents import resolve_in_crate


def parse_metadata_json(jsonld_bin: "bytes", public_name: "str") -> "Mapping[str, Any]":
    # Let's parse the JSON (in order to check whether it is valid)
    try:
        jsonld_obj = json.loads(jsonld_bin)
    except (json.JSONDecodeError, UnicodeDecodeError) as jde:
        raise StructuralError(
            f"Metadata from {public_name} is not a valid JSON"
        ) from jde

    if not isinstance(jsonld_obj, dict):
        raise StructuralError(f"Metadata from {public_name} is not a JSON object")

    return jsonld_obj


class AbstractReaderStrategy(abc.ABC):
    """
    Abstract class to model the different ways a crate
    can be stored (a directory, a zip archive, ...)
    """

    STRATEGY_NAME: "ClassVar[SymbolicName]" = cast("SymbolicName", "")

    def __init__(self) -> None:
        # Getting a logger focused on specific classes
        self.logger = logging.getLogger(
            dict(inspect.getmembers(self))["__module__"]
            + "::"
            + self.__class__.__name__
        )

    @abc.abstractmethod
    def read_metadata_json(self, location: "PathLikePath") -> "Mapping[str, Any]":
        """
        It returns the parsed metadata document of the crate
        """
        pass

    @abc.abstractmethod
    def read_content(self, location: "PathLikePath") -> "pathlib.Path":
        """
        It returns the directory holding the payload of the crate
        """
        pass

    def cleanup(self, content_root: "pathlib.Path") -> None:
        """
        It releases what read_content obtained, when the crate
        could not be read. By default there is nothing to release.
        """
        pass


def detect_reader_strategy(location: "PathLikePath") -> "AbstractReaderStrategy":
    """
    Chooses the reading strategy based on what is at the location
    """
    crate_path = as_path(location)
    if crate_path.is_dir():
        from .folder import FolderReaderStrategy

        return FolderReaderStrategy()
    elif crate_path.is_file() and zipfile.is_zipfile(crate_path):
        from .zip import ZipReaderStrategy

        return ZipReaderStrategy()

    raise CrateIOError(f"Input {crate_path} is neither a directory nor a zip archive")


def _data_entity_builder(node: "JSONLDNode") -> "DataEntityBuilder":
    types = node.get(TYPE_KEY)
    if isinstance(types, str):
        types = [types]
    elif not isinstance(types, list):
        types = []

    if DataSetEntityBuilder.DEFAULT_TYPE in types:
        return DataSetEntityBuilder()
    if FileEntityBuilder.DEFAULT_TYPE in types:
        return FileEntityBuilder()
    return DataEntityBuilder()


class ROCrateReader:
    """
    The reader used for reading crates from the outside into the library.
    It has a strategy to support different ways of storing the crates
    (zip, folder, etc.), and a validator which is applied to every read crate.
    """

    def __init__(
        self,
        reader: "AbstractReaderStrategy",
        validator: "Optional[AbstractValidator]" = None,
    ):
        # Getting a logger focused on specific classes
        self.logger = logging.getLogger(
            dict(inspect.getmembers(self))["__module__"]
            + "::"
            + self.__class__.__name__
        )

        if validator is None:
            from ..validation import get_validator

            validator = get_validator()

        self.reader = reader
        self.validator = validator

    def read_crate(self, location: "PathLikePath") -> "ROCrate":
        """
        It reads the location (using the strategy) and then it
        builds the relations among the entities.
        """
        metadata_json = self.reader.read_metadata_json(location)
        if GRAPH_KEY not in metadata_json:
            raise StructuralError(f"Metadata from {location} has no {GRAPH_KEY}")

        content_root = self.reader.read_content(location)
        try:
            return self._assemble_crate(location, metadata_json, content_root)
        except Exception:
            self.logger.debug(f"Releasing {content_root}, as {location} could not be read")
            self.reader.cleanup(content_root)
            raise

    def _assemble_crate(
        self,
        location: "PathLikePath",
        metadata_json: "Mapping[str, Any]",
        content_root: "pathlib.Path",
    ) -> "ROCrate":
        classified = classify_graph(metadata_json[GRAPH_KEY])

        descriptor = DescriptorEntityBuilder().set_all(classified.descriptor).build()
        root_data_entity = (
            RootDataEntityBuilder()
            .set_all(classified.root)
            .set_has_part(classified.root_has_part)
            .build()
        )
        crate = ROCrate(
            context=metadata_json.get(CONTEXT_KEY),
            descriptor=descriptor,
            root_data_entity=root_data_entity,
        )

        # The paths which are associated to data entities
        used_paths: "MutableSet[pathlib.Path]" = set()
        for node in classified.data_nodes:
            source = resolve_in_crate(content_root, node[ID_KEY])
            if source is not None:
                used_paths.add(source)
            else:
                self.logger.debug(f"No content in {location} for {node[ID_KEY]}")

            crate.add_data_entity(
                _data_entity_builder(node).set_all(node).set_source(source).build(),
                to_root=False,
            )

        for node in classified.contextual_nodes:
            crate.add_contextual_entity(ContextualEntityBuilder().set_all(node).build())

        crate.set_untracked_files(
            sorted(
                (
                    entry
                    for entry in content_root.iterdir()
                    if entry.name not in RESERVED_CRATE_FILENAMES
                    and entry not in used_paths
                ),
                key=lambda entry: entry.name,
            )
        )
        if len(crate.untracked_files) > 0:
            self.logger.debug(
                f"{len(crate.untracked_files)} untracked files in {location}"
            )

        self.validator.validate(crate)

        return crate


def read_crate(
    location: "PathLikePath", validator: "Optional[AbstractValidator]" = None
) -> "ROCrate":
    """
    Convenience function, which chooses the reading strategy
    """
    return ROCrateReader(detect_reader_strategy(location), validator).read_crate(
        location
    )
