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

import argparse
import enum
import logging
import os
import pathlib
from typing import (
    cast,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from typing import (
        Any,
        List,
        Mapping,
        MutableSequence,
        NewType,
        Optional,
        Sequence,
        Union,
    )

    from typing_extensions import (
        Final,
        TypeAlias,
    )

    # Raw values coming from (or going to) a JSON document
    JSONValue: TypeAlias = Union[
        None, bool, int, float, str, Sequence[Any], Mapping[str, Any]
    ]

    # A node from the @graph of a metadata document
    JSONLDNode: TypeAlias = Mapping[str, Any]

    # Identifiers of the entities
    EntityId = NewType("EntityId", str)

    # Names of plugins, strategies and validators
    SymbolicName = NewType("SymbolicName", str)

    # This is a relative path
    RelPath = NewType("RelPath", str)
    # This is an absolute path
    AbsPath = NewType("AbsPath", str)
    # This is either a relative or an absolute path
    AnyPath: TypeAlias = Union[RelPath, AbsPath]

    PathLikePath: TypeAlias = Union[str, "os.PathLike[str]"]


logger = logging.getLogger(__name__)


ROCRATE_JSONLD_FILENAME: "Final[str]" = "ro-crate-metadata.json"
LEGACY_ROCRATE_JSONLD_FILENAME: "Final[str]" = "ro-crate-metadata.jsonld"
ROCRATE_PREVIEW_FILENAME: "Final[str]" = "ro-crate-preview.html"
ROCRATE_PREVIEW_FILES_DIRNAME: "Final[str]" = "ro-crate-preview_files"

# These entries are never accounted as untracked files
RESERVED_CRATE_FILENAMES: "Final[frozenset[str]]" = frozenset(
    (
        ROCRATE_JSONLD_FILENAME,
        LEGACY_ROCRATE_JSONLD_FILENAME,
        ROCRATE_PREVIEW_FILENAME,
        ROCRATE_PREVIEW_FILES_DIRNAME,
    )
)

CONFORMS_TO_BASE_URL: "Final[str]" = "https://w3id.org/ro/crate/"
DEFAULT_ROCRATE_VERSION: "Final[str]" = "1.1"
DEFAULT_CONFORMS_TO: "Final[str]" = CONFORMS_TO_BASE_URL + DEFAULT_ROCRATE_VERSION
DEFAULT_CONTEXT: "Final[str]" = DEFAULT_CONFORMS_TO + "/context"

ROOT_DATASET_ID = cast("EntityId", "./")
DESCRIPTOR_ID = cast("EntityId", ROCRATE_JSONLD_FILENAME)

# JSON-LD keywords which are structural, so they never live
# in the property bag of an entity
ID_KEY: "Final[str]" = "@id"
TYPE_KEY: "Final[str]" = "@type"
CONTEXT_KEY: "Final[str]" = "@context"
GRAPH_KEY: "Final[str]" = "@graph"
STRUCTURAL_KEYS: "Final[frozenset[str]]" = frozenset((ID_KEY, TYPE_KEY))

HAS_PART_KEY: "Final[str]" = "hasPart"
CONFORMS_TO_KEY: "Final[str]" = "conformsTo"
ABOUT_KEY: "Final[str]" = "about"


class AbstractROCrateIOException(Exception):
    pass


class StructuralError(AbstractROCrateIOException):
    """
    The metadata document (or the assembled graph) does not have the
    shape of an RO-Crate: no @graph, nodes without @id, no descriptor,
    more than one descriptor, unresolvable root dataset, colliding
    identifiers...
    """

    pass


class ValidationError(AbstractROCrateIOException):
    """
    A validator rejected an assembled crate
    """

    def __init__(self, message: "str", reasons: "Sequence[str]" = []):
        super().__init__(message)
        self.reasons: "List[str]" = list(reasons)

    def __str__(self) -> "str":
        if len(self.reasons) == 0:
            return super().__str__()
        return super().__str__() + "\n" + "\n".join(" - " + r for r in self.reasons)


class ReferentialError(ValidationError):
    """
    Some reference (hasPart, mainly) does not resolve to any entity
    """

    pass


class CrateIOError(AbstractROCrateIOException):
    pass


def ref(entity_id: "str") -> "Mapping[str, str]":
    """
    It builds a reference object to an entity
    """
    return {ID_KEY: entity_id}


def is_ref(value: "Any") -> "bool":
    return isinstance(value, dict) and isinstance(value.get(ID_KEY), str)


def ref_ids(value: "Any", warn_about: "Optional[str]" = None) -> "Sequence[str]":
    """
    It returns the identifiers from either a single reference object
    or an array of reference objects, in order. Other values are
    skipped. When warn_about is set, each skipped value is logged
    as a warning, mentioning warn_about.
    """
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]

    ids: "MutableSequence[str]" = []
    for elem in value:
        if is_ref(elem):
            ids.append(elem[ID_KEY])
        elif warn_about is not None:
            logger.warning(
                f"Skipping {elem!r} from {warn_about}, as it is not a reference object"
            )
    return ids


def as_path(the_path: "PathLikePath") -> "pathlib.Path":
    return the_path if isinstance(the_path, pathlib.Path) else pathlib.Path(the_path)


# Adapted from https://gist.github.com/ptmcg/23ba6e42d51711da44ba1216c53af4ea
# in order to show the value instead of the class name
class ArgTypeMixin(enum.Enum):
    @classmethod
    def argtype(cls, s: "str") -> "enum.Enum":
        try:
            return cls(s)
        except ValueError:
            raise argparse.ArgumentTypeError(f"{s!r} is not a valid {cls.__name__}")

    def __str__(self) -> "str":
        return str(self.value)


class StrDocEnum(str, ArgTypeMixin):
    # Learnt from https://docs.python.org/3.11/howto/enum.html#when-to-use-new-vs-init
    description: str

    def __new__(cls, value: "Any", description: "str" = "") -> "StrDocEnum":
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.description = description

        return obj

    def __str__(self) -> "str":
        return str(self.value)


class ArgsDefaultWithRawHelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    # Conditionally treat descriptions as raw
    def _split_lines(self, text: "str", width: "int") -> "List[str]":
        """
        Formats the given text by splitting the lines at '\n'.
        Overrides argparse.HelpFormatter._split_lines function.
        """
        if text.startswith("raw|"):
            return text[4:].splitlines()
        return super()._split_lines(text, width)
