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

import json
import os
import pathlib

from typing import (
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from typing import (
        Any,
        Mapping,
        Optional,
        Sequence,
    )

ROCRATE_CONTEXT = "https://w3id.org/ro/crate/1.1/context"


def get_path(path: "str") -> "str":
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), path)


def descriptor_node(
    root_id: "str" = "./", conforms_to: "Any" = None
) -> "Mapping[str, Any]":
    return {
        "@id": "ro-crate-metadata.json",
        "@type": "CreativeWork",
        "conformsTo": {"@id": "https://w3id.org/ro/crate/1.1"}
        if conforms_to is None
        else conforms_to,
        "about": {"@id": root_id},
    }


def root_node(
    has_part: "Any" = None, root_id: "str" = "./"
) -> "Mapping[str, Any]":
    node = {
        "@id": root_id,
        "@type": "Dataset",
        "name": "Test crate",
        "datePublished": "2024-01-01",
        "license": {"@id": "https://spdx.org/licenses/CC-BY-4.0"},
    }
    if has_part is not None:
        node["hasPart"] = has_part
    return node


def metadata_document(
    graph: "Sequence[Mapping[str, Any]]", context: "Any" = ROCRATE_CONTEXT
) -> "Mapping[str, Any]":
    return {
        "@context": context,
        "@graph": list(graph),
    }


def write_crate_dir(
    crate_dir: "pathlib.Path",
    graph: "Sequence[Mapping[str, Any]]",
    files: "Optional[Mapping[str, str]]" = None,
) -> "pathlib.Path":
    """
    It creates a crate directory, with the metadata document
    and the given files (relative path to contents)
    """
    crate_dir.mkdir(parents=True, exist_ok=True)
    with (crate_dir / "ro-crate-metadata.json").open(mode="w", encoding="utf-8") as mH:
        json.dump(metadata_document(graph), mH, indent=2)

    if files is not None:
        for rel_path, content in files.items():
            the_file = crate_dir / rel_path
            the_file.parent.mkdir(parents=True, exist_ok=True)
            the_file.write_text(content, encoding="utf-8")

    return crate_dir
