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

import pytest
import copy
import logging

from typing import (
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from typing import (
        Any,
    )

from rocrate_io.classifier import (
    classify_graph,
    conforms_to_crate,
)
from rocrate_io.common import (
    StructuralError,
)

from tests.util import (
    descriptor_node,
    root_node,
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def test_classify_basic() -> "None":
    graph = [
        descriptor_node(),
        root_node(has_part=[{"@id": "file1.txt"}]),
        {"@id": "file1.txt", "@type": "File"},
        {"@id": "#alice", "@type": "Person"},
    ]
    original = copy.deepcopy(graph)
    classified = classify_graph(graph)

    assert classified.descriptor["@id"] == "ro-crate-metadata.json"
    assert classified.root["@id"] == "./"
    assert "hasPart" not in classified.root
    assert classified.root_has_part == ["file1.txt"]
    assert [node["@id"] for node in classified.data_nodes] == ["file1.txt"]
    assert [node["@id"] for node in classified.contextual_nodes] == ["#alice"]

    # Input is untouched
    assert graph == original


def test_classify_partition_is_disjoint() -> "None":
    graph = [
        root_node(has_part=[{"@id": "a"}, {"@id": "b"}, {"@id": "a"}]),
        {"@id": "a", "@type": "File"},
        descriptor_node(),
        {"@id": "c", "@type": "Thing"},
        {"@id": "b", "@type": "Dataset"},
        {"@id": "d", "@type": "Thing"},
    ]
    classified = classify_graph(graph)

    data_ids = {node["@id"] for node in classified.data_nodes}
    contextual_ids = {node["@id"] for node in classified.contextual_nodes}
    assert data_ids == {"a", "b"}
    assert contextual_ids == {"c", "d"}
    assert data_ids.isdisjoint(contextual_ids)
    assert len(classified.data_nodes) + len(classified.contextual_nodes) == 4
    assert classified.root_has_part == ["a", "b"]


def test_classify_single_has_part() -> "None":
    classified = classify_graph(
        [
            descriptor_node(),
            root_node(has_part={"@id": "x"}),
            {"@id": "x", "@type": "File"},
        ]
    )
    assert classified.root_has_part == ["x"]
    assert [node["@id"] for node in classified.data_nodes] == ["x"]


def test_classify_has_part_non_references(
    caplog: "pytest.LogCaptureFixture",
) -> "None":
    with caplog.at_level(logging.WARNING):
        classified = classify_graph(
            [
                descriptor_node(),
                root_node(has_part=["x", {"@id": "y"}, {"name": "z"}]),
                {"@id": "x", "@type": "File"},
                {"@id": "y", "@type": "File"},
            ]
        )

    assert classified.root_has_part == ["y"]
    skipped = [
        record.getMessage()
        for record in caplog.records
        if record.levelno == logging.WARNING
    ]
    assert len(skipped) == 2
    assert all("hasPart of ./" in message for message in skipped)


def test_classify_no_has_part() -> "None":
    classified = classify_graph(
        [
            descriptor_node(),
            root_node(),
            {"@id": "x", "@type": "File"},
        ]
    )
    assert classified.root_has_part == []
    assert classified.data_nodes == []
    assert [node["@id"] for node in classified.contextual_nodes] == ["x"]


@pytest.mark.parametrize(
    ["conforms_to", "expected"],
    [
        ({"@id": "https://w3id.org/ro/crate/1.1"}, True),
        ({"@id": "https://w3id.org/ro/crate/1.2-DRAFT"}, True),
        ([{"@id": "https://w3id.org/ro/crate/1.1"}], True),
        (
            [
                {"@id": "https://w3id.org/workflowhub/workflow-ro-crate/1.0"},
                {"@id": "https://w3id.org/ro/crate/1.1"},
            ],
            True,
        ),
        ({"@id": "https://w3id.org/workflowhub/workflow-ro-crate/1.0"}, False),
        ("https://w3id.org/ro/crate/1.1", False),
        (None, False),
        ([], False),
    ],
)
def test_conforms_to_crate(conforms_to: "Any", expected: "bool") -> "None":
    assert conforms_to_crate(conforms_to) == expected


def test_classify_conforms_to_array() -> "None":
    """
    Array and single object conformsTo are detected the same way
    """
    for conforms_to in (
        {"@id": "https://w3id.org/ro/crate/1.1"},
        [
            {"@id": "https://w3id.org/workflowhub/workflow-ro-crate/1.0"},
            {"@id": "https://w3id.org/ro/crate/1.1"},
        ],
    ):
        classified = classify_graph(
            [
                descriptor_node(conforms_to=conforms_to),
                root_node(has_part=[{"@id": "a"}]),
                {"@id": "a", "@type": "File"},
            ]
        )
        assert classified.descriptor["@id"] == "ro-crate-metadata.json"
        assert classified.root["@id"] == "./"


def test_classify_custom_root_id() -> "None":
    classified = classify_graph(
        [
            descriptor_node(root_id="https://example.org/crate/"),
            root_node(root_id="https://example.org/crate/"),
        ]
    )
    assert classified.root["@id"] == "https://example.org/crate/"


def test_classify_unresolved_root_fails() -> "None":
    with pytest.raises(StructuralError):
        classify_graph(
            [
                descriptor_node(root_id="missing/"),
                root_node(),
            ]
        )


def test_classify_no_descriptor_fails() -> "None":
    with pytest.raises(StructuralError):
        classify_graph(
            [
                descriptor_node(
                    conforms_to={"@id": "https://example.org/other-profile"}
                ),
                root_node(),
            ]
        )


def test_classify_descriptor_without_about_fails() -> "None":
    descriptor = dict(descriptor_node())
    del descriptor["about"]
    with pytest.raises(StructuralError):
        classify_graph([descriptor, root_node()])


def test_classify_ambiguous_descriptor_fails() -> "None":
    # Two nodes claiming to be the conventional descriptor
    with pytest.raises(StructuralError):
        classify_graph([descriptor_node(), descriptor_node(), root_node()])

    # None of them is the conventional descriptor
    other = dict(descriptor_node())
    other["@id"] = "another/ro-crate-metadata.json"
    yet_another = dict(other)
    yet_another["@id"] = "yet-another/ro-crate-metadata.json"
    with pytest.raises(StructuralError):
        classify_graph([other, yet_another, root_node()])


def test_classify_nested_descriptor() -> "None":
    """
    A nested crate descriptor falls through to data or contextual
    """
    nested = {
        "@id": "subcrate/ro-crate-metadata.json",
        "@type": "CreativeWork",
        "conformsTo": {"@id": "https://w3id.org/ro/crate/1.1"},
        "about": {"@id": "subcrate/"},
    }
    classified = classify_graph(
        [
            nested,
            descriptor_node(),
            root_node(has_part=[{"@id": "subcrate/"}]),
            {"@id": "subcrate/", "@type": "Dataset"},
        ]
    )
    assert classified.descriptor["@id"] == "ro-crate-metadata.json"
    assert [node["@id"] for node in classified.data_nodes] == ["subcrate/"]
    assert [node["@id"] for node in classified.contextual_nodes] == [
        "subcrate/ro-crate-metadata.json"
    ]


@pytest.mark.parametrize(
    "graph",
    [
        None,
        {"@id": "./"},
        "graph",
        [descriptor_node(), root_node(), {"@type": "File"}],
        [descriptor_node(), root_node(), {"@id": "", "@type": "File"}],
        [descriptor_node(), root_node(), "file.txt"],
    ],
)
def test_classify_malformed_graph(graph: "Any") -> "None":
    with pytest.raises(StructuralError):
        classify_graph(graph)
