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
import logging

from rocrate_io.common import (
    DEFAULT_CONTEXT,
    StructuralError,
)
from rocrate_io.crate import ROCrate
from rocrate_io.entities import (
    ContextualEntityBuilder,
    DataSetEntityBuilder,
    FileEntityBuilder,
    PersonEntityBuilder,
    RootDataEntityBuilder,
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def test_empty_crate() -> "None":
    crate = ROCrate()
    assert crate.context == DEFAULT_CONTEXT
    assert crate.root_data_entity.id == "./"
    assert crate.descriptor.id == "ro-crate-metadata.json"
    assert crate.descriptor.about == "./"
    assert len(crate.data_entities) == 0
    assert len(crate.contextual_entities) == 0
    assert crate.untracked_files == []


def test_add_data_entity_to_root() -> "None":
    crate = ROCrate()
    crate.add_data_entity(FileEntityBuilder().set_id("a.txt").build())
    crate.add_data_entity(FileEntityBuilder().set_id("b.txt").build(), to_root=False)

    assert set(crate.data_entities.keys()) == {"a.txt", "b.txt"}
    assert crate.root_data_entity.has_in_has_part("a.txt")
    assert not crate.root_data_entity.has_in_has_part("b.txt")


def test_identifiers_are_unique() -> "None":
    crate = ROCrate()
    crate.add_data_entity(FileEntityBuilder().set_id("a.txt").build())

    with pytest.raises(StructuralError):
        crate.add_contextual_entity(
            ContextualEntityBuilder().set_id("a.txt").add_type("Thing").build()
        )
    with pytest.raises(StructuralError):
        crate.add_data_entity(FileEntityBuilder().set_id("a.txt").build())
    with pytest.raises(StructuralError):
        crate.add_data_entity(DataSetEntityBuilder().set_id("./").build())
    with pytest.raises(StructuralError):
        crate.add_contextual_entity(
            ContextualEntityBuilder()
            .set_id("ro-crate-metadata.json")
            .add_type("CreativeWork")
            .build()
        )


def test_get_entity_by_id() -> "None":
    crate = ROCrate()
    person = PersonEntityBuilder().set_id("#alice").set_name("Alice").build()
    the_file = FileEntityBuilder().set_id("a.txt").build()
    crate.add_contextual_entity(person)
    crate.add_data_entity(the_file)

    assert crate.get_entity_by_id("#alice") is person
    assert crate.get_entity_by_id("a.txt") is the_file
    assert crate.get_entity_by_id("./") is crate.root_data_entity
    assert crate.get_entity_by_id("ro-crate-metadata.json") is crate.descriptor
    assert crate.get_entity_by_id("missing") is None
    assert crate.get_data_entity_by_id("#alice") is None
    assert crate.get_contextual_entity_by_id("#alice") is person


def test_remove_entity_by_id() -> "None":
    crate = ROCrate()
    crate.add_contextual_entity(PersonEntityBuilder().set_id("#alice").build())
    crate.add_data_entity(
        FileEntityBuilder()
        .set_id("a.txt")
        .add_id_property("author", "#alice")
        .build()
    )
    crate.root_data_entity.add_id_property("author", "#alice")

    removed = crate.remove_entity_by_id("#alice")
    assert removed is not None and removed.id == "#alice"
    assert crate.get_entity_by_id("#alice") is None
    assert crate.get_data_entity_by_id("a.txt").get_property("author") is None  # type: ignore[union-attr]
    assert crate.root_data_entity.get_property("author") is None

    crate.remove_entity_by_id("a.txt")
    assert not crate.root_data_entity.has_in_has_part("a.txt")
    assert "hasPart" not in crate.root_data_entity.properties

    assert crate.remove_entity_by_id("a.txt") is None


def test_root_and_descriptor_cannot_be_removed() -> "None":
    crate = ROCrate()
    with pytest.raises(ValueError):
        crate.remove_entity_by_id("./")
    with pytest.raises(ValueError):
        crate.remove_entity_by_id("ro-crate-metadata.json")


def test_set_root_data_entity_updates_descriptor() -> "None":
    crate = ROCrate()
    crate.set_root_data_entity(
        RootDataEntityBuilder().set_id("https://example.org/crate/").build()
    )
    assert crate.descriptor.about == "https://example.org/crate/"


def test_to_jsonld_order() -> "None":
    crate = ROCrate(context=["https://w3id.org/ro/crate/1.1/context", {"a": "b"}])
    crate.add_data_entity(FileEntityBuilder().set_id("a.txt").build())
    crate.add_contextual_entity(PersonEntityBuilder().set_id("#alice").build())

    jsonld = crate.to_jsonld()
    assert jsonld["@context"] == ["https://w3id.org/ro/crate/1.1/context", {"a": "b"}]
    assert [node["@id"] for node in jsonld["@graph"]] == [
        "ro-crate-metadata.json",
        "./",
        "a.txt",
        "#alice",
    ]
    assert jsonld["@graph"][1]["hasPart"] == [{"@id": "a.txt"}]


def test_all_entities() -> "None":
    crate = ROCrate()
    crate.add_data_entity(FileEntityBuilder().set_id("a.txt").build())
    crate.add_contextual_entity(PersonEntityBuilder().set_id("#alice").build())
    assert [entity.id for entity in crate.all_entities()] == [
        "ro-crate-metadata.json",
        "./",
        "a.txt",
        "#alice",
    ]
