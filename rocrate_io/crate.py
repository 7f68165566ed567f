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

import copy
import inspect
import logging

from typing import (
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    import pathlib

    from typing import (
        Any,
        Iterable,
        Iterator,
        List,
        Mapping,
        MutableMapping,
        Optional,
    )

    from .common import (
        JSONValue,
    )

from .common import (
    ABOUT_KEY,
    CONTEXT_KEY,
    DEFAULT_CONTEXT,
    GRAPH_KEY,
    StructuralError,
    ref,
)

from .entities import (
    ContextualEntity,
    DataEntity,
    DescriptorEntity,
    DescriptorEntityBuilder,
    Entity,
    RootDataEntity,
    RootDataEntityBuilder,
)


class ROCrate:
    """
    The assembled entity graph of an RO-Crate, with the bookkeeping
    of the files living in the crate which are not described by any
    data entity.

    Instances are not thread safe.
    """

    def __init__(
        self,
        context: "JSONValue" = DEFAULT_CONTEXT,
        descriptor: "Optional[DescriptorEntity]" = None,
        root_data_entity: "Optional[RootDataEntity]" = None,
    ):
        # Getting a logger focused on specific classes
        self.logger = logging.getLogger(
            dict(inspect.getmembers(self))["__module__"]
            + "::"
            + self.__class__.__name__
        )

        # The context is opaque, it is only carried
        self.context = context
        if root_data_entity is None:
            root_data_entity = RootDataEntityBuilder().build()
        if descriptor is None:
            descriptor = (
                DescriptorEntityBuilder().set_about(root_data_entity.id).build()
            )
        self._descriptor = descriptor
        self._root_data_entity = root_data_entity
        self._data_entities: "MutableMapping[str, DataEntity]" = {}
        self._contextual_entities: "MutableMapping[str, ContextualEntity]" = {}
        self._untracked_files: "List[pathlib.Path]" = []

    @property
    def descriptor(self) -> "DescriptorEntity":
        return self._descriptor

    @property
    def root_data_entity(self) -> "RootDataEntity":
        return self._root_data_entity

    @property
    def data_entities(self) -> "Mapping[str, DataEntity]":
        return self._data_entities

    @property
    def contextual_entities(self) -> "Mapping[str, ContextualEntity]":
        return self._contextual_entities

    @property
    def untracked_files(self) -> "List[pathlib.Path]":
        return self._untracked_files

    def set_untracked_files(self, untracked_files: "Iterable[pathlib.Path]") -> None:
        self._untracked_files = list(untracked_files)

    def set_descriptor(self, descriptor: "DescriptorEntity") -> None:
        self._check_unused_id(descriptor.id, skip=self._descriptor)
        self._descriptor = descriptor

    def set_root_data_entity(self, root_data_entity: "RootDataEntity") -> None:
        self._check_unused_id(root_data_entity.id, skip=self._root_data_entity)
        self._root_data_entity = root_data_entity
        if self._descriptor.about != root_data_entity.id:
            self._descriptor.add_property(ABOUT_KEY, ref(root_data_entity.id))

    def _check_unused_id(self, entity_id: "str", skip: "Optional[Entity]" = None) -> None:
        prev = self.get_entity_by_id(entity_id)
        if prev is not None and prev is not skip:
            raise StructuralError(
                f"Identifier {entity_id} is already used by {prev!r} in this crate"
            )

    def add_data_entity(self, entity: "DataEntity", to_root: "bool" = True) -> None:
        """
        Registers a data entity. When to_root is set, the entity is
        also added to the hasPart of the root dataset.
        """
        self._check_unused_id(entity.id)
        self._data_entities[entity.id] = entity
        if to_root:
            self._root_data_entity.add_to_has_part(entity.id)

    def add_contextual_entity(self, entity: "ContextualEntity") -> None:
        self._check_unused_id(entity.id)
        self._contextual_entities[entity.id] = entity

    def get_data_entity_by_id(self, entity_id: "str") -> "Optional[DataEntity]":
        return self._data_entities.get(entity_id)

    def get_contextual_entity_by_id(
        self, entity_id: "str"
    ) -> "Optional[ContextualEntity]":
        return self._contextual_entities.get(entity_id)

    def get_entity_by_id(self, entity_id: "str") -> "Optional[Entity]":
        if self._root_data_entity.id == entity_id:
            return self._root_data_entity
        if self._descriptor.id == entity_id:
            return self._descriptor
        entity: "Optional[Entity]" = self._data_entities.get(entity_id)
        if entity is None:
            entity = self._contextual_entities.get(entity_id)
        return entity

    def all_entities(self) -> "Iterator[Entity]":
        yield self._descriptor
        yield self._root_data_entity
        yield from self._data_entities.values()
        yield from self._contextual_entities.values()

    def remove_entity_by_id(self, entity_id: "str") -> "Optional[Entity]":
        """
        Removes an entity, as well as all the references to it
        from the remaining entities. It returns the removed entity,
        if it was found.
        """
        if entity_id in (self._root_data_entity.id, self._descriptor.id):
            raise ValueError(
                f"Neither the root dataset nor the descriptor can be removed ({entity_id})"
            )

        removed: "Optional[Entity]" = self._data_entities.pop(entity_id, None)
        if removed is None:
            removed = self._contextual_entities.pop(entity_id, None)
        if removed is None:
            self.logger.debug(f"Entity {entity_id} not found, so not removed")
            return None

        for entity in self.all_entities():
            if entity.remove_references_to(entity_id):
                self.logger.debug(f"Dropped references to {entity_id} from {entity.id}")

        return removed

    def to_jsonld(self) -> "Mapping[str, Any]":
        """
        The metadata document representing this crate
        """
        return {
            CONTEXT_KEY: copy.deepcopy(self.context),
            GRAPH_KEY: [entity.to_jsonld() for entity in self.all_entities()],
        }
