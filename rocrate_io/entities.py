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
from typing import (
    cast,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    import pathlib

    from typing import (
        Any,
        ClassVar,
        Iterable,
        List,
        Mapping,
        MutableMapping,
        MutableSequence,
        Optional,
        Sequence,
        Set,
        Tuple,
    )

    from typing_extensions import (
        Final,
        Self,
    )

    from .common import (
        EntityId,
        JSONLDNode,
        JSONValue,
    )

from .common import (
    ABOUT_KEY,
    CONFORMS_TO_KEY,
    DEFAULT_CONFORMS_TO,
    DESCRIPTOR_ID,
    HAS_PART_KEY,
    ID_KEY,
    ROOT_DATASET_ID,
    STRUCTURAL_KEYS,
    TYPE_KEY,
    StructuralError,
    is_ref,
    ref,
    ref_ids,
)


def _types_from_value(value: "Any") -> "Sequence[str]":
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(t, str) for t in value):
        return value
    raise StructuralError(f"Unexpected {TYPE_KEY} value {value!r}")


class Entity:
    """
    An entity from a crate: an identifier, a non-empty type set and a
    property bag. The structural keys (@id and @type) never live in the
    property bag.
    """

    def __init__(
        self,
        entity_id: "str",
        types: "Iterable[str]",
        properties: "Optional[Mapping[str, JSONValue]]" = None,
    ):
        self._id = cast("EntityId", entity_id)
        # Type set keeping the order in which the types were declared
        self._types: "List[str]" = []
        for the_type in types:
            self.add_type(the_type)
        self._properties: "MutableMapping[str, Any]" = {}
        if properties is not None:
            for key, value in properties.items():
                self.add_property(key, value)

    @property
    def id(self) -> "EntityId":
        return self._id

    @property
    def types(self) -> "Tuple[str, ...]":
        return tuple(self._types)

    @property
    def properties(self) -> "Mapping[str, Any]":
        return self._properties

    def add_type(self, the_type: "str") -> None:
        if the_type not in self._types:
            self._types.append(the_type)

    def has_type(self, the_type: "str") -> "bool":
        return the_type in self._types

    def add_property(self, key: "str", value: "JSONValue") -> None:
        if key in STRUCTURAL_KEYS:
            raise ValueError(f"{key} is structural, it cannot be set as a property")
        self._properties[key] = value

    def get_property(self, key: "str", default: "Any" = None) -> "Any":
        return self._properties.get(key, default)

    def remove_property(self, key: "str") -> "Optional[JSONValue]":
        return self._properties.pop(key, None)

    def add_id_property(self, key: "str", entity_id: "str") -> None:
        """
        Appends a reference to the property. A previous single
        value is promoted to an array
        """
        prev = self._properties.get(key)
        if prev is None:
            self._properties[key] = ref(entity_id)
        elif isinstance(prev, list):
            prev.append(ref(entity_id))
        else:
            self._properties[key] = [prev, ref(entity_id)]

    def remove_references_to(self, entity_id: "str") -> "bool":
        """
        Drops every reference object pointing to entity_id found
        at the first level of the property values. Properties which
        become empty are removed.
        """
        changed = False
        for key in list(self._properties.keys()):
            value = self._properties[key]
            if is_ref(value):
                if value[ID_KEY] == entity_id:
                    del self._properties[key]
                    changed = True
            elif isinstance(value, list):
                kept = [
                    elem
                    for elem in value
                    if not (is_ref(elem) and elem[ID_KEY] == entity_id)
                ]
                if len(kept) != len(value):
                    changed = True
                    if len(kept) > 0:
                        self._properties[key] = kept
                    else:
                        del self._properties[key]

        return changed

    def to_jsonld(self) -> "Mapping[str, Any]":
        node: "MutableMapping[str, Any]" = {
            ID_KEY: self._id,
            TYPE_KEY: self._types[0] if len(self._types) == 1 else list(self._types),
        }
        node.update(copy.deepcopy(self._properties))
        return node

    def __eq__(self, other: "object") -> "bool":
        if not isinstance(other, Entity):
            return NotImplemented
        return (
            self.__class__ is other.__class__
            and self._id == other._id
            and set(self._types) == set(other._types)
            and self._properties == other._properties
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> "str":
        return f"{self.__class__.__name__}({self._id!r}, {self._types!r})"


class ContextualEntity(Entity):
    """
    Metadata-only entity (people, organizations, licences, places...)
    """

    pass


class DescriptorEntity(ContextualEntity):
    """
    The self-describing node of the crate
    """

    @property
    def conforms_to(self) -> "Sequence[str]":
        return ref_ids(self.get_property(CONFORMS_TO_KEY))

    @property
    def about(self) -> "Optional[str]":
        about_ids = ref_ids(self.get_property(ABOUT_KEY))
        return about_ids[0] if len(about_ids) > 0 else None


class DataEntity(Entity):
    """
    An entity describing actual content of the crate. The source is
    where that content currently lives, when it is available at all.
    """

    def __init__(
        self,
        entity_id: "str",
        types: "Iterable[str]",
        properties: "Optional[Mapping[str, JSONValue]]" = None,
        source: "Optional[pathlib.Path]" = None,
    ):
        super().__init__(entity_id, types, properties)
        self.source = source


class FileEntity(DataEntity):
    pass


class DataSetEntity(DataEntity):
    """
    A directory-like data entity. Its hasPart is kept in the property
    bag, always as an array of reference objects.
    """

    @property
    def has_part(self) -> "Set[str]":
        return set(ref_ids(self.get_property(HAS_PART_KEY)))

    def add_to_has_part(self, entity_id: "str") -> None:
        if not self.has_in_has_part(entity_id):
            has_part = self._properties.get(HAS_PART_KEY)
            # A single reference object is promoted to an array
            if has_part is None:
                self._properties[HAS_PART_KEY] = [ref(entity_id)]
            elif isinstance(has_part, list):
                has_part.append(ref(entity_id))
            else:
                self._properties[HAS_PART_KEY] = [has_part, ref(entity_id)]

    def remove_from_has_part(self, entity_id: "str") -> "bool":
        has_part = self.get_property(HAS_PART_KEY)
        if has_part is None:
            return False
        kept = [ref(part_id) for part_id in ref_ids(has_part) if part_id != entity_id]
        if len(kept) > 0:
            self._properties[HAS_PART_KEY] = kept
        else:
            del self._properties[HAS_PART_KEY]
        return len(kept) != len(ref_ids(has_part))

    def has_in_has_part(self, entity_id: "str") -> "bool":
        has_part = self.get_property(HAS_PART_KEY)
        if isinstance(has_part, dict):
            return bool(has_part.get(ID_KEY) == entity_id)
        elif isinstance(has_part, list):
            for part in has_part:
                if isinstance(part, dict) and part.get(ID_KEY) == entity_id:
                    return True
        return False


class RootDataEntity(DataSetEntity):
    pass


class EntityBuilder:
    """
    Base builder. Each builder seeds the type set with the canonical
    type of the entity it builds, when there is one. A raw node given
    through set_all which has its own @type replaces that seed.
    """

    DEFAULT_TYPE: "ClassVar[Optional[str]]" = None

    def __init__(self) -> None:
        self._id: "Optional[str]" = None
        self._types: "MutableSequence[str]" = []
        if self.DEFAULT_TYPE is not None:
            self._types.append(self.DEFAULT_TYPE)
        self._properties: "MutableMapping[str, Any]" = {}

    def set_id(self, entity_id: "str") -> "Self":
        self._id = entity_id
        return self

    def add_type(self, the_type: "str") -> "Self":
        if the_type not in self._types:
            self._types.append(the_type)
        return self

    def add_property(self, key: "str", value: "JSONValue") -> "Self":
        if key in STRUCTURAL_KEYS:
            raise ValueError(f"{key} is structural, it cannot be set as a property")
        self._properties[key] = value
        return self

    def add_id_property(self, key: "str", entity_id: "str") -> "Self":
        prev = self._properties.get(key)
        if prev is None:
            self._properties[key] = ref(entity_id)
        elif isinstance(prev, list):
            prev.append(ref(entity_id))
        else:
            self._properties[key] = [prev, ref(entity_id)]
        return self

    def set_all(self, node: "JSONLDNode") -> "Self":
        """
        Takes the whole contents from a raw JSON-LD node
        """
        for key, value in node.items():
            if key == ID_KEY:
                if not isinstance(value, str):
                    raise StructuralError(f"Unexpected {ID_KEY} value {value!r}")
                self._id = value
            elif key == TYPE_KEY:
                # The types from the node replace the seeded ones
                self._types = []
                for the_type in _types_from_value(value):
                    self.add_type(the_type)
            else:
                self._properties[key] = copy.deepcopy(value)
        return self

    def _check(self) -> "Tuple[str, Sequence[str]]":
        if self._id is None or len(self._id) == 0:
            raise StructuralError("Entities need a non-empty identifier")
        if len(self._types) == 0:
            raise StructuralError(f"Entity {self._id} has no type")
        return self._id, self._types

    def build(self) -> "Entity":
        entity_id, types = self._check()
        return Entity(entity_id, types, self._properties)


class ContextualEntityBuilder(EntityBuilder):
    def build(self) -> "ContextualEntity":
        entity_id, types = self._check()
        return ContextualEntity(entity_id, types, self._properties)


class PersonEntityBuilder(ContextualEntityBuilder):
    DEFAULT_TYPE = "Person"

    def set_name(self, name: "str") -> "Self":
        return self.add_property("name", name)

    def set_email(self, email: "str") -> "Self":
        return self.add_property("email", email)

    def set_affiliation(self, organization_id: "str") -> "Self":
        return self.add_property("affiliation", ref(organization_id))


class OrganizationEntityBuilder(ContextualEntityBuilder):
    DEFAULT_TYPE = "Organization"

    def set_address(self, address: "str") -> "Self":
        return self.add_property("address", address)

    def set_email(self, email: "str") -> "Self":
        return self.add_property("email", email)

    def set_telephone(self, telephone: "str") -> "Self":
        return self.add_property("telephone", telephone)

    def set_location_id(self, location_id: "str") -> "Self":
        return self.add_property("location", ref(location_id))


class DescriptorEntityBuilder(ContextualEntityBuilder):
    DEFAULT_TYPE = "CreativeWork"

    def __init__(self) -> None:
        super().__init__()
        self._id = DESCRIPTOR_ID
        self._properties[CONFORMS_TO_KEY] = ref(DEFAULT_CONFORMS_TO)
        self._properties[ABOUT_KEY] = ref(ROOT_DATASET_ID)

    def set_about(self, root_id: "str") -> "Self":
        return self.add_property(ABOUT_KEY, ref(root_id))

    def set_conforms_to(self, *urls: "str") -> "Self":
        return self.add_property(
            CONFORMS_TO_KEY,
            ref(urls[0]) if len(urls) == 1 else [ref(url) for url in urls],
        )

    def build(self) -> "DescriptorEntity":
        entity_id, types = self._check()
        return DescriptorEntity(entity_id, types, self._properties)


class DataEntityBuilder(EntityBuilder):
    def __init__(self) -> None:
        super().__init__()
        self._source: "Optional[pathlib.Path]" = None

    def set_source(self, source: "Optional[pathlib.Path]") -> "Self":
        self._source = source
        return self

    def build(self) -> "DataEntity":
        entity_id, types = self._check()
        return DataEntity(entity_id, types, self._properties, source=self._source)


class FileEntityBuilder(DataEntityBuilder):
    DEFAULT_TYPE = "File"

    def build(self) -> "FileEntity":
        entity_id, types = self._check()
        return FileEntity(entity_id, types, self._properties, source=self._source)


class DataSetEntityBuilder(DataEntityBuilder):
    DEFAULT_TYPE = "Dataset"

    ENTITY_CLASS: "ClassVar[type[DataSetEntity]]" = DataSetEntity

    def __init__(self) -> None:
        super().__init__()
        # dict keys keep insertion order, so the materialization is stable
        self._has_part: "MutableMapping[str, None]" = {}

    def set_has_part(self, has_part: "Iterable[str]") -> "Self":
        self._has_part = dict.fromkeys(has_part)
        return self

    def add_to_has_part(self, entity_or_id: "Any") -> "Self":
        entity_id = entity_or_id.id if isinstance(entity_or_id, Entity) else entity_or_id
        self._has_part[entity_id] = None
        return self

    def build(self) -> "DataSetEntity":
        entity_id, types = self._check()
        properties = dict(self._properties)
        # hasPart from set_all is merged, and everything is normalized
        has_part = dict.fromkeys(
            ref_ids(
                properties.pop(HAS_PART_KEY, None),
                warn_about=f"{HAS_PART_KEY} of {entity_id}",
            )
        )
        has_part.update(self._has_part)
        if len(has_part) > 0:
            properties[HAS_PART_KEY] = [ref(part_id) for part_id in has_part]
        return self.ENTITY_CLASS(entity_id, types, properties, source=self._source)


class RootDataEntityBuilder(DataSetEntityBuilder):
    ENTITY_CLASS = RootDataEntity

    def __init__(self) -> None:
        super().__init__()
        self._id = ROOT_DATASET_ID

    def build(self) -> "RootDataEntity":
        return cast("RootDataEntity", super().build())
