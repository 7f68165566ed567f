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
import logging
import sys

from typing import (
    cast,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from typing import (
        Any,
        ClassVar,
        Iterable,
        Mapping,
        MutableSequence,
        MutableSet,
        Optional,
        Sequence,
        Type,
    )

    from .common import (
        RelPath,
        SymbolicName,
    )

    from .crate import ROCrate

# This code needs exception groups
if sys.version_info[:2] < (3, 11):
    from exceptiongroup import ExceptionGroup

from .common import (
    ReferentialError,
    ValidationError,
)

from .entities import (
    DataSetEntity,
)

from .utils.misc import (
    get_schema_validator,
    load_schema,
)


class AbstractValidator(abc.ABC):
    """
    Abstract class to model crate validators
    """

    VALIDATOR_NAME: "ClassVar[SymbolicName]" = cast("SymbolicName", "")

    def __init__(self) -> None:
        # Getting a logger focused on specific classes
        self.logger = logging.getLogger(
            dict(inspect.getmembers(self))["__module__"]
            + "::"
            + self.__class__.__name__
        )

    @abc.abstractmethod
    def validate(self, crate: "ROCrate") -> None:
        """
        It raises a ValidationError when the crate is not valid
        """
        pass


class JSONSchemaValidator(AbstractValidator):
    """
    It checks the structural shape of the metadata document
    which would be generated from the crate
    """

    VALIDATOR_NAME = cast("SymbolicName", "schema")

    DEFAULT_SCHEMA: "ClassVar[RelPath]" = cast("RelPath", "ro-crate-metadata.json")

    def __init__(self, schema: "Optional[Mapping[str, Any]]" = None):
        super().__init__()
        if schema is None:
            schema = load_schema(self.DEFAULT_SCHEMA)
        self.jv = get_schema_validator(schema)

    def validate(self, crate: "ROCrate") -> None:
        errors = sorted(
            self.jv.iter_errors(instance=crate.to_jsonld()),
            key=lambda e: list(map(str, e.path)),
        )
        if len(errors) > 0:
            reasons = [
                "/".join(map(str, error.path)) + ": " + error.message
                for error in errors
            ]
            for reason in reasons:
                self.logger.debug(reason)
            raise ValidationError(
                f"Crate metadata does not validate ({len(errors)} errors)", reasons
            )


class ReferentialValidator(AbstractValidator):
    """
    Every hasPart must point to an existing entity, and every data entity
    must be reachable from the root dataset through hasPart
    """

    VALIDATOR_NAME = cast("SymbolicName", "referential")

    def validate(self, crate: "ROCrate") -> None:
        reasons: "MutableSequence[str]" = []
        for entity in crate.all_entities():
            if isinstance(entity, DataSetEntity):
                for part_id in sorted(entity.has_part):
                    if crate.get_entity_by_id(part_id) is None:
                        reasons.append(
                            f"{entity.id} hasPart {part_id}, which is not in the crate"
                        )

        # Walking from the root
        reached: "MutableSet[str]" = set()
        pending = [crate.root_data_entity]
        while len(pending) > 0:
            dataset = pending.pop()
            for part_id in dataset.has_part:
                if part_id in reached:
                    continue
                reached.add(part_id)
                part = crate.get_data_entity_by_id(part_id)
                if isinstance(part, DataSetEntity):
                    pending.append(part)

        for entity_id in crate.data_entities.keys():
            if entity_id not in reached:
                reasons.append(
                    f"Data entity {entity_id} is not reachable from {crate.root_data_entity.id}"
                )

        if len(reasons) > 0:
            raise ReferentialError(
                f"Crate has {len(reasons)} referential inconsistencies", reasons
            )


class CompositeValidator(AbstractValidator):
    """
    It runs all the validators, and it reports all their complaints
    """

    def __init__(self, validators: "Iterable[AbstractValidator]"):
        super().__init__()
        self.validators = list(validators)

    def validate(self, crate: "ROCrate") -> None:
        failures: "MutableSequence[ValidationError]" = []
        for validator in self.validators:
            try:
                validator.validate(crate)
            except ValidationError as ve:
                self.logger.debug(f"{validator.__class__.__name__} rejected the crate")
                failures.append(ve)

        if len(failures) == 1:
            raise failures[0]
        elif len(failures) > 1:
            raise ValidationError(
                f"Crate was rejected by {len(failures)} validators",
                [reason for failure in failures for reason in failure.reasons],
            ) from ExceptionGroup(  # pylint: disable=possibly-used-before-assignment
                "Validation failures", failures
            )


VALIDATOR_CLASSES: "Mapping[str, Type[AbstractValidator]]" = {
    validator_class.VALIDATOR_NAME: validator_class
    for validator_class in (JSONSchemaValidator, ReferentialValidator)
}


def get_validator(names: "Optional[Sequence[str]]" = None) -> "AbstractValidator":
    """
    It builds the validator to be used over read crates. When no name
    is provided, all the known validators are used.
    """
    if names is None:
        names = list(VALIDATOR_CLASSES.keys())

    validators: "MutableSequence[AbstractValidator]" = []
    for name in names:
        validator_class = VALIDATOR_CLASSES.get(name)
        if validator_class is None:
            raise KeyError(f"Unknown validator {name}")
        validators.append(validator_class())

    return CompositeValidator(validators)
