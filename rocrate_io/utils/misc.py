#!/usr/bin/env python
# -*- coding: utf-8 -*-

# SPDX-License-Identifier: Apache-2.0
# Copyright 2020-2025 Barcelona Supercomputing Center (BSC), Spain
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

import json
import os

from typing import (
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from typing import (
        Any,
        Mapping,
        Sequence,
        Union,
    )

    from jsonschema.exceptions import ValidationError as SchemaValidationError

    from ..common import (
        RelPath,
    )

import urllib.parse

import jsonschema.validators
import referencing

from ..common import AbstractROCrateIOException


class ConfigValidationException(AbstractROCrateIOException):
    pass


SCHEMAS_REL_DIR = "schemas"


def load_schema(relSchemaFile: "RelPath") -> "Mapping[str, Any]":
    # Locating the schemas directory, where all the schemas should be placed
    schemaFile = os.path.join(
        os.path.dirname(__file__), "..", SCHEMAS_REL_DIR, relSchemaFile
    )

    with open(schemaFile, mode="r", encoding="utf-8") as sF:
        schema = json.load(sF)

    assert isinstance(schema, dict)
    return schema


def get_schema_validator(schema: "Mapping[str, Any]") -> "Any":
    return jsonschema.validators.validator_for(schema)(
        schema, registry=referencing.Registry()
    )


def config_validate(
    configToValidate: "Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]",
    relSchemaFile: "RelPath",
) -> "Sequence[SchemaValidationError]":
    try:
        jv = get_schema_validator(load_schema(relSchemaFile))
        return list(jv.iter_errors(instance=configToValidate))
    except Exception as e:
        raise ConfigValidationException(
            f"FATAL ERROR: corrupted schema {relSchemaFile}. Reason: {e}"
        ) from e


def is_uri(the_uri: "str") -> "bool":
    """
    Inspired in https://stackoverflow.com/a/38020041
    """
    try:
        result = urllib.parse.urlparse(the_uri)
        return result.scheme != ""
    except ValueError:
        return False
