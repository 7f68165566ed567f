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
    ReferentialError,
    ValidationError,
)
from rocrate_io.crate import ROCrate
from rocrate_io.entities import (
    DataSetEntityBuilder,
    FileEntityBuilder,
    PersonEntityBuilder,
)
from rocrate_io.validation import (
    CompositeValidator,
    JSONSchemaValidator,
    ReferentialValidator,
    get_validator,
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def sample_crate() -> "ROCrate":
    crate = ROCrate()
    crate.add_data_entity(
        DataSetEntityBuilder().set_id("data/").add_to_has_part("data/a.txt").build()
    )
    crate.add_data_entity(FileEntityBuilder().set_id("data/a.txt").build(), to_root=False)
    crate.add_contextual_entity(PersonEntityBuilder().set_id("#alice").build())
    return crate


def test_valid_crate() -> "None":
    get_validator().validate(sample_crate())


def test_schema_validator_rejects_bad_context() -> "None":
    crate = sample_crate()
    crate.context = None
    with pytest.raises(ValidationError) as ve:
        JSONSchemaValidator().validate(crate)
    assert len(ve.value.reasons) > 0

    # The referential validator does not care about the context
    ReferentialValidator().validate(crate)


def test_referential_dangling_has_part() -> "None":
    crate = sample_crate()
    crate.root_data_entity.add_to_has_part("missing.txt")
    with pytest.raises(ReferentialError) as re:
        ReferentialValidator().validate(crate)
    assert any("missing.txt" in reason for reason in re.value.reasons)


def test_referential_unreachable_data_entity() -> "None":
    crate = sample_crate()
    crate.add_data_entity(FileEntityBuilder().set_id("lost.txt").build(), to_root=False)
    with pytest.raises(ReferentialError) as re:
        ReferentialValidator().validate(crate)
    assert any("lost.txt" in reason for reason in re.value.reasons)


def test_referential_error_is_validation_error() -> "None":
    crate = sample_crate()
    crate.root_data_entity.add_to_has_part("missing.txt")
    with pytest.raises(ValidationError):
        get_validator().validate(crate)


def test_composite_aggregates_failures() -> "None":
    crate = sample_crate()
    crate.context = None
    crate.root_data_entity.add_to_has_part("missing.txt")

    with pytest.raises(ValidationError) as ve:
        CompositeValidator([JSONSchemaValidator(), ReferentialValidator()]).validate(
            crate
        )
    assert not isinstance(ve.value, ReferentialError)
    assert any("missing.txt" in reason for reason in ve.value.reasons)
    assert ve.value.__cause__ is not None


def test_get_validator_names() -> "None":
    validator = get_validator(["referential"])
    assert isinstance(validator, CompositeValidator)
    assert [v.__class__ for v in validator.validators] == [ReferentialValidator]

    with pytest.raises(KeyError):
        get_validator(["unknown"])
