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

import logging

from typing import (
    NamedTuple,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from typing import (
        Any,
        MutableSequence,
        Optional,
        Sequence,
    )

    from .common import (
        JSONLDNode,
    )

from .common import (
    ABOUT_KEY,
    CONFORMS_TO_BASE_URL,
    CONFORMS_TO_KEY,
    HAS_PART_KEY,
    ID_KEY,
    LEGACY_ROCRATE_JSONLD_FILENAME,
    ROCRATE_JSONLD_FILENAME,
    StructuralError,
    ref_ids,
)

logger = logging.getLogger(__name__)


class ClassifiedGraph(NamedTuple):
    """
    descriptor: the raw node describing the crate itself.
    root: the raw root dataset node, without its hasPart.
    root_has_part: identifiers from the hasPart of the root dataset,
        in declaration order and without repetitions.
    data_nodes: the nodes referenced from root_has_part.
    contextual_nodes: the remaining ones.
    """

    descriptor: "JSONLDNode"
    root: "JSONLDNode"
    root_has_part: "Sequence[str]"
    data_nodes: "Sequence[JSONLDNode]"
    contextual_nodes: "Sequence[JSONLDNode]"


def conforms_to_crate(conforms_to: "Any") -> "bool":
    """
    conformsTo should be a single reference object, but an array
    of them is also accepted (common in Workflow RO-Crates), as long
    as one of them matches
    """
    for conforms_to_id in ref_ids(conforms_to):
        if conforms_to_id.startswith(CONFORMS_TO_BASE_URL):
            return True

    return False


def _pick_descriptor(
    graph: "Sequence[JSONLDNode]", candidates: "Sequence[int]"
) -> "int":
    if len(candidates) == 0:
        raise StructuralError(
            f"No node has a {CONFORMS_TO_KEY} starting with {CONFORMS_TO_BASE_URL}, so there is no crate descriptor"
        )

    if len(candidates) == 1:
        return candidates[0]

    # Nested crates describe themselves with their own descriptors,
    # but only the top level one has the conventional identifier
    conventional = [
        i_node
        for i_node in candidates
        if graph[i_node][ID_KEY]
        in (ROCRATE_JSONLD_FILENAME, LEGACY_ROCRATE_JSONLD_FILENAME)
    ]
    if len(conventional) == 1:
        logger.debug(
            f"{len(candidates)} descriptor candidates, choosing {graph[conventional[0]][ID_KEY]}"
        )
        return conventional[0]

    raise StructuralError(
        "Ambiguous crate descriptor, candidates are "
        + ", ".join(graph[i_node][ID_KEY] for i_node in candidates)
    )


def classify_graph(graph: "Any") -> "ClassifiedGraph":
    """
    It finds the crate descriptor and the root dataset from the
    raw @graph array, and it partitions the remaining nodes into
    data nodes (the ones listed in the hasPart of the root dataset)
    and contextual nodes.

    The input is never modified.
    """
    if not isinstance(graph, list):
        raise StructuralError(f"@graph must be an array, got {type(graph).__name__}")

    candidates: "MutableSequence[int]" = []
    for i_node, node in enumerate(graph):
        if not isinstance(node, dict):
            raise StructuralError(f"Node {i_node} from @graph is not an object")
        node_id = node.get(ID_KEY)
        if not isinstance(node_id, str) or len(node_id) == 0:
            raise StructuralError(f"Node {i_node} from @graph has no valid {ID_KEY}")
        if conforms_to_crate(node.get(CONFORMS_TO_KEY)):
            candidates.append(i_node)

    i_descriptor = _pick_descriptor(graph, candidates)
    descriptor = graph[i_descriptor]

    about_ids = ref_ids(descriptor.get(ABOUT_KEY))
    if len(about_ids) != 1:
        raise StructuralError(
            f"Descriptor {descriptor[ID_KEY]} must be {ABOUT_KEY} exactly one entity"
        )
    root_id = about_ids[0]

    i_root: "Optional[int]" = None
    for i_node, node in enumerate(graph):
        if i_node != i_descriptor and node[ID_KEY] == root_id:
            i_root = i_node
            break

    if i_root is None:
        raise StructuralError(
            f"Root dataset {root_id} (from {descriptor[ID_KEY]}) is not in @graph"
        )

    root = {key: value for key, value in graph[i_root].items() if key != HAS_PART_KEY}
    root_has_part = list(
        dict.fromkeys(
            ref_ids(
                graph[i_root].get(HAS_PART_KEY),
                warn_about=f"{HAS_PART_KEY} of {root_id}",
            )
        )
    )
    has_part_set = frozenset(root_has_part)

    data_nodes: "MutableSequence[JSONLDNode]" = []
    contextual_nodes: "MutableSequence[JSONLDNode]" = []
    for i_node, node in enumerate(graph):
        if i_node in (i_descriptor, i_root):
            continue
        if node[ID_KEY] in has_part_set:
            data_nodes.append(node)
        else:
            contextual_nodes.append(node)

    logger.debug(
        f"Root {root_id}: {len(data_nodes)} data entities, {len(contextual_nodes)} contextual entities"
    )

    return ClassifiedGraph(
        descriptor=descriptor,
        root=root,
        root_has_part=root_has_part,
        data_nodes=data_nodes,
        contextual_nodes=contextual_nodes,
    )
