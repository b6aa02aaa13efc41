"""
Node transformer: one editor node -> one rule-engine node.

Editor nodes come in two shapes: "data" nodes keep their type, negation and
metadata under ``data``; "flat" nodes (blocks nested in containers) keep them
on the node itself. ``resolve_node`` settles which location is authoritative
once, and the per-kind functions below only ever read the resolved view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from graph.schema import BlockNode, GraphEdge, GraphNode, Metadata
from .models import RuleNode

logger = logging.getLogger(__name__)


# Editor node types
GROUP_BLOCK_NODE = "group-block-node"
GROUP_BLOCK = "group_block"
CONDITIONAL_NODE = "conditional-node"
CONDITIONAL_GPT_NODE = "conditional-gpt-node"
DEFAULT_BLOCK_NODE = "default-block-node"
RESPONSE_NODE = "response-node"
PARAMETER = "parameter"
FUNCTION = "function"
MOMENT = "moment"

# Rule-engine node types
SINGLE_BLOCK = "singleBlock"
CONDITIONAL_BLOCK = "conditionalBlock"
CONDITIONAL_GPT_BLOCK = "conditionalGPTBlock"
DEFAULT_BLOCK = "defaultBlock"
RESPONSE = "response"
ATTRIBUTE = "attribute"


class NodeKind(str, Enum):
    """Every shape of editor node the transformer knows how to lower"""
    GROUP_BLOCK = "group_block"
    CONDITIONAL = "conditional"
    CONDITIONAL_GPT = "conditional_gpt"
    DEFAULT_BLOCK = "default_block"
    RESPONSE = "response"
    PARAMETER = "parameter"
    PLAIN = "plain"


CONTAINER_KINDS: Dict[str, NodeKind] = {
    GROUP_BLOCK_NODE: NodeKind.GROUP_BLOCK,
    GROUP_BLOCK: NodeKind.GROUP_BLOCK,
    CONDITIONAL_NODE: NodeKind.CONDITIONAL,
    CONDITIONAL_GPT_NODE: NodeKind.CONDITIONAL_GPT,
    DEFAULT_BLOCK_NODE: NodeKind.DEFAULT_BLOCK,
    RESPONSE_NODE: NodeKind.RESPONSE,
}

RULE_TYPES: Dict[NodeKind, str] = {
    NodeKind.GROUP_BLOCK: SINGLE_BLOCK,
    NodeKind.CONDITIONAL: CONDITIONAL_BLOCK,
    NodeKind.CONDITIONAL_GPT: CONDITIONAL_GPT_BLOCK,
    NodeKind.DEFAULT_BLOCK: DEFAULT_BLOCK,
    NodeKind.RESPONSE: RESPONSE,
    NodeKind.PARAMETER: ATTRIBUTE,
}


@dataclass(frozen=True)
class ResolvedNode:
    id: str
    kind: NodeKind
    rule_type: str
    metadata: Metadata
    is_not: bool
    tenant_id: Optional[str] = None


# ============================================================================
# Shape adapter
# ============================================================================

def _pick_metadata(node: GraphNode, in_data: bool) -> Metadata:
    preferred, other = (node.data.metadata, node.metadata) if in_data else (node.metadata, node.data.metadata)
    if not preferred.is_populated() and other.is_populated():
        return other
    return preferred


def _pick_is_not(node: GraphNode, in_data: bool) -> bool:
    preferred, other = (node.data, node) if in_data else (node, node.data)
    if "is_not" in preferred.model_fields_set:
        return preferred.is_not
    if "is_not" in other.model_fields_set:
        return other.is_not
    return False


def resolve_node(node: GraphNode, is_nested_block: bool = False) -> ResolvedNode:
    """Normalize a node into its kind plus the authoritative payload.

    Containers always carry their metadata under ``data`` (except the flat
    ``group_block``); their negation flag sits on the node when reached as a
    nested block. Parameter nodes are recognised in either location. All
    other nodes read the flat location when nested and ``data`` otherwise,
    falling back to the other location when the preferred one is empty.
    """
    kind = CONTAINER_KINDS.get(node.type)
    if kind is not None:
        return ResolvedNode(
            id=node.id,
            kind=kind,
            rule_type=RULE_TYPES[kind],
            metadata=_pick_metadata(node, in_data=node.type != GROUP_BLOCK),
            is_not=_pick_is_not(node, in_data=not is_nested_block),
            tenant_id=node.tenant_id,
        )

    if PARAMETER in (node.type, node.data.type):
        in_data = node.type != PARAMETER
        return ResolvedNode(
            id=node.id,
            kind=NodeKind.PARAMETER,
            rule_type=ATTRIBUTE,
            metadata=_pick_metadata(node, in_data),
            is_not=_pick_is_not(node, in_data),
            tenant_id=node.tenant_id,
        )

    in_data = not is_nested_block
    if in_data:
        rule_type = node.data.type or node.type
    else:
        rule_type = node.type or node.data.type
    return ResolvedNode(
        id=node.id,
        kind=NodeKind.PLAIN,
        rule_type=rule_type,
        metadata=_pick_metadata(node, in_data),
        is_not=_pick_is_not(node, in_data),
        tenant_id=node.tenant_id,
    )


# ============================================================================
# Configuration helpers
# ============================================================================

def node_ids(nodes: List[GraphNode]) -> List[str]:
    return [node.id for node in nodes]


def block_ids(blocks: List[BlockNode], selected_only: bool = False) -> List[str]:
    return [block.id for block in blocks if block.is_selected or not selected_only]


def response_block_ids(blocks: List[BlockNode]) -> List[str]:
    # Typed blocks first, editor placeholders (no type yet) last
    typed = [block.id for block in blocks if block.inner_type]
    untyped = [block.id for block in blocks if not block.inner_type]
    return typed + untyped


def moment_node_map(blocks: List[BlockNode]) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for block in blocks:
        if block.inner_type == MOMENT:
            moment_id = _pick_metadata(block.node_data, in_data=False).id or ""
            mapping[moment_id] = block.id
    return mapping


def group_block_ids(blocks: List[BlockNode]) -> List[str]:
    return [block.id for block in blocks if block.inner_type == GROUP_BLOCK]


def edge_triples(edges: List[GraphEdge]) -> List[Dict[str, str]]:
    return [
        {
            "SourceNode": edge.source,
            "TargetNode": edge.target,
            "Operator": edge.data.operator,
        }
        for edge in edges
    ]


# ============================================================================
# Per-kind transformations
# ============================================================================

def _seed(resolved: ResolvedNode) -> RuleNode:
    configuration = resolved.metadata.to_configuration()
    configuration["is_not"] = resolved.is_not
    return RuleNode(
        id=resolved.id,
        type=resolved.rule_type,
        name=resolved.metadata.name or "",
        configuration=configuration,
    )


def _group_block(resolved: ResolvedNode) -> RuleNode:
    rule_node = _seed(resolved)
    rule_node.configuration["NodeIdList"] = node_ids(resolved.metadata.nodes)
    rule_node.configuration["edges"] = edge_triples(resolved.metadata.edges)
    return rule_node


def _conditional(resolved: ResolvedNode) -> RuleNode:
    rule_node = _seed(resolved)
    rule_node.configuration["NodeIdList"] = block_ids(resolved.metadata.blocks)
    return rule_node


def _conditional_gpt(resolved: ResolvedNode) -> RuleNode:
    blocks = resolved.metadata.blocks
    rule_node = _seed(resolved)
    rule_node.configuration.update({
        "NodeIdList": block_ids(blocks),
        "prompt": resolved.metadata.prompt or "",
        "MomentNodeMap": moment_node_map(blocks),
        "TenantID": resolved.tenant_id or "",
        "GroupNodeIDs": group_block_ids(blocks),
    })
    return rule_node


def _default_block(resolved: ResolvedNode) -> RuleNode:
    rule_node = _seed(resolved)
    rule_node.configuration["NodeIdList"] = block_ids(resolved.metadata.blocks, selected_only=True)
    rule_node.configuration["selected"] = resolved.metadata.selected or 0
    return rule_node


def _response(resolved: ResolvedNode) -> RuleNode:
    rule_node = _seed(resolved)
    rule_node.configuration["NodeIdList"] = response_block_ids(resolved.metadata.blocks)
    return rule_node


def _parameter(resolved: ResolvedNode) -> RuleNode:
    rule_node = _seed(resolved)
    rule_node.configuration.update({
        "attribute": [resolved.metadata.response or 0],
        "parameter_id": resolved.metadata.parameter or 0,
        "attribute_type": PARAMETER,
    })
    return rule_node


def _plain(resolved: ResolvedNode) -> RuleNode:
    rule_node = _seed(resolved)
    if rule_node.type == FUNCTION:
        rule_node.configuration["function_name"] = resolved.metadata.function_type or ""
    return rule_node


TRANSFORMS: Dict[NodeKind, Callable[[ResolvedNode], RuleNode]] = {
    NodeKind.GROUP_BLOCK: _group_block,
    NodeKind.CONDITIONAL: _conditional,
    NodeKind.CONDITIONAL_GPT: _conditional_gpt,
    NodeKind.DEFAULT_BLOCK: _default_block,
    NodeKind.RESPONSE: _response,
    NodeKind.PARAMETER: _parameter,
    NodeKind.PLAIN: _plain,
}


def transform_node(node: GraphNode, is_nested_block: bool = False) -> RuleNode:
    """Lower one editor node into a rule node.

    ``is_nested_block`` is True when the node was reached through a
    container's ``blocks`` list rather than as a top-level graph node.
    """
    resolved = resolve_node(node, is_nested_block)
    rule_node = TRANSFORMS[resolved.kind](resolved)
    logger.debug(f"Transformed node {node.id!r} ({node.type or resolved.rule_type}) -> {rule_node.type}")
    return rule_node
