from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from graph.schema import BlockNode, Graph, GraphNode
from .connections import container_connections
from .models import NodeConnection, RuleNode
from .transformer import (
    CONDITIONAL_GPT_NODE,
    CONDITIONAL_NODE,
    DEFAULT_BLOCK_NODE,
    GROUP_BLOCK,
    GROUP_BLOCK_NODE,
    RESPONSE_NODE,
    resolve_node,
    transform_node,
)

logger = logging.getLogger(__name__)


@dataclass
class FlattenState:
    """Accumulators for one walk over the top-level graph"""
    nodes: List[RuleNode] = field(default_factory=list)
    connections: List[NodeConnection] = field(default_factory=list)
    parent_ids: List[str] = field(default_factory=list)
    default_seen: bool = False
    default_node: Optional[RuleNode] = None
    anchor: Optional[GraphNode] = None


def flatten_graph(graph: Graph, tenant_id: str) -> FlattenState:
    """Walk the top-level nodes once, descending into containers.

    Every top-level node except a default container is also lowered itself
    (tenant stamped) and recorded as a parent single-block id; the default
    container is captured separately for the root synthesizer.
    """
    state = FlattenState()

    for node in graph.nodes:
        if node.type == GROUP_BLOCK_NODE:
            _flatten_group(node, state)
        elif node.type in (CONDITIONAL_NODE, CONDITIONAL_GPT_NODE):
            _flatten_blocks(_blocks_of(node), state)
            if state.anchor is None:
                state.anchor = node
        elif node.type == RESPONSE_NODE:
            _flatten_blocks(_blocks_of(node), state)
        elif node.type == DEFAULT_BLOCK_NODE:
            state.default_seen = True
            _flatten_blocks(_blocks_of(node), state, selected_only=True)
            state.default_node = transform_node(node)
            continue

        stamped = node.model_copy(update={"tenant_id": tenant_id})
        state.parent_ids.append(stamped.id)
        state.nodes.append(transform_node(stamped))

    logger.debug(
        f"Flattened {len(graph.nodes)} top-level nodes into {len(state.nodes)} rule nodes "
        f"and {len(state.connections)} container connections"
    )
    return state


def _blocks_of(node: GraphNode) -> List[BlockNode]:
    return resolve_node(node).metadata.blocks


def _flatten_group(node: GraphNode, state: FlattenState) -> None:
    metadata = resolve_node(node).metadata
    state.connections.extend(container_connections(metadata.edges))
    for grp_node in metadata.nodes:
        state.nodes.append(transform_node(grp_node))


def _flatten_blocks(blocks: List[BlockNode], state: FlattenState, selected_only: bool = False) -> None:
    for block in blocks:
        if selected_only and not block.is_selected:
            continue
        # the block id is what sibling edges and NodeIdList refer to
        inner = block.node_data.model_copy(update={"id": block.id})
        if block.inner_type == GROUP_BLOCK:
            for grp_node in resolve_node(inner, is_nested_block=True).metadata.nodes:
                state.nodes.append(transform_node(grp_node))
        if not block.inner_type:
            logger.debug(f"Skipping placeholder block {block.id!r} with no type")
            continue
        state.nodes.append(transform_node(inner, is_nested_block=True))
