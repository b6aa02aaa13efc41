from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from core.models import RuleChain, RuleChainBaseInfo, RuleMetadata, RuleNode
from storage.moment_store import Moment, MomentRepository


def make_graph(nodes: List[Dict[str, Any]], edges: Optional[List[Dict[str, Any]]] = None,
               graph_id: Any = 1) -> Dict[str, Any]:
    return {"id": graph_id, "nodes": nodes, "edges": edges or []}


def data_node(node_id: str, node_type: str, **metadata: Any) -> Dict[str, Any]:
    """Top-level editor node carrying its payload under ``data``"""
    return {"id": node_id, "type": node_type, "data": {"type": node_type, "metadata": metadata}}


def block(block_id: str, block_type: str, selected: bool = False, **metadata: Any) -> Dict[str, Any]:
    return {
        "id": block_id,
        "isSelected": selected,
        "data": {"id": block_id, "type": block_type, "metadata": metadata},
    }


def edge(source: str, target: str, handle: Optional[str] = None, operator: str = "") -> Dict[str, Any]:
    return {
        "id": f"{source}->{target}",
        "source": source,
        "target": target,
        "sourceHandle": handle,
        "data": {"operator": operator},
    }


def moment_chain(chain_id: str, moment_ids: List[Any]) -> RuleChain:
    nodes = [
        RuleNode(id=f"{chain_id}-n{i}", type="moment", configuration={"id": moment_id})
        for i, moment_id in enumerate(moment_ids)
    ]
    return RuleChain(
        rule_chain=RuleChainBaseInfo(id=chain_id, tenant_id="t1"),
        metadata=RuleMetadata(nodes=nodes),
    )


class RecordingRepository(MomentRepository):
    """Answers every id with a moment and remembers each batch it was asked for"""

    def __init__(self, parents: Optional[Dict[str, str]] = None, fail_on_call: Optional[int] = None) -> None:
        super().__init__()
        self.parents = parents or {}
        self.fail_on_call = fail_on_call
        self.calls: List[List[str]] = []

    def _batch_get(self, moment_ids: List[str], tenant_id: str) -> List[Moment]:
        self.calls.append(list(moment_ids))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("store unavailable")
        return [
            Moment(id=moment_id, moment_id=self.parents.get(moment_id, ""), tenant_id=tenant_id)
            for moment_id in moment_ids
        ]

    def save_moment(self, moment: Moment) -> None:
        raise NotImplementedError


@pytest.fixture
def single_flow() -> Dict[str, Any]:
    """Numeric-id flow: conditional container feeding a function and a response"""
    return make_graph(
        nodes=[
            data_node("cond", "conditional-node", name="Check", blocks=[
                block("p1", "parameter", parameter=7, response=3),
                block("m1", "moment", id="m-100"),
            ]),
            data_node("fn", "function", name="Score", functionType="sum"),
            data_node("resp", "response-node", blocks=[block("r1", "text", value="hi")]),
        ],
        edges=[edge("cond", "fn"), edge("fn", "resp")],
        graph_id=42,
    )


@pytest.fixture
def default_flow() -> Dict[str, Any]:
    return make_graph(
        nodes=[
            data_node("def", "default-block-node", selected=1, blocks=[
                block("B1", "function", functionType="avg"),
                block("B2", "function", selected=True, functionType="sum"),
            ]),
        ],
        graph_id=7,
    )


@pytest.fixture
def recording_repository() -> RecordingRepository:
    return RecordingRepository()
