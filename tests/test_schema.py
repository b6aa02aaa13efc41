import pytest
from pydantic import ValidationError

from graph.preprocess import normalize_raw_to_graph
from graph.schema import BlockNode, Graph, GraphEdge, GraphNode, Metadata, format_graph_id, is_numeric_id


def test_graph_accepts_null_collections_and_payloads():
    graph = Graph.model_validate({
        "id": 1,
        "nodes": [{"id": "a", "type": "function", "data": None, "metadata": None}],
        "edges": None,
    })
    assert graph.edges == []
    assert graph.nodes[0].data.type == ""
    assert not graph.nodes[0].metadata.is_populated()


def test_node_aliases():
    node = GraphNode.model_validate({
        "id": "a",
        "type": "moment",
        "isNot": True,
        "tenantId": "t1",
        "data": {"type": "moment", "isNot": False, "metadata": {"id": 12}},
        "position": {"x": 10, "y": 20},
    })
    assert node.is_not is True
    assert node.tenant_id == "t1"
    assert node.data.is_not is False
    # numeric ids are kept as strings
    assert node.data.metadata.id == "12"


def test_edge_null_handle_becomes_empty():
    e = GraphEdge.model_validate({"source": "a", "target": "b", "sourceHandle": None, "data": None})
    assert e.source_handle == ""
    assert e.data.operator == ""


def test_block_inner_type_falls_back_to_data_type():
    b = BlockNode.model_validate({"id": "b", "nodeData": {"data": {"type": "moment"}}})
    assert b.inner_type == "moment"
    assert BlockNode.model_validate({"id": "b", "data": None}).inner_type == ""


def test_metadata_configuration_projection():
    metadata = Metadata.model_validate({
        "name": "x",
        "functionType": "sum",
        "list": [1, 2],
        "validate": "entity",
        "validateFields": {"attributeCategoryKey": 3},
        "nodes": [{"id": "n"}],
        "blocks": [{"id": "b"}],
    })
    config = metadata.to_configuration()
    assert config == {
        "name": "x",
        "function_type": "sum",
        "list": [1, 2],
        "validate": "entity",
        "validateFields": {"attributeCategoryKey": 3},
    }


def test_metadata_rejects_wrong_types():
    with pytest.raises(ValidationError):
        Metadata.model_validate({"parameter": "not-a-number"})


@pytest.mark.parametrize("value, expected", [
    (3.0, "3"),
    (1234567.0, "1234567"),
    (3, "3"),
    (2.5, "2.5"),
    ("multiple", "multiple"),
    (None, ""),
])
def test_format_graph_id(value, expected):
    assert format_graph_id(value) == expected


def test_numeric_id_detection():
    assert is_numeric_id(3.0)
    assert is_numeric_id(4)
    assert not is_numeric_id("4")
    assert not is_numeric_id(True)


def test_normalize_unwraps_graph_envelope():
    graph = normalize_raw_to_graph({"graph": {"id": 5, "nodes": [{"id": "a"}]}})
    assert graph.chain_id == "5"
    assert [n.id for n in graph.nodes] == ["a"]
    assert normalize_raw_to_graph(graph) is graph


def test_normalize_rejects_non_objects():
    with pytest.raises(ValueError):
        normalize_raw_to_graph(["not", "a", "graph"])
