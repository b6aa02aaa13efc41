from graph.schema import GraphNode
from core.transformer import (
    TRANSFORMS, NodeKind, resolve_node, transform_node,
    ATTRIBUTE, CONDITIONAL_BLOCK, CONDITIONAL_GPT_BLOCK, DEFAULT_BLOCK, RESPONSE, SINGLE_BLOCK,
)

from conftest import block, data_node


def node(raw):
    return GraphNode.model_validate(raw)


def test_every_kind_has_a_transform():
    assert set(TRANSFORMS) == set(NodeKind)


def test_group_block_node_lists_inner_nodes_and_edges():
    raw = data_node(
        "G", "group-block-node", name="grp",
        nodes=[{"id": "n1", "type": "function"}, {"id": "n2", "type": "moment"}],
        edges=[{"source": "n1", "target": "n2", "data": {"operator": "and"}}],
    )
    rule = transform_node(node(raw))
    assert rule.type == SINGLE_BLOCK
    assert rule.name == "grp"
    assert rule.configuration["NodeIdList"] == ["n1", "n2"]
    assert rule.configuration["edges"] == [{"SourceNode": "n1", "TargetNode": "n2", "Operator": "and"}]
    assert "nodes" not in rule.configuration
    assert rule.configuration["is_not"] is False


def test_nested_group_block_reads_flat_metadata():
    raw = {"id": "g", "type": "group_block", "metadata": {"nodes": [{"id": "x"}], "edges": []}}
    rule = transform_node(node(raw), is_nested_block=True)
    assert rule.type == SINGLE_BLOCK
    assert rule.configuration["NodeIdList"] == ["x"]
    assert rule.configuration["edges"] == []


def test_conditional_lists_all_blocks():
    raw = data_node("C", "conditional-node", blocks=[block("b1", "function"), block("b2", "")])
    rule = transform_node(node(raw))
    assert rule.type == CONDITIONAL_BLOCK
    assert rule.configuration["NodeIdList"] == ["b1", "b2"]


def test_conditional_gpt_configuration():
    raw = data_node("C", "conditional-gpt-node", prompt="pick one", blocks=[
        block("b1", "moment", id="m-1"),
        block("b2", "group_block"),
        block("b3", "function"),
    ])
    raw["tenantId"] = "t9"
    rule = transform_node(node(raw))
    assert rule.type == CONDITIONAL_GPT_BLOCK
    config = rule.configuration
    assert config["NodeIdList"] == ["b1", "b2", "b3"]
    assert config["prompt"] == "pick one"
    assert config["MomentNodeMap"] == {"m-1": "b1"}
    assert config["TenantID"] == "t9"
    assert config["GroupNodeIDs"] == ["b2"]


def test_default_block_keeps_selected_blocks_only():
    raw = data_node("D", "default-block-node", blocks=[
        block("b1", "function"),
        block("b2", "function", selected=True),
    ])
    rule = transform_node(node(raw))
    assert rule.type == DEFAULT_BLOCK
    assert rule.configuration["NodeIdList"] == ["b2"]
    assert rule.configuration["selected"] == 0


def test_response_puts_untyped_blocks_last():
    raw = data_node("R", "response-node", blocks=[block("empty", ""), block("text", "text")])
    rule = transform_node(node(raw))
    assert rule.type == RESPONSE
    assert rule.configuration["NodeIdList"] == ["text", "empty"]


def test_parameter_from_flat_node():
    raw = {"id": "p", "type": "parameter", "metadata": {"parameter": 5, "response": 9}}
    rule = transform_node(node(raw))
    assert rule.type == ATTRIBUTE
    assert rule.configuration["attribute"] == [9]
    assert rule.configuration["parameter_id"] == 5
    assert rule.configuration["attribute_type"] == "parameter"


def test_parameter_recognised_under_data_with_zero_defaults():
    raw = {"id": "p", "type": "custom", "data": {"type": "parameter", "metadata": {}}}
    rule = transform_node(node(raw))
    assert rule.type == ATTRIBUTE
    assert rule.configuration["attribute"] == [0]
    assert rule.configuration["parameter_id"] == 0


def test_function_name_copied_from_function_type():
    rule = transform_node(node(data_node("f", "function", functionType="sum")))
    assert rule.type == "function"
    assert rule.configuration["function_name"] == "sum"


def test_plain_node_falls_back_to_flat_metadata():
    raw = {"id": "A", "type": "function", "metadata": {"functionType": "max"}}
    rule = transform_node(node(raw))
    assert rule.type == "function"
    assert rule.configuration["function_name"] == "max"


def test_negation_location_depends_on_nesting():
    raw = {"id": "m", "type": "moment", "isNot": True, "data": {"type": "moment", "isNot": False}}
    assert transform_node(node(raw), is_nested_block=True).configuration["is_not"] is True
    assert transform_node(node(raw)).configuration["is_not"] is False

    # only one location set: it wins either way
    only_flat = {"id": "m", "type": "moment", "isNot": True}
    assert transform_node(node(only_flat)).configuration["is_not"] is True


def test_resolve_node_kinds():
    assert resolve_node(node({"id": "a", "type": "response-node"})).kind is NodeKind.RESPONSE
    assert resolve_node(node({"id": "a", "type": "parameter"})).kind is NodeKind.PARAMETER
    assert resolve_node(node({"id": "a", "type": "moment"})).kind is NodeKind.PLAIN


def test_transform_is_idempotent():
    gn = node(data_node("C", "conditional-gpt-node", prompt="p", blocks=[block("b1", "moment", id="m")]))
    first = transform_node(gn)
    second = transform_node(gn)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_nested_function_block_reads_flat_function_type():
    raw = {"id": "f", "type": "function", "metadata": {"functionType": "sum"}, "data": {"metadata": {}}}
    rule = transform_node(node(raw), is_nested_block=True)
    assert rule.type == "function"
    assert rule.configuration["function_name"] == "sum"
