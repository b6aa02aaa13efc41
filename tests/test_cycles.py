import networkx as nx

from core.models import NodeConnection
from graph.cycles import detect_cycle, find_cycle, topological_order


def connections(*pairs):
    return [NodeConnection(from_id=a, to_id=b) for a, b in pairs]


def test_acyclic_connections():
    result = detect_cycle(connections(("a", "b"), ("b", "c"), ("a", "c")))
    assert not result.has_cycle
    assert result.cycle == []


def test_cycle_path_is_reported():
    result = detect_cycle(connections(("a", "b"), ("b", "c"), ("c", "a")))
    assert result.has_cycle
    assert result.cycle == ["a", "b", "c", "a"]


def test_self_loop():
    result = detect_cycle(connections(("x", "x")))
    assert result.has_cycle
    assert result.cycle == ["x", "x"]


def test_cycle_reachable_from_later_start():
    result = detect_cycle(connections(("root", "leaf"), ("p", "q"), ("q", "p")))
    assert result.has_cycle
    assert result.cycle == ["p", "q", "p"]


def test_deep_chain_does_not_recurse():
    g = nx.DiGraph()
    nx.add_path(g, [str(i) for i in range(5000)])
    assert not find_cycle(g).has_cycle


def test_topological_order():
    g = nx.DiGraph([("a", "b"), ("b", "c")])
    g.add_node("lonely")
    result = topological_order(g)
    assert result.success
    assert result.order.index("a") < result.order.index("b") < result.order.index("c")
    assert result.start_nodes == ["a"]
    assert result.end_nodes == ["c"]


def test_topological_order_reports_nodes_below_a_cycle():
    g = nx.DiGraph([("s", "a"), ("a", "b"), ("b", "a")])
    result = topological_order(g)
    assert not result.success
    assert sorted(result.cyclic_nodes) == ["a", "b"]


def test_nodes_downstream_of_a_cycle_are_left_out_of_the_order():
    g = nx.DiGraph([("s", "a"), ("a", "b"), ("b", "a"), ("b", "t"), ("s", "u")])
    result = topological_order(g)
    assert sorted(result.cyclic_nodes) == ["a", "b", "t"]
    assert result.order == ["s", "u"]
