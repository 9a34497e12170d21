"""Tests for the package dependency graph."""

import pytest

from pacgraph.constants import PackageOrigin
from pacgraph.errors import PreconditionError
from pacgraph.graph import Graph
from pacgraph.models import Package


def pkg(name, depends=(), make_depends=(), origin=PackageOrigin.REMOTE):
    """Helper to create package records."""
    return Package(name=name, origin=origin, depends=list(depends), make_depends=list(make_depends))


@pytest.fixture
def graph():
    return Graph()


def add(graph, name, **kwargs):
    node = graph.new_node(pkg(name, **kwargs))
    graph.add_node(node)
    return node


class TestNodes:
    """Node creation and lookup."""

    def test_ids_start_at_one_and_increase(self, graph):
        a = graph.new_node(pkg("a"))
        b = graph.new_node(pkg("b"))
        assert (a.id, b.id) == (1, 2)

    def test_new_node_does_not_insert(self, graph):
        node = graph.new_node(pkg("a"))
        assert not graph.has(node)
        assert not graph.has_name("a")
        assert len(graph) == 0

    def test_ids_are_not_reused_after_unadded_nodes(self, graph):
        graph.new_node(pkg("discarded"))
        node = add(graph, "a")
        assert node.id == 2

    def test_lookup_by_name(self, graph):
        node = add(graph, "a")
        assert graph.has_name("a")
        assert graph.node_with_name("a") is node
        assert graph.node_with_name("missing") is None
        assert "a" in graph

    def test_nodes_in_insertion_order(self, graph):
        names = ["c", "a", "b"]
        for name in names:
            add(graph, name)
        assert [n.name for n in graph.nodes()] == names
        assert [n.name for n in graph] == names

    def test_duplicate_name_is_rejected(self, graph):
        add(graph, "a")
        with pytest.raises(PreconditionError):
            graph.add_node(graph.new_node(pkg("a", origin=PackageOrigin.SYNC)))
        assert len(graph) == 1
        assert graph.node_with_name("a").package.origin is PackageOrigin.REMOTE

    def test_duplicate_id_is_rejected(self, graph):
        node = add(graph, "a")
        with pytest.raises(PreconditionError):
            graph.add_node(node)

    def test_node_properties(self, graph):
        node = add(graph, "a", depends=["b"], make_depends=["c"])
        assert str(node) == "a"
        assert node.is_from_aur
        assert node.all_depends() == ["b", "c"]
        node.all_depends().append("x")
        assert node.package.depends == ["b"]


class TestEdges:
    """Edge insertion and adjacency queries."""

    def test_add_edge(self, graph):
        a, b = add(graph, "a"), add(graph, "b")
        graph.add_edge_from_to(a, b)
        assert graph.has_edge_from_to(a, b)
        assert not graph.has_edge_from_to(b, a)
        assert graph.has_edge_between(a, b)
        assert graph.has_edge_between(b, a)
        assert graph.successors(a) == [b]
        assert graph.predecessors(b) == [a]
        assert graph.successors(b) == []
        assert graph.predecessors(a) == []

    def test_edge_is_idempotent(self, graph):
        a, b = add(graph, "a"), add(graph, "b")
        graph.add_edge_from_to(a, b)
        graph.add_edge_from_to(a, b)
        assert graph.successors(a) == [b]
        assert graph.predecessors(b) == [a]
        assert len(graph.edges()) == 1

    def test_adjacency_keeps_first_insertion_order(self, graph):
        a, b, c, d = (add(graph, n) for n in "abcd")
        graph.add_edge_from_to(a, c)
        graph.add_edge_from_to(a, b)
        graph.add_edge_from_to(a, c)
        graph.add_edge_from_to(a, d)
        assert [n.name for n in graph.successors(a)] == ["c", "b", "d"]

    def test_edge_object(self, graph):
        a = add(graph, "a")
        b = add(graph, "b", origin=PackageOrigin.SYNC)
        graph.add_edge_from_to(a, b)
        edge = graph.edge(a, b)
        assert edge.from_node is a
        assert edge.to_node is b
        assert not edge.is_from_aur
        assert str(edge) == "a -> b"
        assert graph.edge(b, a) is None

    def test_cycles_are_allowed(self, graph):
        a, b = add(graph, "a"), add(graph, "b")
        graph.add_edge_from_to(a, b)
        graph.add_edge_from_to(b, a)
        assert graph.has_edge_from_to(a, b)
        assert graph.has_edge_from_to(b, a)

    def test_self_loop(self, graph):
        a = add(graph, "a")
        graph.add_edge_from_to(a, a)
        assert graph.successors(a) == [a]
        assert graph.predecessors(a) == [a]

    def test_edge_requires_both_endpoints(self, graph):
        a = add(graph, "a")
        stray = graph.new_node(pkg("b"))
        with pytest.raises(PreconditionError):
            graph.add_edge_from_to(a, stray)
        with pytest.raises(PreconditionError):
            graph.add_edge_from_to(stray, a)
        assert graph.edges() == []
