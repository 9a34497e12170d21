"""Dependency graph of packages.

Nodes are identified by an integer id, assigned by the graph from 1 upwards
and never reused, and also by the unique name of the package they wrap. An
edge u -> v means "u depends on v". The graph is append-only and may
contain cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from pacgraph.errors import PreconditionError
from pacgraph.models import Package, all_depends


@dataclass(frozen=True, eq=False)
class Node:
    """A package within a graph."""

    id: int
    package: Package

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def is_from_aur(self) -> bool:
        """Whether the package has to be fetched from the AUR."""
        return self.package.is_from_aur

    def all_depends(self) -> List[str]:
        """Return a new list of the installation and make dependencies."""
        return all_depends(self.package)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class Edge:
    """Dependency of from_node on to_node. Edges carry no weight."""

    from_node: Node
    to_node: Node

    @property
    def is_from_aur(self) -> bool:
        """Whether the dependency needs to be fetched from the AUR."""
        return self.to_node.is_from_aur

    def __str__(self) -> str:
        return "%s -> %s" % (self.from_node, self.to_node)


@dataclass
class _Slot:
    node: Node
    out_ids: List[int] = field(default_factory=list)
    in_ids: List[int] = field(default_factory=list)


class Graph:
    """Append-only directed graph of packages."""

    def __init__(self) -> None:
        self._slots: Dict[int, _Slot] = {}
        self._names: Dict[str, Node] = {}
        self._edges: Dict[Tuple[int, int], Edge] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes())

    def new_node(self, package: Package) -> Node:
        """Return a node with a fresh id for the package, without adding it."""
        self._next_id += 1
        return Node(self._next_id, package)

    def add_node(self, node: Node) -> None:
        """Insert a node created by new_node.

        Raises:
            PreconditionError: If the package name or the node id is already present.
        """
        if node.name in self._names:
            raise PreconditionError("package name already in graph: %s" % node.name)
        if node.id in self._slots:
            raise PreconditionError("node id already in graph: %d" % node.id)
        self._slots[node.id] = _Slot(node)
        self._names[node.name] = node

    def add_edge_from_to(self, u: Node, v: Node) -> None:
        """Record that u depends on v. Adding an existing edge again is a no-op.

        Raises:
            PreconditionError: If either node is not in the graph.
        """
        for n in (u, v):
            if not self.has(n):
                raise PreconditionError("edge endpoint not in graph: %s" % n.name)
        key = (u.id, v.id)
        if key in self._edges:
            return
        self._edges[key] = Edge(u, v)
        self._slots[u.id].out_ids.append(v.id)
        self._slots[v.id].in_ids.append(u.id)

    def has(self, node: Node) -> bool:
        return node.id in self._slots

    def has_name(self, name: str) -> bool:
        return name in self._names

    def node_with_name(self, name: str) -> Optional[Node]:
        return self._names.get(name)

    def nodes(self) -> List[Node]:
        """All nodes in the order they were added."""
        return [slot.node for slot in self._slots.values()]

    def edges(self) -> List[Edge]:
        """All edges in the order they were added."""
        return list(self._edges.values())

    def successors(self, node: Node) -> List[Node]:
        """Nodes the given node depends on directly."""
        return [self._slots[i].node for i in self._slots[node.id].out_ids]

    def predecessors(self, node: Node) -> List[Node]:
        """Nodes that depend directly on the given node."""
        return [self._slots[i].node for i in self._slots[node.id].in_ids]

    def has_edge_from_to(self, u: Node, v: Node) -> bool:
        return (u.id, v.id) in self._edges

    def has_edge_between(self, u: Node, v: Node) -> bool:
        """Whether an edge exists between u and v in either direction."""
        return self.has_edge_from_to(u, v) or self.has_edge_from_to(v, u)

    def edge(self, u: Node, v: Node) -> Optional[Edge]:
        return self._edges.get((u.id, v.id))
