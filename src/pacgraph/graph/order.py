"""Build order extraction from a finished dependency graph."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List

from pacgraph.errors import CycleError
from pacgraph.graph.graph import Graph, Node


class _State(Enum):
    IN_PROGRESS = 1
    DONE = 2


def build_order(graph: Graph) -> List[Node]:
    """Return the nodes of the graph in dependency-first order.

    Every dependency appears before the packages that depend on it. Roots
    are visited in the order nodes were added to the graph, which makes the
    result deterministic for independent subgraphs.

    Raises:
        CycleError: If the graph contains a dependency cycle.
    """
    state: Dict[int, _State] = {}
    order: List[Node] = []

    for root in graph.nodes():
        if root.id in state:
            continue
        state[root.id] = _State.IN_PROGRESS
        path = [root]
        stack = [iter(graph.successors(root))]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                done = path.pop()
                state[done.id] = _State.DONE
                order.append(done)
                continue
            seen = state.get(child.id)
            if seen is _State.DONE:
                continue
            if seen is _State.IN_PROGRESS:
                start = next(i for i, n in enumerate(path) if n.id == child.id)
                raise CycleError(n.name for n in path[start:])
            state[child.id] = _State.IN_PROGRESS
            path.append(child)
            stack.append(iter(graph.successors(child)))

    return order


def aur_build_order(graph: Graph) -> List[Node]:
    """Build order restricted to the packages that come from the AUR."""
    return [node for node in build_order(graph) if node.is_from_aur]
