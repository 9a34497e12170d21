"""Dependency graph, resolution factory and build ordering."""

from .graph import Edge, Graph, Node
from .factory import Factory, Resolution
from .order import aur_build_order, build_order

__all__ = [
    "Edge",
    "Graph",
    "Node",
    "Factory",
    "Resolution",
    "build_order",
    "aur_build_order",
]
