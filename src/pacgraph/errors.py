"""Error types raised by pacgraph.

PreconditionError flags misuse of the Graph API and is deliberately kept out
of the PacgraphError hierarchy: callers are expected to never trigger it, so
the CLI does not try to render it.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional


class PreconditionError(AssertionError):
    """Raised when a Graph invariant would be violated by the caller."""


class PacgraphError(Exception):
    """Base class for errors surfaced to users of the library."""


class TransportError(PacgraphError):
    """Raised when the remote package source cannot be reached or parsed."""


class ResolutionCancelled(TransportError):
    """Raised when a resolution is cancelled before a remote lookup."""


class DatabaseError(PacgraphError):
    """Raised when a local or repository database cannot be read."""


class NotFoundError(PacgraphError):
    """Raised when requested names do not exist in the remote source.

    Attributes:
        names: The names that could not be found.
        packages: Records that were found in the same lookup.
    """

    def __init__(self, names: Iterable[str], packages: Optional[list] = None):
        self.names: List[str] = sorted(names)
        self.packages = list(packages or [])
        super().__init__("packages not found: " + ", ".join(self.names))


class UnknownDependencyError(PacgraphError):
    """Raised when dependencies cannot be found in any package source.

    Attributes:
        names: Every unresolved dependency name, sorted.
        required_by: Maps each unresolved name to the packages requiring it.
    """

    def __init__(self, required_by: Dict[str, List[str]]):
        self.required_by = {name: list(dict.fromkeys(pkgs)) for name, pkgs in required_by.items()}
        self.names: List[str] = sorted(self.required_by)
        details = [
            "%s (required by %s)" % (name, ", ".join(self.required_by[name]))
            for name in self.names
        ]
        super().__init__("unknown dependencies: " + "; ".join(details))


class CycleError(PacgraphError):
    """Raised when a build order is requested for a cyclic graph.

    Attributes:
        names: The packages forming the cycle, in dependency order.
    """

    def __init__(self, names: Iterable[str]):
        self.names: List[str] = list(names)
        cycle = self.names + self.names[:1]
        super().__init__("dependency cycle: " + " -> ".join(cycle))
