"""Factory creating dependency graphs from local, repository and AUR packages."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from pacgraph.errors import ResolutionCancelled, TransportError, UnknownDependencyError
from pacgraph.graph.graph import Graph, Node
from pacgraph.models import DependencyFunc, LookupResult, Package, all_depends
from pacgraph.common.logging_utils import extra_context, is_debug_enabled, Timer

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Result of one resolution: the graph and how many AUR requests it took."""

    graph: Graph
    remote_calls: int = 0


@dataclass
class _Layer:
    """Bookkeeping for one breadth-first layer."""

    new: List[Node] = field(default_factory=list)
    unavailable: Dict[str, None] = field(default_factory=dict)
    pending: Dict[str, List[Node]] = field(default_factory=dict)


class Factory:
    """Creates dependency graphs for sets of AUR packages.

    Dependencies found in the local database or in a repository are taken
    from there; everything else is looked up on the AUR, one batched request
    per breadth-first layer of the graph.

    Ignoring repositories "demotes" the packages available in them back to
    the AUR. With truncate set, any package that is not from the AUR is
    treated as a leaf, since pacman can resolve its dependencies itself.

    Args:
        database: Source of local and repository packages, e.g. PacmanDatabase.
        remote: Source of AUR packages, e.g. AurClient.
        ignore_repos: Repositories whose packages are not considered available.
        skip_installed: Leave installed packages out of the graph.
        truncate: Do not investigate dependencies of repository packages.
        no_unknown: Fail instead of adding placeholders for unknown packages.
        dependency_func: Selects the dependency names of a package.
    """

    def __init__(
        self,
        database,
        remote,
        ignore_repos: Iterable[str] = (),
        *,
        skip_installed: bool = False,
        truncate: bool = False,
        no_unknown: bool = False,
        dependency_func: DependencyFunc = all_depends,
    ):
        self.remote = remote
        self.skip_installed = skip_installed
        self.truncate = truncate
        self.no_unknown = no_unknown
        self.dependency_func = dependency_func

        self.local: Dict[str, Package] = {p.name: p for p in database.read_local()}

        ignored = set(ignore_repos)
        self.sync: Dict[str, Package] = {}
        for repo in database.enabled_repositories():
            if repo in ignored:
                logger.debug("Ignoring repository %s", repo)
                continue
            for pkg in database.read_sync(repo):
                # Earlier repositories take precedence, as in pacman.
                self.sync.setdefault(pkg.name, pkg)

        self._requests_aur = 0
        self._lock = threading.Lock()
        logger.debug(
            "Factory ready",
            extra=extra_context(
                event="factory_init",
                component="factory",
                local=len(self.local),
                sync=len(self.sync),
                ignored=sorted(ignored) or None
            )
        )

    @property
    def num_requests_aur(self) -> int:
        """Number of requests made to the AUR by all resolutions so far."""
        with self._lock:
            return self._requests_aur

    def new_graph(self, pkgs: Sequence[Package], cancel: Optional[threading.Event] = None) -> Graph:
        """Return the dependency graph of the given packages.

        Extra packages are pulled into the graph as needed to complete it.
        See resolve for the error conditions.
        """
        return self.resolve(pkgs, cancel=cancel).graph

    def resolve(self, pkgs: Sequence[Package], cancel: Optional[threading.Event] = None) -> Resolution:
        """Resolve the dependency graph of the given packages.

        Args:
            pkgs: Seed packages; their names must be distinct.
            cancel: Checked before every AUR request; resolution stops once set.

        Raises:
            TransportError: If the AUR could not be queried.
            ResolutionCancelled: If cancel was set.
            UnknownDependencyError: If no_unknown is set and some dependencies
                could not be found anywhere.
        """
        g = Graph()
        result = Resolution(g)
        unknown: Dict[str, List[str]] = {}

        frontier: List[Node] = []
        for p in pkgs:
            v = g.new_node(p)
            g.add_node(v)
            frontier.append(v)

        with Timer() as timer:
            while frontier:
                layer = self._expand(g, frontier, unknown)
                if layer.unavailable:
                    fetched = self._lookup(list(layer.unavailable), cancel)
                    result.remote_calls += 1
                    self._merge(g, layer, fetched, unknown)
                frontier = layer.new

        if unknown:
            logger.error("Unknown dependencies: %s", ", ".join(sorted(unknown)))
            raise UnknownDependencyError(unknown)

        logger.info(
            "Resolved %d packages (%d edges) with %d AUR requests",
            len(g), len(g.edges()), result.remote_calls,
            extra=extra_context(
                event="resolve",
                component="factory",
                outcome="success",
                duration_ms=timer.duration_ms()
            )
        )
        return result

    def _expand(self, g: Graph, frontier: List[Node], unknown: Dict[str, List[str]]) -> _Layer:
        layer = _Layer()
        for v in frontier:
            for d in self.dependency_func(v.package):
                if d in unknown:
                    unknown[d].append(v.name)
                    continue

                u = g.node_with_name(d)
                if u is not None:
                    g.add_edge_from_to(v, u)
                    continue

                if self.skip_installed and d in self.local:
                    continue

                p = self.sync.get(d)
                if p is not None:
                    u = g.new_node(p)
                    g.add_node(u)
                    g.add_edge_from_to(v, u)
                    if not self.truncate:
                        layer.new.append(u)
                    continue

                # Neither installed nor in a repository: must come from the AUR.
                layer.unavailable[d] = None
                layer.pending.setdefault(d, []).append(v)

        if is_debug_enabled(logger):
            logger.debug(
                "Expanded layer",
                extra=extra_context(
                    event="expand",
                    component="factory",
                    frontier=len(frontier),
                    repository=len(layer.new),
                    unavailable=sorted(layer.unavailable) or None
                )
            )
        return layer

    def _lookup(self, names: List[str], cancel: Optional[threading.Event]) -> LookupResult:
        if cancel is not None and cancel.is_set():
            raise ResolutionCancelled("resolution cancelled before AUR request")
        with self._lock:
            self._requests_aur += 1
        logger.debug("Querying AUR for %d packages", len(names))
        return self.remote.lookup(names)

    def _merge(self, g: Graph, layer: _Layer, fetched: LookupResult, unknown: Dict[str, List[str]]) -> None:
        for p in fetched.packages:
            if p.name not in layer.pending or g.has_name(p.name):
                logger.warning("Ignoring unexpected AUR result: %s", p.name)
                continue
            layer.new.append(self._add_fetched(g, layer, p))

        for name in fetched.missing:
            if name not in layer.pending or g.has_name(name):
                continue
            if self.no_unknown:
                unknown.setdefault(name, []).extend(v.name for v in layer.pending[name])
                continue
            logger.warning("Package %s not found, adding placeholder", name)
            # Placeholders have no dependencies to expand.
            self._add_fetched(g, layer, Package.placeholder(name))

        for name in layer.pending:
            if not g.has_name(name) and name not in unknown:
                raise TransportError("AUR reply did not mention %s" % name)

    @staticmethod
    def _add_fetched(g: Graph, layer: _Layer, p: Package) -> Node:
        u = g.new_node(p)
        g.add_node(u)
        for v in layer.pending[p.name]:
            g.add_edge_from_to(v, u)
        return u
