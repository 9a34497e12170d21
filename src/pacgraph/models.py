"""Data models for package records and dependency selection."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from pacgraph.constants import PackageOrigin

# Version constraints as written by pacman: foo>=1.0, foo=2, foo<3 ...
_CONSTRAINT_RE = re.compile(r"[<>=].*$")


def dependency_name(spec: str) -> str:
    """Strip a version constraint and optional-dependency note from a dependency.

    >>> dependency_name("glibc>=2.33")
    'glibc'
    >>> dependency_name("python-foo: for foo support")
    'python-foo'
    """
    name = spec.split(":", 1)[0]
    return _CONSTRAINT_RE.sub("", name).strip()


@dataclass(frozen=True)
class Package:
    """A package record as produced by one of the package sources.

    The resolver only relies on name, origin, depends and make_depends;
    the remaining fields are informational.
    """

    name: str
    origin: PackageOrigin
    depends: List[str] = field(default_factory=list)
    make_depends: List[str] = field(default_factory=list)
    version: Optional[str] = None
    description: Optional[str] = None
    base: Optional[str] = None
    repository: Optional[str] = None

    @classmethod
    def placeholder(cls, name: str) -> "Package":
        """Record standing in for a dependency no source could provide."""
        return cls(name=name, origin=PackageOrigin.UNKNOWN)

    @property
    def is_from_aur(self) -> bool:
        return self.origin is PackageOrigin.REMOTE

    def __str__(self) -> str:
        return self.name


DependencyFunc = Callable[[Package], List[str]]


def all_depends(pkg: Package) -> List[str]:
    """Required dependencies followed by build-time dependencies."""
    return list(pkg.depends) + list(pkg.make_depends)


def required_depends(pkg: Package) -> List[str]:
    return list(pkg.depends)


def make_depends_only(pkg: Package) -> List[str]:
    return list(pkg.make_depends)


DEPENDENCY_FUNCS = {
    "all": all_depends,
    "depends": required_depends,
    "makedepends": make_depends_only,
}


@dataclass
class LookupResult:
    """Outcome of a batched remote lookup.

    Names the remote source does not know are reported in ``missing`` rather
    than raised, so callers can tell them apart from transport failures.
    """

    packages: List[Package] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
