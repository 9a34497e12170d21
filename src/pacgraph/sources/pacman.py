"""Readers for pacman's local and sync databases.

Both databases store one ``desc`` file per package made of ``%FIELD%``
headers followed by one value per line. The local database is a directory
tree under ``<dbpath>/local``; sync databases are tar archives under
``<dbpath>/sync/<repo>.db``.
"""
from __future__ import annotations

import configparser
import logging
import os
import tarfile
from typing import Dict, List, Optional

from pacgraph.constants import Constants, PackageOrigin
from pacgraph.errors import DatabaseError
from pacgraph.models import Package, dependency_name

logger = logging.getLogger(__name__)

# Fields a repository database may carry. Anything else is treated as corruption.
_KNOWN_FIELDS = {
    "filename", "name", "version", "desc", "base", "url", "builddate",
    "packager", "csize", "arch", "license", "depends", "optdepends",
    "makedepends", "checkdepends", "backup", "replaces", "provides",
    "conflicts", "groups", "isize", "md5sum", "pgpsig", "sha256sum", "xdata",
}


def parse_desc(text: str, origin: PackageOrigin, *, repository: Optional[str] = None,
               strict: bool = True, source: str = "desc") -> Package:
    """Parse the contents of a ``desc`` file into a package record.

    Args:
        text: File contents.
        origin: Origin tag for the record.
        repository: Repository the record belongs to, if any.
        strict: Reject fields that repository databases never contain.
        source: Name used in error messages.

    Raises:
        DatabaseError: On an unknown field (strict) or a missing %NAME%.
    """
    fields: Dict[str, List[str]] = {}
    state = ""
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if len(line) > 1 and line.startswith("%") and line.endswith("%"):
            state = line.strip("%").lower()
            if strict and state not in _KNOWN_FIELDS:
                raise DatabaseError("unknown field '%s' in %s" % (state, source))
            fields.setdefault(state, [])
            continue
        if not state:
            raise DatabaseError("value outside of a field in %s: %r" % (source, line))
        fields[state].append(line)

    def first(key: str) -> Optional[str]:
        values = fields.get(key)
        return values[0] if values else None

    name = first("name")
    if not name:
        raise DatabaseError("missing %%NAME%% in %s" % source)
    return Package(
        name=name,
        origin=origin,
        depends=[dependency_name(d) for d in fields.get("depends", [])],
        make_depends=[dependency_name(d) for d in fields.get("makedepends", [])],
        version=first("version"),
        description=first("desc"),
        base=first("base"),
        repository=repository,
    )


def read_database_file(path: str, origin: PackageOrigin = PackageOrigin.DATABASE,
                       repository: Optional[str] = None) -> List[Package]:
    """Read all packages from a repository database archive.

    Any compression tarfile understands is accepted.

    Raises:
        DatabaseError: If the archive cannot be read or contains a bad entry.
    """
    if repository is None:
        repository = os.path.basename(path).split(".", 1)[0]
    pkgs = []
    try:
        with tarfile.open(path, "r:*") as tar:
            for member in tar:
                if not member.isfile():
                    continue
                if os.path.basename(member.name) != "desc":
                    continue
                fh = tar.extractfile(member)
                if fh is None:
                    continue
                with fh:
                    text = fh.read().decode("utf-8", errors="replace")
                pkgs.append(parse_desc(text, origin, repository=repository,
                                       source="%s:%s" % (path, member.name)))
    except (OSError, tarfile.TarError) as exc:
        raise DatabaseError("cannot read database %s: %s" % (path, exc)) from exc
    logger.debug("Read %d packages from %s", len(pkgs), path)
    return pkgs


def read_repositories(config_path: str) -> List[str]:
    """Return the repositories configured in pacman.conf, in file order.

    Raises:
        DatabaseError: If the file cannot be read or parsed.
    """
    parser = configparser.ConfigParser(
        allow_no_value=True, strict=False, interpolation=None, delimiters=("=",)
    )
    try:
        with open(config_path, encoding="utf-8") as fh:
            parser.read_file(fh)
    except (OSError, configparser.Error) as exc:
        raise DatabaseError("cannot read %s: %s" % (config_path, exc)) from exc
    return [section for section in parser.sections() if section != "options"]


class PacmanDatabase:
    """Local and sync databases of a pacman installation.

    Args:
        dbpath: pacman database directory (DBPath).
        config: Path of pacman.conf, used to enumerate repositories.
    """

    def __init__(self, dbpath: Optional[str] = None, config: Optional[str] = None):
        self.dbpath = dbpath or Constants.PACMAN_DBPATH
        self.config = config or Constants.PACMAN_CONFIG

    def read_local(self) -> List[Package]:
        """Read every installed package.

        Raises:
            DatabaseError: If the local database cannot be read.
        """
        local = os.path.join(self.dbpath, "local")
        try:
            entries = sorted(os.listdir(local))
        except OSError as exc:
            raise DatabaseError("cannot read local database %s: %s" % (local, exc)) from exc

        pkgs = []
        for entry in entries:
            desc = os.path.join(local, entry, "desc")
            if not os.path.isfile(desc):
                continue
            try:
                with open(desc, encoding="utf-8", errors="replace") as fh:
                    text = fh.read()
            except OSError as exc:
                raise DatabaseError("cannot read %s: %s" % (desc, exc)) from exc
            # The local database carries install-time fields such as %REASON%.
            pkgs.append(parse_desc(text, PackageOrigin.LOCAL, strict=False, source=desc))
        logger.debug("Read %d installed packages", len(pkgs))
        return pkgs

    def enabled_repositories(self) -> List[str]:
        return read_repositories(self.config)

    def read_sync(self, repo: str) -> List[Package]:
        path = os.path.join(self.dbpath, "sync", repo + ".db")
        return read_database_file(path, PackageOrigin.SYNC, repository=repo)
