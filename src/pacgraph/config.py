"""Configuration file loading and runtime overrides.

Precedence, lowest first: defaults in Constants, the YAML config file, the
command line. The config file looks like::

    aur:
      url: https://aur.archlinux.org/rpc/
      batch_size: 150
      max_workers: 4
    http:
      timeout: 30
      retries: 3
    pacman:
      dbpath: /var/lib/pacman/
      config: /etc/pacman.conf
    resolve:
      skip_installed: false
      truncate: false
      no_unknown: false
      ignore_repos: [testing]
      deps: all
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from pacgraph.constants import Constants
from pacgraph.errors import DatabaseError

logger = logging.getLogger(__name__)

# (section, key) -> (Constants attribute, type)
_CONSTANT_KEYS = {
    ("aur", "url"): ("AUR_RPC_URL", str),
    ("aur", "batch_size"): ("AUR_BATCH_SIZE", int),
    ("aur", "max_workers"): ("AUR_MAX_WORKERS", int),
    ("http", "timeout"): ("REQUEST_TIMEOUT", int),
    ("http", "retries"): ("HTTP_RETRY_MAX", int),
    ("http", "retry_delay"): ("HTTP_RETRY_BASE_DELAY_SEC", float),
    ("pacman", "dbpath"): ("PACMAN_DBPATH", str),
    ("pacman", "config"): ("PACMAN_CONFIG", str),
}


@dataclass
class Policy:
    """Resolution policy handed to the Factory."""

    skip_installed: bool = False
    truncate: bool = False
    no_unknown: bool = False
    ignore_repos: List[str] = field(default_factory=list)
    deps: str = "all"


def default_config_path() -> str:
    return os.environ.get(Constants.CONFIG_ENV) or os.path.expanduser(Constants.CONFIG_FILE)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML config file.

    Args:
        path: Explicit path; defaults to $PACGRAPH_CONFIG or the user config file.

    Returns:
        The parsed mapping, or {} when the file does not exist.

    Raises:
        DatabaseError: If the file cannot be parsed or is not a mapping.
    """
    config_path = path or default_config_path()
    if not os.path.isfile(config_path):
        if path:
            logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise DatabaseError("cannot load config %s: %s" % (config_path, exc)) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DatabaseError("config %s must contain a mapping" % config_path)
    logger.debug("Loaded config from %s", config_path)
    return data


def apply_config(cfg: Dict[str, Any]) -> None:
    """Copy recognised tunables from the config mapping onto Constants."""
    for (section, key), (attr, kind) in _CONSTANT_KEYS.items():
        values = cfg.get(section)
        if not isinstance(values, dict) or values.get(key) is None:
            continue
        try:
            value = kind(values[key])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid config value %s.%s=%r", section, key, values[key])
            continue
        # Counts, timeouts and delays must be positive.
        if kind is not str and value <= 0:
            logger.warning("Ignoring non-positive config value %s.%s=%r", section, key, values[key])
            continue
        setattr(Constants, attr, value)


def _flag(section: Dict[str, Any], key: str) -> bool:
    value = section.get(key, False)
    if not isinstance(value, bool):
        raise DatabaseError("config value resolve.%s must be true or false, got %r" % (key, value))
    return value


def resolve_policy(cfg: Dict[str, Any], args: Any = None) -> Policy:
    """Merge the ``resolve`` config section with command line flags.

    Flags only override when given: boolean flags when set, ignore_repos when
    non-empty, deps when not None.

    Raises:
        DatabaseError: If the section is malformed, a flag is not a boolean or
            the dependency kind is unknown.
    """
    section = cfg.get("resolve") or {}
    if not isinstance(section, dict):
        raise DatabaseError("config section 'resolve' must be a mapping")

    ignore = section.get("ignore_repos") or []
    if isinstance(ignore, str):
        ignore = [ignore]
    policy = Policy(
        skip_installed=_flag(section, "skip_installed"),
        truncate=_flag(section, "truncate"),
        no_unknown=_flag(section, "no_unknown"),
        ignore_repos=[str(r) for r in ignore],
        deps=str(section.get("deps", "all")),
    )

    if args is not None:
        if getattr(args, "SKIP_INSTALLED", False):
            policy.skip_installed = True
        if getattr(args, "TRUNCATE", False):
            policy.truncate = True
        if getattr(args, "NO_UNKNOWN", False):
            policy.no_unknown = True
        if getattr(args, "IGNORE_REPOS", None):
            policy.ignore_repos = list(args.IGNORE_REPOS)
        if getattr(args, "DEPS", None):
            policy.deps = args.DEPS

    if policy.deps not in Constants.DEPENDENCY_KINDS:
        raise DatabaseError("unknown dependency kind '%s'" % policy.deps)
    return policy
