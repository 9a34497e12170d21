"""AUR RPC client: batched package info lookups."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional

from pacgraph.constants import Constants, PackageOrigin
from pacgraph.errors import NotFoundError, TransportError
from pacgraph.models import LookupResult, Package, dependency_name
from pacgraph.common.http_client import get_json
from pacgraph.common.logging_utils import extra_context, is_debug_enabled, Timer

logger = logging.getLogger(__name__)


def package_from_rpc(info: Dict[str, Any]) -> Package:
    """Build a package record from one entry of an RPC ``results`` list."""
    return Package(
        name=info["Name"],
        origin=PackageOrigin.REMOTE,
        depends=[dependency_name(d) for d in info.get("Depends") or []],
        make_depends=[dependency_name(d) for d in info.get("MakeDepends") or []],
        version=info.get("Version"),
        description=info.get("Description"),
        base=info.get("PackageBase"),
        repository="aur",
    )


class AurClient:
    """Looks up packages on the AUR.

    A lookup is split into chunks of ``batch_size`` names to stay under the
    RPC's URI length limit; chunks are fetched concurrently and merged once
    all of them have completed.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        batch_size: Optional[int] = None,
        max_workers: Optional[int] = None,
    ):
        self.url = url or Constants.AUR_RPC_URL
        self.batch_size = max(1, batch_size or Constants.AUR_BATCH_SIZE)
        self.max_workers = max(1, max_workers or Constants.AUR_MAX_WORKERS)

    def lookup(self, names: Iterable[str]) -> LookupResult:
        """Fetch the named packages.

        Returns:
            LookupResult with the packages found, in request order, and the
            names the AUR does not know.

        Raises:
            TransportError: If any chunk could not be fetched or parsed.
        """
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return LookupResult()

        chunks = [wanted[i:i + self.batch_size] for i in range(0, len(wanted), self.batch_size)]
        with Timer() as timer:
            if len(chunks) == 1:
                replies = [self._info(chunks[0])]
            else:
                workers = min(self.max_workers, len(chunks))
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    futures = [executor.submit(self._info, chunk) for chunk in chunks]
                    # The executor waits for every shard before an error propagates.
                    replies = [future.result() for future in futures]

        found: Dict[str, Package] = {}
        for reply in replies:
            for info in reply:
                pkg = package_from_rpc(info)
                found.setdefault(pkg.name, pkg)

        result = LookupResult(
            packages=[found[n] for n in wanted if n in found],
            missing=[n for n in wanted if n not in found],
        )
        if is_debug_enabled(logger):
            logger.debug(
                "AUR lookup complete",
                extra=extra_context(
                    event="aur_lookup",
                    component="aur",
                    requested=len(wanted),
                    chunks=len(chunks),
                    found=len(result.packages),
                    missing=result.missing or None,
                    duration_ms=timer.duration_ms()
                )
            )
        return result

    def read_all(self, names: Iterable[str]) -> List[Package]:
        """Fetch the named packages, failing if any of them does not exist.

        Raises:
            NotFoundError: Carrying the missing names and the packages found.
            TransportError: If the AUR could not be queried.
        """
        result = self.lookup(names)
        if result.missing:
            raise NotFoundError(result.missing, result.packages)
        return result.packages

    def _info(self, names: List[str]) -> List[Dict[str, Any]]:
        params = {"v": Constants.AUR_RPC_VERSION, "type": "info", "arg[]": names}
        status_code, _, data = get_json(self.url, params=params)

        if status_code != 200:
            logger.warning(
                "HTTP non-200 from AUR",
                extra=extra_context(
                    event="http_response",
                    component="aur",
                    outcome="handled_non_2xx",
                    status_code=status_code
                )
            )
            raise TransportError("AUR returned status %s" % status_code)
        if not isinstance(data, dict):
            raise TransportError("unexpected AUR reply: %r" % (data,))
        if data.get("type") == "error":
            raise TransportError("AUR error: %s" % data.get("error", "unknown error"))

        results = data.get("results")
        if not isinstance(results, list):
            raise TransportError("AUR reply has no results list")
        return results
