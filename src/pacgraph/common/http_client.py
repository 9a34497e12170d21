"""Shared HTTP helpers used by the remote package source.

Encapsulates timeout, retry and JSON decoding so the AUR client only has to
deal with RPC semantics. Failures surface as TransportError; nothing here
exits the process.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional, Tuple

import requests

from pacgraph.constants import Constants
from pacgraph.errors import TransportError
from pacgraph.common.logging_utils import extra_context, is_debug_enabled, Timer

logger = logging.getLogger(__name__)


def robust_get(
    url: str,
    *,
    params: Any = None,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform a GET request with timeout and retries.

    Timeouts, connection errors and 5xx replies are retried up to
    Constants.HTTP_RETRY_MAX times with exponential backoff.

    Returns:
        Tuple of (status_code, headers_dict, text) for the first non-5xx reply.

    Raises:
        TransportError: If every attempt failed.
    """
    request_headers = {"User-Agent": Constants.USER_AGENT}
    if headers:
        request_headers.update(headers)

    last_error = None
    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="http_client",
                        action="GET",
                        target=url,
                        attempt=attempt + 1
                    )
                )
            try:
                response = requests.get(
                    url,
                    params=params,
                    headers=request_headers,
                    timeout=Constants.REQUEST_TIMEOUT,
                    **kwargs
                )
            except requests.Timeout:
                last_error = "timed out after %s seconds" % Constants.REQUEST_TIMEOUT
                logger.debug(
                    "HTTP timeout",
                    extra=extra_context(
                        event="http_exception",
                        component="http_client",
                        outcome="timeout",
                        attempt=attempt + 1,
                        target=url
                    )
                )
                continue
            except requests.RequestException as exc:  # includes ConnectionError
                last_error = str(exc)
                logger.debug(
                    "HTTP request exception",
                    extra=extra_context(
                        event="http_exception",
                        component="http_client",
                        outcome="request_exception",
                        attempt=attempt + 1,
                        target=url
                    )
                )
                continue

        if response.status_code >= 500:
            last_error = "server error %s" % response.status_code
            logger.debug(
                "HTTP server error",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    outcome="server_error",
                    status_code=response.status_code,
                    attempt=attempt + 1,
                    target=url
                )
            )
            continue

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success",
                    status_code=response.status_code,
                    duration_ms=t.duration_ms(),
                    target=url
                )
            )
        return response.status_code, dict(response.headers), response.text

    logger.error("GET %s failed after %s attempts: %s", url, Constants.HTTP_RETRY_MAX, last_error)
    raise TransportError(
        "request to %s failed after %s attempts: %s" % (url, Constants.HTTP_RETRY_MAX, last_error)
    )


def get_json(
    url: str,
    *,
    params: Any = None,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], Any]:
    """Perform a GET request and decode the JSON body.

    Args:
        url: Target URL
        params: Query parameters, passed to requests as-is
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Returns:
        Tuple of (status_code, headers_dict, parsed_json)

    Raises:
        TransportError: If the request failed or the body is not valid JSON.
    """
    accept = {"Accept": "application/json"}
    if headers:
        accept.update(headers)
    status_code, response_headers, text = robust_get(url, params=params, headers=accept, **kwargs)

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.debug(
            "JSON decode error",
            extra=extra_context(
                event="parse",
                component="http_client",
                action="get_json",
                outcome="json_decode_error",
                status_code=status_code,
                target=url
            )
        )
        raise TransportError("invalid JSON from %s: %s" % (url, exc)) from exc
    return status_code, response_headers, parsed
