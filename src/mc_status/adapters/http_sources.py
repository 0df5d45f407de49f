"""HTTP status sources backed by ``requests``.

Both sources are synchronous; the resolver runs them in worker threads and
bounds each call with its own timeout, so a blocking socket never stalls the
event loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import requests

from mc_status.errors import InvalidResponseShape, UpstreamUnavailable

logger = logging.getLogger("mc_status.sources")


def _get_json(
    session: requests.Session,
    url: str,
    *,
    source: str,
    timeout: float,
    user_agent: str,
    params: dict[str, str] | None = None,
) -> dict[str, Any]:
    try:
        response = session.get(url, params=params, headers={"User-Agent": user_agent}, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        logger.warning("upstream_request_error", extra={"source": source, "url": url, "error": str(exc)})
        raise UpstreamUnavailable(f"{source} request failed: {exc}") from exc

    if not response.ok:
        logger.warning("upstream_http_error", extra={"source": source, "url": url, "status": response.status_code})
        raise UpstreamUnavailable(f"{source} answered HTTP {response.status_code}")

    try:
        payload = response.json()
    except ValueError as exc:
        raise InvalidResponseShape(f"{source} returned a non-JSON body") from exc

    if not isinstance(payload, dict):
        raise InvalidResponseShape(f"{source} returned {type(payload).__name__}, expected an object")

    logger.debug("upstream_response", extra={"source": source, "url": url, "payload": payload})
    return payload


@dataclass(slots=True)
class PrimaryStatusSource:
    """uapis.cn server status endpoint (``?server=<address>``)."""

    base_url: str
    timeout_seconds: float = 5.0
    user_agent: str = "mc-status"
    session: requests.Session = field(default_factory=requests.Session)
    name: str = "primary"

    def fetch(self, address: str) -> dict[str, Any]:
        return _get_json(
            self.session,
            self.base_url,
            source=self.name,
            timeout=self.timeout_seconds,
            user_agent=self.user_agent,
            params={"server": address},
        )


@dataclass(slots=True)
class LegacyStatusSource:
    """mcsrvstat.us v2 endpoint (``/<address>`` path segment)."""

    base_url: str
    timeout_seconds: float = 5.0
    user_agent: str = "mc-status"
    session: requests.Session = field(default_factory=requests.Session)
    name: str = "legacy"

    def fetch(self, address: str) -> dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}/{quote(address, safe=':')}"
        return _get_json(
            self.session,
            url,
            source=self.name,
            timeout=self.timeout_seconds,
            user_agent=self.user_agent,
        )
