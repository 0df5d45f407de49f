"""Asynchronous status resolver with a per-address TTL cache."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from mc_status.adapters import StatusSource
from mc_status.errors import AllUpstreamsFailed, InvalidResponseShape, UpstreamUnavailable
from mc_status.merge import UpstreamResult, legacy_to_primary_shape, merge_status, validate_primary
from mc_status.models import CacheEntry, ServerStatus


class StatusResolver:
    """Resolves server status through the primary API, falling back to the legacy API.

    Successful results are cached per address for ``cache_ttl_seconds``.  Cache
    entries are never evicted: when every upstream fails, the last known status
    is served (flagged ``from_cache`` and ``error``) no matter how old it is.
    Concurrent misses for the same address are not de-duplicated.
    """

    def __init__(
        self,
        primary: StatusSource,
        legacy: StatusSource,
        *,
        cache_ttl_seconds: float = 30.0,
        request_timeout_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        self._primary = primary
        self._legacy = legacy
        self._cache_ttl_seconds = cache_ttl_seconds
        self._request_timeout_seconds = request_timeout_seconds
        self._clock = clock
        self._logger = logger or logging.getLogger("mc_status.resolver")

        self._cache: dict[str, CacheEntry] = {}

    async def get_status(self, address: str) -> ServerStatus:
        """Return the status for ``address``; raises ``AllUpstreamsFailed`` if nothing is known."""
        cached = self._cache.get(address)
        now = self._clock()

        if cached and now - cached.timestamp < self._cache_ttl_seconds:
            self._logger.debug("status_cache_hit", extra={"address": address, "age": now - cached.timestamp})
            return cached.data.copy(from_cache=True, error=False)

        try:
            fresh = await self._fetch_status(address)
        except AllUpstreamsFailed:
            if cached:
                self._logger.warning(
                    "status_refresh_failed_serving_stale",
                    extra={"address": address, "age": now - cached.timestamp},
                )
                return cached.data.copy(from_cache=True, error=True)
            self._logger.error("status_refresh_failed", extra={"address": address})
            raise

        self._cache[address] = CacheEntry(data=fresh, timestamp=now)
        self._logger.info("status_refreshed", extra={"address": address, "online": fresh.online})
        return fresh.copy(from_cache=False, error=False)

    def cached_status(self, address: str) -> ServerStatus | None:
        """Return a copy of the last stored status regardless of age, without network access."""
        entry = self._cache.get(address)
        if entry is None:
            return None
        return entry.data.copy(from_cache=True)

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _fetch_status(self, address: str) -> ServerStatus:
        primary = validate_primary(await self._query(self._primary, address))

        if primary.is_ok:
            assert primary.payload is not None
            legacy_payload = None
            if primary.payload["online"]:
                legacy = await self._query(self._legacy, address)
                if legacy.is_ok:
                    legacy_payload = legacy.payload
                else:
                    self._logger.info(
                        "legacy_enrichment_skipped",
                        extra={"address": address, "reason": legacy.reason},
                    )
            return merge_status(primary.payload, legacy_payload)

        self._logger.info(
            "legacy_fallback",
            extra={"address": address, "outcome": primary.outcome.value, "reason": primary.reason},
        )
        legacy = await self._query(self._legacy, address)
        if not legacy.is_ok:
            raise AllUpstreamsFailed(f"No status available for {address}: {legacy.reason}")

        assert legacy.payload is not None
        return merge_status(legacy_to_primary_shape(legacy.payload), legacy.payload, legacy_only=True)

    async def _query(self, source: StatusSource, address: str) -> UpstreamResult:
        try:
            payload = await asyncio.wait_for(
                asyncio.to_thread(source.fetch, address),
                timeout=self._request_timeout_seconds,
            )
        except asyncio.TimeoutError:
            self._logger.warning("upstream_timeout", extra={"source": source.name, "address": address})
            return UpstreamResult.unavailable(f"{source.name} timed out after {self._request_timeout_seconds}s")
        except UpstreamUnavailable as exc:
            self._logger.warning("upstream_unavailable", extra={"source": source.name, "address": address})
            return UpstreamResult.unavailable(str(exc))
        except InvalidResponseShape as exc:
            self._logger.warning("upstream_invalid", extra={"source": source.name, "address": address})
            return UpstreamResult.invalid(str(exc))
        return UpstreamResult.ok(payload)
