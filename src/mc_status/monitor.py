"""Periodic refresh of the configured servers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

from mc_status.models import ServerEndpoint, ServerStatus
from mc_status.resolver import StatusResolver


@dataclass(slots=True)
class EndpointStatus:
    """Latest refresh outcome for one configured server."""

    endpoint: ServerEndpoint
    status: ServerStatus
    error: str | None = None

    @property
    def resolved(self) -> bool:
        return self.error is None


class StatusMonitor:
    """Refreshes every configured endpoint concurrently on a fixed interval.

    One endpoint failing never affects another: each outcome is collected on
    its own and failures are replaced by ``ServerStatus.unavailable()``.
    """

    def __init__(
        self,
        resolver: StatusResolver,
        endpoints: Sequence[ServerEndpoint],
        *,
        refresh_interval_seconds: float = 30.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._resolver = resolver
        self._endpoints = tuple(endpoints)
        self._refresh_interval_seconds = refresh_interval_seconds
        self._logger = logger or logging.getLogger("mc_status.monitor")

        self._snapshot: dict[str, EndpointStatus] = {}
        self._refresh_lock = asyncio.Lock()
        self._loop_task: asyncio.Task[None] | None = None

    @property
    def endpoints(self) -> tuple[ServerEndpoint, ...]:
        return self._endpoints

    async def start(self) -> None:
        """Start the periodic refresh loop once for this monitor."""
        if self._loop_task and not self._loop_task.done():
            return

        self._loop_task = asyncio.create_task(self._refresh_loop(), name="status-monitor-refresh")
        self._logger.info("status_monitor_started", extra={"interval": self._refresh_interval_seconds})

    async def stop(self) -> None:
        """Stop the refresh loop and wait for graceful cancellation."""
        if not self._loop_task:
            return

        self._loop_task.cancel()
        try:
            await self._loop_task
        except asyncio.CancelledError:
            pass
        finally:
            self._loop_task = None

        self._logger.info("status_monitor_stopped")

    async def trigger_refresh(self) -> list[EndpointStatus]:
        """Refresh immediately, e.g. when the consuming surface regains focus."""
        self._logger.debug("status_refresh_triggered")
        return await self.refresh_all()

    async def refresh_all(self) -> list[EndpointStatus]:
        """Resolve every endpoint concurrently; refresh cycles never overlap."""
        async with self._refresh_lock:
            outcomes = await asyncio.gather(
                *(self._resolver.get_status(endpoint.address) for endpoint in self._endpoints),
                return_exceptions=True,
            )

            results: list[EndpointStatus] = []
            for endpoint, outcome in zip(self._endpoints, outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    self._logger.error(
                        "endpoint_refresh_failed",
                        extra={"endpoint": endpoint.key, "address": endpoint.address, "error": str(outcome)},
                    )
                    result = EndpointStatus(
                        endpoint=endpoint,
                        status=ServerStatus.unavailable(),
                        error=f"{type(outcome).__name__}: {outcome}",
                    )
                else:
                    result = EndpointStatus(endpoint=endpoint, status=outcome)
                self._snapshot[endpoint.key] = result
                results.append(result)
            return results

    def snapshot(self) -> list[EndpointStatus]:
        """Latest known outcome per endpoint, in configuration order."""
        return [self._snapshot[endpoint.key] for endpoint in self._endpoints if endpoint.key in self._snapshot]

    def online_players(self) -> list[str]:
        """Player names across every configured server currently reported online."""
        players: list[str] = []
        for entry in self.snapshot():
            if entry.status.online:
                players.extend(entry.status.players.list)
        return players

    async def _refresh_loop(self) -> None:
        while True:
            await self.refresh_all()
            await asyncio.sleep(self._refresh_interval_seconds)
