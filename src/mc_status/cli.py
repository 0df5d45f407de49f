"""CLI-side handler wrappers and factory helpers."""

from __future__ import annotations

import asyncio

from mc_status.adapters import LegacyStatusSource, PrimaryStatusSource
from mc_status.config import CONFIGURED_SERVERS, Settings
from mc_status.models import ServerStatus
from mc_status.monitor import EndpointStatus, StatusMonitor
from mc_status.resolver import StatusResolver


def build_resolver(config: Settings) -> StatusResolver:
    primary = PrimaryStatusSource(
        base_url=config.primary_api_url,
        timeout_seconds=config.request_timeout_seconds,
        user_agent=config.user_agent,
    )
    legacy = LegacyStatusSource(
        base_url=config.legacy_api_url,
        timeout_seconds=config.request_timeout_seconds,
        user_agent=config.user_agent,
    )
    return StatusResolver(
        primary,
        legacy,
        cache_ttl_seconds=config.cache_ttl_seconds,
        request_timeout_seconds=config.request_timeout_seconds,
    )


def build_monitor(config: Settings, resolver: StatusResolver | None = None) -> StatusMonitor:
    return StatusMonitor(
        resolver or build_resolver(config),
        CONFIGURED_SERVERS,
        refresh_interval_seconds=config.refresh_interval_seconds,
    )


class CliStatusHandler:
    """Simple sync-friendly facade over the async resolver and monitor."""

    def __init__(self, resolver: StatusResolver, monitor: StatusMonitor) -> None:
        self._resolver = resolver
        self._monitor = monitor

    def get_status(self, address: str) -> ServerStatus:
        return asyncio.run(self._resolver.get_status(address))

    def refresh_servers(self) -> list[EndpointStatus]:
        return asyncio.run(self._monitor.refresh_all())

    def online_players(self) -> list[str]:
        return self._monitor.online_players()
