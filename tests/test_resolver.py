from __future__ import annotations

import asyncio
import time

import pytest

from mc_status.errors import AllUpstreamsFailed, InvalidResponseShape, UpstreamUnavailable
from mc_status.resolver import StatusResolver


class StubSource:
    def __init__(self, name: str, response=None) -> None:
        self.name = name
        self.response = response
        self.calls: list[str] = []

    def fetch(self, address: str) -> dict:
        self.calls.append(address)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class SlowSource(StubSource):
    def fetch(self, address: str) -> dict:
        time.sleep(0.2)
        return super().fetch(address)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


PRIMARY_ONLINE = {
    "code": 200,
    "online": True,
    "ip": "1.2.3.4",
    "port": 30786,
    "hostname": "play.simpfun.cn",
    "players": 2,
    "max_players": 50,
    "version": "1.20.1",
    "motd_clean": "Welcome",
    "motd_html": '<span style="color: #55FF55">Welcome</span>',
    "favicon_url": "https://uapis.cn/favicon/abc.png",
}

LEGACY_ONLINE = {
    "online": True,
    "ip": "1.2.3.4",
    "port": 30786,
    "hostname": "play.simpfun.cn",
    "icon": "data:image/png;base64,AAAA",
    "version": "Paper 1.20.1",
    "protocol": 763,
    "motd": {"raw": ["§aWelcome"], "clean": ["Welcome"], "html": ['<span style="color: #55FF55">Welcome</span>']},
    "players": {"online": 1, "max": 50, "list": ["Alice", "Bob"]},
    "debug": {"ping": True, "query": True, "cachehit": False},
    "software": "Paper",
    "plugins": {"names": ["EssentialsX", "LuckPerms"]},
}

ADDRESS = "play.simpfun.cn:30786"


def _resolver(primary, legacy, clock=None, **kwargs) -> StatusResolver:
    return StatusResolver(primary, legacy, clock=clock or FakeClock(), **kwargs)


def test_second_call_within_ttl_is_served_from_cache() -> None:
    primary = StubSource("primary", PRIMARY_ONLINE)
    legacy = StubSource("legacy", LEGACY_ONLINE)
    clock = FakeClock()
    resolver = _resolver(primary, legacy, clock)

    async def _run():
        first = await resolver.get_status(ADDRESS)
        clock.now += 29.9
        second = await resolver.get_status(ADDRESS)
        return first, second

    first, second = asyncio.run(_run())

    assert len(primary.calls) == 1
    assert len(legacy.calls) == 1
    assert first.from_cache is False
    assert second.from_cache is True
    assert second.error is False
    assert {**first.to_dict(), "fromCache": True} == second.to_dict()


def test_expired_entry_triggers_refresh() -> None:
    primary = StubSource("primary", PRIMARY_ONLINE)
    legacy = StubSource("legacy", LEGACY_ONLINE)
    clock = FakeClock()
    resolver = _resolver(primary, legacy, clock)

    async def _run():
        await resolver.get_status(ADDRESS)
        clock.now += 30.0
        return await resolver.get_status(ADDRESS)

    result = asyncio.run(_run())

    assert len(primary.calls) == 2
    assert result.from_cache is False


def test_primary_online_is_enriched_with_legacy_fields() -> None:
    resolver = _resolver(StubSource("primary", PRIMARY_ONLINE), StubSource("legacy", LEGACY_ONLINE))

    status = asyncio.run(resolver.get_status(ADDRESS))

    assert status.online is True
    assert status.players.list == ["Alice", "Bob"]
    assert status.players.online == 2
    assert status.players.max == 50
    assert status.icon == "data:image/png;base64,AAAA"
    assert status.version == "1.20.1"
    assert status.motd.clean == ["Welcome"]
    assert status.motd.raw == ["§aWelcome"]
    assert status.plugins == ["EssentialsX", "LuckPerms"]
    assert status.software == "Paper"
    assert status.gamemode == "survival"
    assert status.debug.ping is None
    assert status.debug.query is True


def test_primary_offline_skips_legacy_query() -> None:
    legacy = StubSource("legacy", LEGACY_ONLINE)
    offline = {"code": 200, "online": False, "ip": "1.2.3.4", "port": 30786}
    resolver = _resolver(StubSource("primary", offline), legacy)

    status = asyncio.run(resolver.get_status(ADDRESS))

    assert legacy.calls == []
    assert status.online is False
    assert status.players.list == []
    assert status.icon is None
    assert status.hostname == "unknown"
    assert status.port == "30786"


def test_legacy_failure_during_enrichment_is_not_fatal() -> None:
    legacy = StubSource("legacy", UpstreamUnavailable("legacy down"))
    resolver = _resolver(StubSource("primary", PRIMARY_ONLINE), legacy)

    status = asyncio.run(resolver.get_status(ADDRESS))

    assert len(legacy.calls) == 1
    assert status.online is True
    assert status.icon == "https://uapis.cn/favicon/abc.png"
    assert status.players.list == []
    assert status.motd.raw == []


def test_unreachable_primary_falls_back_to_legacy() -> None:
    legacy_payload = {"online": True, "players": {"online": 3, "max": 20}}
    resolver = _resolver(
        StubSource("primary", UpstreamUnavailable("connection refused")),
        StubSource("legacy", legacy_payload),
    )

    status = asyncio.run(resolver.get_status(ADDRESS))

    assert status.online is True
    assert status.players.online == 3
    assert status.players.max == 20
    assert status.ip == "unknown"
    assert status.motd.clean == [""]
    assert status.from_cache is False


def test_invalid_primary_payload_falls_back_to_legacy() -> None:
    legacy_payload = {
        "online": True,
        "motd": {"clean": ["Line one", "Line two"]},
        "players": {"online": 1, "max": 10},
        "debug": {"ping": 42.7},
    }
    resolver = _resolver(
        StubSource("primary", {"code": 500, "msg": "upstream error"}),
        StubSource("legacy", legacy_payload),
    )

    status = asyncio.run(resolver.get_status(ADDRESS))

    assert status.motd.clean == ["Line one\nLine two"]
    assert status.motd.html == [
        '<span style="color: #ffffff">Line one</span><br><span style="color: #ffffff">Line two</span>'
    ]
    assert status.debug.ping == 43


def test_malformed_primary_body_falls_back_to_legacy() -> None:
    legacy = StubSource("legacy", {"online": False})
    resolver = _resolver(StubSource("primary", InvalidResponseShape("not json")), legacy)

    status = asyncio.run(resolver.get_status(ADDRESS))

    assert legacy.calls == [ADDRESS]
    assert status.online is False


def test_boolean_legacy_ping_is_reported_as_unknown() -> None:
    resolver = _resolver(
        StubSource("primary", UpstreamUnavailable("down")),
        StubSource("legacy", {"online": True, "debug": {"ping": True}}),
    )

    status = asyncio.run(resolver.get_status(ADDRESS))

    assert status.debug.ping is None


def test_both_upstreams_failing_without_cache_raises() -> None:
    resolver = _resolver(
        StubSource("primary", UpstreamUnavailable("down")),
        StubSource("legacy", UpstreamUnavailable("down too")),
    )

    with pytest.raises(AllUpstreamsFailed):
        asyncio.run(resolver.get_status(ADDRESS))


def test_both_upstreams_failing_serves_stale_cache() -> None:
    primary = StubSource("primary", PRIMARY_ONLINE)
    legacy = StubSource("legacy", LEGACY_ONLINE)
    clock = FakeClock()
    resolver = _resolver(primary, legacy, clock)

    async def _run():
        fresh = await resolver.get_status(ADDRESS)
        clock.now += 3_600
        primary.response = UpstreamUnavailable("down")
        legacy.response = UpstreamUnavailable("down")
        return fresh, await resolver.get_status(ADDRESS)

    fresh, stale = asyncio.run(_run())

    assert stale.from_cache is True
    assert stale.error is True
    assert stale.players.list == fresh.players.list
    assert stale.online == fresh.online


def test_slow_upstream_times_out_into_fallback() -> None:
    resolver = _resolver(
        SlowSource("primary", PRIMARY_ONLINE),
        StubSource("legacy", {"online": True, "players": {"online": 4, "max": 8}}),
        request_timeout_seconds=0.01,
    )

    status = asyncio.run(resolver.get_status(ADDRESS))

    assert status.players.online == 4
    assert status.players.max == 8


def test_callers_receive_copies() -> None:
    resolver = _resolver(StubSource("primary", PRIMARY_ONLINE), StubSource("legacy", LEGACY_ONLINE))

    async def _run():
        first = await resolver.get_status(ADDRESS)
        first.players.list.append("Mallory")
        first.online = False
        return await resolver.get_status(ADDRESS)

    second = asyncio.run(_run())

    assert second.players.list == ["Alice", "Bob"]
    assert second.online is True


def test_concurrent_misses_fetch_independently() -> None:
    primary = StubSource("primary", PRIMARY_ONLINE)
    resolver = _resolver(primary, StubSource("legacy", LEGACY_ONLINE))

    async def _run():
        return await asyncio.gather(resolver.get_status(ADDRESS), resolver.get_status(ADDRESS))

    results = asyncio.run(_run())

    assert len(primary.calls) == 2
    assert all(result.from_cache is False for result in results)


def test_cached_status_returns_last_value_without_network() -> None:
    primary = StubSource("primary", PRIMARY_ONLINE)
    resolver = _resolver(primary, StubSource("legacy", LEGACY_ONLINE))

    assert resolver.cached_status(ADDRESS) is None
    asyncio.run(resolver.get_status(ADDRESS))
    cached = resolver.cached_status(ADDRESS)

    assert cached is not None
    assert cached.from_cache is True
    assert len(primary.calls) == 1

    resolver.clear_cache()
    assert resolver.cached_status(ADDRESS) is None


def test_malformed_legacy_motd_on_fallback_still_resolves() -> None:
    primary = StubSource("primary", PRIMARY_ONLINE)
    legacy = StubSource("legacy", LEGACY_ONLINE)
    clock = FakeClock()
    resolver = _resolver(primary, legacy, clock)

    async def _run():
        await resolver.get_status(ADDRESS)
        clock.now += 60
        primary.response = UpstreamUnavailable("down")
        legacy.response = {"online": True, "motd": {"clean": 5, "raw": 7}, "players": {"online": 2, "max": 9}}
        return await resolver.get_status(ADDRESS)

    status = asyncio.run(_run())

    assert status.from_cache is False
    assert status.online is True
    assert status.players.online == 2
    assert status.motd.clean == [""]
    assert status.motd.raw == []


def test_malformed_legacy_motd_during_enrichment_keeps_primary_result() -> None:
    legacy = StubSource("legacy", {"online": True, "motd": {"raw": 5, "clean": None, "html": 3}})
    resolver = _resolver(StubSource("primary", PRIMARY_ONLINE), legacy)

    status = asyncio.run(resolver.get_status(ADDRESS))

    assert status.online is True
    assert status.players.online == 2
    assert status.motd.clean == ["Welcome"]
    assert status.motd.raw == []
