"""Tagged upstream results and the pure merge into ``ServerStatus``.

The primary API (uapis.cn) is trusted for the online flag and player counts;
the legacy API (mcsrvstat.us) is richer and supplies the player list, icon,
MOTD arrays, plugins and the remaining descriptive fields.  When only the
legacy API answered, its payload is first reshaped into a primary-style record
so a single merge routine covers both paths.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mc_status.models import (
    DEFAULT_GAMEMODE,
    UNKNOWN,
    DebugInfo,
    MotdInfo,
    MotdSource,
    PlayersInfo,
    ServerStatus,
)

FALLBACK_MOTD_COLOR = "#ffffff"


class UpstreamOutcome(str, Enum):
    ok = "ok"
    unavailable = "unavailable"
    invalid = "invalid"


@dataclass(frozen=True, slots=True)
class UpstreamResult:
    outcome: UpstreamOutcome
    payload: dict[str, Any] | None = None
    reason: str | None = None

    @classmethod
    def ok(cls, payload: dict[str, Any]) -> UpstreamResult:
        return cls(UpstreamOutcome.ok, payload=payload)

    @classmethod
    def unavailable(cls, reason: str) -> UpstreamResult:
        return cls(UpstreamOutcome.unavailable, reason=reason)

    @classmethod
    def invalid(cls, reason: str) -> UpstreamResult:
        return cls(UpstreamOutcome.invalid, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.outcome is UpstreamOutcome.ok


def validate_primary(result: UpstreamResult) -> UpstreamResult:
    """Downgrade a primary answer to ``invalid`` unless it is usable.

    Usable means ``code == 200`` and a definite boolean ``online`` flag.
    """
    if not result.is_ok:
        return result
    payload = result.payload or {}
    if payload.get("code") != 200:
        return UpstreamResult.invalid(f"primary code={payload.get('code')!r}")
    if not isinstance(payload.get("online"), bool):
        return UpstreamResult.invalid("primary payload has no online flag")
    return result


def normalize_ping(value: Any) -> int | None:
    """Round a latency to whole milliseconds; booleans and non-numbers mean unknown."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return int(math.floor(value + 0.5))


def legacy_to_primary_shape(legacy: dict[str, Any]) -> dict[str, Any]:
    """Synthesize a primary-style record from a legacy payload."""
    clean_lines = _lines(_dig(legacy, "motd", "clean"))
    motd_clean = ""
    motd_html = ""
    if clean_lines:
        motd_clean = "\n".join(clean_lines)
        motd_html = "<br>".join(f'<span style="color: {FALLBACK_MOTD_COLOR}">{line}</span>' for line in clean_lines)

    players = legacy.get("players") if isinstance(legacy.get("players"), dict) else None
    return {
        "code": 200,
        "online": bool(legacy.get("online", False)),
        "ip": legacy.get("ip") or UNKNOWN,
        "port": legacy.get("port") or UNKNOWN,
        "hostname": legacy.get("hostname") or UNKNOWN,
        "players": players.get("online", 0) if players else 0,
        "max_players": players.get("max", 0) if players else 0,
        "version": legacy.get("version") or UNKNOWN,
        "motd_clean": motd_clean,
        "motd_html": motd_html,
        "favicon_url": legacy.get("icon") or None,
    }


def merge_status(
    primary: dict[str, Any],
    legacy: dict[str, Any] | None,
    *,
    legacy_only: bool = False,
) -> ServerStatus:
    """Build the canonical status from a primary-shaped record and optional legacy data.

    ``legacy_only`` marks the fallback path, where ``primary`` was synthesized
    from ``legacy``; only then is the legacy latency reported.
    """
    legacy = legacy or {}

    online = primary.get("online")
    if not isinstance(online, bool):
        online = bool(legacy.get("online", False))

    players_online = _first_number(primary.get("players"), _dig(legacy, "players", "online"))
    players_max = _first_number(primary.get("max_players"), _dig(legacy, "players", "max"))

    icon = legacy.get("icon") or primary.get("favicon_url") or None

    motd_clean = primary.get("motd_clean") or _first_line(_dig(legacy, "motd", "clean"))
    motd_html = primary.get("motd_html") or _first_line(_dig(legacy, "motd", "html"))
    motd_raw = _lines(_dig(legacy, "motd", "raw"))

    protocol, protocol_name = _protocol(legacy)

    return ServerStatus(
        online=online,
        ip=_first_text(primary.get("ip"), legacy.get("ip")),
        port=_first_text(primary.get("port"), legacy.get("port")),
        hostname=_first_text(primary.get("hostname"), legacy.get("hostname")),
        icon=icon,
        version=_first_text(primary.get("version"), legacy.get("version")),
        protocol=protocol,
        protocol_name=protocol_name,
        players=PlayersInfo(
            online=players_online,
            max=players_max,
            list=_player_names(_dig(legacy, "players", "list")),
        ),
        motd=MotdInfo(
            raw=motd_raw,
            clean=[motd_clean],
            html=[motd_html],
            source=MotdSource.primary if motd_html or not motd_raw else MotdSource.legacy,
        ),
        debug=DebugInfo(
            ping=normalize_ping(_dig(legacy, "debug", "ping")) if legacy_only else None,
            query=bool(_dig(legacy, "debug", "query") or False),
            cache_hit=False,
        ),
        software=_first_text(legacy.get("software")),
        gamemode=_first_text(legacy.get("gamemode"), default=DEFAULT_GAMEMODE),
        map=_first_text(_flatten_map(legacy.get("map"))),
        plugins=_plugin_names(legacy.get("plugins")),
    )


def _dig(payload: dict[str, Any], *keys: str) -> Any:
    current: Any = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _first_text(*values: Any, default: str = UNKNOWN) -> str:
    for value in values:
        if value is None or isinstance(value, bool):
            continue
        text = str(value)
        if text and text != UNKNOWN:
            return text
    return default


def _first_number(*values: Any) -> int:
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        return int(value)
    return 0


def _lines(value: Any) -> list[str]:
    """MOTD line array; a bare string counts as one line, anything else as absent."""
    if isinstance(value, str):
        return [value] if value else []
    if not isinstance(value, list):
        return []
    return [str(line) for line in value if line is not None]


def _first_line(value: Any) -> str:
    lines = _lines(value)
    return lines[0] if lines else ""


def _player_names(entries: Any) -> list[str]:
    if not isinstance(entries, list):
        return []
    names: list[str] = []
    for entry in entries:
        if isinstance(entry, dict):
            name = entry.get("name")
            if name:
                names.append(str(name))
        elif entry:
            names.append(str(entry))
    return names


def _plugin_names(plugins: Any) -> list[str]:
    if isinstance(plugins, dict):
        plugins = plugins.get("names") or []
    return _player_names(plugins)


def _protocol(legacy: dict[str, Any]) -> tuple[str, str]:
    protocol = legacy.get("protocol")
    name = legacy.get("protocolName") or legacy.get("protocol_name")
    if isinstance(protocol, dict):
        name = name or protocol.get("name")
        protocol = protocol.get("version")
    return _first_text(protocol), _first_text(name)


def _flatten_map(value: Any) -> Any:
    if isinstance(value, dict):
        return value.get("clean") or value.get("raw")
    return value
