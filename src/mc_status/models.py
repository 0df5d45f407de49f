from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

UNKNOWN = "unknown"
DEFAULT_GAMEMODE = "survival"


class MotdSource(str, Enum):
    """Which upstream produced the MOTD lines, and therefore how to render them."""

    primary = "primary"
    legacy = "legacy"


@dataclass(frozen=True, slots=True)
class ServerEndpoint:
    key: str
    name: str
    address: str
    description: str = ""
    category: str = ""


@dataclass(slots=True)
class PlayersInfo:
    online: int = 0
    max: int = 0
    list: list[str] = field(default_factory=list)


@dataclass(slots=True)
class MotdInfo:
    raw: list[str] = field(default_factory=list)
    clean: list[str] = field(default_factory=list)
    html: list[str] = field(default_factory=list)
    source: MotdSource = MotdSource.primary


@dataclass(slots=True)
class DebugInfo:
    ping: int | None = None
    query: bool = False
    cache_hit: bool = False


@dataclass(slots=True)
class ServerStatus:
    """Normalized server status, independent of which upstream answered."""

    online: bool = False
    ip: str = UNKNOWN
    port: str = UNKNOWN
    hostname: str = UNKNOWN
    icon: str | None = None
    version: str = UNKNOWN
    protocol: str = UNKNOWN
    protocol_name: str = UNKNOWN
    players: PlayersInfo = field(default_factory=PlayersInfo)
    motd: MotdInfo = field(default_factory=MotdInfo)
    debug: DebugInfo = field(default_factory=DebugInfo)
    software: str = UNKNOWN
    gamemode: str = DEFAULT_GAMEMODE
    map: str = UNKNOWN
    plugins: list[str] = field(default_factory=list)
    from_cache: bool = False
    error: bool = False

    @classmethod
    def unavailable(cls) -> ServerStatus:
        """Placeholder for a server whose status could not be resolved at all."""
        return cls(online=False, error=True)

    def copy(self, **changes: Any) -> ServerStatus:
        """Return a deep copy, optionally overriding top-level fields."""
        return replace(copy.deepcopy(self), **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "online": self.online,
            "ip": self.ip,
            "port": self.port,
            "hostname": self.hostname,
            "icon": self.icon,
            "version": self.version,
            "protocol": self.protocol,
            "protocolName": self.protocol_name,
            "players": {
                "online": self.players.online,
                "max": self.players.max,
                "list": list(self.players.list),
            },
            "motd": {
                "raw": list(self.motd.raw),
                "clean": list(self.motd.clean),
                "html": list(self.motd.html),
            },
            "debug": {
                "ping": self.debug.ping,
                "queryEnabled": self.debug.query,
                "cacheHit": self.debug.cache_hit,
            },
            "software": self.software,
            "gamemode": self.gamemode,
            "map": self.map,
            "plugins": list(self.plugins),
            "fromCache": self.from_cache,
            "error": self.error,
        }


@dataclass(slots=True)
class CacheEntry:
    data: ServerStatus
    timestamp: float
