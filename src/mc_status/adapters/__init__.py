"""Upstream status API adapters (uapis.cn primary, mcsrvstat.us legacy)."""

from .http_sources import LegacyStatusSource, PrimaryStatusSource
from .status_source import StatusSource

__all__ = [
    "LegacyStatusSource",
    "PrimaryStatusSource",
    "StatusSource",
]
