"""MOTD rendering.

Pre-rendered markup (anything that came through the primary-shaped record) is
joined as-is; raw legacy lines carry in-band ``§`` colour codes and are
converted into balanced ``<span>`` runs.
"""

from __future__ import annotations

import html
from typing import Any

from mc_status.models import MotdSource, ServerStatus

SECTION_SIGN = "§"
LINE_BREAK = "<br>"
RESET_CODE = "r"

COLOR_CODES: dict[str, str] = {
    "0": "#000000",
    "1": "#0000AA",
    "2": "#00AA00",
    "3": "#00AAAA",
    "4": "#AA0000",
    "5": "#AA00AA",
    "6": "#FFAA00",
    "7": "#AAAAAA",
    "8": "#555555",
    "9": "#5555FF",
    "a": "#55FF55",
    "b": "#55FFFF",
    "c": "#FF5555",
    "d": "#FF55FF",
    "e": "#FFFF55",
    "f": "#FFFFFF",
}


def render_motd(lines: Any, source: MotdSource = MotdSource.primary) -> str:
    """Render MOTD lines into a single markup string joined by ``<br>``."""
    if not lines or not isinstance(lines, list):
        return ""
    if source is MotdSource.primary:
        return LINE_BREAK.join(str(line) for line in lines)
    return LINE_BREAK.join(_render_legacy_line(str(line)) for line in lines)


def render_status_motd(status: ServerStatus) -> str:
    """Render whichever MOTD variant the merge recorded for this status."""
    if status.motd.source is MotdSource.legacy:
        return render_motd(status.motd.raw, MotdSource.legacy)
    return render_motd([line for line in status.motd.html if line], MotdSource.primary)


def _render_legacy_line(line: str) -> str:
    # (colour or None for plain, text) runs; a marker always starts a new run.
    runs: list[tuple[str | None, list[str]]] = [(None, [])]
    index = 0
    while index < len(line):
        char = line[index]
        if char != SECTION_SIGN:
            runs[-1][1].append(char)
            index += 1
            continue

        code = line[index + 1].lower() if index + 1 < len(line) else ""
        if code in COLOR_CODES:
            runs.append((COLOR_CODES[code], []))
        elif code == RESET_CODE:
            runs.append((None, []))
        # formatting and unknown codes are dropped together with the sigil
        index += 2

    rendered = [_span(color, "".join(chars)) for color, chars in runs if chars]
    return "".join(rendered) or _span(None, "")


def _span(color: str | None, text: str) -> str:
    escaped = html.escape(text, quote=False)
    if color is None:
        return f"<span>{escaped}</span>"
    return f'<span style="color: {color}">{escaped}</span>'
