"""Player avatar URLs."""

from urllib.parse import quote

DEFAULT_AVATAR_TEMPLATE = "https://cravatar.eu/helmavatar/{username}/64.png"
# Known alternative; never negotiated automatically.
FALLBACK_AVATAR_TEMPLATE = "https://minotar.net/avatar/{username}/64.png"


def player_avatar_url(username: str, template: str = DEFAULT_AVATAR_TEMPLATE) -> str:
    return template.format(username=quote(username, safe=""))
