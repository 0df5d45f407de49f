"""Boundary for upstream status API integrations."""

from typing import Any, Protocol


class StatusSource(Protocol):
    """Interface to fetch the raw JSON status document for one server address."""

    name: str

    def fetch(self, address: str) -> dict[str, Any]:
        """Return the decoded payload.

        Raises ``UpstreamUnavailable`` on network, timeout or HTTP errors and
        ``InvalidResponseShape`` when the body is not a JSON object.
        """
