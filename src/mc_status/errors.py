"""Error taxonomy for status resolution."""


class StatusError(RuntimeError):
    """Base class for all status-resolution failures."""


class UpstreamUnavailable(StatusError):
    """Raised when one upstream API cannot be reached, times out or answers non-2xx."""


class InvalidResponseShape(StatusError):
    """Raised when an upstream answered but the payload lacks required fields."""


class AllUpstreamsFailed(StatusError):
    """Raised when no upstream produced a status and nothing is cached for the address."""


ResolutionError = AllUpstreamsFailed
