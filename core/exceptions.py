"""Custom exception hierarchy for the page relay."""


class RelayError(Exception):
    """Base exception for all relay errors."""


class ConfigurationError(RelayError):
    """Raised when configuration is missing or invalid."""


class InputError(RelayError):
    """Raised when the requested target cannot be turned into a URL.

    Always raised before any network activity. Rendered as HTTP 400.

    Attributes:
        message: Error message
        raw: The path segment that was rejected
    """

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class MalformedEncoding(InputError):
    """Path segment contains an invalid percent-escape."""


class EmptyTarget(InputError):
    """Path segment decodes to an empty string."""


class UnparsableURL(InputError):
    """Normalized target is not a usable absolute http(s) URL."""


class ExecutionError(RelayError):
    """Raised when the outbound fetch cannot be attempted."""


class RequestBuildFailed(ExecutionError):
    """The outbound request object could not be constructed. Rendered as HTTP 500."""
