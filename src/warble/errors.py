"""Warble exception hierarchy.

Shared across the parameter bag, the body writers, and the testing
helpers so every module raises and catches the same types.
"""


class WarbleError(Exception):
    """Base for all warble-specific errors."""


class ConfigurationError(WarbleError):
    """Raised when configuration is invalid or an optional dependency is missing.

    Typically raised by ``ParamsConfig.__post_init__``.
    """


class InvalidArgumentError(WarbleError, ValueError):
    """Raised when constructor arguments cannot be paired into key/value items."""


class EncodingError(WarbleError, LookupError):
    """A form body could not be encoded with the configured charset.

    Raised for unknown codec names and for values the codec cannot
    represent. ``encoding`` holds the charset that failed.
    """

    def __init__(self, encoding: str, detail: str = "") -> None:
        self.encoding = encoding
        self.detail = detail
        message = f"Cannot encode form body as {encoding!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class MultipartError(WarbleError):
    """Raised when a part is added to a multipart body that is already finished."""
