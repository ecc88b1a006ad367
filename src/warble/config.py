"""Parameter rendering configuration.

ParamsConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no module-level constants to patch in tests.
"""

import re
from dataclasses import dataclass

from warble.errors import ConfigurationError

# RFC 2046 section 5.1.1 bcharsnospace without RFC 2045 tspecials (sent unquoted)
_MAX_BOUNDARY_LENGTH = 70
_BOUNDARY_RE = re.compile(r"[0-9A-Za-z'+_.-]+")


@dataclass(frozen=True, slots=True)
class ParamsConfig:
    """Rendering configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ParamsConfig(encoding="latin-1", boundary="test-boundary")
    """

    # Charset for URL-encoded bodies and multipart text fields
    encoding: str = "utf-8"

    # Multipart
    missing_filename: str = "nofilename"
    default_content_type: str = "application/octet-stream"
    boundary: str | None = None  # None = random per body
    chunk_size: int = 64 * 1024

    def __post_init__(self) -> None:
        if not self.encoding:
            raise ConfigurationError("encoding must not be empty")
        if not self.missing_filename:
            raise ConfigurationError("missing_filename must not be empty")
        if self.chunk_size <= 0:
            msg = f"chunk_size must be positive, got {self.chunk_size}"
            raise ConfigurationError(msg)
        if self.boundary is not None and not 0 < len(self.boundary) <= _MAX_BOUNDARY_LENGTH:
            msg = f"boundary must be 1-{_MAX_BOUNDARY_LENGTH} characters, got {len(self.boundary)}"
            raise ConfigurationError(msg)
        if self.boundary is not None and not _BOUNDARY_RE.fullmatch(self.boundary):
            msg = f"boundary contains characters not allowed unquoted: {self.boundary!r}"
            raise ConfigurationError(msg)
