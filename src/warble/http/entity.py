"""Rendered request bodies — URL-encoded and multipart.

``UrlEncodedBody`` is an immutable, fully encoded form body.
``MultipartBody`` collects fields and file parts in order and hands them
to urllib3's ``encode_multipart_formdata`` when the last part is flagged
(or on ``finish()``).

Both expose ``content_type``, ``headers``, and ``bytes(body)`` so a
transport can send either without caring which one it got.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from urllib.parse import urlencode

from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary, encode_multipart_formdata

from warble._internal.types import ByteStream, Pair
from warble.config import ParamsConfig
from warble.errors import EncodingError, MultipartError

logger = logging.getLogger("warble.http")

URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = "multipart/form-data"

_DEFAULTS = ParamsConfig()


# ---------------------------------------------------------------------------
# URL-encoded
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UrlEncodedBody:
    """An ``application/x-www-form-urlencoded`` request body.

    Build one with ``UrlEncodedBody.from_pairs()``; the constructor takes
    already-encoded bytes.
    """

    content: bytes
    charset: str = "utf-8"

    @classmethod
    def from_pairs(cls, pairs: Iterable[Pair], charset: str = "utf-8") -> UrlEncodedBody:
        """Percent-encode *pairs* in order using *charset*.

        Raises:
            EncodingError: If *charset* is not a known codec or cannot
                represent one of the names or values.
        """
        pairs = list(pairs)
        try:
            codecs.lookup(charset)
        except LookupError:
            logger.warning("Unknown form charset %r", charset)
            raise EncodingError(charset, "unknown codec") from None

        try:
            encoded = urlencode(pairs, encoding=charset)
        except UnicodeEncodeError as exc:
            logger.warning("Form value not representable in %r: %s", charset, exc)
            raise EncodingError(charset, str(exc)) from exc

        return cls(encoded.encode("ascii"), charset)

    @property
    def content_type(self) -> str:
        return f"{URLENCODED_CONTENT_TYPE}; charset={self.charset}"

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return (
            ("Content-Type", self.content_type),
            ("Content-Length", str(len(self.content))),
        )

    def __bytes__(self) -> bytes:
        return self.content

    def __len__(self) -> int:
        return len(self.content)



# ---------------------------------------------------------------------------
# Multipart
# ---------------------------------------------------------------------------


class MultipartBody:
    """Incremental ``multipart/form-data`` body.

    Each part becomes a ``urllib3.fields.RequestField``. File streams are
    read to exhaustion when their part is added and are never closed here;
    the caller owns them. Text is encoded with the body charset before it
    reaches urllib3, so field values honour ``charset``.

    Usage::

        body = MultipartBody()
        body.add_field("title", "Holiday")
        body.add_file_part("photo", "beach.jpg", fp, "image/jpeg", is_last=True)
        transport.send(bytes(body), headers=body.headers)

    Once a part is added with ``is_last=True`` (or ``finish()`` is called)
    the parts are encoded and further parts raise ``MultipartError``.
    """

    __slots__ = (
        "_boundary",
        "_charset",
        "_chunk_size",
        "_content",
        "_default_content_type",
        "_fields",
    )

    def __init__(
        self,
        *,
        boundary: str | None = None,
        charset: str = _DEFAULTS.encoding,
        default_content_type: str = _DEFAULTS.default_content_type,
        chunk_size: int = _DEFAULTS.chunk_size,
    ) -> None:
        try:
            codecs.lookup(charset)
        except LookupError:
            logger.warning("Unknown multipart charset %r", charset)
            raise EncodingError(charset, "unknown codec") from None
        self._boundary = boundary or choose_boundary()
        self._charset = charset
        self._chunk_size = chunk_size
        self._content: bytes | None = None
        self._default_content_type = default_content_type
        self._fields: list[RequestField] = []

    @classmethod
    def from_config(cls, config: ParamsConfig) -> MultipartBody:
        return cls(
            boundary=config.boundary,
            charset=config.encoding,
            default_content_type=config.default_content_type,
            chunk_size=config.chunk_size,
        )

    @property
    def boundary(self) -> str:
        return self._boundary

    @property
    def charset(self) -> str:
        """Charset used for field values and text streams."""
        return self._charset

    @property
    def content_type(self) -> str:
        return f"{MULTIPART_CONTENT_TYPE}; boundary={self._boundary}"

    @property
    def finished(self) -> bool:
        """True once the parts have been encoded."""
        return self._content is not None

    @property
    def part_count(self) -> int:
        return len(self._fields)

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return (
            ("Content-Type", self.content_type),
            ("Content-Length", str(len(self.getvalue()))),
        )

    def add_field(self, name: str, value: str) -> None:
        """Append a plain text form field."""
        self._check_open()
        field = RequestField(name, self._encode(value))
        field.make_multipart()
        self._fields.append(field)

    def add_file_part(
        self,
        name: str,
        filename: str,
        stream: ByteStream,
        content_type: str | None = None,
        is_last: bool = False,
    ) -> None:
        """Append a file part, reading *stream* until it is exhausted.

        Args:
            name: Form field name.
            filename: Upload filename sent in ``Content-Disposition``.
            stream: Readable source. ``str`` chunks are encoded with the
                body charset.
            content_type: Part content type. Defaults to the body's
                ``default_content_type``.
            is_last: Encode the body after this part.
        """
        self._check_open()
        field = RequestField(name, self._read(stream), filename=filename)
        field.make_multipart(content_type=content_type or self._default_content_type)
        self._fields.append(field)
        if is_last:
            self.finish()

    def finish(self) -> None:
        """Encode the collected parts. Safe to call more than once."""
        if self._content is not None:
            return
        self._content, _ = encode_multipart_formdata(self._fields, boundary=self._boundary)
        logger.debug("Multipart body finished: %d parts", len(self._fields))

    def getvalue(self) -> bytes:
        """Return the encoded body, finishing it first if needed."""
        self.finish()
        return self._content or b""

    def iter_chunks(self, size: int | None = None) -> Iterator[bytes]:
        """Yield the encoded body in pieces of at most *size* bytes."""
        size = size or self._chunk_size
        data = self.getvalue()
        for start in range(0, len(data), size):
            yield data[start : start + size]

    def __bytes__(self) -> bytes:
        return self.getvalue()

    def __repr__(self) -> str:
        state = "finished" if self.finished else "open"
        return f"MultipartBody(boundary={self._boundary!r}, parts={len(self._fields)}, {state})"

    def _check_open(self) -> None:
        if self._content is not None:
            msg = "Cannot add a part to a finished multipart body"
            raise MultipartError(msg)

    def _encode(self, text: str) -> bytes:
        try:
            return text.encode(self._charset)
        except UnicodeEncodeError as exc:
            logger.warning("Multipart text not representable in %r: %s", self._charset, exc)
            raise EncodingError(self._charset, str(exc)) from exc

    def _read(self, stream: ByteStream) -> bytes:
        data = bytearray()
        while chunk := stream.read(self._chunk_size):
            if isinstance(chunk, str):
                chunk = self._encode(chunk)
            data.extend(chunk)
        return bytes(data)
