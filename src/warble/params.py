"""Request parameters — string pairs, array values, and file uploads.

``RequestParams`` collects everything a request sends in its body and
renders it in one of two encodings:

- ``application/x-www-form-urlencoded`` when only strings are present
- ``multipart/form-data`` as soon as one file or stream is added

Usage::

    params = RequestParams()
    params.put("username", "james")
    params.put("tags", ["python", "http"])
    params.put("avatar", Path("pic.jpg"))
    params.put("thumb", io.BytesIO(data), "thumb.png", "image/png")

    body = params.build_entity()
    transport.post(url, content=bytes(body), headers=body.headers)

Streams are held by reference and read when the multipart body is built,
so a bag holding files renders once. The bag never closes caller-supplied
streams; ``close()`` only closes files it opened from paths.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from warble._internal.multimap import MultiMap, MultiValueMapping
from warble._internal.types import ByteStream, Pair
from warble.config import ParamsConfig
from warble.errors import InvalidArgumentError
from warble.http.entity import MultipartBody, UrlEncodedBody

logger = logging.getLogger("warble.params")

_MISSING = object()

# Placeholder emitted for file entries by to_debug_string()
FILE_PLACEHOLDER = "FILE"


@dataclass(frozen=True, slots=True)
class FilePart:
    """A stream bound for multipart upload, with optional name and type."""

    stream: ByteStream
    filename: str | None = None
    content_type: str | None = None

    def upload_name(self, default: str) -> str:
        """Return the filename, or *default* when none was given."""
        return self.filename if self.filename is not None else default


class RequestParams:
    """A mutable bag of request parameters.

    Three collections, each allowing repeated keys:

    - scalars: one string per entry
    - arrays: one ordered group of strings per entry, expanded to repeated
      ``key=value`` pairs when rendered
    - files: one ``FilePart`` per entry

    Construction::

        RequestParams()                          # empty
        RequestParams({"a": "1", "b": "2"})      # from a mapping
        RequestParams(form)                      # every value of a MultiValueMapping
        RequestParams("a", "1")                  # single pair
        RequestParams("a", 1, "b", None)         # alternating, str() each item

    Not thread-safe.
    """

    __slots__ = ("_arrays", "_files", "_opened", "_scalars", "config")

    def __init__(self, *args: object, config: ParamsConfig | None = None) -> None:
        self.config = config or ParamsConfig()
        self._scalars: MultiMap[str] = MultiMap()
        self._arrays: MultiMap[tuple[str, ...]] = MultiMap()
        self._files: MultiMap[FilePart] = MultiMap()
        self._opened: list[ByteStream] = []

        if not args:
            return
        if len(args) == 1 and isinstance(args[0], (Mapping, MultiValueMapping)):
            self._put_mapping(args[0])
        elif len(args) == 2 and all(a is None or isinstance(a, str) for a in args):
            self.add(args[0], args[1])  # type: ignore[arg-type]
        else:
            self._put_alternating(args)

    @classmethod
    def from_mapping(
        cls,
        source: Mapping[str, str | None] | MultiValueMapping,
        *,
        config: ParamsConfig | None = None,
    ) -> RequestParams:
        """Build a bag holding every pair of *source*; ``None`` values are skipped.

        A ``MultiValueMapping`` (such as ``warble.testing.FormData``)
        contributes every value of each key, not just the first.
        """
        params = cls(config=config)
        params._put_mapping(source)
        return params

    @classmethod
    def from_pairs(cls, *keys_and_values: object, config: ParamsConfig | None = None) -> RequestParams:
        """Build a bag from alternating keys and values.

        Every item is converted with ``str()``, including ``None``.

        Raises:
            InvalidArgumentError: If an odd number of items is given.
        """
        params = cls(config=config)
        params._put_alternating(keys_and_values)
        return params

    # -- Mutation --

    def put(
        self,
        key: str | None,
        value: object,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> None:
        """Add a parameter, choosing the collection from the value type.

        - ``str``: a scalar pair
        - ``os.PathLike``: a file, opened for reading and uploaded as
          *filename* or its base name (``FileNotFoundError`` propagates)
        - ``list`` or ``tuple``: one array parameter holding every element
        - anything with ``read()``: a stream upload with optional
          *filename* and *content_type*

        A ``None`` key or value is ignored.

        Raises:
            TypeError: If *value* matches none of the above.
        """
        if key is None or value is None:
            return
        if isinstance(value, str):
            self.add(key, value)
        elif isinstance(value, os.PathLike):
            self.add_file(key, value, filename, content_type)
        elif isinstance(value, (list, tuple)):
            self.add_list(key, value)
        elif hasattr(value, "read"):
            self.add_stream(key, value, filename, content_type)
        else:
            msg = f"Unsupported parameter value for {key!r}: {type(value).__name__}"
            raise TypeError(msg)

    def add(self, key: str | None, value: str | None) -> None:
        """Add a scalar pair. Ignored when *key* or *value* is ``None``."""
        if key is not None and value is not None:
            self._scalars.add(key, value)

    def add_list(self, key: str | None, values: Sequence[str] | None) -> None:
        """Add one array parameter.

        The whole sequence is stored as a single entry; adding another list
        under the same key keeps both groups, in order.
        """
        if key is not None and values is not None:
            self._arrays.add(key, tuple(values))

    def add_file(
        self,
        key: str | None,
        path: str | os.PathLike[str],
        filename: str | None = None,
        content_type: str | None = None,
    ) -> None:
        """Open *path* for reading and add it as a file upload.

        The upload is named *filename*, or the base name of *path* when omitted.

        The stream is owned by the bag and released by ``close()``.

        Raises:
            FileNotFoundError: If *path* does not exist.
            OSError: If *path* cannot be opened for reading.
        """
        if key is None:
            return
        path = Path(path)
        stream = path.open("rb")
        self._opened.append(stream)
        self.add_stream(key, stream, filename or path.name, content_type)

    def add_stream(
        self,
        key: str | None,
        stream: ByteStream | None,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> None:
        """Add a stream upload. Ignored when *key* or *stream* is ``None``.

        The caller keeps ownership of *stream*; it is read, not closed, when
        the multipart body is built.
        """
        if key is not None and stream is not None:
            self._files.add(key, FilePart(stream, filename, content_type))

    def remove(self, key: str, value: object = _MISSING) -> None:
        """Remove parameters from every collection.

        With only *key*, every scalar, array, and file entry under it goes.
        With *value*, only entries equal to it are removed: a string
        matches scalars, a list or tuple matches array groups, and a
        stream matches file entries holding that same object.
        """
        if value is _MISSING:
            removed = (
                self._scalars.remove_all(key)
                + self._arrays.remove_all(key)
                + self._files.remove_all(key)
            )
        else:
            group = tuple(value) if isinstance(value, (list, tuple)) else _MISSING
            removed = (
                self._scalars.remove(key, lambda v: v == value)
                + self._arrays.remove(key, lambda v: v == group)
                + self._files.remove(key, lambda f: f.stream is value)
            )
        logger.debug("Removed %d entries for %r", removed, key)

    def close(self) -> None:
        """Close the files opened by ``add_file()``. Caller streams are untouched."""
        while self._opened:
            self._opened.pop().close()

    # -- Access --

    @property
    def has_files(self) -> bool:
        return bool(self._files)

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the first string value for *key*, or *default* if missing."""
        values = self.get_list(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return scalar values for *key*, then its expanded array values."""
        values = self._scalars.get_all(key)
        for group in self._arrays.get_all(key):
            values.extend(group)
        return values

    def files(self, key: str) -> list[FilePart]:
        """Return the file entries registered under *key*."""
        return self._files.get_all(key)

    def param_list(self) -> list[Pair]:
        """Ordered name/value pairs for the URL-encoded body.

        Scalars first, then every array group expanded in order. File
        entries are not included.
        """
        pairs = list(self._scalars.entries())
        for key, group in self._arrays.entries():
            pairs.extend((key, value) for value in group)
        return pairs

    def param_string(self) -> str:
        """URL-encode ``param_list()``, for use as a query string.

        Raises:
            EncodingError: If the configured charset cannot encode a pair.
        """
        body = UrlEncodedBody.from_pairs(self.param_list(), self.config.encoding)
        return body.content.decode("ascii")

    def __contains__(self, key: object) -> bool:
        return key in self._scalars or key in self._arrays or key in self._files

    def __len__(self) -> int:
        return len(self._scalars) + len(self._arrays) + len(self._files)

    def __iter__(self) -> Iterator[str]:
        """Distinct parameter names across all three collections."""
        keys = self._scalars.keys() + self._files.keys() + self._arrays.keys()
        return iter(dict.fromkeys(keys))

    # -- Rendering --

    def to_debug_string(self) -> str:
        """Render every parameter as ``key=value`` pairs joined by ``&``.

        Scalars, then files (as ``key=FILE``), then expanded arrays. Nothing
        is URL-encoded; this is for logs and debugging, not the wire.
        """
        pairs = [f"{k}={v}" for k, v in self._scalars.entries()]
        pairs.extend(f"{k}={FILE_PLACEHOLDER}" for k, _ in self._files.entries())
        for key, group in self._arrays.entries():
            pairs.extend(f"{key}={value}" for value in group)
        return "&".join(pairs)

    def build_entity(self) -> MultipartBody | UrlEncodedBody:
        """Render the request body.

        Any file entry selects ``multipart/form-data``; otherwise the body
        is ``application/x-www-form-urlencoded``.

        File streams are consumed by the multipart path, so a bag holding
        files builds a valid body only once.

        Raises:
            EncodingError: If the configured charset cannot encode the body.
        """
        if self._files:
            return self._build_multipart()
        pairs = self.param_list()
        logger.debug("Building url-encoded body: %d pairs", len(pairs))
        return UrlEncodedBody.from_pairs(pairs, self.config.encoding)

    def __str__(self) -> str:
        return self.to_debug_string()

    def __repr__(self) -> str:
        return (
            f"RequestParams(scalars={len(self._scalars)}, arrays={len(self._arrays)}, "
            f"files={len(self._files)})"
        )

    # -- Internal --

    def _build_multipart(self) -> MultipartBody:
        body = MultipartBody.from_config(self.config)

        for key, value in self._scalars.entries():
            body.add_field(key, value)

        for key, group in self._arrays.entries():
            for value in group:
                body.add_field(key, value)

        last_index = len(self._files) - 1
        for index, (key, part) in enumerate(self._files.entries()):
            name = part.upload_name(self.config.missing_filename)
            is_last = index == last_index
            if part.content_type is not None:
                body.add_file_part(key, name, part.stream, part.content_type, is_last=is_last)
            else:
                body.add_file_part(key, name, part.stream, is_last=is_last)

        logger.debug(
            "Built multipart body: %d fields, %d files",
            body.part_count - len(self._files),
            len(self._files),
        )
        return body

    def _put_mapping(self, source: Mapping[str, str | None] | MultiValueMapping) -> None:
        if isinstance(source, MultiValueMapping):
            for key in source:
                for value in source.get_list(key):
                    self.add(key, value)
            return
        for key, value in source.items():
            self.put(key, value)

    def _put_alternating(self, items: Sequence[object]) -> None:
        if len(items) % 2 != 0:
            msg = f"Supplied arguments must be even, got {len(items)}"
            raise InvalidArgumentError(msg)
        for i in range(0, len(items), 2):
            self.add(str(items[i]), str(items[i + 1]))
