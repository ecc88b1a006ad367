"""Shared type aliases used across warble modules."""

from typing import IO, Any, TypeAlias

# Readable upload source: anything with read()
ByteStream: TypeAlias = IO[bytes] | IO[str] | Any

# Plain key/value pair as handed to the URL encoder
Pair: TypeAlias = tuple[str, str]
