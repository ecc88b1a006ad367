"""Warble — request parameters for HTTP clients.

Collects string pairs, array values, and file uploads, then renders them
as a URL-encoded or multipart form body.

Basic usage::

    from warble import RequestParams

    params = RequestParams("username", "james")
    params.put("tags", ["python", "http"])
    params.put("avatar", Path("pic.jpg"))

    body = params.build_entity()  # MultipartBody, since a file is present
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ConfigurationError",
    "EncodingError",
    "FilePart",
    "InvalidArgumentError",
    "MultipartBody",
    "MultipartError",
    "ParamsConfig",
    "RequestParams",
    "UrlEncodedBody",
    "WarbleError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import warble`` fast while providing a clean top-level API.
    """
    if name in ("RequestParams", "FilePart"):
        from warble import params as _params

        return getattr(_params, name)

    if name in ("MultipartBody", "UrlEncodedBody"):
        from warble.http import entity as _entity

        return getattr(_entity, name)

    if name == "ParamsConfig":
        from warble.config import ParamsConfig

        return ParamsConfig

    if name in (
        "ConfigurationError",
        "EncodingError",
        "InvalidArgumentError",
        "MultipartError",
        "WarbleError",
    ):
        from warble import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
