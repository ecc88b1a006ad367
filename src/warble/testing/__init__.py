"""Test utilities for warble.

Decode rendered bodies and assert on their contents::

    from warble.testing import decode_body

    form = decode_body(params.build_entity())
    assert form.get_list("tags") == ["x", "y"]
"""

from warble.testing.forms import FormData, UploadFile, decode_body, parse_form_body

__all__ = [
    "FormData",
    "UploadFile",
    "decode_body",
    "parse_form_body",
]
