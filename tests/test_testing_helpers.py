"""Tests for warble.testing — decoding rendered bodies."""

import io

import pytest

from warble.config import ParamsConfig
from warble.http.entity import MultipartBody, UrlEncodedBody
from warble.params import RequestParams
from warble.testing import FormData, UploadFile, decode_body, parse_form_body


class TestFormData:
    def test_getitem_returns_first(self) -> None:
        form = FormData({"color": ["red", "blue"]})
        assert form["color"] == "red"

    def test_getitem_missing_raises(self) -> None:
        form = FormData({})
        with pytest.raises(KeyError):
            form["missing"]

    def test_get_with_default(self) -> None:
        form = FormData({})
        assert form.get("missing") is None
        assert form.get("missing", "fallback") == "fallback"

    def test_get_list(self) -> None:
        form = FormData({"tags": ["a", "b"]})
        assert form.get_list("tags") == ["a", "b"]
        assert form.get_list("missing") == []

    def test_len_and_iter(self) -> None:
        form = FormData({"a": ["1"], "b": ["2"]})
        assert len(form) == 2
        assert set(form) == {"a", "b"}

    def test_repr(self) -> None:
        assert "alice" in repr(FormData({"name": ["alice"]}))

    def test_files_empty_by_default(self) -> None:
        assert len(FormData({}).files) == 0


class TestUploadFile:
    def test_size(self) -> None:
        upload = UploadFile("a.txt", "text/plain", b"hello")
        assert upload.size == 5

    def test_repr(self) -> None:
        upload = UploadFile("photo.jpg", "image/jpeg", b"x" * 1024)
        assert "photo.jpg" in repr(upload)
        assert "1024" in repr(upload)


class TestDecodeBody:
    def test_url_encoded(self) -> None:
        body = UrlEncodedBody.from_pairs([("a", "1"), ("b", "x y"), ("a", "2")])
        form = decode_body(body)
        assert form.get_list("a") == ["1", "2"]
        assert form["b"] == "x y"
        assert form.order == ["a", "b", "a"]

    def test_url_encoded_charset(self) -> None:
        body = UrlEncodedBody.from_pairs([("name", "José")], "latin-1")
        assert decode_body(body)["name"] == "José"

    def test_multipart(self) -> None:
        body = MultipartBody()
        body.add_field("title", "Holiday")
        body.add_file_part("photo", "beach.jpg", io.BytesIO(b"\xff\xd8"), "image/jpeg")
        body.add_file_part("photo", "sea.jpg", io.BytesIO(b"\x00"), "image/jpeg", is_last=True)

        form = decode_body(body)

        assert form["title"] == "Holiday"
        assert [f.filename for f in form.files["photo"]] == ["beach.jpg", "sea.jpg"]
        assert form.files["photo"][0].content == b"\xff\xd8"
        assert form.order == ["title", "photo", "photo"]

    def test_multipart_latin1_round_trip(self) -> None:
        params = RequestParams("name", "José", config=ParamsConfig(encoding="latin-1"))
        params.put("doc", io.BytesIO(b"x"), "doc.txt")

        form = decode_body(params.build_entity())

        assert form["name"] == "José"
        assert form.files["doc"][0].content == b"x"

    def test_explicit_charset_overrides_utf8(self) -> None:
        body = MultipartBody(boundary="b", charset="latin-1")
        body.add_field("city", "Zürich")
        raw = body.getvalue()

        assert parse_form_body(raw, body.content_type)["city"] != "Zürich"
        assert parse_form_body(raw, body.content_type, "latin-1")["city"] == "Zürich"


class TestParseFormBody:
    def test_unsupported_content_type(self) -> None:
        with pytest.raises(ValueError, match="Unsupported"):
            parse_form_body(b"{}", "application/json")

    def test_missing_boundary(self) -> None:
        with pytest.raises(ValueError, match="boundary"):
            parse_form_body(b"", "multipart/form-data")

    def test_empty_url_encoded(self) -> None:
        form = parse_form_body(b"", "application/x-www-form-urlencoded")
        assert len(form) == 0
