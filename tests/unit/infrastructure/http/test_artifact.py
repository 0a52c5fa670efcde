"""Tests for artifact decoding and validation."""

import base64
import json

import pytest

from repocache.domain.shared.error import InvalidFormatError
from repocache.infrastructure.http.artifact import decode_base64_file, parse_artifact


def parse(raw: str):
    return parse_artifact(raw, collection_key="blocks", location="lumina.json in acme/docs")


class TestParseArtifact:
    def test_object_with_collection_is_returned_as_is(self):
        raw = json.dumps({"blocks": [{"id": "intro"}], "title": "Docs"})

        assert parse(raw) == {"blocks": [{"id": "intro"}], "title": "Docs"}

    def test_bare_array_is_wrapped(self):
        assert parse('[{"id": "intro"}]') == {"blocks": [{"id": "intro"}]}

    def test_empty_collection_is_valid(self):
        assert parse('{"blocks": []}') == {"blocks": []}

    @pytest.mark.parametrize(
        "raw",
        [
            '{"items": []}',
            '{"blocks": {"id": "intro"}}',
            '"just a string"',
            "42",
        ],
    )
    def test_missing_collection_is_rejected(self, raw: str):
        with pytest.raises(InvalidFormatError, match="expected array or object"):
            parse(raw)

    def test_non_object_entry_is_rejected(self):
        with pytest.raises(InvalidFormatError, match=r"blocks\[1\]"):
            parse('[{"id": "intro"}, "oops"]')

    def test_invalid_json_is_rejected(self):
        with pytest.raises(InvalidFormatError, match="not valid JSON"):
            parse("{not json")


class TestDecodeBase64File:
    def test_decodes_utf8(self):
        encoded = base64.b64encode("héllo".encode()).decode()

        assert decode_base64_file(encoded, location="x") == "héllo"

    def test_tolerates_line_breaks(self):
        encoded = base64.encodebytes(b'{"blocks": []}').decode()

        assert decode_base64_file(encoded, location="x") == '{"blocks": []}'

    def test_undecodable_bytes_are_rejected(self):
        encoded = base64.b64encode(b"\xff\xfe\xfa").decode()

        with pytest.raises(InvalidFormatError, match="could not be decoded"):
            decode_base64_file(encoded, location="x")
