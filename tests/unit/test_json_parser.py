"""Unit tests for tolerant parsing of extraction output."""

import pytest

from govflow.core.exceptions import ExtractionError
from govflow.services.extraction.json_parser import (
    RobustJSONParser,
    parse_ai_json,
    parse_ai_json_safe,
)

pytestmark = pytest.mark.unit


class TestRobustJSONParser:
    def test_plain_object(self):
        result = RobustJSONParser.parse('{"rfqNumber": "SPE-1"}')
        assert result.success
        assert result.strategy == "direct"
        assert result.data == {"rfqNumber": "SPE-1"}

    def test_markdown_fences(self):
        result = RobustJSONParser.parse('```json\n{"rfqNumber": "SPE-1"}\n```')
        assert result.success
        assert result.strategy == "cleaned"
        assert result.data["rfqNumber"] == "SPE-1"

    def test_trailing_commas(self):
        result = RobustJSONParser.parse('{"items": [1, 2,], "ok": true,}')
        assert result.data == {"items": [1, 2], "ok": True}

    def test_object_embedded_in_prose(self):
        result = RobustJSONParser.parse('Here are the fields: {"a": {"b": 2}} hope that helps')
        assert result.strategy == "extracted"
        assert result.data == {"a": {"b": 2}}

    def test_braces_inside_strings(self):
        result = RobustJSONParser.parse('{"note": "use } carefully"} and more')
        assert result.data == {"note": "use } carefully"}

    def test_truncated_output_is_closed(self):
        result = RobustJSONParser.parse('{"a": {"b": 2')
        assert result.success
        assert result.data == {"a": {"b": 2}}

    @pytest.mark.parametrize("text", ["[1, 2]", '"just a string"', "42"])
    def test_non_objects_are_rejected(self, text):
        result = RobustJSONParser.parse(text)
        assert not result.success
        assert result.data == {}
        assert result.error

    @pytest.mark.parametrize("text", [None, "", "   ", 7])
    def test_empty_input(self, text):
        result = RobustJSONParser.parse(text)
        assert not result.success
        assert result.error == "Empty extraction output"

    def test_garbage(self):
        result = RobustJSONParser.parse("no json here at all")
        assert not result.success


def test_parse_ai_json_raises_extraction_error():
    with pytest.raises(ExtractionError) as exc_info:
        parse_ai_json("I could not read this document.")
    assert exc_info.value.code == "EXTRACTION_ERROR"


def test_parse_ai_json_returns_dict():
    assert parse_ai_json('```\n{"poNumber": "PO-1",}\n```') == {"poNumber": "PO-1"}


def test_parse_ai_json_safe_never_raises():
    result = parse_ai_json_safe("[]")
    assert result.success is False
    assert result.error == "Extraction output is not a JSON object"
