"""Tests for JSON extraction from model output."""

import json

import pytest

from siemgen.errors import ExtractionError
from siemgen.extraction import extract_json, iter_candidates


NESTED = {
    "sigmaRule": "title: Test\ndetection:\n    selection:\n        EventID: 4625\n    condition: selection",
    "kqlQuery": "SecurityEvent | where EventID == 4625",
    "extra": {"tags": ["attack.t1110"], "nested": {"level": 2}},
}


class TestExtractJson:
    """Test the ordered extraction strategies."""

    def test_bare_object(self):
        """Plain JSON parses directly."""
        assert extract_json('{"sigmaRule": "a", "kqlQuery": "b"}') == {"sigmaRule": "a", "kqlQuery": "b"}

    def test_prose_before_object(self):
        """Leading prose before an object that ends the text."""
        text = 'Sure, I can do that.\n\n{"sigmaRule": "a", "kqlQuery": "b"}\n'
        assert extract_json(text) == {"sigmaRule": "a", "kqlQuery": "b"}

    def test_fenced_block_with_leading_prose(self):
        """A fenced object behind prose comes back unchanged."""
        text = f"Here is the detection you asked for:\n\n```json\n{json.dumps(NESTED)}\n```"
        assert extract_json(text) == NESTED

    def test_untagged_fence_with_trailing_prose(self):
        """Fences without a language tag and prose afterwards."""
        text = f"```\n{json.dumps(NESTED, indent=2)}\n```\n\nLet me know if you want changes."
        assert extract_json(text) == NESTED

    def test_introductory_phrase(self):
        """Object following 'Here's' with trailing prose."""
        text = 'Here\'s the JSON: {"sigmaRule": "a", "kqlQuery": "b"} Hope this helps.'
        assert extract_json(text) == {"sigmaRule": "a", "kqlQuery": "b"}

    def test_response_prefix(self):
        """Object following 'Response:'."""
        text = 'Response: {"sigmaRule": "a", "kqlQuery": "b"}\nThanks.'
        assert extract_json(text) == {"sigmaRule": "a", "kqlQuery": "b"}

    def test_unparseable_candidate_falls_through(self):
        """A later strategy wins when an earlier candidate is not JSON."""
        text = (
            'Here is the rule:\n```json\n{"sigmaRule": "a", "kqlQuery": "b"}\n```\n'
            "Replace the {placeholder}"
        )
        assert extract_json(text) == {"sigmaRule": "a", "kqlQuery": "b"}

    def test_braces_inside_strings(self):
        """Braces inside string values do not confuse extraction."""
        payload = {"sigmaRule": "a", "kqlQuery": "T | extend x = bag_pack('k', '{v}')"}
        assert extract_json("JSON: " + json.dumps(payload)) == payload

    def test_fence_inside_string_value(self):
        """A string value holding a closing fence does not cut the object short."""
        payload = {"sigmaRule": "see } ```", "kqlQuery": "b"}
        text = "Sure thing.\n```json\n" + json.dumps(payload) + "\n```"
        assert extract_json(text) == payload

    def test_deeply_nested_object_raises(self):
        """Nesting beyond the parser's recursion limit is an extraction failure."""
        text = "Here is the rule: " + '{"a":' * 5000 + "1" + "}" * 5000
        with pytest.raises(ExtractionError, match="expected JSON format"):
            extract_json(text)

    def test_no_json_raises(self):
        """Prose with no object fails."""
        with pytest.raises(ExtractionError, match="expected JSON format"):
            extract_json("I'm sorry, I cannot generate that rule.")

    def test_empty_text_raises(self):
        with pytest.raises(ExtractionError):
            extract_json("")

    def test_non_object_json_raises(self):
        """Arrays and scalars are not payloads."""
        with pytest.raises(ExtractionError):
            extract_json("[1, 2, 3]")
        with pytest.raises(ExtractionError):
            extract_json("42")

    def test_malformed_object_raises(self):
        with pytest.raises(ExtractionError):
            extract_json('{"sigmaRule": "a", "kqlQuery": }')


class TestCandidates:
    """Test strategy ordering."""

    def test_order_for_fenced_text(self):
        text = '```json\n{"a": 1}\n```'
        names = [name for name, _ in iter_candidates(text)]
        assert names == ["fenced-block", "verbatim"]

    def test_all_strategies_match(self):
        text = 'Here is it:\n```json\n{"a": 1}\n```\n{"b": 2}'
        names = [name for name, _ in iter_candidates(text)]
        assert names == ["trailing-object", "fenced-block", "introduced-object", "verbatim"]

    def test_candidates_are_trimmed(self):
        candidates = dict(iter_candidates('  {"a": 1}  \n'))
        assert candidates["verbatim"] == '{"a": 1}'
        assert candidates["trailing-object"] == '{"a": 1}'

    def test_fenced_candidates_nearest_close_first(self):
        text = '```json\n{"a": "} ```"}\n```'
        fenced = [candidate for name, candidate in iter_candidates(text) if name == "fenced-block"]
        assert fenced == ['{"a": "}', '{"a": "} ```"}']
