"""
Unit tests for tolerant JSON recovery.
"""
import pytest

from cinemood.core.exceptions import ParseError
from cinemood.services.json_repair import (
    extract_balanced_span,
    normalize_literals,
    normalize_quotes,
    quote_bare_keys,
    recover_json,
    single_to_double_quotes,
    strip_code_fences,
    strip_trailing_commas,
)


class TestRecoverJson:
    def test_plain_json(self):
        assert recover_json('{"genres": ["Drama"]}') == {"genres": ["Drama"]}

    def test_fenced_python_style_output(self):
        raw = (
            "Here you go:\n```json\n"
            "{genres: ['Comedy', 'Drama'], keywords: ['funny',], ambiguous: False}\n"
            "```"
        )
        assert recover_json(raw) == {
            "genres": ["Comedy", "Drama"],
            "keywords": ["funny"],
            "ambiguous": False,
        }

    def test_prose_around_object(self):
        raw = 'Sure! {"tempo": "slow", "note": "a } inside"} Hope that helps.'
        assert recover_json(raw) == {"tempo": "slow", "note": "a } inside"}

    def test_bare_array(self):
        assert recover_json("Genres: ['Horror', 'Thriller']") == ["Horror", "Thriller"]

    def test_smart_quotes(self):
        assert recover_json("{“language”: “fr”}") == {"language": "fr"}

    def test_unrecoverable(self):
        with pytest.raises(ParseError) as exc_info:
            recover_json("I could not find any movies for that, sorry.")
        assert exc_info.value.status_code == 422
        assert exc_info.value.error_code == "PARSE_ERROR"

    def test_empty(self):
        with pytest.raises(ParseError):
            recover_json("   ")
        with pytest.raises(ParseError):
            recover_json(None)


class TestRecoveryPasses:
    def test_strip_code_fences(self):
        assert strip_code_fences("x ```json\n{}\n``` y") == "{}"
        assert strip_code_fences("  {} ") == "{}"

    def test_extract_balanced_span_ignores_braces_in_strings(self):
        assert extract_balanced_span('pre {"a": "}{", "b": {"c": 1}} post') == '{"a": "}{", "b": {"c": 1}}'

    def test_extract_balanced_span_without_brackets(self):
        assert extract_balanced_span("nothing here") == "nothing here"

    def test_normalize_quotes(self):
        assert normalize_quotes("‘a’ “b”") == "'a' \"b\""

    def test_normalize_literals(self):
        assert normalize_literals("[True, False, None]") == "[true, false, null]"

    def test_quote_bare_keys(self):
        assert quote_bare_keys("{runtime_min: 90, era: {from: 1990}}") == (
            '{"runtime_min": 90, "era": {"from": 1990}}'
        )

    def test_single_to_double_quotes(self):
        assert single_to_double_quotes("{\"k\": 'it\"s'}") == '{"k": "it\\"s"}'

    def test_strip_trailing_commas(self):
        assert strip_trailing_commas('{"a": [1, 2,], }') == '{"a": [1, 2]}'
