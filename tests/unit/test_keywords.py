"""
Unit tests for keyword and genre extraction.
"""
from cinemood.services.keywords import (
    coerce_to_string_list,
    extract_keywords_from_text,
    infer_genres_from_keywords,
    normalize_genres,
    normalize_keywords,
)


class TestNormalizeKeywords:
    def test_splits_phrases_into_single_words(self):
        result = normalize_keywords(["road trip", "found-family"])
        assert result == ["road", "trip", "found", "family"]

    def test_drops_short_tokens_and_stop_words(self):
        result = normalize_keywords(["a movie with the dog", "it"])
        assert result == ["dog"]

    def test_lowercases_and_dedupes(self):
        result = normalize_keywords(["Heist", "heist", "HEIST crew"])
        assert result == ["heist", "crew"]

    def test_respects_limit(self):
        result = normalize_keywords(["alpha bravo charlie delta"], limit=2)
        assert result == ["alpha", "bravo"]

    def test_text_fallback_fills_by_frequency(self):
        text = "space pirates and space whales and more space pirates"
        result = normalize_keywords([], text_fallback=text, limit=3)
        assert result == ["space", "pirates", "whales"]

    def test_empty_input(self):
        assert normalize_keywords([]) == []


class TestExtractKeywordsFromText:
    def test_quoted_phrase_first(self):
        result = extract_keywords_from_text('something like "Blade Runner" but sadder')
        assert result[:2] == ["blade", "runner"]

    def test_years_and_decades(self):
        result = extract_keywords_from_text("a thriller from 1994 or the 80s")
        assert "1994" in result
        assert "80s" in result

    def test_vocabulary_before_frequency(self):
        result = extract_keywords_from_text("feeling lonely, maybe a heist on an island")
        assert result.index("lonely") < result.index("heist") < result.index("island")

    def test_all_tokens_valid(self):
        result = extract_keywords_from_text("I am so bored. Give me anything with a Zombie in Tokyo please!")
        assert 0 < len(result) <= 8
        for token in result:
            assert token == token.lower()
            assert " " not in token
            assert len(token) >= 3

    def test_empty(self):
        assert extract_keywords_from_text("") == []


class TestInferGenres:
    def test_table_order_wins(self):
        # "funny" appears first in input but Science Fiction is earlier in the table
        assert infer_genres_from_keywords(["funny", "spaceship"]) == ["Science Fiction", "Comedy"]

    def test_stops_after_three(self):
        result = infer_genres_from_keywords(["space", "love", "funny", "horror", "war"])
        assert len(result) == 3

    def test_no_hits(self):
        assert infer_genres_from_keywords(["xyz"]) == []
        assert infer_genres_from_keywords([]) == []


class TestNormalizeGenres:
    def test_aliases_map_to_catalog_names(self):
        assert normalize_genres(["sci-fi", "musical", "Comedies"]) == [
            "Science Fiction",
            "Music",
            "Comedy",
        ]

    def test_dedupe_and_cap(self):
        result = normalize_genres(["drama", "Drama", "war", "horror", "crime", "family"])
        assert result == ["Drama", "War", "Horror", "Crime"]

    def test_unknown_is_capitalized(self):
        assert normalize_genres(["noir"]) == ["Noir"]


class TestCoerceToStringList:
    def test_shapes(self):
        assert coerce_to_string_list(["a ", {"name": "Drama"}, None, ""]) == ["a", "Drama"]
        assert coerce_to_string_list("comedy; drama|war") == ["comedy", "drama", "war"]
        assert coerce_to_string_list(42) is None
