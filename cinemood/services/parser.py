"""
Structured-query parser.
Turns free text + mood + response mode into a catalog-ready ParsedQuery.

The generator is tried in three sequential stages:
    strict    - structured output constrained to the JSON schema
    loose     - free-form completion, JSON recovered from the text
    heuristic - no generator; minimal object plus regex-derived fields
Whatever the stage, the result is merged with the keyword extractor and the
mood resolver before it is returned.
"""
import logging
import math
import random
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from cinemood.core.circuit_breaker import CircuitBreaker
from cinemood.core.metrics import PARSER_STAGE_TOTAL
from cinemood.models.interfaces import TextGenerator
from cinemood.models.schemas import Era, MoodResponseMode, ParsedQuery, Tempo
from cinemood.services.json_repair import recover_json
from cinemood.services.keywords import (
    MAX_GENRES,
    MAX_KEYWORDS,
    coerce_to_string_list,
    extract_keywords_from_text,
    infer_genres_from_keywords,
    normalize_genres,
    normalize_keywords,
)
from cinemood.services.moods import (
    explicit_keep_mood,
    genres_for_mood,
    infer_mood_from_text,
    resolve_hints,
)
from cinemood.services.prompts import PARSED_QUERY_SCHEMA, build_prompt

logger = logging.getLogger(__name__)

MAX_INJECTED_HINTS = 2
SWAP_PROBABILITY = 0.5

_TRUTHY = {"true", "yes", "y", "1"}
_NULLISH = {"", "null", "none", "nil", "n/a"}

_MINUTES_RE = re.compile(r"\b(\d{2,3})\s*(?:min|mins|minutes)\b", re.IGNORECASE)
_HOURS_RE = re.compile(r"\b(\d(?:\.\d)?)\s*(?:h|hr|hrs|hour|hours)\b", re.IGNORECASE)
_SHORT_RE = re.compile(r"\b(?:short|quick watch)\b", re.IGNORECASE)
_LONG_RE = re.compile(r"\b(?:long|epic|lengthy)\b", re.IGNORECASE)
_DECADE_RE = re.compile(r"\b(19|20)?(\d)0'?s\b", re.IGNORECASE)
_YEAR_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")
_FAST_RE = re.compile(
    r"\b(?:fast|fast-paced|action-packed|high-octane|thrilling|adrenaline|non-stop|quick)\b",
    re.IGNORECASE,
)
_SLOW_RE = re.compile(
    r"\b(?:slow|slow-burn|quiet|contemplative|meditative|gentle|calm|leisurely)\b",
    re.IGNORECASE,
)


class ParserStage(str, Enum):
    """Generator stage that produced the raw parse."""

    STRICT = "strict"
    LOOSE = "loose"
    HEURISTIC = "heuristic"


def heuristic_fields(text: str) -> Dict[str, Any]:
    """Tempo, runtime and era guessed from plain wording."""
    fields: Dict[str, Any] = {}
    if not text:
        return fields

    minutes = _MINUTES_RE.search(text)
    hours = _HOURS_RE.search(text)
    if minutes:
        value = int(minutes.group(1))
        fields["runtime_min"] = max(1, value - 10)
        fields["runtime_max"] = value + 10
    elif hours:
        value = int(round(float(hours.group(1)) * 60))
        if value > 0:
            fields["runtime_min"] = max(1, value - 15)
            fields["runtime_max"] = value + 15
    elif _SHORT_RE.search(text):
        fields["runtime_max"] = 90
    elif _LONG_RE.search(text):
        fields["runtime_min"] = 120

    decade = _DECADE_RE.search(text)
    year = _YEAR_RE.search(text)
    if decade:
        century = decade.group(1)
        digit = int(decade.group(2))
        if century:
            start = int(century) * 100 + digit * 10
        else:
            # "80s" -> 1980s, "10s" -> 2010s
            start = (1900 if digit >= 3 else 2000) + digit * 10
        fields["era"] = {"from": start, "to": start + 9}
    elif year:
        value = int(year.group(1))
        fields["era"] = {"from": max(1900, value - 5), "to": value + 5}

    if _FAST_RE.search(text):
        fields["tempo"] = Tempo.FAST.value
    elif _SLOW_RE.search(text):
        fields["tempo"] = Tempo.SLOW.value

    return fields


def _coerce_adult(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, (int, float)):
        return bool(value)
    return False


def _coerce_tempo(value: Any) -> Optional[Tempo]:
    if isinstance(value, str):
        try:
            return Tempo(value.strip().lower())
        except ValueError:
            return None
    return None


def _coerce_minutes(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or (isinstance(value, float) and not math.isfinite(value)):
        return None
    minutes = int(round(value))
    return minutes if minutes > 0 else None


def _coerce_year(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        year = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return year if year > 0 else None


def _coerce_era(value: Any) -> Optional[Era]:
    if not isinstance(value, dict):
        return None
    start = _coerce_year(value.get("from"))
    end = _coerce_year(value.get("to"))
    if start is None and end is None:
        return None
    return Era(from_year=start, to_year=end)


def _coerce_language(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    return None if text.lower() in _NULLISH else text


class QueryParser:
    """
    Parse free text into a ParsedQuery.

    Usage:
        parser = QueryParser(generator, circuit_breaker, rng)
        parsed = await parser.parse("something funny for date night", "", MoodResponseMode.MATCH)
    """

    def __init__(
        self,
        generator: TextGenerator,
        circuit_breaker: Optional[CircuitBreaker] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._generator = generator
        self._circuit_breaker = circuit_breaker or CircuitBreaker(name="generative_parser")
        self._rng = rng or random.Random()

    async def parse(
        self,
        text: str,
        mood: Optional[str] = None,
        mood_response: MoodResponseMode = MoodResponseMode.MATCH,
    ) -> ParsedQuery:
        """
        Parse one request.

        Args:
            text: Free-text mood description
            mood: Selected mood label, may be empty
            mood_response: Caller's requested mode; always wins over the generator

        Returns:
            ParsedQuery (check `ambiguous` before running discovery)

        Raises:
            ParseError: If the loose stage returned text that no recovery pass can parse
        """
        mode = MoodResponseMode.normalize(mood_response)
        safe_text = (text or "").strip()
        explicit_mood = (mood or "").strip() or None

        inferred_tag = None if explicit_mood else infer_mood_from_text(safe_text)
        effective_mood = explicit_mood or (inferred_tag.value if inferred_tag else None)

        prompt = build_prompt(safe_text, effective_mood, mode)
        stage, raw = await self._run_stages(prompt, safe_text, mode)

        PARSER_STAGE_TOTAL.labels(stage=stage.value).inc()
        logger.info(
            f"Query parsed by {stage.value} stage",
            extra={"stage": stage.value, "mood": effective_mood, "mood_response": mode.value},
        )

        payload = self._as_object(raw)
        return self._finalize(payload, safe_text, effective_mood, mode)

    # -------------------------------------------------------------------------
    # Fallback chain
    # -------------------------------------------------------------------------

    async def _run_stages(
        self,
        prompt: str,
        text: str,
        mode: MoodResponseMode,
    ) -> Tuple[ParserStage, Any]:
        try:
            raw = await self._circuit_breaker.call(
                lambda: self._generator.generate(prompt, PARSED_QUERY_SCHEMA)
            )
            return ParserStage.STRICT, recover_json(raw)
        except Exception as e:
            logger.warning(f"Strict generation failed, retrying without schema: {e}")

        try:
            raw = await self._circuit_breaker.call(lambda: self._generator.generate(prompt))
        except Exception as e:
            logger.warning(f"Loose generation failed, using heuristic parse: {e}")
            return ParserStage.HEURISTIC, self._static_fallback(text, mode)

        # Unrecoverable loose output is the one hard failure
        return ParserStage.LOOSE, recover_json(raw)

    @staticmethod
    def _static_fallback(text: str, mode: MoodResponseMode) -> Dict[str, Any]:
        fallback: Dict[str, Any] = {"moodResponse": mode.value, "ambiguous": False}
        fallback.update(heuristic_fields(text))
        return fallback

    @staticmethod
    def _as_object(raw: Any) -> Dict[str, Any]:
        """Lists are read as a bare genre list; anything else non-dict is dropped."""
        if isinstance(raw, list):
            return {"genres": raw[:MAX_GENRES], "keywords": [], "ambiguous": False}
        if isinstance(raw, dict):
            return raw
        return {"ambiguous": False}

    # -------------------------------------------------------------------------
    # Post-processing
    # -------------------------------------------------------------------------

    def _finalize(
        self,
        payload: Dict[str, Any],
        text: str,
        effective_mood: Optional[str],
        mode: MoodResponseMode,
    ) -> ParsedQuery:
        ambiguous = payload.get("ambiguous") is True
        model_mood = payload.get("inferredMood")
        inferred_mood = effective_mood or (
            model_mood.strip() if isinstance(model_mood, str) and model_mood.strip() else None
        )

        if ambiguous:
            return ParsedQuery(mood_response=mode, ambiguous=True, inferred_mood=inferred_mood)

        keywords = normalize_keywords(coerce_to_string_list(payload.get("keywords")) or [], text)
        if not keywords:
            keywords = extract_keywords_from_text(text)

        if effective_mood and not explicit_keep_mood(text, effective_mood):
            keywords = self._inject_hints(keywords, effective_mood, mode)

        genres = self._pick_genres(
            coerce_to_string_list(payload.get("genres")) or [],
            effective_mood,
            keywords,
            mode,
        )

        keywords = self._maybe_swap(keywords)
        genres = self._maybe_swap(genres)

        if not keywords and not genres:
            logger.info("Parse produced no keywords or genres; marking ambiguous")
            return ParsedQuery(mood_response=mode, ambiguous=True, inferred_mood=inferred_mood)

        return ParsedQuery(
            genres=genres,
            keywords=keywords,
            tempo=_coerce_tempo(payload.get("tempo")),
            runtime_min=_coerce_minutes(payload.get("runtime_min")),
            runtime_max=_coerce_minutes(payload.get("runtime_max")),
            era=_coerce_era(payload.get("era")),
            language=_coerce_language(payload.get("language")),
            adult=_coerce_adult(payload.get("adult", False)),
            mood_response=mode,
            ambiguous=False,
            inferred_mood=inferred_mood,
        )

    @staticmethod
    def _inject_hints(keywords: List[str], mood: str, mode: MoodResponseMode) -> List[str]:
        """Prepend up to two mood hint words; address mode also drops the mood word itself."""
        hints = resolve_hints(mood).for_mode(mode)
        if mode == MoodResponseMode.ADDRESS:
            mood_word = mood.lower()
            keywords = [k for k in keywords if k != mood_word]

        fresh = [h for h in hints.keywords if h not in keywords][:MAX_INJECTED_HINTS]
        return (fresh + keywords)[:MAX_KEYWORDS]

    @staticmethod
    def _pick_genres(
        model_genres: List[str],
        mood: Optional[str],
        keywords: List[str],
        mode: MoodResponseMode,
    ) -> List[str]:
        genres = normalize_genres(model_genres)
        if not genres and mood:
            genres = normalize_genres(genres_for_mood(mood, mode))
        if not genres:
            genres = normalize_genres(infer_genres_from_keywords(keywords))

        if mode == MoodResponseMode.ADDRESS and mood:
            # An "address" request must never echo the mood back as a genre
            genres = [g for g in genres if g.lower() != mood.lower()]
        return genres[:MAX_GENRES]

    def _maybe_swap(self, items: List[str]) -> List[str]:
        """Swap one random pair half of the time."""
        if len(items) < 2 or self._rng.random() >= SWAP_PROBABILITY:
            return items
        i = self._rng.randrange(len(items))
        j = self._rng.randrange(len(items))
        if j == i:
            j = (i + 1) % len(items)
        swapped = list(items)
        swapped[i], swapped[j] = swapped[j], swapped[i]
        return swapped
