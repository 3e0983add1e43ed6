"""
Generation prompt and structured-output schema for query parsing.
"""
import json
from typing import Any, Dict, Optional

from cinemood.models.schemas import MoodResponseMode
from cinemood.services.moods import reference_guide

SCHEMA_NAME = "parsed_query"

# Strict structured outputs require every property listed in `required`;
# optional values are expressed as nullable types instead.
PARSED_QUERY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "genres": {"type": "array", "items": {"type": "string"}},
        "keywords": {"type": "array", "items": {"type": "string"}},
        "tempo": {"type": ["string", "null"], "enum": ["slow", "medium", "fast", None]},
        "runtime_min": {"type": ["number", "null"]},
        "runtime_max": {"type": ["number", "null"]},
        "era": {
            "type": ["object", "null"],
            "properties": {
                "from": {"type": ["number", "null"]},
                "to": {"type": ["number", "null"]},
            },
            "required": ["from", "to"],
            "additionalProperties": False,
        },
        "language": {"type": ["string", "null"]},
        "adult": {"type": "boolean"},
        "moodResponse": {"type": "string", "enum": ["match", "address"]},
        "ambiguous": {"type": "boolean"},
        "inferredMood": {"type": ["string", "null"]},
    },
    "required": [
        "genres",
        "keywords",
        "tempo",
        "runtime_min",
        "runtime_max",
        "era",
        "language",
        "adult",
        "moodResponse",
        "ambiguous",
        "inferredMood",
    ],
    "additionalProperties": False,
}

PROMPT_TEMPLATE = """Extract precise, input-anchored movie search parameters from the user input. Respond with JSON only that matches the schema.
InputText: \"\"\"{text}\"\"\"
Mood: "{mood}"
MoodResponse: "{mood_response}"

ReferenceMoodGuide: {guide}

Rules:
- If Mood is provided, use it for genre/keyword alignment.
- If Mood is empty but InputText contains emotional tone, infer the mood and set the inferredMood field.
- If MoodResponse is "address" with a Mood, counterbalance it; if "address" with no Mood, detect the tone and counterbalance it.
- Always prioritize exact words or short phrases from InputText for keywords (1-6 entries). Do not invent long keywords.
- Genres are canonical labels (e.g. "Drama", "Comedy"); keywords capture user anchors.
- If InputText is too vague or non-descriptive (short filler words, single-word affirmative replies, or otherwise lacking specific anchors), set "ambiguous": true and return empty arrays for genres and keywords.
- Keep output minimal and valid. Arrays stay small (keywords 1-6, genres 0-4).

Output only JSON with keys: genres, keywords, tempo, runtime_min, runtime_max, era, language, adult, moodResponse, ambiguous, inferredMood. No other keys.
"""


def sanitize_input(text: Optional[str]) -> str:
    """Trim and neutralise sequences that could close the quoted input block."""
    return (text or "").strip().replace('"""', "'").replace("```", "'")


def build_prompt(text: str, mood: Optional[str], mood_response: MoodResponseMode) -> str:
    """Render the parsing prompt for one request."""
    return PROMPT_TEMPLATE.format(
        text=sanitize_input(text),
        mood=mood or "",
        mood_response=mood_response.value,
        guide=json.dumps(reference_guide(), separators=(",", ":")),
    )
