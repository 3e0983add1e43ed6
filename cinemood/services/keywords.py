"""
Keyword and genre extraction.
Pure text processing: turns model output and free text into single-word
keyword tokens and canonical genre names. No external calls.
"""
import re
from collections import Counter
from typing import Any, Iterable, List, Optional

MAX_KEYWORDS = 8
MAX_GENRES = 4
MIN_TOKEN_LENGTH = 3

STOP_WORDS = frozenset({
    "the", "and", "for", "with", "that", "this", "from", "want", "looking", "watch",
    "movie", "movies", "like", "a", "to", "of", "in", "on", "is", "it", "me", "i",
    "we", "you", "she", "he", "they", "be", "been", "at", "by", "an", "as", "but",
    "or", "so", "if", "when", "while", "which", "who", "what", "where", "how",
    "stay", "keep", "remain", "wantto", "wanna", "please",
})

# Fixed vocabularies scanned by the direct text extraction pass, in priority order
EMOTION_WORDS = (
    "happy", "sad", "angry", "scared", "excited", "nostalgic", "melancholic", "anxious",
    "relaxed", "lonely", "hopeful", "joyful", "bored", "curious", "wholesome", "cozy",
    "edgy", "romantic", "surreal", "inspired", "playful", "motivated", "frustrated",
    "heartbroken", "calm", "tense", "suspenseful",
)
SITUATION_WORDS = (
    "breakup", "revenge", "heist", "investigation", "escape", "journey", "roadtrip",
    "quest", "friendship", "family", "school", "college", "work", "prison", "war",
    "battle", "survival", "apocalypse", "zombie", "alien", "superhero", "spy", "detective",
)
SETTING_WORDS = (
    "beach", "city", "forest", "mountain", "village", "suburb", "space", "ocean",
    "desert", "island", "castle", "hospital", "school", "bar", "club", "stadium",
)
PERIOD_WORDS = ("past", "present", "future", "modern", "period", "retro", "medieval", "victorian", "noir")

# Ordered: inference walks this table top to bottom
KEYWORD_GENRE_HINTS = (
    ("sci", "Science Fiction"),
    ("space", "Science Fiction"),
    ("robot", "Science Fiction"),
    ("romance", "Romance"),
    ("love", "Romance"),
    ("romcom", "Comedy"),
    ("funny", "Comedy"),
    ("comedy", "Comedy"),
    ("horror", "Horror"),
    ("scary", "Horror"),
    ("thriller", "Thriller"),
    ("mystery", "Mystery"),
    ("detective", "Mystery"),
    ("crime", "Crime"),
    ("heist", "Crime"),
    ("war", "War"),
    ("history", "History"),
    ("period", "Drama"),
    ("biopic", "Drama"),
    ("documentary", "Documentary"),
    ("doc", "Documentary"),
    ("animation", "Animation"),
    ("cartoon", "Animation"),
    ("kids", "Family"),
    ("family", "Family"),
    ("music", "Music"),
    ("fantasy", "Fantasy"),
    ("magic", "Fantasy"),
    ("adventure", "Adventure"),
    ("epic", "Adventure"),
    ("indie", "Drama"),
    ("feelgood", "Comedy"),
    ("uplifting", "Comedy"),
)
MAX_INFERRED_GENRES = 3

CANONICAL_GENRES = {
    "action": "Action",
    "adventure": "Adventure",
    "animation": "Animation",
    "animated": "Animation",
    "comedy": "Comedy",
    "crime": "Crime",
    "documentary": "Documentary",
    "drama": "Drama",
    "family": "Family",
    "fantasy": "Fantasy",
    "history": "History",
    "historical": "History",
    "horror": "Horror",
    "music": "Music",
    "musical": "Music",
    "mystery": "Mystery",
    "romance": "Romance",
    "romantic": "Romance",
    "science fiction": "Science Fiction",
    "science-fiction": "Science Fiction",
    "sci-fi": "Science Fiction",
    "scifi": "Science Fiction",
    "tv movie": "TV Movie",
    "tvmovie": "TV Movie",
    "thriller": "Thriller",
    "war": "War",
    "western": "Western",
}

_SPLIT_RE = re.compile(r"[\s\-_/,.;:!?]+")
_NON_WORD_RE = re.compile(r"[\W_]+")
_QUOTED_RE = re.compile(r"\"([^\"]{2,80})\"|(?<!\w)'([^']{2,80})'(?!\w)")
_YEAR_RE = re.compile(r"\b(1[89]\d{2}|20\d{2})\b")
_DECADE_RE = re.compile(r"\b((?:19|20)?\d0s)\b", re.IGNORECASE)
_PROPER_NOUN_RE = re.compile(r"\b([A-Z][a-z]{2,})\b")


def _clean_token(raw: str) -> str:
    return _NON_WORD_RE.sub("", raw).lower()


def _is_keyword(token: str) -> bool:
    return len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS


def _content_tokens(text: str) -> List[str]:
    """Lowercase word tokens of text, stop words and short tokens removed."""
    normalized = re.sub(r"[^\w\s'\-]", " ", text or "")
    normalized = re.sub(r"['\-_]", " ", normalized).lower()
    return [t for t in normalized.split() if _is_keyword(t)]


def _by_frequency(text: str) -> List[str]:
    # most_common keeps first-seen order among equal counts
    return [token for token, _ in Counter(_content_tokens(text)).most_common()]


def coerce_to_string_list(value: Any) -> Optional[List[str]]:
    """Accept a list, or a comma/semicolon/pipe separated string.

    Object entries contribute their `name` or `label`. Returns None for any
    other shape so callers can tell "missing" from "empty".
    """
    if isinstance(value, (list, tuple)):
        items = []
        for entry in value:
            if isinstance(entry, dict):
                entry = entry.get("name") or entry.get("label") or ""
            text = str(entry).strip() if entry is not None else ""
            if text:
                items.append(text)
        return items
    if isinstance(value, str):
        return [part.strip() for part in re.split(r"[,;|]", value) if part.strip()]
    return None


def normalize_keywords(
    raw_inputs: Iterable[str],
    text_fallback: str = "",
    limit: int = MAX_KEYWORDS,
) -> List[str]:
    """
    Reduce keyword phrases to single lowercase word tokens.

    Phrases are split on whitespace and punctuation; tokens shorter than three
    characters and stop words are dropped. When the phrases yield fewer than
    `limit` tokens, the most frequent content words of `text_fallback` fill
    the remaining slots.
    """
    out: List[str] = []
    seen = set()

    def add(token: str) -> bool:
        if token and token not in seen and _is_keyword(token):
            seen.add(token)
            out.append(token)
        return len(out) >= limit

    for raw in raw_inputs or []:
        if not raw:
            continue
        for part in _SPLIT_RE.split(str(raw)):
            if add(_clean_token(part)):
                return out

    if len(out) < limit and text_fallback:
        for token in _by_frequency(text_fallback):
            if add(token):
                break

    return out[:limit]


def extract_keywords_from_text(text: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """
    Pull keyword tokens straight out of free text.

    Sources are tried in a fixed priority order, each adding candidates until
    the limit is reached: quoted phrases, years and decades, the emotion /
    situation / setting / period vocabularies, capitalized proper nouns, and
    finally word frequency.
    """
    if not text:
        return []

    out: List[str] = []

    def push(word: Optional[str]) -> bool:
        if word:
            first = re.sub(r"['\-]", " ", word.lower()).split()
            token = _clean_token(first[0]) if first else ""
            if _is_keyword(token) and token not in out:
                out.append(token)
        return len(out) >= limit

    for match in _QUOTED_RE.finditer(text):
        phrase = (match.group(1) or match.group(2) or "").strip()
        if any(push(word) for word in phrase.split()):
            return out

    for match in _YEAR_RE.finditer(text):
        if push(match.group(1)):
            return out
    for match in _DECADE_RE.finditer(text):
        if push(match.group(1)):
            return out

    padded = f" {' '.join(_content_tokens(text))} "
    for vocabulary in (EMOTION_WORDS, SITUATION_WORDS, SETTING_WORDS, PERIOD_WORDS):
        for word in vocabulary:
            if f" {word} " in padded and push(word):
                return out

    for match in _PROPER_NOUN_RE.finditer(text):
        if push(match.group(1)):
            return out

    for token in _by_frequency(text):
        if push(token):
            break

    return out[:limit]


def infer_genres_from_keywords(keywords: Iterable[str]) -> List[str]:
    """
    Guess genres from keywords by substring lookup.

    Walks the lookup table in its own order and stops after three genres, so
    the result order follows the table rather than the keyword order.
    """
    lowered = [k.lower() for k in keywords or [] if k]
    genres: List[str] = []
    if not lowered:
        return genres
    for token, genre in KEYWORD_GENRE_HINTS:
        if genre in genres:
            continue
        if any(token in keyword for keyword in lowered):
            genres.append(genre)
            if len(genres) >= MAX_INFERRED_GENRES:
                break
    return genres


def normalize_genres(genres: Optional[Iterable[str]], limit: int = MAX_GENRES) -> List[str]:
    """Map genre aliases to canonical catalog names, dedupe and cap."""
    out: List[str] = []
    for genre in genres or []:
        if not genre:
            continue
        text = str(genre).strip()
        if not text:
            continue
        key = text.lower()
        if key.endswith("ies"):
            singular = key[:-3] + "y"
        elif key.endswith("s"):
            singular = key[:-1]
        else:
            singular = key
        canonical = (
            CANONICAL_GENRES.get(key)
            or CANONICAL_GENRES.get(singular)
            or text[0].upper() + text[1:]
        )
        if canonical not in out:
            out.append(canonical)
        if len(out) >= limit:
            break
    return out
