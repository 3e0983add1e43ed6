"""
Mood-intent resolution.
Reference tables that bridge a mood to genres and keyword hints for both
response modes, plus mood inference from free text.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from cinemood.models.schemas import MoodResponseMode, MoodTag

MATCH = MoodResponseMode.MATCH
ADDRESS = MoodResponseMode.ADDRESS

MAX_HINT_KEYWORDS = 4
MAX_HINT_GENRES = 2
MAX_MOOD_GENRES = 4

# mood -> (match genres, address genres)
MOOD_GENRE_BRIDGE: Dict[MoodTag, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    MoodTag.HAPPY: (
        ("Comedy", "Family", "Animation", "Music", "Adventure"),
        ("Drama", "Romance", "Documentary", "History", "War"),
    ),
    MoodTag.SAD: (
        ("Drama", "Romance", "War", "History", "Music"),
        ("Comedy", "Family", "Animation", "Adventure", "Fantasy"),
    ),
    MoodTag.ROMANTIC: (
        ("Romance", "Drama", "Music", "Comedy"),
        ("Action", "Adventure", "Thriller", "Science Fiction", "Horror"),
    ),
    MoodTag.EXCITED: (
        ("Action", "Adventure", "Thriller", "Science Fiction", "Fantasy"),
        ("Drama", "Romance", "Documentary", "History"),
    ),
    MoodTag.RELAXED: (
        ("Drama", "Romance", "Documentary", "Music", "Animation"),
        ("Action", "Comedy", "Adventure", "Thriller", "Horror"),
    ),
    MoodTag.ANGRY: (
        ("Action", "Crime", "Thriller", "War", "Horror"),
        ("Comedy", "Drama", "Family", "Romance", "Animation"),
    ),
    MoodTag.SCARED: (
        ("Horror", "Thriller", "Mystery", "Crime"),
        ("Family", "Comedy", "Animation", "Romance", "Adventure"),
    ),
    MoodTag.ADVENTUROUS: (
        ("Adventure", "Fantasy", "Action", "Science Fiction", "Western"),
        ("Drama", "Romance", "Documentary", "History"),
    ),
    MoodTag.MYSTERIOUS: (
        ("Mystery", "Thriller", "Crime", "Science Fiction", "Horror"),
        ("Comedy", "Family", "Romance", "Animation"),
    ),
    MoodTag.NOSTALGIC: (
        ("Drama", "History", "War", "Western", "Music"),
        ("Comedy", "Family", "Science Fiction", "Fantasy"),
    ),
    MoodTag.CURIOUS: (
        ("Documentary", "Mystery", "Science Fiction", "History", "Thriller"),
        ("Comedy", "Adventure", "Fantasy", "Romance"),
    ),
    MoodTag.WHOLESOME: (
        ("Family", "Animation", "Drama", "Comedy", "Fantasy"),
        ("Thriller", "Horror", "Crime", "War", "Action"),
    ),
    MoodTag.COZY: (
        ("Romance", "Drama", "Comedy", "Family", "Animation"),
        ("Action", "Adventure", "Horror", "Thriller", "War"),
    ),
    MoodTag.EDGY: (
        ("Crime", "Thriller", "Horror", "War", "Mystery"),
        ("Comedy", "Family", "Animation", "Music", "Romance"),
    ),
    MoodTag.BORED: (
        ("Action", "Adventure", "Comedy", "Thriller", "Science Fiction"),
        ("Drama", "Documentary", "Romance", "History"),
    ),
    MoodTag.MOTIVATED: (
        ("Drama", "Documentary", "Action", "Adventure", "History"),
        ("Horror", "Thriller", "Romance", "Comedy"),
    ),
    MoodTag.LONELY: (
        ("Romance", "Drama", "Comedy", "Family"),
        ("Action", "Adventure", "Horror", "Thriller"),
    ),
    MoodTag.HOPEFUL: (
        ("Drama", "Family", "Animation", "Fantasy", "Adventure"),
        ("Horror", "Thriller", "Crime", "War"),
    ),
    MoodTag.MELANCHOLIC: (
        ("Drama", "Romance", "War", "History", "Music"),
        ("Comedy", "Animation", "Family", "Adventure", "Fantasy"),
    ),
    MoodTag.PLAYFUL: (
        ("Comedy", "Animation", "Family", "Adventure", "Fantasy"),
        ("Drama", "Horror", "Thriller", "War", "Crime"),
    ),
}

# mood -> (match keywords, address keywords); single lowercase words only
MOOD_KEYWORD_HINTS: Dict[MoodTag, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    MoodTag.HAPPY: (
        ("joy", "uplift", "laugh", "warm", "cheerful", "celebration"),
        ("melancholy", "quiet", "introspect", "somber", "reflective"),
    ),
    MoodTag.SAD: (
        ("tearjerker", "melancholy", "poignant", "grief", "heartbreak", "bittersweet"),
        ("uplift", "comedy", "feelgood", "sunny", "cheerful", "hopeful"),
    ),
    MoodTag.ROMANTIC: (
        ("love", "chemistry", "romance", "passion", "relationship"),
        ("adventure", "action", "friendship", "mystery", "journey"),
    ),
    MoodTag.EXCITED: (
        ("thrill", "adrenaline", "chase", "explosive", "intense"),
        ("calm", "quiet", "peaceful", "gentle", "meditative"),
    ),
    MoodTag.RELAXED: (
        ("calm", "soothing", "gentle", "peaceful", "serene"),
        ("energetic", "thrill", "intense", "chaotic", "explosive"),
    ),
    MoodTag.ANGRY: (
        ("rage", "vengeance", "conflict", "justice", "fight"),
        ("calm", "healing", "forgiveness", "gentle", "harmony"),
    ),
    MoodTag.SCARED: (
        ("terror", "creepy", "suspense", "eerie", "haunting", "nightmare"),
        ("wholesome", "family", "cozy", "cheerful", "comforting"),
    ),
    MoodTag.ADVENTUROUS: (
        ("quest", "epic", "journey", "explore", "expedition", "treasure"),
        ("intimate", "quiet", "domestic", "simple", "everyday"),
    ),
    MoodTag.MYSTERIOUS: (
        ("puzzle", "twist", "detective", "clue", "whodunit", "conspiracy"),
        ("feelgood", "funny", "lighthearted", "simple", "straightforward"),
    ),
    MoodTag.NOSTALGIC: (
        ("memory", "retro", "vintage", "childhood", "classic"),
        ("modern", "fresh", "contemporary", "futuristic", "innovative"),
    ),
    MoodTag.CURIOUS: (
        ("discover", "explore", "investigate", "reveal", "uncover"),
        ("escape", "fantasy", "romance", "familiar", "lighthearted"),
    ),
    MoodTag.WHOLESOME: (
        ("gentle", "heartwarming", "uplift", "family", "kind"),
        ("gritty", "thriller", "dark", "intense", "edgy"),
    ),
    MoodTag.COZY: (
        ("warm", "comfort", "snug", "homey", "gentle"),
        ("adrenaline", "epic", "action", "thrill", "explosive"),
    ),
    MoodTag.EDGY: (
        ("gritty", "raw", "provocative", "noir", "dark"),
        ("cheerful", "comedy", "wholesome", "innocent", "light"),
    ),
    MoodTag.BORED: (
        ("exciting", "gripping", "unpredictable", "thrilling", "captivating"),
        ("quiet", "contemplative", "meditative", "subtle", "reflective"),
    ),
    MoodTag.MOTIVATED: (
        ("inspiring", "triumph", "determination", "perseverance", "underdog"),
        ("relaxing", "escapist", "whimsical", "dreamy", "carefree"),
    ),
    MoodTag.LONELY: (
        ("connection", "companionship", "friendship", "belonging", "reunion"),
        ("solitude", "independence", "solo", "introspective", "self"),
    ),
    MoodTag.HOPEFUL: (
        ("optimistic", "uplifting", "inspiring", "renewal", "redemption"),
        ("cynical", "dark", "bleak", "dystopian", "grim"),
    ),
    MoodTag.MELANCHOLIC: (
        ("wistful", "longing", "bittersweet", "reflective", "elegiac"),
        ("upbeat", "energetic", "vibrant", "lively", "cheerful"),
    ),
    MoodTag.PLAYFUL: (
        ("whimsical", "silly", "quirky", "mischievous", "witty"),
        ("serious", "somber", "heavy", "intense", "dramatic"),
    ),
}

# Ordered tone vocabulary; the first whole-word hit wins
TONE_TO_MOOD: Tuple[Tuple[str, MoodTag], ...] = (
    # sadness
    ("sad", MoodTag.SAD),
    ("blue", MoodTag.SAD),
    ("depressed", MoodTag.SAD),
    ("heartbroken", MoodTag.SAD),
    ("grief", MoodTag.SAD),
    ("mourning", MoodTag.SAD),
    ("sorrowful", MoodTag.SAD),
    ("devastated", MoodTag.SAD),
    ("miserable", MoodTag.SAD),
    ("dejected", MoodTag.SAD),
    ("melancholic", MoodTag.MELANCHOLIC),
    ("melancholy", MoodTag.MELANCHOLIC),
    ("wistful", MoodTag.MELANCHOLIC),
    ("bittersweet", MoodTag.MELANCHOLIC),
    ("pensive", MoodTag.MELANCHOLIC),
    ("reflective", MoodTag.MELANCHOLIC),
    # anger
    ("angry", MoodTag.ANGRY),
    ("mad", MoodTag.ANGRY),
    ("frustrated", MoodTag.ANGRY),
    ("furious", MoodTag.ANGRY),
    ("rage", MoodTag.ANGRY),
    ("annoyed", MoodTag.ANGRY),
    ("irritated", MoodTag.ANGRY),
    ("outraged", MoodTag.ANGRY),
    ("resentful", MoodTag.ANGRY),
    ("vengeful", MoodTag.ANGRY),
    # fear
    ("scared", MoodTag.SCARED),
    ("afraid", MoodTag.SCARED),
    ("anxious", MoodTag.SCARED),
    ("tense", MoodTag.SCARED),
    ("nervous", MoodTag.SCARED),
    ("worried", MoodTag.SCARED),
    ("terrified", MoodTag.SCARED),
    ("frightened", MoodTag.SCARED),
    ("uneasy", MoodTag.SCARED),
    ("paranoid", MoodTag.SCARED),
    # joy and excitement
    ("excited", MoodTag.EXCITED),
    ("thrilled", MoodTag.EXCITED),
    ("pumped", MoodTag.EXCITED),
    ("energized", MoodTag.EXCITED),
    ("hyped", MoodTag.EXCITED),
    ("enthusiastic", MoodTag.EXCITED),
    ("happy", MoodTag.HAPPY),
    ("joyful", MoodTag.HAPPY),
    ("cheerful", MoodTag.HAPPY),
    ("delighted", MoodTag.HAPPY),
    ("elated", MoodTag.HAPPY),
    ("ecstatic", MoodTag.HAPPY),
    ("gleeful", MoodTag.HAPPY),
    ("playful", MoodTag.PLAYFUL),
    ("silly", MoodTag.PLAYFUL),
    ("goofy", MoodTag.PLAYFUL),
    ("whimsical", MoodTag.PLAYFUL),
    # calm
    ("relaxed", MoodTag.RELAXED),
    ("calm", MoodTag.RELAXED),
    ("chill", MoodTag.RELAXED),
    ("peaceful", MoodTag.RELAXED),
    ("serene", MoodTag.RELAXED),
    ("tranquil", MoodTag.RELAXED),
    ("mellow", MoodTag.RELAXED),
    ("laid-back", MoodTag.RELAXED),
    ("cozy", MoodTag.COZY),
    ("snug", MoodTag.COZY),
    ("cuddly", MoodTag.COZY),
    # nostalgia
    ("nostalgic", MoodTag.NOSTALGIC),
    ("reminiscing", MoodTag.NOSTALGIC),
    ("throwback", MoodTag.NOSTALGIC),
    ("sentimental", MoodTag.NOSTALGIC),
    ("longing", MoodTag.NOSTALGIC),
    # romance
    ("romantic", MoodTag.ROMANTIC),
    ("in love", MoodTag.ROMANTIC),
    ("affectionate", MoodTag.ROMANTIC),
    ("passionate", MoodTag.ROMANTIC),
    ("smitten", MoodTag.ROMANTIC),
    # everything else
    ("wholesome", MoodTag.WHOLESOME),
    ("heartwarming", MoodTag.WHOLESOME),
    ("curious", MoodTag.CURIOUS),
    ("inquisitive", MoodTag.CURIOUS),
    ("intrigued", MoodTag.CURIOUS),
    ("adventurous", MoodTag.ADVENTUROUS),
    ("daring", MoodTag.ADVENTUROUS),
    ("brave", MoodTag.ADVENTUROUS),
    ("mysterious", MoodTag.MYSTERIOUS),
    ("enigmatic", MoodTag.MYSTERIOUS),
    ("cryptic", MoodTag.MYSTERIOUS),
    ("edgy", MoodTag.EDGY),
    ("rebellious", MoodTag.EDGY),
    ("provocative", MoodTag.EDGY),
    ("bored", MoodTag.BORED),
    ("restless", MoodTag.BORED),
    ("listless", MoodTag.BORED),
    ("motivated", MoodTag.MOTIVATED),
    ("inspired", MoodTag.MOTIVATED),
    ("determined", MoodTag.MOTIVATED),
    ("ambitious", MoodTag.MOTIVATED),
    ("lonely", MoodTag.LONELY),
    ("isolated", MoodTag.LONELY),
    ("lonesome", MoodTag.LONELY),
    ("hopeful", MoodTag.HOPEFUL),
    ("optimistic", MoodTag.HOPEFUL),
    ("uplifted", MoodTag.HOPEFUL),
)

_TONE_PATTERNS = tuple(
    (re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE), mood)
    for word, mood in TONE_TO_MOOD
)

# "I'm feeling X" style statements take priority over loose word hits
_EXPLICIT_PATTERNS = (
    re.compile(r"(?:i'?m|i am)\s+(?:feeling|in a|so|really|very|super|pretty)\s+(\w+)", re.IGNORECASE),
    re.compile(r"(?:i feel|feeling)\s+(?:so|really|very|super|pretty)?\s*(\w+)", re.IGNORECASE),
    re.compile(r"(?:my mood is|current mood|mood:|feeling:)\s+(\w+)", re.IGNORECASE),
    re.compile(r"(?:i'm|i am)\s+(\w+)\s+(?:right now|today|tonight|this evening)", re.IGNORECASE),
)

_CONTEXT_PATTERNS = tuple(
    (re.compile(pattern, re.IGNORECASE), mood)
    for pattern, mood in (
        (r"need\s+(?:a\s+)?good\s+cry|want\s+to\s+cry|make\s+me\s+cry", MoodTag.SAD),
        (r"going\s+through\s+(?:a\s+)?breakup|just\s+broke\s+up|relationship\s+ended", MoodTag.SAD),
        (r"cheer\s+me\s+up|lift\s+my\s+spirits|brighten\s+my\s+day", MoodTag.HAPPY),
        (r"celebrat\w*|good\s+news", MoodTag.HAPPY),
        (r"\blaugh|funny|comedy", MoodTag.HAPPY),
        (r"wind\s+down|unwind|de-?stress|decompress", MoodTag.RELAXED),
        (r"after\s+(?:a\s+)?long\s+(?:day|week)|\btired\b|exhausted", MoodTag.RELAXED),
        (r"lazy\s+(?:day|evening|afternoon)|rainy\s+day", MoodTag.COZY),
        (r"blood\s+pumping|adrenaline|action-packed|edge\s+of\s+my\s+seat", MoodTag.EXCITED),
        (r"spook\s+me|scare\s+me|terrify\s+me|give\s+me\s+chills", MoodTag.SCARED),
        (r"date\s+night|anniversary|romantic\s+evening|valentine", MoodTag.ROMANTIC),
        (r"love\s+story|romance", MoodTag.ROMANTIC),
        (r"good\s+old\s+days|reminds?\s+me\s+of|childhood|growing\s+up", MoodTag.NOSTALGIC),
        (r"\bclassic|vintage|retro|old\s+school", MoodTag.NOSTALGIC),
        (r"make\s+me\s+think|thought-provoking|documentary|educational", MoodTag.CURIOUS),
        (r"mystery|puzzle|detective|whodunit", MoodTag.MYSTERIOUS),
        (r"blow\s+off\s+steam|\bvent\b|revenge|payback", MoodTag.ANGRY),
        (r"nothing\s+to\s+do|kill\s+time|pass\s+the\s+time", MoodTag.BORED),
        (r"need\s+(?:some\s+)?inspiration|motivate\s+me|underdog|comeback", MoodTag.MOTIVATED),
        (r"need\s+company|miss\s+people|companionship", MoodTag.LONELY),
        (r"need\s+hope|something\s+uplifting|fresh\s+start|second\s+chance", MoodTag.HOPEFUL),
        (r"feel-good|family-friendly", MoodTag.WHOLESOME),
        (r"adventure|explore|journey|\bquest\b", MoodTag.ADVENTUROUS),
    )
)

_KEEP_VERBS = r"(?:stay|keep|remain|want to be|want to stay|prefer to be)"


@dataclass(frozen=True)
class HintSet:
    """Suggestive keywords and genres for one response mode."""

    keywords: Tuple[str, ...] = ()
    genres: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MoodHints:
    """Hints for both response modes of one mood."""

    mood: Optional[MoodTag] = None
    match: HintSet = field(default_factory=HintSet)
    address: HintSet = field(default_factory=HintSet)

    def for_mode(self, mode: MoodResponseMode) -> HintSet:
        return self.address if mode == ADDRESS else self.match


def _mood_tag(mood: Optional[str]) -> Optional[MoodTag]:
    if isinstance(mood, MoodTag):
        return mood
    return MoodTag.from_label(mood)


def infer_mood_from_text(text: str) -> Optional[MoodTag]:
    """
    Guess the user's mood from free text.

    Tries explicit statements ("I'm feeling down"), then the ordered tone
    vocabulary, then contextual phrases ("date night", "wind down"). The
    first match wins, so list order is the tie-break.
    """
    if not text:
        return None

    for pattern in _EXPLICIT_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        word = match.group(1).lower()
        for key, mood in TONE_TO_MOOD:
            if key == word or key in word:
                return mood

    for pattern, mood in _TONE_PATTERNS:
        if pattern.search(text):
            return mood

    for pattern, mood in _CONTEXT_PATTERNS:
        if pattern.search(text):
            return mood

    return None


def explicit_keep_mood(text: str, mood: Optional[str]) -> bool:
    """True if the text asks to stay/keep/remain in the given mood."""
    if not text or not mood:
        return False
    label = re.escape(str(getattr(mood, "value", mood)).strip().lower())
    if not label:
        return False
    pattern = rf"\b{_KEEP_VERBS}\b[\s\w]{{0,20}}\b{label}\b"
    return re.search(pattern, text, re.IGNORECASE) is not None


def resolve_hints(mood: Optional[str]) -> MoodHints:
    """Up to 4 hint keywords and 2 hint genres per response mode for a mood."""
    tag = _mood_tag(mood)
    if tag is None:
        return MoodHints()
    match_words, address_words = MOOD_KEYWORD_HINTS.get(tag, ((), ()))
    match_genres, address_genres = MOOD_GENRE_BRIDGE.get(tag, ((), ()))
    return MoodHints(
        mood=tag,
        match=HintSet(match_words[:MAX_HINT_KEYWORDS], match_genres[:MAX_HINT_GENRES]),
        address=HintSet(address_words[:MAX_HINT_KEYWORDS], address_genres[:MAX_HINT_GENRES]),
    )


def genres_for_mood(mood: Optional[str], mode: MoodResponseMode = MATCH) -> List[str]:
    """Canonical genres bridging a mood for the given response mode (at most 4)."""
    tag = _mood_tag(mood)
    if tag is None:
        return []
    match_genres, address_genres = MOOD_GENRE_BRIDGE[tag]
    picked = address_genres if mode == ADDRESS else match_genres
    return list(picked[:MAX_MOOD_GENRES])


def reference_guide() -> Dict[str, Dict[str, List[str]]]:
    """Compact mood -> genre table embedded in the generation prompt."""
    return {
        tag.value: {MATCH.value: list(match), ADDRESS.value: list(address)}
        for tag, (match, address) in MOOD_GENRE_BRIDGE.items()
    }
