"""
Tolerant JSON recovery for generator output.

Models often wrap JSON in prose or code fences, or emit JavaScript/Python
flavoured literals. Recovery runs a fixed sequence of named normalization
passes, applying each to the output of the previous one and attempting a
strict parse after every pass. The first successful parse wins.
"""
import json
import logging
import re
from typing import Any, Callable, List, Optional, Tuple

from cinemood.core.exceptions import ParseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_SMART_QUOTES = {
    "“": '"',
    "”": '"',
    "„": '"',
    "‘": "'",
    "’": "'",
    "‚": "'",
}
_LITERALS_RE = re.compile(r"\b(True|False|None)\b")
_LITERALS = {"True": "true", "False": "false", "None": "null"}
_BARE_KEY_RE = re.compile(r"([\[{,]\s*)([A-Za-z_][\w\-]*)\s*:")
_SINGLE_QUOTED_RE = re.compile(r"([\[{:,]\s*)'([^']*)'")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the text unchanged."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def _balanced_span(text: str, opener: str, closer: str) -> Optional[str]:
    start = text.find(opener)
    if start < 0:
        return None
    depth = 0
    quote: Optional[str] = None
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start:index + 1]
    return None


def extract_balanced_span(text: str) -> str:
    """Cut the outermost balanced object, else array, out of surrounding prose."""
    for opener, closer in (("{", "}"), ("[", "]")):
        span = _balanced_span(text, opener, closer)
        if span is not None:
            return span
    return text


def normalize_quotes(text: str) -> str:
    """Replace typographic quotes with their ASCII equivalents."""
    for smart, plain in _SMART_QUOTES.items():
        text = text.replace(smart, plain)
    return text


def normalize_literals(text: str) -> str:
    """Python True/False/None to JSON true/false/null."""
    return _LITERALS_RE.sub(lambda m: _LITERALS[m.group(1)], text)


def quote_bare_keys(text: str) -> str:
    return _BARE_KEY_RE.sub(lambda m: f'{m.group(1)}"{m.group(2)}":', text)


def single_to_double_quotes(text: str) -> str:
    return _SINGLE_QUOTED_RE.sub(lambda m: m.group(1) + json.dumps(m.group(2)), text)


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


RECOVERY_PASSES: Tuple[Tuple[str, Callable[[str], str]], ...] = (
    ("strip_code_fences", strip_code_fences),
    ("extract_balanced_span", extract_balanced_span),
    ("normalize_quotes", normalize_quotes),
    ("normalize_literals", normalize_literals),
    ("quote_bare_keys", quote_bare_keys),
    ("single_to_double_quotes", single_to_double_quotes),
    ("strip_trailing_commas", strip_trailing_commas),
)


def _try_loads(text: str) -> Tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (ValueError, TypeError):
        return False, None


def recover_json(raw: Optional[str]) -> Any:
    """
    Parse generator output into a JSON value.

    Args:
        raw: Raw completion text

    Returns:
        The decoded JSON value (usually a dict, sometimes a list)

    Raises:
        ParseError: If no recovery pass yields valid JSON
    """
    if raw is None or not str(raw).strip():
        raise ParseError("Empty generator output", raw=raw)

    text = str(raw)
    ok, value = _try_loads(text)
    if ok:
        return value

    applied: List[str] = []
    for name, recovery_pass in RECOVERY_PASSES:
        text = recovery_pass(text)
        applied.append(name)
        ok, value = _try_loads(text)
        if ok:
            logger.debug(f"Recovered generator JSON after passes: {', '.join(applied)}")
            return value

    logger.warning("Generator output is not recoverable as JSON")
    raise ParseError("Output is not valid JSON after recovery", raw=str(raw))
