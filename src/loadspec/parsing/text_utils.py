"""
Text processing utilities for the extraction cascade.

Provides input normalisation, JSON block discovery and repair, span masking
and sentence-boundary truncation. Every function here is total: garbled
input yields a best-effort result, never an exception.
"""

import json
import re
from typing import Optional

# C0 controls except \t \n \r, plus DEL
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_QUOTE_TRANSLATION = str.maketrans(
    {
        "“": '"',
        "”": '"',
        "„": '"',
        "‟": '"',
        "«": '"',
        "»": '"',
        "‘": "'",
        "’": "'",
        "‚": "'",
        "‛": "'",
        "\u2013": "-",
        "\u2014": "-",
        "…": "...",
    }
)


def fold_quotes(text: str) -> str:
    """Replace typographic quotes, dashes and ellipses with ASCII equivalents."""
    return text.translate(_QUOTE_TRANSLATION)


def normalize_input(text: Optional[str], max_chars: int) -> tuple[str, bool]:
    """
    Prepare raw user text for extraction.

    Unifies line endings to \\n, replaces control characters with spaces,
    folds typographic punctuation to ASCII and caps the length.

    Args:
        text: Raw input (None is treated as empty)
        max_chars: Maximum number of characters kept

    Returns:
        Tuple of (normalised text, whether truncation was applied)
    """
    if not text:
        return "", False

    cleaned = str(text).replace("\r\n", "\n").replace("\r", "\n")
    cleaned = fold_quotes(_CONTROL_CHARS.sub(" ", cleaned))
    if len(cleaned) > max_chars:
        return cleaned[:max_chars], True
    return cleaned, False


def truncate_at_sentence_boundary(text: str, max_chars: int) -> str:
    """
    Truncate text at the nearest sentence boundary before max_chars.

    Looks for sentence-ending punctuation (. ! ?) followed by whitespace or end.

    Args:
        text: Text to truncate
        max_chars: Maximum character count

    Returns:
        Truncated text ending at a sentence boundary, or hard-truncated if
        no sentence boundary found within the limit.

    Examples:
        >>> truncate_at_sentence_boundary("Hello. World. Test.", 15)
        'Hello. World.'
    """
    if len(text) <= max_chars:
        return text

    truncated_segment = text[:max_chars]
    matches = list(re.finditer(r"[.!?](?:\s|$)", truncated_segment))

    if matches:
        cutoff = matches[-1].end()
        if truncated_segment[cutoff - 1:cutoff].isspace():
            cutoff -= 1
        return text[:cutoff]

    # Avoid cutting a word in half when a space is close enough to the limit
    last_space = truncated_segment.rfind(" ")
    if last_space > max_chars * 0.8:
        return text[:last_space]

    return text[:max_chars]


def find_json_blocks(text: str) -> list[tuple[int, int]]:
    """
    Locate top-level brace-delimited blocks in text.

    Single pass with a brace stack; double-quoted strings inside braces are
    skipped so that `{"a": "}"}` is one block. Unclosed braces never form a
    block, but complete blocks nested inside them are still returned.

    Args:
        text: Text to scan

    Returns:
        List of (start, end) spans, end exclusive, in reading order
    """
    pairs: list[tuple[int, int]] = []
    stack: list[int] = []
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"' or char == "\n":
                in_string = False
            continue

        if char == '"' and stack:
            in_string = True
        elif char == "{":
            stack.append(index)
        elif char == "}" and stack:
            pairs.append((stack.pop(), index + 1))

    # Keep only outermost closed pairs
    pairs.sort()
    blocks: list[tuple[int, int]] = []
    for start, end in pairs:
        if blocks and start < blocks[-1][1]:
            continue
        blocks.append((start, end))
    return blocks


def repair_json(text: str) -> Optional[str]:
    """
    Try to turn almost-JSON into valid JSON.

    Fixes are applied cumulatively (typographic quotes, trailing commas,
    unquoted keys, single-quoted strings) and the first variant that parses
    is returned.

    Args:
        text: Candidate JSON text

    Returns:
        A string that json.loads accepts, or None if no variant parses
    """
    candidate = text.strip()
    fixes = (
        fold_quotes,
        lambda s: re.sub(r",\s*([}\]])", r"\1", s),
        lambda s: re.sub(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_-]*)\s*:", r'\1"\2":', s),
        lambda s: re.sub(r"'([^'\"\n]*)'", r'"\1"', s),
    )

    if is_valid_json(candidate):
        return candidate

    for fix in fixes:
        candidate = fix(candidate)
        if is_valid_json(candidate):
            return candidate
    return None


def is_valid_json(text: str) -> bool:
    try:
        json.loads(text)
    except (ValueError, RecursionError):
        return False
    return True


def mask_spans(text: str, spans: list[tuple[int, int]]) -> str:
    """
    Blank out spans with spaces, preserving every other character offset.

    Used to hide JSON bodies from header and load-parameter extraction.
    """
    if not spans:
        return text
    chars = list(text)
    for start, end in spans:
        for index in range(max(start, 0), min(end, len(chars))):
            if chars[index] != "\n":
                chars[index] = " "
    return "".join(chars)
