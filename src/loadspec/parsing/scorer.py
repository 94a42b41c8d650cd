"""
Confidence scorer for free-form load test descriptions.

A pure function of the raw text: each recognised indicator contributes a
fixed weight, and the standalone score is capped at MAX_STANDALONE_SCORE.
The same weights feed the assembled pipeline confidence (see
loadspec.parsing.assembler), which is allowed to exceed the cap when
several independent fields corroborate each other.

Usage:
    >>> score("POST https://api.example.com/users")
    0.5
    >>> score("do something vague")
    0.0
"""

from dataclasses import dataclass, fields

from loadspec.parsing import patterns
from loadspec.parsing.text_utils import find_json_blocks, mask_spans

MAX_STANDALONE_SCORE = 0.8

SIGNAL_WEIGHTS: dict[str, float] = {
    "scheme_url": 0.3,
    "explicit_verb": 0.2,
    "virtual_users": 0.1,
    "requests_per_second": 0.1,
    "duration": 0.1,
    "header_block": 0.1,
    "body_on_mutating": 0.1,
    "path_or_host": 0.1,
    "keyword_verb": 0.1,
    "trend_word": 0.1,
    "test_type": 0.1,
}


@dataclass(frozen=True)
class Signals:
    """Indicators found in a piece of text, one flag per SIGNAL_WEIGHTS key."""

    scheme_url: bool = False
    explicit_verb: bool = False
    virtual_users: bool = False
    requests_per_second: bool = False
    duration: bool = False
    header_block: bool = False
    body_on_mutating: bool = False
    path_or_host: bool = False
    keyword_verb: bool = False
    trend_word: bool = False
    test_type: bool = False

    def present(self) -> list[str]:
        """Names of the indicators that were found."""
        return [f.name for f in fields(self) if getattr(self, f.name)]

    @property
    def has_target(self) -> bool:
        return self.scheme_url or self.path_or_host

    @property
    def has_load(self) -> bool:
        return self.virtual_users or self.requests_per_second or self.duration


def weighted_sum(signals: Signals) -> float:
    """Uncapped sum of the weights of every present indicator."""
    return round(sum(SIGNAL_WEIGHTS[name] for name in signals.present()), 4)


def _has_positive(pattern, text: str) -> bool:
    return any(int(m.group(1)) > 0 for m in pattern.finditer(text))


def has_header_block(text: str) -> bool:
    return next(patterns.iter_header_pairs(text), None) is not None


def has_bare_host(text: str) -> bool:
    return next(patterns.iter_bare_hosts(text), None) is not None


def split_blocks(text: str, blocks: list[tuple[int, int]]) -> tuple[list, list]:
    """Partition brace blocks into (header blocks, body blocks) by a preceding `headers:` label."""
    header_blocks, body_blocks = [], []
    for start, end in blocks:
        line_start = text.rfind("\n", 0, start) + 1
        if patterns.HEADERS_LABEL.search(text[line_start:start]):
            header_blocks.append((start, end))
        else:
            body_blocks.append((start, end))
    return header_blocks, body_blocks


def detect_signals(text: str) -> Signals:
    """
    Detect every recognised indicator in text.

    JSON blocks are masked before header, load-parameter and path detection
    so that keys inside a request body are not mistaken for directives.

    Args:
        text: Raw or normalised description

    Returns:
        Signals with one flag per indicator
    """
    if not text or not text.strip():
        return Signals()

    blocks = find_json_blocks(text)
    scan = mask_spans(text, blocks)
    # Load numbers are read with URLs hidden so ports and paths do not count
    load_scan = patterns.SCHEME_URL.sub(lambda m: " " * len(m.group(0)), scan)

    explicit_verbs = {m.group(1) for m in patterns.EXPLICIT_VERB.finditer(scan)}
    keyword_verbs = {
        patterns.METHOD_KEYWORDS[m.group(1).lower()] for m in patterns.METHOD_KEYWORD.finditer(scan)
    }
    mutating_names = {m.value for m in patterns.MUTATING_METHODS}
    has_mutating = bool(explicit_verbs & mutating_names) or any(
        m in patterns.MUTATING_METHODS for m in keyword_verbs
    )
    header_blocks, body_blocks = split_blocks(text, blocks)
    has_body = bool(body_blocks) or bool(patterns.BODY_LINE.search(scan))

    return Signals(
        scheme_url=bool(patterns.SCHEME_URL.search(scan)),
        explicit_verb=bool(explicit_verbs),
        virtual_users=_has_positive(patterns.VIRTUAL_USERS, load_scan)
        or _has_positive(patterns.VIRTUAL_USERS_LABEL, load_scan),
        requests_per_second=_has_positive(patterns.REQUESTS_PER_SECOND, load_scan)
        or _has_positive(patterns.REQUESTS_PER_SECOND_LABEL, load_scan),
        duration=_has_positive(patterns.DURATION, load_scan),
        header_block=bool(header_blocks) or has_header_block(scan),
        body_on_mutating=has_body and has_mutating,
        path_or_host=bool(patterns.PATH_TOKEN.search(load_scan)) or has_bare_host(load_scan),
        keyword_verb=bool(keyword_verbs) and not explicit_verbs,
        trend_word=bool(patterns.RAMP_KEYWORD.search(scan)),
        test_type=any(p.search(scan) for _, p in patterns.TEST_TYPE_PATTERNS),
    )


def score(text: str) -> float:
    """
    Score how much recognisable load test structure text contains.

    Args:
        text: Raw description

    Returns:
        0.0 when no indicator is present, otherwise the weighted sum capped
        at MAX_STANDALONE_SCORE
    """
    signals = detect_signals(text)
    if not signals.present():
        return 0.0
    return min(MAX_STANDALONE_SCORE, weighted_sum(signals))


def can_parse(text: str, threshold: float) -> bool:
    """Whether text carries enough signal to be worth parsing."""
    value = score(text)
    return value > 0.0 and value >= threshold
