"""
Extraction tiers for the parsing cascade.

Each tier reads raw (normalised) text and either returns an Extraction or
None when it finds too little signal. Tiers are tried in this order:

    1. PatternMatchingTier: verb/URL pairs, headers, bodies, load numbers
    2. KeywordExtractionTier: verb words and trend words, default URL
    3. TemplateTier: unconditional default request

Tiers never assemble the final LoadTestSpec; that is left to SpecAssembler
so that name resolution and defaults are applied the same way for every
tier.
"""

import json
from dataclasses import dataclass, field
from typing import Optional, Protocol
from urllib.parse import urlsplit

from loadspec.config import Settings
from loadspec.models.enums import DurationUnit, HttpMethod, LoadPatternType, ParseMethod, TestType
from loadspec.models.spec_models import Duration, RequestSpec
from loadspec.parsing import patterns
from loadspec.parsing.scorer import split_blocks
from loadspec.parsing.text_utils import find_json_blocks, is_valid_json, mask_spans, repair_json

_TRAILING_PUNCTUATION = ".,;:!?)'\""


@dataclass
class Extraction:
    """
    Raw fields read from the input by a single tier.

    Attributes:
        requests: Requests in reading order (never empty once a tier fires)
        virtual_users: Concurrent users, if stated
        requests_per_second: Target rate, if stated
        duration: Total test duration, if stated
        ramp_up: Ramp-up period, if stated
        test_type: Test intent keyword, if stated
        pattern_type: Load shape implied by the text
        source_url: First URL read from the text (None when defaulted)
        warnings: Defaults applied and repairs made
    """

    requests: list[RequestSpec] = field(default_factory=list)
    virtual_users: Optional[int] = None
    requests_per_second: Optional[int] = None
    duration: Optional[Duration] = None
    ramp_up: Optional[Duration] = None
    test_type: Optional[TestType] = None
    pattern_type: LoadPatternType = LoadPatternType.CONSTANT
    source_url: Optional[str] = None
    warnings: list[str] = field(default_factory=list)


class ExtractionTier(Protocol):
    """A single cascade stage."""

    method: ParseMethod

    def extract(self, text: str) -> Optional[Extraction]:
        """Return an Extraction, or None when the text lacks this tier's signal."""
        ...


@dataclass
class _Target:
    position: int
    url: str
    method: Optional[HttpMethod]
    body: Optional[str] = None


# === Shared helpers ===


def _clean_url(raw: str) -> str:
    url = raw.rstrip(_TRAILING_PUNCTUATION)
    # Keep a closing parenthesis only when the URL opened one
    while url.endswith(")") and url.count("(") < url.count(")"):
        url = url[:-1]
    return url


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def _first_positive(pattern, text: str) -> Optional[tuple[int, str, tuple[int, int]]]:
    """First match of pattern whose numeric group is > 0, as (value, unit, span)."""
    for match in pattern.finditer(text):
        value = int(match.group(1))
        if value > 0:
            unit = match.group(2) if match.re.groups > 1 else ""
            return value, unit, match.span()
    return None


def _to_duration(value: int, unit: str) -> Duration:
    return Duration(value=value, unit=patterns.UNIT_ALIASES.get(unit.lower(), DurationUnit.SECONDS))


def _detect_test_type(text: str) -> Optional[TestType]:
    for test_type, pattern in patterns.TEST_TYPE_PATTERNS:
        if pattern.search(text):
            return test_type
    return None


def _keyword_method(text: str) -> Optional[HttpMethod]:
    """Explicit upper-case verb first, then the verb-word table."""
    explicit = patterns.EXPLICIT_VERB.search(text)
    if explicit is not None:
        return HttpMethod(explicit.group(1))
    match = patterns.METHOD_KEYWORD.search(text)
    if match is None:
        return None
    return patterns.METHOD_KEYWORDS[match.group(1).lower()]


def _read_body(raw: str, warnings: list[str]) -> str:
    """Return a JSON body as written, repaired, or verbatim with a warning."""
    raw = raw.strip()
    if is_valid_json(raw):
        return raw
    repaired = repair_json(raw)
    if repaired is not None:
        warnings.append("Repaired malformed JSON request body")
        return repaired
    warnings.append("Request body is not valid JSON; kept verbatim")
    return raw


def _read_header_block(raw: str, warnings: list[str]) -> dict[str, str]:
    candidate = raw if is_valid_json(raw) else repair_json(raw)
    if candidate is None:
        warnings.append("Could not read headers block; ignored")
        return {}
    parsed = json.loads(candidate)
    if not isinstance(parsed, dict):
        warnings.append("Headers block is not an object; ignored")
        return {}
    return {str(key): str(value) for key, value in parsed.items()}


def _apply_content_type(requests: list[RequestSpec]) -> list[RequestSpec]:
    result = []
    for request in requests:
        has_content_type = any(key.lower() == "content-type" for key in request.headers)
        if request.body is not None and request.method in patterns.MUTATING_METHODS and not has_content_type:
            headers = {**request.headers, "Content-Type": "application/json"}
            request = request.model_copy(update={"headers": headers})
        result.append(request)
    return result


# === Tiers ===


class PatternMatchingTier:
    """
    Regex extraction of explicit structure.

    Fires when at least one request target (scheme URL, verb plus path,
    `url:` prefix, or bare host) or one positive load number is found.
    """

    method = ParseMethod.PATTERN_MATCHING

    def __init__(self, settings: Settings):
        self.default_url = settings.DEFAULT_URL

    def extract(self, text: str) -> Optional[Extraction]:
        if not text.strip():
            return None

        warnings: list[str] = []
        blocks = find_json_blocks(text)
        header_blocks, body_blocks = split_blocks(text, blocks)
        scan = mask_spans(text, blocks)
        url_masked = patterns.SCHEME_URL.sub(lambda m: " " * len(m.group(0)), scan)

        targets = self._find_targets(scan, url_masked, warnings)
        load_fields = self._read_load(url_masked)

        if not targets and all(value is None for value in load_fields):
            return None

        source_url = targets[0].url if targets else None
        if not targets:
            targets = [_Target(position=0, url=self.default_url, method=None)]
            warnings.append(f"No URL found; using default {self.default_url}")

        default_method = self._default_method(scan, targets, body_blocks)
        for target in targets:
            if target.method is None:
                target.method = default_method

        self._attach_bodies(text, scan, targets, body_blocks, warnings)

        headers: dict[str, str] = {}
        for start, end in header_blocks:
            headers.update(_read_header_block(text[start:end], warnings))
        for key, value in patterns.iter_header_pairs(scan):
            headers.setdefault(key, value)

        requests: list[RequestSpec] = []
        seen: set[tuple[HttpMethod, str]] = set()
        for target in sorted(targets, key=lambda t: t.position):
            key = (target.method, target.url)
            if key in seen:
                continue
            seen.add(key)
            requests.append(
                RequestSpec(method=target.method, url=target.url, headers=dict(headers), body=target.body)
            )

        virtual_users, requests_per_second, duration, ramp_up = load_fields
        test_type = _detect_test_type(url_masked)
        if test_type is TestType.SPIKE:
            pattern_type = LoadPatternType.SPIKE
        elif ramp_up is not None or patterns.RAMP_KEYWORD.search(url_masked):
            pattern_type = LoadPatternType.RAMP_UP
        else:
            pattern_type = LoadPatternType.CONSTANT

        return Extraction(
            requests=_apply_content_type(requests),
            virtual_users=virtual_users,
            requests_per_second=requests_per_second,
            duration=duration,
            ramp_up=ramp_up,
            test_type=test_type,
            pattern_type=pattern_type,
            source_url=source_url,
            warnings=warnings,
        )

    def _find_targets(self, scan: str, url_masked: str, warnings: list[str]) -> list[_Target]:
        """Collect request targets in reading order, resolving relative paths."""
        raw_targets: list[tuple[int, int, str, Optional[HttpMethod]]] = []

        def claimed(start: int, end: int) -> bool:
            return any(start < c_end and c_start < end for c_start, c_end, _, _ in raw_targets)

        for match in patterns.VERB_TARGET.finditer(scan):
            raw_targets.append((match.start(2), match.end(2), match.group(2), HttpMethod(match.group(1).upper())))
        for match in patterns.PREFIXED_URL.finditer(scan):
            if not claimed(*match.span(1)):
                raw_targets.append((match.start(1), match.end(1), match.group(1), None))
        for match in patterns.SCHEME_URL.finditer(scan):
            if not claimed(*match.span()):
                raw_targets.append((match.start(), match.end(), match.group(0), None))

        raw_targets.sort(key=lambda item: item[0])
        absolute = [_clean_url(raw) for _, _, raw, _ in raw_targets if raw.lower().startswith(("http://", "https://"))]
        bare_hosts = list(patterns.iter_bare_hosts(url_masked))

        base: Optional[str] = None
        if absolute:
            base = _origin(absolute[0])
        elif bare_hosts:
            base = f"http://{bare_hosts[0].group(1)}{bare_hosts[0].group(2) or ''}"

        targets: list[_Target] = []
        for position, _, raw, method in raw_targets:
            url = _clean_url(raw)
            if url.lower().startswith(("http://", "https://")):
                pass
            elif url.startswith("/"):
                if base is None:
                    base = self.default_url.rstrip("/")
                    warnings.append(f"Relative path {url} resolved against default {base}")
                url = base + url
            elif patterns.BARE_HOST.fullmatch(url):
                url = f"http://{url}"
            else:
                warnings.append(f"Ignored unrecognised target {url!r}")
                continue
            targets.append(_Target(position=position, url=url, method=method))

        if not targets and bare_hosts:
            host = bare_hosts[0]
            url = _clean_url(f"http://{host.group(0)}")
            targets.append(_Target(position=host.start(), url=url, method=None))
            warnings.append(f"Inferred URL {url} from host name")

        return targets

    def _default_method(self, scan: str, targets: list[_Target], body_blocks: list) -> HttpMethod:
        """Method for targets not directly preceded by a verb."""
        paired_positions = {
            match.start(1) for match in patterns.VERB_TARGET.finditer(scan)
        }
        for match in patterns.EXPLICIT_VERB.finditer(scan):
            if match.start(1) not in paired_positions:
                return HttpMethod(match.group(1))
        for match in patterns.METHOD_KEYWORD.finditer(scan):
            if match.start(1) not in paired_positions:
                return patterns.METHOD_KEYWORDS[match.group(1).lower()]
        if body_blocks or patterns.BODY_LINE.search(scan):
            return HttpMethod.POST
        return HttpMethod.GET

    def _attach_bodies(
        self,
        text: str,
        scan: str,
        targets: list[_Target],
        body_blocks: list[tuple[int, int]],
        warnings: list[str],
    ) -> None:
        """Attach each body to the nearest preceding mutating target."""
        bodies = [(start, _read_body(text[start:end], warnings)) for start, end in body_blocks]
        bodies.extend(
            (match.start(1), _read_body(match.group(1), warnings))
            for match in patterns.BODY_LINE.finditer(scan)
        )

        mutating = sorted(
            (t for t in targets if t.method in patterns.MUTATING_METHODS),
            key=lambda t: t.position,
        )
        for position, body in sorted(bodies, key=lambda item: item[0]):
            preceding = [t for t in mutating if t.position < position]
            candidate = preceding[-1] if preceding else (mutating[0] if mutating else None)
            if candidate is None:
                warnings.append("Ignored request body: no POST/PUT/PATCH request to attach it to")
            elif candidate.body is not None:
                warnings.append("Ignored additional request body for the same request")
            else:
                candidate.body = body

    def _read_load(
        self, text: str
    ) -> tuple[Optional[int], Optional[int], Optional[Duration], Optional[Duration]]:
        """Read (virtual users, requests per second, duration, ramp-up) from text."""
        virtual_users = _first_positive(patterns.VIRTUAL_USERS, text) or _first_positive(
            patterns.VIRTUAL_USERS_LABEL, text
        )
        requests_per_second = _first_positive(patterns.REQUESTS_PER_SECOND, text) or _first_positive(
            patterns.REQUESTS_PER_SECOND_LABEL, text
        )

        ramp_up = _first_positive(patterns.RAMP_UP_VALUE, text)
        duration_text = mask_spans(text, [ramp_up[2]]) if ramp_up else text
        duration = _first_positive(patterns.DURATION, duration_text)

        return (
            virtual_users[0] if virtual_users else None,
            requests_per_second[0] if requests_per_second else None,
            _to_duration(duration[0], duration[1]) if duration else None,
            _to_duration(ramp_up[0], ramp_up[1]) if ramp_up else None,
        )


class KeywordExtractionTier:
    """
    Verb-word and trend-word mapping for prose without explicit structure.

    Produces a single request against the default URL.
    """

    method = ParseMethod.KEYWORD_EXTRACTION

    def __init__(self, settings: Settings):
        self.default_url = settings.DEFAULT_URL

    def extract(self, text: str) -> Optional[Extraction]:
        blocks = find_json_blocks(text)
        _, body_blocks = split_blocks(text, blocks)
        scan = mask_spans(text, blocks)

        method = _keyword_method(scan)
        trend = patterns.RAMP_KEYWORD.search(scan)
        test_type = _detect_test_type(scan)
        if method is None and trend is None and test_type is None:
            return None

        warnings = [f"No URL found; using default {self.default_url}"]
        body = None
        if method in patterns.MUTATING_METHODS and body_blocks:
            start, end = body_blocks[0]
            body = _read_body(text[start:end], warnings)

        if test_type is TestType.SPIKE:
            pattern_type = LoadPatternType.SPIKE
        elif trend is not None:
            pattern_type = LoadPatternType.RAMP_UP
        else:
            pattern_type = LoadPatternType.CONSTANT

        request = RequestSpec(method=method or HttpMethod.GET, url=self.default_url, body=body)
        return Extraction(
            requests=_apply_content_type([request]),
            test_type=test_type,
            pattern_type=pattern_type,
            warnings=warnings,
        )


class TemplateTier:
    """Unconditional last resort: one default GET request."""

    method = ParseMethod.TEMPLATE_BASED

    def __init__(self, settings: Settings):
        self.default_url = settings.DEFAULT_URL

    def extract(self, text: str) -> Extraction:
        return Extraction(
            requests=[RequestSpec(method=HttpMethod.GET, url=self.default_url)],
            warnings=[
                "Could not extract load test details from the description; "
                f"using a template GET {self.default_url} request"
            ],
        )
