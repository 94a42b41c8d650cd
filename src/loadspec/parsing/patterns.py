"""
Regex tables and keyword mappings used by the extraction cascade.

Kept in one module so that the matching rules are inspectable (and
testable) independently of the tier logic that applies them.
"""

import re

from loadspec.models.enums import DurationUnit, HttpMethod, TestType

METHOD_NAMES = frozenset(m.value for m in HttpMethod)
MUTATING_METHODS = HttpMethod.mutating()

_METHODS = "|".join(m.value for m in HttpMethod)

# Scheme-qualified URL; stops at whitespace, quotes, brackets and list punctuation
SCHEME_URL = re.compile(r"https?://[^\s,;\"'<>\[\]{}|\\^`]+", re.IGNORECASE)

# `url: x`, `endpoint: x`, `host: x` prefixes (value may lack a scheme)
PREFIXED_URL = re.compile(
    r"\b(?:url|endpoint|host|target)\s*[:=]\s*([^\s,;\"'<>\[\]{}]+)",
    re.IGNORECASE,
)

# VERB followed by an absolute URL or a path, tolerating `,;:` noise in between
VERB_TARGET = re.compile(
    rf"\b({_METHODS})\b[\s,;:]*(?:(?:requests?\s+)?(?:to|against|on|at)\s+)?"
    rf"(https?://[^\s,;\"'<>\[\]{{}}|\\^`]+|/[^\s,;\"'<>\[\]{{}}]*)",
    re.IGNORECASE,
)

# Explicit upper-case verb used as a keyword ("POST to the API")
EXPLICIT_VERB = re.compile(rf"\b({_METHODS})\b")

# Bare host token such as api.example.com or localhost:8080
BARE_HOST = re.compile(
    r"(?<![@\w./-])((?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,24}|localhost)"
    r"(:\d{1,5})?(/[^\s,;\"'<>\[\]{}]*)?(?![\w@-])",
    re.IGNORECASE,
)

# Host tokens that are really file names
FILE_EXTENSIONS = frozenset(
    {"json", "yaml", "yml", "txt", "csv", "xml", "js", "ts", "py", "md", "html", "log", "sh", "har"}
)

# Relative path token (used only by the confidence scorer)
PATH_TOKEN = re.compile(r"(?<![\w/.:])/[A-Za-z0-9_\-{}]+(?:/[A-Za-z0-9_\-{}.]*)*")

_UNIT = r"(hours?|hrs?|h|minutes?|mins?|m|seconds?|secs?|s)"

VIRTUAL_USERS = re.compile(
    r"(?<!\d)(\d{1,9})\s*(?:virtual\s+users?|concurrent\s+users?|users?|vus?|concurrent|parallel)\b",
    re.IGNORECASE,
)

REQUESTS_PER_SECOND = re.compile(
    r"(?<!\d)(\d{1,9})\s*(?:rps|qps|req(?:uest)?s?\s*/\s*s(?:ec(?:ond)?)?|requests?\s+per\s+second)\b",
    re.IGNORECASE,
)

# `users: 50` / `rps = 100` labelled forms
VIRTUAL_USERS_LABEL = re.compile(r"\b(?:virtual[ _-]?users|vus|users|concurrency)\s*[:=]\s*(\d{1,9})(?!\d)", re.IGNORECASE)

REQUESTS_PER_SECOND_LABEL = re.compile(r"\b(?:rps|qps|rate)\s*[:=]\s*(\d{1,9})(?!\d)", re.IGNORECASE)

RAMP_UP_VALUE = re.compile(
    rf"ramp[- ]?up(?:\s+time)?\s*(?:(?:[:=]|of|over|in)\s*)?(\d{{1,9}})\s*{_UNIT}\b",
    re.IGNORECASE,
)

DURATION = re.compile(rf"(?<!\d)(\d{{1,9}})\s*{_UNIT}\b", re.IGNORECASE)

EXPLICIT_NAME = re.compile(r"^[ \t]*(?:name|test)[ \t]*:[ \t]*(\S(?:[^\n]*\S)?)[ \t]*$", re.IGNORECASE | re.MULTILINE)

# `Key: value` header on its own line
HEADER_LINE = re.compile(r"^[ \t]*([A-Za-z][A-Za-z0-9_-]*)[ \t]*:[ \t]*(\S(?:[^\n]*\S)?)[ \t]*$", re.MULTILINE)

# `"Key": "value"` header on its own line
QUOTED_HEADER_LINE = re.compile(r'^[ \t]*"([A-Za-z][A-Za-z0-9_-]*)"[ \t]*:[ \t]*"([^"]*)"[ \t]*(?:,[ \t]*)?$', re.MULTILINE)

# `header X-Api-Key: abc` / `with header X-Api-Key=abc` inline
INLINE_HEADER = re.compile(r"\bheader\s+([A-Za-z][A-Za-z0-9_-]*)\s*[:=]\s*([^\s,;]+)", re.IGNORECASE)

# `x-api-key abc123` / `x-api-key: abc123` written inline in prose
API_KEY_HEADER = re.compile(r"\bx-api-key\b(?:[ \t]*[:=][ \t]*|[ \t]+)([^\s,;\"']+)", re.IGNORECASE)

# Unhyphenated names accepted on `Key: value` lines; anything else reads as prose
COMMON_HEADER_NAMES = frozenset(
    {"accept", "authorization", "connection", "cookie", "expect", "origin", "pragma", "referer", "upgrade"}
)

# Keys that look like headers but are spec directives
RESERVED_KEYS = frozenset(
    {
        "name", "test", "url", "endpoint", "host", "target", "method", "body", "data",
        "payload", "duration", "users", "rps", "ramp-up", "rampup", "ramp", "http", "https",
        "type", "header", "headers", "vus", "concurrency", "rate", "qps", "load", "pattern",
    }
)

# `body: ...` on its own line; a brace block right after the prefix is picked up as a JSON block
BODY_LINE = re.compile(r"^[ \t]*(?:body|payload|data)[ \t]*[:=][ \t]*(\S(?:[^\n]*\S)?)[ \t]*$", re.IGNORECASE | re.MULTILINE)

UNIT_ALIASES = {
    "h": DurationUnit.HOURS,
    "hr": DurationUnit.HOURS,
    "hrs": DurationUnit.HOURS,
    "hour": DurationUnit.HOURS,
    "hours": DurationUnit.HOURS,
    "m": DurationUnit.MINUTES,
    "min": DurationUnit.MINUTES,
    "mins": DurationUnit.MINUTES,
    "minute": DurationUnit.MINUTES,
    "minutes": DurationUnit.MINUTES,
    "s": DurationUnit.SECONDS,
    "sec": DurationUnit.SECONDS,
    "secs": DurationUnit.SECONDS,
    "second": DurationUnit.SECONDS,
    "seconds": DurationUnit.SECONDS,
}

# Ordered: first type with a matching keyword wins
TEST_TYPE_KEYWORDS: list[tuple[TestType, tuple[str, ...]]] = [
    (TestType.SPIKE, ("spike", "burst", "sudden surge")),
    (TestType.STRESS, ("stress", "overload", "breaking point")),
    (TestType.ENDURANCE, ("soak", "endurance", "sustained", "marathon")),
    (TestType.VOLUME, ("volume", "bulk", "high-volume")),
    (TestType.BASELINE, ("baseline", "smoke")),
]

METHOD_KEYWORDS: dict[str, HttpMethod] = {
    "get": HttpMethod.GET,
    "fetch": HttpMethod.GET,
    "read": HttpMethod.GET,
    "retrieve": HttpMethod.GET,
    "list": HttpMethod.GET,
    "view": HttpMethod.GET,
    "browse": HttpMethod.GET,
    "search": HttpMethod.GET,
    "query": HttpMethod.GET,
    "post": HttpMethod.POST,
    "create": HttpMethod.POST,
    "submit": HttpMethod.POST,
    "add": HttpMethod.POST,
    "send": HttpMethod.POST,
    "register": HttpMethod.POST,
    "upload": HttpMethod.POST,
    "insert": HttpMethod.POST,
    "put": HttpMethod.PUT,
    "update": HttpMethod.PUT,
    "replace": HttpMethod.PUT,
    "modify": HttpMethod.PUT,
    "edit": HttpMethod.PUT,
    "patch": HttpMethod.PATCH,
    "delete": HttpMethod.DELETE,
    "remove": HttpMethod.DELETE,
    "destroy": HttpMethod.DELETE,
    "erase": HttpMethod.DELETE,
}

METHOD_KEYWORD = re.compile(r"\b(" + "|".join(METHOD_KEYWORDS) + r")\b", re.IGNORECASE)

RAMP_KEYWORD = re.compile(
    r"\b(gradual(?:ly)?|ramp(?:ing)?(?:[- ]?up)?|increasing|incremental(?:ly)?|step[- ]by[- ]step|progressive(?:ly)?)\b",
    re.IGNORECASE,
)


def keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b", re.IGNORECASE)


TEST_TYPE_PATTERNS: list[tuple[TestType, re.Pattern]] = [
    (test_type, keyword_pattern(keywords)) for test_type, keywords in TEST_TYPE_KEYWORDS
]

# `headers:` label directly before a brace block
HEADERS_LABEL = re.compile(r"\bheaders?\s*(?:[:=]\s*)?$", re.IGNORECASE)

_HOST_PORT_VALUE = re.compile(r"^\d{1,5}(?:/|\s|$)")


def is_header_name(key: str) -> bool:
    """True for keys that read as HTTP header names rather than directives or prose labels."""
    lowered = key.lower()
    if lowered in RESERVED_KEYS or key.upper() in METHOD_NAMES:
        return False
    return "-" in key or lowered in COMMON_HEADER_NAMES


def iter_header_pairs(text: str):
    """
    Yield (name, value) header pairs in reading order.

    `Key: value` lines need a hyphenated key or a common header name, so
    prose such as `Description: hit the checkout flow` is not a header.
    Lines whose key is a directive, an HTTP verb, or whose value is a URL
    or a `host:port` continuation are skipped. An inline `x-api-key` is
    only read where no other header form already covers it.
    """
    found: list[tuple[int, int, str, str]] = []
    for match in HEADER_LINE.finditer(text):
        key, value = match.group(1), match.group(2)
        if not is_header_name(key):
            continue
        if SCHEME_URL.match(value) or _HOST_PORT_VALUE.match(value):
            continue
        found.append((match.start(), match.end(), key, value))
    for pattern in (QUOTED_HEADER_LINE, INLINE_HEADER):
        for match in pattern.finditer(text):
            found.append((match.start(), match.end(), match.group(1), match.group(2)))
    covered = bytearray(len(text))
    for start, end, _, _ in found:
        covered[start:end] = b"\x01" * (end - start)
    for match in API_KEY_HEADER.finditer(text):
        if not covered[match.start()]:
            found.append((match.start(), match.end(), "x-api-key", match.group(1)))

    for _, _, key, value in sorted(found, key=lambda item: item[0]):
        cleaned = value.strip().rstrip(";,").strip().strip("\"'")
        if cleaned:
            yield key, cleaned


def iter_bare_hosts(text: str):
    """Yield BARE_HOST matches that are not file names."""
    for match in BARE_HOST.finditer(text):
        tld = match.group(1).rsplit(".", 1)[-1].lower()
        if tld not in FILE_EXTENSIONS:
            yield match
