"""
Unit tests for the extraction tiers.

Each tier is exercised directly, without the cascade, so that the fields it
reads (and the warnings it records) can be asserted precisely.
"""

import pytest

from loadspec.models.enums import DurationUnit, HttpMethod, LoadPatternType, TestType
from loadspec.models.spec_models import Duration
from loadspec.parsing.tiers import KeywordExtractionTier, PatternMatchingTier, TemplateTier


class TestPatternMatchingTier:
    """Test suite for PatternMatchingTier."""

    @pytest.fixture(autouse=True)
    def setup_tier(self, test_settings):
        self.tier = PatternMatchingTier(test_settings)

    def test_no_signal_returns_none(self):
        assert self.tier.extract("do something vague") is None
        assert self.tier.extract("   ") is None

    def test_verb_and_url(self):
        extraction = self.tier.extract("GET https://api.example.com/users")

        assert len(extraction.requests) == 1
        assert extraction.requests[0].method == HttpMethod.GET
        assert extraction.requests[0].url == "https://api.example.com/users"
        assert extraction.source_url == "https://api.example.com/users"
        assert extraction.pattern_type == LoadPatternType.CONSTANT

    def test_requests_kept_in_reading_order(self):
        text = (
            "GET https://api.example.com/users\n"
            "POST https://api.example.com/orders\n"
            "DELETE https://api.example.com/orders/1"
        )
        extraction = self.tier.extract(text)

        assert [(r.method, r.url) for r in extraction.requests] == [
            (HttpMethod.GET, "https://api.example.com/users"),
            (HttpMethod.POST, "https://api.example.com/orders"),
            (HttpMethod.DELETE, "https://api.example.com/orders/1"),
        ]

    def test_duplicate_requests_collapsed(self):
        text = "GET https://api.example.com/a\nGET https://api.example.com/a"
        assert len(self.tier.extract(text).requests) == 1

    def test_trailing_punctuation_stripped_from_url(self):
        extraction = self.tier.extract("Please GET https://api.example.com/users.")
        assert extraction.requests[0].url == "https://api.example.com/users"

    def test_relative_path_resolved_against_first_absolute_url(self):
        extraction = self.tier.extract("GET https://api.example.com/users\nPOST /orders")
        assert extraction.requests[1].url == "https://api.example.com/orders"
        assert extraction.requests[1].method == HttpMethod.POST

    def test_relative_path_without_base_uses_default_url(self):
        extraction = self.tier.extract("GET /health")

        assert extraction.requests[0].url == "http://example.com/health"
        assert any("Relative path /health" in w for w in extraction.warnings)

    def test_prefixed_targets(self):
        text = "url: https://api.test.com\nendpoint: /api/v1/data\nhost: example.com"
        extraction = self.tier.extract(text)

        assert [r.url for r in extraction.requests] == [
            "https://api.test.com",
            "https://api.test.com/api/v1/data",
            "http://example.com",
        ]
        assert all(r.method == HttpMethod.GET for r in extraction.requests)
        assert all(r.headers == {} for r in extraction.requests)

    def test_bare_host_inferred(self):
        extraction = self.tier.extract("Load test server api.example.com with 100 users")

        assert extraction.requests[0].url == "http://api.example.com"
        assert extraction.virtual_users == 100
        assert any("Inferred URL" in w for w in extraction.warnings)

    def test_unpaired_keyword_sets_default_method(self):
        extraction = self.tier.extract("create orders at https://api.example.com/orders")
        assert extraction.requests[0].method == HttpMethod.POST

    def test_load_values_without_target_use_default_url(self):
        extraction = self.tier.extract("run 25 users for 3 minutes")

        assert extraction.requests[0].url == "http://example.com"
        assert extraction.source_url is None
        assert extraction.virtual_users == 25
        assert extraction.duration == Duration(value=3, unit=DurationUnit.MINUTES)
        assert any("No URL found" in w for w in extraction.warnings)

    def test_headers_and_json_body(self):
        text = (
            "POST https://api.example.com/users\n"
            "Content-Type: application/json\n"
            "Authorization: Bearer token123\n"
            '{"name": "John", "email": "john@example.com"}'
        )
        request = self.tier.extract(text).requests[0]

        assert request.headers == {
            "Content-Type": "application/json",
            "Authorization": "Bearer token123",
        }
        assert request.body == '{"name": "John", "email": "john@example.com"}'

    def test_quoted_header_line(self):
        extraction = self.tier.extract('GET https://api.example.com\n"X-Api-Key": "abc"')
        assert extraction.requests[0].headers == {"X-Api-Key": "abc"}

    @pytest.mark.parametrize(
        "text",
        [
            "GET https://api.example.com/users with x-api-key abc123",
            "GET https://api.example.com/users with x-api-key: abc123",
            "GET https://api.example.com/users using X-API-KEY=abc123, 10 users",
        ],
    )
    def test_inline_api_key(self, text):
        extraction = self.tier.extract(text)
        assert extraction.requests[0].headers == {"x-api-key": "abc123"}

    def test_api_key_line_read_once(self):
        extraction = self.tier.extract("GET https://api.example.com\nX-Api-Key: abc")
        assert extraction.requests[0].headers == {"X-Api-Key": "abc"}

    def test_prose_label_is_not_a_header(self):
        text = (
            "GET https://api.example.com/checkout\n"
            "Description: hit the checkout flow\n"
            "Accept: application/json"
        )
        extraction = self.tier.extract(text)

        assert extraction.requests[0].headers == {"Accept": "application/json"}

    def test_headers_block(self):
        extraction = self.tier.extract('GET https://api.example.com\nheaders: {"X-Trace": "1"}')

        assert extraction.requests[0].headers == {"X-Trace": "1"}
        assert extraction.requests[0].body is None

    def test_body_attached_to_preceding_mutating_request(self):
        text = (
            "GET https://api.example.com/users\n"
            "POST https://api.example.com/users\n"
            '{"name": "a"}'
        )
        get_request, post_request = self.tier.extract(text).requests

        assert get_request.body is None
        assert get_request.headers == {}
        assert post_request.body == '{"name": "a"}'
        assert post_request.headers == {"Content-Type": "application/json"}

    def test_body_without_mutating_request_ignored(self):
        extraction = self.tier.extract('GET https://api.example.com/users\n{"name": "a"}')

        assert extraction.requests[0].body is None
        assert any("Ignored request body" in w for w in extraction.warnings)

    def test_malformed_json_body_repaired(self):
        extraction = self.tier.extract("POST https://api.example.com/x\n{name: 'John',}")

        assert extraction.requests[0].body == '{"name": "John"}'
        assert "Repaired malformed JSON request body" in extraction.warnings

    def test_unrepairable_body_kept_verbatim(self):
        extraction = self.tier.extract("POST https://api.example.com/x\n{not json at all}")

        assert extraction.requests[0].body == "{not json at all}"
        assert "Request body is not valid JSON; kept verbatim" in extraction.warnings

    def test_punctuation_noise_between_tokens(self):
        text = "POST,,,https://api.example.com/users,,,\ncontent-type:application/json;;;\n50users 2minutes"
        extraction = self.tier.extract(text)
        request = extraction.requests[0]

        assert request.method == HttpMethod.POST
        assert request.url == "https://api.example.com/users"
        assert request.headers == {"content-type": "application/json"}
        assert extraction.virtual_users == 50
        assert extraction.duration == Duration(value=2, unit=DurationUnit.MINUTES)

    def test_load_values(self):
        extraction = self.tier.extract("GET https://api.example.com with 50 users at 20 rps for 2 hours")

        assert extraction.virtual_users == 50
        assert extraction.requests_per_second == 20
        assert extraction.duration == Duration(value=2, unit=DurationUnit.HOURS)

    def test_zero_values_ignored(self):
        extraction = self.tier.extract("GET https://api.example.com with 0 users for 0 minutes")

        assert extraction.virtual_users is None
        assert extraction.duration is None

    def test_ramp_up_is_not_read_as_duration(self):
        extraction = self.tier.extract(
            "GET https://api.example.com with 100 users for 10 minutes, ramp-up: 30s"
        )

        assert extraction.duration == Duration(value=10, unit=DurationUnit.MINUTES)
        assert extraction.ramp_up == Duration(value=30, unit=DurationUnit.SECONDS)
        assert extraction.pattern_type == LoadPatternType.RAMP_UP

    def test_ramp_word_selects_pattern_only(self):
        extraction = self.tier.extract("GET https://api.example.com, ramp up gradually")

        assert extraction.pattern_type == LoadPatternType.RAMP_UP
        assert extraction.test_type is None
        assert extraction.ramp_up is None

    def test_spike_test(self):
        extraction = self.tier.extract("spike test GET https://api.example.com")

        assert extraction.test_type == TestType.SPIKE
        assert extraction.pattern_type == LoadPatternType.SPIKE

    def test_soak_test_is_endurance(self):
        extraction = self.tier.extract("soak test GET https://api.example.com for 2 hours")
        assert extraction.test_type == TestType.ENDURANCE


class TestKeywordExtractionTier:
    """Test suite for KeywordExtractionTier."""

    @pytest.fixture(autouse=True)
    def setup_tier(self, test_settings):
        self.tier = KeywordExtractionTier(test_settings)

    def test_no_keyword_returns_none(self):
        assert self.tier.extract("do something vague") is None

    @pytest.mark.parametrize(
        "text,method",
        [
            ("create a new user account", HttpMethod.POST),
            ("fetch the product catalogue", HttpMethod.GET),
            ("update the profile", HttpMethod.PUT),
            ("remove old sessions", HttpMethod.DELETE),
            ("HEAD request against the health check", HttpMethod.HEAD),
            ("OPTIONS call to check CORS", HttpMethod.OPTIONS),
            ("POST a new order", HttpMethod.POST),
        ],
    )
    def test_verb_words(self, text, method):
        extraction = self.tier.extract(text)

        assert extraction.requests[0].method == method
        assert extraction.requests[0].url == "http://example.com"
        assert "No URL found; using default http://example.com" in extraction.warnings

    def test_trend_word_selects_ramp_up(self):
        extraction = self.tier.extract("gradually increase the load on the checkout")

        assert extraction.pattern_type == LoadPatternType.RAMP_UP
        assert extraction.requests[0].method == HttpMethod.GET

    def test_body_attached_to_mutating_keyword(self):
        extraction = self.tier.extract('create a user with {"name": "a"}')
        request = extraction.requests[0]

        assert request.method == HttpMethod.POST
        assert request.body == '{"name": "a"}'
        assert request.headers == {"Content-Type": "application/json"}


class TestTemplateTier:
    def test_always_returns_default_request(self, test_settings):
        extraction = TemplateTier(test_settings).extract("")

        assert extraction.requests[0].method == HttpMethod.GET
        assert extraction.requests[0].url == "http://example.com"
        assert len(extraction.warnings) == 1
