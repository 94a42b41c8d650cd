"""
Unit tests for the confidence scorer.
"""

import pytest

from loadspec.parsing.scorer import (
    MAX_STANDALONE_SCORE,
    SIGNAL_WEIGHTS,
    Signals,
    can_parse,
    detect_signals,
    score,
    weighted_sum,
)

RICH_DESCRIPTION = (
    "POST https://api.example.com/users with 50 users at 20 rps for 5 minutes\n"
    "Authorization: Bearer x\n"
    '{"name": "a"}\n'
    "spike test"
)


class TestDetectSignals:
    """Test suite for indicator detection."""

    def test_empty_text_has_no_signals(self):
        assert detect_signals("").present() == []
        assert detect_signals("   \n ").present() == []

    def test_verb_and_url(self):
        signals = detect_signals("POST https://api.example.com/users")
        assert signals.present() == ["scheme_url", "explicit_verb"]
        assert signals.has_target is True
        assert signals.has_load is False

    def test_keyword_verb_only_without_explicit_verb(self):
        assert detect_signals("send data to https://api.example.com").keyword_verb is True
        assert detect_signals("POST and send to https://api.example.com").keyword_verb is False

    def test_load_numbers_inside_json_body_ignored(self):
        signals = detect_signals('POST https://x.io/a\n{"note": "50 users for 5 minutes"}')
        assert signals.virtual_users is False
        assert signals.duration is False
        assert signals.body_on_mutating is True

    def test_zero_values_do_not_count(self):
        signals = detect_signals("GET https://api.example.com with 0 users for 0 minutes")
        assert signals.virtual_users is False
        assert signals.duration is False

    def test_port_is_not_a_duration(self):
        assert detect_signals("GET http://localhost:8080/health").duration is False

    def test_headers_block_counts_as_header_signal(self):
        signals = detect_signals('GET https://api.example.com\nheaders: {"X-Trace": "1"}')
        assert signals.header_block is True
        assert signals.body_on_mutating is False

    def test_prose_label_is_not_a_header_signal(self):
        assert detect_signals("Description: hit the checkout flow").header_block is False
        assert detect_signals("GET https://api.example.com with x-api-key abc123").header_block is True

    def test_bare_host_counts_as_target(self):
        signals = detect_signals("hit api.example.com hard")
        assert signals.path_or_host is True

    def test_file_name_is_not_a_host(self):
        assert detect_signals("see config.json").path_or_host is False

    def test_trend_and_test_type(self):
        signals = detect_signals("gradually ramp into a stress test")
        assert signals.trend_word is True
        assert signals.test_type is True


class TestScore:
    """Test suite for the standalone score."""

    def test_no_signal_scores_zero(self):
        assert score("") == 0.0
        assert score("do something vague") == 0.0

    def test_verb_and_url(self):
        assert score("POST https://api.example.com/users") == pytest.approx(0.5)

    def test_score_is_capped(self):
        assert weighted_sum(detect_signals(RICH_DESCRIPTION)) > MAX_STANDALONE_SCORE
        assert score(RICH_DESCRIPTION) == MAX_STANDALONE_SCORE

    @pytest.mark.parametrize(
        "weaker,stronger",
        [
            ("", "GET https://api.example.com"),
            ("send data to https://api.example.com", "POST https://api.example.com"),
            ("GET https://api.example.com/users", "GET https://api.example.com/users with 50 users"),
            (
                "GET https://api.example.com/users with 50 users",
                "GET https://api.example.com/users with 50 users for 5 minutes",
            ),
            ("POST https://api.example.com/users", "POST https://api.example.com/users\nAuthorization: Bearer abc"),
            ("POST https://api.example.com/users", 'POST https://api.example.com/users\n{"name": "a"}'),
        ],
    )
    def test_more_structure_never_scores_lower(self, weaker, stronger):
        assert score(stronger) > score(weaker)

    def test_weights_cover_every_signal(self):
        assert set(SIGNAL_WEIGHTS) == set(Signals.__dataclass_fields__)


class TestCanParse:
    def test_threshold(self):
        assert can_parse("GET https://api.example.com", 0.1) is True
        assert can_parse("GET https://api.example.com", 0.6) is False

    def test_zero_score_never_parses(self):
        assert can_parse("", 0.0) is False
        assert can_parse("do something vague", 0.0) is False
