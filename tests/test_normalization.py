"""
test_normalization.py — Tests for app/utils/normalization.py

Called by: pytest
Depends on: app/utils/normalization.py
"""

import time

import pytest

from app.utils.normalization import (
    dedupe,
    is_valid_email,
    is_valid_phone,
    like_pattern,
    normalize_category,
    normalize_email,
)


class TestEmail:
    def test_normalize(self):
        assert normalize_email("  Sales@Acme.COM ") == "sales@acme.com"

    def test_blank_is_none(self):
        assert normalize_email("   ") is None
        assert normalize_email(None) is None

    @pytest.mark.parametrize("value", ["a@b.com", "first.last@sub-domain.example.org", "x_y@mail.co"])
    def test_valid(self, value):
        assert is_valid_email(value)

    @pytest.mark.parametrize("value", ["bad-email", "a@b", "@b.com", "a@b.toolong"])
    def test_invalid(self, value):
        assert not is_valid_email(value)

    @pytest.mark.parametrize("value", [
        "a" * 50 + "!",
        "a." * 40 + "!",
        "x@" + "a-" * 40 + "!",
        "x@" + "a." * 40 + "!",
    ])
    def test_long_malformed_rejected_quickly(self, value):
        start = time.perf_counter()
        assert not is_valid_email(value)
        assert time.perf_counter() - start < 0.1

    def test_plus_addressing_and_subdomains(self):
        assert is_valid_email("bids+rfp@mail.acme-supplies.co.uk")


class TestPhone:
    @pytest.mark.parametrize("value", ["+15550100", "4930123456"])
    def test_valid(self, value):
        assert is_valid_phone(value)

    @pytest.mark.parametrize("value", ["0123", "555-0100", "+", "+12345678901234567"])
    def test_invalid(self, value):
        assert not is_valid_phone(value)


def test_category_exact_match_after_trim():
    assert normalize_category(" Software ") == "Software"
    assert normalize_category("software") is None


def test_dedupe_keeps_first_occurrence():
    assert dedupe([3, 1, 3, 2, 1]) == [3, 1, 2]


def test_like_pattern_escapes_wildcards():
    assert like_pattern("50%_off\\") == "%50\\%\\_off\\\\%"
