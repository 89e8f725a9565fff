"""Tests for validation rules."""

import pytest

from sync.errors import ValidationFault
from sync.validation import (
    IdRule, MaxLengthRule, NotNullOrWhiteSpaceRule, NumericRangeRule, PositionRule, RuleCode
)


class TestNotNullOrWhiteSpaceRule:

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_rejects_blank(self, value):
        assert NotNullOrWhiteSpaceRule().validate("old", value) is not None

    def test_accepts_text(self):
        assert NotNullOrWhiteSpaceRule().validate(None, "name") is None


class TestMaxLengthRule:

    def test_boundary(self):
        rule = MaxLengthRule(3)
        assert rule.validate(None, "abc") is None
        assert "3" in rule.validate(None, "abcd")

    def test_none_is_allowed(self):
        assert MaxLengthRule(3).validate(None, None) is None


class TestNumericRangeRule:

    def test_bounds(self):
        rule = NumericRangeRule(0, 359)
        assert rule.validate(None, 0) is None
        assert rule.validate(None, 359) is None
        assert rule.validate(None, -1) is not None
        assert rule.validate(None, 360) is not None

    def test_open_upper_bound(self):
        assert NumericRangeRule(0).validate(None, 10 ** 6) is None

    @pytest.mark.parametrize("value", ["5", True])
    def test_rejects_non_numbers(self, value):
        assert NumericRangeRule(0, 10).validate(None, value) == "Value must be a number."


class TestPositionRule:

    @pytest.mark.parametrize("value", ["top", "bottom", 1, 16384.5])
    def test_accepts(self, value):
        assert PositionRule().validate(None, value) is None

    @pytest.mark.parametrize("value", [None, "middle", 0, -3, False])
    def test_rejects(self, value):
        assert PositionRule().validate(None, value) is not None


class TestIdRule:

    def test_valid_id(self):
        assert IdRule().validate(None, "5f1a2b3c4d5e6f7a8b9c0d1e") is None

    @pytest.mark.parametrize("value", [None, "", "5F1A2B3C4D5E6F7A8B9C0D1E", "5f1a2b3c", "zz1a2b3c4d5e6f7a8b9c0d1e"])
    def test_invalid_ids(self, value):
        assert IdRule().validate(None, value) is not None


def test_rule_codes_are_stable():
    assert [code.value for code in RuleCode] == [
        "not_empty", "max_length", "numeric_range", "position", "id"
    ]


def test_validation_fault_message():
    fault = ValidationFault("not_empty", "Value cannot be empty.", field="name")
    assert str(fault) == "name: Value cannot be empty. (not_empty)"
