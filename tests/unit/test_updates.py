"""
Unit tests for partial-update helpers

Blank strings are ignored, numbers (zero included) are applied.
"""
from types import SimpleNamespace

import pytest

from teachhub.errors import ValidationFailure
from teachhub.services.updates import (
    apply_numeric_updates,
    apply_text_updates,
    has_text,
    is_numeric,
    validate_order,
)


class TestIsNumeric:
    def test_zero_is_numeric(self):
        assert is_numeric(0)
        assert is_numeric(0.0)

    def test_bool_and_none_are_not_numeric(self):
        assert not is_numeric(True)
        assert not is_numeric(None)
        assert not is_numeric("3")


class TestHasText:
    def test_blank_strings_have_no_text(self):
        assert not has_text("")
        assert not has_text("  \t")
        assert not has_text(None)
        assert not has_text(3)

    def test_padded_string_has_text(self):
        assert has_text(" zoom ")


class TestValidateOrder:
    def test_zero_and_positive_pass_through(self):
        assert validate_order(0) == 0
        assert validate_order(7) == 7

    def test_missing_order(self):
        assert validate_order(None) is None

    def test_negative_order_rejected(self):
        with pytest.raises(ValidationFailure):
            validate_order(-1)


class TestApplyTextUpdates:
    def test_non_empty_string_wins(self):
        target = SimpleNamespace(title="Old", description="Old description")
        changed = apply_text_updates(target, {"title": "New"}, ("title", "description"))

        assert changed == ["title"]
        assert target.title == "New"
        assert target.description == "Old description"

    def test_blank_values_are_ignored(self):
        target = SimpleNamespace(title="Keep", description="Keep too")
        changed = apply_text_updates(target, {"title": "", "description": "   "}, ("title", "description"))

        assert changed == []
        assert target.title == "Keep"
        assert target.description == "Keep too"

    def test_non_string_values_are_ignored(self):
        target = SimpleNamespace(title="Keep")
        assert apply_text_updates(target, {"title": 5}, ("title",)) == []
        assert target.title == "Keep"


class TestApplyNumericUpdates:
    def test_zero_is_applied(self):
        target = SimpleNamespace(order=4)
        changed = apply_numeric_updates(target, {"order": 0}, ("order",))

        assert changed == ["order"]
        assert target.order == 0

    def test_missing_and_none_leave_value(self):
        target = SimpleNamespace(order=4, duration=120)
        changed = apply_numeric_updates(target, {"duration": None}, ("order", "duration"))

        assert changed == []
        assert target.order == 4
        assert target.duration == 120

    def test_floats_are_truncated_to_int(self):
        target = SimpleNamespace(duration=0)
        apply_numeric_updates(target, {"duration": 90.7}, ("duration",))
        assert target.duration == 90
