"""Partial-update helpers shared by the content services"""
from numbers import Number
from typing import Any, Dict, Iterable, Optional

from teachhub.errors import ValidationFailure


def is_numeric(value: Any) -> bool:
    """True for ints/floats (including 0); bool and None are not numbers here"""
    return isinstance(value, Number) and not isinstance(value, bool)


def has_text(value: Any) -> bool:
    """True for strings that are non-empty after trimming"""
    return isinstance(value, str) and bool(value.strip())


def validate_order(order: Optional[Any]) -> Optional[int]:
    """
    Check an explicit position; None (or a non-number) means "not given".

    Raises:
        ValidationFailure: Negative order
    """
    if not is_numeric(order):
        return None
    if order < 0:
        raise ValidationFailure("Order must be zero or greater")
    return int(order)


def apply_text_updates(target: Any, updates: Dict[str, Any], fields: Iterable[str]) -> list:
    """
    Apply string fields that are non-empty after trimming.

    Empty or whitespace-only values are ignored rather than rejected.

    Returns:
        Names of the fields that changed
    """
    changed = []
    for field in fields:
        value = updates.get(field)
        if has_text(value):
            setattr(target, field, value)
            changed.append(field)
    return changed


def apply_numeric_updates(target: Any, updates: Dict[str, Any], fields: Iterable[str]) -> list:
    """Apply numeric fields whenever a number was supplied, zero included."""
    changed = []
    for field in fields:
        value = updates.get(field)
        if is_numeric(value):
            setattr(target, field, int(value))
            changed.append(field)
    return changed
