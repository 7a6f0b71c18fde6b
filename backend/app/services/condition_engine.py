"""
condition_engine.py — Conditional display rules for configurator steps.

Covers:
  - Dot-path lookup into the selections bag (``typeAndSize.dimensions.width``)
  - Single field comparisons: equals / notEquals / in / notIn
  - showIf / hideIf resolution for one category

Rules are admin-configured data, so lookup is dynamic by design of the data.
Everything here is pure: no I/O, no state, never raises on odd input.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from app.models.configurator_schema import Condition, ConditionalLogic

logger = logging.getLogger("configurator-conditions")


class _Missing:
    """Sentinel for a dot-path that does not resolve. Distinct from None."""

    _instance: Optional["_Missing"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

EQUALS = "equals"
NOT_EQUALS = "notEquals"
IN = "in"
NOT_IN = "notIn"
OPERATORS = (EQUALS, NOT_EQUALS, IN, NOT_IN)


def get_field_value(selections: Any, field_path: str) -> Any:
    """
    Walk a dot-separated path through nested mappings (and list indices).

    Returns MISSING as soon as a segment is absent or the current value is
    not indexable.
    """
    current = selections
    for part in field_path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return MISSING
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def _strict_equals(a: Any, b: Any) -> bool:
    # bool is an int subclass; True must not equal 1
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if a is MISSING or b is MISSING:
        return a is b
    # Container operands never compare equal, even with equal contents
    if isinstance(a, (list, tuple, dict)) or isinstance(b, (list, tuple, dict)):
        return False
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    if type(a) is not type(b):
        return False
    return a == b


def _contains(target: Union[list, tuple], value: Any) -> bool:
    return any(_strict_equals(item, value) for item in target)


def evaluate_condition(field_value: Any, operator: str, target_value: Any) -> bool:
    """Compare one field value against a target. Unknown operators fail closed."""
    if operator == EQUALS:
        return _strict_equals(field_value, target_value)
    if operator == NOT_EQUALS:
        return not _strict_equals(field_value, target_value)
    if operator == IN:
        return isinstance(target_value, (list, tuple)) and _contains(target_value, field_value)
    if operator == NOT_IN:
        return isinstance(target_value, (list, tuple)) and not _contains(target_value, field_value)
    logger.debug("Unknown condition operator %r evaluated as false", operator)
    return False


def _coerce_rules(rules: Any) -> Optional[ConditionalLogic]:
    if rules is None or isinstance(rules, ConditionalLogic):
        return rules
    if isinstance(rules, Mapping):
        try:
            return ConditionalLogic.model_validate(rules)
        except ValidationError as e:
            logger.warning("Ignoring malformed conditional display rules: %s", e)
    return None


def _holds(condition: Condition, selections: Any) -> bool:
    value = get_field_value(selections, condition.field)
    return evaluate_condition(value, condition.operator, condition.value)


def evaluate_conditional_logic(rules: Any, selections: Any) -> bool:
    """
    Decide whether a category is visible for the current selections.

    showIf: every condition must hold, otherwise hidden (hideIf not consulted).
    hideIf: any condition holding hides the category, overriding showIf.
    No rules means visible.
    """
    logic = _coerce_rules(rules)
    if logic is None:
        return True

    if logic.show_if is not None:
        if not all(_holds(c, selections) for c in logic.show_if):
            return False

    if logic.hide_if is not None:
        if any(_holds(c, selections) for c in logic.hide_if):
            return False

    return True
