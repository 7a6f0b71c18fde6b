"""
validation_engine.py — Structural rules for a submitted furniture configuration.

Covers:
  - Type & size: layout, dimensions, unit, dimension floors, island length,
    sliding-door width
  - Style
  - Corpus / facade materials
  - Countertop + splashback (kitchen only)
  - Hardware (handles required for hinged doors)
  - Wardrobe doors + sliding system (wardrobe only)
  - Internal filling sections (wardrobe only): widths, elements, pantograph
    height, total width vs cabinet width
  - Composite gate per product type

Every validator reads the whole selections bag (cross-field rules), collects
all violations instead of stopping at the first, and never raises on a
missing or oddly-shaped value: a missing value simply fails its rule.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional

from app.config import (
    ISLAND_MIN_LENGTH_MM,
    KITCHEN,
    MIN_DIMENSION_MM,
    PANTOGRAPH_MIN_HEIGHT_MM,
    SLIDING_DOOR_MIN_WIDTH_MM,
    WARDROBE,
)
from app.models.configurator_schema import ValidationResult

logger = logging.getLogger("configurator-validation")

Selections = Mapping[str, Any]
Validator = Callable[[Selections], ValidationResult]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return None


def _present(value: Any) -> bool:
    """Falsy-as-missing: None, False, "", 0 and NaN count as not provided."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return value != 0 and value == value
    return True


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value == value else None
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _fmt_mm(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _require(errors: list[str], obj: Any, key: str, message: str) -> None:
    if not _present(_get(obj, key)):
        errors.append(message)


def _dimensions(selections: Selections) -> Any:
    return _get(_get(selections, "typeAndSize"), "dimensions")


# ---------------------------------------------------------------------------
# Step validators
# ---------------------------------------------------------------------------

def validate_type_and_size(selections: Selections) -> ValidationResult:
    errors: list[str] = []
    type_and_size = _get(selections, "typeAndSize")

    _require(errors, type_and_size, "layoutType", "Layout type is required")

    dimensions = _get(type_and_size, "dimensions")
    if not isinstance(dimensions, Mapping):
        errors.append("Dimensions are required")
        return ValidationResult(errors)

    _require(errors, dimensions, "unit", "Dimension unit is required")

    floor = _fmt_mm(MIN_DIMENSION_MM)
    for key, label in (("length", "Length"), ("width", "Width"), ("height", "Height")):
        value = _number(dimensions.get(key))
        if value and value < MIN_DIMENSION_MM:
            errors.append(f"{label} must be at least {floor}mm")

    length = _number(dimensions.get("length"))
    if _get(type_and_size, "layoutType") == "island" and length and length < ISLAND_MIN_LENGTH_MM:
        errors.append(
            f"Island kitchen requires minimum length of {_fmt_mm(ISLAND_MIN_LENGTH_MM)}mm"
        )

    width = _number(dimensions.get("width"))
    if _get(selections, "doorType") == "sliding" and width and width < SLIDING_DOOR_MIN_WIDTH_MM:
        errors.append(
            f"Sliding door system requires minimum width of {_fmt_mm(SLIDING_DOOR_MIN_WIDTH_MM)}mm"
        )

    return ValidationResult(errors)


def validate_style(selections: Selections) -> ValidationResult:
    errors: list[str] = []
    _require(errors, selections, "style", "Style selection is required")
    return ValidationResult(errors)


def validate_materials(selections: Selections) -> ValidationResult:
    errors: list[str] = []
    corpus = _get(selections, "corpusMaterial")
    facade = _get(selections, "facadeMaterial")

    _require(errors, corpus, "material", "Corpus material type is required")
    _require(errors, facade, "material", "Facade material type is required")
    _require(errors, facade, "finish", "Facade finish is required")
    _require(errors, facade, "color", "Facade color is required")
    _require(errors, facade, "profile", "Facade profile is required")

    return ValidationResult(errors)


def validate_countertop(selections: Selections) -> ValidationResult:
    """Kitchen only."""
    errors: list[str] = []
    countertop = _get(selections, "countertop")

    _require(errors, countertop, "material", "Countertop material is required")
    _require(errors, countertop, "thickness", "Countertop thickness is required")
    _require(errors, _get(selections, "splashback"), "material", "Splashback material is required")

    return ValidationResult(errors)


def validate_hardware(selections: Selections) -> ValidationResult:
    errors: list[str] = []
    hardware = _get(selections, "hardware")

    _require(errors, hardware, "hinges", "Hinge type is required")
    _require(errors, hardware, "drawerSlides", "Drawer slide type is required")
    _require(errors, hardware, "manufacturer", "Hardware manufacturer is required")

    if _get(selections, "doorType") == "hinged":
        _require(errors, hardware, "handles", "Handle type is required for hinged doors")

    return ValidationResult(errors)


def validate_wardrobe_doors(selections: Selections) -> ValidationResult:
    """Wardrobe only."""
    errors: list[str] = []

    _require(errors, selections, "doorType", "Door type is required")

    door_materials = _get(selections, "doorMaterials")
    if not isinstance(door_materials, (list, tuple)) or not door_materials:
        errors.append("At least one door material must be selected")

    if _get(selections, "doorType") == "sliding":
        sliding = _get(selections, "slidingSystem")
        _require(errors, sliding, "type", "Sliding system type is required")
        _require(errors, sliding, "profileColor", "Profile color is required")

    return ValidationResult(errors)


def validate_internal_filling(selections: Selections) -> ValidationResult:
    """
    Wardrobe only.

    Per-section messages carry the 1-based section index. Pantograph lifts
    need the overall wardrobe height, and the sections must fit inside the
    wardrobe width (both default to 0 when dimensions are missing).
    """
    errors: list[str] = []
    sections = _get(selections, "internalFilling")

    if not isinstance(sections, (list, tuple)) or not sections:
        errors.append("Internal filling configuration is required")
        return ValidationResult(errors)

    dimensions = _dimensions(selections)
    wardrobe_height = _number(_get(dimensions, "height")) or 0.0
    wardrobe_width = _number(_get(dimensions, "width")) or 0.0

    total_width = 0.0
    for index, section in enumerate(sections, start=1):
        section_width = _number(_get(section, "sectionWidth"))
        if not section_width or section_width <= 0:
            errors.append(f"Section {index}: Width is required and must be greater than 0")
        total_width += section_width or 0.0

        elements = _get(section, "elements")
        if not isinstance(elements, (list, tuple)) or not elements:
            errors.append(f"Section {index}: At least one filling element is required")
            continue

        for element in elements:
            if _get(element, "type") == "pantograph" and wardrobe_height < PANTOGRAPH_MIN_HEIGHT_MM:
                errors.append(
                    "Pantograph requires minimum wardrobe height of "
                    f"{_fmt_mm(PANTOGRAPH_MIN_HEIGHT_MM)}mm"
                )

    if total_width > wardrobe_width:
        errors.append(
            f"Total section width ({_fmt_mm(total_width)}mm) exceeds "
            f"wardrobe width ({_fmt_mm(wardrobe_width)}mm)"
        )

    return ValidationResult(errors)


# ---------------------------------------------------------------------------
# Composite gate
# ---------------------------------------------------------------------------

COMMON_VALIDATORS: tuple[Validator, ...] = (
    validate_type_and_size,
    validate_style,
    validate_materials,
    validate_hardware,
)

PRODUCT_VALIDATORS: dict[str, tuple[Validator, ...]] = {
    KITCHEN: (validate_countertop,),
    WARDROBE: (validate_wardrobe_doors, validate_internal_filling),
}


def validators_for(product_type: str) -> tuple[Validator, ...]:
    key = getattr(product_type, "value", product_type)
    return COMMON_VALIDATORS + PRODUCT_VALIDATORS.get(key, ())


def validate_complete_configuration(selections: Selections, product_type: str) -> ValidationResult:
    """
    Run every validator that applies to ``product_type`` and concatenate
    their errors in validator order. Valid iff no errors at all.
    """
    if not isinstance(selections, Mapping):
        selections = {}

    result = ValidationResult()
    for validator in validators_for(product_type):
        result = result.merge(validator(selections))

    logger.debug(
        "Validated %s configuration: %d error(s)",
        getattr(product_type, "value", product_type),
        len(result.errors),
    )
    return result
