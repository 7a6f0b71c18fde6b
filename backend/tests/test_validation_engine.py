"""
test_validation_engine.py — Unit tests for configuration rule validators.

Tests cover:
  - Type & size: required fields, 100 mm floors, island length, sliding width
  - Style, materials, countertop, hardware, wardrobe doors
  - Internal filling: per-section checks, pantograph height, total width
  - Composite gate: per-product validator sets, error concatenation order
  - Robustness: missing or oddly-shaped selections never raise

All tests are pure unit tests; no database or external services required.
"""

import copy
import pytest

from app.services.validation_engine import (
    validate_complete_configuration,
    validate_countertop,
    validate_hardware,
    validate_internal_filling,
    validate_materials,
    validate_style,
    validate_type_and_size,
    validate_wardrobe_doors,
    validators_for,
)


def _wardrobe_dims(width=2400, height=2600):
    return {"typeAndSize": {"layoutType": "built-in", "dimensions": {"width": width, "height": height, "unit": "mm"}}}


# ===========================================================================
# Type & size
# ===========================================================================

class TestTypeAndSize:

    def test_empty_selections(self):
        result = validate_type_and_size({})
        assert result.errors == ["Layout type is required", "Dimensions are required"]
        assert result.is_valid is False

    def test_missing_unit(self):
        selections = {"typeAndSize": {"layoutType": "linear", "dimensions": {"length": 2400}}}
        assert validate_type_and_size(selections).errors == ["Dimension unit is required"]

    def test_dimension_floor(self):
        selections = {"typeAndSize": {
            "layoutType": "linear",
            "dimensions": {"length": 99, "width": 50, "height": 2400, "unit": "mm"},
        }}
        assert validate_type_and_size(selections).errors == [
            "Length must be at least 100mm",
            "Width must be at least 100mm",
        ]

    def test_zero_dimension_is_not_floored(self):
        """Zero counts as not provided, so the floor rule does not fire."""
        selections = {"typeAndSize": {"layoutType": "linear", "dimensions": {"length": 0, "unit": "mm"}}}
        assert validate_type_and_size(selections).is_valid

    def test_island_minimum_length(self):
        selections = {"typeAndSize": {"layoutType": "island", "dimensions": {"length": 2800, "unit": "mm"}}}
        assert validate_type_and_size(selections).errors == [
            "Island kitchen requires minimum length of 3000mm",
        ]
        selections["typeAndSize"]["dimensions"]["length"] = 3000
        assert validate_type_and_size(selections).is_valid

    def test_sliding_door_minimum_width(self):
        """width 1100 with sliding doors fails; 1200 passes the same rule."""
        selections = {
            "doorType": "sliding",
            "typeAndSize": {"layoutType": "built-in", "dimensions": {"width": 1100, "unit": "mm"}},
        }
        assert validate_type_and_size(selections).errors == [
            "Sliding door system requires minimum width of 1200mm",
        ]
        selections["typeAndSize"]["dimensions"]["width"] = 1200
        assert validate_type_and_size(selections).is_valid

    def test_narrow_hinged_wardrobe_passes(self):
        selections = {
            "doorType": "hinged",
            "typeAndSize": {"layoutType": "freestanding", "dimensions": {"width": 900, "unit": "mm"}},
        }
        assert validate_type_and_size(selections).is_valid


# ===========================================================================
# Single-step validators
# ===========================================================================

class TestStepValidators:

    def test_style(self):
        assert validate_style({}).errors == ["Style selection is required"]
        assert validate_style({"style": ""}).errors == ["Style selection is required"]
        assert validate_style({"style": "classic"}).is_valid

    def test_materials_collects_every_missing_field(self):
        # One error per checked field: corpus material + four facade fields = 5
        assert validate_materials({}).errors == [
            "Corpus material type is required",
            "Facade material type is required",
            "Facade finish is required",
            "Facade color is required",
            "Facade profile is required",
        ]

    def test_materials_partial_facade(self):
        selections = {
            "corpusMaterial": {"material": "mdf"},
            "facadeMaterial": {"material": "pvc_film", "finish": "matte"},
        }
        assert validate_materials(selections).errors == [
            "Facade color is required",
            "Facade profile is required",
        ]

    def test_countertop(self):
        assert validate_countertop({}).errors == [
            "Countertop material is required",
            "Countertop thickness is required",
            "Splashback material is required",
        ]
        selections = {"countertop": {"material": "hpl", "thickness": 38}, "splashback": {"material": "tile"}}
        assert validate_countertop(selections).is_valid

    def test_hardware(self):
        assert validate_hardware({}).errors == [
            "Hinge type is required",
            "Drawer slide type is required",
            "Hardware manufacturer is required",
        ]

    def test_hinged_doors_need_handles(self):
        selections = {
            "doorType": "hinged",
            "hardware": {"hinges": "soft_close", "drawerSlides": "ball_bearing", "manufacturer": "blum"},
        }
        assert validate_hardware(selections).errors == ["Handle type is required for hinged doors"]
        selections["hardware"]["handles"] = "bar"
        assert validate_hardware(selections).is_valid

    def test_wardrobe_doors(self):
        assert validate_wardrobe_doors({}).errors == [
            "Door type is required",
            "At least one door material must be selected",
        ]
        assert validate_wardrobe_doors({"doorType": "hinged", "doorMaterials": []}).errors == [
            "At least one door material must be selected",
        ]

    def test_sliding_doors_need_system_and_profile(self):
        selections = {"doorType": "sliding", "doorMaterials": ["mirror"]}
        assert validate_wardrobe_doors(selections).errors == [
            "Sliding system type is required",
            "Profile color is required",
        ]
        selections["slidingSystem"] = {"type": "top_hung", "profileColor": "black"}
        assert validate_wardrobe_doors(selections).is_valid


# ===========================================================================
# Internal filling
# ===========================================================================

class TestInternalFilling:

    def test_missing_configuration(self):
        assert validate_internal_filling({}).errors == ["Internal filling configuration is required"]
        assert validate_internal_filling({"internalFilling": []}).errors == [
            "Internal filling configuration is required",
        ]

    def test_section_checks_use_one_based_index(self):
        selections = {
            **_wardrobe_dims(),
            "internalFilling": [
                {"sectionWidth": 800, "elements": [{"type": "shelf"}]},
                {"sectionWidth": 0, "elements": []},
            ],
        }
        assert validate_internal_filling(selections).errors == [
            "Section 2: Width is required and must be greater than 0",
            "Section 2: At least one filling element is required",
        ]

    def test_pantograph_needs_tall_wardrobe(self):
        selections = {
            **_wardrobe_dims(width=2000, height=1700),
            "internalFilling": [
                {"sectionWidth": 600, "elements": [{"type": "pantograph", "height": 2000, "quantity": 1}]},
            ],
        }
        errors = validate_internal_filling(selections).errors
        assert errors == ["Pantograph requires minimum wardrobe height of 1800mm"]

    def test_pantograph_error_per_element(self):
        selections = {
            **_wardrobe_dims(height=1700),
            "internalFilling": [
                {"sectionWidth": 600, "elements": [{"type": "pantograph"}]},
                {"sectionWidth": 600, "elements": [{"type": "pantograph"}, {"type": "rod"}]},
            ],
        }
        assert validate_internal_filling(selections).errors.count(
            "Pantograph requires minimum wardrobe height of 1800mm"
        ) == 2

    def test_total_width_exceeds_wardrobe(self):
        selections = {
            **_wardrobe_dims(width=1500),
            "internalFilling": [
                {"sectionWidth": 800, "elements": [{"type": "rod"}]},
                {"sectionWidth": 900, "elements": [{"type": "shelf"}]},
            ],
        }
        errors = validate_internal_filling(selections).errors
        assert errors == ["Total section width (1700mm) exceeds wardrobe width (1500mm)"]

    def test_sections_filling_exact_width_pass(self):
        selections = {
            **_wardrobe_dims(width=1700),
            "internalFilling": [
                {"sectionWidth": 800, "elements": [{"type": "rod"}]},
                {"sectionWidth": 900, "elements": [{"type": "drawer"}]},
            ],
        }
        assert validate_internal_filling(selections).is_valid

    def test_missing_dimensions_default_to_zero(self):
        selections = {"internalFilling": [{"sectionWidth": 500, "elements": [{"type": "pantograph"}]}]}
        assert validate_internal_filling(selections).errors == [
            "Pantograph requires minimum wardrobe height of 1800mm",
            "Total section width (500mm) exceeds wardrobe width (0mm)",
        ]


# ===========================================================================
# Composite gate
# ===========================================================================

class TestCompleteConfiguration:

    def test_empty_kitchen_reports_every_unmet_check(self):
        result = validate_complete_configuration({}, "kitchen")
        assert result.is_valid is False
        assert len(result.errors) == 14
        assert result.errors[:2] == ["Layout type is required", "Dimensions are required"]
        assert result.errors[-3:] == [
            "Countertop material is required",
            "Countertop thickness is required",
            "Splashback material is required",
        ]

    def test_empty_wardrobe_reports_every_unmet_check(self):
        result = validate_complete_configuration({}, "wardrobe")
        assert len(result.errors) == 14
        assert "Door type is required" in result.errors
        assert result.errors[-1] == "Internal filling configuration is required"
        assert "Countertop material is required" not in result.errors

    def test_valid_kitchen(self, kitchen_selections):
        result = validate_complete_configuration(kitchen_selections, "kitchen")
        assert result.errors == []
        assert result.to_dict() == {"isValid": True, "errors": []}

    def test_valid_wardrobe(self, wardrobe_selections):
        assert validate_complete_configuration(wardrobe_selections, "wardrobe").is_valid

    def test_kitchen_ignores_wardrobe_rules(self, kitchen_selections):
        """No doors or filling in a kitchen, yet the kitchen is valid."""
        assert validate_complete_configuration(kitchen_selections, "kitchen").is_valid
        assert not validate_complete_configuration(kitchen_selections, "wardrobe").is_valid

    def test_wardrobe_ignores_countertop_rules(self, wardrobe_selections):
        assert validate_complete_configuration(wardrobe_selections, "wardrobe").is_valid
        kitchen_result = validate_complete_configuration(wardrobe_selections, "kitchen")
        assert kitchen_result.errors == [
            "Countertop material is required",
            "Countertop thickness is required",
            "Splashback material is required",
        ]

    def test_validator_sets(self):
        assert validate_countertop in validators_for("kitchen")
        assert validate_internal_filling not in validators_for("kitchen")
        assert validate_wardrobe_doors in validators_for("wardrobe")
        assert validate_countertop not in validators_for("wardrobe")

    def test_unknown_product_type_runs_common_rules_only(self):
        assert len(validate_complete_configuration({}, "bathroom").errors) == 11

    def test_input_is_not_mutated(self, wardrobe_selections):
        before = copy.deepcopy(wardrobe_selections)
        validate_complete_configuration(wardrobe_selections, "wardrobe")
        assert wardrobe_selections == before


class TestOddShapes:

    @pytest.mark.parametrize("selections", [
        None,
        [],
        {"typeAndSize": "linear", "hardware": 5, "internalFilling": "two sections"},
        {"typeAndSize": {"dimensions": ["3000", "600"]}, "facadeMaterial": ["mdf"]},
        {"internalFilling": [None, 7, {"sectionWidth": "wide", "elements": "shelf"}]},
        {"typeAndSize": {"layoutType": "island", "dimensions": {"length": "abc", "unit": "mm"}}},
    ])
    @pytest.mark.parametrize("product_type", ["kitchen", "wardrobe"])
    def test_never_raises(self, selections, product_type):
        result = validate_complete_configuration(selections, product_type)
        assert result.is_valid is False
        assert all(isinstance(e, str) for e in result.errors)

    def test_numeric_strings_are_read_as_numbers(self):
        selections = {"typeAndSize": {"layoutType": "island", "dimensions": {"length": "2500", "unit": "mm"}}}
        assert validate_type_and_size(selections).errors == [
            "Island kitchen requires minimum length of 3000mm",
        ]
