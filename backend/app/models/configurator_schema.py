"""
Configurator domain schema — pydantic models for catalog data, conditional
display rules, structured selections and client contact details.

Wire format is camelCase (admin-configured rule paths such as
``typeAndSize.dimensions.width`` address the same keys), Python attributes are
snake_case.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ProductTypeName(str, Enum):
    KITCHEN = "kitchen"
    WARDROBE = "wardrobe"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── Conditional display ──────────────────────────────────────────────────────

class Condition(_CamelModel):
    field: str
    operator: str                       # equals | notEquals | in | notIn
    value: Any = None


class ConditionalLogic(_CamelModel):
    show_if: Optional[list[Condition]] = Field(None, alias="showIf")
    hide_if: Optional[list[Condition]] = Field(None, alias="hideIf")


# ── Catalog ──────────────────────────────────────────────────────────────────

class OptionValue(_CamelModel):
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    price_factor: float = Field(1.0, alias="priceFactor")
    specifications: dict[str, Any] = Field(default_factory=dict)
    display_order: int = Field(0, alias="displayOrder")
    is_available: bool = Field(True, alias="isAvailable")

    @field_validator("price_factor", mode="before")
    @classmethod
    def _default_price_factor(cls, v):
        return 1.0 if v is None else v

    @field_validator("specifications", mode="before")
    @classmethod
    def _default_specifications(cls, v):
        return {} if v is None else v


class OptionCategory(_CamelModel):
    id: Optional[str] = None
    name: str                           # selections key
    title: str
    step_order: int = Field(0, alias="stepOrder")
    is_required: bool = Field(True, alias="isRequired")
    allows_multiple: bool = Field(False, alias="allowsMultiple")
    conditional_display: Optional[ConditionalLogic] = Field(None, alias="conditionalDisplay")
    options: list[OptionValue] = Field(default_factory=list)


# ── Structured selections ────────────────────────────────────────────────────
# Every field is optional: missing values are reported by the rule validators,
# these models only coerce types at the point a selection is written.

class _SelectionModel(_CamelModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Dimensions(_SelectionModel):
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    unit: Optional[str] = None          # mm | cm | m


class TypeAndSizeSelection(_SelectionModel):
    layout_type: Optional[str] = Field(None, alias="layoutType")
    dimensions: Optional[Dimensions] = None


class MaterialSelection(_SelectionModel):
    material: Optional[str] = None
    finish: Optional[str] = None
    color: Optional[str] = None
    profile: Optional[str] = None


class CountertopSelection(_SelectionModel):
    material: Optional[str] = None
    thickness: Optional[float] = None
    edge_profile: Optional[str] = Field(None, alias="edgeProfile")


class SplashbackSelection(_SelectionModel):
    material: Optional[str] = None


class HardwareSelection(_SelectionModel):
    hinges: Optional[str] = None
    drawer_slides: Optional[str] = Field(None, alias="drawerSlides")
    handles: Optional[str] = None
    manufacturer: Optional[str] = None


class SlidingSystemSelection(_SelectionModel):
    type: Optional[str] = None
    profile_color: Optional[str] = Field(None, alias="profileColor")


class FillingElement(_SelectionModel):
    type: Optional[str] = None          # shelf | rod | drawer | pantograph | ...
    height: Optional[float] = None
    quantity: int = 1


class FillingSection(_SelectionModel):
    section_width: Optional[float] = Field(None, alias="sectionWidth")
    elements: list[FillingElement] = Field(default_factory=list)


# Selections keys whose value is a structured object rather than an option card
STRUCTURED_SELECTIONS: dict[str, type[_SelectionModel]] = {
    "typeAndSize": TypeAndSizeSelection,
    "corpusMaterial": MaterialSelection,
    "facadeMaterial": MaterialSelection,
    "countertop": CountertopSelection,
    "splashback": SplashbackSelection,
    "hardware": HardwareSelection,
    "slidingSystem": SlidingSystemSelection,
}

# Selections keys holding a list of structured items
STRUCTURED_LIST_SELECTIONS: dict[str, type[_SelectionModel]] = {
    "internalFilling": FillingSection,
}


# ── Client / submission ──────────────────────────────────────────────────────

class ClientContact(BaseModel):
    name: str
    phone: str
    email: str

    @field_validator("name", "phone", "email")
    @classmethod
    def _not_blank(cls, v: str, info):
        if not v or not v.strip():
            raise ValueError(f"Client {info.field_name} is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def _email_format(cls, v: str):
        if not _EMAIL_RE.match(v):
            raise ValueError("Invalid email format")
        return v


@dataclass
class ValidationResult:
    """Outcome of one rule validator (or the merge of several)."""
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(errors=[*self.errors, *other.errors])

    def to_dict(self) -> dict:
        return {"isValid": self.is_valid, "errors": list(self.errors)}
