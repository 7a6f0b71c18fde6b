"""
wizard_engine.py — Step sequencing for the furniture configurator wizard.

Lifecycle:
    IDLE -> INITIALIZING -> READY -> SUBMITTING -> SUBMITTED
    ERROR is reachable from INITIALIZING and SUBMITTING.

A WizardSession owns one WizardState. Categories are fetched once from the
category repository; the visible step list is recomputed from the current
selections on every write (no caching), and a trailing summary step is
always appended. Navigation outside [0, total_steps) and writes to unknown
categories are ignored. Full rule validation only runs on submit; leaving a
step only needs the per-step completeness gate.
"""
from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Protocol, Union

from pydantic import ValidationError

from app.config import SUMMARY_STEP_NAME
from app.models.configurator_schema import (
    STRUCTURED_LIST_SELECTIONS,
    STRUCTURED_SELECTIONS,
    ClientContact,
    OptionCategory,
    OptionValue,
)
from app.services.condition_engine import evaluate_conditional_logic
from app.services.errors import CollaboratorError, ConfiguratorError, InvalidSelectionError
from app.services.savepoint_store import SavePointStore
from app.services.validation_engine import validate_complete_configuration

logger = logging.getLogger("configurator-wizard")

# Field an option card fills in when picked on a structured step
PRIMARY_FIELDS: dict[str, str] = {
    "typeAndSize": "layoutType",
    "corpusMaterial": "material",
    "facadeMaterial": "material",
    "countertop": "material",
    "splashback": "material",
    "hardware": "manufacturer",
    "slidingSystem": "type",
}


class CategorySource(Protocol):
    async def get_categories(self, product_type: str) -> list[OptionCategory]: ...


class OrderRequestSink(Protocol):
    async def submit(
        self,
        product_type: str,
        selections: dict[str, Any],
        client_contact: dict[str, Any],
        notes: Optional[str],
    ) -> dict[str, Any]: ...


class WizardStatus(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    READY = "ready"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    ERROR = "error"


@dataclass
class WizardState:
    product_type: Optional[str] = None
    status: WizardStatus = WizardStatus.IDLE
    current_step: int = 0
    categories: list[OptionCategory] = field(default_factory=list)
    selections: dict[str, Any] = field(default_factory=dict)
    visible_categories: list[OptionCategory] = field(default_factory=list)
    errors_by_step: dict[str, list[str]] = field(default_factory=dict)
    saved_at: Optional[datetime] = None

    @property
    def total_steps(self) -> int:
        if self.product_type is None:
            return 0
        return len(self.visible_categories) + 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "productType": self.product_type,
            "status": self.status.value,
            "currentStep": self.current_step,
            "categories": [c.model_dump(by_alias=True) for c in self.categories],
            "selections": copy.deepcopy(self.selections),
            "errorsByStep": copy.deepcopy(self.errors_by_step),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WizardState":
        return cls(
            product_type=data.get("productType"),
            status=WizardStatus(data.get("status", WizardStatus.READY.value)),
            current_step=int(data.get("currentStep", 0)),
            categories=[OptionCategory.model_validate(c) for c in data.get("categories", [])],
            selections=dict(data.get("selections") or {}),
            errors_by_step=dict(data.get("errorsByStep") or {}),
        )


@dataclass
class SubmissionResult:
    submitted: bool
    order_request_id: Optional[str] = None
    errors: list[str] = field(default_factory=list)


def _option_key(option: OptionValue) -> Any:
    return option.specifications.get("value", option.name)


class WizardSession:
    """One user's pass through the configurator."""

    def __init__(
        self,
        categories: CategorySource,
        orders: OrderRequestSink,
        savepoint: Optional[SavePointStore] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self._categories = categories
        self._orders = orders
        self._savepoint = savepoint
        self.session_id = session_id
        self.state = WizardState()

    # ── Queries ──────────────────────────────────────────────────────────────

    @property
    def total_steps(self) -> int:
        return self.state.total_steps

    @property
    def current_category(self) -> Optional[OptionCategory]:
        """Category at the current step; None on the summary step."""
        visible = self.state.visible_categories
        if 0 <= self.state.current_step < len(visible):
            return visible[self.state.current_step]
        return None

    @property
    def on_summary_step(self) -> bool:
        return self.state.product_type is not None and self.current_category is None

    def category(self, name: str) -> Optional[OptionCategory]:
        for category in self.state.categories:
            if category.name == name:
                return category
        return None

    def is_step_complete(self, step_index: Optional[int] = None) -> bool:
        """
        Per-step gate: optional steps always pass, multi-select steps need a
        non-empty list, single-select steps need a non-null value.
        """
        index = self.state.current_step if step_index is None else step_index
        visible = self.state.visible_categories
        if not 0 <= index < len(visible):
            # Summary step has nothing of its own to complete
            return index == len(visible)

        category = visible[index]
        if not category.is_required:
            return True
        selection = self.state.selections.get(category.name)
        if category.allows_multiple:
            return isinstance(selection, list) and len(selection) > 0
        return selection is not None

    # ── Lifecycle ────────────────────────────────────────────────────────────

    async def initialize(self, product_type: str) -> WizardState:
        product_type = getattr(product_type, "value", product_type)
        self.state = WizardState(product_type=None, status=WizardStatus.INITIALIZING)
        try:
            categories = await self._categories.get_categories(product_type)
        except ConfiguratorError:
            self.state.status = WizardStatus.ERROR
            raise
        except Exception as e:
            self.state.status = WizardStatus.ERROR
            logger.error("Category fetch failed for %s: %s", product_type, e, exc_info=True)
            raise CollaboratorError("fetch categories", str(e), cause=e) from e

        self.state = WizardState(
            product_type=product_type,
            status=WizardStatus.READY,
            categories=sorted(categories, key=lambda c: c.step_order),
        )
        self._recompute_visible()
        self._persist()
        logger.info(
            "Wizard initialized for %s with %d categories",
            product_type,
            len(self.state.categories),
            extra={"session_id": self.session_id},
        )
        return self.state

    def restore(self, product_type: Optional[str] = None) -> bool:
        """
        Resume from a non-expired save-point. Returns False when none exists.

        With ``product_type`` given, a snapshot of another product type is
        discarded instead of resumed.
        """
        if self._savepoint is None:
            return False
        data = self._savepoint.load()
        if not data:
            return False
        try:
            state = WizardState.from_dict(data)
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning("Discarding unreadable save-point: %s", e)
            self._savepoint.clear()
            return False

        product_type = getattr(product_type, "value", product_type)
        if product_type is not None and state.product_type != product_type:
            logger.info(
                "Discarding %s save-point, wizard started for %s",
                state.product_type,
                product_type,
                extra={"session_id": self.session_id},
            )
            self._savepoint.clear()
            return False

        if state.status not in (WizardStatus.READY, WizardStatus.ERROR):
            state.status = WizardStatus.READY
        self.state = state
        self._recompute_visible()
        return True

    def reset(self) -> None:
        if self._savepoint is not None:
            self._savepoint.clear()
        self.state = WizardState()

    # ── Selections ───────────────────────────────────────────────────────────

    def update_selection(self, category_name: str, value: Any) -> WizardState:
        """
        Write one selection and recompute visible steps.

        Unknown categories are ignored; None removes the selection. Values are
        shape-checked against the category (InvalidSelectionError otherwise).
        """
        category = self.category(category_name)
        if category is None:
            logger.debug("Ignoring selection for unknown category %r", category_name)
            return self.state

        if value is None:
            self.state.selections.pop(category_name, None)
        else:
            self.state.selections[category_name] = self._coerce(category, value)

        self.state.errors_by_step.pop(category_name, None)
        self._recompute_visible()
        self._persist()
        return self.state

    def select_option(self, category_name: str, option_id: str) -> WizardState:
        """
        Pick an option card: single-select steps store the option's value,
        multi-select steps toggle it in their list, and structured steps fill
        their primary field.
        """
        category = self.category(category_name)
        if category is None:
            return self.state
        if category_name in STRUCTURED_LIST_SELECTIONS:
            raise InvalidSelectionError(category_name, "sections are written as a whole list")
        option = next((o for o in category.options if option_id in (o.id, o.name)), None)
        if option is None:
            logger.debug("Ignoring unknown option %r for %s", option_id, category_name)
            return self.state

        key = _option_key(option)
        current = self.state.selections.get(category_name)

        if category_name in PRIMARY_FIELDS:
            merged = dict(current) if isinstance(current, Mapping) else {}
            merged[PRIMARY_FIELDS[category_name]] = key
            return self.update_selection(category_name, merged)

        if category.allows_multiple:
            chosen = list(current) if isinstance(current, list) else []
            if key in chosen:
                chosen.remove(key)
            else:
                chosen.append(key)
            return self.update_selection(category_name, chosen)

        return self.update_selection(category_name, key)

    def _coerce(self, category: OptionCategory, value: Any) -> Any:
        name = category.name
        if isinstance(value, OptionValue):
            value = value.model_dump(by_alias=True)

        if category.allows_multiple:
            if not isinstance(value, (list, tuple)):
                raise InvalidSelectionError(name, "multi-select step expects a list")
            items = [v.model_dump(by_alias=True) if isinstance(v, OptionValue) else v for v in value]
            model = STRUCTURED_LIST_SELECTIONS.get(name)
            if model is None:
                return items
            try:
                return [
                    model.model_validate(item).model_dump(by_alias=True, exclude_none=True)
                    for item in items
                ]
            except ValidationError as e:
                raise InvalidSelectionError(name, str(e)) from e

        if isinstance(value, (list, tuple)):
            raise InvalidSelectionError(name, "single-select step expects one value")

        model = STRUCTURED_SELECTIONS.get(name)
        if model is None:
            return value
        if not isinstance(value, Mapping):
            raise InvalidSelectionError(name, "expected an object")
        try:
            return model.model_validate(value).model_dump(by_alias=True, exclude_none=True)
        except ValidationError as e:
            raise InvalidSelectionError(name, str(e)) from e

    def _recompute_visible(self) -> None:
        selections = self.state.selections
        self.state.visible_categories = [
            c for c in self.state.categories
            if evaluate_conditional_logic(c.conditional_display, selections)
        ]
        last = max(self.state.total_steps - 1, 0)
        if self.state.current_step > last:
            self.state.current_step = last

    # ── Navigation ───────────────────────────────────────────────────────────

    def navigate_to(self, step_index: int) -> bool:
        if not 0 <= step_index < self.state.total_steps:
            return False
        self.state.current_step = step_index
        self._persist()
        return True

    def next_step(self) -> bool:
        category = self.current_category
        if category is None:
            return False
        if not self.is_step_complete():
            self.state.errors_by_step[category.name] = [f"{category.title} is required"]
            self._persist()
            return False
        self.state.errors_by_step.pop(category.name, None)
        return self.navigate_to(self.state.current_step + 1)

    def previous_step(self) -> bool:
        return self.navigate_to(self.state.current_step - 1)

    # ── Summary / submission ─────────────────────────────────────────────────

    def _selected_options(self, category: OptionCategory) -> list[OptionValue]:
        selection = self.state.selections.get(category.name)
        if category.name in PRIMARY_FIELDS and isinstance(selection, Mapping):
            keys = [selection.get(PRIMARY_FIELDS[category.name])]
        elif isinstance(selection, list):
            keys = selection
        else:
            keys = [selection]
        return [o for o in category.options if _option_key(o) in keys]

    def summary(self) -> dict[str, Any]:
        steps = []
        price_factor = 1.0
        for index, category in enumerate(self.state.visible_categories):
            options = self._selected_options(category)
            for option in options:
                price_factor *= option.price_factor
            steps.append({
                "name": category.name,
                "title": category.title,
                "selection": self.state.selections.get(category.name),
                "options": [o.name for o in options],
                "complete": self.is_step_complete(index),
            })
        return {
            "productType": self.state.product_type,
            "steps": steps,
            "priceFactor": round(price_factor, 4),
        }

    async def submit(
        self,
        client_contact: Union[ClientContact, Mapping[str, Any]],
        notes: Optional[str] = None,
    ) -> SubmissionResult:
        """
        Validate the full configuration and hand it to the order-request store.

        Rule violations come back in the result without contacting the store.
        Store failures move the wizard to ERROR and raise CollaboratorError.
        """
        if self.state.product_type is None:
            raise ConfiguratorError("Wizard has not been initialized")

        result = validate_complete_configuration(self.state.selections, self.state.product_type)
        if not result.is_valid:
            self.state.errors_by_step[SUMMARY_STEP_NAME] = list(result.errors)
            self._persist()
            return SubmissionResult(submitted=False, errors=list(result.errors))

        if isinstance(client_contact, ClientContact):
            contact = client_contact.model_dump()
        else:
            contact = dict(client_contact)

        self.state.status = WizardStatus.SUBMITTING
        try:
            receipt = await self._orders.submit(
                self.state.product_type,
                copy.deepcopy(self.state.selections),
                contact,
                notes,
            )
        except ConfiguratorError:
            self.state.status = WizardStatus.ERROR
            raise
        except Exception as e:
            self.state.status = WizardStatus.ERROR
            logger.error("Configuration submit failed: %s", e, exc_info=True)
            raise CollaboratorError("submit configuration", str(e), cause=e) from e

        order_request_id = str(receipt["id"])
        logger.info(
            "Configuration submitted",
            extra={"session_id": self.session_id, "order_request_id": order_request_id},
        )
        if self._savepoint is not None:
            self._savepoint.clear()
        self.state = WizardState(status=WizardStatus.SUBMITTED)
        return SubmissionResult(submitted=True, order_request_id=order_request_id)

    def _persist(self) -> None:
        if self._savepoint is not None and self.state.product_type is not None:
            self.state.saved_at = self._savepoint.save(self.state.to_dict())
