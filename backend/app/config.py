"""
Configurator configuration — single source of truth for rule thresholds,
save-point retention, and env-driven settings.

Import from here in validators, the wizard engine and routes rather than
hardcoding values.
"""
from __future__ import annotations

import os

# ── Rule thresholds (mm, same numeric space as stored dimensions) ─────────────

MIN_DIMENSION_MM: float = 100
ISLAND_MIN_LENGTH_MM: float = 3000
SLIDING_DOOR_MIN_WIDTH_MM: float = 1200
PANTOGRAPH_MIN_HEIGHT_MM: float = 1800

# ── Product types ─────────────────────────────────────────────────────────────

KITCHEN: str = "kitchen"
WARDROBE: str = "wardrobe"
PRODUCT_TYPES: tuple[str, ...] = (KITCHEN, WARDROBE)

# ── Wizard ────────────────────────────────────────────────────────────────────

# Trailing step after all visible categories
SUMMARY_STEP_NAME: str = "summary"

SAVEPOINT_STORAGE_KEY: str = "configurator_state"
SAVEPOINT_EXPIRY_DAYS: int = 7

# Statuses
CATEGORY_STATUS_ACTIVE: str = "active"
ORDER_STATUS_SUBMITTED: str = "SUBMITTED"

ESTIMATED_RESPONSE_TIME: str = "24-48 hours"

# ── Environment ───────────────────────────────────────────────────────────────

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json").lower()

_cors_default = "http://localhost:3000,http://localhost:8000"
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", _cors_default).split(",") if o.strip()
]
