"""Domain enums for pool conditions, products, and recommendations.

Responsibilities:
  - Define closed enums used as decision points by the estimator and recommender.
  - Provide stable reason metadata for recommendation audits and display.

Invariants:
  - Enum values must remain stable; they are part of the JSON envelopes.
  - ReasonCode metadata must be complete and deterministic.
"""

from __future__ import annotations

from enum import Enum


class UVExposureLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BatherLoadLevel(Enum):
    NONE = "none"
    LIGHT = "light"
    HEAVY = "heavy"


class ProductKind(Enum):
    CHLORINE = "chlorine"
    PH_MINUS = "ph_minus"
    PH_PLUS = "ph_plus"


class WaterParameter(Enum):
    FREE_CHLORINE = "free_chlorine"
    PH = "ph"


class ConfidenceLevel(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecommendedAction(Enum):
    NONE = "none"
    DOSE = "dose"


class TrendDirection(Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class ReasonCategory(Enum):
    OK = "OK"
    CORRECTION = "CORRECTION"
    INFO = "INFO"


# Stable identifiers for recommendation reasoning; value is the serialized code.
class ReasonCode(Enum):
    IN_RANGE = "IN_RANGE"
    TOO_LOW = "TOO_LOW"
    TOO_HIGH = "TOO_HIGH"
    NO_PRODUCT = "NO_PRODUCT"
    NEGLIGIBLE_DOSE = "NEGLIGIBLE_DOSE"


PH_PRODUCT_KINDS = frozenset({ProductKind.PH_MINUS, ProductKind.PH_PLUS})

# UI/audit metadata keyed by reason code.
REASON_METADATA: dict[ReasonCode, dict[str, object]] = {
    ReasonCode.IN_RANGE: {
        "category": ReasonCategory.OK,
        "message": "Value is within the target range.",
    },
    ReasonCode.TOO_LOW: {
        "category": ReasonCategory.CORRECTION,
        "message": "Value is below the target range.",
    },
    ReasonCode.TOO_HIGH: {
        "category": ReasonCategory.CORRECTION,
        "message": "Value is above the target range.",
    },
    ReasonCode.NO_PRODUCT: {
        "category": ReasonCategory.INFO,
        "message": "No product in the catalog can correct this value.",
    },
    ReasonCode.NEGLIGIBLE_DOSE: {
        "category": ReasonCategory.OK,
        "message": "Required dose rounds to zero.",
    },
}


_missing = [rc for rc in ReasonCode if rc not in REASON_METADATA]
if _missing:
    raise RuntimeError(f"Missing REASON_METADATA for: {[m.value for m in _missing]}")
