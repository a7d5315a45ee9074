"""Domain models for pool water estimation and dosing.

Responsibilities:
  - Define immutable value objects for engine inputs and outputs.
  - Offer boundary-side validation for callers that assemble inputs.

Inputs/Outputs:
  - Inputs are built by the persistence/UI layer (or the JSON codec).
  - Outputs are produced by the engine and rendered by the app layer.

Invariants:
  - Models are frozen; the engine never mutates or retains them.
  - validate() is for boundary use only; engine functions never call it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional

from .enums import (
    BatherLoadLevel,
    ConfidenceLevel,
    ProductKind,
    ReasonCode,
    RecommendedAction,
    TrendDirection,
    UVExposureLevel,
    WaterParameter,
)
from .timestamps import as_utc


@dataclass(frozen=True)
class LastMeasurement:
    free_chlorine_ppm: float
    ph: float
    timestamp: datetime

    def validate(self) -> None:
        if self.free_chlorine_ppm < 0:
            raise ValueError("free_chlorine_ppm must be >= 0")
        if self.ph < 0 or self.ph > 14:
            raise ValueError("ph must be within [0, 14]")


@dataclass(frozen=True)
class PoolConditions:
    water_temperature_c: float
    uv_exposure: UVExposureLevel
    pool_covered: bool
    bather_load: BatherLoadLevel
    filter_runtime_hours_per_day: float

    def validate(self) -> None:
        if self.filter_runtime_hours_per_day < 0 or self.filter_runtime_hours_per_day > 24:
            raise ValueError("filter_runtime_hours_per_day must be within [0, 24]")


@dataclass(frozen=True)
class DosingEvent:
    timestamp: datetime
    product_id: str
    kind: ProductKind
    amount: float
    unit: str

    def validate(self) -> None:
        if self.amount < 0:
            raise ValueError(f"dosing amount must be >= 0 (product {self.product_id})")


@dataclass(frozen=True)
class ProductDefinition:
    """Catalog entry; effect_per_unit_m3 is for one unit of pure active ingredient."""

    product_id: str
    kind: ProductKind
    unit: str
    effect_per_unit_m3: float
    concentration: float = 1.0
    name: Optional[str] = None

    @property
    def effective_per_unit_m3(self) -> float:
        return self.effect_per_unit_m3 * self.concentration

    def validate(self) -> None:
        if not self.product_id.strip():
            raise ValueError("product_id must be non-empty")
        if self.concentration <= 0:
            raise ValueError(f"concentration must be > 0 (product {self.product_id})")
        if self.effect_per_unit_m3 < 0:
            raise ValueError(f"effect_per_unit_m3 must be >= 0 (product {self.product_id})")


@dataclass(frozen=True)
class TargetRange:
    minimum: float
    maximum: float

    @property
    def target(self) -> float:
        return (self.minimum + self.maximum) / 2.0

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum

    def validate(self) -> None:
        if not self.minimum < self.maximum:
            raise ValueError("target range minimum must be < maximum")


@dataclass(frozen=True)
class WaterTargets:
    free_chlorine: TargetRange
    ph: TargetRange

    def for_parameter(self, parameter: WaterParameter) -> TargetRange:
        if parameter == WaterParameter.FREE_CHLORINE:
            return self.free_chlorine
        return self.ph

    def validate(self) -> None:
        self.free_chlorine.validate()
        self.ph.validate()


@dataclass(frozen=True)
class PoolWaterEngineInput:
    pool_volume_m3: float
    last_measurement: LastMeasurement
    conditions: PoolConditions
    dosing_history: tuple[DosingEvent, ...]
    products: Mapping[str, ProductDefinition]
    targets: WaterTargets

    def __post_init__(self) -> None:
        object.__setattr__(self, "dosing_history", tuple(self.dosing_history))
        object.__setattr__(self, "products", MappingProxyType(dict(self.products)))

    def validate(self, now: Optional[datetime] = None) -> None:
        if self.pool_volume_m3 <= 0:
            raise ValueError("pool_volume_m3 must be > 0")
        self.last_measurement.validate()
        self.conditions.validate()
        self.targets.validate()
        for event in self.dosing_history:
            event.validate()
            if now is not None and as_utc(event.timestamp) > as_utc(now):
                raise ValueError(f"dosing event for {event.product_id} lies in the future")
        for product_id, product in self.products.items():
            product.validate()
            if product.product_id != product_id:
                raise ValueError(
                    f"catalog key '{product_id}' does not match product_id '{product.product_id}'"
                )


@dataclass(frozen=True)
class EstimatedWaterState:
    free_chlorine_ppm: float
    ph: float
    as_of: datetime

    def value_of(self, parameter: WaterParameter) -> float:
        if parameter == WaterParameter.FREE_CHLORINE:
            return self.free_chlorine_ppm
        return self.ph


@dataclass(frozen=True)
class ConfidenceIndicator:
    level: ConfidenceLevel
    score: float
    reason: str
    elapsed_hours: float = 0.0
    event_count: int = 0


@dataclass(frozen=True)
class DosingRecommendation:
    parameter: WaterParameter
    product_id: str
    amount: float
    unit: str
    target_value: float
    reason_code: ReasonCode
    explanation: str = ""


@dataclass(frozen=True)
class ParameterStatus:
    parameter: WaterParameter
    action: RecommendedAction
    reason_code: ReasonCode
    current_value: float
    target_value: float
    explanation: str


@dataclass(frozen=True)
class PoolWaterEngineOutput:
    estimated_state: EstimatedWaterState
    confidence: ConfidenceIndicator
    recommendations: tuple[DosingRecommendation, ...] = field(default_factory=tuple)
    statuses: tuple[ParameterStatus, ...] = field(default_factory=tuple)

    def recommendation_for(self, parameter: WaterParameter) -> Optional[DosingRecommendation]:
        for rec in self.recommendations:
            if rec.parameter == parameter:
                return rec
        return None

    @property
    def dosing_needed(self) -> bool:
        return bool(self.recommendations)


@dataclass(frozen=True)
class TrendSnapshot:
    free_chlorine: TrendDirection
    ph: TrendDirection
