"""Pure chemistry functions for chlorine decay, pH drift, and dosing effects.

Responsibilities:
  - Assemble decay/drift rates from pool conditions and a ChemistryModelConfig.
  - Convert between product amounts and chemical deltas.

Invariants:
  - Stateless and deterministic; no clock, no I/O.
  - Chlorine never goes below zero; pH stays within [0, 14].
  - Chlorine decay rate is non-decreasing in UV level and bather load.
"""

from __future__ import annotations

import math

from lagoon.core.domain.enums import ProductKind
from lagoon.core.domain.models import PoolConditions, ProductDefinition
from .constants import HOURS_PER_DAY, MAX_PH, MIN_CHLORINE_PPM, MIN_PH, REFERENCE_TEMPERATURE_C
from .model_config import ChemistryModelConfig


def _runtime_fraction(conditions: PoolConditions) -> float:
    return min(max(conditions.filter_runtime_hours_per_day / HOURS_PER_DAY, 0.0), 1.0)


def chlorine_decay_rate(conditions: PoolConditions, config: ChemistryModelConfig) -> float:
    """Return the first-order chlorine decay constant k (per day).

    k = base * Q10^((T - 20) / 10) * uv * cover * bathers * filter, clamped to
    [min_decay_per_day, max_decay_per_day].
    """
    temp_delta = conditions.water_temperature_c - REFERENCE_TEMPERATURE_C
    temp_factor = config.q10_coefficient ** (temp_delta / 10.0)
    uv_factor = config.uv_decay_multipliers[conditions.uv_exposure]
    cover_factor = config.cover_factor if conditions.pool_covered else 1.0
    bather_factor = config.bather_consumption_multipliers[conditions.bather_load]
    filter_factor = max(1.0 + config.filter_chlorine_effect * _runtime_fraction(conditions), 0.0)

    k_total = (
        config.chlorine_base_decay_per_day
        * temp_factor
        * uv_factor
        * cover_factor
        * bather_factor
        * filter_factor
    )
    return min(max(k_total, config.min_decay_per_day), config.max_decay_per_day)


def chlorine_after_decay(
    chlorine_ppm: float,
    elapsed_hours: float,
    conditions: PoolConditions,
    config: ChemistryModelConfig,
) -> float:
    if elapsed_hours <= 0:
        return max(chlorine_ppm, MIN_CHLORINE_PPM)
    k = chlorine_decay_rate(conditions, config)
    result = chlorine_ppm * math.exp(-k * elapsed_hours / HOURS_PER_DAY)
    return max(result, MIN_CHLORINE_PPM)


def ph_drift_rate(conditions: PoolConditions, config: ChemistryModelConfig) -> float:
    """Return the signed pH drift (pH units per day).

    Outgassing pushes pH up (faster with more filter runtime and warmer water);
    bather load pushes it down.
    """
    pump_multiplier = 1.0 + _runtime_fraction(conditions) * config.ph_filter_max_effect
    temp_delta = conditions.water_temperature_c - REFERENCE_TEMPERATURE_C
    temp_multiplier = max(
        1.0 + temp_delta / config.ph_temperature_span_c,
        config.ph_min_temperature_multiplier,
    )
    upward = min(
        config.ph_base_drift_per_day * pump_multiplier * temp_multiplier,
        config.ph_max_drift_per_day,
    )
    net = upward - config.bather_ph_depression_per_day[conditions.bather_load]
    cap = config.ph_max_drift_per_day
    return min(max(net, -cap), cap)


def ph_after_drift(
    ph: float,
    elapsed_hours: float,
    conditions: PoolConditions,
    config: ChemistryModelConfig,
) -> float:
    result = ph
    if elapsed_hours > 0:
        change = ph_drift_rate(conditions, config) * elapsed_hours / HOURS_PER_DAY
        # Drift saturates at the band edges but never pulls an outlier back in.
        if change > 0 and ph < config.ph_drift_ceiling:
            result = min(ph + change, config.ph_drift_ceiling)
        elif change < 0 and ph > config.ph_drift_floor:
            result = max(ph + change, config.ph_drift_floor)
    return min(max(result, MIN_PH), MAX_PH)


def dosage_effect(amount: float, product: ProductDefinition, pool_volume_m3: float) -> float:
    """Return the signed full effect of a dose (ppm for chlorine, pH units otherwise)."""
    per_unit = product.effective_per_unit_m3
    if pool_volume_m3 <= 0 or per_unit <= 0 or amount <= 0:
        return 0.0
    base = amount * per_unit / pool_volume_m3
    if product.kind == ProductKind.PH_MINUS:
        return -base
    if product.kind in (ProductKind.PH_PLUS, ProductKind.CHLORINE):
        return base
    raise ValueError(f"Unhandled product kind: {product.kind}")


def mixed_effect(full_effect: float, hours_since_dose: float, config: ChemistryModelConfig) -> float:
    if hours_since_dose < 0:
        return 0.0
    tau = config.mixing_time_constant_hours
    if tau <= 0:
        return full_effect
    return full_effect * (1.0 - math.exp(-hours_since_dose / tau))


def required_amount(delta: float, product: ProductDefinition, pool_volume_m3: float) -> float:
    """Return the product amount that moves the pool by |delta|; 0 when undefined."""
    per_unit = product.effective_per_unit_m3
    if per_unit <= 0 or pool_volume_m3 <= 0:
        return 0.0
    return abs(delta) * pool_volume_m3 / per_unit
