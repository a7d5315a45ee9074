"""Dosing recommendations for an estimated water state.

Responsibilities:
  - Compare each parameter against its target range (dead-band).
  - Pick a catalog product by correction direction and size the dose.
  - Explain every parameter outcome, including the silent ones.

Inputs/Outputs:
  - Inputs: EstimatedWaterState, WaterTargets, product catalog, pool volume.
  - Outputs: ordered DosingRecommendation list and ParameterStatus list.

Invariants:
  - Chlorine entries precede pH entries.
  - Emitted amounts are strictly positive; in-range values emit nothing.
  - Product choice is deterministic (smallest product_id of the matching kind).
"""

from __future__ import annotations

from typing import Mapping, Optional

from lagoon.core.chemistry.calculations import required_amount
from lagoon.core.chemistry.model_config import ChemistryModelConfig, default_model_config
from lagoon.core.domain.enums import ProductKind, ReasonCode, RecommendedAction, WaterParameter
from lagoon.core.domain.models import (
    DosingRecommendation,
    EstimatedWaterState,
    ParameterStatus,
    ProductDefinition,
    TargetRange,
    WaterTargets,
)

_PARAMETER_ORDER = (WaterParameter.FREE_CHLORINE, WaterParameter.PH)

_LABELS: dict[WaterParameter, tuple[str, str]] = {
    WaterParameter.FREE_CHLORINE: ("Chlorine", " ppm"),
    WaterParameter.PH: ("pH", ""),
}


def select_product(
    products: Mapping[str, ProductDefinition], kind: ProductKind
) -> Optional[ProductDefinition]:
    for product_id in sorted(products):
        product = products[product_id]
        if product.kind == kind and product.effective_per_unit_m3 > 0:
            return product
    return None


def _correcting_kind(parameter: WaterParameter, raise_value: bool) -> Optional[ProductKind]:
    if parameter == WaterParameter.FREE_CHLORINE:
        # No chlorine-lowering product kind exists; high chlorine decays on its own.
        return ProductKind.CHLORINE if raise_value else None
    if parameter == WaterParameter.PH:
        return ProductKind.PH_PLUS if raise_value else ProductKind.PH_MINUS
    raise ValueError(f"Unhandled parameter: {parameter}")


def _fmt(parameter: WaterParameter, value: float) -> str:
    _, unit = _LABELS[parameter]
    if parameter == WaterParameter.FREE_CHLORINE:
        return f"{value:.1f}{unit}"
    return f"{value:.2f}"


def _evaluate_parameter(
    parameter: WaterParameter,
    value: float,
    target_range: TargetRange,
    products: Mapping[str, ProductDefinition],
    pool_volume_m3: float,
    config: ChemistryModelConfig,
) -> tuple[ParameterStatus, Optional[DosingRecommendation]]:
    label, _ = _LABELS[parameter]
    target = target_range.target

    def status(action: RecommendedAction, reason: ReasonCode, explanation: str) -> ParameterStatus:
        return ParameterStatus(
            parameter=parameter,
            action=action,
            reason_code=reason,
            current_value=value,
            target_value=target,
            explanation=explanation,
        )

    if target_range.contains(value):
        return (
            status(
                RecommendedAction.NONE,
                ReasonCode.IN_RANGE,
                f"{label} ({_fmt(parameter, value)}) is within target range "
                f"({_fmt(parameter, target_range.minimum)}-{_fmt(parameter, target_range.maximum)}).",
            ),
            None,
        )

    delta = target - value
    too_low = delta > 0
    reason = ReasonCode.TOO_LOW if too_low else ReasonCode.TOO_HIGH
    kind = _correcting_kind(parameter, raise_value=too_low)

    if kind is None:
        return (
            status(
                RecommendedAction.NONE,
                reason,
                f"{label} ({_fmt(parameter, value)}) is above target "
                f"({_fmt(parameter, target_range.maximum)}). Allow natural decay.",
            ),
            None,
        )

    product = select_product(products, kind)
    if product is None:
        return (
            status(
                RecommendedAction.NONE,
                ReasonCode.NO_PRODUCT,
                f"{label} is {'low' if too_low else 'high'} ({_fmt(parameter, value)}) "
                f"but no {kind.value} product is configured.",
            ),
            None,
        )

    amount = round(required_amount(delta, product, pool_volume_m3), config.amount_precision)
    if amount <= 0:
        return (
            status(
                RecommendedAction.NONE,
                ReasonCode.NEGLIGIBLE_DOSE,
                f"{label} ({_fmt(parameter, value)}) is marginally out of range; dose rounds to zero.",
            ),
            None,
        )

    bound = target_range.minimum if too_low else target_range.maximum
    explanation = (
        f"{label} ({_fmt(parameter, value)}) is {'below' if too_low else 'above'} "
        f"{_fmt(parameter, bound)}. Add {product.name or product.product_id} "
        f"to reach {_fmt(parameter, target)}."
    )
    recommendation = DosingRecommendation(
        parameter=parameter,
        product_id=product.product_id,
        amount=amount,
        unit=product.unit,
        target_value=target,
        reason_code=reason,
        explanation=explanation,
    )
    return status(RecommendedAction.DOSE, reason, explanation), recommendation


def evaluate(
    state: EstimatedWaterState,
    targets: WaterTargets,
    products: Mapping[str, ProductDefinition],
    pool_volume_m3: float,
    config: Optional[ChemistryModelConfig] = None,
) -> tuple[list[DosingRecommendation], list[ParameterStatus]]:
    config = config or default_model_config()
    recommendations: list[DosingRecommendation] = []
    statuses: list[ParameterStatus] = []
    for parameter in _PARAMETER_ORDER:
        param_status, rec = _evaluate_parameter(
            parameter,
            state.value_of(parameter),
            targets.for_parameter(parameter),
            products,
            pool_volume_m3,
            config,
        )
        statuses.append(param_status)
        if rec is not None:
            recommendations.append(rec)
    return recommendations, statuses


def recommend(
    state: EstimatedWaterState,
    targets: WaterTargets,
    products: Mapping[str, ProductDefinition],
    pool_volume_m3: float,
    config: Optional[ChemistryModelConfig] = None,
) -> list[DosingRecommendation]:
    recommendations, _ = evaluate(state, targets, products, pool_volume_m3, config)
    return recommendations


def assess(
    state: EstimatedWaterState,
    targets: WaterTargets,
    products: Mapping[str, ProductDefinition],
    pool_volume_m3: float,
    config: Optional[ChemistryModelConfig] = None,
) -> list[ParameterStatus]:
    _, statuses = evaluate(state, targets, products, pool_volume_m3, config)
    return statuses
