"""Water state estimation from a stale measurement.

Responsibilities:
  - Project chlorine and pH forward from the last measurement to "now".
  - Apply intervening dosing events piecewise, in timestamp order.
  - Derive a confidence indicator from data age and dosing uncertainty.

Inputs/Outputs:
  - Inputs: PoolWaterEngineInput, an explicit current datetime, optional model config.
  - Outputs: (EstimatedWaterState, ConfidenceIndicator).

Invariants:
  - Never reads a clock; never raises for well-formed input.
  - Result does not depend on the order of input.dosing_history.
  - Confidence is non-increasing in elapsed time for a fixed event set.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Callable, Iterable, Optional

from lagoon.core.chemistry.calculations import (
    chlorine_after_decay,
    dosage_effect,
    mixed_effect,
    ph_after_drift,
)
from lagoon.core.chemistry.constants import MAX_PH, MIN_CHLORINE_PPM, MIN_PH
from lagoon.core.chemistry.model_config import ChemistryModelConfig, default_model_config
from lagoon.core.domain.enums import PH_PRODUCT_KINDS, ConfidenceLevel, ProductKind
from lagoon.core.domain.models import (
    ConfidenceIndicator,
    DosingEvent,
    EstimatedWaterState,
    PoolConditions,
    PoolWaterEngineInput,
)
from lagoon.core.domain.timestamps import as_utc, hours_between

_DEBUG_FN: Callable[[str], None] | None = None

Projector = Callable[[float, float, PoolConditions, ChemistryModelConfig], float]


def set_estimator_debug(fn: Callable[[str], None] | None) -> None:
    global _DEBUG_FN
    _DEBUG_FN = fn


def _debug(msg: str) -> None:
    if _DEBUG_FN is not None:
        _DEBUG_FN(msg)


def _event_sort_key(event: DosingEvent) -> tuple:
    return (as_utc(event.timestamp), event.kind.value, event.product_id, event.amount, event.unit)


def events_in_window(
    events: Iterable[DosingEvent], measured_at: datetime, current_date: datetime
) -> list[DosingEvent]:
    """Events with measured_at <= timestamp <= current_date, in application order."""
    start = as_utc(measured_at)
    end = as_utc(current_date)
    selected = [e for e in events if start <= as_utc(e.timestamp) <= end]
    return sorted(selected, key=_event_sort_key)


def _project_with_events(
    label: str,
    initial: float,
    events: list[DosingEvent],
    inp: PoolWaterEngineInput,
    measured_at: datetime,
    current_date: datetime,
    projector: Projector,
    config: ChemistryModelConfig,
) -> float:
    value = initial
    cursor = measured_at
    for event in events:
        hours = hours_between(cursor, event.timestamp)
        if hours > 0:
            value = projector(value, hours, inp.conditions, config)

        product = inp.products.get(event.product_id)
        if product is None or product.kind != event.kind:
            _debug(f"SKIP_EVENT param={label} product={event.product_id} reason=UNKNOWN_PRODUCT")
        else:
            full = dosage_effect(event.amount, product, inp.pool_volume_m3)
            effect = mixed_effect(full, hours_between(event.timestamp, current_date), config)
            value += effect
            _debug(
                f"APPLY_EVENT param={label} product={event.product_id} "
                f"at={as_utc(event.timestamp).isoformat()} effect={effect:.6f} value={value:.6f}"
            )
        cursor = event.timestamp

    hours = hours_between(cursor, current_date)
    if hours > 0:
        value = projector(value, hours, inp.conditions, config)
    return value


def _confidence(
    elapsed_hours: float, event_count: int, config: ChemistryModelConfig
) -> ConfidenceIndicator:
    effective_age = elapsed_hours + event_count * config.event_uncertainty_hours
    score = math.exp(-effective_age / config.confidence_score_scale_hours)
    events_note = f"; {event_count} dosing event(s) since" if event_count else ""

    if effective_age < config.high_confidence_hours:
        level = ConfidenceLevel.HIGH
        reason = f"Measurement less than {config.high_confidence_hours:.0f} hours old{events_note}"
    elif effective_age < config.medium_confidence_hours:
        level = ConfidenceLevel.MEDIUM
        band = f"{config.high_confidence_hours:.0f}-{config.medium_confidence_hours:.0f}h"
        reason = f"Measurement {int(elapsed_hours)} hours old ({band} range){events_note}"
    else:
        level = ConfidenceLevel.LOW
        if elapsed_hours >= config.medium_confidence_hours:
            age = f"Measurement {int(elapsed_hours // 24)} days old{events_note}"
        else:
            age = (
                f"Measurement {int(elapsed_hours)} hours old but {event_count} dosing event(s) "
                f"since raise the effective age to {effective_age:.0f} hours"
            )
        reason = f"{age}. Consider re-measuring."

    return ConfidenceIndicator(
        level=level,
        score=score,
        reason=reason,
        elapsed_hours=elapsed_hours,
        event_count=event_count,
    )


def estimate(
    inp: PoolWaterEngineInput,
    current_date: datetime,
    config: Optional[ChemistryModelConfig] = None,
) -> tuple[EstimatedWaterState, ConfidenceIndicator]:
    config = config or default_model_config()
    measurement = inp.last_measurement
    measured_at = measurement.timestamp
    elapsed_hours = max(0.0, hours_between(measured_at, current_date))

    window = events_in_window(inp.dosing_history, measured_at, current_date)
    chlorine_events = [e for e in window if e.kind == ProductKind.CHLORINE]
    ph_events = [e for e in window if e.kind in PH_PRODUCT_KINDS]

    if elapsed_hours > 0 or window:
        chlorine = _project_with_events(
            "free_chlorine",
            measurement.free_chlorine_ppm,
            chlorine_events,
            inp,
            measured_at,
            current_date,
            chlorine_after_decay,
            config,
        )
        ph = _project_with_events(
            "ph",
            measurement.ph,
            ph_events,
            inp,
            measured_at,
            current_date,
            ph_after_drift,
            config,
        )
    else:
        chlorine = measurement.free_chlorine_ppm
        ph = measurement.ph

    chlorine = max(chlorine, MIN_CHLORINE_PPM)
    ph = min(max(ph, MIN_PH), MAX_PH)
    _debug(
        f"ESTIMATE elapsed_h={elapsed_hours:.3f} events={len(window)} "
        f"chlorine={chlorine:.6f} ph={ph:.6f}"
    )

    strictly_after = sum(1 for e in window if as_utc(e.timestamp) > as_utc(measured_at))
    state = EstimatedWaterState(free_chlorine_ppm=chlorine, ph=ph, as_of=current_date)
    return state, _confidence(elapsed_hours, strictly_after, config)
