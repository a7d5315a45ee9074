"""Time-series projection and trend detection on top of the estimator.

Responsibilities:
  - Sample the estimate over a horizon for charting and time scrubbing.
  - Classify short-term trend per parameter, honoring doses still mixing in.

Invariants:
  - Every sample equals estimate() at that instant; no separate model.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import numpy as np

from lagoon.core.chemistry.constants import DEFAULT_TREND_THRESHOLD, PENDING_DOSE_WINDOW_HOURS
from lagoon.core.chemistry.model_config import ChemistryModelConfig, default_model_config
from lagoon.core.domain.enums import ProductKind, TrendDirection
from lagoon.core.domain.models import PoolWaterEngineInput, TrendSnapshot
from lagoon.core.domain.timestamps import hours_between
from .estimator import estimate


@dataclass(frozen=True)
class ProjectionSeries:
    start: datetime
    hours: np.ndarray
    free_chlorine_ppm: np.ndarray
    ph: np.ndarray

    def __len__(self) -> int:
        return int(self.hours.shape[0])


def project_series(
    inp: PoolWaterEngineInput,
    start: datetime,
    horizon_hours: float,
    step_hours: float = 1.0,
    config: Optional[ChemistryModelConfig] = None,
) -> ProjectionSeries:
    if step_hours <= 0:
        raise ValueError("step_hours must be > 0")
    config = config or default_model_config()
    horizon = max(float(horizon_hours), 0.0)
    steps = int(np.floor(horizon / step_hours + 1e-9))
    offsets = np.arange(steps + 1, dtype=float) * step_hours

    chlorine = np.empty_like(offsets)
    ph = np.empty_like(offsets)
    for i, offset in enumerate(offsets):
        state, _ = estimate(inp, start + timedelta(hours=float(offset)), config)
        chlorine[i] = state.free_chlorine_ppm
        ph[i] = state.ph

    return ProjectionSeries(start=start, hours=offsets, free_chlorine_ppm=chlorine, ph=ph)


def trend_direction(
    previous: float, current: float, threshold: float = DEFAULT_TREND_THRESHOLD
) -> TrendDirection:
    diff = current - previous
    if diff > threshold:
        return TrendDirection.UP
    if diff < -threshold:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def estimate_trends(
    inp: PoolWaterEngineInput,
    current_date: datetime,
    lookback_hours: float = 1.0,
    threshold: float = DEFAULT_TREND_THRESHOLD,
    config: Optional[ChemistryModelConfig] = None,
) -> TrendSnapshot:
    config = config or default_model_config()
    previous, _ = estimate(inp, current_date - timedelta(hours=lookback_hours), config)
    current, _ = estimate(inp, current_date, config)

    chlorine_trend = trend_direction(previous.free_chlorine_ppm, current.free_chlorine_ppm, threshold)
    ph_trend = trend_direction(previous.ph, current.ph, threshold)

    pending: set[ProductKind] = set()
    for event in inp.dosing_history:
        if not 0.0 <= hours_between(event.timestamp, current_date) < PENDING_DOSE_WINDOW_HOURS:
            continue
        product = inp.products.get(event.product_id)
        # Unknown or mismatched products have no effect on the estimate either.
        if product is not None and product.kind == event.kind:
            pending.add(event.kind)
    if ProductKind.CHLORINE in pending:
        chlorine_trend = TrendDirection.UP
    if ProductKind.PH_MINUS in pending:
        ph_trend = TrendDirection.DOWN
    elif ProductKind.PH_PLUS in pending:
        ph_trend = TrendDirection.UP

    return TrendSnapshot(free_chlorine=chlorine_trend, ph=ph_trend)
