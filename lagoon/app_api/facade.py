from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional

from lagoon.core.chemistry.model_config import ChemistryModelConfig, default_model_config
from lagoon.core.domain.models import (
    ConfidenceIndicator,
    DosingRecommendation,
    EstimatedWaterState,
    PoolWaterEngineInput,
    PoolWaterEngineOutput,
    ProductDefinition,
    TrendSnapshot,
    WaterTargets,
)
from lagoon.core.engine import estimator, projection, recommender


class PoolWaterEngine:
    """Estimate -> recommend composition; every call takes an explicit "now"."""

    def __init__(self, config: Optional[ChemistryModelConfig] = None) -> None:
        self._config = config or default_model_config()

    @property
    def config(self) -> ChemistryModelConfig:
        return self._config

    def process(self, inp: PoolWaterEngineInput, current_date: datetime) -> PoolWaterEngineOutput:
        state, confidence = self.estimate_state(inp, current_date)
        recommendations, statuses = recommender.evaluate(
            state,
            inp.targets,
            inp.products,
            inp.pool_volume_m3,
            self._config,
        )
        return PoolWaterEngineOutput(
            estimated_state=state,
            confidence=confidence,
            recommendations=tuple(recommendations),
            statuses=tuple(statuses),
        )

    def estimate_state(
        self, inp: PoolWaterEngineInput, current_date: datetime
    ) -> tuple[EstimatedWaterState, ConfidenceIndicator]:
        return estimator.estimate(inp, current_date, self._config)

    def recommend(
        self,
        state: EstimatedWaterState,
        targets: WaterTargets,
        products: Mapping[str, ProductDefinition],
        pool_volume_m3: float,
    ) -> list[DosingRecommendation]:
        return recommender.recommend(state, targets, products, pool_volume_m3, self._config)

    def project(
        self,
        inp: PoolWaterEngineInput,
        start: datetime,
        horizon_hours: float,
        step_hours: float = 1.0,
    ) -> projection.ProjectionSeries:
        return projection.project_series(inp, start, horizon_hours, step_hours, self._config)

    def trends(self, inp: PoolWaterEngineInput, current_date: datetime) -> TrendSnapshot:
        return projection.estimate_trends(inp, current_date, config=self._config)
