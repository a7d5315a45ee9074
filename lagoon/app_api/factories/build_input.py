"""Construct engine inputs from minimal caller fields and collaborator ports.

Responsibilities:
  - Fill documented defaults (targets, catalog, conditions).
  - Translate weather readings into PoolConditions.
Must not:
  - Implement chemistry; composition only.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Mapping, Optional, Sequence

from lagoon.app_api.dto import WeatherData
from lagoon.app_api.ports import (
    Clock,
    DosingHistoryProvider,
    MeasurementProvider,
    ProductCatalogProvider,
    WeatherProvider,
)
from lagoon.core.chemistry.constants import PENDING_DOSE_WINDOW_HOURS
from lagoon.core.domain.enums import BatherLoadLevel, UVExposureLevel
from lagoon.core.domain.models import (
    DosingEvent,
    LastMeasurement,
    PoolConditions,
    PoolWaterEngineInput,
    ProductDefinition,
    TargetRange,
    WaterTargets,
)
from lagoon.core.domain.timestamps import as_utc
from .default_products import DEFAULT_PRODUCTS

DEFAULT_CHLORINE_RANGE = (0.5, 1.5)
DEFAULT_PH_RANGE = (7.0, 7.4)
DEFAULT_WATER_TEMPERATURE_C = 25.0
DEFAULT_FILTER_RUNTIME_HOURS = 8.0


def default_targets() -> WaterTargets:
    return WaterTargets(
        free_chlorine=TargetRange(*DEFAULT_CHLORINE_RANGE),
        ph=TargetRange(*DEFAULT_PH_RANGE),
    )


def create_input(
    pool_volume_m3: float,
    last_chlorine_ppm: float,
    last_ph: float,
    last_measurement_at: datetime,
    water_temperature_c: float = DEFAULT_WATER_TEMPERATURE_C,
    uv_exposure: UVExposureLevel = UVExposureLevel.MEDIUM,
    pool_covered: bool = False,
    bather_load: BatherLoadLevel = BatherLoadLevel.NONE,
    filter_runtime_hours_per_day: float = DEFAULT_FILTER_RUNTIME_HOURS,
    dosing_history: Sequence[DosingEvent] = (),
    products: Optional[Mapping[str, ProductDefinition]] = None,
    targets: Optional[WaterTargets] = None,
) -> PoolWaterEngineInput:
    return PoolWaterEngineInput(
        pool_volume_m3=pool_volume_m3,
        last_measurement=LastMeasurement(
            free_chlorine_ppm=last_chlorine_ppm,
            ph=last_ph,
            timestamp=last_measurement_at,
        ),
        conditions=PoolConditions(
            water_temperature_c=water_temperature_c,
            uv_exposure=uv_exposure,
            pool_covered=pool_covered,
            bather_load=bather_load,
            filter_runtime_hours_per_day=filter_runtime_hours_per_day,
        ),
        dosing_history=tuple(dosing_history),
        products=DEFAULT_PRODUCTS if products is None else products,
        targets=targets or default_targets(),
    )


def create_input_from_weather(
    pool_volume_m3: float,
    last_chlorine_ppm: float,
    last_ph: float,
    last_measurement_at: datetime,
    weather: WeatherData,
    pool_covered: bool = False,
    bather_load: BatherLoadLevel = BatherLoadLevel.NONE,
    filter_runtime_hours_per_day: float = DEFAULT_FILTER_RUNTIME_HOURS,
    dosing_history: Sequence[DosingEvent] = (),
    products: Optional[Mapping[str, ProductDefinition]] = None,
    targets: Optional[WaterTargets] = None,
) -> PoolWaterEngineInput:
    return create_input(
        pool_volume_m3=pool_volume_m3,
        last_chlorine_ppm=last_chlorine_ppm,
        last_ph=last_ph,
        last_measurement_at=last_measurement_at,
        water_temperature_c=weather.temperature_c,
        uv_exposure=weather.uv_exposure,
        pool_covered=pool_covered,
        bather_load=bather_load,
        filter_runtime_hours_per_day=filter_runtime_hours_per_day,
        dosing_history=dosing_history,
        products=products,
        targets=targets,
    )


def build_input_from_ports(
    pool_volume_m3: float,
    measurements: MeasurementProvider,
    history: DosingHistoryProvider,
    catalog: ProductCatalogProvider,
    weather: WeatherProvider,
    clock: Clock,
    pool_covered: bool = False,
    bather_load: BatherLoadLevel = BatherLoadLevel.NONE,
    filter_runtime_hours_per_day: float = DEFAULT_FILTER_RUNTIME_HOURS,
    targets: Optional[WaterTargets] = None,
) -> tuple[PoolWaterEngineInput, datetime]:
    """
    Composition root: read one consistent snapshot from the collaborators and
    return the engine input together with the "now" it was taken at.
    """
    now = clock.now()
    measurement = measurements.get_last_measurement()
    if measurement is None:
        raise ValueError("No measurement recorded yet")

    # Doses still mixing in count even if they predate the measurement.
    since = min(
        as_utc(measurement.timestamp),
        as_utc(now) - timedelta(hours=PENDING_DOSE_WINDOW_HOURS),
    )
    events = history.get_dosing_events(since, now)

    inp = create_input_from_weather(
        pool_volume_m3=pool_volume_m3,
        last_chlorine_ppm=measurement.free_chlorine_ppm,
        last_ph=measurement.ph,
        last_measurement_at=measurement.timestamp,
        weather=weather.fetch_current_weather(),
        pool_covered=pool_covered,
        bather_load=bather_load,
        filter_runtime_hours_per_day=filter_runtime_hours_per_day,
        dosing_history=events,
        products=catalog.get_products(),
        targets=targets,
    )
    return inp, now
