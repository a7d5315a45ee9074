from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from lagoon.app_api.dto import WeatherData, uv_exposure_from_index
from lagoon.app_api.facade import PoolWaterEngine
from lagoon.app_api.factories import (
    DEFAULT_PRODUCTS,
    build_input_from_ports,
    create_input,
    create_input_from_weather,
    default_targets,
)
from lagoon.app_api.providers.manual_weather_provider import ManualWeatherProvider
from lagoon.core.domain.enums import (
    BatherLoadLevel,
    ConfidenceLevel,
    ProductKind,
    ReasonCode,
    UVExposureLevel,
)
from lagoon.core.domain.models import DosingEvent, LastMeasurement

T0 = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)


class _Measurements:
    def __init__(self, measurement):
        self._measurement = measurement

    def get_last_measurement(self):
        return self._measurement


class _History:
    def __init__(self, events):
        self.events = events
        self.calls = []

    def get_dosing_events(self, since, until):
        self.calls.append((since, until))
        return [e for e in self.events if since <= e.timestamp <= until]


class _Catalog:
    def get_products(self):
        return DEFAULT_PRODUCTS


class _FixedClock:
    def __init__(self, now):
        self._now = now

    def now(self):
        return self._now


def test_create_input_defaults() -> None:
    inp = create_input(50.0, 1.0, 7.2, T0)

    assert inp.conditions.water_temperature_c == 25.0
    assert inp.conditions.uv_exposure == UVExposureLevel.MEDIUM
    assert inp.conditions.pool_covered is False
    assert inp.conditions.bather_load == BatherLoadLevel.NONE
    assert inp.conditions.filter_runtime_hours_per_day == 8.0
    assert inp.dosing_history == ()
    assert set(inp.products) == {"chlorine", "ph_minus", "ph_plus"}
    assert inp.targets == default_targets()


def test_default_catalog_is_read_only() -> None:
    assert DEFAULT_PRODUCTS["chlorine"].concentration == pytest.approx(0.56)
    assert DEFAULT_PRODUCTS["ph_minus"].kind == ProductKind.PH_MINUS
    with pytest.raises(TypeError):
        DEFAULT_PRODUCTS["other"] = DEFAULT_PRODUCTS["chlorine"]


@pytest.mark.parametrize(
    "uv_index, expected",
    [
        (0.0, UVExposureLevel.LOW),
        (2.9, UVExposureLevel.LOW),
        (3.0, UVExposureLevel.MEDIUM),
        (5.9, UVExposureLevel.MEDIUM),
        (6.0, UVExposureLevel.HIGH),
        (11.0, UVExposureLevel.HIGH),
    ],
)
def test_uv_index_mapping(uv_index: float, expected: UVExposureLevel) -> None:
    assert uv_exposure_from_index(uv_index) == expected
    assert WeatherData(temperature_c=20.0, uv_index=uv_index).uv_exposure == expected


def test_weather_data_validate() -> None:
    WeatherData(temperature_c=28.0, uv_index=7.0).validate()
    with pytest.raises(ValueError, match="uv_index"):
        WeatherData(temperature_c=28.0, uv_index=-1.0).validate()
    with pytest.raises(ValueError, match="temperature_c"):
        WeatherData(temperature_c=80.0, uv_index=1.0).validate()


def test_create_input_from_weather_maps_conditions() -> None:
    weather = WeatherData(temperature_c=29.0, uv_index=8.0)

    inp = create_input_from_weather(50.0, 1.0, 7.2, T0, weather, pool_covered=True)

    assert inp.conditions.water_temperature_c == 29.0
    assert inp.conditions.uv_exposure == UVExposureLevel.HIGH
    assert inp.conditions.pool_covered is True


def test_manual_weather_provider_update() -> None:
    provider = ManualWeatherProvider()
    assert provider.fetch_current_weather() == WeatherData(temperature_c=25.0, uv_index=5.0)

    provider.update(temperature_c=18.0, uv_index=1.0)

    assert provider.fetch_current_weather().uv_exposure == UVExposureLevel.LOW


def test_build_input_from_ports_reads_one_snapshot() -> None:
    now = T0 + timedelta(hours=6)
    measurement = LastMeasurement(free_chlorine_ppm=0.4, ph=7.2, timestamp=T0)
    history = _History(
        [
            DosingEvent(T0 - timedelta(hours=1), "chlorine", ProductKind.CHLORINE, 10.0, "g"),
            DosingEvent(T0 + timedelta(hours=3), "chlorine", ProductKind.CHLORINE, 20.0, "g"),
        ]
    )

    inp, taken_at = build_input_from_ports(
        pool_volume_m3=50.0,
        measurements=_Measurements(measurement),
        history=history,
        catalog=_Catalog(),
        weather=ManualWeatherProvider(temperature_c=22.0, uv_index=2.0),
        clock=_FixedClock(now),
    )

    assert taken_at == now
    assert history.calls == [(T0, now)]
    assert len(inp.dosing_history) == 1
    assert inp.last_measurement == measurement
    assert inp.conditions.uv_exposure == UVExposureLevel.LOW


def test_build_input_from_ports_keeps_recent_doses_before_fresh_measurement() -> None:
    now = T0 + timedelta(hours=1)
    history = _History([])

    build_input_from_ports(
        50.0,
        _Measurements(LastMeasurement(1.0, 7.2, now)),
        history,
        _Catalog(),
        ManualWeatherProvider(),
        _FixedClock(now),
    )

    assert history.calls == [(now - timedelta(hours=4), now)]


def test_build_input_from_ports_requires_measurement() -> None:
    with pytest.raises(ValueError, match="No measurement"):
        build_input_from_ports(
            50.0,
            _Measurements(None),
            _History([]),
            _Catalog(),
            ManualWeatherProvider(),
            _FixedClock(T0),
        )


def test_engine_process_fresh_in_range_measurement() -> None:
    output = PoolWaterEngine().process(create_input(50.0, 1.0, 7.2, T0), T0)

    assert output.estimated_state.free_chlorine_ppm == 1.0
    assert output.estimated_state.ph == 7.2
    assert output.confidence.level == ConfidenceLevel.HIGH
    assert output.recommendations == ()
    assert output.dosing_needed is False
    assert [s.reason_code for s in output.statuses] == [ReasonCode.IN_RANGE, ReasonCode.IN_RANGE]


def test_engine_stages_compose_to_process() -> None:
    engine = PoolWaterEngine()
    inp = create_input(50.0, 0.2, 7.9, T0)
    now = T0 + timedelta(hours=30)

    state, confidence = engine.estimate_state(inp, now)
    recs = engine.recommend(state, inp.targets, inp.products, inp.pool_volume_m3)
    output = engine.process(inp, now)

    assert output.estimated_state == state
    assert output.confidence == confidence
    assert list(output.recommendations) == recs
    assert output.recommendation_for(output.recommendations[0].parameter) == recs[0]
    assert len(engine.project(inp, now, 24.0, 6.0)) == 5
    assert engine.trends(inp, now).ph is not None
    assert engine.config.model_id == "POOL_CHEMISTRY_V1"


def test_build_input_from_ports_mixes_naive_measurement_and_aware_clock() -> None:
    naive_at = datetime(2026, 6, 1, 8, 0)
    now = T0 + timedelta(hours=24)
    history = _History([])

    inp, taken_at = build_input_from_ports(
        50.0,
        _Measurements(LastMeasurement(1.0, 7.2, naive_at)),
        history,
        _Catalog(),
        ManualWeatherProvider(),
        _FixedClock(now),
    )

    assert taken_at == now
    assert history.calls == [(T0, now)]
    assert inp.last_measurement.timestamp == naive_at
    state, _ = PoolWaterEngine().estimate_state(inp, now)
    assert state.free_chlorine_ppm < 1.0
