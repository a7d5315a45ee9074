"""JSON codec for engine input/output envelopes.

Responsibilities:
  - Parse plain dict payloads (decoded JSON) into engine models.
  - Serialize engine outputs to plain dicts / JSON with ISO-8601 timestamps.
Must not:
  - Run the engine; translation only.

Invalid payloads raise ValueError naming the offending field.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, TypeVar

from lagoon.core.domain.models import (
    ConfidenceIndicator,
    DosingEvent,
    DosingRecommendation,
    EstimatedWaterState,
    LastMeasurement,
    ParameterStatus,
    PoolConditions,
    PoolWaterEngineInput,
    PoolWaterEngineOutput,
    ProductDefinition,
    TargetRange,
    WaterTargets,
)
from lagoon.core.domain.enums import REASON_METADATA, BatherLoadLevel, ProductKind, UVExposureLevel
from lagoon.app_api.factories import DEFAULT_PRODUCTS, default_targets

E = TypeVar("E", bound=Enum)


def parse_timestamp(value: Any, field_name: str = "timestamp") -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Field '{field_name}' must be an ISO-8601 string")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Field '{field_name}' is not a valid ISO-8601 timestamp: {value}") from exc


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def _require(payload: Mapping[str, Any], key: str, expected_type: type, where: str) -> Any:
    if key not in payload:
        raise ValueError(f"Missing required field '{where}{key}'")
    value = payload[key]
    if expected_type is float:
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
            raise ValueError(f"Field '{where}{key}' must be a finite number")
        return float(value)
    if not isinstance(value, expected_type):
        raise ValueError(f"Field '{where}{key}' must be {expected_type.__name__}")
    return value


def _require_enum(payload: Mapping[str, Any], key: str, enum_cls: type[E], where: str) -> E:
    raw = _require(payload, key, str, where)
    try:
        return enum_cls(raw)
    except ValueError as exc:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"Field '{where}{key}' must be one of: {allowed}") from exc


def _require_object(payload: Mapping[str, Any], key: str, where: str = "") -> Mapping[str, Any]:
    return _require(payload, key, dict, where)


def _parse_range(payload: Mapping[str, Any], where: str) -> TargetRange:
    return TargetRange(
        minimum=_require(payload, "min", float, where),
        maximum=_require(payload, "max", float, where),
    )


def _parse_product(product_id: str, payload: Any) -> ProductDefinition:
    where = f"products.{product_id}."
    if not isinstance(payload, dict):
        raise ValueError(f"Field 'products.{product_id}' must be an object")
    name = payload.get("name")
    if name is not None and not isinstance(name, str):
        raise ValueError(f"Field '{where}name' must be str")
    concentration = 1.0
    if "concentration" in payload:
        concentration = _require(payload, "concentration", float, where)
    return ProductDefinition(
        product_id=product_id,
        kind=_require_enum(payload, "kind", ProductKind, where),
        unit=_require(payload, "unit", str, where),
        effect_per_unit_m3=_require(payload, "effect_per_unit_m3", float, where),
        concentration=concentration,
        name=name,
    )


def _parse_event(index: int, payload: Any) -> DosingEvent:
    where = f"dosing_history[{index}]."
    if not isinstance(payload, dict):
        raise ValueError(f"Field 'dosing_history[{index}]' must be an object")
    return DosingEvent(
        timestamp=parse_timestamp(_require(payload, "timestamp", str, where), f"{where}timestamp"),
        product_id=_require(payload, "product_id", str, where),
        kind=_require_enum(payload, "kind", ProductKind, where),
        amount=_require(payload, "amount", float, where),
        unit=_require(payload, "unit", str, where),
    )


def input_from_dict(payload: Any) -> PoolWaterEngineInput:
    if not isinstance(payload, dict):
        raise ValueError("Engine input must be a JSON object")

    measurement = _require_object(payload, "last_measurement")
    conditions = _require_object(payload, "conditions")

    history_raw = payload.get("dosing_history", [])
    if not isinstance(history_raw, list):
        raise ValueError("Field 'dosing_history' must be a list")

    if "products" in payload:
        products_raw = _require_object(payload, "products")
        products: Mapping[str, ProductDefinition] = {
            pid: _parse_product(pid, body) for pid, body in products_raw.items()
        }
    else:
        products = DEFAULT_PRODUCTS

    if "targets" in payload:
        targets_raw = _require_object(payload, "targets")
        chlorine_raw = _require_object(targets_raw, "free_chlorine", "targets.")
        ph_raw = _require_object(targets_raw, "ph", "targets.")
        targets = WaterTargets(
            free_chlorine=_parse_range(chlorine_raw, "targets.free_chlorine."),
            ph=_parse_range(ph_raw, "targets.ph."),
        )
    else:
        targets = default_targets()

    return PoolWaterEngineInput(
        pool_volume_m3=_require(payload, "pool_volume_m3", float, ""),
        last_measurement=LastMeasurement(
            free_chlorine_ppm=_require(measurement, "free_chlorine_ppm", float, "last_measurement."),
            ph=_require(measurement, "ph", float, "last_measurement."),
            timestamp=parse_timestamp(
                _require(measurement, "timestamp", str, "last_measurement."),
                "last_measurement.timestamp",
            ),
        ),
        conditions=PoolConditions(
            water_temperature_c=_require(conditions, "water_temperature_c", float, "conditions."),
            uv_exposure=_require_enum(conditions, "uv_exposure", UVExposureLevel, "conditions."),
            pool_covered=_require(conditions, "pool_covered", bool, "conditions."),
            bather_load=_require_enum(conditions, "bather_load", BatherLoadLevel, "conditions."),
            filter_runtime_hours_per_day=_require(
                conditions, "filter_runtime_hours_per_day", float, "conditions."
            ),
        ),
        dosing_history=tuple(_parse_event(i, e) for i, e in enumerate(history_raw)),
        products=products,
        targets=targets,
    )


def input_to_dict(inp: PoolWaterEngineInput) -> dict[str, Any]:
    m = inp.last_measurement
    c = inp.conditions
    return {
        "pool_volume_m3": inp.pool_volume_m3,
        "last_measurement": {
            "free_chlorine_ppm": m.free_chlorine_ppm,
            "ph": m.ph,
            "timestamp": format_timestamp(m.timestamp),
        },
        "conditions": {
            "water_temperature_c": c.water_temperature_c,
            "uv_exposure": c.uv_exposure.value,
            "pool_covered": c.pool_covered,
            "bather_load": c.bather_load.value,
            "filter_runtime_hours_per_day": c.filter_runtime_hours_per_day,
        },
        "dosing_history": [
            {
                "timestamp": format_timestamp(e.timestamp),
                "product_id": e.product_id,
                "kind": e.kind.value,
                "amount": e.amount,
                "unit": e.unit,
            }
            for e in inp.dosing_history
        ],
        "products": {
            pid: {
                "kind": p.kind.value,
                "unit": p.unit,
                "effect_per_unit_m3": p.effect_per_unit_m3,
                "concentration": p.concentration,
                "name": p.name,
            }
            for pid, p in sorted(inp.products.items())
        },
        "targets": {
            "free_chlorine": {
                "min": inp.targets.free_chlorine.minimum,
                "max": inp.targets.free_chlorine.maximum,
            },
            "ph": {"min": inp.targets.ph.minimum, "max": inp.targets.ph.maximum},
        },
    }


def _state_to_dict(state: EstimatedWaterState) -> dict[str, Any]:
    return {
        "free_chlorine_ppm": state.free_chlorine_ppm,
        "ph": state.ph,
        "as_of": format_timestamp(state.as_of),
    }


def _confidence_to_dict(confidence: ConfidenceIndicator) -> dict[str, Any]:
    return {
        "level": confidence.level.value,
        "score": confidence.score,
        "reason": confidence.reason,
        "elapsed_hours": confidence.elapsed_hours,
        "event_count": confidence.event_count,
    }


def _recommendation_to_dict(rec: DosingRecommendation) -> dict[str, Any]:
    return {
        "parameter": rec.parameter.value,
        "product_id": rec.product_id,
        "amount": rec.amount,
        "unit": rec.unit,
        "target_value": rec.target_value,
        "reason_code": rec.reason_code.value,
        "explanation": rec.explanation,
    }


def _status_to_dict(status: ParameterStatus) -> dict[str, Any]:
    return {
        "parameter": status.parameter.value,
        "action": status.action.value,
        "reason_code": status.reason_code.value,
        "reason_category": REASON_METADATA[status.reason_code]["category"].value,
        "current_value": status.current_value,
        "target_value": status.target_value,
        "explanation": status.explanation,
    }


def output_to_dict(output: PoolWaterEngineOutput) -> dict[str, Any]:
    return {
        "estimated_state": _state_to_dict(output.estimated_state),
        "confidence": _confidence_to_dict(output.confidence),
        "recommendations": [_recommendation_to_dict(r) for r in output.recommendations],
        "statuses": [_status_to_dict(s) for s in output.statuses],
    }


def output_to_json(output: PoolWaterEngineOutput, indent: Optional[int] = 2) -> str:
    return json.dumps(output_to_dict(output), indent=indent, sort_keys=True)
