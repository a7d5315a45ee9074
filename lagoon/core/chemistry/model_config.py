from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, TypeVar

from lagoon.core.domain.enums import BatherLoadLevel, UVExposureLevel

DEFAULT_MODEL_ID = "POOL_CHEMISTRY_V1"

_CANONICAL_RE = re.compile(r"^POOL_CHEMISTRY_V([0-9]+)$")
_ALIAS = "POOL_CHEMISTRY"

E = TypeVar("E", bound=Enum)


class ModelResolutionError(ValueError):
    pass


@dataclass(frozen=True)
class ChemistryModelConfig:
    model_id: str
    description: str
    chlorine_base_decay_per_day: float
    q10_coefficient: float
    uv_decay_multipliers: Mapping[UVExposureLevel, float]
    cover_factor: float
    bather_consumption_multipliers: Mapping[BatherLoadLevel, float]
    filter_chlorine_effect: float
    min_decay_per_day: float
    max_decay_per_day: float
    ph_base_drift_per_day: float
    ph_filter_max_effect: float
    ph_temperature_span_c: float
    ph_min_temperature_multiplier: float
    ph_max_drift_per_day: float
    bather_ph_depression_per_day: Mapping[BatherLoadLevel, float]
    ph_drift_floor: float
    ph_drift_ceiling: float
    mixing_time_constant_hours: float
    high_confidence_hours: float
    medium_confidence_hours: float
    event_uncertainty_hours: float
    confidence_score_scale_hours: float
    amount_precision: int


def _models_dir() -> Path:
    return Path(__file__).resolve().parent / "models"


def _require(payload: dict[str, Any], key: str, expected_type: type) -> Any:
    if key not in payload:
        raise ValueError(f"Missing required field '{key}' in model config")
    value = payload[key]
    if expected_type is float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ValueError(f"Field '{key}' must be float")
        return float(value)
    if expected_type is int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Field '{key}' must be int")
        return value
    if not isinstance(value, expected_type):
        raise ValueError(f"Field '{key}' must be {expected_type.__name__}")
    return value


def _require_enum_table(payload: dict[str, Any], key: str, enum_cls: type[E]) -> Mapping[E, float]:
    raw = _require(payload, key, dict)
    table: dict[E, float] = {}
    for member in enum_cls:
        table[member] = _require(raw, member.value, float)
    unknown = sorted(set(raw) - {m.value for m in enum_cls})
    if unknown:
        raise ValueError(f"Field '{key}' has unknown keys: {unknown}")
    return MappingProxyType(table)


def resolve_model_id(model_input: str, models_dir: Path | None = None) -> tuple[str, Path]:
    models_dir = models_dir or _models_dir()
    if _CANONICAL_RE.match(model_input):
        path = models_dir / f"{model_input}.json"
        if path.exists():
            return model_input, path
        raise ModelResolutionError(f"Chemistry model not found: {model_input}")

    if model_input == _ALIAS:
        max_version = -1
        resolved: str | None = None
        for path in models_dir.iterdir():
            match = _CANONICAL_RE.match(path.stem)
            if not path.is_file() or path.suffix != ".json" or match is None:
                continue
            version = int(match.group(1))
            if version > max_version:
                max_version = version
                resolved = path.stem
        if resolved is None:
            raise ModelResolutionError("No versioned chemistry model files")
        return resolved, models_dir / f"{resolved}.json"

    raise ModelResolutionError(f"Unsupported model id format: {model_input}")


def parse_model_config(payload: Any) -> ChemistryModelConfig:
    if not isinstance(payload, dict):
        raise ValueError("Model config must be a JSON object")

    cfg = ChemistryModelConfig(
        model_id=_require(payload, "model_id", str),
        description=_require(payload, "description", str),
        chlorine_base_decay_per_day=_require(payload, "chlorine_base_decay_per_day", float),
        q10_coefficient=_require(payload, "q10_coefficient", float),
        uv_decay_multipliers=_require_enum_table(payload, "uv_decay_multipliers", UVExposureLevel),
        cover_factor=_require(payload, "cover_factor", float),
        bather_consumption_multipliers=_require_enum_table(
            payload, "bather_consumption_multipliers", BatherLoadLevel
        ),
        filter_chlorine_effect=_require(payload, "filter_chlorine_effect", float),
        min_decay_per_day=_require(payload, "min_decay_per_day", float),
        max_decay_per_day=_require(payload, "max_decay_per_day", float),
        ph_base_drift_per_day=_require(payload, "ph_base_drift_per_day", float),
        ph_filter_max_effect=_require(payload, "ph_filter_max_effect", float),
        ph_temperature_span_c=_require(payload, "ph_temperature_span_c", float),
        ph_min_temperature_multiplier=_require(payload, "ph_min_temperature_multiplier", float),
        ph_max_drift_per_day=_require(payload, "ph_max_drift_per_day", float),
        bather_ph_depression_per_day=_require_enum_table(
            payload, "bather_ph_depression_per_day", BatherLoadLevel
        ),
        ph_drift_floor=_require(payload, "ph_drift_floor", float),
        ph_drift_ceiling=_require(payload, "ph_drift_ceiling", float),
        mixing_time_constant_hours=_require(payload, "mixing_time_constant_hours", float),
        high_confidence_hours=_require(payload, "high_confidence_hours", float),
        medium_confidence_hours=_require(payload, "medium_confidence_hours", float),
        event_uncertainty_hours=_require(payload, "event_uncertainty_hours", float),
        confidence_score_scale_hours=_require(payload, "confidence_score_scale_hours", float),
        amount_precision=_require(payload, "amount_precision", int),
    )

    if cfg.min_decay_per_day <= 0 or cfg.min_decay_per_day > cfg.max_decay_per_day:
        raise ValueError("Decay bounds must satisfy 0 < min_decay_per_day <= max_decay_per_day")
    if cfg.ph_drift_floor >= cfg.ph_drift_ceiling:
        raise ValueError("ph_drift_floor must be < ph_drift_ceiling")
    if cfg.high_confidence_hours > cfg.medium_confidence_hours:
        raise ValueError("high_confidence_hours must be <= medium_confidence_hours")
    if cfg.confidence_score_scale_hours <= 0:
        raise ValueError("confidence_score_scale_hours must be > 0")
    if cfg.mixing_time_constant_hours < 0 or cfg.event_uncertainty_hours < 0:
        raise ValueError("mixing_time_constant_hours and event_uncertainty_hours must be >= 0")
    if cfg.amount_precision < 0:
        raise ValueError("amount_precision must be >= 0")
    return cfg


@lru_cache(maxsize=None)
def load_model_config(model_id: str) -> ChemistryModelConfig:
    resolved_id, model_path = resolve_model_id(model_id)
    payload = json.loads(model_path.read_text(encoding="utf-8"))
    cfg = parse_model_config(payload)
    if cfg.model_id != resolved_id:
        raise ValueError(
            f"model_id mismatch: requested '{resolved_id}', config has '{cfg.model_id}'"
        )
    return cfg


def default_model_config() -> ChemistryModelConfig:
    return load_model_config(DEFAULT_MODEL_ID)
