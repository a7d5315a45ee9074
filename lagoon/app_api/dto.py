"""DTO definitions for app-level data exchange.

Responsibilities:
  - Define stable, typed structures handed in by external collaborators.
Must not:
  - Implement chemistry; only translate into engine types.
"""

from __future__ import annotations

from dataclasses import dataclass

from lagoon.core.domain.enums import UVExposureLevel

UV_MEDIUM_FROM = 3.0
UV_HIGH_FROM = 6.0


def uv_exposure_from_index(uv_index: float) -> UVExposureLevel:
    if uv_index < UV_MEDIUM_FROM:
        return UVExposureLevel.LOW
    if uv_index < UV_HIGH_FROM:
        return UVExposureLevel.MEDIUM
    return UVExposureLevel.HIGH


@dataclass(frozen=True)
class WeatherData:
    temperature_c: float
    uv_index: float

    @property
    def uv_exposure(self) -> UVExposureLevel:
        return uv_exposure_from_index(self.uv_index)

    def validate(self) -> None:
        if self.uv_index < 0:
            raise ValueError("uv_index must be >= 0")
        if self.temperature_c < -5 or self.temperature_c > 50:
            raise ValueError("temperature_c must be within [-5, 50]")
