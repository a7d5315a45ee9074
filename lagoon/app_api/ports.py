"""Port definitions for app-level dependencies.

Responsibilities:
  - Define interface contracts for persistence, weather, and clock collaborators.
Must not:
  - Implement logic; interfaces only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Protocol

from lagoon.app_api.dto import WeatherData
from lagoon.core.domain.models import DosingEvent, LastMeasurement, ProductDefinition


class MeasurementProvider(Protocol):
    def get_last_measurement(self) -> Optional[LastMeasurement]:
        ...


class DosingHistoryProvider(Protocol):
    def get_dosing_events(self, since: datetime, until: datetime) -> list[DosingEvent]:
        ...


class ProductCatalogProvider(Protocol):
    def get_products(self) -> Mapping[str, ProductDefinition]:
        ...


class WeatherProvider(Protocol):
    def fetch_current_weather(self) -> WeatherData:
        ...


class Clock(Protocol):
    def now(self) -> datetime:
        ...
