from __future__ import annotations

from lagoon.app_api.dto import WeatherData


class ManualWeatherProvider:
    """WeatherProvider backed by values the user typed in."""

    def __init__(self, temperature_c: float = 25.0, uv_index: float = 5.0) -> None:
        self._temperature_c = temperature_c
        self._uv_index = uv_index

    def update(self, temperature_c: float, uv_index: float) -> None:
        self._temperature_c = temperature_c
        self._uv_index = uv_index

    def fetch_current_weather(self) -> WeatherData:
        return WeatherData(temperature_c=self._temperature_c, uv_index=self._uv_index)
