"""Display formatting for dose amounts in grams or measuring cups ("Becher").

Responsibilities:
  - Render engine amounts for the UI; the engine itself never rounds for display.
  - Convert between cup picker ticks, cups, and grams.

Tick layout: ticks 0-8 are quarter cups (0 to 2.0), ticks 9-24 are half cups
(2.5 to 10.0).
"""

from __future__ import annotations

import math

UNIT_GRAMS = "gramm"
UNIT_CUPS = "becher"

DEFAULT_CUP_GRAMS = 50.0
CUP_TICK_COUNT = 24
_QUARTER_TICKS = 8
_QUARTER_LIMIT_CUPS = 2.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _uses_cups(unit: str, cup_grams: float) -> bool:
    return unit == UNIT_CUPS and cup_grams > 0


def format_cups(cups: float) -> str:
    whole = int(cups)
    quarters = _round_half_up((cups - whole) * 4)
    if quarters == 0:
        return f"{whole}"
    if quarters == 4:
        return f"{whole + 1}"
    fraction = {1: "1/4", 2: "1/2", 3: "3/4"}[quarters]
    return f"{whole} {fraction}" if whole > 0 else fraction


def format_dose(grams: float, unit: str, cup_grams: float = DEFAULT_CUP_GRAMS) -> str:
    if _uses_cups(unit, cup_grams):
        return f"{format_cups(grams / cup_grams)} Bch."
    return f"{grams:.0f} g"


def format_amount(grams: float, unit: str, cup_grams: float = DEFAULT_CUP_GRAMS) -> str:
    if _uses_cups(unit, cup_grams):
        return format_cups(grams / cup_grams)
    return f"{grams:.0f}"


def format_unit(unit: str) -> str:
    return "Becher" if unit == UNIT_CUPS else "Gramm"


def cup_tick_to_cups(index: int) -> float:
    if index <= _QUARTER_TICKS:
        return index * 0.25
    return _QUARTER_LIMIT_CUPS + (index - _QUARTER_TICKS) * 0.5


def cups_to_cup_tick(cups: float) -> int:
    if cups <= _QUARTER_LIMIT_CUPS:
        return min(_QUARTER_TICKS, max(0, _round_half_up(cups / 0.25)))
    tick = _QUARTER_TICKS + _round_half_up((cups - _QUARTER_LIMIT_CUPS) / 0.5)
    return min(CUP_TICK_COUNT, max(_QUARTER_TICKS, tick))


def cup_tick_to_grams(index: int, cup_grams: float = DEFAULT_CUP_GRAMS) -> float:
    return cup_tick_to_cups(index) * cup_grams


def grams_to_cup_tick(grams: float, cup_grams: float = DEFAULT_CUP_GRAMS) -> int:
    if cup_grams <= 0:
        return 0
    return cups_to_cup_tick(grams / cup_grams)


def round_practical(amount: float) -> float:
    """Round to the nearest 10 above 100, otherwise to the nearest 5; never negative."""
    if amount > 100:
        return _round_half_up(amount / 10.0) * 10.0
    if amount > 0:
        return _round_half_up(amount / 5.0) * 5.0
    return 0.0
