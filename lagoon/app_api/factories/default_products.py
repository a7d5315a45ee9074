from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from lagoon.core.domain.enums import ProductKind
from lagoon.core.domain.models import ProductDefinition

CHLORINE_GRANULATE = ProductDefinition(
    product_id="chlorine",
    kind=ProductKind.CHLORINE,
    unit="g",
    # 1 g of active chlorine in 1 m3 is 1 ppm; granulate is 56 % available chlorine.
    effect_per_unit_m3=1.0,
    concentration=0.56,
    name="Chlorgranulat",
)

PH_MINUS_GRANULATE = ProductDefinition(
    product_id="ph_minus",
    kind=ProductKind.PH_MINUS,
    unit="g",
    effect_per_unit_m3=0.01,
    concentration=1.0,
    name="pH-Minus",
)

PH_PLUS_GRANULATE = ProductDefinition(
    product_id="ph_plus",
    kind=ProductKind.PH_PLUS,
    unit="g",
    effect_per_unit_m3=0.012,
    concentration=1.0,
    name="pH-Plus",
)

DEFAULT_PRODUCTS: Mapping[str, ProductDefinition] = MappingProxyType(
    {p.product_id: p for p in (CHLORINE_GRANULATE, PH_MINUS_GRANULATE, PH_PLUS_GRANULATE)}
)
