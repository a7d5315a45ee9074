from .build_input import (
    build_input_from_ports,
    create_input,
    create_input_from_weather,
    default_targets,
)
from .default_products import DEFAULT_PRODUCTS

__all__ = [
    "DEFAULT_PRODUCTS",
    "build_input_from_ports",
    "create_input",
    "create_input_from_weather",
    "default_targets",
]
