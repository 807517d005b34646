"""Discrete cell state: property slots and interned configurations."""

from .configuration import Configuration
from .properties import (
    MAX_COMBINATIONS,
    MAX_PROPERTIES,
    PropertySlot,
    PropertySource,
    StateDefinition,
    StaticPropertySource,
)

__all__ = [
    "Configuration",
    "MAX_COMBINATIONS",
    "MAX_PROPERTIES",
    "PropertySlot",
    "PropertySource",
    "StateDefinition",
    "StaticPropertySource",
]
