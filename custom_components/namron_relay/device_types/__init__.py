"""Device type implementations for the Namron relay component."""

from .base import BaseDevice, EntityCategory, ExposedField
from .relay import NamronRelayDevice

__all__ = [
    "BaseDevice",
    "EntityCategory",
    "ExposedField",
    "NamronRelayDevice",
]
