"""Fiat-to-crypto onramp widget support."""

from yieldramp.onramp.parameters import (
    build_widget_parameters,
    get_default_parameters,
    sanitize_parameters,
)
from yieldramp.onramp.service import OnrampService
from yieldramp.onramp.validators import ValidationResult, validate_parameters

__all__ = [
    "OnrampService",
    "ValidationResult",
    "build_widget_parameters",
    "get_default_parameters",
    "sanitize_parameters",
    "validate_parameters",
]
