"""
Schemas Package

Validation of persisted print configuration records.
"""

from .validator import (
    validate_print_config,
    ValidationError,
    PRINT_CONFIG_SCHEMA_VERSION,
    SUPPORTED_SCHEMA_VERSIONS,
)

__all__ = [
    "validate_print_config",
    "ValidationError",
    "PRINT_CONFIG_SCHEMA_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
]
