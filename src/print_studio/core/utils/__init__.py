"""
Utils Package

Serialization of the print configuration and report records.
"""

from .serialization import (
    serialize_print_config,
    deserialize_print_config,
    load_print_config_or_default,
    load_report_json,
    save_report_json,
)

__all__ = [
    "serialize_print_config",
    "deserialize_print_config",
    "load_print_config_or_default",
    "load_report_json",
    "save_report_json",
]
