"""
Module: studio

Purpose:
    Config Store for the print studio. Holds layout intent (section order,
    inclusion, density, manual/row breaks, photo selections) and exposes
    pure mutation operations.

Key Classes:
    - PrintConfig: Immutable configuration snapshot
    - ConfigStore: Current snapshot plus change listeners

Used By:
    - controller: Layout session
    - persistence: Auto-save
"""

from .defaults import DEFAULT_SECTIONS
from .print_config import PrintConfig, default_print_config
from .store import ConfigStore

__all__ = [
    "DEFAULT_SECTIONS",
    "PrintConfig",
    "default_print_config",
    "ConfigStore",
]
