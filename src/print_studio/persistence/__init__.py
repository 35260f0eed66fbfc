"""
Module: print_studio.persistence

Purpose:
    Durable storage of the print configuration: locked JSON files keyed
    by project and report period, and a debounced auto-saver.

Key Classes:
    - JsonFileBackend: portalocker-locked JSON store
    - AutoSaver: Debounced, retrying saver

Key Functions:
    - load_print_config(): Stored configuration or defaults

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - print_studio.controller: Studio session
"""

from .autosave import (
    AutoSaver,
    ConfigBackend,
    JsonFileBackend,
    SaveError,
    SaveStatus,
    load_print_config,
)

__all__ = [
    "AutoSaver",
    "ConfigBackend",
    "JsonFileBackend",
    "SaveError",
    "SaveStatus",
    "load_print_config",
]
