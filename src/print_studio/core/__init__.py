"""
Core data models and utilities for the print studio.

Subpackages:
    - models: Section descriptors, layout intent and report data
    - schemas: Validation of persisted print configuration
    - utils: Serialization helpers
"""
