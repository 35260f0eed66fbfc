"""
Core Models Package

Immutable data models shared by the config store, the packing algorithm
and both renderers.

All models in this package are frozen dataclasses. This ensures:
1. No accidental mutation between packing and rendering
2. Safe to hand the same snapshot to concurrent renderers
3. PageMap recomputation can never drift from its inputs
"""

from .sections import (
    Density,
    ImagePosition,
    ManualBreak,
    SectionDescriptor,
    SectionKind,
    SectionSettings,
)
from .report import Photo, ReportData, SectionContent

__all__ = [
    "Density",
    "ImagePosition",
    "ManualBreak",
    "SectionDescriptor",
    "SectionKind",
    "SectionSettings",
    "Photo",
    "ReportData",
    "SectionContent",
]
