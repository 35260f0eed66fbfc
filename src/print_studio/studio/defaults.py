"""
Module: studio.defaults

Purpose:
    Documented defaults for the print configuration. Used for new reports
    and as the fallback whenever a persisted record is missing or
    malformed.

Key Constants:
    - DEFAULT_SECTIONS: Default section list in report order

Used By:
    - studio.print_config: default_print_config()
    - core.utils.serialization: Fallback and section merging
"""

from __future__ import annotations

from typing import Tuple

from print_studio.core.models import SectionDescriptor, SectionKind

DEFAULT_SECTIONS: Tuple[SectionDescriptor, ...] = (
    SectionDescriptor("cover", SectionKind.COVER.value, "Cover Page", True, 0),
    SectionDescriptor("key_personnel", SectionKind.TABLE.value, "Key Personnel", True, 1),
    SectionDescriptor("overview", SectionKind.NARRATIVE.value, "Weekly Recap", True, 2),
    SectionDescriptor("weather", SectionKind.TABLE.value, "Weather", True, 3),
    SectionDescriptor("progress", SectionKind.TABLE.value, "Progress", True, 4),
    SectionDescriptor("lookahead", SectionKind.TABLE.value, "Look Ahead", True, 5),
    SectionDescriptor("manpower", SectionKind.TABLE.value, "Manpower", True, 6),
    SectionDescriptor("equipment", SectionKind.TABLE.value, "Equipment", True, 7),
    SectionDescriptor("materials", SectionKind.TABLE.value, "Materials", True, 8),
    SectionDescriptor("procurement", SectionKind.TABLE.value, "Procurement", True, 9),
    SectionDescriptor("safety", SectionKind.TABLE.value, "Safety", True, 10),
    SectionDescriptor("financials", SectionKind.TABLE.value, "Financials", True, 11),
    SectionDescriptor("schedule", SectionKind.TABLE.value, "Schedule Milestones", True, 12),
    SectionDescriptor("issues", SectionKind.TABLE.value, "Issues & Risks", True, 13),
    SectionDescriptor("documents", SectionKind.NARRATIVE.value, "Documents", False, 14),
    SectionDescriptor("photos", SectionKind.PHOTO_GRID.value, "Photos", True, 15),
)

DEFAULT_HERO_PHOTO_INDEX = 0
DEFAULT_STRIP_PHOTO_INDEXES: Tuple[int, ...] = (1, 2, 3)
MAX_STRIP_PHOTOS = 3
