"""
Module: sections

Purpose:
    Provides the section-level models that describe layout intent:
    which sections exist, in what order, whether they are included, and
    the per-section overrides (density, padding, columns, breaks).

Key Classes:
    - SectionKind: cover | narrative | table | photo_grid
    - Density: compact | standard | relaxed
    - SectionDescriptor: Identity, kind, inclusion and order of a section
    - SectionSettings: Per-section overrides
    - ManualBreak: Forced page cut after a data row
    - ImagePosition: Focal point / zoom of a photo inside its frame

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - studio.print_config.PrintConfig
    - layout.paginator
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

# Bounds for user-adjustable values
MAX_SECTION_PADDING = 120
MIN_COLUMNS = 1
MAX_COLUMNS = 6


class SectionKind(str, Enum):
    """Layout behaviour of a section."""
    COVER = "cover"            # Page 1 template, never packed with other sections
    NARRATIVE = "narrative"    # Single block of text, never fragmented
    TABLE = "table"            # Row sequence, splittable at row boundaries
    PHOTO_GRID = "photo_grid"  # Grid of images, never fragmented

    def __str__(self) -> str:
        return self.value

    @property
    def is_splittable(self) -> bool:
        return self is SectionKind.TABLE


class Density(str, Enum):
    """Named spacing profile scaling estimated heights."""
    COMPACT = "compact"
    STANDARD = "standard"
    RELAXED = "relaxed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SectionDescriptor:
    """
    A report section as seen by the layout engine.

    ``kind`` is kept as a plain string so that records written by a newer
    editor (with kinds this engine does not know) still load; the height
    model treats unknown kinds as zero height.

    Attributes:
        id: Stable section identifier (e.g. "equipment")
        kind: SectionKind value
        label: Display title
        included: Whether the section is rendered at all
        order: Sort key; ordering is total over included sections
    """

    id: str
    kind: str
    label: str = ""
    included: bool = True
    order: int = 0

    @property
    def title(self) -> str:
        return self.label or self.id.replace("_", " ").title()

    @property
    def known_kind(self) -> Optional[SectionKind]:
        """The SectionKind, or None if ``kind`` is not recognised."""
        try:
            return SectionKind(self.kind)
        except ValueError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "label": self.label,
            "included": self.included,
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SectionDescriptor:
        return cls(
            id=str(data["id"]),
            kind=str(data.get("kind", SectionKind.NARRATIVE.value)),
            label=str(data.get("label", "")),
            included=bool(data.get("included", True)),
            order=int(data.get("order", 0)),
        )


@dataclass(frozen=True)
class SectionSettings:
    """
    Per-section layout overrides.

    Attributes:
        density: Density override for this section (None = global density)
        padding_top: Extra space above the section (0-120)
        padding_bottom: Extra space below the section (0-120)
        columns: Table column count / photo grid columns (None = profile default)
        force_page_break_before: Always start this section on a new page
    """

    density: Optional[Density] = None
    padding_top: int = 0
    padding_bottom: int = 0
    columns: Optional[int] = None
    force_page_break_before: bool = False

    def __post_init__(self) -> None:
        """Clamp user-adjustable values into their allowed ranges."""
        object.__setattr__(self, "padding_top", _clamp(self.padding_top, 0, MAX_SECTION_PADDING))
        object.__setattr__(self, "padding_bottom", _clamp(self.padding_bottom, 0, MAX_SECTION_PADDING))
        if self.columns is not None:
            object.__setattr__(self, "columns", _clamp(self.columns, MIN_COLUMNS, MAX_COLUMNS))

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "padding_top": self.padding_top,
            "padding_bottom": self.padding_bottom,
            "force_page_break_before": self.force_page_break_before,
        }
        if self.density is not None:
            d["density"] = self.density.value
        if self.columns is not None:
            d["columns"] = self.columns
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SectionSettings:
        density = data.get("density")
        columns = data.get("columns")
        return cls(
            density=Density(density) if density is not None else None,
            padding_top=int(data.get("padding_top", 0)),
            padding_bottom=int(data.get("padding_bottom", 0)),
            columns=int(columns) if columns is not None else None,
            force_page_break_before=bool(data.get("force_page_break_before", False)),
        )


@dataclass(frozen=True, order=True)
class ManualBreak:
    """
    Forced page break immediately after a data row.

    Ordering is (section_id, after_row_index) so break lists can be kept
    sorted for deterministic packing.
    """

    section_id: str
    after_row_index: int

    def __post_init__(self) -> None:
        if self.after_row_index < 0:
            raise ValueError(f"after_row_index must be non-negative: {self.after_row_index}")

    def to_dict(self) -> Dict[str, Any]:
        return {"section_id": self.section_id, "after_row_index": self.after_row_index}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ManualBreak:
        return cls(section_id=str(data["section_id"]), after_row_index=int(data["after_row_index"]))


@dataclass(frozen=True)
class ImagePosition:
    """
    Position of an image within its frame.

    x/y are object-position percentages (0-100, 50/50 is centred);
    zoom is a scale factor (1-3).
    """

    x: float = 50.0
    y: float = 50.0
    zoom: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", _clamp(self.x, 0.0, 100.0))
        object.__setattr__(self, "y", _clamp(self.y, 0.0, 100.0))
        object.__setattr__(self, "zoom", _clamp(self.zoom, 1.0, 3.0))

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "zoom": self.zoom}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ImagePosition:
        return cls(
            x=float(data.get("x", 50.0)),
            y=float(data.get("y", 50.0)),
            zoom=float(data.get("zoom", 1.0)),
        )


def _clamp(value, low, high):
    return max(low, min(high, value))
