"""
Module: studio.print_config

Purpose:
    The print configuration snapshot: the single source of layout intent.
    Packing reads it, never mutates it; every edit produces a new
    snapshot (see studio.store).

Key Classes:
    - PrintConfig: Immutable configuration snapshot

Key Functions:
    - default_print_config(): Documented defaults

Dependencies:
    - dataclasses (std)
    - core.models: Section models

Used By:
    - studio.store: State transitions
    - layout.paginator: Packing input
    - output: Cover options, footer toggles
    - core.utils.serialization: Persistence
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from print_studio.core.models import (
    Density,
    ImagePosition,
    ManualBreak,
    SectionDescriptor,
    SectionKind,
    SectionSettings,
)

from .defaults import DEFAULT_HERO_PHOTO_INDEX, DEFAULT_SECTIONS, DEFAULT_STRIP_PHOTO_INDEXES

_DEFAULT_SETTINGS = SectionSettings()


@dataclass(frozen=True)
class PrintConfig:
    """
    Print configuration snapshot (immutable).

    Attributes:
        sections: All sections, included or not
        density: Global density profile
        section_settings: Section id -> per-section overrides
        manual_breaks: Forced breaks set from the break list (sorted)
        row_breaks: Per-row break toggles flipped in the preview (sorted)
        photo_selection: Photo indexes shown in the photo grid (None = all)
        photo_positions: Photo index -> position in the photo grid
        hero_photo_index: Cover hero photo (None = no hero)
        hero_photo_position: Position of the hero photo in its frame
        strip_photo_indexes: Up to 3 cover strip photos
        strip_photo_positions: Photo index -> position in the cover strip
        show_cover_photos: Render hero/strip photos on the cover
        show_page_numbers: Render "Page N of M" in the footer
        show_footer: Render the page footer at all
    """

    sections: Tuple[SectionDescriptor, ...] = DEFAULT_SECTIONS
    density: Density = Density.STANDARD
    section_settings: Mapping[str, SectionSettings] = field(default_factory=dict)
    manual_breaks: Tuple[ManualBreak, ...] = ()
    row_breaks: Tuple[ManualBreak, ...] = ()
    photo_selection: Optional[Tuple[int, ...]] = None
    photo_positions: Mapping[int, ImagePosition] = field(default_factory=dict)
    hero_photo_index: Optional[int] = DEFAULT_HERO_PHOTO_INDEX
    hero_photo_position: ImagePosition = ImagePosition()
    strip_photo_indexes: Tuple[int, ...] = DEFAULT_STRIP_PHOTO_INDEXES
    strip_photo_positions: Mapping[int, ImagePosition] = field(default_factory=dict)
    show_cover_photos: bool = True
    show_page_numbers: bool = True
    show_footer: bool = True

    def __post_init__(self) -> None:
        ids = [s.id for s in self.sections]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate section ids: {duplicates}")

    # ─────────────────────────────────────────────────────────────────────
    # Queries used by packing and rendering
    # ─────────────────────────────────────────────────────────────────────

    def section(self, section_id: str) -> Optional[SectionDescriptor]:
        for s in self.sections:
            if s.id == section_id:
                return s
        return None

    def ordered_sections(self) -> Tuple[SectionDescriptor, ...]:
        """Included sections sorted by order (ties keep list position)."""
        indexed = [(s.order, i, s) for i, s in enumerate(self.sections) if s.included]
        return tuple(s for _, _, s in sorted(indexed, key=lambda t: (t[0], t[1])))

    @property
    def has_cover(self) -> bool:
        return any(s.kind == SectionKind.COVER.value for s in self.ordered_sections())

    def settings_for(self, section_id: str) -> SectionSettings:
        return self.section_settings.get(section_id, _DEFAULT_SETTINGS)

    def density_for(self, section_id: str) -> Density:
        override = self.settings_for(section_id).density
        return override if override is not None else self.density

    def breaks_for(self, section_id: str) -> Tuple[int, ...]:
        """Sorted, de-duplicated row indexes after which a page break is forced."""
        rows = {b.after_row_index for b in self.manual_breaks if b.section_id == section_id}
        rows.update(b.after_row_index for b in self.row_breaks if b.section_id == section_id)
        return tuple(sorted(rows))

    def grid_photo_indexes(self, photo_count: int) -> Tuple[int, ...]:
        """Photo indexes rendered by the photo grid, filtered to existing photos."""
        if self.photo_selection is None:
            return tuple(range(photo_count))
        return tuple(i for i in self.photo_selection if 0 <= i < photo_count)


def default_print_config() -> PrintConfig:
    """Return the documented default configuration."""
    return PrintConfig()
