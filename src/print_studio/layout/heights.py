"""
Module: layout.heights

Purpose:
    Height Model: declarative, backend-independent estimates of the
    vertical extent of a section in page units. Never measures rendered
    output, so the preview and the exporter cannot disagree about it.

Key Functions:
    - HeightModel.estimate(): (kind, config, item_count) -> HeightEstimate
    - HeightModel.item_count(): Item count of a section's data

Key Classes:
    - SectionProfile: Tuned chrome/row heights for a section type
    - EstimateConfig: Density, columns, padding and footer text of a section
    - HeightEstimate: fixed_height / per_row_height (+ repeat header, footer)

Dependencies:
    - layout.config: Density profiles
    - core.models: Section kinds and content

Used By:
    - layout.paginator: Packing decisions
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional

from print_studio.core.models import Density, SectionContent, SectionKind

from .config import LayoutConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionProfile:
    """
    Tuned heights for one section type, at standard density.

    Attributes:
        header_height: Section title bar (plus any summary boxes)
        column_header_height: Table column header row (repeated on continuations)
        continued_header_height: Title bar of a continuation fragment
        row_height: One table row
        footer_base_height: Chrome of a table footer when footer text exists
        line_height: One line of narrative / footer text
        chars_per_line: Characters per wrapped line at one column
        photo_row_height: One row of the photo grid (image + caption)
        photo_columns: Default photo grid columns
    """

    header_height: int = 30
    column_header_height: int = 20
    continued_header_height: int = 24
    row_height: int = 22
    footer_base_height: int = 24
    line_height: int = 14
    chars_per_line: int = 95
    photo_row_height: int = 170
    photo_columns: int = 3


DEFAULT_KIND_PROFILES: Mapping[SectionKind, SectionProfile] = {
    SectionKind.COVER: SectionProfile(header_height=0, column_header_height=0),
    SectionKind.NARRATIVE: SectionProfile(column_header_height=0),
    SectionKind.TABLE: SectionProfile(),
    SectionKind.PHOTO_GRID: SectionProfile(column_header_height=0),
}

# Overrides for sections whose chrome differs from the kind default
DEFAULT_SECTION_PROFILES: Mapping[str, SectionProfile] = {
    "key_personnel": SectionProfile(column_header_height=0, row_height=33),
    "weather": SectionProfile(row_height=27),
    "progress": SectionProfile(header_height=120),   # KPI cards above the table
    "safety": SectionProfile(header_height=150, row_height=33),  # Topic box + KPI table
    "financials": SectionProfile(header_height=90, row_height=24),  # Summary cards
    "schedule": SectionProfile(row_height=26),
    "issues": SectionProfile(column_header_height=0, row_height=36),
}


@dataclass(frozen=True)
class EstimateConfig:
    """
    The section configuration the estimate depends on.

    Attributes:
        section_id: Used to look up a section-specific profile
        density: Effective density of the section
        columns: Column layout (narrative text columns / photo grid columns)
        padding_top: User padding above the section (not density scaled)
        padding_bottom: User padding below the section (not density scaled)
        footer_chars: Length of the table footer text (0 = no footer)
    """

    section_id: str = ""
    density: Density = Density.STANDARD
    columns: Optional[int] = None
    padding_top: int = 0
    padding_bottom: int = 0
    footer_chars: int = 0


@dataclass(frozen=True)
class HeightEstimate:
    """
    Estimated vertical extent of a section.

    Attributes:
        fixed_height: Non-repeating chrome (title, summary boxes, intro text)
        per_row_height: Height of one row (0 for non-splittable kinds)
        repeat_header_height: Chrome repeated on each continuation fragment
        footer_height: Table footer drawn after the last row
        known: False when the section kind was not recognised
    """

    fixed_height: int
    per_row_height: int = 0
    repeat_header_height: int = 0
    footer_height: int = 0
    known: bool = True

    @classmethod
    def zero(cls) -> HeightEstimate:
        return cls(fixed_height=0, known=False)

    def total(self, item_count: int) -> int:
        return self.fixed_height + self.per_row_height * item_count + self.footer_height


@dataclass(frozen=True)
class HeightModel:
    """
    Declarative height estimation.

    Example:
        >>> model = HeightModel(LayoutConfig())
        >>> est = model.estimate("table", EstimateConfig(section_id="equipment"), 40)
        >>> est.per_row_height
        22
    """

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    kind_profiles: Mapping[SectionKind, SectionProfile] = field(
        default_factory=lambda: dict(DEFAULT_KIND_PROFILES)
    )
    section_profiles: Mapping[str, SectionProfile] = field(
        default_factory=lambda: dict(DEFAULT_SECTION_PROFILES)
    )

    def with_profiles(self, **profiles: SectionProfile) -> HeightModel:
        """Copy of this model with extra section-specific profiles."""
        merged: Dict[str, SectionProfile] = dict(self.section_profiles)
        merged.update(profiles)
        return replace(self, section_profiles=merged)

    def profile_for(self, kind: SectionKind, section_id: str) -> SectionProfile:
        if section_id in self.section_profiles:
            return self.section_profiles[section_id]
        return self.kind_profiles.get(kind, SectionProfile())

    def item_count(
        self,
        kind: str,
        section_id: str,
        content: SectionContent,
        photo_count: int = 0,
        columns: Optional[int] = None,
    ) -> int:
        """
        Number of items the estimate scales with.

        Tables count rows, narratives count wrapped text lines and photo
        grids count photos. Unknown kinds count nothing.
        """
        known = _known_kind(kind)
        if known is SectionKind.TABLE:
            return content.row_count
        if known is SectionKind.NARRATIVE:
            profile = self.profile_for(known, section_id)
            return _wrapped_lines(content.text, _chars_per_line(profile, columns))
        if known is SectionKind.PHOTO_GRID:
            return photo_count
        return 0

    def estimate(self, kind: str, config: EstimateConfig, item_count: int) -> HeightEstimate:
        """
        Estimate (fixed_height, per_row_height) for a section.

        Unknown kinds are treated as zero height with a logged diagnostic;
        a missing section must not block layout of the rest of the document.
        """
        known = _known_kind(kind)
        if known is None:
            logger.warning(
                f"Unknown section kind {kind!r} for section {config.section_id!r}; "
                f"treating as zero height"
            )
            return HeightEstimate.zero()

        density = self.layout.density(config.density)
        profile = self.profile_for(known, config.section_id)
        item_count = max(0, item_count)

        if known is SectionKind.COVER:
            return HeightEstimate(fixed_height=0)

        if known is SectionKind.NARRATIVE:
            # Wrapped lines are balanced across text columns
            body = profile.line_height * math.ceil(item_count / (config.columns or 1))
            fixed = density.scale(profile.header_height + body)
            return HeightEstimate(fixed_height=fixed + config.padding_top + config.padding_bottom)

        if known is SectionKind.PHOTO_GRID:
            columns = config.columns or profile.photo_columns
            grid_rows = math.ceil(item_count / columns) if item_count else 0
            fixed = density.scale(profile.header_height + grid_rows * profile.photo_row_height)
            return HeightEstimate(fixed_height=fixed + config.padding_top + config.padding_bottom)

        # Table
        fixed = density.scale(profile.header_height + profile.column_header_height)
        repeat = density.scale(profile.continued_header_height + profile.column_header_height)
        footer = 0
        if config.footer_chars > 0:
            lines = _wrapped_lines("x" * config.footer_chars, profile.chars_per_line)
            footer = density.scale(profile.footer_base_height + lines * profile.line_height)
        return HeightEstimate(
            fixed_height=fixed + config.padding_top,
            per_row_height=density.scale(profile.row_height),
            repeat_header_height=repeat,
            footer_height=footer + config.padding_bottom,
        )


def _known_kind(kind: str) -> Optional[SectionKind]:
    try:
        return SectionKind(kind)
    except ValueError:
        return None


def _chars_per_line(profile: SectionProfile, columns: Optional[int]) -> int:
    columns = columns or 1
    return max(1, profile.chars_per_line // columns)


def _wrapped_lines(text: str, chars_per_line: int) -> int:
    """Count wrapped lines, one paragraph per newline-separated block."""
    if not text.strip():
        return 0
    lines = 0
    for paragraph in text.split("\n"):
        lines += max(1, math.ceil(len(paragraph) / chars_per_line))
    return lines
