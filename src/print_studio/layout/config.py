"""
Module: layout.config

Purpose:
    Configuration for the page packing engine.
    Defines page geometry (first vs. continuation page profiles), density
    profiles and the empirically tuned packing thresholds.

Key Classes:
    - PageProfile: Margins and running header/footer for one kind of page
    - DensityProfile: Height multiplier and section gap for one density
    - LayoutConfig: Immutable layout configuration

Dependencies:
    - dataclasses (std)

Used By:
    - layout.heights: Density multipliers
    - layout.paginator: Page budgets and thresholds
    - output: Page geometry for both renderers
    - diagnostics: Content area bounds
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping

from print_studio.core.models import Density

# A4 in PDF points
DEFAULT_PAGE_WIDTH = 595
DEFAULT_PAGE_HEIGHT = 842


@dataclass(frozen=True)
class PageProfile:
    """
    Vertical chrome of one kind of page.

    Attributes:
        margin_top: Top margin
        margin_bottom: Bottom margin
        header_height: Running header drawn above the content area
        footer_height: Footer drawn below the content area
    """

    margin_top: int = 30
    margin_bottom: int = 45
    header_height: int = 0
    footer_height: int = 30

    @property
    def reserved_height(self) -> int:
        return self.margin_top + self.margin_bottom + self.header_height + self.footer_height


@dataclass(frozen=True)
class DensityProfile:
    """Height multiplier and inter-section gap for one density."""

    multiplier: float = 1.0
    section_gap: int = 24

    def scale(self, height: float) -> int:
        """Scale a height, rounding up so estimates never shrink below content."""
        if height <= 0:
            return 0
        return int(math.ceil(round(height * self.multiplier, 6)))


def _default_densities() -> Mapping[Density, DensityProfile]:
    return {
        Density.COMPACT: DensityProfile(multiplier=0.92, section_gap=16),
        Density.STANDARD: DensityProfile(multiplier=1.0, section_gap=24),
        Density.RELAXED: DensityProfile(multiplier=1.08, section_gap=32),
    }


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for page packing (immutable).

    Attributes:
        page_width: Page width in page units (PDF points)
        page_height: Page height in page units
        margin_left: Left margin
        margin_right: Right margin
        first_page: Profile of the first content page when there is no cover
        continuation_page: Profile of every other content page
        safety_margin: Slack reserved below each table fragment
        orphan_guard: Minimum rows beneath a table header
        empty_table_height: Height of the "No data" state of an empty table
        high_page_count: Page count above which diagnostics report info
        densities: Density -> DensityProfile

    Example:
        >>> config = LayoutConfig()
        >>> config.content_height(first=False)
        701
    """

    page_width: int = DEFAULT_PAGE_WIDTH
    page_height: int = DEFAULT_PAGE_HEIGHT
    margin_left: int = 30
    margin_right: int = 30
    first_page: PageProfile = PageProfile(header_height=0)
    continuation_page: PageProfile = PageProfile(header_height=36)
    safety_margin: int = 20
    orphan_guard: int = 2
    empty_table_height: int = 40
    high_page_count: int = 15
    densities: Mapping[Density, DensityProfile] = field(default_factory=_default_densities)

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0:
            raise ValueError(f"page_width must be positive: {self.page_width}")
        if self.page_height <= 0:
            raise ValueError(f"page_height must be positive: {self.page_height}")
        if self.content_width <= 0:
            raise ValueError("Margins exceed page width")
        if self.content_height(first=True) <= 0 or self.content_height(first=False) <= 0:
            raise ValueError("Margins exceed page height")
        if self.orphan_guard < 1:
            raise ValueError(f"orphan_guard must be at least 1: {self.orphan_guard}")
        if self.safety_margin < 0:
            raise ValueError(f"safety_margin must be non-negative: {self.safety_margin}")
        missing = [d.value for d in Density if d not in self.densities]
        if missing:
            raise ValueError(f"Missing density profiles: {missing}")

    @property
    def content_width(self) -> int:
        return self.page_width - self.margin_left - self.margin_right

    def profile(self, *, first: bool) -> PageProfile:
        return self.first_page if first else self.continuation_page

    def content_height(self, *, first: bool) -> int:
        """Usable vertical budget H for a fresh page."""
        return self.page_height - self.profile(first=first).reserved_height

    def content_top(self, *, first: bool) -> int:
        """Distance from the page top to the top of the content area."""
        profile = self.profile(first=first)
        return profile.margin_top + profile.header_height

    def content_bottom(self, *, first: bool) -> int:
        """Distance from the page top to the bottom of the content area."""
        return self.content_top(first=first) + self.content_height(first=first)

    def density(self, density: Density) -> DensityProfile:
        return self.densities[Density(density)]
