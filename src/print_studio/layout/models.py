"""
Module: layout.models

Purpose:
    Data models for the computed layout.
    Immutable dataclasses representing placements, pages and the PageMap
    handed to both renderers.

Key Classes:
    - DataRange: Half-open row range of a table fragment
    - RenderConfig: Header/footer flags for one placement
    - PagePlacement: One section (or fragment) on one page
    - Page: Ordered placements on one page
    - PageMap: Final layout output
    - LayoutWarning: Advisory record shared with diagnostics

Dependencies:
    - dataclasses (std)

Used By:
    - layout.paginator: Creates the PageMap
    - output: Renders the PageMap
    - diagnostics: Emits LayoutWarnings
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


class Severity:
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class LayoutWarning:
    """
    Advisory record surfaced to the editing UI. Never blocks layout.

    Attributes:
        id: Stable identifier (e.g. "overflow-3")
        type: estimation | geometry | overflow | blank | orphan | cutoff | parity | export
        page_number: Page the warning refers to (0 = whole document)
        message: Human-readable description
        severity: error | warning | info
    """

    id: str
    type: str
    page_number: int
    message: str
    severity: str = Severity.WARNING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "page_number": self.page_number,
            "message": self.message,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class DataRange:
    """Half-open row range [start, end) into a section's row sequence."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid data range: [{self.start}, {self.end})")

    @property
    def count(self) -> int:
        return self.end - self.start

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class RenderConfig:
    """
    How a renderer must draw one placement.

    Attributes:
        show_header: Draw the section title (normal or "(Continued)")
        show_footer: Draw the section footer (table summary)
        repeat_column_header: Draw the table column header row
    """

    show_header: bool = True
    show_footer: bool = True
    repeat_column_header: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "show_header": self.show_header,
            "show_footer": self.show_footer,
            "repeat_column_header": self.repeat_column_header,
        }


@dataclass(frozen=True)
class PagePlacement:
    """
    One section's (or section fragment's) appearance on one page.

    Attributes:
        section_id: Section this placement belongs to
        continues_from_previous: True for second-or-later fragments
        data_range: Row range for table sections, None otherwise
        render_config: Header/footer flags
        estimated_height: Height charged against the page budget
        fragment_index: 0 for the first fragment, then 1, 2, ...
        forced_break_after: The page ends after this placement because of a manual break
        gap_before: Section gap charged above this placement (0 at the top of a page)

    Example:
        >>> p = PagePlacement("equipment", False, DataRange(0, 28))
        >>> p.placement_id
        'equipment#0'
    """

    section_id: str
    continues_from_previous: bool = False
    data_range: Optional[DataRange] = None
    render_config: RenderConfig = RenderConfig()
    estimated_height: int = 0
    fragment_index: int = 0
    forced_break_after: bool = False
    gap_before: int = 0

    @property
    def placement_id(self) -> str:
        """Unique id used for click-to-select in the interactive renderer."""
        return f"{self.section_id}#{self.fragment_index}"

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "section_id": self.section_id,
            "continues_from_previous": self.continues_from_previous,
            "render_config": self.render_config.to_dict(),
            "estimated_height": self.estimated_height,
        }
        if self.data_range is not None:
            d["data_range"] = self.data_range.to_dict()
        return d


@dataclass(frozen=True)
class Page:
    """
    Complete layout plan for a single page.

    Attributes:
        page_number: 1-based page number
        is_first_page: True only for the cover page
        sections: Ordered placements (empty on the cover page)
        height_used: Budget consumed on this page
        height_available: Budget of this page when it was opened
    """

    page_number: int
    is_first_page: bool
    sections: Tuple[PagePlacement, ...]
    height_used: int = 0
    height_available: int = 0

    @property
    def is_empty(self) -> bool:
        return len(self.sections) == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_number": self.page_number,
            "is_first_page": self.is_first_page,
            "sections": [p.to_dict() for p in self.sections],
        }


@dataclass(frozen=True)
class PageMap:
    """
    Final layout output: an ordered list of pages and their placements.

    Computed once per input snapshot and never patched; both renderers
    consume the same instance.

    Attributes:
        pages: Pages in order; pages[i].page_number == i + 1
        warnings: Estimation and geometry warnings recorded during packing
    """

    pages: Tuple[Page, ...]
    warnings: Tuple[LayoutWarning, ...] = ()

    def __post_init__(self) -> None:
        """Validate page numbering."""
        for index, page in enumerate(self.pages):
            if page.page_number != index + 1:
                raise ValueError(
                    f"Page at position {index} has page_number {page.page_number}, "
                    f"expected {index + 1}"
                )
        if any(page.is_first_page for page in self.pages[1:]):
            raise ValueError("Only page 1 can be the cover page")

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    def placements_for(self, section_id: str) -> Tuple[Tuple[int, PagePlacement], ...]:
        """(page_number, placement) pairs for a section, in page order."""
        return tuple(
            (page.page_number, placement)
            for page in self.pages
            for placement in page.sections
            if placement.section_id == section_id
        )

    def first_page_of(self, section_id: str) -> Optional[int]:
        """Page on which a section first appears, or None if it is not placed."""
        for page_number, placement in self.placements_for(section_id):
            if not placement.continues_from_previous:
                return page_number
        return None

    @property
    def section_ids(self) -> Tuple[str, ...]:
        """Placed section ids in first-appearance order."""
        seen = []
        for page in self.pages:
            for placement in page.sections:
                if placement.section_id not in seen:
                    seen.append(placement.section_id)
        return tuple(seen)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_pages": self.total_pages,
            "pages": [p.to_dict() for p in self.pages],
            "warnings": [w.to_dict() for w in self.warnings],
        }
