"""
Module: layout.paginator

Purpose:
    Distribute the included report sections across pages and produce the
    PageMap consumed by both renderers.

Key Functions:
    - paginate(): Main pagination function

Algorithm:
    Single greedy pass over the section order:
    1. The cover (if included) takes page 1 alone.
    2. Non-splittable sections (narrative, photo grid) are placed whole;
       if they do not fit and the page already has content, a new page
       is started first. A block taller than a whole page sits alone on
       an oversized page with a geometry warning.
    3. Tables are cut at row boundaries. The rows that fit after the
       header (and safety margin) are placed; a manual break before that
       limit wins. If fewer than ``orphan_guard`` rows would sit under
       the header, the header moves to the next page.
    4. Continuation fragments repeat the column header and are marked
       ``continues_from_previous``.
    5. Natural cuts never strand fewer than ``orphan_guard`` rows, or the
       table footer, on the next page when the rows allow it.

    The function is pure: identical inputs give an identical PageMap.

Dependencies:
    - layout.heights: Height estimates
    - layout.config: Page geometry and thresholds
    - layout.models: PageMap structures

Used By:
    - controller: Layout session and launcher
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from print_studio.core.models import ReportData, SectionDescriptor, SectionKind
from print_studio.studio.print_config import PrintConfig

from .config import LayoutConfig
from .heights import EstimateConfig, HeightEstimate, HeightModel
from .models import (
    DataRange,
    LayoutWarning,
    Page,
    PageMap,
    PagePlacement,
    RenderConfig,
    Severity,
)

logger = logging.getLogger(__name__)


def paginate(
    print_config: PrintConfig,
    report: ReportData,
    layout: Optional[LayoutConfig] = None,
    height_model: Optional[HeightModel] = None,
) -> PageMap:
    """
    Compute the PageMap for a configuration and report snapshot.

    Args:
        print_config: Layout intent (order, inclusion, density, breaks)
        report: Report data (rows, text, photos)
        layout: Page geometry and thresholds (defaults to the height model's)
        height_model: Height estimation (defaults to HeightModel(layout))

    Returns:
        PageMap with pages numbered from 1 and any packing warnings

    Example:
        >>> page_map = paginate(config, report)
        >>> page_map.total_pages
        4
    """
    if layout is None:
        layout = height_model.layout if height_model is not None else LayoutConfig()
    if height_model is None:
        height_model = HeightModel(layout)

    packer = _Packer(print_config, report, layout, height_model)
    page_map = packer.run()

    logger.info(
        f"Packed {len(page_map.section_ids)} sections onto {page_map.total_pages} pages"
    )
    return page_map


class _Packer:
    """Mutable working state of one paginate() call. Never escapes it."""

    def __init__(
        self,
        print_config: PrintConfig,
        report: ReportData,
        layout: LayoutConfig,
        height_model: HeightModel,
    ) -> None:
        self.config = print_config
        self.report = report
        self.layout = layout
        self.heights = height_model

        self.pages: List[Page] = []
        self.warnings: List[LayoutWarning] = []

        self._placements: List[PagePlacement] = []
        self._capacity = 0
        self._used = 0
        self._sealed = False

    # ─────────────────────────────────────────────────────────────────────
    # Driver
    # ─────────────────────────────────────────────────────────────────────

    def run(self) -> PageMap:
        ordered = self.config.ordered_sections()
        covers = [s for s in ordered if s.kind == SectionKind.COVER.value]
        body = [s for s in ordered if s.kind != SectionKind.COVER.value]

        if covers:
            self.pages.append(Page(page_number=1, is_first_page=True, sections=()))
            for extra in covers[1:]:
                self._warn(
                    f"estimation-{extra.id}", "estimation", 0,
                    f"Section '{extra.title}' is an additional cover and was skipped",
                )

        self._open_page(first=not covers)

        for section in body:
            self._place_section(section)

        if self._placements or not self.pages:
            self._close_page()

        return PageMap(pages=tuple(self.pages), warnings=tuple(self.warnings))

    def _place_section(self, section: SectionDescriptor) -> None:
        settings = self.config.settings_for(section.id)
        content = self.report.content_for(section.id)
        photo_count = len(self.config.grid_photo_indexes(len(self.report.photos)))

        if settings.force_page_break_before and self._placements:
            logger.debug(f"{section.id}: forced page break before section")
            self._new_page()

        estimate_config = EstimateConfig(
            section_id=section.id,
            density=self.config.density_for(section.id),
            columns=settings.columns,
            padding_top=settings.padding_top,
            padding_bottom=settings.padding_bottom,
            footer_chars=len(content.footer_text),
        )
        item_count = self.heights.item_count(
            section.kind, section.id, content, photo_count, settings.columns
        )
        estimate = self.heights.estimate(section.kind, estimate_config, item_count)

        if not estimate.known:
            self._warn(
                f"estimation-{section.id}", "estimation", 0,
                f"Section '{section.title}' has unknown kind '{section.kind}' "
                f"and was laid out with zero height",
            )
            self._place(PagePlacement(section_id=section.id), height=0, gap=0)
            return

        if section.known_kind is SectionKind.TABLE:
            self._place_table(section, estimate, content.row_count)
        else:
            self._place_block(section, estimate.fixed_height)

    # ─────────────────────────────────────────────────────────────────────
    # Non-splittable content
    # ─────────────────────────────────────────────────────────────────────

    def _place_block(
        self,
        section: SectionDescriptor,
        height: int,
        data_range: Optional[DataRange] = None,
    ) -> None:
        gap = self._gap(section)
        if self._sealed or (height + gap > self._remaining and self._placements):
            self._new_page()
            gap = 0

        placement = PagePlacement(
            section_id=section.id,
            continues_from_previous=False,
            data_range=data_range,
            render_config=RenderConfig(show_header=True, show_footer=True),
            estimated_height=height,
            fragment_index=0,
        )
        self._place(placement, height, gap)
        logger.debug(f"{section.id}: placed whole ({height}) on page {self._page_number}")

        if height > self._capacity:
            self._warn(
                f"geometry-{section.id}", "geometry", self._page_number,
                f"Section '{section.title}' ({height}) is taller than a page "
                f"({self._capacity}) and was placed alone on an oversized page",
            )
            self._sealed = True

    # ─────────────────────────────────────────────────────────────────────
    # Splittable content
    # ─────────────────────────────────────────────────────────────────────

    def _place_table(self, section: SectionDescriptor, est: HeightEstimate, row_count: int) -> None:
        if row_count == 0:
            height = est.fixed_height + self.layout.empty_table_height + est.footer_height
            self._place_block(section, height, data_range=DataRange(0, 0))
            return

        guard = self.layout.orphan_guard
        safety = self.layout.safety_margin
        row_h = est.per_row_height
        breaks = self.config.breaks_for(section.id)

        start = 0
        fragment = 0
        while start < row_count:
            first = fragment == 0
            header = est.fixed_height if first else est.repeat_header_height
            segment_end = _next_forced_end(breaks, start, row_count)
            segment_rows = segment_end - start
            guard_rows = min(guard, segment_rows)

            if self._sealed:
                self._new_page()
                continue

            gap = self._gap(section)
            fit = self._rows_that_fit(header, row_h, gap, segment_rows)

            # Orphan guard: do not strand a header above too few rows
            if fit < guard_rows and self._placements:
                logger.debug(
                    f"{section.id}: only {fit} rows fit under header on page "
                    f"{self._page_number}, deferring to next page"
                )
                self._new_page()
                continue

            if fit < 1:
                self._warn(
                    f"geometry-{section.id}-{start}", "geometry", self._page_number,
                    f"Row {start} of '{section.title}' is taller than the page budget",
                )
            take = min(segment_rows, max(fit, 1))
            forced = segment_end < row_count and take == segment_rows

            if not forced and take < segment_rows:
                adjusted = self._widow_adjusted(take, segment_rows, guard, guard_rows)
                if adjusted is None and self._placements:
                    # No cut leaves guard rows on both sides; keep the segment together
                    logger.debug(
                        f"{section.id}: no split of rows [{start}, {segment_end}) on page "
                        f"{self._page_number} satisfies the orphan guard, deferring"
                    )
                    self._new_page()
                    continue
                if adjusted is not None:
                    take = adjusted

            last = start + take == row_count
            footer = est.footer_height if last else 0
            if last and footer:
                if header + take * row_h + footer + safety > self._remaining - gap:
                    carried = take - min(guard, take)
                    if carried >= max(guard_rows, 1):
                        # Footer moves to the next page with the final rows
                        take = carried
                        last = False
                        footer = 0
                    elif self._placements:
                        self._new_page()
                        continue

            height = header + take * row_h + footer + safety
            placement = PagePlacement(
                section_id=section.id,
                continues_from_previous=not first,
                data_range=DataRange(start, start + take),
                render_config=RenderConfig(
                    show_header=True,
                    show_footer=last,
                    repeat_column_header=not first,
                ),
                estimated_height=height,
                fragment_index=fragment,
                forced_break_after=forced,
            )
            self._place(placement, height, gap)
            logger.debug(
                f"{section.id}: rows [{start}, {start + take}) on page {self._page_number}"
                f"{' (manual break)' if forced else ''}"
            )

            if height > self._capacity:
                self._warn(
                    f"geometry-{section.id}-{fragment}", "geometry", self._page_number,
                    f"Fragment {fragment} of '{section.title}' ({height}) exceeds the page budget",
                )

            start += take
            fragment += 1
            if start < row_count:
                self._new_page()

    def _rows_that_fit(self, header: int, row_h: int, gap: int, segment_rows: int) -> int:
        available = self._remaining - gap - header - self.layout.safety_margin
        if row_h <= 0:
            return segment_rows if available >= 0 else 0
        if available < 0:
            return 0
        return available // row_h

    @staticmethod
    def _widow_adjusted(
        take: int, segment_rows: int, guard: int, guard_rows: int
    ) -> Optional[int]:
        """
        Pull rows back so the next fragment is not left with fewer than guard rows.

        Returns None when no cut leaves at least guard rows on both sides.
        """
        leftover = segment_rows - take
        if 0 < leftover < guard:
            shifted = segment_rows - guard
            if shifted >= max(guard_rows, 1):
                return shifted
            return None
        return take

    # ─────────────────────────────────────────────────────────────────────
    # Page bookkeeping
    # ─────────────────────────────────────────────────────────────────────

    @property
    def _page_number(self) -> int:
        return len(self.pages) + 1

    @property
    def _remaining(self) -> int:
        return self._capacity - self._used

    def _gap(self, section: SectionDescriptor) -> int:
        if not self._placements:
            return 0
        return self.layout.density(self.config.density_for(section.id)).section_gap

    def _open_page(self, *, first: bool) -> None:
        self._placements = []
        self._capacity = self.layout.content_height(first=first)
        self._used = 0
        self._sealed = False

    def _close_page(self) -> None:
        self.pages.append(Page(
            page_number=self._page_number,
            is_first_page=False,
            sections=tuple(self._placements),
            height_used=self._used,
            height_available=self._capacity,
        ))

    def _new_page(self) -> None:
        """Close the current page (if it has content) and open a continuation page."""
        if self._placements:
            self._close_page()
        self._open_page(first=False)

    def _place(self, placement: PagePlacement, height: int, gap: int) -> None:
        if gap and height:
            placement = _with_gap(placement, gap)
            self._used += gap
        self._placements.append(placement)
        self._used += height

    def _warn(self, warning_id: str, warning_type: str, page_number: int, message: str) -> None:
        logger.warning(message)
        self.warnings.append(LayoutWarning(
            id=warning_id,
            type=warning_type,
            page_number=page_number,
            message=message,
            severity=Severity.WARNING,
        ))


def _next_forced_end(breaks: Sequence[int], start: int, row_count: int) -> int:
    """Exclusive end of the segment starting at ``start`` (next manual break or end)."""
    for after_row in breaks:
        if after_row >= start and after_row + 1 < row_count:
            return after_row + 1
    return row_count


def _with_gap(placement: PagePlacement, gap: int) -> PagePlacement:
    return replace(placement, gap_before=gap)


def placement_rows(page_map: PageMap, section_id: str) -> Tuple[DataRange, ...]:
    """Data ranges of a section in page order (empty for non-table sections)."""
    return tuple(
        p.data_range for _, p in page_map.placements_for(section_id) if p.data_range is not None
    )
