"""
Module: output.walker

Purpose:
    Resolve a PageMap into render-ready pages shared by both renderers.
    Titles (including the "(Continued)" marker), row slices, column
    header visibility and vertical offsets are decided here exactly once,
    so the preview and the exporter cannot diverge.

Key Functions:
    - walk_page_map(): PageMap -> tuple of RenderPage

Key Classes:
    - RenderBlock: One placement with its resolved content and geometry
    - CoverBlock: Cover template data
    - RenderPage: Blocks of one page

Dependencies:
    - layout: PageMap, HeightModel
    - core.models: Report data

Used By:
    - output.preview: Interactive HTML renderer
    - output.renderer: PDF exporter
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from print_studio.core.models import (
    ImagePosition,
    Photo,
    ReportData,
    SectionDescriptor,
    SectionKind,
)
from print_studio.layout.heights import EstimateConfig, HeightModel
from print_studio.layout.models import PageMap, PagePlacement
from print_studio.studio.print_config import PrintConfig

logger = logging.getLogger(__name__)

CONTINUED_SUFFIX = " (Continued)"
EMPTY_TABLE_TEXT = "No data"


@dataclass(frozen=True)
class PlacedPhoto:
    """A photo resolved against the report, with its frame position."""

    index: int
    photo: Photo
    position: ImagePosition


@dataclass(frozen=True)
class RenderBlock:
    """
    One placement resolved for drawing.

    Attributes:
        placement: The PageMap placement (source of truth)
        section: Section descriptor
        kind: SectionKind, or None for unknown kinds (drawn as nothing)
        title: Section title, with "(Continued)" on continuation fragments
        top: Offset of the block from the top of the content area
        height: Height allotted by the packer
        header_height: Title (and column header) height at the block top
        row_height: Height of one table row
        columns: Table column headings
        show_column_header: Draw the column header row
        rows: Rows of this fragment (verbatim slice of the section rows)
        text: Narrative text
        footer_text: Table footer text ("" unless this fragment shows the footer)
        photos: Photo grid content
        photo_columns: Photo grid columns
        text_columns: Narrative text columns
        empty: Table with no rows (draw the "No data" state)
    """

    placement: PagePlacement
    section: SectionDescriptor
    kind: Optional[SectionKind]
    title: str
    top: int
    height: int
    header_height: int = 0
    row_height: int = 0
    columns: Tuple[str, ...] = ()
    show_column_header: bool = False
    rows: Tuple[Tuple[str, ...], ...] = ()
    text: str = ""
    footer_text: str = ""
    photos: Tuple[PlacedPhoto, ...] = ()
    photo_columns: int = 3
    text_columns: int = 1
    empty: bool = False

    @property
    def placement_id(self) -> str:
        return self.placement.placement_id

    @property
    def section_id(self) -> str:
        return self.placement.section_id


@dataclass(frozen=True)
class CoverBlock:
    """Data drawn by the cover template on page 1."""

    project_name: str
    report_period: str
    job_number: str
    hero: Optional[PlacedPhoto]
    strip: Tuple[PlacedPhoto, ...]


@dataclass(frozen=True)
class RenderPage:
    """
    One page ready for drawing.

    Attributes:
        page_number: 1-based page number
        total_pages: Page count of the document ("Page N of M")
        uses_first_profile: Content area uses the first-page margin profile
        cover: Cover template data (cover page only)
        blocks: Resolved placements in page order
    """

    page_number: int
    total_pages: int
    uses_first_profile: bool
    cover: Optional[CoverBlock]
    blocks: Tuple[RenderBlock, ...]

    @property
    def is_cover(self) -> bool:
        return self.cover is not None


def walk_page_map(
    page_map: PageMap,
    print_config: PrintConfig,
    report: ReportData,
    height_model: HeightModel,
) -> Tuple[RenderPage, ...]:
    """
    Resolve every page of a PageMap for drawing.

    Args:
        page_map: Layout to render (never modified)
        print_config: Configuration the layout was computed from
        report: Report data the layout was computed from
        height_model: Height model the layout was computed with

    Returns:
        RenderPages in page order, one per PageMap page
    """
    has_cover = print_config.has_cover
    total = page_map.total_pages

    pages = []
    for page in page_map.pages:
        if page.is_first_page:
            pages.append(RenderPage(
                page_number=page.page_number,
                total_pages=total,
                uses_first_profile=False,
                cover=_cover_block(print_config, report),
                blocks=(),
            ))
            continue

        top = 0
        blocks = []
        for placement in page.sections:
            top += placement.gap_before
            block = _resolve(placement, top, print_config, report, height_model)
            if block is not None:
                blocks.append(block)
            top += placement.estimated_height

        pages.append(RenderPage(
            page_number=page.page_number,
            total_pages=total,
            uses_first_profile=not has_cover and page.page_number == 1,
            cover=None,
            blocks=tuple(blocks),
        ))
    return tuple(pages)


def _resolve(
    placement: PagePlacement,
    top: int,
    print_config: PrintConfig,
    report: ReportData,
    height_model: HeightModel,
) -> Optional[RenderBlock]:
    section = print_config.section(placement.section_id)
    if section is None:
        logger.warning(f"Placement for unknown section {placement.section_id!r} skipped")
        return None

    kind = section.known_kind
    content = report.content_for(section.id)
    settings = print_config.settings_for(section.id)
    title = section.title
    if placement.continues_from_previous:
        title += CONTINUED_SUFFIX

    if kind is None:
        return RenderBlock(placement=placement, section=section, kind=None,
                           title=title, top=top, height=placement.estimated_height)

    estimate = height_model.estimate(
        section.kind,
        EstimateConfig(
            section_id=section.id,
            density=print_config.density_for(section.id),
            columns=settings.columns,
            padding_top=settings.padding_top,
            padding_bottom=settings.padding_bottom,
            footer_chars=len(content.footer_text),
        ),
        0,
    )
    density = height_model.layout.density(print_config.density_for(section.id))
    profile = height_model.profile_for(kind, section.id)
    header_height = density.scale(profile.header_height) + settings.padding_top

    if kind is SectionKind.TABLE:
        data_range = placement.data_range
        rows = content.slice_rows(data_range.start, data_range.end) if data_range else ()
        first = not placement.continues_from_previous
        show_footer = placement.render_config.show_footer
        return RenderBlock(
            placement=placement,
            section=section,
            kind=kind,
            title=title,
            top=top,
            height=placement.estimated_height,
            header_height=estimate.fixed_height if first else estimate.repeat_header_height,
            row_height=estimate.per_row_height,
            columns=content.columns,
            show_column_header=bool(content.columns) and (
                first or placement.render_config.repeat_column_header
            ),
            rows=rows,
            footer_text=content.footer_text if show_footer else "",
            empty=content.row_count == 0,
        )

    if kind is SectionKind.PHOTO_GRID:
        indexes = print_config.grid_photo_indexes(len(report.photos))
        photos = tuple(
            PlacedPhoto(i, report.photos[i], print_config.photo_positions.get(i, ImagePosition()))
            for i in indexes
        )
        return RenderBlock(
            placement=placement,
            section=section,
            kind=kind,
            title=title,
            top=top,
            height=placement.estimated_height,
            header_height=header_height,
            row_height=density.scale(profile.photo_row_height),
            photos=photos,
            photo_columns=settings.columns or profile.photo_columns,
        )

    # Narrative
    return RenderBlock(
        placement=placement,
        section=section,
        kind=kind,
        title=title,
        top=top,
        height=placement.estimated_height,
        header_height=header_height,
        text=content.text,
        text_columns=settings.columns or 1,
    )


def _cover_block(print_config: PrintConfig, report: ReportData) -> CoverBlock:
    hero = None
    strip: Tuple[PlacedPhoto, ...] = ()
    if print_config.show_cover_photos:
        index = print_config.hero_photo_index
        if index is not None and report.photo_at(index) is not None:
            hero = PlacedPhoto(index, report.photos[index], print_config.hero_photo_position)
        strip = tuple(
            PlacedPhoto(i, report.photos[i], print_config.strip_photo_positions.get(i, ImagePosition()))
            for i in print_config.strip_photo_indexes
            if report.photo_at(i) is not None
        )
    return CoverBlock(
        project_name=report.project_name,
        report_period=report.report_period,
        job_number=report.job_number,
        hero=hero,
        strip=strip,
    )
