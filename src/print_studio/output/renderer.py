"""
Module: output.renderer

Purpose:
    Document exporter. Renders the same resolved pages as the preview to
    a PDF using ReportLab. Each PageMap page becomes exactly one PDF
    page; the exporter never re-lays out content.

Key Functions:
    - render_to_pdf(): Main rendering function

Key Classes:
    - ExportResult: Outcome of a successful export
    - ExportError: Typed export failure with a human-readable reason
    - ExportCancelled: Export aborted through the cancel event

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling (via output.assets)
    - output.walker: Shared page resolution

Used By:
    - controller: Export pipeline
"""

from __future__ import annotations

import io
import logging
import math
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from PIL import Image
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from print_studio.core.models import ReportData, SectionKind
from print_studio.layout.config import LayoutConfig
from print_studio.layout.heights import HeightModel
from print_studio.layout.models import PageMap
from print_studio.studio.print_config import PrintConfig

from .assets import ImageLoader, crop_to_frame
from .walker import (
    EMPTY_TABLE_TEXT,
    CoverBlock,
    PlacedPhoto,
    RenderBlock,
    RenderPage,
    walk_page_map,
)

logger = logging.getLogger(__name__)

# Typography
TITLE_FONT = "Helvetica-Bold"
TITLE_FONT_SIZE = 12
BODY_FONT = "Helvetica"
BODY_FONT_SIZE = 9
CELL_FONT_SIZE = 8
LINE_HEIGHT = 14
COLUMN_HEADER_BAND = 20
FOOTER_FONT_SIZE = 7
CAPTION_BAND = 18

# Cover template
COVER_TITLE_FONT_SIZE = 28
COVER_HERO_HEIGHT = 380
COVER_STRIP_HEIGHT = 140
COVER_STRIP_GAP = 8

DEFAULT_EXPORT_TIMEOUT = 120.0


class ExportError(Exception):
    """Raised when an export cannot produce a usable document."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ExportCancelled(ExportError):
    """Raised when an export is cancelled by the caller."""


@dataclass(frozen=True)
class ExportResult:
    """
    Result of a successful export.

    Attributes:
        output_path: Written PDF
        page_count: Pages written (always equals the PageMap page count)
        placeholder_count: Images replaced by placeholders
    """

    output_path: Path
    page_count: int
    placeholder_count: int = 0


def render_to_pdf(
    page_map: PageMap,
    print_config: PrintConfig,
    report: ReportData,
    output_path: Path,
    *,
    height_model: HeightModel,
    asset_dir: Optional[Path] = None,
    cancel_event: Optional[threading.Event] = None,
    timeout: Optional[float] = DEFAULT_EXPORT_TIMEOUT,
) -> ExportResult:
    """
    Render a PageMap to a PDF file.

    The document is written to a temporary file next to ``output_path``
    and moved into place only when complete, so a failed or cancelled
    export never leaves a partial file behind.

    Args:
        page_map: Layout to render
        print_config: Configuration the layout was computed from
        report: Report data
        output_path: Path to write PDF
        height_model: Height model the layout was computed with
        asset_dir: Base directory for relative photo paths
        cancel_event: Set to abort the export between pages
        timeout: Seconds before the export is abandoned (None = unbounded)

    Returns:
        ExportResult

    Raises:
        ExportCancelled: If cancel_event was set
        ExportError: If the export timed out, failed to write, or was empty

    Example:
        >>> result = render_to_pdf(page_map, config, report, Path("out/report.pdf"), height_model=model)
        >>> result.page_count == page_map.total_pages
        True
    """
    layout = height_model.layout
    deadline = time.monotonic() + timeout if timeout is not None else None
    loader = ImageLoader(asset_dir)

    pages = walk_page_map(page_map, print_config, report, height_model)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    part_path = output_path.with_name(output_path.name + ".part")

    try:
        c = canvas.Canvas(str(part_path), pagesize=(layout.page_width, layout.page_height))
        c.setTitle(f"{report.project_name} - {report.report_period}".strip(" -"))
        for page in pages:
            _check_cancelled(cancel_event, deadline)
            _render_page(c, page, print_config, report, layout, loader)
            c.showPage()
        _check_cancelled(cancel_event, deadline)
        c.save()

        if not part_path.exists() or part_path.stat().st_size == 0:
            raise ExportError("PDF export produced an empty document")
        os.replace(part_path, output_path)
    except ExportError:
        _discard(part_path)
        raise
    except OSError as e:
        _discard(part_path)
        raise ExportError(f"Failed to write PDF to {output_path}: {e}") from e

    if loader.placeholder_count:
        logger.warning(f"{loader.placeholder_count} images replaced by placeholders")
    logger.info(f"Rendered {len(pages)} pages to {output_path}")
    return ExportResult(
        output_path=output_path,
        page_count=len(pages),
        placeholder_count=loader.placeholder_count,
    )


def _check_cancelled(cancel_event: Optional[threading.Event], deadline: Optional[float]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ExportCancelled("Export cancelled")
    if deadline is not None and time.monotonic() > deadline:
        raise ExportError("Export timed out")


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


# ─────────────────────────────────────────────────────────────────────────────
# Pages
# ─────────────────────────────────────────────────────────────────────────────

def _render_page(
    c: canvas.Canvas,
    page: RenderPage,
    print_config: PrintConfig,
    report: ReportData,
    layout: LayoutConfig,
    loader: ImageLoader,
) -> None:
    if page.is_cover:
        _draw_cover(c, page.cover, layout, loader)
        return

    first = page.uses_first_profile
    profile = layout.profile(first=first)
    if profile.header_height:
        _draw_running_header(c, report, layout, profile.margin_top, profile.header_height)

    content_top = layout.content_top(first=first)
    for block in page.blocks:
        _draw_block(c, block, content_top + block.top, layout, loader)

    if print_config.show_footer:
        _draw_footer(c, page, print_config, report, layout)


def _draw_running_header(
    c: canvas.Canvas,
    report: ReportData,
    layout: LayoutConfig,
    top: float,
    height: float,
) -> None:
    baseline = _y(layout, top + height / 2 + 3)
    c.saveState()
    c.setFont(BODY_FONT, FOOTER_FONT_SIZE + 1)
    c.setFillColorRGB(0.4, 0.4, 0.4)
    c.drawString(layout.margin_left, baseline, report.project_name)
    c.drawRightString(layout.page_width - layout.margin_right, baseline, report.report_period)
    c.setStrokeColorRGB(0.8, 0.8, 0.8)
    rule = _y(layout, top + height - 4)
    c.line(layout.margin_left, rule, layout.page_width - layout.margin_right, rule)
    c.restoreState()


def _draw_footer(
    c: canvas.Canvas,
    page: RenderPage,
    print_config: PrintConfig,
    report: ReportData,
    layout: LayoutConfig,
) -> None:
    """Draw the page footer inside the footer band below the content area."""
    profile = layout.profile(first=page.uses_first_profile)
    band_top = layout.content_bottom(first=page.uses_first_profile)
    baseline = _y(layout, band_top + profile.footer_height / 2 + 3)

    c.saveState()
    c.setFont(BODY_FONT, FOOTER_FONT_SIZE)
    c.setFillColorRGB(0.4, 0.4, 0.4)
    c.drawString(layout.margin_left, baseline, report.project_name)
    if print_config.show_page_numbers:
        c.drawRightString(
            layout.page_width - layout.margin_right,
            baseline,
            f"Page {page.page_number} of {page.total_pages}",
        )
    c.restoreState()


def _draw_cover(c: canvas.Canvas, cover: CoverBlock, layout: LayoutConfig, loader: ImageLoader) -> None:
    width = layout.content_width
    left = layout.margin_left
    top = layout.first_page.margin_top

    if cover.hero is not None:
        _draw_photo(c, cover.hero, left, top, width, COVER_HERO_HEIGHT, layout, loader)
        top += COVER_HERO_HEIGHT + 24
    else:
        top += 160

    c.saveState()
    c.setFont(TITLE_FONT, COVER_TITLE_FONT_SIZE)
    c.drawString(left, _y(layout, top + COVER_TITLE_FONT_SIZE), cover.project_name)
    top += COVER_TITLE_FONT_SIZE + 16
    c.setFont(BODY_FONT, 14)
    c.drawString(left, _y(layout, top + 14), f"Weekly Report: {cover.report_period}")
    top += 22
    if cover.job_number:
        c.setFillColorRGB(0.4, 0.4, 0.4)
        c.drawString(left, _y(layout, top + 14), f"Job #{cover.job_number}")
    c.restoreState()

    if cover.strip:
        count = len(cover.strip)
        cell = (width - COVER_STRIP_GAP * (count - 1)) / count
        strip_top = layout.page_height - layout.first_page.margin_bottom - COVER_STRIP_HEIGHT
        for i, placed in enumerate(cover.strip):
            x = left + i * (cell + COVER_STRIP_GAP)
            _draw_photo(c, placed, x, strip_top, cell, COVER_STRIP_HEIGHT, layout, loader)


# ─────────────────────────────────────────────────────────────────────────────
# Blocks
# ─────────────────────────────────────────────────────────────────────────────

def _draw_block(
    c: canvas.Canvas,
    block: RenderBlock,
    top: float,
    layout: LayoutConfig,
    loader: ImageLoader,
) -> None:
    """Draw one placement whose top edge is ``top`` points below the page top."""
    if block.kind is None:
        return

    if block.placement.render_config.show_header:
        c.saveState()
        c.setFont(TITLE_FONT, TITLE_FONT_SIZE)
        c.setFillColorRGB(0.06, 0.09, 0.16)
        c.drawString(layout.margin_left, _y(layout, top + TITLE_FONT_SIZE + 4), block.title)
        c.restoreState()

    if block.kind is SectionKind.TABLE:
        _draw_table(c, block, top, layout)
    elif block.kind is SectionKind.PHOTO_GRID:
        _draw_photo_grid(c, block, top, layout, loader)
    else:
        _draw_narrative(c, block, top, layout)


def _draw_table(c: canvas.Canvas, block: RenderBlock, top: float, layout: LayoutConfig) -> None:
    left = layout.margin_left
    width = layout.content_width
    rows_top = top + block.header_height
    n_cols = max(1, len(block.columns), max((len(r) for r in block.rows), default=0))
    col_w = width / n_cols

    c.saveState()
    if block.show_column_header:
        band_top = rows_top - COLUMN_HEADER_BAND
        c.setFillColorRGB(0.95, 0.96, 0.97)
        c.rect(left, _y(layout, rows_top), width, COLUMN_HEADER_BAND, stroke=0, fill=1)
        c.setFillColorRGB(0.2, 0.25, 0.33)
        c.setFont(TITLE_FONT, CELL_FONT_SIZE)
        for i, heading in enumerate(block.columns):
            c.drawString(left + i * col_w + 4, _y(layout, band_top + 13),
                         _fit(c, heading, TITLE_FONT, CELL_FONT_SIZE, col_w - 8))

    c.setFont(BODY_FONT, CELL_FONT_SIZE)
    c.setFillColorRGB(0, 0, 0)
    c.setStrokeColorRGB(0.89, 0.91, 0.94)
    y = rows_top
    if block.empty:
        c.setFillColorRGB(0.4, 0.4, 0.4)
        c.drawCentredString(left + width / 2, _y(layout, y + layout.empty_table_height / 2 + 3),
                            EMPTY_TABLE_TEXT)
        y += layout.empty_table_height
    for row in block.rows:
        baseline = _y(layout, y + block.row_height / 2 + 3)
        for i, value in enumerate(row):
            c.drawString(left + i * col_w + 4, baseline,
                         _fit(c, value, BODY_FONT, CELL_FONT_SIZE, col_w - 8))
        y += block.row_height
        c.line(left, _y(layout, y), left + width, _y(layout, y))
    c.restoreState()

    if block.footer_text:
        _draw_paragraphs(c, block.footer_text, left, y + 8, width, layout)


def _draw_narrative(c: canvas.Canvas, block: RenderBlock, top: float, layout: LayoutConfig) -> None:
    columns = max(1, block.text_columns)
    gutter = 12
    col_w = (layout.content_width - gutter * (columns - 1)) / columns
    lines = _wrap(block.text, col_w)
    per_column = max(1, math.ceil(len(lines) / columns))

    c.saveState()
    c.setFont(BODY_FONT, BODY_FONT_SIZE)
    text_top = top + block.header_height
    for i, line in enumerate(lines):
        col, row = divmod(i, per_column)
        x = layout.margin_left + col * (col_w + gutter)
        c.drawString(x, _y(layout, text_top + (row + 1) * LINE_HEIGHT - 3), line)
    c.restoreState()


def _draw_photo_grid(
    c: canvas.Canvas,
    block: RenderBlock,
    top: float,
    layout: LayoutConfig,
    loader: ImageLoader,
) -> None:
    columns = max(1, block.photo_columns)
    gap = 8
    cell_w = (layout.content_width - gap * (columns - 1)) / columns
    grid_top = top + block.header_height
    image_h = max(1, block.row_height - CAPTION_BAND - gap)

    for i, placed in enumerate(block.photos):
        row, col = divmod(i, columns)
        x = layout.margin_left + col * (cell_w + gap)
        cell_top = grid_top + row * block.row_height
        _draw_photo(c, placed, x, cell_top, cell_w, image_h, layout, loader)
        if placed.photo.caption:
            c.saveState()
            c.setFont(BODY_FONT, FOOTER_FONT_SIZE + 1)
            c.drawString(x, _y(layout, cell_top + image_h + 12),
                         _fit(c, placed.photo.caption, BODY_FONT, FOOTER_FONT_SIZE + 1, cell_w))
            c.restoreState()


def _draw_photo(
    c: canvas.Canvas,
    placed: PlacedPhoto,
    x: float,
    top: float,
    width: float,
    height: float,
    layout: LayoutConfig,
    loader: ImageLoader,
) -> None:
    image, _ = loader.load(placed.photo.source)
    framed = crop_to_frame(image, width, height, placed.position)
    c.drawImage(_pil_to_reader(framed), x, _y(layout, top + height), width=width, height=height)


def _draw_paragraphs(
    c: canvas.Canvas,
    text: str,
    left: float,
    top: float,
    width: float,
    layout: LayoutConfig,
) -> None:
    c.saveState()
    c.setFont(BODY_FONT, BODY_FONT_SIZE)
    for i, line in enumerate(_wrap(text, width)):
        c.drawString(left, _y(layout, top + (i + 1) * LINE_HEIGHT - 3), line)
    c.restoreState()


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _wrap(text: str, width: float) -> List[str]:
    lines: List[str] = []
    for paragraph in text.split("\n"):
        if not paragraph.strip():
            continue
        lines.extend(simpleSplit(paragraph, BODY_FONT, BODY_FONT_SIZE, width))
    return lines


def _fit(c: canvas.Canvas, text: str, font: str, size: float, width: float) -> str:
    """Truncate text with an ellipsis so it fits ``width``."""
    text = str(text)
    if c.stringWidth(text, font, size) <= width:
        return text
    while text and c.stringWidth(text + "...", font, size) > width:
        text = text[:-1]
    return text + "..." if text else ""


def _pil_to_reader(img: Image.Image) -> ImageReader:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _y(layout: LayoutConfig, top: float) -> float:
    """Convert a top-down distance from the page top to a bottom-up PDF y."""
    return layout.page_height - top
