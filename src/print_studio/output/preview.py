"""
Module: output.preview

Purpose:
    Interactive markup renderer. Walks the PageMap and emits one HTML
    page element per page, each placement tagged with
    ``data-placement-id`` / ``data-section-id`` so the editing UI can
    select elements and feed drag-based reordering back into the
    ConfigStore (see ConfigStore.move_section).

    Selection is an explicit SelectionContext argument; the renderer
    holds no state between calls.

Key Functions:
    - render_preview(): PageMap -> PreviewDocument

Key Classes:
    - SelectionContext: Currently selected placement/section
    - PreviewPage: Per-page summary used by diagnostics and parity checks
    - PreviewDocument: Rendered HTML plus page summaries

Dependencies:
    - output.walker: Shared page resolution
    - html (std): Escaping

Used By:
    - controller: Preview rendering
    - diagnostics: Preview inspection and parity
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from print_studio.core.models import ReportData, SectionKind
from print_studio.layout.config import LayoutConfig
from print_studio.layout.heights import HeightModel
from print_studio.layout.models import PageMap
from print_studio.studio.print_config import PrintConfig

from .walker import CoverBlock, PlacedPhoto, RenderBlock, RenderPage, walk_page_map, EMPTY_TABLE_TEXT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionContext:
    """Selection state passed down to the renderer."""

    placement_id: Optional[str] = None
    section_id: Optional[str] = None

    def is_selected(self, block: RenderBlock) -> bool:
        if self.placement_id is not None:
            return block.placement_id == self.placement_id
        return self.section_id is not None and block.section_id == self.section_id


NO_SELECTION = SelectionContext()


@dataclass(frozen=True)
class PreviewPage:
    """
    What one preview page contains.

    Attributes:
        page_number: 1-based page number
        placement_ids: Placement ids in page order
        headers: Section titles drawn on the page
        text: Visible text content (excluding running header/footer)
        image_count: Images drawn on the page
        is_cover: Cover template page
    """

    page_number: int
    placement_ids: Tuple[str, ...]
    headers: Tuple[str, ...]
    text: str
    image_count: int
    is_cover: bool = False

    @property
    def text_length(self) -> int:
        return len(self.text.strip())


@dataclass(frozen=True)
class PreviewDocument:
    """Rendered preview."""

    html: str
    pages: Tuple[PreviewPage, ...]

    @property
    def total_pages(self) -> int:
        return len(self.pages)


def render_preview(
    page_map: PageMap,
    print_config: PrintConfig,
    report: ReportData,
    *,
    height_model: HeightModel,
    selection: SelectionContext = NO_SELECTION,
) -> PreviewDocument:
    """
    Render the interactive HTML preview.

    Args:
        page_map: Layout to render (never modified, never re-laid out)
        print_config: Configuration the layout was computed from
        report: Report data
        height_model: Height model the layout was computed with
        selection: Selected placement / section

    Returns:
        PreviewDocument with one page element per PageMap page
    """
    layout = height_model.layout
    render_pages = walk_page_map(page_map, print_config, report, height_model)

    parts: List[str] = [
        f'<div class="print-document" data-total-pages="{page_map.total_pages}">'
    ]
    summaries: List[PreviewPage] = []
    for page in render_pages:
        markup, summary = _render_page(page, print_config, report, layout, selection)
        parts.append(markup)
        summaries.append(summary)
    parts.append("</div>")

    logger.debug(f"Rendered preview with {len(summaries)} pages")
    return PreviewDocument(html="\n".join(parts), pages=tuple(summaries))


def _render_page(
    page: RenderPage,
    print_config: PrintConfig,
    report: ReportData,
    layout: LayoutConfig,
    selection: SelectionContext,
) -> Tuple[str, PreviewPage]:
    style = f"width:{layout.page_width}pt;height:{layout.page_height}pt"
    parts = [f'<section class="page" data-page-number="{page.page_number}" style="{style}">']

    if page.is_cover:
        parts.append(_render_cover(page.cover))
        text = " ".join(t for t in (page.cover.project_name, page.cover.report_period,
                                    page.cover.job_number) if t)
        image_count = (1 if page.cover.hero else 0) + len(page.cover.strip)
        parts.append("</section>")
        return "\n".join(parts), PreviewPage(
            page_number=page.page_number,
            placement_ids=(),
            headers=(),
            text=text,
            image_count=image_count,
            is_cover=True,
        )

    profile = layout.profile(first=page.uses_first_profile)
    if profile.header_height:
        parts.append(
            f'<header class="running-header" style="height:{profile.header_height}pt">'
            f"{_esc(report.project_name)} &middot; {_esc(report.report_period)}</header>"
        )

    top = layout.content_top(first=page.uses_first_profile)
    parts.append(
        f'<div class="content" style="top:{top}pt;'
        f'height:{layout.content_height(first=page.uses_first_profile)}pt">'
    )
    texts: List[str] = []
    image_count = 0
    for block in page.blocks:
        markup, block_text, block_images = _render_block(block, selection)
        parts.append(markup)
        texts.append(block_text)
        image_count += block_images
    parts.append("</div>")

    if print_config.show_footer:
        label = (f"Page {page.page_number} of {page.total_pages}"
                 if print_config.show_page_numbers else "")
        parts.append(f'<footer class="page-footer">{_esc(label)}</footer>')
    parts.append("</section>")

    return "\n".join(parts), PreviewPage(
        page_number=page.page_number,
        placement_ids=tuple(b.placement_id for b in page.blocks),
        headers=tuple(b.title for b in page.blocks if b.kind is not None),
        text=" ".join(t for t in texts if t),
        image_count=image_count,
    )


def _render_block(block: RenderBlock, selection: SelectionContext) -> Tuple[str, str, int]:
    """Return (markup, visible text, image count) for one placement."""
    classes = ["placement", f"kind-{block.section.kind}"]
    if block.placement.continues_from_previous:
        classes.append("continued")
    if selection.is_selected(block):
        classes.append("selected")

    attrs = (
        f'class="{" ".join(classes)}" '
        f'data-placement-id="{_esc(block.placement_id)}" '
        f'data-section-id="{_esc(block.section_id)}" '
        f'style="top:{block.top}pt;height:{block.height}pt"'
    )
    if block.kind is None:
        return f"<div {attrs}></div>", "", 0

    body: List[str] = []
    texts: List[str] = []
    if block.placement.render_config.show_header:
        body.append(f"<h2>{_esc(block.title)}</h2>")
        texts.append(block.title)

    image_count = 0
    if block.kind is SectionKind.TABLE:
        markup, text = _render_table(block)
        body.append(markup)
        texts.append(text)
    elif block.kind is SectionKind.PHOTO_GRID:
        body.append(f'<div class="photo-grid" style="--columns:{block.photo_columns}">')
        for placed in block.photos:
            body.append(_render_photo(placed, "grid-photo"))
            if placed.photo.caption:
                texts.append(placed.photo.caption)
        body.append("</div>")
        image_count = len(block.photos)
    else:
        paragraphs = [p for p in block.text.split("\n") if p.strip()]
        body.extend(f"<p>{_esc(p)}</p>" for p in paragraphs)
        texts.extend(paragraphs)

    return f"<div {attrs}>{''.join(body)}</div>", " ".join(texts), image_count


def _render_table(block: RenderBlock) -> Tuple[str, str]:
    parts = ["<table>"]
    texts: List[str] = []
    if block.show_column_header:
        cells = "".join(f"<th>{_esc(c)}</th>" for c in block.columns)
        parts.append(f"<thead><tr>{cells}</tr></thead>")
    parts.append("<tbody>")
    if block.empty:
        span = max(1, len(block.columns))
        parts.append(f'<tr class="empty"><td colspan="{span}">{EMPTY_TABLE_TEXT}</td></tr>')
        texts.append(EMPTY_TABLE_TEXT)
    start = block.placement.data_range.start if block.placement.data_range else 0
    for offset, row in enumerate(block.rows):
        cells = "".join(f"<td>{_esc(v)}</td>" for v in row)
        parts.append(f'<tr data-row-index="{start + offset}">{cells}</tr>')
        texts.extend(row)
    parts.append("</tbody></table>")
    if block.footer_text:
        parts.append(f'<div class="table-footer">{_esc(block.footer_text)}</div>')
        texts.append(block.footer_text)
    return "".join(parts), " ".join(texts)


def _render_cover(cover: CoverBlock) -> str:
    parts = ['<div class="cover">']
    if cover.hero is not None:
        parts.append(_render_photo(cover.hero, "hero-photo"))
    parts.append(f"<h1>{_esc(cover.project_name)}</h1>")
    parts.append(f'<p class="period">{_esc(cover.report_period)}</p>')
    if cover.job_number:
        parts.append(f'<p class="job-number">Job #{_esc(cover.job_number)}</p>')
    if cover.strip:
        parts.append('<div class="photo-strip">')
        parts.extend(_render_photo(p, "strip-photo") for p in cover.strip)
        parts.append("</div>")
    parts.append("</div>")
    return "".join(parts)


def _render_photo(placed: PlacedPhoto, css_class: str) -> str:
    pos = placed.position
    style = f"object-position:{pos.x:g}% {pos.y:g}%"
    if pos.zoom != 1.0:
        style += f";transform:scale({pos.zoom:g})"
    return (
        f'<figure class="{css_class}" data-photo-index="{placed.index}">'
        f'<img src="{_esc(placed.photo.source)}" style="{style}" alt="">'
        f"<figcaption>{_esc(placed.photo.caption)}</figcaption></figure>"
    )


def _esc(value: str) -> str:
    return html.escape(str(value), quote=True)
