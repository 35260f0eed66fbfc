"""
Module: diagnostics

Post-render inspection of the preview and the exported PDF. Flags
content pushed below the content area (overflow), nearly empty pages
(blank), section headers stranded at the bottom of a page (orphan),
unusually long reports, and disagreement between the two renderers
and the PageMap (parity).

Diagnostics are advisory: they produce LayoutWarning records for the
editing UI and never alter the PageMap.

Structure:
- inspect_pdf(): PyMuPDF inspection of an exported document
- inspect_preview(): Page summaries produced by the preview renderer
- inspect_page_map(): Estimate-level checks (budget overrun, page count)
- check_parity(): Page count / placement agreement
- DiagnosticsCollector: Thread-safe, de-duplicating sink
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import fitz

from print_studio.layout.config import LayoutConfig
from print_studio.layout.models import LayoutWarning, PageMap, Severity
from print_studio.output.preview import PreviewDocument
from print_studio.output.renderer import TITLE_FONT_SIZE

logger = logging.getLogger(__name__)

# Thresholds
BLANK_TEXT_THRESHOLD = 50      # Visible characters below which a page is "nearly empty"
ORPHAN_DISTANCE = 50           # Header within this distance of the content bottom
OVERFLOW_TOLERANCE = 1.0       # Rounding slack in points


def inspect_pdf(
    pdf_path: Path,
    layout: Optional[LayoutConfig] = None,
    *,
    has_cover: bool = False,
) -> List[LayoutWarning]:
    """
    Inspect an exported PDF for overflow, blank pages and orphaned headers.

    Only text inside the content area is considered; the running header
    and the page footer are ignored.

    Args:
        pdf_path: Exported document
        layout: Page geometry the document was rendered with
        has_cover: Page 1 is the cover template (skipped)

    Returns:
        Warnings in page order
    """
    layout = layout or LayoutConfig()
    warnings: List[LayoutWarning] = []

    with fitz.open(str(pdf_path)) as doc:
        for index, page in enumerate(doc):
            page_number = index + 1
            if has_cover and page_number == 1:
                continue
            first = not has_cover and page_number == 1
            warnings.extend(_inspect_pdf_page(
                page,
                page_number,
                top=layout.content_top(first=first),
                bottom=layout.content_bottom(first=first),
            ))
        page_count = doc.page_count

    warnings.extend(_page_count_warnings(page_count, layout))
    logger.debug(f"Inspected {page_count} PDF pages: {len(warnings)} warnings")
    return warnings


def _inspect_pdf_page(page: fitz.Page, page_number: int, top: float, bottom: float) -> List[LayoutWarning]:
    warnings: List[LayoutWarning] = []
    data = page.get_text("dict")

    content_text: List[str] = []
    image_count = 0
    lowest = bottom
    headers = []   # (text, y1)
    block_tops = []

    for block in data.get("blocks", []):
        x0, y0, x1, y1 = block["bbox"]
        if y0 < top - OVERFLOW_TOLERANCE or y0 >= bottom:
            continue
        block_tops.append(y0)
        lowest = max(lowest, y1)
        if block.get("type") == 1:
            image_count += 1
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                content_text.append(text)
                if "Bold" in span.get("font", "") and abs(span.get("size", 0) - TITLE_FONT_SIZE) < 0.5:
                    headers.append((text.strip(), span["bbox"][3]))

    hidden = lowest - bottom
    if hidden > OVERFLOW_TOLERANCE:
        warnings.append(LayoutWarning(
            id=f"overflow-{page_number}",
            type="overflow",
            page_number=page_number,
            message=f"Page {page_number} has content overflow ({hidden:.0f}pt hidden)",
            severity=Severity.ERROR,
        ))

    text_length = len("".join(content_text).strip())
    if page_number > 1 and text_length < BLANK_TEXT_THRESHOLD and image_count == 0:
        warnings.append(_blank_warning(page_number))

    for text, header_bottom in headers:
        if bottom - header_bottom >= ORPHAN_DISTANCE:
            continue
        followed = any(y0 > header_bottom for y0 in block_tops)
        if not followed:
            warnings.append(_orphan_warning(page_number, text))

    return warnings


def inspect_preview(
    document: PreviewDocument,
    layout: Optional[LayoutConfig] = None,
) -> List[LayoutWarning]:
    """Inspect preview page summaries for nearly empty pages and page count."""
    layout = layout or LayoutConfig()
    warnings: List[LayoutWarning] = []
    for page in document.pages:
        if page.is_cover or page.page_number == 1:
            continue
        if page.text_length < BLANK_TEXT_THRESHOLD and page.image_count == 0:
            warnings.append(_blank_warning(page.page_number))
    warnings.extend(_page_count_warnings(document.total_pages, layout))
    return warnings


def inspect_page_map(page_map: PageMap, layout: Optional[LayoutConfig] = None) -> List[LayoutWarning]:
    """Estimate-level checks: pages whose placements exceed the page budget."""
    layout = layout or LayoutConfig()
    warnings: List[LayoutWarning] = []
    for page in page_map.pages:
        if page.height_available and page.height_used > page.height_available:
            hidden = page.height_used - page.height_available
            warnings.append(LayoutWarning(
                id=f"overflow-{page.page_number}",
                type="overflow",
                page_number=page.page_number,
                message=f"Page {page.page_number} has content overflow ({hidden}pt hidden)",
                severity=Severity.ERROR,
            ))
    warnings.extend(_page_count_warnings(page_map.total_pages, layout))
    return warnings


def check_parity(
    page_map: PageMap,
    preview: PreviewDocument,
    pdf_page_count: Optional[int] = None,
) -> List[LayoutWarning]:
    """
    Check that both renderers reproduced the PageMap.

    Any mismatch is an error in a renderer, never an acceptable difference.
    """
    warnings: List[LayoutWarning] = []
    expected = page_map.total_pages

    if preview.total_pages != expected:
        warnings.append(_parity_warning(
            "preview-pages", 0,
            f"Preview has {preview.total_pages} pages, layout has {expected}",
        ))
    if pdf_page_count is not None and pdf_page_count != expected:
        warnings.append(_parity_warning(
            "export-pages", 0,
            f"Exported document has {pdf_page_count} pages, layout has {expected}",
        ))

    for page, preview_page in zip(page_map.pages, preview.pages):
        placed = tuple(p.placement_id for p in page.sections)
        if placed != preview_page.placement_ids:
            warnings.append(_parity_warning(
                f"preview-placements-{page.page_number}", page.page_number,
                f"Preview page {page.page_number} placements differ from the layout",
            ))
    return warnings


def pdf_page_count(pdf_path: Path) -> int:
    with fitz.open(str(pdf_path)) as doc:
        return doc.page_count


def _page_count_warnings(total_pages: int, layout: LayoutConfig) -> List[LayoutWarning]:
    if total_pages <= layout.high_page_count:
        return []
    return [LayoutWarning(
        id="high-page-count",
        type="cutoff",
        page_number=0,
        message=f"Report has {total_pages} pages - consider condensing content",
        severity=Severity.INFO,
    )]


def _blank_warning(page_number: int) -> LayoutWarning:
    return LayoutWarning(
        id=f"blank-{page_number}",
        type="blank",
        page_number=page_number,
        message=f"Page {page_number} appears to be nearly empty",
        severity=Severity.WARNING,
    )


def _orphan_warning(page_number: int, header: str) -> LayoutWarning:
    return LayoutWarning(
        id=f"orphan-{page_number}-{header}",
        type="orphan",
        page_number=page_number,
        message=f'Header "{header[:20]}..." may be orphaned on page {page_number}',
        severity=Severity.WARNING,
    )


def _parity_warning(key: str, page_number: int, message: str) -> LayoutWarning:
    logger.error(message)
    return LayoutWarning(
        id=f"parity-{key}",
        type="parity",
        page_number=page_number,
        message=message,
        severity=Severity.ERROR,
    )


class DiagnosticsCollector:
    """
    Thread-safe collector for layout warnings.

    Warnings are de-duplicated by id (first record wins) so the same
    problem reported by several inspections appears once.
    """

    def __init__(self):
        self._warnings: Dict[str, LayoutWarning] = {}
        self._lock = threading.Lock()

    def add(self, warning: LayoutWarning) -> None:
        with self._lock:
            self._warnings.setdefault(warning.id, warning)

    def extend(self, warnings: Iterable[LayoutWarning]) -> None:
        for warning in warnings:
            self.add(warning)

    @property
    def warnings(self) -> List[LayoutWarning]:
        with self._lock:
            return list(self._warnings.values())

    def has_errors(self) -> bool:
        return any(w.severity == Severity.ERROR for w in self.warnings)

    def summary(self) -> Dict[str, int]:
        counts = {Severity.ERROR: 0, Severity.WARNING: 0, Severity.INFO: 0}
        for warning in self.warnings:
            counts[warning.severity] = counts.get(warning.severity, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "summary": self.summary(),
            "warnings": [w.to_dict() for w in self.warnings],
        }

    def write_report(self, path: Path) -> None:
        """Write the collected warnings as a JSON report."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Wrote diagnostics report ({len(self.warnings)} warnings) to {path}")
