"""
Module: print_studio.output

Purpose:
    The two placement renderers. Both walk the same PageMap through
    output.walker and never infer their own page breaks.

Key Functions:
    - render_preview(): Interactive HTML preview
    - render_to_pdf(): PDF document export
    - walk_page_map(): Shared page resolution

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - print_studio.layout.models: PageMap

Used By:
    - print_studio.controller: Pipeline orchestration
    - print_studio.diagnostics: Post-render inspection
"""

from .preview import PreviewDocument, PreviewPage, SelectionContext, render_preview
from .renderer import ExportCancelled, ExportError, ExportResult, render_to_pdf
from .walker import CONTINUED_SUFFIX, RenderBlock, RenderPage, walk_page_map

__all__ = [
    # Preview
    "PreviewDocument",
    "PreviewPage",
    "SelectionContext",
    "render_preview",
    # Export
    "ExportCancelled",
    "ExportError",
    "ExportResult",
    "render_to_pdf",
    # Shared walk
    "CONTINUED_SUFFIX",
    "RenderBlock",
    "RenderPage",
    "walk_page_map",
]
