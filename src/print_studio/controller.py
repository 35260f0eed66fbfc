"""
Module: controller

Purpose:
    Orchestrate the print pipeline and keep the live layout current.
    Load -> Configure -> Paginate -> Preview -> Export -> Diagnose

Key Functions:
    - build_report(): One-shot pipeline used by the launcher

Key Classes:
    - BuildConfig: Inputs of a one-shot build
    - BuildResult: Complete build result
    - LayoutSession: Recomputes the PageMap on every edit; latest result wins
    - StudioError: Exception for unreadable inputs

Dependencies:
    - layout: Page packing
    - output: Preview and PDF renderers
    - diagnostics: Post-render inspection
    - persistence: Stored print configuration

Used By:
    - print_studio.cli: Command-line launcher
    - Editing UI integration
"""

from __future__ import annotations

import json
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from print_studio.core.models import Density, ReportData
from print_studio.core.schemas.validator import ValidationError
from print_studio.core.utils.serialization import load_report_json
from print_studio.diagnostics import (
    DiagnosticsCollector,
    check_parity,
    inspect_page_map,
    inspect_pdf,
    inspect_preview,
    pdf_page_count,
)
from print_studio.layout import HeightModel, LayoutConfig, LayoutWarning, PageMap, paginate
from print_studio.output import render_preview, render_to_pdf
from print_studio.output.renderer import DEFAULT_EXPORT_TIMEOUT
from print_studio.persistence import JsonFileBackend, load_print_config
from print_studio.studio import ConfigStore, PrintConfig, default_print_config
from print_studio.studio.store import set_density

logger = logging.getLogger(__name__)


class StudioError(Exception):
    """Error reading the inputs of a build."""
    pass


@dataclass(frozen=True)
class BuildConfig:
    """
    Inputs of a one-shot build.

    Attributes:
        report_path: Report record (JSON)
        output_dir: Directory for report.pdf, preview.html and diagnostics
        store_root: Print-config store directory (None = defaults)
        asset_dir: Base directory for relative photo paths (default: report's directory)
        layout: Page geometry and packing thresholds
        density: Override of the stored global density
        timeout: Export timeout in seconds
    """

    report_path: Path
    output_dir: Path
    store_root: Optional[Path] = None
    asset_dir: Optional[Path] = None
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    density: Optional[Density] = None
    timeout: Optional[float] = DEFAULT_EXPORT_TIMEOUT


@dataclass(frozen=True)
class BuildResult:
    """
    Complete build result (immutable).

    Attributes:
        page_map: Layout both renderers consumed
        pdf_path: Exported document
        preview_path: Rendered HTML preview
        page_count: Number of pages generated
        warnings: Packing and diagnostics warnings
        metadata: Build metadata dictionary

    Example:
        >>> result = build_report(config)
        >>> print(f"Generated {result.page_count} pages")
    """

    page_map: PageMap
    pdf_path: Path
    preview_path: Path
    page_count: int
    warnings: tuple[LayoutWarning, ...]
    metadata: dict


def build_report(config: BuildConfig, *, cancel_event: Optional[threading.Event] = None) -> BuildResult:
    """
    Build the print outputs of a report from start to finish.

    Pipeline:
    1. Load the report record
    2. Load the stored print configuration (or defaults)
    3. Paginate into a PageMap
    4. Render the HTML preview
    5. Export the PDF
    6. Run diagnostics and the renderer parity check

    Args:
        config: Build configuration
        cancel_event: Set to abort the export

    Returns:
        BuildResult with paths, warnings and metadata

    Raises:
        StudioError: If the report cannot be read
        ExportError: If the export fails or is cancelled
    """
    start_time = time.perf_counter()

    # 1. Load report
    try:
        report = load_report_json(config.report_path)
    except (FileNotFoundError, ValidationError) as e:
        raise StudioError(f"Failed to load report: {e}") from e
    logger.info(f"Loaded report {report.project_id} / {report.report_period}")

    # 2. Print configuration
    if config.store_root is not None:
        backend = JsonFileBackend(config.store_root)
        print_config = load_print_config(backend, report.project_id, report.report_period)
    else:
        print_config = default_print_config()
    if config.density is not None:
        print_config = set_density(print_config, config.density)

    # 3. Paginate
    height_model = HeightModel(config.layout)
    page_map = paginate(print_config, report, height_model=height_model)

    # 4. Preview
    config.output_dir.mkdir(parents=True, exist_ok=True)
    preview = render_preview(page_map, print_config, report, height_model=height_model)
    preview_path = config.output_dir / "preview.html"
    preview_path.write_text(preview.html, encoding="utf-8")
    logger.info(f"Rendered preview: {preview_path}")

    # 5. Export
    pdf_path = config.output_dir / "report.pdf"
    export = render_to_pdf(
        page_map,
        print_config,
        report,
        pdf_path,
        height_model=height_model,
        asset_dir=config.asset_dir or config.report_path.parent,
        cancel_event=cancel_event,
        timeout=config.timeout,
    )

    # 6. Diagnostics
    collector = DiagnosticsCollector()
    collector.extend(page_map.warnings)
    collector.extend(inspect_page_map(page_map, config.layout))
    collector.extend(inspect_preview(preview, config.layout))
    collector.extend(inspect_pdf(pdf_path, config.layout, has_cover=print_config.has_cover))
    collector.extend(check_parity(page_map, preview, pdf_page_count(pdf_path)))
    collector.write_report(config.output_dir / "diagnostics.json")

    elapsed = time.perf_counter() - start_time
    logger.info(f"Report build completed in {elapsed:.2f}s")

    metadata = _build_metadata(report, page_map, export.placeholder_count, collector)
    _write_metadata(config.output_dir, metadata)

    return BuildResult(
        page_map=page_map,
        pdf_path=pdf_path,
        preview_path=preview_path,
        page_count=export.page_count,
        warnings=tuple(collector.warnings),
        metadata=metadata,
    )


def _build_metadata(
    report: ReportData,
    page_map: PageMap,
    placeholder_count: int,
    collector: DiagnosticsCollector,
) -> Dict[str, Any]:
    from print_studio import __version__

    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "project_id": report.project_id,
        "report_period": report.report_period,
        "total_pages": page_map.total_pages,
        "first_pages": {sid: page_map.first_page_of(sid) for sid in page_map.section_ids},
        "placeholder_images": placeholder_count,
        "diagnostics": collector.summary(),
    }


def _write_metadata(output_dir: Path, metadata: Dict[str, Any]) -> None:
    path = output_dir / "build_metadata.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(metadata, f, indent=2)
    logger.debug(f"Wrote build metadata to {path}")


# ─────────────────────────────────────────────────────────────────────────────
# Live layout
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LayoutUpdate:
    """A published PageMap together with the snapshot it was computed from."""

    generation: int
    page_map: PageMap
    print_config: PrintConfig
    report: ReportData


LayoutListener = Callable[[LayoutUpdate], None]


class LayoutSession:
    """
    Keeps a PageMap current while the user edits.

    Every ConfigStore change (or report replacement) starts a new
    numbered computation on a worker thread. Only the result of the most
    recent request is published; results of superseded requests are
    discarded, never merged.

    Example:
        >>> session = LayoutSession(store, report, on_update=view.show)
        >>> store.toggle_section("weather")   # triggers recomputation
        >>> session.wait()
        >>> session.latest.page_map.total_pages
    """

    def __init__(
        self,
        store: ConfigStore,
        report: ReportData,
        *,
        height_model: Optional[HeightModel] = None,
        on_update: Optional[LayoutListener] = None,
        max_workers: int = 2,
    ) -> None:
        self.store = store
        self.height_model = height_model or HeightModel()
        self._report = report
        self._on_update = on_update
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="layout")
        self._lock = threading.Lock()
        self._publish_lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[LayoutUpdate] = None
        self._last_future: Optional[Future] = None
        self._unsubscribe = store.subscribe(lambda config: self.request())

    @property
    def latest(self) -> Optional[LayoutUpdate]:
        with self._lock:
            return self._latest

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def set_report(self, report: ReportData) -> Future:
        """Replace the report snapshot and recompute."""
        with self._lock:
            self._report = report
        return self.request()

    def request(self) -> Future:
        """Start a recomputation from the current snapshots."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            future = self._executor.submit(self._compute, generation, self.store.config, self._report)
            self._last_future = future
        return future

    def wait(self, timeout: Optional[float] = None) -> Optional[LayoutUpdate]:
        """Block until the most recent request has finished."""
        with self._lock:
            future = self._last_future
        if future is not None:
            future.result(timeout=timeout)
        return self.latest

    def close(self) -> None:
        self._unsubscribe()
        self._executor.shutdown(wait=True)

    def _compute(self, generation: int, config: PrintConfig, report: ReportData) -> Optional[LayoutUpdate]:
        page_map = paginate(config, report, height_model=self.height_model)
        update = LayoutUpdate(generation, page_map, config, report)

        # Check and delivery happen under one lock so a newer result is
        # always delivered after an older one
        with self._publish_lock:
            with self._lock:
                if generation != self._generation:
                    logger.debug(f"Discarding superseded layout {generation} (current {self._generation})")
                    return None
                self._latest = update

            if self._on_update is not None:
                try:
                    self._on_update(update)
                except Exception as e:
                    logger.warning(f"Layout listener failed: {e}")
        return update
