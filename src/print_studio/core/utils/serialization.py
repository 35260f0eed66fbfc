"""
Serialization Utilities

Provides to/from JSON utilities for the print configuration and the
report record.

Print configuration records are flat, versioned objects keyed by
``project_id`` and ``report_period``. Loading never fails report
loading: a missing or malformed record yields the documented defaults,
and sections missing from an older record are merged in from the
default section list.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models import (
    Density,
    ImagePosition,
    ManualBreak,
    ReportData,
    SectionDescriptor,
    SectionSettings,
)
from ..schemas.validator import (
    PRINT_CONFIG_SCHEMA_VERSION,
    ValidationError,
    validate_print_config,
)

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Print Config Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_print_config(config, project_id: str, report_period: str) -> dict[str, Any]:
    """
    Serialize a PrintConfig to a flat, versioned dictionary.

    Args:
        config: PrintConfig snapshot
        project_id: Project key
        report_period: Report period key

    Returns:
        Dictionary suitable for JSON serialization (passes validation)
    """
    return {
        "schema_version": PRINT_CONFIG_SCHEMA_VERSION,
        "project_id": project_id,
        "report_period": report_period,
        "density": config.density.value,
        "sections": [s.to_dict() for s in config.sections],
        "section_settings": {
            sid: settings.to_dict() for sid, settings in config.section_settings.items()
        },
        "manual_breaks": [b.to_dict() for b in config.manual_breaks],
        "row_breaks": [b.to_dict() for b in config.row_breaks],
        "photo_selection": (
            list(config.photo_selection) if config.photo_selection is not None else None
        ),
        "photo_positions": _positions_to_dict(config.photo_positions),
        "hero_photo_index": config.hero_photo_index,
        "hero_photo_position": config.hero_photo_position.to_dict(),
        "strip_photo_indexes": list(config.strip_photo_indexes),
        "strip_photo_positions": _positions_to_dict(config.strip_photo_positions),
        "show_cover_photos": config.show_cover_photos,
        "show_page_numbers": config.show_page_numbers,
        "show_footer": config.show_footer,
    }


def deserialize_print_config(data: dict[str, Any], *, validate: bool = True):
    """
    Deserialize a PrintConfig from a dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to validate before deserializing

    Returns:
        PrintConfig instance

    Raises:
        ValidationError: If validate=True and data is invalid
    """
    from print_studio.studio.defaults import DEFAULT_SECTIONS
    from print_studio.studio.print_config import PrintConfig

    data = _migrate(dict(data))
    if validate:
        validate_print_config(data)

    sections = _merge_with_defaults(data.get("sections", []), DEFAULT_SECTIONS)
    selection = data.get("photo_selection")
    defaults = PrintConfig()

    return PrintConfig(
        sections=tuple(sections),
        density=Density(data.get("density", Density.STANDARD.value)),
        section_settings={
            str(sid): SectionSettings.from_dict(entry)
            for sid, entry in data.get("section_settings", {}).items()
        },
        manual_breaks=tuple(sorted(set(
            ManualBreak.from_dict(b) for b in data.get("manual_breaks", [])
        ))),
        row_breaks=tuple(sorted(set(
            ManualBreak.from_dict(b) for b in data.get("row_breaks", [])
        ))),
        photo_selection=tuple(selection) if selection is not None else None,
        photo_positions=_positions_from_dict(data.get("photo_positions", {})),
        hero_photo_index=data.get("hero_photo_index", defaults.hero_photo_index),
        hero_photo_position=ImagePosition.from_dict(data.get("hero_photo_position", {})),
        strip_photo_indexes=tuple(
            data.get("strip_photo_indexes", defaults.strip_photo_indexes)
        )[:3],
        strip_photo_positions=_positions_from_dict(data.get("strip_photo_positions", {})),
        show_cover_photos=data.get("show_cover_photos", True),
        show_page_numbers=data.get("show_page_numbers", True),
        show_footer=data.get("show_footer", True),
    )


def load_print_config_or_default(data: Optional[dict[str, Any]]):
    """
    Deserialize a stored record, falling back to defaults.

    A missing record (None) or a record that fails validation yields
    ``default_print_config()``; the failure is logged, never raised.
    """
    from print_studio.studio.print_config import default_print_config

    if data is None:
        return default_print_config()
    try:
        return deserialize_print_config(data)
    except (ValidationError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Malformed print config record, using defaults: {e}")
        return default_print_config()


def _migrate(data: Dict[str, Any]) -> Dict[str, Any]:
    """Upgrade older records to the current schema version."""
    version = data.get("schema_version")
    if version == 1:
        # v1 stored the spacing preset (name or {"name": ...}) instead of density
        spacing = data.pop("spacing", Density.STANDARD.value)
        if isinstance(spacing, dict):
            spacing = spacing.get("name", Density.STANDARD.value)
        data.setdefault("density", spacing)
        data.setdefault("section_settings", {})
        data.setdefault("row_breaks", [])
        data["schema_version"] = PRINT_CONFIG_SCHEMA_VERSION
        logger.debug("Migrated print config record from schema version 1")
    return data


def _merge_with_defaults(
    saved: List[Dict[str, Any]],
    defaults,
) -> List[SectionDescriptor]:
    """
    Saved sections first, then any default sections the record lacks.

    Saved entries without a kind or label take the default section's;
    new default sections are ordered after the saved ones.
    """
    by_id = {d.id: d for d in defaults}
    merged: List[SectionDescriptor] = []
    for raw in saved:
        entry = dict(raw)
        default = by_id.get(entry["id"])
        if default is not None:
            entry.setdefault("kind", default.kind)
            if not entry.get("label"):
                entry["label"] = default.label
        merged.append(SectionDescriptor.from_dict(entry))

    seen = {s.id for s in merged}
    next_order = max((s.order for s in merged), default=-1) + 1
    for default in defaults:
        if default.id not in seen:
            merged.append(SectionDescriptor(
                id=default.id,
                kind=default.kind,
                label=default.label,
                included=default.included,
                order=next_order,
            ))
            next_order += 1
    return merged


def _positions_to_dict(positions) -> Dict[str, Dict[str, float]]:
    return {str(i): p.to_dict() for i, p in sorted(positions.items())}


def _positions_from_dict(data: Dict[str, Any]) -> Dict[int, ImagePosition]:
    return {int(i): ImagePosition.from_dict(p) for i, p in data.items()}


# ─────────────────────────────────────────────────────────────────────────────
# Report Data
# ─────────────────────────────────────────────────────────────────────────────

def load_report_json(path: Path) -> ReportData:
    """
    Load a report record from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValidationError: If the record cannot be parsed
    """
    if not path.exists():
        raise FileNotFoundError(f"Report file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return ReportData.from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise ValidationError(
            f"Error parsing report: {e}",
            path=str(path),
            errors=[str(e)]
        )


def save_report_json(report: ReportData, path: Path) -> None:
    """Save a report record to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
