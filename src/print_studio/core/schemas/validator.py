"""
Schema Validation Utilities

Validates persisted print-configuration records before deserialization.

Records are flat JSON objects keyed by ``project_id`` and
``report_period``. Validation is structural: required keys, value types
and enum membership. Anything that passes can be handed to
``core.utils.serialization.deserialize_print_config`` without raising.
"""

from __future__ import annotations

from typing import Any

from print_studio.core.models import Density

# Schema version constants
PRINT_CONFIG_SCHEMA_VERSION = 2  # v2 adds per-section settings and row breaks
SUPPORTED_SCHEMA_VERSIONS = (1, 2)


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_print_config(data: Any) -> None:
    """
    Validate a persisted print configuration record.

    Args:
        data: Decoded JSON record

    Raises:
        ValidationError: If the record is malformed
    """
    if not isinstance(data, dict):
        raise ValidationError(
            f"Print config record must be an object, got {type(data).__name__}"
        )

    required = ["schema_version", "project_id", "report_period"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing]
        )

    version = data.get("schema_version")
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ValidationError(
            f"Unsupported print config schema version: {version} "
            f"(expected one of {list(SUPPORTED_SCHEMA_VERSIONS)})",
            path="schema_version"
        )

    for key in ("project_id", "report_period"):
        if not isinstance(data[key], str) or not data[key]:
            raise ValidationError(f"{key} must be a non-empty string", path=key)

    density = data.get("density", Density.STANDARD.value)
    if density not in {d.value for d in Density}:
        raise ValidationError(f"Invalid density: {density!r}", path="density")

    sections = data.get("sections", [])
    if not isinstance(sections, list):
        raise ValidationError("sections must be a list", path="sections")
    seen = set()
    for i, section in enumerate(sections):
        _validate_section(section, f"sections[{i}]")
        if section["id"] in seen:
            raise ValidationError(
                f"Duplicate section id: {section['id']!r}", path=f"sections[{i}].id"
            )
        seen.add(section["id"])

    settings = data.get("section_settings", {})
    if not isinstance(settings, dict):
        raise ValidationError("section_settings must be an object", path="section_settings")
    for section_id, entry in settings.items():
        _validate_settings(entry, f"section_settings.{section_id}")

    for key in ("manual_breaks", "row_breaks"):
        breaks = data.get(key, [])
        if not isinstance(breaks, list):
            raise ValidationError(f"{key} must be a list", path=key)
        for i, entry in enumerate(breaks):
            _validate_break(entry, f"{key}[{i}]")

    selection = data.get("photo_selection")
    if selection is not None:
        _validate_index_list(selection, "photo_selection")
    _validate_index_list(data.get("strip_photo_indexes", []), "strip_photo_indexes")

    hero = data.get("hero_photo_index")
    if hero is not None and not _is_index(hero):
        raise ValidationError(f"Invalid hero_photo_index: {hero!r}", path="hero_photo_index")

    for key in ("photo_positions", "strip_photo_positions"):
        positions = data.get(key, {})
        if not isinstance(positions, dict):
            raise ValidationError(f"{key} must be an object", path=key)
        for index, position in positions.items():
            if not str(index).isdigit():
                raise ValidationError(f"Invalid photo index: {index!r}", path=f"{key}.{index}")
            _validate_position(position, f"{key}.{index}")
    if "hero_photo_position" in data:
        _validate_position(data["hero_photo_position"], "hero_photo_position")

    for key in ("show_cover_photos", "show_page_numbers", "show_footer"):
        if key in data and not isinstance(data[key], bool):
            raise ValidationError(f"{key} must be a boolean", path=key)


def _validate_section(data: Any, path: str) -> None:
    if not isinstance(data, dict):
        raise ValidationError("section must be an object", path=path)
    if not isinstance(data.get("id"), str) or not data["id"]:
        raise ValidationError("section id must be a non-empty string", path=f"{path}.id")
    if "kind" in data and not isinstance(data["kind"], str):
        raise ValidationError("section kind must be a string", path=f"{path}.kind")
    if "included" in data and not isinstance(data["included"], bool):
        raise ValidationError("included must be a boolean", path=f"{path}.included")
    order = data.get("order", 0)
    if not isinstance(order, int) or isinstance(order, bool):
        raise ValidationError(f"Invalid order: {order!r}", path=f"{path}.order")


def _validate_settings(data: Any, path: str) -> None:
    if not isinstance(data, dict):
        raise ValidationError("section settings must be an object", path=path)
    density = data.get("density")
    if density is not None and density not in {d.value for d in Density}:
        raise ValidationError(f"Invalid density: {density!r}", path=f"{path}.density")
    for key in ("padding_top", "padding_bottom"):
        value = data.get(key, 0)
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ValidationError(f"{key} must be a number", path=f"{path}.{key}")
    columns = data.get("columns")
    if columns is not None and (not isinstance(columns, int) or isinstance(columns, bool)):
        raise ValidationError("columns must be an integer", path=f"{path}.columns")


def _validate_break(data: Any, path: str) -> None:
    if not isinstance(data, dict) or "section_id" not in data or "after_row_index" not in data:
        raise ValidationError("break must have section_id and after_row_index", path=path)
    if not _is_index(data["after_row_index"]):
        raise ValidationError(
            f"Invalid after_row_index: {data['after_row_index']!r} (must be non-negative integer)",
            path=f"{path}.after_row_index"
        )


def _validate_index_list(data: Any, path: str) -> None:
    if not isinstance(data, list) or not all(_is_index(i) for i in data):
        raise ValidationError(f"{path} must be a list of non-negative integers", path=path)


def _validate_position(data: Any, path: str) -> None:
    if not isinstance(data, dict):
        raise ValidationError("position must be an object", path=path)
    for key in ("x", "y", "zoom"):
        value = data.get(key, 0)
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ValidationError(f"{key} must be a number", path=f"{path}.{key}")


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
