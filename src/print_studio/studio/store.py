"""
Module: studio.store

Purpose:
    Config Store: holds the current PrintConfig and applies edits as pure
    state transitions. No edit triggers packing; packing is always a
    downstream, on-demand computation over a snapshot.

Key Functions:
    - toggle_section(), reorder_sections(), move_section(), reset_sections()
    - set_density(), set_section_settings()
    - set_manual_break(), clear_manual_breaks(), toggle_row_break()
    - set_photo_selection(), set_photo_position(), set_hero_photo(),
      set_strip_photos()

Key Classes:
    - ConfigStore: Current snapshot plus change listeners

Dependencies:
    - dataclasses (std)

Used By:
    - controller.LayoutSession: Snapshot source for packing
    - persistence.autosave.AutoSaver: Subscribes to changes
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from print_studio.core.models import Density, ImagePosition, ManualBreak, SectionSettings

from .defaults import DEFAULT_SECTIONS, MAX_STRIP_PHOTOS
from .print_config import PrintConfig, default_print_config

logger = logging.getLogger(__name__)

ConfigListener = Callable[[PrintConfig], None]


# ─────────────────────────────────────────────────────────────────────────────
# Pure transitions: PrintConfig -> PrintConfig
# ─────────────────────────────────────────────────────────────────────────────

def toggle_section(config: PrintConfig, section_id: str) -> PrintConfig:
    """Flip inclusion of a section. Unknown ids leave the config unchanged."""
    if config.section(section_id) is None:
        logger.warning(f"toggle_section: unknown section {section_id!r}")
        return config
    sections = tuple(
        replace(s, included=not s.included) if s.id == section_id else s
        for s in config.sections
    )
    return replace(config, sections=sections)


def reorder_sections(config: PrintConfig, from_index: int, to_index: int) -> PrintConfig:
    """
    Move the section at from_index to to_index and renumber orders.

    Indexes refer to the current display order (sorted by ``order``).
    Disabled sections keep their slot in the list; packing skips them.
    """
    ordered = _display_order(config)
    if not (0 <= from_index < len(ordered)):
        raise IndexError(f"from_index out of range: {from_index}")
    to_index = max(0, min(to_index, len(ordered) - 1))

    moved = ordered.pop(from_index)
    ordered.insert(to_index, moved)
    return replace(config, sections=tuple(replace(s, order=i) for i, s in enumerate(ordered)))


def move_section(config: PrintConfig, section_id: str, before_id: Optional[str]) -> PrintConfig:
    """
    Move a section so it sits immediately before ``before_id``.

    ``before_id=None`` moves the section to the end. This is the shape of
    a drag-and-drop result coming back from the interactive preview.
    """
    ordered = _display_order(config)
    ids = [s.id for s in ordered]
    if section_id not in ids:
        raise KeyError(f"Unknown section: {section_id}")
    if before_id is not None and before_id not in ids:
        raise KeyError(f"Unknown section: {before_id}")
    if before_id == section_id:
        return config

    from_index = ids.index(section_id)
    moved = ordered.pop(from_index)
    if before_id is None:
        ordered.append(moved)
    else:
        ordered.insert([s.id for s in ordered].index(before_id), moved)
    return replace(config, sections=tuple(replace(s, order=i) for i, s in enumerate(ordered)))


def reset_sections(config: PrintConfig) -> PrintConfig:
    """Restore the default section list and order."""
    return replace(config, sections=DEFAULT_SECTIONS)


def set_density(
    config: PrintConfig,
    density: Density,
    section_id: Optional[str] = None,
) -> PrintConfig:
    """Set the global density, or a per-section override when section_id is given."""
    density = Density(density)
    if section_id is None:
        return replace(config, density=density)
    settings = replace(config.settings_for(section_id), density=density)
    return set_section_settings(config, section_id, settings)


def set_section_settings(config: PrintConfig, section_id: str, settings: SectionSettings) -> PrintConfig:
    merged = dict(config.section_settings)
    merged[section_id] = settings
    return replace(config, section_settings=merged)


def set_manual_break(config: PrintConfig, section_id: str, after_row_index: int) -> PrintConfig:
    """Force a page break after a row. Setting an existing break is a no-op."""
    brk = ManualBreak(section_id, after_row_index)
    if brk in config.manual_breaks:
        return config
    return replace(config, manual_breaks=tuple(sorted(config.manual_breaks + (brk,))))


def clear_manual_breaks(config: PrintConfig, section_id: str) -> PrintConfig:
    """Remove every manual and row break belonging to a section."""
    return replace(
        config,
        manual_breaks=tuple(b for b in config.manual_breaks if b.section_id != section_id),
        row_breaks=tuple(b for b in config.row_breaks if b.section_id != section_id),
    )


def toggle_row_break(config: PrintConfig, section_id: str, row_index: int) -> PrintConfig:
    """Flip the interactive break toggle after a row."""
    brk = ManualBreak(section_id, row_index)
    if brk in config.row_breaks:
        remaining = tuple(b for b in config.row_breaks if b != brk)
    else:
        remaining = tuple(sorted(config.row_breaks + (brk,)))
    return replace(config, row_breaks=remaining)


def set_photo_selection(config: PrintConfig, indexes: Optional[Sequence[int]]) -> PrintConfig:
    """Choose photos for the photo grid (None restores "all photos")."""
    if indexes is None:
        return replace(config, photo_selection=None)
    return replace(config, photo_selection=_unique(indexes))


def set_photo_position(
    config: PrintConfig,
    index: int,
    x: float,
    y: float,
    zoom: float = 1.0,
) -> PrintConfig:
    positions = dict(config.photo_positions)
    positions[index] = ImagePosition(x, y, zoom)
    return replace(config, photo_positions=positions)


def set_hero_photo(
    config: PrintConfig,
    index: Optional[int],
    position: Optional[ImagePosition] = None,
) -> PrintConfig:
    return replace(
        config,
        hero_photo_index=index,
        hero_photo_position=position if position is not None else config.hero_photo_position,
    )


def set_strip_photos(config: PrintConfig, indexes: Sequence[int]) -> PrintConfig:
    """Choose cover strip photos (at most three are kept)."""
    return replace(config, strip_photo_indexes=_unique(indexes)[:MAX_STRIP_PHOTOS])


def set_strip_photo_position(config: PrintConfig, index: int, x: float, y: float) -> PrintConfig:
    positions = dict(config.strip_photo_positions)
    positions[index] = ImagePosition(x, y)
    return replace(config, strip_photo_positions=positions)


def _display_order(config: PrintConfig) -> List:
    indexed = sorted(enumerate(config.sections), key=lambda t: (t[1].order, t[0]))
    return [s for _, s in indexed]


def _unique(indexes: Sequence[int]) -> tuple:
    seen = []
    for i in indexes:
        if i not in seen:
            seen.append(int(i))
    return tuple(seen)


# ─────────────────────────────────────────────────────────────────────────────
# Store
# ─────────────────────────────────────────────────────────────────────────────

class ConfigStore:
    """
    Holds the current PrintConfig and notifies listeners on change.

    The in-memory snapshot is updated immediately (optimistic); listeners
    such as the auto-saver decide when to persist. Listener errors are
    logged and never roll back an edit.

    Example:
        >>> store = ConfigStore()
        >>> store.toggle_section("documents")
        >>> store.config.section("documents").included
        True
    """

    def __init__(self, config: Optional[PrintConfig] = None) -> None:
        self._config = config if config is not None else default_print_config()
        self._listeners: List[ConfigListener] = []

    @property
    def config(self) -> PrintConfig:
        return self._config

    def subscribe(self, listener: ConfigListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def apply(self, transition: Callable[..., PrintConfig], *args, **kwargs) -> PrintConfig:
        """Apply a pure transition to the current snapshot."""
        updated = transition(self._config, *args, **kwargs)
        if updated == self._config:
            return self._config
        self._config = updated
        for listener in list(self._listeners):
            try:
                listener(updated)
            except Exception as e:
                logger.warning(f"Config listener failed: {e}")
        return updated

    def replace_config(self, config: PrintConfig) -> PrintConfig:
        return self.apply(lambda _current: config)

    # Convenience wrappers

    def toggle_section(self, section_id: str) -> PrintConfig:
        return self.apply(toggle_section, section_id)

    def reorder_sections(self, from_index: int, to_index: int) -> PrintConfig:
        return self.apply(reorder_sections, from_index, to_index)

    def move_section(self, section_id: str, before_id: Optional[str]) -> PrintConfig:
        return self.apply(move_section, section_id, before_id)

    def reset_sections(self) -> PrintConfig:
        return self.apply(reset_sections)

    def set_density(self, density: Density, section_id: Optional[str] = None) -> PrintConfig:
        return self.apply(set_density, density, section_id)

    def set_section_settings(self, section_id: str, settings: SectionSettings) -> PrintConfig:
        return self.apply(set_section_settings, section_id, settings)

    def set_manual_break(self, section_id: str, after_row_index: int) -> PrintConfig:
        return self.apply(set_manual_break, section_id, after_row_index)

    def clear_manual_breaks(self, section_id: str) -> PrintConfig:
        return self.apply(clear_manual_breaks, section_id)

    def toggle_row_break(self, section_id: str, row_index: int) -> PrintConfig:
        return self.apply(toggle_row_break, section_id, row_index)

    def set_photo_selection(self, indexes: Optional[Sequence[int]]) -> PrintConfig:
        return self.apply(set_photo_selection, indexes)

    def set_photo_position(self, index: int, x: float, y: float, zoom: float = 1.0) -> PrintConfig:
        return self.apply(set_photo_position, index, x, y, zoom)

    def set_hero_photo(self, index: Optional[int], position: Optional[ImagePosition] = None) -> PrintConfig:
        return self.apply(set_hero_photo, index, position)

    def set_strip_photos(self, indexes: Sequence[int]) -> PrintConfig:
        return self.apply(set_strip_photos, indexes)

    def set_strip_photo_position(self, index: int, x: float, y: float) -> PrintConfig:
        return self.apply(set_strip_photo_position, index, x, y)
