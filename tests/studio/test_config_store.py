"""
Unit tests for the Config Store: pure transitions and the listener store.
"""

import pytest

from print_studio.core.models import (
    Density,
    ImagePosition,
    ManualBreak,
    SectionDescriptor,
    SectionSettings,
)
from print_studio.studio import ConfigStore, PrintConfig, default_print_config
from print_studio.studio import store as transitions


def _display_ids(config):
    return [s.id for s in sorted(config.sections, key=lambda s: s.order)]


class TestSectionTransitions:
    """Inclusion and ordering edits."""

    def test_when_toggle_section_then_inclusion_flips(self):
        # Arrange
        config = default_print_config()

        # Act
        updated = transitions.toggle_section(config, "documents")

        # Assert
        assert not config.section("documents").included
        assert updated.section("documents").included

    def test_when_toggle_unknown_section_then_unchanged(self):
        # Arrange
        config = default_print_config()

        # Act / Assert
        assert transitions.toggle_section(config, "nope") is config

    def test_when_reorder_then_orders_renumbered(self):
        # Arrange
        config = default_print_config()

        # Act
        updated = transitions.reorder_sections(config, 1, 3)

        # Assert
        assert _display_ids(updated)[:4] == ["cover", "overview", "weather", "key_personnel"]
        assert sorted(s.order for s in updated.sections) == list(range(len(config.sections)))

    def test_when_reorder_out_of_range_then_raises(self):
        with pytest.raises(IndexError):
            transitions.reorder_sections(default_print_config(), 99, 0)

    def test_when_move_section_before_other_then_placed_immediately_before(self):
        # Act
        updated = transitions.move_section(default_print_config(), "photos", "overview")

        # Assert
        ids = _display_ids(updated)
        assert ids.index("photos") == ids.index("overview") - 1

    def test_when_move_section_to_end_then_last(self):
        # Act
        updated = transitions.move_section(default_print_config(), "cover", None)

        # Assert
        assert _display_ids(updated)[-1] == "cover"

    def test_when_move_unknown_section_then_raises(self):
        with pytest.raises(KeyError):
            transitions.move_section(default_print_config(), "nope", None)

    def test_when_reset_sections_then_default_order_restored(self):
        # Arrange
        config = transitions.move_section(default_print_config(), "photos", "cover")

        # Act
        updated = transitions.reset_sections(config)

        # Assert
        assert updated.sections == default_print_config().sections


class TestBreakTransitions:
    """Manual breaks and interactive row breaks."""

    def test_when_manual_break_set_twice_then_single_entry(self):
        # Arrange
        config = transitions.set_manual_break(default_print_config(), "equipment", 9)

        # Act
        again = transitions.set_manual_break(config, "equipment", 9)

        # Assert
        assert again is config
        assert config.manual_breaks == (ManualBreak("equipment", 9),)

    def test_when_breaks_added_out_of_order_then_sorted(self):
        # Arrange
        config = default_print_config()

        # Act
        config = transitions.set_manual_break(config, "equipment", 20)
        config = transitions.set_manual_break(config, "equipment", 5)

        # Assert
        assert config.breaks_for("equipment") == (5, 20)

    def test_when_row_break_toggled_twice_then_removed(self):
        # Arrange
        config = default_print_config()

        # Act
        on = transitions.toggle_row_break(config, "materials", 3)
        off = transitions.toggle_row_break(on, "materials", 3)

        # Assert
        assert on.breaks_for("materials") == (3,)
        assert off.row_breaks == ()

    def test_when_manual_and_row_break_then_union_deduplicated(self):
        # Arrange
        config = transitions.set_manual_break(default_print_config(), "equipment", 4)
        config = transitions.toggle_row_break(config, "equipment", 4)
        config = transitions.toggle_row_break(config, "equipment", 11)

        # Act / Assert
        assert config.breaks_for("equipment") == (4, 11)

    def test_when_breaks_cleared_then_both_kinds_removed_for_section_only(self):
        # Arrange
        config = transitions.set_manual_break(default_print_config(), "equipment", 4)
        config = transitions.toggle_row_break(config, "equipment", 8)
        config = transitions.set_manual_break(config, "materials", 2)

        # Act
        cleared = transitions.clear_manual_breaks(config, "equipment")

        # Assert
        assert cleared.breaks_for("equipment") == ()
        assert cleared.breaks_for("materials") == (2,)

    def test_when_negative_break_then_raises(self):
        with pytest.raises(ValueError):
            transitions.set_manual_break(default_print_config(), "equipment", -1)


class TestSettingsAndPhotos:
    """Density, per-section settings and photo selections."""

    def test_when_section_density_set_then_overrides_global(self):
        # Act
        config = transitions.set_density(default_print_config(), Density.COMPACT, "safety")

        # Assert
        assert config.density is Density.STANDARD
        assert config.density_for("safety") is Density.COMPACT
        assert config.density_for("weather") is Density.STANDARD

    def test_when_global_density_set_then_applies_to_all(self):
        # Act
        config = transitions.set_density(default_print_config(), "relaxed")

        # Assert
        assert config.density_for("weather") is Density.RELAXED

    def test_when_settings_out_of_range_then_clamped(self):
        # Act
        settings = SectionSettings(padding_top=500, padding_bottom=-3, columns=12)

        # Assert
        assert settings.padding_top == 120
        assert settings.padding_bottom == 0
        assert settings.columns == 6

    def test_when_strip_photos_set_then_unique_and_capped_at_three(self):
        # Act
        config = transitions.set_strip_photos(default_print_config(), [4, 4, 1, 2, 7])

        # Assert
        assert config.strip_photo_indexes == (4, 1, 2)

    def test_when_photo_selection_set_then_grid_filtered_to_existing_photos(self):
        # Act
        config = transitions.set_photo_selection(default_print_config(), [3, 0, 9])

        # Assert
        assert config.grid_photo_indexes(5) == (3, 0)
        assert transitions.set_photo_selection(config, None).grid_photo_indexes(2) == (0, 1)

    def test_when_photo_position_set_then_clamped(self):
        # Act
        config = transitions.set_photo_position(default_print_config(), 2, 150, -10, 5)

        # Assert
        assert config.photo_positions[2] == ImagePosition(100.0, 0.0, 3.0)

    def test_when_hero_cleared_then_no_hero(self):
        # Act
        config = transitions.set_hero_photo(default_print_config(), None)

        # Assert
        assert config.hero_photo_index is None


class TestPrintConfig:
    """Snapshot queries."""

    def test_when_duplicate_section_ids_then_raises(self):
        with pytest.raises(ValueError, match="Duplicate"):
            PrintConfig(sections=(
                SectionDescriptor("weather", "table"),
                SectionDescriptor("weather", "table"),
            ))

    def test_when_orders_tie_then_list_position_breaks_tie(self):
        # Arrange
        config = PrintConfig(sections=(
            SectionDescriptor("b", "table", order=1),
            SectionDescriptor("a", "table", order=1),
            SectionDescriptor("c", "table", order=0),
        ))

        # Act / Assert
        assert [s.id for s in config.ordered_sections()] == ["c", "b", "a"]

    def test_when_cover_disabled_then_has_no_cover(self):
        # Act
        config = transitions.toggle_section(default_print_config(), "cover")

        # Assert
        assert not config.has_cover
        assert default_print_config().has_cover

    def test_when_label_empty_then_title_from_id(self):
        assert SectionDescriptor("key_personnel", "table").title == "Key Personnel"
        assert SectionDescriptor("x", "mystery").known_kind is None


class TestConfigStore:
    """Listener notification."""

    def test_when_edit_applied_then_listeners_notified_with_new_snapshot(self):
        # Arrange
        store = ConfigStore()
        seen = []
        store.subscribe(seen.append)

        # Act
        updated = store.toggle_section("weather")

        # Assert
        assert seen == [updated]
        assert store.config is updated

    def test_when_edit_is_noop_then_no_notification(self):
        # Arrange
        store = ConfigStore()
        seen = []
        store.subscribe(seen.append)

        # Act
        store.set_density(Density.STANDARD)

        # Assert
        assert seen == []

    def test_when_listener_fails_then_edit_kept_and_others_notified(self):
        # Arrange
        store = ConfigStore()
        seen = []

        def broken(_config):
            raise RuntimeError("listener exploded")

        store.subscribe(broken)
        store.subscribe(seen.append)

        # Act
        store.set_manual_break("equipment", 3)

        # Assert
        assert store.config.breaks_for("equipment") == (3,)
        assert len(seen) == 1

    def test_when_unsubscribed_then_not_notified(self):
        # Arrange
        store = ConfigStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        # Act
        unsubscribe()
        store.toggle_section("weather")

        # Assert
        assert seen == []
