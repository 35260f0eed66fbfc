"""
Unit tests for the declarative height model and layout configuration.
"""

import pytest

from print_studio.core.models import Density, SectionContent
from print_studio.layout import (
    DensityProfile,
    EstimateConfig,
    HeightModel,
    LayoutConfig,
    PageProfile,
    SectionProfile,
)


class TestTableEstimates:
    """Tests for table height estimates."""

    def test_when_default_table_then_fixed_and_row_heights_from_profile(self):
        # Arrange
        model = HeightModel()

        # Act
        est = model.estimate("table", EstimateConfig(section_id="equipment"), 40)

        # Assert
        assert est.fixed_height == 50            # title 30 + column header 20
        assert est.per_row_height == 22
        assert est.repeat_header_height == 44    # continued title 24 + column header 20
        assert est.footer_height == 0
        assert est.total(40) == 50 + 40 * 22

    def test_when_section_profile_exists_then_overrides_kind_profile(self):
        # Act
        est = HeightModel().estimate("table", EstimateConfig(section_id="weather"), 7)

        # Assert
        assert est.per_row_height == 27

    @pytest.mark.parametrize("density,row_height", [
        (Density.COMPACT, 21),    # ceil(22 * 0.92)
        (Density.STANDARD, 22),
        (Density.RELAXED, 24),    # ceil(22 * 1.08)
    ])
    def test_when_density_changes_then_rows_scale_rounding_up(self, density, row_height):
        # Act
        est = HeightModel().estimate(
            "table", EstimateConfig(section_id="equipment", density=density), 10
        )

        # Assert
        assert est.per_row_height == row_height

    def test_when_footer_text_then_footer_height_added(self):
        """100 characters wrap to two 14pt lines under a 24pt footer band."""
        # Act
        est = HeightModel().estimate(
            "table", EstimateConfig(section_id="equipment", footer_chars=100), 5
        )

        # Assert
        assert est.footer_height == 24 + 2 * 14

    def test_when_padding_then_added_unscaled(self):
        # Act
        est = HeightModel().estimate(
            "table",
            EstimateConfig(
                section_id="equipment",
                density=Density.RELAXED,
                padding_top=10,
                padding_bottom=6,
            ),
            5,
        )

        # Assert
        assert est.fixed_height == 54 + 10     # ceil(50 * 1.08) + padding
        assert est.footer_height == 6


class TestBlockEstimates:
    """Tests for narrative, photo grid, cover and unknown kinds."""

    def test_when_narrative_then_height_from_wrapped_lines(self):
        # Arrange
        model = HeightModel()
        lines = model.item_count("narrative", "overview", SectionContent(text="a" * 190))

        # Act
        est = model.estimate("narrative", EstimateConfig(section_id="overview"), lines)

        # Assert
        assert lines == 2
        assert est.fixed_height == 30 + 2 * 14
        assert est.per_row_height == 0

    def test_when_narrative_has_two_columns_then_lines_narrower_and_balanced(self):
        # Arrange
        model = HeightModel()

        # Act
        lines = model.item_count(
            "narrative", "overview", SectionContent(text="a" * 190), columns=2
        )
        est = model.estimate(
            "narrative", EstimateConfig(section_id="overview", columns=2), lines
        )

        # Assert
        assert lines == 5                        # ceil(190 / 47)
        assert est.fixed_height == 30 + 3 * 14   # ceil(5 / 2) lines per column

    def test_when_narrative_empty_then_only_title(self):
        # Arrange
        model = HeightModel()

        # Act
        lines = model.item_count("narrative", "overview", SectionContent(text="   "))

        # Assert
        assert lines == 0
        assert model.estimate("narrative", EstimateConfig(), lines).fixed_height == 30

    def test_when_photo_grid_then_rows_of_photos(self):
        # Act
        est = HeightModel().estimate("photo_grid", EstimateConfig(section_id="photos"), 7)

        # Assert
        assert est.fixed_height == 30 + 3 * 170

    def test_when_photo_grid_columns_set_then_fewer_rows(self):
        # Act
        est = HeightModel().estimate(
            "photo_grid", EstimateConfig(section_id="photos", columns=4), 7
        )

        # Assert
        assert est.fixed_height == 30 + 2 * 170

    def test_when_cover_then_zero_height(self):
        # Act
        est = HeightModel().estimate("cover", EstimateConfig(section_id="cover"), 0)

        # Assert
        assert est.fixed_height == 0
        assert est.known

    def test_when_unknown_kind_then_zero_and_not_known(self):
        # Act
        est = HeightModel().estimate("drone_survey", EstimateConfig(section_id="drone"), 12)

        # Assert
        assert est.fixed_height == 0
        assert not est.known
        assert HeightModel().item_count("drone_survey", "drone", SectionContent()) == 0

    def test_when_with_profiles_then_copy_has_override(self):
        # Arrange
        model = HeightModel()

        # Act
        custom = model.with_profiles(equipment=SectionProfile(row_height=40))

        # Assert
        assert custom.estimate("table", EstimateConfig(section_id="equipment"), 1).per_row_height == 40
        assert model.estimate("table", EstimateConfig(section_id="equipment"), 1).per_row_height == 22


class TestLayoutConfig:
    """Tests for LayoutConfig geometry and validation."""

    def test_when_default_then_a4_budgets(self):
        # Arrange
        config = LayoutConfig()

        # Assert
        assert config.content_height(first=False) == 701
        assert config.content_height(first=True) == 737
        assert config.content_width == 535
        assert config.content_top(first=False) == 66
        assert config.content_bottom(first=False) == 767

    def test_when_orphan_guard_zero_then_raises(self):
        with pytest.raises(ValueError, match="orphan_guard"):
            LayoutConfig(orphan_guard=0)

    def test_when_margins_exceed_page_then_raises(self):
        with pytest.raises(ValueError, match="page height"):
            LayoutConfig(page_height=100, first_page=PageProfile(margin_top=80, margin_bottom=80))

    def test_when_density_profile_missing_then_raises(self):
        with pytest.raises(ValueError, match="Missing density"):
            LayoutConfig(densities={Density.STANDARD: DensityProfile()})

    def test_when_scaling_zero_then_zero(self):
        assert DensityProfile(multiplier=1.08).scale(0) == 0
        assert DensityProfile(multiplier=1.0).scale(22) == 22
