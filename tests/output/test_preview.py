"""
Tests for the interactive HTML preview renderer and the shared page walk.
"""

import pytest

from print_studio.layout import paginate
from print_studio.output import (
    CONTINUED_SUFFIX,
    SelectionContext,
    render_preview,
    walk_page_map,
)
from print_studio.studio.store import set_photo_selection


@pytest.fixture
def split_layout(make_config, make_report, flat_table_model):
    """Cover, then a short weather table and a 40-row equipment table split over two pages."""
    config = make_config(("cover", "cover"), ("weather", "table"), ("equipment", "table"))
    report = make_report(rows={"weather": 3, "equipment": 40}, photos=2)
    page_map = paginate(config, report, height_model=flat_table_model)
    return config, report, page_map


class TestRenderPreview:
    """Tests for render_preview()."""

    def test_when_rendered_then_one_page_element_per_page(self, split_layout, flat_table_model):
        # Arrange
        config, report, page_map = split_layout

        # Act
        doc = render_preview(page_map, config, report, height_model=flat_table_model)

        # Assert
        assert doc.total_pages == page_map.total_pages
        assert doc.html.count('<section class="page"') == page_map.total_pages
        assert f'data-total-pages="{page_map.total_pages}"' in doc.html

    def test_when_rendered_then_placements_match_page_map(self, split_layout, flat_table_model):
        # Arrange
        config, report, page_map = split_layout

        # Act
        doc = render_preview(page_map, config, report, height_model=flat_table_model)

        # Assert
        for page, preview_page in zip(page_map.pages, doc.pages):
            assert preview_page.placement_ids == tuple(p.placement_id for p in page.sections)
        assert 'data-placement-id="equipment#1"' in doc.html
        assert 'data-section-id="equipment"' in doc.html

    def test_when_rendered_then_rows_tagged_with_absolute_index(self, split_layout, flat_table_model):
        # Arrange
        config, report, page_map = split_layout

        # Act
        doc = render_preview(page_map, config, report, height_model=flat_table_model)

        # Assert
        equipment_rows = [
            f'data-row-index="{i}"' for i in range(40)
        ]
        assert all(tag in doc.html for tag in equipment_rows)
        assert "equipment item 39" in doc.pages[-1].text
        assert "equipment item 0" not in doc.pages[-1].text

    def test_when_fragment_continues_then_title_marked_continued(
        self, split_layout, flat_table_model
    ):
        # Arrange
        config, report, page_map = split_layout

        # Act
        doc = render_preview(page_map, config, report, height_model=flat_table_model)

        # Assert
        last_page = doc.pages[-1]
        assert last_page.headers[0] == "Equipment" + CONTINUED_SUFFIX
        assert "Equipment" in doc.pages[1].headers
        assert 'class="placement kind-table continued"' in doc.html

    def test_when_placement_selected_then_only_that_fragment_marked(
        self, split_layout, flat_table_model
    ):
        # Arrange
        config, report, page_map = split_layout

        # Act
        doc = render_preview(
            page_map, config, report,
            height_model=flat_table_model,
            selection=SelectionContext(placement_id="equipment#1"),
        )

        # Assert
        assert doc.html.count(" selected\"") == 1
        assert 'class="placement kind-table continued selected" data-placement-id="equipment#1"' in doc.html

    def test_when_section_selected_then_every_fragment_marked(self, split_layout, flat_table_model):
        # Arrange
        config, report, page_map = split_layout

        # Act
        doc = render_preview(
            page_map, config, report,
            height_model=flat_table_model,
            selection=SelectionContext(section_id="equipment"),
        )

        # Assert
        assert doc.html.count(" selected\"") == 2

    def test_when_cover_then_cover_page_summary(self, split_layout, flat_table_model):
        # Arrange
        config, report, page_map = split_layout

        # Act
        doc = render_preview(page_map, config, report, height_model=flat_table_model)

        # Assert
        cover = doc.pages[0]
        assert cover.is_cover
        assert cover.placement_ids == ()
        assert report.project_name in cover.text
        assert cover.image_count == 2     # hero (photo 0) and one strip photo (photo 1)
        assert 'class="hero-photo"' in doc.html

    def test_when_footer_enabled_then_page_numbers_rendered(self, split_layout, flat_table_model):
        # Arrange
        config, report, page_map = split_layout

        # Act
        doc = render_preview(page_map, config, report, height_model=flat_table_model)

        # Assert
        assert "Page 2 of 3" in doc.html
        assert "Page 3 of 3" in doc.html
        assert 'class="running-header"' in doc.html

    def test_when_page_numbers_hidden_then_not_rendered(
        self, make_config, make_report, flat_table_model
    ):
        # Arrange
        config = make_config(("equipment", "table"), show_page_numbers=False)
        report = make_report(rows={"equipment": 3})
        page_map = paginate(config, report, height_model=flat_table_model)

        # Act
        doc = render_preview(page_map, config, report, height_model=flat_table_model)

        # Assert
        assert "Page 1 of 1" not in doc.html
        assert 'class="page-footer"' in doc.html

    def test_when_table_empty_then_no_data_row(self, make_config, make_report, flat_table_model):
        # Arrange
        config = make_config(("equipment", "table"))
        report = make_report(rows={"equipment": 0})
        page_map = paginate(config, report, height_model=flat_table_model)

        # Act
        doc = render_preview(page_map, config, report, height_model=flat_table_model)

        # Assert
        assert '<tr class="empty">' in doc.html
        assert "No data" in doc.pages[0].text

    def test_when_text_has_markup_then_escaped(self, make_config, make_report, flat_table_model):
        # Arrange
        config = make_config(("overview", "narrative"))
        report = make_report(text={"overview": "Crane <b>A</b> & hoist"})
        page_map = paginate(config, report, height_model=flat_table_model)

        # Act
        doc = render_preview(page_map, config, report, height_model=flat_table_model)

        # Assert
        assert "Crane &lt;b&gt;A&lt;/b&gt; &amp; hoist" in doc.html

    def test_when_rendered_twice_then_identical(self, split_layout, flat_table_model):
        """The renderer holds no state between calls."""
        # Arrange
        config, report, page_map = split_layout

        # Act / Assert
        assert (
            render_preview(page_map, config, report, height_model=flat_table_model)
            == render_preview(page_map, config, report, height_model=flat_table_model)
        )


class TestWalkPageMap:
    """Tests for the page walk shared by both renderers."""

    def test_when_sections_share_page_then_tops_include_gap(self, split_layout, flat_table_model):
        # Arrange
        config, report, page_map = split_layout

        # Act
        pages = walk_page_map(page_map, config, report, flat_table_model)

        # Assert
        weather, equipment = pages[1].blocks
        assert weather.top == 0
        assert equipment.top == weather.height + 24

    def test_when_walked_then_uses_first_profile_only_without_cover(
        self, make_config, make_report, flat_table_model
    ):
        # Arrange
        config = make_config(("equipment", "table"))
        report = make_report(rows={"equipment": 40})
        page_map = paginate(config, report, height_model=flat_table_model)

        # Act
        pages = walk_page_map(page_map, config, report, flat_table_model)

        # Assert
        assert pages[0].uses_first_profile
        assert not pages[1].uses_first_profile
        assert all(p.total_pages == 2 for p in pages)

    def test_when_table_fragment_then_rows_sliced_from_range(self, split_layout, flat_table_model):
        # Arrange
        config, report, page_map = split_layout

        # Act
        pages = walk_page_map(page_map, config, report, flat_table_model)

        # Assert
        block = pages[2].blocks[0]
        data_range = block.placement.data_range
        assert data_range.end == 40
        assert block.rows == report.content_for("equipment").rows[data_range.start:40]
        assert block.show_column_header

    def test_when_photo_selection_then_grid_shows_selected_photos(
        self, make_config, make_report, flat_table_model
    ):
        # Arrange
        config = set_photo_selection(make_config(("photos", "photo_grid")), [2, 0])
        report = make_report(photos=4)
        page_map = paginate(config, report, height_model=flat_table_model)

        # Act
        pages = walk_page_map(page_map, config, report, flat_table_model)

        # Assert
        assert [p.index for p in pages[0].blocks[0].photos] == [2, 0]

    def test_when_unknown_kind_then_empty_block(self, make_config, make_report, flat_table_model):
        # Arrange
        config = make_config(("drone_survey", "drone_survey"))
        report = make_report()
        page_map = paginate(config, report, height_model=flat_table_model)

        # Act
        pages = walk_page_map(page_map, config, report, flat_table_model)

        # Assert
        block = pages[0].blocks[0]
        assert block.kind is None
        assert block.height == 0
