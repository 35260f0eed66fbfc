"""
Tests for the PDF document renderer and image assets.

Exported documents are read back with pypdf.
"""

import threading

import pytest
from PIL import Image
from pypdf import PdfReader

from print_studio.core.models import ImagePosition, Photo, ReportData
from print_studio.layout import HeightModel, paginate
from print_studio.output import ExportCancelled, ExportError, render_preview, render_to_pdf
from print_studio.output.assets import ImageLoader, crop_to_frame, placeholder_image
from print_studio.studio import default_print_config


@pytest.fixture
def equipment_export(make_config, make_report, flat_table_model):
    config = make_config(("cover", "cover"), ("equipment", "table"))
    report = make_report(rows={"equipment": 40})
    page_map = paginate(config, report, height_model=flat_table_model)
    return config, report, page_map


class TestRenderToPdf:
    """Tests for render_to_pdf()."""

    def test_when_exported_then_page_count_matches_page_map(
        self, tmp_path, equipment_export, flat_table_model
    ):
        # Arrange
        config, report, page_map = equipment_export
        output = tmp_path / "out" / "report.pdf"

        # Act
        result = render_to_pdf(page_map, config, report, output, height_model=flat_table_model)

        # Assert
        assert result.output_path == output
        assert result.page_count == page_map.total_pages == 3
        assert len(PdfReader(str(output)).pages) == 3

    def test_when_exported_then_no_partial_file_left(
        self, tmp_path, equipment_export, flat_table_model
    ):
        # Arrange
        config, report, page_map = equipment_export
        output = tmp_path / "report.pdf"

        # Act
        render_to_pdf(page_map, config, report, output, height_model=flat_table_model)

        # Assert
        assert [p.name for p in tmp_path.iterdir()] == ["report.pdf"]

    def test_when_fragment_continues_then_title_and_rows_on_page(
        self, tmp_path, equipment_export, flat_table_model
    ):
        # Arrange
        config, report, page_map = equipment_export
        output = tmp_path / "report.pdf"

        # Act
        render_to_pdf(page_map, config, report, output, height_model=flat_table_model)
        reader = PdfReader(str(output))

        # Assert
        page_two = reader.pages[1].extract_text()
        page_three = reader.pages[2].extract_text()
        assert "Equipment" in page_two
        assert "(Continued)" not in page_two
        assert "Equipment (Continued)" in page_three
        assert "equipment item 28" in page_three
        assert "equipment item 27" in page_two
        assert "Page 3 of 3" in page_three

    def test_when_default_report_then_every_page_written(self, tmp_path, sample_report):
        # Arrange
        config = default_print_config()
        page_map = paginate(config, sample_report)
        output = tmp_path / "report.pdf"

        # Act
        result = render_to_pdf(page_map, config, sample_report, output, height_model=HeightModel())

        # Assert
        assert len(PdfReader(str(output)).pages) == page_map.total_pages
        assert result.placeholder_count > 0    # sample photos do not exist on disk

    def test_when_photos_exist_then_no_placeholders(self, tmp_path, make_config, sample_image):
        # Arrange
        config = make_config(("cover", "cover"), ("photos", "photo_grid"))
        report = ReportData(
            project_id="p-42",
            report_period="2024-06-07",
            project_name="Harbour Street Offices",
            photos=(Photo(sample_image.name, "North elevation"), Photo(str(sample_image), "Slab")),
        )
        page_map = paginate(config, report)

        # Act
        result = render_to_pdf(
            page_map, config, report, tmp_path / "out" / "report.pdf",
            height_model=HeightModel(), asset_dir=sample_image.parent,
        )

        # Assert
        assert result.placeholder_count == 0
        assert result.page_count == 2

    def test_when_custom_geometry_then_pages_use_packer_page_size(
        self, tmp_path, equipment_export, flat_table_model, small_layout
    ):
        # Arrange
        config, report, page_map = equipment_export
        output = tmp_path / "report.pdf"

        # Act
        render_to_pdf(page_map, config, report, output, height_model=flat_table_model)

        # Assert
        box = PdfReader(str(output)).pages[1].mediabox
        assert (round(float(box.width)), round(float(box.height))) == (
            small_layout.page_width, small_layout.page_height
        )

    def test_when_height_model_omitted_then_type_error(self, tmp_path, equipment_export):
        # Arrange
        config, report, page_map = equipment_export

        # Act / Assert
        with pytest.raises(TypeError):
            render_to_pdf(page_map, config, report, tmp_path / "report.pdf")
        with pytest.raises(TypeError):
            render_preview(page_map, config, report)

    def test_when_cancelled_then_raises_and_leaves_no_file(
        self, tmp_path, equipment_export, flat_table_model
    ):
        # Arrange
        config, report, page_map = equipment_export
        output = tmp_path / "report.pdf"
        cancel = threading.Event()
        cancel.set()

        # Act
        with pytest.raises(ExportCancelled):
            render_to_pdf(
                page_map, config, report, output,
                height_model=flat_table_model, cancel_event=cancel,
            )

        # Assert
        assert list(tmp_path.iterdir()) == []

    def test_when_deadline_passed_then_export_error(
        self, tmp_path, equipment_export, flat_table_model
    ):
        # Arrange
        config, report, page_map = equipment_export

        # Act / Assert
        with pytest.raises(ExportError, match="timed out") as exc_info:
            render_to_pdf(
                page_map, config, report, tmp_path / "report.pdf",
                height_model=flat_table_model, timeout=-1,
            )
        assert exc_info.value.reason == "Export timed out"
        assert not isinstance(exc_info.value, ExportCancelled)


class TestAssets:
    """Tests for image loading and framing."""

    def test_when_placeholder_requested_then_size_matches(self):
        assert placeholder_image((40, 30)).size == (40, 30)

    def test_when_source_missing_then_placeholder(self, tmp_path):
        # Arrange
        loader = ImageLoader(tmp_path)

        # Act
        image, loaded = loader.load("nowhere.jpg")

        # Assert
        assert not loaded
        assert image.size == (400, 300)
        assert loader.placeholder_count == 1

    def test_when_source_is_url_then_placeholder(self):
        # Arrange
        loader = ImageLoader()

        # Act
        _, loaded = loader.load("https://example.com/site.jpg")

        # Assert
        assert not loaded
        assert loader.placeholder_count == 1

    def test_when_relative_source_then_resolved_against_base_dir(self, sample_image):
        # Arrange
        loader = ImageLoader(sample_image.parent)

        # Act
        image, loaded = loader.load(sample_image.name)

        # Assert
        assert loaded
        assert image.size == (200, 100)
        assert image.mode == "RGB"

    def test_when_not_an_image_then_placeholder(self, tmp_path):
        # Arrange
        bogus = tmp_path / "notes.jpg"
        bogus.write_text("not an image", encoding="utf-8")

        # Act
        _, loaded = ImageLoader().load(str(bogus))

        # Assert
        assert not loaded

    def test_when_cropped_to_square_then_aspect_matches_frame(self):
        # Arrange
        image = Image.new("RGB", (200, 100))

        # Act
        framed = crop_to_frame(image, 50, 50)

        # Assert
        assert framed.size == (100, 100)

    def test_when_zoomed_then_window_shrinks(self):
        # Arrange
        image = Image.new("RGB", (200, 100))

        # Act
        framed = crop_to_frame(image, 50, 50, ImagePosition(50, 50, 2.0))

        # Assert
        assert framed.size == (50, 50)
