import pytest
import sys
from pathlib import Path
from PIL import Image

# Add src to sys.path so we can import print_studio
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from print_studio.core.models import (  # noqa: E402
    Photo,
    ReportData,
    SectionContent,
    SectionDescriptor,
    SectionKind,
)
from print_studio.layout import HeightModel, LayoutConfig, SectionProfile  # noqa: E402
from print_studio.layout.heights import DEFAULT_KIND_PROFILES  # noqa: E402
from print_studio.studio import PrintConfig  # noqa: E402


# Common test fixtures
@pytest.fixture
def small_layout() -> LayoutConfig:
    """Layout whose continuation pages have a 300pt content budget (336pt on page 1)."""
    return LayoutConfig(page_height=441)


@pytest.fixture
def flat_table_model(small_layout) -> HeightModel:
    """Height model where tables have no chrome and 10pt rows."""
    flat = SectionProfile(
        header_height=0,
        column_header_height=0,
        continued_header_height=0,
        row_height=10,
        footer_base_height=0,
    )
    kinds = dict(DEFAULT_KIND_PROFILES)
    kinds[SectionKind.TABLE] = flat
    return HeightModel(small_layout, kind_profiles=kinds, section_profiles={})


@pytest.fixture
def make_config():
    """Factory: PrintConfig with the given (id, kind) sections in order."""
    def _create(*sections, **kwargs) -> PrintConfig:
        descriptors = tuple(
            SectionDescriptor(sid, kind, "", True, i) for i, (sid, kind) in enumerate(sections)
        )
        return PrintConfig(sections=descriptors, **kwargs)
    return _create


@pytest.fixture
def make_report():
    """Factory: ReportData with numbered table rows, narrative text and photos."""
    def _create(rows=None, text=None, photos=0, footers=None) -> ReportData:
        sections = {}
        for sid, count in (rows or {}).items():
            sections[sid] = SectionContent(
                columns=("Item", "Qty"),
                rows=tuple((f"{sid} item {i}", str(i)) for i in range(count)),
                footer_text=(footers or {}).get(sid, ""),
            )
        for sid, body in (text or {}).items():
            sections[sid] = SectionContent(text=body)
        return ReportData(
            project_id="p-42",
            report_period="2024-06-07",
            project_name="Harbour Street Offices",
            job_number="J-1001",
            sections=sections,
            photos=tuple(Photo(f"photos/site_{i}.jpg", f"Site photo {i}") for i in range(photos)),
        )
    return _create


@pytest.fixture
def sample_report(make_report) -> ReportData:
    """A full weekly report for the default section list."""
    return make_report(
        rows={
            "key_personnel": 4,
            "weather": 7,
            "progress": 12,
            "lookahead": 6,
            "manpower": 9,
            "equipment": 40,
            "materials": 5,
            "procurement": 3,
            "safety": 4,
            "financials": 6,
            "schedule": 8,
            "issues": 5,
        },
        text={
            "overview": "Steel erection on level 3 completed ahead of schedule. " * 6,
            "documents": "RFI-014 answered.\nSubmittal 22 approved.",
        },
        photos=5,
        footers={"safety": "No recordable incidents this week. Toolbox talk on working at height."},
    )


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path
