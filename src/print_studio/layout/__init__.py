"""
Module: print_studio.layout

Purpose:
    Height estimation and page packing for the weekly report.
    Converts a print configuration plus report data into a PageMap.

Key Functions:
    - paginate(): Arrange sections onto pages

Key Classes:
    - LayoutConfig: Page geometry, density profiles and packing thresholds
    - HeightModel: Declarative section height estimates
    - PageMap: Pages and their placements

Dependencies:
    - print_studio.core.models: Section and report models
    - print_studio.studio: PrintConfig

Used By:
    - print_studio.controller: Layout session
    - print_studio.output: Both renderers
    - print_studio.diagnostics: Content bounds and warnings
"""

from .config import DensityProfile, LayoutConfig, PageProfile
from .heights import EstimateConfig, HeightEstimate, HeightModel, SectionProfile
from .models import (
    DataRange,
    LayoutWarning,
    Page,
    PageMap,
    PagePlacement,
    RenderConfig,
    Severity,
)
from .paginator import paginate

__all__ = [
    # Config
    "DensityProfile",
    "LayoutConfig",
    "PageProfile",
    # Heights
    "EstimateConfig",
    "HeightEstimate",
    "HeightModel",
    "SectionProfile",
    # Models
    "DataRange",
    "LayoutWarning",
    "Page",
    "PageMap",
    "PagePlacement",
    "RenderConfig",
    "Severity",
    # Functions
    "paginate",
]
