"""
Module: report

Purpose:
    Provides the report record being laid out. Table-backed sections hold
    an ordered row sequence, narrative sections a single block of text,
    and photos live at report level so the cover and the photo grid can
    select from the same list.

Key Classes:
    - Photo: A report photo (path or URL plus caption)
    - SectionContent: Data backing one section
    - ReportData: The weekly report record

Dependencies:
    - dataclasses (std)

Used By:
    - layout.heights: Item counts for estimation
    - layout.paginator: Row counts for splitting
    - output: Both renderers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Photo:
    """A single report photo."""

    source: str
    caption: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "caption": self.caption}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Photo:
        return cls(source=str(data.get("source", "")), caption=str(data.get("caption", "")))


@dataclass(frozen=True)
class SectionContent:
    """
    Data backing one section.

    Row order is significant and is preserved verbatim across splits.

    Attributes:
        columns: Column headings for table sections
        rows: Ordered rows; each row is one atomic unit for pagination
        text: Narrative body (narrative sections) or intro text
        footer_text: Summary rendered beneath a table (e.g. safety narrative)
    """

    columns: Tuple[str, ...] = ()
    rows: Tuple[Tuple[str, ...], ...] = ()
    text: str = ""
    footer_text: str = ""

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def slice_rows(self, start: int, end: int) -> Tuple[Tuple[str, ...], ...]:
        """Rows in the half-open range [start, end)."""
        return self.rows[start:end]

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.columns:
            d["columns"] = list(self.columns)
        if self.rows:
            d["rows"] = [list(r) for r in self.rows]
        if self.text:
            d["text"] = self.text
        if self.footer_text:
            d["footer_text"] = self.footer_text
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SectionContent:
        return cls(
            columns=tuple(str(c) for c in data.get("columns", ())),
            rows=tuple(tuple(str(v) for v in row) for row in data.get("rows", ())),
            text=str(data.get("text", "")),
            footer_text=str(data.get("footer_text", "")),
        )


_EMPTY = SectionContent()


@dataclass(frozen=True)
class ReportData:
    """
    Weekly report record.

    Attributes:
        project_id: Project identifier (persistence key)
        report_period: Week-ending date string (persistence key)
        project_name: Shown on the cover and in running headers
        job_number: Shown on the cover
        sections: Section id -> SectionContent
        photos: Ordered report photos
    """

    project_id: str
    report_period: str
    project_name: str = ""
    job_number: str = ""
    sections: Mapping[str, SectionContent] = field(default_factory=dict)
    photos: Tuple[Photo, ...] = ()

    def content_for(self, section_id: str) -> SectionContent:
        """Content for a section, or an empty record if the report has none."""
        return self.sections.get(section_id, _EMPTY)

    def photo_at(self, index: int) -> Optional[Photo]:
        if 0 <= index < len(self.photos):
            return self.photos[index]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "report_period": self.report_period,
            "project_name": self.project_name,
            "job_number": self.job_number,
            "sections": {sid: c.to_dict() for sid, c in self.sections.items()},
            "photos": [p.to_dict() for p in self.photos],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ReportData:
        return cls(
            project_id=str(data["project_id"]),
            report_period=str(data["report_period"]),
            project_name=str(data.get("project_name", "")),
            job_number=str(data.get("job_number", "")),
            sections={
                str(sid): SectionContent.from_dict(c)
                for sid, c in data.get("sections", {}).items()
            },
            photos=tuple(Photo.from_dict(p) for p in data.get("photos", ())),
        )
