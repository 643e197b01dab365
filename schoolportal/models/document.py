"""
Document Models — Pydantic schemas for the site content document.

The document is the single aggregate holding every piece of site content
and configuration. It is stored and transmitted with camelCase keys
(``schoolName``, ``themeConfig``, ...); Python code uses the snake_case
attribute names.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Written into every document this project persists. Remote payloads
# without it are treated as placeholders and rejected on load.
SCHEMA_MARKER = "schoolportal/1"


class PortalModel(BaseModel):
    """Base for all document models: camelCase on the wire, unknown keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with wire (camelCase) keys, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ── Configuration blocks ─────────────────────────────────────────


class TickerConfig(PortalModel):
    """News ticker styling."""

    speed: int = 25
    background_color: str = "#f8fafc"
    text_color: str = "#004071"
    font_size: str = "14px"
    font_weight: str = "900"


class ThemeConfig(PortalModel):
    """Site colour theme."""

    primary_text_color: str = "#334155"
    secondary_text_color: str = "#64748b"
    heading_color: str = "#004071"
    nav_text_color: str = "#ffffff"
    footer_text_color: str = "#ffffff"
    accent_color: str = "#4ade80"
    is_dark_mode: bool = False


class SchoolStats(PortalModel):
    """Headline numbers shown on the home page."""

    students: str = ""
    teachers: str = ""
    staff: str = ""
    buildings: str = ""


# ── Records ──────────────────────────────────────────────────────


class Record(PortalModel):
    """Any entity stored in a list field. ``id`` is unique within its list."""

    id: str = ""


AttachmentType = Literal["image", "video", "pdf", "document"]


class Notice(Record):
    title: str = ""
    date: str = ""
    content: str = ""
    important: bool = False
    attachment_url: Optional[str] = None
    attachment_type: Optional[AttachmentType] = None
    file_name: Optional[str] = None
    target_class: Optional[str] = None
    target_section: Optional[str] = None


class NewsEvent(Record):
    title: str = ""
    date: str = ""
    image_url: Optional[str] = None
    content: str = ""
    attachment_url: Optional[str] = None
    file_name: Optional[str] = None


class AcademicFile(Record):
    """A syllabus or class routine file."""

    title: str = ""
    target_class: str = ""
    url: str = ""
    file_name: Optional[str] = None


class ClassTeacherAssignment(Record):
    target_class: str = ""
    section: str = ""
    teacher_name: str = ""


class ClassInfoLink(Record):
    title: str = ""
    target_class: str = ""
    url: str = ""
    type: Literal["spreadsheet", "form"] = "spreadsheet"
    student_count: Optional[int] = None


class Exam(Record):
    title: str = ""
    date: str = ""
    subject: str = ""
    target_class: str = ""
    target_section: str = ""
    attachment_url: Optional[str] = None
    file_name: Optional[str] = None


class Result(Record):
    student_name: str = ""
    student_roll: str = ""
    target_class: str = ""
    target_section: str = ""
    gpa: str = ""
    attachment_url: Optional[str] = None
    attachment_type: Optional[Literal["image", "pdf", "document"]] = None
    file_name: Optional[str] = None
    date: str = ""


class GalleryItem(Record):
    url: str = ""
    type: Literal["image", "video"] = "image"
    caption: str = ""


class Banner(Record):
    image_url: str = ""
    title: str = ""
    subtitle: str = ""


class SectionContent(Record):
    """Free-text block such as the head master's message."""

    title: str = ""
    body: str = ""


class Faculty(Record):
    name: str = ""
    designation: str = ""
    image: str = ""


class AdmissionApplication(Record):
    student_name: str = ""
    parent_name: str = ""
    applied_class: str = ""
    phone: str = ""
    date: str = ""
    status: Literal["pending", "approved", "rejected"] = "pending"


class DriveFolder(Record):
    folder_name: str = ""
    folder_url: str = ""
    category: Literal["academic", "office", "financial", "archive", "personal"] = "office"
    description: str = ""
    is_locked: Optional[bool] = None


OfficeProfileType = Literal["drive", "govt_portal", "other"]


class OfficeProfileItem(Record):
    title: str = ""
    url: str = ""
    type: OfficeProfileType = "other"
    description: str = ""


Fit = Literal["cover", "contain"]


# ── Root document ────────────────────────────────────────────────


class SchoolDocument(PortalModel):
    """
    Complete site content.

    Exactly one instance is live at a time. It is replaced wholesale on
    load and on commit, never merged field by field.
    """

    # Presence marker and save counter
    portal_schema: Optional[str] = None
    revision: int = 0

    school_name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""

    motto: str = ""
    eiin: str = ""

    location_text: str = ""
    location_map_url: str = ""
    national_anthem_youtube_id: str = ""

    # Stored in plain text alongside the content (kept for compatibility)
    admin_username: str = ""
    admin_password: str = ""
    admin_reset_code: str = ""
    admin_profile_pic: Optional[str] = None
    admin_profile_pic_fit: Optional[Fit] = None

    office_access_user: str = ""
    office_access_pass: str = ""

    app_download_url: Optional[str] = None
    app_version: Optional[str] = None
    app_size: Optional[str] = None

    logo_url: str = ""
    logo_fit: Optional[Fit] = None
    marquee_text: str = ""
    ticker_config: TickerConfig = Field(default_factory=TickerConfig)
    theme_config: ThemeConfig = Field(default_factory=ThemeConfig)

    stats: SchoolStats = Field(default_factory=SchoolStats)
    news_events: List[NewsEvent] = Field(default_factory=list)

    about_content: str = ""
    about_pdf_url: Optional[str] = None
    administration_content: str = ""
    administration_pdf_url: Optional[str] = None
    academics_content: str = ""
    academics_pdf_url: Optional[str] = None

    syllabuses: List[AcademicFile] = Field(default_factory=list)
    class_routines: List[AcademicFile] = Field(default_factory=list)
    class_teachers: List[ClassTeacherAssignment] = Field(default_factory=list)
    class_info_links: List[ClassInfoLink] = Field(default_factory=list)
    is_student_info_enabled: Optional[bool] = None
    use_calculated_student_count: Optional[bool] = None

    head_teacher: Optional[Faculty] = None
    assistant_head_teachers: List[Faculty] = Field(default_factory=list)
    committee_members: List[Faculty] = Field(default_factory=list)
    governing_body: List[Faculty] = Field(default_factory=list)

    co_curricular_content: str = ""
    co_curricular_pdf_url: Optional[str] = None

    admission_info: str = ""
    admission_pdf_url: Optional[str] = None
    admission_form_url: Optional[str] = None
    admission_button_text: Optional[str] = None
    is_admission_open: Optional[bool] = None

    banners: List[Banner] = Field(default_factory=list)
    notices: List[Notice] = Field(default_factory=list)
    exams: List[Exam] = Field(default_factory=list)
    results: List[Result] = Field(default_factory=list)
    sections: List[SectionContent] = Field(default_factory=list)
    faculty: List[Faculty] = Field(default_factory=list)
    gallery: List[GalleryItem] = Field(default_factory=list)
    applications: List[AdmissionApplication] = Field(default_factory=list)
    office_drive_links: List[DriveFolder] = Field(default_factory=list)
    office_profiles: List[OfficeProfileItem] = Field(default_factory=list)

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "SchoolDocument":
        """Parse a stored or transmitted document (raises ValidationError)."""
        return cls.model_validate(data)

    def has_marker(self) -> bool:
        return self.portal_schema == SCHEMA_MARKER


def field_alias(model: type[BaseModel], name: str) -> str:
    """Wire key for a snake_case attribute name (or the name if already a key)."""
    info = model.model_fields.get(name)
    if info is not None and info.alias:
        return info.alias
    return name


def attribute_name(model: type[BaseModel], key: str) -> Optional[str]:
    """Attribute name for a wire key or attribute name; None if unknown."""
    if key in model.model_fields:
        return key
    for name, info in model.model_fields.items():
        if info.alias == key:
            return name
    return None
