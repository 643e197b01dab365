"""
Site Views — Read-only selections of the document for public pages.

Pages never touch the document directly for anything beyond plain
fields; filtering, grouping and labelling live here so they can be
tested without rendering HTML.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..editing.records import calculated_student_total
from ..models.document import (
    Exam,
    Faculty,
    Notice,
    OfficeProfileItem,
    Result,
    SchoolDocument,
)

ALL = "All"

# (path, label) in navigation order
NAV_ROUTES: List[Tuple[str, str]] = [
    ("/", "Home"),
    ("/about", "About"),
    ("/administration", "Administration"),
    ("/teachers", "Teachers"),
    ("/academics", "Academics"),
    ("/co-curricular", "Co-Curricular"),
    ("/admission", "Admission"),
    ("/gallery", "Gallery"),
    ("/office-profiles", "Office Profiles"),
    ("/login", "Login"),
    ("/corner", "নোটিশ বোর্ড"),
]


# ── Notice board ─────────────────────────────────────────────────


@dataclass
class StudentFilter:
    """Notice board selection from the `class`, `section`, `roll` query args."""

    target_class: str = ALL
    section: str = ALL
    roll: str = ""

    @classmethod
    def from_args(cls, args) -> "StudentFilter":
        return cls(
            target_class=(args.get("class") or ALL).strip() or ALL,
            section=(args.get("section") or ALL).strip() or ALL,
            roll=(args.get("roll") or "").strip(),
        )


def _open_match(selected: str, value: Optional[str]) -> bool:
    # Notices addressed to "All" are shown for every selection
    return selected == ALL or value == selected or value == ALL


def _exact_match(selected: str, value: Optional[str]) -> bool:
    return selected == ALL or value == selected


def filter_notices(document: SchoolDocument, flt: StudentFilter) -> List[Notice]:
    return [
        n
        for n in document.notices
        if _open_match(flt.target_class, n.target_class)
        and _open_match(flt.section, n.target_section)
    ]


def filter_exams(document: SchoolDocument, flt: StudentFilter) -> List[Exam]:
    return [
        e
        for e in document.exams
        if _exact_match(flt.target_class, e.target_class)
        and _exact_match(flt.section, e.target_section)
    ]


def filter_results(document: SchoolDocument, flt: StudentFilter) -> List[Result]:
    """Results for the selection; `roll` is a case-insensitive substring match."""
    roll = flt.roll.lower()
    return [
        r
        for r in document.results
        if _exact_match(flt.target_class, r.target_class)
        and _exact_match(flt.section, r.target_section)
        and (not roll or roll in r.student_roll.lower())
    ]


# ── Office profiles ──────────────────────────────────────────────


@dataclass
class ProfileCategory:
    label: str
    color: str
    icon: str


PROFILE_CATEGORIES: Dict[str, ProfileCategory] = {
    "drive": ProfileCategory("Cloud Drive", "#10b981", "☁️"),
    "govt_portal": ProfileCategory("Govt. Portal", "#ef4444", "🏛️"),
    "other": ProfileCategory("Other Resource", "var(--heading)", "🔗"),
}
UNKNOWN_CATEGORY = ProfileCategory("", "#64748b", "📂")


@dataclass
class ProfileCard:
    item: OfficeProfileItem
    category: ProfileCategory

    @property
    def label(self) -> str:
        return self.category.label


def office_profile_cards(document: SchoolDocument) -> List[ProfileCard]:
    """One card per office profile, labelled by its category."""
    return [
        ProfileCard(item, PROFILE_CATEGORIES.get(item.type, UNKNOWN_CATEGORY))
        for item in document.office_profiles
    ]


# ── Administration and home ──────────────────────────────────────


def personnel_sections(document: SchoolDocument) -> List[Tuple[str, List[Faculty]]]:
    """Titled groups for the administration page; empty groups are omitted."""
    groups = [
        ("Assistant Head Teachers", document.assistant_head_teachers),
        ("School Committee", document.committee_members),
        ("Governing Body", document.governing_body),
    ]
    return [(title, members) for title, members in groups if members]


def student_display(document: SchoolDocument) -> str:
    if document.use_calculated_student_count:
        return str(calculated_student_total(document))
    return document.stats.students


def home_stats(document: SchoolDocument) -> List[Tuple[str, str]]:
    return [
        ("Students", student_display(document)),
        ("Teachers", document.stats.teachers),
        ("Staffs", document.stats.staff),
        ("Buildings", document.stats.buildings),
    ]


def section_body(document: SchoolDocument, section_id: str) -> Optional[str]:
    for section in document.sections:
        if section.id == section_id:
            return section.body
    return None


def home_messages(document: SchoolDocument) -> List[Tuple[str, Optional[Faculty], Optional[str]]]:
    """(label, person, message) boxes shown beside the home page news."""
    assistant = document.assistant_head_teachers[0] if document.assistant_head_teachers else None
    return [
        ("Head Master Message", document.head_teacher, section_body(document, "headMasterMsg")),
        (
            "Assistant Head Master Message",
            assistant,
            section_body(document, "assistantHeadMasterMsg"),
        ),
    ]


def identity_line(document: SchoolDocument) -> str:
    return f"EIIN: {document.eiin}" if document.eiin else ""
