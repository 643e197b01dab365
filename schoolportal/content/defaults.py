"""
Default Document — Seed content used when no stored copy exists.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

from ..models.document import SCHEMA_MARKER, SchoolDocument

CLASS_LIST = [
    "All", "KG", "Class 1", "Class 2", "Class 3", "Class 4", "Class 5",
    "Class 6", "Class 7", "Class 8", "Class 9", "Class 10", "HSC 1st", "HSC 2nd",
]
SECTION_LIST = ["All", "Morning", "Day"]

_IMG_CAMPUS = "https://images.unsplash.com/photo-1562774053-701939374585"
_IMG_BOOKS = "https://images.unsplash.com/photo-1544377193-33dcf4d68fb5"
_IMG_HEAD = "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?q=80&w=200&auto=format&fit=crop"
_IMG_ASSISTANT = "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?q=80&w=200&auto=format&fit=crop"

_HEAD_TEACHER = {
    "id": "f1",
    "name": "Md. Head Master Name",
    "designation": "Head Master",
    "image": _IMG_HEAD,
}
_ASSISTANT_HEAD = {
    "id": "f2",
    "name": "Md. Assistant Head Master",
    "designation": "Assistant Head Master",
    "image": _IMG_ASSISTANT,
}

DEFAULT_DOCUMENT: Dict[str, Any] = {
    "portalSchema": SCHEMA_MARKER,
    "revision": 0,
    "schoolName": "Bagpur Masum Ali Pramanik High School",
    "address": "Bagpur, Pirganj, Rangpur, Bangladesh",
    "phone": "017XX-XXXXXX",
    "email": "contact@bmahs.edu.bd",
    "motto": "Education | Discipline | Character",
    "eiin": "127260",
    "locationText": "Bagpur, Pirganj, Rangpur, Bangladesh",
    "locationMapUrl": (
        "https://www.google.com/maps/embed?pb=!1m18!1m12!1m3!1d115041.56581121081"
        "!2d89.17641888069695!3d25.752355447171544!2m3!1f0!2f0!3f0!3m2!1i1024!2i768"
        "!4f13.1!3m3!1m2!1s0x39ed09689452b46d%3A0xc3b53f6834d9a40!2sRangpur!5e0!3m2"
        "!1sen!2sbd!4v1710000000000!5m2!1sen!2sbd"
    ),
    "nationalAnthemYoutubeId": "UoX7o_SkaS0",
    "adminUsername": "127260",
    "adminPassword": "Bmahs127260",
    "adminResetCode": "998877",
    "adminProfilePic": f"{_IMG_CAMPUS}?q=80&w=800",
    "adminProfilePicFit": "cover",
    "officeAccessUser": "office",
    "officeAccessPass": "office123",
    "appDownloadUrl": "https://example.com/app.apk",
    "appVersion": "1.0.2",
    "appSize": "15.4 MB",
    "logoUrl": f"{_IMG_CAMPUS}?q=80&w=500",
    "logoFit": "cover",
    "marqueeText": (
        "২০২৬ শিক্ষাবর্ষে ষষ্ঠ থেকে নবম শ্রেণিতে ভর্তি বিজ্ঞপ্তি প্রকাশিত হয়েছে। "
        "এস.এস.সি প্রি-টেস্ট পরীক্ষা ২০২৬ এর রুটিন দেখুন।"
    ),
    "tickerConfig": {
        "speed": 25,
        "backgroundColor": "#f8fafc",
        "textColor": "#004071",
        "fontSize": "14px",
        "fontWeight": "900",
    },
    "themeConfig": {
        "primaryTextColor": "#334155",
        "secondaryTextColor": "#64748b",
        "headingColor": "#004071",
        "navTextColor": "#ffffff",
        "footerTextColor": "#ffffff",
        "accentColor": "#4ade80",
        "isDarkMode": False,
    },
    "stats": {
        "students": "3000+",
        "teachers": "70",
        "staff": "25",
        "buildings": "4",
    },
    "newsEvents": [
        {
            "id": "e1",
            "title": "Inauguration of New Building",
            "date": "March 15, 2024",
            "imageUrl": f"{_IMG_CAMPUS}?q=80&w=800",
            "content": (
                "We are proud to announce the formal inauguration of our newly "
                "constructed 4-story academic building."
            ),
        },
        {
            "id": "e2",
            "title": "Book Distribution Festival",
            "date": "January 1, 2024",
            "imageUrl": f"{_IMG_BOOKS}?q=80&w=800",
            "content": "Textbook festival for the new academic session was celebrated with enthusiasm.",
        },
    ],
    "aboutContent": (
        "Bagpur Masum Ali Pramanik High School is one of the most prestigious and "
        "important educational institutions in Rangpur. It is located in the heart "
        "of the Rangpur City, comprising of an area of 1.00 acres of land. Bagpur "
        "Masum Ali Pramanik High School was established in 1998."
    ),
    "administrationContent": (
        "The institution is governed by a Board of Directors headed by the Deputy "
        "Commissioner (DC) of Rangpur. Our administrative team ensures smooth "
        "operations and maintains the highest standards of educational integrity."
    ),
    "academicsContent": (
        "We follow the national curriculum of Bangladesh (NCTB) for both School and "
        "College sections. Our academic program is designed to foster critical "
        "thinking, creativity, and a deep understanding of core subjects."
    ),
    "syllabuses": [],
    "classRoutines": [],
    "classTeachers": [],
    "classInfoLinks": [],
    "isStudentInfoEnabled": True,
    "useCalculatedStudentCount": False,
    "headTeacher": _HEAD_TEACHER,
    "assistantHeadTeachers": [_ASSISTANT_HEAD],
    "committeeMembers": [],
    "governingBody": [],
    "coCurricularContent": (
        "At Bagpur Masum Ali Pramanik High School, we believe in the all-round "
        "development of students. Our co-curricular activities include debate, "
        "scouting, sports, cultural programs, and science clubs."
    ),
    "admissionInfo": (
        "Admission to Bagpur Masum Ali Pramanik High School is based on merit. For "
        "primary classes (KG to Class 5), admission is typically through a lottery "
        "or test. For higher classes, a formal admission test is conducted annually "
        "in December."
    ),
    "admissionFormUrl": "https://docs.google.com/forms/u/0/",
    "admissionButtonText": "Apply Online Now",
    "isAdmissionOpen": True,
    "banners": [
        {
            "id": "1",
            "imageUrl": f"{_IMG_CAMPUS}?q=80&w=1200",
            "title": "Bagpur Masum Ali Pramanik High School",
            "subtitle": "Education | Discipline | Character",
        }
    ],
    "notices": [
        {
            "id": "n1",
            "title": "২০২৬ শিক্ষাবর্ষে মাধ্যমিক শাখায় ভর্তি পরীক্ষার ফলাফল ও ভর্তি সংক্রান্ত বিজ্ঞপ্তি",
            "date": "December 20, 2025",
            "content": "ফলাফল ও ভর্তি সংক্রান্ত বিস্তারিত তথ্য এখানে পাওয়া যাবে।",
            "important": True,
        }
    ],
    "exams": [],
    "results": [],
    "sections": [
        {
            "id": "headMasterMsg",
            "title": "Head Master Message",
            "body": (
                "Welcome to our institution. We are committed to providing the best "
                "education and building a brighter future for our students."
            ),
        },
        {
            "id": "assistantHeadMasterMsg",
            "title": "Assistant Head Master Message",
            "body": (
                "Education is the light that guides us. Our mission is to illuminate "
                "the minds of our students through discipline and academic excellence."
            ),
        },
    ],
    "faculty": [_HEAD_TEACHER, _ASSISTANT_HEAD],
    "gallery": [
        {
            "id": "g1",
            "url": f"{_IMG_CAMPUS}?q=80&w=1200",
            "type": "image",
            "caption": "Main Academic Building Campus View",
        },
        {
            "id": "g2",
            "url": f"{_IMG_BOOKS}?q=80&w=1200",
            "type": "image",
            "caption": "School Campus Activity",
        },
    ],
    "applications": [],
    "officeDriveLinks": [],
    "officeProfiles": [
        {
            "id": "1",
            "title": "NCTB Official",
            "url": "https://nctb.gov.bd/",
            "type": "govt_portal",
            "description": "Curriculum and Textbook Board",
        },
        {
            "id": "2",
            "title": "DSHE Portal",
            "url": "https://dshe.gov.bd/",
            "type": "govt_portal",
            "description": "Secondary and Higher Education",
        },
    ],
}


def default_document() -> SchoolDocument:
    """Build a fresh copy of the seed document."""
    return SchoolDocument.from_wire(copy.deepcopy(DEFAULT_DOCUMENT))
