"""
Synthetic D6 dataset used when upstream is unavailable or sandbox mode is on.

The structure is fixed (record counts, parent links, subject lists per grade),
the content is random: two builds produce the same cardinalities with different
names and marks. Records use the snake_case wire shape D6 itself returns.
"""

from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from faker import Faker


logger = logging.getLogger(__name__)


SCHOOLS = [
    # (school_id, name, email domain, api_type_id, api_type, grades)
    (1000, "Greenwood Primary School", "greenwood.school.za", 8, "Admin+ API", ["R", "1", "2", "3", "4", "5", "6", "7"]),
    (1001, "Riverside High School", "riverside.edu.za", 9, "Curriculum+ API", ["8", "9", "10", "11", "12"]),
    (1002, "Sunnydale Academy", "sunnydale.co.za", 10, "Finance+ API", ["4", "5", "6", "7", "8", "9"]),
]
LEARNERS_PER_SCHOOL = 30
STAFF_PER_SCHOOL = 8
TERMS = [1, 2, 3, 4]

LEARNER_ID_BASE = 2000
PARENT_ID_BASE = 3000
STAFF_ID_BASE = 4000
MARK_ID_BASE = 5000

# CAPS subject lists per phase: (code, name)
PHASE_SUBJECTS = {
    "foundation": [
        ("ENGHL", "English Home Language"),
        ("AFRFAL", "Afrikaans First Additional Language"),
        ("MATH", "Mathematics"),
        ("LS", "Life Skills"),
    ],
    "intermediate": [
        ("ENGHL", "English Home Language"),
        ("AFRFAL", "Afrikaans First Additional Language"),
        ("MATH", "Mathematics"),
        ("NST", "Natural Sciences and Technology"),
        ("SS", "Social Sciences"),
        ("LS", "Life Skills"),
    ],
    "senior": [
        ("ENGHL", "English Home Language"),
        ("AFRFAL", "Afrikaans First Additional Language"),
        ("MATH", "Mathematics"),
        ("NS", "Natural Sciences"),
        ("SS", "Social Sciences"),
        ("TECH", "Technology"),
        ("EMS", "Economic and Management Sciences"),
        ("LO", "Life Orientation"),
        ("CA", "Creative Arts"),
    ],
    "fet": [
        ("ENGHL", "English Home Language"),
        ("AFRFAL", "Afrikaans First Additional Language"),
        ("MATH", "Mathematics"),
        ("LO", "Life Orientation"),
        ("PHYS", "Physical Sciences"),
        ("LIFE", "Life Sciences"),
        ("GEOG", "Geography"),
    ],
}

LOOKUPS: dict[str, list[dict[str, str]]] = {
    "genders": [
        {"id": "M", "name": "Male"},
        {"id": "F", "name": "Female"},
    ],
    "grades": [{"id": "R", "name": "Grade R"}] + [{"id": str(g), "name": f"Grade {g}"} for g in range(1, 13)],
    "languages": [
        {"id": "AFR", "name": "Afrikaans"},
        {"id": "ENG", "name": "English"},
        {"id": "ZUL", "name": "IsiZulu"},
        {"id": "XHO", "name": "IsiXhosa"},
        {"id": "TSW", "name": "Setswana"},
        {"id": "NSO", "name": "Sesotho sa Leboa"},
        {"id": "SOT", "name": "Sesotho"},
        {"id": "TSO", "name": "Xitsonga"},
        {"id": "SWA", "name": "SiSwati"},
        {"id": "VEN", "name": "Tshivenda"},
        {"id": "NBL", "name": "IsiNdebele"},
    ],
    "ethnicgroups": [
        {"id": "BLK", "name": "Black African"},
        {"id": "COL", "name": "Coloured"},
        {"id": "IND", "name": "Indian/Asian"},
        {"id": "WHT", "name": "White"},
        {"id": "OTH", "name": "Other"},
    ],
}
LOOKUPS["subjects"] = sorted(
    {code: {"id": code, "name": name} for subjects in PHASE_SUBJECTS.values() for code, name in subjects}.values(),
    key=lambda s: s["id"],
)

HOME_LANGUAGES = [item["name"] for item in LOOKUPS["languages"]]
MARK_TYPES = ["Test", "Assignment", "Exam", "Practical", "Project"]


def phase_for_grade(grade: str) -> str:
    g = 0 if grade == "R" else int(grade)
    if g <= 3:
        return "foundation"
    if g <= 6:
        return "intermediate"
    if g <= 9:
        return "senior"
    return "fet"


def subjects_for_grade(grade: str) -> list[tuple[str, str]]:
    return list(PHASE_SUBJECTS[phase_for_grade(grade)])


def parents_for_learner(n: int) -> int:
    """Learner n (dataset order) has one parent on every third index, else two."""
    return 1 if n % 3 == 0 else 2


@dataclass(frozen=True)
class MockDataset:
    schools: tuple[dict[str, Any], ...]
    learners: tuple[dict[str, Any], ...]
    staff: tuple[dict[str, Any], ...]
    parents: tuple[dict[str, Any], ...]
    marks: tuple[dict[str, Any], ...]
    academic_year: int


def _school_record(school_id: int, name: str, domain: str, api_type_id: int, api_type: str, fake: Faker) -> dict[str, Any]:
    return {
        "school_login_id": str(school_id),
        "school_id": school_id,
        "school_name": name,
        "admin_email_address": f"admin@{domain}",
        "telephone_calling_code": "27",
        "telephone_number": fake.numerify("01########"),
        "api_type_id": api_type_id,
        "api_type": api_type,
        "activated_by_integrator": "Yes",
    }


def build_dataset(seed: Optional[int] = None, academic_year: Optional[int] = None) -> MockDataset:
    """Generate the full corpus. Relationships are consistent by construction."""
    rng = random.Random(seed)
    fake = Faker()
    if seed is not None:
        fake.seed_instance(seed)
    year = academic_year or date.today().year

    schools: list[dict[str, Any]] = []
    learners: list[dict[str, Any]] = []
    staff: list[dict[str, Any]] = []
    parents: list[dict[str, Any]] = []
    marks: list[dict[str, Any]] = []

    n = 0  # learner index across the dataset
    for school_id, name, domain, api_type_id, api_type, grades in SCHOOLS:
        schools.append(_school_record(school_id, name, domain, api_type_id, api_type, fake))

        for i in range(LEARNERS_PER_SCHOOL):
            learner_id = LEARNER_ID_BASE + n
            grade = grades[i % len(grades)]
            gender = "M" if i % 2 == 0 else "F"
            first = fake.first_name_male() if gender == "M" else fake.first_name_female()
            last = fake.last_name()
            age = (0 if grade == "R" else int(grade)) + 6
            dob = fake.date_between(start_date=date(year - age - 1, 1, 1), end_date=date(year - age, 12, 31))

            parent_ids: list[int] = []
            for p in range(parents_for_learner(n)):
                parent_id = PARENT_ID_BASE + len(parents)
                parent_ids.append(parent_id)
                is_father = p == 0 and gender == "M" or p == 1 and gender == "F"
                parent_first = fake.first_name_male() if is_father else fake.first_name_female()
                parents.append(
                    {
                        "id": parent_id,
                        "school_id": school_id,
                        "first_name": parent_first,
                        "last_name": last,
                        "title": "Mr" if is_father else "Mrs",
                        "relationship_type": "Father" if is_father else "Mother",
                        "email_address": f"{parent_first}.{last}{parent_id}@{fake.free_email_domain()}".lower().replace(" ", ""),
                        "mobile_number": fake.numerify("08########"),
                        "learner_ids": [learner_id],
                        "is_primary_contact": p == 0,
                    }
                )

            learners.append(
                {
                    "id": learner_id,
                    "school_id": school_id,
                    "admission_number": f"ADM{learner_id}",
                    "first_name": first,
                    "last_name": last,
                    "gender": gender,
                    "grade": grade,
                    "register_class_name": f"{grade}{'ABC'[i % 3]}",
                    "date_of_birth": dob.isoformat(),
                    "home_language": rng.choice(HOME_LANGUAGES),
                    "debtor_code": f"DEB{learner_id}",
                    "parent1_id": parent_ids[0],
                    "parent2_id": parent_ids[1] if len(parent_ids) > 1 else None,
                    "accountable_person_id": parent_ids[0],
                    "contact_details": {
                        "email": f"{first}.{last}{learner_id}@student.{domain}".lower().replace(" ", ""),
                        "phone": fake.numerify("08########"),
                        "address": f"{fake.street_address()}, {fake.city()}",
                    },
                }
            )

            for term in TERMS:
                for code, subject_name in subjects_for_grade(grade):
                    marks.append(
                        {
                            "id": MARK_ID_BASE + len(marks),
                            "learner_id": learner_id,
                            "subject_code": code,
                            "subject_name": subject_name,
                            "term": term,
                            "year": year,
                            "mark_value": rng.randint(35, 98),
                            "total_marks": 100,
                            "mark_type": rng.choice(MARK_TYPES),
                            "assessment_date": date(year, term * 3, rng.randint(1, 28)).isoformat(),
                        }
                    )
            n += 1

        # One principal, the rest teach subjects from the school's phases
        school_subjects: list[tuple[str, str]] = []
        for grade in grades:
            for subject in subjects_for_grade(grade):
                if subject not in school_subjects:
                    school_subjects.append(subject)
        for s in range(STAFF_PER_SCHOOL):
            staff_id = STAFF_ID_BASE + len(staff)
            gender = rng.choice(["M", "F"])
            first = fake.first_name_male() if gender == "M" else fake.first_name_female()
            last = fake.last_name()
            if s == 0:
                position, taught = "Principal", []
            else:
                code, subject_name = school_subjects[(s - 1) % len(school_subjects)]
                position, taught = f"{subject_name} Teacher", [subject_name]
            staff.append(
                {
                    "id": staff_id,
                    "school_id": school_id,
                    "staff_number": f"STAFF{staff_id}",
                    "first_name": first,
                    "last_name": last,
                    "gender": gender,
                    "email_address": f"{first[0]}.{last}@{domain}".lower().replace(" ", ""),
                    "mobile_number": fake.numerify("07########"),
                    "department": "Management" if s == 0 else "Academic",
                    "position": position,
                    "subjects_taught": taught,
                    "grades": [] if s == 0 else list(grades),
                    "is_active": True,
                }
            )

    logger.info(
        "Built mock D6 dataset: %d schools, %d learners, %d parents, %d staff, %d marks",
        len(schools), len(learners), len(parents), len(staff), len(marks),
    )
    return MockDataset(
        schools=tuple(schools),
        learners=tuple(learners),
        staff=tuple(staff),
        parents=tuple(parents),
        marks=tuple(marks),
        academic_year=year,
    )


class MockDataProvider:
    """
    Filtered views over one lazily built MockDataset.
    Every getter returns deep copies, so callers can never mutate the corpus.
    Unknown ids / lookup types yield empty lists, never errors.
    """

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._dataset: Optional[MockDataset] = None

    @property
    def dataset(self) -> MockDataset:
        if self._dataset is None:
            self._dataset = build_dataset(self._seed)
        return self._dataset

    def get_schools(self) -> list[dict[str, Any]]:
        return copy.deepcopy(list(self.dataset.schools))

    def get_learners(self, school_id: int, limit: int = 50, offset: int = 0) -> list[dict[str, Any]]:
        rows = [l for l in self.dataset.learners if l["school_id"] == school_id]
        return copy.deepcopy(rows[offset : offset + limit])

    def get_learner(self, learner_id: int) -> Optional[dict[str, Any]]:
        for l in self.dataset.learners:
            if l["id"] == learner_id:
                return copy.deepcopy(l)
        return None

    def get_staff(self, school_id: int) -> list[dict[str, Any]]:
        return copy.deepcopy([s for s in self.dataset.staff if s["school_id"] == school_id])

    def get_parents(self, school_id: int) -> list[dict[str, Any]]:
        return copy.deepcopy([p for p in self.dataset.parents if p["school_id"] == school_id])

    def get_marks(self, learner_id: int, term: Optional[int] = None, year: Optional[int] = None) -> list[dict[str, Any]]:
        rows = [m for m in self.dataset.marks if m["learner_id"] == learner_id]
        if term is not None:
            rows = [m for m in rows if m["term"] == term]
        if year is not None:
            rows = [m for m in rows if m["year"] == year]
        return copy.deepcopy(rows)

    def get_lookup(self, lookup_type: str) -> list[dict[str, str]]:
        return copy.deepcopy(LOOKUPS.get(lookup_type.strip().lower(), []))

    def summary(self) -> dict[str, int]:
        ds = self.dataset
        return {
            "schools": len(ds.schools),
            "learners": len(ds.learners),
            "parents": len(ds.parents),
            "staff": len(ds.staff),
            "marks": len(ds.marks),
        }
