"""
Mock provider: fixed structure, random content, consistent relationships.
"""

from collections import Counter

from d6bridge.data.mock_data import (
    LEARNERS_PER_SCHOOL,
    SCHOOLS,
    STAFF_PER_SCHOOL,
    MockDataProvider,
    build_dataset,
    parents_for_learner,
    subjects_for_grade,
)


def _shape(ds):
    return {
        "schools": len(ds.schools),
        "learners": len(ds.learners),
        "parents": len(ds.parents),
        "staff": len(ds.staff),
        "marks": len(ds.marks),
        "parents_per_learner": [sum(1 for k in ("parent1_id", "parent2_id") if l[k]) for l in ds.learners],
        "marks_per_learner": sorted(Counter(m["learner_id"] for m in ds.marks).items()),
    }


def test_two_builds_share_structure_not_content():
    first = build_dataset()
    second = build_dataset()

    assert _shape(first) == _shape(second)
    names_first = [(l["first_name"], l["last_name"]) for l in first.learners]
    names_second = [(l["first_name"], l["last_name"]) for l in second.learners]
    assert names_first != names_second or [m["mark_value"] for m in first.marks] != [m["mark_value"] for m in second.marks]


def test_record_counts():
    ds = build_dataset(seed=1)
    n_learners = len(SCHOOLS) * LEARNERS_PER_SCHOOL

    assert len(ds.schools) == len(SCHOOLS)
    assert len(ds.learners) == n_learners
    assert len(ds.staff) == len(SCHOOLS) * STAFF_PER_SCHOOL
    assert len(ds.parents) == sum(parents_for_learner(n) for n in range(n_learners))


def test_parent_links_are_consistent_both_ways():
    ds = build_dataset(seed=2)
    parents = {p["id"]: p for p in ds.parents}

    links = 0
    for learner in ds.learners:
        for key in ("parent1_id", "parent2_id"):
            pid = learner[key]
            if pid is None:
                continue
            links += 1
            assert parents[pid]["learner_ids"] == [learner["id"]]
            assert parents[pid]["school_id"] == learner["school_id"]
        assert learner["accountable_person_id"] == learner["parent1_id"]

    assert links == len(ds.parents)


def test_marks_follow_grade_subjects():
    ds = build_dataset(seed=3)
    learners = {l["id"]: l for l in ds.learners}

    per_learner = Counter(m["learner_id"] for m in ds.marks)
    for learner_id, count in per_learner.items():
        grade = learners[learner_id]["grade"]
        assert count == 4 * len(subjects_for_grade(grade))

    for mark in ds.marks:
        allowed = {code for code, _ in subjects_for_grade(learners[mark["learner_id"]]["grade"])}
        assert mark["subject_code"] in allowed
        assert 0 <= mark["mark_value"] <= mark["total_marks"]


def test_learners_filtered_by_school_and_paged():
    provider = MockDataProvider(seed=4)

    page = provider.get_learners(1001, limit=5, offset=10)
    everything = provider.get_learners(1001, limit=1000)

    assert len(page) == 5
    assert page == everything[10:15]
    assert {l["school_id"] for l in everything} == {1001}
    assert len(everything) == LEARNERS_PER_SCHOOL


def test_unknown_ids_yield_empty_collections():
    provider = MockDataProvider(seed=5)

    assert provider.get_learners(9999) == []
    assert provider.get_staff(9999) == []
    assert provider.get_parents(9999) == []
    assert provider.get_marks(1) == []
    assert provider.get_lookup("nonsense") == []
    assert provider.get_learner(1) is None


def test_marks_filter_by_term_and_year():
    provider = MockDataProvider(seed=6)
    year = provider.dataset.academic_year

    term2 = provider.get_marks(2000, term=2)
    assert term2 and {m["term"] for m in term2} == {2}
    assert provider.get_marks(2000, year=year - 1) == []
    assert len(provider.get_marks(2000, term=2, year=year)) == len(term2)


def test_returned_records_are_copies():
    provider = MockDataProvider(seed=8)

    provider.get_learners(1000)[0]["first_name"] = "Mutated"
    provider.get_lookup("genders").clear()

    assert provider.get_learners(1000)[0]["first_name"] != "Mutated"
    assert provider.get_lookup("genders") == [{"id": "M", "name": "Male"}, {"id": "F", "name": "Female"}]


def test_lookup_subjects_cover_every_phase():
    provider = MockDataProvider()
    codes = {s["id"] for s in provider.get_lookup("subjects")}

    for grade in ["R", "5", "8", "12"]:
        assert {code for code, _ in subjects_for_grade(grade)} <= codes
    assert provider.get_lookup(" Grades ")[0] == {"id": "R", "name": "Grade R"}
