# tests/test_dashboard.py
from nvim_mastery.dashboard import (
    get_difficulty_breakdown, get_mastery_color, get_mastery_label, get_progress_summary,
)
from nvim_mastery.models import AppState, Catalog, ExerciseStats, ProgressSnapshot


def test_mastery_label():
    assert get_mastery_label(85) == "MASTER"
    assert get_mastery_label(70) == "PROFICIENT"
    assert get_mastery_label(55) == "LEARNING"
    assert get_mastery_label(40) == "BEGINNER"


def test_mastery_color():
    assert get_mastery_color(80) == "green"
    assert get_mastery_color(10) == "red"


def test_summary_with_no_catalog():
    summary = get_progress_summary(AppState())
    assert summary["percentage"] == 0
    assert summary["total"] == 0
    assert summary["exercise_success_rate"] == 0


def test_summary_counts(sample_catalog):
    state = AppState(
        catalog=Catalog(challenges=tuple(sample_catalog)),
        snapshot=ProgressSnapshot(completed_ids=frozenset({1, 3})),
        exercise_stats=ExerciseStats(completed=4, success=3),
    )
    summary = get_progress_summary(state)
    assert summary["completed"] == 2
    assert summary["percentage"] == 50
    assert summary["label"] == "LEARNING"
    assert summary["exercise_success_rate"] == 75


def test_summary_ignores_stale_ids(sample_catalog):
    state = AppState(
        catalog=Catalog(challenges=tuple(sample_catalog)),
        snapshot=ProgressSnapshot(completed_ids=frozenset({1, 99})),
    )
    assert get_progress_summary(state)["completed"] == 1


def test_difficulty_breakdown(sample_catalog):
    state = AppState(
        catalog=Catalog(challenges=tuple(sample_catalog)),
        snapshot=ProgressSnapshot(completed_ids=frozenset({2, 4})),
    )
    rows = {r["difficulty"]: r for r in get_difficulty_breakdown(state)}
    assert rows["Beginner"] == {"difficulty": "Beginner", "completed": 1, "total": 2}
    assert rows["Expert"]["completed"] == 1
    assert rows["Intermediate"]["total"] == 0
