# tests/test_progress.py
import json

from nvim_mastery.models import ExerciseStats, ProgressSnapshot
from nvim_mastery.progress import (
    EXERCISE_PROGRESS_KEY, PROGRESS_KEY, completion_percentage, export_filename,
    export_snapshot, is_completed, mark_completed, persist, persist_exercise_stats,
    reset, restore, restore_exercise_stats, round_percent, success_rate, suggest_next,
    toggle_completion, write_export,
)
from nvim_mastery.storage import get_item, init_db, set_item
from conftest import make_entry


def test_toggle_adds_and_removes():
    snap = toggle_completion(ProgressSnapshot(), 3)
    assert is_completed(snap, 3)
    snap = toggle_completion(snap, 3)
    assert not is_completed(snap, 3)


def test_toggle_twice_is_identity():
    original = ProgressSnapshot(completed_ids=frozenset({1, 2}))
    assert toggle_completion(toggle_completion(original, 5), 5) == original
    assert toggle_completion(toggle_completion(original, 1), 1) == original


def test_toggle_sets_last_updated():
    snap = toggle_completion(ProgressSnapshot(), 1)
    assert snap.last_updated is not None


def test_mark_completed_is_idempotent():
    snap = mark_completed(mark_completed(ProgressSnapshot(), 4), 4)
    assert snap.completed_ids == frozenset({4})


def test_persist_restore_round_trip(tmp_db):
    init_db(tmp_db)
    snap = ProgressSnapshot(completed_ids=frozenset({1, 5, 9}), last_updated="2025-03-01T10:00:00+00:00")
    persist(tmp_db, snap)
    restored = restore(tmp_db)
    assert restored == snap
    assert restored.last_updated == "2025-03-01T10:00:00+00:00"


def test_persisted_document_shape(tmp_db):
    init_db(tmp_db)
    persist(tmp_db, ProgressSnapshot(completed_ids=frozenset({2, 1})))
    document = json.loads(get_item(tmp_db, PROGRESS_KEY))
    assert document["completedChallenges"] == [1, 2]
    assert "lastUpdated" in document


def test_restore_without_saved_progress(tmp_db):
    init_db(tmp_db)
    assert restore(tmp_db) == ProgressSnapshot()


def test_restore_garbage_returns_empty(tmp_db):
    init_db(tmp_db)
    set_item(tmp_db, PROGRESS_KEY, "{{{ not json")
    assert restore(tmp_db).completed_ids == frozenset()


def test_restore_wrong_shape_returns_empty(tmp_db):
    init_db(tmp_db)
    set_item(tmp_db, PROGRESS_KEY, json.dumps({"completedChallenges": ["a", "b"]}))
    assert restore(tmp_db) == ProgressSnapshot()
    set_item(tmp_db, PROGRESS_KEY, json.dumps([1, 2, 3]))
    assert restore(tmp_db) == ProgressSnapshot()


def test_reset_erases_key(tmp_db):
    init_db(tmp_db)
    persist(tmp_db, ProgressSnapshot(completed_ids=frozenset({1})))
    snap = reset(tmp_db)
    assert snap.completed_ids == frozenset()
    assert get_item(tmp_db, PROGRESS_KEY) is None


def test_completion_percentage_zero_total():
    assert completion_percentage(ProgressSnapshot(), 0) == 0


def test_round_percent_rounds_half_up():
    assert round_percent(1, 8) == 13  # 12.5
    assert round_percent(1, 3) == 33
    assert round_percent(2, 3) == 67


def test_export_snapshot():
    snap = ProgressSnapshot(completed_ids=frozenset({1, 4, 7}))
    export = export_snapshot(snap, 10)
    assert export["completionPercentage"] == 30
    assert export["completedChallenges"] == [1, 4, 7]
    assert export["totalChallenges"] == 10
    assert export["platform"] == "Neovim Mastery"
    assert export["exportDate"]


def test_export_does_not_mutate():
    snap = ProgressSnapshot(completed_ids=frozenset({1}))
    export_snapshot(snap, 2)
    assert snap.completed_ids == frozenset({1})


def test_write_export(tmp_path):
    export = export_snapshot(ProgressSnapshot(completed_ids=frozenset({2})), 4)
    path = write_export(tmp_path, export)
    assert path.name == export_filename(export)
    assert path.name.startswith("neovim-mastery-progress-")
    assert json.loads(path.read_text())["completionPercentage"] == 25


def test_suggest_next_skips_completed_and_current():
    challenges = [make_entry(1), make_entry(2), make_entry(3)]
    snap = ProgressSnapshot(completed_ids=frozenset({1}))
    assert suggest_next(challenges, snap, current_id=2).id == 3
    assert suggest_next(challenges, snap).id == 2
    done = ProgressSnapshot(completed_ids=frozenset({1, 2, 3}))
    assert suggest_next(challenges, done) is None


def test_success_rate():
    assert success_rate(ExerciseStats()) == 0
    assert success_rate(ExerciseStats(completed=3, success=2)) == 67


def test_exercise_stats_round_trip(tmp_db):
    init_db(tmp_db)
    persist_exercise_stats(tmp_db, ExerciseStats(completed=5, success=3))
    assert restore_exercise_stats(tmp_db) == ExerciseStats(completed=5, success=3)
    document = json.loads(get_item(tmp_db, EXERCISE_PROGRESS_KEY))
    assert document["exerciseStats"] == {"completed": 5, "success": 3}


def test_exercise_stats_independent_of_progress(tmp_db):
    init_db(tmp_db)
    persist_exercise_stats(tmp_db, ExerciseStats(completed=1, success=1))
    reset(tmp_db)
    assert restore_exercise_stats(tmp_db).completed == 1


def test_exercise_stats_corrupt_returns_default(tmp_db):
    init_db(tmp_db)
    set_item(tmp_db, EXERCISE_PROGRESS_KEY, "nope")
    assert restore_exercise_stats(tmp_db) == ExerciseStats()
    set_item(tmp_db, EXERCISE_PROGRESS_KEY, json.dumps({"exerciseStats": {"completed": 1, "success": 4}}))
    assert restore_exercise_stats(tmp_db) == ExerciseStats()
