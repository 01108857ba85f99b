# tests/test_state.py
"""End-to-end tests of the application actions."""
import json

from nvim_mastery import state as actions
from nvim_mastery.models import Cursor
from nvim_mastery.progress import PROGRESS_KEY, restore, restore_exercise_stats
from nvim_mastery.storage import get_item, init_db, set_item


def test_load_bundled_state(tmp_db):
    state = actions.load_app_state(tmp_db)
    assert state.notice is None
    assert state.catalog.challenges
    assert state.snapshot.completed_ids == frozenset()


def test_load_failure_gives_empty_catalog_and_notice(tmp_db, tmp_path):
    state = actions.load_app_state(tmp_db, tmp_path / "missing.json")
    assert state.catalog.challenges == ()
    assert state.notice == actions.LOAD_FAILED_NOTICE
    assert actions.visible_challenges(state) == []


def test_load_restores_saved_progress(tmp_db):
    init_db(tmp_db)
    set_item(tmp_db, PROGRESS_KEY, json.dumps({"completedChallenges": [1, 2]}))
    state = actions.load_app_state(tmp_db)
    assert state.snapshot.completed_ids == frozenset({1, 2})


def test_load_with_corrupt_progress(tmp_db):
    init_db(tmp_db)
    set_item(tmp_db, PROGRESS_KEY, "garbage")
    state = actions.load_app_state(tmp_db)
    assert state.snapshot.completed_ids == frozenset()
    assert state.notice is None


def test_toggle_persists(tmp_db):
    state = actions.load_app_state(tmp_db)
    state = actions.toggle_challenge(state, tmp_db, 1)
    assert restore(tmp_db).completed_ids == frozenset({1})
    state = actions.toggle_challenge(state, tmp_db, 1)
    assert restore(tmp_db).completed_ids == frozenset()


def test_toggle_unknown_id_is_noop(tmp_db):
    state = actions.load_app_state(tmp_db)
    assert actions.toggle_challenge(state, tmp_db, 9999) is state
    assert get_item(tmp_db, PROGRESS_KEY) is None


def test_toggle_works_on_full_catalog_not_filtered_view(tmp_db):
    state = actions.load_app_state(tmp_db)
    state = actions.apply_filters(state, search_term="no challenge matches this")
    assert actions.visible_challenges(state) == []
    state = actions.toggle_challenge(state, tmp_db, 1)
    assert 1 in state.snapshot.completed_ids


def test_filters_and_clear(tmp_db):
    state = actions.load_app_state(tmp_db)
    state = actions.apply_filters(state, difficulty="Beginner")
    visible = actions.visible_challenges(state)
    assert visible
    assert all(c.difficulty == "Beginner" for c in visible)
    state = actions.clear_filters(state)
    assert len(actions.visible_challenges(state)) == len(state.catalog.challenges)


def test_complete_challenge(tmp_db):
    state = actions.load_app_state(tmp_db)
    state = actions.complete_challenge(state, tmp_db, 2)
    state = actions.complete_challenge(state, tmp_db, 2)
    assert restore(tmp_db).completed_ids == frozenset({2})


def test_submit_exercise_updates_stats(tmp_db):
    state = actions.load_app_state(tmp_db)
    text_ex = next(e for e in state.catalog.practice_exercises if e.expected_result is not None)
    state, verdict = actions.submit_exercise(state, tmp_db, text_ex.id, text_ex.expected_result, Cursor(0, 0))
    assert verdict.success
    state, verdict = actions.submit_exercise(state, tmp_db, text_ex.id, "wrong", Cursor(0, 0))
    assert not verdict.success
    assert state.exercise_stats.completed == 2
    assert state.exercise_stats.success == 1
    assert restore_exercise_stats(tmp_db) == state.exercise_stats


def test_submit_unknown_exercise(tmp_db):
    state = actions.load_app_state(tmp_db)
    new_state, verdict = actions.submit_exercise(state, tmp_db, 9999, "", Cursor(0, 0))
    assert verdict is None
    assert new_state is state


def test_reset_progress(tmp_db):
    state = actions.load_app_state(tmp_db)
    state = actions.toggle_challenge(state, tmp_db, 1)
    state = actions.reset_progress(state, tmp_db)
    assert state.snapshot.completed_ids == frozenset()
    assert get_item(tmp_db, PROGRESS_KEY) is None


def test_export_progress(tmp_db, tmp_path):
    state = actions.load_app_state(tmp_db)
    state = actions.toggle_challenge(state, tmp_db, 1)
    path = actions.export_progress(state, tmp_path / "exports")
    document = json.loads(path.read_text())
    assert document["completedChallenges"] == [1]
    assert document["totalChallenges"] == len(state.catalog.challenges)


def test_load_malformed_catalog_shape_gives_notice(tmp_db, tmp_path):
    for document in ({"challenges": ["oops"]}, {"challenges": "abc"}):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(document))
        state = actions.load_app_state(tmp_db, path)
        assert state.catalog.challenges == ()
        assert state.notice == actions.LOAD_FAILED_NOTICE


def test_load_drops_ids_missing_from_catalog(tmp_db):
    init_db(tmp_db)
    set_item(tmp_db, PROGRESS_KEY, json.dumps({"completedChallenges": [1] + list(range(1000, 1100))}))
    state = actions.load_app_state(tmp_db)
    assert state.snapshot.completed_ids == frozenset({1})
    assert state.snapshot.completed_ids <= state.catalog.challenge_ids


def test_export_percentage_ignores_stale_ids(tmp_db, tmp_path):
    init_db(tmp_db)
    set_item(tmp_db, PROGRESS_KEY, json.dumps({"completedChallenges": list(range(1000, 1100))}))
    state = actions.load_app_state(tmp_db)
    document = json.loads(actions.export_progress(state, tmp_path).read_text())
    assert document["completedChallenges"] == []
    assert document["completionPercentage"] == 0
