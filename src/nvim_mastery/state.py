"""Application state and the actions that change it.

Every action takes the current ``AppState`` and returns the next one. Failures
are handled here: a broken content document yields an empty catalog with a
notice, and unknown ids are logged and ignored.
"""
import logging
from dataclasses import replace
from pathlib import Path

from nvim_mastery import progress
from nvim_mastery.content import CATALOG_PATH, ContentError, load_catalog
from nvim_mastery.evaluator import evaluate, record_submission
from nvim_mastery.filters import compute_visible, update_filters
from nvim_mastery.models import AppState, Catalog, CatalogEntry, Cursor, FilterState, Verdict
from nvim_mastery.storage import init_db

logger = logging.getLogger(__name__)

LOAD_FAILED_NOTICE = "Failed to load challenge data. Check the content file and restart."


def load_app_state(db_path: str, content_path: Path = CATALOG_PATH) -> AppState:
    init_db(db_path)
    try:
        catalog = load_catalog(content_path)
        notice = None
    except ContentError as e:
        logger.error("Error loading challenge data: %s", e)
        catalog = Catalog()
        notice = LOAD_FAILED_NOTICE
    snapshot = progress.restore(db_path)
    stale = snapshot.completed_ids - catalog.challenge_ids
    if stale:
        logger.warning("Ignoring completed ids not in the catalog: %s", sorted(stale))
        snapshot = replace(snapshot, completed_ids=snapshot.completed_ids & catalog.challenge_ids)
    return AppState(
        catalog=catalog,
        snapshot=snapshot,
        exercise_stats=progress.restore_exercise_stats(db_path),
        notice=notice,
    )


def visible_challenges(state: AppState) -> list[CatalogEntry]:
    return compute_visible(list(state.catalog.challenges), state.filters)


def apply_filters(state: AppState, **changes) -> AppState:
    return replace(state, filters=update_filters(state.filters, **changes))


def clear_filters(state: AppState) -> AppState:
    return replace(state, filters=FilterState())


def toggle_challenge(state: AppState, db_path: str, challenge_id: int) -> AppState:
    if state.catalog.get_challenge(challenge_id) is None:
        logger.warning("Cannot toggle unknown challenge %s", challenge_id)
        return state
    snapshot = progress.toggle_completion(state.snapshot, challenge_id)
    progress.persist(db_path, snapshot)
    return replace(state, snapshot=snapshot)


def complete_challenge(state: AppState, db_path: str, challenge_id: int) -> AppState:
    if state.catalog.get_challenge(challenge_id) is None:
        logger.warning("Cannot complete unknown challenge %s", challenge_id)
        return state
    snapshot = progress.mark_completed(state.snapshot, challenge_id)
    progress.persist(db_path, snapshot)
    return replace(state, snapshot=snapshot)


def reset_progress(state: AppState, db_path: str) -> AppState:
    """Erase completion progress. Callers confirm with the user first."""
    return replace(state, snapshot=progress.reset(db_path))


def submit_exercise(
    state: AppState, db_path: str, exercise_id: int, final_text: str, cursor: Cursor,
) -> tuple[AppState, Verdict | None]:
    exercise = state.catalog.get_exercise(exercise_id)
    if exercise is None:
        logger.warning("Cannot submit unknown exercise %s", exercise_id)
        return state, None
    verdict = evaluate(exercise, final_text, cursor)
    stats = record_submission(state.exercise_stats, verdict)
    progress.persist_exercise_stats(db_path, stats)
    return replace(state, exercise_stats=stats), verdict


def export_progress(state: AppState, directory: str | Path) -> Path:
    document = progress.export_snapshot(state.snapshot, len(state.catalog.challenges))
    return progress.write_export(directory, document)
