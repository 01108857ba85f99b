"""Challenge completion tracking and exercise statistics persistence."""
import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path

from nvim_mastery.models import CatalogEntry, ExerciseStats, ProgressSnapshot
from nvim_mastery.storage import get_item, remove_item, set_item

logger = logging.getLogger(__name__)

PROGRESS_KEY = "neovim-mastery-progress"
EXERCISE_PROGRESS_KEY = "neovim-mastery-exercise-progress"
PLATFORM_NAME = "Neovim Mastery"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def round_percent(part: int, whole: int) -> int:
    """Percentage rounded half up; 0 when there is nothing to divide by."""
    if whole == 0:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


def is_completed(snapshot: ProgressSnapshot, challenge_id: int) -> bool:
    return challenge_id in snapshot.completed_ids


def toggle_completion(snapshot: ProgressSnapshot, challenge_id: int) -> ProgressSnapshot:
    """Flip whether a challenge is marked complete."""
    ids = set(snapshot.completed_ids)
    if challenge_id in ids:
        ids.discard(challenge_id)
    else:
        ids.add(challenge_id)
    return ProgressSnapshot(completed_ids=frozenset(ids), last_updated=_now_iso())


def mark_completed(snapshot: ProgressSnapshot, challenge_id: int) -> ProgressSnapshot:
    return ProgressSnapshot(
        completed_ids=snapshot.completed_ids | {challenge_id},
        last_updated=_now_iso(),
    )


def completion_percentage(snapshot: ProgressSnapshot, total_entries: int) -> int:
    return round_percent(len(snapshot.completed_ids), total_entries)


def persist(db_path: str, snapshot: ProgressSnapshot) -> None:
    """Write the snapshot over whatever was stored before."""
    document = {
        "completedChallenges": sorted(snapshot.completed_ids),
        "lastUpdated": snapshot.last_updated or _now_iso(),
    }
    set_item(db_path, PROGRESS_KEY, json.dumps(document))


def restore(db_path: str) -> ProgressSnapshot:
    """Read the stored snapshot, falling back to an empty one if absent or corrupt."""
    saved = get_item(db_path, PROGRESS_KEY)
    if saved is None:
        return ProgressSnapshot()
    try:
        document = json.loads(saved)
        ids = document.get("completedChallenges") or []
        if not all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
            raise ValueError(f"non-integer challenge id in {ids!r}")
        return ProgressSnapshot(
            completed_ids=frozenset(ids),
            last_updated=document.get("lastUpdated"),
        )
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning("Failed to load progress, starting fresh: %s", e)
        return ProgressSnapshot()


def reset(db_path: str) -> ProgressSnapshot:
    """Clear all completion state and erase the stored key."""
    remove_item(db_path, PROGRESS_KEY)
    return ProgressSnapshot()


def export_snapshot(snapshot: ProgressSnapshot, total_entries: int) -> dict:
    return {
        "completedChallenges": sorted(snapshot.completed_ids),
        "totalChallenges": total_entries,
        "completionPercentage": completion_percentage(snapshot, total_entries),
        "exportDate": _now_iso(),
        "platform": PLATFORM_NAME,
    }


def export_filename(export: dict) -> str:
    return f"neovim-mastery-progress-{export['exportDate'][:10]}.json"


def write_export(directory: str | Path, export: dict) -> Path:
    """Write an export document into a directory and return its path."""
    path = Path(directory) / export_filename(export)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(export, indent=2), encoding="utf-8")
    return path


def suggest_next(
    challenges: list[CatalogEntry], snapshot: ProgressSnapshot, current_id: int | None = None,
) -> CatalogEntry | None:
    """First challenge not yet completed, skipping the one just finished."""
    return next(
        (c for c in challenges if c.id not in snapshot.completed_ids and c.id != current_id),
        None,
    )


def success_rate(stats: ExerciseStats) -> int:
    return round_percent(stats.success, stats.completed)


def persist_exercise_stats(db_path: str, stats: ExerciseStats) -> None:
    document = {
        "exerciseStats": {"completed": stats.completed, "success": stats.success},
        "lastUpdated": _now_iso(),
    }
    set_item(db_path, EXERCISE_PROGRESS_KEY, json.dumps(document))


def restore_exercise_stats(db_path: str) -> ExerciseStats:
    saved = get_item(db_path, EXERCISE_PROGRESS_KEY)
    if saved is None:
        return ExerciseStats()
    try:
        raw = json.loads(saved)["exerciseStats"]
        completed = int(raw.get("completed", 0))
        success = int(raw.get("success", 0))
        if completed < 0 or not 0 <= success <= completed:
            raise ValueError(f"inconsistent counts {completed}/{success}")
        return ExerciseStats(completed=completed, success=success)
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.warning("Failed to load exercise progress, starting fresh: %s", e)
        return ExerciseStats()
