"""Grade practice exercises from the final buffer text and cursor position."""
import logging
import random
from collections.abc import Callable

from nvim_mastery.models import CheckKind, Cursor, ExerciseStats, PracticeExercise, Verdict

logger = logging.getLogger(__name__)

COLUMN_TOLERANCE = 2

ENCOURAGEMENTS = [
    "Outstanding work!",
    "You're becoming a Vim master!",
    "Excellent progress!",
    "Strong Vim skills!",
    "Perfect execution!",
    "You're on fire!",
    "Stellar performance!",
]


def _check_cursor_position(exercise: PracticeExercise, text: str, cursor: Cursor) -> tuple[bool, str]:
    target_line = exercise.target_line - 1
    success = (
        cursor.line == target_line
        and abs(cursor.col - exercise.target_column) <= COLUMN_TOLERANCE
    )
    if success:
        return True, f"Perfect! You navigated to line {cursor.line + 1}, column {cursor.col + 1}!"
    return False, (
        f"Try to reach line {exercise.target_line}, column {exercise.target_column}. "
        f"You're at {cursor.line + 1}:{cursor.col + 1}"
    )


def _check_text_content(exercise: PracticeExercise, text: str, cursor: Cursor) -> tuple[bool, str]:
    if text.strip() == (exercise.expected_result or "").strip():
        return True, "Excellent! Your text matches the expected result!"
    return False, "The text doesn't quite match. Check your edits and try again."


# Word navigation, visual selection and text objects leave nothing in the
# final buffer to verify, so taking part is enough.
def _check_word_navigation(exercise, text, cursor):
    return True, "Great job practicing word navigation! Keep using w, b, and e to master word movements."


def _check_visual_selection(exercise, text, cursor):
    return True, "Well done! Visual mode is powerful for selecting and manipulating text."


def _check_text_objects(exercise, text, cursor):
    return True, "Excellent! Text objects make vim editing incredibly efficient."


def _check_unknown(exercise, text, cursor):
    logger.info("Exercise %s has no specific check, accepting submission", exercise.id)
    return True, "Exercise completed! Keep practicing to master these skills."


CHECKS: dict[CheckKind, Callable[[PracticeExercise, str, Cursor], tuple[bool, str]]] = {
    CheckKind.CURSOR_POSITION: _check_cursor_position,
    CheckKind.TEXT_CONTENT: _check_text_content,
    CheckKind.WORD_NAVIGATION: _check_word_navigation,
    CheckKind.VISUAL_SELECTION: _check_visual_selection,
    CheckKind.TEXT_OBJECTS: _check_text_objects,
    CheckKind.UNKNOWN: _check_unknown,
}

_missing = set(CheckKind) - set(CHECKS)
if _missing:
    raise RuntimeError(f"No grading handler for {sorted(k.value for k in _missing)}")


def evaluate(
    exercise: PracticeExercise,
    final_text: str,
    cursor: Cursor,
    rng: random.Random | None = None,
) -> Verdict:
    """Grade one submission. Never raises for a loaded exercise."""
    success, message = CHECKS[exercise.solution_check](exercise, final_text, cursor)
    encouragement = (rng or random).choice(ENCOURAGEMENTS) if success else ""
    logger.debug("Exercise %s graded %s", exercise.id, "pass" if success else "fail")
    return Verdict(success=success, message=message, encouragement=encouragement)


def record_submission(stats: ExerciseStats, verdict: Verdict) -> ExerciseStats:
    return ExerciseStats(
        completed=stats.completed + 1,
        success=stats.success + (1 if verdict.success else 0),
    )
