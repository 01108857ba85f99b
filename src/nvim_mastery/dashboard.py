"""Mastery dashboard labels and statistics."""
from nvim_mastery.filters import difficulty_counts
from nvim_mastery.models import AppState
from nvim_mastery.progress import round_percent, success_rate


def get_mastery_label(score: float) -> str:
    if score >= 80:
        return "MASTER"
    elif score >= 65:
        return "PROFICIENT"
    elif score >= 50:
        return "LEARNING"
    return "BEGINNER"


def get_mastery_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 65:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def get_difficulty_breakdown(state: AppState) -> list[dict]:
    """Completed vs total challenges per difficulty."""
    counts = difficulty_counts(list(state.catalog.challenges))
    results = []
    for difficulty, total in counts.items():
        if difficulty == "all":
            continue
        done = sum(
            1 for c in state.catalog.challenges
            if c.difficulty == difficulty and c.id in state.snapshot.completed_ids
        )
        results.append({"difficulty": difficulty, "completed": done, "total": total})
    return results


def get_progress_summary(state: AppState) -> dict:
    total = len(state.catalog.challenges)
    completed = len(state.snapshot.completed_ids & state.catalog.challenge_ids)
    pct = round_percent(completed, total)
    return {
        "completed": completed,
        "total": total,
        "percentage": pct,
        "label": get_mastery_label(pct),
        "exercises_completed": state.exercise_stats.completed,
        "exercise_success_rate": success_rate(state.exercise_stats),
        "last_updated": state.snapshot.last_updated,
    }
