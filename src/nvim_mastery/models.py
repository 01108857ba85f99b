"""Data classes for the Neovim Mastery domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class CheckKind(str, Enum):
    """How a practice exercise is graded."""

    CURSOR_POSITION = "cursor_position"
    TEXT_CONTENT = "text_content"
    WORD_NAVIGATION = "word_navigation"
    VISUAL_SELECTION = "visual_selection"
    TEXT_OBJECTS = "text_objects"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CatalogEntry:
    id: int
    title: str
    description: str
    difficulty: Difficulty
    expected_time_min: int
    tags: frozenset = frozenset()
    acceptance_criteria: tuple = ()


@dataclass(frozen=True)
class FlashcardEntry:
    question: str
    choices: tuple
    correct_index: int
    hint: str = ""


@dataclass(frozen=True)
class PracticeExercise:
    id: int
    title: str
    description: str
    difficulty: Difficulty
    solution_check: CheckKind
    goals: tuple = ()
    hint: str = ""
    initial_text: str = ""
    target_line: Optional[int] = None
    target_column: Optional[int] = None
    expected_result: Optional[str] = None


@dataclass(frozen=True)
class Catalog:
    challenges: tuple = ()
    flashcards: tuple = ()
    practice_exercises: tuple = ()

    def get_challenge(self, challenge_id: int) -> Optional[CatalogEntry]:
        return next((c for c in self.challenges if c.id == challenge_id), None)

    def get_exercise(self, exercise_id: int) -> Optional[PracticeExercise]:
        return next((e for e in self.practice_exercises if e.id == exercise_id), None)

    @property
    def challenge_ids(self) -> frozenset:
        return frozenset(c.id for c in self.challenges)


@dataclass(frozen=True)
class ProgressSnapshot:
    completed_ids: frozenset = frozenset()
    last_updated: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class ExerciseStats:
    completed: int = 0
    success: int = 0


@dataclass(frozen=True)
class FilterState:
    search_term: str = ""
    difficulty_facet: str = "all"
    tag_facet: frozenset = frozenset()


@dataclass(frozen=True)
class Cursor:
    """Zero-based cursor position in the practice buffer."""

    line: int
    col: int


@dataclass(frozen=True)
class Verdict:
    success: bool
    message: str
    encouragement: str = ""


@dataclass(frozen=True)
class AppState:
    catalog: Catalog = Catalog()
    snapshot: ProgressSnapshot = ProgressSnapshot()
    exercise_stats: ExerciseStats = ExerciseStats()
    filters: FilterState = FilterState()
    notice: Optional[str] = None


@dataclass(frozen=True)
class CheatsheetCategory:
    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class CheatsheetSetting:
    setting: str
    value: str
    description: str = ""


@dataclass(frozen=True)
class CheatsheetKeybinding:
    keys: str
    action: str
    description: str = ""
    mode: str = "n"


@dataclass(frozen=True)
class CheatsheetItem:
    category: str
    title: str
    description: str = ""
    tags: tuple = ()
    keywords: tuple = ()
    settings: tuple = ()
    keybindings: tuple = ()


@dataclass(frozen=True)
class Cheatsheet:
    metadata: dict = field(default_factory=dict, hash=False)
    categories: tuple = ()
    items: tuple = ()
