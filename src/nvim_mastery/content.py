"""Load and validate the bundled challenge catalog and cheatsheet."""
import json
import logging
from pathlib import Path
from typing import Any

from nvim_mastery.models import (
    Catalog, CatalogEntry, Cheatsheet, CheatsheetCategory, CheatsheetItem,
    CheatsheetKeybinding, CheatsheetSetting, CheckKind, Difficulty,
    FlashcardEntry, PracticeExercise,
)

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "data"
CATALOG_PATH = CONTENT_DIR / "neovim-mastery.json"
CHEATSHEET_PATH = CONTENT_DIR / "cheatsheet.json"


class ContentError(ValueError):
    """Raised when a content document is missing, unreadable or malformed."""


def read_document(path: Path) -> dict:
    """Parse a JSON or YAML document into a dict."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ContentError(f"Cannot read {path}: {e}") from e

    if path.suffix.lower() in (".yaml", ".yml"):
        import yaml
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ContentError(f"Invalid YAML in {path}: {e}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ContentError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ContentError(f"{path} must contain an object at the top level")
    return data


def _require(raw: dict, key: str, where: str) -> Any:
    if key not in raw or raw[key] is None:
        raise ContentError(f"{where} is missing '{key}'")
    return raw[key]


def _int_field(raw: dict, key: str, where: str) -> int:
    value = _require(raw, key, where)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ContentError(f"{where} has non-integer '{key}': {value!r}")
    return value


def _strings(raw: dict, key: str, where: str) -> tuple:
    value = raw.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ContentError(f"{where} has '{key}' that is not a list: {value!r}")
    return tuple(str(item) for item in value)


def _entries(data: dict, key: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ContentError(f"'{key}' must be a list, got {type(value).__name__}")
    for index, raw in enumerate(value):
        if not isinstance(raw, dict):
            raise ContentError(f"'{key}' entry {index} must be an object: {raw!r}")
    return value


def _difficulty(raw: dict, where: str) -> Difficulty:
    value = _require(raw, "difficulty", where)
    try:
        return Difficulty(value)
    except ValueError:
        raise ContentError(f"{where} has unknown difficulty {value!r}") from None


def _challenge_from_dict(raw: dict) -> CatalogEntry:
    where = f"Challenge {raw.get('id', '<unknown>')}"
    expected_time = _int_field(raw, "expected_time_min", where)
    if expected_time <= 0:
        raise ContentError(f"{where} must have a positive expected_time_min")
    return CatalogEntry(
        id=_int_field(raw, "id", where),
        title=str(_require(raw, "title", where)),
        description=str(raw.get("description", "")),
        difficulty=_difficulty(raw, where),
        expected_time_min=expected_time,
        tags=frozenset(_strings(raw, "tags", where)),
        acceptance_criteria=_strings(raw, "acceptance_criteria", where),
    )


def _flashcard_from_dict(index: int, raw: dict) -> FlashcardEntry:
    where = f"Flashcard {index}"
    raw_choices = _require(raw, "choices", where)
    if not isinstance(raw_choices, list):
        raise ContentError(f"{where} has 'choices' that is not a list: {raw_choices!r}")
    choices = tuple(str(c) for c in raw_choices)
    if len(choices) < 2:
        raise ContentError(f"{where} needs at least two choices")
    correct = _int_field(raw, "correct_index", where)
    if not 0 <= correct < len(choices):
        raise ContentError(f"{where} has out-of-range correct_index {correct}")
    return FlashcardEntry(
        question=str(_require(raw, "question", where)),
        choices=choices,
        correct_index=correct,
        hint=str(raw.get("hint", "")),
    )


def _exercise_from_dict(raw: dict) -> PracticeExercise:
    where = f"Exercise {raw.get('id', '<unknown>')}"
    check_value = str(_require(raw, "solution_check", where))
    try:
        check = CheckKind(check_value)
    except ValueError:
        logger.warning("%s uses unrecognized solution_check %r", where, check_value)
        check = CheckKind.UNKNOWN

    target_line = target_column = expected = None
    if check is CheckKind.CURSOR_POSITION:
        target_line = _int_field(raw, "target_line", where)
        target_column = _int_field(raw, "target_column", where)
    elif check is CheckKind.TEXT_CONTENT:
        expected = str(_require(raw, "expected_result", where))

    return PracticeExercise(
        id=_int_field(raw, "id", where),
        title=str(_require(raw, "title", where)),
        description=str(raw.get("description", "")),
        difficulty=_difficulty(raw, where),
        solution_check=check,
        goals=_strings(raw, "goals", where),
        hint=str(raw.get("hint", "")),
        initial_text=str(raw.get("initial_text", "")),
        target_line=target_line,
        target_column=target_column,
        expected_result=expected,
    )


def _check_unique(ids: list, kind: str) -> None:
    seen = set()
    for item_id in ids:
        if item_id in seen:
            raise ContentError(f"Duplicate {kind} id: {item_id}")
        seen.add(item_id)


def parse_catalog(data: dict) -> Catalog:
    """Build a validated catalog from a decoded document."""
    challenges = [_challenge_from_dict(c) for c in _entries(data, "challenges")]
    flashcards = [_flashcard_from_dict(i, f) for i, f in enumerate(_entries(data, "flashcards_sample"))]
    exercises = [_exercise_from_dict(e) for e in _entries(data, "practice_exercises")]
    _check_unique([c.id for c in challenges], "challenge")
    _check_unique([e.id for e in exercises], "exercise")
    return Catalog(
        challenges=tuple(challenges),
        flashcards=tuple(flashcards),
        practice_exercises=tuple(exercises),
    )


def load_catalog(path: Path = CATALOG_PATH) -> Catalog:
    """Load the challenge catalog. Raises ContentError on any problem."""
    data = read_document(path)
    if "challenges" not in data:
        raise ContentError(f"{path} has no 'challenges' list")
    catalog = parse_catalog(data)
    logger.info(
        "Loaded %d challenges, %d flashcards, %d exercises",
        len(catalog.challenges), len(catalog.flashcards), len(catalog.practice_exercises),
    )
    return catalog


def _cheatsheet_item_from_dict(raw: dict) -> CheatsheetItem:
    where = f"Cheatsheet item {raw.get('title', '<untitled>')!r}"
    content = raw.get("content") or {}
    settings = tuple(
        CheatsheetSetting(
            setting=str(s["setting"]), value=str(s.get("value", "")),
            description=str(s.get("description", "")),
        )
        for s in content.get("settings") or []
    )
    keybindings = tuple(
        CheatsheetKeybinding(
            keys=str(k["keys"]), action=str(k.get("action", "")),
            description=str(k.get("description", "")), mode=str(k.get("mode", "n")),
        )
        for k in content.get("keybindings") or []
    )
    return CheatsheetItem(
        category=str(_require(raw, "category", where)),
        title=str(_require(raw, "title", where)),
        description=str(raw.get("description", "")),
        tags=_strings(raw, "tags", where),
        keywords=_strings(raw, "keywords", where),
        settings=settings,
        keybindings=keybindings,
    )


def load_cheatsheet(path: Path = CHEATSHEET_PATH) -> Cheatsheet:
    data = read_document(path)
    if not data.get("metadata") or "categories" not in data or "items" not in data:
        raise ContentError("Invalid cheatsheet data structure")
    try:
        items = tuple(_cheatsheet_item_from_dict(item) for item in _entries(data, "items"))
        categories = tuple(
            CheatsheetCategory(
                id=str(c["id"]), name=str(c.get("name", c["id"])),
                description=str(c.get("description", "")),
            )
            for c in _entries(data, "categories")
        )
    except KeyError as e:
        raise ContentError(f"Cheatsheet entry is missing {e}") from e
    logger.info("Loaded %d cheatsheet items", len(items))
    return Cheatsheet(metadata=dict(data["metadata"]), categories=categories, items=items)
