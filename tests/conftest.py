import pytest

from nvim_mastery.models import CatalogEntry, Difficulty


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_progress.db")
    return db_path


def make_entry(id, difficulty=Difficulty.BEGINNER, tags=(), title=None, description=""):
    return CatalogEntry(
        id=id,
        title=title or f"Challenge {id}",
        description=description,
        difficulty=difficulty,
        expected_time_min=10,
        tags=frozenset(tags),
    )


@pytest.fixture
def sample_catalog():
    return [
        make_entry(1, Difficulty.BEGINNER, ["motions"], "Basic Motions", "Move with hjkl"),
        make_entry(2, Difficulty.BEGINNER, ["editing"], "Insert Mode", "Enter and leave insert mode"),
        make_entry(3, Difficulty.ADVANCED, ["macros", "registers"], "Macros", "Record and replay"),
        make_entry(4, Difficulty.EXPERT, ["lua"], "Lua Config", "Write init.lua"),
    ]
