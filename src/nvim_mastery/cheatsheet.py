"""Cheatsheet lookup and search."""
from datetime import datetime

from nvim_mastery.models import (
    Cheatsheet, CheatsheetCategory, CheatsheetItem, CheatsheetKeybinding, CheatsheetSetting,
)


def has_settings_in_category(cheatsheet: Cheatsheet, category_id: str) -> bool:
    return any(item.category == category_id and item.settings for item in cheatsheet.items)


def has_keybindings_in_category(cheatsheet: Cheatsheet, category_id: str) -> bool:
    return any(item.category == category_id and item.keybindings for item in cheatsheet.items)


def settings_for_category(cheatsheet: Cheatsheet, category_id: str) -> list[CheatsheetItem]:
    return [item for item in cheatsheet.items if item.category == category_id and item.settings]


def keybindings_for_category(cheatsheet: Cheatsheet, category_id: str) -> list[CheatsheetItem]:
    return [item for item in cheatsheet.items if item.category == category_id and item.keybindings]


def category_by_id(cheatsheet: Cheatsheet, category_id: str) -> CheatsheetCategory | None:
    return next((c for c in cheatsheet.categories if c.id == category_id), None)


def matches_search(
    item: CheatsheetItem,
    content_item: CheatsheetSetting | CheatsheetKeybinding,
    query: str,
) -> bool:
    """Whether a setting or keybinding row matches the query.

    A match on the parent item (title, description, tags, keywords) shows
    every row under it; otherwise the row's own fields are searched.
    """
    query = query.strip().lower()
    if not query:
        return True

    item_matches = (
        query in item.title.lower()
        or query in item.description.lower()
        or any(query in tag.lower() for tag in item.tags)
        or any(query in keyword.lower() for keyword in item.keywords)
    )
    if item_matches:
        return True

    if isinstance(content_item, CheatsheetSetting):
        fields = (content_item.setting, content_item.value, content_item.description)
    elif isinstance(content_item, CheatsheetKeybinding):
        fields = (content_item.keys, content_item.action, content_item.description, content_item.mode)
    else:
        return False
    return any(query in f.lower() for f in fields)


def search_rows(cheatsheet: Cheatsheet, query: str = "", category_id: str = "") -> list[tuple]:
    """All (item, row) pairs visible under the query and optional category."""
    rows = []
    for item in cheatsheet.items:
        if category_id and item.category != category_id:
            continue
        for row in item.settings + item.keybindings:
            if matches_search(item, row, query):
                rows.append((item, row))
    return rows


def format_date(value: str | None) -> str:
    if not value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return value
    return f"{parsed:%B} {parsed.day}, {parsed.year}"
