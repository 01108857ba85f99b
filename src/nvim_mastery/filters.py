"""Search and facet filtering over the challenge catalog."""
from nvim_mastery.models import CatalogEntry, Difficulty, FilterState


def _matches_search(entry: CatalogEntry, term: str) -> bool:
    if not term:
        return True
    return (
        term in entry.title.lower()
        or term in entry.description.lower()
        or any(term in tag.lower() for tag in entry.tags or ())
    )


def _matches_difficulty(entry: CatalogEntry, facet: str) -> bool:
    return facet == "all" or entry.difficulty == facet


def _matches_tags(entry: CatalogEntry, facet: frozenset) -> bool:
    # Any selected tag is enough.
    return not facet or not facet.isdisjoint(entry.tags or ())


def compute_visible(catalog: list[CatalogEntry], state: FilterState) -> list[CatalogEntry]:
    """Return the entries matching every active filter, in catalog order."""
    term = state.search_term.strip().lower()
    return [
        entry for entry in catalog
        if _matches_search(entry, term)
        and _matches_difficulty(entry, state.difficulty_facet)
        and _matches_tags(entry, state.tag_facet)
    ]


def difficulty_counts(catalog: list[CatalogEntry]) -> dict[str, int]:
    """Count entries per difficulty over the whole catalog, plus an 'all' total."""
    counts = {"all": len(catalog)}
    counts.update({d.value: 0 for d in Difficulty})
    for entry in catalog:
        counts[entry.difficulty.value] += 1
    return counts


def all_tags(catalog: list[CatalogEntry]) -> list[str]:
    return sorted({tag for entry in catalog for tag in entry.tags})


def results_label(count: int) -> str:
    return f"Showing {count} challenge{'' if count == 1 else 's'}"


def update_filters(
    state: FilterState,
    search_term: str | None = None,
    difficulty: str | None = None,
    toggle_tag: str | None = None,
) -> FilterState:
    """Return a new filter state with the given changes applied.

    Difficulty is single-select, so a new value replaces the old one.
    Tags are multi-select and toggle in and out of the facet.
    """
    tags = state.tag_facet
    if toggle_tag is not None:
        tags = tags - {toggle_tag} if toggle_tag in tags else tags | {toggle_tag}
    return FilterState(
        search_term=state.search_term if search_term is None else search_term,
        difficulty_facet=state.difficulty_facet if difficulty is None else difficulty,
        tag_facet=frozenset(tags),
    )
