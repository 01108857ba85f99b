"""Multiple-choice flashcard drill."""
from dataclasses import dataclass, replace
from typing import Optional

from nvim_mastery.models import FlashcardEntry
from nvim_mastery.progress import round_percent


@dataclass(frozen=True)
class FlashcardStats:
    correct: int = 0
    incorrect: int = 0
    total: int = 0


@dataclass(frozen=True)
class FlashcardSession:
    cards: tuple = ()
    position: int = 0
    selected: Optional[int] = None
    revealed: bool = False
    hint_shown: bool = False
    stats: FlashcardStats = FlashcardStats()

    @property
    def current(self) -> Optional[FlashcardEntry]:
        if not self.cards:
            return None
        return self.cards[self.position]


def start_session(cards: list[FlashcardEntry]) -> FlashcardSession:
    return FlashcardSession(cards=tuple(cards))


def select_choice(session: FlashcardSession, choice: int) -> FlashcardSession:
    card = session.current
    if card is None or session.revealed or not 0 <= choice < len(card.choices):
        return session
    return replace(session, selected=choice)


def show_hint(session: FlashcardSession) -> FlashcardSession:
    return replace(session, hint_shown=True)


def reveal_answer(session: FlashcardSession) -> FlashcardSession:
    """Reveal the current card. Only scores when a choice was selected."""
    card = session.current
    if card is None or session.revealed:
        return session
    stats = session.stats
    if session.selected is not None:
        if session.selected == card.correct_index:
            stats = replace(stats, correct=stats.correct + 1, total=stats.total + 1)
        else:
            stats = replace(stats, incorrect=stats.incorrect + 1, total=stats.total + 1)
    return replace(session, revealed=True, stats=stats)


def _move_to(session: FlashcardSession, position: int) -> FlashcardSession:
    return replace(session, position=position, selected=None, revealed=False, hint_shown=False)


def next_card(session: FlashcardSession) -> FlashcardSession:
    if session.position >= len(session.cards) - 1:
        return session
    return _move_to(session, session.position + 1)


def previous_card(session: FlashcardSession) -> FlashcardSession:
    if session.position == 0:
        return session
    return _move_to(session, session.position - 1)


def accuracy(stats: FlashcardStats) -> int:
    return round_percent(stats.correct, stats.total)


def deck_progress(session: FlashcardSession) -> tuple[int, int]:
    """(current card number, total cards), one-based."""
    if not session.cards:
        return 0, 0
    return session.position + 1, len(session.cards)
