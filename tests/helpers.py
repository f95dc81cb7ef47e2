from __future__ import annotations

from collections import deque
from typing import Iterable, Optional, Sequence

from ratscrew.cards import parse_cards
from ratscrew.challenge import Challenge
from ratscrew.game import MatchEngine
from ratscrew.models import MatchConfig

SESSIONS = ("alpha", "beta")


def create_engine(*, seed: int = 42, sessions: Sequence[str] = SESSIONS) -> MatchEngine:
    """Instantiate an engine with both seats bound and the deck dealt."""
    engine = MatchEngine(MatchConfig(seed=seed))
    for session_id in sessions:
        engine.join(session_id)
    return engine


def rig(
    engine: MatchEngine,
    hand0: Iterable[str],
    hand1: Iterable[str],
    pile: Iterable[str] = (),
    *,
    turn: int = 0,
    challenge: Optional[Challenge] = None,
) -> MatchEngine:
    """Replace the dealt cards with a scripted position (pile labels are top first)."""
    engine.seats[0].hand = deque(parse_cards(list(hand0)))
    engine.seats[1].hand = deque(parse_cards(list(hand1)))
    engine.pile = deque(parse_cards(list(pile)))
    engine.turn_seat = turn
    engine.challenge = challenge
    return engine


def labels(cards: Iterable) -> list[str]:
    return [card.label for card in cards]
