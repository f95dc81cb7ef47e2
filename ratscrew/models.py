from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Mapping, Optional, Tuple

from .cards import RANKS, SUITS, Card
from .challenge import CHASE_COUNTS, Challenge
from .matcher import ALL_RULES, SlapRule


class Phase(str, Enum):
    WAITING_FOR_PLAYERS = "WAITING_FOR_PLAYERS"
    DEALT = "DEALT"
    CHALLENGED = "CHALLENGED"


class ActionType(str, Enum):
    PLAY = "PLAY"
    SLAP = "SLAP"


class Outcome(str, Enum):
    APPLIED = "APPLIED"
    IGNORED = "IGNORED"
    BURN = "BURN"
    SLAP_WON = "SLAP_WON"


@dataclass
class MatchConfig:
    seats: int = 2
    hand_size: int = 26
    seed: Optional[int] = None
    chase_counts: Mapping[str, int] = field(default_factory=lambda: dict(CHASE_COUNTS))
    slap_rules: Tuple[SlapRule, ...] = ALL_RULES

    def validate(self) -> None:
        if self.seats != 2:
            raise ValueError("Matches are played by exactly two seats")
        if self.hand_size * self.seats != len(RANKS) * len(SUITS):
            raise ValueError("Hand size must split the deck evenly between seats")
        for rank, count in self.chase_counts.items():
            if rank not in RANKS or count < 1:
                raise ValueError(f"Invalid chase count {rank}={count}")


@dataclass
class PlayerSeat:
    seat: int
    session_id: Optional[str] = None
    hand: Deque[Card] = field(default_factory=deque)

    @property
    def occupied(self) -> bool:
        return self.session_id is not None

    def draw(self) -> Card:
        return self.hand.popleft()

    def collect(self, pile: Deque[Card]) -> int:
        # Oldest pile card first, so the most recent play lands at the back.
        count = len(pile)
        self.hand.extend(reversed(pile))
        pile.clear()
        return count


@dataclass(frozen=True)
class SeatView:
    seat: int
    session_id: Optional[str]
    hand: Tuple[Card, ...]


@dataclass(frozen=True)
class MatchSnapshot:
    phase: Phase
    seats: Tuple[SeatView, ...]
    pile: Tuple[Card, ...]
    turn_seat: int
    challenge: Optional[Challenge]
    dealt: bool

    def card_count(self) -> int:
        return len(self.pile) + sum(len(seat.hand) for seat in self.seats)
