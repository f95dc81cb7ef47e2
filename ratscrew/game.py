from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Optional

from .cards import Card, build_deck, cards_to_labels, deal
from .challenge import Challenge, answer, open_challenge, opens_challenge
from .matcher import describe_rule, matching_rule
from .models import MatchConfig, MatchSnapshot, Outcome, Phase, PlayerSeat, SeatView

# MatchEngine keeps the whole match in memory. No networking lives here, only
# seat binding, the pile, turn order and the face-card chase.

Event = Dict[str, object]


def _ignored(reason: str, **data: object) -> List[Event]:
    event: Event = {"ev": "IGNORED", "reason": reason}
    event.update(data)
    return [event]


def outcome(events: List[Event]) -> Outcome:
    """Classify the events returned by one transition."""
    kinds = {event["ev"] for event in events}
    if "SLAP_WON" in kinds:
        return Outcome.SLAP_WON
    if "BURN" in kinds:
        return Outcome.BURN
    if not events or kinds == {"IGNORED"}:
        return Outcome.IGNORED
    return Outcome.APPLIED


class MatchEngine:
    """Two-seat slap-card match: one shared pile, one turn pointer, at most one chase."""

    def __init__(self, config: Optional[MatchConfig] = None) -> None:
        self.config = config or MatchConfig()
        self.config.validate()
        self.seats: List[PlayerSeat] = [PlayerSeat(seat=idx) for idx in range(self.config.seats)]
        self.pile: Deque[Card] = deque()
        self.turn_seat = 0
        self.challenge: Optional[Challenge] = None
        self.dealt = False

    # Seat management -------------------------------------------------

    def seat_of(self, session_id: str) -> Optional[int]:
        for seat in self.seats:
            if seat.session_id == session_id:
                return seat.seat
        return None

    def occupied_count(self) -> int:
        return sum(1 for seat in self.seats if seat.occupied)

    def join(self, session_id: str) -> List[Event]:
        if self.seat_of(session_id) is not None:
            return _ignored("ALREADY_SEATED", session_id=session_id)

        unbound = [seat for seat in self.seats if not seat.occupied]
        if not unbound:
            return _ignored("TABLE_FULL", session_id=session_id)

        # Empty seats first; a seat abandoned mid-hand is only taken when no other is free.
        free = next((seat for seat in unbound if not seat.hand), unbound[0])
        free.session_id = session_id
        events: List[Event] = [{"ev": "JOIN", "seat": free.seat, "session_id": session_id}]

        # Joiners never pick up where a departed player left off.
        if free.hand:
            discarded = len(free.hand)
            free.hand.clear()
            events.append({"ev": "HAND_DISCARDED", "seat": free.seat, "count": discarded})

        if self.occupied_count() == len(self.seats) and all(not seat.hand for seat in self.seats):
            events.extend(self._deal())
        return events

    def leave(self, session_id: str) -> List[Event]:
        seat_idx = self.seat_of(session_id)
        if seat_idx is None:
            return _ignored("NOT_SEATED", session_id=session_id)

        self.seats[seat_idx].session_id = None
        events: List[Event] = [{"ev": "LEAVE", "seat": seat_idx, "session_id": session_id}]

        # Pause: the pile goes, hands, turn and any chase stay as they were.
        if self.occupied_count() < len(self.seats) and self.pile:
            discarded = len(self.pile)
            self.pile.clear()
            events.append({"ev": "PILE_CLEARED", "count": discarded})
        return events

    def _deal(self) -> List[Event]:
        deck = build_deck(self.config.seed)
        for seat in self.seats:
            seat.hand = deque(deal(deck, self.config.hand_size))
        self.pile.clear()
        self.dealt = True
        return [
            {
                "ev": "DEAL",
                "hands": {seat.seat: len(seat.hand) for seat in self.seats},
                "turn": self.turn_seat,
            }
        ]

    # Action handling -------------------------------------------------

    def play_session(self, session_id: str) -> List[Event]:
        seat_idx = self.seat_of(session_id)
        if seat_idx is None:
            return _ignored("NOT_SEATED", session_id=session_id)
        return self.play(seat_idx)

    def slap_session(self, session_id: str) -> List[Event]:
        seat_idx = self.seat_of(session_id)
        if seat_idx is None:
            return _ignored("NOT_SEATED", session_id=session_id)
        return self.slap(seat_idx)

    def play(self, seat_idx: int) -> List[Event]:
        seat = self._bound_seat(seat_idx)
        if seat is None:
            return _ignored("NOT_SEATED", seat=seat_idx)
        if seat_idx != self.turn_seat:
            return _ignored("OUT_OF_TURN", seat=seat_idx)
        if not seat.hand:
            return _ignored("EMPTY_HAND", seat=seat_idx)

        card = seat.draw()
        self.pile.appendleft(card)
        events: List[Event] = [{"ev": "PLAY", "seat": seat_idx, "card": card.label}]

        if opens_challenge(card.rank, self.config.chase_counts):
            # A fresh face card replaces any running chase; the pile carries over.
            self.challenge = open_challenge(seat_idx, card.rank, self.config.chase_counts)
            self.turn_seat = self._other(seat_idx)
            events.append(
                {
                    "ev": "CHALLENGE",
                    "seat": seat_idx,
                    "remaining": self.challenge.remaining,
                }
            )
        elif self.challenge is not None:
            winner_idx = self.challenge.challenger_seat
            resolved, self.challenge = answer(self.challenge)
            if resolved:
                count = self.seats[winner_idx].collect(self.pile)
                self.turn_seat = winner_idx
                events.append({"ev": "CHALLENGE_WON", "seat": winner_idx, "cards": count})
            else:
                events.append({"ev": "ANSWER", "seat": seat_idx, "remaining": self.challenge.remaining})
        else:
            self.turn_seat = self._other(seat_idx)
        return events

    def slap(self, seat_idx: int) -> List[Event]:
        seat = self._bound_seat(seat_idx)
        if seat is None:
            return _ignored("NOT_SEATED", seat=seat_idx)

        rule = matching_rule(self.pile, self.config.slap_rules)
        if rule is not None:
            count = seat.collect(self.pile)
            self.challenge = None
            self.turn_seat = seat_idx
            return [{"ev": "SLAP_WON", "seat": seat_idx, "rule": describe_rule(rule), "cards": count}]

        if not seat.hand:
            return _ignored("EMPTY_HAND", seat=seat_idx)

        card = seat.draw()
        self.pile.append(card)
        return [{"ev": "BURN", "seat": seat_idx, "card": card.label}]

    def _bound_seat(self, seat_idx: int) -> Optional[PlayerSeat]:
        if not 0 <= seat_idx < len(self.seats):
            return None
        seat = self.seats[seat_idx]
        return seat if seat.occupied else None

    def _other(self, seat_idx: int) -> int:
        return (seat_idx + 1) % len(self.seats)

    # Public/Snapshot helpers -----------------------------------------

    @property
    def phase(self) -> Phase:
        if not self.dealt or self.occupied_count() < len(self.seats):
            return Phase.WAITING_FOR_PLAYERS
        if self.challenge is not None:
            return Phase.CHALLENGED
        return Phase.DEALT

    def card_count(self) -> int:
        return len(self.pile) + sum(len(seat.hand) for seat in self.seats)

    def current_state(self) -> MatchSnapshot:
        return MatchSnapshot(
            phase=self.phase,
            seats=tuple(
                SeatView(seat=seat.seat, session_id=seat.session_id, hand=tuple(seat.hand))
                for seat in self.seats
            ),
            pile=tuple(self.pile),
            turn_seat=self.turn_seat,
            challenge=self.challenge,
            dealt=self.dealt,
        )

    def state_payload(self) -> Dict[str, object]:
        challenge = self.challenge
        return {
            "phase": self.phase.value,
            "turn": self.turn_seat,
            "challenge": (
                {"challenger": challenge.challenger_seat, "remaining": challenge.remaining}
                if challenge
                else None
            ),
            "seats": [
                {
                    "seat": seat.seat,
                    "occupied": seat.occupied,
                    "hand_size": len(seat.hand),
                }
                for seat in self.seats
            ],
            "pile": cards_to_labels(self.pile),
        }
