"""Slap-card match engine shared by the host server and the tests."""

from .cards import Card, RANKS, SUITS, build_deck, deal
from .challenge import CHASE_COUNTS, Challenge, answer, open_challenge
from .game import MatchEngine, outcome
from .matcher import ALL_RULES, SlapRule, is_slappable, matching_rule
from .models import ActionType, MatchConfig, MatchSnapshot, Outcome, Phase, PlayerSeat

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "deal",
    "CHASE_COUNTS",
    "Challenge",
    "answer",
    "open_challenge",
    "MatchEngine",
    "outcome",
    "ALL_RULES",
    "SlapRule",
    "is_slappable",
    "matching_rule",
    "ActionType",
    "MatchConfig",
    "MatchSnapshot",
    "Outcome",
    "Phase",
    "PlayerSeat",
]
