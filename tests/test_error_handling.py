import pytest

from ratscrew.game import MatchEngine, outcome
from ratscrew.models import MatchConfig, Outcome

from .helpers import create_engine, rig


def test_engine_rejects_more_than_two_seats():
    with pytest.raises(ValueError, match="exactly two seats"):
        MatchEngine(MatchConfig(seats=3))


def test_engine_rejects_uneven_split():
    with pytest.raises(ValueError, match="split the deck"):
        MatchEngine(MatchConfig(hand_size=20))


def test_engine_rejects_bad_chase_counts():
    with pytest.raises(ValueError, match="Invalid chase count"):
        MatchEngine(MatchConfig(chase_counts={"K": 0}))


def test_out_of_range_seat_is_ignored():
    engine = create_engine()
    before = engine.current_state()
    assert engine.play(5)[0]["reason"] == "NOT_SEATED"
    assert engine.slap(-1)[0]["reason"] == "NOT_SEATED"
    assert engine.current_state() == before


def test_actions_before_deal_are_ignored():
    engine = MatchEngine()
    engine.join("alpha")
    assert outcome(engine.play(0)) is Outcome.IGNORED
    assert outcome(engine.slap(0)) is Outcome.IGNORED
    assert outcome(engine.play(1)) is Outcome.IGNORED
    assert engine.card_count() == 0


def test_outcome_classifies_transitions():
    engine = rig(create_engine(), ["4♦", "5♣"], ["4♠"], ["2♠", "9♥"])
    assert outcome(engine.play(0)) is Outcome.APPLIED
    assert outcome(engine.play(0)) is Outcome.IGNORED
    assert outcome(engine.slap(0)) is Outcome.BURN
    assert outcome([]) is Outcome.IGNORED
