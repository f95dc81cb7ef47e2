from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Sequence

from .cards import Card, rank_value


class SlapRule(str, Enum):
    # Declaration order is evaluation order.
    DOUBLE = "DOUBLE"
    SANDWICH = "SANDWICH"
    TENS = "TENS"
    MARRIAGE = "MARRIAGE"
    TOP_BOTTOM = "TOP_BOTTOM"


ALL_RULES = tuple(SlapRule)


def matching_rule(pile: Sequence[Card], rules: Iterable[SlapRule] = ALL_RULES) -> Optional[SlapRule]:
    """Return the first enabled rule that fires for ``pile`` (index 0 is the top card)."""
    if len(pile) < 2:
        return None
    enabled = set(rules)
    for rule in SlapRule:
        if rule in enabled and _CHECKS[rule](pile):
            return rule
    return None


def is_slappable(pile: Sequence[Card], rules: Iterable[SlapRule] = ALL_RULES) -> bool:
    return matching_rule(pile, rules) is not None


def describe_rule(rule: SlapRule) -> str:
    return rule.value.lower()


def parse_rules(names: Iterable[str]) -> tuple:
    """Map rule names such as ``"double"`` or ``"top-bottom"`` onto ``SlapRule`` members."""
    rules = []
    for name in names:
        key = name.strip().upper().replace("-", "_")
        if not key:
            continue
        try:
            rules.append(SlapRule(key))
        except ValueError:
            raise ValueError(f"Unknown slap rule: {name}") from None
    return tuple(rule for rule in SlapRule if rule in rules)


def _double(pile: Sequence[Card]) -> bool:
    return pile[0].rank == pile[1].rank


def _sandwich(pile: Sequence[Card]) -> bool:
    return len(pile) >= 3 and pile[0].rank == pile[2].rank


def _tens(pile: Sequence[Card]) -> bool:
    top = rank_value(pile[0].rank)
    second = rank_value(pile[1].rank)
    if top is None or second is None:
        return False
    return top + second == 10


def _marriage(pile: Sequence[Card]) -> bool:
    return {pile[0].rank, pile[1].rank} == {"K", "Q"}


def _top_bottom(pile: Sequence[Card]) -> bool:
    return len(pile) >= 3 and pile[0].rank == pile[-1].rank


_CHECKS: Dict[SlapRule, Callable[[Sequence[Card]], bool]] = {
    SlapRule.DOUBLE: _double,
    SlapRule.SANDWICH: _sandwich,
    SlapRule.TENS: _tens,
    SlapRule.MARRIAGE: _marriage,
    SlapRule.TOP_BOTTOM: _top_bottom,
}
