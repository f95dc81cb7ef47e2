from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple

# Cards the opposing seat must play to answer each face card.
CHASE_COUNTS: Mapping[str, int] = {"J": 1, "Q": 2, "K": 3, "A": 4}


@dataclass(frozen=True)
class Challenge:
    challenger_seat: int
    remaining: int

    def __post_init__(self) -> None:
        if self.remaining < 1:
            raise ValueError(f"Challenge needs at least one card to answer, got {self.remaining}")


def opens_challenge(rank: str, chase_counts: Mapping[str, int] = CHASE_COUNTS) -> bool:
    return rank in chase_counts


def open_challenge(
    challenger_seat: int,
    rank: str,
    chase_counts: Mapping[str, int] = CHASE_COUNTS,
) -> Challenge:
    if rank not in chase_counts:
        raise ValueError(f"Rank {rank} does not open a challenge")
    return Challenge(challenger_seat=challenger_seat, remaining=chase_counts[rank])


def answer(challenge: Challenge) -> Tuple[bool, Optional[Challenge]]:
    """Count one answering card. Returns ``(resolved, challenge_after)``."""
    if challenge.remaining == 1:
        return True, None
    return False, replace(challenge, remaining=challenge.remaining - 1)
