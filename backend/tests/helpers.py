"""Shared builders for pairing tests."""

from typing import List

from arena_pairing.models.enums import Gender, SkillLevel
from arena_pairing.models.schemas import Participant

ARENA = "arena-1"
STAGE = "stage-1"


def make_participant(pid: str, level=None, gender=None) -> Participant:
    """Helper: participant named after its id"""
    return Participant(
        participant_id=pid,
        name=f"Player {pid}",
        level=SkillLevel(level) if level else None,
        gender=Gender(gender) if gender else None,
    )


def make_roster(n: int, prefix: str = "p") -> List[Participant]:
    """Helper: n participants p1..pn without level or gender"""
    return [make_participant(f"{prefix}{i}") for i in range(1, n + 1)]


def ids_of(drafts) -> List[str]:
    """Flatten (a, b) drafts or Pair rows to participant ids"""
    flat = []
    for item in drafts:
        if isinstance(item, tuple):
            flat.extend(p.participant_id for p in item)
        else:
            flat.extend([item.participant_1_id, item.participant_2_id])
    return flat
