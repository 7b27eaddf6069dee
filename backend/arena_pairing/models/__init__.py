from arena_pairing.models.enums import FormationPolicy, Gender, GenderPolicy, SkillLevel
from arena_pairing.models.pair import Pair
from arena_pairing.models.pair_history import PairHistoryRecord
from arena_pairing.models.schemas import (
    CombinationStatistics,
    Participant,
    PairHistoryCreate,
    SeedDesignationCreate,
    SeedDesignationUpdate,
)
from arena_pairing.models.seed_designation import SeedDesignation

__all__ = [
    "SkillLevel",
    "Gender",
    "FormationPolicy",
    "GenderPolicy",
    "SeedDesignation",
    "PairHistoryRecord",
    "Pair",
    "Participant",
    "SeedDesignationCreate",
    "SeedDesignationUpdate",
    "PairHistoryCreate",
    "CombinationStatistics",
]
