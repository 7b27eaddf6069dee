"""
Non-persisted models: roster input, DTOs and computed value objects.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from arena_pairing.models.enums import Gender, SkillLevel

# ============================================================================
# Roster
# ============================================================================


class Participant(BaseModel):
    """A registered player of a stage, as handed to the formation engine"""

    model_config = ConfigDict(frozen=True)

    participant_id: str = Field(min_length=1)
    name: str
    level: Optional[SkillLevel] = None
    gender: Optional[Gender] = None


# ============================================================================
# Seed Registry DTOs
# ============================================================================


class SeedDesignationCreate(BaseModel):
    arena_id: str = Field(min_length=1)
    stage_id: str = Field(min_length=1)
    participant_id: str = Field(min_length=1)
    participant_name: str = Field(min_length=1)
    participant_level: Optional[SkillLevel] = None
    participant_gender: Optional[Gender] = None
    order: int = Field(ge=1)


class SeedDesignationUpdate(BaseModel):
    """Partial update; only fields explicitly set are written"""

    order: Optional[int] = Field(default=None, ge=1)
    active: Optional[bool] = None
    deactivation_reason: Optional[str] = None


# ============================================================================
# Pair History DTOs
# ============================================================================


class PairHistoryCreate(BaseModel):
    arena_id: str
    stage_id: str
    stage_name: str
    participant_1_id: str
    participant_1_name: str
    participant_2_id: str
    participant_2_name: str
    both_seeds: bool = False

    @model_validator(mode="after")
    def validate_different_participants(self):
        if self.participant_1_id == self.participant_2_id:
            raise ValueError("participant_1_id and participant_2_id must be different")
        return self


class CombinationStatistics(BaseModel):
    """
    Seed-pairing exhaustion for a stage.

    possible = C(total_seeds, 2); realized counts both-seed pairs recorded
    anywhere in the arena. exhausted means seed protection no longer buys
    any new seed-vs-seed combination.
    """

    total_seeds: int
    possible: int
    realized: int
    remaining: int
    exhausted: bool
    available: List[Tuple[str, str]] = Field(default_factory=list)
