from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel

from arena_pairing.models.enums import Gender, SkillLevel


class Pair(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    arena_id: str = Field(index=True)
    stage_id: str = Field(index=True)

    participant_1_id: str = Field(index=True)
    participant_1_name: str
    participant_1_level: Optional[SkillLevel] = Field(default=None, sa_column=Column(String, nullable=True))
    participant_1_gender: Optional[Gender] = Field(default=None, sa_column=Column(String, nullable=True))

    participant_2_id: str = Field(index=True)
    participant_2_name: str
    participant_2_level: Optional[SkillLevel] = Field(default=None, sa_column=Column(String, nullable=True))
    participant_2_gender: Optional[Gender] = Field(default=None, sa_column=Column(String, nullable=True))

    classified: bool = Field(default=False)  # advanced to the next phase
    # Group assignment is owned by the group-stage logic; opaque here
    group_id: Optional[str] = Field(default=None, index=True)
    group_name: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def participant_ids(self) -> tuple:
        return (self.participant_1_id, self.participant_2_id)
