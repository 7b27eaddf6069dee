"""
Pair History Model

Immutable record that two participants were paired in a stage of an arena.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class PairHistoryRecord(SQLModel, table=True):
    """
    One formed pair, keyed by canonical_key (sorted ids joined with "_").

    Constraint: canonical_key is unique per (arena_id, stage_id), so A+B and B+A
    can never both be recorded for the same stage.
    """

    __tablename__ = "pair_history"

    __table_args__ = (SAUniqueConstraint("arena_id", "stage_id", "canonical_key", name="uq_stage_pair_key"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    arena_id: str = Field(index=True)
    stage_id: str = Field(index=True)
    stage_name: str
    participant_1_id: str = Field(index=True)
    participant_1_name: str
    participant_2_id: str = Field(index=True)
    participant_2_name: str
    canonical_key: str = Field(index=True)
    both_seeds: bool = Field(default=False, index=True)  # both were seeds when the pair was formed
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
