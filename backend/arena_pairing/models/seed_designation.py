"""
Seed Designation Model - protected top players of a stage.

A seed is never paired with another seed while seed protection is meaningful
(see services.pair_formation). Rank order 1 is the strongest seed.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, Index, String, text
from sqlmodel import Column, Field, SQLModel

from arena_pairing.models.enums import Gender, SkillLevel


class SeedDesignation(SQLModel, table=True):
    """
    Seed flag for one participant in one stage of an arena.

    Constraint: at most one ACTIVE row per (arena_id, stage_id, participant_id).
    Deactivated rows stay around until removed.
    """

    __tablename__ = "seed_designation"

    __table_args__ = (
        Index(
            "uq_active_seed",
            "arena_id",
            "stage_id",
            "participant_id",
            unique=True,
            sqlite_where=text("active"),
            postgresql_where=text("active"),
        ),
        CheckConstraint('"order" >= 1', name="ck_seed_order_positive"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    arena_id: str = Field(index=True)
    stage_id: str = Field(index=True)
    participant_id: str = Field(index=True)
    participant_name: str
    participant_level: Optional[SkillLevel] = Field(default=None, sa_column=Column(String, nullable=True))
    participant_gender: Optional[Gender] = Field(default=None, sa_column=Column(String, nullable=True))
    order: int  # 1-based rank (1=strongest)
    active: bool = Field(default=True, index=True)
    deactivation_reason: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
