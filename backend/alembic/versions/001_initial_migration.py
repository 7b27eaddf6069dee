"""Initial migration: create seed_designation, pair_history, pair tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Seeds per stage; one active row per participant (partial unique index)
    op.create_table(
        "seed_designation",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("arena_id", sa.String(), nullable=False),
        sa.Column("stage_id", sa.String(), nullable=False),
        sa.Column("participant_id", sa.String(), nullable=False),
        sa.Column("participant_name", sa.String(), nullable=False),
        sa.Column("participant_level", sa.String(), nullable=True),
        sa.Column("participant_gender", sa.String(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("deactivation_reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint('"order" >= 1', name="ck_seed_order_positive"),
    )
    op.create_index("ix_seed_designation_arena_id", "seed_designation", ["arena_id"])
    op.create_index("ix_seed_designation_stage_id", "seed_designation", ["stage_id"])
    op.create_index("ix_seed_designation_participant_id", "seed_designation", ["participant_id"])
    op.create_index("ix_seed_designation_active", "seed_designation", ["active"])
    op.create_index(
        "uq_active_seed",
        "seed_designation",
        ["arena_id", "stage_id", "participant_id"],
        unique=True,
        sqlite_where=sa.text("active"),
        postgresql_where=sa.text("active"),
    )

    # Immutable pair history, canonical key unique per stage
    op.create_table(
        "pair_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("arena_id", sa.String(), nullable=False),
        sa.Column("stage_id", sa.String(), nullable=False),
        sa.Column("stage_name", sa.String(), nullable=False),
        sa.Column("participant_1_id", sa.String(), nullable=False),
        sa.Column("participant_1_name", sa.String(), nullable=False),
        sa.Column("participant_2_id", sa.String(), nullable=False),
        sa.Column("participant_2_name", sa.String(), nullable=False),
        sa.Column("canonical_key", sa.String(), nullable=False),
        sa.Column("both_seeds", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("arena_id", "stage_id", "canonical_key", name="uq_stage_pair_key"),
    )
    op.create_index("ix_pair_history_arena_id", "pair_history", ["arena_id"])
    op.create_index("ix_pair_history_stage_id", "pair_history", ["stage_id"])
    op.create_index("ix_pair_history_participant_1_id", "pair_history", ["participant_1_id"])
    op.create_index("ix_pair_history_participant_2_id", "pair_history", ["participant_2_id"])
    op.create_index("ix_pair_history_canonical_key", "pair_history", ["canonical_key"])
    op.create_index("ix_pair_history_both_seeds", "pair_history", ["both_seeds"])

    # Pairs of a stage
    op.create_table(
        "pair",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("arena_id", sa.String(), nullable=False),
        sa.Column("stage_id", sa.String(), nullable=False),
        sa.Column("participant_1_id", sa.String(), nullable=False),
        sa.Column("participant_1_name", sa.String(), nullable=False),
        sa.Column("participant_1_level", sa.String(), nullable=True),
        sa.Column("participant_1_gender", sa.String(), nullable=True),
        sa.Column("participant_2_id", sa.String(), nullable=False),
        sa.Column("participant_2_name", sa.String(), nullable=False),
        sa.Column("participant_2_level", sa.String(), nullable=True),
        sa.Column("participant_2_gender", sa.String(), nullable=True),
        sa.Column("classified", sa.Boolean(), nullable=False),
        sa.Column("group_id", sa.String(), nullable=True),
        sa.Column("group_name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pair_arena_id", "pair", ["arena_id"])
    op.create_index("ix_pair_stage_id", "pair", ["stage_id"])
    op.create_index("ix_pair_participant_1_id", "pair", ["participant_1_id"])
    op.create_index("ix_pair_participant_2_id", "pair", ["participant_2_id"])
    op.create_index("ix_pair_group_id", "pair", ["group_id"])


def downgrade() -> None:
    op.drop_table("pair")
    op.drop_table("pair_history")
    op.drop_index("uq_active_seed", table_name="seed_designation")
    op.drop_table("seed_designation")
