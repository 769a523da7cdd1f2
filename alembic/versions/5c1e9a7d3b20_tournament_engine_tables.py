"""tournament_engine_tables

Revision ID: 5c1e9a7d3b20
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "5c1e9a7d3b20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "tournaments",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("owner_identity", sa.String(length=255), nullable=False),
        sa.Column("stage", sa.String(length=16), nullable=False),
        sa.Column("current_round", sa.Integer(), nullable=False),
        sa.Column("total_swiss_rounds", sa.Integer(), nullable=False),
        sa.Column("bracket_size", sa.Integer(), nullable=False),
        sa.Column("champion_id", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "stage IN ('SWISS','BRACKET','COMPLETED')",
            name="ck_tournaments_stage",
        ),
        sa.CheckConstraint(
            "current_round >= 0",
            name="ck_tournaments_current_round_non_negative",
        ),
        sa.CheckConstraint(
            "total_swiss_rounds >= 1",
            name="ck_tournaments_total_swiss_rounds_positive",
        ),
        sa.CheckConstraint(
            "bracket_size >= 2",
            name="ck_tournaments_bracket_size_min",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_tournaments"),
    )
    op.create_index(
        "idx_tournaments_owner_created",
        "tournaments",
        ["owner_identity", "created_at"],
    )

    op.create_table(
        "tournament_participants",
        sa.Column("tournament_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("participant_id", sa.String(length=64), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("draws", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("byes", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint(
            "score >= 0",
            name="ck_tournament_participants_score_non_negative",
        ),
        sa.CheckConstraint(
            "wins >= 0 AND losses >= 0 AND draws >= 0 AND byes >= 0",
            name="ck_tournament_participants_tallies_non_negative",
        ),
        sa.ForeignKeyConstraint(
            ["tournament_id"],
            ["tournaments.id"],
            name="fk_tournament_participants_tournament_id_tournaments",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "tournament_id",
            "participant_id",
            name="pk_tournament_participants",
        ),
    )
    op.create_index(
        "idx_tournament_participants_tournament_score",
        "tournament_participants",
        ["tournament_id", "score", "wins"],
    )

    op.create_table(
        "tournament_matches",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("tournament_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("stage", sa.String(length=16), nullable=False),
        sa.Column("round_no", sa.Integer(), nullable=False),
        sa.Column("participant_a", sa.String(length=64), nullable=False),
        sa.Column("participant_b", sa.String(length=64), nullable=True),
        sa.Column("outcome", sa.String(length=8), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("winner_id", sa.String(length=64), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "round_no >= 0",
            name="ck_tournament_matches_round_no_non_negative",
        ),
        sa.CheckConstraint(
            "stage IN ('SWISS','WINNERS','LOSERS','GRAND_FINAL')",
            name="ck_tournament_matches_stage",
        ),
        sa.CheckConstraint(
            "status IN ('PENDING','COMPLETED','WALKOVER')",
            name="ck_tournament_matches_status",
        ),
        sa.CheckConstraint(
            "outcome IS NULL OR outcome IN ('WIN_A','WIN_B','DRAW','BYE')",
            name="ck_tournament_matches_outcome",
        ),
        sa.CheckConstraint(
            "participant_b IS NULL OR participant_a <> participant_b",
            name="ck_tournament_matches_no_self_pair",
        ),
        sa.ForeignKeyConstraint(
            ["tournament_id"],
            ["tournaments.id"],
            name="fk_tournament_matches_tournament_id_tournaments",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_tournament_matches"),
        sa.UniqueConstraint(
            "tournament_id",
            "stage",
            "round_no",
            "participant_a",
            "participant_b",
            name="uq_tournament_matches_pairing",
        ),
    )
    op.create_index(
        "idx_tournament_matches_tournament_stage_round_status",
        "tournament_matches",
        ["tournament_id", "stage", "round_no", "status"],
    )

    op.create_table(
        "tournament_bracket_slots",
        sa.Column("tournament_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("slot_id", sa.String(length=16), nullable=False),
        sa.Column("stage", sa.String(length=16), nullable=False),
        sa.Column("round_no", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("participant_1", sa.String(length=64), nullable=True),
        sa.Column("participant_2", sa.String(length=64), nullable=True),
        sa.Column("winner_id", sa.String(length=64), nullable=True),
        sa.Column("loser_id", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.CheckConstraint(
            "stage IN ('WINNERS','LOSERS','GRAND_FINAL')",
            name="ck_tournament_bracket_slots_stage",
        ),
        sa.CheckConstraint(
            "status IN ('PENDING','COMPLETED','WALKOVER','VOID')",
            name="ck_tournament_bracket_slots_status",
        ),
        sa.CheckConstraint(
            "round_no >= 1 AND position >= 1",
            name="ck_tournament_bracket_slots_coordinates_positive",
        ),
        sa.ForeignKeyConstraint(
            ["tournament_id"],
            ["tournaments.id"],
            name="fk_tournament_bracket_slots_tournament_id_tournaments",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "tournament_id",
            "slot_id",
            name="pk_tournament_bracket_slots",
        ),
    )


def downgrade() -> None:
    op.drop_table("tournament_bracket_slots")
    op.drop_index(
        "idx_tournament_matches_tournament_stage_round_status",
        table_name="tournament_matches",
    )
    op.drop_table("tournament_matches")
    op.drop_index(
        "idx_tournament_participants_tournament_score",
        table_name="tournament_participants",
    )
    op.drop_table("tournament_participants")
    op.drop_index("idx_tournaments_owner_created", table_name="tournaments")
    op.drop_table("tournaments")
