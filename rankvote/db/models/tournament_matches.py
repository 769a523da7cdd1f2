from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from rankvote.db.models.base import Base


class TournamentMatch(Base):
    __tablename__ = "tournament_matches"
    __table_args__ = (
        CheckConstraint("round_no >= 0", name="round_no_non_negative"),
        CheckConstraint(
            "stage IN ('SWISS','WINNERS','LOSERS','GRAND_FINAL')",
            name="stage",
        ),
        CheckConstraint(
            "status IN ('PENDING','COMPLETED','WALKOVER')",
            name="status",
        ),
        CheckConstraint(
            "outcome IS NULL OR outcome IN ('WIN_A','WIN_B','DRAW','BYE')",
            name="outcome",
        ),
        CheckConstraint(
            "participant_b IS NULL OR participant_a <> participant_b",
            name="no_self_pair",
        ),
        UniqueConstraint(
            "tournament_id",
            "stage",
            "round_no",
            "participant_a",
            "participant_b",
            name="uq_tournament_matches_pairing",
        ),
        Index(
            "idx_tournament_matches_tournament_stage_round_status",
            "tournament_id",
            "stage",
            "round_no",
            "status",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    tournament_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        nullable=False,
    )
    stage: Mapped[str] = mapped_column(String(16), nullable=False)
    round_no: Mapped[int] = mapped_column(Integer, nullable=False)
    participant_a: Mapped[str] = mapped_column(String(64), nullable=False)
    participant_b: Mapped[str | None] = mapped_column(String(64), nullable=True)
    outcome: Mapped[str | None] = mapped_column(String(8), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    winner_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
