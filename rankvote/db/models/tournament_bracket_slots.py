from __future__ import annotations

from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from rankvote.db.models.base import Base


class TournamentBracketSlot(Base):
    __tablename__ = "tournament_bracket_slots"
    __table_args__ = (
        CheckConstraint(
            "stage IN ('WINNERS','LOSERS','GRAND_FINAL')",
            name="stage",
        ),
        CheckConstraint(
            "status IN ('PENDING','COMPLETED','WALKOVER','VOID')",
            name="status",
        ),
        CheckConstraint("round_no >= 1 AND position >= 1", name="coordinates_positive"),
    )

    tournament_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        primary_key=True,
    )
    slot_id: Mapped[str] = mapped_column(String(16), primary_key=True)
    stage: Mapped[str] = mapped_column(String(16), nullable=False)
    round_no: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    participant_1: Mapped[str | None] = mapped_column(String(64), nullable=True)
    participant_2: Mapped[str | None] = mapped_column(String(64), nullable=True)
    winner_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    loser_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
