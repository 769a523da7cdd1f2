from __future__ import annotations

from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from rankvote.db.models.base import Base


class TournamentParticipant(Base):
    __tablename__ = "tournament_participants"
    __table_args__ = (
        CheckConstraint("score >= 0", name="score_non_negative"),
        CheckConstraint(
            "wins >= 0 AND losses >= 0 AND draws >= 0 AND byes >= 0",
            name="tallies_non_negative",
        ),
        Index(
            "idx_tournament_participants_tournament_score",
            "tournament_id",
            "score",
            "wins",
        ),
    )

    tournament_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        primary_key=True,
    )
    participant_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    wins: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    losses: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    draws: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    byes: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
