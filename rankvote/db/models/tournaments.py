from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from rankvote.db.models.base import Base


class Tournament(Base):
    __tablename__ = "tournaments"
    __table_args__ = (
        CheckConstraint(
            "stage IN ('SWISS','BRACKET','COMPLETED')",
            name="stage",
        ),
        CheckConstraint("current_round >= 0", name="current_round_non_negative"),
        CheckConstraint("total_swiss_rounds >= 1", name="total_swiss_rounds_positive"),
        CheckConstraint("bracket_size >= 2", name="bracket_size_min"),
        Index("idx_tournaments_owner_created", "owner_identity", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    owner_identity: Mapped[str] = mapped_column(String(255), nullable=False)
    stage: Mapped[str] = mapped_column(String(16), nullable=False)
    current_round: Mapped[int] = mapped_column(Integer, nullable=False)
    total_swiss_rounds: Mapped[int] = mapped_column(Integer, nullable=False)
    bracket_size: Mapped[int] = mapped_column(Integer, nullable=False)
    champion_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
