from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rankvote.db.models.tournament_matches import TournamentMatch
from rankvote.db.repo.dialect import insert_for_session


class TournamentMatchesRepo:
    @staticmethod
    async def upsert(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        stage: str,
        round_no: int,
        participant_a: str,
        participant_b: str | None,
        outcome: str | None,
        status: str,
        winner_id: str | None,
        now_utc: datetime,
    ) -> None:
        stmt = insert_for_session(session, TournamentMatch).values(
            id=uuid4(),
            tournament_id=tournament_id,
            stage=stage,
            round_no=round_no,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
            status=status,
            winner_id=winner_id,
            updated_at=now_utc,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                TournamentMatch.tournament_id,
                TournamentMatch.stage,
                TournamentMatch.round_no,
                TournamentMatch.participant_a,
                TournamentMatch.participant_b,
            ],
            set_={
                "outcome": stmt.excluded.outcome,
                "status": stmt.excluded.status,
                "winner_id": stmt.excluded.winner_id,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await session.execute(stmt)

    @staticmethod
    async def list_for_tournament(
        session: AsyncSession,
        *,
        tournament_id: UUID,
    ) -> list[TournamentMatch]:
        stmt = (
            select(TournamentMatch)
            .where(TournamentMatch.tournament_id == tournament_id)
            .order_by(
                TournamentMatch.round_no.asc(),
                TournamentMatch.stage.asc(),
                TournamentMatch.participant_a.asc(),
            )
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def delete_for_tournament(session: AsyncSession, *, tournament_id: UUID) -> int:
        stmt = delete(TournamentMatch).where(TournamentMatch.tournament_id == tournament_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
