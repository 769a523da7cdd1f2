from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rankvote.db.models.tournament_participants import TournamentParticipant
from rankvote.db.repo.dialect import insert_for_session

_STANDING_COLUMNS = ("score", "wins", "losses", "draws", "byes")


class TournamentParticipantsRepo:
    @staticmethod
    async def upsert_many(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        rows: Sequence[dict[str, object]],
    ) -> int:
        if not rows:
            return 0
        stmt = insert_for_session(session, TournamentParticipant).values(
            [{"tournament_id": tournament_id, **row} for row in rows]
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                TournamentParticipant.tournament_id,
                TournamentParticipant.participant_id,
            ],
            set_={column: getattr(stmt.excluded, column) for column in _STANDING_COLUMNS},
        )
        await session.execute(stmt)
        return len(rows)

    @staticmethod
    async def list_for_tournament(
        session: AsyncSession,
        *,
        tournament_id: UUID,
    ) -> list[TournamentParticipant]:
        stmt = (
            select(TournamentParticipant)
            .where(TournamentParticipant.tournament_id == tournament_id)
            .order_by(
                TournamentParticipant.score.desc(),
                TournamentParticipant.wins.desc(),
                TournamentParticipant.losses.asc(),
                TournamentParticipant.participant_id.asc(),
            )
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def delete_for_tournament(session: AsyncSession, *, tournament_id: UUID) -> int:
        stmt = delete(TournamentParticipant).where(
            TournamentParticipant.tournament_id == tournament_id
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
