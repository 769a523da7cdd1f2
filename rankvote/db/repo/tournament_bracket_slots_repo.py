from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rankvote.db.models.tournament_bracket_slots import TournamentBracketSlot
from rankvote.db.repo.dialect import insert_for_session

_SLOT_COLUMNS = (
    "stage",
    "round_no",
    "position",
    "participant_1",
    "participant_2",
    "winner_id",
    "loser_id",
    "status",
)


class TournamentBracketSlotsRepo:
    @staticmethod
    async def upsert_many(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        rows: Sequence[dict[str, object]],
    ) -> int:
        if not rows:
            return 0
        stmt = insert_for_session(session, TournamentBracketSlot).values(
            [{"tournament_id": tournament_id, **row} for row in rows]
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                TournamentBracketSlot.tournament_id,
                TournamentBracketSlot.slot_id,
            ],
            set_={column: getattr(stmt.excluded, column) for column in _SLOT_COLUMNS},
        )
        await session.execute(stmt)
        return len(rows)

    @staticmethod
    async def list_for_tournament(
        session: AsyncSession,
        *,
        tournament_id: UUID,
    ) -> list[TournamentBracketSlot]:
        stmt = (
            select(TournamentBracketSlot)
            .where(TournamentBracketSlot.tournament_id == tournament_id)
            .order_by(TournamentBracketSlot.round_no.asc(), TournamentBracketSlot.slot_id.asc())
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def delete_for_tournament(session: AsyncSession, *, tournament_id: UUID) -> int:
        stmt = delete(TournamentBracketSlot).where(
            TournamentBracketSlot.tournament_id == tournament_id
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
