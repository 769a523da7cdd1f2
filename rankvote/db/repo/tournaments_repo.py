from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rankvote.db.models.tournaments import Tournament


class TournamentsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, tournament: Tournament) -> Tournament:
        session.add(tournament)
        await session.flush()
        return tournament

    @staticmethod
    async def get_by_id(session: AsyncSession, tournament_id: UUID) -> Tournament | None:
        return await session.get(Tournament, tournament_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, tournament_id: UUID) -> Tournament | None:
        stmt = (
            select(Tournament)
            .where(Tournament.id == tournament_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_owner(
        session: AsyncSession,
        *,
        owner_identity: str,
        limit: int = 50,
    ) -> list[Tournament]:
        resolved_limit = max(1, int(limit))
        stmt = (
            select(Tournament)
            .where(Tournament.owner_identity == owner_identity)
            .order_by(Tournament.created_at.desc(), Tournament.id.asc())
            .limit(resolved_limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def delete_by_id(session: AsyncSession, tournament_id: UUID) -> bool:
        stmt = delete(Tournament).where(Tournament.id == tournament_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0) > 0
