from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from rankvote.tournament import service
from rankvote.tournament.gateway import SqlTournamentGateway
from rankvote.tournament.lifecycle import TournamentStateMachine
from rankvote.tournament.types import (
    ActivePairing,
    BracketState,
    ParticipantStanding,
    SubmitOutcome,
    TournamentState,
)


class TournamentServiceFacade:
    """Session-bound entry points; the caller owns the transaction."""

    @staticmethod
    async def create_tournament(
        session: AsyncSession,
        *,
        owner_identity: str,
        participant_ids: Iterable[str],
        now_utc: datetime,
        total_swiss_rounds: int | None = None,
        machine: TournamentStateMachine | None = None,
    ) -> TournamentState:
        return await service.create_tournament(
            SqlTournamentGateway(session),
            owner_identity=owner_identity,
            participant_ids=participant_ids,
            now_utc=now_utc,
            total_swiss_rounds=total_swiss_rounds,
            machine=machine,
        )

    @staticmethod
    async def get_tournament(session: AsyncSession, *, tournament_id: UUID) -> TournamentState:
        return await service.get_tournament(
            SqlTournamentGateway(session),
            tournament_id=tournament_id,
        )

    @staticmethod
    async def list_tournaments_for_owner(
        session: AsyncSession,
        *,
        owner_identity: str,
    ) -> list[TournamentState]:
        return await service.list_tournaments_for_owner(
            SqlTournamentGateway(session),
            owner_identity=owner_identity,
        )

    @staticmethod
    async def delete_tournament(session: AsyncSession, *, tournament_id: UUID) -> None:
        await service.delete_tournament(
            SqlTournamentGateway(session),
            tournament_id=tournament_id,
        )

    @staticmethod
    async def get_active_pairings(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        machine: TournamentStateMachine | None = None,
    ) -> list[ActivePairing]:
        return await service.get_active_pairings(
            SqlTournamentGateway(session),
            tournament_id=tournament_id,
            machine=machine,
        )

    @staticmethod
    async def get_next_pairing(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        machine: TournamentStateMachine | None = None,
    ) -> ActivePairing | None:
        return await service.get_next_pairing(
            SqlTournamentGateway(session),
            tournament_id=tournament_id,
            machine=machine,
        )

    @staticmethod
    async def submit_result(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        participant_a: str,
        participant_b: str,
        outcome: str,
        now_utc: datetime,
        round_no: int | None = None,
        slot_id: str | None = None,
        machine: TournamentStateMachine | None = None,
    ) -> SubmitOutcome:
        return await service.submit_result(
            SqlTournamentGateway(session),
            tournament_id=tournament_id,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
            now_utc=now_utc,
            round_no=round_no,
            slot_id=slot_id,
            machine=machine,
        )

    @staticmethod
    async def get_standings(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        machine: TournamentStateMachine | None = None,
    ) -> list[ParticipantStanding]:
        return await service.get_standings(
            SqlTournamentGateway(session),
            tournament_id=tournament_id,
            machine=machine,
        )

    @staticmethod
    async def get_final_standings(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        machine: TournamentStateMachine | None = None,
    ) -> list[ParticipantStanding]:
        return await service.get_final_standings(
            SqlTournamentGateway(session),
            tournament_id=tournament_id,
            machine=machine,
        )

    @staticmethod
    async def get_bracket(session: AsyncSession, *, tournament_id: UUID) -> BracketState | None:
        return await service.get_bracket(
            SqlTournamentGateway(session),
            tournament_id=tournament_id,
        )
