from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rankvote.db.models.tournament_bracket_slots import TournamentBracketSlot
from rankvote.db.models.tournament_matches import TournamentMatch
from rankvote.db.models.tournament_participants import TournamentParticipant
from rankvote.db.models.tournaments import Tournament
from rankvote.db.repo.tournament_bracket_slots_repo import TournamentBracketSlotsRepo
from rankvote.db.repo.tournament_matches_repo import TournamentMatchesRepo
from rankvote.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from rankvote.db.repo.tournaments_repo import TournamentsRepo
from rankvote.tournament.errors import TournamentPersistenceError
from rankvote.tournament.standings import order_standings
from rankvote.tournament.types import (
    BracketSlot,
    BracketState,
    MatchRecord,
    ParticipantStanding,
    TournamentState,
)


class TournamentGateway(Protocol):
    async def save(self, state: TournamentState) -> None: ...

    async def find_by_id(
        self,
        tournament_id: UUID,
        *,
        for_update: bool = False,
    ) -> TournamentState | None: ...

    async def save_match(
        self,
        tournament_id: UUID,
        record: MatchRecord,
        *,
        now_utc: datetime,
    ) -> None: ...

    async def load_matches(self, tournament_id: UUID) -> list[MatchRecord]: ...

    async def save_bracket_state(self, tournament_id: UUID, bracket: BracketState) -> None: ...

    async def load_bracket_state(self, tournament_id: UUID) -> BracketState | None: ...

    async def list_by_owner(self, owner_identity: str) -> list[TournamentState]: ...

    async def delete(self, tournament_id: UUID) -> bool: ...


def build_match_record_from_row(row: TournamentMatch) -> MatchRecord:
    return MatchRecord(
        stage=row.stage,
        round_no=int(row.round_no),
        participant_a=row.participant_a,
        participant_b=row.participant_b,
        outcome=row.outcome,
        status=row.status,
    )


def build_bracket_state(
    *,
    bracket_size: int,
    slots: Sequence[TournamentBracketSlot],
) -> BracketState | None:
    if not slots:
        return None
    return BracketState(
        bracket_size=bracket_size,
        slots={
            row.slot_id: BracketSlot(
                slot_id=row.slot_id,
                stage=row.stage,
                round_no=int(row.round_no),
                position=int(row.position),
                participant_1=row.participant_1,
                participant_2=row.participant_2,
                winner_id=row.winner_id,
                loser_id=row.loser_id,
                status=row.status,
            )
            for row in slots
        },
    )


def build_tournament_state(
    *,
    tournament: Tournament,
    participants: Sequence[TournamentParticipant],
    matches: Sequence[TournamentMatch],
    bracket_slots: Sequence[TournamentBracketSlot],
) -> TournamentState:
    return TournamentState(
        tournament_id=tournament.id,
        owner_identity=tournament.owner_identity,
        stage=tournament.stage,
        current_round=int(tournament.current_round),
        total_swiss_rounds=int(tournament.total_swiss_rounds),
        bracket_size=int(tournament.bracket_size),
        participants=order_standings(
            ParticipantStanding(
                participant_id=row.participant_id,
                score=int(row.score),
                wins=int(row.wins),
                losses=int(row.losses),
                draws=int(row.draws),
                byes=int(row.byes),
            )
            for row in participants
        ),
        matches=[build_match_record_from_row(row) for row in matches],
        created_at=tournament.created_at,
        updated_at=tournament.updated_at,
        bracket=build_bracket_state(
            bracket_size=int(tournament.bracket_size),
            slots=bracket_slots,
        ),
    )


@contextmanager
def _persistence_errors() -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise TournamentPersistenceError(str(exc)) from exc


class SqlTournamentGateway:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, state: TournamentState) -> None:
        with _persistence_errors():
            tournament = await TournamentsRepo.get_by_id(self._session, state.tournament_id)
            if tournament is None:
                await TournamentsRepo.create(
                    self._session,
                    tournament=Tournament(
                        id=state.tournament_id,
                        owner_identity=state.owner_identity,
                        stage=state.stage,
                        current_round=state.current_round,
                        total_swiss_rounds=state.total_swiss_rounds,
                        bracket_size=state.bracket_size,
                        champion_id=state.champion_id,
                        created_at=state.created_at,
                        updated_at=state.updated_at,
                    ),
                )
            else:
                tournament.stage = state.stage
                tournament.current_round = state.current_round
                tournament.total_swiss_rounds = state.total_swiss_rounds
                tournament.bracket_size = state.bracket_size
                tournament.champion_id = state.champion_id
                tournament.updated_at = state.updated_at
                await self._session.flush()

            await TournamentParticipantsRepo.upsert_many(
                self._session,
                tournament_id=state.tournament_id,
                rows=[
                    {
                        "participant_id": standing.participant_id,
                        "score": standing.score,
                        "wins": standing.wins,
                        "losses": standing.losses,
                        "draws": standing.draws,
                        "byes": standing.byes,
                    }
                    for standing in state.participants
                ],
            )

    async def find_by_id(
        self,
        tournament_id: UUID,
        *,
        for_update: bool = False,
    ) -> TournamentState | None:
        with _persistence_errors():
            if for_update:
                tournament = await TournamentsRepo.get_by_id_for_update(
                    self._session,
                    tournament_id,
                )
            else:
                tournament = await TournamentsRepo.get_by_id(self._session, tournament_id)
            if tournament is None:
                return None
            return await self._load_state(tournament)

    async def save_match(
        self,
        tournament_id: UUID,
        record: MatchRecord,
        *,
        now_utc: datetime,
    ) -> None:
        with _persistence_errors():
            await TournamentMatchesRepo.upsert(
                self._session,
                tournament_id=tournament_id,
                stage=record.stage,
                round_no=record.round_no,
                participant_a=record.participant_a,
                participant_b=record.participant_b,
                outcome=record.outcome,
                status=record.status,
                winner_id=record.winner_id,
                now_utc=now_utc,
            )

    async def load_matches(self, tournament_id: UUID) -> list[MatchRecord]:
        with _persistence_errors():
            rows = await TournamentMatchesRepo.list_for_tournament(
                self._session,
                tournament_id=tournament_id,
            )
        return [build_match_record_from_row(row) for row in rows]

    async def save_bracket_state(self, tournament_id: UUID, bracket: BracketState) -> None:
        with _persistence_errors():
            await TournamentBracketSlotsRepo.upsert_many(
                self._session,
                tournament_id=tournament_id,
                rows=[
                    {
                        "slot_id": slot.slot_id,
                        "stage": slot.stage,
                        "round_no": slot.round_no,
                        "position": slot.position,
                        "participant_1": slot.participant_1,
                        "participant_2": slot.participant_2,
                        "winner_id": slot.winner_id,
                        "loser_id": slot.loser_id,
                        "status": slot.status,
                    }
                    for slot in bracket.ordered_slots()
                ],
            )

    async def load_bracket_state(self, tournament_id: UUID) -> BracketState | None:
        with _persistence_errors():
            tournament = await TournamentsRepo.get_by_id(self._session, tournament_id)
            if tournament is None:
                return None
            slots = await TournamentBracketSlotsRepo.list_for_tournament(
                self._session,
                tournament_id=tournament_id,
            )
        return build_bracket_state(bracket_size=int(tournament.bracket_size), slots=slots)

    async def list_by_owner(self, owner_identity: str) -> list[TournamentState]:
        with _persistence_errors():
            tournaments = await TournamentsRepo.list_by_owner(
                self._session,
                owner_identity=owner_identity,
            )
            return [await self._load_state(tournament) for tournament in tournaments]

    async def delete(self, tournament_id: UUID) -> bool:
        with _persistence_errors():
            await TournamentBracketSlotsRepo.delete_for_tournament(
                self._session,
                tournament_id=tournament_id,
            )
            await TournamentMatchesRepo.delete_for_tournament(
                self._session,
                tournament_id=tournament_id,
            )
            await TournamentParticipantsRepo.delete_for_tournament(
                self._session,
                tournament_id=tournament_id,
            )
            return await TournamentsRepo.delete_by_id(self._session, tournament_id)

    async def _load_state(self, tournament: Tournament) -> TournamentState:
        participants = await TournamentParticipantsRepo.list_for_tournament(
            self._session,
            tournament_id=tournament.id,
        )
        matches = await TournamentMatchesRepo.list_for_tournament(
            self._session,
            tournament_id=tournament.id,
        )
        slots = await TournamentBracketSlotsRepo.list_for_tournament(
            self._session,
            tournament_id=tournament.id,
        )
        return build_tournament_state(
            tournament=tournament,
            participants=participants,
            matches=matches,
            bracket_slots=slots,
        )
