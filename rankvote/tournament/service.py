from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID, uuid4

import structlog

from rankvote.core.logging import bind_tournament_context, clear_tournament_context
from rankvote.tournament.errors import TournamentNotFoundError
from rankvote.tournament.gateway import TournamentGateway
from rankvote.tournament.lifecycle import TournamentStateMachine
from rankvote.tournament.types import (
    ActivePairing,
    BracketState,
    EngineConfig,
    ParticipantStanding,
    SubmitOutcome,
    TournamentState,
)

logger = structlog.get_logger("rankvote.tournament.service")


def _resolve_machine(machine: TournamentStateMachine | None) -> TournamentStateMachine:
    if machine is not None:
        return machine
    return TournamentStateMachine(EngineConfig.from_settings())


async def _load_or_raise(
    gateway: TournamentGateway,
    *,
    tournament_id: UUID,
    for_update: bool = False,
) -> TournamentState:
    state = await gateway.find_by_id(tournament_id, for_update=for_update)
    if state is None:
        raise TournamentNotFoundError
    return state


async def create_tournament(
    gateway: TournamentGateway,
    *,
    owner_identity: str,
    participant_ids: Iterable[str],
    now_utc: datetime,
    total_swiss_rounds: int | None = None,
    machine: TournamentStateMachine | None = None,
) -> TournamentState:
    resolved_machine = _resolve_machine(machine)
    state = resolved_machine.create(
        tournament_id=uuid4(),
        owner_identity=owner_identity,
        participant_ids=participant_ids,
        now_utc=now_utc,
        total_swiss_rounds=total_swiss_rounds,
    )
    await gateway.save(state)
    for record in state.matches:
        await gateway.save_match(state.tournament_id, record, now_utc=now_utc)

    logger.info(
        "tournament_created",
        tournament_id=str(state.tournament_id),
        owner_identity=owner_identity,
        participants_total=len(state.participants),
        total_swiss_rounds=state.total_swiss_rounds,
    )
    return state


async def get_tournament(gateway: TournamentGateway, *, tournament_id: UUID) -> TournamentState:
    return await _load_or_raise(gateway, tournament_id=tournament_id)


async def list_tournaments_for_owner(
    gateway: TournamentGateway,
    *,
    owner_identity: str,
) -> list[TournamentState]:
    return await gateway.list_by_owner(owner_identity)


async def delete_tournament(gateway: TournamentGateway, *, tournament_id: UUID) -> None:
    deleted = await gateway.delete(tournament_id)
    if not deleted:
        raise TournamentNotFoundError
    logger.info("tournament_deleted", tournament_id=str(tournament_id))


async def get_active_pairings(
    gateway: TournamentGateway,
    *,
    tournament_id: UUID,
    machine: TournamentStateMachine | None = None,
) -> list[ActivePairing]:
    state = await _load_or_raise(gateway, tournament_id=tournament_id)
    return _resolve_machine(machine).active_pairings(state)


async def get_next_pairing(
    gateway: TournamentGateway,
    *,
    tournament_id: UUID,
    machine: TournamentStateMachine | None = None,
) -> ActivePairing | None:
    state = await _load_or_raise(gateway, tournament_id=tournament_id)
    return _resolve_machine(machine).next_pairing(state)


async def get_standings(
    gateway: TournamentGateway,
    *,
    tournament_id: UUID,
    machine: TournamentStateMachine | None = None,
) -> list[ParticipantStanding]:
    state = await _load_or_raise(gateway, tournament_id=tournament_id)
    return _resolve_machine(machine).standings(state)


async def get_final_standings(
    gateway: TournamentGateway,
    *,
    tournament_id: UUID,
    machine: TournamentStateMachine | None = None,
) -> list[ParticipantStanding]:
    state = await _load_or_raise(gateway, tournament_id=tournament_id)
    return _resolve_machine(machine).final_standings(state)


async def get_bracket(gateway: TournamentGateway, *, tournament_id: UUID) -> BracketState | None:
    await _load_or_raise(gateway, tournament_id=tournament_id)
    return await gateway.load_bracket_state(tournament_id)


async def submit_result(
    gateway: TournamentGateway,
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
    bind_tournament_context(tournament_id)
    try:
        state = await _load_or_raise(gateway, tournament_id=tournament_id, for_update=True)
        result = _resolve_machine(machine).submit_result(
            state,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
            now_utc=now_utc,
            round_no=round_no,
            slot_id=slot_id,
        )
        if result.replayed:
            logger.info(
                "tournament_result_replayed",
                participant_a=participant_a,
                participant_b=participant_b,
                outcome=outcome,
                slot_id=slot_id,
            )
            return result

        for record in result.records_to_save:
            await gateway.save_match(tournament_id, record, now_utc=now_utc)
        await gateway.save(result.state)
        if result.state.bracket is not None:
            await gateway.save_bracket_state(tournament_id, result.state.bracket)

        logger.info(
            "tournament_result_recorded",
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
            stage=state.stage,
            round_no=state.current_round,
        )
        if result.round_advanced:
            logger.info(
                "tournament_round_advanced",
                current_round=result.state.current_round,
                total_swiss_rounds=result.state.total_swiss_rounds,
            )
        if result.bracket_seeded:
            logger.info(
                "tournament_bracket_seeded",
                bracket_size=result.state.bracket_size,
                seeds_total=min(result.state.bracket_size, len(result.state.participants)),
            )
        if result.tournament_completed:
            logger.info("tournament_completed", champion_id=result.state.champion_id)
        return result
    finally:
        clear_tournament_context()
