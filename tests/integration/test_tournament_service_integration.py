from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from rankvote.db.models.tournaments import Tournament
from rankvote.tournament.constants import (
    OUTCOME_WIN_A,
    TOURNAMENT_STAGE_BRACKET,
    TOURNAMENT_STAGE_COMPLETED,
)
from rankvote.tournament.errors import (
    TournamentCompletedError,
    TournamentInvalidPairingError,
    TournamentNotFoundError,
    TournamentStageError,
)
from rankvote.tournament.lifecycle import TournamentStateMachine
from rankvote.tournament.service_facade import TournamentServiceFacade
from rankvote.tournament.types import EngineConfig

UTC = timezone.utc
NOW = datetime(2026, 10, 16, 12, 0, tzinfo=UTC)
MACHINE = TournamentStateMachine(EngineConfig())


async def _create(session_factory, participant_ids: list[str], **kwargs):
    async with session_factory.begin() as session:
        return await TournamentServiceFacade.create_tournament(
            session,
            owner_identity="owner-1",
            participant_ids=participant_ids,
            now_utc=NOW,
            machine=MACHINE,
            **kwargs,
        )


async def _submit_next(session_factory, tournament_id):
    async with session_factory.begin() as session:
        pairing = await TournamentServiceFacade.get_next_pairing(
            session,
            tournament_id=tournament_id,
            machine=MACHINE,
        )
        assert pairing is not None
        return await TournamentServiceFacade.submit_result(
            session,
            tournament_id=tournament_id,
            participant_a=pairing.participant_a,
            participant_b=pairing.participant_b,
            outcome=OUTCOME_WIN_A,
            now_utc=NOW,
            round_no=pairing.round_no,
            slot_id=pairing.slot_id,
            machine=MACHINE,
        )


@pytest.mark.asyncio
async def test_tournament_runs_from_swiss_to_champion(session_factory) -> None:
    created = await _create(session_factory, ["a", "b", "c", "d", "e"], total_swiss_rounds=2)
    tournament_id = created.tournament_id

    async with session_factory() as session:
        pairings = await TournamentServiceFacade.get_active_pairings(
            session,
            tournament_id=tournament_id,
            machine=MACHINE,
        )
        with pytest.raises(TournamentStageError):
            await TournamentServiceFacade.get_final_standings(
                session,
                tournament_id=tournament_id,
                machine=MACHINE,
            )
    assert [(p.participant_a, p.participant_b) for p in pairings] == [("a", "b"), ("c", "d")]

    seeded = False
    for _ in range(64):
        result = await _submit_next(session_factory, tournament_id)
        seeded = seeded or result.bracket_seeded
        if result.tournament_completed:
            break
    assert seeded
    assert result.tournament_completed

    async with session_factory() as session:
        state = await TournamentServiceFacade.get_tournament(session, tournament_id=tournament_id)
        bracket = await TournamentServiceFacade.get_bracket(session, tournament_id=tournament_id)
        final_standings = await TournamentServiceFacade.get_final_standings(
            session,
            tournament_id=tournament_id,
            machine=MACHINE,
        )
        row = await session.get(Tournament, tournament_id)

    assert state.stage == TOURNAMENT_STAGE_COMPLETED
    assert bracket is not None
    assert state.champion_id == bracket.champion_id
    assert row is not None
    assert row.champion_id == state.champion_id
    assert len(final_standings) == 5
    assert final_standings[0].participant_id == state.champion_id

    with pytest.raises(TournamentCompletedError):
        async with session_factory.begin() as session:
            await TournamentServiceFacade.submit_result(
                session,
                tournament_id=tournament_id,
                participant_a="a",
                participant_b="b",
                outcome=OUTCOME_WIN_A,
                now_utc=NOW,
                machine=MACHINE,
            )


@pytest.mark.asyncio
async def test_closing_round_and_retry_are_persisted_once(session_factory) -> None:
    created = await _create(session_factory, ["a", "b", "c", "d"], total_swiss_rounds=1)

    first = await _submit_next(session_factory, created.tournament_id)
    assert not first.round_advanced
    closing = await _submit_next(session_factory, created.tournament_id)
    assert closing.bracket_seeded
    assert closing.state.stage == TOURNAMENT_STAGE_BRACKET

    async with session_factory.begin() as session:
        retry = await TournamentServiceFacade.submit_result(
            session,
            tournament_id=created.tournament_id,
            participant_a="c",
            participant_b="d",
            outcome=OUTCOME_WIN_A,
            now_utc=NOW,
            machine=MACHINE,
        )
    assert retry.replayed

    async with session_factory() as session:
        state = await TournamentServiceFacade.get_tournament(
            session,
            tournament_id=created.tournament_id,
        )
        pairings = await TournamentServiceFacade.get_active_pairings(
            session,
            tournament_id=created.tournament_id,
            machine=MACHINE,
        )
    assert len(state.matches) == 2
    assert state.bracket is not None
    assert [(p.slot_id, p.participant_a, p.participant_b) for p in pairings] == [
        ("W3-1", "a", "d"),
        ("W3-2", "c", "b"),
    ]


@pytest.mark.asyncio
async def test_rejected_submission_leaves_state_untouched(session_factory) -> None:
    created = await _create(session_factory, ["a", "b", "c", "d"])

    with pytest.raises(TournamentInvalidPairingError):
        async with session_factory.begin() as session:
            await TournamentServiceFacade.submit_result(
                session,
                tournament_id=created.tournament_id,
                participant_a="a",
                participant_b="d",
                outcome=OUTCOME_WIN_A,
                now_utc=NOW,
                machine=MACHINE,
            )

    async with session_factory() as session:
        state = await TournamentServiceFacade.get_tournament(
            session,
            tournament_id=created.tournament_id,
        )
    assert all(match.outcome is None for match in state.matches)
    assert all(standing.score == 0 for standing in state.participants)


@pytest.mark.asyncio
async def test_unknown_tournament_raises_not_found(session_factory) -> None:
    async with session_factory() as session:
        with pytest.raises(TournamentNotFoundError):
            await TournamentServiceFacade.get_tournament(session, tournament_id=uuid4())
        with pytest.raises(TournamentNotFoundError):
            await TournamentServiceFacade.get_standings(session, tournament_id=uuid4())
        with pytest.raises(TournamentNotFoundError):
            await TournamentServiceFacade.delete_tournament(session, tournament_id=uuid4())


@pytest.mark.asyncio
async def test_owner_listing_and_delete(session_factory) -> None:
    first = await _create(session_factory, ["a", "b"])
    second = await _create(session_factory, ["c", "d"])

    async with session_factory() as session:
        listed = await TournamentServiceFacade.list_tournaments_for_owner(
            session,
            owner_identity="owner-1",
        )
    assert {state.tournament_id for state in listed} == {first.tournament_id, second.tournament_id}

    async with session_factory.begin() as session:
        await TournamentServiceFacade.delete_tournament(session, tournament_id=first.tournament_id)

    async with session_factory() as session:
        listed = await TournamentServiceFacade.list_tournaments_for_owner(
            session,
            owner_identity="owner-1",
        )
    assert [state.tournament_id for state in listed] == [second.tournament_id]


async def _submit(session_factory, tournament_id, participant_a: str, participant_b: str, **keys):
    async with session_factory.begin() as session:
        return await TournamentServiceFacade.submit_result(
            session,
            tournament_id=tournament_id,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=OUTCOME_WIN_A,
            now_utc=NOW,
            machine=MACHINE,
            **keys,
        )


@pytest.mark.asyncio
async def test_retry_after_seeding_leaves_reseeded_pair_open(session_factory) -> None:
    created = await _create(session_factory, ["a", "b"], total_swiss_rounds=1)

    closing = await _submit(session_factory, created.tournament_id, "a", "b")
    assert closing.bracket_seeded
    retry = await _submit(session_factory, created.tournament_id, "a", "b")
    assert retry.replayed

    async with session_factory() as session:
        state = await TournamentServiceFacade.get_tournament(
            session,
            tournament_id=created.tournament_id,
        )
        pairing = await TournamentServiceFacade.get_next_pairing(
            session,
            tournament_id=created.tournament_id,
            machine=MACHINE,
        )
    assert len(state.matches) == 1
    assert pairing is not None
    assert pairing.slot_id == "W4-1"

    decided = await _submit(
        session_factory,
        created.tournament_id,
        "a",
        "b",
        slot_id=pairing.slot_id,
    )
    assert not decided.replayed

    async with session_factory() as session:
        bracket = await TournamentServiceFacade.get_bracket(
            session,
            tournament_id=created.tournament_id,
        )
    assert bracket is not None
    assert bracket.slots["W4-1"].winner_id == "a"
