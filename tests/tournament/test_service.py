from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from rankvote.tournament import service
from rankvote.tournament.constants import OUTCOME_WIN_A, TOURNAMENT_STAGE_COMPLETED
from rankvote.tournament.errors import TournamentNotFoundError
from rankvote.tournament.lifecycle import TournamentStateMachine
from rankvote.tournament.types import EngineConfig
from tests.fakes import InMemoryTournamentGateway

UTC = timezone.utc
NOW = datetime(2026, 10, 16, 12, 0, tzinfo=UTC)
MACHINE = TournamentStateMachine(EngineConfig())


class _RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def info(self, event: str, **kwargs: object) -> None:
        self.events.append((event, kwargs))

    def warning(self, event: str, **kwargs: object) -> None:
        self.events.append((event, kwargs))


async def _play_out(gateway: InMemoryTournamentGateway, tournament_id) -> list[str]:
    outcomes: list[str] = []
    for _ in range(64):
        pairing = await service.get_next_pairing(
            gateway,
            tournament_id=tournament_id,
            machine=MACHINE,
        )
        if pairing is None:
            break
        result = await service.submit_result(
            gateway,
            tournament_id=tournament_id,
            participant_a=pairing.participant_a,
            participant_b=pairing.participant_b,
            outcome=OUTCOME_WIN_A,
            now_utc=NOW,
            round_no=pairing.round_no,
            slot_id=pairing.slot_id,
            machine=MACHINE,
        )
        outcomes.append(result.state.stage)
    return outcomes


@pytest.mark.asyncio
async def test_create_persists_first_round(monkeypatch) -> None:
    recorder = _RecordingLogger()
    monkeypatch.setattr(service, "logger", recorder)
    gateway = InMemoryTournamentGateway()

    state = await service.create_tournament(
        gateway,
        owner_identity="owner-1",
        participant_ids=["a", "b", "c"],
        now_utc=NOW,
        machine=MACHINE,
    )

    assert state.tournament_id in gateway.tournaments
    assert len(gateway.matches[state.tournament_id]) == 2
    assert recorder.events[0][0] == "tournament_created"
    assert recorder.events[0][1]["participants_total"] == 3


@pytest.mark.asyncio
async def test_submit_locks_tournament_and_logs_transitions(monkeypatch) -> None:
    recorder = _RecordingLogger()
    monkeypatch.setattr(service, "logger", recorder)
    gateway = InMemoryTournamentGateway()
    state = await service.create_tournament(
        gateway,
        owner_identity="owner-1",
        participant_ids=["a", "b", "c", "d"],
        now_utc=NOW,
        total_swiss_rounds=1,
        machine=MACHINE,
    )

    stages = await _play_out(gateway, state.tournament_id)

    assert stages[-1] == TOURNAMENT_STAGE_COMPLETED
    assert gateway.locked_ids.count(state.tournament_id) == len(stages)
    events = [event for event, _ in recorder.events]
    assert events.count("tournament_result_recorded") == len(stages)
    assert events.count("tournament_round_advanced") == 1
    assert events.count("tournament_bracket_seeded") == 1
    assert events[-1] == "tournament_completed"
    assert recorder.events[-1][1]["champion_id"] == "a"

    stored = await service.get_tournament(gateway, tournament_id=state.tournament_id)
    assert stored.champion_id == "a"
    assert await service.get_active_pairings(
        gateway,
        tournament_id=state.tournament_id,
        machine=MACHINE,
    ) == []


@pytest.mark.asyncio
async def test_replayed_submission_writes_nothing(monkeypatch) -> None:
    recorder = _RecordingLogger()
    monkeypatch.setattr(service, "logger", recorder)
    gateway = InMemoryTournamentGateway()
    state = await service.create_tournament(
        gateway,
        owner_identity="owner-1",
        participant_ids=["a", "b", "c", "d"],
        now_utc=NOW,
        machine=MACHINE,
    )
    for participant_a, participant_b in (("a", "b"), ("c", "d")):
        await service.submit_result(
            gateway,
            tournament_id=state.tournament_id,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=OUTCOME_WIN_A,
            now_utc=NOW,
            machine=MACHINE,
        )
    before = await service.get_tournament(gateway, tournament_id=state.tournament_id)

    result = await service.submit_result(
        gateway,
        tournament_id=state.tournament_id,
        participant_a="a",
        participant_b="b",
        outcome=OUTCOME_WIN_A,
        now_utc=NOW,
        machine=MACHINE,
    )

    assert result.replayed
    assert await service.get_tournament(gateway, tournament_id=state.tournament_id) == before
    assert recorder.events[-1][0] == "tournament_result_replayed"


@pytest.mark.asyncio
async def test_missing_tournament_raises_not_found() -> None:
    gateway = InMemoryTournamentGateway()

    with pytest.raises(TournamentNotFoundError):
        await service.submit_result(
            gateway,
            tournament_id=uuid4(),
            participant_a="a",
            participant_b="b",
            outcome=OUTCOME_WIN_A,
            now_utc=NOW,
            machine=MACHINE,
        )
    with pytest.raises(TournamentNotFoundError):
        await service.get_bracket(gateway, tournament_id=uuid4())
