from __future__ import annotations

import pytest

from rankvote.tournament import display
from rankvote.tournament.constants import MATCH_STAGE_SWISS
from rankvote.tournament.display import describe_pairings
from rankvote.tournament.types import ActivePairing, ParticipantDisplay
from tests.fakes import FailingParticipantLookup


class _StaticLookup:
    def __init__(self, names: dict[str, str]) -> None:
        self.names = names
        self.calls: list[str] = []

    async def lookup(self, participant_id: str) -> ParticipantDisplay | None:
        self.calls.append(participant_id)
        name = self.names.get(participant_id)
        if name is None:
            return None
        return ParticipantDisplay(
            participant_id=participant_id,
            name=name,
            image_url=f"https://img.example/{participant_id}.png",
        )


class _RecordingLogger:
    def __init__(self) -> None:
        self.warnings: list[tuple[str, dict[str, object]]] = []

    def warning(self, event: str, **kwargs: object) -> None:
        self.warnings.append((event, kwargs))


def _pairing(participant_a: str, participant_b: str) -> ActivePairing:
    return ActivePairing(
        stage=MATCH_STAGE_SWISS,
        round_no=0,
        participant_a=participant_a,
        participant_b=participant_b,
    )


@pytest.mark.asyncio
async def test_describe_pairings_attaches_lookup_metadata() -> None:
    lookup = _StaticLookup({"fox": "Red Fox"})

    views = await describe_pairings([_pairing("fox", "owl"), _pairing("fox", "elk")], lookup)

    assert views[0].display_a.name == "Red Fox"
    assert views[0].display_a.image_url == "https://img.example/fox.png"
    assert views[0].display_b == ParticipantDisplay(participant_id="owl", name="owl")
    assert views[1].pairing.participant_b == "elk"
    assert lookup.calls == ["fox", "owl", "elk"]


@pytest.mark.asyncio
async def test_lookup_failure_falls_back_to_raw_ids(monkeypatch) -> None:
    recorder = _RecordingLogger()
    monkeypatch.setattr(display, "logger", recorder)
    lookup = FailingParticipantLookup()

    views = await describe_pairings([_pairing("fox", "owl")], lookup)

    assert views[0].display_a == ParticipantDisplay(participant_id="fox", name="fox")
    assert views[0].display_b == ParticipantDisplay(participant_id="owl", name="owl")
    assert [event for event, _ in recorder.warnings] == [
        "tournament_display_lookup_failed",
        "tournament_display_lookup_failed",
    ]
    assert recorder.warnings[0][1]["participant_id"] == "fox"
