from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

import structlog

from rankvote.tournament.types import ActivePairing, PairingView, ParticipantDisplay

logger = structlog.get_logger("rankvote.tournament.display")


class ParticipantLookup(Protocol):
    async def lookup(self, participant_id: str) -> ParticipantDisplay | None: ...


async def describe_participant(
    lookup: ParticipantLookup,
    *,
    participant_id: str,
) -> ParticipantDisplay:
    try:
        display = await lookup.lookup(participant_id)
    except Exception as exc:
        logger.warning(
            "tournament_display_lookup_failed",
            participant_id=participant_id,
            exc_info=exc,
        )
        display = None
    if display is None:
        return ParticipantDisplay(participant_id=participant_id, name=participant_id)
    return display


async def describe_pairings(
    pairings: Iterable[ActivePairing],
    lookup: ParticipantLookup,
) -> list[PairingView]:
    cache: dict[str, ParticipantDisplay] = {}
    views: list[PairingView] = []
    for pairing in pairings:
        for participant_id in (pairing.participant_a, pairing.participant_b):
            if participant_id not in cache:
                cache[participant_id] = await describe_participant(
                    lookup,
                    participant_id=participant_id,
                )
        views.append(
            PairingView(
                pairing=pairing,
                display_a=cache[pairing.participant_a],
                display_b=cache[pairing.participant_b],
            )
        )
    return views
