"""Double-elimination bracket built from final Swiss standings.

The slot graph is derived from the bracket size alone, so only slot contents
need to be stored. Winner-bracket losers drop into the loser bracket; a loss
inside the loser bracket ends a run. Slot ids are ``W<round>-<position>``,
``L<round>-<position>``, ``GF-1`` and ``GF-2``.
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from functools import lru_cache

from rankvote.tournament.constants import (
    BRACKET_PHASE_COMPLETE,
    BRACKET_PHASE_GRAND_FINAL_GAME_1,
    BRACKET_PHASE_GRAND_FINAL_GAME_2,
    BRACKET_PHASE_IN_PROGRESS,
    BRACKET_PHASE_SEEDED,
    GRAND_FINAL_GAME_1_SLOT_ID,
    GRAND_FINAL_GAME_2_SLOT_ID,
    MATCH_STAGE_GRAND_FINAL,
    MATCH_STAGE_LOSERS,
    MATCH_STAGE_WINNERS,
    MATCH_STATUS_COMPLETED,
    MATCH_STATUS_PENDING,
    MATCH_STATUS_VOID,
    MATCH_STATUS_WALKOVER,
    is_power_of_two,
)
from rankvote.tournament.errors import (
    TournamentInvalidOutcomeError,
    TournamentInvalidPairingError,
)
from rankvote.tournament.types import BracketSlot, BracketState, ParticipantStanding

_SOURCE_SEED = "seed"
_SOURCE_WINNER = "winner"
_SOURCE_LOSER = "loser"
_SOURCE_NONE = "none"

_WAITING = object()


@dataclass(frozen=True, slots=True)
class SlotSpec:
    slot_id: str
    stage: str
    round_no: int
    position: int
    source_1: tuple[str, str]
    source_2: tuple[str, str]


def winners_slot_id(round_no: int, position: int) -> str:
    return f"W{round_no}-{position}"


def losers_slot_id(round_no: int, position: int) -> str:
    return f"L{round_no}-{position}"


def bracket_rounds(bracket_size: int) -> int:
    return int(math.log2(bracket_size))


def seed_positions(bracket_size: int) -> list[int]:
    order = [1, 2]
    while len(order) < bracket_size:
        size = len(order) * 2
        order = [seed for top in order for seed in (top, size + 1 - top)]
    return order


@lru_cache(maxsize=8)
def bracket_layout(bracket_size: int) -> tuple[SlotSpec, ...]:
    if bracket_size < 2 or not is_power_of_two(bracket_size):
        raise ValueError("bracket_size must be a power of two >= 2")

    rounds = bracket_rounds(bracket_size)
    positions = seed_positions(bracket_size)
    specs: list[SlotSpec] = []

    for position in range(1, bracket_size // 2 + 1):
        specs.append(
            SlotSpec(
                slot_id=winners_slot_id(1, position),
                stage=MATCH_STAGE_WINNERS,
                round_no=1,
                position=position,
                source_1=(_SOURCE_SEED, str(positions[2 * position - 2])),
                source_2=(_SOURCE_SEED, str(positions[2 * position - 1])),
            )
        )
    for round_no in range(2, rounds + 1):
        for position in range(1, (bracket_size >> round_no) + 1):
            specs.append(
                SlotSpec(
                    slot_id=winners_slot_id(round_no, position),
                    stage=MATCH_STAGE_WINNERS,
                    round_no=round_no,
                    position=position,
                    source_1=(_SOURCE_WINNER, winners_slot_id(round_no - 1, 2 * position - 1)),
                    source_2=(_SOURCE_WINNER, winners_slot_id(round_no - 1, 2 * position)),
                )
            )

    if rounds >= 2:
        for position in range(1, (bracket_size >> 2) + 1):
            specs.append(
                SlotSpec(
                    slot_id=losers_slot_id(1, position),
                    stage=MATCH_STAGE_LOSERS,
                    round_no=1,
                    position=position,
                    source_1=(_SOURCE_LOSER, winners_slot_id(1, 2 * position - 1)),
                    source_2=(_SOURCE_LOSER, winners_slot_id(1, 2 * position)),
                )
            )
        for drop_round in range(1, rounds):
            major_round = 2 * drop_round
            major_total = bracket_size >> (drop_round + 1)
            for position in range(1, major_total + 1):
                # Drop-ins arrive in reverse order to delay winner-bracket rematches.
                specs.append(
                    SlotSpec(
                        slot_id=losers_slot_id(major_round, position),
                        stage=MATCH_STAGE_LOSERS,
                        round_no=major_round,
                        position=position,
                        source_1=(_SOURCE_WINNER, losers_slot_id(major_round - 1, position)),
                        source_2=(
                            _SOURCE_LOSER,
                            winners_slot_id(drop_round + 1, major_total + 1 - position),
                        ),
                    )
                )
            if drop_round > rounds - 2:
                continue
            minor_round = major_round + 1
            for position in range(1, (bracket_size >> (drop_round + 2)) + 1):
                specs.append(
                    SlotSpec(
                        slot_id=losers_slot_id(minor_round, position),
                        stage=MATCH_STAGE_LOSERS,
                        round_no=minor_round,
                        position=position,
                        source_1=(_SOURCE_WINNER, losers_slot_id(major_round, 2 * position - 1)),
                        source_2=(_SOURCE_WINNER, losers_slot_id(major_round, 2 * position)),
                    )
                )

    losers_final = (
        (_SOURCE_WINNER, losers_slot_id(2 * (rounds - 1), 1))
        if rounds >= 2
        else (_SOURCE_NONE, "")
    )
    specs.append(
        SlotSpec(
            slot_id=GRAND_FINAL_GAME_1_SLOT_ID,
            stage=MATCH_STAGE_GRAND_FINAL,
            round_no=1,
            position=1,
            source_1=(_SOURCE_WINNER, winners_slot_id(rounds, 1)),
            source_2=losers_final,
        )
    )
    return tuple(specs)


def _source_value(
    *,
    bracket: BracketState,
    slot: BracketSlot,
    side: int,
    source: tuple[str, str],
) -> object:
    kind, reference = source
    if kind == _SOURCE_SEED:
        return slot.participant_1 if side == 1 else slot.participant_2
    if kind == _SOURCE_NONE:
        return None
    feeder = bracket.slots[reference]
    if not feeder.is_resolved:
        return _WAITING
    if kind == _SOURCE_WINNER:
        return feeder.winner_id
    return feeder.loser_id


def _settle(bracket: BracketState) -> None:
    changed = True
    while changed:
        changed = False
        for spec in bracket_layout(bracket.bracket_size):
            slot = bracket.slots[spec.slot_id]
            if slot.status != MATCH_STATUS_PENDING:
                continue
            value_1 = _source_value(bracket=bracket, slot=slot, side=1, source=spec.source_1)
            value_2 = _source_value(bracket=bracket, slot=slot, side=2, source=spec.source_2)
            if value_1 is not _WAITING and slot.participant_1 != value_1:
                slot.participant_1 = value_1  # type: ignore[assignment]
                changed = True
            if value_2 is not _WAITING and slot.participant_2 != value_2:
                slot.participant_2 = value_2  # type: ignore[assignment]
                changed = True
            if value_1 is _WAITING or value_2 is _WAITING:
                continue
            if slot.participant_1 is not None and slot.participant_2 is not None:
                continue
            sole = slot.participant_1 or slot.participant_2
            if sole is None:
                slot.status = MATCH_STATUS_VOID
            else:
                slot.status = MATCH_STATUS_WALKOVER
                slot.winner_id = sole
            changed = True


def seed_bracket(
    *,
    standings: list[ParticipantStanding],
    bracket_size: int,
) -> BracketState:
    """Seed the top ``bracket_size`` entries of ``standings`` (already ordered).

    Missing seeds leave their round-one opponent a bye.
    """
    seeds = [standing.participant_id for standing in standings[:bracket_size]]
    bracket = BracketState(bracket_size=bracket_size)
    for spec in bracket_layout(bracket_size):
        slot = BracketSlot(
            slot_id=spec.slot_id,
            stage=spec.stage,
            round_no=spec.round_no,
            position=spec.position,
        )
        if spec.source_1[0] == _SOURCE_SEED:
            seed_1 = int(spec.source_1[1])
            seed_2 = int(spec.source_2[1])
            slot.participant_1 = seeds[seed_1 - 1] if seed_1 <= len(seeds) else None
            slot.participant_2 = seeds[seed_2 - 1] if seed_2 <= len(seeds) else None
        bracket.slots[slot.slot_id] = slot
    _settle(bracket)
    return bracket


def find_open_slot(
    bracket: BracketState,
    *,
    participant_a: str,
    participant_b: str,
) -> BracketSlot | None:
    for slot in bracket.open_slots():
        if slot.has_pair(participant_a, participant_b):
            return slot
    return None


def find_decided_slot(
    bracket: BracketState,
    *,
    participant_a: str,
    participant_b: str,
) -> BracketSlot | None:
    decided = [
        slot
        for slot in bracket.ordered_slots()
        if slot.status == MATCH_STATUS_COMPLETED and slot.has_pair(participant_a, participant_b)
    ]
    return decided[-1] if decided else None


def opening_decisions(bracket: BracketState, slot_id: str) -> set[str]:
    """Voted slots whose results put the current occupants into ``slot_id``.

    Walkover and void slots are looked through; seeds end the walk.
    """
    if slot_id == GRAND_FINAL_GAME_2_SLOT_ID:
        return {GRAND_FINAL_GAME_1_SLOT_ID}
    specs = {spec.slot_id: spec for spec in bracket_layout(bracket.bracket_size)}
    decided: set[str] = set()
    seen: set[str] = set()
    pending = [slot_id]
    while pending:
        spec = specs[pending.pop()]
        for kind, reference in (spec.source_1, spec.source_2):
            if kind in (_SOURCE_SEED, _SOURCE_NONE) or reference in seen:
                continue
            seen.add(reference)
            if bracket.slots[reference].status == MATCH_STATUS_COMPLETED:
                decided.add(reference)
            else:
                pending.append(reference)
    return decided


def record_bracket_result(
    bracket: BracketState,
    *,
    slot_id: str,
    winner_id: str,
    grand_final_reset: bool = True,
) -> BracketState:
    updated = copy.deepcopy(bracket)
    slot = updated.slots.get(slot_id)
    if slot is None or not slot.is_playable:
        raise TournamentInvalidPairingError(f"bracket slot {slot_id} is not open")
    if winner_id not in (slot.participant_1, slot.participant_2):
        raise TournamentInvalidOutcomeError("winner must be one of the slot participants")

    slot.winner_id = winner_id
    slot.loser_id = slot.participant_2 if winner_id == slot.participant_1 else slot.participant_1
    slot.status = MATCH_STATUS_COMPLETED

    if (
        slot.slot_id == GRAND_FINAL_GAME_1_SLOT_ID
        and grand_final_reset
        and winner_id == slot.participant_2
    ):
        updated.slots[GRAND_FINAL_GAME_2_SLOT_ID] = BracketSlot(
            slot_id=GRAND_FINAL_GAME_2_SLOT_ID,
            stage=MATCH_STAGE_GRAND_FINAL,
            round_no=2,
            position=1,
            participant_1=slot.participant_1,
            participant_2=slot.participant_2,
        )

    _settle(updated)
    return updated


def bracket_phase(bracket: BracketState) -> str:
    if bracket.is_complete:
        return BRACKET_PHASE_COMPLETE
    if GRAND_FINAL_GAME_2_SLOT_ID in bracket.slots:
        return BRACKET_PHASE_GRAND_FINAL_GAME_2
    game_1 = bracket.slots.get(GRAND_FINAL_GAME_1_SLOT_ID)
    if game_1 is not None and game_1.is_playable:
        return BRACKET_PHASE_GRAND_FINAL_GAME_1
    if not any(slot.status == MATCH_STATUS_COMPLETED for slot in bracket.slots.values()):
        return BRACKET_PHASE_SEEDED
    return BRACKET_PHASE_IN_PROGRESS
