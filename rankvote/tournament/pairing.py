from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from rankvote.tournament.constants import (
    MATCH_STAGE_SWISS,
    MATCH_STATUS_WALKOVER,
    OUTCOME_BYE,
)
from rankvote.tournament.errors import SwissStageComplete
from rankvote.tournament.standings import order_standings
from rankvote.tournament.types import (
    MatchRecord,
    ParticipantStanding,
    SwissPair,
    build_match_record,
)


def _pair_key(*, participant_a: str, participant_b: str) -> frozenset[str]:
    return frozenset((participant_a, participant_b))


def collect_previous_meetings(*, matches: Iterable[MatchRecord]) -> Counter[frozenset[str]]:
    meetings: Counter[frozenset[str]] = Counter()
    for match in matches:
        if match.stage != MATCH_STAGE_SWISS or match.participant_b is None:
            continue
        meetings[match.pair_key] += 1
    return meetings


def collect_bye_history(*, matches: Iterable[MatchRecord]) -> set[str]:
    return {
        match.participant_a
        for match in matches
        if match.stage == MATCH_STAGE_SWISS and match.participant_b is None
    }


def _pick_opponent_index(
    *,
    participant_id: str,
    candidates: list[ParticipantStanding],
    previous_meetings: Counter[frozenset[str]],
) -> int:
    meeting_counts = [
        previous_meetings[
            _pair_key(participant_a=participant_id, participant_b=candidate.participant_id)
        ]
        for candidate in candidates
    ]
    for index, count in enumerate(meeting_counts):
        if count == 0:
            return index
    # Every remaining candidate is a rematch: fewest meetings, then nearest rank.
    return min(range(len(candidates)), key=lambda index: (meeting_counts[index], index))


def _pick_bye_participant(
    *,
    ordered: list[ParticipantStanding],
    bye_history: set[str],
) -> ParticipantStanding:
    lowest_first = list(reversed(ordered))
    for participant in lowest_first:
        if participant.participant_id not in bye_history:
            return participant
    return lowest_first[0]


def build_swiss_pairs(
    *,
    standings: list[ParticipantStanding],
    previous_meetings: Counter[frozenset[str]],
    bye_history: set[str] | None = None,
) -> list[SwissPair]:
    if len(standings) < 2:
        raise SwissStageComplete

    ordered = order_standings(standings)
    remaining = list(ordered)
    pairs: list[SwissPair] = []
    resolved_bye_history = bye_history or set()
    bye_pair: SwissPair | None = None

    if len(remaining) % 2 == 1:
        bye_participant = _pick_bye_participant(
            ordered=remaining,
            bye_history=resolved_bye_history,
        )
        remaining = [
            participant
            for participant in remaining
            if participant.participant_id != bye_participant.participant_id
        ]
        bye_pair = SwissPair(participant_a=bye_participant.participant_id, participant_b=None)

    while remaining:
        participant = remaining.pop(0)
        opponent_index = _pick_opponent_index(
            participant_id=participant.participant_id,
            candidates=remaining,
            previous_meetings=previous_meetings,
        )
        opponent = remaining.pop(opponent_index)
        pairs.append(
            SwissPair(
                participant_a=participant.participant_id,
                participant_b=opponent.participant_id,
            )
        )

    if bye_pair is not None:
        pairs.append(bye_pair)

    return pairs


def next_round_pairings(
    *,
    standings: list[ParticipantStanding],
    match_history: list[MatchRecord],
    round_no: int,
) -> list[MatchRecord]:
    swiss_pairs = build_swiss_pairs(
        standings=standings,
        previous_meetings=collect_previous_meetings(matches=match_history),
        bye_history=collect_bye_history(matches=match_history),
    )
    records: list[MatchRecord] = []
    for pair in swiss_pairs:
        if pair.participant_b is None:
            records.append(
                MatchRecord(
                    stage=MATCH_STAGE_SWISS,
                    round_no=round_no,
                    participant_a=pair.participant_a,
                    participant_b=None,
                    outcome=OUTCOME_BYE,
                    status=MATCH_STATUS_WALKOVER,
                )
            )
            continue
        records.append(
            build_match_record(
                stage=MATCH_STAGE_SWISS,
                round_no=round_no,
                participant_a=pair.participant_a,
                participant_b=pair.participant_b,
                outcome=None,
            )
        )
    return records
