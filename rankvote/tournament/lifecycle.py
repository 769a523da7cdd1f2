from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from rankvote.tournament.bracket import (
    find_decided_slot,
    find_open_slot,
    opening_decisions,
    record_bracket_result,
    seed_bracket,
)
from rankvote.tournament.constants import (
    MATCH_STAGE_SWISS,
    MATCH_STATUS_COMPLETED,
    MATCH_STATUS_PENDING,
    OUTCOME_DRAW,
    OUTCOME_WIN_A,
    OUTCOME_WIN_B,
    PARTICIPANT_ID_MAX_LENGTH,
    SUBMITTABLE_OUTCOMES,
    TOURNAMENT_MIN_PARTICIPANTS,
    TOURNAMENT_STAGE_BRACKET,
    TOURNAMENT_STAGE_COMPLETED,
    TOURNAMENT_STAGE_SWISS,
    swiss_rounds_for_participants,
)
from rankvote.tournament.errors import (
    SwissStageComplete,
    TournamentCompletedError,
    TournamentInsufficientParticipantsError,
    TournamentInvalidOutcomeError,
    TournamentInvalidPairingError,
    TournamentInvalidParticipantError,
    TournamentStageError,
)
from rankvote.tournament.pairing import next_round_pairings
from rankvote.tournament.standings import compute_standings
from rankvote.tournament.types import (
    ActivePairing,
    BracketSlot,
    BracketState,
    EngineConfig,
    MatchRecord,
    ParticipantStanding,
    SubmitOutcome,
    TournamentState,
    build_match_record,
)


def outcome_for_winner(*, participant_a: str, participant_b: str, winner_id: str | None) -> str:
    if winner_id is None:
        return OUTCOME_DRAW
    if winner_id == participant_a:
        return OUTCOME_WIN_A
    if winner_id == participant_b:
        return OUTCOME_WIN_B
    raise TournamentInvalidOutcomeError("winner must be one of the paired participants")


def _winner_for(*, participant_a: str, participant_b: str, outcome: str) -> str | None:
    if outcome == OUTCOME_WIN_A:
        return participant_a
    if outcome == OUTCOME_WIN_B:
        return participant_b
    return None


def _validate_participant_ids(participant_ids: Iterable[str]) -> list[str]:
    validated: list[str] = []
    seen: set[str] = set()
    for participant_id in participant_ids:
        if not isinstance(participant_id, str) or not participant_id.strip():
            raise TournamentInvalidParticipantError("participant id must be a non-empty string")
        if len(participant_id) > PARTICIPANT_ID_MAX_LENGTH:
            raise TournamentInvalidParticipantError(
                f"participant id longer than {PARTICIPANT_ID_MAX_LENGTH} characters"
            )
        if participant_id in seen:
            raise TournamentInvalidParticipantError(f"duplicate participant {participant_id}")
        seen.add(participant_id)
        validated.append(participant_id)
    if len(validated) < TOURNAMENT_MIN_PARTICIPANTS:
        raise TournamentInsufficientParticipantsError
    return validated


def _replace_record(matches: list[MatchRecord], record: MatchRecord) -> list[MatchRecord]:
    updated: list[MatchRecord] = []
    replaced = False
    for match in matches:
        if (
            match.stage == record.stage
            and match.round_no == record.round_no
            and match.pair_key == record.pair_key
        ):
            updated.append(record)
            replaced = True
            continue
        updated.append(match)
    if not replaced:
        updated.append(record)
    return updated


class TournamentStateMachine:
    """Owns stage and round transitions of a tournament.

    Every method is a pure function of the passed state; mutations return a
    new ``TournamentState`` inside ``SubmitOutcome`` together with the match
    records the caller has to persist.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()

    @property
    def config(self) -> EngineConfig:
        return self._config

    def create(
        self,
        *,
        tournament_id: UUID,
        owner_identity: str,
        participant_ids: Iterable[str],
        now_utc: datetime,
        total_swiss_rounds: int | None = None,
    ) -> TournamentState:
        validated_ids = _validate_participant_ids(participant_ids)
        if total_swiss_rounds is None:
            total_swiss_rounds = swiss_rounds_for_participants(
                participants_total=len(validated_ids),
                min_rounds=self._config.swiss_min_rounds,
                max_rounds=self._config.swiss_max_rounds,
            )
        elif total_swiss_rounds < 1:
            raise ValueError("total_swiss_rounds must be >= 1")

        standings = compute_standings(
            participant_ids=validated_ids,
            matches=[],
            config=self._config,
        )
        first_round = next_round_pairings(standings=standings, match_history=[], round_no=0)
        standings = compute_standings(
            participant_ids=validated_ids,
            matches=first_round,
            config=self._config,
        )
        return TournamentState(
            tournament_id=tournament_id,
            owner_identity=owner_identity,
            stage=TOURNAMENT_STAGE_SWISS,
            current_round=0,
            total_swiss_rounds=total_swiss_rounds,
            bracket_size=self._config.bracket_size,
            participants=standings,
            matches=first_round,
            created_at=now_utc,
            updated_at=now_utc,
        )

    def standings(self, state: TournamentState) -> list[ParticipantStanding]:
        return compute_standings(
            participant_ids=state.participant_ids,
            matches=state.matches,
            config=self._config,
        )

    def final_standings(self, state: TournamentState) -> list[ParticipantStanding]:
        if state.stage == TOURNAMENT_STAGE_SWISS:
            raise TournamentStageError("swiss stage is still running")
        return self.standings(state)

    def active_pairings(self, state: TournamentState) -> list[ActivePairing]:
        if state.stage == TOURNAMENT_STAGE_COMPLETED:
            return []
        if state.stage == TOURNAMENT_STAGE_BRACKET:
            if state.bracket is None:
                return []
            return [
                ActivePairing(
                    stage=slot.stage,
                    round_no=slot.round_no,
                    participant_a=str(slot.participant_1),
                    participant_b=str(slot.participant_2),
                    slot_id=slot.slot_id,
                )
                for slot in state.bracket.open_slots()
            ]

        rank = {
            standing.participant_id: index
            for index, standing in enumerate(self.standings(state))
        }
        pending = [
            match
            for match in state.round_matches(stage=MATCH_STAGE_SWISS, round_no=state.current_round)
            if match.participant_b is not None and match.status == MATCH_STATUS_PENDING
        ]
        pending.sort(
            key=lambda match: min(
                rank.get(match.participant_a, len(rank)),
                rank.get(str(match.participant_b), len(rank)),
            )
        )
        return [
            ActivePairing(
                stage=MATCH_STAGE_SWISS,
                round_no=match.round_no,
                participant_a=match.participant_a,
                participant_b=str(match.participant_b),
            )
            for match in pending
        ]

    def next_pairing(self, state: TournamentState) -> ActivePairing | None:
        pairings = self.active_pairings(state)
        return pairings[0] if pairings else None

    def submit_result(
        self,
        state: TournamentState,
        *,
        participant_a: str,
        participant_b: str,
        outcome: str,
        now_utc: datetime,
        round_no: int | None = None,
        slot_id: str | None = None,
    ) -> SubmitOutcome:
        """Record one result.

        ``slot_id`` (bracket) or ``round_no`` (Swiss) pin the submission to the
        pairing the voter saw; a pinned pairing that is already decided with
        the same result is a replay. Unpinned submissions go to the open
        pairing of the pair, except that a retry of the decision which just
        reopened that pair is treated as a replay.
        """
        if state.stage == TOURNAMENT_STAGE_COMPLETED:
            raise TournamentCompletedError
        if outcome not in SUBMITTABLE_OUTCOMES:
            raise TournamentInvalidOutcomeError(f"unknown outcome {outcome!r}")
        if participant_a == participant_b:
            raise TournamentInvalidPairingError("a participant cannot be paired with itself")

        if slot_id is not None:
            return self._submit_bracket_slot(
                state,
                slot_id=slot_id,
                participant_a=participant_a,
                participant_b=participant_b,
                outcome=outcome,
                now_utc=now_utc,
            )

        record = build_match_record(
            stage=MATCH_STAGE_SWISS,
            round_no=state.current_round if round_no is None else round_no,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
        )
        if round_no is not None:
            return self._submit_swiss_round(state, record=record, now_utc=now_utc)
        if state.stage == TOURNAMENT_STAGE_SWISS:
            return self._submit_swiss(state, record=record, now_utc=now_utc, pinned=False)
        return self._submit_bracket(
            state,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
            swiss_record=record,
            now_utc=now_utc,
        )

    def _find_swiss_record(
        self,
        state: TournamentState,
        *,
        round_no: int,
        pair_key: frozenset[str],
    ) -> MatchRecord | None:
        for match in state.round_matches(stage=MATCH_STAGE_SWISS, round_no=round_no):
            if match.participant_b is not None and match.pair_key == pair_key:
                return match
        return None

    def _is_swiss_replay(self, state: TournamentState, *, record: MatchRecord) -> bool:
        closed_round = state.current_round - 1
        if closed_round < 0:
            return False
        stored = self._find_swiss_record(state, round_no=closed_round, pair_key=record.pair_key)
        return stored is not None and stored.outcome == record.outcome

    def _reopens_swiss_pair(self, state: TournamentState, *, record: MatchRecord) -> bool:
        # The pair was decided in the round that just closed and meets again in
        # a round nobody has voted in yet.
        if not self._is_swiss_replay(state, record=record):
            return False
        return not any(
            match.participant_b is not None and match.is_decided
            for match in state.round_matches(stage=MATCH_STAGE_SWISS, round_no=state.current_round)
        )

    def _submit_swiss_round(
        self,
        state: TournamentState,
        *,
        record: MatchRecord,
        now_utc: datetime,
    ) -> SubmitOutcome:
        if state.stage == TOURNAMENT_STAGE_SWISS and record.round_no == state.current_round:
            return self._submit_swiss(state, record=record, now_utc=now_utc, pinned=True)
        stored = self._find_swiss_record(state, round_no=record.round_no, pair_key=record.pair_key)
        if stored is not None and stored.outcome == record.outcome:
            return SubmitOutcome(state=state, replayed=True)
        raise TournamentInvalidPairingError(f"pair is not open in swiss round {record.round_no}")

    def _submit_swiss(
        self,
        state: TournamentState,
        *,
        record: MatchRecord,
        now_utc: datetime,
        pinned: bool,
    ) -> SubmitOutcome:
        current = self._find_swiss_record(
            state,
            round_no=state.current_round,
            pair_key=record.pair_key,
        )
        if current is None:
            if not pinned and self._is_swiss_replay(state, record=record):
                return SubmitOutcome(state=state, replayed=True)
            raise TournamentInvalidPairingError("pair is not part of the current swiss round")
        if current.outcome == record.outcome:
            return SubmitOutcome(state=state, replayed=True)
        if not pinned and self._reopens_swiss_pair(state, record=record):
            return SubmitOutcome(state=state, replayed=True)

        matches = _replace_record(state.matches, record)
        updated = replace(
            state,
            matches=matches,
            participants=compute_standings(
                participant_ids=state.participant_ids,
                matches=matches,
                config=self._config,
            ),
            updated_at=now_utc,
        )
        result = SubmitOutcome(state=updated, records_to_save=[record])

        round_open = any(
            match.status == MATCH_STATUS_PENDING
            for match in updated.round_matches(stage=MATCH_STAGE_SWISS, round_no=updated.current_round)
        )
        if not round_open:
            self._advance_swiss(result)
        return result

    def _advance_swiss(self, result: SubmitOutcome) -> None:
        state = result.state
        next_round = state.current_round + 1
        result.round_advanced = True
        if next_round < state.total_swiss_rounds:
            try:
                new_records = next_round_pairings(
                    standings=state.participants,
                    match_history=state.matches,
                    round_no=next_round,
                )
            except SwissStageComplete:
                new_records = []
            if new_records:
                matches = [*state.matches, *new_records]
                result.state = replace(
                    state,
                    current_round=next_round,
                    matches=matches,
                    participants=compute_standings(
                        participant_ids=state.participant_ids,
                        matches=matches,
                        config=self._config,
                    ),
                )
                result.records_to_save.extend(new_records)
                return

        result.state = replace(
            state,
            stage=TOURNAMENT_STAGE_BRACKET,
            current_round=next_round,
            bracket=seed_bracket(standings=state.participants, bracket_size=state.bracket_size),
        )
        result.bracket_seeded = True

    def _reopens_bracket_pair(
        self,
        state: TournamentState,
        *,
        bracket: BracketState,
        slot: BracketSlot,
        winner_id: str | None,
        swiss_record: MatchRecord,
    ) -> bool:
        openers = opening_decisions(bracket, slot.slot_id)
        if not openers:
            # Opened by seeding; the closing Swiss vote stays the latest
            # decision until the first bracket result.
            if any(item.status == MATCH_STATUS_COMPLETED for item in bracket.slots.values()):
                return False
            return self._is_swiss_replay(state, record=swiss_record)
        if len(openers) != 1:
            return False
        opener = bracket.slots[openers.pop()]
        return (
            winner_id is not None
            and opener.winner_id == winner_id
            and opener.has_pair(str(slot.participant_1), str(slot.participant_2))
        )

    def _submit_bracket(
        self,
        state: TournamentState,
        *,
        participant_a: str,
        participant_b: str,
        outcome: str,
        swiss_record: MatchRecord,
        now_utc: datetime,
    ) -> SubmitOutcome:
        bracket = state.bracket
        if bracket is None:
            raise TournamentInvalidPairingError("bracket has not been seeded")

        winner_id = _winner_for(
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
        )
        slot = find_open_slot(bracket, participant_a=participant_a, participant_b=participant_b)
        if slot is None:
            decided = find_decided_slot(
                bracket,
                participant_a=participant_a,
                participant_b=participant_b,
            )
            if decided is not None and winner_id is not None and decided.winner_id == winner_id:
                return SubmitOutcome(state=state, replayed=True)
            if self._is_swiss_replay(state, record=swiss_record):
                return SubmitOutcome(state=state, replayed=True)
            raise TournamentInvalidPairingError("pair is not an open bracket slot")

        if self._reopens_bracket_pair(
            state,
            bracket=bracket,
            slot=slot,
            winner_id=winner_id,
            swiss_record=swiss_record,
        ):
            return SubmitOutcome(state=state, replayed=True)
        return self._record_bracket(
            state,
            bracket=bracket,
            slot=slot,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
            now_utc=now_utc,
        )

    def _submit_bracket_slot(
        self,
        state: TournamentState,
        *,
        slot_id: str,
        participant_a: str,
        participant_b: str,
        outcome: str,
        now_utc: datetime,
    ) -> SubmitOutcome:
        bracket = state.bracket
        if bracket is None:
            raise TournamentInvalidPairingError("bracket has not been seeded")
        slot = bracket.slots.get(slot_id)
        if slot is None or not slot.has_pair(participant_a, participant_b):
            raise TournamentInvalidPairingError(f"pair is not in bracket slot {slot_id}")
        if slot.status == MATCH_STATUS_COMPLETED:
            winner_id = _winner_for(
                participant_a=participant_a,
                participant_b=participant_b,
                outcome=outcome,
            )
            if winner_id is not None and slot.winner_id == winner_id:
                return SubmitOutcome(state=state, replayed=True)
            raise TournamentInvalidPairingError(f"bracket slot {slot_id} is already decided")
        if not slot.is_playable:
            raise TournamentInvalidPairingError(f"bracket slot {slot_id} is not open")
        return self._record_bracket(
            state,
            bracket=bracket,
            slot=slot,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
            now_utc=now_utc,
        )

    def _record_bracket(
        self,
        state: TournamentState,
        *,
        bracket: BracketState,
        slot: BracketSlot,
        participant_a: str,
        participant_b: str,
        outcome: str,
        now_utc: datetime,
    ) -> SubmitOutcome:
        if outcome == OUTCOME_DRAW:
            raise TournamentInvalidOutcomeError("elimination matches cannot end in a draw")

        winner_id = participant_a if outcome == OUTCOME_WIN_A else participant_b
        updated_bracket = record_bracket_result(
            bracket,
            slot_id=slot.slot_id,
            winner_id=winner_id,
            grand_final_reset=self._config.grand_final_reset,
        )
        record = build_match_record(
            stage=slot.stage,
            round_no=slot.round_no,
            participant_a=participant_a,
            participant_b=participant_b,
            outcome=outcome,
        )
        updated = replace(
            state,
            bracket=updated_bracket,
            matches=_replace_record(state.matches, record),
            updated_at=now_utc,
        )
        result = SubmitOutcome(state=updated, records_to_save=[record])
        if updated_bracket.is_complete:
            result.state = replace(updated, stage=TOURNAMENT_STAGE_COMPLETED)
            result.tournament_completed = True
        return result
