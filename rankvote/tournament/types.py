from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from rankvote.core.config import Settings, get_settings
from rankvote.tournament.constants import (
    BRACKET_MATCH_STAGES,
    DEFAULT_BRACKET_SIZE,
    DEFAULT_DRAW_POINTS,
    DEFAULT_LOSS_POINTS,
    DEFAULT_SWISS_MAX_ROUNDS,
    DEFAULT_SWISS_MIN_ROUNDS,
    DEFAULT_WIN_POINTS,
    GRAND_FINAL_GAME_1_SLOT_ID,
    GRAND_FINAL_GAME_2_SLOT_ID,
    MATCH_STAGE_SWISS,
    MATCH_STATUS_COMPLETED,
    MATCH_STATUS_PENDING,
    OUTCOME_BYE,
    OUTCOME_WIN_A,
    OUTCOME_WIN_B,
    SLOT_RESOLVED_STATUSES,
    TOURNAMENT_STAGE_COMPLETED,
    is_power_of_two,
)


@dataclass(frozen=True, slots=True)
class EngineConfig:
    win_points: int = DEFAULT_WIN_POINTS
    draw_points: int = DEFAULT_DRAW_POINTS
    loss_points: int = DEFAULT_LOSS_POINTS
    swiss_min_rounds: int = DEFAULT_SWISS_MIN_ROUNDS
    swiss_max_rounds: int = DEFAULT_SWISS_MAX_ROUNDS
    bracket_size: int = DEFAULT_BRACKET_SIZE
    grand_final_reset: bool = True

    def __post_init__(self) -> None:
        if not self.win_points > self.draw_points >= self.loss_points >= 0:
            raise ValueError("score weights must satisfy win > draw >= loss >= 0")
        if self.bracket_size < 2 or not is_power_of_two(self.bracket_size):
            raise ValueError("bracket_size must be a power of two >= 2")
        if not 1 <= self.swiss_min_rounds <= self.swiss_max_rounds:
            raise ValueError("swiss round bounds must satisfy 1 <= min <= max")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> EngineConfig:
        resolved = settings or get_settings()
        return cls(
            win_points=resolved.tournament_win_points,
            draw_points=resolved.tournament_draw_points,
            loss_points=resolved.tournament_loss_points,
            swiss_min_rounds=resolved.tournament_swiss_min_rounds,
            swiss_max_rounds=resolved.tournament_swiss_max_rounds,
            bracket_size=resolved.tournament_bracket_size,
            grand_final_reset=resolved.tournament_grand_final_reset,
        )


@dataclass(frozen=True, slots=True)
class ParticipantStanding:
    participant_id: str
    score: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    byes: int = 0


@dataclass(frozen=True, slots=True)
class MatchRecord:
    """One pairing of a round; ``participant_b`` is None for a Swiss bye.

    Pairs are stored with the lexicographically smaller id first and
    ``outcome`` is expressed against that canonical order.
    """

    stage: str
    round_no: int
    participant_a: str
    participant_b: str | None
    outcome: str | None = None
    status: str = MATCH_STATUS_PENDING

    @property
    def is_bye(self) -> bool:
        return self.participant_b is None

    @property
    def is_decided(self) -> bool:
        return self.outcome is not None

    @property
    def pair_key(self) -> frozenset[str]:
        if self.participant_b is None:
            return frozenset((self.participant_a,))
        return frozenset((self.participant_a, self.participant_b))

    @property
    def winner_id(self) -> str | None:
        if self.outcome in (OUTCOME_WIN_A, OUTCOME_BYE):
            return self.participant_a
        if self.outcome == OUTCOME_WIN_B:
            return self.participant_b
        return None

    @property
    def loser_id(self) -> str | None:
        if self.outcome == OUTCOME_WIN_A:
            return self.participant_b
        if self.outcome == OUTCOME_WIN_B:
            return self.participant_a
        return None


def canonical_pair(participant_a: str, participant_b: str) -> tuple[str, str, bool]:
    if participant_b < participant_a:
        return participant_b, participant_a, True
    return participant_a, participant_b, False


def build_match_record(
    *,
    stage: str,
    round_no: int,
    participant_a: str,
    participant_b: str,
    outcome: str | None,
) -> MatchRecord:
    first, second, swapped = canonical_pair(participant_a, participant_b)
    resolved_outcome = outcome
    if swapped and outcome == OUTCOME_WIN_A:
        resolved_outcome = OUTCOME_WIN_B
    elif swapped and outcome == OUTCOME_WIN_B:
        resolved_outcome = OUTCOME_WIN_A
    return MatchRecord(
        stage=stage,
        round_no=round_no,
        participant_a=first,
        participant_b=second,
        outcome=resolved_outcome,
        status=MATCH_STATUS_PENDING if outcome is None else MATCH_STATUS_COMPLETED,
    )


@dataclass(slots=True)
class SwissPair:
    participant_a: str
    participant_b: str | None


@dataclass(slots=True)
class BracketSlot:
    slot_id: str
    stage: str
    round_no: int
    position: int
    participant_1: str | None = None
    participant_2: str | None = None
    winner_id: str | None = None
    loser_id: str | None = None
    status: str = MATCH_STATUS_PENDING

    @property
    def is_resolved(self) -> bool:
        return self.status in SLOT_RESOLVED_STATUSES

    @property
    def is_playable(self) -> bool:
        return (
            self.status == MATCH_STATUS_PENDING
            and self.participant_1 is not None
            and self.participant_2 is not None
        )

    def has_pair(self, participant_a: str, participant_b: str) -> bool:
        return {self.participant_1, self.participant_2} == {participant_a, participant_b}


@dataclass(slots=True)
class BracketState:
    bracket_size: int
    slots: dict[str, BracketSlot] = field(default_factory=dict)

    def ordered_slots(self) -> list[BracketSlot]:
        return sorted(
            self.slots.values(),
            key=lambda slot: (
                BRACKET_MATCH_STAGES.index(slot.stage),
                slot.round_no,
                slot.position,
            ),
        )

    def open_slots(self) -> list[BracketSlot]:
        return [slot for slot in self.ordered_slots() if slot.is_playable]

    @property
    def champion_id(self) -> str | None:
        game_2 = self.slots.get(GRAND_FINAL_GAME_2_SLOT_ID)
        if game_2 is not None:
            return game_2.winner_id if game_2.is_resolved else None
        game_1 = self.slots.get(GRAND_FINAL_GAME_1_SLOT_ID)
        if game_1 is None or not game_1.is_resolved:
            return None
        return game_1.winner_id

    @property
    def is_complete(self) -> bool:
        return self.champion_id is not None


@dataclass(slots=True)
class TournamentState:
    tournament_id: UUID
    owner_identity: str
    stage: str
    current_round: int
    total_swiss_rounds: int
    bracket_size: int
    participants: list[ParticipantStanding]
    matches: list[MatchRecord]
    created_at: datetime
    updated_at: datetime
    bracket: BracketState | None = None

    @property
    def participant_ids(self) -> list[str]:
        return [participant.participant_id for participant in self.participants]

    @property
    def is_complete(self) -> bool:
        return self.stage == TOURNAMENT_STAGE_COMPLETED

    @property
    def champion_id(self) -> str | None:
        if self.bracket is None:
            return None
        return self.bracket.champion_id

    def swiss_matches(self) -> list[MatchRecord]:
        return [match for match in self.matches if match.stage == MATCH_STAGE_SWISS]

    def round_matches(self, *, stage: str, round_no: int) -> list[MatchRecord]:
        return [
            match
            for match in self.matches
            if match.stage == stage and match.round_no == round_no
        ]


@dataclass(frozen=True, slots=True)
class ActivePairing:
    stage: str
    round_no: int
    participant_a: str
    participant_b: str
    slot_id: str | None = None


@dataclass(slots=True)
class SubmitOutcome:
    state: TournamentState
    records_to_save: list[MatchRecord] = field(default_factory=list)
    round_advanced: bool = False
    bracket_seeded: bool = False
    tournament_completed: bool = False
    replayed: bool = False


@dataclass(frozen=True, slots=True)
class ParticipantDisplay:
    participant_id: str
    name: str
    image_url: str | None = None


@dataclass(frozen=True, slots=True)
class PairingView:
    pairing: ActivePairing
    display_a: ParticipantDisplay
    display_b: ParticipantDisplay
