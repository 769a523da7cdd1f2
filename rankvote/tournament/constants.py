from __future__ import annotations

import math

TOURNAMENT_STAGE_SWISS = "SWISS"
TOURNAMENT_STAGE_BRACKET = "BRACKET"
TOURNAMENT_STAGE_COMPLETED = "COMPLETED"

MATCH_STAGE_SWISS = "SWISS"
MATCH_STAGE_WINNERS = "WINNERS"
MATCH_STAGE_LOSERS = "LOSERS"
MATCH_STAGE_GRAND_FINAL = "GRAND_FINAL"

BRACKET_MATCH_STAGES: tuple[str, ...] = (
    MATCH_STAGE_WINNERS,
    MATCH_STAGE_LOSERS,
    MATCH_STAGE_GRAND_FINAL,
)

OUTCOME_WIN_A = "WIN_A"
OUTCOME_WIN_B = "WIN_B"
OUTCOME_DRAW = "DRAW"
OUTCOME_BYE = "BYE"

SUBMITTABLE_OUTCOMES: frozenset[str] = frozenset({OUTCOME_WIN_A, OUTCOME_WIN_B, OUTCOME_DRAW})

MATCH_STATUS_PENDING = "PENDING"
MATCH_STATUS_COMPLETED = "COMPLETED"
MATCH_STATUS_WALKOVER = "WALKOVER"
MATCH_STATUS_VOID = "VOID"

SLOT_RESOLVED_STATUSES: frozenset[str] = frozenset(
    {MATCH_STATUS_COMPLETED, MATCH_STATUS_WALKOVER, MATCH_STATUS_VOID}
)

BRACKET_PHASE_SEEDED = "SEEDED"
BRACKET_PHASE_IN_PROGRESS = "IN_PROGRESS"
BRACKET_PHASE_GRAND_FINAL_GAME_1 = "GRAND_FINAL_GAME_1"
BRACKET_PHASE_GRAND_FINAL_GAME_2 = "GRAND_FINAL_GAME_2"
BRACKET_PHASE_COMPLETE = "COMPLETE"

GRAND_FINAL_GAME_1_SLOT_ID = "GF-1"
GRAND_FINAL_GAME_2_SLOT_ID = "GF-2"

TOURNAMENT_MIN_PARTICIPANTS = 2
PARTICIPANT_ID_MAX_LENGTH = 64

DEFAULT_WIN_POINTS = 3
DEFAULT_DRAW_POINTS = 1
DEFAULT_LOSS_POINTS = 0
DEFAULT_SWISS_MIN_ROUNDS = 1
DEFAULT_SWISS_MAX_ROUNDS = 12
DEFAULT_BRACKET_SIZE = 16


def swiss_rounds_for_participants(
    *,
    participants_total: int,
    min_rounds: int = DEFAULT_SWISS_MIN_ROUNDS,
    max_rounds: int = DEFAULT_SWISS_MAX_ROUNDS,
) -> int:
    if participants_total < TOURNAMENT_MIN_PARTICIPANTS:
        return min_rounds
    log_rounds = math.ceil(math.log2(participants_total))
    return max(min_rounds, min(max_rounds, log_rounds))


def is_power_of_two(value: int) -> bool:
    return value >= 1 and (value & (value - 1)) == 0
