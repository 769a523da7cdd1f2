from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from rankvote.tournament.constants import (
    MATCH_STAGE_SWISS,
    OUTCOME_BYE,
    OUTCOME_DRAW,
    OUTCOME_WIN_A,
    OUTCOME_WIN_B,
)
from rankvote.tournament.types import EngineConfig, MatchRecord, ParticipantStanding


@dataclass(slots=True)
class _Tally:
    score: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    byes: int = 0


def standings_sort_key(standing: ParticipantStanding) -> tuple[object, ...]:
    return (
        -standing.score,
        -standing.wins,
        standing.losses,
        standing.participant_id,
    )


def order_standings(standings: Iterable[ParticipantStanding]) -> list[ParticipantStanding]:
    return sorted(standings, key=standings_sort_key)


def _credit_win(tally: _Tally, config: EngineConfig) -> None:
    tally.wins += 1
    tally.score += config.win_points


def _credit_loss(tally: _Tally, config: EngineConfig) -> None:
    tally.losses += 1
    tally.score += config.loss_points


def _credit_draw(tally: _Tally, config: EngineConfig) -> None:
    tally.draws += 1
    tally.score += config.draw_points


def compute_standings(
    *,
    participant_ids: Iterable[str],
    matches: Iterable[MatchRecord],
    config: EngineConfig | None = None,
) -> list[ParticipantStanding]:
    """Rebuild Swiss standings from scratch out of the full match history.

    Only decided Swiss records count. Records naming an id outside the roster
    are skipped, so the result is always defined.
    """
    resolved_config = config or EngineConfig()
    tallies = {participant_id: _Tally() for participant_id in participant_ids}

    for match in matches:
        if match.stage != MATCH_STAGE_SWISS or match.outcome is None:
            continue
        tally_a = tallies.get(match.participant_a)
        tally_b = tallies.get(match.participant_b) if match.participant_b is not None else None

        if match.outcome == OUTCOME_BYE:
            if tally_a is not None:
                _credit_win(tally_a, resolved_config)
                tally_a.byes += 1
            continue
        if tally_a is None or tally_b is None:
            continue
        if match.outcome == OUTCOME_WIN_A:
            _credit_win(tally_a, resolved_config)
            _credit_loss(tally_b, resolved_config)
        elif match.outcome == OUTCOME_WIN_B:
            _credit_win(tally_b, resolved_config)
            _credit_loss(tally_a, resolved_config)
        elif match.outcome == OUTCOME_DRAW:
            _credit_draw(tally_a, resolved_config)
            _credit_draw(tally_b, resolved_config)

    return order_standings(
        ParticipantStanding(
            participant_id=participant_id,
            score=tally.score,
            wins=tally.wins,
            losses=tally.losses,
            draws=tally.draws,
            byes=tally.byes,
        )
        for participant_id, tally in tallies.items()
    )
