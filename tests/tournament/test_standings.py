from __future__ import annotations

from rankvote.tournament.constants import (
    MATCH_STAGE_SWISS,
    MATCH_STAGE_WINNERS,
    MATCH_STATUS_WALKOVER,
    OUTCOME_BYE,
    OUTCOME_DRAW,
    OUTCOME_WIN_A,
    OUTCOME_WIN_B,
)
from rankvote.tournament.standings import compute_standings
from rankvote.tournament.types import EngineConfig, MatchRecord, build_match_record


def _result(a: str, b: str, outcome: str, *, round_no: int = 0) -> MatchRecord:
    return build_match_record(
        stage=MATCH_STAGE_SWISS,
        round_no=round_no,
        participant_a=a,
        participant_b=b,
        outcome=outcome,
    )


def test_empty_history_yields_all_participants_tied_at_zero() -> None:
    standings = compute_standings(participant_ids=["c", "a", "b"], matches=[])

    assert [standing.participant_id for standing in standings] == ["a", "b", "c"]
    assert all(standing.score == 0 for standing in standings)


def test_win_draw_and_loss_use_configured_weights() -> None:
    standings = compute_standings(
        participant_ids=["a", "b", "c", "d"],
        matches=[
            _result("a", "b", OUTCOME_WIN_A),
            _result("c", "d", OUTCOME_DRAW),
        ],
        config=EngineConfig(win_points=2, draw_points=1, loss_points=0),
    )
    by_id = {standing.participant_id: standing for standing in standings}

    assert by_id["a"].score == 2 and by_id["a"].wins == 1
    assert by_id["b"].score == 0 and by_id["b"].losses == 1
    assert by_id["c"].score == 1 and by_id["c"].draws == 1
    assert by_id["d"].score == 1 and by_id["d"].draws == 1


def test_outcome_is_read_against_canonical_pair_order() -> None:
    record = _result("zed", "amy", OUTCOME_WIN_A)

    assert record.participant_a == "amy"
    assert record.outcome == OUTCOME_WIN_B
    standings = compute_standings(participant_ids=["amy", "zed"], matches=[record])
    assert standings[0].participant_id == "zed"


def test_ties_break_on_wins_then_losses() -> None:
    matches = [
        _result("a", "d", OUTCOME_WIN_A, round_no=0),
        _result("b", "e", OUTCOME_DRAW, round_no=0),
        _result("c", "f", OUTCOME_WIN_A, round_no=0),
        _result("a", "e", OUTCOME_WIN_B, round_no=1),
        _result("b", "d", OUTCOME_DRAW, round_no=1),
    ]
    standings = compute_standings(
        participant_ids=["a", "b", "c", "d", "e", "f"],
        matches=matches,
        config=EngineConfig(win_points=2, draw_points=1, loss_points=0),
    )

    assert [standing.score for standing in standings] == [3, 2, 2, 2, 1, 0]
    assert [standing.participant_id for standing in standings] == ["e", "c", "a", "b", "d", "f"]


def test_bye_counts_as_win_and_is_tallied() -> None:
    bye = MatchRecord(
        stage=MATCH_STAGE_SWISS,
        round_no=0,
        participant_a="e",
        participant_b=None,
        outcome=OUTCOME_BYE,
        status=MATCH_STATUS_WALKOVER,
    )
    standings = compute_standings(participant_ids=["e", "f"], matches=[bye])

    assert standings[0].participant_id == "e"
    assert standings[0].wins == 1
    assert standings[0].byes == 1
    assert standings[0].score == 3


def test_pending_bracket_and_unknown_records_are_ignored() -> None:
    matches = [
        build_match_record(
            stage=MATCH_STAGE_SWISS,
            round_no=0,
            participant_a="a",
            participant_b="b",
            outcome=None,
        ),
        build_match_record(
            stage=MATCH_STAGE_WINNERS,
            round_no=1,
            participant_a="a",
            participant_b="b",
            outcome=OUTCOME_WIN_A,
        ),
        _result("a", "ghost", OUTCOME_WIN_A),
    ]
    standings = compute_standings(participant_ids=["a", "b"], matches=matches)

    assert all(standing.score == 0 for standing in standings)


def test_replaced_outcome_is_reflected_on_recompute() -> None:
    first = compute_standings(
        participant_ids=["a", "b"],
        matches=[_result("a", "b", OUTCOME_WIN_A)],
    )
    corrected = compute_standings(
        participant_ids=["a", "b"],
        matches=[_result("a", "b", OUTCOME_WIN_B)],
    )

    assert first[0].participant_id == "a"
    assert corrected[0].participant_id == "b"
    assert corrected[1].wins == 0


def test_standings_are_deterministic() -> None:
    matches = [_result("a", "b", OUTCOME_DRAW), _result("c", "d", OUTCOME_WIN_B)]
    ids = ["d", "c", "b", "a"]

    assert compute_standings(participant_ids=ids, matches=matches) == compute_standings(
        participant_ids=list(reversed(ids)),
        matches=list(reversed(matches)),
    )
