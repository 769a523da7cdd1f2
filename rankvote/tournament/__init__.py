from rankvote.tournament.lifecycle import TournamentStateMachine
from rankvote.tournament.service import (
    create_tournament,
    delete_tournament,
    get_active_pairings,
    get_bracket,
    get_final_standings,
    get_next_pairing,
    get_standings,
    get_tournament,
    list_tournaments_for_owner,
    submit_result,
)
from rankvote.tournament.types import EngineConfig

__all__ = [
    "EngineConfig",
    "TournamentStateMachine",
    "create_tournament",
    "delete_tournament",
    "get_active_pairings",
    "get_bracket",
    "get_final_standings",
    "get_next_pairing",
    "get_standings",
    "get_tournament",
    "list_tournaments_for_owner",
    "submit_result",
]
