from rankvote.db.models.base import Base
from rankvote.db.models.tournament_bracket_slots import TournamentBracketSlot
from rankvote.db.models.tournament_matches import TournamentMatch
from rankvote.db.models.tournament_participants import TournamentParticipant
from rankvote.db.models.tournaments import Tournament

__all__ = [
    "Base",
    "Tournament",
    "TournamentBracketSlot",
    "TournamentMatch",
    "TournamentParticipant",
]
