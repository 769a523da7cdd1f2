class TournamentError(Exception):
    pass


class TournamentNotFoundError(TournamentError):
    pass


class TournamentInvalidPairingError(TournamentError):
    pass


class TournamentInvalidOutcomeError(TournamentInvalidPairingError):
    pass


class TournamentCompletedError(TournamentError):
    pass


class TournamentStageError(TournamentError):
    pass


class TournamentPersistenceError(TournamentError):
    pass


class TournamentInsufficientParticipantsError(TournamentError):
    pass


class TournamentInvalidParticipantError(TournamentError):
    pass


class SwissStageComplete(TournamentError):
    pass
