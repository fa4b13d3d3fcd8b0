class PlayerNotFound(LookupError):
    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


class PlayerValidationError(ValueError):
    pass


class MatchValidationError(ValueError):
    pass


class RankingConflict(RuntimeError):
    """The ranking write scope could not be acquired in time; safe to retry."""
