"""Exception taxonomy for match ingestion and ranking."""

from __future__ import annotations


class TourneyRankError(Exception):
    """Base class for every error raised by the ranking pipeline."""

    retryable = False


class AuthorizationError(TourneyRankError):
    """The caller is not allowed to perform the operation."""


class NotCaptainError(AuthorizationError):
    def __init__(self, submitter_id: object, team_id: object) -> None:
        super().__init__(f"player {submitter_id} is not the captain of team {team_id}")
        self.submitter_id = submitter_id
        self.team_id = team_id


class MatchValidationError(TourneyRankError, ValueError):
    """A submitted match report is structurally invalid."""


class InvalidPlacementError(MatchValidationError):
    def __init__(self, placement: int) -> None:
        super().__init__(f"placement must be between 1 and 100, got {placement}")
        self.placement = placement


class InvalidKillsError(MatchValidationError):
    def __init__(self, kills: int) -> None:
        super().__init__(f"team kills cannot be negative, got {kills}")
        self.kills = kills


class PlayerNotInTeamError(MatchValidationError):
    def __init__(self, player_id: object, team_id: object) -> None:
        super().__init__(f"player {player_id} is not a member of team {team_id}")
        self.player_id = player_id
        self.team_id = team_id


class TeamSizeMismatchError(MatchValidationError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"match must include exactly one entry per roster member: expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual


class MissingPlayerStatsError(MatchValidationError):
    def __init__(self) -> None:
        super().__init__("match must include stats for all team members")


class InvalidPlayerStatsError(MatchValidationError):
    def __init__(self, player_id: object, field: str, value: object, reason: str = "cannot be negative") -> None:
        super().__init__(f"player {player_id}: {field} {reason}, got {value!r}")
        self.player_id = player_id
        self.field = field
        self.value = value
        self.reason = reason


class TeamNotInTournamentError(MatchValidationError):
    def __init__(self, team_id: object, tournament_id: object) -> None:
        super().__init__(f"team {team_id} is not registered in tournament {tournament_id}")
        self.team_id = team_id
        self.tournament_id = tournament_id


class GameMismatchError(MatchValidationError):
    def __init__(self, game_id: object, tournament_id: object) -> None:
        super().__init__(f"game {game_id} is not the game of tournament {tournament_id}")
        self.game_id = game_id
        self.tournament_id = tournament_id


class StateTransitionError(TourneyRankError):
    """The entity is not in a state that allows the operation."""


class TournamentNotActiveError(StateTransitionError):
    def __init__(self, tournament_id: object, status: str) -> None:
        super().__init__(f"tournament {tournament_id} is not active (status={status})")
        self.tournament_id = tournament_id
        self.status = status


class MatchNotDraftError(StateTransitionError):
    def __init__(self, match_id: object, status: str) -> None:
        super().__init__(f"only draft matches can be resolved; match {match_id} is {status}")
        self.match_id = match_id
        self.status = status


class GameNotActiveError(StateTransitionError):
    def __init__(self, game_id: object) -> None:
        super().__init__(f"game {game_id} is not accepting matches")
        self.game_id = game_id


class NotFoundError(TourneyRankError, LookupError):
    """A referenced entity does not exist."""

    entity = "entity"

    def __init__(self, *identity: object) -> None:
        key = "/".join(str(part) for part in identity)
        super().__init__(f"{self.entity} not found: {key}")
        self.identity = identity


class MatchNotFoundError(NotFoundError):
    entity = "match"


class StatsNotFoundError(NotFoundError):
    entity = "player stats"


class TournamentNotFoundError(NotFoundError):
    entity = "tournament"


class TeamNotFoundError(NotFoundError):
    entity = "team"


class GameNotFoundError(NotFoundError):
    entity = "game"


class StoreUnavailableError(TourneyRankError):
    """The backing store could not be reached; the request may be retried."""

    retryable = True


__all__ = [
    "AuthorizationError",
    "GameMismatchError",
    "GameNotActiveError",
    "GameNotFoundError",
    "InvalidKillsError",
    "InvalidPlacementError",
    "InvalidPlayerStatsError",
    "MatchNotDraftError",
    "MatchNotFoundError",
    "MatchValidationError",
    "MissingPlayerStatsError",
    "NotCaptainError",
    "NotFoundError",
    "PlayerNotInTeamError",
    "StateTransitionError",
    "StatsNotFoundError",
    "StoreUnavailableError",
    "TeamNotFoundError",
    "TeamNotInTournamentError",
    "TeamSizeMismatchError",
    "TourneyRankError",
    "TournamentNotActiveError",
    "TournamentNotFoundError",
]
