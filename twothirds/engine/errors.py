"""Errors raised by the game engine.

Every precondition failure is reported with one of these before any state
is touched, so a failed call never leaves a partial effect behind.
"""


class GameError(Exception):
    """Base class for all game errors."""


class ConfigInvalid(GameError, ValueError):
    """A GameConfig violates its constraints."""


class NotAuthorized(GameError):
    """An administrator-only action was attempted by someone else."""


class NotFound(GameError):
    """The referenced game does not exist in the registry."""


class WrongPhase(GameError):
    """The operation is not allowed in the current phase."""


class GameFull(GameError):
    """The roster already holds max_players."""


class AlreadyJoined(GameError):
    """The caller is already on the roster."""


class WrongStake(GameError):
    """The stake supplied with join() is not exactly the entry fee."""


class NotAPlayer(GameError):
    """The caller has not joined this game."""


class AlreadyCommitted(GameError):
    """The caller has already committed a guess."""


class InvalidCommitment(GameError):
    """The commitment is not a 32-byte digest."""


class NoCommitment(GameError):
    """The caller has nothing committed to reveal."""


class AlreadyRevealed(GameError):
    """The caller has already revealed a guess."""


class InvalidReveal(GameError):
    """The revealed guess is out of range or does not match the commitment."""


class NoFunds(GameError):
    """The caller has no pending withdrawal."""
