"""
Custom exceptions.

Everything derives from GameError, so the layers above the domain can catch a single top-level type.
"""


class GameError(Exception):
    """Top level exception for anything going wrong while handling a lesson game."""


class InvalidSquareError(GameError):
    """Coordinates outside of the board."""


class GameStateError(GameError):
    """Request does not fit the current state of the game (game over, not in sandbox mode, ...)."""


class IllegalMoveError(GameError):
    """Move is not among the legal destinations of the selected piece."""


class NotYourTurnError(GameError):
    """A player attempted to move the pieces of the side that is not to move."""


class PromotionError(GameError):
    """Promotion choice was invalid, or no promotion is waiting to be resolved."""


class BoardCorruptionError(GameError):
    """
    Internal consistency failure.

    Should never be raised for positions the engine produced itself.
    """


class MissingKingError(BoardCorruptionError):
    """The board lacks the king of the color that was asked about."""


class InvalidRequestError(GameError):
    """Request data could not be validated."""


class RepositoryError(GameError):
    """Persistence layer could not find / store the requested record."""
