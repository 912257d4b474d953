"""Exceptions raised by the game core.

Rejections derive from ``GameError`` and never leave partial state behind.
``BoardInvalidated`` signals misuse of the board API rather than a player action.
"""

from __future__ import annotations


class GameError(Exception):
    """Base class for rejected player actions and degraded data sources."""


class InvalidCellPosition(GameError):
    def __init__(self, position: int, grid_size: int) -> None:
        super().__init__(f"Cell position {position} is outside the dig site (0..{grid_size - 1}).")
        self.position = position


class BoardNotActive(GameError):
    """Raised when a cell is clicked while the board is not accepting digs."""


class SessionNotActive(GameError):
    """Raised when an answer is submitted without a running quiz."""


class QuestionAlreadyAnswered(GameError):
    """Raised when the current question already has an answer."""


class InvalidAnswer(GameError):
    """Raised when the selected option does not exist."""


class EraLocked(GameError):
    def __init__(self, era_id: str) -> None:
        super().__init__(f"Era '{era_id}' has not been unlocked yet.")
        self.era_id = era_id


class UnknownEra(GameError):
    def __init__(self, era_id: str) -> None:
        super().__init__(f"Unknown era '{era_id}'.")
        self.era_id = era_id


class ContentLoadFailure(GameError):
    """Raised when era content cannot be read or parsed."""


class PersistenceCorrupt(GameError):
    """Raised when saved progress cannot be decoded or fails validation."""


class BoardInvalidated(RuntimeError):
    """Raised when a board is used after a bomb without being recreated."""
