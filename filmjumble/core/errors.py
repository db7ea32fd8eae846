"""Error taxonomy shared by the catalog, puzzle engine and progression layer."""

from __future__ import annotations


class GameError(Exception):
    """Base class for recoverable game errors."""


class DataUnavailable(GameError):
    """Catalog documents could not be read or are malformed."""


class InvalidLevelData(GameError):
    """The word for a requested level is missing or empty."""


class InsufficientFunds(GameError):
    """Not enough coins for a hint or a skip."""

    def __init__(self, cost: int, balance: int) -> None:
        super().__init__(f"Not enough coins: need {cost}, have {balance}")
        self.cost = cost
        self.balance = balance


class AccessDenied(GameError):
    """A locked level, a locked pack or a not yet completed level was requested."""


class InvalidMove(GameError):
    """A puzzle operation whose preconditions do not hold."""


class NoEmptySlot(InvalidMove):
    """Every answer slot is already filled."""
