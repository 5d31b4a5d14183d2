from __future__ import annotations


class BingoError(Exception):
    """Base class for every error raised by bingo_eval."""


class InvalidNumber(BingoError, ValueError):
    """A number outside the 1..25 pool was handed to the evaluator."""

    def __init__(self, number: object):
        super().__init__(f"Number must be an int in [1, 25], got {number!r}")
        self.number = number


class InvalidBoard(BingoError, ValueError):
    pass


class SessionEnded(BingoError, RuntimeError):
    """Raised by strict callers when a finished session is asked to call a number."""


class RoomError(BingoError, RuntimeError):
    pass
