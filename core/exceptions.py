"""Typed exceptions for invoice numbering failures."""


class NumberingError(Exception):
    """Base class for invoice numbering errors."""


class CounterWriteError(NumberingError):
    """
    Counter state could not be persisted.

    Raised for genuine storage I/O failures (disk full, permission denied,
    unwritable directory). Fatal: the caller must abort the operation that
    needed a number.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write counter state to {path}: {reason}")
