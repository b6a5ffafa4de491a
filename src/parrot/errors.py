"""Application-level exception types for parrot."""

from __future__ import annotations


class ParrotError(Exception):
    """Base exception for parrot."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ScanError(ParrotError):
    """Raised when a command line cannot be tokenized."""


class UnterminatedQuote(ScanError):
    """Raised when a quoted token is never closed."""

    def __init__(self, offset: int) -> None:
        super().__init__(f"Unterminated quote starting at column {offset + 1}.")
        self.offset = offset


class ParseError(ParrotError):
    """Raised when a token sequence is not a valid command."""


class UnknownCommand(ParseError):
    """Raised when the first token is not a known command."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unknown command '{token}'. Type 'help' to list commands.")
        self.token = token


class UnknownFilterKey(ParseError):
    """Raised when a filter predicate uses an unsupported key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown filter key '{key}'. Expected one of: tag, status, name.")
        self.key = key


class InvalidArgument(ParseError):
    """Raised when a known command receives malformed arguments."""


class ExecutionError(ParrotError):
    """Raised when a command cannot be spawned."""


class StoreError(ParrotError):
    """Raised on read/write failures against the snapshot store."""


class EditorError(ParrotError):
    """Raised when the external editor fails or is cancelled."""


class BorrowError(ParrotError):
    """Raised when a view is accessed while its selection is borrowed."""
