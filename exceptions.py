from __future__ import annotations


class LibraryError(Exception):
    """
    Base exception for library lending errors.

    Attributes:
        code (str): Machine-readable error kind, e.g. "BOOK_NOT_FOUND".
        reason (str): Human-readable explanation.
    """

    code = "LIBRARY_ERROR"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class BookNotFoundError(LibraryError):
    """Requested ISBN does not exist in the catalog."""

    code = "BOOK_NOT_FOUND"


class MemberNotFoundError(LibraryError):
    """Requested memberId does not exist in the membership."""

    code = "MEMBER_NOT_FOUND"


class AlreadyCheckedOutError(LibraryError):
    """Book is already checked out."""

    code = "ALREADY_CHECKED_OUT"


class RuleViolationError(LibraryError):
    """A lending rule rejected the checkout."""

    code = "RULE_VIOLATION"

    def __init__(self, reason: str, rule: str = "") -> None:
        super().__init__(reason)
        self.rule = rule


class NotBorrowedError(LibraryError):
    """Member does not currently hold the book."""

    code = "NOT_BORROWED"


class DuplicateBorrowError(LibraryError):
    """Member already holds the book."""

    code = "DUPLICATE_BORROW"


class NegativeAmountError(LibraryError):
    """Fine amount below zero."""

    code = "NEGATIVE_AMOUNT"
