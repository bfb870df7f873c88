from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import List

from exceptions import (
    AlreadyCheckedOutError,
    DuplicateBorrowError,
    NegativeAmountError,
    NotBorrowedError,
)


# Domain Models
@dataclass
class Book:
    """
    Represents a catalog item and its availability.

    Two books are equal when their ISBNs match.

    Attributes:
        isbn (str): Unique identifier for the book.
        genre (str): Genre label.
        title (str): Book title.
        author (str): Author name.
        isAvailable (bool): Whether the book is currently available for checkout.
    """
    isbn: str
    genre: str = field(compare=False)
    title: str = field(compare=False)
    author: str = field(compare=False)
    isAvailable: bool = field(default=True, compare=False)

    def __hash__(self) -> int:
        return hash(self.isbn)

    def __str__(self) -> str:
        return f"'{self.title}' by {self.author}"

    def checkout(self) -> None:
        """
        Marks the book as checked out.

        Raises:
            AlreadyCheckedOutError: If the book is not available.
        """
        if not self.isAvailable:
            raise AlreadyCheckedOutError(f"Book {self.isbn} is already checked out.")
        self.isAvailable = False

    def returnBook(self) -> None:
        """
        Marks the book as available. Returning an available book is a no-op.
        """
        self.isAvailable = True


@dataclass
class Member:
    """
    Represents a library member.

    Two members are equal when their ids match.

    Attributes:
        memberId (str): Unique member identifier.
        name (str): Member name.
        _borrowed (List[Book]): Books currently held, in borrow order.
    """
    memberId: str
    name: str = field(compare=False)
    _borrowed: List[Book] = field(default_factory=list, init=False, repr=False, compare=False)

    def __hash__(self) -> int:
        return hash(self.memberId)

    @property
    def borrowedBooks(self) -> List[Book]:
        """
        Returns a copy of the held books; changing it does not affect the member.
        """
        return list(self._borrowed)

    @property
    def borrowedCount(self) -> int:
        return len(self._borrowed)

    def hasBorrowed(self, book: Book) -> bool:
        return book in self._borrowed

    def borrow(self, book: Book) -> None:
        """
        Raises:
            DuplicateBorrowError: If the member already holds the book.
        """
        if self.hasBorrowed(book):
            raise DuplicateBorrowError(
                f"Member {self.memberId} already has book {book.isbn}."
            )
        self._borrowed.append(book)

    def returnBook(self, book: Book) -> None:
        """
        Raises:
            NotBorrowedError: If the member does not hold the book.
        """
        if not self.hasBorrowed(book):
            raise NotBorrowedError(
                f"Member {self.memberId} does not have book {book.isbn} checked out."
            )
        self._borrowed.remove(book)


@dataclass(frozen=True)
class Loan:
    """
    Immutable record of one checkout.

    Attributes:
        book (Book): The borrowed book.
        member (Member): The borrowing member.
        checkoutDate (date): Date when the book was checked out.
        dueDate (date): checkoutDate + LOAN_PERIOD_DAYS, fixed at creation.
    """
    LOAN_PERIOD_DAYS = 14

    book: Book
    member: Member
    checkoutDate: date
    dueDate: date = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "dueDate", self.checkoutDate + timedelta(days=self.LOAN_PERIOD_DAYS)
        )

    def isOverdue(self, on_date: date) -> bool:
        """
        Returns True once on_date is strictly past the due date.
        """
        return on_date > self.dueDate


@dataclass(frozen=True)
class Fine:
    """
    Nonnegative overdue fine, in whole currency units.

    Attributes:
        amount (Decimal): Fine amount.
    """
    DAILY_RATE = Decimal("50")

    amount: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        amount = Decimal(str(self.amount))
        if amount < 0:
            raise NegativeAmountError(f"Fine amount must be >= 0 (got {amount}).")
        object.__setattr__(self, "amount", amount)

    def __str__(self) -> str:
        return f"{self.amount} yen"

    @classmethod
    def calculate(cls, loan: Loan, return_date: date) -> "Fine":
        """
        Computes the fine for returning a loan on return_date.

        Fine rule:
            DAILY_RATE per started day past the due date; zero up to and
            including the due date itself.
        """
        if return_date <= loan.dueDate:
            return cls(Decimal("0"))
        overdue_days = math.ceil((return_date - loan.dueDate) / timedelta(days=1))
        return cls(overdue_days * cls.DAILY_RATE)

    def isZero(self) -> bool:
        return self.amount == 0

    def add(self, other: "Fine") -> "Fine":
        return Fine(self.amount + other.amount)
