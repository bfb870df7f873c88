from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from lending_rules import (
    BookAvailableRule,
    LendingContext,
    LendingRule,
    MaxLoansRule,
    NoOverdueRule,
    evaluate_rules,
)
from exceptions import (
    BookNotFoundError,
    LibraryError,
    MemberNotFoundError,
    NotBorrowedError,
    RuleViolationError,
)
from models import Book, Fine, Loan, Member
from notifier import LoggingNotifier, Notifier
from repository import InMemoryRepository, Repository


# Logging configuration
logger = logging.getLogger("library")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


@dataclass(frozen=True)
class ReturnResult:
    """
    Outcome of a successful return.

    Attributes:
        loan (Loan): The loan that was closed.
        fine (Fine): Overdue fine owed for this loan.
        returnDate (date): Date the book came back.
    """
    loan: Loan
    fine: Fine
    returnDate: date


# Library Core
class Library:
    """
    Lending orchestrator that owns the catalog, membership, active loans,
    the lending rule chain and an optional notifier.

    Default rules, evaluated in order:
        (1) The book must be available
        (2) Members can borrow at most MAX_LOANS books at a time
        (3) Members with an overdue loan cannot checkout new books

    checkout() and returnBook() are the only operations that change state,
    and each either fully succeeds or leaves everything unchanged.
    """

    MAX_LOANS = 3

    def __init__(
        self,
        rules: Optional[Sequence[LendingRule]] = None,
        notifier: Optional[Notifier] = None,
        books: Optional[Repository[Book]] = None,
        members: Optional[Repository[Member]] = None,
    ) -> None:
        if rules is None:
            rules = [
                BookAvailableRule(),
                MaxLoansRule(self.MAX_LOANS),
                NoOverdueRule(),
            ]
        self.rules: List[LendingRule] = list(rules)
        self.notifier = notifier
        self.books: Repository[Book] = books if books is not None else InMemoryRepository()
        self.members: Repository[Member] = members if members is not None else InMemoryRepository()
        self._activeLoans: List[Loan] = []

    # Public API

    def addBook(self, book: Book) -> None:
        """
        Adds or replaces a book in the catalog, keyed by ISBN.
        A replacement keeps the availability of the book it replaces.

        Raises:
            ValueError: If ISBN is empty.
        """
        logger.info("addBook called | isbn=%s title=%s", book.isbn, book.title)

        if not book.isbn:
            raise ValueError("isbn cannot be empty")

        existing = self.books.get(book.isbn)
        if existing is not None and existing is not book:
            book.isAvailable = existing.isAvailable

        self.books.put(book.isbn, book)

    def addMember(self, member: Member) -> None:
        """
        Adds or replaces a member, keyed by memberId.
        A replacement keeps the books held by the member it replaces.

        Raises:
            ValueError: If memberId is empty.
        """
        logger.info("addMember called | memberId=%s", member.memberId)

        if not member.memberId:
            raise ValueError("memberId cannot be empty")

        existing = self.members.get(member.memberId)
        if existing is not None and existing is not member:
            for held in existing.borrowedBooks:
                if not member.hasBorrowed(held):
                    member.borrow(held)

        self.members.put(member.memberId, member)

    def checkout(self, memberId: str, isbn: str, currentDate: date) -> Loan:
        """
        Checks out a book to a member.

        The rule chain runs first; on success the loan is recorded and the
        book and member are updated together. The notifier is called last
        and its failures are logged and ignored.

        Raises:
            BookNotFoundError
            MemberNotFoundError
            RuleViolationError
        """
        logger.info("checkout called | memberId=%s isbn=%s", memberId, isbn)
        self._require_date(currentDate, "currentDate")

        book = self.getBook(isbn)
        member = self.getMember(memberId)

        context = LendingContext(
            book=book,
            member=member,
            activeLoans=tuple(self._activeLoans),
            currentDate=currentDate,
        )
        result = evaluate_rules(self.rules, context)
        if not result.ok:
            raise RuleViolationError(result.reason or "Checkout rejected.", rule=result.rule or "")

        loan = Loan(book, member, currentDate)
        book.checkout()
        try:
            member.borrow(book)
        except LibraryError:
            book.returnBook()
            raise
        self._activeLoans.append(loan)

        logger.info(
            "Checkout successful | memberId=%s isbn=%s dueDate=%s",
            memberId, isbn, loan.dueDate,
        )
        self._notify(member, f"You have checked out {book}. Due on {loan.dueDate.isoformat()}.")
        return loan

    def returnBook(self, memberId: str, isbn: str, returnDate: date) -> ReturnResult:
        """
        Returns a previously borrowed book and computes its fine.

        Raises:
            BookNotFoundError
            MemberNotFoundError
            NotBorrowedError
            ValueError: If returnDate is before the checkout date.
        """
        logger.info("returnBook called | memberId=%s isbn=%s", memberId, isbn)
        self._require_date(returnDate, "returnDate")

        book = self.getBook(isbn)
        member = self.getMember(memberId)

        if not member.hasBorrowed(book):
            raise NotBorrowedError(
                f"Member {memberId} does not have book {isbn} checked out."
            )

        loan = self._find_active_loan(member, book)
        if returnDate < loan.checkoutDate:
            raise ValueError("returnDate cannot be before checkoutDate")

        fine = Fine.calculate(loan, returnDate)

        member.returnBook(book)
        self._activeLoans = [l for l in self._activeLoans if l is not loan]
        book.returnBook()

        logger.info(
            "Return successful | memberId=%s isbn=%s fine=%s", memberId, isbn, fine.amount
        )
        return ReturnResult(loan=loan, fine=fine, returnDate=returnDate)

    def getBook(self, isbn: str) -> Book:
        """
        Retrieves a book by ISBN or raises BookNotFoundError.
        """
        book = self.books.get(isbn)
        if book is None:
            raise BookNotFoundError(f"Book not found: isbn={isbn}")
        return book

    def getMember(self, memberId: str) -> Member:
        """
        Retrieves a member by ID or raises MemberNotFoundError.
        """
        member = self.members.get(memberId)
        if member is None:
            raise MemberNotFoundError(f"Member not found: memberId={memberId}")
        return member

    def getAvailableBooks(self) -> List[Book]:
        """
        Returns all books currently available for checkout.
        """
        return [b for b in self.books.values() if b.isAvailable]

    def getActiveLoans(self, memberId: Optional[str] = None) -> List[Loan]:
        """
        Returns a copy of the active loans, optionally only those of one member.
        """
        if memberId is None:
            return list(self._activeLoans)
        return [l for l in self._activeLoans if l.member.memberId == memberId]

    def hasOverdueLoans(self, memberId: str, onDate: date) -> bool:
        self._require_date(onDate, "onDate")
        return any(l.isOverdue(onDate) for l in self.getActiveLoans(memberId))

    def totalOutstandingFines(self, memberId: str, onDate: date) -> Fine:
        """
        Sums the fines the member would owe if every active loan came back on onDate.
        """
        self._require_date(onDate, "onDate")
        self.getMember(memberId)

        total = Fine()
        for loan in self.getActiveLoans(memberId):
            total = total.add(Fine.calculate(loan, onDate))
        return total

    # Internal Helpers
    def _find_active_loan(self, member: Member, book: Book) -> Loan:
        for loan in self._activeLoans:
            if loan.book == book and loan.member == member:
                return loan
        raise NotBorrowedError(
            f"No active loan for memberId={member.memberId}, isbn={book.isbn}"
        )

    def _notify(self, member: Member, message: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.send(member, message)
        except Exception as e:
            logger.warning("Notifier failed | memberId=%s error=%s", member.memberId, e)

    @staticmethod
    def _require_date(d: date, name: str) -> None:
        """
        Validates that the provided value is a plain datetime.date.
        """
        if not isinstance(d, date) or isinstance(d, datetime):
            raise ValueError(f"{name} must be a datetime.date without a time part")


# Main Program
def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Demo driver that walks through the lending scenarios.

    Demonstrated scenarios:
        - checkout and due date
        - on-time and late returns with fines
        - loan limit violation
        - overdue block, return, then checkout again
        - checkout succeeding while the notifier fails
    """
    parser = argparse.ArgumentParser(description="Library lending demo.")
    parser.add_argument(
        "--start-date",
        type=date.fromisoformat,
        default=date(2026, 2, 1),
        help="Checkout date for the demo (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args(argv)
    logger.setLevel(args.log_level)

    day0 = args.start_date

    print("\n=== Library Lending Demo ===\n")

    library = Library(notifier=LoggingNotifier())
    for book in [
        Book("978-0-13-235088-4", "Software", "Clean Code", "Robert C. Martin"),
        Book("978-0-201-63361-0", "Software", "Design Patterns", "GoF"),
        Book("978-0-13-468599-1", "Software", "Effective Java", "Joshua Bloch"),
        Book("978-0-13-475759-9", "Software", "Refactoring", "Martin Fowler"),
    ]:
        library.addBook(book)
    library.addMember(Member("M1", "Apurv"))
    library.addMember(Member("M2", "Alex"))
    isbns = [b.isbn for b in library.books.values()]

    # 1. Checkout and due date
    loan = library.checkout("M1", isbns[0], day0)
    print(f"M1 borrowed {loan.book}, due {loan.dueDate}")

    # 2. Returns with fines
    result = library.returnBook("M1", isbns[0], loan.dueDate + timedelta(days=1))
    print(f"Returned one day late, fine: {result.fine}")

    # 3. Loan limit
    for isbn in isbns[:3]:
        library.checkout("M1", isbn, day0)
    try:
        library.checkout("M1", isbns[3], day0)
    except RuleViolationError as e:
        print(f"Expected violation ({e.rule}): {e.reason}")

    # 4. Overdue block
    late = day0 + timedelta(days=20)
    library.checkout("M2", isbns[3], day0)
    print("Outstanding fines for M1:", library.totalOutstandingFines("M1", late))
    result = library.returnBook("M1", isbns[0], late)
    print(f"M1 returned {isbns[0]} late, fine: {result.fine}")
    try:
        library.checkout("M2", isbns[0], late)
    except RuleViolationError as e:
        print(f"Expected violation ({e.rule}): {e.reason}")
    result = library.returnBook("M2", isbns[3], late)
    print(f"M2 returned {isbns[3]} late, fine: {result.fine}")
    library.checkout("M2", isbns[0], late)
    print("M2 can borrow again after returning the overdue book")

    # 5. Failing notifier
    class BrokenNotifier(Notifier):
        def send(self, member: Member, message: str) -> None:
            raise ConnectionError("notification service unavailable")

    library.notifier = BrokenNotifier()
    library.checkout("M2", isbns[3], late)
    print("Checkout succeeded despite notifier failure")

    print("\nAvailable books:")
    for b in library.getAvailableBooks():
        print(f"  {b.isbn} | {b.title}")

    print("\n=== Demo Completed ===\n")


if __name__ == "__main__":
    try:
        main()
    except LibraryError as e:
        logger.error("LibraryError bubbled to top-level | code=%s %s", e.code, e)
        raise
    except Exception as e:
        logger.exception("Unhandled fatal error | %s", e)
        raise
