"""
Lending policy chain evaluated before a checkout is allowed.

Each rule inspects a LendingContext and returns a RuleResult. The Library
runs its rules in order and stops at the first failure.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Tuple

from models import Book, Loan, Member

logger = logging.getLogger("library.rules")


@dataclass(frozen=True)
class LendingContext:
    """
    Everything a rule may look at for one checkout attempt.

    Attributes:
        book (Book): Book being checked out.
        member (Member): Member checking it out.
        activeLoans (Tuple[Loan, ...]): Snapshot of all active loans.
        currentDate (date): Evaluation date.
    """
    book: Book
    member: Member
    activeLoans: Tuple[Loan, ...]
    currentDate: date


@dataclass(frozen=True)
class RuleResult:
    ok: bool
    reason: Optional[str] = None
    rule: Optional[str] = None

    @classmethod
    def passed(cls) -> "RuleResult":
        return cls(ok=True)

    @classmethod
    def failed(cls, rule: str, reason: str) -> "RuleResult":
        return cls(ok=False, reason=reason, rule=rule)


class LendingRule(ABC):
    name = "lending_rule"

    @abstractmethod
    def check(self, context: LendingContext) -> RuleResult:
        ...


class BookAvailableRule(LendingRule):
    """Book must not be checked out already."""

    name = "book_available"

    def check(self, context: LendingContext) -> RuleResult:
        if not context.book.isAvailable:
            return RuleResult.failed(self.name, f"Book {context.book.isbn} is not available.")
        return RuleResult.passed()


class MaxLoansRule(LendingRule):
    """Member must hold fewer than `limit` books."""

    name = "max_loans"

    def __init__(self, limit: int) -> None:
        if limit < 0:
            raise ValueError("limit must be >= 0")
        self.limit = limit

    def check(self, context: LendingContext) -> RuleResult:
        if context.member.borrowedCount >= self.limit:
            return RuleResult.failed(
                self.name,
                f"Member {context.member.memberId} has reached the loan limit "
                f"of {self.limit} books.",
            )
        return RuleResult.passed()


class NoOverdueRule(LendingRule):
    """Member must have no active loan past its due date."""

    name = "no_overdue"

    def check(self, context: LendingContext) -> RuleResult:
        has_overdue = any(
            loan.member == context.member and loan.isOverdue(context.currentDate)
            for loan in context.activeLoans
        )
        if has_overdue:
            return RuleResult.failed(
                self.name,
                f"Member {context.member.memberId} has overdue loans.",
            )
        return RuleResult.passed()


def evaluate_rules(rules: Iterable[LendingRule], context: LendingContext) -> RuleResult:
    """
    Runs rules in order and returns the first failure, or a pass if none fail.
    """
    for rule in rules:
        result = rule.check(context)
        if not result.ok:
            logger.info(
                "Rule failed | rule=%s memberId=%s isbn=%s reason=%s",
                result.rule or type(rule).__name__,
                context.member.memberId,
                context.book.isbn,
                result.reason,
            )
            return result
    return RuleResult.passed()
