import pytest
from datetime import date

from lending_rules import (
    BookAvailableRule,
    LendingContext,
    LendingRule,
    MaxLoansRule,
    NoOverdueRule,
    RuleResult,
    evaluate_rules,
)
from models import Book, Loan, Member


@pytest.fixture
def book():
    return Book("111", "Software", "Clean Code", "Robert C. Martin")


@pytest.fixture
def member():
    return Member("M1", "Apurv")


def make_context(book, member, loans=(), on=date(2026, 2, 1)):
    return LendingContext(book=book, member=member, activeLoans=tuple(loans), currentDate=on)


class RecordingRule(LendingRule):
    def __init__(self, result):
        self.result = result
        self.calls = 0

    def check(self, context):
        self.calls += 1
        return self.result


def test_book_available_rule(book, member):
    rule = BookAvailableRule()
    assert rule.check(make_context(book, member)).ok

    book.checkout()
    result = rule.check(make_context(book, member))
    assert result.ok is False
    assert result.rule == "book_available"
    assert "111" in result.reason


@pytest.mark.parametrize("held, ok", [(0, True), (2, True), (3, False), (4, False)])
def test_max_loans_rule(book, member, held, ok):
    for i in range(held):
        member.borrow(Book(f"b{i}", "g", "t", "a"))
    result = MaxLoansRule(3).check(make_context(book, member))
    assert result.ok is ok
    if not ok:
        assert result.rule == "max_loans"


def test_max_loans_rule_rejects_negative_limit():
    with pytest.raises(ValueError):
        MaxLoansRule(-1)


def test_no_overdue_rule(book, member):
    other = Book("222", "Software", "Design Patterns", "GoF")
    loan = Loan(other, member, date(2026, 2, 1))  # due Feb 15
    rule = NoOverdueRule()

    assert rule.check(make_context(book, member, [loan], date(2026, 2, 15))).ok
    result = rule.check(make_context(book, member, [loan], date(2026, 2, 16)))
    assert result.ok is False
    assert result.rule == "no_overdue"


def test_no_overdue_rule_ignores_other_members(book, member):
    someone = Member("M2", "Alex")
    other = Book("222", "Software", "Design Patterns", "GoF")
    loan = Loan(other, someone, date(2026, 1, 1))

    assert NoOverdueRule().check(make_context(book, member, [loan], date(2026, 2, 16))).ok


def test_evaluate_rules_all_pass(book, member):
    assert evaluate_rules([BookAvailableRule(), MaxLoansRule(3), NoOverdueRule()],
                          make_context(book, member)).ok


def test_evaluate_rules_empty_chain_passes(book, member):
    assert evaluate_rules([], make_context(book, member)) == RuleResult.passed()


def test_evaluate_rules_short_circuits_on_first_failure(book, member):
    first = RecordingRule(RuleResult.passed())
    failing = RecordingRule(RuleResult.failed("second", "nope"))
    never = RecordingRule(RuleResult.failed("third", "unreachable"))

    result = evaluate_rules([first, failing, never], make_context(book, member))

    assert result.reason == "nope"
    assert result.rule == "second"
    assert (first.calls, failing.calls, never.calls) == (1, 1, 0)
