"""Assertion helpers producing pass/fail rule results."""

from __future__ import annotations

import enum
import functools
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from drageecheck.graph.model import Dragee
    from drageecheck.graph.resolver import Dependency


@functools.total_ordering
class RuleSeverity(enum.Enum):
    """Severity attached to a rule, ordered ``info < warning < error``."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RuleSeverity):
            return NotImplemented
        return self.rank < other.rank

    @classmethod
    def parse(cls, value: str) -> RuleSeverity:
        """Parse a severity name; ``warn`` is accepted for ``warning``."""
        text = value.strip().lower()
        if text == "warn":
            text = "warning"
        try:
            return cls(text)
        except ValueError:
            valid = [member.value for member in cls]
            msg = f"invalid severity '{value}', must be one of {valid}"
            raise ValueError(msg) from None


_SEVERITY_RANKS: dict[RuleSeverity, int] = {
    RuleSeverity.INFO: 0,
    RuleSeverity.WARNING: 1,
    RuleSeverity.ERROR: 2,
}


class RuleStatus(enum.Enum):
    PASS = "pass"
    FAIL = "fail"


@dataclass(frozen=True)
class ResultSubject:
    """What a result is about: a root dragee and, usually, one of its dependencies."""

    root_name: str
    dependency_name: str | None = None


@dataclass(frozen=True)
class RuleResult:
    """Outcome of a single assertion."""

    rule_label: str
    severity: RuleSeverity
    status: RuleStatus
    message: str
    subject: ResultSubject

    @property
    def passed(self) -> bool:
        return self.status is RuleStatus.PASS

    @property
    def failed(self) -> bool:
        return self.status is RuleStatus.FAIL

    def for_rule(self, label: str, severity: RuleSeverity) -> RuleResult:
        """Return a copy attributed to the rule *label* with *severity*."""
        return replace(self, rule_label=label, severity=severity)


def _result(passed: bool, message: str, subject: ResultSubject) -> RuleResult:
    # Rule identity is filled in by Rule.evaluate().
    return RuleResult(
        rule_label="",
        severity=RuleSeverity.ERROR,
        status=RuleStatus.PASS if passed else RuleStatus.FAIL,
        message="" if passed else message,
        subject=subject,
    )


def expect_dragee(
    root: Dragee,
    dependency: Dependency,
    failure_message: str,
    predicate: Callable[[Dragee], bool],
) -> RuleResult:
    """Assert *predicate* over one dependency of *root*.

    The predicate must be free of side effects; exceptions it raises are
    not caught.
    """
    subject = ResultSubject(root_name=root.name, dependency_name=dependency.name)
    return _result(bool(predicate(dependency.dragee)), failure_message, subject)


def expect_dragees(
    root: Dragee,
    dependencies: Sequence[Dependency],
    failure_message: str,
    predicate: Callable[[Sequence[Dragee]], bool],
) -> RuleResult:
    """Assert *predicate* over all dependencies of *root* at once."""
    subject = ResultSubject(root_name=root.name)
    dragees = [dependency.dragee for dependency in dependencies]
    return _result(bool(predicate(dragees)), failure_message, subject)
