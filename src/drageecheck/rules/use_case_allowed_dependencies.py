"""Use Case Allowed Dependencies.

A use case must not have any direct dependency of profile
``clean/presenter`` or ``clean/controller``.

Incorrect::

    [
        {"name": "APresenter", "profile": "clean/presenter"},
        {"name": "AUseCase", "profile": "clean/use_case",
         "depends_on": {"APresenter": ["field"]}}
    ]

Correct::

    [{"name": "AUseCase1", "profile": "clean/use_case"}]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from drageecheck.graph.asserter import RuleResult, RuleSeverity, expect_dragee
from drageecheck.graph.profiles import CleanProfile, profile_of
from drageecheck.graph.resolver import DrageeDependency, direct_dependencies
from drageecheck.graph.rule_engine import Rule

if TYPE_CHECKING:
    from drageecheck.graph.model import DrageeGraph

_USE_CASE = CleanProfile.USE_CASE.profile()
_FORBIDDEN = (CleanProfile.CONTROLLER.profile(), CleanProfile.PRESENTER.profile())


def _assert_dependencies(resolved: DrageeDependency) -> list[RuleResult]:
    return [
        expect_dragee(
            resolved.root,
            dependency,
            f'This use case must not have any dependency of type "{dependency.profile}"',
            lambda dragee: not profile_of(dragee, *_FORBIDDEN),
        )
        for dependency in resolved.dependencies
    ]


def check(graph: DrageeGraph) -> list[RuleResult]:
    resolved = (direct_dependencies(use_case, graph) for use_case in _USE_CASE.find_in(graph))
    return [result for dep in resolved if dep for result in _assert_dependencies(dep)]


RULE = Rule(
    label="Use Case Allowed Dependencies",
    severity=RuleSeverity.ERROR,
    handler=check,
    description="Use case must not depend on a presenter or a controller",
)
