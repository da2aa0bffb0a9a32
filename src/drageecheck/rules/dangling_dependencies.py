"""Dangling Dependencies.

Reports dependency names that do not resolve to any dragee in the graph.
Not part of the default rule set: resolution tolerates dangling names so
partial graphs can be analysed, and this rule is enabled only with
``report_dangling``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from drageecheck.graph.asserter import ResultSubject, RuleResult, RuleSeverity, RuleStatus
from drageecheck.graph.model import dangling_references
from drageecheck.graph.rule_engine import Rule

if TYPE_CHECKING:
    from drageecheck.graph.model import DrageeGraph


def check(graph: DrageeGraph) -> list[RuleResult]:
    return [
        RuleResult(
            rule_label="",
            severity=RuleSeverity.WARNING,
            status=RuleStatus.FAIL,
            message=f"'{root_name}' depends on '{missing}' which is not in the graph",
            subject=ResultSubject(root_name=root_name, dependency_name=missing),
        )
        for root_name, missing in dangling_references(graph)
    ]


RULE = Rule(
    label="Dangling Dependencies",
    severity=RuleSeverity.WARNING,
    handler=check,
    description="Dependencies must resolve to a dragee of the analysed graph",
)
