"""Built-in rules, listed explicitly in evaluation order."""

from __future__ import annotations

from drageecheck.graph.rule_engine import Rule
from drageecheck.rules import use_case_allowed_dependencies


def builtin_rules() -> list[Rule]:
    return [use_case_allowed_dependencies.RULE]


__all__ = ["builtin_rules"]
