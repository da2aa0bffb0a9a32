"""Graph domain: dragee model, profiles, resolver, assertions, rule engine, linter."""

from drageecheck.graph.asserter import (
    ResultSubject,
    RuleResult,
    RuleSeverity,
    RuleStatus,
    expect_dragee,
    expect_dragees,
)
from drageecheck.graph.linter import (
    LintError,
    LintResult,
    collect_rules,
    format_json,
    format_porcelain,
    format_rich,
    lint,
    sort_results,
)
from drageecheck.graph.loader import load_dragees, load_graph
from drageecheck.graph.model import (
    Dragee,
    DrageeGraph,
    DuplicateNameError,
    GraphError,
    dangling_references,
    dragee_from_dict,
)
from drageecheck.graph.profiles import (
    CleanProfile,
    DuplicateProfileError,
    Profile,
    ProfileRegistry,
    clean_registry,
    profile_of,
)
from drageecheck.graph.resolver import (
    Dependency,
    DrageeDependency,
    direct_dependencies,
    transitive_dependencies,
)
from drageecheck.graph.rule_engine import (
    DenyDependencyRule,
    Rule,
    evaluate_all,
    evaluate_rule,
    load_rules,
)

__all__ = [
    "CleanProfile",
    "DenyDependencyRule",
    "Dependency",
    "Dragee",
    "DrageeDependency",
    "DrageeGraph",
    "DuplicateNameError",
    "DuplicateProfileError",
    "GraphError",
    "LintError",
    "LintResult",
    "Profile",
    "ProfileRegistry",
    "ResultSubject",
    "Rule",
    "RuleResult",
    "RuleSeverity",
    "RuleStatus",
    "clean_registry",
    "collect_rules",
    "dangling_references",
    "direct_dependencies",
    "dragee_from_dict",
    "evaluate_all",
    "evaluate_rule",
    "expect_dragee",
    "expect_dragees",
    "format_json",
    "format_porcelain",
    "format_rich",
    "lint",
    "load_dragees",
    "load_graph",
    "load_rules",
    "profile_of",
    "sort_results",
    "transitive_dependencies",
]
