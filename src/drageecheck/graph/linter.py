"""Linter orchestrator: load the snapshot and rules, evaluate, aggregate, format results."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from drageecheck.graph.asserter import RuleResult, RuleSeverity
from drageecheck.graph.loader import load_graph
from drageecheck.graph.model import GraphError
from drageecheck.graph.profiles import clean_registry
from drageecheck.graph.rule_engine import evaluate_all, load_rules

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from drageecheck.config import CheckConfig
    from drageecheck.graph.model import DrageeGraph
    from drageecheck.graph.profiles import ProfileRegistry
    from drageecheck.graph.rule_engine import Rule

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LintError(Exception):
    """Raised when lint encounters an unusable snapshot or configuration."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class LintResult:
    """Result of a lint run."""

    results: list[RuleResult] = field(default_factory=list)
    rules_evaluated: int = 0
    dragees_loaded: int = 0
    elapsed_ms: float = 0.0

    @property
    def failures(self) -> list[RuleResult]:
        return [r for r in self.results if r.failed]

    @property
    def passes(self) -> list[RuleResult]:
        return [r for r in self.results if r.passed]

    def worst_severity(self) -> RuleSeverity | None:
        """Highest severity among failures, or ``None`` when nothing failed."""
        return max((r.severity for r in self.failures), default=None)

    def failures_at_least(self, severity: RuleSeverity) -> list[RuleResult]:
        return [r for r in self.failures if r.severity >= severity]


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def sort_results(
    results: Sequence[RuleResult], rules: Sequence[Rule], graph: DrageeGraph
) -> list[RuleResult]:
    """Order results by rule, then root insertion order, then dependency declaration order.

    The sort is stable, so results that tie keep the order their rule
    produced them in.
    """
    rule_index = {rule.label: idx for idx, rule in enumerate(rules)}
    root_index = {dragee.name: idx for idx, dragee in enumerate(graph)}
    size = len(root_index)

    def _key(result: RuleResult) -> tuple[int, int, int]:
        subject = result.subject
        rule_pos = rule_index.get(result.rule_label, len(rule_index))
        root_pos = root_index.get(subject.root_name, size)
        if subject.dependency_name is None:
            return (rule_pos, root_pos, -1)
        root = graph.lookup(subject.root_name)
        declared = list(root.depends_on) if root is not None else []
        if subject.dependency_name in declared:
            dep_pos = declared.index(subject.dependency_name)
        else:
            # Reached transitively: after the declared ones, in graph order.
            dep_pos = len(declared) + root_index.get(subject.dependency_name, size)
        return (rule_pos, root_pos, dep_pos)

    return sorted(results, key=_key)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def collect_rules(
    registry: ProfileRegistry,
    *,
    rules_path: Path | None = None,
    config: CheckConfig | None = None,
) -> list[Rule]:
    """Assemble built-in rules, rules from *rules_path*, and optional extras.

    Rules named in ``config.disabled_rules`` are dropped.
    """
    # Lazy imports to avoid circular dependencies:
    # rules -> graph.rule_engine -> graph/__init__ -> linter
    # config -> graph.asserter -> graph/__init__ -> linter
    from drageecheck.config import CheckConfig
    from drageecheck.rules import builtin_rules, dangling_dependencies

    config = config or CheckConfig()

    rules = builtin_rules()
    if rules_path is not None:
        rules.extend(load_rules(rules_path, registry))
    if config.report_dangling:
        rules.append(dangling_dependencies.RULE)

    disabled = set(config.disabled_rules)
    return [rule for rule in rules if rule.label not in disabled]


def lint(
    graph_path: Path,
    *,
    rules_path: Path | None = None,
    config: CheckConfig | None = None,
) -> LintResult:
    """Load the snapshot at *graph_path*, evaluate all rules, and return results.

    Parameters
    ----------
    graph_path:
        Snapshot file or directory of snapshot files (JSON or YAML).
    rules_path:
        Optional ``rules.yml`` with declarative deny rules, evaluated after
        the built-in rules.
    config:
        Run settings; defaults to :class:`CheckConfig` defaults.

    Returns
    -------
    LintResult
        Ordered results, counts, and timing.

    Raises
    ------
    LintError
        When the snapshot or rules file cannot be read or is invalid.
    """
    from drageecheck.config import CheckConfig

    start = time.monotonic()
    config = config or CheckConfig()

    try:
        graph = load_graph(graph_path)
    except (OSError, ValueError, GraphError) as exc:
        msg = f"Invalid dragee snapshot: {exc}"
        raise LintError(msg) from exc

    registry = clean_registry()
    try:
        rules = collect_rules(registry, rules_path=rules_path, config=config)
    except (OSError, ValueError) as exc:
        msg = f"Invalid rules configuration: {exc}"
        raise LintError(msg) from exc

    try:
        results = evaluate_all(graph, rules, workers=config.workers)
    except ValueError as exc:
        msg = f"Invalid rules configuration: {exc}"
        raise LintError(msg) from exc

    ordered = sort_results(results, rules, graph)
    elapsed = (time.monotonic() - start) * 1000
    logger.debug(
        "Evaluated %d rules over %d dragees in %.1f ms", len(rules), len(graph), elapsed
    )

    return LintResult(
        results=ordered,
        rules_evaluated=len(rules),
        dragees_loaded=len(graph),
        elapsed_ms=elapsed,
    )


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

_SEVERITY_MARKS = {
    RuleSeverity.ERROR: "✗",
    RuleSeverity.WARNING: "!",
    RuleSeverity.INFO: "i",
}


def format_rich(result: LintResult) -> str:
    """Format a LintResult as human-readable text.

    Example output with failures::

        Rules: 1 loaded
        Dragees: 2 loaded

        ✗ Use Case Allowed Dependencies [error]
          AUseCase -> APresenter
          This use case must not have any dependency of type "presenter"

        1 failure found (1 rules evaluated, 1 checks passed, 0.0s)
    """
    lines: list[str] = []

    lines.append(f"Rules: {result.rules_evaluated} loaded")
    lines.append(f"Dragees: {result.dragees_loaded} loaded")
    lines.append("")

    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"
    passed = len(result.passes)
    failures = result.failures

    if failures:
        for r in failures:
            lines.append(f"{_SEVERITY_MARKS[r.severity]} {r.rule_label} [{r.severity.value}]")
            subject = r.subject
            if subject.dependency_name is not None:
                lines.append(f"  {subject.root_name} → {subject.dependency_name}")
            else:
                lines.append(f"  {subject.root_name}")
            lines.append(f"  {r.message}")
            lines.append("")

        noun = "failure" if len(failures) == 1 else "failures"
        lines.append(
            f"{len(failures)} {noun} found ({result.rules_evaluated} rules evaluated, "
            f"{passed} checks passed, {elapsed_str})"
        )
    else:
        lines.append(
            f"✓ No failures found ({result.rules_evaluated} rules evaluated, "
            f"{passed} checks passed, {elapsed_str})"
        )

    return "\n".join(lines)


def format_json(result: LintResult) -> str:
    """Format a LintResult as structured JSON.

    Returns a JSON string with a ``results`` array and a ``summary`` object.
    """
    results_list: list[dict[str, object]] = []
    for r in result.results:
        results_list.append(
            {
                "rule_label": r.rule_label,
                "severity": r.severity.value,
                "status": r.status.value,
                "message": r.message,
                "subject": {
                    "root_name": r.subject.root_name,
                    "dependency_name": r.subject.dependency_name,
                },
            }
        )

    worst = result.worst_severity()
    output: dict[str, object] = {
        "results": results_list,
        "summary": {
            "rules_evaluated": result.rules_evaluated,
            "dragees_loaded": result.dragees_loaded,
            "passed": len(result.passes),
            "failed": len(result.failures),
            "worst_severity": worst.value if worst is not None else None,
            "elapsed_ms": result.elapsed_ms,
        },
    }

    return json.dumps(output, indent=2)


def format_porcelain(result: LintResult) -> str:
    """Format failures as machine-readable one-line-per-failure output.

    Format: ``severity:rule_label:root_name:dependency_name``

    A missing dependency name is represented as an empty string.
    Returns empty string when nothing failed.
    """
    lines: list[str] = []
    for r in result.failures:
        dep = r.subject.dependency_name if r.subject.dependency_name is not None else ""
        lines.append(f"{r.severity.value}:{r.rule_label}:{r.subject.root_name}:{dep}")
    return "\n".join(lines)
