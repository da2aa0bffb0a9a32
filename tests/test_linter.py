"""Tests for drageecheck.graph.linter — lint orchestrator, ordering, and formatters."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from drageecheck.config import CheckConfig
from drageecheck.graph.asserter import ResultSubject, RuleResult, RuleSeverity, RuleStatus
from drageecheck.graph.linter import (
    LintError,
    LintResult,
    format_json,
    format_porcelain,
    format_rich,
    lint,
    sort_results,
)
from drageecheck.graph.model import Dragee, DrageeGraph
from drageecheck.graph.rule_engine import Rule

if TYPE_CHECKING:
    from pathlib import Path


def _result(
    label: str,
    root: str,
    dep: str | None,
    *,
    status: RuleStatus = RuleStatus.FAIL,
    severity: RuleSeverity = RuleSeverity.ERROR,
) -> RuleResult:
    return RuleResult(label, severity, status, f"{root} -> {dep}", ResultSubject(root, dep))


def _noop_rule(label: str) -> Rule:
    return Rule(label, RuleSeverity.ERROR, lambda graph: [])


@pytest.fixture()
def lint_project(tmp_path: Path) -> Path:
    """Project with a snapshot holding one forbidden and one dangling dependency."""
    (tmp_path / "dragees.json").write_text(
        json.dumps(
            [
                {"name": "APresenter", "profile": "clean/presenter"},
                {"name": "AnEntity", "profile": "clean/entity"},
                {
                    "name": "AUseCase",
                    "profile": "clean/use_case",
                    "depends_on": {
                        "AnEntity": ["field"],
                        "APresenter": ["field"],
                        "External": ["method"],
                    },
                },
            ]
        )
    )
    (tmp_path / "rules.yml").write_text(
        "version: 1\n"
        "rules:\n"
        "  - name: entity-is-leaf\n"
        "    severity: warning\n"
        "    deny:\n"
        "      from: { profile: use_case }\n"
        "      to: { profile: entity }\n"
    )
    return tmp_path


# ---------------------------------------------------------------------------
# lint()
# ---------------------------------------------------------------------------


class TestLint:
    def test_builtin_rules_only(self, lint_project: Path) -> None:
        result = lint(lint_project / "dragees.json")
        assert result.rules_evaluated == 1
        assert result.dragees_loaded == 3
        assert [(r.subject.dependency_name, r.status) for r in result.results] == [
            ("AnEntity", RuleStatus.PASS),
            ("APresenter", RuleStatus.FAIL),
        ]
        assert result.worst_severity() is RuleSeverity.ERROR
        assert result.elapsed_ms >= 0

    def test_with_rules_file(self, lint_project: Path) -> None:
        result = lint(lint_project / "dragees.json", rules_path=lint_project / "rules.yml")
        assert result.rules_evaluated == 2
        assert [r.rule_label for r in result.failures] == [
            "Use Case Allowed Dependencies",
            "entity-is-leaf",
        ]
        assert result.failures_at_least(RuleSeverity.ERROR) == result.failures[:1]
        assert len(result.failures_at_least(RuleSeverity.WARNING)) == 2

    def test_report_dangling(self, lint_project: Path) -> None:
        result = lint(
            lint_project / "dragees.json", config=CheckConfig(report_dangling=True)
        )
        dangling = [r for r in result.results if r.rule_label == "Dangling Dependencies"]
        assert len(dangling) == 1
        assert dangling[0].severity is RuleSeverity.WARNING
        assert dangling[0].subject == ResultSubject("AUseCase", "External")

    def test_disabled_rules(self, lint_project: Path) -> None:
        config = CheckConfig(disabled_rules=("Use Case Allowed Dependencies",))
        result = lint(lint_project / "dragees.json", config=config)
        assert result.rules_evaluated == 0
        assert result.results == []

    def test_parallel_matches_sequential(self, lint_project: Path) -> None:
        rules_path = lint_project / "rules.yml"
        sequential = lint(lint_project / "dragees.json", rules_path=rules_path)
        parallel = lint(
            lint_project / "dragees.json", rules_path=rules_path, config=CheckConfig(workers=4)
        )
        assert parallel.results == sequential.results

    def test_duplicate_dragee_names(self, tmp_path: Path) -> None:
        path = tmp_path / "dragees.json"
        path.write_text(json.dumps([{"name": "A", "profile": "p"}, {"name": "A", "profile": "p"}]))
        with pytest.raises(LintError, match="Duplicate dragee name 'A'"):
            lint(path)

    def test_missing_snapshot(self, tmp_path: Path) -> None:
        with pytest.raises(LintError, match="Invalid dragee snapshot"):
            lint(tmp_path / "nope.json")

    def test_invalid_rules_file(self, lint_project: Path) -> None:
        (lint_project / "rules.yml").write_text("version: 7\n")
        with pytest.raises(LintError, match="Invalid rules configuration"):
            lint(lint_project / "dragees.json", rules_path=lint_project / "rules.yml")

    def test_malformed_rules_yaml(self, lint_project: Path) -> None:
        (lint_project / "rules.yml").write_text("version: 1\nrules: [\n")
        match = "Invalid rules configuration: rules.yml: invalid YAML"
        with pytest.raises(LintError, match=match):
            lint(lint_project / "dragees.json", rules_path=lint_project / "rules.yml")

    def test_snapshot_mapping_without_dragees(self, tmp_path: Path) -> None:
        path = tmp_path / "dragees.json"
        path.write_text(json.dumps({"dependencies": [{"name": "A", "profile": "p"}]}))
        with pytest.raises(LintError, match="expected a list of dragees"):
            lint(path)

    def test_rule_label_clash(self, lint_project: Path) -> None:
        (lint_project / "rules.yml").write_text(
            "version: 1\n"
            "rules:\n"
            "  - name: Use Case Allowed Dependencies\n"
            "    deny: { from: { profile: use_case }, to: { profile: entity } }\n"
        )
        with pytest.raises(LintError, match="Duplicate rule label"):
            lint(lint_project / "dragees.json", rules_path=lint_project / "rules.yml")


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


class TestSortResults:
    def test_rule_then_root_then_declaration(self) -> None:
        graph = DrageeGraph.build(
            [
                Dragee("X", "p"),
                Dragee("Y", "p"),
                Dragee("R1", "p", {"Y": ("field",), "X": ("field",)}),
                Dragee("R2", "p", {"X": ("field",)}),
            ]
        )
        rules = [_noop_rule("first"), _noop_rule("second")]
        shuffled = [
            _result("second", "R1", "X"),
            _result("first", "R2", "X"),
            _result("first", "R1", "X"),
            _result("first", "R1", "Y"),
        ]
        ordered = sort_results(shuffled, rules, graph)
        keys = [(r.rule_label, r.subject.root_name, r.subject.dependency_name) for r in ordered]
        assert keys == [
            ("first", "R1", "Y"),
            ("first", "R1", "X"),
            ("first", "R2", "X"),
            ("second", "R1", "X"),
        ]

    def test_root_level_results_first_and_transitive_last(self) -> None:
        graph = DrageeGraph.build(
            [
                Dragee("Deep", "p"),
                Dragee("Mid", "p", {"Deep": ("field",)}),
                Dragee("Root", "p", {"Mid": ("field",)}),
            ]
        )
        rules = [_noop_rule("r")]
        shuffled = [
            _result("r", "Root", "Deep"),
            _result("r", "Root", "Mid"),
            _result("r", "Root", None),
        ]
        ordered = sort_results(shuffled, rules, graph)
        assert [r.subject.dependency_name for r in ordered] == [None, "Mid", "Deep"]

    def test_stable_for_ties(self) -> None:
        graph = DrageeGraph.build([Dragee("R", "p", {"D": ("field",)}), Dragee("D", "p")])
        first = _result("r", "R", "D", status=RuleStatus.PASS)
        second = _result("r", "R", "D")
        assert sort_results([first, second], [_noop_rule("r")], graph) == [first, second]


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def _sample_result() -> LintResult:
    return LintResult(
        results=[
            _result("Use Case Allowed Dependencies", "AUseCase", "APresenter"),
            _result("Use Case Allowed Dependencies", "AUseCase", "ARepo", status=RuleStatus.PASS),
            _result("orphans", "Lonely", None, severity=RuleSeverity.WARNING),
        ],
        rules_evaluated=2,
        dragees_loaded=4,
        elapsed_ms=12.0,
    )


class TestFormatRich:
    def test_with_failures(self) -> None:
        output = format_rich(_sample_result())
        assert "Rules: 2 loaded" in output
        assert "Dragees: 4 loaded" in output
        assert "✗ Use Case Allowed Dependencies [error]" in output
        assert "AUseCase → APresenter" in output
        assert "! orphans [warning]" in output
        assert "2 failures found (2 rules evaluated, 1 checks passed, 0.0s)" in output

    def test_clean(self) -> None:
        output = format_rich(LintResult(rules_evaluated=1, dragees_loaded=1))
        assert "✓ No failures found (1 rules evaluated, 0 checks passed, 0.0s)" in output


class TestFormatJson:
    def test_structure(self) -> None:
        data = json.loads(format_json(_sample_result()))
        assert len(data["results"]) == 3
        first = data["results"][0]
        assert first == {
            "rule_label": "Use Case Allowed Dependencies",
            "severity": "error",
            "status": "fail",
            "message": "AUseCase -> APresenter",
            "subject": {"root_name": "AUseCase", "dependency_name": "APresenter"},
        }
        assert data["summary"]["failed"] == 2
        assert data["summary"]["passed"] == 1
        assert data["summary"]["worst_severity"] == "error"

    def test_empty(self) -> None:
        data = json.loads(format_json(LintResult()))
        assert data["results"] == []
        assert data["summary"]["worst_severity"] is None


class TestFormatPorcelain:
    def test_failures_only(self) -> None:
        assert format_porcelain(_sample_result()).splitlines() == [
            "error:Use Case Allowed Dependencies:AUseCase:APresenter",
            "warning:orphans:Lonely:",
        ]

    def test_empty(self) -> None:
        assert format_porcelain(LintResult()) == ""
