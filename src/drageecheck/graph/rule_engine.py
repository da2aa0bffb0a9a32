"""Rule engine: rule contract, rules.yml parsing, and evaluation against a dragee graph."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

import yaml

from drageecheck.graph.asserter import RuleResult, RuleSeverity, expect_dragee
from drageecheck.graph.profiles import profile_of
from drageecheck.graph.resolver import direct_dependencies, transitive_dependencies

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from drageecheck.graph.model import DrageeGraph
    from drageecheck.graph.profiles import Profile, ProfileRegistry
    from drageecheck.graph.resolver import DrageeDependency

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})
DEFAULT_MAX_DEPTH = 10

# ---------------------------------------------------------------------------
# Rule contract
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """A named, severity-tagged check over a dragee graph."""

    label: str
    severity: RuleSeverity
    handler: Callable[[DrageeGraph], Sequence[RuleResult]]
    description: str = ""

    def evaluate(self, graph: DrageeGraph) -> list[RuleResult]:
        """Run the handler and attribute every result to this rule."""
        return [r.for_rule(self.label, self.severity) for r in self.handler(graph)]


def evaluate_rule(rule: Rule, graph: DrageeGraph) -> list[RuleResult]:
    results = rule.evaluate(graph)
    logger.debug("Rule '%s' produced %d results", rule.label, len(results))
    return results


def evaluate_all(
    graph: DrageeGraph, rules: Sequence[Rule], *, workers: int = 1
) -> list[RuleResult]:
    """Evaluate *rules* and return their results in rule declaration order.

    With ``workers > 1`` the rules run on a thread pool; the graph is
    read-only and each rule fills its own list, so ordering is unaffected.
    """
    seen: set[str] = set()
    for rule in rules:
        if rule.label in seen:
            msg = f"Duplicate rule label '{rule.label}'"
            raise ValueError(msg)
        seen.add(rule.label)

    if workers > 1 and len(rules) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            per_rule = list(pool.map(lambda r: evaluate_rule(r, graph), rules))
    else:
        per_rule = [evaluate_rule(rule, graph) for rule in rules]

    return [result for results in per_rule for result in results]


# ---------------------------------------------------------------------------
# Declarative deny rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DenyDependencyRule:
    """Forbid dragees of one set of profiles from depending on another set."""

    name: str
    description: str
    from_profiles: tuple[Profile, ...]
    to_profiles: tuple[Profile, ...]
    transitive: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    severity: RuleSeverity = RuleSeverity.ERROR

    def resolve(self, graph: DrageeGraph) -> list[DrageeDependency]:
        roots = [d for d in graph if profile_of(d, *self.from_profiles)]
        if self.transitive:
            return [transitive_dependencies(root, graph, self.max_depth) for root in roots]
        return [direct_dependencies(root, graph) for root in roots]

    def check(self, graph: DrageeGraph) -> list[RuleResult]:
        results: list[RuleResult] = []
        for resolved in self.resolve(graph):
            if not resolved:
                continue
            for dependency in resolved.dependencies:
                how = "directly" if dependency.depth == 1 else f"at depth {dependency.depth}"
                results.append(
                    expect_dragee(
                        resolved.root,
                        dependency,
                        f"'{resolved.root.name}' must not depend {how} on "
                        f"'{dependency.name}' of type \"{dependency.profile}\"",
                        lambda d: not profile_of(d, *self.to_profiles),
                    )
                )
        return results

    def to_rule(self) -> Rule:
        return Rule(
            label=self.name,
            severity=self.severity,
            handler=self.check,
            description=self.description,
        )


# ---------------------------------------------------------------------------
# YAML parsing
# ---------------------------------------------------------------------------


def _parse_profiles(
    data: object, registry: ProfileRegistry, context: str
) -> tuple[Profile, ...]:
    """Parse a ``{profile: key | [keys]}`` matcher into registered profiles."""
    if not isinstance(data, dict):
        msg = f"{context} must be a mapping"
        raise ValueError(msg)

    raw = data.get("profile")
    if raw is None:
        msg = f"{context}: 'profile' is required"
        raise ValueError(msg)

    keys = [str(k) for k in raw] if isinstance(raw, list) else [str(raw)]
    if not keys:
        msg = f"{context}: 'profile' must not be empty"
        raise ValueError(msg)

    profiles: list[Profile] = []
    for key in keys:
        if key not in registry:
            msg = f"{context}: unknown profile '{key}', must be one of {sorted(registry.keys())}"
            raise ValueError(msg)
        profiles.append(registry.get(key))
    return tuple(profiles)


def _parse_deny_rule(
    name: str,
    description: str,
    deny_data: dict[str, object],
    registry: ProfileRegistry,
    *,
    severity: RuleSeverity,
) -> DenyDependencyRule:
    """Parse the 'deny' block of a rule."""
    from_profiles = _parse_profiles(deny_data.get("from"), registry, f"Rule '{name}' deny.from")
    to_profiles = _parse_profiles(deny_data.get("to"), registry, f"Rule '{name}' deny.to")

    transitive = deny_data.get("transitive", False)
    if not isinstance(transitive, bool):
        msg = f"Rule '{name}': deny.transitive must be true or false"
        raise ValueError(msg)

    max_depth = deny_data.get("max_depth", DEFAULT_MAX_DEPTH)
    # bool is an int subclass; reject it along with floats and strings
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        msg = f"Rule '{name}': deny.max_depth must be an integer"
        raise ValueError(msg)
    if max_depth < 1:
        msg = f"Rule '{name}': deny.max_depth must be at least 1"
        raise ValueError(msg)

    return DenyDependencyRule(
        name=name,
        description=description,
        from_profiles=from_profiles,
        to_profiles=to_profiles,
        transitive=transitive,
        max_depth=max_depth,
        severity=severity,
    )


def load_rules(rules_path: Path, registry: ProfileRegistry) -> list[Rule]:
    """Parse rules.yml and return compiled :class:`Rule` objects.

    Raises ``ValueError`` on schema errors (missing version, unknown
    profiles, duplicate names, etc.).
    """
    with rules_path.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            msg = f"{rules_path.name}: invalid YAML: {exc}"
            raise ValueError(msg) from exc

    if not isinstance(data, dict):
        msg = "rules.yml must be a YAML mapping"
        raise ValueError(msg)

    version = data.get("version")
    if version is None:
        msg = "rules.yml: missing required 'version' field"
        raise ValueError(msg)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        expected = sorted(SUPPORTED_SCHEMA_VERSIONS)
        msg = f"rules.yml: unsupported version {version}, expected one of {expected}"
        raise ValueError(msg)

    rules_data = data.get("rules", [])
    if not isinstance(rules_data, list):
        msg = "rules.yml: 'rules' must be a list"
        raise ValueError(msg)

    seen_names: set[str] = set()
    rules: list[Rule] = []

    for idx, rule_data in enumerate(rules_data):
        if not isinstance(rule_data, dict):
            msg = f"rules.yml: rule at index {idx} must be a mapping"
            raise ValueError(msg)

        name = rule_data.get("name")
        if name is None or not isinstance(name, str) or not name.strip():
            msg = f"rules.yml: rule at index {idx} missing required 'name' field"
            raise ValueError(msg)

        if name in seen_names:
            msg = f"rules.yml: Duplicate rule name '{name}'"
            raise ValueError(msg)
        seen_names.add(name)

        description = str(rule_data.get("description", ""))

        try:
            severity = RuleSeverity.parse(str(rule_data.get("severity", "error")))
        except ValueError as exc:
            msg = f"rules.yml: rule '{name}' has {exc}"
            raise ValueError(msg) from None

        deny_data = rule_data.get("deny")
        if deny_data is None:
            msg = f"rules.yml: rule '{name}' must have a 'deny' block"
            raise ValueError(msg)
        if not isinstance(deny_data, dict):
            msg = f"Rule '{name}': 'deny' must be a mapping"
            raise ValueError(msg)

        deny = _parse_deny_rule(name, description, deny_data, registry, severity=severity)
        rules.append(deny.to_rule())

    logger.debug("Loaded %d rules from %s", len(rules), rules_path)
    return rules
