"""Dependency resolution: turn declared dependency names into dragees."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from drageecheck.graph.model import Dragee, DrageeGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dependency:
    """A resolved dependency together with the kinds it was declared with."""

    dragee: Dragee
    kinds: tuple[str, ...]
    depth: int = 1  # 1 for direct dependencies

    @property
    def name(self) -> str:
        return self.dragee.name

    @property
    def profile(self) -> str:
        return self.dragee.profile


@dataclass(frozen=True)
class DrageeDependency:
    """A root dragee paired with its resolved dependencies."""

    root: Dragee
    dependencies: tuple[Dependency, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.dependencies)


def direct_dependencies(root: Dragee, graph: DrageeGraph) -> DrageeDependency:
    """Resolve ``root.depends_on`` against *graph*, in declaration order.

    Names missing from the graph are skipped.
    """
    resolved: list[Dependency] = []
    for dep_name, kinds in root.depends_on.items():
        target = graph.lookup(dep_name)
        if target is None:
            logger.debug("Dangling dependency '%s' -> '%s' skipped", root.name, dep_name)
            continue
        resolved.append(Dependency(dragee=target, kinds=kinds))
    return DrageeDependency(root=root, dependencies=tuple(resolved))


def transitive_dependencies(
    root: Dragee, graph: DrageeGraph, max_depth: int = 10
) -> DrageeDependency:
    """Resolve everything reachable from *root* within *max_depth* hops.

    Breadth-first, so each dragee is reported once at its shallowest depth
    with the kinds of the edge that first reached it.  The root itself is
    never reported, even when a cycle leads back to it.
    """
    if max_depth < 1:
        msg = f"max_depth must be at least 1, got {max_depth}"
        raise ValueError(msg)

    visited: set[str] = {root.name}
    resolved: list[Dependency] = []
    queue: deque[tuple[Dragee, int]] = deque([(root, 0)])

    while queue:
        current, depth = queue.popleft()
        if depth >= max_depth:
            continue
        for dependency in direct_dependencies(current, graph).dependencies:
            if dependency.name in visited:
                continue
            visited.add(dependency.name)
            reached = Dependency(
                dragee=dependency.dragee, kinds=dependency.kinds, depth=depth + 1
            )
            resolved.append(reached)
            queue.append((dependency.dragee, depth + 1))

    return DrageeDependency(root=root, dependencies=tuple(resolved))
