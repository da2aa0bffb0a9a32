"""Dragee graph: validated, read-only index of named architectural components."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GraphError(Exception):
    """Base class for structural errors that abort an analysis run."""


class DuplicateNameError(GraphError):
    """Raised when two dragees share the same name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Duplicate dragee name '{name}'")
        self.name = name


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Dragee:
    """A named architectural component with one profile and its declared dependencies."""

    name: str
    profile: str
    depends_on: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        # Freeze the mapping so the graph stays read-only.
        frozen = {dep: tuple(kinds) for dep, kinds in self.depends_on.items()}
        object.__setattr__(self, "depends_on", MappingProxyType(frozen))

    def __hash__(self) -> int:
        return hash((self.name, self.profile, tuple(self.depends_on.items())))


# ---------------------------------------------------------------------------
# Record parsing
# ---------------------------------------------------------------------------


def dragee_from_dict(data: object) -> Dragee:
    """Convert a raw snapshot record into a :class:`Dragee`.

    Both ``depends_on`` (dragee export format) and ``dependsOn`` are accepted.
    Raises ``ValueError`` on malformed records.
    """
    if not isinstance(data, dict):
        msg = f"dragee record must be a mapping, got {type(data).__name__}"
        raise ValueError(msg)

    name = data.get("name")
    if name is None or not isinstance(name, str) or not name.strip():
        msg = "dragee record missing required 'name' field"
        raise ValueError(msg)

    profile = data.get("profile", "")
    if not isinstance(profile, str):
        msg = f"dragee '{name}': 'profile' must be a string"
        raise ValueError(msg)

    deps_raw: Any = data.get("depends_on", data.get("dependsOn"))
    if deps_raw is None:
        deps_raw = {}
    if not isinstance(deps_raw, dict):
        msg = f"dragee '{name}': 'depends_on' must be a mapping"
        raise ValueError(msg)

    depends_on: dict[str, tuple[str, ...]] = {}
    for dep_name, kinds in deps_raw.items():
        if not isinstance(kinds, list) or not kinds:
            msg = f"dragee '{name}': dependency '{dep_name}' must list at least one kind"
            raise ValueError(msg)
        if not all(isinstance(k, str) for k in kinds):
            msg = f"dragee '{name}': dependency kinds of '{dep_name}' must be strings"
            raise ValueError(msg)
        depends_on[str(dep_name)] = tuple(kinds)

    return Dragee(name=name, profile=profile, depends_on=depends_on)


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


class DrageeGraph:
    """Insertion-ordered, read-only collection of dragees keyed by name.

    Use :meth:`build` to construct one; it either returns a complete graph or
    raises :class:`DuplicateNameError` without producing anything.
    """

    __slots__ = ("_by_name", "_by_profile", "_position")

    def __init__(
        self,
        by_name: dict[str, Dragee],
        by_profile: dict[str, tuple[Dragee, ...]],
    ) -> None:
        self._by_name = MappingProxyType(by_name)
        self._by_profile = MappingProxyType(by_profile)
        self._position = MappingProxyType({name: idx for idx, name in enumerate(by_name)})

    @classmethod
    def build(cls, dragees: Iterable[Dragee]) -> DrageeGraph:
        """Index *dragees* by name and by profile string."""
        by_name: dict[str, Dragee] = {}
        for dragee in dragees:
            if dragee.name in by_name:
                raise DuplicateNameError(dragee.name)
            by_name[dragee.name] = dragee

        grouped: dict[str, list[Dragee]] = {}
        for dragee in by_name.values():
            grouped.setdefault(dragee.profile, []).append(dragee)
        by_profile = {profile: tuple(items) for profile, items in grouped.items()}

        return cls(by_name, by_profile)

    def lookup(self, name: str) -> Dragee | None:
        """Return the dragee called *name*, or ``None``."""
        return self._by_name.get(name)

    def all(self) -> tuple[Dragee, ...]:
        """Return every dragee in insertion order."""
        return tuple(self._by_name.values())

    def with_profile(self, profile: str) -> tuple[Dragee, ...]:
        """Return dragees whose profile string is exactly *profile*."""
        return self._by_profile.get(profile, ())

    def position(self, name: str) -> int:
        """Return the insertion index of *name* (raises ``KeyError`` if absent)."""
        return self._position[name]

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[Dragee]:
        return iter(self._by_name.values())

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"DrageeGraph({len(self)} dragees)"


def dangling_references(graph: DrageeGraph) -> list[tuple[str, str]]:
    """Return ``(root_name, missing_name)`` pairs for unresolvable dependencies."""
    missing: list[tuple[str, str]] = []
    for dragee in graph:
        for dep_name in dragee.depends_on:
            if dep_name not in graph:
                missing.append((dragee.name, dep_name))
    return missing
