"""Profile registry: classify dragees into architectural roles."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from drageecheck.graph.model import GraphError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from drageecheck.graph.model import Dragee, DrageeGraph


class DuplicateProfileError(GraphError):
    """Raised when a profile key is registered twice."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Duplicate profile key '{key}'")
        self.key = key


@dataclass(frozen=True)
class Profile:
    """A named role.

    A dragee belongs to the profile when its ``profile`` string is either the
    bare ``key`` or ``"<namespace>/<key>"``.
    """

    key: str
    label: str = ""
    namespace: str | None = None

    @property
    def qualified_key(self) -> str:
        if self.namespace is None:
            return self.key
        return f"{self.namespace}/{self.key}"

    def matches(self, dragee: Dragee) -> bool:
        return dragee.profile in (self.key, self.qualified_key)

    def find_in(self, graph: DrageeGraph) -> list[Dragee]:
        """Return matching dragees in graph insertion order."""
        if self.namespace is None:
            return list(graph.with_profile(self.key))
        merged = graph.with_profile(self.key) + graph.with_profile(self.qualified_key)
        return sorted(merged, key=lambda d: graph.position(d.name))


def profile_of(dragee: Dragee, *profiles: Profile) -> bool:
    """Return True if *dragee* belongs to any of *profiles*."""
    return any(profile.matches(dragee) for profile in profiles)


class ProfileRegistry:
    """Finite, explicitly populated mapping of profile key to :class:`Profile`."""

    def __init__(self, profiles: Iterable[Profile] = ()) -> None:
        self._profiles: dict[str, Profile] = {}
        for profile in profiles:
            self.register(profile)

    def register(self, profile: Profile) -> Profile:
        if profile.key in self._profiles:
            raise DuplicateProfileError(profile.key)
        self._profiles[profile.key] = profile
        return profile

    def get(self, key: str) -> Profile:
        """Return the profile registered under *key*.

        Raises ``KeyError`` for unregistered keys.
        """
        try:
            return self._profiles[key]
        except KeyError:
            msg = f"unknown profile '{key}', must be one of {sorted(self._profiles)}"
            raise KeyError(msg) from None

    def keys(self) -> list[str]:
        return list(self._profiles)

    def find_in(self, graph: DrageeGraph, *keys: str) -> list[Dragee]:
        """Return dragees matching any of the profiles *keys*, in graph order."""
        found: dict[str, Dragee] = {}
        for key in keys:
            for dragee in self.get(key).find_in(graph):
                found[dragee.name] = dragee
        return sorted(found.values(), key=lambda d: graph.position(d.name))

    def profile_of(self, dragee: Dragee) -> Profile | None:
        """Return the first registered profile *dragee* belongs to, if any."""
        for profile in self._profiles.values():
            if profile.matches(dragee):
                return profile
        return None

    def __contains__(self, key: object) -> bool:
        return key in self._profiles

    def __iter__(self) -> Iterator[Profile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)


# ---------------------------------------------------------------------------
# Clean architecture profiles
# ---------------------------------------------------------------------------

CLEAN_NAMESPACE = "clean"


class CleanProfile(enum.Enum):
    """Roles of the clean architecture model."""

    ENTITY = "entity"
    USE_CASE = "use_case"
    CONTROLLER = "controller"
    PRESENTER = "presenter"
    GATEWAY = "gateway"
    REPOSITORY = "repository"

    @property
    def label(self) -> str:
        return _CLEAN_LABELS[self]

    def profile(self) -> Profile:
        return Profile(key=self.value, label=self.label, namespace=CLEAN_NAMESPACE)


_CLEAN_LABELS: dict[CleanProfile, str] = {
    CleanProfile.ENTITY: "Entity",
    CleanProfile.USE_CASE: "Use Case",
    CleanProfile.CONTROLLER: "Controller",
    CleanProfile.PRESENTER: "Presenter",
    CleanProfile.GATEWAY: "Gateway",
    CleanProfile.REPOSITORY: "Repository",
}


def clean_registry() -> ProfileRegistry:
    """Return a registry holding every :class:`CleanProfile`."""
    return ProfileRegistry(member.profile() for member in CleanProfile)
