"""Shared test fixtures for drageecheck."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from drageecheck.graph.model import Dragee, DrageeGraph

if TYPE_CHECKING:
    from pathlib import Path


def make_graph(*dragees: Dragee) -> DrageeGraph:
    return DrageeGraph.build(dragees)


@pytest.fixture()
def clean_graph() -> DrageeGraph:
    """A small clean-architecture graph with one forbidden and one allowed dependency."""
    return make_graph(
        Dragee("APresenter", "clean/presenter"),
        Dragee("ARepo", "clean/repository"),
        Dragee(
            "AUseCase",
            "clean/use_case",
            {"APresenter": ("field",), "ARepo": ("constructor",)},
        ),
    )


@pytest.fixture()
def snapshot_file(tmp_path: Path) -> Path:
    """Write a JSON snapshot in dragee export format."""
    path = tmp_path / "dragees.json"
    path.write_text(
        json.dumps(
            [
                {"name": "AController", "profile": "clean/controller"},
                {"name": "ARepo", "profile": "clean/repository"},
                {
                    "name": "AUseCase",
                    "profile": "clean/use_case",
                    "depends_on": {"AController": ["field"], "ARepo": ["constructor"]},
                },
            ]
        )
    )
    return path
