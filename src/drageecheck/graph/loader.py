"""Snapshot loader: read dragee records from JSON or YAML files."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import yaml

from drageecheck.graph.model import Dragee, DrageeGraph, dragee_from_dict

if TYPE_CHECKING:
    from pathlib import Path

SNAPSHOT_SUFFIXES: frozenset[str] = frozenset({".json", ".yml", ".yaml"})


def _read_records(path: Path) -> list[Any]:
    """Return the list of raw records stored in *path*.

    A file holds either a list of records or a mapping with a ``dragees``
    list.  Empty YAML files yield no records.
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"{path.name}: invalid JSON: {exc}"
            raise ValueError(msg) from exc
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            msg = f"{path.name}: invalid YAML: {exc}"
            raise ValueError(msg) from exc

    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("dragees")
    if not isinstance(data, list):
        msg = f"{path.name}: expected a list of dragees"
        raise ValueError(msg)
    return data


def load_dragees(path: Path) -> list[Dragee]:
    """Load dragees from a snapshot file or a directory of snapshot files.

    Directory entries are read in sorted file name order so the resulting
    insertion order is reproducible.
    """
    if path.is_dir():
        files = sorted(p for p in path.iterdir() if p.suffix in SNAPSHOT_SUFFIXES)
    else:
        files = [path]

    dragees: list[Dragee] = []
    for snapshot in files:
        for idx, record in enumerate(_read_records(snapshot)):
            try:
                dragees.append(dragee_from_dict(record))
            except ValueError as exc:
                msg = f"{snapshot.name}: record {idx}: {exc}"
                raise ValueError(msg) from exc
    return dragees


def load_graph(path: Path) -> DrageeGraph:
    """Load a snapshot and build the graph (may raise ``DuplicateNameError``)."""
    return DrageeGraph.build(load_dragees(path))
