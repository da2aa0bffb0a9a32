"""Project configuration read from ``drageecheck.yml``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import yaml

from drageecheck.graph.asserter import RuleSeverity

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "drageecheck.yml"


@dataclass(frozen=True)
class CheckConfig:
    """Settings for a check run.

    Configurable via the ``check`` section of ``drageecheck.yml``::

        check:
          rules_file: rules.yml
          workers: 4
          report_dangling: true
          fail_on: warning
          disabled_rules: ["Use Case Allowed Dependencies"]
    """

    rules_file: str | None = None
    workers: int = 1
    report_dangling: bool = False
    fail_on: RuleSeverity = RuleSeverity.ERROR
    disabled_rules: tuple[str, ...] = ()


def load_config(project_root: Path) -> CheckConfig:
    """Load :class:`CheckConfig` from ``<project_root>/drageecheck.yml``.

    Falls back to defaults for missing keys, a missing file, or an
    unreadable file.
    """
    config_path = project_root / CONFIG_FILENAME
    if not config_path.is_file():
        return CheckConfig()

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError):
        logger.warning("Failed to read %s, using default settings", CONFIG_FILENAME)
        return CheckConfig()

    if not isinstance(data, dict):
        return CheckConfig()

    section = data.get("check")
    if not isinstance(section, dict):
        return CheckConfig()

    defaults = CheckConfig()

    rules_file_raw = section.get("rules_file")
    rules_file = str(rules_file_raw) if rules_file_raw is not None else None

    workers = defaults.workers
    workers_raw = section.get("workers")
    if workers_raw is not None:
        try:
            workers = max(1, int(workers_raw))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid workers value %r", workers_raw)

    fail_on = defaults.fail_on
    fail_on_raw = section.get("fail_on")
    if fail_on_raw is not None:
        try:
            fail_on = RuleSeverity.parse(str(fail_on_raw))
        except ValueError:
            logger.warning("Ignoring invalid fail_on value %r", fail_on_raw)

    report_dangling = defaults.report_dangling
    report_dangling_raw = section.get("report_dangling")
    if isinstance(report_dangling_raw, bool):
        report_dangling = report_dangling_raw
    elif report_dangling_raw is not None:
        logger.warning("Ignoring invalid report_dangling value %r", report_dangling_raw)

    disabled_raw = section.get("disabled_rules")
    disabled = defaults.disabled_rules
    if isinstance(disabled_raw, list):
        disabled = tuple(str(item) for item in disabled_raw)
    elif disabled_raw is not None:
        logger.warning("Ignoring invalid disabled_rules value %r", disabled_raw)

    return CheckConfig(
        rules_file=rules_file,
        workers=workers,
        report_dangling=report_dangling,
        fail_on=fail_on,
        disabled_rules=disabled,
    )
