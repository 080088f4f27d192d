from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional


LOG_LEVEL_ENV = "ABANALYSIS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

STD_FLOOR = 0.1
SIZE_FLOOR = 1
CRITICAL_Z = 1.96
P_VALUE_DISPLAY_FLOOR = 0.0001

MAX_HISTOGRAM_BINS = 20
DENSITY_POINTS = 101
PREVIEW_ROWS = 10


@dataclass(frozen=True)
class GroupDefaults:
    size: int
    mean: float
    std: float


@dataclass(frozen=True)
class AnalysisDefaults:
    control: GroupDefaults = GroupDefaults(size=10_000, mean=55.0, std=10.0)
    test: GroupDefaults = GroupDefaults(size=100, mean=66.0, std=40.0)


DEFAULTS = AnalysisDefaults()


def configure_logging(level: Optional[str] = None) -> None:
    """Install one stream handler on the package logger.

    The level comes from `level`, then the ABANALYSIS_LOG_LEVEL environment
    variable, then INFO. Calling it again only updates the level.
    """
    name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    pkg_logger = logging.getLogger("abanalysis")
    pkg_logger.setLevel(resolved)

    if not any(getattr(h, "_abanalysis", False) for h in pkg_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        handler._abanalysis = True  # type: ignore[attr-defined]
        pkg_logger.addHandler(handler)
