"""Glue between the page and the statistics engine.

The page hands over either uploaded files or manually typed summaries and
gets back an `AnalysisView` holding everything it needs to render: the two
summaries, the result, formatted labels, the conclusion and chart series.
Nothing here touches streamlit, so it can be tested on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .charts import (
    ConfidenceIntervalPlot,
    DistributionSeries,
    EffectSizeSeries,
    Histogram,
    confidence_interval_plot,
    distribution_series,
    effect_size_series,
    histogram_bins,
)
from .config import DEFAULTS, AnalysisDefaults
from .data_loader import CsvSource, read_sample
from .statistics import (
    AnalysisResult,
    Conclusion,
    GroupSummary,
    InvalidInput,
    analyze,
    format_p_value,
    generate_conclusion,
    manual_summary,
    normalize_summary,
    summarize_sample,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedGroup:
    name: str
    values: List[float]
    summary: GroupSummary


@dataclass(frozen=True)
class UploadOutcome:
    """Either a loaded group or the reason the upload was rejected."""

    group: Optional[LoadedGroup] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.group is not None


@dataclass(frozen=True)
class AnalysisView:
    control: GroupSummary
    test: GroupSummary
    result: AnalysisResult
    labels: Dict[str, str]
    conclusion: Conclusion
    distribution: DistributionSeries
    effect_sizes: EffectSizeSeries
    ci_plot: ConfidenceIntervalPlot
    control_histogram: Optional[Histogram] = None
    test_histogram: Optional[Histogram] = None


def load_group(source: CsvSource, group: str, column: Optional[str] = None) -> UploadOutcome:
    """Parse an uploaded file for `group` ("control" or "test").

    The numeric column defaults to the group name. Bad input comes back as
    an UploadOutcome with `error` set instead of raising.
    """
    column = column or group
    try:
        values = read_sample(source, column)
        summary = summarize_sample(values)
    except InvalidInput as exc:
        logger.warning("Rejected %s upload: %s", group, exc)
        return UploadOutcome(error=str(exc))

    logger.info("Loaded %d %s values (mean=%.4f, std=%.4f)", summary.size, group, summary.mean, summary.std)
    return UploadOutcome(group=LoadedGroup(name=group, values=values, summary=summary))


def default_summaries(defaults: AnalysisDefaults = DEFAULTS) -> Tuple[GroupSummary, GroupSummary]:
    c, t = defaults.control, defaults.test
    return (
        manual_summary(mean=c.mean, std=c.std, size=c.size),
        manual_summary(mean=t.mean, std=t.std, size=t.size),
    )


def format_labels(result: AnalysisResult) -> Dict[str, str]:
    return {
        "z_score": f"{result.z_score:.2f}",
        "p_value": format_p_value(result.p_value),
        "cohens_d": f"{abs(result.cohens_d):.2f}",
        "effect_size": result.effect_size_label,
        "power": f"{result.power * 100:.1f}%",
        "type_ii_error": f"{result.type_ii_error * 100:.1f}%",
    }


def build_view(
    control: GroupSummary,
    test: GroupSummary,
    control_values: Optional[List[float]] = None,
    test_values: Optional[List[float]] = None,
) -> AnalysisView:
    """Analyze two summaries and prepare everything the page renders.

    Raw values are optional; histograms are only built when they are given.
    """
    control = normalize_summary(control)
    test = normalize_summary(test)
    result = analyze(control, test)

    return AnalysisView(
        control=control,
        test=test,
        result=result,
        labels=format_labels(result),
        conclusion=generate_conclusion(result),
        distribution=distribution_series(control, test),
        effect_sizes=effect_size_series(result),
        ci_plot=confidence_interval_plot(control, test, result),
        control_histogram=histogram_bins(control_values) if control_values else None,
        test_histogram=histogram_bins(test_values) if test_values else None,
    )


def build_uploaded_view(control: LoadedGroup, test: LoadedGroup) -> AnalysisView:
    return build_view(control.summary, test.summary, control.values, test.values)


def build_manual_view(
    control_mean: float,
    control_std: float,
    control_size: int,
    test_mean: float,
    test_std: float,
    test_size: int,
) -> AnalysisView:
    control = manual_summary(control_mean, control_std, control_size)
    test = manual_summary(test_mean, test_std, test_size)
    return build_view(control, test)
