from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

import plotly.graph_objects as go

from .config import DENSITY_POINTS, MAX_HISTOGRAM_BINS
from .statistics import AnalysisResult, GroupSummary


CONTROL_COLOR = "rgb(54, 162, 235)"
TEST_COLOR = "rgb(255, 99, 132)"
EFFECT_COLORS = (
    "rgba(40, 167, 69, 0.8)",
    "rgba(255, 193, 7, 0.8)",
    "rgba(253, 126, 20, 0.8)",
    "rgba(220, 53, 69, 0.8)",
)


@dataclass(frozen=True)
class Histogram:
    labels: List[str]
    counts: List[int]


@dataclass(frozen=True)
class DistributionSeries:
    x: List[float]
    control_density: List[float]
    test_density: List[float]
    control_label: str
    test_label: str


@dataclass(frozen=True)
class EffectSizeSeries:
    labels: List[str]
    values: List[float]
    marker_position: float


@dataclass(frozen=True)
class ConfidenceIntervalPlot:
    control_mean: float
    test_mean: float
    lower: float
    upper: float
    x_min: float
    x_max: float
    control_label: str
    test_label: str


def histogram_bins(values: Sequence[float], max_bins: int = MAX_HISTOGRAM_BINS) -> Histogram:
    """Equal-width bins between min and max; the max lands in the last bin."""
    lo = min(values)
    hi = max(values)
    bin_count = min(max_bins, math.ceil(math.sqrt(len(values))))
    bin_size = (hi - lo) / bin_count

    counts = [0] * bin_count
    for v in values:
        idx = 0 if bin_size == 0 else min(int(math.floor((v - lo) / bin_size)), bin_count - 1)
        counts[idx] += 1

    labels = []
    for i in range(bin_count):
        start = lo + i * bin_size
        labels.append(f"{start:.1f}-{start + bin_size:.1f}")
    return Histogram(labels=labels, counts=counts)


def normal_pdf(x: float, mean: float, std: float) -> float:
    z = (x - mean) / std
    # z * z saturates to inf far in the tails, where exp() then gives 0
    return (1 / (std * math.sqrt(2 * math.pi))) * math.exp(-0.5 * z * z)


def distribution_series(control: GroupSummary, test: GroupSummary, points: int = DENSITY_POINTS) -> DistributionSeries:
    """Density curves of both groups over a shared x-range.

    The range covers control mean +/- 4 std and test mean +/- 2 std.
    """
    min_x = min(control.mean - 4 * control.std, test.mean - 2 * test.std)
    max_x = max(control.mean + 4 * control.std, test.mean + 2 * test.std)
    step = (max_x - min_x) / (points - 1)

    xs = [min_x + i * step for i in range(points)]
    return DistributionSeries(
        x=xs,
        control_density=[normal_pdf(x, control.mean, control.std) for x in xs],
        test_density=[normal_pdf(x, test.mean, test.std) for x in xs],
        control_label=f"Control Distribution (n={control.size:,})",
        test_label=f"Test Distribution (n={test.size:,})",
    )


def effect_size_series(result: AnalysisResult) -> EffectSizeSeries:
    abs_d = abs(result.cohens_d)
    return EffectSizeSeries(
        labels=["Small (0.2)", "Medium (0.5)", "Large (0.8)", "Your Effect"],
        values=[0.2, 0.5, 0.8, abs_d],
        marker_position=min(abs_d / 2 * 100, 100.0),
    )


def confidence_interval_plot(control: GroupSummary, test: GroupSummary, result: AnalysisResult) -> ConfidenceIntervalPlot:
    ci = result.confidence_interval
    return ConfidenceIntervalPlot(
        control_mean=control.mean,
        test_mean=test.mean,
        lower=ci.lower,
        upper=ci.upper,
        x_min=min(control.mean, ci.lower) - 10,
        x_max=max(test.mean, ci.upper) + 10,
        control_label=f"Control Mean (n={control.size:,})",
        test_label=f"Test Mean (n={test.size:,})",
    )


# --- plotly figures ---


def histogram_figure(hist: Histogram, title: str, color: str) -> go.Figure:
    fig = go.Figure(go.Bar(x=hist.labels, y=hist.counts, marker_color=color, name="Frequency"))
    fig.update_layout(title=title, xaxis_title="Value Range", yaxis_title="Frequency", height=340)
    return fig


def distribution_figure(series: DistributionSeries) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(x=series.x, y=series.control_density, mode="lines", fill="tozeroy",
                   line=dict(color=CONTROL_COLOR, width=2), name=series.control_label)
    )
    fig.add_trace(
        go.Scatter(x=series.x, y=series.test_density, mode="lines", fill="tozeroy",
                   line=dict(color=TEST_COLOR, width=2), name=series.test_label)
    )
    fig.update_layout(
        title="Distribution Comparison: Control vs Test Groups",
        xaxis_title="Value",
        yaxis_title="Probability Density",
        hovermode="x unified",
        height=380,
    )
    return fig


def effect_size_figure(series: EffectSizeSeries) -> go.Figure:
    fig = go.Figure(
        go.Bar(
            x=series.labels,
            y=series.values,
            marker_color=list(EFFECT_COLORS),
            text=[f"{v:.2f}" for v in series.values],
        )
    )
    fig.update_layout(title="Cohen's d Effect Size Comparison", yaxis_title="Cohen's d Value",
                      showlegend=False, height=360)
    return fig


def confidence_interval_figure(plot: ConfidenceIntervalPlot) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(x=[plot.control_mean], y=[1], mode="markers",
                   marker=dict(size=14, color=CONTROL_COLOR), name=plot.control_label)
    )
    fig.add_trace(
        go.Scatter(x=[plot.test_mean], y=[2], mode="markers",
                   marker=dict(size=14, color=TEST_COLOR), name=plot.test_label)
    )
    fig.add_trace(
        go.Scatter(
            x=[plot.lower, plot.upper],
            y=[1.5, 1.5],
            mode="lines",
            line=dict(width=3, dash="dash", color="rgba(255, 99, 132, 0.7)"),
            name="95% Confidence Interval",
        )
    )
    fig.update_layout(
        title="Means Comparison with Confidence Intervals",
        xaxis_title="Value",
        yaxis_visible=False,
        height=360,
    )
    fig.update_xaxes(range=[plot.x_min, plot.x_max])
    fig.update_yaxes(range=[0.5, 2.5])
    return fig
