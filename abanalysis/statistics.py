from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable

from .config import CRITICAL_Z, P_VALUE_DISPLAY_FLOOR, SIZE_FLOOR, STD_FLOOR


logger = logging.getLogger(__name__)


class InvalidInput(ValueError):
    """Input that cannot be analyzed (empty sample, missing or non-numeric column)."""


@dataclass(frozen=True)
class GroupSummary:
    size: int
    mean: float
    std: float
    variance: float


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: float
    upper: float


@dataclass(frozen=True)
class AnalysisResult:
    z_score: float
    p_value: float
    cohens_d: float
    confidence_interval: ConfidenceInterval
    power: float
    is_significant: bool
    effect_size_label: str

    @property
    def type_ii_error(self) -> float:
        return 1.0 - self.power


def summarize_sample(values: Iterable[float]) -> GroupSummary:
    """Mean, population variance (divisor n) and std of a raw sample."""
    data = [float(v) for v in values]
    if not data:
        raise InvalidInput("Sample is empty")
    if not all(math.isfinite(v) for v in data):
        raise InvalidInput("Sample contains non-finite values")

    size = len(data)
    mean = sum(data) / size
    variance = sum((v - mean) * (v - mean) for v in data) / size
    if not (math.isfinite(mean) and math.isfinite(variance)):
        raise InvalidInput("Sample values are too large")
    return GroupSummary(size=size, mean=mean, std=math.sqrt(variance), variance=variance)


def normalize_summary(summary: GroupSummary) -> GroupSummary:
    """Clamp std and size to their floors so the analysis is always computable."""
    std = summary.std
    size = summary.size
    variance = summary.variance
    if std <= 0:
        logger.debug("std %s below floor, using %s", std, STD_FLOOR)
        std = STD_FLOOR
        variance = std * std
    if size < SIZE_FLOOR:
        logger.debug("size %s below floor, using %s", size, SIZE_FLOOR)
        size = SIZE_FLOOR
    if std == summary.std and size == summary.size:
        return summary
    return replace(summary, std=std, variance=variance, size=int(size))


def manual_summary(mean: float, std: float, size: int) -> GroupSummary:
    """Build a summary from user-entered (mean, std, size), applying the floors."""
    std = float(std)
    return normalize_summary(GroupSummary(size=int(size), mean=float(mean), std=std, variance=std * std))


def standard_normal_cdf(x: float) -> float:
    """Standard normal CDF via the Zelen & Severo polynomial approximation.

    Absolute error is below 7.5e-8.
    """
    t = 1.0 / (1.0 + 0.2316419 * abs(x))
    d = 0.3989423 * math.exp(-x * x / 2.0)
    probability = d * t * (0.3193815 + t * (-0.3565638 + t * (1.781478 + t * (-1.821256 + t * 1.330274))))
    if x > 0:
        probability = 1.0 - probability
    return probability


def z_score(control: GroupSummary, test: GroupSummary) -> float:
    # control is treated as the known population: its std, not a pooled one
    return (test.mean - control.mean) / (control.std / math.sqrt(test.size))


def p_value(z: float) -> float:
    """Two-sided p-value for a z statistic.

    Capped at 1.0: the approximation puts the CDF at 0 a hair under 0.5.
    """
    return min(1.0, 2.0 * (1.0 - standard_normal_cdf(abs(z))))


def is_significant(z: float) -> bool:
    return abs(z) > CRITICAL_Z


def cohens_d(control: GroupSummary, test: GroupSummary) -> float:
    return (test.mean - control.mean) / control.std


def classify_effect_size(d: float) -> str:
    abs_d = abs(d)
    if abs_d < 0.2:
        return "Very Small"
    if abs_d < 0.5:
        return "Small"
    if abs_d < 0.8:
        return "Medium"
    return "Large"


def confidence_interval(control: GroupSummary, test: GroupSummary) -> ConfidenceInterval:
    """95% CI for the test mean using the control group's standard error."""
    standard_error = control.std / math.sqrt(test.size)
    margin = CRITICAL_Z * standard_error
    return ConfidenceInterval(lower=test.mean - margin, upper=test.mean + margin)


def statistical_power(d: float, sample_size: int) -> float:
    delta = abs(d) * math.sqrt(sample_size)
    power = 1.0 - (standard_normal_cdf(delta - CRITICAL_Z) + standard_normal_cdf(-delta - CRITICAL_Z))
    return min(1.0, max(0.0, power))


def analyze(control: GroupSummary, test: GroupSummary) -> AnalysisResult:
    """Run the full control-vs-test comparison and return every figure at once."""
    control = normalize_summary(control)
    test = normalize_summary(test)

    z = z_score(control, test)
    d = cohens_d(control, test)

    return AnalysisResult(
        z_score=z,
        p_value=p_value(z),
        cohens_d=d,
        confidence_interval=confidence_interval(control, test),
        power=statistical_power(d, test.size),
        is_significant=is_significant(z),
        effect_size_label=classify_effect_size(d),
    )


def format_p_value(p: float) -> str:
    if p < P_VALUE_DISPLAY_FLOOR:
        return "< 0.0001"
    return f"{p:.4f}"


@dataclass(frozen=True)
class Conclusion:
    headline: str
    details: str
    verdict: str


def generate_conclusion(result: AnalysisResult) -> Conclusion:
    shown = format_p_value(result.p_value)
    if not shown.startswith("<"):
        shown = f"= {shown}"

    if result.is_significant:
        return Conclusion(
            headline="Test Group does NOT belong to the same distribution as Control Group.",
            details=f"The mean difference is statistically significant (p {shown}).",
            verdict="Reject Null Hypothesis",
        )

    return Conclusion(
        headline="Test Group likely belongs to the same distribution as Control Group.",
        details=f"The mean difference is not statistically significant (p {shown}).",
        verdict="Do Not Reject Null Hypothesis",
    )
