"""Tests for the statistics engine.

Covers sample summaries, the normal CDF approximation, z-test, Cohen's d,
confidence interval, power and the full analyze() result.
"""

from __future__ import annotations

import logging
import math

import pytest

from abanalysis import (
    GroupSummary,
    InvalidInput,
    analyze,
    classify_effect_size,
    cohens_d,
    confidence_interval,
    format_p_value,
    generate_conclusion,
    manual_summary,
    p_value,
    standard_normal_cdf,
    statistical_power,
    summarize_sample,
    z_score,
)
from abanalysis.statistics import is_significant, normalize_summary


class TestSummarizeSample:
    def test_known_values(self) -> None:
        s = summarize_sample([1, 2, 3, 4, 5])
        assert s.size == 5
        assert s.mean == pytest.approx(3.0)
        assert s.variance == pytest.approx(2.0)
        assert s.std == pytest.approx(math.sqrt(2))

    def test_population_variance_divides_by_n(self) -> None:
        s = summarize_sample([2.0, 4.0])
        assert s.variance == pytest.approx(1.0)

    def test_empty_sample_raises(self) -> None:
        with pytest.raises(InvalidInput, match="empty"):
            summarize_sample([])

    def test_non_finite_raises(self) -> None:
        with pytest.raises(InvalidInput, match="non-finite"):
            summarize_sample([1.0, float("nan")])

    def test_huge_spread_rejected(self) -> None:
        with pytest.raises(InvalidInput, match="too large"):
            summarize_sample([1e200, -1e200])

    def test_sum_overflow_rejected(self) -> None:
        with pytest.raises(InvalidInput, match="too large"):
            summarize_sample([1e308, 1e308])


class TestManualSummary:
    def test_floors_applied(self) -> None:
        s = manual_summary(mean=5.0, std=0.0, size=0)
        assert s.std == 0.1
        assert s.size == 1
        assert s.variance == pytest.approx(0.01)

    def test_negative_std(self) -> None:
        assert manual_summary(mean=1.0, std=-3.0, size=10).std == 0.1

    def test_valid_values_untouched(self) -> None:
        s = manual_summary(mean=55, std=10, size=10_000)
        assert (s.size, s.mean, s.std, s.variance) == (10_000, 55.0, 10.0, 100.0)

    def test_floored_std_updates_variance(self) -> None:
        s = normalize_summary(GroupSummary(size=4, mean=2.0, std=0.0, variance=0.0))
        assert s.std == 0.1
        assert s.variance == pytest.approx(0.01)

    def test_floor_is_logged(self, caplog) -> None:
        with caplog.at_level(logging.DEBUG, logger="abanalysis.statistics"):
            manual_summary(mean=1.0, std=0.0, size=0)
        assert "below floor" in caplog.text

    def test_normalize_keeps_valid_summary(self) -> None:
        s = GroupSummary(size=3, mean=1.0, std=2.0, variance=4.0)
        assert normalize_summary(s) is s


class TestStandardNormalCdf:
    def test_zero_is_half(self) -> None:
        assert standard_normal_cdf(0.0) == pytest.approx(0.5, abs=1e-6)

    @pytest.mark.parametrize("x", [-3.0, -1.96, -1.0, -0.3, 0.3, 1.0, 1.96, 3.0])
    def test_close_to_erf(self, x: float) -> None:
        exact = 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))
        assert standard_normal_cdf(x) == pytest.approx(exact, abs=1e-6)

    def test_symmetry(self) -> None:
        for x in (0.5, 1.5, 2.5):
            assert standard_normal_cdf(x) + standard_normal_cdf(-x) == pytest.approx(1.0, abs=1e-12)

    def test_negative_branch_is_polynomial(self) -> None:
        x = -1.0
        t = 1 / (1 + 0.2316419 * 1.0)
        d = 0.3989423 * math.exp(-0.5)
        poly = d * t * (0.3193815 + t * (-0.3565638 + t * (1.781478 + t * (-1.821256 + t * 1.330274))))
        assert standard_normal_cdf(x) == poly
        assert standard_normal_cdf(-x) == 1 - poly


class TestPValue:
    def test_zero_z(self) -> None:
        assert p_value(0.0) == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.parametrize("z", [0.4, 1.2, 1.96, 3.3])
    def test_symmetric_in_sign(self, z: float) -> None:
        assert p_value(z) == p_value(-z)

    def test_critical_value(self) -> None:
        assert p_value(1.96) == pytest.approx(0.05, abs=1e-4)

    def test_display_rule(self) -> None:
        assert format_p_value(0.00009) == "< 0.0001"
        assert format_p_value(0.0) == "< 0.0001"
        assert format_p_value(0.0001) == "0.0001"
        assert format_p_value(0.04321) == "0.0432"


class TestZScoreAndCohensD:
    def test_equal_means_give_zero(self) -> None:
        control = manual_summary(mean=10, std=3, size=50)
        test = manual_summary(mean=10, std=7, size=20)
        assert z_score(control, test) == 0.0
        assert cohens_d(control, test) == 0.0

    def test_uses_control_std_only(self) -> None:
        control = manual_summary(mean=0, std=2, size=1000)
        test = manual_summary(mean=1, std=100, size=16)
        # control.std / sqrt(test.size) = 0.5
        assert z_score(control, test) == pytest.approx(2.0)
        assert cohens_d(control, test) == pytest.approx(0.5)

    @pytest.mark.parametrize("delta", [-5.0, -0.1, 0.1, 5.0])
    def test_d_sign_matches_difference(self, delta: float) -> None:
        control = manual_summary(mean=20, std=4, size=30)
        test = manual_summary(mean=20 + delta, std=4, size=30)
        assert math.copysign(1, cohens_d(control, test)) == math.copysign(1, delta)


class TestEffectSizeLabel:
    @pytest.mark.parametrize(
        "d,label",
        [
            (0.0, "Very Small"),
            (0.19, "Very Small"),
            (0.2, "Small"),
            (0.49, "Small"),
            (0.5, "Medium"),
            (0.79, "Medium"),
            (0.8, "Large"),
            (3.0, "Large"),
            (-0.5, "Medium"),
        ],
    )
    def test_boundaries(self, d: float, label: str) -> None:
        assert classify_effect_size(d) == label


class TestConfidenceInterval:
    @pytest.mark.parametrize("n", [1, 9, 100, 2500])
    def test_width_and_containment(self, n: int) -> None:
        control = manual_summary(mean=40, std=6, size=500)
        test = manual_summary(mean=43, std=9, size=n)
        ci = confidence_interval(control, test)
        assert ci.lower <= test.mean <= ci.upper
        assert ci.upper - ci.lower == pytest.approx(2 * 1.96 * 6 / math.sqrt(n))


class TestPower:
    @pytest.mark.parametrize("d", [0.0, 0.01, 0.2, 0.5, 1.0, 5.0, -2.0])
    @pytest.mark.parametrize("n", [1, 10, 100, 10_000])
    def test_in_unit_interval(self, d: float, n: int) -> None:
        assert 0.0 <= statistical_power(d, n) <= 1.0

    def test_matches_formula(self) -> None:
        d, n = 0.3, 25
        delta = 0.3 * 5
        expected = 1 - (standard_normal_cdf(delta - 1.96) + standard_normal_cdf(-delta - 1.96))
        assert statistical_power(d, n) == pytest.approx(expected)

    def test_zero_effect(self) -> None:
        assert statistical_power(0.0, 50) == pytest.approx(1 - 2 * standard_normal_cdf(-1.96))

    def test_sign_of_d_ignored(self) -> None:
        assert statistical_power(-0.4, 30) == statistical_power(0.4, 30)


class TestAnalyze:
    def test_documented_defaults(self, default_control, default_test) -> None:
        result = analyze(default_control, default_test)
        assert result.z_score == pytest.approx(11.0)
        assert result.p_value < 0.0001
        assert result.is_significant
        assert result.cohens_d == pytest.approx(1.1)
        assert result.effect_size_label == "Large"
        assert result.confidence_interval.lower == pytest.approx(66 - 1.96)
        assert result.confidence_interval.upper == pytest.approx(66 + 1.96)
        assert 0.0 <= result.power <= 1.0
        assert result.type_ii_error == pytest.approx(1 - result.power)

    def test_deterministic(self, default_control, default_test) -> None:
        assert analyze(default_control, default_test) == analyze(default_control, default_test)

    def test_not_significant(self) -> None:
        control = manual_summary(mean=50, std=10, size=1000)
        test = manual_summary(mean=51, std=10, size=25)
        result = analyze(control, test)
        assert result.z_score == pytest.approx(0.5)
        assert not result.is_significant
        assert result.p_value > 0.05

    def test_degenerate_inputs_are_normalized(self) -> None:
        control = GroupSummary(size=5, mean=3.0, std=0.0, variance=0.0)
        test = GroupSummary(size=0, mean=3.5, std=0.0, variance=0.0)
        result = analyze(control, test)
        # std floored to 0.1 and size to 1
        assert result.cohens_d == pytest.approx(5.0)
        assert result.z_score == pytest.approx(5.0)
        assert math.isfinite(result.p_value)


class TestConclusion:
    def test_significant(self, default_control, default_test) -> None:
        c = generate_conclusion(analyze(default_control, default_test))
        assert c.verdict == "Reject Null Hypothesis"
        assert c.headline == "Test Group does NOT belong to the same distribution as Control Group."
        assert c.details == "The mean difference is statistically significant (p < 0.0001)."

    def test_not_significant(self) -> None:
        control = manual_summary(mean=50, std=10, size=1000)
        test = manual_summary(mean=50, std=10, size=25)
        c = generate_conclusion(analyze(control, test))
        assert c.verdict == "Do Not Reject Null Hypothesis"
        assert c.details == "The mean difference is not statistically significant (p = 1.0000)."


class TestSignificanceBoundary:
    @pytest.mark.parametrize("z", [1.96, -1.96, 0.0, 1.9599999])
    def test_at_or_below_critical_value(self, z: float) -> None:
        assert not is_significant(z)

    @pytest.mark.parametrize("z", [1.9600001, -1.9600001, 11.0])
    def test_above_critical_value(self, z: float) -> None:
        assert is_significant(z)

    def test_analyze_exactly_on_critical_z(self) -> None:
        control = manual_summary(mean=0.0, std=10.0, size=5000)
        test = manual_summary(mean=1.96, std=10.0, size=100)
        result = analyze(control, test)
        assert result.z_score == 1.96
        assert not result.is_significant
        assert generate_conclusion(result).verdict == "Do Not Reject Null Hypothesis"

    def test_analyze_just_past_critical_z(self) -> None:
        control = manual_summary(mean=0.0, std=10.0, size=5000)
        test = manual_summary(mean=1.9600001, std=10.0, size=100)
        result = analyze(control, test)
        assert result.is_significant
        conclusion = generate_conclusion(result)
        assert conclusion.verdict == "Reject Null Hypothesis"
        assert conclusion.details == "The mean difference is statistically significant (p = 0.0500)."
