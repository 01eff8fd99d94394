"""
Descriptive statistics and hypothesis tests for the reader study.

Tests provided:

- t_test_independent: pooled-variance two-sample t-test (reading times of
  two segments of the course, or two experience groups).
- t_test_paired: paired t-test over cases read by both sides.
- z_test_for_proportions: pooled two-proportion z-test (partial vs. final
  sensitivity / specificity).

Degenerate inputs never raise:

- Fewer than two observations (or unequal paired lengths) → ``None``; the
  caller renders "not applicable".
- Zero standard error → statistic ``inf`` with p = 0.  Exporters write the
  statistic as null (see :attr:`TTestResult.is_degenerate`).
- Empty group or a pooled proportion of exactly 0 or 1 → p = 1.0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .special_functions import student_t_two_tailed_p, two_tailed_normal_p


# ---------------------------------------------------------------------------
# Descriptive statistics
# ---------------------------------------------------------------------------

def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return sum(values) / len(values)


def sample_std_dev(values: Sequence[float]) -> float:
    """Sample standard deviation (n − 1 denominator); 0.0 below two values."""
    n = len(values)
    if n < 2:
        return 0.0
    m = mean(values)
    variance = sum((v - m) ** 2 for v in values) / (n - 1)
    return math.sqrt(variance)


# ---------------------------------------------------------------------------
# t-tests
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TTestResult:
    statistic: float
    degrees_of_freedom: int
    p_value: float

    @property
    def is_degenerate(self) -> bool:
        """True when the standard error was zero and the statistic is infinite."""
        return math.isinf(self.statistic)

    def to_dict(self) -> dict:
        return {
            "t_statistic": None if self.is_degenerate else round(self.statistic, 4),
            "degrees_of_freedom": self.degrees_of_freedom,
            "p_value": round(self.p_value, 6),
            "zero_variance": self.is_degenerate,
        }


def t_test_independent(
    sample1: Sequence[float],
    sample2: Sequence[float],
) -> TTestResult | None:
    """
    Two-sample Student's t-test with pooled variance.

    Args:
        sample1: First group of observations.
        sample2: Second group of observations.

    Returns:
        TTestResult with df = n1 + n2 − 2 and a two-tailed p-value, or None
        when either group has fewer than two observations.
    """
    n1, n2 = len(sample1), len(sample2)
    if n1 < 2 or n2 < 2:
        return None

    df = n1 + n2 - 2
    sd1, sd2 = sample_std_dev(sample1), sample_std_dev(sample2)
    pooled_var = ((n1 - 1) * sd1 ** 2 + (n2 - 1) * sd2 ** 2) / df
    se = math.sqrt(pooled_var * (1 / n1 + 1 / n2))
    if se == 0:
        return TTestResult(statistic=math.inf, degrees_of_freedom=df, p_value=0.0)

    t = (mean(sample1) - mean(sample2)) / se
    return TTestResult(
        statistic=t,
        degrees_of_freedom=df,
        p_value=student_t_two_tailed_p(t, df),
    )


def t_test_paired(
    sample1: Sequence[float],
    sample2: Sequence[float],
) -> TTestResult | None:
    """
    Paired-samples t-test on the per-pair differences sample1[i] − sample2[i].

    Returns:
        TTestResult with df = n − 1, or None when the samples differ in
        length or hold fewer than two pairs.
    """
    n = len(sample1)
    if n != len(sample2) or n < 2:
        return None

    diffs = [a - b for a, b in zip(sample1, sample2)]
    sd_diff = sample_std_dev(diffs)
    df = n - 1
    if sd_diff == 0:
        return TTestResult(statistic=math.inf, degrees_of_freedom=df, p_value=0.0)

    t = mean(diffs) / (sd_diff / math.sqrt(n))
    return TTestResult(
        statistic=t,
        degrees_of_freedom=df,
        p_value=student_t_two_tailed_p(t, df),
    )


# ---------------------------------------------------------------------------
# Proportions
# ---------------------------------------------------------------------------

def z_test_for_proportions(
    success1: int,
    total1: int,
    success2: int,
    total2: int,
) -> float:
    """
    Pooled two-proportion z-test, two-tailed.

    Args:
        success1: Successes in group 1 (e.g. partial-subset true positives).
        total1: Trials in group 1 (e.g. partial-subset condition positives).
        success2: Successes in group 2.
        total2: Trials in group 2.

    Returns:
        p-value in [0, 1]; 1.0 when either group is empty or the pooled
        proportion is 0 or 1 (no detectable difference).
    """
    if total1 == 0 or total2 == 0:
        return 1.0

    p1 = success1 / total1
    p2 = success2 / total2
    p_pooled = (success1 + success2) / (total1 + total2)
    if p_pooled == 0 or p_pooled == 1:
        return 1.0

    se = math.sqrt(p_pooled * (1 - p_pooled) * (1 / total1 + 1 / total2))
    if se == 0:
        return 1.0

    z = (p1 - p2) / se
    return two_tailed_normal_p(z)
