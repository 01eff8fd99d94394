"""
Per-reader diagnostic performance, learning-curve comparison and group
averages.

For each reader:

- Final performance: confusion matrix, accuracy metrics and AUC over every
  case the reader has scored.
- Partial performance: the same metrics over the first K% of the reader's
  scored cases, ordered by case number (the start of the course).
- Learning-curve tests: two-proportion z-tests of partial vs. final
  sensitivity (true positives over condition positives) and specificity
  (true negatives over condition negatives).

Readers who have not scored any case are reported with zero metrics,
AUC 0.5 and p = 1, and are left out of the group averages.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

import numpy as np
import pandas as pd
from scipy import stats

from src.cases.loader import sample_prevalence
from src.cases.models import Case, Evaluation, EvaluationsByReader, Reader
from src.scoring.accuracy import (
    AccuracyMetrics,
    ConfusionMatrix,
    build_confusion_matrix,
    compute_accuracy_metrics,
    compute_auc,
    cutoff_sweep,
)
from src.scoring.config import CI_CONFIDENCE, UNDEFINED_AUC

from .config import (
    ALPHA,
    CUTOFF_SWEEP_FILE,
    DEFAULT_CUTOFF,
    DEFAULT_PARTIAL_PERCENTAGE,
    GROUP_SUMMARY_FILE,
    MAX_PERCENTAGE,
    MIN_PERCENTAGE,
    PERFORMANCE_TABLE_FILE,
    RESULTS_DIR,
    ROC_CUTOFFS,
)
from .statistics import z_test_for_proportions


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

def validate_percentage(percentage: float, name: str = "percentage") -> None:
    if not MIN_PERCENTAGE < percentage <= MAX_PERCENTAGE:
        raise ValueError(f"{name} must be in (0, 100], got {percentage}")


def subset_size(count: int, percentage: float) -> int:
    """Number of items in the first ``percentage``% of ``count`` (rounded up)."""
    return math.ceil(count * percentage / 100)


@dataclass(frozen=True)
class AnalysisParameters:
    """
    Settings of one analysis pass.

    Attributes:
        cutoff: Final VI-RADS score at or above which a reading is positive.
        prevalence: Assumed prevalence for PPV / NPV.  None uses the
            prevalence of the case set.
        partial_percentage: Share of each reader's first cases used as the
            partial (early-course) subset.
    """

    cutoff: int = DEFAULT_CUTOFF
    prevalence: float | None = None
    partial_percentage: float = DEFAULT_PARTIAL_PERCENTAGE

    def __post_init__(self) -> None:
        if self.cutoff not in ROC_CUTOFFS:
            raise ValueError(
                f"cutoff must be one of {list(ROC_CUTOFFS)}, got {self.cutoff}"
            )
        if self.prevalence is not None and not 0.0 <= self.prevalence <= 1.0:
            raise ValueError(f"prevalence must be in [0, 1], got {self.prevalence}")
        validate_percentage(self.partial_percentage, "partial_percentage")

    def resolve_prevalence(self, cases: list[Case]) -> float:
        if self.prevalence is None:
            return sample_prevalence(cases)
        return self.prevalence


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReaderPerformance:
    reader_id: str
    evaluated_count: int
    final_matrix: ConfusionMatrix = field(default_factory=ConfusionMatrix)
    final_metrics: AccuracyMetrics = field(default_factory=AccuracyMetrics)
    final_auc: float = UNDEFINED_AUC
    partial_count: int = 0
    partial_matrix: ConfusionMatrix = field(default_factory=ConfusionMatrix)
    partial_metrics: AccuracyMetrics = field(default_factory=AccuracyMetrics)
    p_value_sensitivity: float = 1.0
    p_value_specificity: float = 1.0


@dataclass(frozen=True)
class GroupAnalysis:
    parameters: AnalysisParameters
    prevalence: float
    readers: list[ReaderPerformance]
    average_metrics: AccuracyMetrics

    @property
    def n_valid_readers(self) -> int:
        return sum(r.evaluated_count > 0 for r in self.readers)

    def to_dict(self) -> dict:
        return {
            "cutoff": self.parameters.cutoff,
            "prevalence": round(self.prevalence, 4),
            "partial_percentage": self.parameters.partial_percentage,
            "n_readers": len(self.readers),
            "n_valid_readers": self.n_valid_readers,
            "average_metrics": {
                k: round(v, 4) for k, v in self.average_metrics.to_dict().items()
            },
        }


# ---------------------------------------------------------------------------
# Per-reader analysis
# ---------------------------------------------------------------------------

def analyze_reader(
    reader_id: str,
    evaluations: Mapping[int, Evaluation],
    cases: list[Case],
    cutoff: int,
    prevalence: float,
    partial_percentage: float,
) -> ReaderPerformance:
    """
    Final vs. partial diagnostic performance of a single reader.

    Args:
        reader_id: Reader identifier (carried through to the result).
        evaluations: The reader's evaluations keyed by case number.
        cases: Full case set.
        cutoff: Positivity cutoff on the final VI-RADS score.
        prevalence: Prevalence used for PPV / NPV.
        partial_percentage: Share of the first scored cases in the
            partial subset, in (0, 100].

    Returns:
        ReaderPerformance; the partial subset is the first
        ceil(n · K / 100) scored case numbers in ascending order.
        Evaluations of case numbers outside ``cases`` are ignored.
    """
    case_numbers = {c.case_number for c in cases}
    scored_keys = sorted(
        k for k, e in evaluations.items() if e.is_scored and k in case_numbers
    )
    if not scored_keys:
        return ReaderPerformance(reader_id=reader_id, evaluated_count=0)

    scored_set = set(scored_keys)
    evaluated_cases = [c for c in cases if c.case_number in scored_set]

    final_matrix = build_confusion_matrix(evaluations, evaluated_cases, cutoff)
    final_metrics = compute_accuracy_metrics(final_matrix, prevalence)
    final_auc = compute_auc(evaluations, evaluated_cases)

    partial_count = subset_size(len(scored_keys), partial_percentage)
    partial_keys = set(scored_keys[:partial_count])
    partial_evaluations = {k: evaluations[k] for k in partial_keys}
    partial_cases = [c for c in cases if c.case_number in partial_keys]

    partial_matrix = build_confusion_matrix(partial_evaluations, partial_cases, cutoff)
    partial_metrics = compute_accuracy_metrics(partial_matrix, prevalence)

    p_sens = z_test_for_proportions(
        partial_matrix.tp, partial_matrix.condition_positive,
        final_matrix.tp, final_matrix.condition_positive,
    )
    p_spec = z_test_for_proportions(
        partial_matrix.tn, partial_matrix.condition_negative,
        final_matrix.tn, final_matrix.condition_negative,
    )

    return ReaderPerformance(
        reader_id=reader_id,
        evaluated_count=len(scored_keys),
        final_matrix=final_matrix,
        final_metrics=final_metrics,
        final_auc=final_auc,
        partial_count=partial_count,
        partial_matrix=partial_matrix,
        partial_metrics=partial_metrics,
        p_value_sensitivity=p_sens,
        p_value_specificity=p_spec,
    )


def average_metrics(results: Iterable[ReaderPerformance]) -> AccuracyMetrics:
    """Mean final metrics over readers with at least one scored case."""
    valid = [r for r in results if r.evaluated_count > 0]
    if not valid:
        return AccuracyMetrics()
    n = len(valid)
    return AccuracyMetrics(
        sensitivity=sum(r.final_metrics.sensitivity for r in valid) / n,
        specificity=sum(r.final_metrics.specificity for r in valid) / n,
        ppv=sum(r.final_metrics.ppv for r in valid) / n,
        npv=sum(r.final_metrics.npv for r in valid) / n,
    )


def analyze_readers(
    evaluations_by_reader: EvaluationsByReader,
    cases: list[Case],
    parameters: AnalysisParameters | None = None,
    reader_ids: Iterable[str] | None = None,
) -> GroupAnalysis:
    """
    Run :func:`analyze_reader` for every reader and average the results.

    Args:
        evaluations_by_reader: reader_id → case_number → Evaluation.
        cases: Full case set.
        parameters: Analysis settings (defaults: cutoff 4, sample
            prevalence, first 50%).
        reader_ids: Readers to report, in display order.  Defaults to the
            readers present in ``evaluations_by_reader``; listed readers
            with no evaluations are reported with zero metrics.

    Returns:
        GroupAnalysis with per-reader results and group averages.
    """
    parameters = parameters or AnalysisParameters()
    prevalence = parameters.resolve_prevalence(cases)
    if reader_ids is None:
        reader_ids = list(evaluations_by_reader)

    results = [
        analyze_reader(
            reader_id,
            evaluations_by_reader.get(reader_id, {}),
            cases,
            cutoff=parameters.cutoff,
            prevalence=prevalence,
            partial_percentage=parameters.partial_percentage,
        )
        for reader_id in reader_ids
    ]
    return GroupAnalysis(
        parameters=parameters,
        prevalence=prevalence,
        readers=results,
        average_metrics=average_metrics(results),
    )


# ---------------------------------------------------------------------------
# Wilson confidence interval (shared utility)
# ---------------------------------------------------------------------------

def wilson_confidence_interval(
    p: float,
    n: int,
    confidence: float = CI_CONFIDENCE,
) -> tuple[float, float]:
    """
    Wilson score interval for a binomial proportion.

    Better behaved than the Wald interval for the small per-reader
    denominators of a teaching case set.

    Args:
        p: Observed proportion (e.g. sensitivity).
        n: Denominator (e.g. condition positives).
        confidence: Confidence level (default 0.95).

    Returns:
        Tuple of (lower_bound, upper_bound), both clamped to [0, 1].
    """
    if n == 0:
        return (0.0, 0.0)

    z = stats.norm.ppf((1 + confidence) / 2)
    denom = 1 + z**2 / n
    center = (p + z**2 / (2 * n)) / denom
    margin = z * np.sqrt(p * (1 - p) / n + z**2 / (4 * n**2)) / denom

    return (max(0.0, float(center - margin)), min(1.0, float(center + margin)))


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def performance_table(
    group: GroupAnalysis,
    readers: Mapping[str, Reader] | None = None,
) -> pd.DataFrame:
    """
    One row per reader: final and partial metrics, deltas, AUC, p-values
    and 95% Wilson intervals for final sensitivity / specificity.

    Args:
        group: Result of :func:`analyze_readers`.
        readers: Optional roster for display names and experience.

    Returns:
        DataFrame in the reader order of ``group``.
    """
    readers = readers or {}
    records: list[dict] = []

    for r in group.readers:
        reader = readers.get(r.reader_id)
        fm, pm = r.final_metrics, r.partial_metrics
        sens_lo, sens_hi = wilson_confidence_interval(
            fm.sensitivity, r.final_matrix.condition_positive
        )
        spec_lo, spec_hi = wilson_confidence_interval(
            fm.specificity, r.final_matrix.condition_negative
        )
        records.append({
            "reader_id": r.reader_id,
            "reader_name": reader.display_name if reader else r.reader_id,
            "experience": reader.experience if reader else None,
            "evaluated_count": r.evaluated_count,
            **{f"final_{k}": v for k, v in r.final_matrix.to_dict().items()},
            "final_sensitivity": round(fm.sensitivity, 4),
            "sensitivity_ci_lower_95": round(sens_lo, 4),
            "sensitivity_ci_upper_95": round(sens_hi, 4),
            "final_specificity": round(fm.specificity, 4),
            "specificity_ci_lower_95": round(spec_lo, 4),
            "specificity_ci_upper_95": round(spec_hi, 4),
            "final_ppv": round(fm.ppv, 4),
            "final_npv": round(fm.npv, 4),
            "final_auc": round(r.final_auc, 4),
            "partial_count": r.partial_count,
            "partial_sensitivity": round(pm.sensitivity, 4),
            "partial_specificity": round(pm.specificity, 4),
            "partial_ppv": round(pm.ppv, 4),
            "partial_npv": round(pm.npv, 4),
            "delta_sensitivity": round(fm.sensitivity - pm.sensitivity, 4),
            "delta_specificity": round(fm.specificity - pm.specificity, 4),
            "p_value_sensitivity": round(r.p_value_sensitivity, 6),
            "p_value_specificity": round(r.p_value_specificity, 6),
            "significant_sensitivity": bool(r.p_value_sensitivity < ALPHA),
            "significant_specificity": bool(r.p_value_specificity < ALPHA),
        })

    return pd.DataFrame(records)


def cutoff_sweep_table(
    evaluations_by_reader: EvaluationsByReader,
    cases: list[Case],
    prevalence: float,
    reader_ids: Iterable[str] | None = None,
) -> pd.DataFrame:
    """Cutoff sweep for every reader, stacked with a reader_id column."""
    if reader_ids is None:
        reader_ids = list(evaluations_by_reader)
    frames = []
    for reader_id in reader_ids:
        sweep = cutoff_sweep(evaluations_by_reader.get(reader_id, {}), cases, prevalence)
        sweep.insert(0, "reader_id", reader_id)
        frames.append(sweep)
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def export_performance_tables(
    group: GroupAnalysis,
    evaluations_by_reader: EvaluationsByReader,
    cases: list[Case],
    readers: Mapping[str, Reader] | None = None,
    output_dir: Path = RESULTS_DIR,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Write the per-reader table, the cutoff sweep and the group summary.

    Args:
        group: Result of :func:`analyze_readers`.
        evaluations_by_reader: Evaluations used for the cutoff sweep.
        cases: Full case set.
        readers: Optional roster for display names.
        output_dir: Directory for output files.

    Returns:
        Tuple of (performance_df, sweep_df).
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    performance_df = performance_table(group, readers)
    performance_df.to_csv(output_dir / PERFORMANCE_TABLE_FILE, index=False)

    sweep_df = cutoff_sweep_table(
        evaluations_by_reader,
        cases,
        group.prevalence,
        reader_ids=[r.reader_id for r in group.readers],
    )
    sweep_df.to_csv(output_dir / CUTOFF_SWEEP_FILE, index=False)

    with (output_dir / GROUP_SUMMARY_FILE).open("w", encoding="utf-8") as fh:
        json.dump(group.to_dict(), fh, indent=2)

    print(f"Performance tables exported to {output_dir}")
    return performance_df, sweep_df
