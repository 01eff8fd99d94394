"""
Diagnostic accuracy of VI-RADS readings against pathology ground truth.

Pipeline for one reader:

1. build_confusion_matrix — classify every scored case at a cutoff
   (final VI-RADS >= cutoff → test positive) against the muscle-invasion flag.
2. compute_accuracy_metrics — sensitivity, specificity and the
   prevalence-adjusted predictive values.
3. compute_auc — area under a four-point empirical ROC curve.

Notes:

- PPV and NPV are computed with Bayes' theorem from sensitivity, specificity
  and a prevalence supplied by the caller, not from the matrix's own
  columns.  This lets the course simulate a clinical population whose
  base rate differs from the teaching case mix.
- The ROC curve only uses the integer cutoffs 2-5.  The final score is a
  five-point ordinal scale, so these are the only operating points a reader
  can have; the curve is not interpolated further.
- Cases without a scored evaluation, and evaluations without a case, are
  skipped silently.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Mapping

import pandas as pd

from src.cases.models import Case, Evaluation

from .config import UNDEFINED_AUC, UNDEFINED_RATIO, VALID_CUTOFFS


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfusionMatrix:
    tp: int = 0
    fp: int = 0
    tn: int = 0
    fn: int = 0

    @property
    def condition_positive(self) -> int:
        return self.tp + self.fn

    @property
    def condition_negative(self) -> int:
        return self.tn + self.fp

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AccuracyMetrics:
    sensitivity: float = 0.0
    specificity: float = 0.0
    ppv: float = 0.0
    npv: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Step 1: Confusion matrix
# ---------------------------------------------------------------------------

def scored_cases(
    evaluations: Mapping[int, Evaluation],
    cases: Iterable[Case],
) -> list[Case]:
    """Cases (in input order) that have an evaluation with a final score."""
    return [
        c for c in cases
        if c.case_number in evaluations and evaluations[c.case_number].is_scored
    ]


def build_confusion_matrix(
    evaluations: Mapping[int, Evaluation],
    cases: Iterable[Case],
    cutoff: int,
) -> ConfusionMatrix:
    """
    Cross-tabulate a reader's final scores against ground truth.

    Args:
        evaluations: The reader's evaluations keyed by case number.
        cases: Cases to classify.  Only cases with a scored evaluation count.
        cutoff: Final VI-RADS score at or above which a case is test positive.

    Returns:
        ConfusionMatrix whose total equals the number of classified cases.
    """
    tp = fp = tn = fn = 0
    for case in scored_cases(evaluations, cases):
        test_positive = evaluations[case.case_number].virads_final >= cutoff
        if test_positive and case.is_positive:
            tp += 1
        elif test_positive:
            fp += 1
        elif case.is_positive:
            fn += 1
        else:
            tn += 1
    return ConfusionMatrix(tp=tp, fp=fp, tn=tn, fn=fn)


# ---------------------------------------------------------------------------
# Step 2: Accuracy metrics
# ---------------------------------------------------------------------------

def compute_accuracy_metrics(
    matrix: ConfusionMatrix,
    prevalence: float,
) -> AccuracyMetrics:
    """
    Sensitivity, specificity and prevalence-adjusted PPV / NPV.

    PPV = Se·p / (Se·p + (1 − Sp)·(1 − p))
    NPV = Sp·(1 − p) / (Sp·(1 − p) + (1 − Se)·p)

    Any ratio with a zero denominator is reported as 0.

    Args:
        matrix: Confusion matrix from :func:`build_confusion_matrix`.
        prevalence: Assumed prevalence of muscle invasion, in [0, 1].

    Returns:
        AccuracyMetrics with all four values in [0, 1].
    """
    positives = matrix.condition_positive
    negatives = matrix.condition_negative

    sensitivity = matrix.tp / positives if positives > 0 else UNDEFINED_RATIO
    specificity = matrix.tn / negatives if negatives > 0 else UNDEFINED_RATIO

    ppv_num = sensitivity * prevalence
    ppv_den = ppv_num + (1 - specificity) * (1 - prevalence)
    ppv = ppv_num / ppv_den if ppv_den > 0 else UNDEFINED_RATIO

    npv_num = specificity * (1 - prevalence)
    npv_den = npv_num + (1 - sensitivity) * prevalence
    npv = npv_num / npv_den if npv_den > 0 else UNDEFINED_RATIO

    return AccuracyMetrics(
        sensitivity=sensitivity,
        specificity=specificity,
        ppv=ppv,
        npv=npv,
    )


# ---------------------------------------------------------------------------
# Step 3: ROC / AUC
# ---------------------------------------------------------------------------

def roc_points(
    evaluations: Mapping[int, Evaluation],
    cases: Iterable[Case],
    cutoffs: Iterable[int] = VALID_CUTOFFS,
) -> list[tuple[float, float]]:
    """
    Empirical ROC polyline as (false-positive rate, true-positive rate) points.

    Points are collected as (0, 0), one per cutoff in ascending order, then
    (1, 1).  Duplicates are dropped keeping the first occurrence, and the
    rest are stably sorted on false-positive rate alone: points sharing a
    false-positive rate stay in cutoff order, so the highest cutoff comes
    last.

    Returns an empty list when the scored cases lack either class.
    """
    relevant = scored_cases(evaluations, cases)
    n_positive = sum(c.is_positive for c in relevant)
    if n_positive == 0 or n_positive == len(relevant):
        return []

    points: list[tuple[float, float]] = [(0.0, 0.0)]
    for cutoff in cutoffs:
        matrix = build_confusion_matrix(evaluations, relevant, cutoff)
        metrics = compute_accuracy_metrics(matrix, prevalence=0.0)
        points.append((1 - metrics.specificity, metrics.sensitivity))
    points.append((1.0, 1.0))

    return sorted(dict.fromkeys(points), key=lambda point: point[0])


def compute_auc(
    evaluations: Mapping[int, Evaluation],
    cases: Iterable[Case],
) -> float:
    """
    Area under the four-cutoff ROC curve by the trapezoidal rule.

    Returns 0.5 when the scored cases contain no positives or no negatives.
    """
    points = roc_points(evaluations, cases)
    if not points:
        return UNDEFINED_AUC

    area = 0.0
    for (x1, y1), (x2, y2) in zip(points, points[1:]):
        area += (x2 - x1) * (y1 + y2) / 2
    return area


# ---------------------------------------------------------------------------
# Cutoff sweep (export table)
# ---------------------------------------------------------------------------

def cutoff_sweep(
    evaluations: Mapping[int, Evaluation],
    cases: Iterable[Case],
    prevalence: float,
    cutoffs: Iterable[int] = VALID_CUTOFFS,
) -> pd.DataFrame:
    """
    Confusion matrix and metrics at every cutoff, one row per cutoff.

    Returns:
        DataFrame with columns cutoff, tp, fp, tn, fn, sensitivity,
        specificity, ppv, npv, fpr.
    """
    case_list = list(cases)
    records: list[dict] = []
    for cutoff in cutoffs:
        matrix = build_confusion_matrix(evaluations, case_list, cutoff)
        metrics = compute_accuracy_metrics(matrix, prevalence)
        records.append({
            "cutoff": cutoff,
            **matrix.to_dict(),
            **{k: round(v, 4) for k, v in metrics.to_dict().items()},
            "fpr": round(1 - metrics.specificity, 4),
        })
    return pd.DataFrame(records)
