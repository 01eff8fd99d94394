"""
src/scoring — Diagnostic accuracy of VI-RADS readings.

Module layout
-------------
config.py    — Cutoffs and degenerate-case fallback values
accuracy.py  — Confusion matrix, sensitivity / specificity / PPV / NPV,
               ROC curve and AUC, cutoff sweep

Public interface
----------------
    build_confusion_matrix(evaluations, cases, cutoff)
    compute_accuracy_metrics(matrix, prevalence)
    compute_auc(evaluations, cases)
    roc_points(evaluations, cases)
    cutoff_sweep(evaluations, cases, prevalence)
"""

from .accuracy import (
    AccuracyMetrics,
    ConfusionMatrix,
    build_confusion_matrix,
    compute_accuracy_metrics,
    compute_auc,
    cutoff_sweep,
    roc_points,
    scored_cases,
)

__all__ = [
    # Value types
    "ConfusionMatrix",
    "AccuracyMetrics",
    # Accuracy
    "scored_cases",
    "build_confusion_matrix",
    "compute_accuracy_metrics",
    # ROC
    "roc_points",
    "compute_auc",
    "cutoff_sweep",
]
