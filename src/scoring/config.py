"""
Scoring-layer configuration: cutoffs and fallback values for the diagnostic
accuracy engine.

Study-wide scales come from config/study_params.py; only the values the
scoring functions themselves need are re-exported here.
"""

from config.study_params import ROC_CUTOFFS

# ---------------------------------------------------------------------------
# Cutoffs
# ---------------------------------------------------------------------------

# final VI-RADS >= cutoff → test positive
VALID_CUTOFFS: tuple[int, ...] = ROC_CUTOFFS

# ---------------------------------------------------------------------------
# Degenerate-case policy
# ---------------------------------------------------------------------------

# AUC when the scored subset lacks positives or negatives (no discrimination
# can be measured).
UNDEFINED_AUC: float = 0.5

# Sensitivity / specificity / PPV / NPV with an empty denominator.
UNDEFINED_RATIO: float = 0.0

# ---------------------------------------------------------------------------
# Confidence intervals
# ---------------------------------------------------------------------------

CI_CONFIDENCE: float = 0.95
