"""
Study parameters: pathology stages, scoring scales, reader experience levels,
and the default analysis settings.

This is the AUTHORITATIVE source for study-wide constants.
src/cases/config.py and src/analysis/config.py import from here — do not
maintain parallel copies.

Design notes:
- Muscle invasion (T2 and above) is the condition of interest; the three
  lower pathology stages are the condition-negative population.
- VI-RADS final scores run 1-5.  A cutoff of 1 classifies every case as
  positive, so the ROC curve and the cutoff slider only use 2-5.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Pathology ground truth (AP stage)
# ---------------------------------------------------------------------------

# Non-muscle-invasive bladder cancer (condition negative)
NEGATIVE_STAGES: tuple[str, ...] = ("Ta", "Tis", "T1")

# Muscle-invasive bladder cancer (condition positive)
POSITIVE_STAGES: tuple[str, ...] = ("T2", "T3", "T4")

ALL_STAGES: tuple[str, ...] = POSITIVE_STAGES + NEGATIVE_STAGES

# Display labels used by the export layer
STAGE_CLASS_LABELS: dict[bool, str] = {
    True:  "CVMI",    # muscle-invasive
    False: "CVNMI",   # non-muscle-invasive
}

# ---------------------------------------------------------------------------
# Scoring scales
# ---------------------------------------------------------------------------

SCORE_MIN: int = 1
SCORE_MAX: int = 5            # T2W, DWI, DCE and final VI-RADS
CONFIDENCE_MIN: int = 1
CONFIDENCE_MAX: int = 5
IMAGE_QUALITY_LABELS: dict[int, str] = {
    1: "Mala",
    2: "Adecuada",
    3: "Excelente",
}

# Non-trivial cutoffs on the 1-5 final score (score >= cutoff → test positive)
ROC_CUTOFFS: tuple[int, ...] = (2, 3, 4, 5)

# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

EXPERIENCE_LEVELS: list[str] = ["Principiante", "Intermedio", "Experto"]

# Pseudo-reader id meaning "mean across every reader" in timing comparisons
ALL_READERS_ID: str = "all-readers"

# ---------------------------------------------------------------------------
# Default analysis parameters
# ---------------------------------------------------------------------------

DEFAULT_CUTOFF: int = 4
DEFAULT_PARTIAL_PERCENTAGE: int = 50     # learning curve: first 50% of cases
DEFAULT_TIME_PERCENTAGE: int = 100       # timing analysis uses every case
DEFAULT_EXPERIENCE_GROUPS: tuple[str, str] = ("Principiante", "Experto")

ALPHA: float = 0.05

# ---------------------------------------------------------------------------
# Post-course survey items (1-5 Likert unless noted)
# ---------------------------------------------------------------------------

SURVEY_ITEMS: dict[str, str] = {
    "theoretical_clarity":    "1. Claridad Impacto Clínico",
    "practical_application":  "2. Claridad Aplicación Práctica",
    "theory_essential":       "3. Formación Teórica Esencial",
    "t2_criteria_ease":       "4. Facilidad Criterios T2W",
    "dwi_criteria_ease":      "5. Facilidad Criterios DWI",
    "dce_criteria_ease":      "6. Facilidad Criterios DCE",
    "virads_intuitive":       "7. VIRADS Lógico e Intuitivo",
    "feel_more_confident":    "8. Más Confianza Post-Curso",
    "most_difficult_aspect":  "9. Aspecto Más Difícil (Abierta)",   # free text
}
