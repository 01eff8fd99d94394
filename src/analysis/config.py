"""
Analysis-layer configuration: output paths and analysis defaults.

Study-wide values (stages, experience levels, default cutoff) are imported
from config/study_params.py so the analysis and the loaders agree.
"""

from pathlib import Path

from config.study_params import (  # noqa: F401  (re-exported)
    ALL_READERS_ID,
    ALPHA,
    DEFAULT_CUTOFF,
    DEFAULT_EXPERIENCE_GROUPS,
    DEFAULT_PARTIAL_PERCENTAGE,
    DEFAULT_TIME_PERCENTAGE,
    EXPERIENCE_LEVELS,
    ROC_CUTOFFS,
)

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR     = PROJECT_ROOT / "data"
RESULTS_DIR  = PROJECT_ROOT / "results"

# Exported file names (written under RESULTS_DIR)
PERFORMANCE_TABLE_FILE = "reader_performance.csv"
CUTOFF_SWEEP_FILE      = "cutoff_sweep.csv"
GROUP_SUMMARY_FILE     = "group_summary.json"
TIMING_RESULTS_FILE    = "timing_analysis.json"
WORKBOOK_FILE          = "Resultados_VIRADS_Completos.xlsx"
REPORT_FILE            = "virads_reader_study_report.docx"

# ---------------------------------------------------------------------------
# Parameter bounds
# ---------------------------------------------------------------------------

MIN_PERCENTAGE: float = 0.0     # exclusive
MAX_PERCENTAGE: float = 100.0   # inclusive
