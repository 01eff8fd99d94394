"""
Case-ingestion configuration: input file paths and spreadsheet column names.

Column headers follow the spreadsheets the course organisers distribute
(Spanish headers), so they are centralized here rather than inlined in the
loaders.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR = PROJECT_ROOT / "data"

CASES_PATH        = DATA_DIR / "cases.xlsx"
READERS_PATH      = DATA_DIR / "readers.csv"
EVALUATIONS_PATH  = DATA_DIR / "evaluations.csv"
SURVEYS_PATH      = DATA_DIR / "survey_responses.csv"

# ---------------------------------------------------------------------------
# Case spreadsheet columns
# ---------------------------------------------------------------------------

CASE_NUMBER_COLUMN = "número de caso"
STAGE_COLUMN = "AP"

# ---------------------------------------------------------------------------
# Reader / evaluation / survey table columns
# ---------------------------------------------------------------------------

READER_COLUMNS: list[str] = ["reader_id", "name", "surname", "experience"]

EVALUATION_SCORE_COLUMNS: list[str] = [
    "t2", "diffusion", "dce", "virads_final",
]
EVALUATION_CONFIDENCE_COLUMNS: list[str] = [
    "t2_confidence", "diffusion_confidence",
    "dce_confidence", "virads_final_confidence",
]