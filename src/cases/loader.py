"""
Loaders for the reader-study inputs: case ground truth, readers, per-case
evaluations and survey responses.

Each loader reads a spreadsheet (``.xlsx``) or CSV with pandas and converts
it to the plain records in :mod:`src.cases.models`.  Validation failures
raise with the spreadsheet row number (header = row 1) so course organisers
can fix the file directly.
"""

from __future__ import annotations

import math
from numbers import Number
from pathlib import Path

import pandas as pd

from config.study_params import ALL_STAGES, SURVEY_ITEMS

from .config import (
    CASE_NUMBER_COLUMN,
    CASES_PATH,
    EVALUATION_CONFIDENCE_COLUMNS,
    EVALUATION_SCORE_COLUMNS,
    EVALUATIONS_PATH,
    READER_COLUMNS,
    READERS_PATH,
    STAGE_COLUMN,
    SURVEYS_PATH,
)
from .models import Case, Evaluation, EvaluationsByReader, Reader, SurveyResponse


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_table(path: Path) -> pd.DataFrame:
    """Read the first sheet of an Excel workbook, or a CSV file."""
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.suffix.lower() in (".xlsx", ".xlsm"):
        return pd.read_excel(path, sheet_name=0, engine="openpyxl")
    return pd.read_csv(path)


def _require_columns(df: pd.DataFrame, required: list[str], path: Path) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(
            f"{path.name} is missing required columns: {', '.join(missing)}\n"
            f"Columns present: {', '.join(map(str, df.columns))}"
        )


def _optional_int(value) -> int | None:
    """Blank cells and NaN → None; everything else → int."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    if isinstance(value, str) and value.strip() in ("", "-"):
        return None
    return int(value)


def _as_number(value) -> float | None:
    """Numeric cell → float; blank, boolean or non-numeric → None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, Number) or math.isnan(value):
        return None
    return float(value)


# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------

def load_cases(path: Path = CASES_PATH) -> list[Case]:
    """
    Load the case ground-truth spreadsheet.

    Required columns are ``número de caso`` (numeric) and ``AP`` (one of the
    six pathology stages).  The muscle-invasion flag is derived from the
    stage.

    Args:
        path: Workbook (first sheet is read) or CSV file.

    Returns:
        Cases sorted by ascending case number.

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: The file is empty, a row has a missing or non-numeric
            case number, a missing or unknown stage, or a case number is
            repeated.
    """
    df = _read_table(path)
    if df.empty:
        raise ValueError(f"{path.name} is empty or has an unexpected layout.")

    cases: list[Case] = []
    seen: set[int] = set()
    for index, row in enumerate(df.to_dict("records")):
        row_number = index + 2
        case_number = _as_number(row.get(CASE_NUMBER_COLUMN))
        stage = row.get(STAGE_COLUMN)
        stage = "" if stage is None or (isinstance(stage, float) and math.isnan(stage)) \
            else str(stage).strip()

        if case_number is None or not stage:
            raise ValueError(
                f"Row {row_number}: columns '{CASE_NUMBER_COLUMN}' (numeric) "
                f"and '{STAGE_COLUMN}' are required."
            )
        if case_number != int(case_number):
            raise ValueError(
                f"Row {row_number}: case number {case_number:g} is not an integer."
            )
        if stage not in ALL_STAGES:
            raise ValueError(
                f"Row {row_number}: AP value '{stage}' is not valid. "
                f"Allowed values: {', '.join(ALL_STAGES)}."
            )
        if int(case_number) in seen:
            raise ValueError(f"Row {row_number}: case number {int(case_number)} is repeated.")

        seen.add(int(case_number))
        cases.append(Case.from_stage(int(case_number), stage))

    cases.sort(key=lambda c: c.case_number)

    positives = sum(c.is_positive for c in cases)
    print(f"Cases loaded: {path.name}")
    print(f"  Cases:            {len(cases)}")
    print(f"  Muscle-invasive:  {positives}")
    print(f"  Non-invasive:     {len(cases) - positives}")

    return cases


def sample_prevalence(cases: list[Case]) -> float:
    """Fraction of muscle-invasive cases in the case set (0 when empty)."""
    if not cases:
        return 0.0
    return sum(c.is_positive for c in cases) / len(cases)


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def load_readers(path: Path = READERS_PATH) -> list[Reader]:
    """Load the reader roster (reader_id, name, surname, experience)."""
    df = _read_table(path)
    _require_columns(df, READER_COLUMNS, path)
    df = df.fillna("")
    readers = [
        Reader(
            reader_id=str(row["reader_id"]),
            name=str(row["name"]),
            surname=str(row["surname"]),
            experience=str(row["experience"]),
        )
        for row in df.to_dict("records")
    ]
    print(f"Readers loaded: {len(readers)} from {path.name}")
    return readers


# ---------------------------------------------------------------------------
# Evaluations
# ---------------------------------------------------------------------------

def evaluations_from_frame(df: pd.DataFrame) -> EvaluationsByReader:
    """
    Convert a long-format evaluation table into the nested reader → case map.

    One row per (reader, case).  Blank or 0 scores are the unscored state;
    a blank reading time is 0 seconds.  A repeated (reader, case) pair keeps
    the last row, matching how the entry screen overwrites a saved reading.
    """
    evaluations: EvaluationsByReader = {}
    for row in df.to_dict("records"):
        reading_time = row.get("reading_time")
        if reading_time is None or (isinstance(reading_time, float) and math.isnan(reading_time)):
            reading_time = 0.0
        evaluation = Evaluation(
            **{c: _optional_int(row.get(c)) for c in EVALUATION_SCORE_COLUMNS},
            **{c: _optional_int(row.get(c)) for c in EVALUATION_CONFIDENCE_COLUMNS},
            image_quality=_optional_int(row.get("image_quality")),
            reading_time=float(reading_time),
        )
        reader_evals = evaluations.setdefault(str(row["reader_id"]), {})
        reader_evals[int(row["case_number"])] = evaluation
    return evaluations


def load_evaluations(path: Path = EVALUATIONS_PATH) -> EvaluationsByReader:
    """
    Load every reader's evaluations.

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: Required columns are missing or a score is out of range.
    """
    df = _read_table(path)
    _require_columns(df, ["reader_id", "case_number", "virads_final"], path)
    evaluations = evaluations_from_frame(df)

    n_scored = sum(
        e.is_scored for reader_evals in evaluations.values() for e in reader_evals.values()
    )
    print(f"Evaluations loaded: {len(df)} rows from {path.name}")
    print(f"  Readers:        {len(evaluations)}")
    print(f"  Scored (final): {n_scored}")
    return evaluations


# ---------------------------------------------------------------------------
# Survey
# ---------------------------------------------------------------------------

def load_survey_responses(path: Path = SURVEYS_PATH) -> dict[str, SurveyResponse]:
    """
    Load post-course survey responses keyed by reader id.

    The survey is optional: a missing file returns an empty dict.
    """
    if not path.exists():
        print(f"NOTE: survey responses not found at {path}; the survey sheet will be omitted.")
        return {}

    df = _read_table(path)
    _require_columns(df, ["reader_id"] + list(SURVEY_ITEMS), path)

    responses: dict[str, SurveyResponse] = {}
    for row in df.to_dict("records"):
        free_text = row["most_difficult_aspect"]
        if isinstance(free_text, float) and math.isnan(free_text):
            free_text = ""
        responses[str(row["reader_id"])] = SurveyResponse(
            **{
                name: int(row[name])
                for name in SURVEY_ITEMS
                if name != "most_difficult_aspect"
            },
            most_difficult_aspect=str(free_text),
        )
    print(f"Survey responses loaded: {len(responses)} from {path.name}")
    return responses
