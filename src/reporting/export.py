"""
Spreadsheet export of the raw reader-study data.

Sheet 1 ("Resultados Completos") has one row per (case, reader) with the
reader's identity, the case ground truth and every recorded value.  Sheet 2
("Resultados Encuesta") has one row per reader who answered the survey and
is omitted when nobody did.  Column headers are the ones the course
organisers already use in their own spreadsheets.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

import pandas as pd

from config.study_params import STAGE_CLASS_LABELS, SURVEY_ITEMS
from src.cases.models import Case, EvaluationsByReader, Reader, SurveyResponse

MISSING_VALUE = "-"

DETAILED_SHEET = "Resultados Completos"
SURVEY_SHEET = "Resultados Encuesta"

# Evaluation field → column header
EVALUATION_HEADERS: dict[str, str] = {
    "image_quality":           "Calidad Imagen",
    "reading_time":            "Tiempo Lectura (s)",
    "t2":                      "Evaluación T2",
    "t2_confidence":           "Confianza T2",
    "diffusion":               "Evaluación Difusión",
    "diffusion_confidence":    "Confianza Difusión",
    "dce":                     "Evaluación EDC",
    "dce_confidence":          "Confianza EDC",
    "virads_final":            "Evaluación VIRADS Final",
    "virads_final_confidence": "Confianza VIRADS Final",
}


def build_detailed_results(
    cases: Iterable[Case],
    readers: Iterable[Reader],
    evaluations_by_reader: EvaluationsByReader,
) -> pd.DataFrame:
    """
    One row per case × reader, cases outermost.

    Unscored values, a zero reading time and readings that were never
    started are all written as ``-``.
    """
    readers = list(readers)
    records: list[dict] = []
    for case in cases:
        for reader in readers:
            evaluation = evaluations_by_reader.get(reader.reader_id, {}).get(case.case_number)
            row = {
                "ID Lector": reader.reader_id,
                "Nombre Lector": reader.name,
                "Apellidos Lector": reader.surname,
                "Experiencia Lector": reader.experience,
                "Nº Caso": case.case_number,
                "AP (Ground Truth)": case.stage,
                "Clasificación AP": STAGE_CLASS_LABELS[case.is_positive],
            }
            for attr, header in EVALUATION_HEADERS.items():
                value = getattr(evaluation, attr) if evaluation is not None else None
                row[header] = value if value else MISSING_VALUE
            records.append(row)
    return pd.DataFrame(records)


def build_survey_results(
    readers: Iterable[Reader],
    surveys: Mapping[str, SurveyResponse],
) -> pd.DataFrame:
    """One row per reader with a survey response, in roster order."""
    records: list[dict] = []
    for reader in readers:
        survey = surveys.get(reader.reader_id)
        if survey is None:
            continue
        row = {
            "ID Lector": reader.reader_id,
            "Nombre Lector": reader.name,
            "Apellidos Lector": reader.surname,
        }
        for attr, header in SURVEY_ITEMS.items():
            row[header] = getattr(survey, attr)
        records.append(row)
    return pd.DataFrame(records)


def summarize_survey(surveys: Mapping[str, SurveyResponse]) -> pd.DataFrame:
    """Mean and n of each Likert item across respondents."""
    records: list[dict] = []
    if not surveys:
        return pd.DataFrame(columns=["item", "n", "mean"])
    items = pd.DataFrame([s.likert_items() for s in surveys.values()])
    for attr in items.columns:
        records.append({
            "item": SURVEY_ITEMS[attr],
            "n": int(items[attr].count()),
            "mean": round(float(items[attr].mean()), 2),
        })
    return pd.DataFrame(records)


def export_results_workbook(
    path: Path,
    cases: Iterable[Case],
    readers: Iterable[Reader],
    evaluations_by_reader: EvaluationsByReader,
    surveys: Mapping[str, SurveyResponse] | None = None,
) -> Path:
    """
    Write the detailed results (and survey, if any) to an Excel workbook.

    Returns:
        The path written.
    """
    readers = list(readers)
    detailed = build_detailed_results(cases, readers, evaluations_by_reader)
    survey_df = build_survey_results(readers, surveys or {})

    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        detailed.to_excel(writer, sheet_name=DETAILED_SHEET, index=False)
        if not survey_df.empty:
            survey_df.to_excel(writer, sheet_name=SURVEY_SHEET, index=False)

    print(f"Results workbook exported: {path}")
    print(f"  Detailed rows: {len(detailed)}")
    print(f"  Survey rows:   {len(survey_df)}")
    return path
