"""
src/cases — Case ground truth, reader evaluations and their loaders.

Module layout
-------------
config.py   — Input paths and spreadsheet column names
models.py   — Case, Evaluation, Reader, SurveyResponse value types
loader.py   — Spreadsheet/CSV loaders and sample prevalence
"""

from .loader import (
    evaluations_from_frame,
    load_cases,
    load_evaluations,
    load_readers,
    load_survey_responses,
    sample_prevalence,
)
from .models import Case, Evaluation, EvaluationsByReader, Reader, SurveyResponse

__all__ = [
    # Records
    "Case",
    "Evaluation",
    "EvaluationsByReader",
    "Reader",
    "SurveyResponse",
    # Loaders
    "load_cases",
    "load_readers",
    "load_evaluations",
    "evaluations_from_frame",
    "load_survey_responses",
    "sample_prevalence",
]
