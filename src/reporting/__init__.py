"""
src/reporting — Spreadsheet export and Word report.

Module layout
-------------
export.py       — Detailed results / survey tables and the Excel workbook
docx_report.py  — Word summary of an analysis pass
"""

from .docx_report import build_docx_report
from .export import (
    build_detailed_results,
    build_survey_results,
    export_results_workbook,
    summarize_survey,
)

__all__ = [
    "build_detailed_results",
    "build_survey_results",
    "summarize_survey",
    "export_results_workbook",
    "build_docx_report",
]
