"""
Word summary of one analysis pass: analysis settings, group averages,
per-reader performance, reading-time tests and the survey summary.

Usage (programmatic):
    from src.reporting.docx_report import build_docx_report
    build_docx_report(path, group, performance_df, timing, survey_df)
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt

from config.study_params import ALPHA
from src.analysis.performance import GroupAnalysis
from src.analysis.statistics import TTestResult, mean
from src.analysis.timing import TimingAnalysis

FONT_NAME = "Times New Roman"

# performance_table column → report header
READER_TABLE_COLUMNS: dict[str, str] = {
    "reader_name":          "Lector",
    "evaluated_count":      "Casos",
    "final_sensitivity":    "Sens.",
    "final_specificity":    "Espec.",
    "final_ppv":            "VPP",
    "final_npv":            "VPN",
    "final_auc":            "AUC",
    "p_value_sensitivity":  "p Sens.",
    "p_value_specificity":  "p Espec.",
}


# ── Formatting helpers ───────────────────────────────────────────────────────

def set_margins(document, top=1, bottom=1, left=1, right=1):
    for section in document.sections:
        section.top_margin    = Inches(top)
        section.bottom_margin = Inches(bottom)
        section.left_margin   = Inches(left)
        section.right_margin  = Inches(right)


def heading(document, text, level=1):
    p = document.add_heading(text, level=level)
    p.runs[0].font.name = FONT_NAME
    p.runs[0].font.size = Pt(16 - 2 * level)
    p.runs[0].font.bold = True
    return p


def body(document, text):
    p = document.add_paragraph(text)
    p.style = document.styles["Normal"]
    p.paragraph_format.space_after = Pt(6)
    return p


def format_percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def format_p_value(p: float) -> str:
    """APA-style p: '< 0.001' below one in a thousand, else three decimals."""
    if p < 0.001:
        return "p < 0.001"
    return f"p = {p:.3f}"


def format_t_test(result: TTestResult | None) -> str:
    if result is None:
        return "Not applicable (fewer than two observations per side)."
    verdict = "significant" if result.p_value < ALPHA else "not significant"
    if result.is_degenerate:
        return f"t({result.degrees_of_freedom}) undefined (zero variance), p = 0; {verdict}"
    return (
        f"t({result.degrees_of_freedom}) = {result.statistic:.2f}, "
        f"{format_p_value(result.p_value)}; {verdict}"
    )


def add_table(document, df: pd.DataFrame, percent_columns: set[str] = frozenset()):
    table = document.add_table(rows=1, cols=len(df.columns))
    table.style = "Light Grid Accent 1"
    for cell, column in zip(table.rows[0].cells, df.columns):
        cell.text = str(column)
        cell.paragraphs[0].alignment = WD_ALIGN_PARAGRAPH.CENTER
    for row in df.itertuples(index=False):
        cells = table.add_row().cells
        for cell, column, value in zip(cells, df.columns, row):
            if column in percent_columns:
                cell.text = format_percent(value)
            elif isinstance(value, float):
                cell.text = f"{value:.3f}"
            else:
                cell.text = str(value)
    return table


# ── Report ───────────────────────────────────────────────────────────────────

def build_docx_report(
    path: Path,
    group: GroupAnalysis,
    performance_df: pd.DataFrame,
    timing: TimingAnalysis,
    survey_summary: pd.DataFrame | None = None,
) -> Path:
    """
    Build and save the Word report.

    Args:
        path: Output .docx path.
        group: Group analysis (settings and averages).
        performance_df: Per-reader table from
            :func:`src.analysis.performance.performance_table`.
        timing: Reading-time analysis.
        survey_summary: Optional per-item survey means.

    Returns:
        The path written.
    """
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = FONT_NAME
    style.font.size = Pt(11)
    set_margins(doc)

    heading(doc, "VI-RADS Reader Study: Diagnostic Analysis", level=1)

    # ── Settings ──
    heading(doc, "Analysis settings", level=2)
    params = group.parameters
    body(doc, f"Positivity cutoff: final VI-RADS ≥ {params.cutoff}.")
    body(doc, f"Assumed prevalence of muscle invasion: {format_percent(group.prevalence)}.")
    body(doc, f"Partial subset: first {params.partial_percentage:g}% of each reader's cases.")

    # ── Group averages ──
    heading(doc, "Group averages", level=2)
    avg = group.average_metrics
    body(
        doc,
        f"Across {group.n_valid_readers} reader(s) with at least one scored case: "
        f"sensitivity {format_percent(avg.sensitivity)}, "
        f"specificity {format_percent(avg.specificity)}, "
        f"PPV {format_percent(avg.ppv)}, NPV {format_percent(avg.npv)}.",
    )

    # ── Per reader ──
    heading(doc, "Individual performance", level=2)
    if performance_df.empty:
        body(doc, "No readers.")
    else:
        table_df = performance_df[list(READER_TABLE_COLUMNS)].rename(columns=READER_TABLE_COLUMNS)
        add_table(doc, table_df, percent_columns={"Sens.", "Espec.", "VPP", "VPN"})
        body(
            doc,
            "p-values compare sensitivity and specificity on the partial subset "
            "with the full set (two-proportion z-test).",
        )

    # ── Timing ──
    heading(doc, "Reading times", level=2)
    body(
        doc,
        f"Mean time per case {timing.mean_time_per_case:.1f}s; "
        f"total reading time {timing.total_time:.0f}s.",
    )
    body(
        doc,
        f"Learning curve (first segment {mean(timing.first_segment_times):.1f}s, "
        f"n={len(timing.first_segment_times)}; remainder "
        f"{mean(timing.second_segment_times):.1f}s, "
        f"n={len(timing.second_segment_times)}): "
        + format_t_test(timing.learning_curve),
    )
    body(doc, "Reader comparison (paired): " + format_t_test(timing.paired_reader))
    body(doc, "Experience groups: " + format_t_test(timing.experience_group))

    # ── Survey ──
    if survey_summary is not None and not survey_summary.empty:
        heading(doc, "Post-course survey", level=2)
        add_table(doc, survey_summary)

    path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(str(path))
    print(f"Report written: {path}")
    return path
