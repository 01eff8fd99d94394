"""
Analysis pipeline runner: load the study data, run the diagnostic and
reading-time analyses, and export every table and report to RESULTS_DIR.

Usage (from project root):
    python -m src.analysis.runner --cutoff 3 --prevalence 0.35

Or programmatically:
    from src.analysis.runner import run_full_analysis
    results = run_full_analysis()
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from src.cases.loader import (
    load_cases,
    load_evaluations,
    load_readers,
    load_survey_responses,
    sample_prevalence,
)
from src.reporting.docx_report import build_docx_report
from src.reporting.export import export_results_workbook, summarize_survey

from .config import (
    ALL_READERS_ID,
    DATA_DIR,
    DEFAULT_CUTOFF,
    DEFAULT_EXPERIENCE_GROUPS,
    DEFAULT_PARTIAL_PERCENTAGE,
    DEFAULT_TIME_PERCENTAGE,
    EXPERIENCE_LEVELS,
    REPORT_FILE,
    RESULTS_DIR,
    ROC_CUTOFFS,
    WORKBOOK_FILE,
)
from .performance import AnalysisParameters, analyze_readers, export_performance_tables
from .timing import analyze_reading_times, export_timing_analysis


# ---------------------------------------------------------------------------
# Data loading
# ---------------------------------------------------------------------------

def _load_study_data(data_dir: Path) -> dict:
    """Load cases, readers, evaluations and surveys; exit if a file is missing or invalid."""
    cases_path = data_dir / "cases.xlsx"
    if not cases_path.exists():
        cases_path = data_dir / "cases.csv"

    try:
        cases = load_cases(cases_path)
        readers = load_readers(data_dir / "readers.csv")
        evaluations = load_evaluations(data_dir / "evaluations.csv")
        surveys = load_survey_responses(data_dir / "survey_responses.csv")
    except (FileNotFoundError, ValueError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    return {
        "cases": cases,
        "readers": readers,
        "evaluations": evaluations,
        "surveys": surveys,
    }


# ---------------------------------------------------------------------------
# Master runner
# ---------------------------------------------------------------------------

def run_full_analysis(
    data_dir: Path = DATA_DIR,
    output_dir: Path = RESULTS_DIR,
    parameters: AnalysisParameters | None = None,
    time_percentage: float = DEFAULT_TIME_PERCENTAGE,
    reader_1: str = ALL_READERS_ID,
    reader_2: str | None = None,
    experience_groups: tuple[str, str] = DEFAULT_EXPERIENCE_GROUPS,
) -> dict:
    """
    Execute the diagnostic and timing analyses and export all results.

    Args:
        data_dir: Directory holding cases.xlsx (or cases.csv), readers.csv,
            evaluations.csv and optionally survey_responses.csv.
        output_dir: Directory for exported tables and reports.
        parameters: Cutoff / prevalence / partial-subset settings.
        time_percentage: Share of each reader's first cases used for timing.
        reader_1: Learning-curve reader (ALL_READERS_ID for the mean).
        reader_2: Second reader of the paired timing comparison.
        experience_groups: Experience levels to compare.

    Returns:
        Dict with keys: group, performance_table, cutoff_sweep, timing,
        output_files.
    """
    parameters = parameters or AnalysisParameters()
    sep = "=" * 70
    print(f"\n{sep}")
    print("VI-RADS READER STUDY ANALYSIS")
    print(f"{sep}\n")

    output_dir.mkdir(parents=True, exist_ok=True)

    # ── Load data ──
    data = _load_study_data(data_dir)
    cases, readers = data["cases"], data["readers"]
    evaluations, surveys = data["evaluations"], data["surveys"]
    roster = {r.reader_id: r for r in readers}
    reader_ids = [r.reader_id for r in readers]

    # ── Diagnostic accuracy ──
    print(f"\n{sep}")
    print("DIAGNOSTIC ACCURACY")
    print(sep)
    group = analyze_readers(evaluations, cases, parameters, reader_ids=reader_ids)
    avg = group.average_metrics
    print(f"  Cutoff:           VI-RADS >= {parameters.cutoff}")
    print(f"  Prevalence:       {group.prevalence:.1%} "
          f"(sample {sample_prevalence(cases):.1%})")
    print(f"  Valid readers:    {group.n_valid_readers}/{len(group.readers)}")
    print(f"  Mean sensitivity: {avg.sensitivity:.1%}")
    print(f"  Mean specificity: {avg.specificity:.1%}")
    print(f"  Mean PPV / NPV:   {avg.ppv:.1%} / {avg.npv:.1%}")
    performance_df, sweep_df = export_performance_tables(
        group, evaluations, cases, readers=roster, output_dir=output_dir
    )

    # ── Reading times ──
    print(f"\n{sep}")
    print("READING TIMES")
    print(sep)
    try:
        timing = analyze_reading_times(
            evaluations,
            readers,
            reader_1=reader_1,
            reader_2=reader_2,
            experience_groups=experience_groups,
            split_percentage=parameters.partial_percentage,
            time_percentage=time_percentage,
        )
    except ValueError as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)
    print(f"  Mean time per case: {timing.mean_time_per_case:.1f}s")
    print(f"  Total time:         {timing.total_time:.0f}s")
    for label, result in (
        ("Learning curve", timing.learning_curve),
        ("Paired readers", timing.paired_reader),
        ("Experience groups", timing.experience_group),
    ):
        shown = f"p={result.p_value:.4f}" if result is not None else "not applicable"
        print(f"  {label + ':':<19} {shown}")
    timing_path = export_timing_analysis(timing, output_dir=output_dir)

    # ── Workbook and report ──
    print(f"\n{sep}")
    print("EXPORT")
    print(sep)
    workbook_path = export_results_workbook(
        output_dir / WORKBOOK_FILE, cases, readers, evaluations, surveys
    )
    report_path = build_docx_report(
        output_dir / REPORT_FILE,
        group,
        performance_df,
        timing,
        survey_summary=summarize_survey(surveys),
    )

    print(f"\n{sep}")
    print(f"ANALYSIS COMPLETE — results in {output_dir}")
    print(sep)

    return {
        "group": group,
        "performance_table": performance_df,
        "cutoff_sweep": sweep_df,
        "timing": timing,
        "output_files": {
            "timing": str(timing_path),
            "workbook": str(workbook_path),
            "report": str(report_path),
        },
    }


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="VI-RADS reader study analysis")
    p.add_argument("--cutoff", type=int, choices=list(ROC_CUTOFFS), default=DEFAULT_CUTOFF,
                   help="Final VI-RADS score at or above which a reading is positive")
    p.add_argument("--prevalence", type=float, default=None,
                   help="Assumed prevalence for PPV/NPV (default: sample prevalence)")
    p.add_argument("--partial-percentage", type=float, default=DEFAULT_PARTIAL_PERCENTAGE,
                   help="First N%% of each reader's cases used as the partial subset")
    p.add_argument("--time-percentage", type=float, default=DEFAULT_TIME_PERCENTAGE,
                   help="First N%% of each reader's cases used for the timing analysis")
    p.add_argument("--reader-1", default=ALL_READERS_ID,
                   help=f"Learning-curve reader id ('{ALL_READERS_ID}' for the mean)")
    p.add_argument("--reader-2", default=None, help="Second reader of the paired timing test")
    p.add_argument("--experience-1", choices=EXPERIENCE_LEVELS,
                   default=DEFAULT_EXPERIENCE_GROUPS[0])
    p.add_argument("--experience-2", choices=EXPERIENCE_LEVELS,
                   default=DEFAULT_EXPERIENCE_GROUPS[1])
    p.add_argument("--data-dir", type=Path, default=DATA_DIR)
    p.add_argument("--output-dir", type=Path, default=RESULTS_DIR)
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> dict:
    args = parse_args(argv)
    try:
        parameters = AnalysisParameters(
            cutoff=args.cutoff,
            prevalence=args.prevalence,
            partial_percentage=args.partial_percentage,
        )
    except ValueError as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    return run_full_analysis(
        data_dir=args.data_dir,
        output_dir=args.output_dir,
        parameters=parameters,
        time_percentage=args.time_percentage,
        reader_1=args.reader_1,
        reader_2=args.reader_2,
        experience_groups=(args.experience_1, args.experience_2),
    )


if __name__ == "__main__":
    main()
