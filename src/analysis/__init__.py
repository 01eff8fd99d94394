"""
Analysis package — statistics, per-reader performance and reading times.

Public API surface:

    Special functions:
        log_gamma, regularized_incomplete_beta, standard_normal_cdf

    Statistics:
        mean, sample_std_dev, t_test_independent, t_test_paired,
        z_test_for_proportions, TTestResult

    Performance:
        AnalysisParameters, analyze_reader, analyze_readers,
        average_metrics, performance_table, wilson_confidence_interval,
        export_performance_tables

    Reading times:
        analyze_reading_times, filter_first_percentage,
        export_timing_analysis
"""

from .performance import (
    AnalysisParameters,
    GroupAnalysis,
    ReaderPerformance,
    analyze_reader,
    analyze_readers,
    average_metrics,
    export_performance_tables,
    performance_table,
    wilson_confidence_interval,
)
from .special_functions import (
    log_gamma,
    regularized_incomplete_beta,
    standard_normal_cdf,
)
from .statistics import (
    TTestResult,
    mean,
    sample_std_dev,
    t_test_independent,
    t_test_paired,
    z_test_for_proportions,
)
from .timing import (
    TimingAnalysis,
    analyze_reading_times,
    export_timing_analysis,
    filter_first_percentage,
)

# The runner is not re-exported here: it imports src.reporting, which
# imports this package.  Use ``from src.analysis.runner import run_full_analysis``.

__all__ = [
    # special functions
    "log_gamma",
    "regularized_incomplete_beta",
    "standard_normal_cdf",
    # statistics
    "mean",
    "sample_std_dev",
    "t_test_independent",
    "t_test_paired",
    "z_test_for_proportions",
    "TTestResult",
    # performance
    "AnalysisParameters",
    "GroupAnalysis",
    "ReaderPerformance",
    "analyze_reader",
    "analyze_readers",
    "average_metrics",
    "performance_table",
    "wilson_confidence_interval",
    "export_performance_tables",
    # timing
    "TimingAnalysis",
    "analyze_reading_times",
    "filter_first_percentage",
    "export_timing_analysis",
]
