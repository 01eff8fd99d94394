"""
Reading-time analysis.

Three comparisons, each a t-test on reading times in seconds:

1. Learning curve — one reader (or the per-case mean of all readers): the
   first K% of cases vs. the remainder, independent-samples t-test.
2. Reader vs. reader — cases timed by both, paired t-test.  Either side
   may be the "all readers" pseudo-reader, in which case the other reader's
   times are paired with the all-reader mean of the same cases.
3. Experience group vs. experience group — every timed reading of the
   readers in each group, independent-samples t-test.

Only readings with a positive reading time count.  Every comparison can
first be restricted to each reader's first N% of cases (time_percentage).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from src.cases.models import Evaluation, EvaluationsByReader, Reader

from .config import (
    ALL_READERS_ID,
    DEFAULT_EXPERIENCE_GROUPS,
    DEFAULT_PARTIAL_PERCENTAGE,
    DEFAULT_TIME_PERCENTAGE,
    RESULTS_DIR,
    TIMING_RESULTS_FILE,
)
from .performance import subset_size, validate_percentage
from .statistics import TTestResult, mean, t_test_independent, t_test_paired


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TimingAnalysis:
    mean_time_per_case: float
    total_time: float
    first_segment_times: list[float] = field(default_factory=list)
    second_segment_times: list[float] = field(default_factory=list)
    learning_curve: TTestResult | None = None
    reader_1_times: list[float] = field(default_factory=list)
    reader_2_times: list[float] = field(default_factory=list)
    paired_reader: TTestResult | None = None
    experience_1_times: list[float] = field(default_factory=list)
    experience_2_times: list[float] = field(default_factory=list)
    experience_group: TTestResult | None = None

    def to_dict(self) -> dict:
        def _test(result: TTestResult | None) -> dict | None:
            return result.to_dict() if result is not None else None

        def _sample(times: list[float]) -> dict:
            return {"n": len(times), "mean_seconds": round(mean(times), 2)}

        return {
            "mean_time_per_case": round(self.mean_time_per_case, 2),
            "total_time": round(self.total_time, 2),
            "learning_curve": {
                "first_segment": _sample(self.first_segment_times),
                "second_segment": _sample(self.second_segment_times),
                "test": _test(self.learning_curve),
            },
            "paired_reader": {
                "reader_1": _sample(self.reader_1_times),
                "reader_2": _sample(self.reader_2_times),
                "test": _test(self.paired_reader),
            },
            "experience_group": {
                "group_1": _sample(self.experience_1_times),
                "group_2": _sample(self.experience_2_times),
                "test": _test(self.experience_group),
            },
        }


# ---------------------------------------------------------------------------
# Sample builders
# ---------------------------------------------------------------------------

def filter_first_percentage(
    evaluations: Mapping[int, Evaluation],
    percentage: float,
) -> dict[int, Evaluation]:
    """
    The first ``percentage``% of a reader's evaluations by case number.

    At 100% every evaluation is returned.  Otherwise ceil(n · p / 100)
    evaluations are kept, scored or not.
    """
    keys = sorted(evaluations)
    if percentage >= 100:
        return {k: evaluations[k] for k in keys}
    keep = keys[:subset_size(len(keys), percentage)]
    return {k: evaluations[k] for k in keep}


def _timed(evaluations: Mapping[int, Evaluation]) -> dict[int, float]:
    return {
        k: evaluations[k].reading_time
        for k in sorted(evaluations)
        if evaluations[k].reading_time > 0
    }


def per_case_mean_times(
    evaluations_by_reader: EvaluationsByReader,
    reader_ids: Iterable[str],
    time_percentage: float = DEFAULT_TIME_PERCENTAGE,
) -> dict[int, float]:
    """Mean positive reading time of each case across readers, by case number."""
    times_by_case: dict[int, list[float]] = {}
    for reader_id in reader_ids:
        filtered = filter_first_percentage(
            evaluations_by_reader.get(reader_id, {}), time_percentage
        )
        for case_number, seconds in _timed(filtered).items():
            times_by_case.setdefault(case_number, []).append(seconds)
    return {k: mean(times_by_case[k]) for k in sorted(times_by_case)}


def reader_times(
    reader_id: str,
    evaluations_by_reader: EvaluationsByReader,
    reader_ids: Iterable[str],
    time_percentage: float = DEFAULT_TIME_PERCENTAGE,
) -> dict[int, float]:
    """
    Case number → reading time for a reader, or the all-reader mean when
    ``reader_id`` is ALL_READERS_ID.
    """
    if reader_id == ALL_READERS_ID:
        return per_case_mean_times(evaluations_by_reader, reader_ids, time_percentage)
    filtered = filter_first_percentage(
        evaluations_by_reader.get(reader_id, {}), time_percentage
    )
    return _timed(filtered)


def learning_curve_split(
    times: list[float],
    split_percentage: float,
) -> tuple[list[float], list[float]]:
    """Split case-ordered times into the first ceil(n · K / 100) and the rest."""
    split = subset_size(len(times), split_percentage)
    return times[:split], times[split:]


def paired_reader_times(
    reader_1: str,
    reader_2: str,
    evaluations_by_reader: EvaluationsByReader,
    reader_ids: Iterable[str],
    time_percentage: float = DEFAULT_TIME_PERCENTAGE,
) -> tuple[list[float], list[float]]:
    """
    Reading times of two readers over the cases both have timed.

    When one side is ALL_READERS_ID it holds the per-case mean; for a reader
    on ``reader_ids`` that mean covers every case the reader timed.  A reader
    outside ``reader_ids`` only pairs on cases some roster reader also timed.
    The same reader on both sides yields two empty lists.
    """
    if reader_1 == reader_2:
        return [], []

    reader_ids = list(reader_ids)
    times_1 = reader_times(reader_1, evaluations_by_reader, reader_ids, time_percentage)
    times_2 = reader_times(reader_2, evaluations_by_reader, reader_ids, time_percentage)

    common = sorted(set(times_1) & set(times_2))
    return [times_1[k] for k in common], [times_2[k] for k in common]


def experience_group_times(
    experience: str,
    readers: Iterable[Reader],
    evaluations_by_reader: EvaluationsByReader,
    time_percentage: float = DEFAULT_TIME_PERCENTAGE,
) -> list[float]:
    """Every positive reading time of the readers at one experience level."""
    times: list[float] = []
    for reader in readers:
        if reader.experience != experience:
            continue
        filtered = filter_first_percentage(
            evaluations_by_reader.get(reader.reader_id, {}), time_percentage
        )
        times.extend(_timed(filtered).values())
    return times


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

def analyze_reading_times(
    evaluations_by_reader: EvaluationsByReader,
    readers: list[Reader],
    reader_1: str = ALL_READERS_ID,
    reader_2: str | None = None,
    experience_groups: tuple[str, str] = DEFAULT_EXPERIENCE_GROUPS,
    split_percentage: float = DEFAULT_PARTIAL_PERCENTAGE,
    time_percentage: float = DEFAULT_TIME_PERCENTAGE,
) -> TimingAnalysis:
    """
    Run the three reading-time comparisons and the overall time summary.

    Args:
        evaluations_by_reader: reader_id → case_number → Evaluation.
        readers: Reader roster (experience levels, all-reader membership).
        reader_1: Reader for the learning curve and first side of the paired
            comparison; ALL_READERS_ID for the per-case mean.
        reader_2: Second side of the paired comparison.  None picks the
            first reader other than ``reader_1``, or ALL_READERS_ID.
        experience_groups: The two experience levels to compare.
        split_percentage: Learning-curve split point, in (0, 100].
        time_percentage: Restrict every comparison to each reader's first
            N% of cases, in (0, 100].

    Returns:
        TimingAnalysis; each test is None when a side has too few values.

    Raises:
        ValueError: A percentage is out of range, or a reader id is neither
            on the roster nor ALL_READERS_ID.
    """
    validate_percentage(split_percentage, "split_percentage")
    validate_percentage(time_percentage, "time_percentage")

    reader_ids = [r.reader_id for r in readers]
    for reader_id in (reader_1, reader_2):
        if reader_id not in (None, ALL_READERS_ID) and reader_id not in reader_ids:
            raise ValueError(f"reader {reader_id!r} is not on the roster")
    if reader_2 is None:
        reader_2 = next((rid for rid in reader_ids if rid != reader_1), ALL_READERS_ID)

    # ── Learning curve ──
    curve = list(
        reader_times(reader_1, evaluations_by_reader, reader_ids, time_percentage).values()
    )
    first, second = learning_curve_split(curve, split_percentage)
    learning_curve = t_test_independent(first, second)

    # ── Paired readers ──
    times_1, times_2 = paired_reader_times(
        reader_1, reader_2, evaluations_by_reader, reader_ids, time_percentage
    )
    paired = t_test_paired(times_1, times_2)

    # ── Experience groups ──
    group_1, group_2 = experience_groups
    exp_1 = experience_group_times(group_1, readers, evaluations_by_reader, time_percentage)
    exp_2 = experience_group_times(group_2, readers, evaluations_by_reader, time_percentage)
    experience = t_test_independent(exp_1, exp_2)

    # ── Overall ──
    all_times = [
        seconds
        for evaluations in evaluations_by_reader.values()
        for seconds in _timed(filter_first_percentage(evaluations, time_percentage)).values()
    ]

    return TimingAnalysis(
        mean_time_per_case=mean(all_times),
        total_time=sum(all_times),
        first_segment_times=first,
        second_segment_times=second,
        learning_curve=learning_curve,
        reader_1_times=times_1,
        reader_2_times=times_2,
        paired_reader=paired,
        experience_1_times=exp_1,
        experience_2_times=exp_2,
        experience_group=experience,
    )


def export_timing_analysis(
    timing: TimingAnalysis,
    output_dir: Path = RESULTS_DIR,
) -> Path:
    """Write the timing results as JSON; infinite t statistics become null."""
    output_dir.mkdir(parents=True, exist_ok=True)
    out_path = output_dir / TIMING_RESULTS_FILE
    with out_path.open("w", encoding="utf-8") as fh:
        json.dump(timing.to_dict(), fh, indent=2)
    print(f"Timing analysis exported to {out_path}")
    return out_path
