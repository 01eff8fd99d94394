"""
Shared pytest fixtures and record builders for the reader-study tests.

The small four-case scenario is the worked example used across the
accuracy and performance tests:

    case 1  T1  (non-invasive)   final VI-RADS 2
    case 2  T3  (invasive)       final VI-RADS 4
    case 3  T2  (invasive)       final VI-RADS 5
    case 4  Ta  (non-invasive)   final VI-RADS 1

At cutoff 3 this reader is perfect: tp=2, fp=0, tn=2, fn=0.
"""

from __future__ import annotations

import pandas as pd
import pytest

from src.cases.models import Case, Evaluation, Reader


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_cases(stages: list[str], start: int = 1) -> list[Case]:
    """Cases numbered consecutively from ``start`` with the given AP stages."""
    return [Case.from_stage(start + i, stage) for i, stage in enumerate(stages)]


def make_evaluation(final: int | None = 3, reading_time: float = 60.0) -> Evaluation:
    """Evaluation with every sub-score equal to the final score."""
    return Evaluation(
        t2=final,
        diffusion=final,
        dce=final,
        virads_final=final,
        t2_confidence=4 if final else None,
        diffusion_confidence=4 if final else None,
        dce_confidence=4 if final else None,
        virads_final_confidence=4 if final else None,
        image_quality=2,
        reading_time=reading_time,
    )


def make_evaluations(
    finals: list[int | None],
    start: int = 1,
    times: list[float] | None = None,
) -> dict[int, Evaluation]:
    """Evaluations keyed by case number, one per final score."""
    times = times or [60.0] * len(finals)
    return {
        start + i: make_evaluation(final, reading_time=t)
        for i, (final, t) in enumerate(zip(finals, times))
    }


def make_timed_evaluations(times: list[float], start: int = 1) -> dict[int, Evaluation]:
    """Evaluations scored 3 with the given reading times."""
    return make_evaluations([3] * len(times), start=start, times=times)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def scenario_cases() -> list[Case]:
    return make_cases(["T1", "T3", "T2", "Ta"])


@pytest.fixture
def scenario_evaluations() -> dict[int, Evaluation]:
    return make_evaluations([2, 4, 5, 1])


@pytest.fixture
def readers() -> list[Reader]:
    return [
        Reader("r1", "Ana", "García", "Principiante"),
        Reader("r2", "Luis", "Pérez", "Principiante"),
        Reader("r3", "Marta", "López", "Experto"),
    ]


@pytest.fixture
def study_tables() -> dict[str, pd.DataFrame]:
    """Minimal on-disk study: 6 cases, 2 readers, 1 survey response."""
    cases = pd.DataFrame({
        "número de caso": [1, 2, 3, 4, 5, 6],
        "AP": ["Ta", "T2", "T1", "T3", "Tis", "T4"],
    })
    readers = pd.DataFrame([
        {"reader_id": "r1", "name": "Ana", "surname": "García", "experience": "Principiante"},
        {"reader_id": "r2", "name": "Marta", "surname": "López", "experience": "Experto"},
    ])
    finals = {
        "r1": [2, 4, 3, 5, 1, 4],
        "r2": [1, 5, 2, 4, 2, 5],
    }
    times = {
        "r1": [120, 110, 95, 90, 80, 70],
        "r2": [60, 55, 65, 50, 58, 52],
    }
    rows = []
    for reader_id, scores in finals.items():
        for i, score in enumerate(scores):
            rows.append({
                "reader_id": reader_id,
                "case_number": i + 1,
                "t2": score, "diffusion": score, "dce": score, "virads_final": score,
                "t2_confidence": 4, "diffusion_confidence": 3,
                "dce_confidence": 4, "virads_final_confidence": 5,
                "image_quality": 3,
                "reading_time": times[reader_id][i],
            })
    evaluations = pd.DataFrame(rows)
    surveys = pd.DataFrame([{
        "reader_id": "r1",
        "theoretical_clarity": 5, "practical_application": 4,
        "theory_essential": 5, "t2_criteria_ease": 4,
        "dwi_criteria_ease": 3, "dce_criteria_ease": 4,
        "virads_intuitive": 5, "feel_more_confident": 5,
        "most_difficult_aspect": "DCE en tumores pequeños",
    }])
    return {
        "cases": cases,
        "readers": readers,
        "evaluations": evaluations,
        "surveys": surveys,
    }


@pytest.fixture
def study_dir(tmp_path, study_tables):
    """Write :func:`study_tables` as CSV files the runner can load."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    study_tables["cases"].to_csv(data_dir / "cases.csv", index=False)
    study_tables["readers"].to_csv(data_dir / "readers.csv", index=False)
    study_tables["evaluations"].to_csv(data_dir / "evaluations.csv", index=False)
    study_tables["surveys"].to_csv(data_dir / "survey_responses.csv", index=False)
    return data_dir
