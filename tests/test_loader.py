"""
Tests for src/cases: record validation and the spreadsheet / CSV loaders.
"""

from __future__ import annotations

import pandas as pd
import pytest

from src.cases.loader import (
    evaluations_from_frame,
    load_cases,
    load_evaluations,
    load_readers,
    load_survey_responses,
    sample_prevalence,
)
from src.cases.models import Case, Evaluation, Reader, SurveyResponse
from tests.conftest import make_cases


def _write_cases(tmp_path, rows, name="cases.csv"):
    path = tmp_path / name
    df = pd.DataFrame(rows, columns=["número de caso", "AP"])
    if path.suffix == ".xlsx":
        df.to_excel(path, index=False, engine="openpyxl")
    else:
        df.to_csv(path, index=False)
    return path


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class TestCase:

    @pytest.mark.parametrize("stage,positive", [
        ("Ta", False), ("Tis", False), ("T1", False),
        ("T2", True), ("T3", True), ("T4", True),
    ])
    def test_positive_flag_from_stage(self, stage, positive):
        assert Case.from_stage(1, stage).is_positive is positive

    def test_unknown_stage(self):
        with pytest.raises(ValueError, match="Unknown AP stage"):
            Case.from_stage(1, "T5")


class TestEvaluation:

    def test_zero_score_is_unscored(self):
        evaluation = Evaluation(virads_final=0, t2=0, reading_time=12.0)
        assert evaluation.virads_final is None
        assert evaluation.t2 is None
        assert not evaluation.is_scored

    def test_default_is_unscored(self):
        assert not Evaluation().is_scored
        assert Evaluation().reading_time == 0.0

    def test_scored(self):
        assert Evaluation(virads_final=3).is_scored

    @pytest.mark.parametrize("kwargs", [
        {"virads_final": 6},
        {"t2": -1},
        {"dce_confidence": 7},
        {"image_quality": 4},
        {"reading_time": -1.0},
    ])
    def test_out_of_range(self, kwargs):
        with pytest.raises(ValueError):
            Evaluation(**kwargs)


class TestReaderAndSurvey:

    def test_display_name(self):
        assert Reader("r1", "Ana", "García", "Experto").display_name == "Ana García"

    def test_survey_likert_items(self):
        survey = SurveyResponse(5, 4, 5, 4, 3, 4, 5, 5, "DCE")
        items = survey.likert_items()
        assert len(items) == 8
        assert "most_difficult_aspect" not in items

    def test_survey_out_of_range(self):
        with pytest.raises(ValueError):
            SurveyResponse(6, 4, 5, 4, 3, 4, 5, 5)


# ---------------------------------------------------------------------------
# Cases loader
# ---------------------------------------------------------------------------

class TestLoadCases:

    def test_sorted_and_classified(self, tmp_path):
        path = _write_cases(tmp_path, [(3, "T2"), (1, "Ta"), (2, "T4")])
        cases = load_cases(path)
        assert [c.case_number for c in cases] == [1, 2, 3]
        assert [c.is_positive for c in cases] == [False, True, True]

    def test_reads_excel(self, tmp_path):
        path = _write_cases(tmp_path, [(1, "T1"), (2, "T3")], name="cases.xlsx")
        cases = load_cases(path)
        assert cases == [Case(1, "T1", False), Case(2, "T3", True)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_cases(tmp_path / "nope.xlsx")

    def test_empty_file(self, tmp_path):
        path = _write_cases(tmp_path, [])
        with pytest.raises(ValueError, match="empty"):
            load_cases(path)

    def test_invalid_stage_reports_row(self, tmp_path):
        path = _write_cases(tmp_path, [(1, "T1"), (2, "T9")])
        with pytest.raises(ValueError, match="Row 3: AP value 'T9'"):
            load_cases(path)

    def test_missing_stage_reports_row(self, tmp_path):
        path = _write_cases(tmp_path, [(1, "T1"), (2, None)])
        with pytest.raises(ValueError, match="Row 3"):
            load_cases(path)

    def test_non_numeric_case_number(self, tmp_path):
        path = _write_cases(tmp_path, [(1, "T1"), ("abc", "T2")])
        with pytest.raises(ValueError, match="Row 3"):
            load_cases(path)

    def test_fractional_case_number(self, tmp_path):
        path = _write_cases(tmp_path, [(1.5, "T1")])
        with pytest.raises(ValueError, match="not an integer"):
            load_cases(path)

    def test_duplicate_case_number(self, tmp_path):
        path = _write_cases(tmp_path, [(1, "T1"), (1, "T2")])
        with pytest.raises(ValueError, match="Row 3: case number 1 is repeated"):
            load_cases(path)

    def test_stage_whitespace_trimmed(self, tmp_path):
        path = _write_cases(tmp_path, [(1, " T2 ")])
        assert load_cases(path)[0].stage == "T2"


class TestSamplePrevalence:

    def test_fraction_positive(self):
        assert sample_prevalence(make_cases(["T2", "T1", "T3", "Ta"])) == 0.5

    def test_empty(self):
        assert sample_prevalence([]) == 0.0


# ---------------------------------------------------------------------------
# Readers, evaluations, surveys
# ---------------------------------------------------------------------------

class TestLoadReaders:

    def test_loads_roster(self, study_dir):
        readers = load_readers(study_dir / "readers.csv")
        assert [r.reader_id for r in readers] == ["r1", "r2"]
        assert readers[1].experience == "Experto"

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "readers.csv"
        pd.DataFrame([{"reader_id": "r1"}]).to_csv(path, index=False)
        with pytest.raises(ValueError, match="missing required columns"):
            load_readers(path)


class TestLoadEvaluations:

    def test_nested_by_reader_and_case(self, study_dir):
        evaluations = load_evaluations(study_dir / "evaluations.csv")
        assert sorted(evaluations) == ["r1", "r2"]
        assert sorted(evaluations["r1"]) == [1, 2, 3, 4, 5, 6]
        first = evaluations["r1"][1]
        assert first.virads_final == 2
        assert first.virads_final_confidence == 5
        assert first.reading_time == 120.0

    def test_blank_and_zero_scores_are_unscored(self):
        df = pd.DataFrame([
            {"reader_id": "r1", "case_number": 1, "virads_final": 0, "reading_time": 30},
            {"reader_id": "r1", "case_number": 2, "virads_final": None, "reading_time": None},
            {"reader_id": "r1", "case_number": 3, "virads_final": 4, "reading_time": 45},
        ])
        evaluations = evaluations_from_frame(df)["r1"]
        assert not evaluations[1].is_scored
        assert not evaluations[2].is_scored
        assert evaluations[2].reading_time == 0.0
        assert evaluations[3].virads_final == 4

    def test_last_duplicate_wins(self):
        df = pd.DataFrame([
            {"reader_id": "r1", "case_number": 1, "virads_final": 2},
            {"reader_id": "r1", "case_number": 1, "virads_final": 5},
        ])
        assert evaluations_from_frame(df)["r1"][1].virads_final == 5

    def test_out_of_range_score(self, tmp_path):
        path = tmp_path / "evaluations.csv"
        pd.DataFrame([
            {"reader_id": "r1", "case_number": 1, "virads_final": 9},
        ]).to_csv(path, index=False)
        with pytest.raises(ValueError, match="virads_final"):
            load_evaluations(path)

    def test_missing_required_column(self, tmp_path):
        path = tmp_path / "evaluations.csv"
        pd.DataFrame([{"reader_id": "r1", "case_number": 1}]).to_csv(path, index=False)
        with pytest.raises(ValueError, match="virads_final"):
            load_evaluations(path)


class TestLoadSurveyResponses:

    def test_loads_responses(self, study_dir):
        surveys = load_survey_responses(study_dir / "survey_responses.csv")
        assert list(surveys) == ["r1"]
        assert surveys["r1"].theoretical_clarity == 5
        assert surveys["r1"].most_difficult_aspect == "DCE en tumores pequeños"

    def test_missing_file_is_optional(self, tmp_path):
        assert load_survey_responses(tmp_path / "survey_responses.csv") == {}
