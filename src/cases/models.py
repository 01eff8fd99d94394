"""
Value types shared by ingestion, scoring and analysis.

All records are frozen dataclasses: once a case or an evaluation is loaded
it is never mutated, and every analysis pass rebuilds its results from them.

Unscored state
--------------
An evaluation whose final VI-RADS score has not been entered carries
``virads_final=None``.  Spreadsheets and older exports write this as ``0``;
the constructor normalizes any 0 score (or confidence, or image quality) to
``None`` so that downstream code only ever tests ``is_scored``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from config.study_params import (
    ALL_STAGES,
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
    IMAGE_QUALITY_LABELS,
    POSITIVE_STAGES,
    SCORE_MAX,
    SCORE_MIN,
    SURVEY_ITEMS,
)


def _check_ordinal(name: str, value: int | None, low: int, high: int) -> None:
    if value is not None and not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


@dataclass(frozen=True)
class Case:
    """A clinical case with its pathology ground truth."""

    case_number: int
    stage: str
    is_positive: bool

    @classmethod
    def from_stage(cls, case_number: int, stage: str) -> "Case":
        """Build a case, deriving the muscle-invasion flag from the AP stage."""
        if stage not in ALL_STAGES:
            raise ValueError(
                f"Unknown AP stage {stage!r}. Allowed: {', '.join(ALL_STAGES)}"
            )
        return cls(case_number, stage, stage in POSITIVE_STAGES)


@dataclass(frozen=True)
class Evaluation:
    """One reader's reading of one case."""

    t2: int | None = None
    diffusion: int | None = None
    dce: int | None = None
    virads_final: int | None = None
    t2_confidence: int | None = None
    diffusion_confidence: int | None = None
    dce_confidence: int | None = None
    virads_final_confidence: int | None = None
    image_quality: int | None = None
    reading_time: float = 0.0     # seconds

    def __post_init__(self) -> None:
        for f in fields(self):
            if f.name == "reading_time":
                continue
            if getattr(self, f.name) == 0:
                object.__setattr__(self, f.name, None)

        for name in ("t2", "diffusion", "dce", "virads_final"):
            _check_ordinal(name, getattr(self, name), SCORE_MIN, SCORE_MAX)
        for name in (
            "t2_confidence", "diffusion_confidence",
            "dce_confidence", "virads_final_confidence",
        ):
            _check_ordinal(name, getattr(self, name), CONFIDENCE_MIN, CONFIDENCE_MAX)
        _check_ordinal(
            "image_quality", self.image_quality,
            min(IMAGE_QUALITY_LABELS), max(IMAGE_QUALITY_LABELS),
        )

        if self.reading_time < 0:
            raise ValueError(f"reading_time must be non-negative, got {self.reading_time}")

    @property
    def is_scored(self) -> bool:
        return self.virads_final is not None


@dataclass(frozen=True)
class Reader:
    reader_id: str
    name: str
    surname: str
    experience: str

    @property
    def display_name(self) -> str:
        return f"{self.name} {self.surname}"


@dataclass(frozen=True)
class SurveyResponse:
    """Post-course questionnaire (items 1-8 on a 1-5 Likert scale)."""

    theoretical_clarity: int
    practical_application: int
    theory_essential: int
    t2_criteria_ease: int
    dwi_criteria_ease: int
    dce_criteria_ease: int
    virads_intuitive: int
    feel_more_confident: int
    most_difficult_aspect: str = ""

    def __post_init__(self) -> None:
        for name in SURVEY_ITEMS:
            if name == "most_difficult_aspect":
                continue
            _check_ordinal(name, getattr(self, name), 1, 5)

    def likert_items(self) -> dict[str, int]:
        """Return the eight numeric items keyed by field name."""
        return {
            name: getattr(self, name)
            for name in SURVEY_ITEMS
            if name != "most_difficult_aspect"
        }


# reader_id → case_number → Evaluation
EvaluationsByReader = dict[str, dict[int, Evaluation]]
