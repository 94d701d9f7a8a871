"""Pydantic schemas for certificate eligibility."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from progression.curriculum.models import CertificationPolicy


class RequirementKind(str, Enum):
    """Kind of unmet certification requirement."""

    COMPLETION = "completion"
    ASSESSMENT = "assessment"


class Requirement(BaseModel):
    """One unmet requirement, with the next step that addresses it."""

    model_config = ConfigDict(frozen=True)

    kind: RequirementKind
    description: str
    current: float | None = Field(None, description="Learner's current value")
    required: float = Field(..., description="Threshold from the policy")
    module_id: str | None = Field(None, description="First incomplete module")
    lesson_id: str | None = Field(None, description="Lesson blocking progress")
    locked: bool | None = Field(
        None, description="Whether the blocking lesson is currently locked"
    )


class EligibilityResult(BaseModel):
    """Outcome of evaluating a certification policy."""

    model_config = ConfigDict(frozen=True)

    track_id: str
    eligible: bool
    completion_percentage: int
    assessment_score: float | None = None
    policy: CertificationPolicy
    missing_requirements: tuple[Requirement, ...] = ()
