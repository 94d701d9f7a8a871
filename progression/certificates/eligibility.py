"""Certificate eligibility evaluation.

A learner is eligible when:
- track completion percentage >= policy.min_completion_percentage, and
- the policy has no assessment threshold, or an externally supplied
  assessment score meets it.

When not eligible, the result lists the unmet requirements in catalog order,
naming the first incomplete module and the lesson blocking further progress.
Malformed policies raise ``InvalidPolicyError``; values are never clamped.
"""

import math
from numbers import Real

import structlog

from progression.config import get_settings
from progression.core.exceptions import InvalidPolicyError
from progression.curriculum.models import CertificationPolicy, Track
from progression.progress.locking import first_incomplete_lesson
from progression.progress.models import ProgressSnapshot
from progression.progress.schemas import TrackProgress

from .schemas import EligibilityResult, Requirement, RequirementKind


logger = structlog.get_logger(__name__)


def _check_percentage(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidPolicyError(f"{name} must be a number, got {value!r}")
    if math.isnan(value) or not 0 <= value <= 100:
        raise InvalidPolicyError(f"{name} must be within [0, 100], got {value!r}")


def validate_policy(policy: CertificationPolicy) -> None:
    """Fail fast on out-of-range or non-numeric thresholds."""
    _check_percentage("min_completion_percentage", policy.min_completion_percentage)
    if policy.min_assessment_score is not None:
        _check_percentage("min_assessment_score", policy.min_assessment_score)


def _track_policy(track: Track) -> CertificationPolicy:
    if "certification" in track.model_fields_set:
        return track.certification
    return CertificationPolicy(
        min_completion_percentage=get_settings().default_min_completion_percentage
    )


def _meets_completion(progress: TrackProgress, minimum: float) -> bool:
    """Compare exact completion against the threshold.

    The reported percentage is rounded, so 199 of 200 lessons would read as
    100; the decision uses the unrounded ratio instead.
    """
    if progress.total_lessons == 0:
        return progress.completion_percentage >= minimum
    return progress.completed_lessons * 100 >= minimum * progress.total_lessons


def _completion_requirement(
    track: Track,
    progress: TrackProgress,
    policy: CertificationPolicy,
    snapshot: ProgressSnapshot,
) -> Requirement:
    blocking = first_incomplete_lesson(track, snapshot)
    if blocking is None:
        return Requirement(
            kind=RequirementKind.COMPLETION,
            description="Track has no lessons to complete",
            current=progress.completion_percentage,
            required=policy.min_completion_percentage,
        )
    return Requirement(
        kind=RequirementKind.COMPLETION,
        description=(
            f"Complete lesson '{blocking.lesson_id}' in module '{blocking.module_id}'"
        ),
        current=progress.completion_percentage,
        required=policy.min_completion_percentage,
        module_id=blocking.module_id,
        lesson_id=blocking.lesson_id,
        locked=blocking.locked,
    )


def evaluate(
    track: Track,
    progress: TrackProgress,
    policy: CertificationPolicy | None = None,
    *,
    snapshot: ProgressSnapshot,
    assessment_score: float | None = None,
) -> EligibilityResult:
    """Decide certificate eligibility for a track.

    Args:
        track: Track being certified
        progress: Aggregated progress for the track (see compute_progress)
        policy: Certification policy; defaults to the track's own policy, or
            the configured default threshold when the track declares none
        snapshot: Learner progress, used to locate the blocking lesson
        assessment_score: Externally computed assessment score (0-100)

    Returns:
        EligibilityResult with the decision and any missing requirements

    Raises:
        InvalidPolicyError: If the policy thresholds are malformed
    """
    if policy is None:
        policy = _track_policy(track)
    validate_policy(policy)

    missing: list[Requirement] = []

    if not _meets_completion(progress, policy.min_completion_percentage):
        missing.append(_completion_requirement(track, progress, policy, snapshot))

    threshold = policy.min_assessment_score
    if threshold is not None and (assessment_score is None or assessment_score < threshold):
        missing.append(
            Requirement(
                kind=RequirementKind.ASSESSMENT,
                description=(
                    "Take the track assessment"
                    if assessment_score is None
                    else f"Score at least {threshold:g} on the track assessment"
                ),
                current=assessment_score,
                required=threshold,
            )
        )

    result = EligibilityResult(
        track_id=track.id,
        eligible=not missing,
        completion_percentage=progress.completion_percentage,
        assessment_score=assessment_score,
        policy=policy,
        missing_requirements=tuple(missing),
    )
    logger.debug(
        "certificate_eligibility_evaluated",
        track_id=track.id,
        eligible=result.eligible,
        missing=len(missing),
    )
    return result
