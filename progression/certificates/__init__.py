"""Certificate eligibility module."""

from .eligibility import evaluate, validate_policy
from .schemas import EligibilityResult, Requirement, RequirementKind


__all__ = [
    "EligibilityResult",
    "Requirement",
    "RequirementKind",
    "evaluate",
    "validate_policy",
]
