"""Error taxonomy for the progression engine.

Every error carries a human-readable ``message`` and a stable ``code`` the
presentation layer can map to its own responses. Nothing here is retried or
recovered locally; errors propagate to the immediate caller.
"""


class ProgressionError(Exception):
    """Base progression error."""

    def __init__(self, message: str, code: str = "progression_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(ProgressionError):
    """Referenced track, module or lesson is absent from the catalog."""

    def __init__(self, message: str = "Curriculum entry not found"):
        super().__init__(message, "not_found")


class CatalogValidationError(ProgressionError):
    """Catalog content violates a structural rule (e.g. duplicate ids)."""

    def __init__(self, message: str = "Invalid curriculum catalog"):
        super().__init__(message, "invalid_catalog")


class InvalidTransitionError(ProgressionError):
    """Status change would regress a lesson or is otherwise not permitted."""

    def __init__(
        self,
        message: str = "Lesson status transition not allowed",
        code: str = "invalid_transition",
    ):
        super().__init__(message, code)


class LessonLockedError(InvalidTransitionError):
    """Forward transition requested on a lesson that is still locked."""

    def __init__(self, message: str = "Lesson is locked"):
        super().__init__(message, "lesson_locked")


class InvalidPolicyError(ProgressionError):
    """Certification policy parameters are malformed."""

    def __init__(self, message: str = "Invalid certification policy"):
        super().__init__(message, "invalid_policy")
