class TrackerError(Exception):
    """Base class for tracker errors."""


class AuthError(TrackerError):
    """Sign-in or sign-out failed, or an action needs a signed-in user."""


class StorageError(TrackerError):
    """A read or write against the document store failed."""


class WorkoutValidationError(TrackerError, ValueError):
    """Draft input was rejected before any state changed."""

    message = "invalid input"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class NoValidExercises(WorkoutValidationError):
    message = "Please add at least one exercise with sets"


class MissingDuration(WorkoutValidationError):
    message = "Please enter workout duration"


class MissingDate(WorkoutValidationError):
    message = "Please select a date"


class MissingWeight(WorkoutValidationError):
    message = "Please enter your weight"
