"""
Exception types raised by the recommendation engine and its collaborators.
"""


class VolunteerMatchError(Exception):
    """Base class for all volunteermatch errors."""
    pass


class InvalidPathError(VolunteerMatchError, ValueError):
    """Raised when a request names an impact path we don't recognize."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Invalid path choice: {path!r}")


class DatasetError(VolunteerMatchError):
    """Raised when a catalog file is missing, empty, or malformed."""
    pass


class GeneratorError(VolunteerMatchError):
    """Raised when the external rationale generator can't produce output."""
    pass


class RequestError(VolunteerMatchError, ValueError):
    """Raised when an incoming request body can't be parsed."""
    pass
