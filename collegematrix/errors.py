"""Exception types raised by the persistence and session layers."""


class CollegeMatrixError(Exception):
    """Base class for all collegematrix errors."""
    pass


class TransportError(CollegeMatrixError):
    """Raised when the document store cannot be reached or a write fails."""
    pass


class DocumentNotFoundError(CollegeMatrixError):
    """Raised when a merge-update targets a document that does not exist."""
    pass


class ValidationError(CollegeMatrixError):
    """Raised when a session mutation receives an out-of-range value."""
    pass


class SchoolLimitError(CollegeMatrixError):
    """Raised when adding a school would exceed the user's tier limit."""

    def __init__(self, limit: int, is_premium: bool):
        self.limit = limit
        self.is_premium = is_premium
        if is_premium:
            msg = f"You've added the maximum of {limit} schools."
        else:
            msg = (
                f"You've added the maximum of {limit} schools. "
                "Upgrade to premium to compare more schools."
            )
        super().__init__(msg)


class MandatoryCategoryError(CollegeMatrixError):
    """Raised when removing a category the decision matrix requires."""
    pass


class InvalidCodeError(CollegeMatrixError):
    """Raised when a premium code is not recognised."""
    pass


class ConfigurationError(CollegeMatrixError):
    """Raised when a setting from the environment is unusable."""
    pass
