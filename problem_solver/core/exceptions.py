"""
Exceptions raised by the problem solving services
"""


class ProblemSolverError(Exception):
    """Base class for all service errors"""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProblemValidationError(ProblemSolverError, ValueError):
    """Submitted input is missing or malformed"""


class ImageProcessingError(ProblemSolverError):
    """An image could not be decoded, resized, cropped or encoded"""


class ProblemNotFoundError(ProblemSolverError):
    """No record exists for the requested id"""

    status_code = 404


class SolutionAlreadyAttachedError(ProblemSolverError):
    """A solution was attached to a record that already has one"""

    status_code = 409
