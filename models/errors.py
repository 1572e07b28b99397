"""
Exceptions for the portal captcha solver.

Transport failures are left as ``requests.RequestException`` and are not
wrapped here.
"""


class PortalSolverError(Exception):
    """Base class for solver errors."""
    pass


class ParseError(PortalSolverError):
    """Raised when a portal page cannot be turned into a PortalState."""
    pass


class MissingSessionId(ParseError):
    """Raised when the page carries no PHPSESSID field."""

    def __init__(self, message: str = "PHPSESSID not found"):
        super().__init__(message)


class DecodeError(PortalSolverError):
    """Raised when detections cannot be turned into a solution."""
    pass


class LengthMismatch(DecodeError):
    """Raised when the number of confident detections differs from the expected length."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid captcha length. Expected: {expected}, Got: {actual}")


class TooManyAttempts(PortalSolverError):
    """Raised when a challenge could not be decoded within the attempt budget."""

    def __init__(self, max_attempts: int):
        self.max_attempts = max_attempts
        super().__init__(f"Too many tries ({max_attempts} attempts without a valid decode)")


class CycleAborted(PortalSolverError):
    """Raised at an attempt boundary when the caller asked the cycle to stop."""
    pass


class DetectorError(PortalSolverError):
    """Base class for detector adapter failures."""
    pass


class DetectorUnavailable(DetectorError):
    """Raised when the detection model cannot be loaded."""
    pass


class InvalidImage(DetectorError):
    """Raised when challenge bytes are not a readable image."""
    pass
