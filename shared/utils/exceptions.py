"""Service-level exceptions that map onto HTTP responses."""
from fastapi import HTTPException, status


class FramingServiceException(Exception):
    """Base exception for all application errors."""
    pass


class EmptyMessageException(FramingServiceException):
    """Raised when a turn arrives without any learner text."""

    def __init__(self):
        super().__init__("Missing 'message' in request body")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(self)
        )


class FrameIncompleteException(FramingServiceException):
    """Raised when an export is requested before every Frame slot is filled."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Frame is not complete; missing: {', '.join(missing)}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Frame is not complete", "missing": self.missing}
        )
