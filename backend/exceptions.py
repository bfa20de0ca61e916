"""
Dataset Analyzer Exceptions - Centralized error handling
"""
from fastapi import HTTPException, status
from typing import Any, Optional


class AnalyzerException(Exception):
    """Base exception for the dataset analyzer"""
    retryable: bool = False

    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class UnsupportedFormatError(AnalyzerException):
    """Extension not recognized, or recognized but only assessable manually"""

    def __init__(self, message: str, detection: Any = None):
        super().__init__(message, details=detection)
        self.detection = detection
        self.manual_assessment = True


class FileTooLargeError(AnalyzerException):
    """Upload exceeds the hard size limit"""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"File size ({size / 1024 / 1024:.1f}MB) exceeds maximum limit of "
            f"{limit / 1024 / 1024:.0f}MB. Please use a smaller file or manual assessment.",
            details={"size": size, "limit": limit},
        )


class ParseError(AnalyzerException):
    """Malformed file content"""
    retryable = True


class EmptyDatasetError(ParseError):
    """File parsed but holds no rows or no columns"""


class EthicalServiceUnavailableError(AnalyzerException):
    """Ethical analysis service timed out, failed or answered garbage"""
    retryable = True


# HTTP Exception helpers for consistent responses
def not_found(resource: str, id: str | int) -> HTTPException:
    """Return 404 Not Found"""
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{resource} with ID '{id}' not found"
    )


def bad_request(message: str, details: Any = None) -> HTTPException:
    """Return 400 Bad Request"""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": message, "details": details} if details else message
    )


def file_too_large(message: str) -> HTTPException:
    """Return 413 Payload Too Large"""
    return HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail=message
    )


def invalid_file_type(message: str, detection: Optional[dict] = None) -> HTTPException:
    """Return 415 Unsupported Media Type"""
    return HTTPException(
        status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        detail={"message": message, "format_detection": detection, "manual_assessment": True}
    )


def to_http_exception(error: AnalyzerException) -> HTTPException:
    """Map an engine error onto the matching HTTP response"""
    if isinstance(error, UnsupportedFormatError):
        detection = error.detection.model_dump(by_alias=True) if error.detection is not None else None
        return invalid_file_type(error.message, detection)
    if isinstance(error, FileTooLargeError):
        return file_too_large(error.message)
    return bad_request(error.message)
