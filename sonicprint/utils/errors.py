"""
Custom exceptions for sonicprint.

Every error raised by the library derives from SonicprintError so callers
can catch a single type around decoding, analysis and configuration.
"""

from typing import Any, Optional


class SonicprintError(Exception):
    """Base exception for all sonicprint errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class DecodingError(SonicprintError):
    """Raised when an audio file cannot be decoded into samples."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class UnsupportedFormatError(DecodingError):
    """Raised when the audio container is not supported."""

    def __init__(self, message: str, format: Optional[str] = None):
        super().__init__(message)
        self.format = format
        self.details = {"format": format}


class FileTooLargeError(DecodingError):
    """Raised when an audio file exceeds the configured size limit."""

    def __init__(
        self,
        message: str,
        file_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        super().__init__(message)
        self.file_size = file_size
        self.max_size = max_size
        self.details = {"file_size": file_size, "max_size": max_size}


class AnalysisError(SonicprintError):
    """Raised when a sample buffer cannot be turned into an Analysis."""

    def __init__(
        self,
        message: str,
        analyzer_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.analyzer_name = analyzer_name
        self.original_error = original_error
        if analyzer_name or original_error:
            self.details = {
                "analyzer_name": analyzer_name,
                "original_error": str(original_error) if original_error else None,
            }


class IncompatibleAnalysisError(AnalysisError):
    """Raised when analyses of different feature versions are mixed."""

    def __init__(self, message: str, expected: Any = None, found: Any = None):
        super().__init__(message)
        self.expected = expected
        self.found = found
        self.details = {"expected": expected, "found": found}


class ProviderError(SonicprintError):
    """Raised by storage collaborators that persist songs."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider
        self.details = {"provider": provider}


class ConfigurationError(SonicprintError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key
        self.details = {"config_key": config_key}
