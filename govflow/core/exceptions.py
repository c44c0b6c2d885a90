"""Core application exceptions."""


class GovFlowBaseException(Exception):
    """Base exception class for the GovFlow application."""

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(GovFlowBaseException):
    """Raised when data validation fails."""

    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR")


class NotFoundError(GovFlowBaseException):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str):
        super().__init__(message, "NOT_FOUND")


class ExtractionError(GovFlowBaseException):
    """Raised when an extraction adapter returns unusable output."""

    def __init__(self, message: str):
        super().__init__(message, "EXTRACTION_ERROR")


class ExternalServiceError(GovFlowBaseException):
    """Raised when external service calls fail."""

    def __init__(self, message: str, service: str = None, status_code: int = None):
        self.service = service
        self.status_code = status_code
        super().__init__(message, "EXTERNAL_SERVICE_ERROR")

    @property
    def is_retryable(self) -> bool:
        """Transport failures and 5xx responses are worth another attempt."""
        return self.status_code is None or self.status_code >= 500


class ConfigurationError(GovFlowBaseException):
    """Raised when application configuration is invalid."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")


class RateLimitError(GovFlowBaseException):
    """Raised when rate limits are exceeded."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message, "RATE_LIMIT_ERROR")
