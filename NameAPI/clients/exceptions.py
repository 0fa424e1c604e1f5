"""
API Client Exceptions

Error taxonomy for the thin client. Configuration and protocol errors surface
immediately; transport and API errors are only raised once the retry budget
of a request is spent.
"""

from typing import Optional, Dict, Any


class NameAPIError(Exception):
    """Base exception for all NameAPI client errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a plain dictionary"""
        return {"error_code": self.error_code, "message": self.message, "details": self.details}


class ConfigurationError(NameAPIError):
    """Raised when client configuration is missing or invalid"""

    def __init__(self, message: str = "Configuration error",
                 field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message, error_code="CONFIGURATION_ERROR")
        self.field_errors = field_errors or {}

        if field_errors:
            self.details.update({"field_errors": field_errors})


class ProtocolError(NameAPIError):
    """Raised when a request asks for an HTTP verb the transport cannot issue"""

    def __init__(self, message: str = "Unsupported HTTP method", verb: Optional[str] = None):
        super().__init__(message, error_code="PROTOCOL_ERROR")
        self.verb = verb

        if verb is not None:
            self.details.update({"verb": verb})


class TransportError(NameAPIError):
    """Raised when network-level errors persist after all retries"""

    def __init__(self, message: str = "Network error",
                 request: Optional[Dict[str, Any]] = None,
                 attempts: Optional[int] = None):
        super().__init__(message, error_code="TRANSPORT_ERROR")
        self.request = request or {}
        self.attempts = attempts

        self.details.update({"request": self.request, "attempts": attempts})


class RequestTimeoutError(TransportError):
    """Raised when API requests time out"""

    def __init__(self, message: str = "Request timeout",
                 timeout_duration: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.error_code = "TIMEOUT_ERROR"
        self.timeout_duration = timeout_duration

        if timeout_duration is not None:
            self.details.update({"timeout_duration": timeout_duration})


class ApiError(NameAPIError):
    """Raised for 4xx/5xx responses when the client is configured as fatal"""

    def __init__(self, message: str, status_code: int,
                 response_data: Any = None,
                 request: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="API_ERROR")
        self.status_code = status_code
        self.response_data = response_data
        self.request = request or {}

        self.details.update({
            "status_code": status_code,
            "response_data": response_data,
            "request": self.request,
        })
