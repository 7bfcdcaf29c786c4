"""
ANGAGU Backend — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for the few failures that are raised
       instead of returned.
How:   Route handlers raise ApiError with an HTTP status and an errCode; the
       global handler registered in main.py renders the error envelope.
       Services return ServiceResult values and only raise for programming
       errors; the SMS gateway raises SmsGatewayError on transport failure.

Exception Hierarchy:
    AngaguError (base)
    ├── ApiError          → envelope with the carried status and errCode
    └── SmsGatewayError   → translated by the SMS handlers into errCode 403
"""

from typing import Any, Dict, Optional

from angagu.error_codes import ErrCode, message_for


class AngaguError(Exception):
    """
    Base exception for all ANGAGU application errors.

    Attributes:
        message:  Human-readable description
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ApiError(AngaguError):
    """
    Terminates a request with the error envelope.

    What:    Carries the HTTP status, the errCode and optional extra fields
             placed next to `errCode` in the envelope's `data`.
    When:    Raised by handlers and by the authorization dependencies.

    Example response (ApiError(404, ErrCode.INVALID_PHONE)):
        {
            "status": "error",
            "data": {"errCode": 104},
            "message": "The phone number is not valid."
        }
    """

    def __init__(
        self,
        status_code: int,
        err_code: int = ErrCode.UNKNOWN,
        extra: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message_for(err_code), context=context)
        self.status_code = status_code
        self.err_code = int(err_code)
        self.extra = extra or {}

    def __repr__(self) -> str:
        return f"<ApiError(status={self.status_code}, errCode={self.err_code})>"


class SmsGatewayError(AngaguError):
    """
    Raised when the SMS provider cannot be reached or rejects the request
    at the transport level (timeout, connection error, non-JSON body).
    """

    def __init__(
        self,
        message: str = "SMS provider request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
