"""
ANGAGU Backend — Response Envelope
===================================

What:  The `{status, data, message}` shape every endpoint answers with.
How:   Success bodies are built by `ok()` and validated against
       `Envelope[<payload model>]` through the route's response_model.
       Error bodies are built by `error_body()` in the exception handlers
       registered in main.py; they never pass through a response_model.

Examples:
    success  {"status": "success", "data": {"id": 7}, "message": "OK"}
    error    {"status": "error", "data": {"errCode": 101}, "message": "The email address is not valid."}
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from angagu.error_codes import message_for

T = TypeVar("T")

SUCCESS = "success"
ERROR = "error"
SUCCESS_MESSAGE = "OK"


class Envelope(BaseModel, Generic[T]):
    status: str = Field(default=SUCCESS, description="success or error")
    data: Optional[T] = Field(default=None, description="Payload, or {errCode, ...} on error")
    message: str = Field(default=SUCCESS_MESSAGE, description="Human-readable outcome")


class ErrorEnvelope(BaseModel):
    """Documented shape of every non-2xx body."""
    status: str = Field(default=ERROR)
    data: Dict[str, Any] = Field(description="Always carries `errCode`")
    message: str


class IdData(BaseModel):
    id: int


class TokenData(BaseModel):
    token: str


def ok(data: Any = None) -> Dict[str, Any]:
    return {"status": SUCCESS, "data": data, "message": SUCCESS_MESSAGE}


def error_body(err_code: int, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {"errCode": int(err_code)}
    if extra:
        data.update(extra)
    return {"status": ERROR, "data": data, "message": message_for(err_code)}


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    sms_gateway: str = Field(description="SMS provider credentials: configured, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
