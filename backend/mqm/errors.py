"""
MQM CI Bridge — Structured error catalog.

Every error has a code, human message, and suggested fix.
Callers of the REST client only ever see these types.
"""

from __future__ import annotations

from typing import Any


class MqmError(Exception):
    """Base error with structured code + suggestion."""

    def __init__(self, code: str, message: str, suggestion: str = "", detail: Any = None):
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "error_code": self.code,
            "message": self.message,
        }
        if self.suggestion:
            d["suggestion"] = self.suggestion
        if self.detail:
            d["detail"] = self.detail
        return d


class ConfigurationError(MqmError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            code="CONFIGURATION_INVALID",
            message=f"Connection configuration incomplete: {', '.join(missing)}",
            suggestion="Set location, shared_space and client_type before creating a client.",
            detail=missing,
        )


class LocalFileNotFoundError(MqmError):
    """A local resource (e.g. a test-result report) does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            code="LOCAL_FILE_NOT_FOUND",
            message=f"Cannot find test result file: {path}",
            suggestion="Check that the report was written before publishing it.",
        )


class RequestFailedError(MqmError):
    """The server answered, but not with the expected status or payload."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason: str = "",
        description: str = "",
        code: str = "REQUEST_FAILED",
    ):
        self.status_code = status_code
        self.reason = reason
        self.description = description
        super().__init__(
            code=code,
            message=message,
            suggestion="Check the MQM server logs and the request parameters.",
            detail={"status_code": status_code, "reason": reason} if status_code else None,
        )

    @classmethod
    def from_status(
        cls, context: str, status_code: int, reason: str, description: str = ""
    ) -> "RequestFailedError":
        return cls(
            f"{context}; status code {status_code} and reason {reason} [{description}]",
            status_code=status_code,
            reason=reason,
            description=description,
        )


class LoginFailedError(RequestFailedError):
    def __init__(self, status_code: int, reason: str, description: str = ""):
        super().__init__(
            f"Authentication failed; status code {status_code} and reason {reason} [{description}]",
            status_code=status_code,
            reason=reason,
            description=description,
            code="LOGIN_FAILED",
        )


class ResponseParseError(RequestFailedError):
    """Malformed JSON or a missing field in an otherwise successful response."""

    def __init__(self, message: str):
        super().__init__(message, code="RESPONSE_INVALID")


class TransportFailedError(MqmError):
    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            code="TRANSPORT_FAILED",
            message=message,
            suggestion="Check network connectivity and the MQM location URL.",
            detail=type(cause).__name__ if cause else None,
        )


class BuildSchedulerError(MqmError):
    def __init__(self, action: str, job: str, status: int | None = None):
        self.status = status
        suffix = f" (HTTP {status})" if status else ""
        super().__init__(
            code=f"BUILD_{action.upper()}_FAILED",
            message=f"Jenkins refused to {action} '{job}'{suffix}",
            suggestion="Check the Jenkins URL, user and API token.",
        )
