"""Gateway exceptions and RFC 7807 Problem Detail decoding."""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import ValidationError

BASE_ERROR_URI = "https://payroll.local/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for every failure surfaced to a screen."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, list[str]]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)

    @property
    def recoverable(self) -> bool:
        """Whether the screen may offer a manual retry."""
        return True

    def to_problem(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": f"{BASE_ERROR_URI}/{self.error_type}",
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
        }
        if self.errors:
            body["errors"] = self.errors
        return body


class TransportError(AppException):
    """Network failure, timeout or 5xx — the whole load may be retried."""

    def __init__(self, detail: str = "The payroll service is unavailable.", status_code: int = 503) -> None:
        super().__init__(
            status_code=status_code,
            error_type="transport",
            title="Service Unavailable",
            detail=detail,
        )


class MalformedResponseError(TransportError):
    """The service answered, but not with a valid record."""

    def __init__(self, entity_type: str, errors: dict[str, list[str]]) -> None:
        super().__init__(detail=f"The service returned an invalid {entity_type}.", status_code=502)
        self.error_type = "malformed-response"
        self.errors = errors


class AuthError(AppException):
    """401/403 — session no longer valid; caller re-authenticates."""

    def __init__(self, detail: str = "Your session has expired. Please sign in again.", status_code: int = 401) -> None:
        super().__init__(
            status_code=status_code,
            error_type="unauthorized",
            title="Unauthorized",
            detail=detail,
        )

    @property
    def recoverable(self) -> bool:
        return False


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any, detail: Optional[str] = None) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=detail or f"{entity_type} with id '{entity_id}' does not exist.",
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConflictError(AppException):
    """409 — the record's current state does not permit the transition."""

    def __init__(self, detail: str = "The record was changed by someone else.") -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Conflict",
            detail=detail,
        )


class ValidationException(AppException):
    """400/422 — per-field validation failures."""

    def __init__(self, errors: dict[str, list[str]], detail: str = "One or more fields failed validation.") -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail=detail,
            errors=errors,
        )


class BusyError(AppException):
    """A mutation is already executing on this screen."""

    def __init__(self, detail: str = "Another action is still in progress.") -> None:
        super().__init__(
            status_code=409,
            error_type="busy",
            title="Busy",
            detail=detail,
        )


# ── pydantic → field errors ─────────────────────────────────────────

def field_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Flatten a pydantic ``ValidationError`` into ``{field: [messages]}``."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = ".".join(str(p) for p in loc) if loc else "__root__"
        msg = err.get("msg", "Invalid value")
        errors.setdefault(name, []).append(msg.removeprefix("Value error, "))
    return errors


# ── HTTP response → exception ───────────────────────────────────────

def error_from_response(
    response: httpx.Response,
    *,
    entity_type: str = "Record",
    entity_id: Any = None,
) -> AppException:
    """Map a non-2xx response to the matching ``AppException``.

    Reads RFC 7807 ``application/problem+json`` bodies as well as the plain
    ``{"message": ...}`` / ``{"errors": {...}}`` shapes the service emits.
    """
    status = response.status_code
    body = _json_body(response)
    detail = _detail(body) or response.reason_phrase or f"HTTP {status}"

    if status in (401, 403):
        return AuthError(detail=detail, status_code=status)
    if status == 404:
        return NotFoundException(entity_type, entity_id, detail=_detail(body))
    if status == 409:
        return ConflictError(detail=detail)
    if status in (400, 422):
        errors = _errors(body)
        if errors:
            return ValidationException(errors, detail=detail)
        return ValidationException({"__root__": [detail]}, detail=detail)
    return TransportError(detail=detail, status_code=status)


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _detail(body: dict[str, Any]) -> Optional[str]:
    for key in ("detail", "message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _errors(body: dict[str, Any]) -> dict[str, list[str]]:
    raw = body.get("errors") or body.get("fieldErrors")
    if not isinstance(raw, dict):
        return {}
    errors: dict[str, list[str]] = {}
    for field, messages in raw.items():
        if isinstance(messages, str):
            errors[field] = [messages]
        elif isinstance(messages, list):
            errors[field] = [str(m) for m in messages]
    return errors
