from __future__ import annotations

import dataclasses
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

import structlog
from flask import Flask, jsonify, request

from ..attendance.model import Location
from ..core.exceptions import (
    AttendanceAlreadyExists,
    DomainError,
    InvalidTransition,
    NotFound,
    PersistenceError,
    ValidationError,
)
from .datetime_utils import parse_hhmm, parse_iso_date

log = structlog.get_logger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (NotFound, 404),
    (InvalidTransition, 409),
    (AttendanceAlreadyExists, 409),
    (PersistenceError, 503),
)


def to_primitive(value: Any) -> Any:
    """Convert domain dataclasses into JSON-friendly structures."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_primitive(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, Mapping):
        return {to_primitive(k): to_primitive(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_primitive(v) for v in value]
    return value


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = 422
        for kind, code in _STATUS_BY_ERROR:
            if isinstance(exc, kind):
                status = code
                break
        if status >= 500:
            log.error("request_failed", path=request.path, error=str(exc))
        return jsonify({"success": False, "error": type(exc).__name__, "message": str(exc)}), status


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def actor() -> str:
    return (request.headers.get("X-Actor") or "").strip()


def optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD") from None


def required_date(value: Optional[str], field_name: str) -> date:
    parsed = optional_date(value, field_name)
    if parsed is None:
        raise ValidationError(f"{field_name} is required")
    return parsed


def optional_time(value: Optional[str], field_name: str) -> Optional[time]:
    if not value:
        return None
    try:
        return parse_hhmm(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM") from None


def optional_location(data: Any) -> Optional[Location]:
    if not isinstance(data, Mapping):
        return None
    captured = data.get("captured_at") or data.get("timestamp")
    try:
        return Location(
            latitude=float(data["latitude"]) if data.get("latitude") is not None else None,
            longitude=float(data["longitude"]) if data.get("longitude") is not None else None,
            accuracy=float(data["accuracy"]) if data.get("accuracy") is not None else None,
            captured_at=datetime.fromisoformat(captured) if captured else None,
            note=data.get("note"),
        )
    except (TypeError, ValueError):
        raise ValidationError("location is malformed") from None
