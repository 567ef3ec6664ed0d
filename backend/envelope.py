"""Uniform response envelope: {success, data?, error?, timestamp}."""

from datetime import datetime, timezone
from typing import Any


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def success(data: Any) -> dict:
    return {"success": True, "data": data, "timestamp": _now()}


def failure(code: str, message: str) -> dict:
    return {
        "success": False,
        "error": {"code": code, "message": message},
        "timestamp": _now(),
    }
