"""Request/response envelope shared by the api and backup layers.

Every operation answers ``{"success": bool, "data"?: ..., "error"?: str}``.
Callers must check ``success`` before reading ``data``.
"""

from typing import Any


def ok(data: Any = None) -> dict:
    response = {"success": True}
    if data is not None:
        response["data"] = data
    return response


def fail(error: str) -> dict:
    return {"success": False, "error": error}


def to_payload(value: Any) -> Any:
    """Convert records (and lists of records) into plain dicts."""
    if isinstance(value, list):
        return [to_payload(item) for item in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value
