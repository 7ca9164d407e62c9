"""Field normalization applied to request payloads before any business rule."""

from __future__ import annotations

from typing import Any

CLIENT_UPPERCASE_FIELDS = ("id_or_passport", "license_number")
VEHICLE_UPPERCASE_FIELDS = ("license_plate",)


def _normalize(fields: dict[str, Any], uppercase: tuple[str, ...]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, value in fields.items():
        if isinstance(value, str):
            value = value.strip()
            if name in uppercase:
                value = value.upper()
        out[name] = value
    return out


def normalize_client_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Trim every string; uppercase ID/passport and licence numbers."""
    return _normalize(fields, CLIENT_UPPERCASE_FIELDS)


def normalize_vehicle_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Trim every string; uppercase the licence plate."""
    return _normalize(fields, VEHICLE_UPPERCASE_FIELDS)


def coerce_ref(value: Any) -> str | None:
    """Reduce a client/vehicle reference to its id.

    Accepts a bare id or an object carrying ``id`` (or ``_id``). Blank
    values come back as None.
    """
    if isinstance(value, dict):
        value = value.get("id") or value.get("_id")
    if value is None:
        return None
    value = str(value).strip()
    return value or None
