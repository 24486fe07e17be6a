"""Health check result normalization."""

from typing import Any

from notur_core.types import HealthState

_STATUS_MAP = {
    "ok": HealthState.OK,
    "pass": HealthState.OK,
    "healthy": HealthState.OK,
    "warn": HealthState.WARNING,
    "warning": HealthState.WARNING,
    "error": HealthState.ERROR,
    "fail": HealthState.ERROR,
    "critical": HealthState.ERROR,
}


def normalize_status(raw: Any) -> HealthState:
    return _STATUS_MAP.get(str(raw).lower(), HealthState.UNKNOWN)


def normalize_health_results(
    results: list[Any] | dict[str, Any],
) -> list[dict[str, Any]]:
    """Normalize provider output into a list of uniform entries.

    Accepts a list of entries or a mapping of id -> entry. Entries that are
    not mappings, or that have no usable id, are dropped.

    Returns:
        Entries with ``id``, ``status``, ``message``, ``details`` and ``checked_at``.
        Details that are not a mapping are wrapped as ``{"value": ...}``.
    """
    items = results.items() if isinstance(results, dict) else enumerate(results)

    normalized: list[dict[str, Any]] = []
    for key, entry in items:
        if not isinstance(entry, dict):
            continue

        check_id = entry.get("id") or (key if isinstance(key, str) else None)
        if not isinstance(check_id, str) or not check_id:
            continue

        message = entry.get("message")
        details = entry.get("details")
        if details is not None and not isinstance(details, dict):
            details = {"value": details}
        checked_at = entry.get("checked_at")
        normalized.append(
            {
                "id": check_id,
                "status": normalize_status(entry.get("status", "unknown")).value,
                "message": str(message) if message is not None else None,
                "details": details,
                "checked_at": str(checked_at) if checked_at is not None else None,
            }
        )

    return normalized
