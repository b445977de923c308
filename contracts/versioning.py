"""Report versioning for serialized pitch and session analyses."""

from __future__ import annotations

from typing import Any, Dict, Optional

SCHEMA_VERSION = "1.0.0"
APP_VERSION = "1.0.0"


def make_envelope(payload: Dict[str, Any], kind: Optional[str] = None) -> Dict[str, Any]:
    """Wrap a report payload with schema/app versions.

    Args:
        payload: JSON-serializable report body
        kind: Optional report type tag (e.g. "session_analysis")
    """
    envelope: Dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "app_version": APP_VERSION,
    }
    if kind is not None:
        envelope["kind"] = kind
    envelope["payload"] = payload
    return envelope
