"""Payload builders - turn domain records into flat webhook payloads.

Zapier and similar no-code consumers work best with a single-level map of
primitive values and stable snake_case keys, so every builder here returns
exactly that. Builders are pure: the same inputs always produce the same
payload, and malformed values are coerced instead of raising.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from eventtrackpro.models.event import Event
from eventtrackpro.models.registration import Registration
from eventtrackpro.utils.field_labels import FieldLabelResolver, to_snake_case

logger = logging.getLogger(__name__)

UNKNOWN_EVENT_TITLE = "Unknown Event"
UNKNOWN_PARTICIPANT = "Unknown Participant"

# Keys the public form adds next to the form's own fields
_SKIPPED_CONTACT_KEYS = {"eventName"}


def _coerce_value(value: Any) -> Any:
    """Coerce a submitted value into something JSON-friendly and flat"""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple, set)):
        return [
            item if isinstance(item, (str, int, float, bool)) else str(item)
            for item in value
        ]
    if isinstance(value, dict):
        try:
            return json.dumps(value, sort_keys=True, default=str)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def _isoformat(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def extract_contact_fields(
    form_data: Dict[str, Any], resolver: Optional[FieldLabelResolver] = None
) -> Tuple[str, str, str]:
    """
    Best-effort first name, last name and email extraction.

    Both the raw submission key and its resolved label are scanned
    case-insensitively, so forms keyed by opaque ids still work.

    Args:
        form_data: Submitted data keyed by field id
        resolver: Label resolver for the form the data belongs to

    Returns:
        Tuple of (first_name, last_name, email), empty strings when not found
    """
    resolver = resolver or FieldLabelResolver()
    first_name = ""
    last_name = ""
    email = ""
    full_name = ""

    if not isinstance(form_data, dict):
        return first_name, last_name, email

    for position, (key, value) in enumerate(form_data.items(), start=1):
        if key in _SKIPPED_CONTACT_KEYS:
            continue
        key = str(key)
        candidates = (key.lower(), resolver.resolve(key, position).lower())

        # "fullname" contains "lname", so it is matched first
        if any("fullname" in c or "full name" in c for c in candidates):
            full_name = full_name or _as_text(value)
        elif any("first" in c or "fname" in c for c in candidates):
            first_name = _as_text(value)
        elif any("last" in c or "lname" in c for c in candidates):
            last_name = _as_text(value)
        elif any("email" in c for c in candidates):
            email = _as_text(value)
        elif not full_name and any("name" in c for c in candidates):
            full_name = _as_text(value)

    if not first_name and not last_name and full_name.strip():
        parts = full_name.strip().split(None, 1)
        first_name = parts[0]
        last_name = parts[1] if len(parts) > 1 else ""

    return first_name, last_name, email


def extract_participant_name(
    form_data: Dict[str, Any], resolver: Optional[FieldLabelResolver] = None
) -> str:
    """Display name for a registrant, used by attendance payloads"""
    first_name, last_name, _ = extract_contact_fields(form_data, resolver)
    name = " ".join(part for part in (first_name, last_name) if part)
    return name or UNKNOWN_PARTICIPANT


def build_registration_payload(
    registration: Registration,
    event: Optional[Event],
    resolver: Optional[FieldLabelResolver] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the flat registration.created payload.

    Args:
        registration: The registration being forwarded
        event: Its event, or None if the event was deleted
        resolver: Label resolver built from the event's linked form
        extra: Additional top-level keys (e.g. manual trigger metadata)

    Returns:
        Single-level dict of primitive values with snake_case keys
    """
    resolver = resolver or FieldLabelResolver()
    form_data = registration.form_data
    if not isinstance(form_data, dict):
        form_data = {}
    first_name, last_name, email = extract_contact_fields(form_data, resolver)

    payload: Dict[str, Any] = {
        "event_title": (event.title if event else None) or UNKNOWN_EVENT_TITLE,
        "event_description": (event.description if event else None) or "",
        "event_date": (event.date if event else None) or "",
        "event_location": (event.location if event else None) or "",
        "event_start_time": (event.start_time if event else None) or "",
        "event_end_time": (event.end_time if event else None) or "",
        "event_capacity": (event.capacity if event else None) or 0,
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "registration_id": registration.id,
        "registration_status": _as_text(
            getattr(registration.status, "value", registration.status)
        ),
        "webhook_status": _as_text(
            getattr(registration.webhook_status, "value", registration.webhook_status)
        ),
        "submitted_at": _isoformat(registration.created_at),
    }
    reserved = set(payload)

    for position, (key, value) in enumerate(form_data.items(), start=1):
        key = str(key)
        coerced = _coerce_value(value)
        label_key = to_snake_case(resolver.resolve(key, position))
        if label_key and label_key not in reserved:
            payload[label_key] = coerced
        # Always present so an unresolved label can be traced back to its field
        payload[f"form_{key}"] = coerced

    if extra:
        payload.update(extra)

    return payload


def build_event_payload(
    event: Event, registration_count: int = 0, base_url: str = ""
) -> Dict[str, Any]:
    """Canonical event.created / event.updated payload"""
    location = event.location or ""
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description or "",
        "date": event.date,
        "location": location,
        "is_online": not location or location.lower() == "online",
        "capacity": event.capacity,
        "registrations_count": registration_count,
        "available_spots": max(0, event.capacity - registration_count),
        "event_url": f"{base_url.rstrip('/')}/events/{event.id}",
        "created_at": _isoformat(event.created_at),
        "start_time": event.start_time or None,
        "end_time": event.end_time or None,
    }


def build_attendance_payload(
    event: Event,
    registration: Registration,
    resolver: Optional[FieldLabelResolver] = None,
) -> Dict[str, Any]:
    """attendance.updated payload"""
    return {
        "event_id": event.id,
        "event_title": event.title,
        "registration_id": registration.id,
        "participant_name": extract_participant_name(registration.form_data, resolver),
        "attended": bool(registration.attended),
        "attendance_notes": registration.attendance_notes or "",
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
