"""Validation of public form submissions against the owning form's fields.

Each FormField type accepts a specific value shape:

- text, textarea, phone: string
- email: string that looks like an address
- select, radio: one of the field's options
- checkbox: a boolean, or a list of the field's options
- date: ISO date string (YYYY-MM-DD)
- event-select: an event id, listed on the field when it restricts choices

Keys that do not belong to the form are kept as submitted.
"""

import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from eventtrackpro.models.field_type import FieldType
from eventtrackpro.models.form import Form, FormField

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class SubmissionValidationError(ValueError):
    """Raised when submitted data does not match the form's fields"""

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        super().__init__("; ".join(f"{e['label']}: {e['message']}" for e in errors))


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    # An unchecked single checkbox counts as missing for required fields
    return value is False


def _lookup(form_data: Dict[str, Any], field_id: str) -> Any:
    if field_id in form_data:
        return form_data[field_id]
    # Accept the dash-free spelling some clients send
    return form_data.get(field_id.replace("-", ""))


def _check_value(
    field: FormField, value: Any, known_event_ids: Optional[Iterable[int]]
) -> Optional[str]:
    """Return an error message for a non-blank value, or None if it is valid"""
    if field.type in (FieldType.TEXT, FieldType.TEXTAREA, FieldType.PHONE):
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            return "must be text"
        return None

    if field.type == FieldType.EMAIL:
        if not isinstance(value, str) or not _EMAIL_PATTERN.match(value.strip()):
            return "must be a valid email address"
        return None

    if field.type in (FieldType.SELECT, FieldType.RADIO):
        if value not in (field.options or []):
            return "is not one of the available options"
        return None

    if field.type == FieldType.CHECKBOX:
        if isinstance(value, bool):
            return None
        values = value if isinstance(value, list) else [value]
        invalid = [v for v in values if v not in (field.options or [])]
        if invalid:
            return "contains options that are not available"
        return None

    if field.type == FieldType.DATE:
        try:
            date.fromisoformat(str(value))
        except ValueError:
            return "must be a date in YYYY-MM-DD format"
        return None

    if field.type == FieldType.EVENT_SELECT:
        try:
            event_id = int(value)
        except (TypeError, ValueError):
            return "must reference an event"
        allowed = field.event_ids or (
            list(known_event_ids) if known_event_ids else None
        )
        if allowed is not None and event_id not in allowed:
            return "references an event that is not available"
        return None

    return None


def validate_submission(
    form: Form,
    form_data: Dict[str, Any],
    known_event_ids: Optional[Iterable[int]] = None,
) -> Dict[str, Any]:
    """
    Validate submitted data against a form.

    Args:
        form: The form linked to the event being registered for
        form_data: Submitted values keyed by field id
        known_event_ids: Event ids an event-select field may reference when the
            field itself does not restrict them

    Returns:
        The submitted data, unchanged, when it is valid

    Raises:
        SubmissionValidationError: With one entry per offending field
    """
    errors: List[Dict[str, str]] = []
    if known_event_ids is not None:
        known_event_ids = list(known_event_ids)

    for field in form.get_fields():
        value = _lookup(form_data, field.id)
        required = field.required or form.require_all_fields

        if _is_blank(value):
            if required:
                errors.append(
                    {"field": field.id, "label": field.label, "message": "is required"}
                )
            continue

        message = _check_value(field, value, known_event_ids)
        if message:
            errors.append({"field": field.id, "label": field.label, "message": message})

    if errors:
        raise SubmissionValidationError(errors)
    return form_data
