"""Shared request validation helpers for the API routers."""

import re
from datetime import date
from typing import Annotated, Optional

from pydantic import AfterValidator, AliasChoices

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def either_case(name: str) -> AliasChoices:
    """Accept both snake_case and camelCase spellings of a body field.

    The browser client sends camelCase keys (eventId, formData); API
    consumers may use snake_case.
    """
    head, *rest = name.split("_")
    camel = head + "".join(part.title() for part in rest)
    return AliasChoices(name, camel)


def reject_null(value):
    """Reject an explicit null for a column that cannot be cleared"""
    if value is None:
        raise ValueError("may not be null")
    return value


def check_iso_date(value: Optional[str]) -> Optional[str]:
    """Validate a YYYY-MM-DD date string, returning it unchanged"""
    if value is None:
        return value
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError("must be a date in YYYY-MM-DD format")
    return value


def check_time(value: Optional[str]) -> Optional[str]:
    """Validate an HH:MM[:SS] time string; blank strings become None"""
    if value is None or not value.strip():
        return None
    if not _TIME_PATTERN.match(value.strip()):
        raise ValueError("must be a time in HH:MM format")
    return value.strip()


IsoDate = Annotated[str, AfterValidator(check_iso_date)]
OptionalIsoDate = Annotated[Optional[str], AfterValidator(check_iso_date)]
ClockTime = Annotated[Optional[str], AfterValidator(check_time)]
