"""Enums for the application"""

from enum import Enum


class FieldType(str, Enum):
    """Enum for form field types"""

    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DATE = "date"
    EVENT_SELECT = "event-select"


# Field types that must carry a non-empty option list
OPTION_FIELD_TYPES = frozenset({FieldType.SELECT, FieldType.CHECKBOX, FieldType.RADIO})
