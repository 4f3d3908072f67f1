"""Field label resolution for webhook payloads"""

import re
from typing import Dict, Iterable, Mapping, Optional

# Some clients strip the dashes from field ids before submitting
_DASHLESS_ID = re.compile(
    r"^([0-9a-zA-Z]{8})([0-9a-zA-Z]{4})([0-9a-zA-Z]{4})([0-9a-zA-Z]{4})([0-9a-zA-Z]{12})$"
)
_DASHED_ID = re.compile(
    r"^[0-9a-zA-Z]{8}-[0-9a-zA-Z]{4}-[0-9a-zA-Z]{4}-[0-9a-zA-Z]{4}-[0-9a-zA-Z]{12}$"
)


def normalize_field_id(key: str) -> str:
    """
    Reinsert dashes into a dash-free 32 character identifier.

    Keys that do not look like a dash-free identifier are returned unchanged.

    Args:
        key: Raw submission key

    Returns:
        The key in 8-4-4-4-12 dashed form when applicable
    """
    match = _DASHLESS_ID.match(key)
    if not match:
        return key
    return "-".join(match.groups())


def looks_like_field_id(key: str) -> bool:
    """True if the key is a generated field identifier, dashed or not"""
    return bool(_DASHED_ID.match(key) or _DASHLESS_ID.match(key))


def resolve_field_label(key: str, labels: Mapping[str, str]) -> str:
    """
    Resolve a submission key to a human-readable label.

    Both the dashed and dash-free forms of the key are looked up. When neither
    is present the original key is returned, so resolution never fails.

    Args:
        key: Submission data key (usually a FormField id)
        labels: Mapping of field id to display label

    Returns:
        The best available label for the key
    """
    label = labels.get(normalize_field_id(key)) or labels.get(key)
    return label or key


def to_snake_case(label: str) -> str:
    """Lowercase, collapse whitespace to underscores, drop anything else non-alphanumeric"""
    snake = re.sub(r"\s+", "_", label.lower())
    return re.sub(r"[^a-z0-9_]", "", snake)


class FieldLabelResolver:
    """Label lookup scoped to a single form.

    Built from the form linked to a registration's event and handed to the
    payload builder explicitly.
    """

    def __init__(
        self, labels: Optional[Mapping[str, str]] = None, form_known: bool = False
    ):
        self.labels: Dict[str, str] = {}
        for field_id, label in (labels or {}).items():
            self.labels[normalize_field_id(field_id)] = label
        self.form_known = form_known

    @classmethod
    def from_form(cls, form) -> "FieldLabelResolver":
        """Build a resolver from a Form, or an empty one when no form is linked"""
        if form is None:
            return cls()
        # Read the raw JSON so a stale field definition cannot break resolution
        labels = {
            str(raw["id"]): str(raw["label"])
            for raw in (form.fields or [])
            if isinstance(raw, dict) and raw.get("id") and raw.get("label")
        }
        return cls(labels, form_known=True)

    @classmethod
    def from_fields(cls, fields: Iterable) -> "FieldLabelResolver":
        return cls({field.id: field.label for field in fields}, form_known=True)

    def resolve(self, key: str, position: Optional[int] = None) -> str:
        """
        Resolve a key, falling back to a "Question N" placeholder for field ids
        that the linked form does not know about.

        Args:
            key: Submission data key
            position: 1-based position of the key in the submission

        Returns:
            Display label for the key
        """
        label = resolve_field_label(key, self.labels)
        if label != key:
            return label
        if self.form_known and position is not None and looks_like_field_id(key):
            return f"Question {position}"
        return key
