"""Tests for form submission validation"""

import pytest

from eventtrackpro.models.form import Form
from eventtrackpro.services.submission_validator import (
    SubmissionValidationError,
    validate_submission,
)


def _form(fields, require_all_fields=False):
    return Form(title="Signup", fields=fields, require_all_fields=require_all_fields)


def _errors(form, data, known_event_ids=None):
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission(form, data, known_event_ids)
    return {error["field"]: error["message"] for error in exc_info.value.errors}


def test_valid_submission_is_returned_unchanged():
    form = _form(
        [
            {"id": "name", "type": "text", "label": "Name"},
            {"id": "email", "type": "email", "label": "Email"},
        ]
    )
    data = {"name": "Ada", "email": "ada@x.com", "extra": "kept"}

    assert validate_submission(form, data) == data


def test_required_fields():
    form = _form(
        [
            {"id": "name", "type": "text", "label": "Name"},
            {"id": "notes", "type": "textarea", "label": "Notes", "required": False},
        ]
    )

    assert _errors(form, {"name": "  "}) == {"name": "is required"}
    assert validate_submission(form, {"name": "Ada"}) == {"name": "Ada"}


def test_require_all_fields_overrides_optional_fields():
    form = _form(
        [{"id": "notes", "type": "textarea", "label": "Notes", "required": False}],
        require_all_fields=True,
    )

    assert _errors(form, {}) == {"notes": "is required"}


def test_email_format():
    form = _form([{"id": "email", "type": "email", "label": "Email"}])

    assert _errors(form, {"email": "not-an-email"}) == {
        "email": "must be a valid email address"
    }


def test_select_radio_and_checkbox_options():
    form = _form(
        [
            {"id": "size", "type": "select", "label": "Size", "options": ["S", "M"]},
            {"id": "plan", "type": "radio", "label": "Plan", "options": ["Free"]},
            {
                "id": "topics",
                "type": "checkbox",
                "label": "Topics",
                "options": ["Python", "SQL"],
            },
        ]
    )

    assert validate_submission(
        form, {"size": "M", "plan": "Free", "topics": ["SQL"]}
    )
    errors = _errors(form, {"size": "XL", "plan": "Pro", "topics": ["Go"]})
    assert errors == {
        "size": "is not one of the available options",
        "plan": "is not one of the available options",
        "topics": "contains options that are not available",
    }


def test_single_checkbox_accepts_boolean():
    form = _form(
        [
            {
                "id": "consent",
                "type": "checkbox",
                "label": "I agree",
                "options": ["yes"],
            }
        ]
    )

    assert validate_submission(form, {"consent": True})
    assert _errors(form, {"consent": False}) == {"consent": "is required"}


def test_date_field():
    form = _form([{"id": "dob", "type": "date", "label": "Date of birth"}])

    assert validate_submission(form, {"dob": "1990-12-10"})
    assert _errors(form, {"dob": "10/12/1990"}) == {
        "dob": "must be a date in YYYY-MM-DD format"
    }


def test_event_select_field():
    form = _form([{"id": "pick", "type": "event-select", "label": "Select event"}])

    assert validate_submission(form, {"pick": "2"}, known_event_ids=[1, 2])
    assert _errors(form, {"pick": 5}, known_event_ids=[1, 2]) == {
        "pick": "references an event that is not available"
    }
    assert _errors(form, {"pick": "abc"}) == {"pick": "must reference an event"}


def test_dashless_keys_are_accepted():
    field_id = "a3f1c2d4-5b6e-4f70-8a91-b2c3d4e5f607"
    form = _form([{"id": field_id, "type": "text", "label": "Name"}])

    data = {field_id.replace("-", ""): "Ada"}
    assert validate_submission(form, data) == data


def test_error_message_lists_labels():
    form = _form([{"id": "name", "type": "text", "label": "Name"}])

    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_submission(form, {})

    assert str(exc_info.value) == "Name: is required"
    assert exc_info.value.errors == [
        {"field": "name", "label": "Name", "message": "is required"}
    ]
