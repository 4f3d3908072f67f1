"""Tests for registration service functionality"""

import pytest

from eventtrackpro.models.registration import RegistrationStatus, WebhookStatus
from eventtrackpro.services.registration_service import (
    EventFullError,
    EventNotFoundError,
)
from eventtrackpro.services.submission_validator import SubmissionValidationError
from tests.config import DIET_FIELD_ID, EMAIL_FIELD_ID, NAME_FIELD_ID


def _form_data(name="Ada Lovelace", email="ada@x.com"):
    return {NAME_FIELD_ID: name, EMAIL_FIELD_ID: email}


class TestRegistrationService:
    """Test registration service functionality"""

    def test_create_registration_success(self, registration_service, sample_event):
        registration = registration_service.create_registration(
            sample_event.id, _form_data()
        )

        assert registration.id is not None
        assert registration.event_id == sample_event.id
        assert registration.form_data[NAME_FIELD_ID] == "Ada Lovelace"
        assert registration.status == RegistrationStatus.CONFIRMED
        assert registration.webhook_status == WebhookStatus.NOT_SENT
        assert registration.attended is False
        assert registration.created_at is not None

    def test_unknown_event_is_rejected(self, registration_service):
        with pytest.raises(EventNotFoundError):
            registration_service.create_registration(999, _form_data())

    def test_capacity_is_enforced(self, registration_service, sample_event):
        """The third registration for a capacity-2 event is rejected"""
        registration_service.create_registration(sample_event.id, _form_data())
        registration_service.create_registration(
            sample_event.id, _form_data("Grace Hopper", "grace@x.com")
        )

        with pytest.raises(EventFullError) as exc_info:
            registration_service.create_registration(
                sample_event.id, _form_data("Alan Turing", "alan@x.com")
            )

        assert str(exc_info.value) == "Event is at full capacity"
        stored = registration_service.get_registrations_for_event(sample_event.id)
        assert len(stored) == 2

    def test_submission_is_validated_against_linked_form(
        self, registration_service, sample_event
    ):
        with pytest.raises(SubmissionValidationError) as exc_info:
            registration_service.create_registration(
                sample_event.id, {NAME_FIELD_ID: "Ada", DIET_FIELD_ID: "Carnivore"}
            )

        failed = {error["field"] for error in exc_info.value.errors}
        assert failed == {EMAIL_FIELD_ID, DIET_FIELD_ID}
        assert registration_service.list_registrations() == []

    def test_event_without_form_accepts_any_data(
        self, registration_service, event_service
    ):
        event = event_service.create_event(
            {"title": "Open Day", "date": "2025-05-01", "capacity": 10}
        )

        registration = registration_service.create_registration(
            event.id, {"name": "Ada", "anything": "goes"}
        )

        assert registration.form_data == {"name": "Ada", "anything": "goes"}

    def test_mark_webhook_sent(self, registration_service, sample_event):
        registration = registration_service.create_registration(
            sample_event.id, _form_data()
        )

        updated = registration_service.mark_webhook_sent(registration.id)

        assert updated.webhook_status == WebhookStatus.SENT

    def test_update_registration_is_partial(self, registration_service, sample_event):
        registration = registration_service.create_registration(
            sample_event.id, _form_data()
        )

        updated = registration_service.update_registration(
            registration.id, {"attended": True, "attendance_notes": "On time"}
        )

        assert updated.attended is True
        assert updated.attendance_notes == "On time"
        assert updated.form_data == _form_data()
        assert updated.status == RegistrationStatus.CONFIRMED

    def test_update_and_delete_missing_registration(self, registration_service):
        assert registration_service.update_registration(999, {"attended": True}) is None
        assert registration_service.delete_registration(999) is False

    def test_registrations_outlive_deleted_event(
        self, registration_service, event_service, sample_event
    ):
        registration = registration_service.create_registration(
            sample_event.id, _form_data()
        )

        assert event_service.delete_event(sample_event.id) is True

        orphan = registration_service.get_registration_by_id(registration.id)
        assert orphan is not None
        assert orphan.event_id == sample_event.id
