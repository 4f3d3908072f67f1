"""Form Service - Handles registration form database operations"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from eventtrackpro.models.form import Form, FormField

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "title",
    "description",
    "fields",
    "success_message",
    "show_remaining_spots",
    "enable_waitlist",
    "require_all_fields",
    "theme_color",
    "button_style",
)


def _serialize_fields(fields: List[Any]) -> List[dict]:
    """Validate and dump fields for the JSON column, keeping their order"""
    serialized = []
    for field in fields or []:
        if not isinstance(field, FormField):
            field = FormField.model_validate(field)
        serialized.append(field.model_dump(mode="json", exclude_none=True))
    return serialized


class FormService:
    """Service for handling form operations"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def list_forms(self) -> List[Form]:
        statement = select(Form).order_by(Form.id)
        return list(self.db.exec(statement).all())

    def get_form(self, form_id: int) -> Optional[Form]:
        return self.db.get(Form, form_id)

    def create_form(self, data: Dict[str, Any]) -> Form:
        """
        Create a new form

        Args:
            data: title, fields and optional display settings

        Returns:
            The created Form

        Raises:
            pydantic.ValidationError: If a field definition is invalid
        """
        form = Form(
            title=data["title"],
            description=data.get("description") or None,
            fields=_serialize_fields(data.get("fields") or []),
            success_message=data.get("success_message") or None,
            created_at=datetime.now(timezone.utc),
        )
        for setting in (
            "show_remaining_spots",
            "enable_waitlist",
            "require_all_fields",
            "theme_color",
            "button_style",
        ):
            if data.get(setting) is not None:
                setattr(form, setting, data[setting])

        try:
            self.db.add(form)
            self.db.commit()
            self.db.refresh(form)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating form: {e}")
            raise

        logger.info(f"Form created successfully: {form.id} ({len(form.fields)} fields)")
        return form

    def update_form(self, form_id: int, updates: Dict[str, Any]) -> Optional[Form]:
        """Partially update a form; returns None if it does not exist"""
        form = self.db.get(Form, form_id)
        if not form:
            return None

        for field_name in _UPDATABLE_FIELDS:
            if field_name not in updates:
                continue
            value = updates[field_name]
            if field_name == "fields":
                value = _serialize_fields(value)
            setattr(form, field_name, value)

        try:
            self.db.add(form)
            self.db.commit()
            self.db.refresh(form)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating form {form_id}: {e}")
            raise

        logger.info(f"Form updated successfully: {form_id}")
        return form

    def delete_form(self, form_id: int) -> bool:
        """Hard delete a form; events keep their (now dangling) form_id"""
        form = self.db.get(Form, form_id)
        if not form:
            return False

        try:
            self.db.delete(form)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting form {form_id}: {e}")
            raise

        logger.info(f"Form deleted: {form_id}")
        return True
