"""SQLModel Form model and the embedded FormField schema"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, model_validator
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from eventtrackpro.models.field_type import OPTION_FIELD_TYPES, FieldType


class FormField(BaseModel):
    """A single input of a registration form.

    Fields are embedded in the owning form's JSON column rather than stored
    as separate rows.
    """

    id: str
    type: FieldType
    label: str
    placeholder: Optional[str] = None
    required: bool = True
    options: Optional[List[str]] = None
    section: Optional[str] = None  # multi-page grouping
    event_ids: Optional[List[int]] = None  # event-select only

    @model_validator(mode="after")
    def _check_options(self):
        if self.type in OPTION_FIELD_TYPES and not self.options:
            raise ValueError(
                f"Field '{self.label}' of type {self.type.value} requires at least one option"
            )
        return self


class Form(SQLModel, table=True):
    """User-authored registration form"""

    __tablename__ = "forms"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    fields: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    success_message: Optional[str] = None
    show_remaining_spots: bool = Field(default=True)
    enable_waitlist: bool = Field(default=False)
    require_all_fields: bool = Field(default=True)
    theme_color: str = Field(default="#3B82F6")
    button_style: str = Field(default="rounded")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def get_fields(self) -> List[FormField]:
        """Return the embedded fields as validated FormField objects, in order"""
        return [FormField.model_validate(raw) for raw in (self.fields or [])]
