"""Registration form management endpoints"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Session

from eventtrackpro.auth.dependencies import require_admin
from eventtrackpro.models.database import get_db
from eventtrackpro.models.form import FormField
from eventtrackpro.routers.request_validator import either_case, reject_null
from eventtrackpro.services.form_service import FormService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/forms", tags=["Forms"])


class FormSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success_message: Optional[str] = Field(
        default=None, validation_alias=either_case("success_message")
    )
    show_remaining_spots: Optional[bool] = Field(
        default=None, validation_alias=either_case("show_remaining_spots")
    )
    enable_waitlist: Optional[bool] = Field(
        default=None, validation_alias=either_case("enable_waitlist")
    )
    require_all_fields: Optional[bool] = Field(
        default=None, validation_alias=either_case("require_all_fields")
    )
    theme_color: Optional[str] = Field(
        default=None,
        pattern=r"^#[0-9A-Fa-f]{6}$",
        validation_alias=either_case("theme_color"),
    )
    button_style: Optional[str] = Field(
        default=None, validation_alias=either_case("button_style")
    )

    @field_validator(
        "show_remaining_spots",
        "enable_waitlist",
        "require_all_fields",
        "theme_color",
        "button_style",
    )
    @classmethod
    def _settings_not_null(cls, value):
        return reject_null(value)


class FormCreateRequest(FormSettings):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    fields: List[FormField] = Field(default_factory=list)


class FormUpdateRequest(FormSettings):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    fields: Optional[List[FormField]] = None

    @field_validator("title", "fields")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


@router.get("")
async def list_forms(db: Session = Depends(get_db)):
    return FormService(db).list_forms()


@router.get("/{form_id}")
async def get_form(form_id: int, db: Session = Depends(get_db)):
    form = FormService(db).get_form(form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


@router.post("", status_code=201)
async def create_form(
    form_request: FormCreateRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Create a form with its ordered field list"""
    try:
        return FormService(db).create_form(form_request.model_dump())
    except Exception as e:
        logger.error(f"Failed to create form: {e}")
        raise HTTPException(status_code=500, detail="Failed to create form")


@router.put("/{form_id}")
async def update_form(
    form_id: int,
    form_request: FormUpdateRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Partially update a form; a supplied field list replaces the old one"""
    updates = form_request.model_dump(exclude_unset=True)
    if form_request.fields is not None:
        updates["fields"] = form_request.fields
    try:
        form = FormService(db).update_form(form_id, updates)
    except Exception as e:
        logger.error(f"Failed to update form {form_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update form")

    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


@router.delete("/{form_id}", status_code=204)
async def delete_form(
    form_id: int, _admin=Depends(require_admin), db: Session = Depends(get_db)
):
    try:
        deleted = FormService(db).delete_form(form_id)
    except Exception as e:
        logger.error(f"Failed to delete form {form_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete form")

    if not deleted:
        raise HTTPException(status_code=404, detail="Form not found")
    return Response(status_code=204)
