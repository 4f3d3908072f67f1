"""Session authentication routes for the admin UI"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlmodel import Session

from eventtrackpro.auth.dependencies import SESSION_USER_KEY, require_admin
from eventtrackpro.models.database import get_db
from eventtrackpro.models.user import User
from eventtrackpro.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AccountUpdateRequest(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1)
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(default=None, min_length=1)


def _public_user(user: User) -> dict:
    """User fields that are safe to return to the browser"""
    return user.model_dump(exclude={"password", "password_hash"})


@router.post("/login")
async def login(
    request: Request, credentials: LoginRequest, db: Session = Depends(get_db)
):
    """Start an admin session"""
    user = UserService(db).verify_credentials(
        credentials.username, credentials.password
    )
    if not user:
        raise HTTPException(status_code=401, detail="Invalid username or password")

    request.session[SESSION_USER_KEY] = user.id
    logger.info(f"User {user.id} logged in")
    return {"user": _public_user(user)}


@router.post("/logout")
async def logout(request: Request):
    """Clear the session"""
    request.session.clear()
    return {"message": "Logged out successfully"}


@router.get("/me")
async def me(user: User = Depends(require_admin)):
    """Current session user"""
    return {"user": _public_user(user)}


@router.put("/account")
async def update_account(
    update: AccountUpdateRequest,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Change the current user's username and/or password"""
    user_service = UserService(db)

    if update.new_password:
        if not update.current_password:
            raise HTTPException(
                status_code=400,
                detail="Current password is required to set a new password",
            )
        if not user_service.check_password(user, update.current_password):
            raise HTTPException(status_code=401, detail="Current password is incorrect")

    changes = {}
    if update.username and update.username != user.username:
        if user_service.get_user_by_username(update.username):
            raise HTTPException(status_code=400, detail="Username is already taken")
        changes["username"] = update.username
    if update.new_password:
        changes["password"] = update.new_password

    if not changes:
        raise HTTPException(status_code=400, detail="No changes provided")

    result = user_service.update_user(user.id, changes)
    if not result.get("success"):
        raise HTTPException(status_code=500, detail="Failed to update user")

    return {"user": _public_user(result["user"]), "message": result["message"]}
