"""Authentication dependencies for FastAPI"""

from fastapi import Depends, HTTPException, Request, status
from sqlmodel import Session

from eventtrackpro.logging_config import get_logger
from eventtrackpro.models.database import get_db
from eventtrackpro.models.user import User
from eventtrackpro.services.user_service import UserService

logger = get_logger(__name__)

SESSION_USER_KEY = "user_id"


def require_admin(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Require an authenticated admin session.

    Use this for admin API routes. The session cookie is set by
    POST /api/auth/login.

    Args:
        request: FastAPI Request object with session
        db: Database session

    Returns:
        The logged-in User

    Raises:
        HTTPException: 401 if there is no session or the user no longer exists
    """
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    user = UserService(db).get_user_by_id(user_id)
    if not user or not user.active:
        logger.info(f"Clearing session for missing or inactive user {user_id}")
        request.session.clear()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user
