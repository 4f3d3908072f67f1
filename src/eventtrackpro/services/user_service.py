"""User Service - Handles admin user database operations"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlmodel import Session, select
from werkzeug.security import check_password_hash, generate_password_hash

from eventtrackpro.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    """Service for handling user operations"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def create_user(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        role: Optional[str] = "admin",
    ) -> User:
        """
        Create a new user in the database

        Args:
            username: Login name (must be unique)
            password: Plaintext password; only its hash is stored
            email: Optional contact email
            role: Optional role label

        Returns:
            Created User object

        Raises:
            Exception: If user creation fails
        """
        try:
            user = User(
                username=username,
                password_hash=generate_password_hash(password),
                email=email,
                role=role,
                active=True,
            )

            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

            logger.info(f"User created successfully: {user.id}")

            return user

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating user: {e}")
            raise Exception(f"Failed to create user: {str(e)}")

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        """
        Get a user by their ID

        Args:
            user_id: ID of the user to retrieve

        Returns:
            User object if found, None otherwise
        """
        try:
            return self.db.get(User, user_id)
        except Exception as e:
            logger.error(f"Error retrieving user {user_id}: {e}")
            return None

    def get_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by their username"""
        try:
            statement = select(User).where(User.username == username)
            return self.db.exec(statement).first()
        except Exception as e:
            logger.error(f"Error retrieving user by username {username}: {e}")
            return None

    @staticmethod
    def check_password(user: User, password: str) -> bool:
        """Check a password against the hash, then the legacy plaintext column"""
        if user.password_hash and check_password_hash(user.password_hash, password):
            return True
        return bool(user.password) and password == user.password

    def verify_credentials(self, username: str, password: str) -> Optional[User]:
        """
        Verify a username/password pair

        Args:
            username: Login name
            password: Plaintext password

        Returns:
            The active User on success, None otherwise
        """
        user = self.get_user_by_username(username)
        if not user or not user.active:
            return None
        if not self.check_password(user, password):
            return None

        user.last_login = datetime.now(timezone.utc)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_user(self, user_id: int, updated_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update an existing user

        Args:
            user_id: ID of the user to update
            updated_data: Dictionary with username and/or password

        Returns:
            Dictionary containing update result
        """
        try:
            user = self.db.get(User, user_id)

            if not user:
                return {"success": False, "error": "User not found"}

            if "username" in updated_data:
                user.username = updated_data["username"]
            if "password" in updated_data:
                user.password_hash = generate_password_hash(updated_data["password"])
                # Drop the legacy plaintext copy once a hash exists
                user.password = ""
            if "email" in updated_data:
                user.email = updated_data["email"]

            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

            logger.info(f"User updated successfully: {user.id}")

            return {
                "success": True,
                "user": user,
                "message": "User updated successfully",
            }

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating user {user_id}: {e}")
            return {"success": False, "error": f"Failed to update user: {str(e)}"}

    def ensure_admin(self, username: Optional[str], password: Optional[str]) -> None:
        """Seed the configured admin account if it does not exist yet"""
        if not username or not password:
            return
        if self.get_user_by_username(username):
            return
        self.create_user(username=username, password=password, role="admin")
        logger.info(f"Seeded admin user '{username}'")
