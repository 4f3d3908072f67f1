"""Tests for UserService"""

import pytest

from eventtrackpro.models.user import User


def test_create_user_stores_only_a_hash(user_service):
    """Passwords are hashed with werkzeug, never stored as given"""
    user = user_service.create_user(username="ada", password="analytical")

    assert isinstance(user, User)
    assert user.id is not None
    assert user.password == ""
    assert user.password_hash and user.password_hash != "analytical"
    assert user.role == "admin"
    assert user.active is True


def test_create_user_duplicate_username_fails(user_service):
    user_service.create_user(username="ada", password="analytical")

    with pytest.raises(Exception) as exc_info:
        user_service.create_user(username="ada", password="engine")

    assert "Failed to create user" in str(exc_info.value)


def test_verify_credentials(user_service):
    user_service.create_user(username="ada", password="analytical")

    user = user_service.verify_credentials("ada", "analytical")

    assert user is not None
    assert user.last_login is not None
    assert user_service.verify_credentials("ada", "wrong") is None
    assert user_service.verify_credentials("nobody", "analytical") is None


def test_legacy_plaintext_password_still_accepted(user_service, _db_session):
    legacy = User(username="legacy", password="old-secret")
    _db_session.add(legacy)
    _db_session.commit()

    assert user_service.verify_credentials("legacy", "old-secret") is not None
    assert user_service.verify_credentials("legacy", "other") is None


def test_update_user_rehashes_password(user_service):
    user = user_service.create_user(username="ada", password="analytical")

    result = user_service.update_user(
        user.id, {"username": "countess", "password": "engine"}
    )

    assert result["success"] is True
    assert result["user"].username == "countess"
    assert user_service.verify_credentials("countess", "engine") is not None
    assert user_service.verify_credentials("countess", "analytical") is None


def test_update_missing_user(user_service):
    result = user_service.update_user(999, {"username": "ghost"})
    assert result == {"success": False, "error": "User not found"}


def test_ensure_admin_is_idempotent(user_service):
    user_service.ensure_admin("admin", "pw")
    user_service.ensure_admin("admin", "other")

    assert user_service.verify_credentials("admin", "pw") is not None
    assert user_service.verify_credentials("admin", "other") is None


def test_ensure_admin_skips_without_credentials(user_service):
    user_service.ensure_admin(None, None)
    assert user_service.get_user_by_username("admin") is None
