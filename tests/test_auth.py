"""Tests for bearer token authentication."""

import pytest
from datetime import timedelta
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from dobag.auth.jwt import create_access_token, get_user_id_from_token
from dobag.auth.dependencies import get_current_user


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_token_round_trip():
    token = create_access_token("user-1")
    assert get_user_id_from_token(token) == "user-1"


def test_expired_token_is_rejected():
    token = create_access_token("user-1", expires_in=timedelta(seconds=-10))
    assert get_user_id_from_token(token) is None


def test_garbage_token_is_rejected():
    assert get_user_id_from_token("not-a-jwt") is None


def test_current_user_from_token(db_session, test_user_id):
    user = get_current_user(_bearer(create_access_token(test_user_id)), db_session)
    assert user.id == test_user_id
    assert user.email == "test@example.com"


@pytest.mark.parametrize("credentials", [None, _bearer("not-a-jwt"), _bearer(create_access_token("unknown-user"))])
def test_current_user_unauthorized(db_session, credentials):
    with pytest.raises(HTTPException) as exc_info:
        get_current_user(credentials, db_session)
    assert exc_info.value.status_code == 401


def test_get_user(db_session, test_user):
    from dobag.database.user_repository import UserRepository

    repository = UserRepository(db_session)

    assert repository.get(test_user.id).email == test_user.email
    assert repository.get("unknown-user") is None
