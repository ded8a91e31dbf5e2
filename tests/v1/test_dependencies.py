"""Tests for API dependencies module."""

from datetime import timedelta

import pytest
from fastapi import HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from novelhub.api.v1.dependencies import get_content_store, get_current_user
from novelhub.core.security import create_access_token
from novelhub.repositories.content_store import ContentStore


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestGetContentStore:
    """Test the content store dependency."""

    def test_wraps_session(self, db_session):
        store = get_content_store(db_session)
        assert isinstance(store, ContentStore)
        assert store.session is db_session


class TestGetCurrentUser:
    """Test the get_current_user dependency function."""

    def test_get_current_user_success(self, store, author):
        user = get_current_user(_credentials(create_access_token(author.id)), store)
        assert user.id == author.id

    def test_get_current_user_invalid_token(self, store):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_credentials("invalid.token.here"), store)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc_info.value.detail == "Could not validate credentials"

    def test_get_current_user_expired_token(self, store, author):
        token = create_access_token(author.id, expires_delta=timedelta(minutes=-1))
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_credentials(token), store)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    def test_get_current_user_unknown_user(self, store):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_credentials(create_access_token(123456)), store)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc_info.value.detail == "User not found"
