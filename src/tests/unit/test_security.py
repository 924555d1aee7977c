"""Tests for access token verification."""

import pytest
from starlette.requests import Request

from core.exceptions import UnauthorizedError
from core.security import decode_access_token, extract_token, get_current_user


def build_request(headers=None, cookies=None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        raw.append((b"cookie", "; ".join(f"{k}={v}" for k, v in cookies.items()).encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestDecodeAccessToken:

    def test_valid_token(self, token_factory, ids):
        claims = decode_access_token(token_factory(user_metadata={"full_name": "Pat"}))
        assert claims["sub"] == ids.user
        assert claims["email"] == "owner@example.com"
        assert claims["user_metadata"] == {"full_name": "Pat"}

    def test_expired_token(self, token_factory):
        with pytest.raises(UnauthorizedError) as exc:
            decode_access_token(token_factory(expires_in=-60))
        assert exc.value.message == "Session expired"

    def test_wrong_audience(self, token_factory):
        with pytest.raises(UnauthorizedError) as exc:
            decode_access_token(token_factory(audience="anon"))
        assert exc.value.message == "Invalid authentication token"

    def test_wrong_secret(self, token_factory):
        with pytest.raises(UnauthorizedError) as exc:
            decode_access_token(token_factory(secret="someone-else"))
        assert exc.value.message == "Invalid authentication token"

    def test_garbage(self):
        with pytest.raises(UnauthorizedError):
            decode_access_token("not-a-jwt")

    def test_missing_subject(self, token_factory):
        with pytest.raises(UnauthorizedError) as exc:
            decode_access_token(token_factory(user_id=""))
        assert exc.value.status_code == 401


class TestExtractToken:

    def test_bearer_header(self):
        assert extract_token(build_request({"Authorization": "Bearer abc"})) == "abc"

    def test_cookie_fallback(self):
        assert extract_token(build_request(cookies={"sb-access-token": "xyz"})) == "xyz"

    def test_header_wins_over_cookie(self):
        request = build_request({"Authorization": "Bearer abc"}, {"sb-access-token": "xyz"})
        assert extract_token(request) == "abc"

    def test_missing(self):
        assert extract_token(build_request({"Authorization": "Basic Zm9v"})) is None


class TestGetCurrentUser:

    @pytest.mark.asyncio
    async def test_resolves_user_from_cookie(self, token_factory, ids):
        token = token_factory(email="pat@example.com")
        user = await get_current_user(build_request(cookies={"sb-access-token": token}), None)
        assert user.id == ids.user
        assert user.email == "pat@example.com"
        assert user.user_metadata == {}

    @pytest.mark.asyncio
    async def test_requires_token(self):
        with pytest.raises(UnauthorizedError) as exc:
            await get_current_user(build_request(), None)
        assert exc.value.message == "Authentication required"
