"""Unit tests for bearer-token auth against a mocked auth provider."""

import httpx
import pytest

from api.auth import AuthError, AuthUser, SupabaseAuth, bearer_token


@pytest.mark.unit
@pytest.mark.parametrize(
    "header,token",
    [
        ("Bearer abc.def", "abc.def"),
        ("bearer   abc", "abc"),
        ("Basic abc", None),
        ("Bearer ", None),
        (None, None),
    ],
)
def test_bearer_token(header, token):
    assert bearer_token(header) == token


def make_auth(handler) -> SupabaseAuth:
    return SupabaseAuth("https://auth.example.test/", "anon", transport=httpx.MockTransport(handler))


class TestSupabaseAuth:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_valid_token(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url == "https://auth.example.test/auth/v1/user"
            assert request.headers["apikey"] == "anon"
            assert request.headers["Authorization"] == "Bearer tok"
            return httpx.Response(200, json={"id": "user_1", "email": "a@acme.test"})

        auth = make_auth(handler)
        try:
            assert await auth.get_user("tok") == AuthUser(id="user_1", email="a@acme.test")
        finally:
            await auth.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_token(self, status):
        auth = make_auth(lambda request: httpx.Response(status, json={"msg": "invalid JWT"}))
        try:
            assert await auth.get_user("tok") is None
        finally:
            await auth.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_provider_error(self):
        auth = make_auth(lambda request: httpx.Response(500))
        try:
            with pytest.raises(AuthError):
                await auth.get_user("tok")
        finally:
            await auth.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        auth = make_auth(handler)
        try:
            with pytest.raises(AuthError, match="unreachable"):
                await auth.get_user("tok")
        finally:
            await auth.close()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_not_configured(self):
        auth = SupabaseAuth("", "")
        try:
            with pytest.raises(AuthError, match="not configured"):
                await auth.get_user("tok")
        finally:
            await auth.close()
