"""Bearer-token authentication against Supabase Auth.

The access token issued to the browser is checked by asking the auth
server who it belongs to (``GET /auth/v1/user``). No tokens are minted or
stored here.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised when the auth provider cannot be reached."""

    pass


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an ``Authorization: Bearer ...`` header, else None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class SupabaseAuth:
    """Resolves access tokens to users."""

    def __init__(
        self,
        supabase_url: str,
        anon_key: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.supabase_url = (supabase_url or "").rstrip("/")
        self.anon_key = anon_key or ""
        self.client = httpx.AsyncClient(timeout=10.0, transport=transport)

    def is_configured(self) -> bool:
        return bool(self.supabase_url and self.anon_key)

    async def get_user(self, token: str) -> Optional[AuthUser]:
        """Return the token's user, None for an invalid or expired token.

        Raises:
            AuthError: If auth is not configured or the provider is unreachable
        """
        if not self.is_configured():
            raise AuthError("SUPABASE_URL and SUPABASE_ANON_KEY not configured")

        try:
            response = await self.client.get(
                f"{self.supabase_url}/auth/v1/user",
                headers={"apikey": self.anon_key, "Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Auth provider unreachable: {e}") from e

        if response.status_code in (401, 403):
            return None
        if response.status_code >= 400:
            raise AuthError(f"Auth provider error: {response.status_code}")

        data = response.json()
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return AuthUser(id=data["id"], email=data.get("email"))

    async def close(self) -> None:
        await self.client.aclose()
