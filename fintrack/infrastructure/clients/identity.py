"""Identity provider HTTP client for verifying bearer tokens"""

import httpx
from datetime import datetime, timezone
from typing import Optional
from fintrack.domain.models import AuthenticatedUser
from fintrack.domain.exceptions import AuthenticationError, IdentityProviderError
from fintrack.config import settings


def default_display_name(email: Optional[str], display_name: Optional[str]) -> str:
    """Provider name, else the email's local part, else "User" """
    if display_name:
        return display_name
    if email:
        return email.split("@")[0]
    return "User"


class IdentityClient:
    """Client for the external identity provider"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.identity_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def verify_token(self, token: str) -> AuthenticatedUser:
        """
        Exchange a bearer token for the identity it asserts.

        Raises:
            AuthenticationError: Provider rejected the token (401/403)
            IdentityProviderError: On timeout, other HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/v1/tokeninfo",
                    params={"token": token},
                )
                if response.status_code in (401, 403):
                    raise AuthenticationError("Token rejected by identity provider")
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, dict):
                    raise IdentityProviderError("Invalid token info from identity provider: expected a JSON object")

                expires_at = None
                if data.get("expires_at"):
                    expires_at = datetime.fromtimestamp(int(data["expires_at"]), tz=timezone.utc)

                return AuthenticatedUser(
                    uid=data["uid"],
                    email=data.get("email"),
                    display_name=default_display_name(data.get("email"), data.get("display_name")),
                    expires_at=expires_at,
                )

            except httpx.TimeoutException as e:
                raise IdentityProviderError(f"Identity provider timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise IdentityProviderError(f"Identity provider error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise IdentityProviderError(f"Identity provider unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise IdentityProviderError(f"Invalid token info from identity provider: {e}") from e
