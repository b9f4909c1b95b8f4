"""Keycloak admin client — creates identities for new accounts.

Credentials never touch our database: the password goes straight to Keycloak
through its admin REST API, authenticated with a service-account token
(client-credentials grant).
"""

import httpx
import structlog

from app.config import settings
from app.core.exceptions import AlreadyExistsError, IdentityProviderError

logger = structlog.get_logger()


class KeycloakAdminClient:
    """Thin async wrapper over the Keycloak admin users endpoint."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        # transport is injectable so tests can swap in httpx.MockTransport
        self.transport = transport
        self.timeout = settings.keycloak_timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=self.timeout)

    async def _service_token(self, client: httpx.AsyncClient) -> str:
        resp = await client.post(
            settings.keycloak_token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": settings.keycloak_admin_client_id,
                "client_secret": settings.keycloak_admin_client_secret,
            },
        )
        if resp.status_code != 200:
            logger.error("keycloak_token_failed", status=resp.status_code)
            raise IdentityProviderError("Unable to authenticate with the identity provider")
        token = resp.json().get("access_token")
        if not token:
            raise IdentityProviderError("Identity provider returned no access token")
        return token

    async def create_user(self, email: str, full_name: str, password: str) -> str:
        """Create an enabled Keycloak user and return its id (the OIDC ``sub``)."""
        first_name, _, last_name = full_name.partition(" ")
        payload = {
            "username": email,
            "email": email,
            "enabled": True,
            "emailVerified": False,
            "firstName": first_name,
            "lastName": last_name,
            "credentials": [{"type": "password", "value": password, "temporary": False}],
        }

        try:
            async with self._client() as client:
                token = await self._service_token(client)
                resp = await client.post(
                    settings.keycloak_admin_users_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as e:
            logger.error("keycloak_unreachable", error=str(e))
            raise IdentityProviderError() from e

        if resp.status_code == 409:
            raise AlreadyExistsError(detail="Email already in use")
        if resp.status_code != 201:
            logger.error("keycloak_create_user_failed", status=resp.status_code, body=resp.text[:200])
            raise IdentityProviderError("Identity provider rejected the account creation")

        # Keycloak answers 201 with an empty body and the new user's URL in Location
        location = resp.headers.get("Location", "")
        keycloak_id = location.rstrip("/").rsplit("/", 1)[-1]
        if not keycloak_id:
            raise IdentityProviderError("Identity provider did not return the new user id")

        logger.info("keycloak_user_created", keycloak_id=keycloak_id, email=email)
        return keycloak_id


def get_identity_provider() -> KeycloakAdminClient:
    """FastAPI dependency (overridable in tests)."""
    return KeycloakAdminClient()
