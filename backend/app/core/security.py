"""Security utilities: Keycloak OIDC token validation and user provisioning."""

import time

import httpx
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.core.exceptions import ForbiddenError

logger = structlog.get_logger()

JWKS_CACHE_TTL = 300  # 5 minutes


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class JWKSCache:
    """Keycloak signing keys, refetched after ``ttl`` seconds or on an unknown kid."""

    def __init__(self, url: str, ttl: float = JWKS_CACHE_TTL) -> None:
        self.url = url
        self.ttl = ttl
        self._keys: dict | None = None
        self._fetched_at: float = 0

    def invalidate(self) -> None:
        self._fetched_at = 0

    async def _fetch(self) -> dict:
        now = time.time()
        if self._keys and (now - self._fetched_at) < self.ttl:
            return self._keys

        try:
            async with httpx.AsyncClient(timeout=settings.keycloak_timeout) as client:
                response = await client.get(self.url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("jwks_fetch_failed", url=self.url, error=str(e))
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Identity provider unavailable",
            ) from e

        self._keys = response.json()
        self._fetched_at = now
        logger.info("jwks_fetched", url=self.url)
        return self._keys

    async def signing_key(self, kid: str) -> dict | None:
        key = _find_key(await self._fetch(), kid)
        if key is None:
            # Key may have rotated
            self.invalidate()
            key = _find_key(await self._fetch(), kid)
        return key


def _find_key(jwks: dict, kid: str) -> dict | None:
    return next((key for key in jwks.get("keys", []) if key.get("kid") == kid), None)


jwks_cache = JWKSCache(settings.keycloak_jwks_url)


async def decode_access_token(token: str) -> dict:
    """Decode and validate a Keycloak access token (RS256)."""
    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except JWTError as e:
        raise _unauthorized("Invalid token header") from e
    if not kid:
        raise _unauthorized("Token missing key ID")

    signing_key = await jwks_cache.signing_key(kid)
    if not signing_key:
        raise _unauthorized("Unable to find matching signing key")

    try:
        return jwt.decode(
            token,
            signing_key,
            algorithms=["RS256"],
            audience=settings.keycloak_audience,
            issuer=settings.keycloak_issuer_url,
            options={"verify_at_hash": False},
        )
    except JWTError as e:
        raise _unauthorized("Invalid or expired token") from e


# ── Auth Dependencies ─────────────────────────────
security_scheme = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
):
    """FastAPI dependency: validate the bearer token and return the local user.

    An identity seen for the first time (e.g. created directly in Keycloak) is
    provisioned like a registered account; email and name changes made in
    Keycloak are copied over.
    """
    from app.services.user_service import UserService

    claims = await decode_access_token(credentials.credentials)
    keycloak_id = claims.get("sub")
    if not keycloak_id:
        raise _unauthorized("Token missing subject")

    email = claims.get("email", "")
    full_name = claims.get("name", "") or _build_name(claims)

    service = UserService(db)
    user = await service.get_by_keycloak_id(keycloak_id)
    if user is None:
        return await service.provision(keycloak_id, email, full_name)
    if not user.is_active:
        logger.warning("inactive_user_rejected", user_id=user.id, keycloak_id=keycloak_id)
        raise ForbiddenError("Account is deactivated")

    changes = {
        field: value
        for field, value in (("email", email), ("full_name", full_name))
        if value and getattr(user, field) != value
    }
    if changes:
        for field, value in changes.items():
            setattr(user, field, value)
        await db.flush()
        logger.info("user_synced_from_token", user_id=user.id, fields=sorted(changes))
    return user


def _build_name(claims: dict) -> str:
    """Build full name from given_name + family_name claims."""
    parts = [claims.get("given_name", ""), claims.get("family_name", "")]
    return " ".join(p for p in parts if p).strip()
