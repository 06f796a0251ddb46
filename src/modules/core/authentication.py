"""External-issuer JWT authentication for Django REST Framework.

The Auth Gate: tokens minted by an external OpenID Connect issuer are
verified with PyJWT against the issuer's JWKS, fetched and cached
in-memory (default 300 s) via ``PyJWKClient``.  Locally issued tokens
are handled by SimpleJWT's ``JWTAuthentication``, which runs after this
class in ``DEFAULT_AUTHENTICATION_CLASSES``.

Security decisions
------------------
* **Fail Closed**: any decode / validation error returns 401.
* ``algorithms`` is the configured value (default RS256), never taken
  from the incoming token header.
* Audience **and** issuer are always validated.
"""

from __future__ import annotations

import jwt as pyjwt
import structlog
from decouple import config
from jwt import PyJWKClient
from jwt.exceptions import PyJWTError
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = structlog.get_logger(__name__)

AUTH_ISSUER = config("AUTH_ISSUER", default="")
AUTH_AUDIENCE = config("AUTH_AUDIENCE", default="")
AUTH_ALGORITHM = config("AUTH_ALGORITHM", default="RS256")
AUTH_JWKS_URL = config(
    "AUTH_JWKS_URL",
    default=f"{AUTH_ISSUER.rstrip('/')}/.well-known/jwks.json" if AUTH_ISSUER else "",
)

_jwks_client: PyJWKClient | None = (
    PyJWKClient(AUTH_JWKS_URL, cache_jwk_set=True, lifespan=300)
    if AUTH_JWKS_URL
    else None
)

EXTERNAL_AUTH_ENABLED = bool(_jwks_client and AUTH_AUDIENCE and AUTH_ISSUER)


class CallerIdentity:
    """Identity established by the Auth Gate for one request.

    No local ``User`` row is required; views read ``request.user.sub``
    and ``request.user.scopes``.
    """

    is_authenticated = True
    is_active = True

    def __init__(self, claims: dict) -> None:
        self.claims = claims
        self.sub: str = claims.get("sub", "")
        scope = claims.get("scope", "")
        self.scopes: list[str] = scope.split() if isinstance(scope, str) else []

    def __str__(self) -> str:
        return self.sub


class ExternalJWTAuthentication(BaseAuthentication):
    """Validates bearer tokens minted by the configured external issuer."""

    keyword = "Bearer"

    def authenticate(self, request):
        """Return ``(CallerIdentity, token)`` or ``None`` to defer."""
        header = request.META.get("HTTP_AUTHORIZATION", "")
        if not header or not EXTERNAL_AUTH_ENABLED:
            return None

        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != self.keyword.lower():
            return None  # malformed headers are rejected by SimpleJWT
        token = parts[1]

        if self._unverified_issuer(token) != AUTH_ISSUER:
            return None

        identity = CallerIdentity(self._decode(token))
        logger.info("jwt_authenticated", sub=identity.sub, issuer=AUTH_ISSUER)
        return (identity, token)

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'

    @staticmethod
    def _unverified_issuer(token: str) -> str | None:
        try:
            claims = pyjwt.decode(token, options={"verify_signature": False})
        except PyJWTError:
            return None
        return claims.get("iss")

    @staticmethod
    def _decode(token: str) -> dict:
        try:
            signing_key = _jwks_client.get_signing_key_from_jwt(token)
            return pyjwt.decode(
                token,
                signing_key.key,
                algorithms=[AUTH_ALGORITHM],
                audience=AUTH_AUDIENCE,
                issuer=AUTH_ISSUER,
            )
        except PyJWTError as exc:
            logger.warning("jwt_validation_failed", error=str(exc))
            raise AuthenticationFailed("Invalid or expired token.") from exc
