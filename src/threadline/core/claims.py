"""Bearer credential verification.

The verifier turns an opaque bearer string into an :class:`Actor`. It is pure:
it checks signature, expiry and claim shape, and never consults the store.
Whether the user still exists is the orchestrator's concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from threadline.core.enums import Role
from threadline.core.errors import Unauthenticated
from threadline.core.settings import Settings, settings


@dataclass(frozen=True)
class Actor:
    """Identity and role extracted from a verified credential for one request."""

    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class ClaimVerifier:
    """Issue and verify signed access tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> ClaimVerifier:
        """Build a verifier from application settings."""
        config = config or settings
        return cls(
            config.secret_key,
            algorithm=config.jwt_algorithm,
            expire_minutes=config.access_token_expire_minutes,
        )

    def issue(
        self,
        user_id: int,
        role: Role | str,
        *,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a signed access token for ``user_id`` with ``role``.

        Args:
            user_id: Primary key of the authenticated user
            role: Role recorded in the token
            expires_delta: Token lifetime (default from the verifier)

        Returns:
            Encoded JWT string
        """
        now = datetime.now(UTC)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        payload = {
            "sub": str(user_id),
            "role": Role(role).value,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, credential: str | None) -> Actor:
        """Return the actor encoded in ``credential``.

        Raises:
            Unauthenticated: If the credential is absent, malformed, expired,
                badly signed, or carries an unusable subject or role
        """
        if not credential or not credential.strip():
            raise Unauthenticated("Authentication required")

        try:
            payload = jwt.decode(
                credential.strip(),
                self.secret_key,
                algorithms=[self.algorithm],
            )
        except JWTError as err:
            raise Unauthenticated("Invalid or expired token") from err

        subject = payload.get("sub")
        try:
            user_id = int(subject)
        except (TypeError, ValueError) as err:
            raise Unauthenticated() from err

        raw_role = payload.get("role")
        if not isinstance(raw_role, str):
            raise Unauthenticated("Token carries no role")
        try:
            role = Role(raw_role.upper())
        except ValueError as err:
            raise Unauthenticated() from err

        return Actor(id=user_id, role=role)

    def verify_header(self, authorization: str | None) -> Actor:
        """Verify an ``Authorization`` header value of the form ``Bearer <token>``."""
        if not authorization:
            raise Unauthenticated("Authentication required")
        scheme, _, token = authorization.strip().partition(" ")
        if scheme.lower() != "bearer":
            raise Unauthenticated()
        return self.verify(token)


def get_claim_verifier() -> ClaimVerifier:
    """Return a verifier bound to the current settings."""
    return ClaimVerifier.from_settings()
