"""
JWT token management for authentication.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from pydantic import BaseModel, ValidationError

from src.config import Settings
from src.kernel.errors import AuthError, AuthErrorKind


class TokenClaims(BaseModel):
    """Identity recovered from a validated access token."""

    sub: str  # User ID
    name: str
    exp: datetime
    iat: datetime
    jti: str  # Token ID

    @property
    def user_id(self) -> str:
        return self.sub


class JWTManager:
    """
    JWT access token creation and verification.

    Built once at startup from settings and shared by every request; the
    secret never changes for the life of the process.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 1440,
    ):
        if not secret_key:
            raise ValueError("A signing secret is required")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTManager":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            access_token_expire_minutes=settings.access_token_expire_minutes,
        )

    def issue_token(
        self,
        user_id: str,
        name: str,
        expires_delta: Optional[timedelta] = None,
    ) -> tuple[str, datetime]:
        """
        Create a signed access token for a user.

        Args:
            user_id: User's document id
            name: User's name
            expires_delta: Optional custom lifetime

        Returns:
            Tuple of (token, expiration_datetime)
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))

        payload = {
            "sub": str(user_id),
            "name": name,
            "exp": expire,
            "iat": now,
            "jti": str(uuid.uuid4()),
            "type": "access",
        }

        token = jwt.encode(payload, self._secret_key, algorithm=self.algorithm)
        return token, expire

    def validate_token(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry, then decode the claims.

        Args:
            token: JWT access token

        Returns:
            TokenClaims for the token's user

        Raises:
            AuthError: MALFORMED, EXPIRED or SIGNATURE_MISMATCH
        """
        try:
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise AuthError(AuthErrorKind.MALFORMED, private_message=f"Undecodable token: {e}") from e

        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise AuthError(AuthErrorKind.EXPIRED, "Token has expired", str(e)) from e
        except JWTClaimsError as e:
            raise AuthError(AuthErrorKind.MALFORMED, private_message=f"Invalid claims: {e}") from e
        except JWTError as e:
            # Signature checked before claims, so anything left is a signature/alg rejection
            raise AuthError(
                AuthErrorKind.SIGNATURE_MISMATCH,
                private_message=f"Signature rejected: {e}",
            ) from e

        if payload.get("type") != "access":
            raise AuthError(AuthErrorKind.MALFORMED, private_message="Not an access token")

        try:
            return TokenClaims(
                sub=payload["sub"],
                name=payload["name"],
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                jti=payload["jti"],
            )
        except (KeyError, TypeError, ValidationError) as e:
            raise AuthError(AuthErrorKind.MALFORMED, private_message=f"Missing claim: {e}") from e
