"""Signed access token issuing and validation."""

import os
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

DEFAULT_SECRET_KEY = "change-me-in-production"


class TokenValidator:
    """Issues and validates HS256 bearer tokens for storefront users.

    Tokens carry the user id in ``sub`` and the account role, so that
    role checks do not need a database round trip.
    """

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expire_minutes: int | None = None,
    ):
        """Initialize token validator.

        Args:
            secret_key: Signing key (defaults to JWT_SECRET_KEY env var)
            algorithm: JWT signing algorithm (defaults to JWT_ALGORITHM env var)
            expire_minutes: Token lifetime (defaults to ACCESS_TOKEN_EXPIRE_MINUTES env var)
        """
        self.secret_key = secret_key or os.getenv("JWT_SECRET_KEY", DEFAULT_SECRET_KEY)
        self.algorithm = algorithm or os.getenv("JWT_ALGORITHM", "HS256")
        self.expire_minutes = expire_minutes or int(
            os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")
        )

    def issue_token(self, user_id: int, role: str) -> str:
        """Create a signed access token.

        Args:
            user_id: Authenticated user's id
            role: User role ("user" or "admin")

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=self.expire_minutes)).timestamp()),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def validate_token(self, token: str) -> dict | None:
        """Validate a token and extract user identity.

        Args:
            token: Bearer token from Authorization header

        Returns:
            Dict with user_id and role if valid, None otherwise
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

        subject = payload.get("sub")
        if subject is None or not str(subject).isdigit():
            return None

        return {
            "user_id": int(subject),
            "role": payload.get("role", "user"),
            "expires_at": payload.get("exp"),
        }

    def extract_token_from_header(self, authorization: str) -> str | None:
        """Extract bearer token from Authorization header.

        Returns:
            Token string if valid format, None otherwise
        """
        if not authorization or not authorization.startswith("Bearer "):
            return None

        token = authorization[7:].strip()
        return token or None
