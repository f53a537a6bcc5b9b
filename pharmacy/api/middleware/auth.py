"""Authentication dependencies for FastAPI."""

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.auth.access_checker import AccessChecker
from pharmacy.auth.token_validator import TokenValidator
from pharmacy.models.user import UserDB
from pharmacy.services.database import get_db_session


class AuthMiddleware:
    """Bearer token authentication against the users table."""

    def __init__(self, token_validator: TokenValidator | None = None):
        """Initialize auth middleware.

        Args:
            token_validator: Token validator (defaults to one configured from env vars)
        """
        self.token_validator = token_validator or TokenValidator()

    async def verify_token(self, authorization: str | None, db: AsyncSession) -> UserDB:
        """Verify a bearer token and load the user it names.

        Args:
            authorization: Authorization header with Bearer token
            db: Database session

        Returns:
            Authenticated user

        Raises:
            HTTPException: If token is invalid or missing, or the user no longer exists
        """
        if not authorization:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )

        token = self.token_validator.extract_token_from_header(authorization)
        if not token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid Authorization header format. Expected: Bearer <token>",
                headers={"WWW-Authenticate": "Bearer"},
            )

        claims = self.token_validator.validate_token(token)
        if not claims:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers={"WWW-Authenticate": "Bearer"},
            )

        user = await db.get(UserDB, claims["user_id"])
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User no longer exists",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return user


# Global instance
auth_middleware = AuthMiddleware()


async def get_current_user(
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db_session),
) -> UserDB:
    """FastAPI dependency for getting current authenticated user.

    Example:
        @router.get("/protected")
        async def protected_route(user: UserDB = Depends(get_current_user)):
            return {"username": user.username}
    """
    return await auth_middleware.verify_token(authorization, db)


async def get_optional_user(
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db_session),
) -> UserDB | None:
    """FastAPI dependency for optional authentication.

    Returns:
        Authenticated user, or None for anonymous or invalid credentials
    """
    if not authorization:
        return None

    try:
        return await auth_middleware.verify_token(authorization, db)
    except HTTPException:
        return None


async def require_admin(user: UserDB = Depends(get_current_user)) -> UserDB:
    """FastAPI dependency allowing administrators only.

    Raises:
        PermissionError: If the user is not an admin (mapped to 403)
    """
    AccessChecker.require_admin(user)
    return user
