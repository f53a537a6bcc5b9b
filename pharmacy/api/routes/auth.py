"""Registration, login and current-user endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import auth_middleware, get_current_user
from pharmacy.api.middleware.rate_limiter import check_auth_rate_limit
from pharmacy.models.user import UserCreate, UserDB, UserPublic, UserRole
from pharmacy.services.database import get_db_session
from pharmacy.services.users import UserRepository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


class LoginRequest(BaseModel):
    """Login form. Both fields are checked by the handler so that a missing
    field is a 400 rather than a schema error."""

    email: str | None = None
    password: str | None = None


class AuthResponse(BaseModel):
    """Authenticated user and the bearer token to send on later requests."""

    user: UserPublic
    access_token: str
    token_type: str = "bearer"


def _auth_response(user: UserDB) -> AuthResponse:
    token = auth_middleware.token_validator.issue_token(user.id, user.role)
    return AuthResponse(user=UserPublic.model_validate(user), access_token=token)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_auth_rate_limit)],
)
async def register(
    request: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    """Create an account and sign it in.

    Self-registration always creates a regular user, whatever role is sent.

    Raises:
        HTTPException: 409 if the email or username is already taken
    """
    users = UserRepository(db)

    if await users.get_user_by_email(request.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    if await users.get_user_by_username(request.username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists")

    user = await users.create_user(request.model_copy(update={"role": UserRole.USER}))
    logger.info("user_registered", user_id=user.id)
    return _auth_response(user)


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(check_auth_rate_limit)],
)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    """Exchange email and password for an access token.

    Raises:
        HTTPException: 400 if a field is missing, 401 on bad credentials
    """
    if not request.email or not request.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    user = await UserRepository(db).authenticate(request.email, request.password)
    if user is None:
        logger.info("login_failed", email=request.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("login_succeeded", user_id=user.id)
    return _auth_response(user)


@router.post("/logout")
async def logout() -> dict:
    """Tokens are stateless; the client discards its copy."""
    return {"message": "Logged out successfully"}


@router.get("/user", response_model=UserPublic)
async def current_user(user: UserDB = Depends(get_current_user)) -> UserDB:
    return user
