"""User account persistence and profile management."""

import structlog
from sqlalchemy import delete, func, or_, select

from pharmacy.auth.passwords import hash_password, verify_password
from pharmacy.models.user import (
    ProfileCompletion,
    UserCreate,
    UserDB,
    UserRole,
    UserUpdate,
)
from pharmacy.services.repository import Repository

logger = structlog.get_logger(__name__)


class UserRepository(Repository):
    """Manages user accounts, profiles and allergy lists."""

    async def get_user(self, user_id: int) -> UserDB | None:
        return await self.db_session.get(UserDB, user_id)

    async def get_user_by_email(self, email: str) -> UserDB | None:
        query = select(UserDB).where(func.lower(UserDB.email) == email.lower())
        result = await self.db_session.execute(query)
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> UserDB | None:
        query = select(UserDB).where(UserDB.username == username)
        result = await self.db_session.execute(query)
        return result.scalar_one_or_none()

    async def create_user(self, data: UserCreate) -> UserDB:
        """Create a user, hashing the supplied password.

        Args:
            data: Validated registration payload

        Returns:
            The persisted user
        """
        values = data.model_dump(mode="json")
        values["password"] = await hash_password(data.password)
        values["email"] = data.email.lower()

        user = UserDB(**values)
        await self._persist(user)

        logger.info("user_created", user_id=user.id, role=user.role)
        return user

    async def update_user(self, user_id: int, data: UserUpdate) -> UserDB | None:
        """Apply a partial update. Returns None when the user does not exist."""
        user = await self.get_user(user_id)
        if user is None:
            return None

        changes = data.model_dump(exclude_unset=True, mode="json")
        if changes.get("password"):
            changes["password"] = await hash_password(changes["password"])
        if changes.get("email"):
            changes["email"] = changes["email"].lower()

        self._apply_changes(user, changes)
        await self._persist(user)
        return user

    async def delete_user(self, user_id: int) -> bool:
        result = await self.db_session.execute(delete(UserDB).where(UserDB.id == user_id))
        await self.db_session.commit()
        return result.rowcount > 0

    async def list_users(
        self, search: str | None = None, limit: int = 50, offset: int = 0
    ) -> list[UserDB]:
        """List users for the admin screen, optionally filtered by a search term.

        The term matches username, email, first or last name (case-insensitive).
        """
        query = select(UserDB)

        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(UserDB.username).like(pattern),
                    func.lower(UserDB.email).like(pattern),
                    func.lower(UserDB.first_name).like(pattern),
                    func.lower(UserDB.last_name).like(pattern),
                )
            )

        query = query.order_by(UserDB.id).limit(limit).offset(offset)
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def authenticate(self, email: str, password: str) -> UserDB | None:
        """Return the user when email and password match, None otherwise."""
        user = await self.get_user_by_email(email)
        if user is None:
            return None
        if not await verify_password(password, user.password):
            return None
        return user

    async def complete_profile(self, user_id: int, data: ProfileCompletion) -> UserDB | None:
        """Store the completed profile and mark it complete."""
        user = await self.get_user(user_id)
        if user is None:
            return None

        self._apply_changes(user, data.model_dump(mode="json"))
        user.email = data.email.lower()
        user.profile_completed = True
        await self._persist(user)

        logger.info("profile_completed", user_id=user_id)
        return user

    async def update_allergies(self, user_id: int, allergies: list[str]) -> UserDB | None:
        """Replace a user's allergy list. Any change requires re-verification."""
        user = await self.get_user(user_id)
        if user is None:
            return None

        user.allergies = allergies
        user.allergies_verified = False
        await self._persist(user)
        return user

    async def list_unverified_allergies(self) -> list[UserDB]:
        """Users whose recorded allergies still await pharmacist review."""
        query = (
            select(UserDB)
            .where(UserDB.allergies_verified.is_(False), UserDB.allergies.isnot(None))
            .order_by(UserDB.id)
        )
        result = await self.db_session.execute(query)
        return [user for user in result.scalars().all() if user.allergies]

    async def verify_allergies(self, user_id: int) -> UserDB | None:
        user = await self.get_user(user_id)
        if user is None:
            return None

        user.allergies_verified = True
        await self._persist(user)
        return user

    async def ensure_admin(self, email: str, password: str, **profile) -> tuple[UserDB, bool]:
        """Create an admin account, or promote the existing one.

        Returns:
            Tuple of (user, created)
        """
        existing = await self.get_user_by_email(email)
        if existing is not None:
            existing.role = UserRole.ADMIN.value
            await self._persist(existing)
            return existing, False

        user = await self.create_user(
            UserCreate(
                username=profile.pop("username", email.split("@")[0]),
                email=email,
                password=password,
                role=UserRole.ADMIN,
                **profile,
            )
        )
        user.profile_completed = True
        await self._persist(user)
        return user, True
