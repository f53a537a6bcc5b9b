"""Role and ownership checks for pharmacy resources."""

from pharmacy.models.user import UserDB, UserRole


class AccessChecker:
    """Checks whether a user may act on a resource.

    Admins may act on every record. Regular users may only touch records
    they own.
    """

    @staticmethod
    def is_admin(user: UserDB) -> bool:
        return user.role == UserRole.ADMIN.value

    @classmethod
    def can_access(cls, user: UserDB, owner_id: int | None) -> bool:
        """Check if user may read or modify a record owned by owner_id."""
        if cls.is_admin(user):
            return True
        return owner_id is not None and user.id == owner_id

    @classmethod
    def require_admin(cls, user: UserDB, action: str = "perform this action") -> None:
        """Require admin role, raise exception if missing.

        Raises:
            PermissionError: If user is not an admin
        """
        if not cls.is_admin(user):
            raise PermissionError(f"Administrator access is required to {action}")

    @classmethod
    def require_owner_or_admin(
        cls, user: UserDB, owner_id: int | None, resource: str = "resource"
    ) -> None:
        """Require ownership of a record (or admin role).

        Raises:
            PermissionError: If user neither owns the record nor is an admin
        """
        if not cls.can_access(user, owner_id):
            raise PermissionError(f"You do not have access to this {resource}")
