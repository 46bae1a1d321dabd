"""
Repository pattern implementation for database operations.

This module provides repository classes that abstract database operations,
offering clean interfaces for data access. Repositories never commit: the
service layer owns the unit of work and decides when to commit or roll back.
"""

from typing import Any, Generic, List, Optional, TypeVar

from sqlalchemy.orm import Session, selectinload

from user_management.database.models import User, UserSetting

# Type variable for generic repository
T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository class providing common operations.

    Type Parameters:
        T: The SQLAlchemy model type this repository works with

    Attributes:
        session: SQLAlchemy session for database operations
        model: The model class this repository manages
    """

    def __init__(self, session: Session, model: type[T]) -> None:
        self.session = session
        self.model = model

    def save(self, instance: T) -> T:
        """
        Insert or update a record.

        Args:
            instance: Model instance to persist

        Returns:
            The persisted instance (with ID populated)

        Note:
            Does not commit - caller must commit the session
        """
        self.session.add(instance)
        self.session.flush()
        return instance

    def query(self) -> Any:
        """
        Get base query object for custom queries.

        Example:
            ```python
            query = repo.query().filter(Model.field == value)
            results = query.all()
            ```
        """
        return self.session.query(self.model)


class UserRepository(BaseRepository[User]):
    """
    Repository for user records.

    "Active" lookups exclude soft-deleted users; "any" lookups do not.
    Single-user lookups eager-load the user's settings so a returned user is
    a complete snapshot.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, User)

    def _active(self) -> Any:
        return self.query().filter(User.is_active.is_(True))

    def find_active_by_id(self, user_id: int) -> Optional[User]:
        """
        Get an active user by ID.

        Args:
            user_id: Primary key ID

        Returns:
            User with settings loaded if found and active, None otherwise
        """
        return (
            self._active()
            .options(selectinload(User.settings))
            .filter(User.id == user_id)
            .first()
        )

    def find_any_by_id(self, user_id: int) -> Optional[User]:
        """Get a user by ID regardless of active/deleted state."""
        return (
            self.query()
            .options(selectinload(User.settings))
            .filter(User.id == user_id)
            .first()
        )

    def exists_by_ssn(self, ssn: str) -> bool:
        """
        Check whether any user, active or deleted, holds this identifier.

        Args:
            ssn: Canonical identifier
        """
        return self.session.query(self.query().filter(User.ssn == ssn).exists()).scalar()

    def find_active_page(self, limit: int, offset: int = 0) -> List[User]:
        """
        Get a page of active users.

        Args:
            limit: Maximum number of users to return
            offset: Number of active users to skip

        Returns:
            List of active users sorted by id (ascending)
        """
        return (
            self._active()
            .order_by(User.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_active(self) -> int:
        return self._active().count()


class UserSettingRepository(BaseRepository[UserSetting]):
    """Repository for per-user settings."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, UserSetting)

    def find_by_user_id_and_key(self, user_id: int, key: str) -> Optional[UserSetting]:
        """
        Get the setting row for a (user, key) pair.

        Returns:
            UserSetting instance if found, None otherwise
        """
        return (
            self.query()
            .filter(UserSetting.user_id == user_id, UserSetting.key == key)
            .first()
        )
