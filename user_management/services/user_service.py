"""
User lifecycle service.

Owns creation, update, soft delete and restore of users. A user is either
active or soft-deleted; soft-deleted users are invisible to every read except
restore, and their ssn stays reserved.

Every public method runs as a single unit of work and returns a snapshot read
back after the commit, so the caller always sees the user row together with
all of its settings.
"""

from datetime import date, datetime, timezone
from typing import List, Mapping, Optional

from sqlalchemy.orm import Session

from user_management.config import AppConfig
from user_management.database.models import User
from user_management.database.repositories import UserRepository
from user_management.dates import years_before
from user_management.errors import (
    DuplicateResourceError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from user_management.identifiers import IdentifierFormatError, normalize_identifier
from user_management.schemas import (
    CreateUserRequest,
    UpdateUserRequest,
    UserData,
    UserListResponse,
    UserResponse,
)
from user_management.services.base import BaseService
from user_management.services.user_settings_service import UserSettingService


class UserService(BaseService):
    """Service for user lifecycle operations."""

    def __init__(
        self,
        session: Session,
        config: Optional[AppConfig] = None,
        setting_service: Optional[UserSettingService] = None,
    ) -> None:
        super().__init__(session, config)
        self.user_repo = UserRepository(session)
        self.setting_service = setting_service or UserSettingService(session, self.config)

    def list_users(self, max_records: int, offset: int = 0) -> UserListResponse:
        """
        Get a page of active users ordered by id.

        Args:
            max_records: Page size
            offset: Number of active users to skip
        """
        self.logger.info(f"Fetching users with max_records: {max_records}, offset: {offset}")

        users = self.user_repo.find_active_page(limit=max_records, offset=offset)
        self.logger.debug(
            f"Returning {len(users)} of {self.user_repo.count_active()} active users"
        )

        return UserListResponse(
            user_data=[UserData.from_db_model(user) for user in users],
            max_records=max_records,
            offset=offset,
        )

    def get_user(self, user_id: int) -> UserResponse:
        """
        Get an active user with settings.

        Raises:
            ResourceNotFoundError: If the user does not exist or is deleted
        """
        self.logger.info(f"Fetching user by id: {user_id}")
        return UserResponse.from_db_model(self._get_active_user(user_id))

    def create_user(self, request: CreateUserRequest) -> UserResponse:
        """
        Register a new active user seeded with the default settings.

        The user row and its settings are committed together.

        Raises:
            DuplicateResourceError: If any user, active or deleted, holds the ssn
            InvalidRequestError: If the ssn is malformed or the birth date is too old
        """
        self.logger.info(f"Creating new user with SSN: {request.ssn}")

        try:
            ssn = normalize_identifier(request.ssn)
        except IdentifierFormatError as e:
            raise InvalidRequestError.for_field("ssn", request.ssn) from e

        with self.unit_of_work():
            if self.user_repo.exists_by_ssn(ssn):
                self.logger.error(f"SSN already exists: {ssn}")
                raise DuplicateResourceError(ssn)

            self._validate_birth_date(request.birth_date)

            user = User(
                ssn=ssn,
                first_name=request.first_name,
                middle_name=request.middle_name,
                family_name=request.last_name,
                birth_date=request.birth_date,
                is_active=True,
                created_by=self.audit_actor,
                updated_by=self.audit_actor,
            )
            user = self.user_repo.save(user)
            self.logger.info(f"User created successfully with id: {user.id}")

            self.setting_service.create_default_settings(user)
            self.session.flush()
            user_id = user.id

        return UserResponse.from_db_model(self._get_active_user(user_id))

    def update_user(self, user_id: int, request: UpdateUserRequest) -> UserResponse:
        """
        Overwrite the editable fields of an active user.

        Only names and birth date change; ssn and lifecycle state are untouched.

        Raises:
            ResourceNotFoundError: If the user does not exist or is deleted
            InvalidRequestError: If the birth date is too old
        """
        self.logger.info(f"Updating user with id: {user_id}")

        with self.unit_of_work():
            user = self._get_active_user(user_id)
            self._validate_birth_date(request.birth_date)

            user.first_name = request.first_name
            user.middle_name = request.middle_name
            user.family_name = request.last_name
            user.birth_date = request.birth_date
            user.updated_by = self.audit_actor
            self.user_repo.save(user)

        self.logger.info(f"User updated successfully with id: {user_id}")
        return UserResponse.from_db_model(self._get_active_user(user_id))

    def delete_user(self, user_id: int) -> None:
        """
        Soft delete an active user.

        Raises:
            ResourceNotFoundError: If the user does not exist or is already deleted
        """
        self.logger.info(f"Soft deleting user with id: {user_id}")

        with self.unit_of_work():
            user = self._get_active_user(user_id)
            user.is_active = False
            user.deleted_at = datetime.now(timezone.utc)
            user.updated_by = self.audit_actor
            self.user_repo.save(user)

        self.logger.info(f"User soft deleted successfully with id: {user_id}")

    def restore_user(self, user_id: int) -> UserResponse:
        """
        Bring a soft-deleted user back to the active state.

        Raises:
            ResourceNotFoundError: If no user with this id exists at all
            InvalidRequestError: If the user is already active
        """
        self.logger.info(f"Restoring user with id: {user_id}")

        with self.unit_of_work():
            user = self.user_repo.find_any_by_id(user_id)
            if user is None:
                raise ResourceNotFoundError(user_id)

            if user.is_active and user.deleted_at is None:
                self.logger.warning(f"User with id {user_id} is already active")
                raise InvalidRequestError("User is already active")

            user.is_active = True
            user.deleted_at = None
            user.updated_by = self.audit_actor
            self.user_repo.save(user)

        self.logger.info(f"User restored successfully with id: {user_id}")
        return UserResponse.from_db_model(self._get_active_user(user_id))

    def update_user_settings(
        self, user_id: int, settings: List[Mapping[str, str]]
    ) -> UserResponse:
        self.logger.info(f"Updating settings for user with id: {user_id}")
        return self.setting_service.update_user_settings(user_id, settings)

    def _get_active_user(self, user_id: int) -> User:
        user = self.user_repo.find_active_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError(user_id)
        return user

    def _validate_birth_date(self, birth_date: date) -> None:
        """Reject birth dates earlier than today minus the configured maximum age."""
        max_age = self.config.user_policy.max_age_years
        oldest_allowed = years_before(date.today(), max_age)
        if birth_date < oldest_allowed:
            self.logger.error(f"Birth date is older than {max_age} years: {birth_date}")
            raise InvalidRequestError(
                f"Birth date cannot be older than {max_age} years, "
                f"rejected value: {birth_date}"
            )
