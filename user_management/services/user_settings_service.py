"""
Settings reconciliation for users.

Merges a list of single-entry setting updates into a user's stored settings:
the whole batch is validated first, then each key is updated in place or
created. Nothing is written when any entry is invalid, and settings are
never removed.
"""

from typing import Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from user_management.config import AppConfig
from user_management.database.models import User, UserSetting
from user_management.database.repositories import UserRepository, UserSettingRepository
from user_management.errors import InvalidRequestError, ResourceNotFoundError
from user_management.schemas import UserResponse
from user_management.services.base import BaseService
from user_management.settings_schema import default_settings, validate_settings


def collapse_settings(settings: List[Mapping[str, str]]) -> Dict[str, str]:
    """
    Merge single-entry mappings into one mapping; later entries win.

    Keys keep the position of their first occurrence.
    """
    merged: Dict[str, str] = {}
    for entry in settings or []:
        merged.update(entry)
    return merged


class UserSettingService(BaseService):
    """Service owning creation and updates of user settings."""

    def __init__(self, session: Session, config: Optional[AppConfig] = None) -> None:
        super().__init__(session, config)
        self.user_repo = UserRepository(session)
        self.setting_repo = UserSettingRepository(session)

    def create_default_settings(self, user: User) -> None:
        """
        Attach one setting per recognized key, with its default value.

        Runs inside the caller's unit of work; the settings are written when
        the caller flushes or commits.
        """
        defaults = default_settings()
        for key, value in defaults.items():
            user.add_setting(UserSetting(key=key, value=value))

        self.logger.info(f"Created {len(defaults)} default settings for user id: {user.id}")

    def update_user_settings(
        self, user_id: int, settings: List[Mapping[str, str]]
    ) -> UserResponse:
        """
        Apply a batch of setting updates to an active user.

        Args:
            user_id: ID of the user to update
            settings: Single-entry mappings such as [{"biometric_login": "true"}]

        Returns:
            The user snapshot with all of its settings after the update

        Raises:
            ResourceNotFoundError: If the user does not exist or is deleted
            InvalidRequestError: If any key or value is invalid (nothing is written)
        """
        self.logger.info(f"Updating settings for user id: {user_id}")

        with self.unit_of_work():
            user = self.user_repo.find_active_by_id(user_id)
            if user is None:
                raise ResourceNotFoundError(user_id)

            settings_map = collapse_settings(settings)

            errors = validate_settings(settings_map)
            if errors:
                self.logger.error(f"Invalid settings for user id {user_id}: {errors}")
                raise InvalidRequestError(errors)

            for key, value in settings_map.items():
                existing = self.setting_repo.find_by_user_id_and_key(user_id, key)
                if existing is not None:
                    existing.value = value
                    self.setting_repo.save(existing)
                    self.logger.debug(f"Updated setting {key} to {value} for user id: {user_id}")
                else:
                    self.setting_repo.save(UserSetting(key=key, value=value, user=user))
                    self.logger.debug(f"Created setting {key} with value {value} for user id: {user_id}")

            user.updated_by = self.audit_actor

        self.logger.info(f"Successfully updated {len(settings_map)} settings for user id: {user_id}")

        updated = self.user_repo.find_active_by_id(user_id)
        if updated is None:
            raise ResourceNotFoundError(user_id)
        return UserResponse.from_db_model(updated)
