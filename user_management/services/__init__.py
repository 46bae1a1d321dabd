"""
Service layer for business logic operations.

This package provides the services that own the user lifecycle and the
reconciliation of per-user settings.
"""

from user_management.services.user_service import UserService
from user_management.services.user_settings_service import UserSettingService

__all__ = [
    "UserService",
    "UserSettingService",
]
