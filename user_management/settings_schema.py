"""
Closed schema of per-user settings.

Every recognized setting key carries its default value and the pattern a
submitted value must fully match. New users are seeded with
`default_settings()`; updates are checked with `validate_settings()`.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, List, Mapping, Optional

_BOOLEAN_PATTERN = r"^(true|false)$"


class SettingKey(str, Enum):
    """
    Enumeration of recognized setting keys.

    The enum value is the key string itself; `default_value` and
    `validation_pattern` are attached per member.
    """

    BIOMETRIC_LOGIN = ("biometric_login", "false", _BOOLEAN_PATTERN)
    PUSH_NOTIFICATION = ("push_notification", "false", _BOOLEAN_PATTERN)
    SMS_NOTIFICATION = ("sms_notification", "false", _BOOLEAN_PATTERN)
    SHOW_ONBOARDING = ("show_onboarding", "false", _BOOLEAN_PATTERN)
    WIDGET_ORDER = ("widget_order", "1,2,3,4,5", r"^[1-5](,[1-5]){4}$")

    def __new__(cls, key: str, default_value: str, validation_pattern: str) -> "SettingKey":
        member = str.__new__(cls, key)
        member._value_ = key
        member.default_value = default_value
        member.validation_pattern = validation_pattern
        member._regex = re.compile(validation_pattern)
        return member

    @property
    def key(self) -> str:
        return self.value

    @classmethod
    def from_key(cls, key: Optional[str]) -> Optional["SettingKey"]:
        """Look up a member by its key string; None when the key is unknown."""
        for member in cls:
            if member.value == key:
                return member
        return None

    def is_valid_value(self, value: Optional[str]) -> bool:
        """Check a value against this key's pattern. Blank values are invalid."""
        if value is None or not str(value).strip():
            return False
        return self._regex.fullmatch(str(value)) is not None


def is_valid_setting(key: Optional[str], value: Optional[str]) -> bool:
    setting_key = SettingKey.from_key(key)
    if setting_key is None:
        return False
    return setting_key.is_valid_value(value)


def default_settings() -> Dict[str, str]:
    """
    Build the default settings for a new user.

    Returns:
        Mapping of every recognized key to its default, in declaration order
    """
    return {member.key: member.default_value for member in SettingKey}


def validate_settings(settings: Optional[Mapping[str, str]]) -> List[str]:
    """
    Validate a batch of settings against the schema.

    Args:
        settings: Mapping of setting key to submitted value

    Returns:
        One error message per offending entry, in the mapping's iteration
        order. An empty list means every entry is valid.
    """
    if not settings:
        return ["Settings cannot be empty"]

    errors: List[str] = []
    for key, value in settings.items():
        setting_key = SettingKey.from_key(key)
        if setting_key is None:
            errors.append(f"Invalid setting key: {key}")
        elif not setting_key.is_valid_value(value):
            errors.append(
                f"Invalid value for setting {key}: {value} "
                f"(expected pattern: {setting_key.validation_pattern})"
            )
    return errors
