"""
Request and response shapes for the User Management API.

Request models perform field-level validation at the boundary: name format,
birth dates in the future, and the shape of settings entries. Response models are built from the
SQLAlchemy models with `from_db_model` and serialize with snake_case keys,
omitting null fields.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from user_management.database.models import User
from user_management.identifiers import SSN_LENGTH

_NAME_PATTERN = re.compile(r"^[a-zA-Z\s]+$")
_DIGIT = re.compile(r"\d")


def _validate_name(value: Optional[str], label: str) -> Optional[str]:
    if value is None:
        return value
    if not 3 <= len(value) <= 100:
        raise ValueError(f"{label} must be between 3 and 100 characters")
    if not _NAME_PATTERN.fullmatch(value):
        raise ValueError(f"{label} cannot contain special characters")
    return value


def _validate_birth_date(value: date) -> date:
    if value > date.today():
        raise ValueError("Birth date cannot be in the future")
    return value


class UpdateUserRequest(BaseModel):
    """Fields a client may change on an existing user."""

    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    birth_date: date

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("First name is required")
        return _validate_name(v, "First name")

    @field_validator("middle_name")
    @classmethod
    def validate_middle_name(cls, v: Optional[str]) -> Optional[str]:
        return _validate_name(v, "Middle name")

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Last name is required")
        return _validate_name(v, "Last name")

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date) -> date:
        return _validate_birth_date(v)


class CreateUserRequest(UpdateUserRequest):
    """Payload for registering a new user."""

    ssn: str

    @field_validator("ssn")
    @classmethod
    def validate_ssn(cls, v: str) -> str:
        if not _DIGIT.search(v):
            raise ValueError("SSN must contain digits")
        significant = "".join(_DIGIT.findall(v)).lstrip("0")
        if len(significant) > SSN_LENGTH:
            raise ValueError("SSN cannot be longer than 16 digits")
        return v


class UpdateUserSettingsRequest(BaseModel):
    """
    Settings update payload.

    Each entry must hold exactly one key/value pair, e.g.
    `[{"biometric_login": "true"}, {"widget_order": "5,4,3,2,1"}]`.
    Key and value checks happen in the settings service.
    """

    settings: List[Dict[str, str]]

    @field_validator("settings")
    @classmethod
    def validate_entries(cls, v: List[Dict[str, str]]) -> List[Dict[str, str]]:
        if not v:
            raise ValueError("Settings cannot be empty")
        for entry in v:
            if len(entry) != 1:
                raise ValueError("Each setting must have exactly one key-value pair")
        return v


class UserData(BaseModel):
    id: int
    ssn: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    birth_date: date
    created_time: Optional[datetime] = None
    updated_time: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    is_active: bool
    deleted_time: Optional[datetime] = None

    @classmethod
    def from_db_model(cls, user: User) -> "UserData":
        return cls(
            id=user.id,
            ssn=user.ssn,
            first_name=user.first_name,
            middle_name=user.middle_name,
            last_name=user.family_name,
            birth_date=user.birth_date,
            created_time=user.created_at,
            updated_time=user.updated_at,
            created_by=user.created_by,
            updated_by=user.updated_by,
            is_active=user.is_active,
            deleted_time=user.deleted_at,
        )


class UserResponse(BaseModel):
    """A user snapshot together with all of its settings."""

    user_data: UserData
    user_settings: List[Dict[str, str]] = Field(default_factory=list)

    @classmethod
    def from_db_model(cls, user: User) -> "UserResponse":
        return cls(
            user_data=UserData.from_db_model(user),
            user_settings=[{setting.key: setting.value} for setting in user.settings],
        )

    def settings_map(self) -> Dict[str, str]:
        merged: Dict[str, str] = {}
        for entry in self.user_settings:
            merged.update(entry)
        return merged


class UserListResponse(BaseModel):
    user_data: List[UserData]
    max_records: int
    offset: int


class ErrorResponse(BaseModel):
    status: str
    code: int
    message: List[str]
