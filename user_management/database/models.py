"""
Database models for the User Management service.

This module defines SQLAlchemy models for user profiles and their per-user
key/value settings. A user exclusively owns its settings: settings are created
together with the user and removed with it.
"""

from datetime import date, datetime
from typing import List

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

SYSTEM_ACTOR = "SYSTEM"


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class AuditMixin:
    """
    Mixin class providing created/updated timestamps and actor stamps.

    Timestamps are filled by the database; actor stamps default to the
    system actor and are overwritten by the service when configured.
    """

    created_at: Mapped[datetime] = mapped_column(
        "created_time",
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created",
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updated_time",
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Timestamp when the record was last updated",
    )
    created_by: Mapped[str] = mapped_column(
        String(100),
        default=SYSTEM_ACTOR,
        nullable=False,
        doc="Actor that created the record",
    )
    updated_by: Mapped[str] = mapped_column(
        String(100),
        default=SYSTEM_ACTOR,
        nullable=False,
        doc="Actor that last updated the record",
    )


class User(Base, AuditMixin):
    """
    Model for storing user profiles.

    Users are soft-deleted: `is_active` is cleared and `deleted_at` stamped,
    the row itself is kept and its ssn stays reserved.

    Attributes:
        id: Primary key
        ssn: Canonical 16-digit identifier (unique, immutable after creation)
        first_name: Given name
        middle_name: Middle name (nullable)
        family_name: Family name
        birth_date: Date of birth
        is_active: False once the user has been soft-deleted
        deleted_at: Timestamp of the soft delete (nullable)
        settings: Settings owned by this user, in insertion order
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, doc="Primary key")
    ssn: Mapped[str] = mapped_column(
        String(16),
        unique=True,
        nullable=False,
        index=True,
        doc="Canonical zero-padded identifier",
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    family_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
        doc="Whether the user is active (not soft-deleted)",
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        "deleted_time",
        DateTime(timezone=True),
        nullable=True,
        doc="Timestamp when the user was soft-deleted",
    )

    # Relationships
    settings: Mapped[List["UserSetting"]] = relationship(
        "UserSetting",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserSetting.id",
        doc="Settings owned by this user",
    )

    __table_args__ = (
        Index("idx_user_active_id", "is_active", "id"),
    )

    def add_setting(self, setting: "UserSetting") -> None:
        self.settings.append(setting)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, ssn='{self.ssn}', is_active={self.is_active})>"


class UserSetting(Base):
    """
    Model for storing a single key/value setting of a user.

    Attributes:
        id: Primary key
        user_id: Owning user
        key: Setting key (one of the recognized setting keys)
        value: Setting value (matches the key's validation pattern)
    """

    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, doc="Primary key")
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    key: Mapped[str] = mapped_column("setting_key", String(100), nullable=False)
    value: Mapped[str] = mapped_column("setting_value", String(100), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="settings")

    __table_args__ = (
        UniqueConstraint("user_id", "setting_key", name="uq_user_settings_user_key"),
    )

    def __repr__(self) -> str:
        return f"<UserSetting(user_id={self.user_id}, key='{self.key}', value='{self.value}')>"
