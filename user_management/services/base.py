"""
Base service class shared by the user and settings services.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from user_management.config import AppConfig, settings
from user_management.errors import SystemFailureError


class BaseService:
    """
    Common plumbing for services.

    Provides configuration access, a per-class logger, and the unit-of-work
    boundary every public operation runs inside.
    """

    def __init__(self, session: Session, config: Optional[AppConfig] = None) -> None:
        """
        Initialize service with database session and configuration.

        Args:
            session: SQLAlchemy session for repository operations
            config: Application configuration (global settings if omitted)
        """
        self.session = session
        self.config = config or settings
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def audit_actor(self) -> str:
        return self.config.user_policy.audit_actor

    @contextmanager
    def unit_of_work(self) -> Generator[Session, None, None]:
        """
        Run the enclosed operations atomically.

        Commits when the block completes. On any exception every write made
        in the block is rolled back and the error re-raised; database errors
        surface as SystemFailureError. After the commit, reads observe the
        committed state because the session expires loaded instances.
        """
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            self.logger.error(f"Database error, rolling back transaction: {e}")
            raise SystemFailureError(str(e)) from e
        except Exception:
            self.session.rollback()
            raise
