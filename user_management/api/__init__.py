"""
HTTP API for the User Management service.
"""

from user_management.api.main import create_app

__all__ = [
    "create_app",
]
