"""
HTTP routes for user management, mounted under /v1/users.

Handlers only translate between HTTP and the service layer; all rules live
in UserService and UserSettingService. Domain errors propagate to the
exception handlers registered in `user_management.api.main`.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import text
from sqlalchemy.orm import Session

from user_management.config import settings
from user_management.database.session import get_db
from user_management.schemas import (
    CreateUserRequest,
    UpdateUserRequest,
    UpdateUserSettingsRequest,
    UserListResponse,
    UserResponse,
)
from user_management.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/users", tags=["users"])
health_router = APIRouter(tags=["health"])


def get_user_service(session: Session = Depends(get_db)) -> UserService:
    return UserService(session)


@router.get("", response_model=UserListResponse, response_model_exclude_none=True)
def list_users(
    max_records: int = Query(default=settings.api.default_page_size, ge=1),
    offset: int = Query(default=0, ge=0),
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    logger.info(f"GET /v1/users - max_records: {max_records}, offset: {offset}")
    return service.list_users(max_records=max_records, offset=offset)


@router.get("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
def get_user(user_id: int, service: UserService = Depends(get_user_service)) -> UserResponse:
    logger.info(f"GET /v1/users/{user_id}")
    return service.get_user(user_id)


@router.post(
    "",
    response_model=UserResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    request: CreateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    logger.info(f"POST /v1/users - Creating user with SSN: {request.ssn}")
    return service.create_user(request)


@router.put("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
def update_user(
    user_id: int,
    request: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    logger.info(f"PUT /v1/users/{user_id}")
    return service.update_user(user_id, request)


@router.put(
    "/{user_id}/settings",
    response_model=UserResponse,
    response_model_exclude_none=True,
)
def update_user_settings(
    user_id: int,
    request: UpdateUserSettingsRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    logger.info(f"PUT /v1/users/{user_id}/settings")
    return service.update_user_settings(user_id, request.settings)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, service: UserService = Depends(get_user_service)) -> Response:
    logger.info(f"DELETE /v1/users/{user_id}")
    service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{user_id}/refresh", response_model=UserResponse, response_model_exclude_none=True)
def restore_user(user_id: int, service: UserService = Depends(get_user_service)) -> UserResponse:
    logger.info(f"PUT /v1/users/{user_id}/refresh")
    return service.restore_user(user_id)


@health_router.get("/health")
def health(session: Session = Depends(get_db)) -> Dict[str, Any]:
    """Liveness check that also verifies the database answers."""
    session.execute(text("SELECT 1"))
    return {"status": "healthy"}
