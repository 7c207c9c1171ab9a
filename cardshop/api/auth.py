"""
Caller identity dependencies.

Sign-in happens outside this service. The auth proxy in front of the API
asserts who the caller is through request headers (names configured in
settings). A request without the user id header is anonymous.
"""

from typing import Annotated

from fastapi import Depends, Request

from cardshop.config import settings
from cardshop.models.db import UserRole
from cardshop.models.failure import NotAuthenticatedError, NotAuthorizedError
from cardshop.models.order import Caller


async def get_caller(request: Request) -> Caller | None:
    """Resolve the caller from identity headers, or None if anonymous."""
    user_id = request.headers.get(settings.user_id_header, "").strip()
    if not user_id:
        return None

    raw_role = request.headers.get(settings.user_role_header, UserRole.CUSTOMER.value)
    try:
        role = UserRole(raw_role.strip().upper())
    except ValueError:
        role = UserRole.CUSTOMER

    return Caller(
        user_id=user_id,
        email=request.headers.get(settings.user_email_header),
        name=request.headers.get(settings.user_name_header),
        role=role,
    )


async def require_caller(caller: Annotated[Caller | None, Depends(get_caller)]) -> Caller:
    if caller is None:
        raise NotAuthenticatedError()
    return caller


async def require_admin(caller: Annotated[Caller, Depends(require_caller)]) -> Caller:
    if not caller.is_admin:
        raise NotAuthorizedError(required_role=UserRole.ADMIN.value)
    return caller
