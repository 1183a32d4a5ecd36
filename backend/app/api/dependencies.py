from typing import Callable

from fastapi import Depends, Query, status

from ..core.config import settings
from ..models.user import AccountStatus, User, UserRole, WORKER_ROLES
from ..utils import error_response
from .auth import get_current_user


_APPROVAL_REQUIRED = frozenset({UserRole.CONTRACTOR, UserRole.ADMIN})


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Refuse blocked accounts; contractors and admins must also be approved."""
    if current_user.status == AccountStatus.BLOCKED:
        raise error_response("Account is blocked", {"status": "blocked"}, status.HTTP_403_FORBIDDEN)
    if current_user.role in _APPROVAL_REQUIRED and current_user.status != AccountStatus.APPROVED:
        raise error_response(
            "Account is awaiting approval",
            {"status": current_user.status.value},
            status.HTTP_403_FORBIDDEN,
        )
    return current_user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Return a dependency that admits only users holding one of ``roles``."""
    allowed = frozenset(roles)

    def _dependency(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in allowed:
            raise error_response(
                "User role not permitted for this action",
                {"role": current_user.role.value},
                status.HTTP_403_FORBIDDEN,
            )
        return current_user

    return _dependency


get_current_customer = require_roles(UserRole.CUSTOMER)
get_current_worker = require_roles(*WORKER_ROLES)
get_current_contractor = require_roles(UserRole.CONTRACTOR)
get_current_handler = require_roles(UserRole.CONTRACTOR, *WORKER_ROLES)
get_current_admin = require_roles(UserRole.ADMIN)


class PageParams:
    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    ):
        self.page = page
        self.limit = limit
