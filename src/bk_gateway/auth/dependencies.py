"""FastAPI auth dependencies.

Usage in any protected router:
    from src.bk_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: Annotated[CurrentUser, Depends(get_current_user)]):
        ...

Authorization is explicit: routers call `ensure_account_access` with the
ownership capability instead of relying on route metadata.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.bk_account.application.ownership import AccountOwnershipService
from src.bk_common.enums import UserRole
from src.bk_common.errors import ForbiddenError, InvalidCredentialsError
from src.bk_gateway.auth.jwt_handler import decode_token

# tokenUrl points at the external auth service (used for Swagger's "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Validate the Bearer token and return the caller's identity.

    Raises HTTP 401 if the token is missing, invalid, expired or malformed.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    try:
        user_id = int(payload["sub"])
        role = UserRole(payload.get("role", UserRole.CUSTOMER.value))
    except (KeyError, TypeError, ValueError):
        raise _CREDENTIALS_EXCEPTION from None
    return CurrentUser(id=user_id, role=role)


async def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Raises HTTP 403 (ForbiddenError) unless the caller is an ADMIN."""
    if not current_user.is_admin:
        raise ForbiddenError("Admin role required")
    return current_user


async def ensure_account_access(
    user: CurrentUser, account_id: int, ownership: AccountOwnershipService
) -> None:
    """Owner or ADMIN may act on an account; anyone else gets 403.

    A missing account also yields 403 for non-admins, so account ids cannot be
    probed.
    """
    if user.is_admin:
        return
    if not await ownership.is_resource_owner(user.id, account_id):
        raise ForbiddenError()
