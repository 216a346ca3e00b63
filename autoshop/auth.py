"""
Authentication and role-based access dependencies.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.database import get_db
from autoshop.models.customer import Customer
from autoshop.models.user import User, UserRole, ADMIN_ROLES
from autoshop.security import decode_access_token

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the user from the Bearer token or raise 401.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = int(payload["sub"])
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return current_user


def require_roles(*roles: UserRole):
    """
    Build a dependency that only lets the given roles through.
    """
    async def dependency(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Required roles: " + ", ".join(role.value for role in roles),
            )
        return current_user

    return dependency


require_any_admin = require_roles(*ADMIN_ROLES)
require_customer = require_roles(UserRole.CUSTOMER)


async def get_current_customer(
    current_user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> Optional[Customer]:
    """
    The CRM record linked to the logged-in customer, or None when there is none.
    """
    if current_user.customer_id is None:
        return None
    result = await db.execute(select(Customer).where(Customer.id == current_user.customer_id))
    return result.scalar_one_or_none()
