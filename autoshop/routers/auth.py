"""
Unified login/register routes.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.auth import get_current_active_user
from autoshop.database import get_db
from autoshop.errors import AuthenticationError, ConflictError, FormValidationError, PermissionDeniedError
from autoshop.models.customer import Customer, CustomerStatus
from autoshop.models.user import User, UserRole
from autoshop.schemas.user import (
    User as UserSchema,
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    PasswordStrength,
    PasswordStrengthRequest,
    RegisterRequest,
)
from autoshop.security import create_access_token, hash_password, verify_password
from autoshop.validators import (
    normalize_phone,
    password_strength,
    strength_label,
    validate_login,
    validate_registration,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

CUSTOMER_HOME = "/customer/dashboard"
ADMIN_HOME = "/admin/dashboard"


def _strength(password: str) -> PasswordStrength:
    score, suggestions = password_strength(password)
    return PasswordStrength(score=score, label=strength_label(score), suggestions=suggestions)


def _auth_response(user: User, **extra) -> AuthResponse:
    token = create_access_token(
        user.id,
        {"email": user.email, "role": user.role.value, "name": user.name},
    )
    return AuthResponse(
        user=UserSchema.model_validate(user),
        token=token,
        redirect_to=CUSTOMER_HOME if user.role == UserRole.CUSTOMER else ADMIN_HOME,
        **extra,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(form: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """
    Register an admin or customer account.

    Customer accounts are linked to a CRM customer record with the same
    email, which is created when it does not exist yet. A record that
    already belongs to another account is never shared.
    """
    errors = validate_registration(
        form.name,
        form.email,
        form.password,
        form.confirm_password,
        form.role,
        phone=form.phone,
        business_name=form.business_name,
    )
    if errors:
        raise FormValidationError(errors)

    email = form.email.strip().lower()
    name = form.name.strip()
    phone = normalize_phone(form.phone) if form.phone else None

    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        hashed_password=hash_password(form.password),
        name=name,
        phone=phone,
        role=form.role,
        business_name=form.business_name.strip() if form.business_name else None,
    )

    if form.role == UserRole.CUSTOMER:
        result = await db.execute(select(Customer).where(Customer.email == email))
        customer = result.scalar_one_or_none()
        if customer:
            result = await db.execute(select(User.id).where(User.customer_id == customer.id))
            if result.scalar_one_or_none() is not None:
                raise ConflictError("Email already registered")
        else:
            customer = Customer(name=name, email=email, phone=phone or "", status=CustomerStatus.ACTIVE)
            db.add(customer)
            await db.flush()
        user.customer_id = customer.id

    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Registered %s account %s", user.role.value, user.email)
    return _auth_response(user, password_strength=_strength(form.password))


@router.post("/login", response_model=AuthResponse)
async def login(form: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Login with email and password.
    """
    errors = validate_login(form.email, form.password)
    if errors:
        raise FormValidationError(errors)

    email = form.email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(form.password, user.hashed_password):
        logger.warning("Failed login for %s", email)
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise PermissionDeniedError("Account is deactivated")

    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)

    logger.info("User %s logged in", user.email)
    return _auth_response(user)


@router.get("/me", response_model=UserSchema)
async def read_current_user(current_user: User = Depends(get_current_active_user)):
    """
    Get the logged-in user.
    """
    return current_user


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    if not verify_password(body.current_password, current_user.hashed_password):
        raise AuthenticationError("Current password is incorrect")

    current_user.hashed_password = hash_password(body.new_password)
    await db.commit()

    logger.info("Password changed for %s", current_user.email)
    return MessageResponse(message="Password updated successfully")


@router.post("/password-strength", response_model=PasswordStrength)
async def check_password_strength(body: PasswordStrengthRequest):
    return _strength(body.password)
