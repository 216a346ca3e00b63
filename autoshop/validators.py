"""
Form validation rules for the unified login/register flow.
"""
import re
from typing import Optional

from autoshop.models.user import UserRole

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
PHONE_NOISE = re.compile(r"[\s\-()]")

SELF_SERVICE_ROLES = (UserRole.ADMIN, UserRole.CUSTOMER)

MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6

STRENGTH_RULES = (
    (lambda p: len(p) >= 8, "Use at least 8 characters"),
    (lambda p: re.search(r"[a-z]", p) is not None, "Include lowercase letters"),
    (lambda p: re.search(r"[A-Z]", p) is not None, "Include uppercase letters"),
    (lambda p: re.search(r"[0-9]", p) is not None, "Include numbers"),
    (lambda p: re.search(r"[^A-Za-z0-9]", p) is not None, "Include special characters"),
)

STRENGTH_LABELS = {
    0: "weak",
    1: "weak",
    2: "fair",
    3: "medium",
    4: "strong",
    5: "very strong",
}


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def normalize_phone(phone: str) -> str:
    """Strip spaces, dashes and parentheses from a phone number."""
    return PHONE_NOISE.sub("", phone)


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(normalize_phone(phone)))


def password_strength(password: str) -> tuple[int, list[str]]:
    """Count satisfied character-class rules and collect suggestions for the rest."""
    score = 0
    suggestions = []
    for rule, suggestion in STRENGTH_RULES:
        if rule(password):
            score += 1
        else:
            suggestions.append(suggestion)
    return score, suggestions


def strength_label(score: int) -> str:
    return STRENGTH_LABELS.get(score, "weak")


def validate_login(email: str, password: str) -> dict[str, str]:
    errors = {}
    if not email.strip():
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Please enter a valid email address"
    if not password:
        errors["password"] = "Password is required"
    return errors


def validate_registration(
    name: str,
    email: str,
    password: str,
    confirm_password: str,
    role: UserRole,
    phone: Optional[str] = None,
    business_name: Optional[str] = None,
) -> dict[str, str]:
    """Return a field -> message map; empty when the form is valid."""
    errors = {}

    if not name.strip():
        errors["name"] = "Name is required"
    elif len(name.strip()) < MIN_NAME_LENGTH:
        errors["name"] = "Name must be at least 2 characters"

    if not email.strip():
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Please enter a valid email address"

    if phone and not is_valid_phone(phone):
        errors["phone"] = "Please enter a valid phone number"

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = "Password must be at least 6 characters"

    if password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    if role not in SELF_SERVICE_ROLES:
        errors["role"] = "Accounts can only be registered as admin or customer"
    elif role == UserRole.ADMIN and not (business_name or "").strip():
        errors["business_name"] = "Business name is required for admin accounts"

    return errors
