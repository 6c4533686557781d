"""Shared validation utilities"""

import re
from datetime import datetime, timezone
from typing import Optional


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number to E.164-like form.

    Args:
        phone: Phone number string in various formats

    Returns:
        "+" followed by 10 to 15 digits

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    # Bare 10-digit numbers are treated as US numbers
    if len(digits) == 10:
        digits = f"1{digits}"

    if not 11 <= len(digits) <= 15:
        raise ValueError("Phone number must contain 10 to 15 digits")

    return f"+{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_budget_range(budget_min: Optional[float], budget_max: Optional[float]) -> None:
    """Raise ValueError unless budget_min <= budget_max when both are given"""
    if budget_min is not None and budget_max is not None and budget_min > budget_max:
        raise ValueError("budget_min must be less than or equal to budget_max")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed to be UTC already"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
