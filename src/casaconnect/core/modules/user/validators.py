import re

from casaconnect.errors import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    """Lowercase and strip an email, raising ValidationError if it is malformed."""
    normalized = email.strip().lower()
    if not EMAIL_RE.fullmatch(normalized):
        raise ValidationError("Please enter a valid email address")
    return normalized


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 8 characters

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")
