import re

from blogsmith.errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 6 characters

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters long")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")


def normalize_email(email: str) -> str:
    """Lowercase and trim an email address, raising ValidationError if it is malformed."""
    normalized = email.strip().lower()
    if not EMAIL_RE.fullmatch(normalized):
        raise ValidationError(f"Invalid email address: '{email}'")
    return normalized
