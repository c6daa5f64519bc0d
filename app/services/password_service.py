# app/services/password_service.py
"""
Password rules shared by user creation, admin resets and self-service changes.
"""

import re

SPECIAL_CHARACTERS = r"[!@#$%^&*(),.?\":{}|<>_\-+=\[\]\;'`~/]"


def validate_password_complexity(password: str, email: str | None = None) -> None:
    """
    Validate password complexity.
    Raises ValueError with descriptive message if password is too weak.

    Requirements:
    - At least 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one special character
    - Must not contain the local part of the user's email (when 3+ chars)
    """
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")

    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least 1 uppercase letter")

    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain at least 1 lowercase letter")

    if not re.search(SPECIAL_CHARACTERS, password):
        raise ValueError("Password must contain at least 1 special character")

    if email:
        email_prefix = email.split("@")[0].lower()
        if len(email_prefix) >= 3 and email_prefix in password.lower():
            raise ValueError("Password cannot contain your email address")
