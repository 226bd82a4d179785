"""
Credential Policy
Decides what an initial or rotated plaintext secret is, and whether an
admin-supplied secret is acceptable. Hashing lives in app.core.security.
"""

import secrets
import string
from dataclasses import dataclass
from typing import Optional

from app.core.config import settings
from app.core.exceptions import ValidationError

TEACHER_PASSWORD_MIN = 100000
TEACHER_PASSWORD_MAX = 999999

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*"
ALL_CHARS = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS

STUDENT_POLICY_ROLL_NUMBER = "roll_number"
STUDENT_POLICY_RANDOM = "random"

_random = secrets.SystemRandom()


@dataclass(frozen=True)
class StrengthCheck:
    """Result of validate_strength; reason is set only when invalid"""
    valid: bool
    reason: Optional[str] = None


def derive_student_initial_password(roll_no: str) -> str:
    """The roll number itself is the student's initial password."""
    return roll_no


def generate_teacher_password() -> str:
    """Uniformly random 6-digit numeric password (100000-999999)."""
    span = TEACHER_PASSWORD_MAX - TEACHER_PASSWORD_MIN + 1
    return str(TEACHER_PASSWORD_MIN + secrets.randbelow(span))


def generate_secure_password(length: int = 12) -> str:
    """
    Random password with at least one uppercase letter, one lowercase letter,
    one digit and one symbol; the remaining characters are drawn uniformly
    from the combined alphabet and the result is shuffled.
    """
    if length < 4:
        raise ValidationError("Password length must be at least 4", field="length")

    chars = [
        secrets.choice(UPPERCASE),
        secrets.choice(LOWERCASE),
        secrets.choice(DIGITS),
        secrets.choice(SYMBOLS),
    ]
    chars.extend(secrets.choice(ALL_CHARS) for _ in range(length - len(chars)))
    _random.shuffle(chars)
    return "".join(chars)


def validate_strength(password: Optional[str]) -> StrengthCheck:
    """Guard for admin-supplied (not generated) passwords."""
    min_length = settings.PASSWORD_MIN_LENGTH
    max_length = settings.PASSWORD_MAX_LENGTH

    if not password or len(password) < min_length:
        return StrengthCheck(False, f"Password must be at least {min_length} characters long")

    if len(password) > max_length:
        return StrengthCheck(False, f"Password must be less than {max_length} characters")

    return StrengthCheck(True)


def initial_student_password(roll_no: str) -> str:
    """Apply the configured STUDENT_PASSWORD_POLICY."""
    policy = settings.STUDENT_PASSWORD_POLICY
    if policy == STUDENT_POLICY_RANDOM:
        return generate_teacher_password()
    if policy == STUDENT_POLICY_ROLL_NUMBER:
        return derive_student_initial_password(roll_no)
    raise ValidationError(f"Unknown student password policy: {policy}")
