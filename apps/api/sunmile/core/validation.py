"""
Field-level format rules for registration and profile updates.

Every predicate is pure and returns a bool; mapping a failure to a client
message is the caller's job.
"""

import os
import re
from datetime import date, datetime
from typing import Optional, Union

MIN_USER_AGE = int(os.environ.get("MIN_USER_AGE", "18"))
MAX_USER_AGE = int(os.environ.get("MAX_USER_AGE", "120"))

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_RE = re.compile(r"^[A-Za-z0-9._]+$")
# Brazilian mobile: (DD) 9XXXX-XXXX
PHONE_RE = re.compile(r"^\(\d{2}\) 9\d{4}-\d{4}$")

PASSWORD_MIN_LENGTH = 6


def normalize_cpf(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def _cpf_check_digit(digits: str) -> int:
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def is_valid_cpf(value: str) -> bool:
    if not isinstance(value, str):
        return False
    cpf = normalize_cpf(value)
    if len(cpf) != 11 or cpf == cpf[0] * 11:
        return False
    first = _cpf_check_digit(cpf[:9])
    second = _cpf_check_digit(cpf[:9] + str(first))
    return cpf[9:] == f"{first}{second}"


def is_valid_email(value: str) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value))


def is_valid_username(value: str) -> bool:
    return isinstance(value, str) and bool(USERNAME_RE.match(value))


def is_valid_phone(value: str) -> bool:
    return isinstance(value, str) and bool(PHONE_RE.match(value))


def is_strong_password(value: str) -> bool:
    if not isinstance(value, str) or len(value) < PASSWORD_MIN_LENGTH:
        return False
    return (
        any(c.isupper() for c in value)
        and any(c.islower() for c in value)
        and any(c.isdigit() for c in value)
        and any(not c.isalnum() and not c.isspace() for c in value)
    )


def parse_birth_date(value: Union[str, date, None]) -> Optional[date]:
    """Accepts ``YYYY-MM-DD`` (or an ISO datetime); returns None when unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def age_on(birth_date: date, today: date) -> int:
    before_birthday = (today.month, today.day) < (birth_date.month, birth_date.day)
    return today.year - birth_date.year - int(before_birthday)


def is_valid_birth_date(
    value: Union[str, date, None], today: Optional[date] = None
) -> bool:
    born = parse_birth_date(value)
    if born is None:
        return False
    today = today or date.today()
    if born > today:
        return False
    return MIN_USER_AGE <= age_on(born, today) <= MAX_USER_AGE
