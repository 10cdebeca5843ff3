# backend/services/security.py
import re

import bcrypt
from email_validator import validate_email, EmailNotValidError

from config import settings
from models.user_model import ROLES

PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d@$!%*?&]{8,}$")
PHONE_RE = re.compile(r"^\+?[0-9][0-9 \-]{5,18}[0-9]$")

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: int = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash or over-long candidate
        return False


def is_valid_email(value: str) -> bool:
    if not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_strong_password(password: str) -> bool:
    if not password or len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        return False
    return PASSWORD_RE.match(password) is not None


def is_valid_phone(phone: str) -> bool:
    return not phone or PHONE_RE.match(phone.strip()) is not None


def is_valid_role(role: str) -> bool:
    return not role or role in ROLES
