"""
Authentication utilities: password hashing and input validation
"""

import re
import uuid
from passlib.context import CryptContext

# Password hashing context
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto"
)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def hash_password(password: str) -> str:
    """Hash a password using argon2"""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(password, password_hash)


def validate_email(email: str) -> bool:
    """Validate email format"""
    return EMAIL_PATTERN.match(email) is not None


def is_valid_record_id(value: str) -> bool:
    """
    Check that a path parameter looks like a generated record id.

    Record ids are 32-character hex UUIDs (see database_models.generate_id);
    dashed UUID strings are rejected so lookups never need normalizing.
    """
    if len(value) != 32:
        return False
    try:
        uuid.UUID(hex=value)
    except ValueError:
        return False
    return True
