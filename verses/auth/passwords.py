import logging

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Verified against when the email is unknown so both branches cost the same
DUMMY_HASH = pwd_context.hash("verses-dummy-password")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def password_problems(password: str) -> list[str]:
    """List the reasons a password is rejected; empty when it is acceptable."""
    problems = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters.")
    if not any(ch.isdigit() for ch in password):
        problems.append("Passwords must have at least one digit ('0'-'9').")
    if not any(ch.islower() for ch in password):
        problems.append("Passwords must have at least one lowercase ('a'-'z').")
    return problems
