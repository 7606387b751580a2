"""Password hashing with bcrypt.

Learn: The work factor comes from settings.bcrypt_rounds (12 in
production, 4 in tests). The cost is embedded in every hash
("$2b$12$..."), so when the setting changes, existing hashes are found
by needs_rehash() and upgraded on the user's next successful login.
"""

import bcrypt

from deepthoughts.config import settings

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """True if the hash was made with a different cost than configured."""
    try:
        cost = int(password_hash.split("$")[2])
    except (IndexError, ValueError):
        return True
    return cost != settings.bcrypt_rounds
