"""Password hashing utilities.

Learn: Uses bcrypt for password hashing. bcrypt includes a random salt
automatically and produces hashes starting with "$2b$".

Accounts created through federated login have password_hash == "".
That's a meaningful state ("no password set"), so verify_password
treats it as a plain mismatch rather than an error.
"""

import bcrypt


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash. An empty hash never matches."""
    if not password_hash:
        return False
    try:
        pw_bytes = password.encode("utf-8")[:72]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False
