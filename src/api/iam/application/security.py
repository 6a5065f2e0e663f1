"""Password hashing utilities.

Uses bcrypt with automatic salt generation. Passwords are never stored or
logged in plaintext.
"""

import bcrypt

# bcrypt only considers the first 72 bytes of input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    The work factor is automatically determined by bcrypt's gensalt().

    Args:
        password: The plaintext password to hash

    Returns:
        The bcrypt hash as a string
    """
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison.

    Args:
        password: The plaintext password to verify
        password_hash: The bcrypt hash to verify against

    Returns:
        True if the password matches the hash, False otherwise
    """
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except ValueError:
        # Malformed hash
        return False


def _encode(password: str) -> bytes:
    return password.encode()[:MAX_PASSWORD_BYTES]
