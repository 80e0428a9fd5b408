# app/core/auth.py
import bcrypt

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password with a fresh bcrypt salt.

    Returns:
        The hash as text, ready to store on User.password_hash.

    Raises:
        ValueError: if the password is empty or longer than bcrypt accepts.
    """
    raw = plain_password.encode("utf-8")
    if not raw:
        raise ValueError("Password cannot be empty")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(raw, bcrypt.gensalt()).decode("utf-8")


def verify_password(password_hash: str, plain_password: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    if not password_hash or not plain_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # Malformed stored hash or over-long candidate
        return False
