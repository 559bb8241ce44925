import hashlib
import hmac
import logging
import secrets

LOGGER = logging.getLogger(__name__)

ITERATIONS = 260_000


def hash_password(password: str, salt: str | None = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), bytes.fromhex(salt), ITERATIONS
    )
    return f"{salt}${digest.hex()}"


def verify_password(password: str, hashed: str) -> bool:
    """False for a wrong password and for a stored hash that cannot be read."""
    salt, separator, _ = hashed.partition("$")
    if not separator or not salt:
        LOGGER.warning("Stored password hash has no salt")
        return False
    try:
        return hmac.compare_digest(hash_password(password, salt), hashed)
    except ValueError:
        LOGGER.warning("Stored password hash has a malformed salt")
        return False
