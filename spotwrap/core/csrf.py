"""CSRF state for the OAuth redirect."""
import secrets
import string

from spotwrap.config import CSRF_STATE_LENGTH

# RFC 3986 unreserved characters
URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "-._~"


def generate_state(length: int = CSRF_STATE_LENGTH) -> str:
    """Return an unguessable URL-safe nonce of exactly `length` characters."""
    if length <= 0:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(URL_SAFE_ALPHABET) for _ in range(length))


def states_match(expected: str | None, received: str | None) -> bool:
    """Constant-time comparison; a missing value on either side never matches."""
    if not expected or not received:
        return False
    return secrets.compare_digest(expected.encode(), received.encode())
