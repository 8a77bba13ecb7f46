"""One-way password hashing backed by argon2."""

from typing import Final

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError

_PH: Final = PasswordHasher()


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Password cannot be empty")
    return _PH.hash(plain)


def verify_password(hash_value: str, plain: str) -> bool:
    """Check `plain` against a stored hash.

    A mismatch returns False. A stored value that is not an argon2 hash raises
    argon2's InvalidHashError, since that means the admin row is corrupt.
    """
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except VerificationError:
        return False
