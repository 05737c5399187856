"""Password hashing helpers backed by bcrypt."""

from __future__ import annotations

from dataclasses import dataclass

import bcrypt

# bcrypt only considers the first 72 bytes and newer releases reject longer input
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True, slots=True)
class PasswordHash:
    """A one-way password derivative and the per-account salt it was built with."""

    hash: str
    salt: str


def init_password_hash(password: str, rounds: int = 12) -> PasswordHash:
    """Derive a salted hash from a plaintext password using a freshly generated salt.

    Parameters
    ----------
    password:
        Plaintext password; at most ``MAX_PASSWORD_BYTES`` once UTF-8 encoded.
    rounds:
        bcrypt cost factor.

    Returns
    -------
    PasswordHash
        The encoded hash together with the salt that produced it.
    """

    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return PasswordHash(hash=hashed.decode("ascii"), salt=salt.decode("ascii"))

