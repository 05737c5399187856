from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..security.passwords import PasswordHash


@dataclass(slots=True)
class Account:
    """Identity record keyed by a unique email address."""

    account_id: str
    email: str
    password: PasswordHash
    created_at: datetime


@dataclass(slots=True)
class Profile:
    """Personal details stored one-to-one alongside an ``Account``."""

    profile_id: str
    account_id: str
    first_name: str
    last_name: str | None
    contact_phone: str
    created_at: datetime


@dataclass(slots=True)
class Registration:
    """Outcome of a successful registration: the account and its profile."""

    account: Account
    profile: Profile
