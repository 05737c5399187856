"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RegisterAccountInput:
    """Validated inputs required to register an account and its profile."""

    first_name: str
    contact_phone: str
    email: str
    password: str
    last_name: str | None = None
