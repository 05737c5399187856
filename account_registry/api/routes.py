"""HTTP route definitions for the account registry."""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..domain.account import Account, Profile, Registration
from ..domain.contracts import RegisterAccountInput
from ..domain.service import RegistrationService
from ..errors import BadRequestError
from ..i18n import MessageCatalog
from ..validation import REGISTRATION_SCHEMA


router = APIRouter()

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class AccountResponse(BaseModel):
    """Serialised representation of an `Account`; password material is never exposed."""

    account_id: str
    email: str
    created_at: str

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        """Build a response model from the domain aggregate."""
        return cls(
            account_id=account.account_id,
            email=account.email,
            created_at=account.created_at.isoformat(),
        )


class ProfileNames(BaseModel):
    first_name: str
    last_name: str | None = None


class ProfileContact(BaseModel):
    phone: str


class ProfileResponse(BaseModel):
    """Serialised profile document, shaped like the stored document."""

    profile_id: str
    account_id: str
    profile: ProfileNames
    contact: ProfileContact
    created_at: str

    @classmethod
    def from_domain(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            profile_id=profile.profile_id,
            account_id=profile.account_id,
            profile=ProfileNames(first_name=profile.first_name, last_name=profile.last_name),
            contact=ProfileContact(phone=profile.contact_phone),
            created_at=profile.created_at.isoformat(),
        )


class RegistrationResponse(BaseModel):
    """Response returned after registering an account."""

    account: AccountResponse
    profile: ProfileResponse

    @classmethod
    def from_domain(cls, registration: Registration) -> "RegistrationResponse":
        return cls(
            account=AccountResponse.from_domain(registration.account),
            profile=ProfileResponse.from_domain(registration.profile),
        )


def get_service(request: Request) -> RegistrationService:
    """Resolve the `RegistrationService` stored on the FastAPI application state."""
    service: RegistrationService = request.app.state.registration_service
    return service


def get_messages(request: Request) -> MessageCatalog:
    messages: MessageCatalog = request.app.state.messages
    return messages


def get_locale(request: Request, messages: MessageCatalog = Depends(get_messages)) -> str:
    """Return the locale negotiated by the request middleware."""
    return getattr(request.state, "locale", None) or messages.default_locale


async def read_body(request: Request) -> dict[str, Any]:
    """Decode a form or JSON body into a plain record. An empty body is an empty record."""
    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        # uploaded files carry no registration field
        return {key: value for key, value in form.items() if isinstance(value, str)}
    raw = await request.body()
    if not raw:
        return {}
    if content_type and content_type != "application/json" and not content_type.endswith("+json"):
        raise BadRequestError()
    try:
        payload = json.loads(raw)
    except ValueError:
        raise BadRequestError() from None
    if not isinstance(payload, dict):
        raise BadRequestError()
    return payload


def validated_registration(
    payload: dict[str, Any] = Depends(read_body),
    locale: str = Depends(get_locale),
    messages: MessageCatalog = Depends(get_messages),
) -> RegisterAccountInput:
    """Run the registration schema over the raw body before the workflow sees it."""
    fields = REGISTRATION_SCHEMA.validate(payload, messages, locale)
    return RegisterAccountInput(
        first_name=fields["first_name"] or "",
        last_name=fields["last_name"],
        contact_phone=fields["contact_phone"] or "",
        email=fields["email"] or "",
        password=fields["password"] or "",
    )


@router.post("/accounts", response_model=RegistrationResponse)
def register_account(
    payload: RegisterAccountInput = Depends(validated_registration),
    locale: str = Depends(get_locale),
    service: RegistrationService = Depends(get_service),
) -> RegistrationResponse:
    """Register an account and its profile."""
    registration = service.register(payload, locale)
    return RegistrationResponse.from_domain(registration)
