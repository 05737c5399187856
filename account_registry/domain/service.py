"""Registration workflow orchestrating duplicate checks, hashing and persistence."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from prometheus_client import Counter

from .account import Account, Profile, Registration
from .contracts import RegisterAccountInput
from ..errors import DuplicateEmailError, FieldError, ValidationError
from ..i18n import MessageCatalog
from ..security.passwords import PasswordHash, init_password_hash

logger = logging.getLogger(__name__)

REGISTRATIONS = Counter("accounts_registered_total", "Accounts successfully registered.")
REGISTRATION_FAILURES = Counter(
    "account_registration_failures_total",
    "Registration attempts that did not create an account and profile.",
    ["reason"],
)


class RegistrationStore(Protocol):
    """Data accessors the workflow depends on."""

    def find_account_by_email(self, email: str) -> Account | None: ...

    def create_account(self, *, email: str, password: PasswordHash) -> Account: ...

    def create_profile(
        self,
        *,
        account_id: str,
        first_name: str,
        last_name: str | None,
        contact_phone: str,
    ) -> Profile: ...


class RegistrationService:
    """Account registration backed by the document store."""

    def __init__(
        self,
        repository: RegistrationStore,
        messages: MessageCatalog,
        hash_password: Callable[[str], PasswordHash] = init_password_hash,
    ) -> None:
        """Store the collaborators used for every registration request."""
        self._repository = repository
        self._messages = messages
        self._hash_password = hash_password

    def register(self, payload: RegisterAccountInput, locale: str) -> Registration:
        """Create an account and its profile unless the email is already taken.

        The existence check and the insert are not atomic; a concurrent insert of
        the same email is caught by the unique index and reported the same way.
        A failure after the account insert leaves the account without a profile.
        """
        if self._repository.find_account_by_email(payload.email) is not None:
            REGISTRATION_FAILURES.labels(reason="email_exists").inc()
            raise self._email_exists(locale)

        password = self._hash_password(payload.password)
        try:
            account = self._repository.create_account(email=payload.email, password=password)
        except DuplicateEmailError:
            logger.info("concurrent registration rejected by unique index")
            REGISTRATION_FAILURES.labels(reason="email_exists").inc()
            raise self._email_exists(locale) from None

        try:
            profile = self._repository.create_profile(
                account_id=account.account_id,
                first_name=payload.first_name,
                last_name=payload.last_name,
                contact_phone=payload.contact_phone,
            )
        except Exception:
            logger.error("profile creation failed, account %s has no profile", account.account_id)
            REGISTRATION_FAILURES.labels(reason="profile_write").inc()
            raise

        REGISTRATIONS.inc()
        logger.info("account %s registered", account.account_id)
        return Registration(account=account, profile=profile)

    def _email_exists(self, locale: str) -> ValidationError:
        message = self._messages.translate("VAL_ERRORS.USR_ACC_NEW_EMAIL_EXISTS", locale)
        return ValidationError([FieldError("email", message)])
