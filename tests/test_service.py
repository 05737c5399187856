from __future__ import annotations

import logging

import pytest

from account_registry.domain.contracts import RegisterAccountInput
from account_registry.domain.service import RegistrationService
from account_registry.errors import ConnectivityError, DuplicateEmailError, ValidationError
from account_registry.i18n import MessageCatalog
from account_registry.security.passwords import PasswordHash

from fakes import FakeRepository, fast_hash


@pytest.fixture
def messages() -> MessageCatalog:
    return MessageCatalog.from_directory(["en", "de"], "en")


@pytest.fixture
def payload() -> RegisterAccountInput:
    return RegisterAccountInput(
        first_name="Ana",
        last_name="Lima",
        contact_phone="5551234",
        email="ana@example.com",
        password="secret1",
    )


def test_register_links_profile_to_account(messages, payload):
    repository = FakeRepository()
    service = RegistrationService(repository, messages, hash_password=fast_hash)

    registration = service.register(payload, "en")

    assert registration.profile.account_id == registration.account.account_id
    assert registration.profile.last_name == "Lima"
    assert repository.calls == ["find_account_by_email", "create_account", "create_profile"]


def test_register_hashes_with_a_fresh_salt_per_account(messages, payload):
    repository = FakeRepository()
    service = RegistrationService(repository, messages, hash_password=fast_hash)

    first = service.register(payload, "en").account
    second = service.register(
        RegisterAccountInput(
            first_name="Ben", contact_phone="5550000", email="ben@example.com", password="secret1"
        ),
        "en",
    ).account

    assert first.password.hash != "secret1"
    assert first.password.salt != second.password.salt
    assert first.password.hash != second.password.hash


def test_existing_email_is_localized_and_skips_hashing(messages, payload):
    repository = FakeRepository()
    hashed: list[str] = []

    def tracking_hash(password: str) -> PasswordHash:
        hashed.append(password)
        return fast_hash(password)

    service = RegistrationService(repository, messages, hash_password=tracking_hash)
    service.register(payload, "en")

    with pytest.raises(ValidationError) as excinfo:
        service.register(payload, "de")

    assert excinfo.value.errors_payload() == [
        {"param": "email", "msg": "Ein Konto mit dieser E-Mail existiert bereits."}
    ]
    assert hashed == ["secret1"]
    assert len(repository.profiles) == 1


def test_unique_index_race_reports_email_exists(messages, payload):
    class RacingRepository(FakeRepository):
        def find_account_by_email(self, email):
            self.calls.append("find_account_by_email")
            return None

        def create_account(self, *, email, password):
            self.calls.append("create_account")
            raise DuplicateEmailError(email)

    repository = RacingRepository()
    service = RegistrationService(repository, messages, hash_password=fast_hash)

    with pytest.raises(ValidationError) as excinfo:
        service.register(payload, "en")

    assert [error.field for error in excinfo.value.errors] == ["email"]
    assert "create_profile" not in repository.calls


def test_unavailable_store_propagates_without_writes(messages, payload):
    repository = FakeRepository()
    repository.unavailable = True
    service = RegistrationService(repository, messages, hash_password=fast_hash)

    with pytest.raises(ConnectivityError):
        service.register(payload, "en")

    assert repository.calls == ["find_account_by_email"]


def test_profile_failure_is_logged_and_propagated(messages, payload, caplog):
    repository = FakeRepository()
    repository.fail_profile_write = True
    service = RegistrationService(repository, messages, hash_password=fast_hash)

    with caplog.at_level(logging.ERROR, logger="account_registry.domain.service"):
        with pytest.raises(RuntimeError):
            service.register(payload, "en")

    (account_id,) = repository.accounts
    assert f"account {account_id} has no profile" in caplog.text
