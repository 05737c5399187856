from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, DuplicateKeyError, ServerSelectionTimeoutError

from account_registry.errors import ConnectivityError, DuplicateEmailError
from account_registry.repository import ACCOUNTS, PROFILES, AccountRepository
from account_registry.security.passwords import PasswordHash


@pytest.fixture
def collections():
    return {ACCOUNTS: MagicMock(), PROFILES: MagicMock()}


@pytest.fixture
def repository(collections) -> AccountRepository:
    database = MagicMock()
    database.__getitem__.side_effect = collections.__getitem__
    return AccountRepository(database)


def test_find_account_by_email_maps_document(repository, collections):
    account_id = ObjectId()
    created = datetime.now(timezone.utc)
    collections[ACCOUNTS].find_one.return_value = {
        "_id": account_id,
        "email": "ana@example.com",
        "password": {"hash": "h", "salt": "s"},
        "created_at": created,
    }

    account = repository.find_account_by_email("ana@example.com")

    collections[ACCOUNTS].find_one.assert_called_once_with({"email": "ana@example.com"})
    assert account.account_id == str(account_id)
    assert account.password == PasswordHash(hash="h", salt="s")
    assert account.created_at == created


def test_find_account_by_email_returns_none(repository, collections):
    collections[ACCOUNTS].find_one.return_value = None

    assert repository.find_account_by_email("nobody@example.com") is None


def test_create_account_stores_hash_and_salt(repository, collections):
    inserted = ObjectId()
    collections[ACCOUNTS].insert_one.return_value = MagicMock(inserted_id=inserted)

    account = repository.create_account(
        email="ana@example.com", password=PasswordHash(hash="h", salt="s")
    )

    (doc,), _ = collections[ACCOUNTS].insert_one.call_args
    assert doc["email"] == "ana@example.com"
    assert doc["password"] == {"hash": "h", "salt": "s"}
    assert account.account_id == str(inserted)


def test_create_account_translates_unique_index_violation(repository, collections):
    collections[ACCOUNTS].insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

    with pytest.raises(DuplicateEmailError):
        repository.create_account(email="ana@example.com", password=PasswordHash("h", "s"))


def test_create_profile_references_account(repository, collections):
    account_id = str(ObjectId())
    collections[PROFILES].insert_one.return_value = MagicMock(inserted_id=ObjectId())

    profile = repository.create_profile(
        account_id=account_id, first_name="Ana", last_name=None, contact_phone="5551234"
    )

    (doc,), _ = collections[PROFILES].insert_one.call_args
    assert doc["account_id"] == ObjectId(account_id)
    assert doc["profile"] == {"first_name": "Ana", "last_name": None}
    assert doc["contact"] == {"phone": "5551234"}
    assert profile.account_id == account_id
    assert profile.first_name == "Ana"


@pytest.mark.parametrize("error", [ServerSelectionTimeoutError("timeout"), AutoReconnect("lost")])
def test_connection_failures_become_connectivity_errors(repository, collections, error):
    collections[ACCOUNTS].find_one.side_effect = error

    with pytest.raises(ConnectivityError):
        repository.find_account_by_email("ana@example.com")


def test_repository_without_database_is_unavailable():
    repository = AccountRepository(None)

    with pytest.raises(ConnectivityError):
        repository.find_account_by_email("ana@example.com")
    with pytest.raises(ConnectivityError):
        repository.create_account(email="ana@example.com", password=PasswordHash("h", "s"))


def test_ensure_indexes_declares_unique_keys(repository, collections):
    repository.ensure_indexes()

    collections[ACCOUNTS].create_index.assert_called_once_with(
        [("email", 1)], unique=True, name="email_unique"
    )
    collections[PROFILES].create_index.assert_called_once_with(
        [("account_id", 1)], unique=True, name="account_id_unique"
    )
