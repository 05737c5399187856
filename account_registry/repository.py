"""Database repository for account and profile documents."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, DuplicateKeyError

from .domain.account import Account, Profile
from .errors import ConnectivityError, DuplicateEmailError
from .security.passwords import PasswordHash

logger = logging.getLogger(__name__)

ACCOUNTS = "accounts"
PROFILES = "profiles"


class AccountRepository:
    """MongoDB-backed persistence for the ``accounts`` and ``profiles`` collections.

    A repository built without a database behaves like a store that is never
    reachable: every call raises ``ConnectivityError``.
    """

    def __init__(self, database: Database | None) -> None:
        """Store the database handle used for all collection access."""
        self._database = database

    def _collection(self, name: str) -> Collection:
        if self._database is None:
            raise ConnectivityError()
        return self._database[name]

    @contextmanager
    def _store_errors(self) -> Iterator[None]:
        """Translate driver connectivity failures into ``ConnectivityError``."""
        try:
            yield
        except ConnectionFailure as exc:
            logger.warning("document store unavailable: %s", exc)
            raise ConnectivityError() from exc

    def ensure_indexes(self) -> None:
        """Create the unique indexes backing email and profile uniqueness."""
        with self._store_errors():
            self._collection(ACCOUNTS).create_index(
                [("email", ASCENDING)], unique=True, name="email_unique"
            )
            self._collection(PROFILES).create_index(
                [("account_id", ASCENDING)], unique=True, name="account_id_unique"
            )

    def find_account_by_email(self, email: str) -> Account | None:
        """Return the account stored under exactly ``email`` or ``None``."""
        with self._store_errors():
            doc = self._collection(ACCOUNTS).find_one({"email": email})
        if doc is None:
            return None
        return self._map_account(doc)

    def create_account(self, *, email: str, password: PasswordHash) -> Account:
        """Insert an account document; raise ``DuplicateEmailError`` on a unique index hit."""
        doc: dict[str, Any] = {
            "email": email,
            "password": {"hash": password.hash, "salt": password.salt},
            "created_at": datetime.now(timezone.utc),
        }
        with self._store_errors():
            try:
                result = self._collection(ACCOUNTS).insert_one(doc)
            except DuplicateKeyError as exc:
                raise DuplicateEmailError(email) from exc
        doc["_id"] = result.inserted_id
        return self._map_account(doc)

    def create_profile(
        self,
        *,
        account_id: str,
        first_name: str,
        last_name: str | None,
        contact_phone: str,
    ) -> Profile:
        """Insert the profile document referencing ``account_id``."""
        doc: dict[str, Any] = {
            "account_id": ObjectId(account_id),
            "profile": {"first_name": first_name, "last_name": last_name},
            "contact": {"phone": contact_phone},
            "created_at": datetime.now(timezone.utc),
        }
        with self._store_errors():
            result = self._collection(PROFILES).insert_one(doc)
        doc["_id"] = result.inserted_id
        return self._map_profile(doc)

    def _map_account(self, doc: dict[str, Any]) -> Account:
        password = doc.get("password") or {}
        return Account(
            account_id=str(doc["_id"]),
            email=doc["email"],
            password=PasswordHash(hash=password.get("hash", ""), salt=password.get("salt", "")),
            created_at=doc["created_at"],
        )

    def _map_profile(self, doc: dict[str, Any]) -> Profile:
        names = doc.get("profile") or {}
        contact = doc.get("contact") or {}
        return Profile(
            profile_id=str(doc["_id"]),
            account_id=str(doc["account_id"]),
            first_name=names.get("first_name", ""),
            last_name=names.get("last_name"),
            contact_phone=contact.get("phone", ""),
            created_at=doc["created_at"],
        )
