from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from pydantic import BaseModel, Field
from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.errors import DuplicateAccountError, StoreError
from config.settings import Settings


logger = logging.getLogger("portal.accounts")


class Account(BaseModel):
    email: str = Field(..., description="Identity key, unique and case-sensitive")
    name: str = ""
    phone: str = ""
    password_hash: bytes = Field(..., description="bcrypt digest, never the plain secret")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AccountStore(Protocol):
    """Keyed record store for accounts.

    ``create`` must be an atomic create-if-absent: when another record with
    the same email already exists it raises ``DuplicateAccountError`` and
    writes nothing.
    """

    def find_by_email(self, email: str) -> Optional[Account]:
        ...

    def create(self, account: Account) -> None:
        ...


class InMemoryAccountStore:
    def __init__(self) -> None:
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Optional[Account]:
        with self._lock:
            return self._accounts.get(email)

    def create(self, account: Account) -> None:
        with self._lock:
            if account.email in self._accounts:
                raise DuplicateAccountError(account.email)
            self._accounts[account.email] = account

    def __len__(self) -> int:
        return len(self._accounts)


class MongoAccountStore:
    """Accounts kept in the ``users`` collection.

    The unique index on ``email`` is what serializes concurrent registrations;
    ``insert_one`` either wins or fails with a duplicate-key error.
    """

    def __init__(self, collection) -> None:
        self._collection = collection
        try:
            self._collection.create_index([("email", ASCENDING)], unique=True)
        except PyMongoError as exc:
            raise StoreError(f"Failed to ensure users index: {exc}") from exc

    @classmethod
    def from_url(cls, url: str, database: str) -> "MongoAccountStore":
        try:
            client = MongoClient(url, serverSelectionTimeoutMS=5000)
        except PyMongoError as exc:
            raise StoreError(f"Invalid MongoDB connection settings: {exc}") from exc
        return cls(client[database]["users"])

    def find_by_email(self, email: str) -> Optional[Account]:
        try:
            doc = self._collection.find_one({"email": email})
        except PyMongoError as exc:
            raise StoreError(f"User lookup failed: {exc}") from exc
        if doc is None:
            return None
        doc.pop("_id", None)
        return Account(**doc)

    def create(self, account: Account) -> None:
        try:
            self._collection.insert_one(account.model_dump())
        except DuplicateKeyError as exc:
            raise DuplicateAccountError(account.email) from exc
        except PyMongoError as exc:
            raise StoreError(f"User insert failed: {exc}") from exc


def build_account_store(settings: Settings) -> Optional[AccountStore]:
    if settings.mongo_url:
        try:
            store = MongoAccountStore.from_url(settings.mongo_url, settings.mongo_db)
        except StoreError as exc:
            logger.error("MongoDB unavailable, registration is disabled: %s", exc.message)
            return None
        logger.info("Record store: MongoDB database=%s", settings.mongo_db)
        return store
    if settings.store_backend == "memory":
        logger.info("Record store: in-memory (data is lost on restart)")
        return InMemoryAccountStore()
    logger.warning("No MONGO_URL configured - registration is disabled")
    return None
