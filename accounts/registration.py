from __future__ import annotations

import logging
from typing import Dict, Optional

import bcrypt
from pydantic import BaseModel

from accounts.store import Account, AccountStore
from app.errors import ConflictError, DuplicateAccountError, StoreError, ValidationError
from config.settings import Settings


logger = logging.getLogger("portal.accounts")

REQUIRED_FIELDS = ("email", "password", "name", "phone")


class RegistrationRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


# bcrypt only reads the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72


def hash_password(secret: str, rounds: int) -> bytes:
    encoded = secret.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds))


class RegistrationHandler:
    def __init__(self, store: Optional[AccountStore], settings: Settings):
        self._store = store
        self._settings = settings

    def register(self, req: RegistrationRequest) -> Dict[str, str]:
        for field in REQUIRED_FIELDS:
            if not getattr(req, field):
                raise ValidationError(f"{field} is required")

        if self._store is None:
            raise StoreError("record store not configured")

        if self._store.find_by_email(req.email) is not None:
            raise ConflictError("identity already registered")

        account = Account(
            email=req.email,
            name=req.name,
            phone=req.phone,
            password_hash=hash_password(req.password, self._settings.bcrypt_rounds),
        )
        try:
            self._store.create(account)
        except DuplicateAccountError:
            # Lost the race against a concurrent registration for this email
            raise ConflictError("identity already registered")

        logger.info("Registered account email=%s", req.email)
        return {"message": "User Registered"}
