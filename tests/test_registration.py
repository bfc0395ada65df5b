import bcrypt
import pytest

from accounts.registration import RegistrationHandler, RegistrationRequest, hash_password
from accounts.store import InMemoryAccountStore
from app.errors import ConflictError, DuplicateAccountError, StoreError, ValidationError
from config.settings import Settings


def _request(**overrides):
    data = {"name": "A", "email": "a@x.com", "phone": "1", "password": "p1"}
    data.update(overrides)
    return RegistrationRequest(**data)


def test_register_then_repeat_conflicts(settings, store):
    handler = RegistrationHandler(store, settings)

    assert handler.register(_request()) == {"message": "User Registered"}
    with pytest.raises(ConflictError):
        handler.register(_request())
    assert len(store) == 1


@pytest.mark.parametrize("field", ["email", "password", "name", "phone"])
@pytest.mark.parametrize("value", [None, ""])
def test_missing_field_creates_nothing(settings, store, field, value):
    handler = RegistrationHandler(store, settings)

    with pytest.raises(ValidationError) as excinfo:
        handler.register(_request(**{field: value}))

    assert excinfo.value.message == f"{field} is required"
    assert len(store) == 0


def test_stored_digest_is_salted_bcrypt(settings, store):
    handler = RegistrationHandler(store, settings)
    handler.register(_request(email="one@x.com", password="same-secret"))
    handler.register(_request(email="two@x.com", password="same-secret"))

    first = store.find_by_email("one@x.com").password_hash
    second = store.find_by_email("two@x.com").password_hash

    assert first != b"same-secret"
    assert first != second
    assert bcrypt.checkpw(b"same-secret", first)
    assert not bcrypt.checkpw(b"other", first)


def test_identity_key_is_case_sensitive(settings, store):
    handler = RegistrationHandler(store, settings)
    handler.register(_request(email="a@x.com"))

    assert handler.register(_request(email="A@x.com")) == {"message": "User Registered"}


def test_response_never_echoes_secret(settings, store):
    result = RegistrationHandler(store, settings).register(_request(password="hunter2"))

    assert "hunter2" not in str(result)
    assert set(result) == {"message"}


def test_default_work_factor_is_ten():
    digest = hash_password("p1", Settings(bcrypt_rounds=10).bcrypt_rounds)

    assert digest.startswith(b"$2b$10$")


def test_store_level_duplicate_maps_to_conflict(settings):
    class RacingStore(InMemoryAccountStore):
        # Existence check passes, then another request wins the insert.
        def find_by_email(self, email):
            return None

        def create(self, account):
            raise DuplicateAccountError(account.email)

    with pytest.raises(ConflictError):
        RegistrationHandler(RacingStore(), settings).register(_request())


def test_missing_store_disables_registration(settings):
    with pytest.raises(StoreError):
        RegistrationHandler(None, settings).register(_request())


def test_validation_runs_before_store_check(settings):
    with pytest.raises(ValidationError):
        RegistrationHandler(None, settings).register(_request(password=""))


def test_long_password_uses_first_72_bytes(settings, store):
    handler = RegistrationHandler(store, settings)

    assert handler.register(_request(password="x" * 80)) == {"message": "User Registered"}
    digest = store.find_by_email("a@x.com").password_hash
    assert bcrypt.checkpw(b"x" * 72, digest)
