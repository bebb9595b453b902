import pytest

from affiliate_gallery.config import settings
from affiliate_gallery.utils.auth import hash_password, verify_admin_password
from affiliate_gallery.utils.authorizer import (
    CompositeAuthorizer,
    Credential,
    SharedSecretAuthorizer,
    TokenAuthorizer,
)
from affiliate_gallery.utils.jwt_auth import create_access_token


@pytest.fixture
def plain_secret(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "s3cret")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", "")
    return "s3cret"


@pytest.fixture
def no_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", "")


def _token(role: str = "manager") -> str:
    return create_access_token({"sub": "7", "role": role, "username": "someone"})


class TestSharedSecretAuthorizer:
    def test_accepts_configured_password(self, plain_secret: str):
        result = SharedSecretAuthorizer().authorize(Credential(password=plain_secret))

        assert result.ok
        assert result.principal.role == "admin"

    def test_wrong_password_is_forbidden(self, plain_secret: str):
        result = SharedSecretAuthorizer().authorize(Credential(password="guess"))

        assert not result.ok
        assert result.failure == "forbidden"

    def test_missing_password_is_unauthenticated(self, plain_secret: str):
        result = SharedSecretAuthorizer().authorize(Credential())

        assert result.failure == "unauthenticated"

    @pytest.mark.parametrize("password", ["", " ", "anything"])
    def test_fails_closed_without_secret(self, no_secret: None, password: str):
        assert not SharedSecretAuthorizer().authorize(Credential(password=password)).ok
        assert not verify_admin_password(password)

    def test_blank_secret_counts_as_unset(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", "   ")
        monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", "")

        assert not SharedSecretAuthorizer().authorize(Credential(password="   ")).ok

    def test_bcrypt_hash_takes_precedence(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", "plain")
        monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", hash_password("hashed"))

        assert verify_admin_password("hashed")
        assert not verify_admin_password("plain")


class TestTokenAuthorizer:
    def test_valid_token_yields_principal(self):
        result = TokenAuthorizer().authorize(Credential(bearer_token=_token()))

        assert result.ok
        assert result.principal.user_id == 7
        assert result.principal.role == "manager"
        assert result.principal.username == "someone"

    def test_role_restriction(self):
        result = TokenAuthorizer(roles=["admin"]).authorize(Credential(bearer_token=_token("manager")))

        assert result.failure == "forbidden"

    def test_garbage_token_is_unauthenticated(self):
        result = TokenAuthorizer().authorize(Credential(bearer_token="abc.def.ghi"))

        assert result.failure == "unauthenticated"
        assert result.message == "Invalid token"

    def test_tokens_rejected_without_signing_key(self, monkeypatch: pytest.MonkeyPatch):
        token = _token()
        monkeypatch.setattr(settings, "JWT_SECRET_KEY", "")

        assert not TokenAuthorizer().authorize(Credential(bearer_token=token)).ok


class TestCompositeAuthorizer:
    def _authorizer(self) -> CompositeAuthorizer:
        return CompositeAuthorizer(TokenAuthorizer(), SharedSecretAuthorizer())

    def test_no_credential_is_unauthenticated(self, plain_secret: str):
        result = self._authorizer().authorize(Credential())

        assert result.failure == "unauthenticated"

    def test_password_path(self, plain_secret: str):
        assert self._authorizer().authorize(Credential(password=plain_secret)).ok

    def test_token_path(self, plain_secret: str):
        assert self._authorizer().authorize(Credential(bearer_token=_token())).ok

    def test_bad_token_wins_over_good_password(self, plain_secret: str):
        result = self._authorizer().authorize(Credential(bearer_token="bad", password=plain_secret))

        assert not result.ok
        assert result.failure == "unauthenticated"
