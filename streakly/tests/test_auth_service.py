"""Tests for accounts, credentials and the refresh-token lifecycle."""

from datetime import timedelta

import pytest

pytestmark = pytest.mark.integration

from streakly.core.auth import auth_service as auth_service_module
from streakly.core.auth.models import RefreshToken
from streakly.core.auth.signers import RefreshTokenSigner
from streakly.core.errors import AuthError, ConflictError, ValidationError
from streakly.core.utils.dates import utcnow
from streakly.extensions import db


@pytest.fixture
def auth(services):
    return services.auth


class TestAccounts:
    def test_signup_normalizes_and_hashes(self, auth):
        user = auth.signup("  New.User@Example.com ", "correct horse", "New User")

        assert user.id is not None
        assert user.email == "new.user@example.com"
        assert user.name == "New User"
        assert user.password_hash != "correct horse"

    def test_signup_duplicate_email(self, auth, user):
        with pytest.raises(ConflictError) as exc:
            auth.signup("TESTER@example.com", "whatever123")

        assert str(exc.value) == "email_already_exists"

    def test_validate_credentials(self, auth, user):
        assert auth.validate_credentials("tester@example.com", "secret123").id == user.id
        assert auth.validate_credentials("Tester@Example.com", "secret123").id == user.id

    def test_wrong_password_and_unknown_email_look_the_same(self, auth, user):
        assert auth.validate_credentials("tester@example.com", "nope") is None
        assert auth.validate_credentials("nobody@example.com", "secret123") is None

    def test_password_over_72_bytes_is_rejected_at_signup(self, auth):
        # 40 characters, 80 bytes.
        with pytest.raises(ValidationError) as exc:
            auth.signup("long@example.com", "\u00e9" * 40)

        assert str(exc.value) == "password_too_long"

    def test_password_over_72_bytes_never_matches(self, auth, user):
        # Shares its first 72 bytes with a stored password.
        auth.signup("prefix@example.com", "a" * 72)

        assert auth.validate_credentials("prefix@example.com", "a" * 72) is not None
        assert auth.validate_credentials("prefix@example.com", "a" * 72 + "b") is None

    def test_misses_spend_a_check_against_the_app_dummy_hash(self, auth, user, monkeypatch):
        spent = []
        monkeypatch.setattr(auth_service_module, "burn_verification", spent.append)

        assert auth.validate_credentials("nobody@example.com", "secret123") is None
        assert auth.validate_credentials("tester@example.com", "x" * 100) is None

        assert auth._dummy_hash.startswith("$2")
        assert spent == [auth._dummy_hash, auth._dummy_hash]

    def test_get_user_by_id(self, auth, user):
        assert auth.get_user_by_id(user.id).email == user.email
        assert auth.get_user_by_id(9999) is None


class TestIssueTokens:
    def test_pair_is_issued_and_refresh_token_stored(self, auth, user):
        tokens = auth.issue_tokens(user)

        assert set(tokens) == {"access_token", "refresh_token"}
        assert auth.validate_refresh_token(tokens["refresh_token"]) == user.id

    def test_access_token_claims(self, auth, user):
        claims = auth.access_signer.verify(auth.issue_tokens(user)["access_token"])

        assert claims["sub"] == str(user.id)
        assert claims["email"] == user.email
        assert claims["exp"] - claims["iat"] == 15 * 60

    def test_refresh_tokens_are_unique(self, auth, user):
        first = auth.issue_tokens(user)["refresh_token"]
        second = auth.issue_tokens(user)["refresh_token"]

        assert first != second
        assert db.session.query(RefreshToken).filter_by(user_id=user.id).count() == 2

    def test_signers_do_not_accept_each_others_tokens(self, auth, user):
        tokens = auth.issue_tokens(user)

        with pytest.raises(AuthError):
            auth.refresh_signer.verify(tokens["access_token"])
        with pytest.raises(AuthError):
            auth.access_signer.verify(tokens["refresh_token"])


class TestValidateRefreshToken:
    def test_unknown_token(self, auth):
        assert auth.validate_refresh_token("not-a-token") is None

    def test_expired_row_is_deleted(self, auth, user):
        token = auth.refresh_signer.sign(user.id)
        auth.store_refresh_token(user.id, token, utcnow() - timedelta(seconds=1))

        assert auth.validate_refresh_token(token) is None
        assert db.session.query(RefreshToken).count() == 0


class TestRotation:
    def test_rotation_issues_new_pair(self, auth, user):
        old = auth.issue_tokens(user)

        new = auth.rotate_refresh_token(old["refresh_token"])

        assert new["refresh_token"] != old["refresh_token"]
        assert auth.validate_refresh_token(old["refresh_token"]) is None
        assert auth.validate_refresh_token(new["refresh_token"]) == user.id

    def test_rotation_is_single_use(self, auth, user):
        token = auth.issue_tokens(user)["refresh_token"]
        auth.rotate_refresh_token(token)

        with pytest.raises(AuthError):
            auth.rotate_refresh_token(token)

    def test_losing_the_delete_race_fails(self, auth, user, monkeypatch):
        token = auth.issue_tokens(user)["refresh_token"]
        # Another request consumes the row after this one validated it.
        monkeypatch.setattr(auth, "validate_refresh_token", lambda _token: user.id)
        auth.revoke_refresh_token(token)

        with pytest.raises(AuthError):
            auth.rotate_refresh_token(token)

        assert db.session.query(RefreshToken).count() == 0

    def test_garbage_token(self, auth):
        with pytest.raises(AuthError):
            auth.rotate_refresh_token("garbage")

    def test_validly_signed_but_never_stored(self, auth, user):
        with pytest.raises(AuthError):
            auth.rotate_refresh_token(auth.refresh_signer.sign(user.id))

    def test_expired_signature_drops_the_stored_row(self, app, auth, user):
        lapsed = RefreshTokenSigner(app.config["JWT_REFRESH_SECRET_KEY"], timedelta(seconds=-10))
        token = lapsed.sign(user.id)
        # The row outlives the signed exp.
        auth.store_refresh_token(user.id, token, utcnow() + timedelta(hours=1))

        with pytest.raises(AuthError) as exc:
            auth.rotate_refresh_token(token)

        assert str(exc.value) == "token_expired"
        assert db.session.query(RefreshToken).count() == 0


class TestRevocation:
    def test_revoke_is_idempotent(self, auth, user):
        token = auth.issue_tokens(user)["refresh_token"]

        assert auth.revoke_refresh_token(token) is True
        assert auth.revoke_refresh_token(token) is False
        assert auth.validate_refresh_token(token) is None

    def test_revoke_all(self, auth, user, other_user):
        tokens = [auth.issue_tokens(user)["refresh_token"] for _ in range(3)]
        kept = auth.issue_tokens(other_user)["refresh_token"]

        assert auth.revoke_all_user_tokens(user.id) == 3
        assert all(auth.validate_refresh_token(t) is None for t in tokens)
        assert auth.validate_refresh_token(kept) == other_user.id

    def test_purge_expired(self, auth, user):
        live = auth.issue_tokens(user)["refresh_token"]
        stale = auth.refresh_signer.sign(user.id)
        auth.store_refresh_token(user.id, stale, utcnow() - timedelta(days=1))

        assert auth.purge_expired_tokens() == 1
        assert auth.validate_refresh_token(live) == user.id

    def test_tokens_removed_with_user(self, auth, user):
        auth.issue_tokens(user)

        db.session.delete(user)
        db.session.commit()

        assert db.session.query(RefreshToken).count() == 0
