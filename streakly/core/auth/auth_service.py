"""Authentication service layer: accounts, credentials and refresh tokens."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, scoped_session

from streakly.core.auth.models import RefreshToken
from streakly.core.auth.password import (
    burn_verification,
    hash_password,
    make_dummy_hash,
    password_too_long,
    verify_password,
)
from streakly.core.auth.signers import AccessTokenSigner, RefreshTokenSigner
from streakly.core.errors import AuthError, ConflictError, ValidationError
from streakly.core.users.models import User
from streakly.core.utils.dates import utcnow

logger = logging.getLogger(__name__)


class AuthService:
    """Account creation, credential checks and the refresh-token lifecycle.

    A refresh token is valid only while its row exists in
    ``auth_refresh_token``; a good signature alone is never enough.
    Lifecycle: issued -> active -> rotated-out | revoked | expired.
    """

    def __init__(
        self,
        session: Session | scoped_session,
        access_signer: AccessTokenSigner,
        refresh_signer: RefreshTokenSigner,
        clock: Callable[[], datetime] = utcnow,
        dummy_password_hash: Optional[str] = None,
    ) -> None:
        self.session = session
        self.access_signer = access_signer
        self.refresh_signer = refresh_signer
        self._clock = clock
        self._dummy_hash = dummy_password_hash or make_dummy_hash()

    # --- accounts ---

    def signup(self, email: str, password: str, name: Optional[str] = None) -> User:
        normalized_email = email.strip().lower()
        existing = (
            self.session.query(User.id)
            .filter(func.lower(User.email) == normalized_email)
            .first()
        )
        if existing:
            raise ConflictError("email_already_exists")
        if password_too_long(password):
            raise ValidationError("password_too_long")

        user = User(
            email=normalized_email,
            name=(name or "").strip() or None,
            password_hash=hash_password(password),
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            # Lost a race against a concurrent signup for the same email.
            self.session.rollback()
            raise ConflictError("email_already_exists") from exc
        logger.info("Registered user %s", user.id)
        return user

    def validate_credentials(self, email: str, password: str) -> Optional[User]:
        """Return the user if credentials are valid.

        Unknown email and wrong password both yield ``None`` after the same
        amount of bcrypt work.
        """
        normalized_email = (email or "").strip().lower()
        user = (
            self.session.query(User)
            .filter(func.lower(User.email) == normalized_email)
            .first()
        )
        if not user or password_too_long(password):
            # An over-long password can never match; it costs the same as a miss.
            burn_verification(self._dummy_hash)
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, int(user_id))

    # --- tokens ---

    def issue_tokens(self, user: User) -> dict[str, str]:
        """Create an access/refresh pair and persist the refresh token."""
        access_token, refresh_token, expires_at = self._mint(user)
        self.store_refresh_token(user.id, refresh_token, expires_at)
        return {"access_token": access_token, "refresh_token": refresh_token}

    def store_refresh_token(self, user_id: int, token: str, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(user_id=user_id, token=token, expires_at=expires_at)
        self.session.add(record)
        self.session.commit()
        return record

    def validate_refresh_token(self, token: str) -> Optional[int]:
        """Return the owning user id, or ``None`` if unknown or expired.

        Expired rows are deleted on detection.
        """
        record = self.session.query(RefreshToken).filter_by(token=token).first()
        if record is None:
            return None
        if record.expires_at < self._clock():
            self.session.delete(record)
            self.session.commit()
            logger.info("Dropped expired refresh token for user %s", record.user_id)
            return None
        return record.user_id

    def rotate_refresh_token(self, token: str) -> dict[str, str]:
        """Consume ``token`` and return a fresh access/refresh pair.

        The old row is removed with a conditional delete in the same
        transaction that stores the replacement. When two requests race on
        one token only the delete that actually removes the row wins.
        """
        try:
            claims = self.refresh_signer.verify(token)
        except AuthError as exc:
            # The signed exp runs out before the stored row does; drop the row now.
            if exc.code == "token_expired":
                self.revoke_refresh_token(token)
            raise
        user_id = self.validate_refresh_token(token)
        if user_id is None or str(user_id) != str(claims.get("sub")):
            logger.warning("Rejected refresh token for subject %s", claims.get("sub"))
            raise AuthError("invalid_token")

        user = self.get_user_by_id(user_id)
        if user is None:
            raise AuthError("invalid_token")

        deleted = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.token == token)
            .delete(synchronize_session=False)
        )
        if deleted != 1:
            self.session.rollback()
            raise AuthError("invalid_token")

        access_token, refresh_token, expires_at = self._mint(user)
        self.session.add(RefreshToken(user_id=user.id, token=refresh_token, expires_at=expires_at))
        self.session.commit()
        logger.info("Rotated refresh token for user %s", user.id)
        return {"access_token": access_token, "refresh_token": refresh_token}

    def revoke_refresh_token(self, token: str) -> bool:
        """Delete one refresh token. Unknown tokens are not an error."""
        deleted = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.token == token)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted > 0

    def revoke_all_user_tokens(self, user_id: int) -> int:
        deleted = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        if deleted:
            logger.info("Revoked %s refresh tokens for user %s", deleted, user_id)
        return deleted

    def purge_expired_tokens(self) -> int:
        deleted = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.expires_at < self._clock())
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    # --- helpers ---

    def _mint(self, user: User) -> tuple[str, str, datetime]:
        access_token = self.access_signer.sign(user.id, {"email": user.email})
        refresh_token = self.refresh_signer.sign(user.id)
        expires_at = self._clock() + self.refresh_signer.expires
        return access_token, refresh_token, expires_at
