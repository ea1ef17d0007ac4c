"""Token signers.

Access and refresh tokens are produced by two independently configured
signer objects (different secret, different TTL) so that a token of one
kind can never be verified as the other.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt as pyjwt
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from streakly.core.errors import AuthError


class AccessTokenSigner:
    """Short-lived access tokens, verified by ``@jwt_required()`` on routes.

    Backed by Flask-JWT-Extended, so the secret is ``JWT_SECRET_KEY`` of the
    current app.
    """

    token_type = "access"

    def __init__(self, expires: timedelta) -> None:
        self.expires = expires

    def sign(self, identity: int | str, claims: Optional[Dict[str, Any]] = None) -> str:
        return create_access_token(
            identity=str(identity),
            additional_claims=claims or None,
            expires_delta=self.expires,
        )

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            claims = decode_token(token)
        except (JWTExtendedException, pyjwt.PyJWTError) as exc:
            raise AuthError("invalid_token") from exc
        if claims.get("type") != self.token_type:
            raise AuthError("invalid_token")
        return claims


class RefreshTokenSigner:
    """Long-lived refresh tokens signed with their own secret via PyJWT.

    Each token carries a random ``jti`` so two tokens issued to the same user
    within the same second are still distinct store keys.
    """

    token_type = "refresh"

    def __init__(self, secret: str, expires: timedelta, algorithm: str = "HS256") -> None:
        if not secret:
            raise ValueError("refresh token secret is required")
        self._secret = secret
        self.expires = expires
        self.algorithm = algorithm

    def sign(self, identity: int | str, claims: Optional[Dict[str, Any]] = None) -> str:
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            **(claims or {}),
            "sub": str(identity),
            "type": self.token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self.expires,
        }
        return pyjwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            claims = pyjwt.decode(token, self._secret, algorithms=[self.algorithm])
        except pyjwt.ExpiredSignatureError as exc:
            raise AuthError("token_expired") from exc
        except pyjwt.PyJWTError as exc:
            raise AuthError("invalid_token") from exc
        if claims.get("type") != self.token_type:
            raise AuthError("invalid_token")
        return claims
