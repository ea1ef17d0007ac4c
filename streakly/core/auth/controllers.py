"""Auth HTTP controllers (API only)."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from streakly.core.auth.schemas import LoginRequest, LogoutRequest, RefreshRequest, SignupRequest
from streakly.core.container import get_services
from streakly.core.errors import AuthError, NotFoundError
from streakly.core.users.schemas import serialize_user
from streakly.core.utils.decorators import current_user_id
from streakly.core.utils.validation import parse_body
from streakly.extensions import limiter

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth_api", __name__)


@auth_bp.post("/signup")
@limiter.limit("5/minute")
def signup():
    data = parse_body(SignupRequest)
    auth = get_services().auth
    user = auth.signup(data.email, data.password, data.name)
    tokens = auth.issue_tokens(user)
    return (
        jsonify({"ok": True, **tokens, "user": serialize_user(user).model_dump(mode="json")}),
        201,
    )


@auth_bp.post("/login")
@limiter.limit("10/minute")
def login():
    data = parse_body(LoginRequest)
    auth = get_services().auth
    user = auth.validate_credentials(data.email, data.password)
    if not user:
        raise AuthError("invalid_credentials")
    tokens = auth.issue_tokens(user)
    return jsonify({"ok": True, **tokens, "user": serialize_user(user).model_dump(mode="json")})


@auth_bp.post("/refresh")
@limiter.limit("30/minute")
def refresh():
    data = parse_body(RefreshRequest)
    tokens = get_services().auth.rotate_refresh_token(data.refresh_token)
    return jsonify({"ok": True, **tokens})


@auth_bp.post("/logout")
@jwt_required()
def logout():
    data = parse_body(LogoutRequest)
    get_services().auth.revoke_refresh_token(data.refresh_token)
    return "", 204


@auth_bp.post("/logout-all")
@jwt_required()
def logout_all():
    user_id = current_user_id()
    revoked = get_services().auth.revoke_all_user_tokens(user_id)
    logger.info("User %s signed out of %s sessions", user_id, revoked)
    return "", 204


@auth_bp.get("/me")
@jwt_required()
def me():
    user = get_services().auth.get_user_by_id(current_user_id())
    if not user:
        raise NotFoundError()
    return jsonify({"ok": True, "user": serialize_user(user).model_dump(mode="json")})
