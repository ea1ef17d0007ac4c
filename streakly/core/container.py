"""Service wiring.

Services are built once per app from the shared ``db.session`` and the
configured signers, then looked up from ``current_app`` by controllers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from flask import Flask, current_app

from streakly.core.auth.auth_service import AuthService
from streakly.core.auth.signers import AccessTokenSigner, RefreshTokenSigner
from streakly.core.utils.dates import utcnow
from streakly.domains.habits.services import GoalService, HabitService, TrackingService
from streakly.extensions import db

EXTENSION_KEY = "streakly.services"


@dataclass(frozen=True)
class Services:
    auth: AuthService
    habits: HabitService
    tracking: TrackingService
    goals: GoalService


def build_services(app: Flask, clock: Callable[[], datetime] = utcnow) -> Services:
    access_signer = AccessTokenSigner(app.config["JWT_ACCESS_TOKEN_EXPIRES"])
    refresh_signer = RefreshTokenSigner(
        app.config["JWT_REFRESH_SECRET_KEY"],
        app.config["JWT_REFRESH_TOKEN_EXPIRES"],
        algorithm=app.config.get("JWT_ALGORITHM", "HS256"),
    )
    services = Services(
        auth=AuthService(db.session, access_signer, refresh_signer, clock=clock),
        habits=HabitService(db.session, clock=clock),
        tracking=TrackingService(db.session, clock=clock),
        goals=GoalService(db.session, clock=clock),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
