"""Schemas for auth flows (signup, login, refresh, logout)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from streakly.core.auth.password import MAX_PASSWORD_BYTES, password_too_long


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=1024)
    name: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, v: str) -> str:
        # The limit is in UTF-8 bytes, not characters.
        if password_too_long(v):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    # Over-long passwords reach the service and fail like any wrong password.
    password: str = Field(min_length=1, max_length=1024)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class LogoutRequest(BaseModel):
    refresh_token: str = Field(min_length=1)
