from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    created_at: datetime


class SignupRequest(BaseModel):
    name: str = Field(default="", max_length=120)
    email: str = Field(default="", max_length=254)
    password: str = Field(default="", max_length=200)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(BaseModel):
    email: str = Field(default="", max_length=254)
    password: str = Field(default="", max_length=200)


class AuthResponse(BaseModel):
    message: str
    user: UserOut
    token: str


class MeResponse(BaseModel):
    user: UserOut


class MessageResponse(BaseModel):
    message: str


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value or ""))
