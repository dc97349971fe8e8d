# backend/gehl/schemas/user.py
from pydantic import BaseModel, field_validator, model_validator
from typing import Optional
from uuid import UUID

MIN_PASSWORD_LENGTH = 7
MAX_PASSWORD_LENGTH = 1000
SPECIAL_CHARACTERS = "!@#$%^&*?"


class SignupIn(BaseModel):
    email: str
    name: Optional[str] = None
    password: str
    password_confirmation: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Invalid syntax for email")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if len(v) > MAX_PASSWORD_LENGTH:
            raise ValueError(f"Password must be less than {MAX_PASSWORD_LENGTH} characters long")
        if not any(c in SPECIAL_CHARACTERS for c in v):
            raise ValueError(f"Password must contain one special character from: {SPECIAL_CHARACTERS}")
        return v

    @model_validator(mode="after")
    def check_confirmation(self):
        if self.password != self.password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class UserOut(BaseModel):
    user_id: UUID
    email: str
    name: Optional[str] = None


class LoginIn(BaseModel):
    email: str
    password: str
