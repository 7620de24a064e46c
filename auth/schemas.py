import re
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, pattern="^[a-zA-Z0-9]+$")
    email: Optional[EmailStr] = None
    password: str = Field(..., min_length=6)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        if not (re.search("[a-z]", value) and re.search("[A-Z]", value) and re.search(r"\d", value)):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return value


class UserLogin(BaseModel):
    # Accepts either the username or the email address.
    username: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserInfo(BaseModel):
    id: str
    username: str
    email: Optional[EmailStr] = None
    role: str = "user"

    @classmethod
    def from_document(cls, user: dict) -> "UserInfo":
        return cls(
            id=str(user["_id"]),
            username=user["username"],
            email=user.get("email"),
            role=user.get("role", "user"),
        )
