"""Pydantic schemas for auth requests and user responses.

The password digest is never part of a response model.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Body of /login and /signUp."""
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str


class RecoverPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)


class RecoverPasswordResponse(BaseModel):
    email: str
    message: str


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    current_password: str = Field(..., min_length=1, alias="currentPassword")
    new_password: str = Field(..., min_length=1, alias="newPassword")

    model_config = {"populate_by_name": True}


class UserRead(BaseModel):
    id: int
    email: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
