"""Pydantic models for authentication."""

from pydantic import BaseModel, Field


class Session(BaseModel):
    """The authenticated identity every task operation is scoped by."""

    token: str
    user_id: str
    email: str


class Credentials(BaseModel):
    """Request model for sign-up and sign-in."""

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class SessionResponse(BaseModel):
    """Response model for the current session."""

    user_id: str
    email: str
    avatar_url: str | None = None
