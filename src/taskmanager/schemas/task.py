"""Pydantic schemas for tasks.

Learn: Separate schemas for write/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT to replace a task's fields
- TaskRead: what the API returns (also the shape stored in the cache)
"""

from pydantic import BaseModel, Field


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="")
    completed: bool = False


class TaskUpdate(BaseModel):
    """Full replacement — omitted fields fall back to their defaults."""
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="")
    completed: bool = False


class TaskCreated(BaseModel):
    id: int


class TaskRead(BaseModel):
    id: int
    title: str
    description: str
    completed: bool
    user_email: str

    model_config = {"from_attributes": True}
