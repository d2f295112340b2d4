"""Request and response schemas for the Gatekeeper API."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PermissionIn(BaseModel):
    id: Optional[int] = None
    resource: str = Field(..., min_length=1, max_length=100)
    action: str = Field(..., min_length=1, max_length=100)
    attributes: str = Field("*", max_length=255)


class RoleCreate(BaseModel):
    id: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: Optional[List[PermissionIn]] = None


class RoleUpdate(BaseModel):
    description: Optional[str] = None


class RoleRef(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)


class UserCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    age: Optional[int] = Field(None, ge=0)
    roles: Optional[List[RoleRef]] = None


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    age: Optional[int] = Field(None, ge=0)


class GoalCreate(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    hits: int = Field(0, ge=0)
    min_hits: int = Field(0, ge=0)
    max_hits: int = Field(0, ge=0)
    unique_users: int = Field(0, ge=0)
    min_unique_users: int = Field(0, ge=0)
    max_unique_users: int = Field(0, ge=0)
    start: Optional[datetime] = None
    stop: Optional[datetime] = None


class GoalUpdate(BaseModel):
    key: Optional[str] = Field(None, min_length=1, max_length=100)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    hits: Optional[int] = Field(None, ge=0)
    min_hits: Optional[int] = Field(None, ge=0)
    max_hits: Optional[int] = Field(None, ge=0)
    unique_users: Optional[int] = Field(None, ge=0)
    min_unique_users: Optional[int] = Field(None, ge=0)
    max_unique_users: Optional[int] = Field(None, ge=0)
    start: Optional[datetime] = None
    stop: Optional[datetime] = None
    deleted: Optional[bool] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
