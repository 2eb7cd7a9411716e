"""Pydantic models for users, roles, tenants, contacts and notifications."""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from tourdesk.app.store.model import Entity


class Permission(Entity):
    name: str


class Role(Entity):
    name: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    permissions: Optional[List[Permission]] = None


class User(Entity):
    name: str
    email: str
    email_verified_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    roles: List[Role] = Field(default_factory=list)


class Tenant(Entity):
    name: str
    description: Optional[str] = None
    invited_at: Optional[str] = None
    users: Optional[List[User]] = None


class Contact(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    country_code: Optional[str] = None


class Notification(Entity):
    """A server notification; ``data`` may arrive JSON-encoded on the channel."""

    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    read_at: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("data", mode="before")
    @classmethod
    def decode_data(cls, value: Any) -> Any:
        if isinstance(value, str):
            return json.loads(value) if value else {}
        return value
