"""Persisted document shapes for roles and users."""
from typing import Dict, Optional

from pydantic import BaseModel, field_validator

from .role import ROLE_TYPE
from .sanitizers import sanitize_text


class RoleReference(BaseModel):
    type: str = ROLE_TYPE
    subtype: Optional[str] = None
    machineName: str


class RoleDocument(BaseModel):
    machineName: str
    title: str = ""
    description: Optional[str] = None
    isSuper: bool = False
    permissions: Dict[str, bool] = {}
    inherit: Optional[str] = None

    @field_validator("title", "description")
    @classmethod
    def _trim(cls, value):
        return sanitize_text(value)


class UserDocument(BaseModel):
    email: str
    displayName: Optional[str] = None
    password: str
    roles: Dict[str, RoleReference] = {}

    @field_validator("email", "displayName")
    @classmethod
    def _trim(cls, value):
        return sanitize_text(value)
