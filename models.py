"""
Data models for identity entities
Using Pydantic for validation and serialization

Each entity table has:
- a row model (decodes rows read from storage, snake_case fields)
- a *Create model (validated input for new rows)
- a TableDescriptor used by RelationQueries
"""

import secrets
import string
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from relations import TableDescriptor

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 21


def generate_standard_id(size: int = ID_LENGTH) -> str:
    """Random lower-case alphanumeric id, e.g. 'k3j0c9d8x2m1q7w5e4r6t'"""
    return ''.join(secrets.choice(ID_ALPHABET) for _ in range(size))


# ============================================================================
# Base
# ============================================================================

class BaseEntity(BaseModel):
    """Base model for all stored entities"""
    model_config = ConfigDict(from_attributes=True, extra='ignore')

    id: str = Field(..., min_length=1, max_length=21)
    created_at: datetime


# ============================================================================
# Users
# ============================================================================

class User(BaseEntity):
    """User account"""
    username: Optional[str] = Field(None, max_length=128)
    primary_email: Optional[str] = Field(None, max_length=128)
    name: Optional[str] = Field(None, max_length=128)
    is_suspended: bool = False


class UserCreate(BaseModel):
    """Create user request"""
    username: Optional[str] = Field(None, min_length=1, max_length=128)
    primary_email: Optional[str] = Field(None, max_length=128)
    name: Optional[str] = Field(None, max_length=128)

    @field_validator('primary_email')
    @classmethod
    def validate_email(cls, v):
        if v is not None and '@' not in v:
            raise ValueError(f"Invalid email address: '{v}'")
        return v


# ============================================================================
# Organizations
# ============================================================================

class Organization(BaseEntity):
    """Organization (tenant) that users can be members of"""
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=256)


class OrganizationCreate(BaseModel):
    """Create organization request"""
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=256)


class OrganizationRole(BaseEntity):
    """Role template applied to users inside an organization"""
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=256)


class OrganizationRoleCreate(BaseModel):
    """Create organization role request"""
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=256)


class OrganizationScope(BaseEntity):
    """Permission granted to organization roles"""
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=256)


class OrganizationScopeCreate(BaseModel):
    """Create organization scope request"""
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=256)


# ============================================================================
# Table descriptors
# ============================================================================

Users = TableDescriptor(table='users', table_singular='user', guard=User)
Organizations = TableDescriptor(table='organizations', table_singular='organization', guard=Organization)
OrganizationRoles = TableDescriptor(
    table='organization_roles', table_singular='organization_role', guard=OrganizationRole
)
OrganizationScopes = TableDescriptor(
    table='organization_scopes', table_singular='organization_scope', guard=OrganizationScope
)

DESCRIPTORS = {
    descriptor.table: descriptor
    for descriptor in (Users, Organizations, OrganizationRoles, OrganizationScopes)
}
