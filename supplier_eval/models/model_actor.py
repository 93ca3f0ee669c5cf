"""Acting user identity as supplied by the authorization collaborator."""

from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Roles recognised by the engine."""

    ADMIN = "admin"
    EVALUATOR = "evaluator"
    PROVIDER = "provider"


class Actor(BaseModel):
    """The user performing an operation."""

    user_id: str
    role: UserRole
    provider_id: str | None = Field(
        default=None, description="Provider the user belongs to (provider role only)"
    )
