"""Project models."""

from datetime import datetime
from pydantic import Field

from .base import WireModel


class Project(WireModel):
    """Named group of conversations."""

    id: str = Field(description="Project ID")
    name: str = Field(description="Project name")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")
    conversation_count: int = Field(default=0, ge=0, description="Active conversations referencing this project")
