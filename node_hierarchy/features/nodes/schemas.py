"""Node schemas for command output."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field


class NodeResponse(BaseModel):
    """Schema for a single node."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Node identifier")
    name: str = Field(description="Unique node name")
    created_at: datetime = Field(description="Creation timestamp")


class DescendantsResponse(BaseModel):
    """Schema for the descendants of one node, oldest relationship first."""

    ancestor: str = Field(description="Name of the queried node")
    descendants: list[str] = Field(default_factory=list, description="Descendant names")

    @computed_field
    @property
    def count(self) -> int:
        """Number of descendants."""
        return len(self.descendants)
