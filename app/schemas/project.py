from __future__ import annotations

from pydantic import BaseModel, Field


class ProjectBase(BaseModel):
    code: str = Field(min_length=1, max_length=32, pattern=r"^[a-z0-9-]+$")
    name: str = Field(min_length=1, max_length=64)
    default_at_startup: bool = False


class ProjectCreate(ProjectBase):
    pass


class ProjectRead(ProjectBase):
    id: int

    model_config = {"from_attributes": True}
