from __future__ import annotations

from pydantic import BaseModel, Field

from app.models.source import Technology


class SourceBase(BaseModel):
    """Shared Source fields.

    ``vcs_url`` may contain the ``{{branch}}`` placeholder, replaced by
    ``default_branch`` when indexing coverage.
    """

    code: str = Field(min_length=1, max_length=16)
    name: str = Field(min_length=1, max_length=32)
    letter: str = Field(min_length=1, max_length=1)
    technology: Technology
    vcs_url: str | None = Field(default=None, max_length=256)
    default_branch: str | None = Field(default=None, max_length=16)
    postman_country_root_folders: bool = False


class SourceCreate(SourceBase):
    project_id: int


class SourceUpdate(SourceBase):
    pass


class SourceRead(SourceBase):
    id: int
    project_id: int

    model_config = {"from_attributes": True}
