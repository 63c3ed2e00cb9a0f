from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from app.models.functionality import (
    CoverageLevel,
    FunctionalitySeverity,
    FunctionalityType,
)


class FunctionalityBase(BaseModel):
    """Editable fields of a functionality or folder.

    Folders only use ``name``; the other fields must be left unset for them.
    """

    name: str = Field(min_length=1, max_length=512)
    country_codes: str | None = Field(default=None, max_length=128)
    team_id: int | None = None
    severity: FunctionalitySeverity | None = None
    created: str | None = Field(default=None, max_length=10)
    started: bool | None = None
    not_automatable: bool | None = None
    comment: str | None = None


class FunctionalityCreate(FunctionalityBase):
    project_id: int
    parent_id: int | None = None
    type: FunctionalityType = FunctionalityType.FUNCTIONALITY


class FunctionalityUpdate(FunctionalityBase):
    pass


class ScenarioCompactRead(BaseModel):
    id: int
    source_id: int
    feature_file: str | None = None
    name: str
    line: int | None = None
    ignored: bool = False

    model_config = {"from_attributes": True}


class FunctionalityRead(FunctionalityBase):
    id: int
    project_id: int
    parent_id: int | None
    order: float | None = None
    type: FunctionalityType
    coverage_level: CoverageLevel
    covered_scenarios: int | None = None
    covered_country_scenarios: str | None = None
    ignored_scenarios: int | None = None
    ignored_country_scenarios: str | None = None

    model_config = {"from_attributes": True}


class FunctionalityWithScenariosRead(FunctionalityRead):
    scenarios: list[ScenarioCompactRead] = []


class FunctionalityTreeNode(FunctionalityRead):
    """A functionality with its children, for the cartography tree."""

    children: list[FunctionalityTreeNode] = []


class FunctionalityPosition(StrEnum):
    """Where to put moved functionalities, relative to the reference."""

    ABOVE = "ABOVE"
    BELOW = "BELOW"
    LAST_CHILD = "LAST_CHILD"


class MoveFunctionalities(BaseModel):
    """Payload to move functionalities in the tree.

    Attributes:
        source_ids: Functionalities to move, kept in this order at the destination.
        reference_id: Destination reference; ``None`` is the virtual root folder.
        relative_position: Position of the moved items relative to the reference.
    """

    source_ids: list[int] = Field(min_length=1)
    reference_id: int | None = None
    relative_position: FunctionalityPosition


class FunctionalityOrderRead(BaseModel):
    id: int
    parent_id: int | None
    order: float
