from __future__ import annotations

from pydantic import BaseModel

from app.models.functionality import CoverageLevel


class AxisPointRead(BaseModel):
    id: str
    name: str
    tooltip: str | None = None


class AxisRead(BaseModel):
    """A cartography axis and its possible points."""

    code: str
    name: str
    points: list[AxisPointRead]


class CoverageSummaryRead(BaseModel):
    project_id: int
    total: int
    levels: dict[CoverageLevel, int]
