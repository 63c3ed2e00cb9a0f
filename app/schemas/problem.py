from __future__ import annotations

from pydantic import BaseModel, Field

from app.models.problem import ProblemStatus


class ProblemBase(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    description: str | None = None
    status: ProblemStatus = ProblemStatus.OPEN
    blamed_team_id: int | None = None
    defect_id: str | None = Field(default=None, max_length=32)
    pattern: str | None = None


class ProblemCreate(ProblemBase):
    project_id: int
    created_by: str | None = None


class ProblemRead(ProblemBase):
    id: int
    project_id: int
    created_by: str | None = None

    model_config = {"from_attributes": True}


class ProblemFilter(BaseModel):
    """Criteria to search problems; unset fields do not filter.

    Attributes:
        name: Case-insensitive substring of the problem name.
        status: Exact status.
        blamed_team_id: Team blamed for the problem.
        defect_id: Exact defect identifier.
    """

    name: str | None = None
    status: ProblemStatus | None = None
    blamed_team_id: int | None = None
    defect_id: str | None = None
