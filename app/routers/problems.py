from __future__ import annotations

from fastapi import APIRouter, status

from app.deps import DbDep, ProjectIdQuery
from app.models.problem import Problem
from app.schemas.problem import ProblemCreate, ProblemFilter, ProblemRead
from app.services import problem_service


router = APIRouter()


@router.post("/filter", response_model=list[ProblemRead])
async def filter_problems(
    db: DbDep, project_id: ProjectIdQuery, criteria: ProblemFilter
) -> list[Problem]:
    """Search the problems of a project; unset criteria do not filter."""

    return await problem_service.filter_problems(db, project_id, criteria)


@router.post("", response_model=ProblemRead, status_code=status.HTTP_201_CREATED)
async def create_problem(db: DbDep, payload: ProblemCreate) -> Problem:
    return await problem_service.create_problem(db, payload)
