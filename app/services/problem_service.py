from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import commit_or_conflict
from app.models.problem import Problem
from app.schemas.problem import ProblemCreate, ProblemFilter

LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    for char in (LIKE_ESCAPE, "%", "_"):
        value = value.replace(char, LIKE_ESCAPE + char)
    return value


def build_problem_query(project_id: int, criteria: ProblemFilter) -> Select[tuple[Problem]]:
    """Translate a filter into a SELECT over a project's problems.

    Unset criteria are ignored; the name matches case-insensitively anywhere,
    with ``%`` and ``_`` taken literally.
    """

    stmt: Select[tuple[Problem]] = select(Problem).where(Problem.project_id == project_id)
    if criteria.name:
        pattern = f"%{_escape_like(criteria.name)}%"
        stmt = stmt.where(Problem.name.ilike(pattern, escape=LIKE_ESCAPE))
    if criteria.status is not None:
        stmt = stmt.where(Problem.status == criteria.status)
    if criteria.blamed_team_id is not None:
        stmt = stmt.where(Problem.blamed_team_id == criteria.blamed_team_id)
    if criteria.defect_id:
        stmt = stmt.where(Problem.defect_id == criteria.defect_id)
    return stmt.order_by(Problem.name, Problem.id)


async def filter_problems(
    db: AsyncSession, project_id: int, criteria: ProblemFilter
) -> list[Problem]:
    rows = (await db.execute(build_problem_query(project_id, criteria))).scalars().all()
    return list(rows)


async def create_problem(db: AsyncSession, payload: ProblemCreate) -> Problem:
    problem = Problem(**payload.model_dump())
    db.add(problem)
    await commit_or_conflict(
        db, f"Project {payload.project_id} or team {payload.blamed_team_id} does not exist."
    )
    await db.refresh(problem)
    return problem
