import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from app.core.errors import ConflictError
from app.models.problem import Problem, ProblemStatus
from app.schemas.problem import ProblemCreate, ProblemFilter
from app.services import problem_service
from app.services.problem_service import build_problem_query


def _compile(stmt):
    compiled = stmt.compile(dialect=postgresql.dialect())
    return str(compiled), compiled.params


def test_empty_filter_only_restricts_the_project():
    sql, params = _compile(build_problem_query(4, ProblemFilter()))

    assert "problems.project_id = " in sql
    assert "ILIKE" not in sql
    assert "problems.status" not in sql.split("WHERE", 1)[1]
    assert list(params.values()) == [4]
    assert sql.rstrip().endswith("ORDER BY problems.name, problems.id")


def test_name_matches_case_insensitive_substring():
    sql, params = _compile(build_problem_query(4, ProblemFilter(name="timeout")))

    assert "problems.name ILIKE" in sql
    assert "%timeout%" in params.values()


def test_name_wildcards_are_matched_literally():
    sql, params = _compile(build_problem_query(4, ProblemFilter(name="50%_off")))

    assert "ESCAPE" in sql
    assert "%50\\%\\_off%" in params.values()


def test_underscore_alone_does_not_match_everything():
    _, params = _compile(build_problem_query(4, ProblemFilter(name="_")))

    assert "%\\_%" in params.values()


def test_every_criterion_adds_a_clause():
    criteria = ProblemFilter(
        name="db", status=ProblemStatus.REAPPEARED, blamed_team_id=9, defect_id="BUG-1"
    )

    sql, params = _compile(build_problem_query(4, criteria))

    where = sql.split("WHERE", 1)[1]
    for column in ("project_id", "name", "status", "blamed_team_id", "defect_id"):
        assert f"problems.{column}" in where
    assert 9 in params.values()
    assert "BUG-1" in params.values()


@pytest.mark.asyncio
async def test_filter_problems_returns_rows(mocker):
    rows = [Problem(id=1, project_id=4, name="Timeout")]
    result = mocker.MagicMock()
    result.scalars.return_value.all.return_value = rows
    db = mocker.AsyncMock()
    db.execute.return_value = result

    found = await problem_service.filter_problems(db, 4, ProblemFilter(name="time"))

    assert found == rows
    db.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_problem_persists(mocker):
    db = mocker.AsyncMock()
    db.add = mocker.MagicMock()

    problem = await problem_service.create_problem(
        db, ProblemCreate(project_id=4, name="Login fails", created_by="qa")
    )

    db.add.assert_called_once_with(problem)
    db.commit.assert_awaited_once()
    assert problem.status == ProblemStatus.OPEN
    assert problem.created_by == "qa"


@pytest.mark.asyncio
async def test_create_problem_for_unknown_team_conflicts(mocker):
    db = mocker.AsyncMock()
    db.add = mocker.MagicMock()
    db.commit.side_effect = IntegrityError("fk violation", params=None, orig=None)

    with pytest.raises(ConflictError):
        await problem_service.create_problem(
            db, ProblemCreate(project_id=4, name="Login fails", blamed_team_id=404)
        )
    db.rollback.assert_awaited_once()
    db.refresh.assert_not_awaited()
