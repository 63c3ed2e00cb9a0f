import pytest
from fastapi import status

from app.models.problem import Problem, ProblemStatus


@pytest.mark.asyncio
async def test_filter_problems(async_client, fake_db, mocker):
    found = [Problem(id=3, project_id=1, name="Timeout", status=ProblemStatus.REAPPEARED)]
    filter_problems = mocker.patch(
        "app.services.problem_service.filter_problems", return_value=found
    )

    resp = await async_client.post(
        "/problems/filter", params={"project_id": 1}, json={"status": "REAPPEARED"}
    )

    assert resp.status_code == status.HTTP_200_OK
    assert [(p["id"], p["status"]) for p in resp.json()] == [(3, "REAPPEARED")]
    criteria = filter_problems.await_args.args[2]
    assert criteria.status == ProblemStatus.REAPPEARED
    assert criteria.name is None


@pytest.mark.asyncio
async def test_filter_refuses_unknown_status(async_client, fake_db):
    resp = await async_client.post(
        "/problems/filter", params={"project_id": 1}, json={"status": "SOLVED"}
    )

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_problem(async_client, fake_db):
    async def _assign_id(obj):
        obj.id = 11

    fake_db.refresh.side_effect = _assign_id

    resp = await async_client.post(
        "/problems", json={"project_id": 1, "name": "Login fails", "defect_id": "BUG-9"}
    )

    assert resp.status_code == status.HTTP_201_CREATED
    body = resp.json()
    assert body["id"] == 11
    assert body["status"] == "OPEN"
    assert body["defect_id"] == "BUG-9"
