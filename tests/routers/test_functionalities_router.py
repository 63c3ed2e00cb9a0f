import pytest
from fastapi import status
from sqlalchemy.exc import IntegrityError

from app.core.errors import NotFoundError
from tests.utils.factories import make_folder, make_functionality, make_scenario


def _catalog():
    return [
        make_folder("Cart", id=1, order=1024.0),
        make_functionality("Add", id=11, parent_id=1, order=100.0),
        make_functionality("Remove", id=12, parent_id=1, order=200.0, started=True),
    ]


def _return_rows(mocker, session, rows):
    result = mocker.MagicMock()
    result.scalars.return_value.all.return_value = rows
    session.execute.return_value = result


@pytest.mark.asyncio
async def test_tree_requires_project_id(async_client, fake_db):
    resp = await async_client.get("/functionalities")

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_tree_nests_functionalities(async_client, fake_db, mocker):
    _return_rows(mocker, fake_db, _catalog())

    resp = await async_client.get("/functionalities", params={"project_id": 1})

    assert resp.status_code == status.HTTP_200_OK
    body = resp.json()
    assert [node["name"] for node in body] == ["Cart"]
    children = body[0]["children"]
    assert [(c["name"], c["coverage_level"]) for c in children] == [
        ("Add", "NOT_COVERED"),
        ("Remove", "STARTED"),
    ]


@pytest.mark.asyncio
async def test_coverage_summary(async_client, fake_db, mocker):
    _return_rows(mocker, fake_db, _catalog())

    resp = await async_client.get("/functionalities/coverage", params={"project_id": 1})

    assert resp.status_code == status.HTTP_200_OK
    body = resp.json()
    assert body["total"] == 2
    assert body["levels"]["STARTED"] == 1
    assert body["levels"]["NOT_COVERED"] == 1
    assert body["levels"]["COVERED"] == 0


@pytest.mark.asyncio
async def test_coverage_axis(async_client):
    resp = await async_client.get("/functionalities/coverage/axis")

    assert resp.status_code == status.HTTP_200_OK
    body = resp.json()
    assert body["code"] == "coverage"
    assert len(body["points"]) == 6


@pytest.mark.asyncio
async def test_get_missing_functionality_is_404(async_client, fake_db, mocker):
    mocker.patch(
        "app.services.functionality_service.get_functionality",
        side_effect=NotFoundError("Functionality", 42),
    )

    resp = await async_client.get("/functionalities/42")

    assert resp.status_code == status.HTTP_404_NOT_FOUND
    assert resp.json() == {"detail": "Functionality '42' not found"}


@pytest.mark.asyncio
async def test_link_scenario_returns_sorted_scenarios(async_client, fake_db, mocker):
    functionality = make_functionality("Pay", id=5)
    functionality.add_scenario(make_scenario(id=902, feature_file="b.feature"))
    functionality.add_scenario(make_scenario(id=901, feature_file="a.feature", ignored=True))
    mocker.patch(
        "app.services.functionality_service.link_scenario", return_value=functionality
    )

    resp = await async_client.put("/functionalities/5/scenarios/901")

    assert resp.status_code == status.HTTP_200_OK
    body = resp.json()
    assert body["coverage_level"] == "PARTIALLY_COVERED"
    assert [s["id"] for s in body["scenarios"]] == [901, 902]


@pytest.mark.asyncio
async def test_move_above_sibling(async_client, fake_db, mocker):
    _return_rows(mocker, fake_db, _catalog())

    resp = await async_client.post(
        "/functionalities/move",
        params={"project_id": 1},
        json={"source_ids": [12], "reference_id": 11, "relative_position": "ABOVE"},
    )

    assert resp.status_code == status.HTTP_200_OK
    moved = resp.json()
    assert moved[0]["id"] == 12
    assert moved[0]["parent_id"] == 1
    assert moved[0]["order"] < 100.0
    fake_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_move_inside_functionality_is_400(async_client, fake_db, mocker):
    _return_rows(mocker, fake_db, _catalog())

    resp = await async_client.post(
        "/functionalities/move",
        params={"project_id": 1},
        json={"source_ids": [12], "reference_id": 11, "relative_position": "LAST_CHILD"},
    )

    assert resp.status_code == status.HTTP_400_BAD_REQUEST
    assert "folder" in resp.json()["detail"]
    fake_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_move_requires_sources(async_client, fake_db):
    resp = await async_client.post(
        "/functionalities/move",
        params={"project_id": 1},
        json={"source_ids": [], "reference_id": 1, "relative_position": "LAST_CHILD"},
    )

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_flat_list_in_business_key_order(async_client, fake_db, mocker):
    _return_rows(
        mocker,
        fake_db,
        [
            make_functionality("Zeta", id=31, parent_id=1),
            make_folder("Cart", id=1),
            make_functionality("Alpha", id=32, parent_id=1),
        ],
    )

    resp = await async_client.get("/functionalities/list", params={"project_id": 1})

    assert resp.status_code == status.HTTP_200_OK
    assert [f["id"] for f in resp.json()] == [1, 32, 31]


@pytest.mark.asyncio
async def test_create_in_unknown_project_is_409(async_client, fake_db, mocker):
    _return_rows(mocker, fake_db, [])
    fake_db.commit.side_effect = IntegrityError("fk violation", params=None, orig=None)

    resp = await async_client.post(
        "/functionalities", json={"project_id": 999, "name": "Checkout"}
    )

    assert resp.status_code == status.HTTP_409_CONFLICT
    assert "999" in resp.json()["detail"]
    fake_db.rollback.assert_awaited_once()
