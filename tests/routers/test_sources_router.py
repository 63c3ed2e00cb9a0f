import pytest
from fastapi import status
from sqlalchemy.exc import IntegrityError

from tests.utils.factories import make_source


def _payload(**overrides):
    payload = {
        "project_id": 1,
        "code": "api",
        "name": "API",
        "letter": "A",
        "technology": "CUCUMBER",
        "vcs_url": "https://git.company.com/shop/edit/{{branch}}/features/",
        "default_branch": "develop",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_list_sources_in_business_key_order(async_client, fake_db, mocker):
    result = mocker.MagicMock()
    result.scalars.return_value.all.return_value = [
        make_source(code="web", name="Web", letter="W"),
        make_source(code="api"),
    ]
    fake_db.execute.return_value = result

    resp = await async_client.get("/sources", params={"project_id": 1})

    assert resp.status_code == status.HTTP_200_OK
    assert [s["code"] for s in resp.json()] == ["api", "web"]


@pytest.mark.asyncio
async def test_create_source(async_client, fake_db):
    async def _assign_id(obj):
        obj.id = 7

    fake_db.refresh.side_effect = _assign_id

    resp = await async_client.post("/sources", json=_payload())

    assert resp.status_code == status.HTTP_201_CREATED
    body = resp.json()
    assert body["id"] == 7
    assert body["technology"] == "CUCUMBER"
    assert body["postman_country_root_folders"] is False
    fake_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_duplicate_code_is_409(async_client, fake_db):
    fake_db.commit.side_effect = IntegrityError("duplicate code", params=None, orig=None)

    resp = await async_client.post("/sources", json=_payload())

    assert resp.status_code == status.HTTP_409_CONFLICT
    fake_db.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_country_root_folders_need_postman(async_client, fake_db):
    resp = await async_client.post(
        "/sources", json=_payload(postman_country_root_folders=True)
    )

    assert resp.status_code == status.HTTP_400_BAD_REQUEST
    fake_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_update_missing_source_is_404(async_client, fake_db):
    fake_db.get.return_value = None

    resp = await async_client.put("/sources/5", json=_payload())

    assert resp.status_code == status.HTTP_404_NOT_FOUND
