import pytest
from fastapi import status

from app.core.errors import SettingValidationError
from app.services import settings_catalog


@pytest.fixture(autouse=True)
def fixed_executions_folder(monkeypatch):
    monkeypatch.setattr(
        settings_catalog, "default_executions_folder", lambda: "/data/executions/"
    )


@pytest.mark.asyncio
async def test_settings_tree_hides_passwords(async_client, fake_db, mocker):
    mocker.patch(
        "app.services.settings_service.load_project_values",
        return_value={"defect.indexer": "rtc", "defect.rtc.password": "secret"},
    )

    resp = await async_client.get("/settings", params={"project_id": 2})

    assert resp.status_code == status.HTTP_200_OK
    groups = resp.json()
    assert [g["name"] for g in groups] == ["Execution Indexing", "Email Reports", "Defects"]
    defects = {s["code"]: s for s in groups[2]["settings"]}
    assert defects["defect.indexer"]["value"] == "rtc"
    assert defects["defect.rtc.password"]["value"] is None
    assert defects["defect.rtc.rootUrl"]["validation"]["kind"] == "predicate"


@pytest.mark.asyncio
async def test_update_setting_returns_no_content(async_client, fake_db, mocker):
    update = mocker.patch("app.services.settings_service.update_setting")

    resp = await async_client.put(
        "/settings/email.from", params={"project_id": 2}, json={"value": "ara@company.com"}
    )

    assert resp.status_code == status.HTTP_204_NO_CONTENT
    update.assert_awaited_once_with(fake_db, 2, "email.from", "ara@company.com")


@pytest.mark.asyncio
async def test_refused_value_is_400_with_message(async_client, fake_db, mocker):
    mocker.patch(
        "app.services.settings_service.update_setting",
        side_effect=SettingValidationError("email.from", 'The setting "From" is required.'),
    )

    resp = await async_client.put(
        "/settings/email.from", params={"project_id": 2}, json={"value": ""}
    )

    assert resp.status_code == status.HTTP_400_BAD_REQUEST
    assert resp.json() == {"detail": 'The setting "From" is required.'}
