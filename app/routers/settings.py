from __future__ import annotations

from fastapi import APIRouter, status

from app.deps import DbDep, ProjectIdQuery
from app.schemas.setting import SettingGroup, SettingValueUpdate
from app.services import settings_service


router = APIRouter()


@router.get("", response_model=list[SettingGroup])
async def get_settings_tree(db: DbDep, project_id: ProjectIdQuery) -> list[SettingGroup]:
    """Return the settings definitions of a project, with their values.

    Password values are never returned.
    """

    return await settings_service.get_project_settings(db, project_id)


@router.put("/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def update_setting(
    db: DbDep, code: str, project_id: ProjectIdQuery, payload: SettingValueUpdate
) -> None:
    """Store the value of a setting; 400 when the definition refuses it."""

    await settings_service.update_setting(db, project_id, code, payload.value)
    return None
