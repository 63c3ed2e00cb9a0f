from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, SettingValidationError
from app.core.logging import logger
from app.models.setting import Setting
from app.schemas.setting import SettingDefinition, SettingGroup, SettingType
from app.services import settings_catalog

_BOOLEAN_VALUES = {"true", "false"}


async def load_project_values(db: AsyncSession, project_id: int) -> dict[str, str | None]:
    stmt: Select[tuple[Setting]] = select(Setting).where(Setting.project_id == project_id)
    rows = (await db.execute(stmt)).scalars().all()
    return {row.code: row.value for row in rows}


def populate_values(
    groups: list[SettingGroup], values: dict[str, str | None]
) -> list[SettingGroup]:
    """Copy stored values into the definitions, never exposing passwords."""

    for group in groups:
        for definition in group.settings:
            if definition.type == SettingType.PASSWORD:
                definition.value = None
            else:
                definition.value = values.get(definition.code)
    return groups


async def get_project_settings(db: AsyncSession, project_id: int) -> list[SettingGroup]:
    values = await load_project_values(db, project_id)
    return populate_values(settings_catalog.get_definitions(values), values)


def validate_value(definition: SettingDefinition, value: str | None) -> None:
    """Check a value against its definition.

    Raises:
        SettingValidationError: With a message suitable for the settings page.
    """

    if not value:
        if definition.required:
            raise SettingValidationError(
                definition.code, f'The setting "{definition.name}" is required.'
            )
        return

    if definition.type == SettingType.INT:
        try:
            int(value)
        except ValueError:
            raise SettingValidationError(
                definition.code, f'The setting "{definition.name}" must be a whole number.'
            )
    elif definition.type == SettingType.BOOLEAN:
        if value.lower() not in _BOOLEAN_VALUES:
            raise SettingValidationError(
                definition.code, f'The setting "{definition.name}" must be true or false.'
            )
    elif definition.type == SettingType.SELECT:
        if value not in {option.value for option in definition.options}:
            raise SettingValidationError(
                definition.code, f'"{value}" is not an option of "{definition.name}".'
            )

    error = settings_catalog.check_validation(definition, value)
    if error is not None:
        raise SettingValidationError(definition.code, error)


async def update_setting(
    db: AsyncSession, project_id: int, code: str, value: str | None
) -> None:
    """Validate and store the value of one setting of a project.

    Args:
        db: Async SQLAlchemy session.
        project_id: Project owning the setting.
        code: Setting code from the catalog.
        value: New value; empty or ``None`` clears optional settings.

    Returns:
        None. The transaction is committed.
    """

    values = await load_project_values(db, project_id)
    definition = settings_catalog.find_definition(
        settings_catalog.get_definitions(values), code
    )
    if definition is None:
        raise NotFoundError("Setting", code)
    validate_value(definition, value)

    stmt: Select[tuple[Setting]] = select(Setting).where(
        Setting.project_id == project_id, Setting.code == code
    )
    row = (await db.execute(stmt)).scalar_one_or_none()
    if row is None:
        db.add(Setting(project_id=project_id, code=code, value=value))
    else:
        row.value = value
    await db.commit()

    shown = "****" if definition.type == SettingType.PASSWORD else value
    logger.info("Project %d setting %s set to %r", project_id, code, shown)
