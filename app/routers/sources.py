from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status
from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError

from app.deps import DbDep, ProjectIdQuery
from app.models.source import Source, Technology
from app.schemas.source import SourceCreate, SourceRead, SourceUpdate


router = APIRouter()


def _check_technology_options(payload: SourceCreate | SourceUpdate) -> None:
    if payload.postman_country_root_folders and payload.technology != Technology.POSTMAN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Country root folders are only supported by POSTMAN sources.",
        )


@router.get("", response_model=list[SourceRead])
async def list_sources(db: DbDep, project_id: ProjectIdQuery) -> list[Source]:
    """Return the sources of a project in business-key order."""

    stmt: Select[tuple[Source]] = select(Source).where(Source.project_id == project_id)
    return sorted((await db.execute(stmt)).scalars().all())


@router.post("", response_model=SourceRead, status_code=status.HTTP_201_CREATED)
async def create_source(db: DbDep, payload: SourceCreate) -> Source:
    """Create a source; 409 when the project already has a source with that code."""

    _check_technology_options(payload)
    source = Source(**payload.model_dump())
    db.add(source)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT)
    await db.refresh(source)
    return source


@router.put("/{source_id}", response_model=SourceRead)
async def update_source(
    db: DbDep, payload: SourceUpdate, source_id: Annotated[int, Path(ge=1)]
) -> Source:
    source = await db.get(Source, source_id)
    if source is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

    _check_technology_options(payload)
    for field, value in payload.model_dump().items():
        setattr(source, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT)
    await db.refresh(source)
    return source


@router.delete("/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_source(db: DbDep, source_id: Annotated[int, Path(ge=1)]) -> None:
    source = await db.get(Source, source_id)
    if source is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    await db.delete(source)
    await db.commit()
    return None
