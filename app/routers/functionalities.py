from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Path, status

from app.deps import DbDep, ProjectIdQuery
from app.models.functionality import Functionality
from app.schemas.coverage import AxisRead, CoverageSummaryRead
from app.schemas.functionality import (
    FunctionalityCreate,
    FunctionalityRead,
    FunctionalityTreeNode,
    FunctionalityUpdate,
    FunctionalityWithScenariosRead,
    MoveFunctionalities,
    ScenarioCompactRead,
)
from app.services import coverage_service, functionality_service


router = APIRouter()

FunctionalityIdPath = Annotated[int, Path(ge=1)]


def _with_scenarios(functionality: Functionality) -> FunctionalityWithScenariosRead:
    read = FunctionalityWithScenariosRead.model_validate(functionality)
    read.scenarios = [
        ScenarioCompactRead.model_validate(s) for s in functionality.sorted_scenarios()
    ]
    return read


@router.get("", response_model=list[FunctionalityTreeNode])
async def list_functionality_tree(
    db: DbDep, project_id: ProjectIdQuery
) -> list[FunctionalityTreeNode]:
    """Return the functionality cartography of a project as a tree."""

    return await functionality_service.list_functionality_tree(db, project_id)


@router.get("/list", response_model=list[FunctionalityRead])
async def list_functionalities(
    db: DbDep, project_id: ProjectIdQuery
) -> list[Functionality]:
    """Return a project's functionalities and folders as a flat list.

    Rows are ordered by project, then parent (root first), then name.
    """

    return await functionality_service.list_functionalities(db, project_id)


@router.get("/coverage", response_model=CoverageSummaryRead)
async def get_coverage_summary(
    db: DbDep, project_id: ProjectIdQuery
) -> CoverageSummaryRead:
    return await coverage_service.load_project_coverage(db, project_id)


@router.get("/coverage/axis", response_model=AxisRead)
async def get_coverage_axis() -> AxisRead:
    return coverage_service.coverage_axis()


@router.post("/move", response_model=list[FunctionalityRead])
async def move_functionalities(
    db: DbDep, project_id: ProjectIdQuery, payload: MoveFunctionalities
) -> list[FunctionalityRead]:
    """Move functionalities above, below or inside a reference.

    Returns the moved functionalities with their new parent and order.
    """

    return await functionality_service.move_functionalities(db, project_id, payload)


@router.post(
    "", response_model=FunctionalityRead, status_code=status.HTTP_201_CREATED
)
async def create_functionality(
    db: DbDep, payload: FunctionalityCreate
) -> Functionality:
    return await functionality_service.create_functionality(db, payload)


@router.get("/{functionality_id}", response_model=FunctionalityWithScenariosRead)
async def get_functionality(
    db: DbDep, functionality_id: FunctionalityIdPath
) -> FunctionalityWithScenariosRead:
    functionality = await functionality_service.get_functionality(db, functionality_id)
    return _with_scenarios(functionality)


@router.put("/{functionality_id}", response_model=FunctionalityRead)
async def update_functionality(
    db: DbDep, payload: FunctionalityUpdate, functionality_id: FunctionalityIdPath
) -> Functionality:
    return await functionality_service.update_functionality(
        db, functionality_id, payload
    )


@router.delete("/{functionality_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_functionality(db: DbDep, functionality_id: FunctionalityIdPath) -> None:
    """Delete a functionality, or a folder and all of its descendants."""

    await functionality_service.delete_functionality(db, functionality_id)
    return None


@router.put(
    "/{functionality_id}/scenarios/{scenario_id}",
    response_model=FunctionalityWithScenariosRead,
)
async def link_scenario(
    db: DbDep,
    functionality_id: FunctionalityIdPath,
    scenario_id: Annotated[int, Path(ge=1)],
) -> FunctionalityWithScenariosRead:
    functionality = await functionality_service.link_scenario(
        db, functionality_id, scenario_id
    )
    return _with_scenarios(functionality)


@router.delete(
    "/{functionality_id}/scenarios/{scenario_id}",
    response_model=FunctionalityWithScenariosRead,
)
async def unlink_scenario(
    db: DbDep,
    functionality_id: FunctionalityIdPath,
    scenario_id: Annotated[int, Path(ge=1)],
) -> FunctionalityWithScenariosRead:
    functionality = await functionality_service.unlink_scenario(
        db, functionality_id, scenario_id
    )
    return _with_scenarios(functionality)
