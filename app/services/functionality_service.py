from __future__ import annotations

from typing import Iterable, Sequence

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    commit_or_conflict,
)
from app.core.logging import logger
from app.models.functionality import Functionality, FunctionalityType
from app.models.scenario import Scenario
from app.schemas.functionality import (
    FunctionalityBase,
    FunctionalityCreate,
    FunctionalityOrderRead,
    FunctionalityPosition,
    FunctionalityRead,
    FunctionalityTreeNode,
    FunctionalityUpdate,
    MoveFunctionalities,
)
from app.services.coverage_service import refresh_scenario_counters

# Gap between the orders of consecutive siblings when appending.
ORDER_STEP = 1024.0

# Fields only meaningful for functionalities, never for folders.
_FOLDER_FORBIDDEN_FIELDS = (
    "country_codes",
    "team_id",
    "severity",
    "created",
    "started",
    "not_automatable",
)


def _order_of(functionality: Functionality) -> float:
    return functionality.order if functionality.order is not None else 0.0


def _sibling_sort_key(functionality: Functionality) -> tuple:
    return (_order_of(functionality), functionality.sort_key())


def build_tree(functionalities: Iterable[Functionality]) -> list[FunctionalityTreeNode]:
    """Nest functionalities under their parent folders.

    Siblings are sorted by ``order``, ties broken by business key. Rows whose
    parent is not part of ``functionalities`` are returned as roots.

    Args:
        functionalities: Rows of a single project.

    Returns:
        Root nodes with their descendants.
    """

    rows = sorted(functionalities, key=_sibling_sort_key)
    nodes = {f.id: FunctionalityTreeNode.model_validate(f) for f in rows}
    roots: list[FunctionalityTreeNode] = []
    for functionality in rows:
        node = nodes[functionality.id]
        parent = nodes.get(functionality.parent_id) if functionality.parent_id else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
    return roots


def _check_fields(kind: FunctionalityType, payload: FunctionalityBase) -> None:
    if not payload.name.strip():
        raise BadRequestError("The name is required.")
    if kind == FunctionalityType.FOLDER:
        set_fields = [
            name for name in _FOLDER_FORBIDDEN_FIELDS if getattr(payload, name) is not None
        ]
        if set_fields:
            raise BadRequestError(
                f"A folder cannot have: {', '.join(sorted(set_fields))}."
            )


def _check_unique_name(
    siblings: Iterable[Functionality], name: str, exclude_id: int | None = None
) -> None:
    for sibling in siblings:
        if sibling.id != exclude_id and sibling.name == name:
            raise ConflictError(
                f"A functionality or folder named '{name}' already exists here."
            )


async def _load_project_functionalities(
    db: AsyncSession, project_id: int
) -> Sequence[Functionality]:
    stmt: Select[tuple[Functionality]] = (
        select(Functionality)
        .where(Functionality.project_id == project_id)
        .options(selectinload(Functionality.scenarios))
    )
    return (await db.execute(stmt)).scalars().all()


async def get_functionality(db: AsyncSession, functionality_id: int) -> Functionality:
    stmt: Select[tuple[Functionality]] = (
        select(Functionality)
        .where(Functionality.id == functionality_id)
        .options(selectinload(Functionality.scenarios))
    )
    functionality = (await db.execute(stmt)).scalar_one_or_none()
    if functionality is None:
        raise NotFoundError("Functionality", functionality_id)
    return functionality


async def list_functionalities(
    db: AsyncSession, project_id: int
) -> list[Functionality]:
    """Return a project's functionalities in business-key order."""

    return sorted(await _load_project_functionalities(db, project_id))


async def list_functionality_tree(
    db: AsyncSession, project_id: int
) -> list[FunctionalityTreeNode]:
    return build_tree(await _load_project_functionalities(db, project_id))


async def create_functionality(
    db: AsyncSession, payload: FunctionalityCreate
) -> Functionality:
    """Create a functionality or folder as the last child of its parent.

    Args:
        db: Async SQLAlchemy session.
        payload: New row data; ``parent_id`` must reference a folder of the
            same project, or be ``None`` for the root.

    Returns:
        The persisted Functionality instance.
    """

    _check_fields(payload.type, payload)
    rows = await _load_project_functionalities(db, payload.project_id)
    if payload.parent_id is not None:
        parent = next((f for f in rows if f.id == payload.parent_id), None)
        if parent is None:
            raise NotFoundError("Folder", payload.parent_id)
        if not parent.is_folder:
            raise BadRequestError("The parent of a functionality must be a folder.")

    siblings = [f for f in rows if f.parent_id == payload.parent_id]
    _check_unique_name(siblings, payload.name)
    last_order = max((_order_of(f) for f in siblings), default=0.0)

    functionality = Functionality(
        **payload.model_dump(),
        order=last_order + ORDER_STEP,
    )
    refresh_scenario_counters(functionality)
    db.add(functionality)
    await commit_or_conflict(
        db, f"Project {payload.project_id} or team {payload.team_id} does not exist."
    )
    # Async sessions cannot lazy load: reload the collection with the row.
    await db.refresh(functionality, attribute_names=["created_at", "updated_at", "scenarios"])
    logger.info(
        "Created %s %s '%s' in project %s",
        functionality.type.lower(),
        functionality.id,
        functionality.name,
        functionality.project_id,
    )
    return functionality


async def update_functionality(
    db: AsyncSession, functionality_id: int, payload: FunctionalityUpdate
) -> Functionality:
    functionality = await get_functionality(db, functionality_id)
    _check_fields(functionality.type, payload)

    if payload.name != functionality.name:
        rows = await _load_project_functionalities(db, functionality.project_id)
        siblings = [f for f in rows if f.parent_id == functionality.parent_id]
        _check_unique_name(siblings, payload.name, exclude_id=functionality.id)

    for field, value in payload.model_dump().items():
        setattr(functionality, field, value)
    await commit_or_conflict(db, f"Team {payload.team_id} does not exist.")
    return functionality


async def delete_functionality(db: AsyncSession, functionality_id: int) -> None:
    """Delete a functionality, or a folder with all its descendants.

    Descendants and coverage links are removed by DB-level cascade.
    """

    functionality = await db.get(Functionality, functionality_id)
    if functionality is None:
        raise NotFoundError("Functionality", functionality_id)
    await db.delete(functionality)
    await db.commit()


async def _get_scenario_for(
    db: AsyncSession, functionality: Functionality, scenario_id: int
) -> Scenario:
    scenario = await db.get(
        Scenario, scenario_id, options=[selectinload(Scenario.source)]
    )
    if scenario is None or scenario.source.project_id != functionality.project_id:
        raise NotFoundError("Scenario", scenario_id)
    return scenario


async def link_scenario(
    db: AsyncSession, functionality_id: int, scenario_id: int
) -> Functionality:
    """Declare that a scenario covers a functionality and refresh its counters."""

    functionality = await get_functionality(db, functionality_id)
    if functionality.is_folder:
        raise BadRequestError("Folders cannot be covered by scenarios.")
    scenario = await _get_scenario_for(db, functionality, scenario_id)
    functionality.add_scenario(scenario)
    refresh_scenario_counters(functionality)
    await db.commit()
    return functionality


async def unlink_scenario(
    db: AsyncSession, functionality_id: int, scenario_id: int
) -> Functionality:
    functionality = await get_functionality(db, functionality_id)
    scenario = await _get_scenario_for(db, functionality, scenario_id)
    functionality.remove_scenario(scenario)
    refresh_scenario_counters(functionality)
    await db.commit()
    return functionality


def _spread(low: float, high: float, count: int) -> list[float]:
    step = (high - low) / (count + 1)
    return [low + step * (i + 1) for i in range(count)]


def plan_move(
    functionalities: Sequence[Functionality], request: MoveFunctionalities
) -> list[FunctionalityOrderRead]:
    """Compute the new parent and order of moved functionalities.

    Moved rows keep the order of ``request.source_ids`` and are placed
    between the neighbours of the destination: above the reference, below
    it, or after the last child of the reference folder (or of the root when
    ``reference_id`` is ``None``).

    Args:
        functionalities: All functionalities of the project.
        request: The move request.

    Returns:
        The new ``parent_id`` and ``order`` of each moved row, in request order.
    """

    by_id = {f.id: f for f in functionalities}
    moved: list[Functionality] = []
    for source_id in dict.fromkeys(request.source_ids):
        source = by_id.get(source_id)
        if source is None:
            raise NotFoundError("Functionality", source_id)
        moved.append(source)
    moved_ids = {f.id for f in moved}

    position = request.relative_position
    reference: Functionality | None = None
    if request.reference_id is None:
        if position != FunctionalityPosition.LAST_CHILD:
            raise BadRequestError(
                "Functionalities can only be moved inside the root folder, not around it."
            )
    else:
        reference = by_id.get(request.reference_id)
        if reference is None:
            raise NotFoundError("Functionality", request.reference_id)
        if reference.id in moved_ids:
            raise BadRequestError("A functionality cannot be moved relative to itself.")

    if position == FunctionalityPosition.LAST_CHILD:
        if reference is not None and not reference.is_folder:
            raise BadRequestError("Functionalities can only be moved inside a folder.")
        new_parent_id = reference.id if reference is not None else None
    else:
        new_parent_id = reference.parent_id  # type: ignore[union-attr]

    ancestor_id = new_parent_id
    while ancestor_id is not None:
        if ancestor_id in moved_ids:
            raise BadRequestError(
                "A folder cannot be moved into itself or one of its descendants."
            )
        ancestor = by_id.get(ancestor_id)
        ancestor_id = ancestor.parent_id if ancestor is not None else None

    siblings = sorted(
        (f for f in functionalities if f.parent_id == new_parent_id and f.id not in moved_ids),
        key=_sibling_sort_key,
    )
    taken_names = {f.name for f in siblings}
    for source in moved:
        if source.name in taken_names:
            raise ConflictError(
                f"A functionality or folder named '{source.name}' already exists at destination."
            )
        taken_names.add(source.name)

    count = len(moved)
    if position == FunctionalityPosition.LAST_CHILD:
        last = _order_of(siblings[-1]) if siblings else 0.0
        orders = [last + ORDER_STEP * (i + 1) for i in range(count)]
    else:
        index = next(i for i, f in enumerate(siblings) if f is reference)
        if position == FunctionalityPosition.ABOVE:
            high = _order_of(siblings[index])
            low = _order_of(siblings[index - 1]) if index > 0 else high - ORDER_STEP
        else:
            low = _order_of(siblings[index])
            high = (
                _order_of(siblings[index + 1])
                if index + 1 < len(siblings)
                else low + ORDER_STEP
            )
        orders = _spread(low, high, count)

    return [
        FunctionalityOrderRead(id=f.id, parent_id=new_parent_id, order=order)
        for f, order in zip(moved, orders)
    ]


async def move_functionalities(
    db: AsyncSession, project_id: int, request: MoveFunctionalities
) -> list[FunctionalityRead]:
    rows = await _load_project_functionalities(db, project_id)
    plan = plan_move(rows, request)
    by_id = {f.id: f for f in rows}
    for item in plan:
        functionality = by_id[item.id]
        functionality.parent_id = item.parent_id
        functionality.order = item.order
    await db.commit()
    logger.info(
        "Moved functionalities %s %s %s in project %d",
        [item.id for item in plan],
        request.relative_position.value,
        request.reference_id if request.reference_id is not None else "root",
        project_id,
    )
    return [FunctionalityRead.model_validate(by_id[item.id]) for item in plan]
