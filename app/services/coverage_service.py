"""Coverage helpers built on top of ``Functionality.coverage_level``.

This module keeps the cached scenario counters of functionalities in sync
with their linked scenarios, exposes the "coverage" cartography axis and
summarizes a project's coverage per level.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.functionality import CoverageLevel, Functionality, FunctionalityType
from app.schemas.coverage import AxisPointRead, AxisRead, CoverageSummaryRead

COVERAGE_AXIS_CODE = "coverage"
COVERAGE_AXIS_NAME = "Coverage level"

# label, tooltip
_LEVEL_DISPLAY: dict[CoverageLevel, tuple[str, str]] = {
    CoverageLevel.COVERED: (
        "Covered (no ignored)",
        "Functionalities covered by at least one scenario, none of them ignored.",
    ),
    CoverageLevel.PARTIALLY_COVERED: (
        "Partially covered (few ignored)",
        "Functionalities covered by active scenarios and by ignored ones.",
    ),
    CoverageLevel.IGNORED_COVERAGE: (
        "Ignored coverage (all ignored)",
        "Functionalities only covered by ignored scenarios.",
    ),
    CoverageLevel.STARTED: (
        "Started",
        "Functionalities without scenario, whose automation has started.",
    ),
    CoverageLevel.NOT_AUTOMATABLE: (
        "Not automatable",
        "Functionalities without scenario that cannot be automated.",
    ),
    CoverageLevel.NOT_COVERED: (
        "Not covered",
        "Functionalities without scenario, not started and automatable.",
    ),
}


def coverage_axis() -> AxisRead:
    """Return the coverage axis with one point per level, in declaration order."""

    return AxisRead(
        code=COVERAGE_AXIS_CODE,
        name=COVERAGE_AXIS_NAME,
        points=[
            AxisPointRead(
                id=level.value,
                name=_LEVEL_DISPLAY[level][0],
                tooltip=_LEVEL_DISPLAY[level][1],
            )
            for level in CoverageLevel
        ],
    )


def coverage_axis_value_points(functionality: Functionality) -> list[str]:
    return [functionality.coverage_level.value]


def _format_country_counts(counts: Counter[str]) -> str | None:
    if not counts:
        return None
    return ",".join(f"{country}:{counts[country]}" for country in sorted(counts))


def refresh_scenario_counters(functionality: Functionality) -> None:
    """Recompute the cached covered/ignored scenario counters of a functionality.

    A scenario counts once for the functionality and once for each of its
    country codes. Folders carry no counters.

    Args:
        functionality: Row whose ``scenarios`` are already loaded.

    Returns:
        None. The caller is responsible for committing the transaction.
    """

    if functionality.type == FunctionalityType.FOLDER:
        functionality.covered_scenarios = None
        functionality.covered_country_scenarios = None
        functionality.ignored_scenarios = None
        functionality.ignored_country_scenarios = None
        return

    covered = 0
    ignored = 0
    covered_countries: Counter[str] = Counter()
    ignored_countries: Counter[str] = Counter()
    for scenario in functionality.scenarios:
        countries = scenario.country_code_list()
        if scenario.ignored:
            ignored += 1
            ignored_countries.update(countries)
        else:
            covered += 1
            covered_countries.update(countries)

    functionality.covered_scenarios = covered
    functionality.covered_country_scenarios = _format_country_counts(covered_countries)
    functionality.ignored_scenarios = ignored
    functionality.ignored_country_scenarios = _format_country_counts(ignored_countries)


def summarize_coverage(
    project_id: int, functionalities: Iterable[Functionality]
) -> CoverageSummaryRead:
    """Count non-folder functionalities per coverage level.

    Every level is present in the result, with zero when unused.
    """

    levels = {level: 0 for level in CoverageLevel}
    total = 0
    for functionality in functionalities:
        if functionality.type == FunctionalityType.FOLDER:
            continue
        levels[functionality.coverage_level] += 1
        total += 1
    return CoverageSummaryRead(project_id=project_id, total=total, levels=levels)


async def load_project_coverage(
    db: AsyncSession, project_id: int
) -> CoverageSummaryRead:
    stmt: Select[tuple[Functionality]] = (
        select(Functionality)
        .where(Functionality.project_id == project_id)
        .options(selectinload(Functionality.scenarios))
    )
    rows = (await db.execute(stmt)).scalars().all()
    return summarize_coverage(project_id, rows)
