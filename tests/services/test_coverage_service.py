import pytest

from app.models.functionality import CoverageLevel
from app.services.coverage_service import (
    coverage_axis,
    coverage_axis_value_points,
    load_project_coverage,
    refresh_scenario_counters,
    summarize_coverage,
)
from tests.utils.factories import make_folder, make_functionality, make_scenario


def test_coverage_axis_lists_every_level_in_order():
    axis = coverage_axis()

    assert axis.code == "coverage"
    assert axis.name == "Coverage level"
    assert [p.id for p in axis.points] == [level.value for level in CoverageLevel]
    assert axis.points[0].name == "Covered (no ignored)"
    assert all(p.tooltip for p in axis.points)


def test_axis_value_point_is_the_coverage_level():
    functionality = make_functionality(not_automatable=True)

    assert coverage_axis_value_points(functionality) == ["NOT_AUTOMATABLE"]


def test_refresh_counts_covered_and_ignored_per_country():
    functionality = make_functionality()
    functionality.add_scenario(make_scenario(ignored=False, country_codes="us,fr"))
    functionality.add_scenario(make_scenario(ignored=False, country_codes="fr"))
    functionality.add_scenario(make_scenario(ignored=True, country_codes="be"))
    functionality.add_scenario(make_scenario(ignored=True, country_codes=None))

    refresh_scenario_counters(functionality)

    assert functionality.covered_scenarios == 2
    assert functionality.covered_country_scenarios == "fr:2,us:1"
    assert functionality.ignored_scenarios == 2
    assert functionality.ignored_country_scenarios == "be:1"


def test_refresh_without_scenarios_resets_counts():
    functionality = make_functionality(
        covered_scenarios=4, covered_country_scenarios="fr:4"
    )

    refresh_scenario_counters(functionality)

    assert functionality.covered_scenarios == 0
    assert functionality.covered_country_scenarios is None
    assert functionality.ignored_scenarios == 0
    assert functionality.ignored_country_scenarios is None


def test_refresh_leaves_folders_without_counters():
    folder = make_folder("Checkout", covered_scenarios=1)

    refresh_scenario_counters(folder)

    assert folder.covered_scenarios is None
    assert folder.ignored_scenarios is None


def test_summary_counts_every_level_and_skips_folders():
    covered = make_functionality(name="a")
    covered.add_scenario(make_scenario())
    started = make_functionality(name="b", started=True)
    not_covered = make_functionality(name="c")

    summary = summarize_coverage(7, [covered, started, not_covered, make_folder("f")])

    assert summary.project_id == 7
    assert summary.total == 3
    assert summary.levels[CoverageLevel.COVERED] == 1
    assert summary.levels[CoverageLevel.STARTED] == 1
    assert summary.levels[CoverageLevel.NOT_COVERED] == 1
    assert summary.levels[CoverageLevel.IGNORED_COVERAGE] == 0
    assert set(summary.levels) == set(CoverageLevel)


@pytest.mark.asyncio
async def test_load_project_coverage_reads_project_rows(mocker):
    ignored_only = make_functionality(name="a")
    ignored_only.add_scenario(make_scenario(ignored=True))
    result = mocker.MagicMock()
    result.scalars.return_value.all.return_value = [ignored_only]
    db = mocker.AsyncMock()
    db.execute.return_value = result

    summary = await load_project_coverage(db, 3)

    db.execute.assert_awaited_once()
    assert summary.total == 1
    assert summary.levels[CoverageLevel.IGNORED_COVERAGE] == 1
