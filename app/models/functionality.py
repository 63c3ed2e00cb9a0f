from __future__ import annotations

from enum import StrEnum

from sqlalchemy import Column, Enum, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.models import Base, BusinessKeyMixin, TimestampMixin
from app.models.project import Project
from app.models.scenario import Scenario
from app.models.team import Team

COUNTRY_CODES_SEPARATOR = ","


class FunctionalityType(StrEnum):
    FOLDER = "FOLDER"
    FUNCTIONALITY = "FUNCTIONALITY"


class FunctionalitySeverity(StrEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class CoverageLevel(StrEnum):
    """How well a functionality is covered by automated scenarios.

    Declaration order is the display order of the coverage axis.
    """

    COVERED = "COVERED"
    PARTIALLY_COVERED = "PARTIALLY_COVERED"
    IGNORED_COVERAGE = "IGNORED_COVERAGE"
    STARTED = "STARTED"
    NOT_AUTOMATABLE = "NOT_AUTOMATABLE"
    NOT_COVERED = "NOT_COVERED"


functionality_coverage = Table(
    "functionality_coverage",
    Base.metadata,
    Column(
        "functionality_id",
        ForeignKey("functionalities.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "scenario_id", ForeignKey("scenarios.id", ondelete="CASCADE"), primary_key=True
    ),
)


class Functionality(TimestampMixin, BusinessKeyMixin, Base):
    """Node of a project's functionality cartography: a folder or a requirement.

    Equality and ordering follow the ``(project_id, parent_id, name)`` business
    key; ``parent_id`` is ``None`` for root nodes.

    The coverage level is derived from the linked scenarios and the two manual
    flags. It is memoized per instance: reads are cached until the next
    :meth:`add_scenario`, :meth:`remove_scenario`, or assignment of
    ``started`` / ``not_automatable``. Mutating ``scenarios`` directly skips
    the invalidation and leaves a stale level.

    Attributes:
        order: Sibling ordering key within the parent folder.
        country_codes: Countries where the functionality is supported, joined
            with :data:`COUNTRY_CODES_SEPARATOR` (e.g. ``"fr,us"``).
        created: Free text telling when the functionality was introduced.
        covered_scenarios: Cached count of linked non-ignored scenarios.
        covered_country_scenarios: Same count per country (``"fr:2,us:1"``).
        ignored_scenarios: Cached count of linked ignored scenarios.
        ignored_country_scenarios: Same count per country.
    """

    __tablename__ = "functionalities"

    _business_key_fields = ("project_id", "parent_id", "name")

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey(Project.id, ondelete="CASCADE"), nullable=False, index=True
    )
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("functionalities.id", ondelete="CASCADE"), nullable=True, index=True
    )
    order: Mapped[float] = mapped_column("order", Float, default=0.0)
    type: Mapped[FunctionalityType] = mapped_column(
        Enum(FunctionalityType, name="functionality_type", native_enum=False, length=13)
    )
    name: Mapped[str] = mapped_column(String(512))
    country_codes: Mapped[str | None] = mapped_column(String(128), nullable=True)
    team_id: Mapped[int | None] = mapped_column(
        ForeignKey(Team.id, ondelete="SET NULL"), nullable=True
    )
    severity: Mapped[FunctionalitySeverity | None] = mapped_column(
        Enum(
            FunctionalitySeverity,
            name="functionality_severity",
            native_enum=False,
            length=32,
        ),
        nullable=True,
    )
    created: Mapped[str | None] = mapped_column(String(10), nullable=True)
    started: Mapped[bool | None] = mapped_column(nullable=True)
    not_automatable: Mapped[bool | None] = mapped_column(nullable=True)
    covered_scenarios: Mapped[int | None] = mapped_column(Integer, nullable=True)
    covered_country_scenarios: Mapped[str | None] = mapped_column(
        String(512), nullable=True
    )
    ignored_scenarios: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ignored_country_scenarios: Mapped[str | None] = mapped_column(
        String(512), nullable=True
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    scenarios: Mapped[set[Scenario]] = relationship(
        Scenario, secondary=functionality_coverage
    )

    # Coverage memo: either stale, or cached with the last computed level.
    # Plain class defaults so that both constructed and loaded rows start stale.
    _coverage_stale = True
    _coverage_level = None

    def add_scenario(self, scenario: Scenario) -> None:
        self.scenarios.add(scenario)
        self._invalidate_coverage_level()

    def remove_scenario(self, scenario: Scenario) -> None:
        self.scenarios.discard(scenario)
        self._invalidate_coverage_level()

    @validates("started", "not_automatable")
    def _invalidate_on_flag_change(self, _key: str, value: bool | None) -> bool | None:
        self._invalidate_coverage_level()
        return value

    def _invalidate_coverage_level(self) -> None:
        self._coverage_stale = True
        self._coverage_level = None

    @property
    def coverage_level(self) -> CoverageLevel:
        if self._coverage_stale:
            self._coverage_level = self._compute_coverage_level()
            self._coverage_stale = False
        return self._coverage_level  # type: ignore[return-value]

    def _compute_coverage_level(self) -> CoverageLevel:
        if self.scenarios:
            if not any(s.ignored for s in self.scenarios):
                return CoverageLevel.COVERED
            if any(not s.ignored for s in self.scenarios):
                return CoverageLevel.PARTIALLY_COVERED
            return CoverageLevel.IGNORED_COVERAGE
        if self.started:
            return CoverageLevel.STARTED
        if self.not_automatable:
            return CoverageLevel.NOT_AUTOMATABLE
        return CoverageLevel.NOT_COVERED

    @property
    def is_folder(self) -> bool:
        return self.type == FunctionalityType.FOLDER

    def country_code_list(self) -> list[str]:
        if not self.country_codes:
            return []
        return [
            code.strip()
            for code in self.country_codes.split(COUNTRY_CODES_SEPARATOR)
            if code.strip()
        ]

    def sorted_scenarios(self) -> list[Scenario]:
        return sorted(self.scenarios)
