from __future__ import annotations

from enum import StrEnum

from sqlalchemy import Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base, TimestampMixin
from app.models.project import Project
from app.models.team import Team


class ProblemStatus(StrEnum):
    OPEN = "OPEN"
    REAPPEARED = "REAPPEARED"
    CLOSED = "CLOSED"


class Problem(TimestampMixin, Base):
    """Recurring failure of scenarios, optionally linked to a tracker defect.

    Attributes:
        defect_id: Identifier of the defect in the configured defect tracker.
        pattern: Error pattern used to associate failing scenarios.
        blamed_team_id: Team held responsible for fixing the problem.
    """

    __tablename__ = "problems"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey(Project.id, ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(256))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ProblemStatus] = mapped_column(
        Enum(ProblemStatus, name="problem_status", native_enum=False, length=16),
        default=ProblemStatus.OPEN,
    )
    blamed_team_id: Mapped[int | None] = mapped_column(
        ForeignKey(Team.id, ondelete="SET NULL"), nullable=True, index=True
    )
    defect_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    pattern: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
