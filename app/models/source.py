from __future__ import annotations

from enum import StrEnum

from sqlalchemy import Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base, BusinessKeyMixin, TimestampMixin
from app.models.project import Project

BRANCH_PLACEHOLDER = "{{branch}}"


class Technology(StrEnum):
    """Format of the test files stored in a source."""

    CUCUMBER = "CUCUMBER"
    POSTMAN = "POSTMAN"


class Source(TimestampMixin, BusinessKeyMixin, Base):
    """Version-control location of the test artifacts of a project.

    Equality and ordering follow the ``(project_id, code)`` business key.

    Attributes:
        code: Short technical code used by CI jobs when pushing scenarios.
        name: Full name displayed in the functionality cartography.
        letter: Single recognizable character shown where space is scarce.
        technology: Cucumber ``.feature`` files or Postman ``.json`` collections.
        vcs_url: Where the files can be browsed; ``{{branch}}`` is replaced by
            the VCS branch, e.g.
            ``"https://git.company.com/project/edit/{{branch}}/src/main/resources/"``.
        default_branch: Branch used for ``{{branch}}`` when indexing coverage.
        postman_country_root_folders: Only for POSTMAN sources. When true, the
            root folders of the collections are country codes ("all",
            "fr+us", ...) on which to run the contained requests.
    """

    __tablename__ = "sources"
    __table_args__ = (UniqueConstraint("project_id", "code"),)

    _business_key_fields = ("project_id", "code")

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey(Project.id, ondelete="CASCADE"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(16))
    name: Mapped[str] = mapped_column(String(32))
    letter: Mapped[str] = mapped_column(String(1))
    technology: Mapped[Technology] = mapped_column(
        Enum(Technology, name="technology", native_enum=False, length=16)
    )
    vcs_url: Mapped[str | None] = mapped_column(String(256), nullable=True)
    default_branch: Mapped[str | None] = mapped_column(String(16), nullable=True)
    postman_country_root_folders: Mapped[bool] = mapped_column(
        default=False, server_default="false"
    )

    def vcs_url_for_branch(self, branch: str | None = None) -> str | None:
        """Return ``vcs_url`` with the branch placeholder resolved.

        Args:
            branch: Branch to substitute; ``default_branch`` when omitted.

        Returns:
            The resolved URL, or ``None`` when no URL is configured.
        """
        if self.vcs_url is None:
            return None
        return self.vcs_url.replace(
            BRANCH_PLACEHOLDER, branch or self.default_branch or ""
        )
