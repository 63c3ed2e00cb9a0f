from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base, TimestampMixin


class Project(TimestampMixin, Base):
    """Project container.

    Attributes:
        code: Short code identifier, used in URLs and by CI jobs.
        name: Human-friendly project name.
        default_at_startup: Whether the UI selects this project on first load.
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(64))
    default_at_startup: Mapped[bool] = mapped_column(
        default=False, server_default="false"
    )
