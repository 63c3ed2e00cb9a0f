from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base, BusinessKeyMixin, TimestampMixin
from app.models.source import Source


class Scenario(TimestampMixin, BusinessKeyMixin, Base):
    """Automated test case indexed from a source.

    A scenario covers the functionalities whose ids it declares. Ignored
    scenarios still count for coverage, but lower its level.
    """

    __tablename__ = "scenarios"

    _business_key_fields = ("source_id", "feature_file", "name", "line")

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    source_id: Mapped[int] = mapped_column(
        ForeignKey(Source.id, ondelete="CASCADE"), nullable=False, index=True
    )
    source: Mapped[Source] = relationship(Source)
    feature_file: Mapped[str | None] = mapped_column(String(256), nullable=True)
    feature_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    name: Mapped[str] = mapped_column(String(512))
    line: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Comma separated, e.g. "fr,us"
    country_codes: Mapped[str | None] = mapped_column(String(128), nullable=True)
    severity: Mapped[str | None] = mapped_column(String(32), nullable=True)
    ignored: Mapped[bool] = mapped_column(default=False, server_default="false")
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    def country_code_list(self) -> list[str]:
        if not self.country_codes:
            return []
        return [code.strip() for code in self.country_codes.split(",") if code.strip()]
