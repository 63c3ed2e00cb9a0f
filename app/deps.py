from __future__ import annotations

from typing import Annotated, TypeAlias

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_db

DbDep: TypeAlias = Annotated[AsyncSession, Depends(get_db)]
ProjectIdQuery: TypeAlias = Annotated[int, Query(ge=1)]
