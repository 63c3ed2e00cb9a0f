import pytest
from fastapi import status
from uuid import uuid4

from app.models.project import Project
from db.session import get_db
from sqlalchemy.exc import IntegrityError


class _FakeResult:
    def __init__(self, rows):
        self._rows = list(rows)

    def scalars(self):
        class _Scalars:
            def __init__(self, rows):
                self._rows = list(rows)

            def all(self):
                return list(self._rows)

        return _Scalars(self._rows)


class _FakeSession:
    def __init__(self):
        self._projects: dict[int, Project] = {}
        self._pending: list[Project] = []
        self._next_id: int = 1

    async def execute(self, _stmt):  # type: ignore[no-untyped-def]
        # list_projects orders by code; we mimic deterministic ordering here
        rows = sorted(self._projects.values(), key=lambda p: p.code)
        return _FakeResult(rows)

    def add(self, obj: Project) -> None:
        self._pending.append(obj)

    async def commit(self) -> None:
        # Apply pending changes and enforce unique project code
        candidates = list(self._pending) + list(self._projects.values())
        for obj in candidates:
            for existing in self._projects.values():
                if existing is not obj and existing.code == obj.code:
                    self._pending.clear()
                    raise IntegrityError("duplicate code", params=None, orig=None)
        for obj in self._pending:
            obj.id = self._next_id
            self._next_id += 1
            self._projects[obj.id] = obj
        self._pending.clear()

    async def rollback(self) -> None:
        self._pending.clear()

    async def refresh(self, _obj: Project) -> None:
        # Objects are already live Python instances; nothing to do.
        return None

    async def get(self, model, obj_id: int):  # type: ignore[no-untyped-def]
        if model is Project:
            return self._projects.get(obj_id)
        return None

    async def delete(self, obj: Project) -> None:
        self._projects.pop(obj.id, None)


@pytest.fixture()
def fake_session(app):
    session = _FakeSession()

    async def _override_get_db():
        yield session

    app.dependency_overrides[get_db] = _override_get_db
    return session


@pytest.mark.asyncio
async def test_list_projects_when_empty(async_client, fake_session):
    resp = await async_client.get("/projects")

    assert resp.status_code == status.HTTP_200_OK
    assert resp.json() == []


@pytest.mark.asyncio
async def test_create_update_delete_project_flow(async_client, fake_session):
    # Use a unique code per test run to avoid conflicts within the fake session
    code = f"p-{uuid4().hex[:8]}"

    # Create
    payload = {"code": code, "name": "Web shop", "default_at_startup": False}
    resp_create = await async_client.post("/projects", json=payload)
    assert resp_create.status_code == status.HTTP_201_CREATED
    created = resp_create.json()
    assert created["code"] == code
    assert created["default_at_startup"] is False
    pid = created["id"]

    # List
    resp_list = await async_client.get("/projects")
    assert resp_list.status_code == status.HTTP_200_OK
    assert any(p["id"] == pid for p in resp_list.json())

    # Duplicate create -> 409
    resp_dup = await async_client.post("/projects", json=payload)
    assert resp_dup.status_code == status.HTTP_409_CONFLICT

    # Update
    upd = {"code": code, "name": "Web shop (EU)", "default_at_startup": True}
    resp_upd = await async_client.put(f"/projects/{pid}", json=upd)
    assert resp_upd.status_code == status.HTTP_200_OK
    body = resp_upd.json()
    assert body["name"] == "Web shop (EU)"
    assert body["default_at_startup"] is True

    # Update missing -> 404
    resp_upd_404 = await async_client.put("/projects/999999", json=upd)
    assert resp_upd_404.status_code == status.HTTP_404_NOT_FOUND

    # Delete
    resp_del = await async_client.delete(f"/projects/{pid}")
    assert resp_del.status_code == status.HTTP_204_NO_CONTENT

    # Delete missing -> 404
    resp_del_404 = await async_client.delete(f"/projects/{pid}")
    assert resp_del_404.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_create_refuses_malformed_code(async_client, fake_session):
    resp = await async_client.post(
        "/projects", json={"code": "Not A Code", "name": "Project"}
    )

    assert resp.status_code == 422
