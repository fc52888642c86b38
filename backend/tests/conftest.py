import os
from datetime import date

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_MODE"] = "demo"
os.environ["RESOURCIO_DATA_BACKEND"] = "database"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from resourcio.database import Base, get_db
from resourcio.models.allocation import ResourceAllocation
from resourcio.models.project import Project
from resourcio.models.resource import Resource

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _get_test_db():
        s = TestingSession()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_test_db
    previous_repo = app.state.repository
    app.state.repository = None
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        app.state.repository = previous_repo


def as_user(roles="admin", resource_id=None, user_id=1) -> dict:
    headers = {"X-User-Id": str(user_id), "X-User-Roles": roles}
    if resource_id is not None:
        headers["X-Resource-Id"] = str(resource_id)
    return headers


ADMIN = as_user("admin")


def add_resource(db, name="Anna de Vries", email=None, **kw) -> Resource:
    kw.setdefault("weekly_capacity", 40)
    r = Resource(name=name, email=email or f"{name.split()[0].lower()}@resourcio.nl", **kw)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


def add_project(db, name="Core Banking Migration", **kw) -> Project:
    kw.setdefault("start_date", date(2025, 1, 6))
    kw.setdefault("end_date", date(2025, 12, 19))
    kw.setdefault("status", "active")
    p = Project(name=name, **kw)
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def add_allocation(db, project, resource, hours=20, **kw) -> ResourceAllocation:
    kw.setdefault("start_date", project.start_date)
    kw.setdefault("end_date", project.end_date)
    kw.setdefault("status", "active")
    kw.setdefault("weekly_allocations", {})
    a = ResourceAllocation(project_id=project.id, resource_id=resource.id, allocated_hours=hours, **kw)
    db.add(a)
    db.commit()
    db.refresh(a)
    return a
