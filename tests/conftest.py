import datetime
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ALERT_RECIPIENTS"] = ""
os.environ["ALLOW_HARD_DELETE"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import database
import main
import models
from database import Base

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(monkeypatch):
    # Sessions opened outside request dependencies use the same test engine
    monkeypatch.setattr(database, "SessionLocal", TestingSessionLocal)
    main.app.dependency_overrides[main.get_db] = override_get_db
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()


def report_payload(**overrides):
    data = {
        "title": "Pothole on Main St",
        "description": "Deep pothole in the right lane",
        "location": "Main St, Springfield",
        "latitude": 40.7128,
        "longitude": -74.0060,
        "category": "road_damage",
        "severity": "medium",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_report():
    def _make(age=None, **overrides):
        data = report_payload(**overrides)
        if age is not None:
            created = datetime.datetime.utcnow() - age
            data.setdefault("created_at", created)
            data.setdefault("updated_at", created)
        db = TestingSessionLocal()
        try:
            report = models.Report(**data)
            db.add(report)
            db.commit()
            db.refresh(report)
            return report
        finally:
            db.close()
    return _make


@pytest.fixture
def payload():
    return report_payload
