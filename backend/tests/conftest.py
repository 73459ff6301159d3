"""Shared fixtures: a file-backed SQLite store, a fake text generator and an API client."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from officer_records.db import Base, get_store
from officer_records.llm_client import get_text_client
from officer_records.main import app
from officer_records.store import RecordStore


class FakeTextClient:
    """Records prompts and answers with a canned reply."""

    def __init__(self, reply: str = "Generated summary"):
        self.reply = reply
        self.calls = []

    async def generate(self, prompt: str, *, max_tokens: int) -> str:
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens})
        return self.reply


class Seeder:
    """Writes fixture records straight into the store."""

    def __init__(self, store: RecordStore):
        self.store = store

    def officer(self, name="Ali", **fields):
        return self.store.add("officers", {"name": name, **fields})

    def klass(self, name="Alpha", instructor="inst-1"):
        return self.store.add("class", {"name": name, "instructorId": instructor})

    def enroll(self, class_id, officer_id):
        return self.store.add("enrollments", {"classId": class_id, "officerId": officer_id})

    def course(self, name="Navigation", course_type="Optional", **fields):
        return self.store.add("courses", {"courseName": name, "type": course_type, **fields})

    def assessment(self, course_id, total=100, name="Quiz"):
        return self.store.add("assessments", {"courseId": course_id, "assessmentName": name, "totalMarks": total})

    def mark(self, assessment_id, officer_id, marks):
        return self.store.add("marks", {"assessmentId": assessment_id, "officerId": officer_id, "marks": marks})

    def trait(self, officer_id, name, score, total, tap=1):
        return self.store.add("traits", {
            "officerId": officer_id, "tap": tap, "traitName": name, "score": score, "total": total,
        })

    def warning(self, officer_id, punishment, offense, warning_type="observations"):
        return self.store.add("warnings", {
            "officerId": officer_id, "type": warning_type, "punishment": punishment, "offense": offense,
        })

    def medical(self, officer_id, status="ML"):
        return self.store.add("medical", {"officerId": officer_id, "date": "2024-03-01", "status": status})


@pytest.fixture
def store(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'records.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    yield RecordStore(factory)
    engine.dispose()


@pytest.fixture
def seed(store):
    return Seeder(store)


@pytest.fixture
def text_client():
    return FakeTextClient()


@pytest.fixture
def client(store, text_client):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_text_client] = lambda: text_client
    yield TestClient(app)
    app.dependency_overrides.clear()
