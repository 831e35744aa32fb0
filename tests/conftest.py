"""
Shared fixtures: an in-memory record store, wired services, one actor per
role and a TestClient bound to the same store.
"""

import os

os.environ.setdefault("STORE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_outbox
from app.core.auth import create_access_token
from app.core.errors import StoreUnavailable
from app.main import app
from app.models.actors import AdminActor, MentorActor, RecruiterActor, StudentActor
from app.models.entities import Student, utcnow
from app.services.application_service import ApplicationService
from app.services.audit_service import AuditService
from app.services.internship_service import InternshipService
from app.services.notification_service import NotificationOutbox
from app.services.record_store import MemoryRecordStore, RecordStores, get_record_stores


class FakeSender:
    """Collects events instead of emailing; can be told to fail."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, event):
        if self.fail:
            raise RuntimeError("relay down")
        self.sent.append(event)
        return True


class FailingStore(MemoryRecordStore):
    """Store whose writes fail as if the database went away."""

    def insert(self, doc):
        raise StoreUnavailable("connection refused")


def add_student(stores, student_id="STU001", **overrides):
    fields = {
        "id": student_id,
        "name": "Priya Sharma",
        "email": f"{student_id.lower()}@campus.edu",
        "department": "CSE",
        "semester": 6,
        "cgpa": 8.0,
        "skills": ["Python", "React"],
        "createdAt": utcnow(),
    }
    fields.update(overrides)
    student = Student.model_validate(fields)
    stores.students.insert(student.to_document())
    return StudentActor(id=student.id, email=student.email, name=student.name, profile=student)


def internship_fields(**overrides):
    fields = {
        "title": "Backend Intern",
        "company": "TechCorp",
        "description": "Build APIs",
        "requiredSkills": ["Python", "React"],
        "eligibleDepartments": ["CSE"],
        "minimumSemester": 4,
        "minimumCGPA": 7.0,
        "stipend": "₹20,000/month",
        "location": "Bangalore",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def stores():
    stores = RecordStores.in_memory()
    stores.admins.insert({"id": "ADM001", "name": "Admin", "email": "admin@campus.edu", "role": "admin"})
    stores.mentors.insert({"id": "MEN001", "name": "Dr. Rao", "email": "rao@campus.edu",
                           "role": "mentor", "department": "CSE"})
    stores.mentors.insert({"id": "MEN002", "name": "Dr. Iyer", "email": "iyer@campus.edu",
                           "role": "mentor", "department": "ECE"})
    stores.recruiters.insert({"id": "REC001", "name": "Asha", "email": "asha@techcorp.com",
                              "role": "recruiter", "company": "TechCorp"})
    stores.recruiters.insert({"id": "REC002", "name": "Ravi", "email": "ravi@chipworks.com",
                              "role": "recruiter", "company": "ChipWorks"})
    return stores


@pytest.fixture
def admin():
    return AdminActor(id="ADM001", email="admin@campus.edu", name="Admin")


@pytest.fixture
def mentor():
    return MentorActor(id="MEN001", email="rao@campus.edu", name="Dr. Rao", department="CSE")


@pytest.fixture
def other_mentor():
    return MentorActor(id="MEN002", email="iyer@campus.edu", name="Dr. Iyer", department="ECE")


@pytest.fixture
def recruiter():
    return RecruiterActor(id="REC001", email="asha@techcorp.com", name="Asha", company="TechCorp")


@pytest.fixture
def other_recruiter():
    return RecruiterActor(id="REC002", email="ravi@chipworks.com", name="Ravi", company="ChipWorks")


@pytest.fixture
def student(stores):
    return add_student(stores)


@pytest.fixture
def audit(stores):
    return AuditService(stores.audit_log, limit=1000)


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def outbox(sender):
    return NotificationOutbox(sender)


@pytest.fixture
def internships(stores, audit):
    return InternshipService(stores, audit)


@pytest.fixture
def applications(stores, audit, outbox):
    return ApplicationService(stores, audit, outbox, enforce_cap=True)


@pytest.fixture
def live_internship(internships, admin):
    return internships.create_direct(admin, internship_fields())


@pytest.fixture
def client(stores, outbox):
    app.dependency_overrides[get_record_stores] = lambda: stores
    app.dependency_overrides[get_outbox] = lambda: outbox
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_header(actor):
    token = create_access_token({"sub": actor.id, "email": actor.email, "role": actor.role})
    return {"Authorization": f"Bearer {token}"}
