#!/usr/bin/env python3
"""
Demo Data Seeder

Creates one admin, mentor and recruiter, a few students and internships in
the configured record store. Every account uses the password "password123".
Run: python scripts/seed_demo_data.py
"""

from app.core.auth import hash_password
from app.core.config import get_settings
from app.core.errors import Conflict
from app.models.actors import AdminActor
from app.models.entities import utcnow
from app.services.audit_service import AuditService
from app.services.internship_service import InternshipService
from app.services.record_store import get_record_stores
from app.services.student_service import StudentService

DEMO_PASSWORD = "password123"

STAFF = {
    "admins": {"id": "ADM001", "name": "Placement Admin", "email": "admin@campus.edu"},
    "mentors": {
        "id": "MEN001", "name": "Dr. Rao", "email": "rao@campus.edu",
        "department": "Computer Science", "designation": "Associate Professor"
    },
    "recruiters": {"id": "REC001", "name": "Asha Menon", "email": "asha@techcorp.com", "company": "TechCorp"},
}

STUDENTS = [
    {"name": "Priya Sharma", "email": "priya@campus.edu", "department": "Computer Science",
     "semester": 6, "cgpa": 8.4, "skills": ["Python", "React", "SQL"]},
    {"name": "Arjun Nair", "email": "arjun@campus.edu", "department": "Electronics",
     "semester": 5, "cgpa": 7.1, "skills": ["C", "Embedded", "Python"]},
    {"name": "Meera Iyer", "email": "meera@campus.edu", "department": "Computer Science",
     "semester": 3, "cgpa": 9.0, "skills": ["Java", "Spring"]},
]

INTERNSHIPS = [
    {"title": "Backend Developer Intern", "company": "TechCorp",
     "description": "Build REST APIs for the payments team.",
     "requiredSkills": ["Python", "SQL"], "preferredSkills": ["FastAPI"],
     "eligibleDepartments": ["Computer Science"], "minimumSemester": 5, "minimumCGPA": 7.0,
     "stipend": "₹25,000/month", "duration": "6 months", "location": "Bangalore", "workMode": "Hybrid"},
    {"title": "Embedded Systems Intern", "company": "ChipWorks",
     "description": "Firmware testing for IoT sensor boards.",
     "requiredSkills": ["C", "Embedded"], "eligibleDepartments": ["Electronics", "Electrical"],
     "minimumSemester": 4, "minimumCGPA": 6.5, "stipend": "₹15,000/month",
     "duration": "3 months", "location": "Pune", "workMode": "On-site"},
]


def seed_staff(stores):
    print("\n[1] Seeding staff accounts...")
    password_hash = hash_password(DEMO_PASSWORD)
    now = utcnow()
    for collection, doc in STAFF.items():
        role = collection[:-1]
        try:
            stores.users(role).insert({**doc, "role": role, "passwordHash": password_hash, "createdAt": now})
            print(f"    ✅ {role}: {doc['email']}")
        except Conflict:
            print(f"    ⚠️  {role}: {doc['email']} already exists")


def seed_students(stores, admin):
    print("\n[2] Seeding students...")
    service = StudentService(stores)
    password_hash = hash_password(DEMO_PASSWORD)
    for fields in STUDENTS:
        try:
            student = service.create(admin, fields, password_hash=password_hash)
            print(f"    ✅ {student.id}: {student.name}")
        except Conflict:
            print(f"    ⚠️  {fields['email']} already exists")


def seed_internships(stores, admin):
    print("\n[3] Seeding internships...")
    service = InternshipService(stores, AuditService(stores.audit_log))
    for fields in INTERNSHIPS:
        internship = service.create_direct(admin, fields)
        print(f"    ✅ {internship.id}: {internship.title} @ {internship.company}")


def main():
    settings = get_settings()
    print("=" * 50)
    print(f"SEEDING DEMO DATA ({settings.store_backend} backend)")
    print("=" * 50)

    stores = get_record_stores()
    admin_doc = STAFF["admins"]
    admin = AdminActor(id=admin_doc["id"], email=admin_doc["email"], name=admin_doc["name"])

    seed_staff(stores)
    seed_students(stores, admin)
    seed_internships(stores, admin)

    print("\n" + "=" * 50)
    print(f"Done. Log in with any seeded email and password '{DEMO_PASSWORD}'.")
    print("=" * 50)


if __name__ == "__main__":
    main()
