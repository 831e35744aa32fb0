"""
Student Directory Service

- Admins create student records
- Students read and edit their own profile (id, email, role are fixed)
- Admins, mentors and recruiters search the directory, recruiters only
  within students who applied to their internships
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import Conflict, Forbidden, NotFound, ValidationError
from app.models.actors import Actor, AdminActor, StudentActor
from app.models.entities import Mentor, PlacementStatus, Student, utcnow
from app.services.record_store import RecordStores
from app.services.visibility import student_filter

logger = logging.getLogger(__name__)

IMMUTABLE_PROFILE_FIELDS = {"id", "email", "role", "createdAt", "passwordHash"}


class StudentFilters(BaseModel):
    department: Optional[str] = None
    semester: Optional[int] = None
    cgpa: Optional[float] = None
    skills: Optional[str] = None


def _split_skills(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    return [str(s) for s in value]


def _to_student(doc: Dict[str, Any]) -> Student:
    try:
        return Student.model_validate(doc)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid student: {e.errors()[0].get('msg')}") from e


class StudentService:

    def __init__(self, stores: RecordStores):
        self.stores = stores

    def create(self, actor: Actor, fields: Dict[str, Any], password_hash: Optional[str] = None) -> Student:
        if not isinstance(actor, AdminActor):
            raise Forbidden("Only admins can create students")
        missing = [f for f in ("name", "email", "department") if not fields.get(f)]
        if missing:
            raise ValidationError("name, email, and department are required")
        if self.stores.students.find_one({"email": fields["email"]}):
            raise Conflict("Student with this email already exists")

        now = utcnow()
        doc = {k: v for k, v in fields.items() if k not in IMMUTABLE_PROFILE_FIELDS | {"isPlaced", "placedAt"}}
        doc.update({
            "id": f"STU{uuid.uuid4().hex[:8].upper()}",
            "email": fields["email"],
            "skills": _split_skills(fields.get("skills")),
            "isPlaced": False,
            "placementStatus": PlacementStatus.active.value,
            "createdAt": now,
            "updatedAt": now,
        })
        student = _to_student(doc)

        document = student.to_document()
        if password_hash:
            document["passwordHash"] = password_hash
        self.stores.students.insert(document)
        logger.info("Student %s created by admin %s", student.id, actor.id)
        return student

    def list(self, actor: Optional[Actor], filters: Optional[StudentFilters] = None) -> List[Student]:
        filters = filters or StudentFilters()
        query = dict(student_filter(actor, self.stores))
        if filters.department:
            query["department"] = filters.department
        if filters.semester is not None:
            query["semester"] = filters.semester
        if filters.cgpa is not None:
            query["cgpa"] = {"$gte": filters.cgpa}

        students = [Student.model_validate(d) for d in self.stores.students.query(query)]
        if filters.skills:
            wanted = [s.lower() for s in _split_skills(filters.skills)]
            students = [
                s for s in students
                if any(w in skill.lower() for w in wanted for skill in s.skills)
            ]
        return students

    def get_profile(self, actor: Actor) -> Student:
        if not isinstance(actor, StudentActor):
            raise Forbidden("Students only")
        doc = self.stores.students.find(actor.id)
        if not doc:
            raise NotFound("Student not found")
        return Student.model_validate(doc)

    def update_profile(self, actor: Actor, patch: Dict[str, Any]) -> Student:
        if not isinstance(actor, StudentActor):
            raise Forbidden("Students only")
        doc = self.stores.students.find(actor.id)
        if not doc:
            raise NotFound("Student not found")

        patch = {k: v for k, v in patch.items() if k not in IMMUTABLE_PROFILE_FIELDS}
        if "skills" in patch:
            patch["skills"] = _split_skills(patch["skills"])
        patch["updatedAt"] = utcnow()
        _to_student({**doc, **patch})

        updated = self.stores.students.update(actor.id, patch)
        return Student.model_validate(updated)

    def list_mentors(self) -> List[Mentor]:
        return [Mentor.model_validate(d) for d in self.stores.mentors.query()]
