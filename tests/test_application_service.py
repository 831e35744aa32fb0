"""
Application creation, mentor assignment and the status state machine.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import Conflict, Forbidden, Ineligible, InvalidState, NotFound, ValidationError
from app.services.application_service import TRANSITIONS, ApplicationService, can_transition
from tests.conftest import add_student, internship_fields


# ============================================================
# CREATION
# ============================================================

def test_create_assigns_same_department_mentor(applications, student, live_internship, stores):
    application = applications.create(student, live_internship.id, "I would love to join")

    assert application.status == "pending_mentor_approval"
    assert application.mentor_id == "MEN001"
    assert application.id.startswith("APP")
    assert stores.internships.find(live_internship.id)["currentApplications"] == 1


def test_requested_mentor_wins(applications, student, live_internship):
    application = applications.create(student, live_internship.id, "Hello", requested_mentor_id="MEN002")
    assert application.mentor_id == "MEN002"


def test_unknown_requested_mentor(applications, student, live_internship):
    with pytest.raises(NotFound):
        applications.create(student, live_internship.id, "Hello", requested_mentor_id="MEN999")


def test_falls_back_to_any_mentor(applications, stores, internships, admin):
    student = add_student(stores, "STU002", department="IT")
    internship = internships.create_direct(admin, internship_fields(eligibleDepartments=["IT"]))
    application = applications.create(student, internship.id, "Hello")
    assert application.mentor_id == "MEN001"


def test_no_mentors_means_plain_applied(applications, stores, student, live_internship):
    stores.mentors.remove("MEN001")
    stores.mentors.remove("MEN002")
    application = applications.create(student, live_internship.id, "Hello")
    assert application.status == "applied"
    assert application.mentor_id is None


def test_duplicate_application_conflicts(applications, student, live_internship, stores):
    applications.create(student, live_internship.id, "First")
    with pytest.raises(Conflict):
        applications.create(student, live_internship.id, "First")
    assert stores.applications.count() == 1
    assert stores.internships.find(live_internship.id)["currentApplications"] == 1


def test_unique_index_backs_up_duplicate_check(stores, student, live_internship):
    doc = {"id": "APP1", "studentId": student.id, "internshipId": live_internship.id}
    stores.applications.insert(doc)
    with pytest.raises(Conflict):
        stores.applications.insert({**doc, "id": "APP2"})


def test_ineligible_student_is_refused(applications, stores, live_internship):
    student = add_student(stores, "STU003", cgpa=6.5)
    with pytest.raises(Ineligible):
        applications.create(student, live_internship.id, "Please")
    assert stores.internships.find(live_internship.id)["currentApplications"] == 0
    assert stores.applications.count() == 0


def test_cover_letter_required(applications, student, live_internship):
    with pytest.raises(ValidationError):
        applications.create(student, live_internship.id, "  ")


def test_only_students_apply(applications, mentor, live_internship):
    with pytest.raises(Forbidden):
        applications.create(mentor, live_internship.id, "Hello")


def test_unknown_internship(applications, student):
    with pytest.raises(NotFound):
        applications.create(student, "INT-missing", "Hello")


def test_inactive_internship_refuses_applications(applications, internships, admin, student, live_internship):
    internships.set_status(admin, live_internship.id, "inactive")
    with pytest.raises(InvalidState):
        applications.create(student, live_internship.id, "Hello")


def test_application_cap(stores, audit, outbox, internships, admin):
    internship = internships.create_direct(admin, internship_fields(maxApplications=1))
    capped = ApplicationService(stores, audit, outbox, enforce_cap=True)
    capped.create(add_student(stores, "STU010"), internship.id, "First")
    with pytest.raises(InvalidState):
        capped.create(add_student(stores, "STU011"), internship.id, "Second")

    uncapped = ApplicationService(stores, audit, outbox, enforce_cap=False)
    uncapped.create(add_student(stores, "STU012"), internship.id, "Third")
    assert stores.internships.find(internship.id)["currentApplications"] == 2


# ============================================================
# TRANSITIONS
# ============================================================

def test_transition_table_is_forward_only():
    assert can_transition("pending_mentor_approval", "approved")
    assert can_transition("interview_scheduled", "interview_scheduled")
    assert not can_transition("approved", "pending_mentor_approval")
    assert not can_transition("offered", "interview_scheduled")
    assert TRANSITIONS["accepted"] == set()
    assert TRANSITIONS["rejected"] == set()
    for status, successors in TRANSITIONS.items():
        if status not in ("accepted", "rejected"):
            assert "rejected" in successors


def test_mentor_approval(applications, student, live_internship, mentor, stores):
    created = applications.create(student, live_internship.id, "Hello")
    approved = applications.transition(mentor, created.id, "approved", feedback="Strong profile")

    assert approved.status == "approved"
    assert approved.mentor_approval == "approved"
    assert approved.mentor_feedback == "Strong profile"
    assert approved.processed_at is not None
    # Mentor actions are not audited
    assert stores.audit_log.count({"action": "UPDATE_APPLICATION_STATUS"}) == 0


def test_full_pipeline_to_acceptance(applications, student, live_internship, mentor, admin, stores):
    created = applications.create(student, live_internship.id, "Hello")
    applications.transition(mentor, created.id, "approved")
    interview = {"date": datetime(2026, 3, 1, 10, 30, tzinfo=timezone(timedelta(hours=5, minutes=30))),
                 "mode": "Online", "meetingLink": "https://meet.example.com/abc"}
    scheduled = applications.transition(admin, created.id, "interview_scheduled", interview_details=interview)
    assert scheduled.interview_scheduled.date == datetime(2026, 3, 1, 5, 0, tzinfo=timezone.utc)

    completed = applications.transition(admin, created.id, "interview_completed", feedback="Good answers")
    assert completed.interview_feedback == "Good answers"

    offered = applications.transition(admin, created.id, "offered", offer_details={"stipend": "₹25,000"})
    assert offered.offer_details == {"stipend": "₹25,000"}

    accepted = applications.transition(admin, created.id, "accepted")
    assert accepted.status == "accepted"
    assert accepted.mentor_approval == "approved"
    assert stores.audit_log.count({"action": "UPDATE_APPLICATION_STATUS"}) == 4


def test_illegal_transition(applications, student, live_internship, admin, stores):
    created = applications.create(student, live_internship.id, "Hello")
    with pytest.raises(InvalidState):
        applications.transition(admin, created.id, "offered")
    assert stores.applications.find(created.id)["status"] == "pending_mentor_approval"


def test_terminal_states(applications, student, live_internship, admin):
    created = applications.create(student, live_internship.id, "Hello")
    applications.transition(admin, created.id, "rejected")
    with pytest.raises(InvalidState):
        applications.transition(admin, created.id, "approved")


def test_unknown_status(applications, student, live_internship, admin):
    created = applications.create(student, live_internship.id, "Hello")
    with pytest.raises(ValidationError):
        applications.transition(admin, created.id, "hired")


def test_mentor_cannot_touch_unassigned_application(applications, student, live_internship,
                                                    other_mentor, stores):
    created = applications.create(student, live_internship.id, "Hello")
    before = stores.applications.find(created.id)
    with pytest.raises(Forbidden):
        applications.transition(other_mentor, created.id, "approved")
    assert stores.applications.find(created.id) == before


def test_students_and_recruiters_cannot_transition(applications, student, live_internship, recruiter):
    created = applications.create(student, live_internship.id, "Hello")
    for actor in (student, recruiter):
        with pytest.raises(Forbidden):
            applications.transition(actor, created.id, "approved")


def test_mentor_interview_step_keeps_prior_approval(applications, student, live_internship, mentor):
    created = applications.create(student, live_internship.id, "Hello")
    applications.transition(mentor, created.id, "approved")
    scheduled = applications.transition(mentor, created.id, "interview_scheduled",
                                        interview_details={"date": "2026-03-01T10:00:00"})
    assert scheduled.mentor_approval == "approved"
    assert scheduled.interview_scheduled.date.tzinfo is not None


def test_interview_details_need_a_date(applications, student, live_internship, admin):
    created = applications.create(student, live_internship.id, "Hello")
    applications.transition(admin, created.id, "approved")
    with pytest.raises(ValidationError):
        applications.transition(admin, created.id, "interview_scheduled", interview_details={"mode": "Online"})


# ============================================================
# NOTIFICATIONS
# ============================================================

def test_transition_queues_email(applications, student, live_internship, mentor, outbox, sender):
    created = applications.create(student, live_internship.id, "Hello")
    applications.transition(mentor, created.id, "approved")

    assert outbox.pending_count() == 1
    assert outbox.dispatch_pending() == 1
    event = sender.sent[0]
    assert event.student_email == student.email
    assert event.subject == "Application approved - Backend Intern"


def test_delivery_failure_does_not_undo_transition(applications, student, live_internship, mentor,
                                                   outbox, sender, stores):
    sender.fail = True
    created = applications.create(student, live_internship.id, "Hello")
    applications.transition(mentor, created.id, "approved")

    assert outbox.dispatch_pending() == 0
    assert stores.applications.find(created.id)["status"] == "approved"


def test_broken_outbox_does_not_fail_transition(applications, student, live_internship, mentor, stores):
    class BrokenOutbox:
        def enqueue(self, event):
            raise RuntimeError("queue full")

    applications.outbox = BrokenOutbox()
    created = applications.create(student, live_internship.id, "Hello")
    assert applications.transition(mentor, created.id, "approved").status == "approved"


def test_missing_student_email_skips_notification(applications, student, live_internship, mentor, stores, outbox):
    created = applications.create(student, live_internship.id, "Hello")
    stores.students.remove(student.id)
    applications.transition(mentor, created.id, "approved")
    assert outbox.pending_count() == 0


# ============================================================
# READS
# ============================================================

def test_reads_are_scoped_by_role(applications, internships, stores, admin, recruiter, other_recruiter,
                                  mentor, other_mentor):
    mine = internships.approve(admin, internships.submit(recruiter, internship_fields()).id)
    theirs = internships.approve(admin, internships.submit(other_recruiter, internship_fields()).id)
    priya = add_student(stores, "STU020")
    arjun = add_student(stores, "STU021")
    a1 = applications.create(priya, mine.id, "Hello")
    a2 = applications.create(arjun, theirs.id, "Hello", requested_mentor_id="MEN002")

    assert [a["id"] for a in applications.list(priya)] == [a1.id]
    assert [a["id"] for a in applications.list(recruiter)] == [a1.id]
    assert [a["id"] for a in applications.list(other_mentor)] == [a2.id]
    assert len(applications.list(admin)) == 2
    assert [a["id"] for a in applications.pending_for_mentor(mentor)] == [a1.id]

    enriched = applications.get(recruiter, a1.id)
    assert enriched["internship"]["title"] == "Backend Intern"
    assert enriched["student"]["id"] == priya.id

    with pytest.raises(Forbidden):
        applications.get(priya, a2.id)
    with pytest.raises(Forbidden):
        applications.list(None)


def test_list_status_filter(applications, student, live_internship, admin):
    created = applications.create(student, live_internship.id, "Hello")
    assert applications.list(admin, "approved") == []
    applications.transition(admin, created.id, "approved")
    assert [a["id"] for a in applications.list(admin, "approved")] == [created.id]
