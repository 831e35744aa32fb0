"""
Internship lifecycle: direct postings, submissions, approval, edits and reads.
"""

import pytest

from app.core.errors import Forbidden, InvalidState, NotFound, ValidationError
from app.services.audit_service import AuditService
from app.services.internship_service import InternshipFilters, InternshipService, parse_stipend
from tests.conftest import FailingStore, add_student, internship_fields


# ============================================================
# CREATION
# ============================================================

def test_admin_posting_is_live_immediately(internships, admin, stores):
    internship = internships.create_direct(admin, internship_fields())

    assert internship.status == "active"
    assert internship.posted_by == admin.id
    assert internship.submitted_by is None
    assert internship.current_applications == 0
    assert stores.audit_log.find_one({"action": "CREATE_INTERNSHIP"})["details"]["internshipId"] == internship.id


def test_only_admins_post_directly(internships, recruiter):
    with pytest.raises(Forbidden):
        internships.create_direct(recruiter, internship_fields())


@pytest.mark.parametrize("missing", ["title", "company", "description", "requiredSkills", "eligibleDepartments"])
def test_required_fields(internships, admin, missing):
    with pytest.raises(ValidationError):
        internships.create_direct(admin, internship_fields(**{missing: None}))


def test_comma_separated_skills_are_split(internships, admin):
    internship = internships.create_direct(admin, internship_fields(requiredSkills="Python, SQL ,"))
    assert internship.required_skills == ["Python", "SQL"]


def test_recruiter_submission_awaits_approval(internships, recruiter, stores):
    fields = internship_fields()
    del fields["company"]
    internship = internships.submit(recruiter, fields)

    assert internship.status == "submitted"
    assert internship.submitted_by == recruiter.id
    assert internship.posted_by is None
    assert internship.company == "TechCorp"
    # Submissions are not admin actions
    assert stores.audit_log.count() == 0


def test_workflow_fields_cannot_be_smuggled_into_a_submission(internships, recruiter):
    internship = internships.submit(recruiter, internship_fields(status="active", approvedBy="ADM001"))
    assert internship.status == "submitted"
    assert internship.approved_by is None


# ============================================================
# APPROVAL WORKFLOW
# ============================================================

def test_approve_transfers_ownership(internships, recruiter, admin):
    submitted = internships.submit(recruiter, internship_fields())
    approved = internships.approve(admin, submitted.id, "looks good")

    assert approved.status == "active"
    assert approved.posted_by == submitted.submitted_by == recruiter.id
    assert approved.approved_by == admin.id
    assert approved.approved_at is not None
    assert approved.admin_notes == "looks good"


def test_approving_a_live_internship_is_rejected(internships, admin, live_internship, stores):
    before = stores.internships.find(live_internship.id)
    with pytest.raises(InvalidState):
        internships.approve(admin, live_internship.id)
    assert stores.internships.find(live_internship.id) == before


def test_only_admins_approve(internships, recruiter):
    submitted = internships.submit(recruiter, internship_fields())
    with pytest.raises(Forbidden):
        internships.approve(recruiter, submitted.id)


def test_approve_unknown_internship(internships, admin):
    with pytest.raises(NotFound):
        internships.approve(admin, "INT-missing")


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_reject_requires_reason(internships, recruiter, admin, reason):
    submitted = internships.submit(recruiter, internship_fields())
    with pytest.raises(ValidationError):
        internships.reject(admin, submitted.id, reason)


def test_reject_submission(internships, recruiter, admin):
    submitted = internships.submit(recruiter, internship_fields())
    rejected = internships.reject(admin, submitted.id, "Stipend too low", "resubmit with more detail")

    assert rejected.status == "rejected"
    assert rejected.rejection_reason == "Stipend too low"
    assert rejected.rejected_by == admin.id
    assert rejected.posted_by is None


def test_reject_live_internship_is_invalid(internships, admin, live_internship):
    with pytest.raises(InvalidState):
        internships.reject(admin, live_internship.id, "No longer needed")


def test_deactivate_and_reactivate(internships, admin, live_internship):
    assert internships.set_status(admin, live_internship.id, "inactive").status == "inactive"
    assert internships.set_status(admin, live_internship.id, "active").status == "active"


def test_set_status_rejects_other_values(internships, admin, live_internship, recruiter):
    with pytest.raises(ValidationError):
        internships.set_status(admin, live_internship.id, "submitted")

    submitted = internships.submit(recruiter, internship_fields())
    with pytest.raises(InvalidState):
        internships.set_status(admin, submitted.id, "active")


# ============================================================
# EDIT / DELETE
# ============================================================

def test_admin_edits_any_internship_but_not_its_id(internships, admin, live_internship):
    updated = internships.update(admin, live_internship.id, {"title": "Platform Intern", "id": "HIJACK"})
    assert updated.id == live_internship.id
    assert updated.title == "Platform Intern"


def test_recruiter_cannot_edit_someone_elses_posting(internships, recruiter, other_recruiter, admin):
    approved = internships.approve(admin, internships.submit(recruiter, internship_fields()).id)
    with pytest.raises(Forbidden):
        internships.update(other_recruiter, approved.id, {"title": "Mine now"})


def test_recruiter_cannot_edit_pending_submission(internships, recruiter):
    submitted = internships.submit(recruiter, internship_fields())
    with pytest.raises((Forbidden, InvalidState)):
        internships.update(recruiter, submitted.id, {"title": "Edited"})


def test_recruiter_edits_own_approved_posting(internships, recruiter, admin):
    approved = internships.approve(admin, internships.submit(recruiter, internship_fields()).id)
    updated = internships.update(recruiter, approved.id, {"stipend": "₹30,000/month", "status": "inactive"})

    assert updated.stipend == "₹30,000/month"
    assert updated.status == "active"


@pytest.mark.parametrize("status", ["active", "rejected", "inactive"])
def test_admin_edit_cannot_bypass_review(internships, recruiter, admin, stores, status):
    submitted = internships.submit(recruiter, internship_fields())
    updated = internships.update(admin, submitted.id, {
        "title": "Retitled", "status": status, "postedBy": admin.id, "approvedBy": admin.id
    })

    assert updated.title == "Retitled"
    assert updated.status == "submitted"
    assert updated.posted_by is None
    assert updated.approved_by is None
    assert stores.internships.find(submitted.id)["status"] == "submitted"

    # The proper path still works afterwards
    approved = internships.approve(admin, submitted.id)
    assert approved.posted_by == recruiter.id


def test_admin_edit_does_not_change_live_status(internships, admin, live_internship):
    updated = internships.update(admin, live_internship.id, {"status": "inactive", "rejectionReason": "x"})
    assert updated.status == "active"
    assert updated.rejection_reason is None


def test_audit_failure_does_not_fail_committed_mutation(stores, recruiter, admin):
    broken = AuditService(FailingStore("audit_log"), limit=10)
    service = InternshipService(stores, broken)

    posted = service.create_direct(admin, internship_fields())
    submitted = service.submit(recruiter, internship_fields())
    approved = service.approve(admin, submitted.id, "looks good")
    paused = service.set_status(admin, posted.id, "inactive")

    assert approved.status == "active"
    assert stores.internships.find(submitted.id)["approvedBy"] == admin.id
    assert paused.status == "inactive"
    assert stores.internships.find(posted.id)["status"] == "inactive"


def test_edit_cannot_blank_required_fields(internships, admin, live_internship):
    with pytest.raises(ValidationError):
        internships.update(admin, live_internship.id, {"requiredSkills": []})


def test_recruiter_deletes_own_rejected_submission(internships, recruiter, admin, stores):
    submitted = internships.submit(recruiter, internship_fields())
    internships.reject(admin, submitted.id, "Incomplete")

    internships.delete(recruiter, submitted.id)
    assert stores.internships.find(submitted.id) is None


def test_recruiter_cannot_delete_active_posting(internships, recruiter, admin):
    approved = internships.approve(admin, internships.submit(recruiter, internship_fields()).id)
    with pytest.raises(InvalidState):
        internships.delete(recruiter, approved.id)


def test_recruiter_cannot_delete_someone_elses_submission(internships, recruiter, other_recruiter):
    submitted = internships.submit(recruiter, internship_fields())
    with pytest.raises(Forbidden):
        internships.delete(other_recruiter, submitted.id)


def test_students_cannot_edit_or_delete(internships, student, live_internship):
    with pytest.raises(Forbidden):
        internships.update(student, live_internship.id, {"title": "x"})
    with pytest.raises(Forbidden):
        internships.delete(student, live_internship.id)


# ============================================================
# READS
# ============================================================

def test_anonymous_list_defaults_to_active(internships, admin, recruiter, live_internship):
    internships.submit(recruiter, internship_fields(title="Pending"))
    inactive = internships.create_direct(admin, internship_fields(title="Paused"))
    internships.set_status(admin, inactive.id, "inactive")

    assert [i["id"] for i in internships.list(None)] == [live_internship.id]
    titles = {i["title"] for i in internships.list(None, InternshipFilters(status="all"))}
    assert titles == {"Backend Intern", "Paused"}


def test_admin_list_includes_submissions(internships, admin, recruiter, live_internship):
    internships.submit(recruiter, internship_fields(title="Pending"))
    assert len(internships.list(admin)) == 2


def test_recruiter_sees_own_rejected_submission_only(internships, admin, recruiter, other_recruiter):
    mine = internships.submit(recruiter, internship_fields(title="Mine"))
    theirs = internships.submit(other_recruiter, internship_fields(title="Theirs"))
    internships.reject(admin, mine.id, "Incomplete")
    internships.reject(admin, theirs.id, "Incomplete")
    internships.submit(other_recruiter, internship_fields(title="Pending"))

    visible = internships.list(recruiter, InternshipFilters(status="all"))
    assert [i["id"] for i in visible] == [mine.id]

    with pytest.raises(NotFound):
        internships.get(recruiter, theirs.id)


def test_recruiter_can_read_own_pending_submission(internships, recruiter):
    submitted = internships.submit(recruiter, internship_fields())
    assert internships.get(recruiter, submitted.id)["status"] == "submitted"
    assert [i.id for i in internships.list_own(recruiter)] == [submitted.id]


def test_list_filters(internships, admin):
    internships.create_direct(admin, internship_fields(title="Cheap", stipend="₹5,000/month", location="Pune"))
    internships.create_direct(admin, internship_fields(title="Mid", stipend="₹20,000/month"))
    internships.create_direct(admin, internship_fields(title="Unpaid", stipend="Unpaid",
                                                       requiredSkills=["Go"], workMode="Remote"))

    def titles(**filters):
        return {i["title"] for i in internships.list(None, InternshipFilters(**filters))}

    assert titles(min_stipend=10000) == {"Mid", "Unpaid"}
    assert titles(max_stipend=10000) == {"Cheap", "Unpaid"}
    assert titles(location="pune") == {"Cheap"}
    assert titles(skills="go") == {"Unpaid"}
    assert titles(work_mode="Remote") == {"Unpaid"}
    assert titles(department="ECE") == set()


def test_student_list_is_annotated_and_sortable(internships, admin, stores, applications):
    student = add_student(stores, skills=["Python"])
    weak = internships.create_direct(admin, internship_fields(title="Weak", requiredSkills=["Go", "Rust"]))
    strong = internships.create_direct(admin, internship_fields(title="Strong", requiredSkills=["Python"]))
    applications.create(student, strong.id, "Keen to join")

    results = internships.list(student, InternshipFilters(recommended=True))
    assert [r["id"] for r in results] == [strong.id, weak.id]
    assert results[0]["recommendationScore"] == 100
    assert results[0]["isEligible"] is True
    assert results[0]["hasApplied"] is True
    assert results[1]["hasApplied"] is False


def test_non_students_get_no_match_fields(internships, mentor, live_internship):
    result = internships.get(mentor, live_internship.id)
    assert "recommendationScore" not in result
    assert result["id"] == live_internship.id


@pytest.mark.parametrize("stipend, amount", [
    ("₹15,000/month", 15000),
    ("Rs. 8000 per month", 8000),
    ("1,20,000", 120000),
    ("Unpaid", None),
    (None, None),
])
def test_parse_stipend(stipend, amount):
    assert parse_stipend(stipend) == amount
