"""Tests for the certificate and grade approval workflows."""

from __future__ import annotations

import pytest
from conftest import NOW

from campusgate import (
    Actor,
    ConflictError,
    ForbiddenError,
    InMemoryRepository,
    NotFoundError,
    PermissionTable,
    Reason,
    Role,
)
from campusgate.lifecycle import RequestWorkflow, certificate_workflow, grade_workflow
from campusgate.models import RequestKind, RequestStatus


@pytest.fixture
def certificates(repository: InMemoryRepository) -> RequestWorkflow:
    return certificate_workflow(repository, PermissionTable.default(), clock=lambda: NOW)


@pytest.fixture
def grades(repository: InMemoryRepository) -> RequestWorkflow:
    return grade_workflow(repository, PermissionTable.default(), clock=lambda: NOW)


class TestCertificateWorkflow:
    """Tests for certificate requests (no ownership binding)."""

    def test_student_opens_admin_approves(self, certificates: RequestWorkflow, student: Actor, admin: Actor) -> None:
        request = certificates.open(student, student.id, payload={"course": "CS101"})
        assert request.kind is RequestKind.CERTIFICATE
        assert request.owner_id is None
        assert request.status is RequestStatus.PENDING

        approved = certificates.approve(admin, request.id, remarks="Looks good")
        assert approved.status is RequestStatus.APPROVED
        assert approved.decided_by == admin.id
        assert approved.decided_at == NOW
        assert approved.remarks == "Looks good"

    def test_reject_records_reason(self, certificates: RequestWorkflow, student: Actor, admin: Actor) -> None:
        request = certificates.open(student, student.id)
        rejected = certificates.reject(admin, request.id, "Course not completed")
        assert rejected.status is RequestStatus.REJECTED
        assert rejected.rejection_reason == "Course not completed"
        assert rejected.decided_at == NOW

    def test_decided_request_not_pending(self, certificates: RequestWorkflow, student: Actor, admin: Actor) -> None:
        request = certificates.open(student, student.id)
        certificates.approve(admin, request.id)
        with pytest.raises(ConflictError) as exc_info:
            certificates.reject(admin, request.id, "late")
        assert exc_info.value.reason is Reason.NOT_PENDING

    def test_student_cannot_decide(self, certificates: RequestWorkflow, student: Actor) -> None:
        request = certificates.open(student, student.id)
        with pytest.raises(ForbiddenError):
            certificates.approve(student, request.id)

    def test_teacher_cannot_open(self, certificates: RequestWorkflow, teacher: Actor) -> None:
        with pytest.raises(ForbiddenError):
            certificates.open(teacher, "student-9")

    def test_missing_request(self, certificates: RequestWorkflow, admin: Actor) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            certificates.approve(admin, "missing")
        assert exc_info.value.reason is Reason.REQUEST_NOT_FOUND

    def test_kinds_are_separate(
        self, certificates: RequestWorkflow, grades: RequestWorkflow, teacher: Actor, admin: Actor
    ) -> None:
        grade = grades.open(teacher, "student-9")
        with pytest.raises(NotFoundError):
            certificates.approve(admin, grade.id)


class TestGradeWorkflow:
    """Tests for grade publication (bound to the uploading teacher)."""

    def test_owner_publishes(self, grades: RequestWorkflow, teacher: Actor) -> None:
        grade = grades.open(teacher, "student-9", payload={"marks": 87})
        assert grade.owner_id == teacher.id
        published = grades.approve(teacher, grade.id)
        assert published.status is RequestStatus.APPROVED
        assert published.payload == {"marks": 87}

    def test_other_teacher_refused(self, grades: RequestWorkflow, teacher: Actor) -> None:
        grade = grades.open(teacher, "student-9")
        other = Actor(id="teacher-2", role=Role.TEACHER)
        with pytest.raises(ForbiddenError) as exc_info:
            grades.approve(other, grade.id)
        assert exc_info.value.reason is Reason.NOT_OWNER

    def test_super_admin_bypasses_ownership(self, grades: RequestWorkflow, teacher: Actor, super_admin: Actor) -> None:
        grade = grades.open(teacher, "student-9")
        assert grades.reject(super_admin, grade.id, "regrade").status is RequestStatus.REJECTED

    def test_admin_lacks_grades_grant(self, grades: RequestWorkflow, teacher: Actor, admin: Actor) -> None:
        grade = grades.open(teacher, "student-9")
        with pytest.raises(ForbiddenError) as exc_info:
            grades.approve(admin, grade.id)
        assert exc_info.value.reason is Reason.PERMISSION_DENIED
