"""Tests for applicant intake into the waitlist."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from conftest import PASSWORD, make_application

from campusgate import (
    Account,
    ConflictError,
    Reason,
    Role,
    ValidationFailedError,
    WaitlistStatus,
)
from campusgate.lifecycle import LifecycleContext, submit


class TestSubmit:
    """Tests for the happy path."""

    def test_student_waitlisted(self, ctx: LifecycleContext) -> None:
        entry = submit(ctx, make_application())
        assert entry.status is WaitlistStatus.PENDING
        assert entry.role is Role.STUDENT
        assert entry.semester == 3
        assert entry.designation is None
        stored = ctx.repository.find_waitlist_by_email("asha@uni.edu")
        assert stored is not None and stored.id == entry.id

    def test_credential_hashed(self, ctx: LifecycleContext) -> None:
        entry = submit(ctx, make_application())
        assert entry.password_hash != PASSWORD
        assert ctx.hasher.verify(PASSWORD, entry.password_hash)
        assert "password_hash" not in entry.model_dump()
        assert PASSWORD not in repr(entry)

    def test_hashed_exactly_once(self, ctx: LifecycleContext) -> None:
        spy = Mock(wraps=ctx.hasher)
        spied = LifecycleContext(repository=ctx.repository, hasher=spy, config=ctx.config, clock=ctx.clock)
        submit(spied, make_application())
        spy.hash.assert_called_once_with(PASSWORD)

    def test_faculty_alias(self, ctx: LifecycleContext) -> None:
        entry = submit(ctx, make_application("faculty"))
        assert entry.role is Role.TEACHER
        assert entry.qualification == "PhD"
        assert entry.semester is None

    def test_email_normalized(self, ctx: LifecycleContext) -> None:
        entry = submit(ctx, make_application(email="  Asha@Uni.EDU "))
        assert entry.email == "asha@uni.edu"

    def test_submitted_at_from_clock(self, ctx: LifecycleContext) -> None:
        entry = submit(ctx, make_application())
        assert entry.submitted_at == ctx.clock()


class TestSubmitRejections:
    """Tests for the ordered intake checks."""

    def test_duplicate_account(self, ctx: LifecycleContext) -> None:
        ctx.repository.create_account(
            Account.with_plaintext_credential(ctx.hasher, PASSWORD, email="asha@uni.edu", role=Role.STUDENT)
        )
        with pytest.raises(ConflictError) as exc_info:
            submit(ctx, make_application())
        assert exc_info.value.reason is Reason.DUPLICATE_ACTIVE

    def test_duplicate_checked_before_role(self, ctx: LifecycleContext) -> None:
        ctx.repository.create_account(
            Account.with_plaintext_credential(ctx.hasher, PASSWORD, email="asha@uni.edu", role=Role.STUDENT)
        )
        with pytest.raises(ConflictError) as exc_info:
            submit(ctx, make_application(role="admin", email="asha@uni.edu"))
        assert exc_info.value.reason is Reason.DUPLICATE_ACTIVE

    def test_already_pending(self, ctx: LifecycleContext) -> None:
        submit(ctx, make_application())
        with pytest.raises(ConflictError) as exc_info:
            submit(ctx, make_application(email="ASHA@uni.edu"))
        assert exc_info.value.reason is Reason.ALREADY_PENDING

    def test_previously_denied(self, ctx: LifecycleContext) -> None:
        entry = submit(ctx, make_application())
        ctx.repository.update_waitlist_status(entry.id, WaitlistStatus.DENIED, reason="incomplete")
        with pytest.raises(ConflictError) as exc_info:
            submit(ctx, make_application())
        assert exc_info.value.reason is Reason.PREVIOUSLY_DENIED

    @pytest.mark.parametrize("role", ["admin", "super_admin", "wizard"])
    def test_invalid_role(self, ctx: LifecycleContext, role: str) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            submit(ctx, make_application(role=role))
        assert exc_info.value.reason is Reason.INVALID_ROLE

    def test_missing_student_fields(self, ctx: LifecycleContext) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            submit(ctx, make_application(semester=None, admission_year=None))
        err = exc_info.value
        assert err.reason is Reason.MISSING_ROLE_FIELDS
        assert err.details["fields"] == ["semester", "admission_year"]

    def test_missing_teacher_fields(self, ctx: LifecycleContext) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            submit(ctx, make_application("teacher", joining_date=None))
        assert exc_info.value.details["fields"] == ["joining_date"]

    def test_department_not_found(self, ctx: LifecycleContext) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            submit(ctx, make_application(department_id="dept-missing"))
        assert exc_info.value.reason is Reason.DEPARTMENT_NOT_FOUND

    def test_department_required(self, ctx: LifecycleContext) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            submit(ctx, make_application(department_id=None))
        assert exc_info.value.reason is Reason.DEPARTMENT_NOT_FOUND

    def test_short_password(self, ctx: LifecycleContext) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            submit(ctx, make_application(password="abc"))
        assert exc_info.value.details["field"] == "password"

    def test_nothing_persisted_on_rejection(self, ctx: LifecycleContext) -> None:
        with pytest.raises(ValidationFailedError):
            submit(ctx, make_application(department_id="dept-missing"))
        assert ctx.repository.list_waitlist() == []
