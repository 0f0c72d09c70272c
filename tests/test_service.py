"""Tests for the AccessService facade."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import Mock

import pytest
from conftest import NOW, PASSWORD, make_application, make_registration

from campusgate import (
    AccessService,
    Actor,
    ConfigurationError,
    GateConfig,
    InMemoryRepository,
    Outcome,
    Role,
    WaitlistAck,
)


@pytest.fixture
def service(repository: InMemoryRepository, notifier: Mock) -> AccessService:
    return AccessService(repository, notifier=notifier, config=GateConfig(hash_iterations=1_000), clock=lambda: NOW)


def application_payload(**overrides: Any) -> dict[str, Any]:
    return make_application(**overrides).model_dump()


class TestDecisions:
    """Tests for the pure decision surface."""

    def test_authorize(self, service: AccessService) -> None:
        assert service.authorize("admin", "update", "students") == Outcome(ok=True, value=True)
        assert service.authorize("admin", "read", "admins").value is False

    def test_can_manage(self, service: AccessService) -> None:
        assert service.can_manage("admin", "faculty").value is True
        assert service.can_manage("admin", "admin").value is False


class TestLifecycleOutcomes:
    """Tests for the lifecycle operations through the facade."""

    def test_submit_returns_ack(self, service: AccessService) -> None:
        outcome = service.submit(application_payload())
        assert outcome.ok
        assert isinstance(outcome.value, WaitlistAck)
        assert outcome.value.email == "asha@uni.edu"
        assert "password" not in outcome.value.model_dump()

    def test_submit_conflict(self, service: AccessService) -> None:
        service.submit(application_payload())
        outcome = service.submit(application_payload())
        assert not outcome.ok
        assert outcome.error_kind == "conflict"
        assert outcome.reason == "already_pending"

    def test_submit_malformed_payload(self, service: AccessService) -> None:
        outcome = service.submit({"email": "not-an-email", "password": PASSWORD, "role": "student"})
        assert outcome.error_kind == "validation_failed"
        assert outcome.reason == "invalid_field"

    def test_approve_then_login(self, service: AccessService, admin: Actor) -> None:
        ack = service.submit(application_payload()).value
        approved = service.approve(admin, ack.id)
        assert approved.ok
        assert approved.value.enrollment_number.startswith("2024CSE")

        outcome = service.login("asha@uni.edu", PASSWORD)
        assert outcome.ok
        assert outcome.value.account.last_login == NOW

    def test_forbidden_message_is_generic(self, service: AccessService, teacher: Actor) -> None:
        ack = service.submit(application_payload()).value
        outcome = service.approve(teacher, ack.id)
        assert outcome.error_kind == "forbidden"
        assert outcome.reason == "permission_denied"
        assert outcome.message == "You do not have permission to perform this action"

    def test_deny_and_login_reason(self, service: AccessService, admin: Actor) -> None:
        ack = service.submit(application_payload()).value
        assert service.deny(admin, ack.id, "Incomplete").ok
        outcome = service.login("asha@uni.edu", PASSWORD)
        assert outcome.error_kind == "authentication_rejected"
        assert outcome.reason == "application_denied"

    def test_invalid_credentials_message(self, service: AccessService) -> None:
        outcome = service.login("nobody@uni.edu", PASSWORD)
        assert outcome.message == "Invalid credentials."

    def test_not_found(self, service: AccessService, admin: Actor) -> None:
        outcome = service.approve(admin, "missing")
        assert outcome.error_kind == "not_found"
        assert outcome.reason == "waitlist_not_found"

    def test_admin_flows(self, service: AccessService, super_admin: Actor) -> None:
        registered = service.register_admin(make_registration().model_dump())
        assert registered.ok
        assert service.approve_admin_registration(super_admin, registered.value.id).ok
        assert service.deactivate_admin(super_admin, registered.value.id).ok
        assert service.login("meera@uni.edu", PASSWORD).reason == "account_deactivated"

    def test_waitlist_views(self, service: AccessService, admin: Actor, super_admin: Actor) -> None:
        service.submit(application_payload())
        service.waitlist_admin(super_admin, make_registration())
        assert len(service.list_waitlist(admin).value) == 1
        assert service.waitlist_stats(super_admin).value["pending"]["total"] == 2

    def test_certificates(self, service: AccessService, student: Actor, admin: Actor) -> None:
        opened = service.request_certificate(student, student.id)
        assert opened.ok
        assert service.approve_certificate(admin, opened.value.id).ok
        again = service.reject_certificate(admin, opened.value.id, "dup")
        assert again.error_kind == "conflict"
        assert again.reason == "not_pending"

    def test_grades(self, service: AccessService, teacher: Actor) -> None:
        opened = service.submit_grade(teacher, "student-1", {"marks": 91})
        other = Actor(id="teacher-2", role=Role.TEACHER)
        assert service.publish_grade(other, opened.value.id).reason == "not_owner"
        assert service.publish_grade(teacher, opened.value.id).ok


class TestFailureContainment:
    """Tests that nothing raw escapes the facade."""

    def test_unexpected_error_is_internal(
        self,
        service: AccessService,
        repository: InMemoryRepository,
        notifier: Mock,
        admin: Actor,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        ack = service.submit(application_payload()).value
        broken = Mock(wraps=repository)
        broken.transaction.side_effect = RuntimeError("disk on fire")
        failing = AccessService(broken, notifier=notifier, clock=lambda: NOW)

        with caplog.at_level(logging.ERROR, logger="campusgate.service"):
            outcome = failing.approve(admin, ack.id)

        assert not outcome.ok
        assert outcome.error_kind == "internal"
        assert outcome.message == "An internal error occurred"
        assert "disk on fire" not in (outcome.message or "")
        assert any("Unexpected error in approve" in r.getMessage() for r in caplog.records)

    def test_rejects_non_conforming_collaborator(self, repository: InMemoryRepository) -> None:
        with pytest.raises(ConfigurationError):
            AccessService(repository, notifier=object())  # type: ignore[arg-type]

    def test_requests_need_a_store(self, notifier: Mock) -> None:
        repository = Mock(spec=[
            "transaction", "find_account_by_email", "find_account_by_id", "create_account",
            "update_account_status", "change_account_role", "delete_account", "identifier_in_use",
            "find_waitlist_by_email", "find_waitlist_by_id", "list_waitlist", "create_waitlist_entry",
            "update_waitlist_status", "delete_waitlist_entry", "find_department",
        ])
        svc = AccessService(repository, notifier=notifier)
        outcome = svc.request_certificate(Actor(id="s1", role=Role.STUDENT), "s1")
        assert outcome.error_kind == "configuration_error"
