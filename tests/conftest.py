"""Shared fixtures: a seeded in-memory store, fixed clock and actors."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any
from unittest.mock import Mock

import pytest

from campusgate import (
    Account,
    Actor,
    AdminRegistration,
    Application,
    Department,
    GateConfig,
    InMemoryRepository,
    Pbkdf2Hasher,
    Role,
)
from campusgate.lifecycle import LifecycleContext

NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)
CSE_ID = "dept-cse"
PASSWORD = "secret-pass"


def make_application(role: str = "student", **overrides: Any) -> Application:
    fields: dict[str, Any] = {
        "email": "asha@uni.edu",
        "password": PASSWORD,
        "role": role,
        "first_name": "Asha",
        "last_name": "Rao",
        "department_id": CSE_ID,
    }
    if role == "student":
        fields.update(semester=3, admission_year=2024)
    else:
        fields.update(
            email="ravi@uni.edu",
            first_name="Ravi",
            last_name="Iyer",
            designation="Assistant Professor",
            qualification="PhD",
            joining_date=date(2020, 7, 1),
        )
    fields.update(overrides)
    return Application(**fields)


def make_registration(**overrides: Any) -> AdminRegistration:
    fields: dict[str, Any] = {
        "email": "meera@uni.edu",
        "password": PASSWORD,
        "confirm_password": PASSWORD,
        "first_name": "Meera",
        "last_name": "Nair",
    }
    fields.update(overrides)
    return AdminRegistration(**fields)


def seed_account(ctx: LifecycleContext, role: Role, email: str, **fields: Any) -> Account:
    """Store a verified, active account directly, bypassing the lifecycle."""
    fields.setdefault("is_verified", True)
    account = Account.with_plaintext_credential(ctx.hasher, PASSWORD, email=email, role=role, **fields)
    return ctx.repository.create_account(account)


@pytest.fixture
def repository() -> InMemoryRepository:
    repo = InMemoryRepository()
    repo.add_department(Department(id=CSE_ID, code="cse", name="Computer Science"))
    return repo


@pytest.fixture
def config() -> GateConfig:
    return GateConfig(hash_iterations=1_000)


@pytest.fixture
def hasher(config: GateConfig) -> Pbkdf2Hasher:
    return Pbkdf2Hasher(config.hash_iterations)


@pytest.fixture
def notifier() -> Mock:
    return Mock(spec=["notify_approval", "notify_denial"])


@pytest.fixture
def ctx(repository: InMemoryRepository, config: GateConfig, hasher: Pbkdf2Hasher, notifier: Mock) -> LifecycleContext:
    return LifecycleContext(
        repository=repository,
        notifier=notifier,
        hasher=hasher,
        config=config,
        clock=lambda: NOW,
    )


@pytest.fixture
def super_admin() -> Actor:
    return Actor(id="root", role=Role.SUPER_ADMIN)


@pytest.fixture
def admin() -> Actor:
    return Actor(id="admin-1", role=Role.ADMIN)


@pytest.fixture
def teacher() -> Actor:
    return Actor(id="teacher-1", role=Role.TEACHER)


@pytest.fixture
def student() -> Actor:
    return Actor(id="student-1", role=Role.STUDENT)
