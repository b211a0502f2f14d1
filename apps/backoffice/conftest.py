"""
Pytest configuration for back-office app tests.
"""

import pytest

from apps.backoffice.core.identity import Caller
from apps.backoffice.core.models import User
from apps.backoffice.core.tests.factories import AdminFactory, UserFactory
from apps.backoffice.core.tests.fakes import RecordingAuditSink, RecordingNotifier


@pytest.fixture
def user() -> User:
    """Create a customer."""
    return UserFactory(username="testuser", email="testuser@example.com")


@pytest.fixture
def admin() -> User:
    """Create an admin."""
    return AdminFactory(username="boss", email="boss@example.com")


@pytest.fixture
def customer(user: User) -> Caller:
    return Caller.from_user(user)


@pytest.fixture
def admin_caller(admin: User) -> Caller:
    return Caller.from_user(admin)


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
