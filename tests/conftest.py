"""
Root test configuration.

Test organization:
- unit/        Fast, isolated, in-memory backends only
- integration/ Component boundaries, real I/O to temp locations

Run specific levels:
    pytest tests/unit -v           # Fast feedback loop
    pytest tests/integration -v    # Before commit
    pytest tests -v                # Everything
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from models import AuthUser, User, UserRole
from repositories import configure_backend
from services import Notifier


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast isolated tests")
    config.addinivalue_line("markers", "integration: Component boundary tests")
    config.addinivalue_line("markers", "slow: Tests that take > 1s")


@pytest.fixture(autouse=True)
def reset_backend_registry():
    """No test sees a backend another test configured."""
    configure_backend("memory")
    yield
    configure_backend("memory")


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def owner():
    return User(id="user-owner", login="ada", email="ada@example.com", is_owner=True, role=UserRole.OWNER)


@pytest.fixture
def member():
    return User(id="user-member", login="bob", email="bob@example.com")


@pytest.fixture
def auth_user():
    return AuthUser(id="auth-1", email="grace@example.com", user_metadata={"full_name": "Grace Hopper"})


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    """Add timing summary at end of test run."""
    stats = terminalreporter.stats

    # Collect slowest tests
    if 'passed' in stats:
        durations = []
        for report in stats['passed']:
            if hasattr(report, 'duration'):
                durations.append((report.duration, report.nodeid))

        if durations:
            durations.sort(reverse=True)
            terminalreporter.write_sep("=", "slowest 5 tests")
            for duration, nodeid in durations[:5]:
                terminalreporter.write_line(f"  {duration:.2f}s  {nodeid}")
