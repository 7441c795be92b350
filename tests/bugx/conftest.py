"""Shared fixtures for BugX tests."""

import pytest

from bugx.config import BugXConfig
from bugx.models import ErrorDetails
from bugx.workflow import BugXIntegrationSystem


class FakeClock:
    """Monotonic clock returning scripted values in seconds."""

    def __init__(self, *values: float):
        self.values = list(values)
        self.last = 0.0

    def __call__(self) -> float:
        if self.values:
            self.last = self.values.pop(0)
        return self.last


@pytest.fixture
def hydration_error():
    """The hydration mismatch from the hub metrics page."""
    return ErrorDetails(
        message="Error: Hydration failed because the server rendered text did not match the client.",
        stack_trace="at HubMetrics (/app/hub/page.tsx:15:3)\nat renderWithHooks (react-dom.js:1:1)",
        code_context="const [activeUsers, setActiveUsers] = useState(Math.random() * 150);",
        file_name="app/hub/page.tsx",
        component="HubMetrics",
    )


@pytest.fixture
def make_system():
    """Factory for integration systems driven by a scripted clock."""
    def factory(*clock_values: float, config: BugXConfig = None, **collaborators):
        clock = FakeClock(*(clock_values or (0.0,)))
        return BugXIntegrationSystem(config or BugXConfig(), clock=clock, **collaborators)
    return factory


@pytest.fixture
def system(make_system):
    """Integration system whose runs take no time."""
    return make_system()
