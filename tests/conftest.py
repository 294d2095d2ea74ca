import httpx
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Hypothesis configuration for property-based testing
from hypothesis import settings
from remote_yt.api import RemoteYtClient
from tests.helpers.fake_server import FakeServerState, create_app
from tests.mocks import ScriptedClient

# Register Hypothesis profiles
settings.register_profile("fast", max_examples=50, deadline=None)
settings.register_profile("thorough", max_examples=1000, deadline=None)
settings.load_profile("fast")  # Default to fast profile


def pytest_collection_modifyitems(items):
    """Automatically order tests: unit tests first, then property tests, then E2E tests.

    Individual tests marked with @pytest.mark.order("last") will run at the very end.
    """
    for item in items:
        # Skip if item already has explicit order marker
        if hasattr(item, 'get_closest_marker') and item.get_closest_marker('order'):
            continue

        # Assign order based on test file name
        test_file = str(item.fspath)
        if 'test_unit_' in test_file:
            item.add_marker(pytest.mark.order(1))
        elif 'test_props_' in test_file:
            item.add_marker(pytest.mark.order(2))
        elif 'test_e2e_' in test_file:
            item.add_marker(pytest.mark.order(3))


@pytest.fixture
def scripted_client():
    """Mock RemoteYtClient with an empty current snapshot."""
    return ScriptedClient()


@pytest.fixture
def fake_server():
    """Fresh in-memory server state."""
    return FakeServerState()


@pytest.fixture
def make_client(fake_server):
    """Factory for RemoteYtClient instances wired to the fake server.

    Clients are created inside the test's event loop and must be closed there.
    """
    app = create_app(fake_server)

    def factory() -> RemoteYtClient:
        return RemoteYtClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app))

    return factory
