import anyio
import pytest
import sse_starlette
from packaging import version

from tests.wordpress_site import FakeWordPress, RecordingClientFactory
from wordpress_mcp.credentials import WordPressConfig


@pytest.fixture
def anyio_backend():
    return "asyncio"


SSE_STARLETTE_VERSION = version.parse(sse_starlette.__version__)
NEEDS_RESET = SSE_STARLETTE_VERSION < version.parse("3.0.0")


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """Reset sse-starlette's global AppStatus singleton before each test.

    Before sse-starlette 3.0, AppStatus.should_exit_event is a module-level
    event that gets bound to the first event loop that touches it.
    """
    if not NEEDS_RESET:
        yield
        return

    from sse_starlette.sse import AppStatus

    AppStatus.should_exit_event = anyio.Event()  # type: ignore[attr-defined]
    yield
    AppStatus.should_exit_event = anyio.Event()  # type: ignore[attr-defined]


@pytest.fixture
def wordpress() -> FakeWordPress:
    return FakeWordPress()


@pytest.fixture
def client_factory(wordpress: FakeWordPress) -> RecordingClientFactory:
    return RecordingClientFactory(wordpress)


@pytest.fixture
def empty_config() -> WordPressConfig:
    return WordPressConfig()
