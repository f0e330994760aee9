import pytest

from appender.config import Settings
from appender.models import ForwardOutcome


class StubForwarder:
    """Records calls and replays a canned outcome."""

    def __init__(self, outcome: ForwardOutcome | None = None):
        self.outcome = outcome or ForwardOutcome(status_code=200, body=b'{"status": "success"}')
        self.calls = []

    async def post(self, url: str, body: bytes) -> ForwardOutcome:
        self.calls.append((url, body))
        return self.outcome


@pytest.fixture
def settings(tmp_path):
    return Settings(pod_name="test-pod", static_dir=str(tmp_path))


@pytest.fixture
def forwarding_settings(settings):
    return Settings(
        pod_name=settings.pod_name,
        target_url="http://target.local/append",
        static_dir=settings.static_dir,
    )


@pytest.fixture
def stub_forwarder():
    return StubForwarder()
