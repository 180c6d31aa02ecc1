"""
Test conftest: isolate TYPEWRITER_* environment variables so tests never pick
up a developer's local configuration, and capture structlog events for
assertions.
"""
import os

import pytest
from structlog.testing import capture_logs

_ENV_PREFIX = "TYPEWRITER_"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Remove TYPEWRITER_* env vars."""
    for var in list(os.environ):
        if var.upper().startswith(_ENV_PREFIX):
            monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def captured_logs():
    """Every structlog event emitted during the test, as a list of dicts."""
    with capture_logs() as entries:
        yield entries
