# Ensure tests import the package from this checkout first, even when an
# older copy of plausible_proxy is installed in the environment.
import logging
import os
import sys

import pytest

SERVICE_ROOT = os.path.dirname(__file__)

if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from plausible_proxy.utils_tests.upstream_mock import RecordingTransport  # noqa: E402


@pytest.fixture
def upstream():
    """Recording stand-in for plausible.io answering 202 "ok"."""
    return RecordingTransport()


@pytest.fixture
def proxy_logs(caplog):
    """Capture what the proxy logs through the uvicorn.error logger."""
    caplog.set_level(logging.DEBUG, logger="uvicorn.error")
    return caplog
