import os

DEFAULT_LOCAL_PATH = "/js/plausible_script.js"
DEFAULT_SCRIPT_EXTENSION = "script.js"
DEFAULT_REMOTE_IP_HEADERS = ("fly-client-ip", "x-real-ip")
DEFAULT_BASE_URL = "https://plausible.io"

SERVICE_NAME = os.getenv("SERVICE_NAME", "plausible-proxy")

PLAUSIBLE_LOCAL_PATH = os.environ.get("PLAUSIBLE_LOCAL_PATH", DEFAULT_LOCAL_PATH)
PLAUSIBLE_SCRIPT_EXTENSION = os.environ.get(
    "PLAUSIBLE_SCRIPT_EXTENSION", DEFAULT_SCRIPT_EXTENSION
)
PLAUSIBLE_BASE_URL = os.environ.get("PLAUSIBLE_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
# Checked in order, first header present on the request wins
PLAUSIBLE_REMOTE_IP_HEADERS = [
    h.strip().lower()
    for h in os.getenv(
        "PLAUSIBLE_REMOTE_IP_HEADERS", ",".join(DEFAULT_REMOTE_IP_HEADERS)
    ).split(",")
    if h.strip()
]
PLAUSIBLE_REQUIRE_EVENT_POST = (
    os.getenv("PLAUSIBLE_REQUIRE_EVENT_POST", "false").lower() == "true"
)
# Seconds; empty means no timeout
PLAUSIBLE_PROXY_TIMEOUT = os.getenv("PLAUSIBLE_PROXY_TIMEOUT", "")
