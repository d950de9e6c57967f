import logging
from contextlib import contextmanager
from typing import Dict, Optional

from opentelemetry.trace import Tracer

logger = logging.getLogger("uvicorn.error")


@contextmanager
def traced_relay(
    tracer: Tracer,
    operation: str,
    request_path: str,
    remote_ip: Optional[str],
    start_message: str,
    extra_attrs: Optional[Dict] = None,
):
    """Context manager to create a span, set common relay attributes, and log a start message."""
    with tracer.start_as_current_span(operation) as span:
        span.set_attribute("http.target", request_path)
        if remote_ip:
            span.set_attribute("client.address", remote_ip)
        if extra_attrs:
            for k, v in extra_attrs.items():
                span.set_attribute(k, v)
        logger.debug(start_message)
        yield span
