"""
Utility functions for logging relay failures together with their causes.
"""

import logging
from typing import List, Optional

# Guards against cause chains that loop back on themselves
MAX_CHAIN_DEPTH = 10


def _safe_str(obj) -> str:
    """
    Safely convert an object to string, handling cases where __str__ or __repr__ might fail.
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def exception_chain(exception: Optional[BaseException]) -> List[BaseException]:
    """
    Return ``exception`` followed by each exception it was raised from.

    Explicit causes (``raise ... from``) are preferred over implicit context.
    """
    chain = []
    seen = set()
    current = exception
    while current is not None and id(current) not in seen:
        if len(chain) >= MAX_CHAIN_DEPTH:
            break
        chain.append(current)
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return chain


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Optional[BaseException],
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception on one line naming every exception in its cause chain,
    with the chained traceback attached once through ``exc_info``.
    This function never raises, even for broken exception objects or loggers.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Event-Relay]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    try:
        safe_prefix = _safe_str(prefix) if prefix is not None else ""
        if exception is None:
            logger.log(level, f"{safe_prefix} Exception: None")
            return

        logger.log(
            level,
            f"{safe_prefix} {format_exception_message(exception)}",
            exc_info=exception,
        )
    except Exception:
        try:
            logger.log(logging.ERROR, "Exception logging failed")
        except Exception:
            # Nothing left to report to
            pass


def format_exception_message(exception: Optional[BaseException]) -> str:
    """
    Render an exception and its causes on a single line, e.g.
    ``UpstreamTransportError: ... <- ConnectError: ...``.
    """
    try:
        if exception is None:
            return "None"
        return " <- ".join(
            f"{type(exc).__name__}: {_safe_str(exc)}"
            for exc in exception_chain(exception)
        )
    except Exception:
        return "<exception (formatting failed)>"
