"""
Logging setup shared by the gateway, the MCP tool server and the CLI.

Provides a consistent format so that a question can be followed from
the HTTP request through generation, validation and execution.
"""

import logging
import uuid


def setup_logging(service_name: str, level: str = "INFO") -> logging.Logger:
    """
    Configure logging for a process entry point.

    Args:
        service_name: Name of the service (used as logger name).
        level: Log level string (e.g. 'INFO', 'DEBUG').

    Returns:
        Configured logger instance.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s  %(name)-34s  %(levelname)-7s  %(message)s",
    )
    return logging.getLogger(service_name)


def generate_request_id() -> str:
    """Generate a short id used to correlate log lines of one request."""
    return uuid.uuid4().hex[:12]
