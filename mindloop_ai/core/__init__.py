"""
Core utilities for MindLoop-AI.

Logging configuration and Logfire monitoring helpers shared by the server
and the Celery worker.
"""

from mindloop_ai.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
