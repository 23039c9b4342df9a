"""
Structured logging for the recognition engine.

JSON logs with timestamp, event_type, cycle_id/theme_id context.
Use get_logger() in all modules.
"""

from recognition_engine.recognition_logging.logger import bind_cycle, get_logger

__all__ = ["bind_cycle", "get_logger"]
