"""
Test that recognition_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from recognition_logging and use the logger."""
    from recognition_engine.recognition_logging import bind_cycle, get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "warning")
    logger.info("test_message", key="value")
    bind_cycle("cycle-1").info("test_cycle_message")
