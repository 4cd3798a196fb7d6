"""App-logger helpers that stay quiet outside a Flask app context."""

from __future__ import annotations

from flask import current_app, has_app_context


def log_warning(message: str, *args) -> None:
    if not has_app_context():
        return
    logger = getattr(current_app, "logger", None)
    if logger:
        logger.warning(message, *args)


def log_info(message: str, *args) -> None:
    if not has_app_context():
        return
    logger = getattr(current_app, "logger", None)
    if logger:
        logger.info(message, *args)
