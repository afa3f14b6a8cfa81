"""
Logging setup.

Modules log through `logging.getLogger(__name__)`; this module only
installs the root handler once, at application startup.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
HANDLER_NAME = "budgeteer"


def configure_logging(level: str | int = "INFO") -> None:
    """Attach a single stream handler to the root logger (idempotent)."""
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root.setLevel(level)

    if any(h.get_name() == HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
