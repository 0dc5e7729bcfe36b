"""
app_logger.py

Application logger set-up.

All modules log through `logging.getLogger(__name__)`; names under the `app`
package are routed to the `dojo` logger configured here so uvicorn or any
dictConfig on the root logger decides the final format.
"""

import logging

from app.core.config import settings

APP_LOGGER_NAME = "dojo"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure the `dojo` and `app` loggers without touching the root logger."""
    resolved = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(resolved)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        logger.addHandler(handler)
    logger.propagate = False

    # module loggers live under "app.*"
    app_logger = logging.getLogger("app")
    app_logger.setLevel(resolved)
    if logger.handlers and not app_logger.handlers:
        for h in logger.handlers:
            app_logger.addHandler(h)
    app_logger.propagate = False
    return logger
