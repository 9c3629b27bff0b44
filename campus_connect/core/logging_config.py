"""
Logging setup for the API process.

Modules log through ``logging.getLogger(__name__)``; this only configures the
root handler once at startup.
"""

import logging
import sys

from campus_connect.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = None) -> None:
    level_name = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    # Avoid stacking handlers when uvicorn reloads the app
    if not any(getattr(h, "_campus_connect", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._campus_connect = True
        root.addHandler(handler)

    # Firestore's gRPC transport is noisy at INFO
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
