import logging
import os
from typing import Optional

# Client libraries that log every HTTP round trip at DEBUG/INFO.
_NOISY_LOGGERS = ("urllib3", "google.auth", "multipart")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging defaults for the application."""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if level != "DEBUG":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
