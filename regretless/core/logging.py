"""
Logging setup.

One call at start-up; every module then uses `logging.getLogger(__name__)`.
Output goes to stdout so Gunicorn / the container runtime captures it.
"""
import logging
import sys

from regretless.core.config import settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=_FORMAT,
        stream=sys.stdout,
    )
