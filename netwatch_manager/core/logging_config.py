import logging

from netwatch_manager.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for the API process and the standalone worker."""
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
    # urllib3 logs every connection attempt at DEBUG/WARNING; keep the poller output readable
    logging.getLogger("urllib3").setLevel(logging.ERROR)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
