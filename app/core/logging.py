import logging

from core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # SQL echo is controlled by DB_ECHO_LOG, keep the engine logger quiet otherwise
    if not settings.DB_ECHO_LOG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
