import logging
import logging.config

from app.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# SDK chatter: HTTP clients, AWS, Stripe and the PDF parser
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "botocore", "boto3", "urllib3", "stripe", "pdfminer")


def _resolve_level(level) -> int:
    if isinstance(level, int):
        return level
    name = (level or settings.log_level or "INFO").upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: int | str | None = None) -> None:
    """Route everything to stdout at LOG_LEVEL; third-party SDKs are capped at WARNING."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "default",
                }
            },
            "root": {"level": _resolve_level(level), "handlers": ["stdout"]},
            "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        }
    )
