import sys
import logging
from typing import Any

from loguru import logger

from care_site.config.settings import settings

SENSITIVE_KEYS = ["key", "token", "password", "secret", "authorization"]


def mask_secret(value: str) -> str:
    """Keeps the first and last four characters of long secrets."""
    if len(value) > 8:
        return value[:4] + "****" + value[-4:]
    return "********"


def sensitive_data_filter(record: dict[str, Any]) -> bool:
    """Filter function to mask sensitive data in log records."""

    def mask_value(name: str, value: Any) -> Any:
        if isinstance(value, str):
            if any(sk in name.lower() for sk in SENSITIVE_KEYS):
                return mask_secret(value)
            return value
        if isinstance(value, dict):
            return {k: mask_value(str(k), v) for k, v in value.items()}
        if isinstance(value, list):
            return [mask_value(name, item) for item in value]
        return value

    if "extra" in record and isinstance(record["extra"], dict):
        for extra_key in list(record["extra"]):
            record["extra"][extra_key] = mask_value(
                extra_key, record["extra"][extra_key]
            )

    # The anon key is embedded in request headers that postgrest/httpx may echo
    if settings.supabase_key and settings.supabase_key in record["message"]:
        record["message"] = record["message"].replace(settings.supabase_key, "********")

    return True  # Keep the record after filtering/masking


class InterceptHandler(logging.Handler):
    """Routes standard logging records (httpx, postgrest) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging() -> None:
    """Configures Loguru logger based on application settings."""
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=False,
        filter=sensitive_data_filter,
    )

    logger.info(f"Logging initialized with level: {settings.log_level}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.debug("Standard logging intercepted.")
