"""SNS subscribe entry point."""

import logging
import sys

try:
    # Newer versions
    from pythonjsonlogger.json import JsonFormatter
except ImportError:  # pragma: no cover - fallback for older versions
    from pythonjsonlogger.jsonlogger import JsonFormatter  # type: ignore[attr-defined]

from sns_subscribe import cli
from sns_subscribe.config import settings


def setup_logging() -> None:
    """Configure application logging."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    if settings.log_format == "json":
        formatter: logging.Formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=log_level,
        handlers=[handler],
    )


def main() -> None:
    """Run the sns-subscribe command line."""
    setup_logging()
    sys.exit(cli.main())


if __name__ == "__main__":
    main()
