import logging
import sys

import uvicorn
from pydantic import ValidationError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Reduce verbosity of third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def main() -> None:
    configure_logging()
    try:
        from agenda.config import settings
    except ValidationError as e:
        logger.critical("Required environment variables are missing or invalid. Check your .env file.\n%s", e)
        sys.exit(1)

    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())
    # Startup failures (schema provisioning) make uvicorn exit with a non-zero status
    uvicorn.run("agenda.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
