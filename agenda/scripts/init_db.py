import asyncio
import logging
import sys

from agenda.config import settings
from agenda.database import engine
from agenda.schema.provisioning import ProvisioningError, ProvisioningResult, provision_schema
from agenda.server import configure_logging

logger = logging.getLogger(__name__)


async def init_models() -> ProvisioningResult:
    try:
        return await provision_schema(engine, settings.SERVICE_ROLE)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL.upper())
    try:
        result = asyncio.run(init_models())
    except ProvisioningError:
        logger.critical("Database schema could not be provisioned.", exc_info=True)
        sys.exit(1)
    print(f"Database schema {result.state.value}: {', '.join(result.applied) or 'nothing applied'}")
