"""
Standalone reconciliation worker.

Usage:
  python -m netwatch_manager.worker        (or the `netwatch-worker` script)

Runs the netwatch polling loop outside the API process; set EMBEDDED_POLLER=false
for the API when this worker is deployed. Apply migrations first (migrate.py).
"""
import asyncio
import logging

from netwatch_manager.core.logging_config import setup_logging
from netwatch_manager.services.scheduler import ReconciliationScheduler

logger = logging.getLogger(__name__)


async def run_worker() -> None:
    await ReconciliationScheduler().run()


def main() -> int:
    setup_logging()
    logger.info("Starting netwatch reconciliation worker")
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        logger.info("Worker interrupted; exiting")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
