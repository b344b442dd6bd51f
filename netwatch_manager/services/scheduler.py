import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from netwatch_manager import crud
from netwatch_manager.core.config import get_now, settings
from netwatch_manager.core.constants import NETWATCH_PRINT, ErrorCategory
from netwatch_manager.db.session import SessionLocal
from netwatch_manager.services.error_classifier import classify_exception
from netwatch_manager.services.netwatch import GatewayBuilder, build_gateway, gateway_for_config, open_session
from netwatch_manager.services.sync.reconciler import ReconcileMode, reconcile
from netwatch_manager.services.sync.tasks import persist_mutations
from netwatch_manager.services.sync.transform import rows_to_entries

logger = logging.getLogger(__name__)

POLL_JOB_ID = "netwatch_reconcile"

OUTCOME_OK = "ok"
OUTCOME_NOT_CONFIGURED = "not_configured"
OUTCOME_FAILED = "failed"


@dataclass
class CycleReport:
    outcome: str
    next_interval: int
    category: Optional[ErrorCategory] = None
    error: Optional[str] = None
    devices: int = 0
    entries: int = 0
    mutations: int = 0
    transitions: int = 0


class ReconciliationScheduler:
    """Periodic netwatch reconciliation.

    ``run_cycle()`` is the fault-containment boundary: whatever happens inside a
    cycle is logged with its classified category and reported, never raised.
    The loop is hosted either by ``run()`` (standalone worker) or by
    ``start()``/``stop()`` on an APScheduler AsyncIOScheduler inside the app.
    """

    def __init__(
        self,
        session_factory=SessionLocal,
        gateway_builder: GatewayBuilder = build_gateway,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        default_interval: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.gateway_builder = gateway_builder
        self.sleep = sleep
        # Last interval read from SystemConfig; the settings default until one is read
        self.last_interval = default_interval or settings.DEFAULT_POLLING_INTERVAL
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._stopping = False

    async def run_cycle(self) -> CycleReport:
        """One reconciliation pass. Never raises."""
        try:
            return await self._reconcile_once()
        except Exception as e:
            category = classify_exception(e)
            logger.error(f"[poller] Reconciliation cycle failed ({category.value}): {e}", exc_info=True)
            return CycleReport(
                outcome=OUTCOME_FAILED, next_interval=self.last_interval, category=category, error=str(e),
            )

    async def _reconcile_once(self) -> CycleReport:
        async with self.session_factory() as db:
            # Re-read every cycle so operator edits apply without a restart
            config = await crud.system_config.get_system_config(db)
            if config is not None and config.polling_interval:
                self.last_interval = config.polling_interval
            if config is None or not config.is_configured:
                logger.info(f"[poller] MikroTik not configured; next attempt in {self.last_interval}s")
                return CycleReport(
                    outcome=OUTCOME_NOT_CONFIGURED,
                    next_interval=self.last_interval,
                    category=ErrorCategory.NOT_CONFIGURED,
                )

            logger.info(f"[poller] Checking device statuses on {config.mikrotik_host}")
            async with open_session(gateway_for_config(config, self.gateway_builder)) as session:
                rows = await session.query(NETWATCH_PRINT)
                entries = rows_to_entries(rows)
                devices = await crud.device.get_devices(db)
                mutations = reconcile(devices, entries, now=get_now(), mode=ReconcileMode.POLL)
                transitions = await persist_mutations(db, devices, mutations)

        logger.info(
            f"[poller] Cycle done: devices={len(devices)}, entries={len(entries)}, "
            f"transitions={transitions}; next in {self.last_interval}s"
        )
        return CycleReport(
            outcome=OUTCOME_OK,
            next_interval=self.last_interval,
            devices=len(devices),
            entries=len(entries),
            mutations=len(mutations),
            transitions=transitions,
        )

    async def run(self, max_cycles: Optional[int] = None) -> None:
        """Loop until ``request_stop()`` (or ``max_cycles``), sleeping the freshly read interval."""
        logger.info("[poller] Reconciliation loop started")
        cycles = 0
        while not self._stopping:
            report = await self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            await self.sleep(report.next_interval)
        logger.info("[poller] Reconciliation loop stopped")

    def request_stop(self) -> None:
        self._stopping = True

    def start(self) -> None:
        """Host the loop on an AsyncIOScheduler (must be called with a running event loop)."""
        if self.scheduler is None:
            self._stopping = False
            self.scheduler = AsyncIOScheduler(timezone=timezone.utc)
            self.scheduler.start()
            self._schedule_next(0)
            logger.info("Reconciliation scheduler started")

    def stop(self) -> None:
        self._stopping = True
        if self.scheduler:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
            logger.info("Reconciliation scheduler stopped")

    def _schedule_next(self, delay: float) -> None:
        if not self.scheduler:
            logger.warning("Scheduler not started. Cannot schedule reconciliation.")
            return
        run_date = datetime.now(timezone.utc) + timedelta(seconds=delay)
        self.scheduler.add_job(
            self._scheduled_cycle,
            trigger=DateTrigger(run_date=run_date),
            id=POLL_JOB_ID,
            name="Netwatch reconciliation",
            replace_existing=True,
            misfire_grace_time=None,
        )

    async def _scheduled_cycle(self) -> None:
        report = await self.run_cycle()
        if not self._stopping:
            self._schedule_next(report.next_interval)


# Global scheduler instance
reconciliation_scheduler = ReconciliationScheduler()
