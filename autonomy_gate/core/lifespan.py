import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging

from autonomy_gate.core.config import settings
from autonomy_gate.core.config.autonomy import get_role_catalog
from autonomy_gate.core.verdict_cache import purge_expired_verdicts

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    catalog = get_role_catalog()
    logger.info("role_catalog_loaded roles=%s fallback=%s", len(catalog), catalog.fallback_role)

    if not settings.verdict_cache_enabled:
        yield
        return

    purge_expired_verdicts()
    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = purge_expired_verdicts()
                if deleted:
                    logger.info("verdict_cache_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover - purge must not take the app down
                logger.warning("verdict_cache_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=3600)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
