#!/usr/bin/env python3
"""Link purchase orders to their RFQs from the command line.

Usage:
    python scripts/link_orders.py [--dry-run]
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from govflow.core.config import get_settings
from govflow.core.logging import get_logger, setup_logging
from govflow.db.session import async_engine, async_session_scope
from govflow.services.workflow.linking import OrderLinkingService

logger = get_logger(__name__)


async def link_orders(dry_run: bool) -> int:
    async with async_session_scope() as session:
        report = await OrderLinkingService(session).link_unlinked_orders(dry_run=dry_run)

    for result in report.results:
        logger.info(
            "order_link",
            po_number=result.po_number,
            rfq_number=result.rfq_number,
            outcome=result.outcome,
            rfq_document_id=result.rfq_document_id,
        )
    for error in report.errors:
        logger.error("order_link_failed", error=error)

    logger.info(
        "link_orders_finished",
        dry_run=dry_run,
        linked=report.linked,
        backfilled=report.backfilled,
        not_found=report.not_found,
    )
    await async_engine.dispose()
    return 1 if report.errors else 0


if __name__ == "__main__":
    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_file=settings.log_file)
    sys.exit(asyncio.run(link_orders(dry_run="--dry-run" in sys.argv)))
