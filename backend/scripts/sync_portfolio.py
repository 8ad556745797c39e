#!/usr/bin/env python3
"""
Run one portfolio synchronization round and print the holdings table.

Usage:
    python scripts/sync_portfolio.py [--json]
"""

import asyncio
import json
import logging
import os
import sys
from argparse import ArgumentParser

# Add backend to path
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from foliosync.core.exceptions import LandingPageFetchError
from foliosync.core.redis import create_async_redis
from foliosync.models.holding import table_to_dict
from foliosync.services.portfolio_sync_service import PortfolioSyncService
from foliosync.services.state_store import StateStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def sync_once(as_json: bool = False) -> int:
    """Synchronize and report; returns the number of holdings."""
    redis = create_async_redis()
    try:
        store = StateStore(redis)
        await store.initialize_defaults()
        table = await PortfolioSyncService(store).synchronize()
        state = await store.read()
    finally:
        await redis.aclose()

    if as_json:
        print(json.dumps(table_to_dict(table), indent=2, sort_keys=True))
    else:
        for key, holding in sorted(table.items()):
            print(
                f"{key:<20} qty={holding.quantity:>12,.4f} "
                f"avg={holding.currency_symbol}{holding.avg_price:,.4f} "
                f"value={holding.currency_symbol}{holding.total_value:,.2f}"
            )

    failed = [
        diag for diag in state.debug_info.holdings_per_portfolio.values()
        if not diag.succeeded
    ]
    for diag in failed:
        logger.warning(f"  {diag.numeric_id} ({diag.name}): {diag.status} {diag.error}")

    return len(table)


def main():
    parser = ArgumentParser(description="Synchronize portfolio holdings once")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the holdings table as JSON"
    )
    args = parser.parse_args()

    try:
        result = asyncio.run(sync_once(as_json=args.json))
    except LandingPageFetchError as e:
        logger.error(f"✗ Sync failed: {e}")
        sys.exit(1)

    logger.info(f"✓ Sync completed: {result} holdings")
    sys.exit(0)


if __name__ == "__main__":
    main()
