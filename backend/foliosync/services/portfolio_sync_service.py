"""
Portfolio synchronization round.

Discovers holdings tabs on the landing page, then fetches every tab in two
passes. Phase 1 fetches each tab back to back. Tabs that fail (transport,
HTTP status, or the upstream serving the wrong portfolio) are retried in
Phase 2, one at a time, after a back-off. The state is checkpointed after
Phase 1 and again after every Phase-2 recovery.
"""
import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Awaitable, Callable, List, Optional

from foliosync.core.config import settings
from foliosync.core.exceptions import LandingPageFetchError, PageFetchError
from foliosync.models.holding import HoldingsTable
from foliosync.models.portfolio_tab import PortfolioTab
from foliosync.models.sync_state import DebugInfo, SyncState, TabDiagnostic, TabStatus
from foliosync.services.holdings_aggregator import fold
from foliosync.services.portfolio_page_client import PortfolioPageClient
from foliosync.services.row_extractor import extract
from foliosync.services.state_store import StateStore
from foliosync.services.tab_discoverer import discover, selected_tab_id

logger = logging.getLogger(__name__)


@dataclass
class TabOutcome:
    tab: PortfolioTab
    diagnostic: TabDiagnostic
    holdings: Optional[HoldingsTable] = None

    @property
    def succeeded(self) -> bool:
        return self.diagnostic.succeeded


class PortfolioSyncService:
    def __init__(
        self,
        store: StateStore,
        client_factory: Optional[Callable[[], PortfolioPageClient]] = None,
        retry_backoff_sec: Optional[float] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.client_factory = client_factory or PortfolioPageClient
        self.retry_backoff_sec = (
            settings.RETRY_BACKOFF_SEC if retry_backoff_sec is None else retry_backoff_sec
        )
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or (lambda: datetime.now(UTC))
        self._inflight: Optional[asyncio.Task] = None

    async def synchronize(self) -> HoldingsTable:
        """
        Run one synchronization round and return the aggregated table.

        Overlapping callers in the same process share the in-flight round.
        Only a landing-page failure or a storage error is raised.
        """
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._run_round())
        else:
            logger.info("Joining in-flight portfolio sync")
        return await asyncio.shield(self._inflight)

    async def _run_round(self) -> HoldingsTable:
        started = self._clock()
        async with self.client_factory() as client:
            try:
                landing = await client.fetch_landing_page()
            except PageFetchError as exc:
                logger.error("Portfolio landing page fetch failed: %s", exc.message)
                raise LandingPageFetchError(
                    exc.url, status_code=exc.status_code, reason=exc.reason
                ) from exc

            tabs = discover(landing)
            debug = DebugInfo(portfolios_found=[tab.to_dict() for tab in tabs])
            logger.info("Discovered %d holdings portfolios", len(tabs))

            pending: List[PortfolioTab] = []
            for tab in tabs:
                if tab.addressable:
                    pending.append(tab)
                    continue
                logger.warning(
                    "Skipping portfolio %s (%s): no public id", tab.numeric_id, tab.name
                )
                debug.holdings_per_portfolio[tab.numeric_id] = TabDiagnostic(
                    numeric_id=tab.numeric_id,
                    name=tab.name,
                    status=TabStatus.SKIPPED_NO_PUBLIC_ID,
                    expected_id=tab.numeric_id,
                    phase=0,
                )

            table: HoldingsTable = {}
            deferred: List[PortfolioTab] = []
            for tab in pending:
                outcome = await self._fetch_tab(client, tab, phase=1)
                table = self._apply(table, debug, outcome)
                if not outcome.succeeded:
                    logger.warning(
                        "Deferring portfolio %s (%s): %s",
                        tab.numeric_id,
                        tab.name,
                        outcome.diagnostic.error or outcome.diagnostic.status,
                    )
                    deferred.append(tab)

            await self._checkpoint(table, debug)

            recovered = 0
            for tab in deferred:
                await self._sleep(self.retry_backoff_sec)
                outcome = await self._fetch_tab(client, tab, phase=2)
                table = self._apply(table, debug, outcome)
                if outcome.succeeded:
                    recovered += 1
                    await self._checkpoint(table, debug)
                else:
                    logger.error(
                        "Portfolio %s (%s) failed after retry: %s",
                        tab.numeric_id,
                        tab.name,
                        outcome.diagnostic.error or outcome.diagnostic.status,
                    )

        elapsed = (self._clock() - started).total_seconds()
        logger.info(
            "Portfolio sync finished: %d holdings from %d portfolios "
            "(%d deferred, %d recovered) in %.1fs",
            len(table),
            len(pending),
            len(deferred),
            recovered,
            elapsed,
        )
        return table

    async def _fetch_tab(
        self, client: PortfolioPageClient, tab: PortfolioTab, phase: int
    ) -> TabOutcome:
        diagnostic = TabDiagnostic(
            numeric_id=tab.numeric_id,
            name=tab.name,
            url=client.portfolio_url(tab.public_id),
            expected_id=tab.numeric_id,
            phase=phase,
        )

        try:
            markup = await client.fetch_portfolio_page(tab.public_id)
        except PageFetchError as exc:
            diagnostic.status = (
                TabStatus.HTTP_ERROR if exc.status_code is not None else TabStatus.TRANSPORT_ERROR
            )
            diagnostic.status_code = exc.status_code
            diagnostic.error = exc.message
            return TabOutcome(tab, diagnostic)

        observed = selected_tab_id(markup)
        diagnostic.observed_id = observed
        if observed != tab.numeric_id:
            diagnostic.status = TabStatus.IDENTITY_MISMATCH
            diagnostic.error = (
                f"expected portfolio {tab.numeric_id}, page selected {observed or 'none'}"
            )
            return TabOutcome(tab, diagnostic)

        try:
            holdings = extract(markup)
        except Exception as exc:
            logger.exception("Failed to parse portfolio %s", tab.numeric_id)
            diagnostic.status = TabStatus.PARSE_ERROR
            diagnostic.error = str(exc)
            return TabOutcome(tab, diagnostic)

        portfolios = [tab.name] if tab.name else []
        tagged = {
            key: replace(holding, portfolios=list(portfolios))
            for key, holding in holdings.items()
        }
        diagnostic.row_count = len(tagged)
        return TabOutcome(tab, diagnostic, tagged)

    def _apply(
        self, table: HoldingsTable, debug: DebugInfo, outcome: TabOutcome
    ) -> HoldingsTable:
        debug.holdings_per_portfolio[outcome.tab.numeric_id] = outcome.diagnostic
        if not outcome.succeeded or not outcome.holdings:
            return table
        return fold(table, outcome.holdings.values())

    async def _checkpoint(self, table: HoldingsTable, debug: DebugInfo) -> None:
        state = SyncState(
            holdings_table=dict(table),
            last_sync_timestamp=self._clock(),
            debug_info=DebugInfo.from_dict(debug.to_dict()),
        )
        await self.store.replace(state)
        logger.info("Checkpointed %d holdings", len(table))
