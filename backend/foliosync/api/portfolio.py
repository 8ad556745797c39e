"""
Portfolio API Router.

Query surface for the display layer: holding lookup, forced refresh,
status, settings and a raw storage dump.
"""
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from foliosync.core.exceptions import FolioSyncError, SettingsValidationError
from foliosync.core.redis import get_async_redis
from foliosync.models.user_settings import UserSettings
from foliosync.services.portfolio_query_service import PortfolioQueryService
from foliosync.services.portfolio_sync_service import PortfolioSyncService
from foliosync.services.state_store import StateStore

router = APIRouter()

_query_service: Optional[PortfolioQueryService] = None


async def get_query_service() -> PortfolioQueryService:
    """Process-wide service, so concurrent refreshes share one sync round."""
    global _query_service
    if _query_service is None:
        store = StateStore(await get_async_redis())
        _query_service = PortfolioQueryService(store, PortfolioSyncService(store))
    return _query_service


# ---------- Pydantic Schemas ----------

class HoldingSchema(BaseModel):
    symbol: str
    exchange: str
    name: str
    full_name: str
    pair_id: str
    isin: str
    quantity: float
    avg_price: float
    total_value: float
    currency_symbol: str
    open_time: str
    url: str
    portfolios: list[str]


class MatchResponse(BaseModel):
    match: Optional[HoldingSchema]
    last_sync_timestamp: Optional[datetime]


class RefreshResponse(BaseModel):
    success: bool
    holdings_count: int


class StatusResponse(BaseModel):
    settings: UserSettings
    last_sync_timestamp: Optional[datetime]
    holdings_count: int


class SettingsResponse(BaseModel):
    success: bool
    settings: UserSettings


# ---------- Endpoints ----------

@router.get("/match", response_model=MatchResponse)
async def get_portfolio_match(
    symbol: Optional[str] = None,
    exchange: Optional[str] = None,
    isin: Optional[str] = None,
    pair_id: Optional[str] = None,
    service: PortfolioQueryService = Depends(get_query_service),
):
    """Find the holding for an instrument, refreshing first if the cache is stale."""
    result = await service.get_portfolio_match(
        symbol=symbol, exchange=exchange, isin=isin, pair_id=pair_id
    )
    match = result["match"]
    return MatchResponse(
        match=HoldingSchema.model_validate(match.to_dict()) if match else None,
        last_sync_timestamp=result["last_sync_timestamp"],
    )


@router.post("/refresh", response_model=RefreshResponse)
async def force_refresh(service: PortfolioQueryService = Depends(get_query_service)):
    try:
        holdings_count = await service.force_refresh()
    except FolioSyncError as exc:
        return JSONResponse(status_code=502, content={"error": exc.message})
    return RefreshResponse(success=True, holdings_count=holdings_count)


@router.get("/status", response_model=StatusResponse)
async def get_status(service: PortfolioQueryService = Depends(get_query_service)):
    status = await service.get_status()
    return StatusResponse(**status)


@router.put("/settings", response_model=SettingsResponse)
async def save_settings(
    payload: dict[str, Any] = Body(...),
    service: PortfolioQueryService = Depends(get_query_service),
):
    try:
        user_settings = await service.save_settings(payload)
    except SettingsValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.message)
    return SettingsResponse(success=True, settings=user_settings)


@router.get("/debug")
async def debug_storage(service: PortfolioQueryService = Depends(get_query_service)):
    """Entire persisted state, for troubleshooting."""
    return await service.debug_storage()
