import logging
from typing import Optional

import httpx

from foliosync.core.config import settings
from foliosync.core.exceptions import PageFetchError

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


class PortfolioPageClient:
    """
    Fetches portfolio pages over an already-authenticated session.

    The session cookie is forwarded as-is; the client never logs in.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        id_param: Optional[str] = None,
        session_cookie: Optional[str] = None,
        timeout_sec: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or settings.PORTFOLIO_BASE_URL
        self.id_param = id_param or settings.PORTFOLIO_ID_PARAM
        self.session_cookie = (
            settings.PORTFOLIO_SESSION_COOKIE if session_cookie is None else session_cookie
        )
        self.timeout_sec = settings.FETCH_TIMEOUT_SEC if timeout_sec is None else timeout_sec
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "PortfolioPageClient":
        headers = {"User-Agent": settings.PORTFOLIO_USER_AGENT}
        if self.session_cookie:
            headers["Cookie"] = self.session_cookie
        self._client = httpx.AsyncClient(
            timeout=self.timeout_sec,
            headers=headers,
            follow_redirects=True,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def portfolio_url(self, public_id: str) -> str:
        url = httpx.URL(self.base_url).copy_merge_params({self.id_param: public_id})
        return str(url)

    async def fetch_landing_page(self) -> str:
        return await self._get(self.base_url)

    async def fetch_portfolio_page(self, public_id: str) -> str:
        return await self._get(self.portfolio_url(public_id), headers=NO_CACHE_HEADERS)

    async def _get(self, url: str, headers: Optional[dict[str, str]] = None) -> str:
        if self._client is None:
            raise RuntimeError("PortfolioPageClient must be used as an async context manager")
        try:
            response = await self._client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise PageFetchError(url, reason=str(exc) or exc.__class__.__name__) from exc
        if not response.is_success:
            raise PageFetchError(url, status_code=response.status_code)
        return response.text
