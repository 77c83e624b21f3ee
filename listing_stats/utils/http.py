# listing_stats/utils/http.py
import asyncio, random, time
from urllib.parse import urlparse
import httpx
from loguru import logger
from listing_stats import config

HTTP_TIMEOUT_S        = float(config.HTTP_TIMEOUT)
HTTP_MAX_RETRIES      = int(config.HTTP_MAX_RETRIES)
HTTP_BACKOFF_BASE     = float(config.HTTP_BACKOFF_BASE)
HTTP_RATE_GAP_DEFAULT = float(config.HTTP_RATE_GAP_DEFAULT)

_RATE_GAP_BY_HOST = {
    "www.otodom.pl": 5.0,
    "otodom.pl":     5.0,
}

RETRY_STATUSES = (429, 503)


class Http:
    """HTTP client with retry, backoff and a per-host gap between requests."""
    _last_hit: dict[str, float] = {}  # host -> last monotonic time

    def __init__(self):
        self.client = httpx.AsyncClient(
            timeout=HTTP_TIMEOUT_S,
            follow_redirects=True,
            http2=True,
            headers={
                "User-Agent": config.USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "pl-PL,pl;q=0.9,en;q=0.8",
            },
            proxy=config.PROXY_URL or None,
        )

    async def _respect_rate_gap(self, host: str):
        gap = _RATE_GAP_BY_HOST.get(host, HTTP_RATE_GAP_DEFAULT)
        now = time.monotonic()
        last = self._last_hit.get(host, 0.0)
        wait = (last + gap) - now
        if wait > 0:
            await asyncio.sleep(wait)
        self._last_hit[host] = time.monotonic()

    def _backoff(self, attempt: int) -> float:
        return (HTTP_BACKOFF_BASE ** attempt) + random.uniform(0, 0.5)

    async def get_text(self, url: str, *, max_retries: int | None = None) -> str:
        host = urlparse(url).netloc.lower()
        retries = HTTP_MAX_RETRIES if max_retries is None else max_retries
        attempt = 0
        last_exc: Exception | None = None

        while attempt <= retries:
            await self._respect_rate_gap(host)
            try:
                r = await self.client.get(url)

                if r.status_code in RETRY_STATUSES:
                    ra = r.headers.get("Retry-After")
                    sleep_s = float(ra) if (ra and ra.isdigit()) else self._backoff(attempt)
                    logger.warning(f"{url} -> {r.status_code}, retry {attempt + 1}/{retries} in {sleep_s:.1f}s")
                    last_exc = httpx.HTTPStatusError(f"{r.status_code} from {url}", request=r.request, response=r)
                    await asyncio.sleep(sleep_s)
                    attempt += 1
                    continue

                r.raise_for_status()
                logger.debug(f"{url} -> {r.status_code}, {len(r.text)} chars")
                return r.text

            except (httpx.ReadTimeout, httpx.ConnectTimeout, httpx.RemoteProtocolError) as e:
                last_exc = e
                logger.warning(f"{url} -> {type(e).__name__}, retry {attempt + 1}/{retries}")
                await asyncio.sleep(self._backoff(attempt))
                attempt += 1
                continue

        raise last_exc or RuntimeError("Upstream failed after retries")

    async def close(self):
        await self.client.aclose()
