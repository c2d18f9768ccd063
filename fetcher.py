"""
HTTP fetch layer - sync (requests) and async (aiohttp) page fetchers
"""
import asyncio
import random
import time
import logging
from dataclasses import dataclass
from typing import Dict, List

import aiohttp
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config import config
from models import ResponseMeta

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Accept-Encoding': 'gzip, deflate',
    'Connection': 'keep-alive',
}


class FetchError(Exception):
    """Raised when a page cannot be fetched at all"""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Could not fetch {url}: {reason}")
        self.url = url
        self.reason = reason


@dataclass(frozen=True)
class FetchResult:
    """Fetched HTML plus the response metadata the analyzer needs"""
    meta: ResponseMeta
    html: str


def lowercase_headers(headers) -> Dict[str, str]:
    return {str(key).lower(): str(value) for key, value in headers.items()}


class PageFetcher:
    """requests session with retry logic, redirect following and TTFB timing"""

    def __init__(self, timeout: int = None, max_retries: int = None,
                 backoff_factor: float = None, user_agents: List[str] = None):
        self.timeout = timeout or config.timeout
        self.user_agents = user_agents or config.user_agents
        self.session = requests.Session()

        # Configure retry strategy
        retry_strategy = Retry(
            total=config.max_retries if max_retries is None else max_retries,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            backoff_factor=config.backoff_factor if backoff_factor is None else backoff_factor,
            raise_on_status=False
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update(DEFAULT_HEADERS)

    def get_text(self, url: str) -> str:
        """Fetch a text resource, raising FetchError on any non-2xx response"""
        result = self.fetch(url)
        if not 200 <= result.meta.status < 300:
            raise FetchError(url, f"HTTP {result.meta.status}")
        return result.html

    def fetch(self, url: str) -> FetchResult:
        """Fetch url following redirects; non-2xx statuses are returned, not raised"""
        self.session.headers['User-Agent'] = random.choice(self.user_agents)

        try:
            start_time = time.perf_counter()
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True, stream=True)
            ttfb = (time.perf_counter() - start_time) * 1000
            html = response.text
        except requests.exceptions.Timeout:
            logger.error(f"Timeout error for {url}")
            raise FetchError(url, "timeout")
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error for {url}: {e}")
            raise FetchError(url, "connection error")
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {url}: {e}")
            raise FetchError(url, str(e))

        if response.status_code != 200:
            logger.warning(f"HTTP {response.status_code} for {url}")

        meta = ResponseMeta(
            url=url,
            final_url=response.url,
            status=response.status_code,
            headers=lowercase_headers(response.headers),
            ttfb_millis=round(ttfb),
        )
        logger.debug(f"Fetched {url} -> {response.url} in {ttfb:.0f}ms")
        return FetchResult(meta=meta, html=html)

    def close(self):
        self.session.close()


class AsyncPageFetcher:
    """aiohttp client with a concurrency limit, used for sitemap crawls"""

    def __init__(self, max_concurrent: int = None, timeout: int = None):
        self.max_concurrent = max_concurrent or config.max_concurrent
        self.timeout = timeout or config.timeout
        self.session = None
        self.semaphore = asyncio.Semaphore(self.max_concurrent)

    async def __aenter__(self):
        connector = aiohttp.TCPConnector(
            limit=self.max_concurrent,
            limit_per_host=self.max_concurrent,
            ttl_dns_cache=300,
            use_dns_cache=True
        )

        self.session = aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers=dict(DEFAULT_HEADERS, **{'User-Agent': random.choice(config.user_agents)})
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()

    async def get_text(self, url: str) -> str:
        result = await self.fetch(url)
        if not 200 <= result.meta.status < 300:
            raise FetchError(url, f"HTTP {result.meta.status}")
        return result.html

    async def fetch(self, url: str) -> FetchResult:
        """Fetch url following redirects, bounded by the semaphore"""
        async with self.semaphore:
            try:
                start_time = time.perf_counter()
                async with self.session.get(url, allow_redirects=True) as response:
                    ttfb = (time.perf_counter() - start_time) * 1000
                    html = await response.text(errors="replace")
                    meta = ResponseMeta(
                        url=url,
                        final_url=str(response.url),
                        status=response.status,
                        headers=lowercase_headers(response.headers),
                        ttfb_millis=round(ttfb),
                    )
            except asyncio.TimeoutError:
                logger.error(f"Timeout for {url}")
                raise FetchError(url, "timeout")
            except aiohttp.ClientError as e:
                logger.error(f"Request error for {url}: {e}")
                raise FetchError(url, str(e))

        if meta.status != 200:
            logger.warning(f"HTTP {meta.status} for {url}")
        return FetchResult(meta=meta, html=html)
