"""
Sitemap mode - discovers URLs through robots.txt and sitemaps, then analyzes each page
"""
import asyncio
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from config import AnalyzerConfig, ScoringConfig, config
from analyzer import analyze_page
from extractor import validate_base_url
from fetcher import AsyncPageFetcher, FetchError
from models import CrawlResult, PageReport, SiteSummary
from scorer import round_half_up

logger = logging.getLogger(__name__)

SITEMAP_DIRECTIVE_RE = re.compile(r'^\s*sitemap:\s*(\S.*?)\s*$', re.IGNORECASE | re.MULTILINE)

SUMMARY_FIELDS = (
    "overall", "content", "technical", "links", "accessibility",
    "mobile", "social", "structuredData", "performance",
)


class SitemapError(Exception):
    """Raised when the sitemap for a site cannot be located or read"""


@dataclass
class SitemapDocument:
    """A parsed sitemap: either a urlset of pages or an index of child sitemaps"""
    source: str
    kind: str
    locations: List[str]


def normalize_limit(limit, cfg: AnalyzerConfig = config) -> int:
    """Clamp a user-supplied page limit into [1, sitemap_max_limit]"""
    try:
        value = int(limit) if limit is not None else cfg.sitemap_default_limit
    except (TypeError, ValueError):
        value = cfg.sitemap_default_limit
    return max(1, min(value, cfg.sitemap_max_limit))


def origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def find_sitemap_url(robots_txt: str, origin: str) -> str:
    """First Sitemap directive in robots.txt, else the conventional location"""
    match = SITEMAP_DIRECTIVE_RE.search(robots_txt or "")
    if match:
        return match.group(1)
    return f"{origin}/sitemap.xml"


def localname(tag: str) -> str:
    if "}" in tag:
        return tag.rsplit("}", 1)[-1]
    return tag


def _child_loc(node: ET.Element) -> Optional[str]:
    for child in node:
        if localname(child.tag) == "loc" and child.text and child.text.strip():
            return child.text.strip()
    return None


def parse_sitemap_xml(xml_text: str, source: str) -> SitemapDocument:
    """Parse a urlset or sitemapindex document, ignoring namespaces"""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise SitemapError(f"Invalid XML in {source}: {exc}") from exc

    root_name = localname(root.tag)
    if root_name == "sitemapindex":
        entry_name = "sitemap"
    elif root_name == "urlset":
        entry_name = "url"
    else:
        raise SitemapError(f"Unsupported sitemap root element in {source}: {root_name}")

    locations = []
    for node in root:
        if localname(node.tag) != entry_name:
            continue
        loc = _child_loc(node)
        if loc:
            locations.append(loc)

    return SitemapDocument(source=source, kind=root_name, locations=locations)


def summarize_reports(reports: List[PageReport], limit: int) -> Optional[SiteSummary]:
    """Mean of each category and the overall score across reports"""
    if not reports:
        return None

    averages = {}
    for name in SUMMARY_FIELDS:
        values = [report.scores.to_dict()[name] for report in reports]
        averages[name] = round_half_up(sum(values) / len(values))

    return SiteSummary(pages=len(reports), limit=limit, averages=averages)


class SitemapCrawler:
    """Analyzes every page listed in a site's sitemap, up to a limit"""

    def __init__(self, scoring: ScoringConfig = None, max_concurrent: int = None,
                 metrics_collector=None, fetcher_factory=AsyncPageFetcher):
        self.scoring = scoring
        self.max_concurrent = max_concurrent or config.max_concurrent
        self.metrics_collector = metrics_collector
        self.fetcher_factory = fetcher_factory

    async def crawl(self, url: str, limit=None) -> CrawlResult:
        """Discover sitemap URLs for url and analyze each of them"""
        try:
            target = validate_base_url(url)
        except ValueError as e:
            raise SitemapError(str(e)) from e
        limit = normalize_limit(limit)

        logger.info(f"Crawling sitemap for {target} (limit {limit})")

        async with self.fetcher_factory(max_concurrent=self.max_concurrent) as fetcher:
            sitemap_url, urls = await self.discover_urls(fetcher, target, limit)
            results = await asyncio.gather(*[self._analyze(fetcher, loc) for loc in urls])

        reports = [report for report in results if report is not None]
        if self.metrics_collector:
            self.metrics_collector.record_sitemap_crawled()

        logger.info(f"Analyzed {len(reports)} out of {len(urls)} sitemap URLs for {target}")
        return CrawlResult(
            target=target,
            sitemap_url=sitemap_url,
            limit=limit,
            reports=reports,
            summary=summarize_reports(reports, limit),
        )

    async def discover_urls(self, fetcher, target: str, limit: int) -> Tuple[str, List[str]]:
        """Locate the sitemap and collect at most ``limit`` page URLs from it"""
        origin = origin_of(target)

        try:
            robots_txt = await fetcher.get_text(f"{origin}/robots.txt")
        except FetchError:
            logger.debug(f"No robots.txt for {origin}, using default sitemap location")
            robots_txt = ""
        sitemap_url = find_sitemap_url(robots_txt, origin)

        try:
            xml_text = await fetcher.get_text(sitemap_url)
        except FetchError as e:
            raise SitemapError(f"Could not fetch sitemap {sitemap_url}: {e.reason}") from e
        document = parse_sitemap_xml(xml_text, sitemap_url)

        if document.kind == "urlset":
            return sitemap_url, document.locations[:limit]

        urls = []
        for child_url in document.locations:
            if len(urls) >= limit:
                break
            try:
                child = parse_sitemap_xml(await fetcher.get_text(child_url), child_url)
            except (FetchError, SitemapError) as e:
                logger.warning(f"Skipping child sitemap {child_url}: {e}")
                continue
            if child.kind != "urlset":
                logger.warning(f"Skipping nested sitemap index {child_url}")
                continue
            urls.extend(child.locations)

        return sitemap_url, urls[:limit]

    async def _analyze(self, fetcher, url: str) -> Optional[PageReport]:
        """Fetch and analyze one sitemap URL; any failure skips the page"""
        try:
            fetched = await fetcher.fetch(url)
            loop = asyncio.get_running_loop()
            report = await loop.run_in_executor(None, analyze_page, fetched.meta, fetched.html, self.scoring)
        except FetchError as e:
            logger.warning(f"Skipping {url}: {e.reason}")
            if self.metrics_collector:
                self.metrics_collector.record_error()
            return None
        except Exception as e:
            logger.error(f"Error analyzing {url}: {e}")
            if self.metrics_collector:
                self.metrics_collector.record_error()
            return None

        if self.metrics_collector:
            self.metrics_collector.record_page_analyzed(fetched.meta.ttfb_millis)
        return report
