"""
Page analyzer - runs extraction and scoring over fetched pages
"""
import logging
from typing import Optional

from config import ScoringConfig
from extractor import extract
from fetcher import PageFetcher
from models import PageReport, ResponseMeta
from scorer import score

logger = logging.getLogger(__name__)


def analyze_page(meta: ResponseMeta, html: Optional[str],
                 scoring: Optional[ScoringConfig] = None) -> PageReport:
    """Analyze already-fetched HTML.

    Pure: the same inputs always produce an identical report. Links and the
    canonical URL are resolved against the post-redirect URL when known.
    """
    facts = extract(html, meta.effective_url)
    result = score(facts, meta, scoring)
    return PageReport(meta=meta, facts=facts, scores=result.scores, issues=result.issues)


class PageAnalyzer:
    """Fetches a URL and analyzes the response"""

    def __init__(self, fetcher: PageFetcher = None, scoring: ScoringConfig = None,
                 metrics_collector=None):
        self.fetcher = fetcher or PageFetcher()
        self.scoring = scoring
        self.metrics_collector = metrics_collector

    def analyze_url(self, url: str) -> PageReport:
        """Fetch and analyze a single URL; FetchError propagates to the caller"""
        logger.info(f"Analyzing URL: {url}")

        try:
            fetched = self.fetcher.fetch(url)
        except Exception:
            if self.metrics_collector:
                self.metrics_collector.record_error()
            raise

        report = analyze_page(fetched.meta, fetched.html, self.scoring)
        if self.metrics_collector:
            self.metrics_collector.record_page_analyzed(fetched.meta.ttfb_millis)

        logger.info(f"Analyzed {url}: overall {report.scores.overall}, {len(report.issues)} issues")
        return report

    def close(self):
        self.fetcher.close()
