"""
Data models for the SEO page analyzer
"""
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

HEADING_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")


def _empty_headings() -> Dict[str, List[str]]:
    return {level: [] for level in HEADING_LEVELS}


@dataclass(frozen=True)
class ImageStats:
    """Image counts; an image has alt text iff its trimmed alt is non-empty"""
    total: int = 0
    with_alt: int = 0
    without_alt: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "withAlt": self.with_alt, "withoutAlt": self.without_alt}


@dataclass(frozen=True)
class LinkStats:
    """Anchor counts.

    ``total`` counts every anchor carrying an href, while ``internal`` and
    ``external`` only count hrefs that resolved against the base URL, so
    ``internal + external`` may be less than ``total``.
    """
    total: int = 0
    internal: int = 0
    external: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "internal": self.internal, "external": self.external}


@dataclass(frozen=True)
class SchemaEntry:
    """One structured-data block found in the page"""
    type: str
    valid: bool
    errors: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type, "valid": self.valid}
        if self.errors is not None:
            data["errors"] = list(self.errors)
        return data


@dataclass(frozen=True)
class PageFacts:
    """SEO-relevant facts extracted from an HTML document"""
    title: str = ""
    meta_by_name: Dict[str, str] = field(default_factory=dict)
    meta_by_property: Dict[str, str] = field(default_factory=dict)
    headings: Dict[str, List[str]] = field(default_factory=_empty_headings)
    images: ImageStats = field(default_factory=ImageStats)
    links: LinkStats = field(default_factory=LinkStats)
    canonical: Optional[str] = None
    robots_meta: Optional[str] = None
    viewport: Optional[str] = None
    schemas: List[SchemaEntry] = field(default_factory=list)
    aria_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "meta": {"name": dict(self.meta_by_name), "property": dict(self.meta_by_property)},
            "headings": {level: list(texts) for level, texts in self.headings.items()},
            "images": self.images.to_dict(),
            "links": self.links.to_dict(),
            "canonical": self.canonical,
            "robotsMeta": self.robots_meta,
            "viewport": self.viewport,
            "schemas": [schema.to_dict() for schema in self.schemas],
            "ariaCount": self.aria_count,
        }


@dataclass(frozen=True)
class ResponseMeta:
    """Response metadata supplied by the fetch layer"""
    url: str
    final_url: Optional[str] = None
    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    ttfb_millis: float = 0

    @property
    def effective_url(self) -> str:
        return self.final_url or self.url


@dataclass(frozen=True)
class CategoryScores:
    """Eight category scores plus the weighted overall score"""
    content: int
    technical: int
    links: int
    accessibility: int
    mobile: int
    social: int
    structured_data: int
    performance: int
    overall: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "overall": self.overall,
            "content": self.content,
            "technical": self.technical,
            "links": self.links,
            "accessibility": self.accessibility,
            "mobile": self.mobile,
            "social": self.social,
            "structuredData": self.structured_data,
            "performance": self.performance,
        }


@dataclass(frozen=True)
class Issue:
    """An actionable finding; severity is one of critical, warning, info"""
    severity: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"severity": self.severity, "message": self.message}


@dataclass(frozen=True)
class ScoreResult:
    """Scorer output"""
    scores: CategoryScores
    issues: List[Issue]


@dataclass(frozen=True)
class PageReport:
    """Final artifact of one page analysis"""
    meta: ResponseMeta
    facts: PageFacts
    scores: CategoryScores
    issues: List[Issue]

    @property
    def url(self) -> str:
        return self.meta.url

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the nested JSON shape consumed by presentation layers"""
        return {
            "url": self.meta.url,
            "finalUrl": self.meta.final_url,
            "status": self.meta.status,
            "headers": dict(self.meta.headers),
            "timing": {"ttfb": self.meta.ttfb_millis},
            "parsed": self.facts.to_dict(),
            "scores": self.scores.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass(frozen=True)
class SiteSummary:
    """Mean scores across the pages of a sitemap crawl"""
    pages: int
    limit: int
    averages: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {"pages": self.pages, "limit": self.limit, "averages": dict(self.averages)}


@dataclass(frozen=True)
class CrawlResult:
    """Result of analyzing the pages listed in a sitemap"""
    target: str
    sitemap_url: str
    limit: int
    reports: List[PageReport]
    summary: Optional[SiteSummary]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": "sitemap",
            "target": self.target,
            "sitemap": self.sitemap_url,
            "limit": self.limit,
            "reports": [report.to_dict() for report in self.reports],
            "siteSummary": self.summary.to_dict() if self.summary else None,
        }
