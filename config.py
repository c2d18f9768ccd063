"""
Configuration file for the SEO page analyzer
"""
import os
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class AnalyzerConfig:
    """Runtime settings for fetching, crawling and logging"""

    # Fetch settings
    timeout: int = 15
    max_retries: int = 2
    backoff_factor: float = 0.3

    # Sitemap mode
    sitemap_default_limit: int = 20
    sitemap_max_limit: int = 500
    max_concurrent: int = 5

    # User agents for rotation
    user_agents: List[str] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(levelname)s - %(message)s"
    log_dir: str = "logs"

    def __post_init__(self):
        if self.user_agents is None:
            self.user_agents = [
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
                "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
                "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
            ]

        # Environment overrides
        self.timeout = int(os.getenv("SEO_ANALYZER_TIMEOUT", self.timeout))
        self.max_concurrent = int(os.getenv("SEO_ANALYZER_MAX_CONCURRENT", self.max_concurrent))
        self.log_level = os.getenv("SEO_ANALYZER_LOG_LEVEL", self.log_level).upper()
        self.log_dir = os.getenv("SEO_ANALYZER_LOG_DIR", self.log_dir)


def _default_weights() -> Dict[str, float]:
    return {
        "content": 0.20,
        "technical": 0.20,
        "links": 0.15,
        "accessibility": 0.15,
        "mobile": 0.10,
        "social": 0.05,
        "structuredData": 0.10,
        "performance": 0.05,
    }


@dataclass(frozen=True)
class ScoringConfig:
    """Weights, thresholds and penalties used by the scorer.

    Passed explicitly into ``scorer.score`` so alternate weight sets can be
    evaluated side by side.
    """

    weights: Dict[str, float] = field(default_factory=_default_weights)

    # Content
    title_points: int = 40
    description_points: int = 30
    single_h1_points: int = 30
    multiple_h1_penalty: int = 15
    description_min_length: int = 50
    description_max_length: int = 180

    # Technical
    https_points: int = 30
    canonical_points: int = 20
    cache_control_points: int = 20
    compression_points: int = 20
    technical_baseline: int = 30
    compression_tokens: tuple = ("gzip", "br")

    # Links
    internal_ratio_points: int = 60
    link_volume_cap: int = 40
    max_links_score: int = 100

    # Accessibility
    alt_penalty_per_image: int = 5
    alt_penalty_cap: int = 60
    accessibility_multiple_h1_penalty: int = 10
    aria_bonus: int = 10

    # Mobile
    viewport_score: int = 90
    no_viewport_score: int = 40

    # Social
    open_graph_points: int = 60
    twitter_card_points: int = 40

    # Structured data
    schemas_all_valid_score: int = 95
    schemas_some_invalid_score: int = 70
    no_schemas_score: int = 30

    # Performance
    performance_baseline: int = 60
    ttfb_slow_millis: int = 400
    ttfb_very_slow_millis: int = 800
    ttfb_slow_penalty: int = 10
    ttfb_very_slow_penalty: int = 20
    performance_compression_bonus: int = 10

    # Overall
    overall_min: int = 1
    overall_max: int = 100


# Default configuration instances
config = AnalyzerConfig()
scoring_config = ScoringConfig()
