"""
Logging setup and in-memory metrics for the SEO analyzer
"""
import logging
import os
from dataclasses import dataclass, asdict
from datetime import datetime
from threading import Lock
from typing import Any, Dict

from config import config


def setup_logging(log_level: str = None, log_dir: str = None):
    """Install console and file handlers on the root logger"""
    log_level = (log_level or config.log_level).upper()
    log_dir = log_dir or config.log_dir

    # Create logs directory if it doesn't exist
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    # Create formatters
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    simple_formatter = logging.Formatter(config.log_format)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, log_level, logging.INFO))
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    # File handler for all logs
    file_handler = logging.FileHandler(
        os.path.join(log_dir, 'analyzer.log'),
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(file_handler)

    # Error log handler
    error_handler = logging.FileHandler(
        os.path.join(log_dir, 'errors.log'),
        encoding='utf-8'
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_handler)

    return root_logger


@dataclass
class AnalysisMetrics:
    """Snapshot of analysis counters"""
    timestamp: str
    pages_analyzed: int
    sitemaps_crawled: int
    errors_count: int
    success_rate: float
    avg_ttfb_millis: float


class MetricsCollector:
    """Thread-safe counters for analyzed pages, crawls and errors"""

    def __init__(self):
        self.lock = Lock()
        self.started_at = datetime.now()
        self.pages_analyzed = 0
        self.sitemaps_crawled = 0
        self.errors_count = 0
        self.total_ttfb = 0.0

    def record_page_analyzed(self, ttfb_millis: float):
        with self.lock:
            self.pages_analyzed += 1
            self.total_ttfb += ttfb_millis or 0

    def record_sitemap_crawled(self):
        with self.lock:
            self.sitemaps_crawled += 1

    def record_error(self):
        with self.lock:
            self.errors_count += 1

    def snapshot(self) -> AnalysisMetrics:
        with self.lock:
            attempts = self.pages_analyzed + self.errors_count
            return AnalysisMetrics(
                timestamp=datetime.now().isoformat(),
                pages_analyzed=self.pages_analyzed,
                sitemaps_crawled=self.sitemaps_crawled,
                errors_count=self.errors_count,
                success_rate=self.pages_analyzed / attempts * 100 if attempts else 100.0,
                avg_ttfb_millis=self.total_ttfb / self.pages_analyzed if self.pages_analyzed else 0.0,
            )

    def get_metrics(self) -> Dict[str, Any]:
        return asdict(self.snapshot())

    def check_health(self) -> Dict[str, Any]:
        """Report degraded status when fewer than half of the attempts succeeded"""
        metrics = self.snapshot()
        status = "healthy" if metrics.success_rate >= 50 else "degraded"
        return {
            "status": status,
            "timestamp": metrics.timestamp,
            "uptime_seconds": (datetime.now() - self.started_at).total_seconds(),
            "metrics": asdict(metrics),
        }


# Process-wide collector
metrics_collector = MetricsCollector()
