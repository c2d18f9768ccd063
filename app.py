"""
Command line application for the SEO analyzer
"""
import argparse
import asyncio
import json
import logging
import sys

from analyzer import PageAnalyzer
from config import config
from fetcher import FetchError
from monitoring import metrics_collector, setup_logging
from sitemap import SitemapCrawler, SitemapError

logger = logging.getLogger(__name__)


def create_cli():
    """Create command line interface"""
    parser = argparse.ArgumentParser(description="SEO Analyzer - page and sitemap quality scoring")
    parser.add_argument("--log-level", default=config.log_level, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze URL command
    url_parser = subparsers.add_parser("analyze-url", help="Analyze a single URL")
    url_parser.add_argument("url", help="URL to analyze")

    # Sitemap command
    sitemap_parser = subparsers.add_parser("analyze-sitemap", help="Analyze pages listed in a site's sitemap")
    sitemap_parser.add_argument("url", help="Any URL on the site")
    sitemap_parser.add_argument("--limit", type=int, default=config.sitemap_default_limit,
                                help=f"Maximum pages to analyze (at most {config.sitemap_max_limit})")

    # Server mode
    server_parser = subparsers.add_parser("server", help="Run the HTTP API")
    server_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    server_parser.add_argument("--port", type=int, default=8000, help="Server port")

    return parser


def analyze_url(url: str) -> dict:
    analyzer = PageAnalyzer(metrics_collector=metrics_collector)
    try:
        report = analyzer.analyze_url(url)
    finally:
        analyzer.close()
    return {"mode": "single", "target": url, "reports": [report.to_dict()], "siteSummary": None}


def analyze_sitemap(url: str, limit: int) -> dict:
    crawler = SitemapCrawler(metrics_collector=metrics_collector)
    result = asyncio.run(crawler.crawl(url, limit))
    return result.to_dict()


def main(argv=None) -> int:
    """Main application entry point"""
    parser = create_cli()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.log_level)

    try:
        if args.command == "analyze-url":
            result = analyze_url(args.url)
            print(json.dumps(result, indent=2, ensure_ascii=False))

        elif args.command == "analyze-sitemap":
            result = analyze_sitemap(args.url, args.limit)
            print(json.dumps(result, indent=2, ensure_ascii=False))

        elif args.command == "server":
            from api import run_server
            run_server(host=args.host, port=args.port)

    except (ValueError, FetchError, SitemapError) as e:
        logger.error(f"Application error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
