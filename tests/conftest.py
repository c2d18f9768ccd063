"""
Pytest configuration and shared fixtures
"""
import pytest
import os
from unittest.mock import Mock

# Add project root to path
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from config import ScoringConfig
from fetcher import FetchResult
from models import ResponseMeta


GOOD_DESCRIPTION = (
    "A thorough description of this test page that is comfortably longer "
    "than fifty characters."
)


@pytest.fixture
def scoring():
    """Default scoring configuration"""
    return ScoringConfig()


@pytest.fixture
def https_meta():
    """Response metadata for a fast, compressed, cacheable HTTPS page"""
    return ResponseMeta(
        url="https://example.com/",
        final_url="https://example.com/",
        status=200,
        headers={"content-encoding": "gzip", "cache-control": "max-age=600"},
        ttfb_millis=120,
    )


@pytest.fixture
def http_meta():
    """Response metadata for a plain HTTP page without optimizations"""
    return ResponseMeta(
        url="http://example.com/",
        final_url="http://example.com/",
        status=200,
        headers={},
        ttfb_millis=500,
    )


@pytest.fixture
def complete_html():
    """Page with every signal the scorer rewards"""
    return f"""
    <html>
        <head>
            <title>  Test Page Title </title>
            <meta name="description" content="{GOOD_DESCRIPTION}">
            <meta name="viewport" content="width=device-width, initial-scale=1">
            <meta name="robots" content="index,follow">
            <meta name="twitter:card" content="summary">
            <meta property="og:title" content="Test Page">
            <meta property="og:description" content="Test description">
            <link rel="canonical" href="/home">
            <script type="application/ld+json">
                {{"@context": "https://schema.org", "@type": "Organization", "name": "Example"}}
            </script>
        </head>
        <body>
            <nav role="navigation"><a href="/about">About</a></nav>
            <h1>Main Heading</h1>
            <h2>Sub Heading 1</h2>
            <h2>Sub Heading 2</h2>
            <p>Test content with some words for analysis.</p>
            <a href="/contact">Contact</a>
            <a href="https://external.com/page">External Link</a>
            <img src="test.jpg" alt="Test image">
        </body>
    </html>
    """


@pytest.fixture
def bare_html():
    """Page missing every optional signal"""
    return """
    <html>
        <body>
            <p>Nothing to see here.</p>
            <img src="a.jpg">
            <img src="b.jpg" alt="   ">
        </body>
    </html>
    """


@pytest.fixture
def mock_fetcher(complete_html, https_meta):
    """Mock sync page fetcher returning the complete page"""
    fetcher = Mock()
    fetcher.fetch.return_value = FetchResult(meta=https_meta, html=complete_html)
    return fetcher
