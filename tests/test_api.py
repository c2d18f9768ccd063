"""
Tests for FastAPI endpoints
"""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock, AsyncMock

from analyzer import analyze_page
from api import app, get_page_analyzer, get_sitemap_crawler
from fetcher import FetchError
from models import CrawlResult
from sitemap import SitemapError, summarize_reports


class TestAPIEndpoints:
    """Test class for API endpoints"""

    def setup_method(self):
        """Set up test client"""
        self.client = TestClient(app)

    def teardown_method(self):
        app.dependency_overrides.clear()

    def test_root_endpoint(self):
        """Test root endpoint"""
        response = self.client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "SEO Page Analyzer API"
        assert data["version"] == "1.0.0"
        assert "/docs" in data["docs"]

    def test_health_check(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] in ("healthy", "degraded")
        assert "pages_analyzed" in data["metrics"]

    def test_metrics(self):
        response = self.client.get("/metrics")
        assert response.status_code == 200
        assert "errors_count" in response.json()["metrics"]

    def test_analyze_success(self, complete_html, https_meta):
        mock_analyzer = Mock()
        mock_analyzer.analyze_url.return_value = analyze_page(https_meta, complete_html)
        app.dependency_overrides[get_page_analyzer] = lambda: mock_analyzer

        response = self.client.get("/api/analyze", params={"url": "https://example.com/"})

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "single"
        assert data["target"] == "https://example.com/"
        assert data["siteSummary"] is None
        assert len(data["reports"]) == 1
        assert data["reports"][0]["scores"]["overall"] == 94
        mock_analyzer.analyze_url.assert_called_once_with("https://example.com/")

    def test_analyze_bad_url(self):
        mock_analyzer = Mock()
        app.dependency_overrides[get_page_analyzer] = lambda: mock_analyzer

        response = self.client.get("/api/analyze", params={"url": "not-a-url"})

        assert response.status_code == 400
        assert response.json()["error"] == "Bad URL"
        mock_analyzer.analyze_url.assert_not_called()

    def test_analyze_fetch_failure(self):
        mock_analyzer = Mock()
        mock_analyzer.analyze_url.side_effect = FetchError("https://down.example.com/", "timeout")
        app.dependency_overrides[get_page_analyzer] = lambda: mock_analyzer

        response = self.client.get("/api/analyze", params={"url": "https://down.example.com/"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Bad URL"
        assert "timeout" in data["detail"]

    def test_analyze_missing_url_param(self):
        response = self.client.get("/api/analyze")
        assert response.status_code == 422

    def test_sitemap_success(self, complete_html, https_meta):
        reports = [analyze_page(https_meta, complete_html)]
        mock_crawler = Mock()
        mock_crawler.crawl = AsyncMock(return_value=CrawlResult(
            target="https://example.com/",
            sitemap_url="https://example.com/sitemap.xml",
            limit=5,
            reports=reports,
            summary=summarize_reports(reports, 5),
        ))
        app.dependency_overrides[get_sitemap_crawler] = lambda: mock_crawler

        response = self.client.get("/api/sitemap", params={"url": "https://example.com/", "limit": "5"})

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "sitemap"
        assert data["limit"] == 5
        assert data["siteSummary"]["pages"] == 1
        assert data["siteSummary"]["averages"]["overall"] == 94
        mock_crawler.crawl.assert_awaited_once_with("https://example.com/", "5")

    def test_sitemap_failure(self):
        mock_crawler = Mock()
        mock_crawler.crawl = AsyncMock(side_effect=SitemapError("Could not fetch sitemap"))
        app.dependency_overrides[get_sitemap_crawler] = lambda: mock_crawler

        response = self.client.get("/api/sitemap", params={"url": "https://example.com/"})

        assert response.status_code == 400
        assert response.json()["error"] == "Could not read sitemap"
