"""
FastAPI web application for the SEO analyzer
"""
from fastapi import FastAPI, Depends, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import List, Dict, Any, Optional
import logging
from datetime import datetime
import uvicorn

from analyzer import PageAnalyzer
from extractor import validate_base_url
from fetcher import FetchError
from monitoring import metrics_collector
from sitemap import SitemapCrawler, SitemapError

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# Response models
class AnalysisResponse(BaseModel):
    mode: str
    target: str
    limit: Optional[int] = None
    sitemap: Optional[str] = None
    reports: List[Dict[str, Any]]
    siteSummary: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    uptime_seconds: float
    metrics: Dict[str, Any]


# Initialize FastAPI app
app = FastAPI(
    title="SEO Page Analyzer API",
    description="Fetches pages, extracts SEO signals and scores them",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_page_analyzer():
    """Dependency providing a page analyzer with its own HTTP session"""
    analyzer = PageAnalyzer(metrics_collector=metrics_collector)
    try:
        yield analyzer
    finally:
        analyzer.close()


def get_sitemap_crawler() -> SitemapCrawler:
    """Dependency providing the sitemap crawler"""
    return SitemapCrawler(metrics_collector=metrics_collector)


def error_response(error: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": error, "detail": detail})


# API Endpoints

@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint"""
    return {
        "message": "SEO Page Analyzer API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(**metrics_collector.check_health())


@app.get("/metrics")
async def get_metrics():
    """Analysis counters"""
    return {"metrics": metrics_collector.get_metrics()}


@app.get(
    "/api/analyze",
    response_model=AnalysisResponse,
    responses={400: {"model": ErrorResponse}},
)
def analyze(
    url: str = Query(..., description="Absolute URL of the page to analyze"),
    analyzer: PageAnalyzer = Depends(get_page_analyzer)
):
    """Analyze a single URL"""
    try:
        target = validate_base_url(url)
        report = analyzer.analyze_url(target)
    except (ValueError, FetchError) as e:
        logger.error(f"Error analyzing URL {url}: {e}")
        return error_response("Bad URL", str(e))

    return AnalysisResponse(
        mode="single",
        target=target,
        reports=[report.to_dict()],
        siteSummary=None,
    )


@app.get(
    "/api/sitemap",
    response_model=AnalysisResponse,
    responses={400: {"model": ErrorResponse}},
)
async def analyze_sitemap(
    url: str = Query(..., description="Any URL on the site whose sitemap should be analyzed"),
    limit: Optional[str] = Query(None, description="Maximum number of pages to analyze"),
    crawler: SitemapCrawler = Depends(get_sitemap_crawler)
):
    """Analyze the pages listed in a site's sitemap"""
    try:
        result = await crawler.crawl(url, limit)
    except SitemapError as e:
        logger.error(f"Error reading sitemap for {url}: {e}")
        return error_response("Could not read sitemap", str(e))

    return AnalysisResponse(**result.to_dict())


# Custom exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "timestamp": datetime.now().isoformat()
        }
    )


def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    uvicorn.run("api:app", host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    run_server(reload=True)
