"""
HTML extraction module - turns raw HTML into PageFacts
"""
import json
import logging
from typing import Dict, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from models import (
    HEADING_LEVELS, ImageStats, LinkStats, PageFacts, SchemaEntry
)

logger = logging.getLogger(__name__)

INVALID_JSON_ERROR = "Invalid JSON"
MISSING_FIELDS_ERROR = "Missing @context or @type"

_TAB_AND_NEWLINE = str.maketrans("", "", "\t\n\r")
_C0_AND_SPACE = "".join(chr(code) for code in range(0x21))


def validate_base_url(base_url: str) -> str:
    """Ensure the base URL is absolute, raising ValueError otherwise"""
    if not base_url or not isinstance(base_url, str):
        raise ValueError("A base URL is required to classify links")
    parsed = urlparse(base_url.strip())
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Base URL must be absolute: {base_url!r}")
    return base_url.strip()


def resolve_url(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve href against base_url, returning None when it cannot be resolved.

    Tab and newline characters are removed and surrounding control characters
    trimmed before resolving. A relative reference whose first path segment
    contains a colon cannot be resolved.
    """
    href = (href or "").translate(_TAB_AND_NEWLINE).strip(_C0_AND_SPACE)

    try:
        reference = urlparse(href)
        if not reference.scheme and ":" in reference.path.split("/", 1)[0]:
            return None
        resolved = urljoin(base_url, href)
        parsed = urlparse(resolved)
        parsed.port  # raises ValueError for a malformed port
    except ValueError:
        return None

    if not parsed.scheme:
        return None
    return resolved


def hostname(url: str) -> str:
    """Lowercased hostname of url, or an empty string"""
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


def extract(html: Optional[str], base_url: str) -> PageFacts:
    """Parse an HTML document into PageFacts.

    Malformed markup degrades to empty fields; only a missing or relative
    base_url raises.
    """
    base_url = validate_base_url(base_url)
    soup = BeautifulSoup(html or "", "html.parser")

    meta_by_name = _extract_meta(soup, "name")
    meta_by_property = _extract_meta(soup, "property")

    facts = PageFacts(
        title=_extract_title(soup),
        meta_by_name=meta_by_name,
        meta_by_property=meta_by_property,
        headings=_extract_headings(soup),
        images=_extract_images(soup),
        links=_extract_links(soup, base_url),
        canonical=_extract_canonical_url(soup, base_url),
        robots_meta=_first_meta_content(soup, "robots"),
        viewport=_first_meta_content(soup, "viewport"),
        schemas=_extract_json_ld(soup) + _extract_microdata(soup),
        aria_count=_count_aria_elements(soup),
    )

    logger.debug(
        f"Extracted {facts.links.total} links, {facts.images.total} images, "
        f"{len(facts.schemas)} schemas from {base_url}"
    )
    return facts


def _extract_title(soup) -> str:
    """Extract page title"""
    title = soup.find("title")
    return title.get_text().strip() if title else ""


def _extract_meta(soup, attribute: str) -> Dict[str, str]:
    """Map meta name/property keys to content; the last occurrence wins"""
    values = {}
    for meta in soup.find_all("meta", attrs={attribute: True}):
        key = meta.get(attribute, "").lower()
        values[key] = meta.get("content") or ""
    return values


def _first_meta_content(soup, name: str) -> Optional[str]:
    for meta in soup.find_all("meta", attrs={"name": True}):
        if meta.get("name", "").lower() == name:
            return meta.get("content")
    return None


def _extract_headings(soup) -> Dict[str, List[str]]:
    return {
        level: [heading.get_text().strip() for heading in soup.find_all(level)]
        for level in HEADING_LEVELS
    }


def _extract_images(soup) -> ImageStats:
    images = soup.find_all("img")
    with_alt = len([img for img in images if (img.get("alt") or "").strip()])
    return ImageStats(total=len(images), with_alt=with_alt, without_alt=len(images) - with_alt)


def _extract_links(soup, base_url: str) -> LinkStats:
    """Count anchors and classify them as internal or external"""
    anchors = soup.find_all("a", href=True)
    host = hostname(base_url)
    internal_count = 0
    external_count = 0

    for anchor in anchors:
        target = resolve_url(base_url, anchor["href"])
        if target is None:
            continue
        if hostname(target) == host:
            internal_count += 1
        else:
            external_count += 1

    return LinkStats(total=len(anchors), internal=internal_count, external=external_count)


def _extract_canonical_url(soup, base_url: str) -> Optional[str]:
    """Extract the resolved canonical URL"""
    for link in soup.find_all("link", rel=True):
        rel = link.get("rel")
        rel_values = rel if isinstance(rel, list) else str(rel).split()
        if "canonical" not in [value.lower() for value in rel_values]:
            continue
        href = link.get("href")
        return resolve_url(base_url, href) if href else None
    return None


def _extract_json_ld(soup) -> List[SchemaEntry]:
    """Extract JSON-LD blocks in document order"""
    entries = []
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.get_text())
        except (ValueError, RecursionError):
            logger.debug("Skipping JSON-LD block with invalid JSON")
            entries.append(SchemaEntry(type="LD+JSON", valid=False, errors=[INVALID_JSON_ERROR]))
            continue

        items = data if isinstance(data, list) else [data]
        entries.extend(_schema_entry(item) for item in items)
    return entries


def _schema_entry(item) -> SchemaEntry:
    if not isinstance(item, dict):
        return SchemaEntry(type="Thing", valid=False, errors=[MISSING_FIELDS_ERROR])

    schema_type = item.get("@type")
    if isinstance(schema_type, list):
        schema_type = schema_type[0] if schema_type else None

    valid = bool(item.get("@context")) and bool(item.get("@type"))
    return SchemaEntry(
        type=str(schema_type) if schema_type else "Thing",
        valid=valid,
        errors=[] if valid else [MISSING_FIELDS_ERROR],
    )


def _extract_microdata(soup) -> List[SchemaEntry]:
    """Microdata items are reported without validation"""
    entries = []
    for element in soup.find_all(attrs={"itemscope": True, "itemtype": True}):
        item_type = element.get("itemtype", "").split("/")[-1]
        entries.append(SchemaEntry(type=item_type or "Thing", valid=True))
    return entries


def _count_aria_elements(soup) -> int:
    def has_aria(tag) -> bool:
        return "role" in tag.attrs or any(name.startswith("aria-") for name in tag.attrs)

    return len(soup.find_all(has_aria))
