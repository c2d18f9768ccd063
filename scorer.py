"""
Scoring module - category scores, weighted overall score and issue rules
"""
import logging
import math
from typing import Callable, List, Optional, Tuple

from config import ScoringConfig, scoring_config
from models import CategoryScores, Issue, PageFacts, ResponseMeta, ScoreResult

logger = logging.getLogger(__name__)

CRITICAL = "critical"
WARNING = "warning"
INFO = "info"


def round_half_up(value: float) -> int:
    """Round halves toward positive infinity"""
    return int(math.floor(value + 0.5))


def is_https(meta: ResponseMeta) -> bool:
    return meta.effective_url.lower().startswith("https:")


def has_compression(meta: ResponseMeta, cfg: ScoringConfig = scoring_config) -> bool:
    encoding = (meta.headers.get("content-encoding") or "").lower()
    return any(token in encoding for token in cfg.compression_tokens)


def utf16_length(text: str) -> int:
    """Length of text in UTF-16 code units, so astral characters count twice"""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def has_good_meta_description(facts: PageFacts, cfg: ScoringConfig = scoring_config) -> bool:
    description = facts.meta_by_name.get("description")
    if not description:
        return False
    return cfg.description_min_length <= utf16_length(description) <= cfg.description_max_length


def has_open_graph(facts: PageFacts) -> bool:
    return bool(facts.meta_by_property.get("og:title")) and bool(facts.meta_by_property.get("og:description"))


def has_twitter_card(facts: PageFacts) -> bool:
    return bool(facts.meta_by_name.get("twitter:card"))


def h1_count(facts: PageFacts) -> int:
    return len(facts.headings.get("h1", []))


# Category scores

def content_score(facts: PageFacts, cfg: ScoringConfig = scoring_config) -> int:
    score = 0
    if facts.title:
        score += cfg.title_points
    if has_good_meta_description(facts, cfg):
        score += cfg.description_points
    if h1_count(facts) == 1:
        score += cfg.single_h1_points
    if h1_count(facts) > 1:
        score -= cfg.multiple_h1_penalty
    return score


def technical_score(facts: PageFacts, meta: ResponseMeta, cfg: ScoringConfig = scoring_config) -> int:
    score = cfg.technical_baseline
    if is_https(meta):
        score += cfg.https_points
    if facts.canonical:
        score += cfg.canonical_points
    if meta.headers.get("cache-control"):
        score += cfg.cache_control_points
    if has_compression(meta, cfg):
        score += cfg.compression_points
    return score


def links_score(facts: PageFacts, cfg: ScoringConfig = scoring_config) -> int:
    total = facts.links.total
    ratio_internal = facts.links.internal / total if total else 0
    volume = min(cfg.link_volume_cap, total)
    return round_half_up(min(cfg.max_links_score, ratio_internal * cfg.internal_ratio_points + volume))


def accessibility_score(facts: PageFacts, cfg: ScoringConfig = scoring_config) -> int:
    alt_penalty = min(cfg.alt_penalty_cap, facts.images.without_alt * cfg.alt_penalty_per_image)
    score = max(0, 100 - alt_penalty)
    if h1_count(facts) > 1:
        score -= cfg.accessibility_multiple_h1_penalty
    if facts.aria_count > 0:
        score += cfg.aria_bonus
    return score


def mobile_score(facts: PageFacts, cfg: ScoringConfig = scoring_config) -> int:
    return cfg.viewport_score if facts.viewport else cfg.no_viewport_score


def social_score(facts: PageFacts, cfg: ScoringConfig = scoring_config) -> int:
    score = 0
    if has_open_graph(facts):
        score += cfg.open_graph_points
    if has_twitter_card(facts):
        score += cfg.twitter_card_points
    return score


def structured_data_score(facts: PageFacts, cfg: ScoringConfig = scoring_config) -> int:
    if not facts.schemas:
        return cfg.no_schemas_score
    if all(schema.valid for schema in facts.schemas):
        return cfg.schemas_all_valid_score
    return cfg.schemas_some_invalid_score


def performance_score(meta: ResponseMeta, cfg: ScoringConfig = scoring_config) -> int:
    ttfb = meta.ttfb_millis or 0
    if ttfb > cfg.ttfb_very_slow_millis:
        penalty = cfg.ttfb_very_slow_penalty
    elif ttfb > cfg.ttfb_slow_millis:
        penalty = cfg.ttfb_slow_penalty
    else:
        penalty = 0
    bonus = cfg.performance_compression_bonus if has_compression(meta, cfg) else 0
    return max(0, cfg.performance_baseline - penalty + bonus)


def overall_score(categories: dict, cfg: ScoringConfig = scoring_config) -> int:
    """Weighted sum of the category scores, rounded and clamped"""
    weighted = sum(categories[name] * weight for name, weight in cfg.weights.items())
    return max(cfg.overall_min, min(cfg.overall_max, round_half_up(weighted)))


# Issue rules, evaluated in this order

def _missing_title(facts, meta, cfg) -> Optional[str]:
    if not facts.title:
        return "Missing <title> element."


def _bad_meta_description(facts, meta, cfg) -> Optional[str]:
    if not has_good_meta_description(facts, cfg):
        return (f"Meta description is missing or outside "
                f"{cfg.description_min_length}-{cfg.description_max_length} characters.")


def _no_h1(facts, meta, cfg) -> Optional[str]:
    if h1_count(facts) == 0:
        return "Missing a single <h1> heading."


def _multiple_h1(facts, meta, cfg) -> Optional[str]:
    if h1_count(facts) > 1:
        return f"Page has multiple <h1> headings ({h1_count(facts)})."


def _images_without_alt(facts, meta, cfg) -> Optional[str]:
    if facts.images.without_alt > 0:
        return f"{facts.images.without_alt} images without alt text."


def _missing_open_graph(facts, meta, cfg) -> Optional[str]:
    if not has_open_graph(facts):
        return "Complete the Open Graph tags (og:title, og:description, og:image)."


def _missing_twitter_card(facts, meta, cfg) -> Optional[str]:
    if not has_twitter_card(facts):
        return "Add Twitter Card meta tags."


def _not_https(facts, meta, cfg) -> Optional[str]:
    if not is_https(meta):
        return "The site is not served over HTTPS."


def _missing_canonical(facts, meta, cfg) -> Optional[str]:
    if not facts.canonical:
        return "Missing canonical link."


def _missing_viewport(facts, meta, cfg) -> Optional[str]:
    if not facts.viewport:
        return "Missing viewport meta tag for mobile."


IssueRule = Tuple[str, Callable[[PageFacts, ResponseMeta, ScoringConfig], Optional[str]]]

ISSUE_RULES: List[IssueRule] = [
    (CRITICAL, _missing_title),
    (WARNING, _bad_meta_description),
    (CRITICAL, _no_h1),
    (WARNING, _multiple_h1),
    (WARNING, _images_without_alt),
    (INFO, _missing_open_graph),
    (INFO, _missing_twitter_card),
    (CRITICAL, _not_https),
    (INFO, _missing_canonical),
    (WARNING, _missing_viewport),
]


def detect_issues(facts: PageFacts, meta: ResponseMeta, cfg: ScoringConfig = scoring_config) -> List[Issue]:
    issues = []
    for severity, rule in ISSUE_RULES:
        message = rule(facts, meta, cfg)
        if message:
            issues.append(Issue(severity=severity, message=message))
    return issues


def score(facts: PageFacts, meta: ResponseMeta, cfg: Optional[ScoringConfig] = None) -> ScoreResult:
    """Compute category scores, the overall score and the issue list"""
    cfg = cfg or scoring_config

    categories = {
        "content": content_score(facts, cfg),
        "technical": technical_score(facts, meta, cfg),
        "links": links_score(facts, cfg),
        "accessibility": accessibility_score(facts, cfg),
        "mobile": mobile_score(facts, cfg),
        "social": social_score(facts, cfg),
        "structuredData": structured_data_score(facts, cfg),
        "performance": performance_score(meta, cfg),
    }
    overall = overall_score(categories, cfg)

    scores = CategoryScores(
        content=categories["content"],
        technical=categories["technical"],
        links=categories["links"],
        accessibility=categories["accessibility"],
        mobile=categories["mobile"],
        social=categories["social"],
        structured_data=categories["structuredData"],
        performance=categories["performance"],
        overall=overall,
    )
    issues = detect_issues(facts, meta, cfg)

    logger.debug(f"Scored {meta.url}: overall {overall}, {len(issues)} issues")
    return ScoreResult(scores=scores, issues=issues)
