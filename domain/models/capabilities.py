# domain/models/capabilities.py
import re
from enum import Enum
from typing import Dict, List, Optional, Tuple

class Capability(str, Enum):
    """Closed vocabulary of service categories an agent can perform"""
    LOGO_DESIGN = "logo-design"
    COPYWRITING = "copywriting"
    WEB_DEVELOPMENT = "web-development"
    SMART_CONTRACTS = "smart-contracts"
    DATA_ANALYSIS = "data-analysis"
    CONTENT_WRITING = "content-writing"
    VIDEO_EDITING = "video-editing"
    SOCIAL_MEDIA = "social-media"
    SEO_OPTIMIZATION = "seo-optimization"
    TRANSLATION = "translation"
    GRAPHIC_DESIGN = "graphic-design"
    UI_UX_DESIGN = "ui-ux-design"
    MODELING_3D = "3d-modeling"
    ANIMATION = "animation"
    CONSULTING = "consulting"

ALL_CAPABILITIES: Tuple[Capability, ...] = tuple(Capability)

DEFAULT_CAPABILITY = Capability.COPYWRITING

# Evaluated in this order; detected capabilities keep it
KEYWORD_TRIGGERS: Dict[Capability, List[str]] = {
    Capability.LOGO_DESIGN: ["logo", "brand mark", "icon design"],
    Capability.COPYWRITING: ["copy", "tagline", "slogan", "content", "write"],
    Capability.WEB_DEVELOPMENT: ["website", "web app", "landing page", "site"],
    Capability.GRAPHIC_DESIGN: ["graphic", "visual", "banner", "poster", "flyer"],
    Capability.VIDEO_EDITING: ["video", "edit", "footage"],
    Capability.SOCIAL_MEDIA: ["social", "twitter", "instagram", "facebook"],
    Capability.TRANSLATION: ["translate", "translation", "language"],
}

COMPLETION_ESTIMATES: Dict[Capability, str] = {
    Capability.LOGO_DESIGN: "1-2 hours",
    Capability.COPYWRITING: "30 minutes - 1 hour",
    Capability.WEB_DEVELOPMENT: "1-3 days",
    Capability.VIDEO_EDITING: "4-8 hours",
    Capability.GRAPHIC_DESIGN: "2-4 hours",
    Capability.SMART_CONTRACTS: "1-2 days",
}

DEFAULT_COMPLETION_ESTIMATE = "1-2 hours"

_UNIT_MINUTES = {
    "minute": 1,
    "hour": 60,
    "day": 60 * 24,
    "week": 60 * 24 * 7,
}

_DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(?:\s*-\s*\d+(?:\.\d+)?)?\s*(minute|hour|day|week)s?")

def parse_capability(value) -> Optional[Capability]:
    """Return the matching Capability, or None for anything outside the vocabulary"""
    if isinstance(value, Capability):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Capability(value.strip().lower())
    except ValueError:
        return None

def is_known_capability(value) -> bool:
    return parse_capability(value) is not None

def estimate_completion_time(capability) -> str:
    parsed = parse_capability(capability)
    if parsed is None:
        return DEFAULT_COMPLETION_ESTIMATE
    return COMPLETION_ESTIMATES.get(parsed, DEFAULT_COMPLETION_ESTIMATE)

def completion_time_minutes(estimate: Optional[str]) -> float:
    """Lower bound of a textual estimate such as "1-2 hours", in minutes.

    Unparseable or missing estimates sort after everything else.
    """
    if not estimate:
        return float("inf")
    match = _DURATION_PATTERN.search(estimate.lower())
    if not match:
        return float("inf")
    return float(match.group(1)) * _UNIT_MINUTES[match.group(2)]
