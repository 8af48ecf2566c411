from __future__ import annotations

import re
from typing import Dict, List, Optional

CONTEXT_FIELDS = ("occasion", "weather", "dress_code", "budget", "desired_vibe")

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"

"""
Style rules keyed by trigger words found in the occasion / dress code text.

 - "prefer": detected content containing any of these reads as a match
 - "avoid": detected content containing any of these reads as a clash (wins over prefer)
 All keywords are lowercase and matched as substrings.
"""
STYLE_RULES: Dict[str, Dict[str, List[str]]] = {
    "formal": {
        "triggers": ["formal", "black tie", "wedding", "gala", "ceremony", "cocktail"],
        "prefer": ["suit", "blazer", "dress shirt", "gown", "dress", "tie", "heels", "oxford", "loafer", "formal", "elegant"],
        "avoid": ["sneaker", "t-shirt", "tee", "hoodie", "shorts", "jogger", "sweatpant", "flip-flop", "denim", "jeans"],
    },
    "workout": {
        "triggers": ["gym", "workout", "training", "running", "sport", "yoga", "hike", "hiking"],
        "prefer": ["athletic", "sneaker", "trainer", "legging", "shorts", "sport", "performance", "tank"],
        "avoid": ["heels", "blazer", "loafer", "oxford", "suit", "dress shirt"],
    },
    "beach": {
        "triggers": ["beach", "pool", "resort", "vacation"],
        "prefer": ["shorts", "sandal", "linen", "swim", "sunglasses", "straw", "slide"],
        "avoid": ["boots", "blazer", "wool", "coat", "suit"],
    },
    "business": {
        "triggers": ["business", "office", "work", "interview", "meeting", "smart"],
        "prefer": ["blazer", "shirt", "button", "trouser", "chino", "slacks", "loafer", "oxford", "pencil skirt", "smart", "tailored"],
        "avoid": ["hoodie", "shorts", "flip-flop", "sweatpant", "jogger", "tank top", "ripped"],
    },
    "party": {
        "triggers": ["party", "date", "night out", "club", "dinner"],
        "prefer": ["dress", "heels", "blazer", "silk", "satin", "leather", "chic", "statement"],
        "avoid": ["sweatpant", "gym", "athletic"],
    },
    "casual": {
        "triggers": ["casual", "brunch", "errand", "weekend", "relaxed", "everyday"],
        "prefer": ["jeans", "t-shirt", "tee", "sneaker", "casual", "denim", "sweater", "hoodie"],
        "avoid": ["tuxedo", "gown", "black tie"],
    },
}

WEATHER_RULES: Dict[str, Dict[str, List[str]]] = {
    "cold": {
        "triggers": ["cold", "winter", "snow", "chilly", "freezing", "cool"],
        "prefer": ["coat", "jacket", "sweater", "wool", "knit", "boots", "scarf", "puffer", "parka", "cardigan", "hoodie"],
        "avoid": ["shorts", "sandal", "tank", "sleeveless", "flip-flop"],
    },
    "rain": {
        "triggers": ["rain", "wet", "storm", "drizzle"],
        "prefer": ["raincoat", "trench", "waterproof", "boots", "umbrella", "rain jacket"],
        "avoid": ["suede", "canvas", "sandal"],
    },
    "hot": {
        "triggers": ["hot", "warm", "summer", "sunny", "humid", "heat"],
        "prefer": ["linen", "shorts", "t-shirt", "tee", "sandal", "cotton", "tank", "sleeveless", "sneaker"],
        "avoid": ["wool", "coat", "puffer", "parka", "heavy", "knit", "turtleneck"],
    },
}

LOW_BUDGET_TRIGGERS = ["low", "cheap", "tight", "student", "budget", "affordable", "thrift"]
HIGH_BUDGET_TRIGGERS = ["high", "luxury", "premium", "designer", "no limit", "splurge"]
PREMIUM_MARKERS = ["silk", "cashmere", "leather", "designer", "tailored", "luxury", "suede"]

_WORD_RE = re.compile(r"[a-z][a-z\-]{2,}")
_VIBE_STOPWORDS = {"and", "the", "with", "look", "vibe", "style", "feel", "but", "not", "very", "bit", "more", "less"}


def _detected_text(vision: Dict) -> str:
    parts: List[str] = []
    items = vision.get("items") if isinstance(vision, dict) else None
    if isinstance(items, dict):
        for labels in items.values():
            if isinstance(labels, list):
                parts.extend(str(x) for x in labels if x)
    for key in ("colors", "patterns", "materials", "style_tags"):
        values = vision.get(key) if isinstance(vision, dict) else None
        if isinstance(values, list):
            parts.extend(str(x) for x in values if x)
    description = vision.get("description") if isinstance(vision, dict) else None
    if description:
        parts.append(str(description))
    return " ".join(parts).lower()


def _find_rule(text: str, rules: Dict[str, Dict[str, List[str]]]) -> Optional[str]:
    for name, rule in rules.items():
        if any(trigger in text for trigger in rule["triggers"]):
            return name
    return None


def _hits(detected: str, keywords: List[str]) -> List[str]:
    return [kw for kw in keywords if kw in detected]


def _judge_style(value: str, detected: str, rules: Dict[str, Dict[str, List[str]]], subject: str) -> Dict[str, str]:
    rule_name = _find_rule(value, rules)
    if rule_name is None:
        return {
            "status": NEUTRAL,
            "message": f"Couldn't map the {subject} \"{value}\" to a known style; judge the fit yourself.",
        }

    rule = rules[rule_name]
    clashes = _hits(detected, rule["avoid"])
    if clashes:
        return {
            "status": NEGATIVE,
            "message": f"{', '.join(clashes).capitalize()} may not suit a {rule_name} {subject}.",
        }
    matches = _hits(detected, rule["prefer"])
    if matches:
        return {
            "status": POSITIVE,
            "message": f"{', '.join(matches).capitalize()} fits a {rule_name} {subject}.",
        }
    return {
        "status": NEUTRAL,
        "message": f"Nothing detected clearly matches or clashes with a {rule_name} {subject}.",
    }


def _judge_budget(value: str, detected: str) -> Dict[str, str]:
    premium = _hits(detected, PREMIUM_MARKERS)
    if any(t in value for t in LOW_BUDGET_TRIGGERS) and premium:
        return {
            "status": NEGATIVE,
            "message": f"Pieces like {', '.join(premium)} can be pricey for a tight budget.",
        }
    if any(t in value for t in HIGH_BUDGET_TRIGGERS) and premium:
        return {
            "status": POSITIVE,
            "message": f"{', '.join(premium).capitalize()} suits a premium budget.",
        }
    return {"status": NEUTRAL, "message": "Budget can't be judged reliably from a photo."}


def _judge_vibe(value: str, detected: str) -> Dict[str, str]:
    words = [w for w in _WORD_RE.findall(value) if w not in _VIBE_STOPWORDS]
    matched = [w for w in words if w in detected]
    if matched:
        return {
            "status": POSITIVE,
            "message": f"The look reads as {', '.join(matched)}.",
        }
    return {"status": NEUTRAL, "message": f"The outfit doesn't clearly read as \"{value}\"."}


def evaluate_context(vision: Dict, intake: Dict) -> Dict[str, Dict[str, str]]:
    """Judge the detected outfit against each filled-in intake field.

    Returns ``{field: {"status", "message"}}`` only for fields with a
    non-empty value; status is positive, negative or neutral.
    """
    if not isinstance(intake, dict):
        return {}

    detected = _detected_text(vision or {})
    feedback: Dict[str, Dict[str, str]] = {}

    for field in CONTEXT_FIELDS:
        raw = intake.get(field)
        if raw is None:
            continue
        value = " ".join(str(raw).lower().split())
        if not value:
            continue

        if field in ("occasion", "dress_code"):
            subject = "occasion" if field == "occasion" else "dress code"
            feedback[field] = _judge_style(value, detected, STYLE_RULES, subject)
        elif field == "weather":
            feedback[field] = _judge_style(value, detected, WEATHER_RULES, "weather")
        elif field == "budget":
            feedback[field] = _judge_budget(value, detected)
        else:
            feedback[field] = _judge_vibe(value, detected)

    return feedback
