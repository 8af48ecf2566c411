from __future__ import annotations

from typing import Dict, List, Optional

from .context_feedback import evaluate_context

BASELINE_SCORE = 70


def _labels(vision: Dict, *path: str) -> List:
    node = vision
    for key in path:
        if not isinstance(node, dict):
            return []
        node = node.get(key)
    if isinstance(node, list):
        return node
    return [node] if node else []


def analyze_outfit(vision: Dict, intake: Optional[Dict] = None, baseline: int = BASELINE_SCORE) -> Dict:
    """Score a parsed vision result with fixed additive rules.

    Starts at ``baseline`` (70) and clamps the result to [0, 100]. Pros, issues and
    suggestions are human-readable notes for each rule that fired. When any
    intake field is filled in, a per-field context judgement is attached
    under ``context_feedback``.
    """
    tops = _labels(vision, "items", "tops")
    bottoms = _labels(vision, "items", "bottoms")
    shoes = _labels(vision, "items", "shoes")
    outerwear = _labels(vision, "items", "outerwear")
    accessories = _labels(vision, "items", "accessories")
    colors = _labels(vision, "colors")

    score = baseline
    pros: List[str] = []
    issues: List[str] = []
    suggestions: List[str] = []

    if tops and bottoms and shoes:
        score += 10
        pros.append("Complete outfit detected (top, bottom, shoes).")
    else:
        score -= 15
        issues.append("Outfit appears incomplete or some key items were not detected clearly.")
        suggestions.append("Try taking a full-body photo with shoes visible and good lighting.")

    if 1 <= len(colors) <= 4:
        score += 5
        pros.append("Color palette seems cohesive.")

    if len(colors) > 5:
        score -= 5
        issues.append("Many colors detected; outfit may feel visually busy.")
        suggestions.append("Consider limiting the palette to 2-4 main colors.")

    if accessories:
        score += 3
        pros.append("Accessories detected.")

    if outerwear:
        score += 2
        pros.append("Outerwear detected, can add structure to the look.")

    result = {
        "score": max(0, min(100, score)),
        "pros": pros,
        "issues": issues,
        "suggestions": suggestions,
    }

    feedback = evaluate_context(vision, intake or {})
    if feedback:
        result["context_feedback"] = feedback

    return result
