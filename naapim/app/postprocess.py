#!/usr/bin/env python3
"""
Postprocessing module for the Naapim decision backend.

This module normalises model-generated analyses into the shape the client renders.
"""

from typing import Any, Dict, List, Optional

SENTIMENTS = ("positive", "cautious", "warning", "negative", "neutral")
TIMING_VALUES = ("now", "1_month", "3_months", "6_months", "1_year", "2_years", "uncertain")
SUGGESTION_TYPES = ("product", "food", "activity", "travel", "media", "gift", "other")
MAX_STEPS = 5
MAX_RANKED_OPTIONS = 5


def _clamp_score(value: Any) -> Optional[int]:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError):
        return None
    return max(0, min(100, score))


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


def _named_items(value: Any) -> List[Dict[str, str]]:
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, dict) and item.get("name"):
            items.append({"name": str(item["name"]), "description": str(item.get("description") or "")})
    return items


class Postprocessor:
    """Postprocesses LLM analyses."""

    def format_ranked_options(self, value: Any) -> List[Dict[str, Any]]:
        """Options sorted by fit score, best first."""
        if not isinstance(value, list):
            return []
        options = []
        for item in value:
            if not isinstance(item, dict) or not item.get("name"):
                continue
            options.append({
                "name": str(item["name"]),
                "fit_score": _clamp_score(item.get("fit_score")) or 0,
                "reason": str(item.get("reason") or ""),
            })
        options.sort(key=lambda o: o["fit_score"], reverse=True)
        return options[:MAX_RANKED_OPTIONS]

    def process_analysis(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """
        Normalise a raw model analysis.

        Args:
            raw: Parsed JSON from the model

        Returns:
            Analysis dictionary with every field present and in range
        """
        sentiment = str(raw.get("sentiment") or "").lower()
        timing = raw.get("timing_recommendation")
        suggestion_type = raw.get("suggestion_type")

        return {
            "title": str(raw.get("title") or "").strip(),
            "recommendation": str(raw.get("recommendation") or "").strip(),
            "reasoning": str(raw.get("reasoning") or "").strip(),
            "steps": _string_list(raw.get("steps"))[:MAX_STEPS],
            "alternatives": _named_items(raw.get("alternatives")),
            "pros": _string_list(raw.get("pros")),
            "cons": _string_list(raw.get("cons")),
            "sentiment": sentiment if sentiment in SENTIMENTS else "neutral",
            "decision_score": _clamp_score(raw.get("decision_score")),
            "score_label": raw.get("score_label") or None,
            "metre_left_label": raw.get("metre_left_label") or None,
            "metre_right_label": raw.get("metre_right_label") or None,
            "ranked_options": self.format_ranked_options(raw.get("ranked_options")),
            "timing_recommendation": timing if timing in TIMING_VALUES else None,
            "timing_reason": raw.get("timing_reason") or None,
            "followup_question": raw.get("followup_question") or None,
            "specific_suggestions": _named_items(raw.get("specific_suggestions")),
            "suggestion_type": suggestion_type if suggestion_type in SUGGESTION_TYPES else "other",
        }
