"""Rule-based archetype router with tiny fuzzy matching."""
import re
from difflib import SequenceMatcher
from typing import Any, Dict, List, Optional


def _contains_any(q: str, vocab: List[str]) -> bool:
    ql = q.lower()

    # First check for exact multi-word phrases
    for phrase in vocab:
        if phrase.lower() in ql:
            return True

    # Then single words, tolerating typos
    tokens = re.findall(r"[^\W\d_]+", ql)
    for t in tokens:
        for w in vocab:
            if " " in w:
                continue
            if SequenceMatcher(None, t, w.lower()).ratio() >= 0.84:
                return True
    return False


def keyword_score(query: str, keywords: List[str]) -> int:
    """Number of keywords that appear in the query."""
    return sum(1 for kw in keywords if _contains_any(query, [kw]))


def rule_based_archetype(query: str, archetypes: List[Dict[str, Any]]) -> Optional[str]:
    """Best keyword match over routing hints, or None when nothing matches."""
    best_id, best_score = None, 0
    for archetype in archetypes:
        hints = archetype.get("routing_hints", {})
        if any(ex.lower() in query.lower() for ex in hints.get("exclusions", [])):
            continue
        score = keyword_score(query, hints.get("keywords", []))
        if score > best_score:
            best_id, best_score = archetype["id"], score
    return best_id
