"""Community stories: outcomes other people reported for similar decisions."""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from .config import Config
from .embed import EmbeddingClient, cosine_similarities
from .lookup import enum_value
from ..data.outcome_store import OutcomeStore
from ..utils.logger import get_logger

logger = get_logger()


def story_to_dict(outcome, similarity: Optional[float] = None) -> Dict[str, Any]:
    story = {
        "id": outcome.id,
        "archetype_id": outcome.archetype_id,
        "outcome_type": enum_value(outcome.outcome_type),
        "outcome_text": outcome.outcome_text,
        "feeling": enum_value(outcome.feeling),
        "related_question": outcome.related_question,
        "is_generated": bool(outcome.is_generated),
        "created_at": outcome.created_at.isoformat() if outcome.created_at else None,
    }
    if similarity is not None:
        story["similarity"] = round(float(similarity), 4)
    return story


class CommunityStories:
    def __init__(self, db: Session, embedder: Optional[EmbeddingClient] = None):
        self.store = OutcomeStore(db)
        self.embedder = embedder

    def semantic_matches(
        self,
        user_question: str,
        context: Optional[str],
        limit: int,
        exclude_session_id: Optional[str],
    ) -> List[Dict[str, Any]]:
        query = f"{user_question} | {context or ''}"
        query_vector = self.embedder.generate_embedding(query)

        candidates = [
            o for o in self.store.with_embeddings(exclude_session_id)
            if isinstance(o.embedding, list) and len(o.embedding) == len(query_vector)
        ]
        if not candidates:
            return []

        scores = cosine_similarities(query_vector, [o.embedding for o in candidates])
        ranked = sorted(zip(candidates, scores), key=lambda pair: pair[1], reverse=True)
        return [story_to_dict(o, score) for o, score in ranked[:limit]]

    def find(
        self,
        archetype_id: Optional[str] = None,
        limit: int = None,
        exclude_session_id: Optional[str] = None,
        user_question: Optional[str] = None,
        context: Optional[str] = None,
    ) -> Dict[str, Any]:
        limit = limit or Config.STORIES_DEFAULT_LIMIT
        if limit < 1:
            raise ValueError("limit must be positive")

        stories: List[Dict[str, Any]] = []
        if self.embedder is not None and user_question:
            try:
                stories = self.semantic_matches(user_question, context, limit, exclude_session_id)
                logger.info(f"[STORIES] Semantic search found {len(stories)} stories")
            except Exception as e:
                logger.warning(f"[STORIES] Semantic search failed, using archetype match: {e}")
                stories = []

        if not stories:
            outcomes = self.store.recent_for_archetype(archetype_id, limit, exclude_session_id)
            stories = [story_to_dict(o) for o in outcomes]
            logger.info(f"[STORIES] Archetype match ({archetype_id}) found {len(stories)} stories")

        generated = sum(1 for s in stories if s["is_generated"])
        return {
            "stories": stories,
            "stats": {
                "total": len(stories),
                "real_users": len(stories) - generated,
                "generated": generated,
            },
        }
