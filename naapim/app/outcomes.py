"""What users report back after a decision, and how they rate the questions asked."""
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from .embed import EmbeddingClient
from ..data.models import OutcomeType, Feeling, FeedbackValue
from ..data.outcome_store import OutcomeStore
from ..utils.logger import get_logger
from ..utils.security import mask_pii

logger = get_logger()


def _parse_enum(enum_cls, value, name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValueError(f"Invalid {name}. Must be one of: {allowed}")


class OutcomeService:
    def __init__(self, db: Session, embedder: Optional[EmbeddingClient] = None):
        self.store = OutcomeStore(db)
        self.embedder = embedder

    def _embed(self, related_question: Optional[str], outcome_text: Optional[str]):
        if self.embedder is None or not outcome_text:
            return None
        text = f"{related_question or ''} | {outcome_text}"
        try:
            return self.embedder.generate_embedding(text)
        except Exception as e:
            # Stories without a vector still show up through archetype matching
            logger.warning(f"[OUTCOME] Embedding failed, saving without it: {e}")
            return None

    def save_outcome(
        self,
        session_id: str,
        outcome_type: str,
        outcome_text: Optional[str] = None,
        feeling: Optional[str] = None,
        archetype_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not session_id or not outcome_type:
            raise ValueError("session_id and outcome_type are required")
        outcome_type = _parse_enum(OutcomeType, outcome_type, "outcome_type")
        feeling = _parse_enum(Feeling, feeling, "feeling") if feeling else None

        related_question = None
        session = self.store.get_session(session_id)
        if session is not None:
            archetype_id = archetype_id or session.archetype_id
            related_question = session.user_question
        else:
            logger.warning(f"[OUTCOME] No session {session_id}, saving outcome without context")

        outcome = self.store.save_outcome(
            session_id=session_id,
            outcome_type=outcome_type,
            outcome_text=outcome_text,
            feeling=feeling,
            archetype_id=archetype_id,
            related_question=related_question,
            embedding=self._embed(related_question, outcome_text),
            is_generated=False,
        )
        logger.info(f"[OUTCOME] {outcome.id} ({outcome_type.value}) for session {session_id}: "
                    f"{mask_pii(outcome_text or '')[:60]}")
        return {
            "success": True,
            "outcome_id": outcome.id,
            "created_at": outcome.created_at.isoformat() if outcome.created_at else None,
            "message": "Outcome saved successfully",
        }

    def save_question_feedback(
        self,
        session_id: Optional[str],
        archetype_id: str,
        field_key: str,
        feedback: str,
    ) -> Dict[str, Any]:
        if not archetype_id or not field_key or not feedback:
            raise ValueError("archetype_id, field_key and feedback are required")
        value = _parse_enum(FeedbackValue, feedback, "feedback")
        self.store.save_feedback(session_id, archetype_id, field_key, value)
        logger.info(f"[FEEDBACK] {archetype_id}/{field_key}: {value.value}")
        return {"success": True}
