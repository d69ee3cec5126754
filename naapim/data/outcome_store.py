"""Outcome stories and per-question feedback."""
from typing import List, Optional

from sqlalchemy.orm import Session

from .models import DecisionSession, Outcome, QuestionFeedback, OutcomeType, Feeling, FeedbackValue


class OutcomeStore:
    def __init__(self, db: Session):
        self.db = db

    def get_session(self, session_id: str) -> Optional[DecisionSession]:
        return self.db.get(DecisionSession, session_id)

    def save_outcome(
        self,
        session_id: Optional[str],
        outcome_type: OutcomeType,
        outcome_text: Optional[str] = None,
        feeling: Optional[Feeling] = None,
        archetype_id: Optional[str] = None,
        related_question: Optional[str] = None,
        embedding: Optional[List[float]] = None,
        is_generated: bool = False,
    ) -> Outcome:
        outcome = Outcome(
            session_id=session_id,
            outcome_type=outcome_type,
            outcome_text=outcome_text or None,
            feeling=feeling,
            archetype_id=archetype_id or None,
            related_question=related_question,
            embedding=embedding,
            is_generated=is_generated,
        )
        self.db.add(outcome)
        self.db.commit()
        self.db.refresh(outcome)
        return outcome

    def list_for_session(self, session_id: str) -> List[Outcome]:
        """Outcomes reported for a session, newest first."""
        return (
            self.db.query(Outcome)
            .filter(Outcome.session_id == session_id)
            .order_by(Outcome.created_at.desc())
            .all()
        )

    def _shareable(self, exclude_session_id: Optional[str]):
        query = (
            self.db.query(Outcome)
            .filter(Outcome.outcome_text.isnot(None))
            .filter(Outcome.outcome_text != "")
            .filter(Outcome.feeling.isnot(None))
        )
        if exclude_session_id:
            # NULL session ids are seeded stories and stay visible
            query = query.filter(
                (Outcome.session_id.is_(None)) | (Outcome.session_id != exclude_session_id)
            )
        return query

    def recent_for_archetype(
        self,
        archetype_id: Optional[str],
        limit: int,
        exclude_session_id: Optional[str] = None,
    ) -> List[Outcome]:
        """Real stories before generated ones, newest first."""
        query = self._shareable(exclude_session_id)
        if archetype_id:
            query = query.filter(Outcome.archetype_id == archetype_id)
        return (
            query.order_by(Outcome.is_generated.asc(), Outcome.created_at.desc())
            .limit(limit)
            .all()
        )

    def with_embeddings(self, exclude_session_id: Optional[str] = None) -> List[Outcome]:
        return self._shareable(exclude_session_id).filter(Outcome.embedding.isnot(None)).all()

    def save_feedback(
        self,
        session_id: Optional[str],
        archetype_id: str,
        field_key: str,
        feedback: FeedbackValue,
    ) -> QuestionFeedback:
        """Upsert on (session_id, field_key); anonymous feedback is always inserted."""
        row = None
        if session_id:
            row = (
                self.db.query(QuestionFeedback)
                .filter(QuestionFeedback.session_id == session_id)
                .filter(QuestionFeedback.field_key == field_key)
                .first()
            )
        if row is None:
            row = QuestionFeedback(session_id=session_id, field_key=field_key)
            self.db.add(row)
        row.archetype_id = archetype_id
        row.feedback = feedback
        self.db.commit()
        return row
