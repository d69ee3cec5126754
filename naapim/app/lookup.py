"""Returning-user lookup: resolve a tracking code back to the stored decision."""
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..data.models import DecisionSession, Response
from ..data.outcome_store import OutcomeStore
from ..data.result_store import ResultStore
from ..utils.logger import get_logger

logger = get_logger()


def enum_value(value):
    return value.value if hasattr(value, "value") else value


def outcome_to_dict(outcome) -> Dict[str, Any]:
    return {
        "id": outcome.id,
        "outcome_type": enum_value(outcome.outcome_type),
        "outcome_text": outcome.outcome_text,
        "feeling": enum_value(outcome.feeling),
        "created_at": outcome.created_at.isoformat() if outcome.created_at else None,
    }


class DecisionLookup:
    def __init__(self, db: Session):
        self.db = db
        self.results = ResultStore(db)
        self.outcomes = OutcomeStore(db)

    def fetch(self, code: str) -> Optional[Dict[str, Any]]:
        """Everything needed to reopen a decision, or None if the code is unknown."""
        result = self.results.find_by_code(code)
        if result is None:
            logger.info("[LOOKUP] Unknown tracking code")
            return None

        session = self.db.get(DecisionSession, result.session_id)
        if session is None:
            logger.warning(f"[LOOKUP] Result {result.id} points at missing session {result.session_id}")
            return None

        responses = self.db.query(Response).filter(Response.session_id == session.id).all()
        answers = {r.field_key: r.option_id for r in responses}

        return {
            "session_id": session.id,
            "code": result.tracking_code,
            "user_question": session.user_question,
            "archetype_id": session.archetype_id,
            "answers": answers,
            "analysis": result.analysis_json,
            "previous_outcomes": [outcome_to_dict(o) for o in self.outcomes.list_for_session(session.id)],
        }
