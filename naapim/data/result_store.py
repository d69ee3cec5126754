"""Result records: tracking-code lookups and analysis persistence."""
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import Result
from ..utils.logger import get_logger

logger = get_logger()

PLACEHOLDER_DECISION = "Analysis complete"
PLACEHOLDER_CONFIDENCE = 5


def normalize_code(code: Optional[str]) -> str:
    """Codes are typed by hand; accept stray whitespace and lower case."""
    return (code or "").strip().upper()


class ResultStore:
    """Reads and writes rows of the results table for one database session."""

    def __init__(self, db: Session):
        self.db = db

    def code_exists(self, code: str) -> bool:
        """Read-only uniqueness check used by the tracking code generator."""
        try:
            return (
                self.db.query(Result.id)
                .filter(Result.tracking_code == code)
                .first()
                is not None
            )
        except SQLAlchemyError:
            # the session stays unusable for the next lookup until rolled back
            self.db.rollback()
            raise

    def create_result(self, session_id: str, tracking_code: str) -> Result:
        """Insert the result row for a session. Raises IntegrityError on a duplicate code."""
        result = Result(
            session_id=session_id,
            decision=PLACEHOLDER_DECISION,
            confidence_score=PLACEHOLDER_CONFIDENCE,
            tracking_code=tracking_code,
        )
        self.db.add(result)
        self.db.commit()
        self.db.refresh(result)
        return result

    def find_by_code(self, code: str) -> Optional[Result]:
        normalized = normalize_code(code)
        if not normalized:
            return None
        return self.db.query(Result).filter(Result.tracking_code == normalized).first()

    def find_by_session(self, session_id: str) -> Optional[Result]:
        return self.db.query(Result).filter(Result.session_id == session_id).first()

    def save_analysis(self, session_id: str, analysis: Dict[str, Any], code: Optional[str] = None) -> bool:
        """
        Attach a generated analysis to a session's result.

        The tracking code is never rewritten here; when ``code`` is supplied it
        has to match the stored one.

        Returns:
            True if the result was updated, False if no matching result exists
        """
        result = self.find_by_session(session_id)
        if result is None:
            logger.warning(f"[RESULTS] No result row for session {session_id}")
            return False
        if code and normalize_code(code) != result.tracking_code:
            logger.warning(f"[RESULTS] Code mismatch for session {session_id}")
            return False

        result.analysis_json = analysis
        title = (analysis or {}).get("title")
        if title:
            result.decision = title
        self.db.commit()
        return True
