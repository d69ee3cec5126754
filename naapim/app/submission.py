#!/usr/bin/env python3
"""
Session submission: persist a decision session with its answers and issue its tracking code.
"""

from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import Config
from .tracking_code import TrackingCodeGenerator
from ..data.models import DecisionSession, Response, SessionStatus
from ..data.result_store import ResultStore
from ..utils.logger import get_logger
from ..utils.security import preview

logger = get_logger()


def normalize_answers(answers: Any) -> List[Dict[str, str]]:
    """
    Turn submitted answers into (field_key, option_id) pairs.

    Accepts the current mapping form ``{field_key: option_id}`` and the legacy
    list form ``[{"field_key": ..., "option_id": ...}]``; anything else yields
    no answers.
    """
    if isinstance(answers, dict):
        return [
            {"field_key": str(key), "option_id": str(value)}
            for key, value in answers.items()
        ]
    if isinstance(answers, list):
        pairs = []
        for index, answer in enumerate(answers):
            answer = answer if isinstance(answer, dict) else {}
            pairs.append({
                "field_key": str(answer.get("field_key") or f"q_{index}"),
                "option_id": str(answer.get("option_id") or f"opt_{index}"),
            })
        return pairs
    return []


class SessionSubmitter:
    """Writes session, responses and result rows in that order."""

    def __init__(
        self,
        db: Session,
        generator_factory: Optional[Callable[[Callable[[str], bool]], TrackingCodeGenerator]] = None,
    ):
        self.db = db
        self.results = ResultStore(db)
        self.generator_factory = generator_factory or TrackingCodeGenerator

    def submit(self, user_question: str, answers: Any = None, archetype_id: Optional[str] = None) -> Dict[str, Any]:
        if not user_question or not user_question.strip():
            raise ValueError("Missing user_question")

        archetype_id = archetype_id or Config.DEFAULT_ARCHETYPE_ID
        logger.info(f"[SUBMIT] 1. New session ({archetype_id}): {preview(user_question)}")

        session = DecisionSession(
            user_question=user_question,
            archetype_id=archetype_id,
            status=SessionStatus.active,
        )
        self.db.add(session)
        self.db.commit()
        session_id = session.id

        pairs = normalize_answers(answers)
        if pairs:
            self.db.add_all([Response(session_id=session_id, **pair) for pair in pairs])
            self.db.commit()
        logger.info(f"[SUBMIT] 2. Stored {len(pairs)} responses for session {session_id}")

        code = self._issue_code(session_id)
        logger.info(f"[SUBMIT] 3. Session {session_id} got tracking code {code}")

        return {"success": True, "session_id": session_id, "code": code}

    def _issue_code(self, session_id: str) -> str:
        """Generate a code and write the result row, retrying if the unique index rejects it."""
        generator = self.generator_factory(self.results.code_exists)
        last_error = None
        for attempt in range(1, Config.RESULT_INSERT_ATTEMPTS + 1):
            code = generator.generate()
            try:
                self.results.create_result(session_id, code)
                return code
            except IntegrityError as e:
                self.db.rollback()
                last_error = e
                logger.warning(f"[SUBMIT] Tracking code {code} rejected by the store (attempt {attempt})")
        raise RuntimeError(f"Could not store a unique tracking code for session {session_id}") from last_error
