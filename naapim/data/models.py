from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum, JSON, CheckConstraint
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from .database import Base
import enum
import uuid


def _uuid() -> str:
    return str(uuid.uuid4())

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatus(str, enum.Enum):
    active = "active"
    completed = "completed"

class OutcomeType(str, enum.Enum):
    decided = "decided"
    thinking = "thinking"
    cancelled = "cancelled"

class Feeling(str, enum.Enum):
    happy = "happy"
    neutral = "neutral"
    regret = "regret"
    uncertain = "uncertain"

class FeedbackValue(str, enum.Enum):
    helpful = "helpful"
    not_helpful = "not_helpful"


class DecisionSession(Base):
    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_question = Column(Text, nullable=False)
    archetype_id = Column(String(64), nullable=False, index=True)
    status = Column(Enum(SessionStatus), nullable=False, default=SessionStatus.active)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    responses = relationship("Response", back_populates="session")
    result = relationship("Result", back_populates="session", uselist=False)

class Response(Base):
    __tablename__ = "responses"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=False, index=True)
    field_key = Column(String(128), nullable=False)
    option_id = Column(String(128), nullable=False)

    session = relationship("DecisionSession", back_populates="responses")

class Result(Base):
    __tablename__ = "results"
    __table_args__ = (
        CheckConstraint("confidence_score BETWEEN 1 AND 10", name="ck_results_confidence_score"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=False, unique=True)
    decision = Column(Text, nullable=False)
    confidence_score = Column(Integer, nullable=False, default=5)
    # Public lookup handle; the unique index backs up the generator's retry loop
    tracking_code = Column(String(8), nullable=False, unique=True, index=True)
    analysis_json = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    session = relationship("DecisionSession", back_populates="result")

class Outcome(Base):
    __tablename__ = "outcomes"

    id = Column(String(36), primary_key=True, default=_uuid)
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=True, index=True)
    outcome_type = Column(Enum(OutcomeType), nullable=False)
    outcome_text = Column(Text, nullable=True)
    feeling = Column(Enum(Feeling), nullable=True)
    archetype_id = Column(String(64), nullable=True, index=True)
    related_question = Column(Text, nullable=True)
    is_generated = Column(Boolean, nullable=False, default=False)
    embedding = Column(JSON(none_as_null=True), nullable=True)  # list of floats
    created_at = Column(DateTime(timezone=True), default=_utcnow)

class QuestionFeedback(Base):
    __tablename__ = "question_feedback"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), nullable=True, index=True)
    archetype_id = Column(String(64), nullable=False)
    field_key = Column(String(128), nullable=False)
    feedback = Column(Enum(FeedbackValue), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
