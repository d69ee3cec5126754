"""Pydantic models for API I/O.

Required fields are checked by the handlers so a missing value comes back as a
400 with a readable message.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class SubmitSessionRequest(BaseModel):
    user_question: Optional[str] = None
    answers: Any = None
    archetype_id: Optional[str] = None

class SubmitSessionResponse(BaseModel):
    success: bool
    session_id: str
    code: str


class FetchAnalysisRequest(BaseModel):
    code: Optional[str] = None

class OutcomeOut(BaseModel):
    id: str
    outcome_type: str
    outcome_text: Optional[str] = None
    feeling: Optional[str] = None
    created_at: Optional[str] = None

class FetchAnalysisResponse(BaseModel):
    session_id: str
    code: str
    user_question: str
    archetype_id: str
    answers: Dict[str, str] = Field(default_factory=dict)
    analysis: Optional[Dict[str, Any]] = None
    previous_outcomes: List[OutcomeOut] = Field(default_factory=list)


class SaveAnalysisRequest(BaseModel):
    session_id: Optional[str] = None
    analysis: Optional[Dict[str, Any]] = None
    code: Optional[str] = None


class SaveOutcomeRequest(BaseModel):
    session_id: Optional[str] = None
    outcome_type: Optional[str] = None
    outcome_text: Optional[str] = None
    feeling: Optional[str] = None
    archetype_id: Optional[str] = None

class SaveOutcomeResponse(BaseModel):
    success: bool
    outcome_id: str
    created_at: Optional[str] = None
    message: str


class QuestionFeedbackRequest(BaseModel):
    session_id: Optional[str] = None
    archetype_id: Optional[str] = None
    field_key: Optional[str] = None
    feedback: Optional[str] = None


class CommunityStoriesRequest(BaseModel):
    archetype_id: Optional[str] = None
    limit: Optional[int] = None
    exclude_session_id: Optional[str] = None
    user_question: Optional[str] = None
    context: Optional[str] = None

class StoryStats(BaseModel):
    total: int
    real_users: int
    generated: int

class Story(BaseModel):
    id: str
    archetype_id: Optional[str] = None
    outcome_type: str
    outcome_text: Optional[str] = None
    feeling: Optional[str] = None
    related_question: Optional[str] = None
    is_generated: bool = False
    created_at: Optional[str] = None
    similarity: Optional[float] = None

class CommunityStoriesResponse(BaseModel):
    stories: List[Story] = Field(default_factory=list)
    stats: StoryStats


class ClassifyRequest(BaseModel):
    user_question: Optional[str] = None

class ClassifyResponse(BaseModel):
    archetype_id: str
    confidence: float
    needs_clarification: bool = False
    clarification_prompt: Optional[str] = None
    interpreted_question: Optional[str] = None
    is_unrealistic: Optional[bool] = None


class SelectQuestionsRequest(BaseModel):
    user_question: Optional[str] = None
    archetype_id: Optional[str] = None

class SelectQuestionsResponse(BaseModel):
    selected_fields: List[Dict[str, Any]] = Field(default_factory=list)
    selected_field_keys: List[str] = Field(default_factory=list)
    reasoning: str = ""


class GenerateAnalysisRequest(BaseModel):
    user_question: Optional[str] = None
    answers: Dict[str, str] = Field(default_factory=dict)
    archetype_id: Optional[str] = None


class ModerateRequest(BaseModel):
    text: Optional[str] = None

class ModerateResponse(BaseModel):
    approved: bool
    category: Optional[str] = None
    reason: Optional[str] = None
    corrected_text: Optional[str] = None
