#!/usr/bin/env python3
"""
Main FastAPI application for the Naapim decision backend.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .analysis import AnalysisGenerator
from .config import Config
from .embed import EmbeddingClient, build_embedder
from .generate import GenerationClient, build_client
from .lookup import DecisionLookup
from .moderation import ContentModerator
from .outcomes import OutcomeService
from .questions import QuestionSelector
from .stories import CommunityStories
from .submission import SessionSubmitter
from ..data.database import create_tables, get_db
from ..data.registry_store import RegistryStore
from ..data.result_store import ResultStore
from ..nlu.llm_router import QuestionClassifier
from ..schemas.io_models import (
    SubmitSessionRequest, SubmitSessionResponse,
    FetchAnalysisRequest, FetchAnalysisResponse,
    SaveAnalysisRequest,
    SaveOutcomeRequest, SaveOutcomeResponse,
    QuestionFeedbackRequest,
    CommunityStoriesRequest, CommunityStoriesResponse,
    ClassifyRequest, ClassifyResponse,
    SelectQuestionsRequest, SelectQuestionsResponse,
    GenerateAnalysisRequest,
    ModerateRequest, ModerateResponse,
)
from ..utils.logger import get_logger

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    logger.info(f"[API] Ready, provider={Config.LLM_PROVIDER} key_set={bool(Config.llm_api_key())}")
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Naapim API",
    description="Decision-support backend: questions, analyses and community outcomes",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})


# Shared components, built on first use
@lru_cache(maxsize=1)
def get_registry() -> RegistryStore:
    return RegistryStore()

@lru_cache(maxsize=1)
def get_llm_client() -> Optional[GenerationClient]:
    return build_client()

@lru_cache(maxsize=1)
def get_embedder() -> Optional[EmbeddingClient]:
    return build_embedder()


def _fail(action: str, e: Exception):
    logger.error(f"[API] Error {action}: {e}")
    raise HTTPException(status_code=500, detail=f"Error {action}: {e}")


@app.post("/submit-session", response_model=SubmitSessionResponse)
def submit_session(request: SubmitSessionRequest, db: Session = Depends(get_db)):
    """Store a completed questionnaire and hand back its tracking code."""
    try:
        return SessionSubmitter(db).submit(request.user_question, request.answers, request.archetype_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        db.rollback()
        _fail("submitting session", e)


@app.post("/fetch-analysis", response_model=FetchAnalysisResponse)
def fetch_analysis(request: FetchAnalysisRequest, db: Session = Depends(get_db)):
    """Reopen a decision by its tracking code."""
    if not request.code or not request.code.strip():
        raise HTTPException(status_code=400, detail="Missing code")
    try:
        found = DecisionLookup(db).fetch(request.code)
    except Exception as e:
        _fail("fetching analysis", e)
    if found is None:
        raise HTTPException(status_code=404, detail="Not found")
    return found


@app.post("/save-analysis")
def save_analysis(request: SaveAnalysisRequest, db: Session = Depends(get_db)):
    if not request.session_id or not request.analysis:
        raise HTTPException(status_code=400, detail="session_id and analysis are required")
    try:
        saved = ResultStore(db).save_analysis(request.session_id, request.analysis, request.code)
    except Exception as e:
        db.rollback()
        _fail("saving analysis", e)
    if not saved:
        raise HTTPException(status_code=404, detail="Result not found")
    return {"success": True}


@app.post("/save-outcome", response_model=SaveOutcomeResponse)
def save_outcome(
    request: SaveOutcomeRequest,
    db: Session = Depends(get_db),
    embedder: Optional[EmbeddingClient] = Depends(get_embedder),
):
    try:
        return OutcomeService(db, embedder).save_outcome(
            request.session_id,
            request.outcome_type,
            outcome_text=request.outcome_text,
            feeling=request.feeling,
            archetype_id=request.archetype_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        db.rollback()
        _fail("saving outcome", e)


@app.post("/save-question-feedback")
def save_question_feedback(request: QuestionFeedbackRequest, db: Session = Depends(get_db)):
    try:
        return OutcomeService(db).save_question_feedback(
            request.session_id, request.archetype_id, request.field_key, request.feedback
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        db.rollback()
        _fail("saving feedback", e)


@app.post("/fetch-community-stories", response_model=CommunityStoriesResponse)
def fetch_community_stories(
    request: CommunityStoriesRequest,
    db: Session = Depends(get_db),
    embedder: Optional[EmbeddingClient] = Depends(get_embedder),
):
    if not request.archetype_id and not request.user_question:
        raise HTTPException(status_code=400, detail="archetype_id or user_question is required")
    try:
        return CommunityStories(db, embedder).find(
            archetype_id=request.archetype_id,
            limit=request.limit,
            exclude_session_id=request.exclude_session_id,
            user_question=request.user_question,
            context=request.context,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        _fail("fetching stories", e)


@app.post("/classify-question", response_model=ClassifyResponse)
def classify_question(
    request: ClassifyRequest,
    registry: RegistryStore = Depends(get_registry),
    client: Optional[GenerationClient] = Depends(get_llm_client),
):
    try:
        return QuestionClassifier(registry, client).classify(request.user_question)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/select-questions", response_model=SelectQuestionsResponse)
def select_questions(
    request: SelectQuestionsRequest,
    registry: RegistryStore = Depends(get_registry),
    client: Optional[GenerationClient] = Depends(get_llm_client),
):
    try:
        return QuestionSelector(registry, client).select(request.user_question, request.archetype_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/generate-analysis")
def generate_analysis(
    request: GenerateAnalysisRequest,
    registry: RegistryStore = Depends(get_registry),
    client: Optional[GenerationClient] = Depends(get_llm_client),
) -> Dict[str, Any]:
    archetype_id = request.archetype_id or Config.DEFAULT_ARCHETYPE_ID
    try:
        return AnalysisGenerator(registry, client).generate(request.user_question, request.answers, archetype_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/moderate-content", response_model=ModerateResponse)
def moderate_content(
    request: ModerateRequest,
    client: Optional[GenerationClient] = Depends(get_llm_client),
):
    return ContentModerator(client).moderate(request.text)


@app.api_route("/health", methods=["GET", "POST"])
async def health_check(request: Request):
    """Health check endpoint; POST bodies are echoed back."""
    echo = None
    if request.method == "POST":
        try:
            echo = await request.json()
        except ValueError:
            echo = None
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "message": "Naapim API is running",
        "echo": echo,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
