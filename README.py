"""
NAAPIM: System Documentation
============================

This module-style README documents the architecture, data flows and
operational practices of the Naapim decision-support backend. Run
`python README.py` to print it.

Table of Contents
-----------------
1. System Overview
2. Decision Flow
3. Backend Components
4. Data & Persistence
5. Tracking Codes
6. Language-Model Handlers
7. Configuration & Environment
8. Testing Strategy
9. Security & PII Handling
10. Running Locally

"""

from __future__ import annotations

import textwrap


def section(title: str, body: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n{body.strip()}\n"


SYSTEM_OVERVIEW = section(
    "1. System Overview",
    """
    Naapim helps people think through a personal decision. A user types a
    question, answers a short questionnaire, and gets an analysis plus an
    8-character tracking code. Nobody signs up: the code is the only way back
    to a stored decision, to report what they finally did, and to read what
    others in a similar spot decided.
    """,
)


DECISION_FLOW = section(
    "2. Decision Flow",
    """
    1) /classify-question routes the question to an archetype (career, money, ...).
    2) /select-questions picks 5-10 relevant questions from the archetype registry.
    3) /submit-session stores question + answers and returns the tracking code.
    4) /generate-analysis produces the recommendation; /save-analysis stores it.
    5) Later: /fetch-analysis with the code, /save-outcome to report back,
       /fetch-community-stories to read other people's outcomes.
    """,
)


BACKEND_COMPONENTS = section(
    "3. Backend Components",
    """
    app/
      - main.py: FastAPI app, routes, CORS, error mapping.
      - config.py: Env-driven configuration (keys, URLs, models, limits).
      - tracking_code.py: Collision-checked code generation.
      - submission.py / lookup.py: Session submission and code lookup.
      - outcomes.py / stories.py: Outcome reports, feedback, community stories.
      - generate.py: LLM client (OpenAI-compatible or Gemini).
      - prompt_builder.py / postprocess.py: Prompts and analysis normalisation.
      - questions.py / analysis.py / moderation.py: LLM handlers.
      - embed.py: sentence-transformers embeddings + cosine similarity.

    nlu/
      - rules.py: Keyword routing over registry hints (no-key mode).
      - llm_router.py: Question classifier.

    data/
      - models.py/database.py: SQLAlchemy models and session management.
      - result_store.py / outcome_store.py: Queries behind the services.
      - registry_store.py + registry/registry.json: Archetypes and questions.
    """,
)


DATA_AND_PERSISTENCE = section(
    "4. Data & Persistence",
    """
    - DB: SQLite by default via SQLAlchemy (DATABASE_URL for anything else).
    - Tables: sessions, responses, results, outcomes, question_feedback.
    - results.tracking_code is unique and indexed; one result per session.
    - `python -m naapim.data.database` creates the tables;
      `python -m naapim.scripts.inspect_db` prints everything read-only.
    """,
)


TRACKING_CODES = section(
    "5. Tracking Codes",
    """
    - 8 symbols from ABCDEFGHJKLMNPQRSTUVWXYZ23456789 (no 0/O, no 1/I).
    - Drawn from `secrets`; each candidate is checked against issued codes.
    - Up to 10 candidates; a failed lookup counts as one and backs off.
    - After 10 attempts: base-36 of the current time in ms, last 8 chars,
      left-padded with X. The unique index still guards the insert, and a
      rejected insert gets one fresh code.
    - Lookups accept lower case and stray whitespace.
    """,
)


LLM_HANDLERS = section(
    "6. Language-Model Handlers",
    """
    - One GenerationClient, JSON replies, provider chosen by LLM_PROVIDER.
    - Every handler degrades without a key or on failure: rules for
      classification, first 7 questions for selection, a neutral placeholder
      analysis, and approve-by-default moderation.
    """,
)


CONFIG_ENV = section(
    "7. Configuration & Environment",
    """
    - `.env` compatible; keys: DATABASE_URL, LLM_PROVIDER, OPENAI_API_KEY,
      OPENAI_MODEL, OPENAI_BASE_URL, GEMINI_API_KEY, GEMINI_MODEL, LLM_TIMEOUT,
      USE_EMBEDDINGS, EMBEDDING_MODEL, CORS_ORIGINS, LOG_LEVEL.
    - Sensible defaults defined in `config.py`; validated on import.
    """,
)


TESTING = section(
    "8. Testing Strategy",
    """
    - Pytest runs the unittest-style tests in `/tests`.
    - In-memory SQLite per test; LLM and embedder are mocks.
    - API tests use FastAPI's TestClient with dependency overrides.
    """,
)


SECURITY = section(
    "9. Security & PII Handling",
    """
    - `utils/security.py`: e-mail and long digit runs are masked in logs.
    - Community stories pass through moderation before they are shared.
    - Keys: Loaded from env; do not commit secrets.
    """,
)


RUNNING = section(
    "10. Running Locally",
    """
    - `pip install -e .[test]`
    - `uvicorn naapim.app.main:app --reload`
    - `pytest`
    """,
)


def as_text() -> str:
    return "\n".join(
        [
            SYSTEM_OVERVIEW,
            DECISION_FLOW,
            BACKEND_COMPONENTS,
            DATA_AND_PERSISTENCE,
            TRACKING_CODES,
            LLM_HANDLERS,
            CONFIG_ENV,
            TESTING,
            SECURITY,
            RUNNING,
        ]
    )


def main() -> None:
    print(textwrap.dedent(as_text()))


if __name__ == "__main__":
    main()
