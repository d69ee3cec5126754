#!/usr/bin/env python3
"""
Configuration management for the Naapim decision backend.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    """Configuration class for the application."""

    # Database Configuration
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///naapim.db")

    # LLM Provider Switch (openai|gemini)
    LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").lower()

    # OpenAI-compatible chat completions
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

    # Gemini (Google) API Configuration
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

    LLM_TIMEOUT = int(os.getenv("LLM_TIMEOUT", 60))

    # Embeddings (sentence-transformers)
    USE_EMBEDDINGS = os.getenv("USE_EMBEDDINGS", "true").lower() in ("1", "true", "yes")
    EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")

    # Decision flow
    DEFAULT_ARCHETYPE_ID = "career_decisions"
    REGISTRY_PATH = os.getenv(
        "REGISTRY_PATH",
        os.path.join(os.path.dirname(__file__), "..", "data", "registry", "registry.json"),
    )
    MAX_FIELDS_WITHOUT_SELECTION = 10
    MIN_SELECTED_FIELDS = 5
    MAX_SELECTED_FIELDS = 10
    FALLBACK_FIELD_COUNT = 7
    STORIES_DEFAULT_LIMIT = 10

    # Tracking codes
    TRACKING_CODE_MAX_ATTEMPTS = 10
    TRACKING_CODE_LOOKUP_BACKOFF = float(os.getenv("TRACKING_CODE_LOOKUP_BACKOFF", 0.05))
    RESULT_INSERT_ATTEMPTS = 2

    # HTTP
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def llm_api_key(cls):
        """Return the API key for the active provider, or None."""
        if cls.LLM_PROVIDER == "gemini":
            return cls.GEMINI_API_KEY
        return cls.OPENAI_API_KEY

    @classmethod
    def debug_print(cls):
        print(f"[CONFIG] DATABASE_URL={cls.DATABASE_URL}")
        print(f"[CONFIG] LLM_PROVIDER={cls.LLM_PROVIDER} key_set={bool(cls.llm_api_key())}")
        print(f"[CONFIG] OPENAI_MODEL={cls.OPENAI_MODEL} GEMINI_MODEL={cls.GEMINI_MODEL}")
        print(f"[CONFIG] USE_EMBEDDINGS={cls.USE_EMBEDDINGS} model={cls.EMBEDDING_MODEL}")

    @classmethod
    def validate(cls):
        """Validate that the configuration is usable."""
        problems = []

        if cls.LLM_PROVIDER not in ("openai", "gemini"):
            problems.append(f"LLM_PROVIDER must be 'openai' or 'gemini', got '{cls.LLM_PROVIDER}'")
        if not cls.DATABASE_URL:
            problems.append("DATABASE_URL")

        if problems:
            raise ValueError(f"Invalid configuration: {', '.join(problems)}")

        return True

# Validate configuration on import
Config.validate()

if __name__ == "__main__":
    Config.debug_print()
