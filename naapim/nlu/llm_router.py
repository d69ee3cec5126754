"""Question classification: route a free-text question to a decision archetype.

The LLM does the routing when a provider key is configured; otherwise keyword
rules over the registry's routing hints pick the archetype.
"""
from typing import Any, Dict, Optional

from ..app.config import Config
from ..app.generate import GenerationClient
from ..app.prompt_builder import PromptBuilder
from ..data.registry_store import RegistryStore
from ..utils.logger import get_logger
from ..utils.security import preview
from .rules import rule_based_archetype

logger = get_logger()

VAGUE_PROMPT = "Could you tell us a little more about the decision you are facing?"
RETRY_PROMPT = "Something went wrong. Could you ask your question again?"


def _confidence(value: Any) -> float:
    try:
        return max(0.0, min(1.0, float(value)))
    except (TypeError, ValueError):
        return 0.5


class QuestionClassifier:
    def __init__(
        self,
        registry: RegistryStore,
        client: Optional[GenerationClient] = None,
        builder: Optional[PromptBuilder] = None,
    ):
        self.registry = registry
        self.client = client
        self.builder = builder or PromptBuilder()

    def _default_archetype(self) -> str:
        ids = self.registry.archetype_ids()
        if Config.DEFAULT_ARCHETYPE_ID in ids or not ids:
            return Config.DEFAULT_ARCHETYPE_ID
        return ids[0]

    def classify_with_rules(self, user_question: str) -> Dict[str, Any]:
        archetype_id = rule_based_archetype(user_question, self.registry.archetypes)
        if archetype_id:
            return {
                "archetype_id": archetype_id,
                "confidence": 0.6,
                "needs_clarification": False,
                "interpreted_question": user_question.strip(),
            }
        return {
            "archetype_id": self._default_archetype(),
            "confidence": 0.3,
            "needs_clarification": True,
            "clarification_prompt": VAGUE_PROMPT,
        }

    def classify(self, user_question: str) -> Dict[str, Any]:
        if not user_question or not user_question.strip():
            raise ValueError("user_question is required")

        logger.info(f"[CLASSIFY] {preview(user_question)}")
        if self.client is None:
            result = self.classify_with_rules(user_question)
            logger.info(f"[CLASSIFY] Rules -> {result['archetype_id']}")
            return result

        try:
            raw = self.client.generate_json(
                self.builder.build_classification_prompt(self.registry.archetypes),
                user_question,
                temperature=0.3,
            )
        except Exception as e:
            logger.error(f"[CLASSIFY] Classification failed: {e}")
            return {
                "archetype_id": self._default_archetype(),
                "confidence": 0.0,
                "needs_clarification": True,
                "clarification_prompt": RETRY_PROMPT,
            }

        archetype_id = raw.get("archetype_id")
        if archetype_id not in self.registry.archetype_ids():
            logger.warning(f"[CLASSIFY] Unknown archetype {archetype_id!r}, using first")
            archetype_id = self.registry.archetype_ids()[0] if self.registry.archetypes else self._default_archetype()

        needs_clarification = bool(raw.get("needs_clarification", False))
        result = {
            "archetype_id": archetype_id,
            "confidence": _confidence(raw.get("confidence")),
            "needs_clarification": needs_clarification,
        }
        if needs_clarification:
            result["clarification_prompt"] = raw.get("clarification_prompt") or VAGUE_PROMPT
        else:
            result["interpreted_question"] = raw.get("interpreted_question") or user_question.strip()
        if raw.get("is_unrealistic"):
            result["is_unrealistic"] = True
        logger.info(f"[CLASSIFY] LLM -> {archetype_id} ({result['confidence']:.2f})")
        return result
