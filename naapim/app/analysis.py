"""Analysis generation: turn a question and its answers into a recommendation."""
from typing import Any, Dict, Optional

from .generate import GenerationClient
from .postprocess import Postprocessor
from .prompt_builder import PromptBuilder
from ..data.registry_store import RegistryStore
from ..utils.logger import get_logger
from ..utils.security import preview

logger = get_logger()

PLACEHOLDER_ANALYSIS = {
    "title": "We could not prepare your analysis",
    "recommendation": "A technical problem kept us from preparing a detailed analysis right now.",
    "reasoning": "Please try again later or check your connection.",
    "steps": ["Refresh the page", "Check your connection"],
    "sentiment": "neutral",
}


class AnalysisGenerator:
    def __init__(
        self,
        registry: RegistryStore,
        client: Optional[GenerationClient] = None,
        builder: Optional[PromptBuilder] = None,
        postprocessor: Optional[Postprocessor] = None,
    ):
        self.registry = registry
        self.client = client
        self.builder = builder or PromptBuilder()
        self.postprocessor = postprocessor or Postprocessor()

    def placeholder(self) -> Dict[str, Any]:
        return self.postprocessor.process_analysis(PLACEHOLDER_ANALYSIS)

    def generate(self, user_question: str, answers: Dict[str, str], archetype_id: str) -> Dict[str, Any]:
        if not user_question or not user_question.strip():
            raise ValueError("user_question is required")

        context = self.registry.readable_answers(archetype_id, answers or {})
        label = self.registry.archetype_label(archetype_id)
        logger.info(f"[ANALYSIS] {label}: {preview(user_question)} ({len(answers or {})} answers)")

        if self.client is None:
            logger.warning("[ANALYSIS] No LLM configured, returning placeholder analysis")
            return self.placeholder()

        prompt = self.builder.build_analysis_prompt(user_question, label, context)
        try:
            raw = self.client.generate_json(
                prompt,
                f'Please analyse the question "{user_question}" and answer in JSON.',
                temperature=0.7,
                max_tokens=1500,
            )
        except Exception as e:
            logger.error(f"[ANALYSIS] Generation failed: {e}")
            return self.placeholder()

        analysis = self.postprocessor.process_analysis(raw)
        if not analysis["title"] or not analysis["recommendation"]:
            logger.warning("[ANALYSIS] Model reply missing title or recommendation")
            return self.placeholder()
        logger.info(f"[ANALYSIS] Sentiment: {analysis['sentiment']} score: {analysis['decision_score']}")
        return analysis
