"""Community story moderation. Fails open: any error approves the text unchanged."""
from typing import Any, Dict, Optional

from .generate import GenerationClient
from .prompt_builder import PromptBuilder
from ..utils.logger import get_logger

logger = get_logger()

CATEGORY_MESSAGES = {
    "contact_info": "You can't share contact details (e-mail, phone, social media).",
    "advertisement": "You can't share advertising or promotional content.",
    "financial_advice": "You can't share content containing financial advice.",
    "offensive": "You can't share offensive or abusive content.",
    "personal_info": "You can't share personal information.",
    "spam": "You can't share spam or meaningless content.",
    "harmful": "You can't share harmful content.",
}
DEFAULT_REJECTION = "This doesn't follow the community guidelines."


class ContentModerator:
    def __init__(self, client: Optional[GenerationClient] = None, builder: Optional[PromptBuilder] = None):
        self.client = client
        self.builder = builder or PromptBuilder()

    def moderate(self, text: Optional[str]) -> Dict[str, Any]:
        if not text or not text.strip():
            return {"approved": True, "corrected_text": text}

        if self.client is None:
            logger.warning("[MODERATION] No LLM configured, approving by default")
            return {"approved": True, "corrected_text": text}

        try:
            result = self.client.generate_json(
                self.builder.build_moderation_prompt(),
                f'Review this text and correct it if needed:\n\n"{text}"',
                temperature=0.1,
                max_tokens=500,
            )
        except Exception as e:
            logger.error(f"[MODERATION] Check failed, approving by default: {e}")
            return {"approved": True, "corrected_text": text}

        approved = bool(result.get("approved", True))
        category = result.get("category") or None
        if approved:
            return {
                "approved": True,
                "category": category,
                "corrected_text": result.get("corrected_text") or text,
            }

        logger.info(f"[MODERATION] Rejected story, category: {category}")
        return {
            "approved": False,
            "category": category,
            "reason": CATEGORY_MESSAGES.get(category or "") or result.get("reason") or DEFAULT_REJECTION,
        }
