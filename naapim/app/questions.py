"""Pick the follow-up questions worth asking for a decision."""
from typing import Any, Dict, List, Optional

from .config import Config
from .generate import GenerationClient
from .prompt_builder import PromptBuilder
from ..data.registry_store import RegistryStore
from ..utils.logger import get_logger

logger = get_logger()


class QuestionSelector:
    def __init__(
        self,
        registry: RegistryStore,
        client: Optional[GenerationClient] = None,
        builder: Optional[PromptBuilder] = None,
    ):
        self.registry = registry
        self.client = client
        self.builder = builder or PromptBuilder()

    def _result(self, fields: List[Dict[str, Any]], reasoning: str) -> Dict[str, Any]:
        return {
            "selected_fields": fields,
            "selected_field_keys": [f["key"] for f in fields],
            "reasoning": reasoning,
        }

    def select(self, user_question: str, archetype_id: str) -> Dict[str, Any]:
        if not user_question or not archetype_id:
            raise ValueError("user_question and archetype_id are required")

        fields = self.registry.fields_for_archetype(archetype_id)
        if len(fields) <= Config.MAX_FIELDS_WITHOUT_SELECTION:
            return self._result(fields, f"Using all available fields ({Config.MAX_FIELDS_WITHOUT_SELECTION} or fewer)")

        if self.client is None:
            return self._result(fields[:Config.FALLBACK_FIELD_COUNT], "Fallback: no API key")

        prompt = self.builder.build_selection_prompt(
            user_question,
            self.registry.archetype_label(archetype_id),
            fields,
            Config.MIN_SELECTED_FIELDS,
            Config.MAX_SELECTED_FIELDS,
        )
        try:
            raw = self.client.generate_json(prompt, "Select the questions.", temperature=0.3, max_tokens=500)
        except Exception as e:
            logger.error(f"[SELECT] Selection failed: {e}")
            return self._result(fields[:Config.FALLBACK_FIELD_COUNT], "Fallback due to error")

        by_key = {f["key"]: f for f in fields}
        keys = raw.get("selectedFieldKeys") or []
        if not isinstance(keys, list):
            keys = []
        selected = []
        for key in keys:
            if key in by_key and by_key[key] not in selected:
                selected.append(by_key[key])

        if len(selected) < Config.MIN_SELECTED_FIELDS:
            logger.warning(f"[SELECT] Only {len(selected)} valid keys, padding from registry order")
            for field in fields:
                if len(selected) >= Config.MIN_SELECTED_FIELDS:
                    break
                if field not in selected:
                    selected.append(field)

        selected = selected[:Config.MAX_SELECTED_FIELDS]
        logger.info(f"[SELECT] {archetype_id}: {len(selected)}/{len(fields)} fields")
        return self._result(selected, str(raw.get("reasoning") or ""))
