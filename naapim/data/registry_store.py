"""Archetype registry helpers: load registry.json and resolve archetypes to questions.

The registry chains archetype -> category sets -> categories -> field keys ->
fields -> option sets. Field order follows the category order, which is the
order questions are shown in.
"""
from typing import Any, Dict, List, Optional
import json

from ..app.config import Config


class RegistryStore:
    def __init__(self, registry_path: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        self.registry_path = registry_path or Config.REGISTRY_PATH
        self.archetypes: List[Dict[str, Any]] = []
        self.category_sets: Dict[str, Dict[str, Any]] = {}
        self.categories: Dict[str, Dict[str, Any]] = {}
        self.fields: Dict[str, Dict[str, Any]] = {}
        self.option_sets: Dict[str, Dict[str, Any]] = {}
        self._load(data)

    def _load(self, data: Optional[Dict[str, Any]]):
        if data is None:
            try:
                with open(self.registry_path, encoding="utf-8") as f:
                    data = json.load(f)
            except FileNotFoundError:
                data = {}
        self.archetypes = list(data.get("archetypes", []))
        self.category_sets = {cs["id"]: cs for cs in data.get("category_sets", [])}
        self.categories = {c["id"]: c for c in data.get("categories", [])}
        self.fields = {f["key"]: f for f in data.get("fields", [])}
        self.option_sets = {os_["id"]: os_ for os_ in data.get("option_sets", [])}

    def get_archetype(self, archetype_id: str) -> Optional[Dict[str, Any]]:
        for archetype in self.archetypes:
            if archetype["id"] == archetype_id:
                return archetype
        return None

    def archetype_ids(self) -> List[str]:
        return [a["id"] for a in self.archetypes]

    def archetype_label(self, archetype_id: str) -> str:
        archetype = self.get_archetype(archetype_id)
        return archetype["label"] if archetype else archetype_id

    def fields_for_archetype(self, archetype_id: str) -> List[Dict[str, Any]]:
        """Fields (with their options) an archetype can ask about, in display order, de-duplicated."""
        archetype = self.get_archetype(archetype_id)
        if not archetype:
            return []

        seen = set()
        fields = []
        for set_id in archetype.get("category_set_ids", []):
            category_set = self.category_sets.get(set_id)
            if not category_set:
                continue
            for category_id in category_set.get("category_ids", []):
                category = self.categories.get(category_id)
                if not category:
                    continue
                for key in category.get("field_keys", []):
                    field = self.fields.get(key)
                    if not field or key in seen:
                        continue
                    seen.add(key)
                    option_set = self.option_sets.get(field.get("option_set_id") or "", {})
                    fields.append({**field, "options": list(option_set.get("options", []))})
        return fields

    def readable_answers(self, archetype_id: str, answers: Dict[str, str]) -> str:
        """Render answers as '- question: answer label' lines for prompts."""
        lines = []
        for field in self.fields_for_archetype(archetype_id):
            answer_id = answers.get(field["key"])
            if not answer_id:
                continue
            label = next((o["label"] for o in field["options"] if o["id"] == answer_id), answer_id)
            lines.append(f"- {field['label']}: {label}")
        return "\n".join(lines)
