"""Shared fixtures: an in-memory database and a small archetype registry."""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from naapim.data.database import create_tables
from naapim.data.registry_store import RegistryStore


def make_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _field(key):
    return {"key": key, "label": f"Question {key}", "option_set_id": "yes_no"}


def make_registry(field_count=12):
    """Registry with a 'big' archetype of field_count fields and a 'small' one of 3."""
    keys = [f"f{i}" for i in range(field_count)]
    data = {
        "archetypes": [
            {
                "id": "career_decisions",
                "label": "Career decisions",
                "category_set_ids": ["big_set"],
                "routing_hints": {
                    "definition": "Jobs and careers",
                    "keywords": ["job", "career", "promotion", "boss"],
                    "positive_examples": ["Should I quit my job?"],
                    "exclusions": [],
                },
            },
            {
                "id": "health_wellness",
                "label": "Health and fitness",
                "category_set_ids": ["small_set"],
                "routing_hints": {
                    "definition": "Sport and health",
                    "keywords": ["gym", "tennis", "yoga"],
                    "positive_examples": ["Should I start tennis?"],
                    "exclusions": ["medical diagnosis"],
                },
            },
        ],
        "category_sets": [
            {"id": "big_set", "category_ids": ["big"]},
            {"id": "small_set", "category_ids": ["small", "big_overlap"]},
        ],
        "categories": [
            {"id": "big", "field_keys": keys},
            {"id": "small", "field_keys": ["s0", "s1", "s2"]},
            {"id": "big_overlap", "field_keys": ["s1"]},
        ],
        "fields": [_field(k) for k in keys] + [_field(k) for k in ("s0", "s1", "s2")],
        "option_sets": [
            {"id": "yes_no", "options": [{"id": "yes", "label": "Yes"}, {"id": "no", "label": "No"}]},
        ],
    }
    return RegistryStore(data=data)
