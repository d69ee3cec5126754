#!/usr/bin/env python3
import os
import sys
import unittest
from unittest import mock

sys.path.insert(0, os.path.dirname(__file__))
from support import make_registry, make_session_factory

from fastapi.testclient import TestClient

from naapim.app.main import app, get_embedder, get_llm_client, get_registry
from naapim.data.database import get_db


class TestApi(unittest.TestCase):
    def setUp(self):
        SessionLocal = make_session_factory()

        def override_db():
            db = SessionLocal()
            try:
                yield db
            finally:
                db.close()

        self.llm = mock.Mock()
        app.dependency_overrides[get_db] = override_db
        registry = make_registry()
        app.dependency_overrides[get_registry] = lambda: registry
        app.dependency_overrides[get_llm_client] = lambda: self.llm
        app.dependency_overrides[get_embedder] = lambda: None
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def submit(self, question="Should I quit my job?"):
        res = self.client.post("/submit-session", json={"user_question": question, "answers": {"f0": "yes"}})
        self.assertEqual(res.status_code, 200)
        return res.json()

    def test_submit_then_fetch(self):
        submitted = self.submit()
        self.assertTrue(submitted["success"])

        res = self.client.post("/fetch-analysis", json={"code": submitted["code"].lower()})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["session_id"], submitted["session_id"])
        self.assertEqual(body["answers"], {"f0": "yes"})
        self.assertIsNone(body["analysis"])

    def test_submit_requires_question(self):
        res = self.client.post("/submit-session", json={"answers": {}})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["detail"], "Missing user_question")

    def test_fetch_errors(self):
        self.assertEqual(self.client.post("/fetch-analysis", json={}).status_code, 400)
        self.assertEqual(self.client.post("/fetch-analysis", json={"code": "ZZZZZZZZ"}).status_code, 404)

    def test_save_analysis(self):
        submitted = self.submit()
        analysis = {"title": "Stay for now", "recommendation": "Wait for the bonus."}
        res = self.client.post("/save-analysis", json={
            "session_id": submitted["session_id"], "analysis": analysis, "code": submitted["code"],
        })
        self.assertEqual(res.status_code, 200)
        fetched = self.client.post("/fetch-analysis", json={"code": submitted["code"]}).json()
        self.assertEqual(fetched["analysis"], analysis)

        missing = self.client.post("/save-analysis", json={"session_id": "nope", "analysis": analysis})
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(self.client.post("/save-analysis", json={"session_id": "x"}).status_code, 400)

    def test_outcome_and_stories(self):
        submitted = self.submit()
        res = self.client.post("/save-outcome", json={
            "session_id": submitted["session_id"],
            "outcome_type": "decided",
            "outcome_text": "I quit and feel great",
            "feeling": "happy",
        })
        self.assertEqual(res.status_code, 200)

        bad = self.client.post("/save-outcome", json={"session_id": submitted["session_id"], "outcome_type": "x"})
        self.assertEqual(bad.status_code, 400)

        fetched = self.client.post("/fetch-analysis", json={"code": submitted["code"]}).json()
        self.assertEqual(fetched["previous_outcomes"][0]["outcome_text"], "I quit and feel great")

        stories = self.client.post("/fetch-community-stories", json={"archetype_id": "career_decisions"}).json()
        self.assertEqual(stories["stats"], {"total": 1, "real_users": 1, "generated": 0})

        mine = self.client.post("/fetch-community-stories", json={
            "archetype_id": "career_decisions", "exclude_session_id": submitted["session_id"],
        }).json()
        self.assertEqual(mine["stories"], [])

    def test_question_feedback(self):
        res = self.client.post("/save-question-feedback", json={
            "session_id": "s1", "archetype_id": "career_decisions", "field_key": "f0", "feedback": "helpful",
        })
        self.assertEqual(res.json(), {"success": True})
        bad = self.client.post("/save-question-feedback", json={"archetype_id": "career_decisions"})
        self.assertEqual(bad.status_code, 400)

    def test_llm_endpoints(self):
        self.llm.generate_json.return_value = {
            "archetype_id": "health_wellness", "confidence": 0.8, "interpreted_question": "Start tennis?",
        }
        res = self.client.post("/classify-question", json={"user_question": "tennis?"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["archetype_id"], "health_wellness")

        res = self.client.post("/select-questions", json={"user_question": "tennis?", "archetype_id": "health_wellness"})
        self.assertEqual(res.json()["selected_field_keys"], ["s0", "s1", "s2"])

        self.llm.generate_json.return_value = {"approved": False, "category": "spam"}
        res = self.client.post("/moderate-content", json={"text": "buy buy buy"})
        self.assertFalse(res.json()["approved"])

        self.llm.generate_json.return_value = {"title": "Book a lesson", "recommendation": "Try one class."}
        res = self.client.post("/generate-analysis", json={
            "user_question": "tennis?", "answers": {"s0": "yes"}, "archetype_id": "health_wellness",
        })
        self.assertEqual(res.json()["title"], "Book a lesson")

        self.assertEqual(self.client.post("/classify-question", json={}).status_code, 400)

    def test_llm_endpoints_without_client(self):
        app.dependency_overrides[get_llm_client] = lambda: None
        with mock.patch("naapim.app.generate.GenerationClient") as client_cls:
            res = self.client.post("/classify-question", json={"user_question": "Should I quit my job?"})
            self.assertEqual(res.json()["archetype_id"], "career_decisions")
            self.assertFalse(res.json()["needs_clarification"])

            res = self.client.post("/moderate-content", json={"text": "My story"})
            self.assertEqual(res.json()["corrected_text"], "My story")

            res = self.client.post("/generate-analysis", json={"user_question": "tennis?", "archetype_id": "health_wellness"})
            self.assertEqual(res.json()["sentiment"], "neutral")
        client_cls.assert_not_called()

    def test_health(self):
        res = self.client.get("/health")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "ok")
        self.assertIsNone(res.json()["echo"])
        echoed = self.client.post("/health", json={"ping": 1}).json()
        self.assertEqual(echoed["echo"], {"ping": 1})

    def test_malformed_body_is_400(self):
        res = self.client.post("/submit-session", content="not json", headers={"Content-Type": "application/json"})
        self.assertEqual(res.status_code, 400)


if __name__ == "__main__":
    unittest.main()
